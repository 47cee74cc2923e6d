"""
Restaurant Status Module

Pure open/closed evaluation plus the periodic monitor that wraps it.

Usage:
    from storefront.services.restaurant_status import (
        evaluate_restaurant_status,
        get_status_message,
    )
"""

from storefront.services.restaurant_status.evaluator import (
    WEEKDAYS,
    CLOSED_INDEFINITELY,
    HOURS_NOT_AVAILABLE,
    StatusVerdict,
    ClosureReason,
    DayHours,
    WeeklySchedule,
    RestaurantStatusInput,
    RestaurantStatusResult,
    evaluate_restaurant_status,
    get_status_message,
    is_restaurant_open,
    next_opening_hint,
    parse_time_of_day,
)
from storefront.services.restaurant_status.monitor import RestaurantStatusMonitor

__all__ = [
    "WEEKDAYS",
    "CLOSED_INDEFINITELY",
    "HOURS_NOT_AVAILABLE",
    "StatusVerdict",
    "ClosureReason",
    "DayHours",
    "WeeklySchedule",
    "RestaurantStatusInput",
    "RestaurantStatusResult",
    "evaluate_restaurant_status",
    "get_status_message",
    "is_restaurant_open",
    "next_opening_hint",
    "parse_time_of_day",
    "RestaurantStatusMonitor",
]
