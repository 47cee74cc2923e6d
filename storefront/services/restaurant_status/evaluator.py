"""
Restaurant Status Evaluator

Decides whether a restaurant is open right now, evaluated in the
restaurant's own time zone, and when it is closed, when it next opens.

Priority (first match wins):
    1. Temporarily closed         → closed, temporarily_closed
    2. Manual open flag off       → closed, manually_closed
    3. No weekly schedule         → closed, no_hours
    4. Today marked closed        → closed, outside_hours (+ next opening)
    5. Now within [open, close)   → open
       otherwise                  → closed, outside_hours (+ next opening)

Spans whose close time is not after the open time run past midnight
(e.g. 22:00-02:00). Unknown zones and malformed times evaluate to closed.

Usage:
    from storefront.services.restaurant_status import (
        RestaurantStatusInput,
        evaluate_restaurant_status,
    )

    result = evaluate_restaurant_status(
        RestaurantStatusInput(schedule=schedule, time_zone="America/Chicago")
    )
    if not result.is_open:
        print(result.next_opening_hint)

Version: 1.0.0
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

# Index matches datetime.weekday()
WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

DEFAULT_TIMEZONE = "America/New_York"
MINUTES_PER_DAY = 24 * 60

CLOSED_INDEFINITELY = "Closed indefinitely"
HOURS_NOT_AVAILABLE = "Hours not available"

_TIME_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


class StatusVerdict(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class ClosureReason(str, Enum):
    """Why a restaurant is closed."""
    TEMPORARILY_CLOSED = "temporarily_closed"
    MANUALLY_CLOSED = "manually_closed"
    NO_HOURS = "no_hours"
    OUTSIDE_HOURS = "outside_hours"


@dataclass
class DayHours:
    """
    Opening hours for one weekday.

    Attributes:
        open: Opening time, "HH:MM" (24h)
        close: Closing time, "HH:MM"; at or before open means after midnight
        closed: Closed all day (open/close ignored)
    """
    open: str = ""
    close: str = ""
    closed: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DayHours":
        return cls(
            open=str(data.get("open") or ""),
            close=str(data.get("close") or ""),
            closed=bool(data.get("closed", False)),
        )

    def to_dict(self) -> dict:
        return {"open": self.open, "close": self.close, "closed": self.closed}


@dataclass
class WeeklySchedule:
    """One DayHours entry per weekday; all seven are required."""
    monday: DayHours
    tuesday: DayHours
    wednesday: DayHours
    thursday: DayHours
    friday: DayHours
    saturday: DayHours
    sunday: DayHours

    def for_weekday(self, weekday: int) -> DayHours:
        """Hours for a datetime.weekday() index (0 = Monday)."""
        return getattr(self, WEEKDAYS[weekday % 7])

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WeeklySchedule":
        """
        Build a schedule from a stored mapping keyed by lowercase weekday.

        Raises:
            ValueError: If a weekday is missing or not a mapping
        """
        days = {}
        for day in WEEKDAYS:
            hours = data.get(day)
            if isinstance(hours, DayHours):
                days[day] = hours
            elif isinstance(hours, Mapping):
                days[day] = DayHours.from_dict(hours)
            else:
                raise ValueError(f"Missing operating hours for {day}")
        return cls(**days)

    @classmethod
    def uniform(cls, open: str, close: str) -> "WeeklySchedule":
        """Same hours every day."""
        return cls(**{day: DayHours(open=open, close=close) for day in WEEKDAYS})

    def to_dict(self) -> dict:
        return {day: getattr(self, day).to_dict() for day in WEEKDAYS}


@dataclass
class RestaurantStatusInput:
    """
    Everything the evaluator needs about a restaurant.

    Attributes:
        manual_open_flag: Owner's open switch; False closes regardless of hours
        temporarily_closed: Temporary closure (holiday, renovation)
        schedule: Weekly hours, None when the restaurant has none
        time_zone: IANA zone the schedule is expressed in
    """
    manual_open_flag: bool = True
    temporarily_closed: bool = False
    schedule: Optional[WeeklySchedule] = None
    time_zone: str = DEFAULT_TIMEZONE

    @classmethod
    def from_restaurant(
        cls,
        restaurant: Mapping[str, Any],
        default_time_zone: str = DEFAULT_TIMEZONE,
    ) -> "RestaurantStatusInput":
        """
        Build from a restaurant record (isOpen, isTemporarilyClosed,
        operatingHours, timezone). An unusable schedule counts as no hours.
        """
        schedule = None
        hours = restaurant.get("operatingHours", restaurant.get("operating_hours"))
        if isinstance(hours, WeeklySchedule):
            schedule = hours
        elif isinstance(hours, Mapping):
            try:
                schedule = WeeklySchedule.from_dict(hours)
            except ValueError as e:
                logger.warning(f"Ignoring operating hours of {restaurant.get('id')}: {e}")

        return cls(
            manual_open_flag=bool(restaurant.get("isOpen", restaurant.get("is_open", True))),
            temporarily_closed=bool(
                restaurant.get("isTemporarilyClosed", restaurant.get("is_temporarily_closed", False))
            ),
            schedule=schedule,
            time_zone=restaurant.get("timezone") or default_time_zone,
        )


@dataclass
class RestaurantStatusResult:
    """
    Outcome of a status evaluation.

    Attributes:
        verdict: open or closed
        reason_code: Why it is closed (None when open)
        next_opening_hint: e.g. "Tomorrow at 09:00" (closed outside hours only)
    """
    verdict: StatusVerdict
    reason_code: Optional[ClosureReason] = None
    next_opening_hint: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.verdict == StatusVerdict.OPEN

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "verdict": self.verdict.value,
            "is_open": self.is_open,
            "reason_code": self.reason_code.value if self.reason_code else None,
            "next_opening_hint": self.next_opening_hint,
        }


def parse_time_of_day(value: str) -> int:
    """
    Convert "HH:MM" to minutes after midnight. "24:00" is end of day.

    Raises:
        ValueError: If the value is not a valid time of day
    """
    match = _TIME_PATTERN.match(value or "")
    if not match:
        raise ValueError(f"Invalid time of day: {value!r}")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59 or hours > 24 or (hours == 24 and minutes):
        raise ValueError(f"Invalid time of day: {value!r}")
    return hours * 60 + minutes


def _format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def next_opening_hint(schedule: WeeklySchedule, weekday: int) -> str:
    """
    Describe the next opening after today, scanning up to a week ahead.

    Args:
        schedule: Weekly hours
        weekday: Today's datetime.weekday() in the restaurant's zone

    Raises:
        ValueError: If the next open day has a malformed opening time
    """
    for offset in range(1, 8):
        day_index = (weekday + offset) % 7
        hours = schedule.for_weekday(day_index)
        if hours.closed:
            continue

        opens_at = _format_minutes(parse_time_of_day(hours.open))
        label = "Tomorrow" if offset == 1 else WEEKDAYS[day_index].capitalize()
        return f"{label} at {opens_at}"

    return CLOSED_INDEFINITELY


def _closed(
    reason: ClosureReason,
    hint: Optional[str] = None,
) -> RestaurantStatusResult:
    return RestaurantStatusResult(
        verdict=StatusVerdict.CLOSED,
        reason_code=reason,
        next_opening_hint=hint,
    )


def evaluate_restaurant_status(
    status_input: RestaurantStatusInput,
    now: Optional[datetime] = None,
) -> RestaurantStatusResult:
    """
    Evaluate whether a restaurant is open at ``now``.

    Args:
        status_input: Flags, schedule and time zone of the restaurant
        now: Instant to evaluate (aware; naive values are taken as UTC).
            Defaults to the current time.

    Returns:
        RestaurantStatusResult. Never raises for bad schedule or zone data.
    """
    if status_input.temporarily_closed:
        return _closed(ClosureReason.TEMPORARILY_CLOSED)

    if not status_input.manual_open_flag:
        return _closed(ClosureReason.MANUALLY_CLOSED)

    schedule = status_input.schedule
    if schedule is None:
        return _closed(ClosureReason.NO_HOURS)

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    try:
        local_now = now.astimezone(ZoneInfo(status_input.time_zone))
        weekday = local_now.weekday()
        current = local_now.hour * 60 + local_now.minute

        today = schedule.for_weekday(weekday)
        if today.closed:
            return _closed(
                ClosureReason.OUTSIDE_HOURS,
                next_opening_hint(schedule, weekday),
            )

        opens = parse_time_of_day(today.open)
        closes = parse_time_of_day(today.close)

        # Span crosses midnight: shift close, and shift the post-midnight part
        # of the span (before opening) into the same frame.
        if closes <= opens:
            closes += MINUTES_PER_DAY
            if current < opens:
                current += MINUTES_PER_DAY

        if opens <= current < closes:
            return RestaurantStatusResult(verdict=StatusVerdict.OPEN)

        return _closed(
            ClosureReason.OUTSIDE_HOURS,
            next_opening_hint(schedule, weekday),
        )

    except (ZoneInfoNotFoundError, ValueError, TypeError, AttributeError) as e:
        logger.warning(
            f"Could not evaluate hours (zone={status_input.time_zone!r}): {e}"
        )
        return _closed(ClosureReason.NO_HOURS, HOURS_NOT_AVAILABLE)


def is_restaurant_open(
    manual_open_flag: bool,
    schedule: Optional[Union[WeeklySchedule, Mapping[str, Any]]],
    temporarily_closed: bool = False,
    time_zone: str = DEFAULT_TIMEZONE,
    now: Optional[datetime] = None,
) -> bool:
    """Boolean shortcut over evaluate_restaurant_status."""
    if schedule is not None and not isinstance(schedule, WeeklySchedule):
        try:
            schedule = WeeklySchedule.from_dict(schedule)
        except ValueError as e:
            logger.warning(f"Ignoring operating hours: {e}")
            schedule = None

    result = evaluate_restaurant_status(
        RestaurantStatusInput(
            manual_open_flag=manual_open_flag,
            temporarily_closed=temporarily_closed,
            schedule=schedule,
            time_zone=time_zone,
        ),
        now=now,
    )
    return result.is_open


def get_status_message(result: RestaurantStatusResult) -> str:
    """User-facing one-line status for a restaurant card."""
    if result.is_open:
        return "Open now"

    if result.reason_code == ClosureReason.TEMPORARILY_CLOSED:
        return "Temporarily closed"
    if result.reason_code == ClosureReason.OUTSIDE_HOURS:
        hint = result.next_opening_hint
        if not hint:
            return "Closed"
        if hint == CLOSED_INDEFINITELY:
            return hint
        return f"Opens {hint}"
    if result.reason_code == ClosureReason.NO_HOURS:
        return HOURS_NOT_AVAILABLE
    return "Closed"
