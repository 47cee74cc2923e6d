from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from storefront.services.restaurant_status import (
    CLOSED_INDEFINITELY,
    HOURS_NOT_AVAILABLE,
    ClosureReason,
    DayHours,
    RestaurantStatusInput,
    RestaurantStatusResult,
    StatusVerdict,
    WeeklySchedule,
    evaluate_restaurant_status,
    get_status_message,
    is_restaurant_open,
    next_opening_hint,
    parse_time_of_day,
)

NEW_YORK = ZoneInfo("America/New_York")


def at(hour, minute=0, day=10, month=1, tz=NEW_YORK):
    """Civil time in the restaurant's zone; 2024-01-10 is a Wednesday."""
    return datetime(2024, month, day, hour, minute, tzinfo=tz)


def evaluate(schedule, now, **kwargs):
    return evaluate_restaurant_status(
        RestaurantStatusInput(schedule=schedule, time_zone="America/New_York", **kwargs),
        now=now,
    )


# =============================================================================
# FLAG PRIORITY
# =============================================================================

def test_manual_flag_off_closes(nine_to_five):
    result = evaluate(nine_to_five, at(12), manual_open_flag=False)
    assert result.verdict == StatusVerdict.CLOSED
    assert result.reason_code == ClosureReason.MANUALLY_CLOSED
    assert result.next_opening_hint is None


def test_temporarily_closed_wins(nine_to_five):
    result = evaluate(nine_to_five, at(12), temporarily_closed=True)
    assert result.reason_code == ClosureReason.TEMPORARILY_CLOSED


def test_temporarily_closed_beats_manual_flag():
    result = evaluate(None, at(12), temporarily_closed=True, manual_open_flag=False)
    assert result.reason_code == ClosureReason.TEMPORARILY_CLOSED


def test_no_schedule():
    result = evaluate(None, at(12))
    assert result.verdict == StatusVerdict.CLOSED
    assert result.reason_code == ClosureReason.NO_HOURS


# =============================================================================
# HOURS
# =============================================================================

def test_open_within_hours(nine_to_five):
    result = evaluate(nine_to_five, at(12))
    assert result.verdict == StatusVerdict.OPEN
    assert result.reason_code is None
    assert result.is_open


@pytest.mark.parametrize("hour, minute, is_open", [
    (9, 0, True),
    (16, 59, True),
    (17, 0, False),
    (8, 59, False),
])
def test_open_is_inclusive_close_is_exclusive(nine_to_five, hour, minute, is_open):
    assert evaluate(nine_to_five, at(hour, minute)).is_open is is_open


@pytest.mark.parametrize("hour, minute, is_open", [
    (23, 30, True),
    (1, 0, True),
    (3, 0, False),
    (21, 59, False),
])
def test_overnight_span(hour, minute, is_open):
    schedule = WeeklySchedule.uniform("22:00", "02:00")
    result = evaluate(schedule, at(hour, minute))
    assert result.is_open is is_open
    if not is_open:
        assert result.reason_code == ClosureReason.OUTSIDE_HOURS


def test_outside_hours_hint_is_tomorrow(nine_to_five):
    result = evaluate(nine_to_five, at(20))
    assert result.reason_code == ClosureReason.OUTSIDE_HOURS
    assert result.next_opening_hint == "Tomorrow at 09:00"


def test_before_opening_hint_still_points_ahead(nine_to_five):
    result = evaluate(nine_to_five, at(7))
    assert result.next_opening_hint == "Tomorrow at 09:00"


def test_today_closed_skips_to_next_open_day():
    days = WeeklySchedule.uniform("11:00", "21:00").to_dict()
    days["wednesday"]["closed"] = True
    days["thursday"]["closed"] = True
    schedule = WeeklySchedule.from_dict(days)

    result = evaluate(schedule, at(12))

    assert result.reason_code == ClosureReason.OUTSIDE_HOURS
    assert result.next_opening_hint == "Friday at 11:00"


def test_all_days_closed():
    schedule = WeeklySchedule(**{
        day: DayHours(closed=True)
        for day in ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
    })
    result = evaluate(schedule, at(12))
    assert result.reason_code == ClosureReason.OUTSIDE_HOURS
    assert result.next_opening_hint == CLOSED_INDEFINITELY


def test_only_today_open_points_a_week_ahead():
    days = {day: {"closed": True} for day in
            ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]}
    days["wednesday"] = {"open": "10:00", "close": "14:00"}
    result = evaluate(WeeklySchedule.from_dict(days), at(15))
    assert result.next_opening_hint == "Wednesday at 10:00"


# =============================================================================
# TIME ZONES
# =============================================================================

def test_evaluated_in_restaurant_zone(nine_to_five):
    # 16:00 UTC is 11:00 in New York and 01:00 in Tokyo
    now = datetime(2024, 1, 10, 16, 0, tzinfo=timezone.utc)
    assert evaluate(nine_to_five, now).is_open
    tokyo = evaluate_restaurant_status(
        RestaurantStatusInput(schedule=nine_to_five, time_zone="Asia/Tokyo"),
        now=now,
    )
    assert not tokyo.is_open


def test_weekday_taken_from_restaurant_zone():
    days = {day: {"closed": True} for day in
            ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]}
    days["thursday"] = {"open": "00:00", "close": "24:00"}
    schedule = WeeklySchedule.from_dict(days)

    # Wednesday 23:30 in New York is already Thursday in UTC
    now = datetime(2024, 1, 11, 4, 30, tzinfo=timezone.utc)

    assert not evaluate(schedule, now).is_open
    assert evaluate_restaurant_status(
        RestaurantStatusInput(schedule=schedule, time_zone="UTC"), now=now
    ).is_open


def test_daylight_saving_offset(nine_to_five):
    # 13:30 UTC on 2024-03-10 is 09:30 EDT (would be 08:30 under EST)
    now = datetime(2024, 3, 10, 13, 30, tzinfo=timezone.utc)
    assert evaluate(nine_to_five, now).is_open


def test_naive_now_is_utc(nine_to_five):
    assert evaluate(nine_to_five, datetime(2024, 1, 10, 17, 0)).is_open
    assert not evaluate(nine_to_five, datetime(2024, 1, 10, 23, 0)).is_open


def test_unknown_zone_is_closed_without_raising(nine_to_five):
    result = evaluate_restaurant_status(
        RestaurantStatusInput(schedule=nine_to_five, time_zone="Mars/Olympus_Mons"),
        now=at(12),
    )
    assert result.reason_code == ClosureReason.NO_HOURS
    assert result.next_opening_hint == HOURS_NOT_AVAILABLE


@pytest.mark.parametrize("open_time, close_time", [
    ("9am", "17:00"),
    ("09:00", ""),
    ("25:00", "26:00"),
])
def test_malformed_hours_are_closed(open_time, close_time):
    result = evaluate(WeeklySchedule.uniform(open_time, close_time), at(12))
    assert result.reason_code == ClosureReason.NO_HOURS
    assert result.next_opening_hint == HOURS_NOT_AVAILABLE


# =============================================================================
# HELPERS
# =============================================================================

@pytest.mark.parametrize("value, minutes", [
    ("00:00", 0),
    ("9:05", 545),
    ("23:59", 1439),
    ("24:00", 1440),
])
def test_parse_time_of_day(value, minutes):
    assert parse_time_of_day(value) == minutes


@pytest.mark.parametrize("value", ["", "noon", "12:60", "24:01", "7"])
def test_parse_time_of_day_rejects(value):
    with pytest.raises(ValueError):
        parse_time_of_day(value)


def test_next_opening_hint_wraps_week(nine_to_five):
    # Sunday (6) -> Monday
    assert next_opening_hint(nine_to_five, 6) == "Tomorrow at 09:00"


def test_schedule_requires_every_day():
    with pytest.raises(ValueError):
        WeeklySchedule.from_dict({"monday": {"open": "09:00", "close": "17:00"}})


def test_from_restaurant_record():
    record = {
        "id": "r-1",
        "isOpen": True,
        "isTemporarilyClosed": False,
        "operatingHours": WeeklySchedule.uniform("08:00", "20:00").to_dict(),
        "timezone": "America/Chicago",
    }
    status_input = RestaurantStatusInput.from_restaurant(record)

    assert status_input.time_zone == "America/Chicago"
    assert status_input.schedule.friday == DayHours(open="08:00", close="20:00")


def test_from_restaurant_with_broken_hours_has_no_schedule():
    status_input = RestaurantStatusInput.from_restaurant(
        {"id": "r-2", "operatingHours": {"monday": {}}},
        default_time_zone="UTC",
    )
    assert status_input.schedule is None
    assert status_input.time_zone == "UTC"


def test_is_restaurant_open_accepts_mapping():
    hours = WeeklySchedule.uniform("09:00", "17:00").to_dict()
    assert is_restaurant_open(True, hours, now=at(12))
    assert not is_restaurant_open(False, hours, now=at(12))
    assert not is_restaurant_open(True, {"monday": {}}, now=at(12))


@pytest.mark.parametrize("result, message", [
    (RestaurantStatusResult(StatusVerdict.OPEN), "Open now"),
    (RestaurantStatusResult(StatusVerdict.CLOSED, ClosureReason.TEMPORARILY_CLOSED), "Temporarily closed"),
    (RestaurantStatusResult(StatusVerdict.CLOSED, ClosureReason.MANUALLY_CLOSED), "Closed"),
    (RestaurantStatusResult(StatusVerdict.CLOSED, ClosureReason.NO_HOURS), "Hours not available"),
    (
        RestaurantStatusResult(StatusVerdict.CLOSED, ClosureReason.OUTSIDE_HOURS, "Tomorrow at 09:00"),
        "Opens Tomorrow at 09:00",
    ),
    (
        RestaurantStatusResult(StatusVerdict.CLOSED, ClosureReason.OUTSIDE_HOURS, CLOSED_INDEFINITELY),
        "Closed indefinitely",
    ),
])
def test_status_message(result, message):
    assert get_status_message(result) == message


def test_result_to_dict():
    result = RestaurantStatusResult(StatusVerdict.CLOSED, ClosureReason.OUTSIDE_HOURS, "Friday at 11:00")
    assert result.to_dict() == {
        "verdict": "closed",
        "is_open": False,
        "reason_code": "outside_hours",
        "next_opening_hint": "Friday at 11:00",
    }
