from datetime import datetime

import pytest

from caffio.services.availability import (
    WEEKDAYS,
    default_business_hours,
    is_open,
    parse_time,
    weekday_name,
)

# 2024-01-01 was a Monday
MONDAY = datetime(2024, 1, 1)

MONDAY_ONLY = {"monday": {"open": "08:00", "close": "20:00", "enabled": True}}


def at(hour: int, minute: int, day: datetime = MONDAY) -> datetime:
    return day.replace(hour=hour, minute=minute)


def test_weekday_name():
    assert weekday_name(MONDAY) == "monday"
    assert weekday_name(datetime(2024, 1, 7)) == "sunday"


@pytest.mark.parametrize(
    "hour, minute, expected",
    [
        (8, 0, True),
        (19, 59, True),
        (12, 30, True),
        (20, 0, False),
        (7, 59, False),
        (0, 0, False),
    ],
)
def test_window_boundaries(hour, minute, expected):
    assert is_open(MONDAY_ONLY, at(hour, minute)) is expected


def test_disabled_day_is_closed_at_any_time():
    hours = {"monday": {"open": "00:00", "close": "23:59", "enabled": False}}

    assert is_open(hours, at(12, 0)) is False
    assert is_open(hours, at(0, 0)) is False


def test_unconfigured_hours_count_as_open():
    assert is_open(None, at(3, 0)) is True
    assert is_open({}, at(3, 0)) is True


def test_day_missing_from_schedule_is_closed():
    hours = {"tuesday": {"open": "08:00", "close": "20:00", "enabled": True}}

    assert is_open(hours, at(12, 0)) is False


def test_missing_times_are_closed():
    hours = {"monday": {"open": "08:00", "enabled": True}}

    assert is_open(hours, at(12, 0)) is False


def test_malformed_times_are_closed():
    hours = {"monday": {"open": "8am", "close": "20:00", "enabled": True}}

    assert is_open(hours, at(12, 0)) is False


def test_overnight_window_is_always_closed():
    hours = {"monday": {"open": "22:00", "close": "02:00", "enabled": True}}

    assert is_open(hours, at(23, 0)) is False
    assert is_open(hours, at(1, 0)) is False


def test_parse_time():
    assert parse_time("00:00") == 0
    assert parse_time("8:05") == 485
    assert parse_time("23:59") == 23 * 60 + 59


@pytest.mark.parametrize("value", ["24:00", "12:60", "noon", "12", "12:3a", ""])
def test_parse_time_rejects_bad_values(value):
    with pytest.raises(ValueError):
        parse_time(value)


def test_default_business_hours_cover_every_day():
    hours = default_business_hours("07:00", "15:00")

    assert set(hours) == set(WEEKDAYS)
    assert hours["sunday"] == {"open": "07:00", "close": "15:00", "enabled": True}
    assert is_open(hours, at(7, 0)) is True
    assert is_open(hours, at(15, 0)) is False
