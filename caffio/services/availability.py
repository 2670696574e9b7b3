"""
Availability Calculator

Derives a cafe's open/closed state from its weekly business hours.

Business hours map weekday names to a daily window::

    {"monday": {"open": "08:00", "close": "20:00", "enabled": True}, ...}

A window is open on ``open <= now < close``, compared in minutes since
local midnight. Windows that cross midnight (close earlier than open, e.g.
22:00-02:00) are not supported and are always reported closed.
"""

import logging
from datetime import datetime
from typing import Any, Optional

logger = logging.getLogger(__name__)

WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


def parse_time(value: str) -> int:
    """
    Parse ``"HH:MM"`` (or ``"H:MM"``) into minutes since midnight.

    Raises:
        ValueError: If the string is not a valid 24h time
    """
    parts = value.split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid time format: {value!r}")

    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Invalid time values: {value!r}")

    return hour * 60 + minute


def weekday_name(now: datetime) -> str:
    return WEEKDAYS[now.weekday()]


def is_open(business_hours: Optional[dict[str, Any]], now: datetime) -> bool:
    """
    Check whether a cafe is open at ``now``.

    Args:
        business_hours: Weekday name -> {"open", "close", "enabled"}
        now: Moment to evaluate, in the cafe's local time

    Returns:
        bool: True if ``now`` falls inside that day's enabled window.
        A cafe that has not configured any hours yet counts as open.
    """
    if not business_hours or not any(
        isinstance(business_hours.get(day), dict) for day in WEEKDAYS
    ):
        return True

    day = business_hours.get(weekday_name(now))
    if not isinstance(day, dict):
        return False

    if day.get("enabled") is not True:
        return False

    open_at, close_at = day.get("open"), day.get("close")
    if not open_at or not close_at:
        return False

    try:
        open_minutes = parse_time(open_at)
        close_minutes = parse_time(close_at)
    except (ValueError, AttributeError) as e:
        logger.warning(f"Ignoring malformed business hours {day!r}: {e}")
        return False

    current_minutes = now.hour * 60 + now.minute
    return open_minutes <= current_minutes < close_minutes


def default_business_hours(open_at: str = "08:00", close_at: str = "20:00") -> dict[str, dict]:
    """Same window on all seven days, all enabled."""
    return {
        day: {"open": open_at, "close": close_at, "enabled": True}
        for day in WEEKDAYS
    }
