"""Wall-clock and calendar-day helpers.

The backend sends times as "HH:MM:SS" strings and dates as "YYYY-MM-DD"
(sometimes with a time suffix). Parsers here never raise: malformed or
missing input comes back as None so callers can treat it as unavailable.
"""
import re
from datetime import date, datetime
from typing import Optional, Union

TIME_PATTERN = re.compile(r'^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$')
DATE_PATTERN = re.compile(r'^\s*(\d{4})-(\d{2})-(\d{2})')

DayLike = Union[date, datetime, str]


def parse_time_to_minutes(value) -> Optional[int]:
    """
    Convert a time-of-day string to minutes since midnight.

    Args:
        value: "HH:MM" or "HH:MM:SS" (seconds are ignored)

    Returns:
        Minutes since midnight, or None if the value is missing or malformed
    """
    if not isinstance(value, str):
        return None

    match = TIME_PATTERN.match(value)
    if not match:
        return None

    hour, minute = int(match.group(1)), int(match.group(2))
    second = int(match.group(3) or 0)
    if hour > 23 or minute > 59 or second > 59:
        return None

    return hour * 60 + minute


def parse_calendar_day(value: Optional[DayLike]) -> Optional[date]:
    """
    Reduce a date, datetime or ISO string to its calendar day.

    Time-of-day is dropped, so "2025-01-10T18:30:00" and "2025-01-10" are the
    same day.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    match = DATE_PATTERN.match(value)
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def format_time(value: str) -> str:
    """Convert "16:00:00" to "16:00"."""
    return value[:5]


def format_date(day: Union[date, datetime]) -> str:
    """Return YYYY-MM-DD for a date or datetime."""
    if isinstance(day, datetime):
        day = day.date()
    return day.isoformat()


def hours_between(start_time: str, end_time: str) -> Optional[int]:
    """
    Whole hours between two times, by hour component only.

    Used to derive how many one-hour slots an existing booking spans.
    """
    start = parse_time_to_minutes(start_time)
    end = parse_time_to_minutes(end_time)
    if start is None or end is None:
        return None
    return end // 60 - start // 60
