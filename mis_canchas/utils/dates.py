"""
Date and time utilities.

Pure functions for date/time operations extracted for reusability.
"""
import datetime
import logging


def parse_date(date_str: str, fmt: str = "%Y-%m-%d") -> datetime.date | None:
    """
    Safely parse a date string.

    Args:
        date_str: The date string to parse
        fmt: The format string (default: "%Y-%m-%d")

    Returns:
        Parsed date or None if parsing fails
    """
    if not date_str:
        return None
    try:
        return datetime.datetime.strptime(date_str, fmt).date()
    except ValueError as e:
        logging.debug(f"Failed to parse date '{date_str}' with format '{fmt}': {e}")
        return None


def parse_time(time_str: str) -> datetime.time | None:
    """Parse "HH:MM" or "HH:MM:SS"."""
    if not time_str:
        return None
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.datetime.strptime(time_str.strip(), fmt).time()
        except ValueError:
            continue
    return None


def time_to_minutes(value: datetime.time) -> int:
    return value.hour * 60 + value.minute


def minutes_to_time(minutes: int) -> datetime.time:
    return datetime.time(minutes // 60, minutes % 60)


def minutes_between(start: datetime.time, end: datetime.time) -> int:
    """
    Minutes from start to end on the same day (0 if end is not after start).
    """
    return max(time_to_minutes(end) - time_to_minutes(start), 0)


def hours_until(target: datetime.datetime, now: datetime.datetime | None = None) -> float:
    now = now or datetime.datetime.now()
    return (target - now).total_seconds() / 3600


def format_datetime_display(dt: datetime.datetime | None) -> str:
    """
    Format a datetime for display.
    """
    if dt is None:
        return ""
    return dt.strftime("%Y-%m-%d %H:%M")


def format_time(value: datetime.time | None) -> str:
    if value is None:
        return ""
    return value.strftime("%H:%M")
