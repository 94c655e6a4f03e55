"""
DateTime Helper Utilities

Calendar arithmetic shared by the recognizers and the event assembler.
"""
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional


def days_until_weekday(current_weekday: int, target_weekday: int) -> int:
    """
    Calculate days until the next target weekday.

    Args:
        current_weekday: Current day (0=Monday, 6=Sunday)
        target_weekday: Target day (0=Monday, 6=Sunday)

    Returns:
        Number of days (1-7) until target weekday. A target equal to today
        is a week away.
    """
    days_ahead = (target_weekday - current_weekday) % 7

    if days_ahead == 0:
        days_ahead = 7

    return days_ahead


def days_since_weekday(current_weekday: int, target_weekday: int) -> int:
    """Number of days (1-7) back to the previous target weekday."""
    days_back = (current_weekday - target_weekday) % 7
    return days_back or 7


def next_weekday(reference: date, weekday: int) -> date:
    """Nearest ``weekday`` strictly after ``reference``."""
    return reference + timedelta(days=days_until_weekday(reference.weekday(), weekday))


def previous_weekday(reference: date, weekday: int) -> date:
    """Nearest ``weekday`` strictly before ``reference``."""
    return reference - timedelta(days=days_since_weekday(reference.weekday(), weekday))


def weekday_in_week(reference: date, weekday: int) -> date:
    """``weekday`` inside the Monday-first calendar week containing ``reference``."""
    monday = reference - timedelta(days=reference.weekday())
    return monday + timedelta(days=weekday)


def attach_timezone(dt: datetime, tz: Optional[tzinfo]) -> datetime:
    """
    Attach ``tz`` to a naive datetime.

    pytz zones need ``localize`` to pick the right UTC offset; plain
    ``tzinfo`` objects (fixed offsets, zoneinfo) are attached directly.
    """
    if tz is None or dt.tzinfo is not None:
        return dt
    if hasattr(tz, 'localize'):
        return tz.localize(dt)
    return dt.replace(tzinfo=tz)


def combine(day: date, clock: time, tz: Optional[tzinfo] = None) -> datetime:
    """Build a datetime from a date and a wall clock time in ``tz``."""
    return attach_timezone(datetime.combine(day, clock), tz)


def add_duration(dt: datetime, delta: timedelta) -> datetime:
    """
    Add an elapsed ``delta`` to ``dt``.

    For pytz zones the result is re-normalized so its UTC offset is the one
    in force at the resulting instant.
    """
    result = dt + delta
    tz = dt.tzinfo
    if tz is not None and hasattr(tz, 'normalize'):
        result = tz.normalize(result)
    return result
