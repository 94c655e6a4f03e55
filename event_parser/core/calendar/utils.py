"""
Calendar Utilities - Shared helper functions for calendar operations

This module provides reusable utilities for:
- Timezone handling and the reference instant
- iCalendar date/time value formatting
- Human readable event formatting
"""
from typing import Optional, Any, Union
from datetime import date, datetime, timedelta
import pytz

from ...utils.config import get_timezone
from ...utils.logger import setup_logger

logger = setup_logger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

ICAL_DATE_FORMAT = "%Y%m%d"
ICAL_DATETIME_FORMAT = "%Y%m%dT%H%M%S"


# ============================================================================
# TIMEZONE HELPERS
# ============================================================================

def get_user_timezone(config: Optional[Any] = None) -> pytz.BaseTzInfo:
    """
    Get the configured timezone as a pytz zone.

    Unknown names fall back to UTC with a warning.
    """
    tz_name = get_timezone(config)
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone '{tz_name}', falling back to UTC")
        return pytz.UTC


def get_utc_now() -> datetime:
    """
    Get current UTC time with timezone info.

    Returns:
        Current UTC datetime with timezone, truncated to whole seconds
    """
    return datetime.now(pytz.UTC).replace(microsecond=0)


def reference_now(config: Optional[Any] = None) -> datetime:
    """Current instant in the configured timezone, truncated to whole seconds."""
    return datetime.now(get_user_timezone(config)).replace(microsecond=0)


# ============================================================================
# ICALENDAR VALUE FORMATTING
# ============================================================================

def format_ical_date(value: date) -> str:
    """Format a DATE value: ``YYYYMMDD``."""
    return value.strftime(ICAL_DATE_FORMAT)


def format_ical_datetime(value: datetime) -> str:
    """
    Format a DATE-TIME value.

    Naive datetimes are floating local times (``YYYYMMDDTHHMMSS``); aware
    ones are converted to UTC and get the ``Z`` suffix.
    """
    if value.tzinfo is not None and value.utcoffset() is not None:
        return value.astimezone(pytz.UTC).strftime(ICAL_DATETIME_FORMAT) + "Z"
    return value.strftime(ICAL_DATETIME_FORMAT)


# ============================================================================
# DISPLAY HELPERS
# ============================================================================

def format_event_time_display(value: Union[date, datetime], all_day: bool = False) -> str:
    """
    Format an event boundary for display.

    Args:
        value: Start or end of the event
        all_day: Show only the calendar date

    Returns:
        e.g. "12:00pm June 15 2021" or "June 15 2021"
    """
    day = f"{value.strftime('%B')} {value.day} {value.year}"
    if all_day or not isinstance(value, datetime):
        return day
    return f"{value.strftime('%I:%M%p').lower()} {day}"


def format_event(event: Any) -> str:
    """
    Two-line human readable rendering of a parsed event.

    Example:
        Event: "Lunch"
        12:00pm June 15 2021 - 01:00pm June 15 2021
    """
    lines = [f'Event: "{event.summary}"']
    if event.all_day:
        first = event.start.date() if isinstance(event.start, datetime) else event.start
        last = (event.end.date() if isinstance(event.end, datetime) else event.end) - timedelta(days=1)
        when = f"All day {format_event_time_display(first, all_day=True)}"
        if last > first:
            when += f" - {format_event_time_display(last, all_day=True)}"
        lines.append(when)
    else:
        lines.append(
            f"{format_event_time_display(event.start)} - {format_event_time_display(event.end)}"
        )
    return "\n".join(lines)
