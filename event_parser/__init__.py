"""
event_parser - Natural language events to iCalendar

    >>> from event_parser import to_event
    >>> event = to_event("Lunch at 12pm on 6/15")
    >>> print(event.to_calendar().to_ics())
"""

from .core.base.exceptions import (
    BuilderFinishedError,
    CalendarModelError,
    MalformedValueError,
    MissingPropertyError,
)
from .core.calendar import (
    Calendar,
    CalendarDocument,
    Component,
    Event,
    Parameter,
    ParsedEvent,
    Property,
    Todo,
    format_event,
    summary,
    to_event,
)
from .utils.config import Config, get_config

__version__ = "1.0.0"

__all__ = [
    'BuilderFinishedError',
    'CalendarModelError',
    'MalformedValueError',
    'MissingPropertyError',
    'Calendar',
    'CalendarDocument',
    'Component',
    'Event',
    'Parameter',
    'ParsedEvent',
    'Property',
    'Todo',
    'format_event',
    'summary',
    'to_event',
    'Config',
    'get_config',
]
