"""
Calendar operations

Main exports:
- to_event / ParsedEvent: Assemble an event from free-form text
- Event, Todo, Calendar: Builders for the RFC 5545 component model
- Component, CalendarDocument, Property, Parameter: Finished values
- Text encoding: See ics.py for escaping, folding and serialization
"""

from .components import (
    Calendar,
    CalendarDocument,
    Component,
    ComponentKind,
    Event,
    Parameter,
    Property,
    Todo,
)
from .event_assembler import ParsedEvent, summary, to_event
from .utils import format_event

__all__ = [
    'Calendar',
    'CalendarDocument',
    'Component',
    'ComponentKind',
    'Event',
    'Parameter',
    'Property',
    'Todo',
    'ParsedEvent',
    'summary',
    'to_event',
    'format_event',
]
