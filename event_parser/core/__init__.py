"""
Core business logic modules

Event assembly and the calendar component model.
"""

from .calendar import Calendar, Event, ParsedEvent, Todo, to_event

__all__ = [
    'Calendar',
    'Event',
    'ParsedEvent',
    'Todo',
    'to_event',
]
