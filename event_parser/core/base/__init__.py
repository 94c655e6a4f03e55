"""
Base classes shared by core modules
"""

from .exceptions import (
    BuilderFinishedError,
    CalendarModelError,
    MalformedValueError,
    MissingPropertyError,
)

__all__ = [
    'BuilderFinishedError',
    'CalendarModelError',
    'MalformedValueError',
    'MissingPropertyError',
]
