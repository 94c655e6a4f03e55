"""
Core Base Exceptions

Structural failures of the calendar component model. Natural language
parsing never raises: text without a date or time is an ordinary outcome.
"""
from typing import Any, Dict, Optional


class CalendarModelError(Exception):
    """
    Base exception for calendar model operations.

    Carries a human readable message plus structured details so callers can
    report which component and property were at fault.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


class MissingPropertyError(CalendarModelError):
    """Raised at serialization time when a mandatory property is absent"""

    def __init__(self, component: str, property_name: str):
        self.component = component
        self.property_name = property_name
        super().__init__(
            f"{component} is missing mandatory property {property_name}",
            details={'component': component, 'property': property_name},
        )


class MalformedValueError(CalendarModelError):
    """Raised when a property or parameter value cannot be encoded"""

    def __init__(self, name: str, value: str, reason: str):
        self.name = name
        self.value = value
        self.reason = reason
        super().__init__(
            f"Cannot encode {name}: {reason}",
            details={'name': name, 'value': value, 'reason': reason},
        )


class BuilderFinishedError(CalendarModelError):
    """Raised when a builder is used after done() handed out its value"""
    pass
