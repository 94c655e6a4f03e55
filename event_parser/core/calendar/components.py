"""
Calendar Component Model

Immutable RFC 5545 values (``Parameter``, ``Property``, ``Component``,
``CalendarDocument``) and the builders that produce them (``Event``,
``Todo``, ``Calendar``).

A builder is owned by whoever created it and is mutated in place by its
chainable setters. ``done()`` hands out a frozen value and closes the
builder; any further call raises ``BuilderFinishedError``. Mandatory
properties are only checked when serializing.

Example:
    >>> event = (Event()
    ...          .uid("lunch-1@example.com")
    ...          .timestamp(datetime(2021, 1, 1))
    ...          .summary("Lunch")
    ...          .starts(datetime(2021, 6, 15, 12))
    ...          .ends(datetime(2021, 6, 15, 13))
    ...          .done())
    >>> calendar = Calendar().push(event).done()
    >>> text = calendar.to_ics()
"""
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..base.exceptions import BuilderFinishedError
from ...utils.config import CalendarConfig, ConfigDefaults
from ...utils.logger import setup_logger
from .ics import ContentBlock, find_block, parse_calendar, serialize_calendar, serialize_component
from .utils import format_ical_date, format_ical_datetime

logger = setup_logger(__name__)

ParameterInput = Optional[Dict[str, str]]


# ============================================================================
# VALUES
# ============================================================================

@dataclass(frozen=True)
class Parameter:
    """A ``KEY=value`` qualifier of a property, e.g. ``VALUE=DATE``."""
    name: str
    value: str

    def __post_init__(self):
        object.__setattr__(self, 'name', self.name.upper())


@dataclass(frozen=True)
class Property:
    """A named value with its parameters, in insertion order."""
    name: str
    value: str
    parameters: Tuple[Parameter, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'name', self.name.upper())
        object.__setattr__(self, 'parameters', tuple(self.parameters))

    @classmethod
    def build(cls, name: str, value: str, parameters: ParameterInput = None) -> 'Property':
        params = tuple(Parameter(key, val) for key, val in (parameters or {}).items())
        return cls(name, value, params)

    def with_parameter(self, name: str, value: str) -> 'Property':
        """Copy of this property with one more parameter."""
        return replace(self, parameters=self.parameters + (Parameter(name, value),))

    def parameter(self, name: str) -> Optional[str]:
        """Value of the first parameter called ``name``."""
        for param in self.parameters:
            if param.name == name.upper():
                return param.value
        return None


class ComponentKind(str, Enum):
    EVENT = "VEVENT"
    TODO = "VTODO"


@dataclass(frozen=True)
class Component:
    """A finished Event or Todo."""
    kind: ComponentKind
    properties: Tuple[Property, ...]

    def get(self, name: str) -> Optional[Property]:
        for prop in self.properties:
            if prop.name == name.upper():
                return prop
        return None

    def get_all(self, name: str) -> List[Property]:
        return [prop for prop in self.properties if prop.name == name.upper()]

    def value(self, name: str) -> Optional[str]:
        prop = self.get(name)
        return prop.value if prop else None

    def to_ics(self) -> str:
        return serialize_component(self)


@dataclass(frozen=True)
class CalendarDocument:
    """A finished calendar: calendar-level properties plus components."""
    properties: Tuple[Property, ...]
    components: Tuple[Component, ...]

    def get(self, name: str) -> Optional[Property]:
        for prop in self.properties:
            if prop.name == name.upper():
                return prop
        return None

    def to_ics(self) -> str:
        """
        Serialize to RFC 5545 text.

        Raises:
            MissingPropertyError: a mandatory property is absent
            MalformedValueError: a value cannot be encoded
        """
        return serialize_calendar(self)

    def __str__(self) -> str:
        return self.to_ics()

    @classmethod
    def from_ics(cls, text: str) -> 'CalendarDocument':
        """
        Read a calendar written by ``to_ics``.

        Only VEVENT and VTODO children are kept; other blocks are skipped.
        """
        block = find_block(parse_calendar(text), 'VCALENDAR')
        if block is None:
            return cls(properties=(), components=())
        kinds = {kind.value: kind for kind in ComponentKind}
        components = []
        for child in block.children:
            if child.name not in kinds:
                logger.debug(f"Skipping unsupported component {child.name}")
                continue
            components.append(Component(kinds[child.name], _properties_from_block(child)))
        return cls(properties=_properties_from_block(block), components=tuple(components))


def _properties_from_block(block: ContentBlock) -> Tuple[Property, ...]:
    return tuple(
        Property(name, value, tuple(Parameter(key, val) for key, val in params))
        for name, params, value in block.properties
    )


# ============================================================================
# BUILDERS
# ============================================================================

class _Builder:
    """Shared property bookkeeping for component and calendar builders."""

    def __init__(self):
        self._properties: List[Property] = []
        self._finished = False

    def _check_open(self) -> None:
        if self._finished:
            raise BuilderFinishedError(
                f"{self.__class__.__name__} builder already finished",
                details={'builder': self.__class__.__name__},
            )

    def _finish(self) -> Tuple[Property, ...]:
        self._check_open()
        self._finished = True
        return tuple(self._properties)

    def add_property(self, name: str, value: str, parameters: ParameterInput = None):
        """
        Set a single-valued property.

        Replaces earlier properties of the same name, keeping the position of
        the first one.
        """
        self._check_open()
        prop = Property.build(name, value, parameters)
        for index, existing in enumerate(self._properties):
            if existing.name == prop.name:
                self._properties[index] = prop
                self._properties = [
                    p for i, p in enumerate(self._properties) if i <= index or p.name != prop.name
                ]
                return self
        self._properties.append(prop)
        return self

    def append_property(self, prop: Property):
        """Append a property, keeping any others of the same name."""
        self._check_open()
        self._properties.append(prop)
        return self

    def add_multi_property(self, name: str, value: str, parameters: ParameterInput = None):
        return self.append_property(Property.build(name, value, parameters))


class _ComponentBuilder(_Builder):
    KIND: ComponentKind

    def summary(self, text: str):
        return self.add_property('SUMMARY', text)

    def description(self, text: str):
        return self.add_property('DESCRIPTION', text)

    def location(self, text: str):
        return self.add_property('LOCATION', text)

    def uid(self, value: str):
        return self.add_property('UID', value)

    def timestamp(self, value: datetime):
        return self.add_property('DTSTAMP', format_ical_datetime(value))

    def starts(self, value: datetime):
        return self.add_property('DTSTART', format_ical_datetime(value))

    def start_date(self, value: date):
        return self.add_property('DTSTART', format_ical_date(value), {'VALUE': 'DATE'})

    def priority(self, value: int):
        return self.add_property('PRIORITY', str(value))

    def status(self, value: str):
        return self.add_property('STATUS', value.upper())

    def done(self) -> Component:
        """Finish the builder and return the immutable component."""
        return Component(self.KIND, self._finish())


class Event(_ComponentBuilder):
    """VEVENT builder."""
    KIND = ComponentKind.EVENT

    def ends(self, value: datetime):
        return self.add_property('DTEND', format_ical_datetime(value))

    def end_date(self, value: date):
        return self.add_property('DTEND', format_ical_date(value), {'VALUE': 'DATE'})

    def all_day(self, first: date, last: Optional[date] = None):
        """All-day event over ``first`` .. ``last`` inclusive; DTEND is exclusive."""
        last = last or first
        return self.start_date(first).end_date(last + timedelta(days=1))


class Todo(_ComponentBuilder):
    """VTODO builder."""
    KIND = ComponentKind.TODO

    def due(self, value: Union[date, datetime]):
        if isinstance(value, datetime):
            return self.add_property('DUE', format_ical_datetime(value))
        return self.add_property('DUE', format_ical_date(value), {'VALUE': 'DATE'})

    def percent_complete(self, value: int):
        return self.add_property('PERCENT-COMPLETE', str(value))

    def completed(self, value: datetime):
        return self.add_property('COMPLETED', format_ical_datetime(value))


class Calendar(_Builder):
    """
    VCALENDAR builder.

    PRODID, VERSION and CALSCALE are filled in from ``CalendarConfig``.
    """

    def __init__(self, config: Optional[CalendarConfig] = None):
        super().__init__()
        config = config or CalendarConfig()
        self._components: List[Component] = []
        self.add_property('PRODID', config.product_id or ConfigDefaults.PRODUCT_ID)
        self.add_property('VERSION', config.version)
        self.add_property('CALSCALE', config.scale)
        if config.name:
            self.name(config.name)

    def name(self, value: str):
        return self.add_property('X-WR-CALNAME', value)

    def push(self, component: Union[Component, _ComponentBuilder]):
        """Add a component; an unfinished builder is finished first."""
        self._check_open()
        if isinstance(component, _ComponentBuilder):
            component = component.done()
        self._components.append(component)
        return self

    def extend(self, components: Iterable[Union[Component, _ComponentBuilder]]):
        for component in components:
            self.push(component)
        return self

    def done(self) -> CalendarDocument:
        properties = self._finish()
        return CalendarDocument(properties=properties, components=tuple(self._components))
