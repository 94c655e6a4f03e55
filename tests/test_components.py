"""
Tests for the calendar component model
"""
import pytest
from datetime import date, datetime

import pytz

from event_parser.core.base.exceptions import (
    BuilderFinishedError,
    MalformedValueError,
    MissingPropertyError,
)
from event_parser.core.calendar.components import (
    Calendar,
    CalendarDocument,
    Component,
    ComponentKind,
    Event,
    Parameter,
    Property,
    Todo,
)
from event_parser.utils.config import CalendarConfig


def lunch(stamp):
    return (Event()
            .uid("lunch-1@example.com")
            .timestamp(stamp)
            .summary("Lunch, with friends; bring cake")
            .starts(datetime(2021, 6, 15, 12, 0, 0))
            .ends(datetime(2021, 6, 15, 13, 0, 0)))


# ============================================
# VALUES
# ============================================

class TestValues:
    """Test Parameter and Property values"""

    def test_names_upper_cased(self):
        """Names are canonical upper case"""
        prop = Property("summary", "Lunch", (Parameter("language", "en"),))
        assert prop.name == "SUMMARY"
        assert prop.parameters[0].name == "LANGUAGE"

    def test_with_parameter_copies(self):
        """with_parameter never touches the original"""
        prop = Property("DTSTART", "20210615")
        dated = prop.with_parameter("VALUE", "DATE")
        assert prop.parameters == ()
        assert dated.parameter("value") == "DATE"
        assert dated.parameter("TZID") is None

    def test_build_from_mapping(self):
        """Parameters can be given as a mapping"""
        prop = Property.build("attendee", "mailto:a@example.com", {"CN": "Ann", "ROLE": "CHAIR"})
        assert [(p.name, p.value) for p in prop.parameters] == [("CN", "Ann"), ("ROLE", "CHAIR")]

    def test_frozen(self):
        """Finished values cannot be changed"""
        with pytest.raises(Exception):
            Property("SUMMARY", "x").value = "y"


# ============================================
# BUILDERS
# ============================================

class TestBuilders:
    """Test the building / finished state machine"""

    def test_chain_and_done(self, stamp):
        """Setters chain and done() returns an immutable component"""
        component = lunch(stamp).done()
        assert isinstance(component, Component)
        assert component.kind == ComponentKind.EVENT
        assert [p.name for p in component.properties] == [
            "UID", "DTSTAMP", "SUMMARY", "DTSTART", "DTEND"
        ]

    def test_finished_builder_rejects_calls(self, stamp):
        """No transition back from finished to building"""
        builder = lunch(stamp)
        builder.done()
        with pytest.raises(BuilderFinishedError):
            builder.summary("Dinner")
        with pytest.raises(BuilderFinishedError):
            builder.done()

    def test_add_property_replaces(self):
        """Single-valued setters overwrite in place"""
        component = Event().summary("Lunch").uid("u").summary("Dinner").done()
        assert component.get_all("SUMMARY") == [Property("SUMMARY", "Dinner")]
        assert component.properties[0].name == "SUMMARY"

    def test_append_property_keeps_duplicates(self):
        """Repeated properties are allowed and ordered"""
        component = (Event()
                     .add_multi_property("ATTENDEE", "mailto:a@example.com")
                     .append_property(Property("ATTENDEE", "mailto:b@example.com"))
                     .done())
        assert [p.value for p in component.get_all("attendee")] == [
            "mailto:a@example.com", "mailto:b@example.com"
        ]

    def test_datetime_formats(self):
        """Naive values float, aware values are converted to UTC"""
        tz = pytz.timezone("Europe/Berlin")
        component = (Event()
                     .starts(datetime(2021, 6, 15, 12, 0, 0))
                     .ends(tz.localize(datetime(2021, 6, 15, 14, 30, 0)))
                     .done())
        assert component.value("DTSTART") == "20210615T120000"
        assert component.value("DTEND") == "20210615T123000Z"

    def test_all_day(self):
        """all_day writes dates with an exclusive end"""
        component = Event().all_day(date(2021, 12, 31)).done()
        assert component.get("DTSTART").parameter("VALUE") == "DATE"
        assert component.value("DTSTART") == "20211231"
        assert component.value("DTEND") == "20220101"

    def test_todo(self, stamp):
        """Todo specific setters"""
        todo = (Todo()
                .uid("t1")
                .timestamp(stamp)
                .summary("Taxes")
                .due(date(2021, 4, 15))
                .priority(1)
                .status("needs-action")
                .percent_complete(50)
                .done())
        assert todo.kind == ComponentKind.TODO
        assert todo.get("DUE").parameter("VALUE") == "DATE"
        assert todo.value("PRIORITY") == "1"
        assert todo.value("STATUS") == "NEEDS-ACTION"
        assert todo.value("PERCENT-COMPLETE") == "50"


# ============================================
# CALENDAR
# ============================================

class TestCalendar:
    """Test the calendar container"""

    def test_defaults(self):
        """PRODID, VERSION and CALSCALE are always present"""
        document = Calendar().done()
        assert document.get("VERSION").value == "2.0"
        assert document.get("CALSCALE").value == "GREGORIAN"
        assert document.get("PRODID").value.startswith("-//")
        assert document.components == ()

    def test_config_and_name(self):
        """Config supplies the product id and optional calendar name"""
        document = Calendar(CalendarConfig(product_id="-//X//Y//EN")).name("Home").done()
        assert document.get("PRODID").value == "-//X//Y//EN"
        assert document.get("X-WR-CALNAME").value == "Home"

    def test_push_finishes_builders(self, stamp):
        """Pushing a builder finishes it"""
        builder = lunch(stamp)
        document = Calendar().push(builder).extend([Todo().uid("t").timestamp(stamp)]).done()
        assert [c.kind for c in document.components] == [ComponentKind.EVENT, ComponentKind.TODO]
        with pytest.raises(BuilderFinishedError):
            builder.location("Cafe")

    def test_finished_calendar(self):
        """Calendar builders close as well"""
        calendar = Calendar()
        calendar.done()
        with pytest.raises(BuilderFinishedError):
            calendar.push(Event().done())


# ============================================
# SERIALIZATION
# ============================================

class TestSerialization:
    """Test ICS output of the model"""

    def test_to_ics(self, stamp):
        """Calendar, component and property lines in stored order"""
        ics = Calendar().push(lunch(stamp)).done().to_ics()
        lines = ics.split("\r\n")
        assert lines[0] == "BEGIN:VCALENDAR"
        assert lines[-2:] == ["END:VCALENDAR", ""]
        assert "BEGIN:VEVENT" in lines
        assert "SUMMARY:Lunch\\, with friends\\; bring cake" in lines
        assert "DTSTAMP:20210101T000000Z" in lines
        assert "\n" not in ics.replace("\r\n", "")

    def test_round_trip(self, stamp):
        """Reading the text back gives equal properties"""
        original = (Calendar()
                    .push(lunch(stamp)
                          .description("Line one\nLine two \\ done")
                          .add_multi_property("ATTENDEE", "mailto:a@example.com", {"CN": "Doe, Jane"})
                          .add_multi_property("X-NOTE", "ünïcödé " * 20))
                    .push(Todo().uid("t").timestamp(stamp).due(date(2021, 4, 15)))
                    .done())
        parsed = CalendarDocument.from_ics(original.to_ics())
        assert parsed == original

    def test_missing_uid(self):
        """Components without a UID cannot be serialized"""
        document = Calendar().push(Event().timestamp(datetime(2021, 1, 1)).starts(datetime(2021, 1, 2))).done()
        with pytest.raises(MissingPropertyError) as exc_info:
            document.to_ics()
        assert exc_info.value.component == "VEVENT"
        assert exc_info.value.property_name == "UID"
        assert exc_info.value.details == {"component": "VEVENT", "property": "UID"}

    def test_event_requires_start(self, stamp):
        """Events need DTSTART, todos do not"""
        with pytest.raises(MissingPropertyError) as exc_info:
            Event().uid("e").timestamp(stamp).done().to_ics()
        assert exc_info.value.property_name == "DTSTART"
        assert "BEGIN:VTODO" in Todo().uid("t").timestamp(stamp).done().to_ics()

    def test_calendar_requires_prodid(self):
        """Calendar-level properties are mandatory too"""
        document = CalendarDocument(properties=(Property("VERSION", "2.0"),), components=())
        with pytest.raises(MissingPropertyError) as exc_info:
            document.to_ics()
        assert exc_info.value.component == "VCALENDAR"

    def test_malformed_value(self, stamp):
        """Control characters cannot be encoded"""
        document = Calendar().push(lunch(stamp).summary("bell\x07")).done()
        with pytest.raises(MalformedValueError):
            document.to_ics()

    def test_interoperates_with_icalendar(self, stamp):
        """A third-party reader understands the output"""
        icalendar = pytest.importorskip("icalendar")
        ics = (Calendar()
               .push(lunch(stamp))
               .push(Event().uid("bday").timestamp(stamp).summary("Birthday").all_day(date(2021, 4, 5)))
               .done()
               .to_ics())
        parsed = icalendar.Calendar.from_ical(ics)
        events = parsed.walk("VEVENT")
        assert str(events[0]["SUMMARY"]) == "Lunch, with friends; bring cake"
        assert events[0].decoded("DTSTART") == datetime(2021, 6, 15, 12, 0, 0)
        assert events[1].decoded("DTSTART") == date(2021, 4, 5)
        assert events[1].decoded("DTEND") == date(2021, 4, 6)
