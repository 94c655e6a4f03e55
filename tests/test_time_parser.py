"""
Tests for the time recognizer

Reference instant throughout is 2021-06-10 09:00.
"""
import pytest
from datetime import datetime, time, timedelta

from event_parser.utils.config import Config, ParserConfig
from event_parser.utils.datetime import TimeFamily, TimeParser, TimeProvenance


REF = datetime(2021, 6, 10, 9, 0, 0)


@pytest.fixture
def parser():
    return TimeParser()


# ============================================
# CLOCK TIMES
# ============================================

class TestClockTimes:
    """Test explicit clock values"""

    @pytest.mark.parametrize("text,expected", [
        ("7pm", time(19, 0)),
        ("7 PM", time(19, 0)),
        ("10:30 a.m.", time(10, 30)),
        ("12am", time(0, 0)),
        ("12pm", time(12, 0)),
        ("19:00", time(19, 0)),
        ("10:30", time(10, 30)),
        ("02:30", time(2, 30)),
        ("2:30", time(14, 30)),
        ("18:45:30", time(18, 45, 30)),
    ])
    def test_clock(self, parser, text, expected):
        """Meridiem and 24-hour forms"""
        assert parser.parse_relative(text, REF) == expected

    @pytest.mark.parametrize("text", ["13pm", "25:00", "10:75"])
    def test_impossible_times_are_discarded(self, parser, text):
        """Time-shaped text that is not a clock value yields no time"""
        assert parser.parse_relative(text, REF) is None

    def test_meridiem_beats_shorter_clock(self, parser):
        """A trailing meridiem beats the shorter 24-hour reading"""
        candidate = parser.recognize("10:30pm", REF)
        assert candidate.value.start == time(22, 30)
        assert candidate.family == TimeFamily.CLOCK
        assert candidate.span.text == "10:30pm"
        assert candidate.value.provenance == TimeProvenance.ABSOLUTE


# ============================================
# RANGES
# ============================================

class TestRanges:
    """Test explicit time ranges"""

    @pytest.mark.parametrize("text,start,end", [
        ("Meeting 7-9pm", time(19, 0), time(21, 0)),
        ("11-1pm", time(11, 0), time(13, 0)),
        ("9am-5pm", time(9, 0), time(17, 0)),
        ("2 to 3", time(14, 0), time(15, 0)),
        ("from 7:30 to 8:45", time(19, 30), time(20, 45)),
        ("10pm-1am", time(22, 0), time(1, 0)),
        ("10am - 2", time(10, 0), time(14, 0)),
    ])
    def test_range(self, parser, text, start, end):
        """Both ends are explicit; a shared meridiem is inherited"""
        resolved = parser.recognize(text, REF).value
        assert resolved.is_range
        assert (resolved.start, resolved.end) == (start, end)

    def test_range_span_includes_from(self, parser):
        """The leading "from" belongs to the range"""
        candidate = parser.recognize("Call from 2 to 3", REF)
        assert candidate.span.text == "from 2 to 3"
        assert candidate.family == TimeFamily.RANGE


# ============================================
# NAMED AND RELATIVE TIMES
# ============================================

class TestNamedAndRelative:
    """Test named instants and offsets from the reference"""

    @pytest.mark.parametrize("text,expected", [
        ("noon", time(12, 0)),
        ("Lunch at noon", time(12, 0)),
        ("lunchtime", time(12, 0)),
        ("lunch time", time(12, 0)),
        ("midnight", time(0, 0)),
        ("tonight", time(21, 0)),
        ("in the evening", time(18, 0)),
    ])
    def test_named(self, parser, text, expected):
        """Named instants map to fixed clock values"""
        candidate = parser.recognize(text, REF)
        assert candidate.value.start == expected
        assert candidate.value.provenance == TimeProvenance.NAMED

    @pytest.mark.parametrize("text,expected", [
        ("in 2 hours", time(11, 0)),
        ("in an hour", time(10, 0)),
        ("in 30 mins", time(9, 30)),
        ("in 45 minutes", time(9, 45)),
        ("in half an hour", time(9, 30)),
    ])
    def test_offsets(self, parser, text, expected):
        """Offsets are added to the reference instant"""
        resolved = parser.recognize(text, REF).value
        assert resolved.start == expected
        assert resolved.provenance == TimeProvenance.RELATIVE
        assert resolved.day_offset == 0

    def test_offset_past_midnight(self, parser):
        """An offset can carry into the next day"""
        resolved = parser.recognize("in 3 hours", datetime(2021, 6, 10, 23, 0)).value
        assert resolved.start == time(2, 0)
        assert resolved.day_offset == 1

    def test_offset_keeps_elapsed_time(self, parser):
        """The offset itself is kept next to the clock value"""
        resolved = parser.recognize("in 2 hours", REF).value
        assert resolved.offset == timedelta(hours=2)
        assert parser.recognize("7pm", REF).value.offset is None


# ============================================
# BARE HOURS
# ============================================

class TestBareHours:
    """Test cued hours without am/pm"""

    @pytest.mark.parametrize("text,expected", [
        ("Dinner at 7", time(19, 0)),
        ("at 10", time(10, 0)),
        ("@ 5", time(17, 0)),
        ("by 8", time(20, 0)),
        ("at 7:30", time(19, 30)),
        ("7 o'clock", time(19, 0)),
        ("at 7pm", time(19, 0)),
    ])
    def test_bare(self, parser, text, expected):
        """Hours below the cutoff read as afternoon"""
        assert parser.parse_relative(text, REF) == expected

    def test_cutoff_is_configurable(self):
        """A cutoff of 1 disables the afternoon rule"""
        config = Config(parser=ParserConfig(bare_hour_pm_cutoff=1))
        assert TimeParser(config).parse_relative("Dinner at 7", REF) == time(7, 0)


# ============================================
# NON-TIMES
# ============================================

class TestNonTimes:
    """Numbers belonging to dates or counts are not times"""

    @pytest.mark.parametrize("text", [
        "My Birthday",
        "June 5",
        "6/15",
        "2021-06-15",
        "in 3 days",
        "Welcome Week 9/1-9/8",
        "Taxes by 4/15",
        "the 4th of July",
        "Trip 3-5 June",
        "June 3-5",
        "3rd to 5th of June",
    ])
    def test_no_time(self, parser, text):
        """None of these contain a time"""
        assert parser.recognize(text, REF) is None

    def test_earliest_wins(self, parser):
        """The first time in the text is chosen"""
        assert parser.parse_relative("noon or 3pm", REF) == time(12, 0)

    def test_deterministic(self, parser):
        """Same text and reference give the same candidate"""
        assert parser.recognize("in 2 hours", REF) == parser.recognize("in 2 hours", REF)

    def test_day_after_month_name_is_not_an_hour(self, parser):
        """In "June 5 - 7pm" only 7pm is a time"""
        candidate = parser.recognize("Party June 5 - 7pm", REF)
        assert candidate.value.start == time(19, 0)
        assert candidate.value.end is None
        assert candidate.family == TimeFamily.CLOCK
        assert candidate.span.text == "7pm"
