"""
Time Parser - Recognizes clock times, time ranges and offsets in free-form text

Handles expressions like:
- "7pm", "10:30 a.m.", "19:00", "2:30"
- "7-9pm", "11-1pm", "2 to 3", "from 7:30 to 9"
- "noon", "midnight", "lunchtime", "tonight", "in the morning"
- "in 2 hours", "in 30 mins", "in half an hour"
- "at 7", "@ 5", "7 o'clock"

Numbers that sit inside a date ("6/15", "2021-06-15") or that count days,
weeks or months are never read as times.
"""
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from enum import Enum, IntEnum
from typing import List, Optional

from ..config import Config, ConfigDefaults
from ..logger import setup_logger
from .span_matcher import Candidate, Span, SpanMatcher, select_winner

logger = setup_logger(__name__)


MONTH_WORDS = (
    "jan", "january", "feb", "february", "mar", "march", "apr", "april", "may",
    "jun", "june", "jul", "july", "aug", "august", "sep", "sept", "september",
    "oct", "october", "nov", "november", "dec", "december",
)

NOT_IN_DATE = r"(?<![\d/:.\-–])"
NOT_AFTER_MONTH = "".join(r"(?<!\b" + month + r"\s)" for month in MONTH_WORDS)
MERIDIEM = r"(?P<{name}>[ap])(?:\.?m\.?)?(?![a-z])"
RANGE_CONNECTOR = r"(?:-|–|to|till|til|until)"
NOT_A_RANGE = r"(?!\s*" + RANGE_CONNECTOR + r"\s*\d)"
NOT_A_COUNT = (
    r"(?!\s*(?:st|nd|rd|th|days?|weeks?|months?|years?|hours?|hrs?|minutes?|mins?|of|"
    + "|".join(MONTH_WORDS) + r")\b)"
)


class TimeFamily(IntEnum):
    """Time pattern families, most specific first."""
    CLOCK = 1
    RANGE = 2
    NAMED = 3
    RELATIVE_OFFSET = 4
    BARE_HOUR = 5


class TimeProvenance(Enum):
    """How a resolved time was obtained."""
    ABSOLUTE = "absolute"  # a clock value or range
    NAMED = "named"        # noon, midnight, tonight ...
    RELATIVE = "relative"  # "in 2 hours"


@dataclass(frozen=True)
class ResolvedTime:
    """
    A point in time of day, or a range when ``end`` is set.

    ``day_offset`` counts the days a relative offset carried past the
    reference date ("in 3 hours" at 23:00 lands on the next day).
    ``offset`` keeps the elapsed time itself, so callers can add it to the
    reference instant instead of rebuilding a wall clock time.
    """
    start: time
    provenance: TimeProvenance
    end: Optional[time] = None
    day_offset: int = 0
    offset: Optional[timedelta] = None

    @property
    def is_range(self) -> bool:
        return self.end is not None


class TimeParser:
    """
    Time recognizer built on ``SpanMatcher``.

    Bare hours without am/pm follow the calendar convention that small
    numbers mean the afternoon: hours below ``pm_cutoff`` (default 9) get
    twelve hours added, so "Dinner at 7" is 19:00 while "at 10" is 10:00.
    """

    NAMED_TIMES = {
        'noon': time(12, 0),
        'midday': time(12, 0),
        'midnight': time(0, 0),
        'lunchtime': time(12, 0),
        'lunch time': time(12, 0),
        'morning': time(9, 0),
        'afternoon': time(14, 0),
        'evening': time(18, 0),
        'tonight': time(21, 0),
    }

    PATTERNS = [
        ('meridiem',
         NOT_IN_DATE + r"(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\s*"
         + MERIDIEM.format(name='mer') + NOT_A_RANGE),
        ('twenty_four_hour',
         NOT_IN_DATE + r"(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?(?![\d/:])"
         + NOT_A_RANGE),
        ('range',
         r"(?:\bfrom\s+)?" + NOT_IN_DATE + NOT_AFTER_MONTH
         + r"(?P<h1>\d{1,2})(?::(?P<m1>\d{2}))?\s*(?:" + MERIDIEM.format(name='mer1') + r")?"
         + r"\s*" + RANGE_CONNECTOR + r"\s*"
         + r"(?P<h2>\d{1,2})(?::(?P<m2>\d{2}))?\s*(?:" + MERIDIEM.format(name='mer2') + r")?"
         + r"(?![\d/])" + NOT_A_COUNT),
        ('named', r"\b(?P<name>noon|midday|midnight|lunch\s?time|morning|afternoon|evening|tonight)\b"),
        ('half_hour', r"\bin\s+half\s+an\s+hour\b"),
        ('offset', r"\bin\s+(?P<num>\d{1,3}|an?|one)\s+(?P<unit>hours?|hrs?|minutes?|mins?)\b"),
        ('cued_hour',
         r"(?:\b(?:at|by|around)\s+|@\s*)(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?(?![\d/:])"
         r"(?!\s*[ap](?:\.?m\.?)?(?![a-z]))" + NOT_A_RANGE + NOT_A_COUNT),
        ('oclock', NOT_IN_DATE + r"(?P<hour>\d{1,2})\s*o'?\s?clock\b"),
    ]

    FAMILIES = {
        'meridiem': TimeFamily.CLOCK,
        'twenty_four_hour': TimeFamily.CLOCK,
        'range': TimeFamily.RANGE,
        'named': TimeFamily.NAMED,
        'half_hour': TimeFamily.RELATIVE_OFFSET,
        'offset': TimeFamily.RELATIVE_OFFSET,
        'cued_hour': TimeFamily.BARE_HOUR,
        'oclock': TimeFamily.BARE_HOUR,
    }

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize the parser.

        Args:
            config: Optional config object; ``parser.bare_hour_pm_cutoff`` is honoured
        """
        self.pm_cutoff = (
            config.parser.bare_hour_pm_cutoff if config else ConfigDefaults.BARE_HOUR_PM_CUTOFF
        )

    def parse(self, text: str) -> Optional[time]:
        """Parse ``text`` relative to the current local time."""
        return self.parse_relative(text, datetime.now())

    def parse_relative(self, text: str, reference: datetime) -> Optional[time]:
        """
        Parse ``text`` relative to ``reference``.

        Returns:
            The recognized start time, or None when the text holds no time
        """
        candidate = self.recognize(text, reference)
        return candidate.value.start if candidate else None

    def recognize(self, text: str, reference: Optional[datetime] = None) -> Optional[Candidate]:
        """
        Find the winning time candidate in ``text``.

        Args:
            text: Free-form text
            reference: Instant that relative offsets are added to (defaults to now)

        Returns:
            Candidate whose ``value`` is a ``ResolvedTime``, or None
        """
        if reference is None:
            reference = datetime.now()
        candidates = self.candidates(text, reference)
        winner = select_winner(candidates)
        if winner:
            logger.debug(
                f"Time '{winner.span.text}' ({winner.span.tag}) -> {winner.value.start}"
                f"{' - ' + str(winner.value.end) if winner.value.is_range else ''} "
                f"out of {len(candidates)} candidate(s)"
            )
        return winner

    def candidates(self, text: str, reference: datetime) -> List[Candidate]:
        """All resolvable time candidates in document order."""
        found = []
        for span in SpanMatcher(text, self.PATTERNS):
            resolved = self._resolve(span, reference)
            if resolved is not None:
                found.append(Candidate(span=span, family=self.FAMILIES[span.tag], value=resolved))
        return found

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _resolve(self, span: Span, reference: datetime) -> Optional[ResolvedTime]:
        tag = span.tag
        try:
            if tag == 'meridiem':
                hour = _apply_meridiem(int(span.group('hour')), span.group('mer'))
                return _absolute(hour, span.group('minute'))
            if tag == 'twenty_four_hour':
                hour = self._colon_hour(span.group('hour'))
                return _absolute(hour, span.group('minute'), span.group('second'))
            if tag == 'range':
                return self._resolve_range(span)
            if tag == 'named':
                name = ' '.join(span.group('name').lower().split())
                return ResolvedTime(self.NAMED_TIMES[name], TimeProvenance.NAMED)
            if tag == 'half_hour':
                return _offset(reference, timedelta(minutes=30))
            if tag == 'offset':
                return self._resolve_offset(span, reference)
            if tag in ('cued_hour', 'oclock'):
                hour = self._bare_hour(int(span.group('hour')))
                return _absolute(hour, span.group('minute'))
        except ValueError as e:
            # "13pm", "25:00" and friends
            logger.debug(f"Discarding time candidate '{span.text}': {e}")
            return None
        return None

    def _resolve_range(self, span: Span) -> ResolvedTime:
        h1, h2 = int(span.group('h1')), int(span.group('h2'))
        mer1, mer2 = span.group('mer1'), span.group('mer2')

        if mer1 and mer2:
            start_hour, end_hour = _apply_meridiem(h1, mer1), _apply_meridiem(h2, mer2)
        elif mer2:
            end_hour = _apply_meridiem(h2, mer2)
            start_hour = self._inherit_meridiem(h1, mer2, end_hour, before=True)
        elif mer1:
            start_hour = _apply_meridiem(h1, mer1)
            end_hour = self._inherit_meridiem(h2, mer1, start_hour, before=False)
        else:
            start_hour, end_hour = self._bare_hour(h1), self._bare_hour(h2)

        start = _clock(start_hour, span.group('m1'))
        end = _clock(end_hour, span.group('m2'))
        return ResolvedTime(start, TimeProvenance.ABSOLUTE, end=end)

    def _inherit_meridiem(self, hour: int, meridiem: str, other: int, before: bool) -> int:
        """
        Give ``hour`` the meridiem of the other end of a range.

        "7-9pm" reads as 19-21, but "11-1pm" reads as 11-13: when the shared
        meridiem would put the start after the end (or the end before the
        start), the opposite one is used.
        """
        if hour > 12:
            return hour
        candidate = _apply_meridiem(hour, meridiem)
        if (before and candidate > other) or (not before and candidate < other):
            candidate = _apply_meridiem(hour, 'a' if meridiem.lower() == 'p' else 'p')
        return candidate

    def _resolve_offset(self, span: Span, reference: datetime) -> ResolvedTime:
        raw = span.group('num').lower()
        num = 1 if raw in ('a', 'an', 'one') else int(raw)
        unit = span.group('unit').lower()
        delta = timedelta(hours=num) if unit.startswith('h') else timedelta(minutes=num)
        return _offset(reference, delta)

    def _bare_hour(self, hour: int) -> int:
        if 1 <= hour < self.pm_cutoff:
            return hour + 12
        return hour

    def _colon_hour(self, raw: str) -> int:
        # "2:30" is an afternoon time, "02:30" and "14:30" are 24-hour values
        hour = int(raw)
        if len(raw) == 1:
            return self._bare_hour(hour)
        return hour


def _apply_meridiem(hour: int, meridiem: str) -> int:
    if not 1 <= hour <= 12:
        raise ValueError(f"hour {hour} cannot take a meridiem")
    if meridiem.lower() == 'p':
        return hour if hour == 12 else hour + 12
    return 0 if hour == 12 else hour


def _clock(hour: int, minute: Optional[str] = None, second: Optional[str] = None) -> time:
    return time(hour, int(minute or 0), int(second or 0))


def _absolute(hour: int, minute: Optional[str] = None, second: Optional[str] = None) -> ResolvedTime:
    return ResolvedTime(_clock(hour, minute, second), TimeProvenance.ABSOLUTE)


def _offset(reference: datetime, delta: timedelta) -> ResolvedTime:
    wall = reference.replace(tzinfo=None)
    target = wall + delta
    return ResolvedTime(
        target.time().replace(microsecond=0),
        TimeProvenance.RELATIVE,
        day_offset=(target.date() - wall.date()).days,
        offset=delta,
    )
