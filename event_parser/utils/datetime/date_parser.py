"""
Date Parser - Recognizes calendar dates in free-form English text

Handles expressions like:
- "6/15", "12/15/19", "2021-06-15", "9/1-9/8"
- "June 5th", "Jun 15, 2021", "5 June", "June 3-5", "3rd to 5th of June"
- "today", "tomorrow", "yesterday", "the day after tomorrow"
- "Friday", "next Friday", "this Monday", "last wed"
- "in 3 days", "in 2 weeks", "next month"

Every expression is resolved against an explicit reference date, so the
same text and reference always give the same answer.
"""
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum, IntEnum
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from ..logger import setup_logger
from .datetime_helpers import next_weekday, previous_weekday, weekday_in_week
from .span_matcher import Candidate, Span, SpanMatcher, select_winner

logger = setup_logger(__name__)


MONTH_PATTERN = (
    r"(?P<month>jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?"
    r"|aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)
WEEKDAY_PATTERN = (
    r"(?P<day>mon(?:day)?|tue(?:s(?:day)?)?|wed(?:nesday)?|thu(?:r(?:s(?:day)?)?)?"
    r"|fri(?:day)?|sat(?:urday)?|sun(?:day)?)"
)
ORDINAL_SUFFIX = r"(?:st|nd|rd|th)?"
RANGE_CONNECTOR = r"\s*(?:-|–|to|through|thru|until)\s*"


class DateFamily(IntEnum):
    """Date pattern families, most specific first."""
    ABSOLUTE = 1
    MONTH_NAME = 2
    NAMED_RELATIVE = 3
    WEEKDAY = 4
    RELATIVE_OFFSET = 5


class DateProvenance(Enum):
    """How a resolved date was obtained."""
    ABSOLUTE = "absolute"          # a literal calendar date
    RELATIVE_DAY = "relative_day"  # today / tomorrow / yesterday
    WEEKDAY = "weekday"            # a weekday projected from the reference
    OFFSET = "offset"              # "in 3 days", "next month"


@dataclass(frozen=True)
class ResolvedDate:
    """A calendar date, optionally the first day of an inclusive date range."""
    date: date
    provenance: DateProvenance
    end: Optional[date] = None

    @property
    def is_range(self) -> bool:
        return self.end is not None


class DateParser:
    """
    Date recognizer built on ``SpanMatcher``.

    Each pattern tag belongs to exactly one ``DateFamily``; when several
    spans match, the earliest one wins and ties go to the more specific
    family.
    """

    MONTH_NAMES = {
        'jan': 1, 'feb': 2, 'mar': 3, 'apr': 4, 'may': 5, 'jun': 6,
        'jul': 7, 'aug': 8, 'sep': 9, 'oct': 10, 'nov': 11, 'dec': 12,
    }

    DAY_NAMES = {
        'mon': 0, 'tue': 1, 'wed': 2, 'thu': 3, 'fri': 4, 'sat': 5, 'sun': 6,
    }

    RELATIVE_DAYS = {
        'yesterday': -1,
        'today': 0,
        'tomorrow': 1,
        'tmrw': 1,
        'tmr': 1,
    }

    PATTERNS = [
        ('numeric_range',
         r"(?<![\d/])(?P<m1>\d{1,2})/(?P<d1>\d{1,2})(?:/(?P<y1>\d{4}|\d{2}))?"
         + RANGE_CONNECTOR +
         r"(?P<m2>\d{1,2})/(?P<d2>\d{1,2})(?:/(?P<y2>\d{4}|\d{2}))?(?![\d/])"),
        ('iso', r"(?<![\d-])(?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})(?![\d-])"),
        ('numeric', r"(?<![\d/])(?P<month>\d{1,2})/(?P<day>\d{1,2})(?:/(?P<year>\d{4}|\d{2}))?(?![\d/])"),
        ('month_day_range',
         r"\b" + MONTH_PATTERN + r"\.?\s+(?P<d1>\d{1,2})" + ORDINAL_SUFFIX
         + RANGE_CONNECTOR + r"(?P<day>\d{1,2})" + ORDINAL_SUFFIX
         + r"\b(?!\s*(?:[ap]\.?m\.?(?![a-z])|:))(?:,?\s+(?P<year>\d{4})\b)?"),
        ('day_month_range',
         r"(?<![\d/:])\b(?P<d1>\d{1,2})" + ORDINAL_SUFFIX + RANGE_CONNECTOR
         + r"(?P<day>\d{1,2})" + ORDINAL_SUFFIX + r"\s+(?:of\s+)?" + MONTH_PATTERN
         + r"\b\.?(?:,?\s+(?P<year>\d{4})\b)?"),
        ('month_day',
         r"\b" + MONTH_PATTERN + r"\.?\s+(?P<day>\d{1,2})" + ORDINAL_SUFFIX
         + r"\b(?:,?\s+(?P<year>\d{4})\b)?"),
        ('day_month',
         r"\b(?P<day>\d{1,2})" + ORDINAL_SUFFIX + r"\s+(?:of\s+)?" + MONTH_PATTERN
         + r"\b\.?(?:,?\s+(?P<year>\d{4})\b)?"),
        ('day_after_tomorrow', r"\b(?:the\s+)?day\s+after\s+tomorrow\b"),
        ('named_day', r"\b(?P<word>today|tomorrow|tmrw|tmr|yesterday)\b"),
        ('qualified_weekday', r"\b(?P<prep>next|this|last|coming)\s+" + WEEKDAY_PATTERN + r"\b"),
        ('weekday', r"\b" + WEEKDAY_PATTERN + r"\b"),
        ('in_n_units', r"\bin\s+(?P<num>\d{1,3}|an?|one)\s+(?P<unit>days?|weeks?|months?)\b"),
        ('relative_month', r"\b(?P<prep>next|this|last)\s+month\b"),
        ('relative_week', r"\b(?P<prep>next|last)\s+week\b"),
    ]

    FAMILIES = {
        'numeric_range': DateFamily.ABSOLUTE,
        'iso': DateFamily.ABSOLUTE,
        'numeric': DateFamily.ABSOLUTE,
        'month_day_range': DateFamily.MONTH_NAME,
        'day_month_range': DateFamily.MONTH_NAME,
        'month_day': DateFamily.MONTH_NAME,
        'day_month': DateFamily.MONTH_NAME,
        'day_after_tomorrow': DateFamily.NAMED_RELATIVE,
        'named_day': DateFamily.NAMED_RELATIVE,
        'qualified_weekday': DateFamily.WEEKDAY,
        'weekday': DateFamily.WEEKDAY,
        'in_n_units': DateFamily.RELATIVE_OFFSET,
        'relative_month': DateFamily.RELATIVE_OFFSET,
        'relative_week': DateFamily.RELATIVE_OFFSET,
    }

    @classmethod
    def parse(cls, text: str) -> Optional[date]:
        """Parse ``text`` relative to the current local date."""
        return cls.parse_relative(text, date.today())

    @classmethod
    def parse_relative(cls, text: str, reference: date) -> Optional[date]:
        """
        Parse ``text`` relative to ``reference``.

        Returns:
            The recognized date, or None when the text holds no date
        """
        candidate = cls.recognize(text, reference)
        return candidate.value.date if candidate else None

    @classmethod
    def recognize(cls, text: str, reference: Optional[date] = None) -> Optional[Candidate]:
        """
        Find the winning date candidate in ``text``.

        Args:
            text: Free-form text
            reference: Date that relative expressions are resolved against
                (defaults to today)

        Returns:
            Candidate whose ``value`` is a ``ResolvedDate`` and whose span is
            the consumed text, or None if no date was found
        """
        if reference is None:
            reference = date.today()
        candidates = cls.candidates(text, reference)
        winner = select_winner(candidates)
        if winner:
            logger.debug(
                f"Date '{winner.span.text}' ({winner.span.tag}) -> {winner.value.date} "
                f"out of {len(candidates)} candidate(s)"
            )
        return winner

    @classmethod
    def candidates(cls, text: str, reference: date) -> List[Candidate]:
        """All resolvable date candidates in document order."""
        found = []
        for span in SpanMatcher(text, cls.PATTERNS):
            resolved = cls._resolve(span, reference)
            if resolved is not None:
                found.append(Candidate(span=span, family=cls.FAMILIES[span.tag], value=resolved))
        return found

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    @classmethod
    def _resolve(cls, span: Span, reference: date) -> Optional[ResolvedDate]:
        tag = span.tag
        try:
            if tag == 'numeric_range':
                return cls._resolve_numeric_range(span, reference)
            if tag in ('iso', 'numeric'):
                day = cls._build_date(span.group('year'), span.group('month'), span.group('day'), reference)
                return ResolvedDate(day, DateProvenance.ABSOLUTE)
            if tag in ('month_day_range', 'day_month_range'):
                return cls._resolve_month_range(span, reference)
            if tag in ('month_day', 'day_month'):
                month = cls.MONTH_NAMES[span.group('month')[:3].lower()]
                day = cls._build_date(span.group('year'), month, span.group('day'), reference)
                return ResolvedDate(day, DateProvenance.ABSOLUTE)
            if tag == 'day_after_tomorrow':
                return ResolvedDate(reference + timedelta(days=2), DateProvenance.RELATIVE_DAY)
            if tag == 'named_day':
                offset = cls.RELATIVE_DAYS[span.group('word').lower()]
                return ResolvedDate(reference + timedelta(days=offset), DateProvenance.RELATIVE_DAY)
            if tag in ('qualified_weekday', 'weekday'):
                return ResolvedDate(cls._resolve_weekday(span, reference), DateProvenance.WEEKDAY)
            if tag == 'in_n_units':
                return ResolvedDate(cls._resolve_in_n_units(span, reference), DateProvenance.OFFSET)
            if tag == 'relative_month':
                months = cls._direction(span.group('prep'))
                return ResolvedDate(reference + relativedelta(months=months), DateProvenance.OFFSET)
            if tag == 'relative_week':
                weeks = cls._direction(span.group('prep'))
                return ResolvedDate(reference + timedelta(weeks=weeks), DateProvenance.OFFSET)
        except ValueError as e:
            # e.g. "13/45" or "Feb 30" - shaped like a date but not one
            logger.debug(f"Discarding date candidate '{span.text}': {e}")
            return None
        return None

    @classmethod
    def _resolve_numeric_range(cls, span: Span, reference: date) -> ResolvedDate:
        start = cls._build_date(span.group('y1'), span.group('m1'), span.group('d1'), reference)
        end_year = span.group('y2') or span.group('y1')
        end = cls._build_date(end_year, span.group('m2'), span.group('d2'), reference)
        if end < start and not span.group('y2'):
            # "12/28-1/3" runs into the next year
            end = end.replace(year=end.year + 1)
        if end < start:
            raise ValueError(f"range ends before it starts: {start} > {end}")
        return ResolvedDate(start, DateProvenance.ABSOLUTE, end=end)

    @classmethod
    def _resolve_month_range(cls, span: Span, reference: date) -> ResolvedDate:
        month = cls.MONTH_NAMES[span.group('month')[:3].lower()]
        start = cls._build_date(span.group('year'), month, span.group('d1'), reference)
        end = cls._build_date(span.group('year'), month, span.group('day'), reference)
        if end < start:
            raise ValueError(f"range ends before it starts: {start} > {end}")
        return ResolvedDate(start, DateProvenance.ABSOLUTE, end=end)

    @classmethod
    def _resolve_weekday(cls, span: Span, reference: date) -> date:
        weekday = cls.DAY_NAMES[span.group('day')[:3].lower()]
        prep = (span.group('prep') or '').lower()
        if prep == 'this':
            return weekday_in_week(reference, weekday)
        if prep == 'last':
            return previous_weekday(reference, weekday)
        # bare weekday, "next" and "coming" all mean the nearest future one
        return next_weekday(reference, weekday)

    @classmethod
    def _resolve_in_n_units(cls, span: Span, reference: date) -> date:
        raw = span.group('num').lower()
        num = 1 if raw in ('a', 'an', 'one') else int(raw)
        unit = span.group('unit').lower()
        if unit.startswith('day'):
            return reference + timedelta(days=num)
        if unit.startswith('week'):
            return reference + timedelta(weeks=num)
        return reference + relativedelta(months=num)

    @staticmethod
    def _direction(prep: str) -> int:
        return {'next': 1, 'this': 0, 'last': -1}[prep.lower()]

    @staticmethod
    def _build_date(year, month, day, reference: date) -> date:
        if year is None:
            year_num = reference.year
        else:
            year_num = int(year)
            if len(str(year)) == 2:
                year_num += 2000
        return date(year_num, int(month), int(day))
