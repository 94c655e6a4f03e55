"""
Date/Time Utilities

Provides natural language date/time recognition and datetime manipulation utilities.
"""

from .span_matcher import Candidate, Span, SpanMatcher, find_spans, select_winner
from .date_parser import DateFamily, DateParser, DateProvenance, ResolvedDate
from .time_parser import ResolvedTime, TimeFamily, TimeParser, TimeProvenance
from .datetime_helpers import (
    add_duration,
    attach_timezone,
    combine,
    days_until_weekday,
    next_weekday,
    previous_weekday,
    weekday_in_week
)

__all__ = [
    "Candidate",
    "Span",
    "SpanMatcher",
    "find_spans",
    "select_winner",
    "DateFamily",
    "DateParser",
    "DateProvenance",
    "ResolvedDate",
    "ResolvedTime",
    "TimeFamily",
    "TimeParser",
    "TimeProvenance",
    "add_duration",
    "attach_timezone",
    "combine",
    "days_until_weekday",
    "next_weekday",
    "previous_weekday",
    "weekday_in_week",
]
