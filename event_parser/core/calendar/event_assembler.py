"""
Event Assembler - Turns a line of free-form text into a calendar event

Runs the date and time recognizers over the same text, derives the summary
from whatever text neither of them consumed, and merges the two results:

- date only           -> all-day event (a date range spans several days)
- time only           -> the time on the reference date
- offset only         -> the reference instant plus the elapsed offset
- date and time       -> the time on that date
- neither             -> starts at the reference instant
- no explicit end     -> start + default duration (one hour)
- range ending early  -> the range crosses midnight

Assembly is a pure function of the text, the reference instant and the
config; nothing reads the clock once a reference is supplied.
"""
import re
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Union

from ...utils.config import Config
from ...utils.datetime import DateParser, Span, TimeParser, add_duration, combine, select_winner
from ...utils.logger import setup_logger
from .components import Calendar, CalendarDocument, Component, Event, Todo
from .utils import format_event, get_utc_now, reference_now

logger = setup_logger(__name__)

Reference = Union[datetime, date, None]

CONNECTOR_WORDS = re.compile(
    r"(?:(?<![\w'])(?:at|on|in|from|by|for|this|the)\s+|@\s*)+$",
    re.IGNORECASE,
)
SUMMARY_STRIP = " \t,;:-–@."
SEAM = ",;:"


@dataclass(frozen=True)
class ParsedEvent:
    """
    The semantic event.

    Timed events carry ``datetime`` boundaries (aware when the reference was
    aware, floating otherwise). All-day events carry ``date`` boundaries with
    an exclusive ``end``: a single day D runs from D to D + 1.
    """
    summary: str
    start: Union[datetime, date]
    end: Union[datetime, date]
    all_day: bool = False
    text: str = ""

    @property
    def last_day(self) -> date:
        """Last calendar day the event touches."""
        if self.all_day:
            return self.end - timedelta(days=1)
        return self.end.date()

    def to_component(self, uid: Optional[str] = None, stamp: Optional[datetime] = None) -> Component:
        """Build the VEVENT for this event."""
        builder = (Event()
                   .uid(uid or _new_uid())
                   .timestamp(stamp or get_utc_now()))
        if self.summary:
            builder.summary(self.summary)
        if self.all_day:
            builder.all_day(self.start, self.last_day)
        else:
            builder.starts(self.start).ends(self.end)
        return builder.done()

    def to_todo(self, uid: Optional[str] = None, stamp: Optional[datetime] = None) -> Component:
        """Build a VTODO that is due when the event ends."""
        builder = (Todo()
                   .uid(uid or _new_uid())
                   .timestamp(stamp or get_utc_now()))
        if self.summary:
            builder.summary(self.summary)
        if self.all_day:
            builder.start_date(self.start).due(self.last_day)
        else:
            builder.starts(self.start).due(self.end)
        return builder.done()

    def to_calendar(self, config: Optional[Config] = None, uid: Optional[str] = None,
                    stamp: Optional[datetime] = None) -> CalendarDocument:
        """Wrap the VEVENT in a calendar."""
        config = config or Config()
        return Calendar(config.calendar).push(self.to_component(uid, stamp)).done()

    def __str__(self) -> str:
        return format_event(self)


def to_event(text: str, reference: Reference = None, config: Optional[Config] = None) -> ParsedEvent:
    """
    Parse ``text`` into a ``ParsedEvent``.

    Args:
        text: Free-form text such as "Lunch at 12pm on 6/15"
        reference: Instant that relative expressions resolve against. A
            ``date`` means midnight of that day; None means now in the
            configured timezone.
        config: Optional config (default duration, bare hour rule, timezone)

    Returns:
        The assembled event. Unrecognized text is not an error: it becomes a
        one-hour event starting at the reference instant.
    """
    config = config or Config()
    text = text or ""
    reference = _reference_instant(reference, config)
    tz = reference.tzinfo
    duration = timedelta(minutes=config.parser.default_duration_minutes)

    date_match, time_match = _recognize(text, reference, config)
    spans = [match.span for match in (date_match, time_match) if match]
    title = summary(text, spans)

    resolved_date = date_match.value if date_match else None
    resolved_time = time_match.value if time_match else None

    if resolved_date and not resolved_time:
        last = resolved_date.end or resolved_date.date
        event = ParsedEvent(title, resolved_date.date, last + timedelta(days=1), all_day=True, text=text)
    elif resolved_time and resolved_time.offset is not None and not resolved_date:
        # "in 1 hour" is elapsed time, not a wall clock reading
        start = add_duration(reference, resolved_time.offset)
        event = ParsedEvent(title, start, add_duration(start, duration), text=text)
    elif resolved_time:
        if resolved_date:
            first, last = resolved_date.date, resolved_date.end or resolved_date.date
        else:
            first = last = reference.date() + timedelta(days=resolved_time.day_offset)
        start = combine(first, resolved_time.start, tz)
        end = _timed_end(start, first, last, resolved_time.start, resolved_time.end, duration, tz)
        event = ParsedEvent(title, start, end, text=text)
    else:
        event = ParsedEvent(title, reference, add_duration(reference, duration), text=text)

    logger.debug(
        f"Parsed '{text}' -> summary='{event.summary}' start={event.start} "
        f"end={event.end} all_day={event.all_day}"
    )
    return event


def summary(text: str, spans: Optional[Iterable[Span]] = None, reference: Reference = None) -> str:
    """
    The text left over once recognized date and time spans are removed.

    Connector words directly in front of a span ("at", "on", "the" ...) go
    with it. The remaining pieces are joined by a single space where a span
    was cut out, and punctuation is trimmed from both ends; whitespace inside
    the kept text is left alone. When ``spans`` is None the recognizers are
    run on ``text`` first.
    """
    text = text or ""
    if spans is None:
        config = Config()
        found = _recognize(text, _reference_instant(reference, config), config)
        spans = [match.span for match in found if match]

    pieces: List[str] = []
    cursor = 0
    for span in sorted(spans, key=lambda s: (s.start, s.end)):
        if span.start < cursor:
            cursor = max(cursor, span.end)
            continue
        segment = text[cursor:span.start]
        connector = CONNECTOR_WORDS.search(segment)
        if connector:
            segment = segment[:connector.start()]
        pieces.append(segment)
        cursor = span.end
    pieces.append(text[cursor:])

    residual = ""
    for piece in pieces:
        right = piece.lstrip()
        if not right.strip():
            continue
        left = residual.rstrip()
        if not left:
            residual = right
        elif left[-1] in SEAM and right[0] in SEAM:
            # "Review, tomorrow, with Sam" keeps one comma
            right = right.lstrip(SEAM + " \t")
            residual = f"{left} {right}" if right else left
        elif right[0] in SEAM:
            residual = left + right
        else:
            residual = f"{left} {right}"
    return residual.strip(SUMMARY_STRIP)


def _recognize(text: str, reference: datetime, config: Config):
    """
    Run both recognizers over ``text``.

    A time may only come from text outside the winning date, so the "5" in
    "June 5 - 7pm" or "3-5 June" is never read as an hour.
    """
    date_match = DateParser.recognize(text, reference.date())
    date_span = date_match.span if date_match else None
    candidates = [
        candidate for candidate in TimeParser(config).candidates(text, reference)
        if not (date_span and candidate.span.start < date_span.end and date_span.start < candidate.span.end)
    ]
    time_match = select_winner(candidates)
    if time_match:
        logger.debug(f"Time '{time_match.span.text}' ({time_match.span.tag}) -> {time_match.value.start}")
    return date_match, time_match


def _timed_end(start: datetime, first: date, last: date, clock: time,
               clock_end: Optional[time], duration: timedelta, tz) -> datetime:
    if clock_end is None:
        if last == first:
            return add_duration(start, duration)
        return add_duration(combine(last, clock, tz), duration)
    end_day = last + timedelta(days=1) if clock_end < clock else last
    return combine(end_day, clock_end, tz)


def _reference_instant(reference: Reference, config: Config) -> datetime:
    if reference is None:
        return reference_now(config)
    if isinstance(reference, datetime):
        return reference
    return datetime.combine(reference, time(0, 0))


def _new_uid() -> str:
    return f"{uuid.uuid4()}@event-parser"
