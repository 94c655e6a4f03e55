"""
Span Matcher - Ordered regex search over a set of tagged patterns

Both recognizers describe their grammar as a list of ``(tag, pattern)``
pairs. ``SpanMatcher`` runs every pattern over the text and yields the
matches as ``Span`` values in document order. Each pattern's own matches
never overlap (``re.finditer`` semantics); matches from different patterns
may, and choosing between them is left to ``select_winner``.
"""
import heapq
import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

PatternSet = Sequence[Tuple[str, Union[str, re.Pattern]]]


@dataclass(frozen=True)
class Span:
    """A single pattern match: [start, end) offsets, pattern tag and captures."""
    start: int
    end: int
    tag: str
    text: str
    groups: Tuple[Tuple[str, Optional[str]], ...]  # (name, capture) pairs
    order: int = 0  # position of the pattern inside its set

    def group(self, name: str) -> Optional[str]:
        for key, value in self.groups:
            if key == name:
                return value
        return None

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class Candidate:
    """
    A recognizer's interpretation of a span.

    ``family`` is the recognizer's pattern family (an ``IntEnum`` whose value
    is its specificity rank, lower is more specific) and ``value`` carries the
    resolved payload: a date, a time, a range or an offset.
    """
    span: Span
    family: IntEnum
    value: Any

    @property
    def start(self) -> int:
        return self.span.start

    @property
    def end(self) -> int:
        return self.span.end


class SpanMatcher:
    """
    Lazy, restartable iteration over all matches of a pattern set.

    Example:
        >>> matcher = SpanMatcher("lunch at 12pm", [("clock", r"\\d+pm")])
        >>> [s.text for s in matcher]
        ['12pm']
    """

    def __init__(self, text: str, patterns: PatternSet, flags: int = re.IGNORECASE):
        self.text = text or ""
        self.patterns: List[Tuple[str, re.Pattern]] = [
            (tag, pattern if isinstance(pattern, re.Pattern) else re.compile(pattern, flags))
            for tag, pattern in patterns
        ]

    def __iter__(self) -> Iterator[Span]:
        streams = [
            self._search(order, tag, pattern)
            for order, (tag, pattern) in enumerate(self.patterns)
        ]
        return heapq.merge(*streams, key=lambda span: (span.start, span.order))

    def _search(self, order: int, tag: str, pattern: re.Pattern) -> Iterator[Span]:
        for match in pattern.finditer(self.text):
            if match.end() == match.start():
                continue
            yield Span(
                start=match.start(),
                end=match.end(),
                tag=tag,
                text=match.group(0),
                groups=tuple(match.groupdict().items()),
                order=order,
            )


def find_spans(text: str, patterns: PatternSet) -> List[Span]:
    """Return every match of ``patterns`` in ``text`` in document order."""
    return list(SpanMatcher(text, patterns))


def select_winner(candidates: Iterable[Candidate]) -> Optional[Candidate]:
    """
    Pick one candidate out of competing interpretations.

    Earliest start wins. On the same start the more specific family wins,
    then the longer span.
    """
    best = None
    best_key = None
    for candidate in candidates:
        key = (candidate.start, int(candidate.family), -len(candidate.span))
        if best_key is None or key < best_key:
            best, best_key = candidate, key
    return best
