"""
iCalendar (RFC 5545) text encoding

Pure text transformations for the content-line layer:
- TEXT value escaping and unescaping (section 3.3.11)
- parameter value quoting (section 3.2)
- line folding and unfolding at 75 octets (section 3.1)
- serialization of components and calendars, and a small reader for the
  same format

Nothing in here depends on the calendar model; components and calendars are
walked through their ``kind`` / ``properties`` / ``parameters`` attributes.
"""
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from ..base.exceptions import MalformedValueError, MissingPropertyError
from ...utils.logger import setup_logger

logger = setup_logger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

CRLF = "\r\n"
FOLD = CRLF + " "
MAX_LINE_OCTETS = 75

NAME_PATTERN = re.compile(r"^[A-Za-z0-9-]+$")
UNESCAPE_PATTERN = re.compile(r"\\([\\;,nN])")
UNESCAPE_MAP = {'\\': '\\', ';': ';', ',': ',', 'n': '\n', 'N': '\n'}

# Properties whose value type is not TEXT; their values are written verbatim
NON_TEXT_PROPERTIES = frozenset({
    'ATTACH', 'ATTENDEE', 'CALSCALE', 'CATEGORIES', 'COMPLETED', 'CREATED',
    'DTEND', 'DTSTAMP', 'DTSTART', 'DUE', 'DURATION', 'EXDATE', 'EXRULE',
    'FREEBUSY', 'GEO', 'LAST-MODIFIED', 'METHOD', 'ORGANIZER', 'PERCENT-COMPLETE',
    'PRIORITY', 'RDATE', 'RECURRENCE-ID', 'REQUEST-STATUS', 'RESOURCES', 'RRULE',
    'SEQUENCE', 'TRIGGER', 'TZOFFSETFROM', 'TZOFFSETTO', 'TZURL', 'URL', 'VERSION',
})

# Mandatory properties per block, checked when serializing
REQUIRED_PROPERTIES = {
    'VCALENDAR': ('PRODID', 'VERSION'),
    'VEVENT': ('UID', 'DTSTAMP', 'DTSTART'),
    'VTODO': ('UID', 'DTSTAMP'),
}


# ============================================================================
# VALUE ENCODING
# ============================================================================

def is_text_property(name: str, parameters: Sequence[Tuple[str, str]] = ()) -> bool:
    """
    Decide whether a property's value is of type TEXT.

    An explicit ``VALUE`` parameter wins; otherwise the property name decides.
    """
    for key, value in parameters:
        if key.upper() == 'VALUE':
            return value.upper() == 'TEXT'
    return name.upper() not in NON_TEXT_PROPERTIES


def _check_characters(name: str, value: str, allow_newlines: bool) -> None:
    try:
        value.encode('utf-8')
    except UnicodeEncodeError as e:
        raise MalformedValueError(name, value, f"not encodable as UTF-8 ({e.reason})")
    for ch in value:
        code = ord(ch)
        if ch == '\t' or (allow_newlines and ch in '\r\n'):
            continue
        if code < 0x20 or code == 0x7F:
            raise MalformedValueError(name, value, f"control character U+{code:04X}")


def escape_text(value: str, name: str = 'TEXT') -> str:
    """
    Escape a TEXT value.

    Backslash, semicolon and comma get a backslash; line breaks become the
    two characters ``\\n``. Other control characters (except HTAB) cannot be
    represented and raise ``MalformedValueError``.
    """
    _check_characters(name, value, allow_newlines=True)
    value = value.replace('\r\n', '\n').replace('\r', '\n')
    return (
        value.replace('\\', '\\\\')
        .replace(';', '\\;')
        .replace(',', '\\,')
        .replace('\n', '\\n')
    )


def unescape_text(value: str) -> str:
    """Inverse of ``escape_text``."""
    return UNESCAPE_PATTERN.sub(lambda m: UNESCAPE_MAP[m.group(1)], value)


def format_parameter(name: str, value: str) -> str:
    """
    Render ``NAME=value``, quoting values that contain ``:``, ``;`` or ``,``.

    A double quote or control character in a parameter value has no
    representation in RFC 5545.
    """
    if not NAME_PATTERN.match(name):
        raise MalformedValueError(name, value, "invalid parameter name")
    _check_characters(name, value, allow_newlines=False)
    if '"' in value:
        raise MalformedValueError(name, value, "double quote in parameter value")
    if any(ch in value for ch in ':;,'):
        value = f'"{value}"'
    return f"{name.upper()}={value}"


def content_line(name: str, value: str, parameters: Sequence[Tuple[str, str]] = ()) -> str:
    """
    Render one unfolded content line: ``NAME[;PARAM=VALUE...]:value``.
    """
    if not NAME_PATTERN.match(name):
        raise MalformedValueError(name, value, "invalid property name")
    if is_text_property(name, parameters):
        encoded = escape_text(value, name)
    else:
        _check_characters(name, value, allow_newlines=False)
        encoded = value
    params = ''.join(';' + format_parameter(key, val) for key, val in parameters)
    return f"{name.upper()}{params}:{encoded}"


# ============================================================================
# FOLDING
# ============================================================================

def fold_line(line: str, limit: int = MAX_LINE_OCTETS) -> str:
    """
    Fold a content line so no physical line exceeds ``limit`` octets.

    Continuation lines start with a single space, which counts towards the
    limit. Splits never fall inside a multi-byte UTF-8 sequence, so removing
    every ``CRLF + space`` gives back the original line.
    """
    if len(line.encode('utf-8')) <= limit:
        return line

    chunks = []
    current = []
    size = 0
    budget = limit
    for ch in line:
        width = len(ch.encode('utf-8'))
        if size + width > budget:
            chunks.append(''.join(current))
            current = []
            size = 0
            budget = limit - 1
        current.append(ch)
        size += width
    chunks.append(''.join(current))
    return FOLD.join(chunks)


def unfold_lines(text: str) -> List[str]:
    """Join folded continuation lines and split into logical content lines."""
    unfolded = re.sub(r"\r?\n[ \t]", "", text)
    return [line for line in re.split(r"\r?\n", unfolded) if line]


# ============================================================================
# SERIALIZATION
# ============================================================================

def _parameter_pairs(prop) -> List[Tuple[str, str]]:
    return [(param.name, param.value) for param in prop.parameters]


def _check_required(block: str, properties: Iterable) -> None:
    present = {prop.name.upper() for prop in properties}
    for required in REQUIRED_PROPERTIES.get(block, ()):
        if required not in present:
            logger.warning(f"Refusing to serialize {block}: missing {required}")
            raise MissingPropertyError(block, required)


def _property_lines(properties: Iterable) -> List[str]:
    return [
        fold_line(content_line(prop.name, prop.value, _parameter_pairs(prop)))
        for prop in properties
    ]


def serialize_component(component) -> str:
    """
    Serialize a component to ``BEGIN:...`` / ``END:...`` text with CRLF endings.

    Raises:
        MissingPropertyError: a mandatory property for the component kind is absent
        MalformedValueError: a value cannot be encoded
    """
    block = component.kind.value
    _check_required(block, component.properties)
    lines = [f"BEGIN:{block}"]
    lines.extend(_property_lines(component.properties))
    lines.append(f"END:{block}")
    return CRLF.join(lines) + CRLF


def serialize_calendar(calendar) -> str:
    """
    Serialize a calendar and all of its components.

    Raises:
        MissingPropertyError: the calendar or one of its components lacks a
            mandatory property
        MalformedValueError: a value cannot be encoded
    """
    _check_required('VCALENDAR', calendar.properties)
    body = [serialize_component(component) for component in calendar.components]
    head = CRLF.join(["BEGIN:VCALENDAR"] + _property_lines(calendar.properties)) + CRLF
    return head + ''.join(body) + "END:VCALENDAR" + CRLF


# ============================================================================
# READING
# ============================================================================

@dataclass
class ContentBlock:
    """A ``BEGIN:NAME`` ... ``END:NAME`` block read back from text."""
    name: str
    properties: List[Tuple[str, List[Tuple[str, str]], str]] = field(default_factory=list)
    children: List['ContentBlock'] = field(default_factory=list)


def parse_content_line(line: str) -> Tuple[str, List[Tuple[str, str]], str]:
    """
    Split an unfolded content line into name, parameters and value.

    TEXT values come back unescaped; quoted parameter values lose their quotes.
    """
    match = re.match(r"[A-Za-z0-9-]+", line)
    if not match:
        raise MalformedValueError(line, line, "content line without a name")
    name = match.group(0).upper()
    pos = match.end()
    parameters = []

    while pos < len(line) and line[pos] == ';':
        eq = line.find('=', pos)
        if eq == -1:
            raise MalformedValueError(name, line, "parameter without a value")
        key = line[pos + 1:eq].upper()
        pos = eq + 1
        if line.startswith('"', pos):
            close = line.find('"', pos + 1)
            if close == -1:
                raise MalformedValueError(name, line, "unterminated quoted parameter")
            value = line[pos + 1:close]
            pos = close + 1
        else:
            stop = re.compile(r"[;:]").search(line, pos)
            end = stop.start() if stop else len(line)
            value = line[pos:end]
            pos = end
        parameters.append((key, value))

    if pos >= len(line) or line[pos] != ':':
        raise MalformedValueError(name, line, "missing ':' before the value")
    raw = line[pos + 1:]
    value = unescape_text(raw) if is_text_property(name, parameters) else raw
    return name, parameters, value


def parse_calendar(text: str) -> List[ContentBlock]:
    """
    Read iCalendar text into nested ``ContentBlock`` values.

    Returns:
        Top-level blocks, normally a single VCALENDAR
    """
    roots: List[ContentBlock] = []
    stack: List[ContentBlock] = []
    for line in unfold_lines(text):
        name, parameters, value = parse_content_line(line)
        if name == 'BEGIN':
            block = ContentBlock(name=value.upper())
            (stack[-1].children if stack else roots).append(block)
            stack.append(block)
        elif name == 'END':
            if not stack or stack[-1].name != value.upper():
                raise MalformedValueError(name, value, "END without matching BEGIN")
            stack.pop()
        elif stack:
            stack[-1].properties.append((name, parameters, value))
        else:
            raise MalformedValueError(name, value, "property outside of any block")
    if stack:
        raise MalformedValueError('END', stack[-1].name, "block never closed")
    return roots


def find_block(blocks: Sequence[ContentBlock], name: str) -> Optional[ContentBlock]:
    """First block called ``name`` among ``blocks``."""
    for block in blocks:
        if block.name == name.upper():
            return block
    return None
