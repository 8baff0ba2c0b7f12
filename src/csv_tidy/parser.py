"""CSV text -> Table.

Tokenizing is a small state machine over characters:

    UNQUOTED       ,  ends the field      \\n / \\r\\n  end the record
                   "  -> DOUBLE_QUOTED    '  -> SINGLE_QUOTED (opt-in)
    DOUBLE_QUOTED  "  -> UNQUOTED         everything else is content
    SINGLE_QUOTED  '  -> UNQUOTED         everything else is content

Closing a quote drops back to UNQUOTED inside the *same* field, so
`ab"c,d"ef` is one field and `""` inside a quoted span simply closes and
reopens it. Raw field text keeps its quotes; `finish_field` strips one
enclosing pair afterwards.

A quoted span may only run past a line break when the field starts with
the quote. A stray quote such as `12" pipe` therefore spoils its own line
and nothing else: whenever a record cannot be closed, only its first
physical line is dropped and scanning restarts on the next one.

The header is always the first non-blank physical line.

Lines that do not fit the header are dropped and logged, never raised.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

from .errors import MalformedLineError
from .options import DEFAULT_OPTIONS, ParseOptions
from .table import Row, Table, make_row

logger = logging.getLogger(__name__)

UNQUOTED = "unquoted"
DOUBLE_QUOTED = "double_quoted"
SINGLE_QUOTED = "single_quoted"


@dataclass(frozen=True)
class RawRecord:
    """One record as split from the input, before any field is finished."""
    line_no: int
    text: str
    fields: list[str]
    unterminated: bool = False


@dataclass(frozen=True)
class MalformedLine:
    line_no: int
    text: str
    reason: str


@dataclass(frozen=True)
class ParseReport:
    table: Table
    malformed: list[MalformedLine] = field(default_factory=list)


def _strip_cr(text: str) -> str:
    return text[:-1] if text.endswith("\r") else text


def _scan_record(raw_text: str, start: int, options: ParseOptions) -> tuple[list[str], int, int, bool]:
    """Tokenize one record starting at `start`.

    Returns (fields, end, lines, closed) where `end` is the index of the
    terminating \\n (or len(raw_text)) and `lines` the physical lines spanned.
    """
    state = UNQUOTED
    fields: list[str] = []
    buf: list[str] = []
    quoted_field = False
    newlines = 0
    n = len(raw_text)
    i = start

    while i < n:
        ch = raw_text[i]
        if state != UNQUOTED:
            closer = '"' if state == DOUBLE_QUOTED else "'"
            if ch == "\n":
                if not quoted_field:
                    return fields, i, newlines + 1, False
                newlines += 1
            buf.append(ch)
            if ch == closer:
                state = UNQUOTED
        elif ch == "\n":
            break
        elif ch == ",":
            fields.append("".join(buf))
            buf = []
            quoted_field = False
        elif ch == '"' or (ch == "'" and options.single_quotes):
            if not "".join(buf).strip():
                quoted_field = True
            buf.append(ch)
            state = DOUBLE_QUOTED if ch == '"' else SINGLE_QUOTED
        else:
            buf.append(ch)
        i += 1

    if state != UNQUOTED:
        return fields, i, newlines + 1, False

    # \r of a \r\n terminator is never content
    if i < n and buf and buf[-1] == "\r":
        buf.pop()
    fields.append("".join(buf))
    return fields, i, newlines + 1, True


def split_records(
    raw_text: str,
    options: ParseOptions = DEFAULT_OPTIONS,
    start: int = 0,
    line_no: int = 1,
    expected_fields: Optional[int] = None,
) -> Iterator[RawRecord]:
    """Split raw text into records of raw fields.

    A record that cannot be closed is cut back to its first physical line,
    yielded with `unterminated=True`, and scanning resumes on the next line.
    With `expected_fields` set, a record spanning several lines with the
    wrong field count is cut back the same way.
    """
    n = len(raw_text)
    while start < n:
        fields, end, lines, closed = _scan_record(raw_text, start, options)
        if closed and lines > 1 and expected_fields is not None and len(fields) != expected_fields:
            closed = False

        if not closed:
            nl = raw_text.find("\n", start)
            end = n if nl == -1 else nl
            yield RawRecord(line_no=line_no, text=_strip_cr(raw_text[start:end]), fields=[], unterminated=True)
            start = end + 1
            line_no += 1
            continue

        yield RawRecord(line_no=line_no, text=_strip_cr(raw_text[start:end]), fields=fields)
        start = end + 1
        line_no += lines


def finish_field(raw: str, options: ParseOptions = DEFAULT_OPTIONS) -> str:
    """Trim a raw field and strip one enclosing pair of double quotes."""
    value = raw.strip()
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        value = value[1:-1]
        if options.unescape_quotes:
            value = value.replace('""', '"')
    return value


def _loose_header(raw: str) -> str:
    value = raw.strip()
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def _header_line(raw_text: str) -> tuple[Optional[str], int, int]:
    """First non-blank physical line, its line number, and the offset after it."""
    pos = 0
    line_no = 1
    n = len(raw_text)
    while pos < n:
        nl = raw_text.find("\n", pos)
        end = n if nl == -1 else nl
        text = _strip_cr(raw_text[pos:end])
        if text.strip():
            return text, line_no, end + 1
        pos = end + 1
        line_no += 1
    return None, line_no, n


def parse_header(line: str, options: ParseOptions = DEFAULT_OPTIONS) -> tuple[str, ...]:
    """Split one header line into names.

    Quoted names may contain commas. If the line's quotes do not balance, it
    falls back to a plain comma split with stray edge quotes removed.
    """
    fields, _, _, closed = _scan_record(line, 0, options)
    if closed:
        return tuple(finish_field(f, options) for f in fields)
    logger.warning("header has an unbalanced quote, splitting on every comma: %r", line)
    return tuple(_loose_header(f) for f in line.split(","))


def _row_from_record(rec: RawRecord, headers: tuple[str, ...], options: ParseOptions) -> Row:
    if rec.unterminated:
        raise MalformedLineError("unterminated quoted field")
    if len(rec.fields) != len(headers):
        raise MalformedLineError(f"expected {len(headers)} fields, got {len(rec.fields)}")
    return make_row(headers, [finish_field(f, options) for f in rec.fields])


def parse_report(raw_text: str, options: Optional[ParseOptions] = None) -> ParseReport:
    """Parse CSV text, keeping a diagnostic for every dropped line."""
    opts = options or DEFAULT_OPTIONS
    line, header_no, body_start = _header_line(raw_text)
    if line is None:
        return ParseReport(table=Table(headers=()))

    headers = parse_header(line, opts)
    rows: list[Row] = []
    malformed: list[MalformedLine] = []

    records = split_records(raw_text, opts, start=body_start, line_no=header_no + 1, expected_fields=len(headers))
    for rec in records:
        if not rec.text.strip():
            continue
        try:
            rows.append(_row_from_record(rec, headers, opts))
        except MalformedLineError as ex:
            logger.warning("skipping malformed line %d (%s): %r", rec.line_no, ex, rec.text)
            malformed.append(MalformedLine(line_no=rec.line_no, text=rec.text, reason=str(ex)))

    logger.debug("parsed %d rows, dropped %d malformed lines", len(rows), len(malformed))
    return ParseReport(table=Table(headers=headers, rows=rows), malformed=malformed)


def parse(raw_text: str, options: Optional[ParseOptions] = None) -> Table:
    """Parse CSV text into a Table.

    Never raises for bad input: blank lines are skipped, malformed lines are
    dropped, and text with no data lines gives a Table with zero rows.
    """
    return parse_report(raw_text, options).table
