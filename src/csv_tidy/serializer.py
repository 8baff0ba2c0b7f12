"""Table -> CSV text."""

from __future__ import annotations
from typing import Any

from .table import Table

# Headers are quoted more eagerly than values: a space is enough.
_HEADER_SPECIALS = (",", '"', "\n", "\r", " ")
_VALUE_SPECIALS = (",", '"', "\r", "\n")


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def quote_header(name: str) -> str:
    if any(c in name for c in _HEADER_SPECIALS):
        return _quote(name)
    return name


def quote_value(value: Any) -> str:
    """Render one field; None is an empty field."""
    text = "" if value is None else str(value)
    if any(c in text for c in _VALUE_SPECIALS):
        return _quote(text)
    return text


def serialize(table: Table) -> str:
    """Render a Table as CSV, lines joined by \\n, no trailing newline."""
    lines = [",".join(quote_header(h) for h in table.headers)]
    for row in table.rows:
        lines.append(",".join(quote_value(row.get(h)) for h in table.headers))
    return "\n".join(lines)
