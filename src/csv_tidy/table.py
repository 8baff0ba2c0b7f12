"""Shared table model.

A table is a fixed header list plus an ordered list of rows:

    headers: ("name", "city")
    rows:    [{"name": "Ada", "city": "London"}, ...]

Design notes:
- Rows are plain dicts keyed by header name, so duplicate header names alias
  (the later column wins for that key).
- Tables are never edited in place; the cleaner builds new ones.
"""

from __future__ import annotations
import json
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple


Row = Dict[str, Optional[str]]


@dataclass(frozen=True)
class Table:
    headers: Tuple[str, ...]
    rows: list[Row] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def with_rows(self, rows: list[Row]) -> "Table":
        """Return a table with the same headers and the given rows."""
        return Table(headers=self.headers, rows=rows)


def make_row(headers: Sequence[str], values: Sequence[str]) -> Row:
    """Zip a header list with one line's values."""
    return dict(zip(headers, values))


def dedup_key(row: Row, headers: Sequence[str]) -> str:
    """Canonical fingerprint of a row's header->value pairs, in header order.

    Header names are part of the key so rows with equal values under
    different key sets never collide.
    """
    pairs = [[h, row.get(h)] for h in headers if h in row]
    return json.dumps(pairs, ensure_ascii=False, separators=(",", ":"))
