"""Table cleaning passes.

A pass takes a Table and returns a new Table with some rows removed.
Passes never add or edit rows, and `clean` runs them in a fixed order:

- drop_duplicates: exact duplicates collapse to one row
- drop_incomplete: rows with any empty field go away
"""

from __future__ import annotations
import logging
from typing import Callable, Sequence

from .table import Row, Table, dedup_key

logger = logging.getLogger(__name__)


Pass = Callable[[Table], Table]


def drop_duplicates(table: Table) -> Table:
    """Keep one row per distinct content.

    The survivor sits where the content was first seen but is the *last*
    row carrying it (dict keeps insertion order, assignment overwrites).
    """
    unique: dict[str, Row] = {}
    for row in table.rows:
        unique[dedup_key(row, table.headers)] = row
    return table.with_rows(list(unique.values()))


def is_complete(row: Row, headers: Sequence[str]) -> bool:
    """True when every header holds a non-blank value."""
    for h in headers:
        value = row.get(h)
        if value is None or not str(value).strip():
            return False
    return True


def drop_incomplete(table: Table) -> Table:
    """Drop rows with a missing, empty, or whitespace-only field."""
    return table.with_rows([r for r in table.rows if is_complete(r, table.headers)])


CLEAN_PASSES: tuple[Pass, ...] = (drop_duplicates, drop_incomplete)


def clean_report(table: Table, passes: Sequence[Pass] = CLEAN_PASSES) -> tuple[Table, dict[str, int]]:
    """Apply cleaning passes in order, counting the rows each one removed."""
    cur = table
    removed: dict[str, int] = {}
    for p in passes:
        before = len(cur)
        cur = p(cur)
        removed[p.__name__] = before - len(cur)
        logger.debug("%s removed %d rows", p.__name__, removed[p.__name__])
    return cur, removed


def clean(table: Table, passes: Sequence[Pass] = CLEAN_PASSES) -> Table:
    """Apply cleaning passes in order."""
    return clean_report(table, passes)[0]
