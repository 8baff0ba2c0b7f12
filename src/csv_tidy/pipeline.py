"""Tidy pipeline.

Pipeline shape:
- parse text -> table (malformed lines dropped and reported)
- drop duplicate rows, then rows with empty fields
- serialize table -> text

Running out of rows is an outcome, not an error: callers get a TidyResult
saying at which stage the table became empty. Only failures the pipeline
cannot explain are raised, as ProcessingError.
"""

from __future__ import annotations
import enum
import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from .cleaner import clean_report
from .errors import ProcessingError, TidyError
from .options import ParseOptions
from .parser import MalformedLine, parse_report
from .serializer import serialize

logger = logging.getLogger(__name__)


class Outcome(enum.Enum):
    SUCCESS = "success"
    EMPTY_AFTER_PARSE = "empty_after_parse"
    EMPTY_AFTER_CLEAN = "empty_after_clean"


@dataclass(frozen=True)
class TidyResult:
    outcome: Outcome
    text: Optional[str] = None
    parsed_rows: int = 0
    kept_rows: int = 0
    duplicate_rows: int = 0
    incomplete_rows: int = 0
    malformed: list[MalformedLine] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS


def _run(raw_text: str, options: Optional[ParseOptions]) -> TidyResult:
    report = parse_report(raw_text, options)
    table = report.table
    if not table.rows:
        return TidyResult(Outcome.EMPTY_AFTER_PARSE, malformed=report.malformed)

    cleaned, removed = clean_report(table)
    counts = dict(
        parsed_rows=len(table),
        kept_rows=len(cleaned),
        duplicate_rows=removed.get("drop_duplicates", 0),
        incomplete_rows=removed.get("drop_incomplete", 0),
        malformed=report.malformed,
    )
    if not cleaned.rows:
        return TidyResult(Outcome.EMPTY_AFTER_CLEAN, **counts)

    return TidyResult(Outcome.SUCCESS, text=serialize(cleaned), **counts)


def tidy_text(raw_text: str, options: Optional[ParseOptions] = None) -> TidyResult:
    """Parse, clean and re-serialize one CSV text.

    Raises:
        ProcessingError: on any unexpected failure inside the pipeline.
    """
    try:
        result = _run(raw_text, options)
    except TidyError:
        raise
    except Exception as ex:
        raise ProcessingError(f"error processing CSV: {ex}") from ex

    logger.debug("tidy outcome: %s", result.outcome.value)
    return result


def cleaned_name(path: str) -> str:
    """Suggested output path for an input file: cleaned_<name> beside it."""
    head, tail = os.path.split(path)
    return os.path.join(head, f"cleaned_{tail}")
