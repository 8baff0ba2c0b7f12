"""Run configuration for the parser."""

from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class ParseOptions:
    """Knobs for reading a table.

    `single_quotes` lets '...' protect commas and line breaks (the quotes stay
    in the value). Off by default, since RFC 4180 only knows double quotes.

    `unescape_quotes` turns "" into " inside a double-quoted field. Turning it
    off reproduces the older behaviour where doubled quotes survived parsing.
    """
    single_quotes: bool = False
    unescape_quotes: bool = True


DEFAULT_OPTIONS = ParseOptions()
