"""Errors raised by the tidy pipeline and its command-line wrapper."""

class TidyError(Exception):
    """Base error for this package."""


class InputReadError(TidyError):
    """Raised when the raw input text cannot be obtained."""


class OutputWriteError(TidyError):
    """Raised when the cleaned text cannot be delivered."""


class MalformedLineError(TidyError):
    """Raised for a data line that cannot become a row.

    The parser catches this itself; it never escapes ``parse``.
    """


class ProcessingError(TidyError):
    """Raised when parse/clean/serialize fails for any other reason."""
