"""Command-line interface for csv_tidy.

- reads a CSV from a file or stdin
- drops duplicate rows and rows with empty fields
- writes the result to stdout, a named file, or cleaned_<name> beside the input

Every terminal state has its own exit code so scripts can tell them apart.
"""

from __future__ import annotations
import argparse
import codecs
import logging
import sys
from typing import Optional

from .errors import InputReadError, OutputWriteError, ProcessingError
from .options import ParseOptions
from .pipeline import Outcome, cleaned_name, tidy_text

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PROCESSING = 2
EXIT_READ = 3
EXIT_WRITE = 4
EXIT_EMPTY_AFTER_PARSE = 5
EXIT_EMPTY_AFTER_CLEAN = 6
EXIT_USAGE = 64

_EMPTY_EXITS = {
    Outcome.EMPTY_AFTER_PARSE: (
        EXIT_EMPTY_AFTER_PARSE,
        "CSV file is empty or contains no valid data after initial parsing.",
    ),
    Outcome.EMPTY_AFTER_CLEAN: (
        EXIT_EMPTY_AFTER_CLEAN,
        "No valid data remaining after cleaning.",
    ),
}


def _input_encoding(encoding: str) -> str:
    # utf-8-sig drops the byte-order mark spreadsheet exports start with
    if codecs.lookup(encoding).name == "utf-8":
        return "utf-8-sig"
    return encoding


def _read_text(path: str, encoding: str) -> str:
    try:
        if path == "-":
            return sys.stdin.read().lstrip("\ufeff")
        # newline="" keeps \r\n visible to the parser
        with open(path, "r", encoding=_input_encoding(encoding), newline="") as fh:
            return fh.read()
    except (OSError, UnicodeDecodeError, LookupError) as ex:
        raise InputReadError(f"failed to read {path}: {ex}") from ex


def _write_text(path: Optional[str], text: str, encoding: str) -> None:
    try:
        if path is None or path == "-":
            sys.stdout.write(text)
            sys.stdout.flush()
            return
        with open(path, "w", encoding=encoding, newline="") as fh:
            fh.write(text)
    except (OSError, UnicodeEncodeError, LookupError) as ex:
        raise OutputWriteError(f"failed to write {path or 'stdout'}: {ex}") from ex


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr, force=True)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="csv-tidy",
        description="Drop duplicate rows and rows with empty fields from a CSV file.",
    )
    p.add_argument("path", nargs="?", default="-", help="Input CSV path or '-' for stdin")
    out = p.add_mutually_exclusive_group()
    out.add_argument("-o", "--output", default=None, help="Output path (default: stdout)")
    out.add_argument("--save", action="store_true", help="Write cleaned_<name> next to the input file")
    p.add_argument(
        "--encoding",
        default="utf-8",
        help="Encoding of input and output files; stdin/stdout keep the terminal's (default: utf-8)",
    )
    p.add_argument("--single-quotes", action="store_true", help="Let '...' protect commas like double quotes do")
    p.add_argument("--keep-doubled-quotes", action="store_true", help="Do not turn \"\" into \" inside quoted fields")
    noise = p.add_mutually_exclusive_group()
    noise.add_argument("-v", "--verbose", action="store_true", help="Log debug details")
    noise.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    if args.save and args.path == "-":
        logger.error("--save needs an input file path")
        return EXIT_USAGE

    options = ParseOptions(
        single_quotes=args.single_quotes,
        unescape_quotes=not args.keep_doubled_quotes,
    )

    try:
        raw = _read_text(args.path, args.encoding)
    except InputReadError as ex:
        logger.error("%s", ex)
        return EXIT_READ

    try:
        result = tidy_text(raw, options)
    except ProcessingError as ex:
        logger.error("%s", ex)
        return EXIT_PROCESSING

    if not result.ok:
        code, message = _EMPTY_EXITS[result.outcome]
        logger.error("%s", message)
        return code

    dest = cleaned_name(args.path) if args.save else args.output
    try:
        _write_text(dest, result.text, args.encoding)
    except OutputWriteError as ex:
        logger.error("%s", ex)
        return EXIT_WRITE

    logger.info(
        "kept %d of %d rows (%d duplicates, %d incomplete, %d malformed lines)",
        result.kept_rows,
        result.parsed_rows,
        result.duplicate_rows,
        result.incomplete_rows,
        len(result.malformed),
    )
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
