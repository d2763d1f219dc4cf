"""
converter.py

This module drives a full conversion of an eTrade "All Positions" CSV
export into the flat per-lot table produced by ``writer.py``.  It owns
the three things around the row classifier that a run needs: reading the
raw CSV into trimmed rows, feeding those rows through the state machine
in ``classifier.py``, and handing the collected lots to the writer once
the whole input has been consumed.

The whole input is read before anything is written, so a failure at any
row leaves the output stream untouched.  Diagnostics go through the
standard ``logging`` module on stderr and an in-memory audit log, both
controlled by the ``DEBUG``, ``AUDIT`` and ``LOG_DIR`` environment
variables.
"""

###############################################################################
# Metadata
#
# @file        converter.py
# @brief       Run driver for eTrade position report conversion
#
# Logging is configured once for the whole ``etrade_utils`` package so
# that the classifier and writer loggers share the same handlers.  File
# logging is only enabled when LOG_DIR is set.
###############################################################################

from __future__ import annotations

import csv
import datetime as _dt
import logging
import os
from typing import IO, Iterable, Iterator, List, Optional, Tuple

from .classifier import advance
from .errors import ConversionError, CsvParseError, HeaderRowNotFound
from .models import Lot, ParseState, RunContext
from .writer import write_lots

__all__ = [
    "configure_logging",
    "get_audit_log",
    "clear_audit_log",
    "read_rows",
    "parse_rows",
    "convert_rows",
    "convert_stream",
    "convert_file",
]

_FORMATTER = logging.Formatter(
    fmt="[%(asctime)s] %(levelname)s %(name)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)
_package_logger = logging.getLogger(__package__ or "etrade_utils")


def _setup_file_logging(log_dir: str) -> None:
    # Archive any log left by a previous run, then start a fresh file.
    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError:
        return
    log_file = os.path.join(log_dir, "etrade_converter.log")
    try:
        if os.path.exists(log_file):
            ts = _dt.datetime.now().strftime("%Y%m%d_%H%M%S")
            os.rename(log_file, os.path.join(log_dir, f"etrade_converter_{ts}.log"))
    except OSError:
        pass
    try:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError:
        return
    file_handler.setFormatter(_FORMATTER)
    _package_logger.addHandler(file_handler)


def configure_logging(debug: Optional[bool] = None, log_dir: Optional[str] = None) -> None:
    """Apply logging settings to the package logger.

    Console output always goes to stderr; stdout is reserved for the
    converted table.

    Args:
        debug: Enable DEBUG level.  ``None`` reads the ``DEBUG``
            environment variable.
        log_dir: Directory for a log file.  ``None`` reads ``LOG_DIR``;
            when neither is set no file is written.
    """
    if debug is None:
        debug = os.getenv("DEBUG", "false").lower() == "true"
    if log_dir is None:
        log_dir = os.getenv("LOG_DIR") or None
    _package_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
               for h in _package_logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(_FORMATTER)
        _package_logger.addHandler(console_handler)
    if log_dir and not any(isinstance(h, logging.FileHandler) for h in _package_logger.handlers):
        _setup_file_logging(log_dir)


# Configure the package logger only once.  If handlers are already
# attached (for example, when reloading in an interactive session), this
# setup is skipped to avoid duplicate log entries.
if not _package_logger.handlers:
    configure_logging()

# Global audit log capturing events as tuples of (timestamp, message).
_audit_log: List[Tuple[str, str]] = []


def _audit(message: str) -> None:
    """Record an audit event with the current timestamp.

    The message is also forwarded to the logger at INFO level.  Auditing
    can be disabled by setting the environment variable ``AUDIT`` to
    ``false``.
    """
    if os.getenv("AUDIT", "true").lower() == "true":
        timestamp = _dt.datetime.now().isoformat(timespec="seconds")
        _audit_log.append((timestamp, message))
        logger.info(f"AUDIT: {message}")


def get_audit_log() -> List[Tuple[str, str]]:
    """Return a copy of the audit log as (timestamp, message) tuples.

    The log is shared by every conversion in the process; call
    :func:`clear_audit_log` between runs to keep them apart.
    """
    return list(_audit_log)


def clear_audit_log() -> None:
    _audit_log.clear()


def read_rows(stream: IO[str]) -> Iterator[List[str]]:
    """Tokenise a CSV stream into rows of trimmed cells.

    Rows may have any number of cells and no row is treated as a header.
    Blank lines produce no row at all.

    Args:
        stream: Readable text stream, ideally opened with ``newline=""``.

    Yields:
        Each non-empty row as a list of whitespace-stripped strings.

    Raises:
        CsvParseError: If the CSV framing is malformed.
    """
    reader = csv.reader(stream)
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as exc:
            raise CsvParseError(exc, row_number=reader.line_num) from exc
        if not row:
            continue
        yield [cell.strip() for cell in row]


def parse_rows(rows: Iterable[List[str]]) -> RunContext:
    """Run the row state machine over every row.

    All rows are consumed, including those after the end marker, so that
    the input is fully drained before any output is produced.

    Args:
        rows: Trimmed rows, as produced by :func:`read_rows`.

    Returns:
        The finished run context holding the extracted lots.

    Raises:
        HeaderRowNotFound: If the header marker row never appears.
        ConversionError: On the first malformed row, with ``row_number``
            set.
    """
    context = RunContext()
    row_number = 0
    try:
        for row_number, row in enumerate(rows, start=1):
            previous = context.state
            context.state = advance(previous, row, context)
            if context.state is not previous:
                if context.state is ParseState.IN_DATA:
                    _audit(f"Header row found at row {row_number}")
                elif context.state is ParseState.AFTER_DATA:
                    _audit(f"End of holdings reached at row {row_number}")
    except ConversionError as exc:
        if exc.row_number is None:
            exc.row_number = row_number
        logger.error(f"Conversion failed: {exc}")
        raise
    if context.state is ParseState.SEEKING_HEADER:
        exc = HeaderRowNotFound()
        logger.error(f"Conversion failed: {exc} ({row_number} row(s) read)")
        raise exc
    _audit(f"Extracted {len(context.lots)} lot(s) from {row_number} row(s)")
    return context


def convert_rows(rows: Iterable[List[str]]) -> List[Lot]:
    """Return the lots found in ``rows``, in input order."""
    return list(parse_rows(rows).lots)


def convert_stream(input_stream: IO[str], output_stream: IO[str]) -> List[Lot]:
    """Convert an export read from ``input_stream`` into ``output_stream``.

    Nothing is written unless the entire input converts successfully.

    Args:
        input_stream: Readable text stream containing the eTrade export.
        output_stream: Writable text stream for the converted CSV.

    Returns:
        The lots that were written.
    """
    lots = convert_rows(read_rows(input_stream))
    write_lots(lots, output_stream)
    _audit(f"Wrote {len(lots)} lot(s) to output")
    return lots


def convert_file(input_path: str, output_path: Optional[str] = None) -> List[Lot]:
    """Convert the export at ``input_path``.

    Args:
        input_path: Path to the eTrade CSV export.  A UTF-8 byte order
            mark is tolerated.
        output_path: Destination CSV path.  When omitted the lots are
            returned without writing anything.

    Returns:
        The converted lots.

    Raises:
        FileNotFoundError: If ``input_path`` does not exist.
        ConversionError: If the export cannot be converted.
    """
    if not os.path.isfile(input_path):
        logger.error(f"Input file not found: {input_path}")
        raise FileNotFoundError(f"Input file not found: {input_path}")
    logger.debug(f"Reading eTrade export from {input_path}")
    with open(input_path, "r", encoding="utf-8-sig", newline="") as f:
        lots = convert_rows(read_rows(f))
    if output_path is not None:
        out_dir = os.path.dirname(output_path)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        with open(output_path, "w", encoding="utf-8", newline="") as f:
            write_lots(lots, f)
        _audit(f"Wrote output CSV to {output_path}")
    return lots
