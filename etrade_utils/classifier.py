"""
classifier.py

Row classification and lot extraction for eTrade position exports.

An eTrade "All Positions" export has no structural markers separating its
banner, holdings and cash sections.  The rules used here are purely
content based:

* the data region starts at the row whose first two cells read
  ``Symbol`` and ``Last Price $``;
* it ends at the row whose first cell reads ``CASH``;
* inside the region, a row whose first cell parses as a ``MM/DD/YYYY``
  date is a lot row, and any other row is a per-stock summary row that
  names the ticker for the lot rows that follow it.

The literal strings and field positions are kept as module constants so
that a change in the export layout only touches this block.
"""

from __future__ import annotations

import datetime as _dt
import enum
import logging
from typing import List, Optional, Sequence

from .errors import MissingField, ParseFloatError
from .models import Lot, ParseState, RunContext

__all__ = [
    "HEADER_SYMBOL_LABEL",
    "HEADER_LAST_PRICE_LABEL",
    "END_MARKER",
    "DATE_FORMAT",
    "RowKind",
    "is_header_row",
    "parse_lot_date",
    "parse_float",
    "classify_row",
    "extract_lot",
    "handle_data_record",
    "advance",
]

logger = logging.getLogger(__name__)

# -------------------------------------------------------------------------
# Export layout
#
HEADER_SYMBOL_LABEL = "Symbol"
HEADER_LAST_PRICE_LABEL = "Last Price $"
END_MARKER = "CASH"
DATE_FORMAT = "%m/%d/%Y"

DATE_INDEX = 0
QUANTITY_INDEX = 4
PRICE_PAID_INDEX = 5
TOTAL_GAIN_INDEX = 7
TOTAL_VALUE_INDEX = 9


class RowKind(enum.Enum):
    """What a row inside the data region represents."""

    END_MARKER = "end_marker"
    LOT = "lot"
    SUMMARY = "summary"


def is_header_row(row: Sequence[str]) -> bool:
    """Return True if ``row`` is the header marker row.

    Rows with fewer than two cells never match.
    """
    if len(row) < 2:
        return False
    return (
        row[0].strip() == HEADER_SYMBOL_LABEL
        and row[1].strip() == HEADER_LAST_PRICE_LABEL
    )


def parse_lot_date(text: str) -> Optional[_dt.date]:
    """Parse a month/day/year purchase date.

    Month and day may or may not be zero padded; the year must have four
    digits.  A cell that is not such a date returns ``None`` rather than
    raising, since that is how summary rows are told apart from lot rows.

    Args:
        text: Cell text to inspect.

    Returns:
        The parsed date, or ``None`` when ``text`` is not a date.
    """
    try:
        return _dt.datetime.strptime(text.strip(), DATE_FORMAT).date()
    except ValueError:
        return None


def parse_float(text: str, field: Optional[str] = None) -> float:
    """Parse a numeric cell.

    Empty or malformed text is an error; it is never defaulted to zero.
    Digit-group underscores (``1_000``), which ``float()`` would accept,
    are rejected too.

    Args:
        text: Cell text.
        field: Optional name of the output column, used in the error
            message.

    Returns:
        The value as a float.

    Raises:
        ParseFloatError: If ``text`` is not a number.
    """
    if "_" in text:
        raise ParseFloatError(text, field)
    try:
        return float(text.strip())
    except ValueError as exc:
        raise ParseFloatError(text, field) from exc


def classify_row(row: Sequence[str]) -> RowKind:
    """Decide what a row inside the data region is.

    Raises:
        MissingField: If the row has no cells at all.
    """
    if len(row) == 0:
        raise MissingField(0)
    first = row[0].strip()
    if first == END_MARKER:
        return RowKind.END_MARKER
    if parse_lot_date(first) is not None:
        return RowKind.LOT
    return RowKind.SUMMARY


def _field(row: Sequence[str], index: int) -> str:
    # Short rows yield an empty string here, which the numeric parse
    # then rejects.
    if index < len(row):
        return row[index].strip()
    return ""


def extract_lot(row: Sequence[str], symbol: str) -> Lot:
    """Build a ``Lot`` from a lot row.

    Field positions (0-based): 0 purchase date, 4 quantity, 5 price paid,
    7 total gain, 9 total value.  Total paid is derived by the ``Lot``
    itself and is not read from the row.

    Args:
        row: Cells of a row already classified as ``RowKind.LOT``.
        symbol: Ticker inherited from the latest summary row.

    Returns:
        The extracted lot.

    Raises:
        MissingField: If the row has no cells.
        ParseFloatError: If any numeric cell is malformed or absent.
        ValueError: If the first cell is not a purchase date.
    """
    if len(row) == 0:
        raise MissingField(DATE_INDEX)
    date_text = _field(row, DATE_INDEX)
    purchase_date = parse_lot_date(date_text)
    if purchase_date is None:
        # Only reachable when called directly on a non-lot row.
        raise ValueError(f"Not a lot row: first field {date_text!r} is not a date")
    return Lot(
        symbol=symbol,
        purchase_date=purchase_date,
        quantity=parse_float(_field(row, QUANTITY_INDEX), "Quantity"),
        price_paid=parse_float(_field(row, PRICE_PAID_INDEX), "Price Paid"),
        total_gain=parse_float(_field(row, TOTAL_GAIN_INDEX), "Total Gain"),
        total_value=parse_float(_field(row, TOTAL_VALUE_INDEX), "Total Value"),
    )


def handle_data_record(row: Sequence[str], context: RunContext) -> ParseState:
    """Process one row while inside the data region.

    Appends a lot for lot rows and updates ``context.current_symbol`` for
    summary rows.

    Returns:
        ``ParseState.AFTER_DATA`` for the end-marker row, otherwise
        ``ParseState.IN_DATA``.
    """
    kind = classify_row(row)
    if kind is RowKind.END_MARKER:
        logger.debug(f"End marker {END_MARKER!r} reached after {len(context.lots)} lot(s)")
        return ParseState.AFTER_DATA
    if kind is RowKind.LOT:
        lot = extract_lot(row, context.current_symbol)
        context.lots.append(lot)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Lot row: {lot}")
        return ParseState.IN_DATA
    context.current_symbol = row[0].strip()
    logger.debug(f"Summary row: current symbol is now {context.current_symbol!r}")
    return ParseState.IN_DATA


def advance(state: ParseState, row: List[str], context: RunContext) -> ParseState:
    """Feed one row to the state machine and return the next state.

    ``SEEKING_HEADER`` discards rows until the header marker row,
    ``IN_DATA`` hands rows to :func:`handle_data_record` and
    ``AFTER_DATA`` discards everything.

    Args:
        state: Current state of the run.
        row: Trimmed cells of the next input row.
        context: Run state; may gain a lot or a new current symbol.

    Returns:
        The state after consuming ``row``.
    """
    if state is ParseState.SEEKING_HEADER:
        if is_header_row(row):
            logger.debug("Header row found")
            return ParseState.IN_DATA
        return ParseState.SEEKING_HEADER
    if state is ParseState.IN_DATA:
        return handle_data_record(row, context)
    return ParseState.AFTER_DATA
