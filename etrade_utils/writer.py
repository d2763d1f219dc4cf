"""
writer.py

Output side of the converter: turns the extracted lots into a pandas
DataFrame with a fixed column layout and writes it as CSV.

Dates are rendered with the same ``MM/DD/YYYY`` convention used to parse
them.  Numbers are written with pandas' default float formatting; no
fixed number of decimal places is imposed.  A NaN value is spelled
``NaN`` so it is not mistaken for an empty cell.
"""

from __future__ import annotations

import datetime as _dt
import logging
from typing import IO, Iterable, List

import pandas as pd

from .classifier import DATE_FORMAT
from .models import Lot

__all__ = [
    "OUTPUT_FIELDS",
    "format_date",
    "lots_to_dataframe",
    "write_lots",
]

logger = logging.getLogger(__name__)

OUTPUT_FIELDS: List[str] = [
    "Symbol",
    "Purchase Date",
    "Quantity",
    "Price Paid",
    "Total Paid",
    "Total Gain",
    "Total Value",
]


def format_date(value: _dt.date) -> str:
    """Render a purchase date the way the export spells it."""
    return value.strftime(DATE_FORMAT)


def lots_to_dataframe(lots: Iterable[Lot]) -> pd.DataFrame:
    """Build the output table from a sequence of lots.

    Row order follows the order of ``lots``.  An empty input yields an
    empty frame that still carries every output column.

    Args:
        lots: Extracted lots, in input order.

    Returns:
        A DataFrame whose columns are exactly ``OUTPUT_FIELDS``.
    """
    records = [
        {
            "Symbol": lot.symbol,
            "Purchase Date": format_date(lot.purchase_date),
            "Quantity": lot.quantity,
            "Price Paid": lot.price_paid,
            "Total Paid": lot.total_paid,
            "Total Gain": lot.total_gain,
            "Total Value": lot.total_value,
        }
        for lot in lots
    ]
    if not records:
        return pd.DataFrame(columns=OUTPUT_FIELDS)
    return pd.DataFrame(records, columns=OUTPUT_FIELDS)


def write_lots(lots: Iterable[Lot], stream: IO[str]) -> pd.DataFrame:
    """Write lots to ``stream`` as CSV with a header row.

    Args:
        lots: Extracted lots, in input order.
        stream: Writable text stream.

    Returns:
        The DataFrame that was written.
    """
    df = lots_to_dataframe(lots)
    df.to_csv(stream, index=False, lineterminator="\n", na_rep="NaN")
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Wrote {len(df)} row(s) with columns {list(df.columns)}")
    return df
