"""
models.py

Value types shared by the classifier, the run driver and the writer.

``ParseState`` is the forward-only state of a conversion run,
``Lot`` is one normalised output record and ``RunContext`` is the mutable
bag of state owned by a single run.
"""

from __future__ import annotations

import datetime as _dt
import enum
from dataclasses import dataclass, field
from typing import List


class ParseState(enum.Enum):
    """Where the run is within the report.

    Transitions only ever move forward:
    ``SEEKING_HEADER -> IN_DATA -> AFTER_DATA``.
    """

    SEEKING_HEADER = "seeking_header"
    IN_DATA = "in_data"
    AFTER_DATA = "after_data"


@dataclass(frozen=True)
class Lot:
    """One purchase of a security, as listed under its summary row."""

    symbol: str
    purchase_date: _dt.date
    quantity: float
    price_paid: float
    total_gain: float
    total_value: float

    @property
    def total_paid(self) -> float:
        # Not present in the export; derived from value and gain.
        return self.total_value - self.total_gain


@dataclass
class RunContext:
    """Mutable state for one conversion run.

    Attributes:
        state: Current position of the run within the report.
        current_symbol: Ticker from the most recent summary row.  Empty
            until the first summary row is seen.
        lots: Lots extracted so far, in input order.
    """

    state: ParseState = ParseState.SEEKING_HEADER
    current_symbol: str = ""
    lots: List[Lot] = field(default_factory=list)
