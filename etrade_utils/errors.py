"""
errors.py

Exception hierarchy for the eTrade lot converter.

Every failure raised while converting a report descends from
``ConversionError`` so that callers (the command-line orchestrator in
particular) can catch the whole family in one place.  All of these are
fatal: the converter never skips a bad row and never writes partial
output.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "ConversionError",
    "HeaderRowNotFound",
    "MissingField",
    "ParseFloatError",
    "CsvParseError",
]


class ConversionError(Exception):
    """Root of the converter exception hierarchy.

    Args:
        message: Human-readable description of the failure.
        row_number: Optional 1-based number of the raw input row that
            triggered the failure.  The run driver fills this in when the
            row is known.
    """

    def __init__(self, message: str, row_number: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.row_number = row_number

    def __str__(self) -> str:
        if self.row_number is not None:
            return f"{self.message} (row {self.row_number})"
        return self.message


class HeaderRowNotFound(ConversionError):
    """The header marker row never appeared before the input ended."""

    def __init__(self, row_number: Optional[int] = None) -> None:
        super().__init__("Header row not found in input data", row_number)


class MissingField(ConversionError):
    """A structurally required field was absent from a row."""

    def __init__(self, index: int, row_number: Optional[int] = None) -> None:
        super().__init__(f"Missing field #{index}", row_number)
        self.index = index


class ParseFloatError(ConversionError):
    """A numeric field could not be interpreted as a number."""

    def __init__(
        self,
        text: str,
        field: Optional[str] = None,
        row_number: Optional[int] = None,
    ) -> None:
        where = f" for {field}" if field else ""
        super().__init__(
            f"Parse float error: could not convert {text!r} to a number{where}",
            row_number,
        )
        self.text = text
        self.field = field


class CsvParseError(ConversionError):
    """The underlying CSV reader rejected the input framing."""

    def __init__(self, error: Exception, row_number: Optional[int] = None) -> None:
        super().__init__(f"CSV parsing error: {error}", row_number)
        self.error = error
