"""
Utilities package for eTrade position-report conversion.

This package provides a namespace for the modules that turn an eTrade
"All Positions" CSV export into a flat, per-lot CSV suitable for
spreadsheet import.  See ``etrade_utils/converter.py`` for the primary
entry points and ``etrade_utils/classifier.py`` for the row-classification
rules.
"""
