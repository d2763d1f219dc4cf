#!/usr/bin/env python3
"""
run_etrade_converter.py

Caller/orchestrator for the eTrade lot conversion utilities.

A highly specialised tool that turns the eTrade positions CSV into a flat
per-lot CSV that can be imported straight into a spreadsheet.

To produce the input:

1. In eTrade, open "Portfolio" and view by "All Positions".
2. Click the double chevron next to "Symbol" so every stock is expanded
   to show its individual lots with purchase dates.
3. Download the CSV and give it a useful name, preferably with a date.

Usage::

    python run_etrade_converter.py [<input-file>] [--output OUTPUT] [--config CONFIG]
                                   [--debug] [--show-audit]

    python run_etrade_converter.py < positions.csv > lots.csv

With no input file (or ``-``) the export is read from standard input; with
no ``--output`` (or ``-``) the result goes to standard output.  Output is
only written once the whole input has converted cleanly.

Configuration keys considered (default_settings.json):
- DEBUG
- AUDIT
- LOG_DIR
"""
from __future__ import annotations

import argparse
import io
import json
import os
import sys
from typing import Any, Dict, List, Optional

from etrade_utils.converter import (
    clear_audit_log,
    configure_logging,
    convert_stream,
    get_audit_log,
)
from etrade_utils.errors import ConversionError


# -------------------------- helpers --------------------------

def _load_settings(path: str) -> Dict[str, Any]:
    if not os.path.isfile(path):
        return {}
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def _apply_env_from_settings(settings: Dict[str, Any]) -> None:
    # Flatten a few top-level values into env for utils
    for k in ("DEBUG", "AUDIT", "LOG_DIR"):
        if k in settings and settings[k] is not None:
            value = settings[k]
            os.environ[k] = str(value).lower() if isinstance(value, bool) else str(value)


def _stdin_text() -> io.TextIOBase:
    # Re-wrap stdin so a BOM is dropped and the csv module sees raw newlines.
    buffer = getattr(sys.stdin, "buffer", None)
    if buffer is None:
        return sys.stdin
    return io.TextIOWrapper(buffer, encoding="utf-8-sig", newline="")


def _write_output(path: str, text: str) -> None:
    # Output directories are created on demand, as convert_file does.
    out_dir = os.path.dirname(path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as fh:
        fh.write(text)


# -------------------------- main --------------------------

def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Convert an eTrade positions CSV into a per-lot CSV")
    parser.add_argument("input_file", nargs="?", default="-", help="eTrade CSV export (default: standard input)")
    parser.add_argument("--output", default="-", help="Output CSV path (default: standard output)")
    parser.add_argument("--config", default="config/default_settings.json", help="Path to settings JSON")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--show-audit", action="store_true", help="Print audit log to stderr at the end")

    args = parser.parse_args(argv)

    # Load and apply settings
    settings = _load_settings(args.config)
    if args.debug:
        settings["DEBUG"] = True
    _apply_env_from_settings(settings)
    configure_logging()
    # One audit trail per run
    clear_audit_log()

    if args.input_file != "-" and not os.path.isfile(args.input_file):
        sys.stderr.write(f"Error: input file does not exist: {args.input_file}\n")
        return 2

    # Buffer the table so a failed run never touches the output.
    out = io.StringIO()
    try:
        if args.input_file == "-":
            convert_stream(_stdin_text(), out)
        else:
            with open(args.input_file, "r", encoding="utf-8-sig", newline="") as fh:
                convert_stream(fh, out)
    except ConversionError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1
    except OSError as exc:
        sys.stderr.write(f"Error: cannot read input file {args.input_file}: {exc}\n")
        return 2

    if args.output == "-":
        sys.stdout.write(out.getvalue())
    else:
        try:
            _write_output(args.output, out.getvalue())
        except OSError as exc:
            sys.stderr.write(f"Error: cannot write output file {args.output}: {exc}\n")
            return 3

    if args.show_audit:
        for ts, msg in get_audit_log():
            sys.stderr.write(f"[{ts}] {msg}\n")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
