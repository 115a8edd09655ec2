"""
Numeric normalization for free-form amount cells. Pure, ZERO I/O.

Spreadsheet exports and pasted reports carry amounts as "$1,234.50",
"(1,200)", "€ 300" or plain numbers. ``parse_amount`` turns all of them into
a signed float and never raises: one unreadable cell must not fail a whole
ingestion, so anything unparseable becomes 0.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Any

CURRENCY_SYMBOLS = "$€£¥₹"

_STRIP_RE = re.compile(r"[" + re.escape(CURRENCY_SYMBOLS) + r",()]")
# Leading numeric prefix, same idea as JavaScript's parseFloat
_LEADING_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _finite_or_zero(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def parse_amount(value: Any) -> float:
    """
    Parse an amount cell into a signed float.

    - Numbers (int, float, Decimal; not bool) come back unchanged as float.
    - Strings lose currency symbols, thousands separators and parentheses,
      then the leading numeric prefix is parsed ("12.5 USD" -> 12.5).
    - A "(" anywhere in the string means negative: "(1,200)" -> -1200.0.
    - Everything else, including "", None and non-finite values, is 0.0.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        try:
            return _finite_or_zero(float(value))
        except OverflowError:
            return 0.0
    if not isinstance(value, str):
        return 0.0

    negative = "(" in value
    cleaned = _STRIP_RE.sub("", value).strip()
    match = _LEADING_NUMBER_RE.match(cleaned)
    if match is None:
        return 0.0

    number = _finite_or_zero(float(match.group(0)))
    if negative:
        return -abs(number)
    return number
