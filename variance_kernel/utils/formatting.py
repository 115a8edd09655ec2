"""
Display formatting for amounts and percentages.

Used wherever numbers become text (insights, exports, the CLI) so every
surface prints the same figures.  Rounding is half-up on the decimal value
the user sees, not banker's rounding on the binary float.
"""

from decimal import ROUND_HALF_UP, Decimal


def _round_half_up(value: float, places: int) -> Decimal:
    quantum = Decimal(1).scaleb(-places)
    return Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)


def format_currency(value: float) -> str:
    """Whole US dollars with thousands separators: ``$1,235`` / ``-$1,235``."""
    amount = _round_half_up(value, 0)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.0f}"


def format_percent(value: float) -> str:
    """One decimal place with an explicit plus sign: ``+12.5%`` / ``-3.0%``."""
    amount = _round_half_up(value, 1)
    if amount.is_zero():
        amount = amount.copy_abs()
    sign = "+" if amount >= 0 else ""
    return f"{sign}{amount:.1f}%"
