"""Decimal helpers for ledger arithmetic"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any

CENTS = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Coerce a stored balance (None, int, float, str, Decimal) to Decimal; None counts as zero"""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    # str() first so floats keep their printed value instead of binary noise
    return Decimal(str(value))


def quantize(amount: Decimal) -> Decimal:
    """Round to whole cents"""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_amount(amount: Decimal, symbol: str = "") -> str:
    """Render an amount for humans, e.g. ₹1,250.00"""
    value = quantize(to_decimal(amount))
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"
