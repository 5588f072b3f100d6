"""Monetary rounding helpers.

Amounts are stored as floats on aggregates; every derived amount (line totals,
tax, order totals) is rounded half-up to two decimals through ``Decimal`` so
that 0.125 becomes 0.13 rather than the binary-float 0.12.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def round_money(amount: float | int | Decimal) -> float:
    """Round an amount to two decimals, half-up."""
    return float(Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP))


def line_total(price: float, quantity: int) -> float:
    return round_money(Decimal(str(price)) * quantity)
