"""Order totals from a cart subtotal."""

from dataclasses import dataclass

from storefront.shared.money import round_money

DEFAULT_TAX_RATE = 0.1
DEFAULT_SHIPPING_COST = 10.0


@dataclass(frozen=True)
class OrderTotals:
    subtotal: float
    tax: float
    shipping: float
    total: float


def compute_totals(subtotal, tax_rate=DEFAULT_TAX_RATE, shipping_cost=DEFAULT_SHIPPING_COST) -> OrderTotals:
    """tax = round(subtotal × rate, 2); total = round(subtotal + tax + shipping, 2)."""
    subtotal = round_money(subtotal)
    tax = round_money(subtotal * tax_rate)
    shipping = round_money(shipping_cost)
    return OrderTotals(
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        total=round_money(subtotal + tax + shipping),
    )
