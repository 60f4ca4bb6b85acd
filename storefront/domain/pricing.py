# storefront/domain/pricing.py
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Protocol

TAX_RATE = Decimal("0.10")
SHIPPING_FLAT = Decimal("5.00")
CENT = Decimal("0.01")


class PricedLine(Protocol):
    price: Decimal
    quantity: int


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_totals(items: Iterable[PricedLine]) -> Totals:
    """
    Totals for a list of line items (cart items or order items).
    Pure: same input, same output, nothing is written.
    """
    subtotal = to_money(sum((Decimal(str(i.price)) * i.quantity for i in items), Decimal("0.00")))
    tax = to_money(subtotal * TAX_RATE)
    shipping = SHIPPING_FLAT
    return Totals(
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        total=subtotal + tax + shipping,
    )
