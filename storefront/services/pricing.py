# storefront/services/pricing.py
"""
Pricing engine: the one place money totals are computed.

Used by the cart preview and by checkout, so both always agree.
"""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from storefront.models.product import Product

TAX_RATE = Decimal("0.06")
SHIPPING_FEE = Decimal("11.95")

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def effective_price(product: Product) -> Decimal:
    """
    Price a customer pays for one unit right now.

    sale_price only applies while on_sale is set; the DB CHECK keeps it
    below selling_price.
    """
    if product.on_sale and product.sale_price is not None:
        return Decimal(product.sale_price)
    return Decimal(product.selling_price)


def compute_totals(lines: Iterable[tuple[Decimal, int]]) -> Totals:
    """
    Compute order totals from (effective unit price, quantity) lines.

    Rules:
      - tax = subtotal * 6%
      - shipping = flat 11.95, even for an empty list
      - each figure rounded half-up to cents only when reported;
        total is the sum of the rounded figures so it always adds up
    """
    subtotal = Decimal("0")
    for price, quantity in lines:
        subtotal += Decimal(price) * quantity

    subtotal = round_money(subtotal)
    tax = round_money(subtotal * TAX_RATE)
    shipping = round_money(SHIPPING_FEE)
    total = subtotal + tax + shipping

    return Totals(subtotal=subtotal, tax=tax, shipping=shipping, total=total)
