"""Drug price derivation.

    purchase_price_after_tax = purchase_price * (1 + tax / 100)
    selling_price            = purchase_price_after_tax * (1 + margin / 100)

Arithmetic is done in Decimal so that stored prices are exact.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

HUNDRED = Decimal(100)


def to_decimal(value: Any) -> Decimal:
    """Convert a number (or None, meaning zero) to Decimal via its string form."""
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class PriceBreakdown:
    purchase_price: Decimal
    tax: Decimal
    margin: Decimal
    purchase_price_after_tax: Decimal
    selling_price: Decimal


def calculate_prices(purchase_price: Any, tax: Any = 0, margin: Any = 0) -> PriceBreakdown:
    """
    Derive the tax-inclusive purchase price and the selling price.

    Args:
        purchase_price: Purchase price before tax
        tax: Tax percentage; None means 0
        margin: Margin percentage applied after tax; None means 0

    Returns:
        PriceBreakdown with all inputs and derived prices as Decimal
    """
    price = to_decimal(purchase_price)
    tax_rate = to_decimal(tax)
    margin_rate = to_decimal(margin)

    if tax_rate == 0:
        after_tax = price
    else:
        after_tax = price * (1 + tax_rate / HUNDRED)
    selling = after_tax * (1 + margin_rate / HUNDRED)

    return PriceBreakdown(
        purchase_price=price,
        tax=tax_rate,
        margin=margin_rate,
        purchase_price_after_tax=after_tax,
        selling_price=selling,
    )
