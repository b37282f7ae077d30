"""Tests for drug price derivation."""
from decimal import Decimal

import pytest

from app.services.pricing import calculate_prices


def test_calculate_prices_applies_tax_then_margin():
    """Test the reference example: 1000 with 10% tax and 20% margin."""
    prices = calculate_prices(1000, 10, 20)

    assert prices.purchase_price_after_tax == Decimal("1100")
    assert prices.selling_price == Decimal("1320")


@pytest.mark.parametrize(
    "price, tax, margin",
    [
        ("12.5", "11", "35"),
        ("0", "10", "20"),
        ("999.99", "7.5", "0"),
        ("250", "100", "150"),
    ],
)
def test_selling_price_matches_formula(price, tax, margin):
    """Test selling price equals price * (1 + tax/100) * (1 + margin/100)."""
    p, t, m = Decimal(price), Decimal(tax), Decimal(margin)

    prices = calculate_prices(p, t, m)

    assert prices.selling_price == p * (1 + t / 100) * (1 + m / 100)


def test_zero_tax_keeps_purchase_price_exactly():
    """Test that a zero tax leaves the purchase price untouched."""
    prices = calculate_prices(0.1, 0, 15)

    assert prices.purchase_price_after_tax == prices.purchase_price
    assert prices.purchase_price_after_tax == Decimal("0.1")


def test_missing_tax_and_margin_default_to_zero():
    prices = calculate_prices(500, None, None)

    assert prices.tax == 0
    assert prices.margin == 0
    assert prices.selling_price == Decimal("500")
