"""
Pricing engine: effective price, tax, shipping, totals.
"""

from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from conftest import make_product
from storefront.models.product import Product
from storefront.services.pricing import (
    SHIPPING_FEE,
    TAX_RATE,
    compute_totals,
    effective_price,
)


def _product(selling, on_sale=False, sale=None):
    return Product(
        name="Loafer",
        selling_price=Decimal(selling),
        on_sale=on_sale,
        sale_price=Decimal(sale) if sale is not None else None,
    )


class TestEffectivePrice:
    def test_list_price_when_not_on_sale(self):
        assert effective_price(_product("100.00")) == Decimal("100.00")

    def test_sale_price_when_on_sale(self):
        price = effective_price(_product("100.00", on_sale=True, sale="70.00"))
        assert price == Decimal("70.00")
        assert price < Decimal("100.00")

    def test_sale_price_ignored_when_flag_off(self):
        assert effective_price(_product("100.00", sale="70.00")) == Decimal("100.00")


class TestSalePriceConstraint:
    @pytest.mark.parametrize("sale", ["100.00", "120.00"])
    def test_sale_price_must_be_below_list_price(self, session, sale):
        with pytest.raises(IntegrityError):
            make_product(session, selling="100.00", sale=sale)
        session.rollback()

    def test_on_sale_needs_a_sale_price(self, session):
        session.add(_product("100.00", on_sale=True))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_stored_sale_product_prices_below_list(self, session):
        product = make_product(session, selling="100.00", sale="99.99")
        assert effective_price(product) < product.selling_price


class TestComputeTotals:
    def test_single_hundred_dollar_item(self):
        totals = compute_totals([(Decimal("100.00"), 1)])
        assert totals.subtotal == Decimal("100.00")
        assert totals.tax == Decimal("6.00")
        assert totals.shipping == Decimal("11.95")
        assert totals.total == Decimal("117.95")

    def test_sale_item_quantity_two(self):
        price = effective_price(_product("100.00", on_sale=True, sale="70.00"))
        totals = compute_totals([(price, 2)])
        assert totals.subtotal == Decimal("140.00")
        assert totals.tax == Decimal("8.40")
        assert totals.total == Decimal("160.35")

    def test_empty_lines_still_charge_shipping(self):
        totals = compute_totals([])
        assert totals.subtotal == Decimal("0.00")
        assert totals.tax == Decimal("0.00")
        assert totals.shipping == SHIPPING_FEE
        assert totals.total == Decimal("11.95")

    def test_tax_rounds_half_up(self):
        # 0.06 * 10.25 = 0.615 -> 0.62
        totals = compute_totals([(Decimal("10.25"), 1)])
        assert totals.tax == Decimal("0.62")

    @pytest.mark.parametrize(
        "lines",
        [
            [(Decimal("19.99"), 3)],
            [(Decimal("0.01"), 1), (Decimal("249.50"), 2)],
            [(Decimal("33.33"), 7), (Decimal("12.10"), 1), (Decimal("5.55"), 4)],
        ],
    )
    def test_total_is_sum_of_reported_parts(self, lines):
        totals = compute_totals(lines)
        assert totals.total == totals.subtotal + totals.tax + totals.shipping
        assert totals.total.as_tuple().exponent == -2

    def test_rate_constants(self):
        assert TAX_RATE == Decimal("0.06")
        assert SHIPPING_FEE == Decimal("11.95")
