# backend/modules/orders/tests/test_pricing_service.py

import pytest
from decimal import Decimal
from types import SimpleNamespace

from modules.tax.schemas.tax_schemas import TaxRead
from ..schemas.order_schemas import AppliedDiscount, SelectedModifier
from ..services.pricing_service import (
    PricingEngine,
    applicable_taxes,
    calculate_subtotal,
    change_due,
    line_unit_price,
    quick_cash_options,
)

D = Decimal


def vat(tax_id=1, rate="5.000", name="VAT"):
    return TaxRead(id=tax_id, restaurant_id=1, name=name, rate=D(rate))


def line(base="2.000", quantity=1, modifiers=()):
    return SimpleNamespace(
        base_price=D(base),
        quantity=quantity,
        selected_modifiers=[
            SelectedModifier(option_name=name, option_price=D(price)) for name, price in modifiers
        ],
    )


@pytest.mark.unit
class TestPricingEngine:
    def test_large_burger_times_three(self):
        """2.000 + 0.500 modifier, x3, with 5% VAT"""
        breakdown = PricingEngine().price([line("2.000", 3, [("Large", "0.500")])], [vat()])

        assert breakdown.subtotal == D("7.500")
        assert breakdown.tax_amount == D("0.375")
        assert breakdown.total == D("7.875")
        assert [t.amount for t in breakdown.taxes] == [D("0.375")]

    def test_unit_price_accepts_stored_modifier_dicts(self):
        assert line_unit_price("2.000", [{"option_name": "Large", "option_price": "0.500"}]) == D(
            "2.500"
        )

    def test_tax_rounds_half_up(self):
        # 0.010 * 5% = 0.0005 -> 0.001
        breakdown = PricingEngine().price([line("0.010")], [vat()])
        assert breakdown.tax_amount == D("0.001")

    def test_multiple_taxes_summed(self):
        taxes = [vat(1, "5.000"), vat(2, "2.500", "Municipality")]
        breakdown = PricingEngine().price([line("10.000")], taxes)

        assert [t.amount for t in breakdown.taxes] == [D("0.500"), D("0.250")]
        assert breakdown.tax_amount == D("0.750")
        assert breakdown.total == D("10.750")

    def test_tip_fee_and_discount_in_total(self):
        breakdown = PricingEngine().price(
            [line("10.000")],
            [vat()],
            tip=D("1.000"),
            platform_fee=D("0.250"),
            discounts=[AppliedDiscount(name="Staff", amount=D("2.000"))],
        )

        # Tax stays on the undiscounted subtotal
        assert breakdown.tax_amount == D("0.500")
        assert breakdown.total == D("9.750")

    def test_no_items(self):
        breakdown = PricingEngine().price([], [vat()])
        assert breakdown.subtotal == D("0.000")
        assert breakdown.total == D("0.000")

    def test_reprice_order_preserves_tip_and_discounts(self):
        order = SimpleNamespace(
            items=[line("2.000", 2), line("1.000", 1)],
            tip=D("0.500"),
            platform_fee=D("0"),
            applied_discounts=[{"name": "Happy hour", "amount": "0.300"}],
            subtotal=None,
            taxes=None,
            tax_amount=None,
            discount_amount=None,
            total=None,
        )

        PricingEngine().reprice_order(order, [vat()])

        assert order.subtotal == D("5.000")
        assert order.taxes == [{"name": "VAT", "rate": "5.000", "amount": "0.250"}]
        assert order.tip == D("0.500")
        assert order.discount_amount == D("0.300")
        assert order.total == D("5.450")

    def test_calculate_subtotal(self):
        items = [line("2.000", 3, [("Large", "0.500")]), line("1.000", 2)]
        assert calculate_subtotal(items) == D("9.500")


@pytest.mark.unit
class TestApplicableTaxes:
    def test_profile_order_is_kept(self):
        taxes = [vat(1, name="VAT"), vat(2, name="Service")]
        assert [t.name for t in applicable_taxes(taxes, [2, 1])] == ["Service", "VAT"]

    def test_missing_ids_are_skipped(self):
        assert [t.id for t in applicable_taxes([vat(1)], [7, 1])] == [1]

    def test_unselected_taxes_do_not_apply(self):
        assert applicable_taxes([vat(1), vat(2)], []) == []


@pytest.mark.unit
class TestCashHelpers:
    def test_change_due(self):
        assert change_due(D("7.875"), D("10")) == D("2.125")

    def test_change_due_clamped_when_short(self):
        assert change_due(D("7.875"), D("7")) == D("0.000")

    @pytest.mark.parametrize(
        "total, expected",
        [
            ("7.875", ["8.000", "10.000"]),
            ("12.300", ["13.000", "15.000", "20.000"]),
            ("20.000", ["20.000"]),
            ("0.400", ["1.000", "5.000", "10.000"]),
        ],
    )
    def test_quick_cash_options(self, total, expected):
        assert quick_cash_options(D(total)) == [D(v) for v in expected]

    def test_quick_cash_empty_for_zero_total(self):
        assert quick_cash_options(D("0")) == []
