# backend/modules/orders/services/pricing_service.py

"""
Order pricing.

All figures are Decimal and rounded half-up to the currency's minor unit
(three places for OMR). Taxes are always recomputed from the whole
current subtotal; tip and platform fee are carried over untouched.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_CEILING
from typing import Any, Iterable, List, Optional, Sequence

from modules.tax.schemas.tax_schemas import TaxRead
from ..schemas.order_schemas import AppliedDiscount, AppliedTax
from ..utils.money import ZERO, compute_total, quantize_money, sum_money, to_decimal

logger = logging.getLogger(__name__)


def _option_price(modifier: Any) -> Decimal:
    # Orders hold modifiers as JSON dicts, carts as SelectedModifier
    if isinstance(modifier, dict):
        return to_decimal(modifier.get("option_price") or 0)
    return to_decimal(modifier.option_price)


def line_unit_price(base_price, modifiers: Iterable[Any]) -> Decimal:
    """basePrice + sum of the selected modifier prices"""
    return quantize_money(
        to_decimal(base_price) + sum((_option_price(m) for m in modifiers), ZERO)
    )


def calculate_subtotal(items: Iterable[Any]) -> Decimal:
    return sum_money(
        line_unit_price(item.base_price, item.selected_modifiers or []) * item.quantity
        for item in items
    )


def applicable_taxes(taxes: Iterable[TaxRead], applied_tax_ids: Sequence[int]) -> List[TaxRead]:
    """
    Tenant taxes selected by the profile, in the profile's order.

    Ids that no longer match a tax record are skipped.
    """
    by_id = {tax.id: tax for tax in taxes}
    selected = []
    for tax_id in applied_tax_ids:
        tax = by_id.get(tax_id)
        if tax is None:
            logger.warning(f"Applied tax {tax_id} no longer exists; skipping")
            continue
        selected.append(tax)
    return selected


def calculate_taxes(subtotal, taxes: Iterable[TaxRead]) -> List[AppliedTax]:
    subtotal = to_decimal(subtotal)
    return [
        AppliedTax(
            name=tax.name,
            rate=tax.rate,
            amount=quantize_money(subtotal * to_decimal(tax.rate) / Decimal(100)),
        )
        for tax in taxes
    ]


def change_due(total, tendered) -> Decimal:
    """Change to hand back, clamped at zero when the tender is short"""
    change = to_decimal(tendered) - to_decimal(total)
    return quantize_money(max(change, ZERO))


def quick_cash_options(total) -> List[Decimal]:
    """
    Suggested cash tenders: next whole unit, next multiple of 5 and next
    multiple of 10, de-duplicated, ascending, at most three.
    """
    total = to_decimal(total)
    if total <= 0:
        return []

    def ceil_to(step: int) -> Decimal:
        return (total / step).to_integral_value(rounding=ROUND_CEILING) * step

    options = sorted({ceil_to(1), ceil_to(5), ceil_to(10)})
    return [quantize_money(option) for option in options[:3]]


@dataclass
class PriceBreakdown:
    subtotal: Decimal
    taxes: List[AppliedTax] = field(default_factory=list)
    tax_amount: Decimal = ZERO
    tip: Decimal = ZERO
    platform_fee: Decimal = ZERO
    discounts: List[AppliedDiscount] = field(default_factory=list)
    discount_amount: Decimal = ZERO
    total: Decimal = ZERO

    def as_order_fields(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "taxes": self.taxes,
            "tax_amount": self.tax_amount,
            "tip": self.tip,
            "platform_fee": self.platform_fee,
            "applied_discounts": self.discounts,
            "discount_amount": self.discount_amount,
            "total": self.total,
        }


class PricingEngine:
    """Stateless; callers pass in the taxes that currently apply"""

    def price(
        self,
        items: Iterable[Any],
        taxes: Iterable[TaxRead],
        tip=ZERO,
        platform_fee=ZERO,
        discounts: Optional[Iterable[AppliedDiscount]] = None,
    ) -> PriceBreakdown:
        subtotal = calculate_subtotal(items)
        applied = calculate_taxes(subtotal, taxes)
        tax_amount = sum_money(tax.amount for tax in applied)
        discounts = list(discounts or [])
        discount_amount = sum_money(d.amount for d in discounts)
        tip = quantize_money(tip)
        platform_fee = quantize_money(platform_fee)

        return PriceBreakdown(
            subtotal=subtotal,
            taxes=applied,
            tax_amount=tax_amount,
            tip=tip,
            platform_fee=platform_fee,
            discounts=discounts,
            discount_amount=discount_amount,
            total=compute_total(subtotal, tax_amount, tip, platform_fee, discount_amount),
        )

    def reprice_order(self, order, taxes: Iterable[TaxRead]) -> PriceBreakdown:
        """
        Recompute an ORM order's money fields in place from its current items.

        Tip, platform fee and discounts already on the order are preserved.
        """
        discounts = [AppliedDiscount.model_validate(d) for d in order.applied_discounts or []]
        breakdown = self.price(
            order.items,
            taxes,
            tip=order.tip or ZERO,
            platform_fee=order.platform_fee or ZERO,
            discounts=discounts,
        )
        order.subtotal = breakdown.subtotal
        order.taxes = [tax.model_dump(mode="json") for tax in breakdown.taxes]
        order.tax_amount = breakdown.tax_amount
        order.tip = breakdown.tip
        order.platform_fee = breakdown.platform_fee
        order.applied_discounts = [d.model_dump(mode="json") for d in breakdown.discounts]
        order.discount_amount = breakdown.discount_amount
        order.total = breakdown.total
        return breakdown
