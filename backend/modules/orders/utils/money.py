# backend/modules/orders/utils/money.py

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union

from core.config import get_settings

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")


def money_quantum() -> Decimal:
    return Decimal(1).scaleb(-get_settings().money_decimal_places)


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # go through str so 0.1 stays 0.1
        return Decimal(str(value))
    return Decimal(value)


def quantize_money(value: Number) -> Decimal:
    """Round half-up to the currency's minor unit"""
    return to_decimal(value).quantize(money_quantum(), rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Number]) -> Decimal:
    return quantize_money(sum((to_decimal(v) for v in values), ZERO))


def compute_total(
    subtotal: Number,
    tax_amount: Number,
    tip: Number = ZERO,
    platform_fee: Number = ZERO,
    discount_amount: Number = ZERO,
) -> Decimal:
    """total = subtotal - discounts + tax + tip + platform fee"""
    return quantize_money(
        to_decimal(subtotal)
        - to_decimal(discount_amount)
        + to_decimal(tax_amount)
        + to_decimal(tip)
        + to_decimal(platform_fee)
    )
