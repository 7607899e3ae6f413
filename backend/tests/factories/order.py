# backend/tests/factories/order.py

import factory
from factory import LazyAttribute, LazyFunction
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from .base import BaseFactory
from modules.orders.enums.order_enums import OrderStatus, OrderType
from modules.orders.models.order_models import Order, OrderItem
from modules.orders.schemas.order_schemas import OrderRead
from modules.orders.utils.money import ZERO, compute_total


class OrderItemFactory(BaseFactory):
    """Order lines; usually built unsaved and attached through OrderFactory."""

    class Meta:
        model = OrderItem

    line_index = 0
    menu_item_id = 1
    name = "Burger"
    base_price = Decimal("2.000")
    price = LazyAttribute(lambda obj: obj.base_price)
    quantity = 1
    selected_modifiers = LazyFunction(list)
    notes = None
    is_completed = False
    inventory_deducted = False


class OrderFactory(BaseFactory):
    """Factory for creating orders with a single line priced at the subtotal."""

    class Meta:
        model = Order

    restaurant_id = 1
    order_type = OrderType.DINE_IN
    plate_number = "T1"
    status = OrderStatus.NEW
    payment_method = None
    notes = None

    subtotal = Decimal("2.000")
    taxes = LazyFunction(list)
    tax_amount = ZERO
    tip = ZERO
    platform_fee = ZERO
    applied_discounts = LazyFunction(list)
    discount_amount = ZERO
    total = LazyAttribute(
        lambda obj: compute_total(
            obj.subtotal, obj.tax_amount, obj.tip, obj.platform_fee, obj.discount_amount
        )
    )
    completed_at = None

    items = LazyAttribute(
        lambda obj: [
            OrderItemFactory.build(base_price=obj.subtotal, price=obj.subtotal, quantity=1)
        ]
    )


def make_order_read(
    order_id: int = 1,
    status: OrderStatus = OrderStatus.NEW,
    plate_number: Optional[str] = "T1",
    order_type: OrderType = OrderType.DINE_IN,
    items: Optional[List[dict]] = None,
    created_at: Optional[datetime] = None,
    restaurant_id: int = 1,
    version: int = 1,
    notes: Optional[str] = None,
) -> OrderRead:
    """Validated snapshot for tests that never touch the database"""
    items = items or [{"menu_item_id": 1, "name": "Burger", "price": "2.000"}]
    lines = []
    for index, item in enumerate(items):
        line = {
            "line_index": index,
            "base_price": item.get("price", "2.000"),
            "quantity": 1,
            "selected_modifiers": [],
        }
        line.update(item)
        lines.append(line)
    subtotal = sum(Decimal(str(line["price"])) * line["quantity"] for line in lines)
    return OrderRead.model_validate(
        {
            "id": order_id,
            "restaurant_id": restaurant_id,
            "order_type": order_type,
            "plate_number": plate_number,
            "status": status,
            "notes": notes,
            "items": lines,
            "subtotal": subtotal,
            "total": subtotal,
            "created_at": created_at or datetime(2026, 10, 18, 12, 0),
            "version": version,
        }
    )
