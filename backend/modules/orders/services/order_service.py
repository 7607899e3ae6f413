# backend/modules/orders/services/order_service.py

import logging
from decimal import Decimal
from typing import List, Optional, Sequence

from core.exceptions import ValidationError
from modules.menu.services.catalog_cache import CatalogCache
from ..enums.order_enums import OPEN_ORDER_STATUSES, OrderStatus, OrderType
from ..schemas.cart_schemas import CartLineRequest, CartRead, CartSubmitRequest
from ..schemas.order_schemas import AppliedDiscount, OrderCreate, OrderRead
from ..utils.money import ZERO, quantize_money, sum_money
from .cart_service import Cart, merge_notes
from .order_feed import OrderFilter
from .order_store import OrderStore, build_order_item
from .pricing_service import PricingEngine

logger = logging.getLogger(__name__)


def table_orders(orders: Sequence[OrderRead], plate_number: str) -> List[OrderRead]:
    """Open dine-in orders whose plate matches the label, oldest first"""
    key = plate_number.strip().upper()
    matching = [o for o in orders if o.is_open and o.table_key == key]
    return sorted(matching, key=lambda o: (o.created_at, o.id))


class OrderService:
    """
    Cart submission and edits to open orders.

    Every edit is a single store transaction: new lines, repricing and
    any status change commit together or not at all.
    """

    def __init__(
        self,
        store: OrderStore,
        catalog: CatalogCache,
        pricing: Optional[PricingEngine] = None,
    ):
        self.store = store
        self.catalog = catalog
        self.pricing = pricing or PricingEngine()

    async def build_cart(
        self, restaurant_id: int, lines: Sequence[CartLineRequest], notes: Optional[str] = None
    ) -> Cart:
        menu_items = await self.catalog.get_menu_items(restaurant_id)
        cart = Cart(notes=notes)
        for line in lines:
            menu_item = menu_items.get(line.menu_item_id)
            if menu_item is None:
                raise ValidationError(
                    f"Menu item {line.menu_item_id} does not exist",
                    error_code="UNKNOWN_MENU_ITEM",
                )
            cart.add_menu_item(
                menu_item,
                quantity=line.quantity,
                modifier_names=line.modifier_names,
                notes=line.notes,
            )
        return cart

    @staticmethod
    def validate_identifier(order_type: OrderType, plate_number: Optional[str]) -> str:
        if not plate_number or not plate_number.strip():
            what = "table" if order_type == OrderType.DINE_IN else "customer identifier"
            raise ValidationError(f"A {what} is required", error_code="MISSING_IDENTIFIER")
        return plate_number.strip()

    async def build_order(
        self,
        restaurant_id: int,
        order_type: OrderType,
        plate_number: str,
        cart: Cart,
        tip: Decimal = ZERO,
    ) -> OrderCreate:
        if cart.is_empty:
            raise ValidationError("Cart is empty", error_code="EMPTY_CART")
        taxes = await self.catalog.get_applied_taxes(restaurant_id)
        items = cart.to_order_items()
        breakdown = self.pricing.price(items, taxes, tip=tip)
        return OrderCreate(
            restaurant_id=restaurant_id,
            order_type=order_type,
            plate_number=plate_number,
            status=OrderStatus.NEW,
            notes=cart.notes,
            items=items,
            **breakdown.as_order_fields(),
        )

    async def submit_cart(self, request: CartSubmitRequest) -> OrderRead:
        """
        Submit a cart.

        Dine-in carts for a table that already has an open order are
        appended to the oldest such order; everything else becomes a new
        order in status New.
        """
        if not request.items:
            raise ValidationError("Cart is empty", error_code="EMPTY_CART")
        plate_number = self.validate_identifier(request.order_type, request.plate_number)
        cart = await self.build_cart(request.restaurant_id, request.items, request.notes)

        if request.order_type == OrderType.DINE_IN:
            open_orders = await self.get_table_orders(request.restaurant_id, plate_number)
            if open_orders:
                return await self._append_cart(open_orders[0].id, request.restaurant_id, cart)

        data = await self.build_order(
            request.restaurant_id, request.order_type, plate_number, cart
        )
        order_id = await self.store.create(data)
        return await self.store.get(order_id)

    async def append_to_order(
        self, order_id: int, lines: Sequence[CartLineRequest]
    ) -> OrderRead:
        if not lines:
            raise ValidationError("Nothing to append", error_code="EMPTY_CART")
        current = await self.store.get(order_id)
        cart = await self.build_cart(current.restaurant_id, lines)
        return await self._append_cart(order_id, current.restaurant_id, cart)

    async def _append_cart(self, order_id: int, restaurant_id: int, cart: Cart) -> OrderRead:
        """
        Add the cart's lines to an open order as new, incomplete lines.

        Existing lines are never touched. Taxes are recomputed from the
        combined subtotal and the recorded tip is kept. A Ready order goes
        back to In Progress since the kitchen has new work.
        The cart's order note is joined onto the order's notes.
        """
        new_items = cart.to_order_items()
        taxes = await self.catalog.get_applied_taxes(restaurant_id)

        def mutator(order, db):
            if order.status == OrderStatus.COMPLETED:
                raise ValidationError(
                    f"Order {order.id} is already completed", error_code="ORDER_COMPLETED"
                )
            start = order.next_line_index
            for offset, item in enumerate(new_items):
                order.items.append(build_order_item(item, start + offset))
            order.notes = merge_notes(order.notes, cart.notes)
            self.pricing.reprice_order(order, taxes)
            if order.status == OrderStatus.READY:
                order.status = OrderStatus.IN_PROGRESS

        result = await self.store.transactional_update(order_id, mutator)
        logger.info(f"Appended {len(new_items)} lines to order {order_id}")
        return result.order

    async def get_table_orders(self, restaurant_id: int, plate_number: str) -> List[OrderRead]:
        orders = await self.store.list_orders(
            OrderFilter(restaurant_id=restaurant_id, statuses=OPEN_ORDER_STATUSES)
        )
        return table_orders(orders, plate_number)

    async def append_to_table(
        self,
        restaurant_id: int,
        plate_number: str,
        lines: Sequence[CartLineRequest],
        notes: Optional[str] = None,
    ) -> OrderRead:
        return await self.submit_cart(
            CartSubmitRequest(
                restaurant_id=restaurant_id,
                order_type=OrderType.DINE_IN,
                plate_number=plate_number,
                notes=notes,
                items=list(lines),
            )
        )

    async def open_table_ticket(self, restaurant_id: int, plate_number: str) -> CartRead:
        """Consolidated cart over every open order at the table"""
        orders = await self.get_table_orders(restaurant_id, plate_number)
        menu_items = await self.catalog.get_menu_items(restaurant_id)
        cart = Cart.from_orders(orders, menu_items)
        return CartRead(
            plate_number=plate_number,
            order_ids=[order.id for order in orders],
            notes=cart.notes,
            items=cart.items,
            subtotal=cart.subtotal,
            total=sum_money(order.total for order in orders),
        )

    async def apply_discount(self, order_id: int, name: str, amount: Decimal) -> OrderRead:
        current = await self.store.get(order_id)
        taxes = await self.catalog.get_applied_taxes(current.restaurant_id)
        discount = AppliedDiscount(name=name, amount=quantize_money(amount))

        def mutator(order, db):
            if order.status == OrderStatus.COMPLETED:
                raise ValidationError(
                    f"Order {order.id} is already completed", error_code="ORDER_COMPLETED"
                )
            discounts = list(order.applied_discounts or []) + [discount.model_dump(mode="json")]
            total_discount = sum_money(d["amount"] for d in discounts)
            if total_discount > quantize_money(order.subtotal):
                raise ValidationError(
                    "Discounts cannot exceed the order subtotal",
                    error_code="DISCOUNT_TOO_LARGE",
                )
            order.applied_discounts = discounts
            self.pricing.reprice_order(order, taxes)

        result = await self.store.transactional_update(order_id, mutator)
        logger.info(f"Discount '{name}' of {discount.amount} applied to order {order_id}")
        return result.order

    async def set_tip(self, order_id: int, tip: Decimal) -> OrderRead:
        current = await self.store.get(order_id)
        taxes = await self.catalog.get_applied_taxes(current.restaurant_id)
        tip = quantize_money(tip)

        def mutator(order, db):
            if order.status == OrderStatus.COMPLETED:
                raise ValidationError(
                    f"Order {order.id} is already completed", error_code="ORDER_COMPLETED"
                )
            order.tip = tip
            self.pricing.reprice_order(order, taxes)

        result = await self.store.transactional_update(order_id, mutator)
        return result.order
