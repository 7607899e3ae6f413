# backend/modules/orders/services/order_finalizer.py

"""
Order finalization.

Payment closes an order in one transaction: every line is marked
complete, recipe stock is deducted exactly once per line, the order
becomes Completed with its payment method, and the table is flagged for
cleaning once no other open order is left on it.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List

from sqlalchemy.orm import Session

from core.exceptions import NotFoundError, ValidationError
from core.mixins import utc_now
from modules.inventory.services.inventory_ledger import DeductionResult, InventoryLedger
from modules.tables.models.table_models import ManualTableStatus
from modules.tables.services.table_service import find_table_by_label, has_other_open_orders
from ..enums.order_enums import OrderStatus, OrderType, PaymentMethod
from ..models.order_models import Order
from ..schemas.cart_schemas import CheckoutRequest
from ..schemas.order_schemas import OrderRead
from ..schemas.payment_schemas import PaymentRequest
from ..utils.money import ZERO, quantize_money, sum_money
from .order_service import OrderService
from .order_store import OrderStore
from .pricing_service import change_due

logger = logging.getLogger(__name__)


@dataclass
class FinalizationResult:
    orders: List[OrderRead] = field(default_factory=list)
    change_due: Decimal = ZERO
    deduction: DeductionResult = field(default_factory=DeductionResult)
    table_cleared: bool = False
    already_completed: bool = False

    @property
    def order(self) -> OrderRead:
        return self.orders[0]


def check_tender(payment: PaymentRequest, total) -> Decimal:
    """Change due for the payment; cash must cover the total"""
    if payment.payment_method != PaymentMethod.CASH:
        return ZERO
    if payment.tendered_amount is None:
        raise ValidationError("Tendered amount is required for cash", error_code="TENDER_REQUIRED")
    if quantize_money(payment.tendered_amount) < quantize_money(total):
        raise ValidationError(
            f"Tendered amount {payment.tendered_amount} is less than total {total}",
            error_code="INSUFFICIENT_TENDER",
        )
    return change_due(total, payment.tendered_amount)


def complete_order(order: Order, payment_method: PaymentMethod) -> None:
    now = utc_now()
    for item in order.items:
        if not item.is_completed:
            item.is_completed = True
            item.completed_at = now
    order.status = OrderStatus.COMPLETED
    order.payment_method = payment_method
    order.completed_at = now


def release_table(db: Session, orders: List[Order]) -> bool:
    """
    Flag the table of these dine-in orders as needing cleaning, but only
    when no other open order remains on it.
    """
    dine_in = [o for o in orders if o.order_type == OrderType.DINE_IN and o.plate_number]
    if not dine_in:
        return False

    cleared = False
    ids = [o.id for o in orders]
    for label in {o.plate_number.strip().upper() for o in dine_in}:
        restaurant_id = dine_in[0].restaurant_id
        if has_other_open_orders(db, restaurant_id, label, exclude_ids=ids):
            logger.info(f"Table {label} still has open orders; leaving its status alone")
            continue
        table = find_table_by_label(db, restaurant_id, label)
        if table is None:
            logger.warning(f"No floor plan table labelled {label} for restaurant {restaurant_id}")
            continue
        table.manual_status = ManualTableStatus.NEEDS_CLEANING
        cleared = True
    return cleared


class OrderFinalizer:
    def __init__(self, store: OrderStore, order_service: OrderService):
        self.store = store
        self.order_service = order_service

    async def finalize(self, order_id: int, payment: PaymentRequest) -> FinalizationResult:
        """Close one order; finalizing a completed order again is a no-op"""
        current = await self.store.get(order_id)
        if current.status != OrderStatus.COMPLETED:
            # Fail fast before opening a write transaction
            check_tender(payment, current.total)

        def mutator(order: Order, db: Session) -> FinalizationResult:
            if order.status == OrderStatus.COMPLETED:
                return FinalizationResult(already_completed=True)
            if not order.items:
                raise ValidationError("Order has no items", error_code="EMPTY_ORDER")
            # The total may have moved since the pre-check
            change = check_tender(payment, order.total)

            complete_order(order, payment.payment_method)
            deduction = InventoryLedger(db).deduct(
                order.items, order_id=order.id, reason=f"Order #{order.id} completed"
            )
            cleared = release_table(db, [order])
            return FinalizationResult(change_due=change, deduction=deduction, table_cleared=cleared)

        result = await self.store.transactional_update(order_id, mutator)
        outcome: FinalizationResult = result.result
        outcome.orders = result.orders
        if outcome.already_completed:
            logger.info(f"Order {order_id} was already completed; nothing to do")
        else:
            logger.info(
                f"Order {order_id} completed via {payment.payment_method.value}, "
                f"total {result.order.total}"
            )
        return outcome

    async def finalize_table(
        self, restaurant_id: int, plate_number: str, payment: PaymentRequest
    ) -> FinalizationResult:
        """Close every open order at a table together, against their combined total"""
        open_orders = await self.order_service.get_table_orders(restaurant_id, plate_number)
        if not open_orders:
            raise NotFoundError(f"No open orders for table {plate_number}")
        check_tender(payment, sum_money(o.total for o in open_orders))

        def mutator(orders: Dict[int, Order], db: Session) -> FinalizationResult:
            still_open = [o for o in orders.values() if o.status != OrderStatus.COMPLETED]
            if not still_open:
                return FinalizationResult(already_completed=True)
            change = check_tender(payment, sum_money(o.total for o in still_open))

            items = []
            for order in still_open:
                complete_order(order, payment.payment_method)
                items.extend(order.items)
            deduction = InventoryLedger(db).deduct(
                items,
                reason=f"Table {plate_number} orders "
                f"{', '.join(f'#{o.id}' for o in still_open)} completed",
            )
            cleared = release_table(db, still_open)
            return FinalizationResult(change_due=change, deduction=deduction, table_cleared=cleared)

        result = await self.store.transactional_update_many(
            [o.id for o in open_orders], mutator
        )
        logger.info(f"Table {plate_number}: {len(result.orders)} orders finalized together")
        result.result.orders = result.orders
        return result.result

    async def checkout_cart(self, request: CheckoutRequest) -> FinalizationResult:
        """Counter sale: the cart becomes an order that is completed in the same transaction"""
        if not request.items:
            raise ValidationError("Cart is empty", error_code="EMPTY_CART")
        plate_number = self.order_service.validate_identifier(
            request.order_type, request.plate_number
        )
        cart = await self.order_service.build_cart(
            request.restaurant_id, request.items, request.notes
        )
        data = await self.order_service.build_order(
            request.restaurant_id, request.order_type, plate_number, cart, tip=request.tip
        )
        payment = PaymentRequest(
            payment_method=request.payment_method, tendered_amount=request.tendered_amount
        )
        change = check_tender(payment, data.total)

        def mutator(order: Order, db: Session) -> FinalizationResult:
            complete_order(order, payment.payment_method)
            deduction = InventoryLedger(db).deduct(
                order.items, order_id=order.id, reason=f"Order #{order.id} checkout"
            )
            cleared = release_table(db, [order])
            return FinalizationResult(change_due=change, deduction=deduction, table_cleared=cleared)

        result = await self.store.create_and_apply(data, mutator)
        logger.info(f"Checkout order {result.order.id} completed, total {result.order.total}")
        result.result.orders = result.orders
        return result.result
