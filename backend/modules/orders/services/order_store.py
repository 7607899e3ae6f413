# backend/modules/orders/services/order_store.py

"""
Durable, versioned order store.

The store is the single source of truth for orders. Writes go through
transactional_update / transactional_update_many: the mutator runs
against freshly loaded rows inside one database transaction, the total
invariant is re-checked, and the commit is guarded by the row version
counter. A commit that lost a race raises ConflictError and the whole
transaction (load, mutate, commit) is replayed with backoff.

Only validated OrderRead snapshots leave the store. After every commit
the affected snapshots are published to the OrderFeed.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from core.config import get_settings
from core.exceptions import NotFoundError, ValidationError
from core.mixins import utc_now
from ..models.order_models import Order, OrderItem
from ..schemas.order_schemas import OrderCreate, OrderRead
from ..utils.database_retry import (
    retry_on_conflict,
    translate_read_error,
    translate_store_error,
)
from ..utils.money import compute_total, quantize_money
from .order_feed import OrderFeed, OrderFilter, OrderSubscription

logger = logging.getLogger(__name__)

OrderMutator = Callable[[Order, Session], Any]
BatchMutator = Callable[[Dict[int, Order], Session], Any]


@dataclass
class StoreResult:
    """Committed snapshots plus whatever the mutator returned"""

    orders: List[OrderRead] = field(default_factory=list)
    result: Any = None

    @property
    def order(self) -> OrderRead:
        return self.orders[0]


def decode_order(order: Order) -> OrderRead:
    """Validate an ORM row into a snapshot, rejecting malformed records"""
    try:
        return OrderRead.model_validate(order)
    except SchemaValidationError as e:
        raise ValidationError(
            detail=f"Order {order.id} failed validation: {e.errors()[0]['msg']}",
            error_code="INVALID_ORDER",
        )


def build_order(data: OrderCreate) -> Order:
    order = Order(
        restaurant_id=data.restaurant_id,
        order_type=data.order_type,
        plate_number=data.plate_number,
        status=data.status,
        notes=data.notes,
        subtotal=data.subtotal,
        taxes=[tax.model_dump(mode="json") for tax in data.taxes],
        tax_amount=data.tax_amount,
        tip=data.tip,
        platform_fee=data.platform_fee,
        applied_discounts=[d.model_dump(mode="json") for d in data.applied_discounts],
        discount_amount=data.discount_amount,
        total=data.total,
    )
    for index, item in enumerate(data.items):
        order.items.append(build_order_item(item, index))
    return order


def build_order_item(item, line_index: int) -> OrderItem:
    return OrderItem(
        line_index=line_index,
        menu_item_id=item.menu_item_id,
        name=item.name,
        base_price=item.base_price,
        price=item.price,
        quantity=item.quantity,
        selected_modifiers=[m.model_dump(mode="json") for m in item.selected_modifiers],
        notes=item.notes,
        is_completed=item.is_completed,
        inventory_deducted=False,
    )


class OrderStore:
    def __init__(
        self,
        session_factory: sessionmaker,
        feed: Optional[OrderFeed] = None,
        max_retries: Optional[int] = None,
        initial_delay: Optional[float] = None,
        max_delay: Optional[float] = None,
        backoff_factor: Optional[float] = None,
    ):
        settings = get_settings()
        self.session_factory = session_factory
        self.feed = feed or OrderFeed()
        self.max_retries = (
            settings.order_conflict_max_retries if max_retries is None else max_retries
        )
        self.initial_delay = (
            settings.order_conflict_initial_delay_seconds
            if initial_delay is None
            else initial_delay
        )
        self.max_delay = (
            settings.order_conflict_max_delay_seconds if max_delay is None else max_delay
        )
        self.backoff_factor = (
            settings.order_conflict_backoff_factor
            if backoff_factor is None
            else backoff_factor
        )
        self.order_history_limit = settings.order_history_limit

    # Reads

    async def get(self, order_id: int) -> OrderRead:
        db = self.session_factory()
        try:
            order = db.get(Order, order_id)
            if not order:
                raise NotFoundError(f"Order {order_id} not found")
            return decode_order(order)
        except DBAPIError as e:
            raise translate_read_error(e) from e
        finally:
            db.close()

    async def list_orders(
        self, order_filter: OrderFilter, limit: Optional[int] = None
    ) -> List[OrderRead]:
        """
        Orders matching order_filter, oldest first.

        Open-order filters return every match. Filters that can reach
        settled orders return only the newest `limit` (default
        order_history_limit).
        """
        db = self.session_factory()
        try:
            return self._load_matching(db, order_filter, limit)
        except DBAPIError as e:
            raise translate_read_error(e) from e
        finally:
            db.close()

    def subscribe(self, order_filter: OrderFilter) -> OrderSubscription:
        """
        Open a live subscription seeded with the current matching set.

        Registration and the initial read happen without yielding to the
        event loop, so no commit can fall between them.
        """
        db = self.session_factory()
        try:
            initial = self._load_matching(db, order_filter)
        except DBAPIError as e:
            raise translate_read_error(e) from e
        finally:
            db.close()
        return self.feed.open(order_filter, initial)

    def _load_matching(
        self, db: Session, order_filter: OrderFilter, limit: Optional[int] = None
    ) -> List[OrderRead]:
        query = db.query(Order).filter(Order.restaurant_id == order_filter.restaurant_id)
        if order_filter.statuses is not None:
            query = query.filter(Order.status.in_(order_filter.statuses))
        if order_filter.order_ids is not None:
            query = query.filter(Order.id.in_(order_filter.order_ids))

        if order_filter.is_bounded:
            rows = query.order_by(Order.created_at, Order.id).all()
        else:
            # Newest window of the history, returned oldest first
            rows = (
                query.order_by(Order.created_at.desc(), Order.id.desc())
                .limit(limit or self.order_history_limit)
                .all()
            )
            rows.reverse()

        snapshots = []
        for row in rows:
            try:
                snapshots.append(decode_order(row))
            except ValidationError as e:
                logger.error(f"Skipping malformed order record: {e.detail}")
        return snapshots

    # Writes

    async def create(self, data: OrderCreate) -> int:
        result = await self.create_and_apply(data)
        return result.order.id

    async def create_and_apply(
        self, data: OrderCreate, mutator: Optional[OrderMutator] = None
    ) -> StoreResult:
        """Insert a new order; mutator (if any) runs in the same transaction"""

        def load(db: Session) -> Dict[int, Order]:
            order = build_order(data)
            db.add(order)
            db.flush()
            return {order.id: order}

        def apply(orders: Dict[int, Order], db: Session):
            if mutator is None:
                return None
            return mutator(next(iter(orders.values())), db)

        result = await self._run(load, apply, touch=False)
        logger.info(
            f"Order {result.order.id} created for restaurant {data.restaurant_id} "
            f"({result.order.order_type.value}, {len(result.order.items)} lines)"
        )
        return result

    async def transactional_update(self, order_id: int, mutator: OrderMutator) -> StoreResult:
        """Apply mutator(order, db) to one order atomically"""
        return await self._run(
            lambda db: self._lock_orders(db, [order_id]),
            lambda orders, db: mutator(orders[order_id], db),
        )

    async def transactional_update_many(
        self, order_ids: Iterable[int], mutator: BatchMutator
    ) -> StoreResult:
        """
        Apply mutator(orders_by_id, db) to several orders in one transaction.

        Either every order commits or none does; a conflict on any of them
        replays the whole batch.
        """
        ids = sorted(set(order_ids))
        return await self._run(lambda db: self._lock_orders(db, ids), mutator)

    def _lock_orders(self, db: Session, order_ids: List[int]) -> Dict[int, Order]:
        orders = (
            db.query(Order)
            .filter(Order.id.in_(order_ids))
            .order_by(Order.id)
            .with_for_update()
            .all()
        )
        found = {order.id: order for order in orders}
        missing = [order_id for order_id in order_ids if order_id not in found]
        if missing:
            raise NotFoundError(f"Orders not found: {missing}")
        return found

    async def _run(self, load, mutator, touch: bool = True) -> StoreResult:
        return await retry_on_conflict(
            self._attempt,
            load,
            mutator,
            touch,
            max_retries=self.max_retries,
            initial_delay=self.initial_delay,
            max_delay=self.max_delay,
            backoff_factor=self.backoff_factor,
        )

    async def _attempt(self, load, mutator, touch: bool) -> StoreResult:
        db = self.session_factory()
        try:
            orders = load(db)
            result = mutator(orders, db)

            for order in orders.values():
                self._check_invariants(order)
                if touch:
                    # Forces a versioned UPDATE even when only items changed
                    order.updated_at = utc_now()

            db.flush()
            snapshots = [decode_order(order) for order in orders.values()]
            db.commit()
        except (StaleDataError, DBAPIError) as e:
            db.rollback()
            raise translate_store_error(e) from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

        self.feed.publish(snapshots)
        return StoreResult(orders=snapshots, result=result)

    @staticmethod
    def _check_invariants(order: Order) -> None:
        if not order.items:
            raise ValidationError(
                f"Order {order.id} has no items", error_code="EMPTY_ORDER"
            )
        expected = compute_total(
            order.subtotal,
            order.tax_amount,
            order.tip,
            order.platform_fee,
            order.discount_amount,
        )
        if quantize_money(order.total) != expected:
            raise ValidationError(
                f"Order {order.id} total {order.total} does not match its components "
                f"({expected})",
                error_code="TOTAL_MISMATCH",
            )
