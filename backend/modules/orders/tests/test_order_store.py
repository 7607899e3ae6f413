# backend/modules/orders/tests/test_order_store.py

import asyncio
import pytest
from decimal import Decimal
from unittest.mock import Mock, patch

from sqlalchemy.exc import OperationalError

from core.exceptions import (
    ConflictError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from tests.factories import OrderFactory
from ..enums.order_enums import OPEN_ORDER_STATUSES, OrderStatus, OrderType
from ..models.order_models import Order
from ..schemas.order_schemas import OrderCreate, OrderItemCreate
from ..services.order_feed import OrderFilter
from ..utils.money import compute_total


def order_create(menu_item_id, plate_number="Sara", quantity=1, price="2.000"):
    subtotal = Decimal(price) * quantity
    return OrderCreate(
        restaurant_id=1,
        order_type=OrderType.TAKEAWAY,
        plate_number=plate_number,
        items=[
            OrderItemCreate(
                menu_item_id=menu_item_id,
                name="Burger",
                base_price=Decimal(price),
                price=Decimal(price),
                quantity=quantity,
            )
        ],
        subtotal=subtotal,
        total=subtotal,
    )


def rival_update(session_factory, order_id, **changes):
    """Commit a change from another terminal's session"""
    other = session_factory()
    try:
        order = other.get(Order, order_id)
        for name, value in changes.items():
            setattr(order, name, value)
        other.commit()
    finally:
        other.close()


def add_tip(order, tip):
    order.tip = Decimal(tip)
    order.total = compute_total(
        order.subtotal, order.tax_amount, order.tip, order.platform_fee, order.discount_amount
    )


class TestOrderStoreReads:
    async def test_create_and_get(self, store, restaurant):
        order_id = await store.create(order_create(restaurant.burger.id, quantity=2))

        order = await store.get(order_id)

        assert order.status == OrderStatus.NEW
        assert order.version == 1
        assert order.total == Decimal("4.000")
        assert [(i.line_index, i.quantity) for i in order.items] == [(0, 2)]
        assert order.items[0].inventory_deducted is False

    async def test_get_missing_order(self, store):
        with pytest.raises(NotFoundError):
            await store.get(12345)

    async def test_list_orders_filters_by_status(self, store, restaurant):
        open_id = await store.create(order_create(restaurant.burger.id))
        OrderFactory(status=OrderStatus.COMPLETED, payment_method=None)

        orders = await store.list_orders(
            OrderFilter(restaurant_id=1, statuses=OPEN_ORDER_STATUSES)
        )

        assert [o.id for o in orders] == [open_id]

    async def test_malformed_records_are_rejected(self, store, restaurant):
        good_id = await store.create(order_create(restaurant.burger.id))
        broken = OrderFactory(total=Decimal("99.000"))

        orders = await store.list_orders(OrderFilter(restaurant_id=1))

        assert [o.id for o in orders] == [good_id]
        with pytest.raises(ValidationError) as exc:
            await store.get(broken.id)
        assert exc.value.error_code == "INVALID_ORDER"

    async def test_open_orders_are_never_truncated(self, services, store, restaurant):
        store.order_history_limit = 2
        created = [
            await store.create(order_create(restaurant.burger.id, plate_number=name))
            for name in ("Sara", "Omar", "Layla")
        ]

        orders = await store.list_orders(
            OrderFilter(restaurant_id=1, statuses=OPEN_ORDER_STATUSES)
        )
        summaries = await services.kitchen.get_summaries(1)

        assert [o.id for o in orders] == created
        assert summaries[0].total_quantity == 3

    async def test_history_returns_newest_orders(self, store, restaurant):
        store.order_history_limit = 2
        completed = [
            OrderFactory(status=OrderStatus.COMPLETED, payment_method=None).id
            for _ in range(3)
        ]
        history = OrderFilter(restaurant_id=1, statuses=(OrderStatus.COMPLETED,))

        assert [o.id for o in await store.list_orders(history)] == completed[1:]
        assert [o.id for o in await store.list_orders(history, limit=1)] == completed[2:]

    async def test_locked_read_reports_store_unavailable(self, store):
        locked = Mock()
        locked.get.side_effect = OperationalError("database is locked", None, None)
        locked.query.side_effect = OperationalError("database is locked", None, None)

        with patch.object(store, "session_factory", return_value=locked):
            with pytest.raises(StoreUnavailableError):
                await store.get(1)
            with pytest.raises(StoreUnavailableError):
                await store.list_orders(OrderFilter(restaurant_id=1))

        assert locked.close.call_count == 2


class TestOrderStoreWrites:
    async def test_update_bumps_version_and_publishes(self, store, restaurant):
        order_id = await store.create(order_create(restaurant.burger.id))
        subscription = store.subscribe(OrderFilter(restaurant_id=1))
        await subscription.__anext__()

        result = await store.transactional_update(order_id, lambda o, db: add_tip(o, "0.500"))
        update = await asyncio.wait_for(subscription.__anext__(), timeout=1)

        assert result.order.version == 2
        assert result.order.total == Decimal("2.500")
        assert update[0].version == 2
        subscription.close()

    async def test_item_only_change_still_bumps_version(self, store, restaurant):
        order_id = await store.create(order_create(restaurant.burger.id))

        def complete_line(order, db):
            order.items[0].is_completed = True

        result = await store.transactional_update(order_id, complete_line)

        assert result.order.version == 2
        assert result.order.items[0].is_completed is True

    async def test_total_invariant_enforced(self, store, restaurant):
        order_id = await store.create(order_create(restaurant.burger.id))

        def break_total(order, db):
            order.tip = Decimal("1.000")

        with pytest.raises(ValidationError) as exc:
            await store.transactional_update(order_id, break_total)

        assert exc.value.error_code == "TOTAL_MISMATCH"
        order = await store.get(order_id)
        assert order.tip == Decimal("0.000")
        assert order.version == 1

    async def test_order_without_items_rejected(self, store, restaurant):
        order_id = await store.create(order_create(restaurant.burger.id))

        with pytest.raises(ValidationError) as exc:
            await store.transactional_update(order_id, lambda o, db: o.items.clear())

        assert exc.value.error_code == "EMPTY_ORDER"
        assert len((await store.get(order_id)).items) == 1

    async def test_failed_mutation_rolls_back_and_publishes_nothing(self, store, restaurant):
        order_id = await store.create(order_create(restaurant.burger.id))

        def fail_halfway(order, db):
            order.status = OrderStatus.READY
            raise ValidationError("rejected", error_code="NOPE")

        with patch.object(store.feed, "publish", wraps=store.feed.publish) as publish:
            with pytest.raises(ValidationError):
                await store.transactional_update(order_id, fail_halfway)

        publish.assert_not_called()
        assert (await store.get(order_id)).status == OrderStatus.NEW

    async def test_conflicting_commit_is_replayed(self, store, session_factory, restaurant):
        order_id = await store.create(order_create(restaurant.burger.id))
        seen_versions = []

        def mutator(order, db):
            seen_versions.append(order.version)
            if len(seen_versions) == 1:
                rival_update(session_factory, order_id, notes="from the bar terminal")
            add_tip(order, "1.000")

        result = await store.transactional_update(order_id, mutator)

        assert seen_versions == [1, 2]
        assert result.order.notes == "from the bar terminal"
        assert result.order.tip == Decimal("1.000")
        assert result.order.total == Decimal("3.000")
        assert result.order.version == 3

    async def test_conflict_surfaces_after_retries_exhausted(
        self, store, session_factory, restaurant
    ):
        order_id = await store.create(order_create(restaurant.burger.id))
        attempts = []

        def always_loses(order, db):
            attempts.append(order.version)
            rival_update(session_factory, order_id, notes=f"rival {len(attempts)}")
            add_tip(order, "1.000")

        with pytest.raises(ConflictError):
            await store.transactional_update(order_id, always_loses)

        assert len(attempts) == store.max_retries + 1
        assert (await store.get(order_id)).tip == Decimal("0.000")

    async def test_update_many_is_all_or_nothing(self, store, restaurant):
        first = await store.create(order_create(restaurant.burger.id))
        second = await store.create(order_create(restaurant.burger.id, plate_number="Omar"))

        def mutator(orders, db):
            add_tip(orders[first], "0.500")
            orders[second].tip = Decimal("9.000")  # total left stale

        with pytest.raises(ValidationError):
            await store.transactional_update_many([first, second], mutator)

        assert (await store.get(first)).tip == Decimal("0.000")

    async def test_update_many_missing_order(self, store, restaurant):
        first = await store.create(order_create(restaurant.burger.id))

        with pytest.raises(NotFoundError):
            await store.transactional_update_many([first, 999], lambda orders, db: None)

    async def test_create_and_apply_runs_in_same_transaction(self, store, restaurant):
        def complete(order, db):
            order.status = OrderStatus.COMPLETED
            return "done"

        result = await store.create_and_apply(order_create(restaurant.burger.id), complete)

        assert result.result == "done"
        assert result.order.status == OrderStatus.COMPLETED
        assert (await store.get(result.order.id)).status == OrderStatus.COMPLETED

    async def test_create_rejects_invalid_mutation(self, store, restaurant):
        def break_total(order, db):
            order.tip = Decimal("5.000")

        with pytest.raises(ValidationError):
            await store.create_and_apply(order_create(restaurant.burger.id), break_total)

        assert await store.list_orders(OrderFilter(restaurant_id=1)) == []
