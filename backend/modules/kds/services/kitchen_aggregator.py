# backend/modules/kds/services/kitchen_aggregator.py

"""
Kitchen work queue.

Outstanding lines of every New / In Progress order are grouped by dish:
menu item plus canonical modifier names, the same identity the cart uses
for merging. Completing lines goes through the order store so the line
flag and the order status always change together; bumping a whole group
touches many orders in one transaction.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import AsyncIterator, Dict, Iterable, List, Optional, Sequence, Tuple

from core.config import get_settings
from core.exceptions import NotFoundError
from core.mixins import utc_now
from modules.menu.schemas.menu_schemas import MenuItemRead
from modules.menu.services.catalog_cache import CatalogCache
from modules.orders.enums.order_enums import (
    EXPO_ORDER_STATUSES,
    KITCHEN_ORDER_STATUSES,
    OrderStatus,
)
from modules.orders.models.order_models import Order
from modules.orders.schemas.order_schemas import OrderRead
from modules.orders.services.cart_service import cart_item_key
from modules.orders.services.order_feed import OrderFilter
from modules.orders.services.order_store import OrderStore
from ..schemas.kds_schemas import (
    BumpResponse,
    ExpoItem,
    ExpoOrder,
    KDSIndividualOrder,
    KDSItemSummary,
    PrepTimeAlert,
    TimerLevel,
)

logger = logging.getLogger(__name__)


def prep_time_alert(
    created_at: datetime,
    target_minutes: Optional[int],
    now: Optional[datetime] = None,
    warning_ratio: Optional[float] = None,
    critical_ratio: Optional[float] = None,
) -> PrepTimeAlert:
    """
    Colour an elapsed time against the dish's target prep time.

    Green below the warning ratio, amber up to the critical ratio, red
    (needing attention) at or past it. No target means always green.
    """
    settings = get_settings()
    warning_ratio = settings.kds_warning_ratio if warning_ratio is None else warning_ratio
    critical_ratio = settings.kds_critical_ratio if critical_ratio is None else critical_ratio

    now = now or utc_now()
    elapsed = max(int((now - created_at).total_seconds() // 60), 0)

    if not target_minutes:
        return PrepTimeAlert(elapsed_minutes=elapsed, target_minutes=target_minutes)

    ratio = elapsed / target_minutes
    if ratio >= critical_ratio:
        level = TimerLevel.RED
    elif ratio >= warning_ratio:
        level = TimerLevel.AMBER
    else:
        level = TimerLevel.GREEN

    return PrepTimeAlert(
        elapsed_minutes=elapsed,
        target_minutes=target_minutes,
        level=level,
        needs_attention=level == TimerLevel.RED,
    )


def build_item_summaries(
    orders: Iterable[OrderRead],
    menu_items: Dict[int, MenuItemRead],
    station: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[KDSItemSummary]:
    """Group outstanding lines by dish, largest groups first"""
    now = now or utc_now()
    station_key = station.strip().lower() if station else None

    occurrences: Dict[str, List[KDSIndividualOrder]] = defaultdict(list)
    heads: Dict[str, dict] = {}

    for order in sorted(orders, key=lambda o: (o.created_at, o.id)):
        if order.status not in KITCHEN_ORDER_STATUSES:
            continue
        for item in order.outstanding_items:
            menu_item = menu_items.get(item.menu_item_id)
            station_name = menu_item.station_name if menu_item else None
            if station_key and (station_name or "").strip().lower() != station_key:
                continue

            prep_time = menu_item.prep_time_minutes if menu_item else None
            key = cart_item_key(item.menu_item_id, item.selected_modifiers)
            modifiers = sorted(m.option_name for m in item.selected_modifiers)

            heads.setdefault(
                key,
                {
                    "key": key,
                    "menu_item_id": item.menu_item_id,
                    "name": item.name,
                    "modifiers": modifiers,
                    "station_name": station_name,
                },
            )
            occurrences[key].append(
                KDSIndividualOrder(
                    order_id=order.id,
                    line_index=item.line_index,
                    plate_number=order.plate_number,
                    order_type=order.order_type,
                    order_status=order.status,
                    quantity=item.quantity,
                    created_at=order.created_at,
                    prep_time_minutes=prep_time,
                    notes=item.notes,
                    modifiers=modifiers,
                    timer=prep_time_alert(order.created_at, prep_time, now),
                )
            )

    summaries = [
        KDSItemSummary(
            **heads[key],
            total_quantity=sum(o.quantity for o in lines),
            orders=lines,
        )
        for key, lines in occurrences.items()
    ]
    summaries.sort(key=lambda s: (-s.total_quantity, s.name, s.key))
    return summaries


def apply_item_completion(order: Order, line_index: int) -> bool:
    """
    Mark one line done and move the order along.

    Ready once every line is done, otherwise New becomes In Progress.
    Returns False when the line was already complete.
    """
    item = next((i for i in order.items if i.line_index == line_index), None)
    if item is None:
        raise NotFoundError(f"Order {order.id} has no line {line_index}")
    if item.is_completed:
        return False

    item.is_completed = True
    item.completed_at = utc_now()

    if order.status == OrderStatus.COMPLETED:
        return True
    if all(i.is_completed for i in order.items):
        order.status = OrderStatus.READY
    elif order.status == OrderStatus.NEW:
        order.status = OrderStatus.IN_PROGRESS
    return True


def build_expo_orders(orders: Iterable[OrderRead]) -> List[ExpoOrder]:
    """Orders waiting on the kitchen or on payment, oldest first"""
    expo = []
    for order in sorted(orders, key=lambda o: (o.created_at, o.id)):
        if order.status not in EXPO_ORDER_STATUSES:
            continue
        items = [
            ExpoItem(
                line_index=item.line_index,
                name=item.name,
                quantity=item.quantity,
                modifiers=[m.option_name for m in item.selected_modifiers],
                notes=item.notes,
                is_ready=item.is_completed,
            )
            for item in order.items
        ]
        expo.append(
            ExpoOrder(
                order_id=order.id,
                plate_number=order.plate_number,
                order_type=order.order_type,
                status=order.status,
                created_at=order.created_at,
                items=items,
                ready_count=sum(1 for item in items if item.is_ready),
                total_count=len(items),
                can_proceed_to_payment=order.status == OrderStatus.READY,
            )
        )
    return expo


class KitchenAggregator:
    def __init__(self, store: OrderStore, catalog: CatalogCache):
        self.store = store
        self.catalog = catalog

    @staticmethod
    def _kitchen_filter(restaurant_id: int) -> OrderFilter:
        return OrderFilter(restaurant_id=restaurant_id, statuses=KITCHEN_ORDER_STATUSES)

    async def get_summaries(
        self, restaurant_id: int, station: Optional[str] = None
    ) -> List[KDSItemSummary]:
        orders = await self.store.list_orders(self._kitchen_filter(restaurant_id))
        menu_items = await self.catalog.get_menu_items(restaurant_id)
        return build_item_summaries(orders, menu_items, station)

    async def watch(
        self, restaurant_id: int, station: Optional[str] = None
    ) -> AsyncIterator[List[KDSItemSummary]]:
        """Fresh summaries after every change to the kitchen's order set"""
        subscription = self.store.subscribe(self._kitchen_filter(restaurant_id))
        async with subscription:
            async for orders in subscription:
                menu_items = await self.catalog.get_menu_items(restaurant_id)
                yield build_item_summaries(orders, menu_items, station)

    async def complete_item(self, order_id: int, line_index: int) -> OrderRead:
        result = await self.store.transactional_update(
            order_id, lambda order, db: apply_item_completion(order, line_index)
        )
        logger.info(
            f"Order {order_id} line {line_index} completed; order now {result.order.status.value}"
        )
        return result.order

    async def bump_items(self, occurrences: Sequence[Tuple[int, int]]) -> BumpResponse:
        """
        Complete many (order_id, line_index) occurrences in one transaction.

        Every order involved is updated or none is.
        """
        if not occurrences:
            return BumpResponse()

        def mutator(orders: Dict[int, Order], db) -> int:
            completed = 0
            for order_id, line_index in occurrences:
                if apply_item_completion(orders[order_id], line_index):
                    completed += 1
            return completed

        result = await self.store.transactional_update_many(
            [order_id for order_id, _ in occurrences], mutator
        )
        logger.info(
            f"Bumped {result.result} lines across {len(result.orders)} orders"
        )
        return BumpResponse(
            order_ids=[order.id for order in result.orders], items_completed=result.result
        )

    async def bump_group(
        self, restaurant_id: int, key: str, station: Optional[str] = None
    ) -> BumpResponse:
        summaries = await self.get_summaries(restaurant_id, station)
        group = next((s for s in summaries if s.key == key), None)
        if group is None:
            raise NotFoundError(f"No outstanding kitchen group '{key}'")
        return await self.bump_items([(o.order_id, o.line_index) for o in group.orders])

    async def get_expo_orders(self, restaurant_id: int) -> List[ExpoOrder]:
        orders = await self.store.list_orders(
            OrderFilter(restaurant_id=restaurant_id, statuses=EXPO_ORDER_STATUSES)
        )
        return build_expo_orders(orders)
