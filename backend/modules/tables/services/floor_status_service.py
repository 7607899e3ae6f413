# backend/modules/tables/services/floor_status_service.py

"""
Floor status derivation.

A table's effective status is never stored. It is derived from its
manual override and the open dine-in orders whose plate number matches
its label (case-insensitive), first match wins:

    needs_cleaning override > any Ready order (attention)
    > any New / In Progress order (ordered) > seated override > available
"""

import logging
from collections import defaultdict
from typing import AsyncIterator, Dict, Iterable, List, Optional

from sqlalchemy.orm import sessionmaker

from core.exceptions import NotFoundError
from modules.orders.enums.order_enums import OPEN_ORDER_STATUSES, OrderStatus
from modules.orders.schemas.order_schemas import OrderRead
from modules.orders.services.order_feed import OrderFilter
from modules.orders.services.order_service import OrderService
from modules.orders.services.order_store import OrderStore
from modules.orders.utils.money import sum_money
from ..models.table_models import FloorPlan, ManualTableStatus, TableStatus
from ..schemas.table_schemas import (
    FloorTableView,
    FloorView,
    TableAction,
    TableSelection,
)
from .table_service import get_table, normalize_label

logger = logging.getLogger(__name__)

OCCUPIED_STATUSES = (TableStatus.SEATED, TableStatus.ORDERED, TableStatus.ATTENTION)


def derive_table_status(
    manual_status: Optional[ManualTableStatus], orders: Iterable[OrderRead]
) -> TableStatus:
    statuses = {order.status for order in orders if order.is_open}

    if manual_status == ManualTableStatus.NEEDS_CLEANING:
        return TableStatus.NEEDS_CLEANING
    if OrderStatus.READY in statuses:
        return TableStatus.ATTENTION
    if statuses & {OrderStatus.NEW, OrderStatus.IN_PROGRESS}:
        return TableStatus.ORDERED
    if manual_status == ManualTableStatus.SEATED:
        return TableStatus.SEATED
    return TableStatus.AVAILABLE


def open_orders_by_table(orders: Iterable[OrderRead]) -> Dict[str, List[OrderRead]]:
    """Open dine-in orders grouped by upper-cased plate number, oldest first"""
    grouped: Dict[str, List[OrderRead]] = defaultdict(list)
    for order in sorted(orders, key=lambda o: (o.created_at, o.id)):
        if order.is_open and order.table_key:
            grouped[order.table_key].append(order)
    return dict(grouped)


def derive_floor(
    floor_plan: Optional[FloorPlan], restaurant_id: int, orders: Iterable[OrderRead]
) -> FloorView:
    if floor_plan is None:
        return FloorView(restaurant_id=restaurant_id)

    by_table = open_orders_by_table(orders)
    tables = []
    for table in floor_plan.tables:
        table_orders = by_table.get(normalize_label(table.label), [])
        view = FloorTableView.model_validate(table)
        tables.append(
            view.model_copy(
                update={
                    "status": derive_table_status(table.manual_status, table_orders),
                    "order_ids": [o.id for o in table_orders],
                    "open_order_total": sum_money(o.total for o in table_orders),
                }
            )
        )

    return FloorView(
        restaurant_id=restaurant_id,
        grid_width=floor_plan.grid_width,
        grid_height=floor_plan.grid_height,
        tables=tables,
        occupied_tables=sum(1 for t in tables if t.status in OCCUPIED_STATUSES),
        total_tables=len(tables),
        live_revenue=sum_money(t.open_order_total for t in tables),
    )


class FloorStatusService:
    def __init__(
        self,
        store: OrderStore,
        session_factory: sessionmaker,
        order_service: OrderService,
    ):
        self.store = store
        self.session_factory = session_factory
        self.order_service = order_service

    @staticmethod
    def _open_filter(restaurant_id: int) -> OrderFilter:
        return OrderFilter(restaurant_id=restaurant_id, statuses=OPEN_ORDER_STATUSES)

    def _derive(self, restaurant_id: int, orders: List[OrderRead]) -> FloorView:
        db = self.session_factory()
        try:
            floor_plan = (
                db.query(FloorPlan).filter(FloorPlan.restaurant_id == restaurant_id).first()
            )
            return derive_floor(floor_plan, restaurant_id, orders)
        finally:
            db.close()

    async def get_floor(self, restaurant_id: int) -> FloorView:
        orders = await self.store.list_orders(self._open_filter(restaurant_id))
        return self._derive(restaurant_id, orders)

    async def get_table_view(self, restaurant_id: int, table_id: int) -> FloorTableView:
        floor = await self.get_floor(restaurant_id)
        for table in floor.tables:
            if table.id == table_id:
                return table
        raise NotFoundError(f"Table {table_id} not found")

    async def watch(self, restaurant_id: int) -> AsyncIterator[FloorView]:
        """Fresh floor after every open-order change or manual status change"""
        subscription = self.store.subscribe(self._open_filter(restaurant_id))
        async with subscription:
            async for orders in subscription:
                yield self._derive(restaurant_id, orders)

    async def set_manual_status(
        self, restaurant_id: int, table_id: int, manual_status: Optional[ManualTableStatus]
    ) -> FloorTableView:
        db = self.session_factory()
        try:
            table = get_table(db, restaurant_id, table_id)
            table.manual_status = manual_status
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

        logger.info(
            f"Table {table_id} manual status set to "
            f"{manual_status.value if manual_status else 'unset'}"
        )
        self.store.feed.notify(restaurant_id)
        return await self.get_table_view(restaurant_id, table_id)

    async def select_table(
        self, restaurant_id: int, table_id: int, confirm_clear: bool = False
    ) -> TableSelection:
        """
        A table needing cleaning asks for confirmation, then resets to
        available. Any other table opens its consolidated ticket.
        """
        table = await self.get_table_view(restaurant_id, table_id)

        if table.status == TableStatus.NEEDS_CLEANING:
            if not confirm_clear:
                return TableSelection(table=table, action=TableAction.CONFIRM_CLEAR)
            table = await self.set_manual_status(
                restaurant_id, table_id, ManualTableStatus.AVAILABLE
            )
            return TableSelection(table=table, action=TableAction.CLEARED)

        if not table.order_ids:
            return TableSelection(table=table, action=TableAction.NEW_ORDER)

        ticket = await self.order_service.open_table_ticket(restaurant_id, table.label)
        return TableSelection(table=table, action=TableAction.OPEN_TICKET, ticket=ticket)
