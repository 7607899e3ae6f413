# backend/modules/tables/services/table_service.py

"""Table lookups shared by the floor view and the order finalizer"""

from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError
from modules.orders.enums.order_enums import OPEN_ORDER_STATUSES, OrderType
from modules.orders.models.order_models import Order
from ..models.table_models import FloorPlan, FloorPlanTable


def normalize_label(label: Optional[str]) -> Optional[str]:
    if not label:
        return None
    return label.strip().upper() or None


def find_table_by_label(
    db: Session, restaurant_id: int, label: str
) -> Optional[FloorPlanTable]:
    key = normalize_label(label)
    if key is None:
        return None
    return (
        db.query(FloorPlanTable)
        .join(FloorPlan, FloorPlan.id == FloorPlanTable.floor_plan_id)
        .filter(
            FloorPlan.restaurant_id == restaurant_id,
            func.upper(FloorPlanTable.label) == key,
        )
        .first()
    )


def get_table(db: Session, restaurant_id: int, table_id: int) -> FloorPlanTable:
    table = (
        db.query(FloorPlanTable)
        .join(FloorPlan, FloorPlan.id == FloorPlanTable.floor_plan_id)
        .filter(FloorPlan.restaurant_id == restaurant_id, FloorPlanTable.id == table_id)
        .first()
    )
    if not table:
        raise NotFoundError(f"Table {table_id} not found")
    return table


def has_other_open_orders(
    db: Session, restaurant_id: int, label: str, exclude_ids: Iterable[int] = ()
) -> bool:
    """True if any open dine-in order outside exclude_ids still sits at the table"""
    key = normalize_label(label)
    if key is None:
        return False
    query = db.query(Order.id).filter(
        Order.restaurant_id == restaurant_id,
        Order.order_type != OrderType.TAKEAWAY,
        Order.status.in_(OPEN_ORDER_STATUSES),
        func.upper(func.trim(Order.plate_number)) == key,
    )
    exclude_ids = list(exclude_ids)
    if exclude_ids:
        query = query.filter(Order.id.notin_(exclude_ids))
    return query.first() is not None
