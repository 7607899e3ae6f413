# backend/modules/kds/schemas/kds_schemas.py

"""
Pydantic schemas for the kitchen display and expeditor views.

Nothing here is persisted; every view is rebuilt from the live order set.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum

from modules.orders.enums.order_enums import OrderStatus, OrderType


class TimerLevel(str, Enum):
    GREEN = "green"
    AMBER = "amber"
    RED = "red"


class PrepTimeAlert(BaseModel):
    """Elapsed-time badge for one ticket line"""

    elapsed_minutes: int
    target_minutes: Optional[int] = None
    level: TimerLevel = TimerLevel.GREEN
    needs_attention: bool = False


class KDSIndividualOrder(BaseModel):
    """One occurrence of a dish on one order"""

    order_id: int
    line_index: int
    plate_number: Optional[str] = None
    order_type: OrderType
    order_status: OrderStatus
    quantity: int
    created_at: datetime
    prep_time_minutes: Optional[int] = None
    notes: Optional[str] = None
    modifiers: List[str] = Field(default_factory=list)
    timer: PrepTimeAlert


class KDSItemSummary(BaseModel):
    """Outstanding work for one dish (menu item plus modifiers) across orders"""

    key: str
    menu_item_id: int
    name: str
    modifiers: List[str] = Field(default_factory=list)
    station_name: Optional[str] = None
    total_quantity: int = 0
    orders: List[KDSIndividualOrder] = Field(default_factory=list)

    @property
    def modifiers_label(self) -> str:
        return ", ".join(self.modifiers) if self.modifiers else "none"


class ExpoItem(BaseModel):
    line_index: int
    name: str
    quantity: int
    modifiers: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    is_ready: bool = False


class ExpoOrder(BaseModel):
    order_id: int
    plate_number: Optional[str] = None
    order_type: OrderType
    status: OrderStatus
    created_at: datetime
    items: List[ExpoItem] = Field(default_factory=list)
    ready_count: int = 0
    total_count: int = 0
    can_proceed_to_payment: bool = False


# Requests


class CompleteItemRequest(BaseModel):
    line_index: int = Field(..., ge=0)


class BumpGroupRequest(BaseModel):
    restaurant_id: int
    key: str = Field(..., min_length=1)
    station: Optional[str] = None


class BumpResponse(BaseModel):
    order_ids: List[int] = Field(default_factory=list)
    items_completed: int = 0
