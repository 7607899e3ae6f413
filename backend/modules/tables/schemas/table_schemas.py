# backend/modules/tables/schemas/table_schemas.py

from pydantic import BaseModel, ConfigDict, Field, computed_field
from typing import Optional, List
from decimal import Decimal
from enum import Enum

from modules.orders.schemas.cart_schemas import CartRead
from ..models.table_models import ManualTableStatus, TableStatus


class FloorTableView(BaseModel):
    """A table with its effective status derived from live orders"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    label: str
    manual_status: Optional[ManualTableStatus] = None
    status: TableStatus = TableStatus.AVAILABLE
    order_ids: List[int] = Field(default_factory=list)
    open_order_total: Decimal = Decimal("0")
    position_x: int = 0
    position_y: int = 0
    width: int = 1
    height: int = 1
    shape: str = "square"


class FloorView(BaseModel):
    restaurant_id: int
    grid_width: int = 12
    grid_height: int = 8
    tables: List[FloorTableView] = Field(default_factory=list)
    occupied_tables: int = 0
    total_tables: int = 0
    live_revenue: Decimal = Decimal("0")

    @computed_field
    @property
    def occupancy_rate(self) -> float:
        if not self.total_tables:
            return 0.0
        return round(self.occupied_tables / self.total_tables * 100, 1)


class TableAction(str, Enum):
    CONFIRM_CLEAR = "confirm_clear"
    CLEARED = "cleared"
    OPEN_TICKET = "open_ticket"
    NEW_ORDER = "new_order"


class TableSelection(BaseModel):
    table: FloorTableView
    action: TableAction
    ticket: Optional[CartRead] = None


class ManualStatusRequest(BaseModel):
    manual_status: Optional[ManualTableStatus] = None


class SelectTableRequest(BaseModel):
    confirm_clear: bool = False
