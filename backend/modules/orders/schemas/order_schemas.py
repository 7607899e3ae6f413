from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from ..enums.order_enums import (
    OrderStatus,
    OrderType,
    PaymentMethod,
    OPEN_ORDER_STATUSES,
)
from ..utils.money import ZERO, compute_total, quantize_money


class SelectedModifier(BaseModel):
    """A modifier option chosen at cart time, copied verbatim onto the order"""

    model_config = ConfigDict(frozen=True)

    option_name: str
    option_price: Decimal = ZERO


class AppliedTax(BaseModel):
    """Tax snapshot stored on the order so history never drifts"""

    model_config = ConfigDict(frozen=True)

    name: str
    rate: Decimal
    amount: Decimal


class AppliedDiscount(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    amount: Decimal = Field(..., ge=0)


class OrderItemCreate(BaseModel):
    menu_item_id: int
    name: str
    base_price: Decimal = Field(..., ge=0)
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    selected_modifiers: List[SelectedModifier] = Field(default_factory=list)
    notes: Optional[str] = None
    is_completed: bool = False


class OrderItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    line_index: int
    menu_item_id: int
    name: str
    base_price: Decimal
    price: Decimal
    quantity: int = Field(..., ge=1)
    selected_modifiers: List[SelectedModifier] = Field(default_factory=list)
    notes: Optional[str] = None
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    inventory_deducted: bool = False

    @field_validator("selected_modifiers", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or []

    @property
    def line_total(self) -> Decimal:
        return quantize_money(self.price * self.quantity)


class OrderCreate(BaseModel):
    """A fully priced order ready to be persisted"""

    restaurant_id: int
    order_type: OrderType
    plate_number: Optional[str] = None
    status: OrderStatus = OrderStatus.NEW
    notes: Optional[str] = None
    items: List[OrderItemCreate] = Field(..., min_length=1)

    subtotal: Decimal
    taxes: List[AppliedTax] = Field(default_factory=list)
    tax_amount: Decimal = ZERO
    tip: Decimal = ZERO
    platform_fee: Decimal = ZERO
    applied_discounts: List[AppliedDiscount] = Field(default_factory=list)
    discount_amount: Decimal = ZERO
    total: Decimal

    @model_validator(mode="after")
    def check_total(self):
        expected = compute_total(
            self.subtotal, self.tax_amount, self.tip, self.platform_fee, self.discount_amount
        )
        if quantize_money(self.total) != expected:
            raise ValueError(f"Order total {self.total} does not match components ({expected})")
        return self


class OrderRead(BaseModel):
    """
    Validated order snapshot.

    Everything that leaves the order store is one of these; a record that
    fails validation is rejected at the store boundary instead of being
    handed out half-formed.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    restaurant_id: int
    order_type: OrderType
    plate_number: Optional[str] = None
    status: OrderStatus
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = None
    items: List[OrderItemRead] = Field(..., min_length=1)

    subtotal: Decimal
    taxes: List[AppliedTax] = Field(default_factory=list)
    tax_amount: Decimal = ZERO
    tip: Decimal = ZERO
    platform_fee: Decimal = ZERO
    applied_discounts: List[AppliedDiscount] = Field(default_factory=list)
    discount_amount: Decimal = ZERO
    total: Decimal

    created_at: datetime
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    version: int

    @field_validator("taxes", "applied_discounts", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or []

    @model_validator(mode="after")
    def check_total(self):
        expected = compute_total(
            self.subtotal, self.tax_amount, self.tip, self.platform_fee, self.discount_amount
        )
        if quantize_money(self.total) != expected:
            raise ValueError(
                f"Order {self.id} total {self.total} does not match components ({expected})"
            )
        return self

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_ORDER_STATUSES

    @property
    def is_dine_in(self) -> bool:
        return self.order_type == OrderType.DINE_IN

    @property
    def table_key(self) -> Optional[str]:
        """Case-insensitive table key, None for takeaway or unlabelled orders"""
        if self.order_type == OrderType.TAKEAWAY or not self.plate_number:
            return None
        return self.plate_number.strip().upper()

    @property
    def outstanding_items(self) -> List[OrderItemRead]:
        return [item for item in self.items if not item.is_completed]


class DiscountRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., ge=0)


class TipRequest(BaseModel):
    tip: Decimal = Field(..., ge=0)
