from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from decimal import Decimal
from uuid import uuid4
from .order_schemas import SelectedModifier
from ..enums.order_enums import OrderType, PaymentMethod
from ..utils.money import quantize_money


def normalize_note(value: Optional[str]) -> Optional[str]:
    """Trimmed note, with blank treated the same as no note"""
    if value is None:
        return None
    value = value.strip()
    return value or None


class CartItem(BaseModel):
    """A prospective order line; never persisted as-is"""

    model_config = ConfigDict(validate_assignment=True)

    line_id: str = Field(default_factory=lambda: uuid4().hex)
    cart_item_id: str
    menu_item_id: int
    name: str
    base_price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    selected_modifiers: List[SelectedModifier] = Field(default_factory=list)
    notes: Optional[str] = None
    # Menu item no longer exists; kept so staff can see and fix the line
    is_unresolved: bool = False

    @field_validator("notes")
    @classmethod
    def clean_notes(cls, v):
        return normalize_note(v)

    @property
    def unit_price(self) -> Decimal:
        return quantize_money(
            self.base_price + sum((m.option_price for m in self.selected_modifiers), Decimal("0"))
        )

    @property
    def line_total(self) -> Decimal:
        return quantize_money(self.unit_price * self.quantity)


# Request payloads


class CartLineRequest(BaseModel):
    menu_item_id: int
    quantity: int = Field(1, ge=1)
    modifier_names: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


class CartSubmitRequest(BaseModel):
    restaurant_id: int
    order_type: OrderType
    plate_number: Optional[str] = None
    notes: Optional[str] = None
    items: List[CartLineRequest] = Field(default_factory=list)


class CheckoutRequest(CartSubmitRequest):
    payment_method: PaymentMethod
    tendered_amount: Optional[Decimal] = Field(None, ge=0)
    tip: Decimal = Field(Decimal("0"), ge=0)


class AppendItemsRequest(BaseModel):
    items: List[CartLineRequest] = Field(default_factory=list)


class PricePreviewRequest(BaseModel):
    restaurant_id: int
    items: List[CartLineRequest] = Field(default_factory=list)
    tip: Decimal = Field(Decimal("0"), ge=0)
    tendered_amount: Optional[Decimal] = Field(None, ge=0)


class CartRead(BaseModel):
    """Consolidated ticket of a table, as shown to staff"""

    plate_number: Optional[str] = None
    order_ids: List[int] = Field(default_factory=list)
    notes: Optional[str] = None
    items: List[CartItem] = Field(default_factory=list)
    subtotal: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
