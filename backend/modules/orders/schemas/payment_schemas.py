from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from decimal import Decimal
from ..enums.order_enums import PaymentMethod
from .order_schemas import AppliedTax, OrderRead


class PaymentRequest(BaseModel):
    payment_method: PaymentMethod
    # Required for cash, ignored otherwise
    tendered_amount: Optional[Decimal] = Field(None, ge=0)


class FinalizationResponse(BaseModel):
    orders: List[OrderRead]
    change_due: Decimal = Decimal("0")
    already_completed: bool = False
    table_cleared: bool = False
    deducted_ingredients: Dict[int, Decimal] = Field(default_factory=dict)
    negative_stock_ingredients: List[int] = Field(default_factory=list)
    unresolved_menu_items: List[int] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result) -> "FinalizationResponse":
        return cls(
            orders=result.orders,
            change_due=result.change_due,
            already_completed=result.already_completed,
            table_cleared=result.table_cleared,
            deducted_ingredients=result.deduction.deducted,
            negative_stock_ingredients=result.deduction.negative_stock,
            unresolved_menu_items=result.deduction.unresolved_menu_items,
        )


class PricePreviewResponse(BaseModel):
    subtotal: Decimal
    taxes: List[AppliedTax] = Field(default_factory=list)
    tax_amount: Decimal
    tip: Decimal
    total: Decimal
    quick_cash: List[Decimal] = Field(default_factory=list)
    change_due: Optional[Decimal] = None
