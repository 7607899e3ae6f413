# backend/modules/reports/schemas/report_schemas.py

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class ZReportRequest(BaseModel):
    restaurant_id: int
    store_id: str = Field("all", min_length=1, max_length=50)
    store_name: str = "All Stores"
    cash_counted: Decimal = Field(Decimal("0"), ge=0)


class ZReportRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    restaurant_id: int
    store_id: str
    store_name: str
    report_date: datetime
    start_date: datetime
    end_date: datetime

    gross_sales: Decimal
    discounts: Decimal
    net_sales: Decimal
    tax_amount: Decimal
    tips: Decimal
    total_revenue: Decimal

    cash_payments: Decimal
    card_payments: Decimal
    other_payments: Decimal
    total_payments: Decimal
    total_orders: int

    cash_counted: Decimal
    cash_variance: Decimal

    created_at: Optional[datetime] = None
