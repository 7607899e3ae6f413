# backend/modules/tax/schemas/tax_schemas.py

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class TaxRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    restaurant_id: int
    name: str
    rate: Decimal = Field(..., ge=0)
    is_default: bool = False
