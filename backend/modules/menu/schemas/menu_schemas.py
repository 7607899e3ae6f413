# backend/modules/menu/schemas/menu_schemas.py

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RecipeLine(BaseModel):
    ingredient_id: int
    quantity: Decimal = Field(..., ge=0)
    unit: Optional[str] = None


class ModifierOption(BaseModel):
    name: str
    price: Decimal = Decimal("0")


class ModifierGroup(BaseModel):
    name: str
    options: List[ModifierOption] = Field(default_factory=list)
    min_selections: int = 0
    max_selections: Optional[int] = None


class MenuItemCreate(BaseModel):
    """Schema used by seeders and the menu editor collaborator"""

    restaurant_id: int
    name: str = Field(..., min_length=1, max_length=200)
    category: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    is_available: bool = True
    sort_order: int = 0
    recipe: List[RecipeLine] = Field(default_factory=list)
    modifier_groups: List[ModifierGroup] = Field(default_factory=list)
    station_name: Optional[str] = None
    prep_time_minutes: Optional[int] = Field(None, ge=0)


class MenuItemRead(BaseModel):
    """Immutable menu snapshot handed to the cart, kitchen and ledger"""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    restaurant_id: int
    name: str
    category: Optional[str] = None
    price: Decimal
    is_available: bool = True
    sort_order: int = 0
    recipe: List[RecipeLine] = Field(default_factory=list)
    modifier_groups: List[ModifierGroup] = Field(default_factory=list)
    station_name: Optional[str] = None
    prep_time_minutes: Optional[int] = None

    @field_validator("recipe", "modifier_groups", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or []

    @property
    def has_modifiers(self) -> bool:
        return bool(self.modifier_groups)
