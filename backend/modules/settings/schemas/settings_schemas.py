# backend/modules/settings/schemas/settings_schemas.py

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class KitchenStationRef(BaseModel):
    id: str
    name: str


class RestaurantProfileRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    restaurant_id: int
    name: str
    currency_code: str = "OMR"
    applied_tax_ids: List[int] = Field(default_factory=list)
    kitchen_stations: List[KitchenStationRef] = Field(default_factory=list)
    is_locked: bool = False

    @field_validator("applied_tax_ids", "kitchen_stations", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or []

    @property
    def station_names(self) -> List[str]:
        return [station.name for station in self.kitchen_stations]
