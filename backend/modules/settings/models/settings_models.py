# backend/modules/settings/models/settings_models.py

from sqlalchemy import Column, Integer, String, Boolean, JSON

from core.database import Base
from core.mixins import TimestampMixin


class RestaurantProfile(Base, TimestampMixin):
    """
    Per-restaurant settings read by the ordering core.

    applied_tax_ids and kitchen_stations are maintained by the settings
    screens; the core only reads them.
    """

    __tablename__ = "restaurant_profiles"

    id = Column(Integer, primary_key=True, index=True)
    restaurant_id = Column(Integer, nullable=False, unique=True, index=True)
    name = Column(String(200), nullable=False)
    currency_code = Column(String(3), nullable=False, default="OMR")
    applied_tax_ids = Column(JSON, nullable=False, default=list)
    # [{"id": "station_1", "name": "Grill"}]
    kitchen_stations = Column(JSON, nullable=False, default=list)
    is_locked = Column(Boolean, nullable=False, default=False)
