# backend/modules/menu/models/menu_models.py

"""
Menu catalog models.

Menu items are owned by the menu editor; the ordering core only reads them.
Orders snapshot name and price at add time, so nothing here is consulted
again for pricing once an item is on an order.
"""

from sqlalchemy import Column, Integer, String, Boolean, Numeric, JSON, Index

from core.database import Base
from core.mixins import TimestampMixin, TenantMixin


class MenuItem(Base, TimestampMixin, TenantMixin):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    category = Column(String(100), nullable=True, index=True)
    price = Column(Numeric(12, 3), nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)

    # [{"ingredient_id": 1, "quantity": 2, "unit": "g"}]
    recipe = Column(JSON, nullable=True)
    # [{"name": "Size", "options": [{"name": "Large", "price": "0.500"}]}]
    modifier_groups = Column(JSON, nullable=True)

    # Kitchen routing
    station_name = Column(String(100), nullable=True)
    prep_time_minutes = Column(Integer, nullable=True)

    __table_args__ = (
        Index("idx_menu_item_restaurant_category", "restaurant_id", "category"),
    )
