# backend/modules/inventory/models/inventory_models.py

from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, Text, DateTime
from sqlalchemy.orm import relationship

from core.database import Base
from core.mixins import TimestampMixin, TenantMixin, utc_now


class Ingredient(Base, TimestampMixin, TenantMixin):
    """Stocked ingredient; stock may go negative (reported, never blocking)"""

    __tablename__ = "ingredients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    unit = Column(String(20), nullable=False)
    cost = Column(Numeric(12, 3), nullable=False, default=0)
    stock = Column(Numeric(14, 3), nullable=False, default=0)

    adjustments = relationship(
        "InventoryAdjustment", back_populates="ingredient", order_by="InventoryAdjustment.id"
    )


class InventoryAdjustment(Base):
    """Audit row written with every ledger decrement"""

    __tablename__ = "inventory_adjustments"

    id = Column(Integer, primary_key=True, index=True)
    ingredient_id = Column(Integer, ForeignKey("ingredients.id"), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True, index=True)
    quantity_before = Column(Numeric(14, 3), nullable=False)
    quantity_change = Column(Numeric(14, 3), nullable=False)
    quantity_after = Column(Numeric(14, 3), nullable=False)
    unit = Column(String(20), nullable=True)
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    ingredient = relationship("Ingredient", back_populates="adjustments")
