# backend/modules/tables/models/table_models.py

from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    Enum as SQLEnum,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from enum import Enum

from core.database import Base
from core.mixins import TimestampMixin


class ManualTableStatus(str, Enum):
    """Statuses staff set by hand; everything else is derived from orders"""

    AVAILABLE = "available"
    SEATED = "seated"
    NEEDS_CLEANING = "needs_cleaning"


class TableStatus(str, Enum):
    """Effective table status shown on the floor plan"""

    AVAILABLE = "available"
    SEATED = "seated"
    ORDERED = "ordered"
    ATTENTION = "attention"
    NEEDS_CLEANING = "needs_cleaning"


class TableShape(str, Enum):
    """Table shape for visual representation"""

    SQUARE = "square"
    RECTANGLE = "rectangle"
    CIRCLE = "circle"


class FloorPlan(Base, TimestampMixin):
    __tablename__ = "floor_plans"

    id = Column(Integer, primary_key=True, index=True)
    restaurant_id = Column(Integer, nullable=False, unique=True, index=True)
    grid_width = Column(Integer, nullable=False, default=12)
    grid_height = Column(Integer, nullable=False, default=8)

    tables = relationship(
        "FloorPlanTable",
        back_populates="floor_plan",
        order_by="FloorPlanTable.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class FloorPlanTable(Base, TimestampMixin):
    __tablename__ = "floor_plan_tables"

    id = Column(Integer, primary_key=True, index=True)
    floor_plan_id = Column(Integer, ForeignKey("floor_plans.id"), nullable=False, index=True)
    label = Column(String(50), nullable=False)
    manual_status = Column(
        SQLEnum(
            ManualTableStatus,
            values_callable=lambda obj: [e.value for e in obj],
            native_enum=False,
            length=20,
        ),
        nullable=True,
    )

    # Layout geometry, owned by the floor-plan editor
    position_x = Column(Integer, nullable=False, default=0)
    position_y = Column(Integer, nullable=False, default=0)
    width = Column(Integer, nullable=False, default=1)
    height = Column(Integer, nullable=False, default=1)
    shape = Column(String(20), nullable=False, default=TableShape.SQUARE.value)

    floor_plan = relationship("FloorPlan", back_populates="tables")

    __table_args__ = (
        UniqueConstraint("floor_plan_id", "label", name="uq_floor_plan_table_label"),
    )
