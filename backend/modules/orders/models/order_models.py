from sqlalchemy import (Column, Integer, String, ForeignKey, DateTime,
                        Numeric, Text, Boolean, JSON, Index, Enum as SQLEnum,
                        UniqueConstraint)
from sqlalchemy.orm import relationship
from core.database import Base
from core.mixins import TimestampMixin
from ..enums.order_enums import OrderStatus, OrderType, PaymentMethod


def _enum_column(enum_cls, **kwargs):
    return Column(
        SQLEnum(
            enum_cls,
            values_callable=lambda obj: [e.value for e in obj],
            native_enum=False,
            length=20,
        ),
        **kwargs,
    )


class Order(Base, TimestampMixin):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    restaurant_id = Column(Integer, nullable=False, index=True)
    order_type = _enum_column(OrderType, nullable=False)
    # Table label for dine-in, customer identifier for takeaway
    plate_number = Column(String(50), nullable=True, index=True)
    status = _enum_column(OrderStatus, nullable=False, default=OrderStatus.NEW,
                          index=True)
    payment_method = _enum_column(PaymentMethod, nullable=True)
    notes = Column(Text, nullable=True)

    # Pricing snapshot; total = subtotal - discount + tax + tip + platform fee
    subtotal = Column(Numeric(12, 3), nullable=False, default=0)
    taxes = Column(JSON, nullable=False, default=list)
    tax_amount = Column(Numeric(12, 3), nullable=False, default=0)
    tip = Column(Numeric(12, 3), nullable=False, default=0)
    platform_fee = Column(Numeric(12, 3), nullable=False, default=0)
    applied_discounts = Column(JSON, nullable=False, default=list)
    discount_amount = Column(Numeric(12, 3), nullable=False, default=0)
    total = Column(Numeric(12, 3), nullable=False, default=0)

    completed_at = Column(DateTime, nullable=True)

    # Optimistic concurrency counter, bumped by every committed update
    version = Column(Integer, nullable=False, default=1)

    items = relationship(
        "OrderItem",
        back_populates="order",
        order_by="OrderItem.line_index",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("idx_orders_restaurant_status", "restaurant_id", "status"),
    )

    @property
    def is_open(self) -> bool:
        return self.status != OrderStatus.COMPLETED

    @property
    def next_line_index(self) -> int:
        return max((item.line_index for item in self.items), default=-1) + 1


class OrderItem(Base, TimestampMixin):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"),
                      nullable=False, index=True)
    line_index = Column(Integer, nullable=False)
    menu_item_id = Column(Integer, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    base_price = Column(Numeric(12, 3), nullable=False)
    # base_price + modifier prices, locked at submission
    price = Column(Numeric(12, 3), nullable=False)
    quantity = Column(Integer, nullable=False)
    selected_modifiers = Column(JSON, nullable=False, default=list)
    notes = Column(Text, nullable=True)

    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)
    inventory_deducted = Column(Boolean, nullable=False, default=False)

    order = relationship("Order", back_populates="items")

    __table_args__ = (
        UniqueConstraint("order_id", "line_index", name="uq_order_item_line"),
    )
