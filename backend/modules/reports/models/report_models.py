# backend/modules/reports/models/report_models.py

from sqlalchemy import Column, Integer, String, Numeric, DateTime

from core.database import Base
from core.mixins import TimestampMixin


class ZReport(Base, TimestampMixin):
    """End-of-period sales and tender summary"""

    __tablename__ = "z_reports"

    # "<YYYY-MM-DD>-<store>", one report per day and store scope per restaurant
    id = Column(String(64), primary_key=True)
    restaurant_id = Column(Integer, primary_key=True, index=True)
    store_id = Column(String(50), nullable=False, default="all")
    store_name = Column(String(200), nullable=False, default="All Stores")

    report_date = Column(DateTime, nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False, index=True)

    gross_sales = Column(Numeric(14, 3), nullable=False, default=0)
    discounts = Column(Numeric(14, 3), nullable=False, default=0)
    net_sales = Column(Numeric(14, 3), nullable=False, default=0)
    tax_amount = Column(Numeric(14, 3), nullable=False, default=0)
    tips = Column(Numeric(14, 3), nullable=False, default=0)
    total_revenue = Column(Numeric(14, 3), nullable=False, default=0)

    cash_payments = Column(Numeric(14, 3), nullable=False, default=0)
    card_payments = Column(Numeric(14, 3), nullable=False, default=0)
    other_payments = Column(Numeric(14, 3), nullable=False, default=0)
    total_payments = Column(Numeric(14, 3), nullable=False, default=0)
    total_orders = Column(Integer, nullable=False, default=0)

    cash_counted = Column(Numeric(14, 3), nullable=False, default=0)
    cash_variance = Column(Numeric(14, 3), nullable=False, default=0)
