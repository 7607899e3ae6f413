# backend/modules/tax/models/tax_models.py

from sqlalchemy import Column, Integer, String, Boolean, Numeric

from core.database import Base
from core.mixins import TimestampMixin, TenantMixin


class Tax(Base, TimestampMixin, TenantMixin):
    """A tenant tax rate; whether it applies is decided by the restaurant profile"""

    __tablename__ = "taxes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    rate = Column(Numeric(6, 3), nullable=False)  # percent, e.g. 5.000
    is_default = Column(Boolean, nullable=False, default=False)
