from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer


def utc_now() -> datetime:
    """Naive UTC timestamp, matching what SQLite hands back"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TimestampMixin:
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now,
                        onupdate=utc_now, nullable=False)


class TenantMixin:
    """Mixin for restaurant-scoped records"""
    restaurant_id = Column(Integer, nullable=False, index=True)
