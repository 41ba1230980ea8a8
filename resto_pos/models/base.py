from sqlalchemy import Column, DateTime

from resto_pos.utils.timezone import utc_now


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)
