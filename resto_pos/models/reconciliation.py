from sqlalchemy import Column, String, Boolean, ForeignKey, Date, Numeric, JSON, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid

from resto_pos.database import Base
from resto_pos.models.base import TimestampMixin


class DailyCashReconciliation(Base, TimestampMixin):
    __tablename__ = "daily_cash_reconciliations"
    __table_args__ = (UniqueConstraint("outlet_id", "date", name="uq_reconciliation_outlet_date"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    outlet_id = Column(UUID(as_uuid=True), ForeignKey('outlets.id', ondelete='CASCADE'), nullable=False)
    date = Column(Date, nullable=False)  # UTC business day
    previous_day_balance = Column(Numeric(14, 2), nullable=False, default=0)
    cash_deposit = Column(Numeric(14, 2), nullable=False, default=0)
    daily_cash_revenue = Column(Numeric(14, 2), nullable=False, default=0)
    adjustment_amount = Column(Numeric(14, 2), nullable=False, default=0)
    remaining_balance = Column(Numeric(14, 2), nullable=False, default=0)
    payment_remarks = Column(JSON)
    is_locked = Column(Boolean, nullable=False, default=False)
    submitted_by_cashier_name = Column(String(255))

    # Relationships
    outlet = relationship("Outlet")
