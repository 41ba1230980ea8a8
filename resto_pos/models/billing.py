from sqlalchemy import Column, String, ForeignKey, DateTime, Numeric, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid

from resto_pos.database import Base
from resto_pos.models.base import TimestampMixin


class Billing(Base, TimestampMixin):
    __tablename__ = "billings"
    __table_args__ = (UniqueConstraint("outlet_id", "receipt_number", name="uq_billing_outlet_receipt"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(UUID(as_uuid=True), ForeignKey('orders.id'), unique=True, nullable=False)
    order_number = Column(String(20), nullable=False)
    outlet_id = Column(UUID(as_uuid=True), ForeignKey('outlets.id'), nullable=False)
    cashier_id = Column(UUID(as_uuid=True), ForeignKey('users.id'), nullable=False)
    receipt_number = Column(String(20), nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)
    tax = Column(Numeric(12, 2), nullable=False, default=0)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False)
    amount_paid = Column(Numeric(12, 2), nullable=False)
    change_given = Column(Numeric(12, 2), nullable=False)
    payment_type = Column(String(30), nullable=False)  # CASH, QRIS, BANK_TRANSFER, KASBON, GRABFOOD, ...
    status = Column(String(20), nullable=False, default='PAID')  # PAID, VOID
    remark = Column(String)
    paid_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    order = relationship("Order", back_populates="billing")
    cashier = relationship("User")
