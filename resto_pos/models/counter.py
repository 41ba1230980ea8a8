from sqlalchemy import Column, ForeignKey, Integer
from sqlalchemy.dialects.postgresql import UUID

from resto_pos.database import Base


class OrderNumberCounter(Base):
    __tablename__ = "order_number_counters"

    outlet_id = Column(UUID(as_uuid=True), ForeignKey('outlets.id', ondelete='CASCADE'), primary_key=True)
    current = Column(Integer, nullable=False, default=0)


class ReceiptNumberCounter(Base):
    __tablename__ = "receipt_number_counters"

    outlet_id = Column(UUID(as_uuid=True), ForeignKey('outlets.id', ondelete='CASCADE'), primary_key=True)
    current = Column(Integer, nullable=False, default=0)
