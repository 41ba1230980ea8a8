from sqlalchemy import Column, String, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid

from resto_pos.database import Base
from resto_pos.models.base import TimestampMixin


class Outlet(Base, TimestampMixin):
    __tablename__ = "outlets"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), unique=True, nullable=False)
    address = Column(String)
    phone = Column(String(50))
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    dining_tables = relationship("DiningTable", back_populates="outlet")
    ingredients = relationship("Ingredient", back_populates="outlet")


class DiningTable(Base):
    __tablename__ = "dining_tables"
    __table_args__ = (UniqueConstraint("outlet_id", "number", name="uq_dining_table_outlet_number"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    outlet_id = Column(UUID(as_uuid=True), ForeignKey('outlets.id', ondelete='CASCADE'), nullable=False)
    number = Column(String(20), nullable=False)

    # Relationships
    outlet = relationship("Outlet", back_populates="dining_tables")
