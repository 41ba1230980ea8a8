from sqlalchemy import Column, String, ForeignKey, Integer, Numeric, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid

from resto_pos.database import Base
from resto_pos.models.base import TimestampMixin


class Order(Base, TimestampMixin):
    __tablename__ = "orders"
    __table_args__ = (UniqueConstraint("outlet_id", "order_number", name="uq_order_outlet_number"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_number = Column(String(20), nullable=False)
    outlet_id = Column(UUID(as_uuid=True), ForeignKey('outlets.id'), nullable=False)
    waiter_id = Column(UUID(as_uuid=True), ForeignKey('users.id'), nullable=False)
    order_type_id = Column(UUID(as_uuid=True), ForeignKey('order_types.id'), nullable=False)
    dining_table_id = Column(UUID(as_uuid=True), ForeignKey('dining_tables.id'))
    customer_name = Column(String(255))
    online_code = Column(String(100))
    remark = Column(String)
    status = Column(String(20), nullable=False, default='PENDING')  # PENDING, SERVED, PAID, VOID
    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False, default=0)
    version = Column(Integer, nullable=False)

    # Relationships
    outlet = relationship("Outlet")
    waiter = relationship("User")
    order_type = relationship("OrderType")
    dining_table = relationship("DiningTable")
    items = relationship("OrderItem", back_populates="order", order_by="OrderItem.created_at")
    billing = relationship("Billing", back_populates="order", uselist=False)

    __mapper_args__ = {"version_id_col": version}


class OrderItem(Base, TimestampMixin):
    __tablename__ = "order_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(UUID(as_uuid=True), ForeignKey('orders.id', ondelete='CASCADE'), nullable=False)
    food_id = Column(UUID(as_uuid=True), ForeignKey('foods.id'), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)  # FoodPrice snapshot
    total_price = Column(Numeric(12, 2), nullable=False)
    status = Column(String(20), nullable=False, default='ACTIVE')  # ACTIVE, CANCELED

    # Relationships
    order = relationship("Order", back_populates="items")
    food = relationship("Food")
    options = relationship("OrderItemOption", back_populates="order_item", order_by="OrderItemOption.created_at")


class OrderItemOption(Base, TimestampMixin):
    __tablename__ = "order_item_options"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_item_id = Column(UUID(as_uuid=True), ForeignKey('order_items.id', ondelete='CASCADE'), nullable=False)
    option_id = Column(UUID(as_uuid=True), ForeignKey('food_options.id'), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)
    status = Column(String(20), nullable=False, default='ACTIVE')  # ACTIVE, CANCELED

    # Relationships
    order_item = relationship("OrderItem", back_populates="options")
    option = relationship("FoodOption")
