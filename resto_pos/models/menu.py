from sqlalchemy import Column, String, Boolean, ForeignKey, Numeric, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid

from resto_pos.database import Base
from resto_pos.models.base import TimestampMixin


class OrderType(Base):
    __tablename__ = "order_types"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), unique=True, nullable=False)  # Dine In, Take Away, GoFood, Boss, Staff, Kasbon...


class FoodCategory(Base):
    __tablename__ = "food_categories"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), unique=True, nullable=False)


class Food(Base, TimestampMixin):
    __tablename__ = "foods"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    outlet_id = Column(UUID(as_uuid=True), ForeignKey('outlets.id', ondelete='CASCADE'), nullable=False)
    food_category_id = Column(UUID(as_uuid=True), ForeignKey('food_categories.id'))
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    food_category = relationship("FoodCategory")
    prices = relationship("FoodPrice", back_populates="food", cascade="all, delete-orphan")
    options = relationship("FoodOption", back_populates="food", cascade="all, delete-orphan")
    ingredients = relationship("FoodIngredient", back_populates="food", cascade="all, delete-orphan")


class FoodPrice(Base):
    __tablename__ = "food_prices"
    __table_args__ = (UniqueConstraint("food_id", "order_type_id", name="uq_food_price_food_order_type"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    food_id = Column(UUID(as_uuid=True), ForeignKey('foods.id', ondelete='CASCADE'), nullable=False)
    order_type_id = Column(UUID(as_uuid=True), ForeignKey('order_types.id'), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)

    # Relationships
    food = relationship("Food", back_populates="prices")
    order_type = relationship("OrderType")


class FoodOption(Base):
    __tablename__ = "food_options"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    food_id = Column(UUID(as_uuid=True), ForeignKey('foods.id', ondelete='CASCADE'), nullable=False)
    name = Column(String(255), nullable=False)
    extra_price = Column(Numeric(12, 2), nullable=False, default=0)

    # Relationships
    food = relationship("Food", back_populates="options")


class FoodIngredient(Base):
    """Bill of materials: quantity of an ingredient consumed per unit of food"""
    __tablename__ = "food_ingredients"
    __table_args__ = (UniqueConstraint("food_id", "ingredient_id", name="uq_food_ingredient"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    food_id = Column(UUID(as_uuid=True), ForeignKey('foods.id', ondelete='CASCADE'), nullable=False)
    ingredient_id = Column(UUID(as_uuid=True), ForeignKey('ingredients.id'), nullable=False)
    quantity = Column(Numeric(12, 4), nullable=False)

    # Relationships
    food = relationship("Food", back_populates="ingredients")
    ingredient = relationship("Ingredient", back_populates="food_ingredients")


class OrderTypeDiscount(Base, TimestampMixin):
    __tablename__ = "order_type_discounts"
    __table_args__ = (UniqueConstraint("order_type_id", "outlet_id", name="uq_order_type_discount"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_type_id = Column(UUID(as_uuid=True), ForeignKey('order_types.id'), nullable=False)
    outlet_id = Column(UUID(as_uuid=True), ForeignKey('outlets.id', ondelete='CASCADE'), nullable=False)
    percentage = Column(Numeric(5, 4), nullable=False, default=0)  # 0.2000 == 20%
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    order_type = relationship("OrderType")
