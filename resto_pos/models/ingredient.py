from sqlalchemy import Column, String, ForeignKey, Numeric
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid

from resto_pos.database import Base
from resto_pos.models.base import TimestampMixin


class Ingredient(Base, TimestampMixin):
    __tablename__ = "ingredients"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    outlet_id = Column(UUID(as_uuid=True), ForeignKey('outlets.id', ondelete='CASCADE'), nullable=False)
    name = Column(String(255), nullable=False)
    unit = Column(String(20), nullable=False)
    stock_qty = Column(Numeric(12, 4), nullable=False, default=0)

    # Relationships
    outlet = relationship("Outlet", back_populates="ingredients")
    food_ingredients = relationship("FoodIngredient", back_populates="ingredient")
    stock_logs = relationship("IngredientStockLog", back_populates="ingredient")
