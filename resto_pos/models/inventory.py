from sqlalchemy import Column, String, ForeignKey, DateTime, Numeric, Index, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid

from resto_pos.database import Base
from resto_pos.models.base import TimestampMixin


class IngredientStockLog(Base, TimestampMixin):
    __tablename__ = "ingredient_stock_logs"
    __table_args__ = (
        Index("ix_stock_log_outlet_order", "outlet_id", "order_id"),
        Index("ix_stock_log_daily", "ingredient_id", "outlet_id", "type", "transaction_date"),
        # Manual movements (no order) are one per ingredient, outlet, type and day
        Index(
            "uq_stock_log_manual_daily",
            "ingredient_id", "outlet_id", "type", "transaction_date",
            unique=True,
            postgresql_where=text("order_id IS NULL"),
            sqlite_where=text("order_id IS NULL"),
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    ingredient_id = Column(UUID(as_uuid=True), ForeignKey('ingredients.id'), nullable=False)
    outlet_id = Column(UUID(as_uuid=True), ForeignKey('outlets.id'), nullable=False)
    order_id = Column(UUID(as_uuid=True), ForeignKey('orders.id', ondelete='SET NULL'))
    quantity = Column(Numeric(12, 4), nullable=False)  # always positive, direction implied by type
    type = Column(String(50), nullable=False)  # INBOUND, DISCREPANCY, OUTBOUND_*, TRANSFER_*, VOID
    note = Column(String)
    transaction_date = Column(DateTime(timezone=True), nullable=False)  # business day the movement belongs to

    # Relationships
    ingredient = relationship("Ingredient", back_populates="stock_logs")
    order = relationship("Order")
