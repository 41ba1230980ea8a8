from sqlalchemy import Column, String, Boolean, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid

from resto_pos.database import Base
from resto_pos.models.base import TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False)  # SUPERUSER, OWNER, ADMIN, CASHIER, CHEF, WAITER
    outlet_id = Column(UUID(as_uuid=True), ForeignKey('outlets.id'))
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    outlet = relationship("Outlet", foreign_keys=[outlet_id])
