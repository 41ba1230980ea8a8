from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from uuid import UUID


class OutletBase(BaseModel):
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None


class OutletCreate(OutletBase):
    pass


class OutletResponse(OutletBase):
    id: UUID
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
