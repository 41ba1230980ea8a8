from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from uuid import UUID
from decimal import Decimal

from resto_pos.models.enums import StockLogType


class IngredientResponse(BaseModel):
    id: UUID
    name: str
    unit: str
    stock_qty: Decimal

    class Config:
        from_attributes = True


class DailyTransactionCreate(BaseModel):
    ingredient_id: UUID
    outlet_id: UUID
    quantity: Decimal = Field(..., gt=0)
    type: StockLogType
    date: date
    note: Optional[str] = None


class DailyTransactionUpdate(BaseModel):
    outlet_id: UUID
    quantity: Decimal = Field(..., gt=0)
    note: Optional[str] = None


class StockLogResponse(BaseModel):
    id: UUID
    ingredient_id: UUID
    outlet_id: UUID
    order_id: Optional[UUID]
    quantity: Decimal
    type: str
    note: Optional[str]
    transaction_date: datetime
    created_at: datetime

    class Config:
        from_attributes = True
