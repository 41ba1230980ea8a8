from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict
from datetime import date, datetime
from uuid import UUID
from decimal import Decimal


class ReconciliationSubmit(BaseModel):
    outlet_id: UUID
    date: date
    cash_deposit: Decimal
    adjustment: Decimal = Decimal("0")
    remarks: Optional[Dict[str, str]] = None
    submitted_by_cashier_name: str = Field(..., min_length=1)

    @field_validator("submitted_by_cashier_name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Submitted By Cashier Name is required.")
        return value.strip()


class ReconciliationUnlock(BaseModel):
    outlet_id: UUID
    date: date


class ReconciliationResponse(BaseModel):
    id: UUID
    outlet_id: UUID
    date: date
    previous_day_balance: Decimal
    cash_deposit: Decimal
    daily_cash_revenue: Decimal
    adjustment_amount: Decimal
    remaining_balance: Decimal
    payment_remarks: Optional[Dict[str, str]]
    is_locked: bool
    submitted_by_cashier_name: Optional[str]
    updated_at: datetime

    class Config:
        from_attributes = True
