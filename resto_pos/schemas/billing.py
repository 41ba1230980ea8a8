from pydantic import BaseModel, Field
from typing import Optional, Dict
from datetime import datetime
from uuid import UUID
from decimal import Decimal

from resto_pos.models.enums import PaymentType
from resto_pos.schemas.order import OrderDetailResponse


class BillingCreate(BaseModel):
    order_id: UUID
    payment_type: PaymentType
    amount_paid: Decimal = Field(..., ge=0)
    discount: Decimal = Decimal("0")  # manual discount, used for Dine In / Take Away
    remark: Optional[str] = None


class BillingUpdate(BillingCreate):
    pass


class BillingCancelRequest(BaseModel):
    outlet_id: UUID
    receipt_number: str = Field(..., min_length=1)
    order_number: str = Field(..., min_length=1)


class BillingResponse(BaseModel):
    id: UUID
    order_id: UUID
    order_number: str
    outlet_id: UUID
    cashier_id: UUID
    receipt_number: str
    subtotal: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal
    amount_paid: Decimal
    change_given: Decimal
    payment_type: str
    status: str
    remark: Optional[str]
    paid_at: datetime

    class Config:
        from_attributes = True


class BillingDetailResponse(BillingResponse):
    order: OrderDetailResponse


class VoidResult(BaseModel):
    order_id: UUID
    already_void: bool = False
    ingredients_rolled_back: Dict[str, Decimal] = {}
    logs_voided: int = 0


class BillingCancelResponse(BaseModel):
    message: str
    details: VoidResult
