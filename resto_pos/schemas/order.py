from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID
from decimal import Decimal

from resto_pos.models.enums import OrderItemStatus, OrderStatus


class OrderItemOptionCreate(BaseModel):
    option_id: UUID
    quantity: int = Field(1, gt=0)


class OrderItemCreate(BaseModel):
    food_id: UUID
    quantity: int = Field(..., gt=0)
    options: List[OrderItemOptionCreate] = []


class OrderCreate(BaseModel):
    waiter_id: UUID
    outlet_id: UUID
    order_type_id: UUID
    dining_table_id: Optional[UUID] = None
    customer_name: Optional[str] = None
    online_code: Optional[str] = None
    remark: Optional[str] = None
    items: List[OrderItemCreate] = []


class AddItemsRequest(BaseModel):
    items: List[OrderItemCreate] = Field(..., min_length=1)
    expected_version: Optional[int] = None


class OrderItemOptionUpdate(BaseModel):
    id: UUID  # OrderItemOption.id
    quantity: int = Field(..., ge=0)
    status: OrderItemStatus = OrderItemStatus.ACTIVE


class OrderItemUpdate(BaseModel):
    id: UUID  # OrderItem.id
    quantity: int = Field(..., ge=0)
    status: OrderItemStatus = OrderItemStatus.ACTIVE
    options: List[OrderItemOptionUpdate] = []


class BatchUpdateRequest(BaseModel):
    items: List[OrderItemUpdate] = Field(..., min_length=1)
    expected_version: Optional[int] = None


class OrderStatusUpdate(BaseModel):
    order_id: UUID
    status: OrderStatus


class OrderItemOptionResponse(BaseModel):
    id: UUID
    option_id: UUID
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    status: str

    class Config:
        from_attributes = True


class OrderItemResponse(BaseModel):
    id: UUID
    food_id: UUID
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    status: str
    options: List[OrderItemOptionResponse] = []

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: UUID
    order_number: str
    outlet_id: UUID
    waiter_id: UUID
    order_type_id: UUID
    dining_table_id: Optional[UUID]
    customer_name: Optional[str]
    online_code: Optional[str]
    remark: Optional[str]
    status: str
    subtotal: Decimal
    total: Decimal
    version: int
    created_at: datetime
    items: List[OrderItemResponse] = []

    class Config:
        from_attributes = True


class OrderItemOptionDetail(OrderItemOptionResponse):
    option_name: str


class OrderItemDetail(OrderItemResponse):
    food_name: str
    food_category: Optional[str] = None
    options: List[OrderItemOptionDetail] = []


class OrderDetailResponse(OrderResponse):
    order_type_name: str
    waiter_name: Optional[str] = None
    dining_table_number: Optional[str] = None
    items: List[OrderItemDetail] = []
