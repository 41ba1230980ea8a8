from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from resto_pos.database import get_db, transaction
from resto_pos.dependencies import get_current_user
from resto_pos.schemas.order import (
    AddItemsRequest,
    BatchUpdateRequest,
    OrderCreate,
    OrderDetailResponse,
    OrderResponse,
    OrderStatusUpdate,
)
from resto_pos.services import orders as order_service

router = APIRouter()


@router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    data: OrderCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Open a new order, optionally with its first items
    """
    with transaction(db) as tx:
        order = order_service.create_order(tx, data)

    return OrderResponse.model_validate(order)


@router.patch("/status", response_model=OrderResponse)
def update_order_status(
    data: OrderStatusUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Move an order between PENDING and SERVED
    Waiters may only touch their own orders; ADMIN and CASHIER may touch any
    """
    with transaction(db) as tx:
        order = order_service.update_order_status(tx, data.order_id, data.status, current_user)

    return OrderResponse.model_validate(order)


@router.get("/active", response_model=List[OrderDetailResponse])
def get_active_orders(
    outlet_id: UUID = Query(..., description="Outlet"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Open (PENDING or SERVED) orders of an outlet, newest first
    """
    orders = order_service.list_active_orders(db, outlet_id)
    return [order_service.order_detail(order) for order in orders]


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: UUID,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """Get order with its items and options"""
    order = order_service.get_order(db, order_id)
    return OrderResponse.model_validate(order)


@router.post("/{order_id}/items", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def add_order_items(
    order_id: UUID,
    data: AddItemsRequest,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Append items to an open order
    """
    with transaction(db) as tx:
        order = order_service.add_items(tx, order_id, data.items, data.expected_version)

    return OrderResponse.model_validate(order)


@router.patch("/{order_id}/items", response_model=OrderResponse)
def batch_update_order_items(
    order_id: UUID,
    data: BatchUpdateRequest,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Change quantities or cancel items and options of an open order
    The whole batch is applied or none of it is
    """
    with transaction(db) as tx:
        order = order_service.batch_update_items(tx, order_id, data.items, data.expected_version)

    return OrderResponse.model_validate(order)
