from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
from datetime import date

from resto_pos.database import get_db, transaction
from resto_pos.dependencies import get_current_user
from resto_pos.models.enums import StockLogType
from resto_pos.schemas.inventory import (
    DailyTransactionCreate,
    DailyTransactionUpdate,
    IngredientResponse,
    StockLogResponse,
)
from resto_pos.services import inventory as inventory_service

router = APIRouter()


@router.get("/ingredients", response_model=List[IngredientResponse])
def get_outlet_ingredients(
    outlet_id: UUID = Query(..., description="Outlet to list"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """Get ingredients of an outlet with their current stock"""
    ingredients = inventory_service.list_outlet_ingredients(db, outlet_id)
    return [IngredientResponse.model_validate(i) for i in ingredients]


@router.post("/daily-transaction", response_model=StockLogResponse, status_code=status.HTTP_201_CREATED)
def create_daily_transaction(
    data: DailyTransactionCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Record a manual stock movement (INBOUND, DISCREPANCY or TRANSFER_*)
    Only one record per ingredient, outlet, type and day; edit it with PUT
    """
    with transaction(db) as tx:
        log = inventory_service.record_daily_transaction(tx, data, current_user["user_id"])
        response = StockLogResponse.model_validate(log)

    return response


@router.put("/daily-transaction/{log_id}", response_model=StockLogResponse)
def update_daily_transaction(
    log_id: UUID,
    data: DailyTransactionUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Change the quantity of a manual stock movement
    Stock is adjusted by the difference; order deductions cannot be edited
    """
    with transaction(db) as tx:
        log = inventory_service.update_daily_transaction(
            tx, log_id, data.outlet_id, data.quantity, data.note, current_user["user_id"]
        )
        response = StockLogResponse.model_validate(log)

    return response


@router.get("/daily-summary", response_model=Optional[StockLogResponse])
def get_daily_summary(
    ingredient_id: UUID,
    outlet_id: UUID,
    type: StockLogType,
    date: date,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """Get the manual movement for one ingredient, type and day, or null when none exists"""
    log = inventory_service.find_daily_transaction(db, ingredient_id, outlet_id, type, date)
    if log is None:
        return None
    return StockLogResponse.model_validate(log)
