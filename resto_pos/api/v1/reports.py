from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
from datetime import date

from resto_pos.database import get_db, transaction
from resto_pos.dependencies import get_current_user, require_role
from resto_pos.models.enums import PaymentType, UserRole
from resto_pos.schemas import MessageResponse
from resto_pos.schemas.reconciliation import (
    ReconciliationResponse,
    ReconciliationSubmit,
    ReconciliationUnlock,
)
from resto_pos.services import reconciliation as reconciliation_service
from resto_pos.services import reports as report_service

router = APIRouter()


@router.post("/cash-reconciliation", response_model=MessageResponse)
def submit_cash_reconciliation(
    data: ReconciliationSubmit,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Submit and lock the cash reconciliation of a business day
    """
    with transaction(db) as tx:
        record = reconciliation_service.submit_reconciliation(
            tx,
            outlet_id=data.outlet_id,
            business_date=data.date,
            cash_deposit=data.cash_deposit,
            adjustment=data.adjustment,
            remarks=data.remarks,
            submitted_by_cashier_name=data.submitted_by_cashier_name,
            is_admin=current_user["role"] == UserRole.ADMIN,
        )
        payload = ReconciliationResponse.model_validate(record).model_dump(mode="json")

    return {"message": "Daily cash reconciliation submitted successfully.", "data": payload}


@router.post("/cash-reconciliation/unlock", response_model=MessageResponse)
def unlock_cash_reconciliation(
    data: ReconciliationUnlock,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_role(UserRole.ADMIN.value))
):
    """
    Unlock a submitted reconciliation so it can be edited again
    Only ADMIN can unlock
    """
    with transaction(db) as tx:
        record = reconciliation_service.unlock_reconciliation(tx, data.outlet_id, data.date)
        payload = ReconciliationResponse.model_validate(record).model_dump(mode="json")

    return {"message": "Reconciliation record unlocked successfully.", "data": payload}


@router.get("/daily-revenue")
def get_daily_revenue(
    outlet_id: UUID = Query(..., description="Outlet"),
    date: date = Query(..., description="Business day (YYYY-MM-DD, UTC)"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """Revenue of one day by payment type, drink revenue and cash position"""
    return report_service.daily_revenue(db, outlet_id, date)


@router.get("/sales-summary")
def get_sales_summary(
    outlet_id: UUID = Query(..., description="Outlet"),
    start_date: Optional[date] = Query(None, description="Defaults to seven days before end_date"),
    end_date: Optional[date] = Query(None, description="Defaults to today (UTC)"),
    payment_type: Optional[PaymentType] = Query(None),
    order_type: Optional[str] = Query(None, description="Order type name"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """Billings in a date range with totals and food sales per category"""
    return report_service.sales_summary(
        db, outlet_id, start_date, end_date, payment_type, order_type, limit, offset
    )


@router.get("/kasbon-summary")
def get_kasbon_summary(
    outlet_id: UUID = Query(...),
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """Pay-later (Kasbon) billings in a date range"""
    return report_service.kasbon_summary(db, outlet_id, start_date, end_date)


@router.get("/sales-detail")
def get_sales_detail(
    outlet_id: UUID = Query(..., description="Outlet"),
    start_date: Optional[date] = Query(None, description="Defaults to seven days before end_date"),
    end_date: Optional[date] = Query(None, description="Defaults to today (UTC)"),
    payment_type: Optional[PaymentType] = Query(None),
    order_type: Optional[str] = Query(None, description="Order type name"),
    limit: int = Query(1000, ge=1, le=5000, description="Billings per page"),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """Item-level sales rows with options, order type, waiter and cashier"""
    return report_service.sales_detail(
        db, outlet_id, start_date, end_date, payment_type, order_type, limit, offset
    )
