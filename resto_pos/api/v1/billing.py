from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from uuid import UUID

from resto_pos.database import get_db, transaction
from resto_pos.dependencies import CASH_HANDLING_ROLES, get_current_user, require_role
from resto_pos.schemas.billing import (
    BillingCancelRequest,
    BillingCancelResponse,
    BillingCreate,
    BillingDetailResponse,
    BillingResponse,
    BillingUpdate,
    VoidResult,
)
from resto_pos.services import billing as billing_service
from resto_pos.services.orders import order_detail
from resto_pos.services.voids import cancel_billing

router = APIRouter()


@router.get("/", response_model=BillingDetailResponse)
def get_billing(
    outlet_id: UUID = Query(..., description="Outlet"),
    receipt_number: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    """
    Look up a billing by receipt number, with its order, items and options
    """
    billing = billing_service.get_billing_by_receipt(db, outlet_id, receipt_number)
    return {
        **BillingResponse.model_validate(billing).model_dump(),
        "order": order_detail(billing.order),
    }


@router.post("/", response_model=BillingResponse, status_code=status.HTTP_201_CREATED)
def create_billing(
    data: BillingCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_role(*CASH_HANDLING_ROLES))
):
    """
    Bill a served order
    Marks it PAID and deducts its ingredients from stock in the same transaction
    """
    with transaction(db) as tx:
        billing = billing_service.create_billing(
            tx,
            order_id=data.order_id,
            payment_type=data.payment_type,
            amount_paid=data.amount_paid,
            manual_discount=data.discount,
            remark=data.remark,
            cashier_id=UUID(current_user["user_id"]),
        )

    return BillingResponse.model_validate(billing)


@router.put("/", response_model=BillingResponse)
def amend_billing(
    data: BillingUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_role(*CASH_HANDLING_ROLES))
):
    """
    Correct payment details of an existing Dine In / Take Away billing
    """
    with transaction(db) as tx:
        billing = billing_service.amend_billing(
            tx,
            order_id=data.order_id,
            payment_type=data.payment_type,
            amount_paid=data.amount_paid,
            manual_discount=data.discount,
            remark=data.remark,
            cashier_id=UUID(current_user["user_id"]),
        )

    return BillingResponse.model_validate(billing)


@router.post("/cancel", response_model=BillingCancelResponse)
def void_billing(
    data: BillingCancelRequest,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_role(*CASH_HANDLING_ROLES))
):
    """
    Void a billing and return its ingredients to stock
    Voiding an already voided billing succeeds without changing anything
    """
    with transaction(db) as tx:
        result = cancel_billing(tx, data.outlet_id, data.receipt_number, data.order_number)

    if result["already_void"]:
        message = "Billing is already Cancelled."
    else:
        message = "Billing and associated inventory successfully cancelled."
    return {"message": message, "details": VoidResult(**result)}
