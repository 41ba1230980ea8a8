"""
Daily cash reconciliation, one row per (outlet, UTC business day).

remaining_balance = previous_day_balance + daily_cash_revenue + adjustment - cash_deposit
"""
import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from resto_pos.exceptions import ForbiddenError, NotFoundError
from resto_pos.models import Billing, DailyCashReconciliation, Order, OrderType
from resto_pos.models.enums import PaymentStatus, PaymentType
from resto_pos.services.pricing import money
from resto_pos.utils.timezone import utc_day_bounds

logger = logging.getLogger(__name__)

# Internal consumption, never counted as revenue
INTERNAL_ORDER_TYPES = ("Boss", "Staff")


def get_reconciliation(tx: Session, outlet_id: UUID, business_date: date) -> Optional[DailyCashReconciliation]:
    return tx.query(DailyCashReconciliation).filter(
        DailyCashReconciliation.outlet_id == outlet_id,
        DailyCashReconciliation.date == business_date
    ).first()


def previous_day_balance(tx: Session, outlet_id: UUID, business_date: date) -> Decimal:
    previous = get_reconciliation(tx, outlet_id, business_date - timedelta(days=1))
    if previous is None:
        return Decimal(0)
    return previous.remaining_balance


def daily_cash_revenue(tx: Session, outlet_id: UUID, business_date: date) -> Decimal:
    """Sum of non-VOID CASH billings paid during the UTC day, internal order types excluded"""
    start, end = utc_day_bounds(business_date)
    total = (
        tx.query(func.coalesce(func.sum(Billing.total), 0))
        .select_from(Billing)
        .join(Order, Billing.order_id == Order.id)
        .join(OrderType, Order.order_type_id == OrderType.id)
        .filter(
            Billing.outlet_id == outlet_id,
            Billing.paid_at >= start,
            Billing.paid_at < end,
            Billing.payment_type == PaymentType.CASH.value,
            Billing.status != PaymentStatus.VOID.value,
            OrderType.name.notin_(INTERNAL_ORDER_TYPES),
        )
        .scalar()
    )
    return money(total)


def submit_reconciliation(
    tx: Session,
    outlet_id: UUID,
    business_date: date,
    cash_deposit: Decimal,
    adjustment: Decimal,
    remarks: Optional[Dict[str, str]],
    submitted_by_cashier_name: str,
    is_admin: bool,
) -> DailyCashReconciliation:
    """
    Create or overwrite the reconciliation for a business day and lock it.

    A locked day can only be resubmitted by an admin, who keeps the name of the
    cashier that originally submitted it.
    """
    prev_balance = previous_day_balance(tx, outlet_id, business_date)
    revenue = daily_cash_revenue(tx, outlet_id, business_date)
    adjustment = Decimal(adjustment or 0)
    remaining = money(prev_balance + revenue + adjustment - Decimal(cash_deposit))

    record = tx.query(DailyCashReconciliation).filter(
        DailyCashReconciliation.outlet_id == outlet_id,
        DailyCashReconciliation.date == business_date
    ).with_for_update().first()

    if record is None:
        record = DailyCashReconciliation(
            outlet_id=outlet_id,
            date=business_date,
            submitted_by_cashier_name=submitted_by_cashier_name,
        )
        tx.add(record)
    else:
        if record.is_locked and not is_admin:
            raise ForbiddenError(
                f"Cash reconciliation for {business_date.isoformat()} is locked, ask an admin to unlock it"
            )
        if not (is_admin and record.submitted_by_cashier_name):
            record.submitted_by_cashier_name = submitted_by_cashier_name

    record.previous_day_balance = prev_balance
    record.daily_cash_revenue = revenue
    record.cash_deposit = money(cash_deposit)
    record.adjustment_amount = money(adjustment)
    record.remaining_balance = remaining
    record.payment_remarks = remarks
    record.is_locked = True
    tx.flush()

    logger.info(
        "Cash reconciliation for outlet %s on %s submitted by %s: remaining %s",
        outlet_id, business_date, record.submitted_by_cashier_name, remaining,
    )
    return record


def unlock_reconciliation(tx: Session, outlet_id: UUID, business_date: date) -> DailyCashReconciliation:
    record = get_reconciliation(tx, outlet_id, business_date)
    if record is None:
        raise NotFoundError("Reconciliation record not found for the specified outlet and date.")

    record.is_locked = False
    tx.flush()

    logger.info("Unlocked cash reconciliation for outlet %s on %s", outlet_id, business_date)
    return record
