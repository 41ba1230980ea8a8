"""
Billing: turning a served order into a paid Billing record.

Order status moves PENDING -> SERVED -> PAID here, and PAID -> VOID only in
``resto_pos.services.voids``. An order owns at most one Billing; corrections
to an existing payment go through ``amend_billing``.
"""
import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from resto_pos.exceptions import (
    ConflictError,
    InsufficientPaymentError,
    NotFoundError,
    StateError,
    ValidationError,
)
from resto_pos.models import Billing, Order
from resto_pos.models.enums import OrderStatus, PaymentStatus, PaymentType
from resto_pos.services.counters import next_receipt_number
from resto_pos.services.discounts import MANUAL_DISCOUNT_ORDER_TYPES, resolve_discount
from resto_pos.services.inventory import deduct_for_paid_order
from resto_pos.services.pricing import money
from resto_pos.services.tax import TaxPolicy, default_tax_policy
from resto_pos.utils.timezone import utc_now

logger = logging.getLogger(__name__)

BILLABLE_STATUSES = (OrderStatus.SERVED, OrderStatus.PAID)


def _final_amounts(order: Order, discount: Decimal, amount_paid: Decimal, tax_policy: TaxPolicy):
    tax = tax_policy.tax_for(order.subtotal)
    final_total = money(order.total + tax - discount)
    if final_total < 0:
        raise ValidationError(f"Discount {discount} exceeds the order total {order.total + tax}")

    change_given = money(amount_paid - final_total)
    if change_given < 0:
        raise InsufficientPaymentError("Insufficient payment")

    return tax, final_total, change_given


def get_billing_for_order(tx: Session, order_id: UUID) -> Optional[Billing]:
    return tx.query(Billing).filter(Billing.order_id == order_id).first()


def get_billing_by_receipt(tx: Session, outlet_id: UUID, receipt_number: str) -> Billing:
    billing = tx.query(Billing).filter(
        Billing.outlet_id == outlet_id,
        Billing.receipt_number == receipt_number
    ).first()
    if billing is None:
        raise NotFoundError("Billing record not found for this receipt and outlet.")
    return billing


def create_billing(
    tx: Session,
    order_id: UUID,
    payment_type: PaymentType,
    amount_paid: Decimal,
    manual_discount: Decimal,
    remark: Optional[str],
    cashier_id: UUID,
    tax_policy: Optional[TaxPolicy] = None,
) -> Billing:
    """
    Bill a SERVED order, mark it PAID and deduct its ingredients.

    Everything runs in the caller's transaction, so a stock shortage found
    while deducting cancels the billing as well.
    """
    tax_policy = tax_policy or default_tax_policy()

    order = tx.query(Order).filter(Order.id == order_id).with_for_update().first()
    if order is None:
        raise NotFoundError("Order not found")

    if order.status not in BILLABLE_STATUSES:
        raise StateError("Order is not ready for billing")

    if get_billing_for_order(tx, order.id) is not None:
        raise ConflictError(
            f"Order {order.order_number} has already been billed, amend the existing billing instead"
        )

    discount = resolve_discount(tx, order, manual_discount)
    tax, final_total, change_given = _final_amounts(order, discount, Decimal(amount_paid), tax_policy)

    paid_at = utc_now()
    billing = Billing(
        order_id=order.id,
        order_number=order.order_number,
        outlet_id=order.outlet_id,
        cashier_id=cashier_id,
        receipt_number=next_receipt_number(tx, order.outlet_id),
        subtotal=order.subtotal,
        tax=tax,
        discount=discount,
        total=final_total,
        amount_paid=money(amount_paid),
        change_given=change_given,
        payment_type=payment_type.value,
        status=PaymentStatus.PAID.value,
        remark=remark,
        paid_at=paid_at,
    )
    tx.add(billing)

    order.status = OrderStatus.PAID.value
    tx.flush()

    deduct_for_paid_order(tx, order.id, order.outlet_id)

    logger.info(
        "Billed order %s with receipt %s: total %s, discount %s, paid %s via %s",
        order.order_number, billing.receipt_number, final_total, discount, billing.amount_paid,
        payment_type.value,
    )
    return billing


def amend_billing(
    tx: Session,
    order_id: UUID,
    payment_type: PaymentType,
    amount_paid: Decimal,
    manual_discount: Decimal,
    remark: Optional[str],
    cashier_id: UUID,
    tax_policy: Optional[TaxPolicy] = None,
) -> Billing:
    """Correct the payment details of a Dine In / Take Away billing; stock is untouched"""
    tax_policy = tax_policy or default_tax_policy()

    order = tx.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order not found")

    if order.order_type.name not in MANUAL_DISCOUNT_ORDER_TYPES:
        raise StateError("Billing update is only allowed for 'Dine In' or 'Take Away' orders")

    billing = tx.query(Billing).filter(Billing.order_id == order.id).with_for_update().first()
    if billing is None:
        raise NotFoundError("Billing record not found for this order")

    if billing.status == PaymentStatus.VOID:
        raise StateError(f"Billing {billing.receipt_number} is VOID and cannot be amended")

    discount = money(max(Decimal(0), Decimal(manual_discount or 0)))
    tax, final_total, change_given = _final_amounts(order, discount, Decimal(amount_paid), tax_policy)

    billing.subtotal = order.subtotal
    billing.tax = tax
    billing.discount = discount
    billing.total = final_total
    billing.amount_paid = money(amount_paid)
    billing.change_given = change_given
    billing.payment_type = payment_type.value
    billing.remark = remark
    billing.cashier_id = cashier_id
    billing.paid_at = utc_now()
    tx.flush()

    logger.info("Amended billing %s for order %s: total %s", billing.receipt_number, order.order_number, final_total)
    return billing
