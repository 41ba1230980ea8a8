"""
Read-only sales reports. All day boundaries are UTC, ranges are half-open.
"""
from collections import OrderedDict, defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from resto_pos.config import settings
from resto_pos.models import (
    Billing,
    Food,
    Order,
    OrderItem,
    OrderItemOption,
    OrderType,
    OrderTypeDiscount,
    Outlet,
)
from resto_pos.models.enums import OrderItemStatus, PaymentStatus, PaymentType
from resto_pos.services.pricing import money
from resto_pos.services.reconciliation import (
    INTERNAL_ORDER_TYPES,
    get_reconciliation,
    previous_day_balance,
)
from resto_pos.utils.timezone import utc_day_bounds, utc_now, utc_range_bounds

KASBON_ORDER_TYPE = "Kasbon"


def _outlet_name(tx: Session, outlet_id: UUID) -> str:
    outlet = tx.get(Outlet, outlet_id)
    return outlet.name if outlet else "Unknown Outlet"


def _revenue_filters(outlet_id: UUID, start, end):
    return (
        Billing.outlet_id == outlet_id,
        Billing.paid_at >= start,
        Billing.paid_at < end,
        Billing.payment_type != PaymentType.FOC.value,
        Billing.status != PaymentStatus.VOID.value,
        OrderType.name.notin_(INTERNAL_ORDER_TYPES),
    )


def _drink_revenue(tx: Session, outlet_id: UUID, start, end) -> Decimal:
    discounts = {
        row.order_type_id: row.percentage
        for row in tx.query(OrderTypeDiscount).filter(
            OrderTypeDiscount.outlet_id == outlet_id,
            OrderTypeDiscount.is_active == True
        )
    }

    items = (
        tx.query(OrderItem)
        .join(Order, OrderItem.order_id == Order.id)
        .join(Billing, Billing.order_id == Order.id)
        .join(OrderType, Order.order_type_id == OrderType.id)
        .filter(
            *_revenue_filters(outlet_id, start, end),
            OrderItem.status != OrderItemStatus.CANCELED.value,
        )
        .options(selectinload(OrderItem.food).selectinload(Food.food_category), selectinload(OrderItem.order))
        .all()
    )

    total = Decimal(0)
    for item in items:
        category = item.food.food_category
        if category is None or category.name != settings.DRINK_CATEGORY_NAME:
            continue
        revenue = item.total_price
        percentage = discounts.get(item.order.order_type_id)
        if percentage is not None:
            revenue = revenue * (1 - percentage)
        total += revenue
    return money(total)


def daily_revenue(tx: Session, outlet_id: UUID, business_date: date) -> dict:
    """
    Revenue for one UTC day by payment type.

    FOC billings, VOID billings and internal (Boss/Staff) orders are left out.
    """
    start, end = utc_day_bounds(business_date)

    rows = (
        tx.query(Billing.payment_type, func.coalesce(func.sum(Billing.total), 0))
        .join(Order, Billing.order_id == Order.id)
        .join(OrderType, Order.order_type_id == OrderType.id)
        .filter(*_revenue_filters(outlet_id, start, end))
        .group_by(Billing.payment_type)
        .order_by(Billing.payment_type)
        .all()
    )

    by_payment_type = [
        {"payment_type": payment_type, "revenue": money(revenue)} for payment_type, revenue in rows
    ]
    total_revenue = sum((entry["revenue"] for entry in by_payment_type), Decimal(0))
    cash_revenue = sum(
        (entry["revenue"] for entry in by_payment_type if entry["payment_type"] == PaymentType.CASH),
        Decimal(0),
    )

    prev_balance = previous_day_balance(tx, outlet_id, business_date)
    current = get_reconciliation(tx, outlet_id, business_date)
    if current is not None:
        reconciliation = {
            "previous_day_balance": prev_balance,
            "cash_deposit": current.cash_deposit,
            "remaining_balance": current.remaining_balance,
            "is_locked": current.is_locked,
        }
        remarks = current.payment_remarks or {}
    else:
        # Nothing submitted yet: project the balance as if no cash was deposited
        reconciliation = {
            "previous_day_balance": prev_balance,
            "cash_deposit": Decimal(0),
            "remaining_balance": money(prev_balance + cash_revenue),
            "is_locked": False,
        }
        remarks = {}

    return {
        "meta": {
            "report_date": business_date.isoformat(),
            "generated_at": utc_now().isoformat(),
            "outlet_name": _outlet_name(tx, outlet_id),
        },
        "summary": {
            "total_revenue_by_payment_type": by_payment_type,
            "total_revenue_excluding_cash": total_revenue - cash_revenue,
            "total_revenue": total_revenue,
            "total_drink_revenue": _drink_revenue(tx, outlet_id, start, end),
            "cash_reconciliation": reconciliation,
            "payment_remarks": remarks,
        },
    }


def _food_sales_by_category(billings) -> dict:
    categorized = OrderedDict()
    for billing in billings:
        order_type = billing.order.order_type.name if billing.order.order_type else "UNKNOWN"
        for item in billing.order.items:
            if item.status == OrderItemStatus.CANCELED:
                continue
            category = item.food.food_category.name if item.food.food_category else "Uncategorized"
            foods = categorized.setdefault(category, OrderedDict())
            entry = foods.setdefault(
                str(item.food_id),
                {
                    "food_id": str(item.food_id),
                    "food_name": item.food.name,
                    "total": {"qty": 0, "total": Decimal(0)},
                    "by_order_type": defaultdict(lambda: {"qty": 0, "total": Decimal(0)}),
                },
            )
            entry["total"]["qty"] += item.quantity
            entry["total"]["total"] += item.total_price
            entry["by_order_type"][order_type]["qty"] += item.quantity
            entry["by_order_type"][order_type]["total"] += item.total_price

    return {
        category: [dict(entry, by_order_type=dict(entry["by_order_type"])) for entry in foods.values()]
        for category, foods in categorized.items()
    }



def _billings_in_range(
    tx: Session,
    outlet_id: UUID,
    start,
    end,
    payment_type: Optional[PaymentType] = None,
    order_type: Optional[str] = None,
):
    query = (
        tx.query(Billing)
        .join(Order, Billing.order_id == Order.id)
        .join(OrderType, Order.order_type_id == OrderType.id)
        .filter(
            Billing.outlet_id == outlet_id,
            Billing.paid_at >= start,
            Billing.paid_at < end,
            Billing.status != PaymentStatus.VOID.value,
        )
    )
    if payment_type is not None:
        query = query.filter(Billing.payment_type == payment_type.value)
    if order_type:
        query = query.filter(OrderType.name == order_type)
    return query


def _default_period(start_date: Optional[date], end_date: Optional[date]):
    end_date = end_date or utc_now().date()
    start_date = start_date or end_date - timedelta(days=7)
    return utc_range_bounds(start_date, end_date)


def sales_summary(
    tx: Session,
    outlet_id: UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    payment_type: Optional[PaymentType] = None,
    order_type: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
) -> dict:
    """Paged billing listing with totals, defaulting to the last seven days"""
    start, end = _default_period(start_date, end_date)

    billings = (
        _billings_in_range(tx, outlet_id, start, end, payment_type, order_type)
        .options(
            selectinload(Billing.order).selectinload(Order.order_type),
            selectinload(Billing.order)
            .selectinload(Order.items)
            .selectinload(OrderItem.food)
            .selectinload(Food.food_category),
        )
        .order_by(Billing.paid_at, Billing.order_number)
        .offset(offset)
        .limit(limit)
        .all()
    )

    totals = {key: Decimal(0) for key in ("revenue", "tax", "discount", "amount_paid", "change_given")}
    by_payment_type = defaultdict(Decimal)
    by_order_type = defaultdict(Decimal)
    data = []

    for billing in billings:
        order_type_name = billing.order.order_type.name if billing.order.order_type else "UNKNOWN"
        totals["revenue"] += billing.total
        totals["tax"] += billing.tax
        totals["discount"] += billing.discount
        totals["amount_paid"] += billing.amount_paid
        totals["change_given"] += billing.change_given
        by_payment_type[billing.payment_type] += billing.total
        by_order_type[order_type_name] += billing.total

        data.append({
            "billing_id": str(billing.id),
            "order_number": billing.order_number,
            "receipt_number": billing.receipt_number,
            "paid_at": billing.paid_at.isoformat(),
            "subtotal": billing.subtotal,
            "discount": billing.discount,
            "tax": billing.tax,
            "total": billing.total,
            "amount_paid": billing.amount_paid,
            "change_given": billing.change_given,
            "payment_type": billing.payment_type,
            "order_type": order_type_name,
        })

    return {
        "meta": {
            "report_period": {"start_date": start.isoformat(), "end_date": end.isoformat()},
            "generated_at": utc_now().isoformat(),
            "outlet_name": _outlet_name(tx, outlet_id),
        },
        "summary": {
            "total_transactions": len(billings),
            "total_revenue": totals["revenue"],
            "total_tax": totals["tax"],
            "total_discount": totals["discount"],
            "total_amount_paid": totals["amount_paid"],
            "total_change_given": totals["change_given"],
            "sales_by_payment_type": dict(by_payment_type),
            "sales_by_order_type": dict(by_order_type),
        },
        "data": data,
        "food_sales_by_category": _food_sales_by_category(billings),
    }


def sales_detail(
    tx: Session,
    outlet_id: UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    payment_type: Optional[PaymentType] = None,
    order_type: Optional[str] = None,
    limit: int = 1000,
    offset: int = 0,
) -> dict:
    """
    One row per billed item, with the billing, order and option details
    repeated on every row.

    ``limit`` and ``offset`` page over billings, so a page never splits the
    items of one billing. CANCELED items are left out.
    """
    start, end = _default_period(start_date, end_date)

    billings = (
        _billings_in_range(tx, outlet_id, start, end, payment_type, order_type)
        .options(
            selectinload(Billing.cashier),
            selectinload(Billing.order).selectinload(Order.order_type),
            selectinload(Billing.order).selectinload(Order.waiter),
            selectinload(Billing.order).selectinload(Order.dining_table),
            selectinload(Billing.order).selectinload(Order.items).selectinload(OrderItem.food),
            selectinload(Billing.order)
            .selectinload(Order.items)
            .selectinload(OrderItem.options)
            .selectinload(OrderItemOption.option),
        )
        .order_by(Billing.paid_at, Billing.order_number)
        .offset(offset)
        .limit(limit)
        .all()
    )

    rows = []
    for billing in billings:
        order = billing.order
        for item in order.items:
            if item.status == OrderItemStatus.CANCELED:
                continue
            rows.append({
                "billing_id": str(billing.id),
                "paid_at": billing.paid_at.isoformat(),
                "receipt_number": billing.receipt_number,
                "payment_type": billing.payment_type,
                "cashier_id": str(billing.cashier_id),
                "cashier_name": billing.cashier.username if billing.cashier else "-",
                "order_id": str(order.id),
                "order_number": order.order_number,
                "order_type": order.order_type.name if order.order_type else "UNKNOWN",
                "waiter_name": order.waiter.username if order.waiter else "-",
                "dining_table": order.dining_table.number if order.dining_table else "-",
                "remark": order.remark or "-",
                "subtotal": billing.subtotal,
                "tax": billing.tax,
                "discount": billing.discount,
                "total": billing.total,
                "amount_paid": billing.amount_paid,
                "change_given": billing.change_given,
                "food_id": str(item.food_id),
                "food_name": item.food.name,
                "item_quantity": item.quantity,
                "item_unit_price": item.unit_price,
                "item_total_price": item.total_price,
                "item_options": [
                    {
                        "option_name": opt.option.name,
                        "option_quantity": opt.quantity,
                        "option_unit_price": opt.unit_price,
                        "option_total_price": opt.total_price,
                    }
                    for opt in item.options
                    if opt.status != OrderItemStatus.CANCELED
                ],
            })

    return {
        "meta": {
            "report_period": {"start_date": start.isoformat(), "end_date": end.isoformat()},
            "generated_at": utc_now().isoformat(),
            "outlet_name": _outlet_name(tx, outlet_id),
        },
        "data": rows,
    }


def kasbon_summary(tx: Session, outlet_id: UUID, start_date: date, end_date: date) -> list:
    """Non-VOID billings of Kasbon (pay-later) orders in the date range"""
    start, end = utc_range_bounds(start_date, end_date)

    billings = (
        _billings_in_range(tx, outlet_id, start, end, order_type=KASBON_ORDER_TYPE)
        .options(selectinload(Billing.order).selectinload(Order.items).selectinload(OrderItem.food))
        .order_by(Billing.paid_at)
        .all()
    )

    return [
        {
            "billing_date": billing.paid_at.date().isoformat(),
            "order_number": billing.order_number,
            "order_remark": billing.order.remark,
            "billing_remark": billing.remark,
            "amount_paid": billing.amount_paid,
            "items": [
                {"food_name": item.food.name if item.food else "Unknown Food", "quantity": item.quantity}
                for item in billing.order.items
            ],
        }
        for billing in billings
    ]
