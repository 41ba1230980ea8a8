"""
Ingredient stock ledger.

Stock lives on ``Ingredient.stock_qty``; every movement is also written to
``IngredientStockLog`` with a positive quantity whose direction follows from the
log type. No committed movement may leave ``stock_qty`` below zero.
"""
import logging
from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from resto_pos.exceptions import (
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    StateError,
    ValidationError,
)
from resto_pos.models import Ingredient, IngredientStockLog, Order
from resto_pos.models.enums import (
    DEDUCTION_LOG_TYPES,
    MANUAL_LOG_TYPES,
    OrderItemStatus,
    OrderStatus,
    StockLogType,
)
from resto_pos.schemas.inventory import DailyTransactionCreate
from resto_pos.utils.timezone import start_of_day_utc, utc_day_bounds

logger = logging.getLogger(__name__)

OUTBOUND_TYPE_BY_ORDER_TYPE = {
    "Boss": StockLogType.OUTBOUND_BOSS,
    "Staff": StockLogType.OUTBOUND_STAFF,
}


def outbound_log_type(order_type_name: str) -> StockLogType:
    return OUTBOUND_TYPE_BY_ORDER_TYPE.get(order_type_name, StockLogType.OUTBOUND_NM)


def _lock_ingredient(tx: Session, ingredient_id: UUID) -> Ingredient:
    ingredient = tx.query(Ingredient).filter(
        Ingredient.id == ingredient_id
    ).with_for_update().populate_existing().first()

    if ingredient is None:
        raise NotFoundError(f"Ingredient {ingredient_id} not found")
    return ingredient


def order_consumption(order: Order) -> Dict[UUID, Decimal]:
    """Total quantity per ingredient used by the ACTIVE items of an order"""
    deductions: Dict[UUID, Decimal] = defaultdict(Decimal)

    for item in order.items:
        if item.status != OrderItemStatus.ACTIVE:
            continue

        food = item.food
        if not food.ingredients:
            logger.warning(
                "Food '%s' (%s) has no ingredients linked, skipping deduction for order %s",
                food.name, food.id, order.order_number,
            )
            continue

        for link in food.ingredients:
            deductions[link.ingredient_id] += link.quantity * item.quantity

    return dict(deductions)


def deduct_for_paid_order(tx: Session, order_id: UUID, outlet_id: UUID) -> Dict[UUID, Decimal]:
    """
    Take the ingredients of a freshly paid order out of stock.

    Must run inside the billing transaction, after the order has been flipped
    to PAID. Raises ``InsufficientStockError`` instead of letting any
    ingredient go negative, which rolls back the whole billing.
    """
    order = tx.get(Order, order_id)
    if order is None:
        raise NotFoundError(f"Order {order_id} not found, cannot deduct ingredients")

    if order.status != OrderStatus.PAID:
        raise StateError(f"Order {order.order_number} is {order.status}, not PAID; cannot deduct ingredients")

    if order.outlet_id != outlet_id:
        logger.error(
            "Order %s belongs to outlet %s but deduction was requested for %s",
            order.id, order.outlet_id, outlet_id,
        )
        raise ValidationError(f"Order {order.order_number} outlet mismatch, cannot deduct ingredients")

    order_type_name = order.order_type.name
    log_type = outbound_log_type(order_type_name)
    deductions = order_consumption(order)

    # Lock rows in a stable order so concurrent billings cannot deadlock
    for ingredient_id in sorted(deductions, key=str):
        amount = deductions[ingredient_id]
        ingredient = _lock_ingredient(tx, ingredient_id)

        if ingredient.outlet_id != outlet_id:
            raise ValidationError(
                f"Ingredient '{ingredient.name}' does not belong to the outlet of order {order.order_number}"
            )

        if ingredient.stock_qty < amount:
            logger.warning(
                "Insufficient stock for '%s' (%s) on order %s: have %s, need %s",
                ingredient.name, ingredient.id, order.order_number, ingredient.stock_qty, amount,
            )
            raise InsufficientStockError(
                f"Insufficient stock for {ingredient.name}. Cannot deduct {amount} {ingredient.unit}."
            )

        ingredient.stock_qty = Ingredient.stock_qty - amount
        tx.add(
            IngredientStockLog(
                ingredient_id=ingredient_id,
                outlet_id=outlet_id,
                order_id=order.id,
                quantity=amount,
                type=log_type.value,
                note=f"Deducted for order {order.order_number} (Type: {order_type_name})",
                # Attributed to the day the order was taken, not the day it was paid
                transaction_date=order.created_at,
            )
        )
        logger.info(
            "Deducted %s %s of '%s' for order %s (%s)",
            amount, ingredient.unit, ingredient.name, order.order_number, log_type.value,
        )

    tx.flush()
    return deductions


def _signed_quantity(log_type: str, quantity: Decimal) -> Decimal:
    if log_type == StockLogType.INBOUND:
        return quantity
    if log_type in DEDUCTION_LOG_TYPES:
        return -quantity
    return Decimal(0)


def find_daily_transaction(
    tx: Session,
    ingredient_id: UUID,
    outlet_id: UUID,
    log_type: StockLogType,
    business_date,
) -> Optional[IngredientStockLog]:
    start, end = utc_day_bounds(business_date)
    return tx.query(IngredientStockLog).filter(
        IngredientStockLog.ingredient_id == ingredient_id,
        IngredientStockLog.outlet_id == outlet_id,
        IngredientStockLog.type == log_type.value,
        IngredientStockLog.transaction_date >= start,
        IngredientStockLog.transaction_date < end
    ).first()


def record_daily_transaction(tx: Session, data: DailyTransactionCreate, user_id: str) -> IngredientStockLog:
    """Manual INBOUND / DISCREPANCY / TRANSFER_* movement, one per ingredient, type and day"""
    if data.type not in MANUAL_LOG_TYPES:
        allowed = ", ".join(t.value for t in MANUAL_LOG_TYPES)
        raise ValidationError(f"Type must be one of: {allowed}")

    duplicate_message = (
        f"A {data.type.value} record for this ingredient and outlet already exists "
        f"for {data.date.isoformat()}. Use PUT to edit."
    )

    # Taking the ingredient lock first serializes writers for the same ingredient
    ingredient = _lock_ingredient(tx, data.ingredient_id)
    if ingredient.outlet_id != data.outlet_id:
        raise NotFoundError(f"Ingredient {data.ingredient_id} not found at this outlet")

    existing = find_daily_transaction(tx, data.ingredient_id, data.outlet_id, data.type, data.date)
    if existing is not None:
        raise ConflictError(duplicate_message)

    change = _signed_quantity(data.type.value, data.quantity)
    if ingredient.stock_qty + change < 0:
        raise InsufficientStockError(
            f"Insufficient stock for {ingredient.name} at this outlet. Cannot process "
            f"{data.type.value} of {data.quantity} {ingredient.unit}."
        )

    ingredient.stock_qty = Ingredient.stock_qty + change
    log = IngredientStockLog(
        ingredient_id=ingredient.id,
        outlet_id=data.outlet_id,
        quantity=data.quantity,
        type=data.type.value,
        note=data.note or (
            f"Manual {data.type.value.lower()} by user {user_id} for {data.date.isoformat()}"
        ),
        transaction_date=start_of_day_utc(data.date),
    )
    tx.add(log)
    try:
        tx.flush()
    except IntegrityError as exc:
        # uq_stock_log_manual_daily caught a writer that slipped past the lookup
        raise ConflictError(duplicate_message) from exc

    logger.info("Recorded %s of %s for ingredient %s", data.type.value, data.quantity, ingredient.name)
    return log


def update_daily_transaction(
    tx: Session,
    log_id: UUID,
    outlet_id: UUID,
    quantity: Decimal,
    note: Optional[str],
    user_id: str,
) -> IngredientStockLog:
    log = tx.query(IngredientStockLog).filter(
        IngredientStockLog.id == log_id,
        IngredientStockLog.outlet_id == outlet_id
    ).first()

    if log is None:
        raise NotFoundError("Daily transaction record not found or does not belong to the specified outlet")

    if log.type not in MANUAL_LOG_TYPES:
        raise StateError(f"{log.type} transactions cannot be manually edited")

    delta = _signed_quantity(log.type, quantity) - _signed_quantity(log.type, log.quantity)

    ingredient = _lock_ingredient(tx, log.ingredient_id)
    if ingredient.stock_qty + delta < 0:
        raise InsufficientStockError(
            f"Insufficient stock for {ingredient.name} at this outlet "
            f"({ingredient.stock_qty} {ingredient.unit} available)."
        )

    ingredient.stock_qty = Ingredient.stock_qty + delta
    log.quantity = quantity
    log.note = note or f"Manual {log.type.lower()} updated by user {user_id}"
    tx.flush()
    return log


def list_outlet_ingredients(tx: Session, outlet_id: UUID) -> List[Ingredient]:
    return tx.query(Ingredient).filter(Ingredient.outlet_id == outlet_id).order_by(Ingredient.name).all()
