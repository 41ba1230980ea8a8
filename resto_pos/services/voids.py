import logging
from collections import defaultdict
from decimal import Decimal
from typing import Dict
from uuid import UUID

from sqlalchemy.orm import Session

from resto_pos.exceptions import NotFoundError
from resto_pos.models import Billing, Ingredient, IngredientStockLog, Order
from resto_pos.models.enums import OrderStatus, PaymentStatus, StockLogType

logger = logging.getLogger(__name__)


def cancel_billing(tx: Session, outlet_id: UUID, receipt_number: str, order_number: str) -> dict:
    """
    Void a billing and hand its ingredients back to stock.

    Every non-VOID stock log tied to the order is reversed regardless of its
    type, then relabelled VOID (logs are kept). Billing and order both end up
    VOID. Voiding an already VOID billing is a no-op that reports success.
    """
    billing = tx.query(Billing).filter(
        Billing.outlet_id == outlet_id,
        Billing.receipt_number == receipt_number,
        Billing.order_number == order_number
    ).with_for_update().first()

    if billing is None:
        raise NotFoundError("Billing record not found.")

    if billing.status == PaymentStatus.VOID:
        logger.info("Billing %s at outlet %s is already VOID", receipt_number, outlet_id)
        return {
            "order_id": billing.order_id,
            "already_void": True,
            "ingredients_rolled_back": {},
            "logs_voided": 0,
        }

    logs = tx.query(IngredientStockLog).filter(
        IngredientStockLog.outlet_id == outlet_id,
        IngredientStockLog.order_id == billing.order_id,
        IngredientStockLog.type != StockLogType.VOID.value
    ).all()
    if not logs:
        logger.warning("No stock logs found for order %s to roll back", billing.order_number)

    rollback: Dict[UUID, Decimal] = defaultdict(Decimal)
    for log in logs:
        rollback[log.ingredient_id] += abs(log.quantity)

    for ingredient_id in sorted(rollback, key=str):
        ingredient = tx.query(Ingredient).filter(
            Ingredient.id == ingredient_id,
            Ingredient.outlet_id == outlet_id
        ).with_for_update().first()
        if ingredient is None:
            raise NotFoundError(f"Ingredient {ingredient_id} not found at this outlet")
        ingredient.stock_qty = Ingredient.stock_qty + rollback[ingredient_id]

    for log in logs:
        log.type = StockLogType.VOID.value

    billing.status = PaymentStatus.VOID.value
    order = tx.get(Order, billing.order_id)
    order.status = OrderStatus.VOID.value
    tx.flush()

    logger.info(
        "Voided billing %s (order %s): %d log(s), %d ingredient(s) restored",
        receipt_number, order_number, len(logs), len(rollback),
    )
    return {
        "order_id": billing.order_id,
        "already_void": False,
        "ingredients_rolled_back": {str(k): v for k, v in rollback.items()},
        "logs_voided": len(logs),
    }
