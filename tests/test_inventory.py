from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select

from resto_pos.database import transaction
from resto_pos.exceptions import (
    ConflictError,
    InsufficientStockError,
    StateError,
    ValidationError,
)
from resto_pos.models import FoodIngredient, Ingredient, IngredientStockLog
from resto_pos.models.enums import OrderStatus, StockLogType
from resto_pos.schemas.inventory import DailyTransactionCreate
from resto_pos.schemas.order import OrderItemCreate
from resto_pos.services import inventory as inventory_service


def paid(db, order):
    order.status = OrderStatus.PAID.value
    db.flush()
    return order


def stock(db, ingredient_id):
    db.expire_all()
    return db.get(Ingredient, ingredient_id).stock_qty


def test_deduction_sums_ingredient_across_items(db, seed, make_order):
    order = paid(db, make_order(items=[
        OrderItemCreate(food_id=seed.nasi_goreng_id, quantity=1),
        OrderItemCreate(food_id=seed.nasi_goreng_id, quantity=2),
    ]))

    deductions = inventory_service.deduct_for_paid_order(db, order.id, seed.outlet_id)
    db.commit()

    assert deductions[seed.rice_id] == Decimal("600")
    logs = db.execute(
        select(IngredientStockLog).where(IngredientStockLog.ingredient_id == seed.rice_id)
    ).scalars().all()
    assert len(logs) == 1
    assert stock(db, seed.rice_id) == Decimal("4400")


def test_deduction_requires_paid_order(db, seed, make_order):
    order = make_order()

    with pytest.raises(StateError):
        inventory_service.deduct_for_paid_order(db, order.id, seed.outlet_id)


def test_deduction_rejects_outlet_mismatch(db, seed, make_order):
    order = paid(db, make_order())

    with pytest.raises(ValidationError):
        inventory_service.deduct_for_paid_order(db, order.id, seed.other_outlet_id)


def test_deduction_rejects_ingredient_from_other_outlet(db, seed, make_order):
    db.add(FoodIngredient(food_id=seed.kerupuk_id, ingredient_id=seed.foreign_rice_id, quantity=Decimal("5")))
    db.commit()
    order = paid(db, make_order(
        order_type="Take Away",
        items=[OrderItemCreate(food_id=seed.kerupuk_id, quantity=1)],
    ))

    with pytest.raises(ValidationError):
        inventory_service.deduct_for_paid_order(db, order.id, seed.outlet_id)


def test_food_without_ingredients_is_skipped(db, seed, make_order):
    order = paid(db, make_order(
        order_type="Take Away",
        items=[
            OrderItemCreate(food_id=seed.kerupuk_id, quantity=4),
            OrderItemCreate(food_id=seed.es_teh_id, quantity=2),
        ],
    ))

    deductions = inventory_service.deduct_for_paid_order(db, order.id, seed.outlet_id)

    assert set(deductions) == {seed.tea_id}
    assert deductions[seed.tea_id] == Decimal("20")


@pytest.mark.parametrize("order_type, log_type", [
    ("Boss", StockLogType.OUTBOUND_BOSS),
    ("Staff", StockLogType.OUTBOUND_STAFF),
    ("Take Away", StockLogType.OUTBOUND_NM),
])
def test_log_type_follows_order_type(db, seed, make_order, order_type, log_type):
    order = paid(db, make_order(order_type=order_type))

    inventory_service.deduct_for_paid_order(db, order.id, seed.outlet_id)
    db.flush()

    types = db.execute(
        select(IngredientStockLog.type).where(IngredientStockLog.order_id == order.id)
    ).scalars().all()
    assert set(types) == {log_type.value}


def test_insufficient_stock_never_goes_negative(db, seed, make_order):
    order = paid(db, make_order(items=[OrderItemCreate(food_id=seed.es_teh_id, quantity=51)]))

    with pytest.raises(InsufficientStockError):
        inventory_service.deduct_for_paid_order(db, order.id, seed.outlet_id)
    db.rollback()

    assert stock(db, seed.tea_id) == Decimal("500")


def _daily(seed, log_type, quantity, day=date(2025, 6, 12)):
    return DailyTransactionCreate(
        ingredient_id=seed.rice_id,
        outlet_id=seed.outlet_id,
        quantity=Decimal(quantity),
        type=log_type,
        date=day,
    )


def test_inbound_daily_transaction_adds_stock(db, seed):
    with transaction(db) as tx:
        log = inventory_service.record_daily_transaction(tx, _daily(seed, StockLogType.INBOUND, "1000"), "u1")

    assert log.type == StockLogType.INBOUND
    assert stock(db, seed.rice_id) == Decimal("6000")

    found = inventory_service.find_daily_transaction(
        db, seed.rice_id, seed.outlet_id, StockLogType.INBOUND, date(2025, 6, 12)
    )
    assert found is not None and found.id == log.id
    assert inventory_service.find_daily_transaction(
        db, seed.rice_id, seed.outlet_id, StockLogType.INBOUND, date(2025, 6, 13)
    ) is None


def test_duplicate_daily_transaction_conflicts(db, seed):
    with transaction(db) as tx:
        inventory_service.record_daily_transaction(tx, _daily(seed, StockLogType.DISCREPANCY, "10"), "u1")

    with pytest.raises(ConflictError):
        with transaction(db) as tx:
            inventory_service.record_daily_transaction(tx, _daily(seed, StockLogType.DISCREPANCY, "5"), "u1")

    assert stock(db, seed.rice_id) == Decimal("4990")


def test_unique_index_rejects_duplicate_that_skips_lookup(db, seed, monkeypatch):
    """A concurrent writer whose lookup saw nothing still hits the unique index"""
    with transaction(db) as tx:
        inventory_service.record_daily_transaction(tx, _daily(seed, StockLogType.INBOUND, "100"), "u1")

    monkeypatch.setattr(inventory_service, "find_daily_transaction", lambda *args: None)

    with pytest.raises(ConflictError, match="already exists"):
        with transaction(db) as tx:
            inventory_service.record_daily_transaction(tx, _daily(seed, StockLogType.INBOUND, "100"), "u1")

    assert stock(db, seed.rice_id) == Decimal("5100")
    logs = db.query(IngredientStockLog).filter(IngredientStockLog.ingredient_id == seed.rice_id).all()
    assert len(logs) == 1


def test_transfer_cannot_exceed_stock(db, seed):
    with pytest.raises(InsufficientStockError):
        with transaction(db) as tx:
            inventory_service.record_daily_transaction(tx, _daily(seed, StockLogType.TRANSFER_SERAYA, "6000"), "u1")

    assert stock(db, seed.rice_id) == Decimal("5000")


def test_outbound_types_cannot_be_recorded_manually(db, seed):
    with pytest.raises(ValidationError):
        inventory_service.record_daily_transaction(db, _daily(seed, StockLogType.OUTBOUND_NM, "1"), "u1")


def test_update_daily_transaction_applies_difference(db, seed):
    with transaction(db) as tx:
        log = inventory_service.record_daily_transaction(tx, _daily(seed, StockLogType.TRANSFER_NAGOYA, "100"), "u1")
    log_id = log.id

    with transaction(db) as tx:
        inventory_service.update_daily_transaction(tx, log_id, seed.outlet_id, Decimal("250"), None, "u1")

    assert stock(db, seed.rice_id) == Decimal("4750")
    assert db.get(IngredientStockLog, log_id).quantity == Decimal("250")


def test_order_deductions_cannot_be_edited(db, seed, make_order):
    order = paid(db, make_order())
    inventory_service.deduct_for_paid_order(db, order.id, seed.outlet_id)
    db.commit()
    log = db.execute(
        select(IngredientStockLog).where(IngredientStockLog.order_id == order.id)
    ).scalars().first()

    with pytest.raises(StateError):
        inventory_service.update_daily_transaction(db, log.id, seed.outlet_id, Decimal("1"), None, "u1")
