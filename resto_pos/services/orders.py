"""
Order aggregate: Order, its OrderItems and their OrderItemOptions.

Invariant kept by every function here: for an order that is not VOID,
``order.subtotal == order.total == sum(total_price of ACTIVE items)``.
Totals are moved with ``column = column + delta`` so the database applies the
change against the row it holds, and every order UPDATE is guarded by the
``version`` column.
"""
import logging
from decimal import Decimal
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from resto_pos.exceptions import ForbiddenError, NotFoundError, StateError, ValidationError, ConflictError
from resto_pos.models import DiningTable, Food, Order, OrderItem, OrderItemOption, OrderType, Outlet, User
from resto_pos.models.enums import OrderItemStatus, OrderStatus, UserRole
from resto_pos.schemas.order import (
    OrderCreate,
    OrderItemCreate,
    OrderItemOptionResponse,
    OrderItemResponse,
    OrderItemUpdate,
    OrderResponse,
)
from resto_pos.services.counters import next_order_number
from resto_pos.services.pricing import line_total, money, resolve_food_price, resolve_option_price

logger = logging.getLogger(__name__)

DINE_IN = "Dine In"

# PAID is reached only through billing and VOID only through the void handler
MANUALLY_SETTABLE_STATUSES = (OrderStatus.PENDING, OrderStatus.SERVED)
MUTABLE_STATUSES = (OrderStatus.PENDING, OrderStatus.SERVED)


def get_order(tx: Session, order_id: UUID, for_update: bool = False) -> Order:
    query = tx.query(Order).filter(Order.id == order_id)
    if for_update:
        query = query.with_for_update()

    order = query.first()
    if order is None:
        raise NotFoundError(f"Order {order_id} not found")
    return order


def _ensure_mutable(order: Order, expected_version: Optional[int]) -> None:
    if order.status not in MUTABLE_STATUSES:
        raise StateError(f"Order {order.order_number} is {order.status} and can no longer be modified")
    if expected_version is not None and expected_version != order.version:
        raise ConflictError(
            f"Order {order.order_number} was modified (version {order.version}, expected {expected_version})"
        )


def _build_item(tx: Session, order_type_id: UUID, item_data: OrderItemCreate) -> OrderItem:
    unit_price = resolve_food_price(tx, item_data.food_id, order_type_id)

    options = []
    for opt in item_data.options:
        extra_price = resolve_option_price(tx, opt.option_id)
        options.append(
            OrderItemOption(
                option_id=opt.option_id,
                quantity=opt.quantity,
                unit_price=extra_price,
                total_price=money(extra_price * opt.quantity),
                status=OrderItemStatus.ACTIVE.value,
            )
        )

    return OrderItem(
        food_id=item_data.food_id,
        quantity=item_data.quantity,
        unit_price=unit_price,
        total_price=line_total(item_data.quantity, unit_price, [o.total_price for o in options]),
        status=OrderItemStatus.ACTIVE.value,
        options=options,
    )


def _increment_totals(order: Order, delta: Decimal) -> None:
    order.subtotal = Order.subtotal + delta
    order.total = Order.total + delta


def create_order(tx: Session, data: OrderCreate) -> Order:
    order_type = tx.get(OrderType, data.order_type_id)
    if order_type is None:
        raise ValidationError("Invalid order type")

    if order_type.name == DINE_IN and data.dining_table_id is None:
        raise ValidationError("Dine In orders require a dining table")

    if tx.get(Outlet, data.outlet_id) is None:
        raise ValidationError("Invalid outlet")

    if tx.get(User, data.waiter_id) is None:
        raise ValidationError("Invalid waiter")

    if data.dining_table_id is not None:
        table = tx.get(DiningTable, data.dining_table_id)
        if table is None or table.outlet_id != data.outlet_id:
            raise ValidationError("Invalid dining table for this outlet")

    items = [_build_item(tx, order_type.id, item_data) for item_data in data.items]
    subtotal = sum((item.total_price for item in items), Decimal(0))

    order = Order(
        order_number=next_order_number(tx, data.outlet_id),
        outlet_id=data.outlet_id,
        waiter_id=data.waiter_id,
        order_type_id=order_type.id,
        dining_table_id=data.dining_table_id,
        customer_name=data.customer_name,
        online_code=data.online_code,
        remark=data.remark,
        status=OrderStatus.PENDING.value,
        subtotal=subtotal,
        total=subtotal,
        items=items,
    )
    tx.add(order)
    tx.flush()

    logger.info(
        "Created order %s at outlet %s with %d item(s), total %s",
        order.order_number, order.outlet_id, len(items), subtotal,
    )
    return order


def add_items(
    tx: Session,
    order_id: UUID,
    items: Iterable[OrderItemCreate],
    expected_version: Optional[int] = None,
) -> Order:
    """Append items and raise the order totals by their sum (no full recompute)"""
    order = get_order(tx, order_id, for_update=True)
    _ensure_mutable(order, expected_version)

    new_items = [_build_item(tx, order.order_type_id, item_data) for item_data in items]
    added = sum((item.total_price for item in new_items), Decimal(0))

    for item in new_items:
        order.items.append(item)
    _increment_totals(order, added)
    tx.flush()

    logger.info("Added %d item(s) worth %s to order %s", len(new_items), added, order.order_number)
    return order


def _cancel_option(option: OrderItemOption) -> None:
    option.quantity = 0
    option.total_price = Decimal(0)
    option.status = OrderItemStatus.CANCELED.value


def batch_update_items(
    tx: Session,
    order_id: UUID,
    updates: Iterable[OrderItemUpdate],
    expected_version: Optional[int] = None,
) -> Order:
    """
    Change quantity/status of existing items and options.

    Each touched item is repriced from the current FoodPrice and option
    prices; the signed difference against the stored item totals is applied to
    the order once for the whole batch.
    """
    order = get_order(tx, order_id, for_update=True)
    _ensure_mutable(order, expected_version)

    items_by_id = {item.id: item for item in order.items}
    difference = Decimal(0)

    for update_data in updates:
        item = items_by_id.get(update_data.id)
        if item is None:
            raise NotFoundError(f"Order item not found: {update_data.id}")

        unit_price = resolve_food_price(tx, item.food_id, order.order_type_id)
        canceled = update_data.status == OrderItemStatus.CANCELED
        quantity = 0 if canceled else update_data.quantity
        if not canceled and quantity <= 0:
            raise ValidationError(f"Active item {item.id} needs a positive quantity")

        options_by_id = {option.id: option for option in item.options}
        for opt_data in update_data.options:
            option = options_by_id.get(opt_data.id)
            if option is None:
                raise NotFoundError(f"Option not found: {opt_data.id}")

            if opt_data.status == OrderItemStatus.CANCELED:
                _cancel_option(option)
                continue
            if opt_data.quantity <= 0:
                raise ValidationError(f"Active option {option.id} needs a positive quantity")

            extra_price = resolve_option_price(tx, option.option_id)
            option.quantity = opt_data.quantity
            option.unit_price = extra_price
            option.total_price = money(extra_price * opt_data.quantity)
            option.status = OrderItemStatus.ACTIVE.value

        if canceled:
            for option in item.options:
                _cancel_option(option)

        option_totals = [
            option.total_price for option in item.options
            if option.status == OrderItemStatus.ACTIVE
        ]
        new_total = line_total(quantity, unit_price, option_totals)
        difference += new_total - item.total_price

        item.quantity = quantity
        item.unit_price = unit_price
        item.total_price = new_total
        item.status = update_data.status.value

    _increment_totals(order, difference)
    tx.flush()

    logger.info("Batch updated order %s, total changed by %s", order.order_number, difference)
    return order


def update_order_status(tx: Session, order_id: UUID, status: OrderStatus, current_user: dict) -> Order:
    if status not in MANUALLY_SETTABLE_STATUSES:
        allowed = ", ".join(s.value for s in MANUALLY_SETTABLE_STATUSES)
        raise ValidationError(f"Status must be one of: {allowed}")

    order = get_order(tx, order_id, for_update=True)

    role = current_user.get("role")
    if role == UserRole.WAITER:
        if str(order.waiter_id) != str(current_user.get("user_id")):
            raise ForbiddenError("Waiters can only update their own assigned orders")
    elif role not in (UserRole.ADMIN, UserRole.CASHIER):
        raise ForbiddenError("You do not have permission to update order status")

    if order.status not in MUTABLE_STATUSES:
        raise StateError(f"Order {order.order_number} is {order.status}")

    order.status = status.value
    tx.flush()
    return order


def list_active_orders(tx: Session, outlet_id: UUID) -> List[Order]:
    """PENDING and SERVED orders of an outlet, newest first"""
    return (
        tx.query(Order)
        .filter(
            Order.outlet_id == outlet_id,
            Order.status.in_([s.value for s in MUTABLE_STATUSES])
        )
        .options(
            selectinload(Order.waiter),
            selectinload(Order.order_type),
            selectinload(Order.dining_table),
            selectinload(Order.items).selectinload(OrderItem.food).selectinload(Food.food_category),
            selectinload(Order.items).selectinload(OrderItem.options).selectinload(OrderItemOption.option),
        )
        .order_by(Order.created_at.desc())
        .all()
    )


def order_detail(order: Order) -> dict:
    """Order payload with food, option, waiter and table names filled in"""
    return {
        **OrderResponse.model_validate(order).model_dump(exclude={"items"}),
        "order_type_name": order.order_type.name,
        "waiter_name": order.waiter.username if order.waiter else None,
        "dining_table_number": order.dining_table.number if order.dining_table else None,
        "items": [
            {
                **OrderItemResponse.model_validate(item).model_dump(exclude={"options"}),
                "food_name": item.food.name,
                "food_category": item.food.food_category.name if item.food.food_category else None,
                "options": [
                    {**OrderItemOptionResponse.model_validate(opt).model_dump(), "option_name": opt.option.name}
                    for opt in item.options
                ],
            }
            for item in order.items
        ],
    }
