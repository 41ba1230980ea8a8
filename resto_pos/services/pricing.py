"""
Price lookups for order lines.

Prices are read fresh on every call: a line edited after a price change picks
up the new price.
"""
from decimal import Decimal
from typing import Iterable
from uuid import UUID

from sqlalchemy.orm import Session

from resto_pos.exceptions import OptionNotFoundError, PriceNotFoundError
from resto_pos.models import FoodOption, FoodPrice

CENT = Decimal("0.01")


def money(value) -> Decimal:
    return Decimal(value).quantize(CENT)


def resolve_food_price(tx: Session, food_id: UUID, order_type_id: UUID) -> Decimal:
    price = tx.query(FoodPrice.price).filter(
        FoodPrice.food_id == food_id,
        FoodPrice.order_type_id == order_type_id
    ).scalar()

    if price is None:
        raise PriceNotFoundError(
            f"No price found for food {food_id} and order type {order_type_id}"
        )
    return money(price)


def resolve_option_price(tx: Session, option_id: UUID) -> Decimal:
    extra_price = tx.query(FoodOption.extra_price).filter(FoodOption.id == option_id).scalar()

    if extra_price is None:
        raise OptionNotFoundError(f"Invalid option {option_id}")
    return money(extra_price)


def line_total(quantity: int, unit_price: Decimal, option_totals: Iterable[Decimal] = ()) -> Decimal:
    return money(unit_price * quantity + sum(option_totals, Decimal(0)))
