from resto_pos.models.base import TimestampMixin
from resto_pos.models.outlet import Outlet, DiningTable
from resto_pos.models.user import User
from resto_pos.models.ingredient import Ingredient
from resto_pos.models.menu import (
    OrderType,
    FoodCategory,
    Food,
    FoodPrice,
    FoodOption,
    FoodIngredient,
    OrderTypeDiscount,
)
from resto_pos.models.order import Order, OrderItem, OrderItemOption
from resto_pos.models.billing import Billing
from resto_pos.models.inventory import IngredientStockLog
from resto_pos.models.counter import OrderNumberCounter, ReceiptNumberCounter
from resto_pos.models.reconciliation import DailyCashReconciliation

__all__ = [
    "TimestampMixin",
    "Outlet",
    "DiningTable",
    "User",
    "Ingredient",
    "OrderType",
    "FoodCategory",
    "Food",
    "FoodPrice",
    "FoodOption",
    "FoodIngredient",
    "OrderTypeDiscount",
    "Order",
    "OrderItem",
    "OrderItemOption",
    "Billing",
    "IngredientStockLog",
    "OrderNumberCounter",
    "ReceiptNumberCounter",
    "DailyCashReconciliation",
]
