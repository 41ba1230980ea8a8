from decimal import Decimal

from sqlalchemy.orm import Session

from resto_pos.models import Order, OrderTypeDiscount
from resto_pos.services.pricing import money

# Order types where the cashier keys the discount in by hand
MANUAL_DISCOUNT_ORDER_TYPES = ("Dine In", "Take Away")


def resolve_discount(tx: Session, order: Order, manual_discount: Decimal) -> Decimal:
    """
    Discount amount for billing an order.

    Dine In / Take Away use the manual amount. Every other order type uses the
    active OrderTypeDiscount percentage for the outlet, falling back to the
    manual amount when none applies. Never negative.
    """
    manual = Decimal(manual_discount or 0)

    if order.order_type.name in MANUAL_DISCOUNT_ORDER_TYPES:
        return money(max(Decimal(0), manual))

    rule = tx.query(OrderTypeDiscount).filter(
        OrderTypeDiscount.order_type_id == order.order_type_id,
        OrderTypeDiscount.outlet_id == order.outlet_id
    ).first()

    if rule is not None and rule.is_active and rule.percentage > 0:
        discount = order.total * rule.percentage
    else:
        discount = manual

    return money(max(Decimal(0), discount))
