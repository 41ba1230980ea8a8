from decimal import Decimal

from resto_pos.config import settings
from resto_pos.services.pricing import money


class TaxPolicy:
    """Flat-rate tax applied to an order subtotal at billing time"""

    def __init__(self, rate: Decimal = Decimal("0")):
        self.rate = Decimal(rate)

    def tax_for(self, subtotal: Decimal) -> Decimal:
        return money(subtotal * self.rate)


def default_tax_policy() -> TaxPolicy:
    return TaxPolicy(settings.TAX_RATE)
