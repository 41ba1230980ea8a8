"""
Per-outlet sequence numbers for orders and receipts.

The counter row is bumped with a single ``UPDATE ... SET current = current + 1``
so concurrent callers serialize on the row lock and never read the same value.
A number allocated inside a transaction that rolls back is released with it.
"""
import logging
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session

from resto_pos.config import settings
from resto_pos.models import OrderNumberCounter, ReceiptNumberCounter

logger = logging.getLogger(__name__)


def _allocate(tx: Session, counter_model, outlet_id: UUID) -> int:
    result = tx.execute(
        update(counter_model)
        .where(counter_model.outlet_id == outlet_id)
        .values(current=counter_model.current + 1)
        .execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        # First number for this outlet; a concurrent first insert fails on the
        # primary key and surfaces as a conflict
        tx.add(counter_model(outlet_id=outlet_id, current=1))
        tx.flush()
        return 1

    return tx.query(counter_model.current).filter(counter_model.outlet_id == outlet_id).scalar()


def format_number(value: int) -> str:
    return str(value).zfill(settings.NUMBER_PADDING)


def next_order_number(tx: Session, outlet_id: UUID) -> str:
    number = format_number(_allocate(tx, OrderNumberCounter, outlet_id))
    logger.debug("Allocated order number %s for outlet %s", number, outlet_id)
    return number


def next_receipt_number(tx: Session, outlet_id: UUID) -> str:
    number = format_number(_allocate(tx, ReceiptNumberCounter, outlet_id))
    logger.debug("Allocated receipt number %s for outlet %s", number, outlet_id)
    return number
