from datetime import date, datetime
from decimal import Decimal

import pytest

from resto_pos.database import transaction
from resto_pos.models.enums import OrderStatus, PaymentType
from resto_pos.schemas.order import OrderItemCreate
from resto_pos.services import reports
from resto_pos.services.billing import create_billing
from resto_pos.services.reconciliation import submit_reconciliation
from resto_pos.services.voids import cancel_billing
from resto_pos.utils.timezone import UTC

DAY = date(2025, 6, 12)


@pytest.fixture
def sale(db, seed, make_order):
    def _sale(items, order_type="Dine In", payment_type=PaymentType.CASH, remark=None):
        order = make_order(
            order_type=order_type,
            items=[OrderItemCreate(food_id=food_id, quantity=qty) for food_id, qty in items],
        )
        order.status = OrderStatus.SERVED.value
        order.remark = remark
        db.commit()
        with transaction(db) as tx:
            billing = create_billing(
                tx, order.id, payment_type, order.total, Decimal("0"), "bill note", seed.user_ids["cashier"]
            )
            billing.paid_at = datetime(2025, 6, 12, 12, 0, tzinfo=UTC)
        return billing

    return _sale


def test_daily_revenue_groups_by_payment_type(db, seed, sale):
    sale([(seed.nasi_goreng_id, 2)])
    sale([(seed.es_teh_id, 2)], payment_type=PaymentType.QRIS)
    sale([(seed.nasi_goreng_id, 1), (seed.es_teh_id, 1)], order_type="GoFood", payment_type=PaymentType.GOFOOD)
    sale([(seed.nasi_goreng_id, 1)], payment_type=PaymentType.FOC)
    sale([(seed.nasi_goreng_id, 1)], order_type="Staff")

    report = reports.daily_revenue(db, seed.outlet_id, DAY)
    summary = report["summary"]

    by_type = {row["payment_type"]: row["revenue"] for row in summary["total_revenue_by_payment_type"]}
    assert by_type == {
        "CASH": Decimal("20000"),
        "GOFOOD": Decimal("12000"),
        "QRIS": Decimal("10000"),
    }
    assert summary["total_revenue"] == Decimal("42000")
    assert summary["total_revenue_excluding_cash"] == Decimal("22000")
    # 10000 of plain Es Teh plus 5000 GoFood Es Teh at 20% off
    assert summary["total_drink_revenue"] == Decimal("14000")
    assert report["meta"]["outlet_name"] == "Nagoya"
    assert report["meta"]["report_date"] == "2025-06-12"


def test_daily_revenue_skips_void_and_projects_cash(db, seed, sale):
    sale([(seed.nasi_goreng_id, 1)])
    voided = sale([(seed.nasi_goreng_id, 3)])
    with transaction(db) as tx:
        cancel_billing(tx, seed.outlet_id, voided.receipt_number, voided.order_number)

    summary = reports.daily_revenue(db, seed.outlet_id, DAY)["summary"]

    assert summary["total_revenue"] == Decimal("10000")
    assert summary["cash_reconciliation"]["remaining_balance"] == Decimal("10000")
    assert summary["cash_reconciliation"]["is_locked"] is False


def test_daily_revenue_reports_submitted_reconciliation(db, seed, sale):
    sale([(seed.nasi_goreng_id, 2)])
    with transaction(db) as tx:
        submit_reconciliation(
            tx, seed.outlet_id, DAY, Decimal("15000"), Decimal("0"), {"CASH": "ok"}, "Rina", False
        )

    summary = reports.daily_revenue(db, seed.outlet_id, DAY)["summary"]

    assert summary["cash_reconciliation"]["cash_deposit"] == Decimal("15000")
    assert summary["cash_reconciliation"]["remaining_balance"] == Decimal("5000")
    assert summary["cash_reconciliation"]["is_locked"] is True
    assert summary["payment_remarks"] == {"CASH": "ok"}


def test_sales_summary_totals_and_filters(db, seed, sale):
    sale([(seed.nasi_goreng_id, 2)])
    sale([(seed.es_teh_id, 1)], order_type="Take Away", payment_type=PaymentType.QRIS)

    result = reports.sales_summary(db, seed.outlet_id, DAY, DAY)

    assert result["summary"]["total_transactions"] == 2
    assert result["summary"]["total_revenue"] == Decimal("25000")
    assert result["summary"]["sales_by_order_type"] == {
        "Dine In": Decimal("20000"),
        "Take Away": Decimal("5000"),
    }
    food_sales = result["food_sales_by_category"]
    assert food_sales["Minuman"][0]["food_name"] == "Es Teh"
    assert food_sales["Makanan"][0]["total"] == {"qty": 2, "total": Decimal("20000")}

    filtered = reports.sales_summary(db, seed.outlet_id, DAY, DAY, payment_type=PaymentType.QRIS)
    assert [row["order_type"] for row in filtered["data"]] == ["Take Away"]

    paged = reports.sales_summary(db, seed.outlet_id, DAY, DAY, limit=1, offset=1)
    assert len(paged["data"]) == 1


def test_kasbon_summary_lists_pay_later_orders(db, seed, sale):
    sale([(seed.nasi_goreng_id, 1), (seed.es_teh_id, 2)], order_type="Kasbon",
         payment_type=PaymentType.KASBON, remark="Pak Budi")
    sale([(seed.nasi_goreng_id, 1)])

    rows = reports.kasbon_summary(db, seed.outlet_id, DAY, DAY)

    assert len(rows) == 1
    row = rows[0]
    assert row["billing_date"] == "2025-06-12"
    assert row["order_remark"] == "Pak Budi"
    assert row["billing_remark"] == "bill note"
    assert row["amount_paid"] == Decimal("20000")
    assert sorted(item["food_name"] for item in row["items"]) == ["Es Teh", "Nasi Goreng"]


def test_sales_detail_has_one_row_per_billed_item(db, seed, sale):
    sale([(seed.nasi_goreng_id, 2), (seed.es_teh_id, 1)], remark="no chili")
    sale([(seed.kerupuk_id, 3)], order_type="Take Away", payment_type=PaymentType.QRIS)

    result = reports.sales_detail(db, seed.outlet_id, DAY, DAY)
    rows = result["data"]

    assert sorted(row["food_name"] for row in rows) == ["Es Teh", "Kerupuk", "Nasi Goreng"]
    first = next(row for row in rows if row["food_name"] == "Nasi Goreng")
    kerupuk = next(row for row in rows if row["food_name"] == "Kerupuk")
    assert first["order_type"] == "Dine In"
    assert first["dining_table"] == "A1"
    assert first["remark"] == "no chili"
    assert first["waiter_name"] == "waiter"
    assert first["cashier_name"] == "cashier"
    assert first["item_quantity"] == 2
    assert first["item_total_price"] == Decimal("20000")
    assert first["total"] == Decimal("25000")
    assert kerupuk["order_type"] == "Take Away"
    assert kerupuk["dining_table"] == "-"
    assert kerupuk["remark"] == "-"

    qris = reports.sales_detail(db, seed.outlet_id, DAY, DAY, payment_type=PaymentType.QRIS)
    assert [row["food_name"] for row in qris["data"]] == ["Kerupuk"]

    # Paging counts billings, so the first page keeps both items of the first bill
    paged = reports.sales_detail(db, seed.outlet_id, DAY, DAY, limit=1)
    assert sorted(row["food_name"] for row in paged["data"]) == ["Es Teh", "Nasi Goreng"]


def test_sales_detail_lists_options_and_skips_void(db, seed, sale, make_order):
    order = make_order()
    order.status = OrderStatus.SERVED.value
    db.commit()
    with transaction(db) as tx:
        billing = create_billing(
            tx, order.id, PaymentType.CASH, order.total, Decimal("0"), None, seed.user_ids["cashier"]
        )
        billing.paid_at = datetime(2025, 6, 12, 9, 0, tzinfo=UTC)

    voided = sale([(seed.es_teh_id, 1)])
    with transaction(db) as tx:
        cancel_billing(tx, seed.outlet_id, voided.receipt_number, voided.order_number)

    rows = reports.sales_detail(db, seed.outlet_id, DAY, DAY)["data"]

    assert len(rows) == 1
    assert rows[0]["item_options"] == [{
        "option_name": "Extra Egg",
        "option_quantity": 1,
        "option_unit_price": Decimal("2000"),
        "option_total_price": Decimal("2000"),
    }]
