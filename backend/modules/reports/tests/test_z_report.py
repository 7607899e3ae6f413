# backend/modules/reports/tests/test_z_report.py

import pytest
from datetime import datetime
from decimal import Decimal

from modules.orders.enums.order_enums import OrderStatus, PaymentMethod
from tests.factories import OrderFactory
from ..models.report_models import ZReport
from ..services.z_report_service import EPOCH, ZReportService, summarize_orders

CLOSE = datetime(2026, 10, 18, 23, 0)
LUNCH = datetime(2026, 10, 18, 12, 30)


def completed(payment_method, completed_at=LUNCH, **amounts):
    return OrderFactory(
        status=OrderStatus.COMPLETED,
        payment_method=payment_method,
        completed_at=completed_at,
        **amounts,
    )


@pytest.fixture
def day_of_sales(db):
    completed(
        PaymentMethod.CASH,
        subtotal=Decimal("10.000"),
        tax_amount=Decimal("0.500"),
        tip=Decimal("1.000"),
    )
    completed(
        PaymentMethod.CARD,
        subtotal=Decimal("4.000"),
        tax_amount=Decimal("0.200"),
        discount_amount=Decimal("1.000"),
        applied_discounts=[{"name": "Staff", "amount": "1.000"}],
    )
    completed(None, subtotal=Decimal("2.000"))
    # Still open, never counted
    OrderFactory(subtotal=Decimal("50.000"))


@pytest.fixture
def reports(session_factory):
    return ZReportService(session_factory)


@pytest.mark.unit
class TestSummarizeOrders:
    def test_no_orders(self):
        figures = summarize_orders([])

        assert figures["total_revenue"] == Decimal("0.000")
        assert figures["total_payments"] == Decimal("0.000")


class TestZReport:
    def test_figures(self, reports, day_of_sales):
        report = reports.generate(1, cash_counted=Decimal("12"), now=CLOSE)

        assert report.id == "2026-10-18-all"
        assert report.start_date == EPOCH
        assert report.total_orders == 3
        assert report.gross_sales == Decimal("16.000")
        assert report.discounts == Decimal("1.000")
        assert report.net_sales == Decimal("15.000")
        assert report.tax_amount == Decimal("0.700")
        assert report.tips == Decimal("1.000")
        assert report.total_revenue == Decimal("16.700")
        assert report.cash_payments == Decimal("11.500")
        assert report.card_payments == Decimal("3.200")
        assert report.other_payments == Decimal("2.000")
        assert report.total_payments == Decimal("16.700")
        assert report.cash_variance == Decimal("0.500")

    def test_next_report_starts_where_last_ended(self, reports, db, day_of_sales):
        reports.generate(1, now=CLOSE)
        completed(
            PaymentMethod.CARD,
            completed_at=datetime(2026, 10, 19, 11, 0),
            subtotal=Decimal("3.000"),
        )

        report = reports.generate(1, now=datetime(2026, 10, 19, 22, 0))

        assert report.id == "2026-10-19-all"
        assert report.start_date == CLOSE
        assert report.total_orders == 1
        assert report.card_payments == Decimal("3.000")
        assert report.cash_variance == Decimal("0.000")

    def test_same_day_rerun_replaces_record(self, reports, db, day_of_sales):
        reports.generate(1, now=CLOSE)
        completed(
            PaymentMethod.CASH,
            completed_at=datetime(2026, 10, 18, 23, 10),
            subtotal=Decimal("1.000"),
        )

        report = reports.generate(1, cash_counted=Decimal("12.500"), now=datetime(2026, 10, 18, 23, 30))

        assert report.start_date == EPOCH
        assert report.total_orders == 4
        assert report.cash_payments == Decimal("12.500")
        assert report.cash_variance == Decimal("0.000")
        assert db.query(ZReport).count() == 1

    def test_store_scopes_are_independent(self, reports, db, day_of_sales):
        reports.generate(1, now=CLOSE)

        report = reports.generate(1, store_id="patio", store_name="Patio", now=CLOSE)

        assert report.id == "2026-10-18-patio"
        assert report.start_date == EPOCH
        assert db.query(ZReport).count() == 2

    def test_other_restaurants_excluded(self, reports, day_of_sales):
        report = reports.generate(2, now=CLOSE)

        assert report.total_orders == 0
        assert report.total_revenue == Decimal("0.000")
