# backend/modules/reports/services/z_report_service.py

"""
Z report (end-of-period close).

Covers every order completed after the previous report's end for the same
store scope, or since the epoch if there is none. Report ids are
"<YYYY-MM-DD>-<store>"; running it again on the same day replaces that
day's record but keeps its original start so no sales fall through.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional

from sqlalchemy.orm import sessionmaker

from core.mixins import utc_now
from modules.orders.enums.order_enums import OrderStatus, PaymentMethod
from modules.orders.models.order_models import Order
from modules.orders.utils.money import ZERO, quantize_money, sum_money
from ..models.report_models import ZReport
from ..schemas.report_schemas import ZReportRead

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1)


def summarize_orders(orders) -> Dict[str, Decimal]:
    gross_sales = sum_money(o.subtotal for o in orders)
    discounts = sum_money(o.discount_amount or ZERO for o in orders)
    tax_amount = sum_money(o.tax_amount for o in orders)
    tips = sum_money(o.tip or ZERO for o in orders)
    net_sales = quantize_money(gross_sales - discounts)

    by_method = {method: ZERO for method in PaymentMethod}
    for order in orders:
        # Unknown method is reported as other
        method = order.payment_method or PaymentMethod.OTHER
        by_method[method] = quantize_money(by_method[method] + order.total)

    return {
        "gross_sales": gross_sales,
        "discounts": discounts,
        "net_sales": net_sales,
        "tax_amount": tax_amount,
        "tips": tips,
        "total_revenue": quantize_money(net_sales + tax_amount + tips),
        "cash_payments": by_method[PaymentMethod.CASH],
        "card_payments": by_method[PaymentMethod.CARD],
        "other_payments": by_method[PaymentMethod.OTHER],
        "total_payments": sum_money(by_method.values()),
    }


class ZReportService:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def generate(
        self,
        restaurant_id: int,
        store_id: str = "all",
        store_name: str = "All Stores",
        cash_counted: Decimal = ZERO,
        now: Optional[datetime] = None,
    ) -> ZReportRead:
        end = now or utc_now()
        report_id = f"{end:%Y-%m-%d}-{store_id}"

        db = self.session_factory()
        try:
            existing = db.get(ZReport, (report_id, restaurant_id))
            if existing is not None:
                start = existing.start_date
            else:
                previous = (
                    db.query(ZReport)
                    .filter(
                        ZReport.restaurant_id == restaurant_id,
                        ZReport.store_id == store_id,
                    )
                    .order_by(ZReport.end_date.desc())
                    .first()
                )
                start = previous.end_date if previous else EPOCH

            orders = (
                db.query(Order)
                .filter(
                    Order.restaurant_id == restaurant_id,
                    Order.status == OrderStatus.COMPLETED,
                    Order.completed_at > start,
                    Order.completed_at <= end,
                )
                .all()
            )
            figures = summarize_orders(orders)
            cash_counted = quantize_money(cash_counted)

            report = existing or ZReport(id=report_id, restaurant_id=restaurant_id)
            report.store_id = store_id
            report.store_name = store_name
            report.report_date = end
            report.start_date = start
            report.end_date = end
            for name, value in figures.items():
                setattr(report, name, value)
            report.total_orders = len(orders)
            report.cash_counted = cash_counted
            report.cash_variance = quantize_money(cash_counted - figures["cash_payments"])

            db.add(report)
            db.commit()
            snapshot = ZReportRead.model_validate(report)
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

        logger.info(
            f"Z report {report_id}: {snapshot.total_orders} orders, "
            f"revenue {snapshot.total_revenue}, cash variance {snapshot.cash_variance}"
        )
        return snapshot
