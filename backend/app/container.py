"""
Explicit wiring of the ordering services.

One container is built per application and kept on app.state; routes
reach it through app.dependencies. Tests build their own around a
throwaway database.
"""

from dataclasses import dataclass

from sqlalchemy.orm import sessionmaker

from modules.kds.services.kitchen_aggregator import KitchenAggregator
from modules.menu.services.catalog_cache import CatalogCache
from modules.orders.services.order_feed import OrderFeed
from modules.orders.services.order_finalizer import OrderFinalizer
from modules.orders.services.order_service import OrderService
from modules.orders.services.order_store import OrderStore
from modules.orders.services.pricing_service import PricingEngine
from modules.reports.services.z_report_service import ZReportService
from modules.tables.services.floor_status_service import FloorStatusService


@dataclass
class ServiceContainer:
    session_factory: sessionmaker
    feed: OrderFeed
    store: OrderStore
    catalog: CatalogCache
    pricing: PricingEngine
    orders: OrderService
    finalizer: OrderFinalizer
    kitchen: KitchenAggregator
    floor: FloorStatusService
    reports: ZReportService


def build_services(session_factory: sessionmaker) -> ServiceContainer:
    feed = OrderFeed()
    store = OrderStore(session_factory, feed)
    catalog = CatalogCache(session_factory)
    pricing = PricingEngine()
    orders = OrderService(store, catalog, pricing)
    return ServiceContainer(
        session_factory=session_factory,
        feed=feed,
        store=store,
        catalog=catalog,
        pricing=pricing,
        orders=orders,
        finalizer=OrderFinalizer(store, orders),
        kitchen=KitchenAggregator(store, catalog),
        floor=FloorStatusService(store, session_factory, orders),
        reports=ZReportService(session_factory),
    )
