# backend/tests/factories/__init__.py

"""
Shared test factories for the order coordination backend.

Factories write through the session bound by the db fixture in
backend/conftest.py.
"""

from .base import BaseFactory, bind_session, get_session
from .inventory import IngredientFactory
from .menu import MenuItemFactory, RestaurantProfileFactory, TaxFactory
from .order import OrderFactory, OrderItemFactory, make_order_read
from .table import FloorPlanFactory, FloorPlanTableFactory

__all__ = [
    # Base
    'BaseFactory',
    'bind_session',
    'get_session',

    # Catalog
    'MenuItemFactory',
    'RestaurantProfileFactory',
    'TaxFactory',

    # Inventory
    'IngredientFactory',

    # Orders
    'OrderFactory',
    'OrderItemFactory',
    'make_order_read',

    # Floor plan
    'FloorPlanFactory',
    'FloorPlanTableFactory',
]
