# backend/tests/factories/menu.py

import factory
from factory import Faker, Sequence, LazyFunction
from decimal import Decimal
from .base import BaseFactory
from modules.menu.models.menu_models import MenuItem
from modules.settings.models.settings_models import RestaurantProfile
from modules.tax.models.tax_models import Tax


class MenuItemFactory(BaseFactory):
    """Factory for creating menu items."""

    class Meta:
        model = MenuItem

    restaurant_id = 1
    name = Faker("catch_phrase")
    category = factory.Iterator(["Mains", "Sides", "Drinks"])
    price = Decimal("2.000")
    is_available = True
    sort_order = Sequence(lambda n: n)
    recipe = LazyFunction(list)
    modifier_groups = LazyFunction(list)
    station_name = "Grill"
    prep_time_minutes = 10


class TaxFactory(BaseFactory):
    class Meta:
        model = Tax

    restaurant_id = 1
    name = "VAT"
    rate = Decimal("5.000")
    is_default = True


class RestaurantProfileFactory(BaseFactory):
    class Meta:
        model = RestaurantProfile

    restaurant_id = 1
    name = Faker("company")
    currency_code = "OMR"
    applied_tax_ids = LazyFunction(list)
    kitchen_stations = LazyFunction(
        lambda: [{"id": "station_1", "name": "Grill"}, {"id": "station_2", "name": "Bar"}]
    )
