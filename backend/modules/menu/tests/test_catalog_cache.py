# backend/modules/menu/tests/test_catalog_cache.py

import pytest
from decimal import Decimal

from core.exceptions import NotFoundError
from tests.factories import MenuItemFactory, RestaurantProfileFactory, TaxFactory
from ..services.catalog_cache import CatalogCache


@pytest.fixture
def catalog(session_factory):
    return CatalogCache(session_factory, ttl_seconds=60)


class TestCatalogCache:
    async def test_menu_items_cached_until_invalidated(self, catalog, restaurant):
        before = await catalog.get_menu_items(restaurant.id)
        MenuItemFactory(name="Falafel Wrap", price=Decimal("1.200"))

        assert len(await catalog.get_menu_items(restaurant.id)) == len(before)

        assert await catalog.invalidate(restaurant.id) >= 1
        after = await catalog.get_menu_items(restaurant.id)
        assert len(after) == len(before) + 1

    async def test_unavailable_items_still_listed(self, catalog, restaurant):
        items = await catalog.get_menu_items(restaurant.id)

        assert items[restaurant.soup.id].is_available is False
        assert items[restaurant.burger.id].station_name == "Grill"

    async def test_unknown_menu_item(self, catalog, restaurant):
        with pytest.raises(NotFoundError):
            await catalog.get_menu_item(restaurant.id, 999)

    async def test_missing_profile_defaults(self, catalog, db):
        profile = await catalog.get_profile(7)

        assert profile.restaurant_id == 7
        assert profile.applied_tax_ids == []
        assert await catalog.get_applied_taxes(7) == []

    async def test_applied_taxes_follow_profile_order(self, catalog, db):
        vat = TaxFactory(restaurant_id=3, name="VAT")
        service = TaxFactory(restaurant_id=3, name="Service", rate=Decimal("10.000"))
        TaxFactory(restaurant_id=3, name="Unused", rate=Decimal("1.000"))
        RestaurantProfileFactory(restaurant_id=3, applied_tax_ids=[service.id, vat.id])

        taxes = await catalog.get_applied_taxes(3)

        assert [t.name for t in taxes] == ["Service", "VAT"]
