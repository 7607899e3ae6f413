# backend/modules/menu/services/catalog_cache.py

"""
Read-through cache for the per-restaurant catalog: menu items, taxes and
the restaurant profile. One instance is created at startup and passed to
the services that need it.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import sessionmaker

from core.config import get_settings
from core.exceptions import NotFoundError
from core.memory_cache import LRUCache
from modules.orders.services.pricing_service import applicable_taxes
from modules.settings.models.settings_models import RestaurantProfile
from modules.settings.schemas.settings_schemas import RestaurantProfileRead
from modules.tax.models.tax_models import Tax
from modules.tax.schemas.tax_schemas import TaxRead
from ..models.menu_models import MenuItem
from ..schemas.menu_schemas import MenuItemRead

logger = logging.getLogger(__name__)


class CatalogCache:
    def __init__(
        self,
        session_factory: sessionmaker,
        ttl_seconds: Optional[int] = None,
        max_size: Optional[int] = None,
    ):
        settings = get_settings()
        self.session_factory = session_factory
        self.cache = LRUCache(
            max_size=max_size or settings.catalog_cache_max_size,
            ttl_seconds=(
                settings.catalog_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
            ),
        )

    @staticmethod
    def _key(restaurant_id: int, kind: str) -> str:
        return f"catalog:{restaurant_id}:{kind}"

    async def get_menu_items(self, restaurant_id: int) -> Dict[int, MenuItemRead]:
        """All menu items of a restaurant keyed by id, available or not"""

        async def load():
            db = self.session_factory()
            try:
                rows = (
                    db.query(MenuItem)
                    .filter(MenuItem.restaurant_id == restaurant_id)
                    .order_by(MenuItem.sort_order, MenuItem.id)
                    .all()
                )
                items = {row.id: MenuItemRead.model_validate(row) for row in rows}
            finally:
                db.close()
            logger.debug(f"Loaded {len(items)} menu items for restaurant {restaurant_id}")
            return items

        return await self.cache.get_or_load(self._key(restaurant_id, "menu"), load)

    async def get_menu_item(self, restaurant_id: int, menu_item_id: int) -> MenuItemRead:
        items = await self.get_menu_items(restaurant_id)
        if menu_item_id not in items:
            raise NotFoundError(f"Menu item {menu_item_id} not found")
        return items[menu_item_id]

    async def get_taxes(self, restaurant_id: int) -> Dict[int, TaxRead]:
        async def load():
            db = self.session_factory()
            try:
                rows = db.query(Tax).filter(Tax.restaurant_id == restaurant_id).order_by(Tax.id)
                return {row.id: TaxRead.model_validate(row) for row in rows}
            finally:
                db.close()

        return await self.cache.get_or_load(self._key(restaurant_id, "taxes"), load)

    async def get_profile(self, restaurant_id: int) -> RestaurantProfileRead:
        async def load():
            db = self.session_factory()
            try:
                row = (
                    db.query(RestaurantProfile)
                    .filter(RestaurantProfile.restaurant_id == restaurant_id)
                    .first()
                )
            finally:
                db.close()
            if row is None:
                # No profile yet means no taxes applied and no stations
                return RestaurantProfileRead(
                    restaurant_id=restaurant_id, name=f"Restaurant {restaurant_id}"
                )
            return RestaurantProfileRead.model_validate(row)

        return await self.cache.get_or_load(self._key(restaurant_id, "profile"), load)

    async def get_applied_taxes(self, restaurant_id: int) -> List[TaxRead]:
        """Taxes selected in the profile, in the profile's order"""
        profile = await self.get_profile(restaurant_id)
        taxes = await self.get_taxes(restaurant_id)
        return applicable_taxes(taxes.values(), profile.applied_tax_ids)

    async def invalidate(self, restaurant_id: int) -> int:
        removed = await self.cache.delete_prefix(f"catalog:{restaurant_id}:")
        logger.info(f"Invalidated {removed} catalog entries for restaurant {restaurant_id}")
        return removed
