"""
Pytest configuration file for backend testing.

Every test gets its own SQLite file so the store, a second "terminal"
session and the API all see the same committed state.
"""
import sys
from decimal import Decimal
from pathlib import Path
from types import SimpleNamespace

import pytest

# Add the backend directory to Python path so imports work correctly
backend_dir = Path(__file__).parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from core.database import build_engine, build_session_factory, init_db  # noqa: E402
from tests.factories import (  # noqa: E402
    FloorPlanFactory,
    FloorPlanTableFactory,
    IngredientFactory,
    MenuItemFactory,
    RestaurantProfileFactory,
    TaxFactory,
    bind_session,
)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'orders.db'}")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory):
    """Session used for seeding and for asserting on committed rows"""
    session = session_factory()
    bind_session(session)
    try:
        yield session
    finally:
        bind_session(None)
        session.close()


@pytest.fixture
def restaurant(db):
    """
    Restaurant 1: 5% VAT applied, a grill and a bar station, two tables.

    Burger (2.000, Large +0.500) uses 2 beef patties, Kebab Plate (3.000)
    uses 3; Lemon Mint has no recipe and Seasonal Soup is off the menu.
    """
    vat = TaxFactory(name="VAT", rate=Decimal("5.000"))
    RestaurantProfileFactory(restaurant_id=1, name="Harbour Grill", applied_tax_ids=[vat.id])

    beef = IngredientFactory(name="Beef Patty", stock=Decimal("100"))

    burger = MenuItemFactory(
        name="Burger",
        category="Mains",
        price=Decimal("2.000"),
        station_name="Grill",
        prep_time_minutes=10,
        recipe=[{"ingredient_id": beef.id, "quantity": "2", "unit": "piece"}],
        modifier_groups=[
            {
                "name": "Size",
                "options": [
                    {"name": "Large", "price": "0.500"},
                    {"name": "Extra Cheese", "price": "0.250"},
                ],
            }
        ],
    )
    kebab = MenuItemFactory(
        name="Kebab Plate",
        category="Mains",
        price=Decimal("3.000"),
        station_name="Grill",
        prep_time_minutes=15,
        recipe=[{"ingredient_id": beef.id, "quantity": "3", "unit": "piece"}],
    )
    lemonade = MenuItemFactory(
        name="Lemon Mint",
        category="Drinks",
        price=Decimal("1.000"),
        station_name="Bar",
        prep_time_minutes=5,
    )
    soup = MenuItemFactory(name="Seasonal Soup", price=Decimal("1.500"), is_available=False)

    floor_plan = FloorPlanFactory(restaurant_id=1)
    t1 = FloorPlanTableFactory(floor_plan=floor_plan, label="T1")
    t2 = FloorPlanTableFactory(floor_plan=floor_plan, label="T2")

    return SimpleNamespace(
        id=1,
        vat=vat,
        beef=beef,
        burger=burger,
        kebab=kebab,
        lemonade=lemonade,
        soup=soup,
        floor_plan=floor_plan,
        t1=t1,
        t2=t2,
    )


@pytest.fixture
def services(session_factory, restaurant):
    from app.container import build_services

    services = build_services(session_factory)
    # Conflicts in tests should replay immediately
    services.store.initial_delay = 0
    services.store.max_delay = 0
    return services


@pytest.fixture
def store(services):
    return services.store


@pytest.fixture
def client(session_factory, restaurant):
    from fastapi.testclient import TestClient
    from app.main import create_app

    with TestClient(create_app(session_factory)) as test_client:
        yield test_client
