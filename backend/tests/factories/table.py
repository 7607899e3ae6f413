# backend/tests/factories/table.py

import factory
from factory import Sequence, SubFactory
from .base import BaseFactory
from modules.tables.models.table_models import FloorPlan, FloorPlanTable


class FloorPlanFactory(BaseFactory):
    class Meta:
        model = FloorPlan

    restaurant_id = 1
    grid_width = 12
    grid_height = 8


class FloorPlanTableFactory(BaseFactory):
    """Factory for creating floor plan tables."""

    class Meta:
        model = FloorPlanTable

    floor_plan = SubFactory(FloorPlanFactory)
    label = Sequence(lambda n: f"T{n + 1}")
    manual_status = None
    position_x = Sequence(lambda n: (n * 2) % 12)
    position_y = 0
    width = 1
    height = 1
    shape = factory.Iterator(["square", "circle", "rectangle"])
