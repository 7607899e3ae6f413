# backend/modules/kds/routes/kds_routes.py

"""
API routes for the kitchen display and expeditor screens.
"""

from fastapi import APIRouter, Depends, Query, WebSocket
from typing import List, Optional
import logging

from app.container import ServiceContainer
from app.dependencies import get_services
from core.websocket_stream import stream_updates
from modules.orders.schemas.order_schemas import OrderRead
from ..schemas.kds_schemas import (
    BumpGroupRequest,
    BumpResponse,
    CompleteItemRequest,
    ExpoOrder,
    KDSItemSummary,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/kitchen", tags=["Kitchen Display System"])


@router.get("/summaries", response_model=List[KDSItemSummary])
async def get_summaries(
    restaurant_id: int = Query(...),
    station: Optional[str] = Query(None),
    services: ServiceContainer = Depends(get_services),
):
    """Outstanding work grouped by dish, optionally for one station"""
    return await services.kitchen.get_summaries(restaurant_id, station)


@router.post("/orders/{order_id}/complete", response_model=OrderRead)
async def complete_item(
    order_id: int,
    request: CompleteItemRequest,
    services: ServiceContainer = Depends(get_services),
):
    return await services.kitchen.complete_item(order_id, request.line_index)


@router.post("/bump", response_model=BumpResponse)
async def bump_group(
    request: BumpGroupRequest, services: ServiceContainer = Depends(get_services)
):
    """Complete every outstanding occurrence of a dish in one transaction"""
    return await services.kitchen.bump_group(
        request.restaurant_id, request.key, request.station
    )


@router.get("/expo", response_model=List[ExpoOrder])
async def get_expo_orders(
    restaurant_id: int = Query(...),
    services: ServiceContainer = Depends(get_services),
):
    return await services.kitchen.get_expo_orders(restaurant_id)


@router.websocket("/ws/{restaurant_id}")
async def kitchen_updates(
    websocket: WebSocket,
    restaurant_id: int,
    station: Optional[str] = None,
    services: ServiceContainer = Depends(get_services),
):
    """Live kitchen summaries; the first message is the current state"""
    await websocket.accept()
    await stream_updates(
        websocket,
        services.kitchen.watch(restaurant_id, station),
        lambda summaries: [s.model_dump(mode="json") for s in summaries],
        channel=f"kitchen:{restaurant_id}",
    )
