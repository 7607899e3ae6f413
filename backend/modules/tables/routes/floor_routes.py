# backend/modules/tables/routes/floor_routes.py

from fastapi import APIRouter, Depends, WebSocket

from app.container import ServiceContainer
from app.dependencies import get_services
from core.websocket_stream import stream_updates
from modules.orders.schemas.payment_schemas import FinalizationResponse, PaymentRequest
from ..schemas.table_schemas import (
    FloorTableView,
    FloorView,
    ManualStatusRequest,
    SelectTableRequest,
    TableSelection,
)

router = APIRouter(prefix="/api/v1/floor", tags=["Floor Status"])


@router.get("/{restaurant_id}", response_model=FloorView)
async def get_floor(restaurant_id: int, services: ServiceContainer = Depends(get_services)):
    """Every table with its derived status, occupancy and live revenue"""
    return await services.floor.get_floor(restaurant_id)


@router.post("/{restaurant_id}/tables/{table_id}/select", response_model=TableSelection)
async def select_table(
    restaurant_id: int,
    table_id: int,
    request: SelectTableRequest,
    services: ServiceContainer = Depends(get_services),
):
    return await services.floor.select_table(
        restaurant_id, table_id, confirm_clear=request.confirm_clear
    )


@router.put("/{restaurant_id}/tables/{table_id}/status", response_model=FloorTableView)
async def set_manual_status(
    restaurant_id: int,
    table_id: int,
    request: ManualStatusRequest,
    services: ServiceContainer = Depends(get_services),
):
    return await services.floor.set_manual_status(
        restaurant_id, table_id, request.manual_status
    )


@router.post("/{restaurant_id}/tables/{label}/finalize", response_model=FinalizationResponse)
async def finalize_table(
    restaurant_id: int,
    label: str,
    payment: PaymentRequest,
    services: ServiceContainer = Depends(get_services),
):
    """Pay every open order at the table together"""
    result = await services.finalizer.finalize_table(restaurant_id, label, payment)
    return FinalizationResponse.from_result(result)


@router.websocket("/ws/{restaurant_id}")
async def floor_updates(
    websocket: WebSocket,
    restaurant_id: int,
    services: ServiceContainer = Depends(get_services),
):
    await websocket.accept()
    await stream_updates(
        websocket,
        services.floor.watch(restaurant_id),
        lambda floor: floor.model_dump(mode="json"),
        channel=f"floor:{restaurant_id}",
    )
