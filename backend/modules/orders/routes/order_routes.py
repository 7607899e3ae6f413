# backend/modules/orders/routes/order_routes.py

from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional

from app.container import ServiceContainer
from app.dependencies import get_services
from ..enums.order_enums import OrderStatus, OPEN_ORDER_STATUSES
from ..schemas.cart_schemas import (
    AppendItemsRequest,
    CartSubmitRequest,
    CheckoutRequest,
    PricePreviewRequest,
)
from ..schemas.order_schemas import DiscountRequest, OrderRead, TipRequest
from ..schemas.payment_schemas import (
    FinalizationResponse,
    PaymentRequest,
    PricePreviewResponse,
)
from ..services.order_feed import OrderFilter
from ..services.pricing_service import change_due, quick_cash_options

router = APIRouter(prefix="/api/v1/orders", tags=["Orders"])


@router.post("", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
async def submit_cart(
    request: CartSubmitRequest, services: ServiceContainer = Depends(get_services)
):
    """Submit a cart as a new order, or append it to the table's open order"""
    return await services.orders.submit_cart(request)


@router.get("", response_model=List[OrderRead])
async def list_orders(
    restaurant_id: int = Query(...),
    order_status: Optional[List[OrderStatus]] = Query(None, alias="status"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    services: ServiceContainer = Depends(get_services),
):
    """Orders of a restaurant, open ones by default; completed listings return the newest `limit`"""
    statuses = tuple(order_status) if order_status else OPEN_ORDER_STATUSES
    return await services.store.list_orders(
        OrderFilter(restaurant_id=restaurant_id, statuses=statuses), limit=limit
    )


@router.post("/checkout", response_model=FinalizationResponse)
async def checkout(
    request: CheckoutRequest, services: ServiceContainer = Depends(get_services)
):
    """Create and immediately complete an order (counter sale)"""
    result = await services.finalizer.checkout_cart(request)
    return FinalizationResponse.from_result(result)


@router.post("/pricing/preview", response_model=PricePreviewResponse)
async def preview_price(
    request: PricePreviewRequest, services: ServiceContainer = Depends(get_services)
):
    cart = await services.orders.build_cart(request.restaurant_id, request.items)
    taxes = await services.catalog.get_applied_taxes(request.restaurant_id)
    breakdown = services.pricing.price(cart.items, taxes, tip=request.tip)
    return PricePreviewResponse(
        subtotal=breakdown.subtotal,
        taxes=breakdown.taxes,
        tax_amount=breakdown.tax_amount,
        tip=breakdown.tip,
        total=breakdown.total,
        quick_cash=quick_cash_options(breakdown.total),
        change_due=(
            change_due(breakdown.total, request.tendered_amount)
            if request.tendered_amount is not None
            else None
        ),
    )


@router.get("/{order_id}", response_model=OrderRead)
async def get_order(order_id: int, services: ServiceContainer = Depends(get_services)):
    return await services.store.get(order_id)


@router.post("/{order_id}/items", response_model=OrderRead)
async def append_items(
    order_id: int,
    request: AppendItemsRequest,
    services: ServiceContainer = Depends(get_services),
):
    return await services.orders.append_to_order(order_id, request.items)


@router.post("/{order_id}/discounts", response_model=OrderRead)
async def apply_discount(
    order_id: int,
    request: DiscountRequest,
    services: ServiceContainer = Depends(get_services),
):
    return await services.orders.apply_discount(order_id, request.name, request.amount)


@router.put("/{order_id}/tip", response_model=OrderRead)
async def set_tip(
    order_id: int,
    request: TipRequest,
    services: ServiceContainer = Depends(get_services),
):
    return await services.orders.set_tip(order_id, request.tip)


@router.post("/{order_id}/finalize", response_model=FinalizationResponse)
async def finalize_order(
    order_id: int,
    payment: PaymentRequest,
    services: ServiceContainer = Depends(get_services),
):
    """Take payment and close the order"""
    result = await services.finalizer.finalize(order_id, payment)
    return FinalizationResponse.from_result(result)
