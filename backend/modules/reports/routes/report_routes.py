# backend/modules/reports/routes/report_routes.py

from fastapi import APIRouter, Depends, status

from app.container import ServiceContainer
from app.dependencies import get_services
from ..schemas.report_schemas import ZReportRead, ZReportRequest

router = APIRouter(prefix="/api/v1/reports", tags=["Reports"])


@router.post("/z-report", response_model=ZReportRead, status_code=status.HTTP_201_CREATED)
async def generate_z_report(
    request: ZReportRequest, services: ServiceContainer = Depends(get_services)
):
    """Close the period: sales and tender totals since the previous report"""
    return services.reports.generate(
        request.restaurant_id,
        store_id=request.store_id,
        store_name=request.store_name,
        cash_counted=request.cash_counted,
    )
