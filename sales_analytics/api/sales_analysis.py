from __future__ import annotations

from fastapi import APIRouter, Depends

from sales_analytics.api.dependencies import get_sales_analysis_service
from sales_analytics.schemas.sales_analysis import SalesAnalysisReport
from sales_analytics.services.sales_analysis_service import SalesAnalysisService


router = APIRouter(prefix="/sales-analysis", tags=["sales-analysis"])


@router.get("")
async def sales_analysis(
    service: SalesAnalysisService = Depends(get_sales_analysis_service),
) -> SalesAnalysisReport:
    return await service.get_sales_analysis()
