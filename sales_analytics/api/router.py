from __future__ import annotations

from fastapi import APIRouter

from sales_analytics.api.health import router as health_router
from sales_analytics.api.sales_analysis import router as sales_analysis_router


api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(sales_analysis_router)
