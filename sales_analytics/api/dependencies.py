from __future__ import annotations

from fastapi import Depends, Request

from sales_analytics.core.config import get_settings
from sales_analytics.core.database import Database
from sales_analytics.repositories.sales_analysis_repository import SalesAnalysisRepository
from sales_analytics.services.sales_analysis_service import SalesAnalysisService


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_sales_analysis_repository(
    database: Database = Depends(get_database),
) -> SalesAnalysisRepository:
    return SalesAnalysisRepository(database=database)


def get_sales_analysis_service(
    repository: SalesAnalysisRepository = Depends(get_sales_analysis_repository),
) -> SalesAnalysisService:
    settings = get_settings()
    return SalesAnalysisService(
        repository=repository,
        concurrent_queries=settings.analysis_concurrent_queries,
    )
