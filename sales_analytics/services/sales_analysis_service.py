from __future__ import annotations

import logging

from sales_analytics.analytics.regional_demand import merge_regional_demand
from sales_analytics.analytics.sales_facets import (
    build_profitability,
    build_trends,
    list_cancellations,
    summarize_customer_types,
    summarize_product_validation,
    summarize_products,
    summarize_quotation_statuses,
)
from sales_analytics.core.errors import SalesAnalysisError
from sales_analytics.models.sales_analysis import SalesAnalysisSnapshot
from sales_analytics.repositories.sales_analysis_repository import SalesAnalysisRepository
from sales_analytics.schemas.sales_analysis import SalesAnalysisReport


logger = logging.getLogger(__name__)


class SalesAnalysisService:
    def __init__(self, repository: SalesAnalysisRepository, concurrent_queries: bool = True) -> None:
        self.repository = repository
        self.concurrent_queries = concurrent_queries

    async def get_sales_analysis(self) -> SalesAnalysisReport:
        try:
            snapshot = await self.repository.load_snapshot(concurrent=self.concurrent_queries)
            return self.build_report(snapshot)
        except Exception as exc:
            logger.exception(
                "Failed to fetch sales analysis: message=%s query=%s",
                exc,
                getattr(exc, "query_name", "N/A"),
            )
            raise SalesAnalysisError(error=str(exc)) from exc

    def build_report(self, snapshot: SalesAnalysisSnapshot) -> SalesAnalysisReport:
        validation = summarize_product_validation(snapshot.product_validation)
        if validation.invalid_total:
            logger.warning(
                "Products column is not a JSON array: bookings=%s quotations=%s",
                validation.invalid_bookings,
                validation.invalid_quotations,
            )

        quotations, ignored_statuses = summarize_quotation_statuses(snapshot.quotation_statuses)
        if ignored_statuses:
            logger.warning("Quotation statuses left out of conversion buckets: %s", ignored_statuses)

        return SalesAnalysisReport(
            products=summarize_products(snapshot.product_lines),
            cities=merge_regional_demand(snapshot.booking_districts, snapshot.quotation_districts),
            trends=build_trends(snapshot.monthly_trends),
            profitability=build_profitability(
                snapshot.profitability[0] if snapshot.profitability else None
            ),
            quotations=quotations,
            customer_types=summarize_customer_types(snapshot.customer_types),
            cancellations=list_cancellations(snapshot.cancellations),
        )
