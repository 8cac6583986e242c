from __future__ import annotations

import asyncio
from typing import Any, Dict, List, NamedTuple, Tuple

from sales_analytics.core.database import Database
from sales_analytics.core.errors import StoreQueryError
from sales_analytics.models.sales_analysis import Row, SalesAnalysisSnapshot


CONFIRMED_ORDER_STATUSES = ["booked", "paid", "dispatched", "packed", "delivered"]
PIPELINE_STATUSES = ["pending", "booked"]
CANCELED_STATUS = "canceled"


class AnalyticsQuery(NamedTuple):
    name: str
    sql: str
    args: Tuple[Any, ...] = ()


PRODUCT_VALIDATION = AnalyticsQuery(
    name="product_validation",
    sql="""
        SELECT 'bookings' AS source, COUNT(*) AS invalid_count
        FROM public.bookings
        WHERE LOWER(status) = ANY($1::text[])
          AND products IS NOT NULL
          AND jsonb_typeof(products::jsonb) <> 'array'
        UNION ALL
        SELECT 'fwcquotations' AS source, COUNT(*) AS invalid_count
        FROM public.fwcquotations
        WHERE LOWER(status) = ANY($2::text[])
          AND products IS NOT NULL
          AND jsonb_typeof(products::jsonb) <> 'array'
    """,
    args=(CONFIRMED_ORDER_STATUSES, PIPELINE_STATUSES),
)

# Quantity stays text here; non-numeric quantities become 0 in Python instead of
# failing the cast. Rows whose products column is not an array expand to nothing.
PRODUCT_LINES = AnalyticsQuery(
    name="product_lines",
    sql="""
        SELECT
          p.product->>'productname' AS productname,
          p.product->>'quantity' AS quantity
        FROM public.bookings b
        CROSS JOIN LATERAL jsonb_array_elements(
          CASE
            WHEN jsonb_typeof(b.products::jsonb) = 'array' THEN b.products::jsonb
            ELSE '[]'::jsonb
          END
        ) AS p(product)
        WHERE LOWER(b.status) = ANY($1::text[])
          AND jsonb_typeof(p.product) = 'object'
          AND p.product ? 'productname'
          AND p.product ? 'quantity'
    """,
    args=(CONFIRMED_ORDER_STATUSES,),
)

BOOKING_DISTRICTS = AnalyticsQuery(
    name="booking_districts",
    sql="""
        SELECT district, COUNT(*) AS count, SUM(COALESCE(total::numeric, 0)) AS total_amount
        FROM public.bookings
        WHERE LOWER(status) = ANY($1::text[])
        GROUP BY district
    """,
    args=(CONFIRMED_ORDER_STATUSES,),
)

QUOTATION_DISTRICTS = AnalyticsQuery(
    name="quotation_districts",
    sql="""
        SELECT district, COUNT(*) AS count, SUM(COALESCE(total::numeric, 0)) AS total_amount
        FROM public.fwcquotations
        WHERE LOWER(status) = ANY($1::text[])
        GROUP BY district
    """,
    args=(PIPELINE_STATUSES,),
)

MONTHLY_TRENDS = AnalyticsQuery(
    name="monthly_trends",
    sql="""
        SELECT
          TO_CHAR(DATE_TRUNC('month', created_at), 'YYYY-MM') AS month,
          COUNT(*) AS volume,
          SUM(COALESCE(total::numeric, 0)) AS total_amount,
          SUM(COALESCE(amount_paid::numeric, 0)) AS amount_paid
        FROM public.bookings
        WHERE LOWER(status) = ANY($1::text[])
        GROUP BY DATE_TRUNC('month', created_at)
        ORDER BY DATE_TRUNC('month', created_at)
    """,
    args=(CONFIRMED_ORDER_STATUSES,),
)

PROFITABILITY = AnalyticsQuery(
    name="profitability",
    sql="""
        SELECT
          SUM(COALESCE(total::numeric, 0)) AS total_amount,
          SUM(COALESCE(amount_paid::numeric, 0)) AS amount_paid
        FROM public.bookings
        WHERE LOWER(status) = ANY($1::text[])
    """,
    args=(CONFIRMED_ORDER_STATUSES,),
)

QUOTATION_STATUSES = AnalyticsQuery(
    name="quotation_statuses",
    sql="""
        SELECT LOWER(status) AS status, COUNT(*) AS count, SUM(COALESCE(total::numeric, 0)) AS total_amount
        FROM public.fwcquotations
        GROUP BY LOWER(status)
    """,
)

CUSTOMER_TYPES = AnalyticsQuery(
    name="customer_types",
    sql="""
        SELECT customer_type, COUNT(*) AS count, SUM(COALESCE(total::numeric, 0)) AS total_amount
        FROM public.bookings
        WHERE LOWER(status) = ANY($1::text[])
          AND customer_type IS NOT NULL
        GROUP BY customer_type
    """,
    args=(CONFIRMED_ORDER_STATUSES,),
)

CANCELLATIONS = AnalyticsQuery(
    name="cancellations",
    sql="""
        SELECT 'booking' AS type, order_id, COALESCE(total::numeric, 0) AS total, created_at
        FROM public.bookings
        WHERE LOWER(status) = $1
        UNION ALL
        SELECT 'quotation' AS type, quotation_id AS order_id, COALESCE(total::numeric, 0) AS total, created_at
        FROM public.fwcquotations
        WHERE LOWER(status) = $1
        ORDER BY created_at DESC
    """,
    args=(CANCELED_STATUS,),
)

ANALYTICS_QUERIES: Tuple[AnalyticsQuery, ...] = (
    PRODUCT_VALIDATION,
    PRODUCT_LINES,
    BOOKING_DISTRICTS,
    QUOTATION_DISTRICTS,
    MONTHLY_TRENDS,
    PROFITABILITY,
    QUOTATION_STATUSES,
    CUSTOMER_TYPES,
    CANCELLATIONS,
)


class SalesAnalysisRepository:
    """Read-only analytical queries over bookings and quotations."""

    def __init__(self, database: Database) -> None:
        self.database = database

    async def run_query(self, query: AnalyticsQuery) -> List[Row]:
        try:
            return await self.database.fetch_all(query.sql, *query.args)
        except Exception as exc:
            raise StoreQueryError(query.name, str(exc)) from exc

    async def load_snapshot(self, concurrent: bool = True) -> SalesAnalysisSnapshot:
        """Run every analytics query and collect the raw rows.

        Concurrent runs stop at the first failure: the remaining queries are
        cancelled and awaited so their connections return to the pool before
        the error propagates.
        """
        if concurrent:
            tasks = [asyncio.ensure_future(self.run_query(query)) for query in ANALYTICS_QUERIES]
            try:
                results = await asyncio.gather(*tasks)
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
        else:
            results = [await self.run_query(query) for query in ANALYTICS_QUERIES]

        rows_by_query: Dict[str, List[Row]] = {
            query.name: rows for query, rows in zip(ANALYTICS_QUERIES, results)
        }
        return SalesAnalysisSnapshot(**rows_by_query)
