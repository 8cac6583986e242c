from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from sales_analytics.analytics.numeric import as_amount, as_int, split_paid
from sales_analytics.schemas.sales_analysis import (
    Cancellation,
    CustomerTypeSummary,
    ProductSales,
    ProductValidationSummary,
    Profitability,
    QuotationBucket,
    QuotationSummary,
    TrendPoint,
)


QUOTATION_STATUSES = ("pending", "booked", "canceled")


def summarize_products(rows: Iterable[Mapping[str, Any]]) -> List[ProductSales]:
    quantities: Dict[str, int] = {}
    for row in rows:
        raw_name = row.get("productname")
        name = raw_name.strip() if isinstance(raw_name, str) else ""
        if not name:
            continue
        quantities[name] = quantities.get(name, 0) + as_int(row.get("quantity"))

    # sorted() is stable, so equal quantities keep first-seen order.
    ranked = sorted(quantities.items(), key=lambda item: item[1], reverse=True)
    return [ProductSales(productname=name, quantity=quantity) for name, quantity in ranked]


def build_trends(rows: Iterable[Mapping[str, Any]]) -> List[TrendPoint]:
    points: List[TrendPoint] = []
    for row in rows:
        month = row.get("month")
        total = as_amount(row.get("total_amount"))
        paid, unpaid = split_paid(total, as_amount(row.get("amount_paid")))
        points.append(
            TrendPoint(
                month=str(month) if month else None,
                volume=as_int(row.get("volume")),
                total_amount=total,
                amount_paid=paid,
                unpaid_amount=unpaid,
            )
        )
    # Orders without a creation date group under a null month, listed last.
    return sorted(points, key=lambda point: (point.month is None, point.month or ""))


def build_profitability(row: Optional[Mapping[str, Any]]) -> Profitability:
    row = row or {}
    total = as_amount(row.get("total_amount"))
    paid, unpaid = split_paid(total, as_amount(row.get("amount_paid")))
    return Profitability(total_amount=total, amount_paid=paid, unpaid_amount=unpaid)


def summarize_quotation_statuses(
    rows: Iterable[Mapping[str, Any]],
) -> Tuple[QuotationSummary, List[str]]:
    """Bucket status-grouped quotation rows into pending, booked and canceled.

    A null status counts as canceled. Any other status is left out of every
    bucket; those statuses are returned alongside the summary.
    """
    buckets: Dict[str, QuotationBucket] = {status: QuotationBucket() for status in QUOTATION_STATUSES}
    ignored: List[str] = []
    for row in rows:
        raw_status = row.get("status")
        status = str(raw_status).strip().lower() if raw_status is not None else "canceled"
        bucket = buckets.get(status)
        if bucket is None:
            ignored.append(status)
            continue
        bucket.count += as_int(row.get("count"))
        bucket.total_amount += as_amount(row.get("total_amount"))
    return QuotationSummary(**buckets), ignored


def summarize_customer_types(rows: Iterable[Mapping[str, Any]]) -> List[CustomerTypeSummary]:
    return [
        CustomerTypeSummary(
            customer_type=str(row.get("customer_type") or "Unknown"),
            count=as_int(row.get("count")),
            total_amount=as_amount(row.get("total_amount")),
        )
        for row in rows
    ]


def list_cancellations(rows: Iterable[Mapping[str, Any]]) -> List[Cancellation]:
    # Input is already newest first across both sources.
    return [
        Cancellation(
            type=row.get("type"),
            order_id=row.get("order_id"),
            total=as_amount(row.get("total")),
            created_at=row.get("created_at"),
        )
        for row in rows
    ]


def summarize_product_validation(rows: Iterable[Mapping[str, Any]]) -> ProductValidationSummary:
    summary = ProductValidationSummary()
    for row in rows:
        count = as_int(row.get("invalid_count"))
        if row.get("source") == "bookings":
            summary.invalid_bookings += count
        elif row.get("source") == "fwcquotations":
            summary.invalid_quotations += count
    return summary
