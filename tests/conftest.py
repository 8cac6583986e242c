from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional

import pytest
from fastapi.testclient import TestClient

from sales_analytics.main import create_app
from sales_analytics.repositories.sales_analysis_repository import (
    ANALYTICS_QUERIES,
    CONFIRMED_ORDER_STATUSES,
    PIPELINE_STATUSES,
    SalesAnalysisRepository,
)


QUERY_NAMES_BY_SQL = {query.sql: query.name for query in ANALYTICS_QUERIES}


def _lower(value: Any) -> Optional[str]:
    return value.lower() if isinstance(value, str) else None


def _numeric(value: Any) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


def _text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


class InMemorySalesStore:
    """Answers the analytics queries from plain booking and quotation dicts."""

    def __init__(
        self,
        bookings: Optional[List[Dict[str, Any]]] = None,
        quotations: Optional[List[Dict[str, Any]]] = None,
        fail_on: Optional[str] = None,
    ) -> None:
        self.bookings = bookings or []
        self.quotations = quotations or []
        self.fail_on = fail_on
        self.executed: List[str] = []
        self._handlers: Dict[str, Callable[[], List[Dict[str, Any]]]] = {
            "product_validation": self._product_validation,
            "product_lines": self._product_lines,
            "booking_districts": lambda: self._district_totals(self._confirmed()),
            "quotation_districts": lambda: self._district_totals(self._pipeline()),
            "monthly_trends": self._monthly_trends,
            "profitability": self._profitability,
            "quotation_statuses": self._quotation_statuses,
            "customer_types": self._customer_types,
            "cancellations": self._cancellations,
        }

    async def fetch_all(self, sql: str, *args: Any) -> List[Dict[str, Any]]:
        _ = args
        name = QUERY_NAMES_BY_SQL[sql]
        self.executed.append(name)
        if name == self.fail_on:
            raise RuntimeError(f"connection lost while running {name}")
        return self._handlers[name]()

    def _confirmed(self) -> List[Dict[str, Any]]:
        return [row for row in self.bookings if _lower(row.get("status")) in CONFIRMED_ORDER_STATUSES]

    def _pipeline(self) -> List[Dict[str, Any]]:
        return [row for row in self.quotations if _lower(row.get("status")) in PIPELINE_STATUSES]

    def _product_validation(self) -> List[Dict[str, Any]]:
        def invalid(rows: Iterable[Dict[str, Any]]) -> int:
            return sum(
                1
                for row in rows
                if row.get("products") is not None and not isinstance(row["products"], list)
            )

        return [
            {"source": "bookings", "invalid_count": invalid(self._confirmed())},
            {"source": "fwcquotations", "invalid_count": invalid(self._pipeline())},
        ]

    def _product_lines(self) -> List[Dict[str, Any]]:
        lines = []
        for booking in self._confirmed():
            products = booking.get("products")
            if not isinstance(products, list):
                continue
            for product in products:
                if not isinstance(product, dict):
                    continue
                if "productname" not in product or "quantity" not in product:
                    continue
                lines.append(
                    {
                        "productname": _text(product["productname"]),
                        "quantity": _text(product["quantity"]),
                    }
                )
        return lines

    def _district_totals(self, rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        grouped: Dict[Any, Dict[str, Any]] = {}
        for row in rows:
            district = row.get("district")
            totals = grouped.setdefault(
                district, {"district": district, "count": 0, "total_amount": Decimal("0")}
            )
            totals["count"] += 1
            totals["total_amount"] += _numeric(row.get("total"))
        return list(grouped.values())

    def _monthly_trends(self) -> List[Dict[str, Any]]:
        grouped: Dict[Optional[str], Dict[str, Any]] = {}
        for row in self._confirmed():
            created_at = row.get("created_at")
            month = created_at.strftime("%Y-%m") if created_at is not None else None
            totals = grouped.setdefault(
                month,
                {"month": month, "volume": 0, "total_amount": Decimal("0"), "amount_paid": Decimal("0")},
            )
            totals["volume"] += 1
            totals["total_amount"] += _numeric(row.get("total"))
            totals["amount_paid"] += _numeric(row.get("amount_paid"))
        return [grouped[month] for month in sorted(grouped, key=lambda month: (month is None, month or ""))]

    def _profitability(self) -> List[Dict[str, Any]]:
        rows = self._confirmed()
        if not rows:
            return [{"total_amount": None, "amount_paid": None}]
        return [
            {
                "total_amount": sum((_numeric(row.get("total")) for row in rows), Decimal("0")),
                "amount_paid": sum((_numeric(row.get("amount_paid")) for row in rows), Decimal("0")),
            }
        ]

    def _quotation_statuses(self) -> List[Dict[str, Any]]:
        grouped: Dict[Any, Dict[str, Any]] = {}
        for row in self.quotations:
            status = _lower(row.get("status"))
            totals = grouped.setdefault(
                status, {"status": status, "count": 0, "total_amount": Decimal("0")}
            )
            totals["count"] += 1
            totals["total_amount"] += _numeric(row.get("total"))
        return list(grouped.values())

    def _customer_types(self) -> List[Dict[str, Any]]:
        grouped: Dict[str, Dict[str, Any]] = {}
        for row in self._confirmed():
            customer_type = row.get("customer_type")
            if customer_type is None:
                continue
            totals = grouped.setdefault(
                customer_type,
                {"customer_type": customer_type, "count": 0, "total_amount": Decimal("0")},
            )
            totals["count"] += 1
            totals["total_amount"] += _numeric(row.get("total"))
        return list(grouped.values())

    def _cancellations(self) -> List[Dict[str, Any]]:
        rows = [
            {
                "type": "booking",
                "order_id": row.get("order_id"),
                "total": _numeric(row.get("total")),
                "created_at": row.get("created_at"),
            }
            for row in self.bookings
            if _lower(row.get("status")) == "canceled"
        ] + [
            {
                "type": "quotation",
                "order_id": row.get("quotation_id"),
                "total": _numeric(row.get("total")),
                "created_at": row.get("created_at"),
            }
            for row in self.quotations
            if _lower(row.get("status")) == "canceled"
        ]
        return sorted(rows, key=lambda row: row["created_at"], reverse=True)


@pytest.fixture()
def store() -> InMemorySalesStore:
    return InMemorySalesStore()


@pytest.fixture()
def repository(store: InMemorySalesStore) -> SalesAnalysisRepository:
    return SalesAnalysisRepository(database=store)


@pytest.fixture()
def client(store: InMemorySalesStore) -> TestClient:
    app = create_app(database=store)
    return TestClient(app)
