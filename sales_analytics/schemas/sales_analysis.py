from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field


# Report field names are consumed as-is by the dashboard, so these models keep
# snake_case and skip the camelCase aliases of EnvelopeSchema.


class ProductSales(BaseModel):
    productname: str
    quantity: int


class CityDemand(BaseModel):
    district: str
    booking_count: int
    quotation_count: int
    booking_amount: float
    quotation_amount: float


class TrendPoint(BaseModel):
    month: Optional[str] = None
    volume: int
    total_amount: float
    amount_paid: float
    unpaid_amount: float


class Profitability(BaseModel):
    total_amount: float
    amount_paid: float
    unpaid_amount: float


class QuotationBucket(BaseModel):
    count: int = 0
    total_amount: float = 0.0


class QuotationSummary(BaseModel):
    pending: QuotationBucket = Field(default_factory=QuotationBucket)
    booked: QuotationBucket = Field(default_factory=QuotationBucket)
    canceled: QuotationBucket = Field(default_factory=QuotationBucket)


class CustomerTypeSummary(BaseModel):
    customer_type: str
    count: int
    total_amount: float


class Cancellation(BaseModel):
    type: Literal["booking", "quotation"]
    order_id: Any = None
    total: float
    created_at: Any = None


class ProductValidationSummary(BaseModel):
    """Rows whose products column is present but is not a JSON array."""

    invalid_bookings: int = 0
    invalid_quotations: int = 0

    @property
    def invalid_total(self) -> int:
        return self.invalid_bookings + self.invalid_quotations


class SalesAnalysisReport(BaseModel):
    products: List[ProductSales]
    cities: List[CityDemand]
    trends: List[TrendPoint]
    profitability: Profitability
    quotations: QuotationSummary
    customer_types: List[CustomerTypeSummary]
    cancellations: List[Cancellation]
