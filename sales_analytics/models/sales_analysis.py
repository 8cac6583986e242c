from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field


Row = Dict[str, Any]


class SalesAnalysisSnapshot(BaseModel):
    """Raw result sets of one analysis run, one list per store query.

    Rows are kept as returned by the driver: numeric columns may be None,
    Decimal or text and are normalized by the aggregators.
    """

    product_validation: List[Row] = Field(default_factory=list)
    product_lines: List[Row] = Field(default_factory=list)
    booking_districts: List[Row] = Field(default_factory=list)
    quotation_districts: List[Row] = Field(default_factory=list)
    monthly_trends: List[Row] = Field(default_factory=list)
    profitability: List[Row] = Field(default_factory=list)
    quotation_statuses: List[Row] = Field(default_factory=list)
    customer_types: List[Row] = Field(default_factory=list)
    cancellations: List[Row] = Field(default_factory=list)
