from __future__ import annotations

from typing import Any, Dict, Iterable, List, Literal, Mapping

from sales_analytics.analytics.numeric import as_amount, as_int
from sales_analytics.schemas.sales_analysis import CityDemand


UNKNOWN_DISTRICT = "Unknown"

DemandSource = Literal["booking", "quotation"]


def _district_key(value: Any) -> str:
    if value is None:
        return UNKNOWN_DISTRICT
    district = str(value)
    return district if district else UNKNOWN_DISTRICT


def _accumulate(
    by_district: Dict[str, CityDemand],
    rows: Iterable[Mapping[str, Any]],
    source: DemandSource,
) -> None:
    for row in rows:
        district = _district_key(row.get("district"))
        demand = by_district.get(district)
        if demand is None:
            demand = CityDemand(
                district=district,
                booking_count=0,
                quotation_count=0,
                booking_amount=0.0,
                quotation_amount=0.0,
            )
            by_district[district] = demand
        count = as_int(row.get("count"))
        amount = as_amount(row.get("total_amount"))
        if source == "booking":
            demand.booking_count += count
            demand.booking_amount += amount
        else:
            demand.quotation_count += count
            demand.quotation_amount += amount


def merge_regional_demand(
    booking_rows: Iterable[Mapping[str, Any]],
    quotation_rows: Iterable[Mapping[str, Any]],
) -> List[CityDemand]:
    """Merge per-district confirmed-order and pipeline sums into one entry per district.

    Districts come out in first-seen order: booking districts, then districts
    only present in quotations. A district missing from one source keeps zero
    counters for that source, and null districts collapse onto "Unknown".
    """
    by_district: Dict[str, CityDemand] = {}
    _accumulate(by_district, booking_rows, "booking")
    _accumulate(by_district, quotation_rows, "quotation")
    return list(by_district.values())
