from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any, Tuple


def as_int(value: Any) -> int:
    """Coerce a driver value to an int, 0 when null or unparsable."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, Decimal):
        return int(value) if value.is_finite() else 0
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return 0
        return int(parsed) if parsed.is_finite() else 0
    return 0


def as_amount(value: Any) -> float:
    """Coerce a driver value to a float amount, 0.0 when null or unparsable."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, Decimal):
        return float(value) if value.is_finite() else 0.0
    if isinstance(value, (int, float)):
        amount = float(value)
    elif isinstance(value, str):
        try:
            amount = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    return amount if math.isfinite(amount) else 0.0


def split_paid(total: float, paid: float) -> Tuple[float, float]:
    # Paid is capped at total; unpaid never goes negative.
    paid_capped = min(paid, total)
    return paid_capped, max(0.0, total - paid_capped)
