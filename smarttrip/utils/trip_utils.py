"""
Reusable helpers for trip dates and provider prices.
"""
import math
from datetime import date
from typing import Any, Optional


def trip_duration_days(
    start_date: Optional[date],
    end_date: Optional[date],
    default_days: int = 5
) -> int:
    """
    Number of calendar days covered by the trip, counting both the first
    and the last day. Falls back to `default_days` when either date is missing.
    """
    if start_date is None or end_date is None:
        return default_days
    return max(1, (end_date - start_date).days + 1)


def parse_price(value: Any) -> Optional[float]:
    """Provider prices arrive as strings like "1234.56"; anything unparseable or non-finite is None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    return price if math.isfinite(price) else None


def format_price(amount: Optional[float], currency: Optional[str]) -> Optional[str]:
    if amount is None or not math.isfinite(amount):
        return None
    text = f"{amount:.2f}"
    return f"{text} {currency}" if currency else text
