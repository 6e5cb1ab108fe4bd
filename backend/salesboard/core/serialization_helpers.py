"""
Formatting helpers for JSON, CSV and PDF output. No business rules here.
"""
from decimal import Decimal
from typing import Optional, Union


Number = Union[int, float, Decimal]


def serialize_decimal(value: Optional[Number]) -> Optional[float]:
    """Decimal -> float for JSON responses"""
    if value is None:
        return None
    return float(value)


def format_amount(value: Number, decimals: int = 0) -> str:
    """Thousands-separated figure, e.g. 12,500 or 12,500.50"""
    return f"{float(value):,.{decimals}f}"


def format_plain(value: Number) -> str:
    """Shortest plain form: 500 rather than 500.0, 12.5 stays 12.5"""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)
