"""
Formatting helpers for JSON serialization of catalog records.
"""
from decimal import Decimal
from datetime import date, datetime
from typing import Union, Optional


def isoformat(value: Union[date, datetime, None]) -> Optional[str]:
    """
    Render a date/datetime as an ISO-8601 string.

    Examples:
        isoformat(datetime(2024, 1, 2, 3, 4, 5)) -> "2024-01-02T03:04:05"
        isoformat(None) -> None
    """
    if value is None:
        return None
    return value.isoformat()


def to_number(value: Union[int, float, Decimal, None]) -> Union[int, float, None]:
    """
    Convert a numeric column value to a JSON-friendly number.

    Decimals with no fractional part become ints so prices like 100.00
    serialize as 100 rather than a string.

    Examples:
        to_number(Decimal("100.00")) -> 100
        to_number(Decimal("999.99")) -> 999.99
        to_number(None) -> None
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    return value
