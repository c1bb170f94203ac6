"""Lenient number handling: bad input becomes 0, never an exception"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Any

from pydantic import BeforeValidator


def parse_number(value: Any) -> float:
    """
    Coerce user input to a finite float.

    Args:
        value: Number, numeric string, bool, None or anything else

    Returns:
        The parsed number, or 0.0 for empty, non-numeric, NaN or infinite input
    """
    if value is None or isinstance(value, bool):
        return float(value or 0)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", "").replace("$", "")
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def parse_amount(value: Any) -> float:
    """Non-negative money or area; negatives clamp to 0"""
    return max(0.0, parse_number(value))


def parse_count(value: Any) -> int:
    """Non-negative whole quantity (fixtures, pods, drains...)"""
    return max(0, int(parse_number(value)))


def round_money(value: float) -> float:
    """Round half-up to cents"""
    if not value:
        return 0.0
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


# Field types for form models
Amount = Annotated[float, BeforeValidator(parse_amount)]
Count = Annotated[int, BeforeValidator(parse_count)]
