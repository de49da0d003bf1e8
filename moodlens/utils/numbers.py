"""Numeric guards shared by the scoring and trend modules."""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any


def safe_number(value: Any, default: float) -> float:
    """Returns value as a finite float, or default for None/NaN/inf/garbage."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp01(value: float) -> float:
    return clamp(safe_number(value, 0.5), 0.0, 1.0)


def round_half_up(value: float, digits: int = 1) -> float:
    """
    Rounds half away from zero (2.25 -> 2.3, -2.25 -> -2.3).

    The builtin round() uses banker's rounding and binary floats, so
    round(2.25, 1) gives 2.2; going through Decimal(str()) avoids both.
    """
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def bounded_score(value: Any, low: float = 0.0, high: float = 10.0) -> float:
    """Clamps a 0-10 score to one decimal, neutral 5.0 when not finite."""
    midpoint = (low + high) / 2
    return round_half_up(clamp(safe_number(value, midpoint), low, high), 1)
