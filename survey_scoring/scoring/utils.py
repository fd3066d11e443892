"""
Decimal Utilities
survey_scoring/scoring/utils.py

Precision-safe decimal math for rounding and score statistics.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import List

_FOUR_PLACES = Decimal("0.0001")


def to_decimal(value: float, places: int = 4) -> Decimal:
    """Convert float to Decimal with explicit precision (half-up)."""
    return Decimal(str(value)).quantize(
        Decimal(10) ** -places, rounding=ROUND_HALF_UP
    )


def mean(values: List[Decimal]) -> Decimal:
    """Arithmetic mean. Returns Decimal("0") for an empty list."""
    if not values:
        return Decimal("0")
    return (sum(values) / len(values)).quantize(_FOUR_PLACES, rounding=ROUND_HALF_UP)


def median(values: List[Decimal]) -> Decimal:
    """Median; mean of the two middle values for even-length input."""
    if not values:
        return Decimal("0")
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[mid]
    return ((ordered[mid - 1] + ordered[mid]) / 2).quantize(_FOUR_PLACES, rounding=ROUND_HALF_UP)


def std_dev(values: List[Decimal], mean_value: Decimal) -> Decimal:
    """
    Population standard deviation.

    Formula: sqrt(Σ(value_i - mean)² / n)
    """
    if not values:
        return Decimal("0")
    variance = sum((v - mean_value) ** 2 for v in values) / len(values)
    return variance.sqrt().quantize(_FOUR_PLACES, rounding=ROUND_HALF_UP)


def coefficient_of_variation(std_value: Decimal, mean_value: Decimal) -> Decimal:
    """
    Coefficient of variation with zero-division protection.

    Formula: CV = std_dev / |mean| (0 when mean is 0)
    """
    if mean_value == 0:
        return Decimal("0")
    return (std_value / abs(mean_value)).quantize(_FOUR_PLACES, rounding=ROUND_HALF_UP)
