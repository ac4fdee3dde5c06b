"""
Unit conversion for recipe costing.

This module provides:
- Conversion of any supported unit quantity to milliliters
- The inverse conversion for display
- Unit classification helpers (known, count)

Conversion Strategy:
- Every volume and weight unit converts through milliliters (base unit);
  grams are treated as milliliter-equivalent
- "piece" is a count with factor 0; call sites handle it as a count
- Unknown units fall back to factor 1 (treated as already-ml) instead of
  raising; validate unit codes upstream for stricter behavior
"""

from typing import Any, Optional

from bar_costing.utils.constants import COUNT_UNITS, UNIT_TO_ML, UNKNOWN_UNIT_FACTOR
from bar_costing.utils.validators import coerce_non_negative

# Case-insensitive view of the table ("l" and "L" are the same unit)
_UNIT_TO_ML_LOWER = {unit.lower(): factor for unit, factor in UNIT_TO_ML.items()}


def _lookup(unit: Optional[str]) -> Optional[float]:
    if not unit:
        return None
    if unit in UNIT_TO_ML:
        return UNIT_TO_ML[unit]
    return _UNIT_TO_ML_LOWER.get(unit.strip().lower())


def is_known_unit(unit: Optional[str]) -> bool:
    """Check whether a unit code is in the conversion table."""
    return _lookup(unit) is not None


def is_count_unit(unit: Optional[str]) -> bool:
    """Check whether a unit is a count (e.g. "piece") rather than a volume."""
    return bool(unit) and unit.strip().lower() in COUNT_UNITS


def get_unit_factor(unit: Optional[str]) -> float:
    """
    Get the milliliter factor for a unit.

    Args:
        unit: Unit code (e.g. "oz", "cl", "piece")

    Returns:
        Milliliters per one unit; 0 for count units, 1 for unknown units
    """
    factor = _lookup(unit)
    if factor is None:
        return UNKNOWN_UNIT_FACTOR
    return factor


def to_ml(qty: Any, unit: Optional[str]) -> float:
    """
    Convert a quantity to milliliters.

    Invalid or negative quantities are coerced to 0.

    Args:
        qty: Quantity in the given unit
        unit: Unit code

    Returns:
        Quantity in milliliters (always 0 for "piece")

    Examples:
        >>> to_ml(30, "ml")
        30.0
        >>> to_ml(2, "cl")
        20.0
        >>> to_ml(3, "piece")
        0.0
        >>> to_ml(5, "glug")  # unknown units are treated as ml
        5.0
    """
    return coerce_non_negative(qty) * get_unit_factor(unit)


def from_ml(ml: Any, unit: Optional[str]) -> float:
    """
    Convert milliliters back to a unit.

    Args:
        ml: Volume in milliliters
        unit: Target unit code

    Returns:
        Quantity in the target unit (0 for count units)
    """
    factor = get_unit_factor(unit)
    if factor == 0:
        return 0.0
    return coerce_non_negative(ml) / factor


def format_ml(ml: Any, precision: int = 0) -> str:
    """
    Format a volume for display, switching to liters at 1000ml.

    Examples:
        >>> format_ml(250)
        '250ml'
        >>> format_ml(2500, precision=2)
        '2.50L'
    """
    value = coerce_non_negative(ml)
    if value >= 1000:
        return f"{value / 1000:.{precision}f}L"
    return f"{value:.{precision}f}ml"
