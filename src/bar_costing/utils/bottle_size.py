"""Detect container size from product names like "Grey Goose 70cl" or "Gin 1.75L"."""

import re
from typing import Optional

_SIZE_PATTERN = re.compile(r"(\d+(?:[.,]\d+)?)\s*(ml|cl|l|ltr|litre|liter)\b", re.IGNORECASE)

_SIZE_FACTORS = {
    "ml": 1.0,
    "cl": 10.0,
    "l": 1000.0,
    "ltr": 1000.0,
    "litre": 1000.0,
    "liter": 1000.0,
}


def detect_bottle_size_ml(name: Optional[str]) -> Optional[float]:
    """
    Extract a bottle size in milliliters from a product name.

    The last size mentioned wins ("Vodka 6x70cl" reads as 700ml).

    Args:
        name: Product name

    Returns:
        Size in ml, or None if the name carries no recognizable size

    Examples:
        >>> detect_bottle_size_ml("Grey Goose 70cl")
        700.0
        >>> detect_bottle_size_ml("Tanqueray 1L")
        1000.0
        >>> detect_bottle_size_ml("Lime Juice") is None
        True
    """
    if not name:
        return None

    matches = _SIZE_PATTERN.findall(name)
    if not matches:
        return None

    value, unit = matches[-1]
    size = float(value.replace(",", ".")) * _SIZE_FACTORS[unit.lower()]
    return size if size > 0 else None
