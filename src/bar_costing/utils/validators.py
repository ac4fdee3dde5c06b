"""
Input validation and coercion helpers.

Pure computations never raise on malformed numbers: a bad quantity degrades
its own line to zero instead of failing the whole calculation. Ledger writes
use the tuple-returning validators and raise ValidationError upstream.
"""

import math
from typing import Any, Optional, Tuple

from .constants import MAX_NAME_LENGTH, MAX_NOTES_LENGTH


def coerce_number(value: Any, default: float = 0.0) -> float:
    """
    Convert a value to a finite float.

    Args:
        value: Anything (number, numeric string, None, garbage)
        default: Returned when value is not a finite number

    Returns:
        Finite float, or default
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(result) or math.isinf(result):
        return default
    return result


def coerce_non_negative(value: Any) -> float:
    """
    Convert a value to a non-negative float, coercing invalid input to 0.

    Examples:
        >>> coerce_non_negative("30")
        30.0
        >>> coerce_non_negative(-5)
        0.0
        >>> coerce_non_negative("abc")
        0.0
    """
    result = coerce_number(value)
    return result if result > 0 else 0.0


def validate_required_string(value: Optional[str], field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a string field is not empty.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return False, f"{field_name}: This field is required"
    return True, ""


def validate_string_length(
    value: Optional[str], max_length: int, field_name: str = "Field"
) -> Tuple[bool, str]:
    """
    Validate that a string doesn't exceed maximum length.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value and len(value) > max_length:
        return False, f"{field_name}: Must be {max_length} characters or less"
    return True, ""


def validate_non_negative_number(value: Any, field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a value is a finite number >= 0.

    Returns:
        Tuple of (is_valid, error_message)
    """
    number = coerce_number(value, default=float("nan"))
    if math.isnan(number):
        return False, f"{field_name}: Must be a valid number"
    if number < 0:
        return False, f"{field_name}: Must be zero or greater"
    return True, ""


def validate_name(value: Optional[str], field_name: str = "Name") -> Tuple[bool, str]:
    """Validate a required name field within MAX_NAME_LENGTH."""
    is_valid, error = validate_required_string(value, field_name)
    if not is_valid:
        return is_valid, error
    return validate_string_length(value, MAX_NAME_LENGTH, field_name)


def validate_notes(value: Optional[str]) -> Tuple[bool, str]:
    """Validate an optional notes field."""
    return validate_string_length(value, MAX_NOTES_LENGTH, "Notes")
