"""
Tests for input validation and coercion helpers.

Tests cover:
- Number coercion (finite floats, defaults for garbage)
- Non-negative coercion
- Tuple-returning validators used by the ledgers
"""

import pytest

from bar_costing.utils import validators
from bar_costing.utils.constants import MAX_NAME_LENGTH, MAX_NOTES_LENGTH


class TestCoercion:
    """Test coerce_number() and coerce_non_negative()."""

    def test_coerce_number_valid(self):
        assert validators.coerce_number(3) == 3.0
        assert validators.coerce_number("2.5") == 2.5

    @pytest.mark.parametrize("value", [None, "abc", float("nan"), float("inf"), [], True])
    def test_coerce_number_invalid_uses_default(self, value):
        assert validators.coerce_number(value, default=7.0) == 7.0

    def test_coerce_non_negative(self):
        assert validators.coerce_non_negative("30") == 30.0
        assert validators.coerce_non_negative(-5) == 0.0
        assert validators.coerce_non_negative("abc") == 0.0


class TestStringValidation:
    """Test string validation functions."""

    def test_validate_required_string_valid(self):
        is_valid, error = validators.validate_required_string("Lime", "Ingredient")
        assert is_valid is True
        assert error == ""

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_validate_required_string_missing(self, value):
        is_valid, error = validators.validate_required_string(value, "Ingredient")
        assert is_valid is False
        assert "required" in error.lower()

    def test_validate_name_too_long(self):
        is_valid, error = validators.validate_name("x" * (MAX_NAME_LENGTH + 1))
        assert is_valid is False
        assert str(MAX_NAME_LENGTH) in error

    def test_validate_notes(self):
        assert validators.validate_notes(None) == (True, "")
        is_valid, _ = validators.validate_notes("x" * (MAX_NOTES_LENGTH + 1))
        assert is_valid is False


class TestNumericValidation:
    """Test validate_non_negative_number()."""

    def test_valid(self):
        assert validators.validate_non_negative_number(0) == (True, "")
        assert validators.validate_non_negative_number("12.5") == (True, "")

    def test_negative(self):
        is_valid, error = validators.validate_non_negative_number(-1, "Quantity")
        assert is_valid is False
        assert "zero or greater" in error

    def test_not_a_number(self):
        is_valid, error = validators.validate_non_negative_number("lots", "Quantity")
        assert is_valid is False
        assert "valid number" in error
