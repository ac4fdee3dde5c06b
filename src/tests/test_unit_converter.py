"""
Unit tests for recipe unit conversion.

Tests cover:
- Conversion factors for every supported unit
- Count units ("piece") and unknown units
- Coercion of invalid and negative quantities
- Display formatting
"""

import pytest

from bar_costing.services.unit_converter import (
    format_ml,
    from_ml,
    get_unit_factor,
    is_count_unit,
    is_known_unit,
    to_ml,
)


# ============================================================================
# Conversion Tests
# ============================================================================


class TestToMl:
    """Test conversion of recipe quantities to milliliters."""

    @pytest.mark.parametrize(
        "qty,unit,expected",
        [
            (30, "ml", 30.0),
            (1, "L", 1000.0),
            (2, "cl", 20.0),
            (1, "oz", 29.5735),
            (2, "dash", 1.8),
            (10, "drop", 0.5),
            (1, "tsp", 4.929),
            (1, "tbsp", 14.787),
            (50, "g", 50.0),
            (1, "kg", 1000.0),
        ],
    )
    def test_supported_units(self, qty, unit, expected):
        """Test each unit converts with its fixed factor."""
        assert to_ml(qty, unit) == pytest.approx(expected)

    def test_piece_has_no_volume(self):
        """Test counted units always convert to 0 ml."""
        assert to_ml(3, "piece") == 0.0

    def test_unknown_unit_treated_as_ml(self):
        """Test unknown units fall back to factor 1."""
        assert to_ml(5, "glug") == 5.0
        assert to_ml(5, None) == 5.0

    def test_unit_lookup_is_case_insensitive(self):
        """Test unit codes are matched regardless of case."""
        assert to_ml(1, "l") == 1000.0
        assert to_ml(1, "OZ") == pytest.approx(29.5735)
        assert to_ml(2, " CL ") == 20.0

    def test_invalid_quantity_becomes_zero(self):
        """Test non-numeric, NaN and negative quantities coerce to 0."""
        assert to_ml("abc", "ml") == 0.0
        assert to_ml(None, "ml") == 0.0
        assert to_ml(float("nan"), "ml") == 0.0
        assert to_ml(-30, "ml") == 0.0

    def test_numeric_string_quantity(self):
        """Test numeric strings are accepted."""
        assert to_ml("30", "ml") == 30.0


class TestUnitClassification:
    """Test unit classification helpers."""

    def test_is_known_unit(self):
        assert is_known_unit("ml")
        assert is_known_unit("Tbsp")
        assert not is_known_unit("glug")
        assert not is_known_unit("")

    def test_is_count_unit(self):
        assert is_count_unit("piece")
        assert is_count_unit("Piece")
        assert not is_count_unit("ml")
        assert not is_count_unit(None)

    def test_get_unit_factor(self):
        assert get_unit_factor("piece") == 0
        assert get_unit_factor("cl") == 10
        assert get_unit_factor("unknown") == 1.0


class TestFromMlAndFormat:
    """Test reverse conversion and display formatting."""

    def test_from_ml(self):
        assert from_ml(20, "cl") == pytest.approx(2.0)
        assert from_ml(1000, "L") == pytest.approx(1.0)

    def test_from_ml_count_unit(self):
        """Test converting ml to a count unit yields 0 instead of dividing by zero."""
        assert from_ml(100, "piece") == 0.0

    def test_format_ml(self):
        assert format_ml(250) == "250ml"
        assert format_ml(2500, precision=2) == "2.50L"
        assert format_ml(-5) == "0ml"
