"""
Tests for batch scaling and whole-bottle consumption.

Tests cover:
- Bottle/leftover split arithmetic
- Production totals across lines
- Sub-recipe items and unmatched ingredients
- Recipe scaling by factor and target volume
"""

import pytest

from bar_costing.services.batch_scaler import (
    scale_production,
    scale_recipe,
    scale_to_target,
    split_bottles,
)
from bar_costing.services.dto import InventoryItem, RecipeIngredient, ScaledIngredient


class TestSplitBottles:
    """Test split_bottles()."""

    def test_whole_bottles_and_leftover(self):
        assert split_bottles(2500, 750) == (3, 250.0)

    def test_less_than_one_bottle(self):
        assert split_bottles(500, 750) == (0, 500.0)

    def test_exact_multiple(self):
        assert split_bottles(1500, 750) == (2, 0.0)

    @pytest.mark.parametrize(
        "scaled_ml,bottle_ml",
        [(2500, 750), (700, 700), (1, 1000), (12345, 700), (4321, 33)],
    )
    def test_split_reassembles(self, scaled_ml, bottle_ml):
        bottles, leftover = split_bottles(scaled_ml, bottle_ml)
        assert isinstance(bottles, int)
        assert 0 <= leftover < bottle_ml
        assert bottles * bottle_ml + leftover == scaled_ml

    @pytest.mark.parametrize(
        "scaled_ml,bottle_ml,expected_bottles,expected_leftover",
        [(3434.1, 517.58, 6, 328.62), (1000.5, 700, 1, 300.5), (0.3, 0.1, 2, 0.1)],
    )
    def test_decimal_volumes(self, scaled_ml, bottle_ml, expected_bottles, expected_leftover):
        """Test decimal volumes reassemble to within float rounding."""
        bottles, leftover = split_bottles(scaled_ml, bottle_ml)
        assert bottles == expected_bottles
        assert 0 <= leftover < bottle_ml
        assert leftover == pytest.approx(expected_leftover)
        assert bottles * bottle_ml + leftover == pytest.approx(scaled_ml)

    def test_zero_bottle_size(self):
        assert split_bottles(500, 0) == (0, 0.0)


class TestScaleProduction:
    """Test scale_production()."""

    def test_bottle_split(self):
        spirits = [InventoryItem(1, "Grey Goose Vodka", bottle_size_ml=750)]
        result = scale_production([ScaledIngredient("Grey Goose", 2500)], spirits)
        line = result.ingredients[0]
        assert line.bottles == 3
        assert line.leftover_ml == 250
        assert line.matched_item_id == 1
        assert result.total_bottles == 3
        assert result.total_leftover_ml == 250
        assert result.total_ml == 2500

    def test_totals_across_lines(self, bar_inventory):
        result = scale_production(
            [
                ScaledIngredient("Grey Goose", 1500),
                ScaledIngredient("Lime Juice", 500),
                ScaledIngredient("House Sugar Syrup", 1200),
                ScaledIngredient("Angostura", 20),
            ],
            bar_inventory,
        )
        goose, lime, syrup, bitters = result.ingredients

        assert (goose.bottles, goose.leftover_ml) == (2, 100)
        # Partial pour: leftover reported on the line, not totalled
        assert (lime.bottles, lime.leftover_ml) == (0, 500)
        assert syrup.is_sub_recipe is True
        assert (syrup.bottles, syrup.leftover_ml) == (0, 0)
        assert bitters.matched_item_id is None
        assert bitters.bottles == 0

        assert result.total_ml == 3220
        assert result.total_bottles == 2
        assert result.total_leftover_ml == 100

    def test_item_without_bottle_size(self):
        spirits = [InventoryItem(1, "Mint Sprig")]
        result = scale_production([ScaledIngredient("Mint Sprig", 300)], spirits)
        assert result.total_bottles == 0
        assert result.total_ml == 300

    def test_empty(self):
        result = scale_production([], [])
        assert result.ingredients == ()
        assert result.total_ml == 0


class TestScaleRecipe:
    """Test scale_recipe() and scale_to_target()."""

    def test_scale_by_factor(self):
        scaled = scale_recipe(
            [RecipeIngredient("Vodka", 5, "cl"), RecipeIngredient("Mint", 2, "piece")], 10
        )
        assert scaled[0] == ScaledIngredient("Vodka", 500.0)
        assert scaled[1].scaled_amount_ml == 0.0

    def test_negative_factor(self):
        assert scale_recipe([RecipeIngredient("Vodka", 50)], -2)[0].scaled_amount_ml == 0.0

    def test_scale_to_target(self):
        scaled = scale_to_target(
            [RecipeIngredient("Vodka", 60), RecipeIngredient("Lime Juice", 40)], 100, 2500
        )
        assert [s.scaled_amount_ml for s in scaled] == pytest.approx([1500, 1000])

    def test_scale_to_target_zero_base(self):
        scaled = scale_to_target([RecipeIngredient("Vodka", 60)], 0, 2500)
        assert scaled[0].scaled_amount_ml == 0.0
