"""
Tests for recipe cost calculation.

Tests cover:
- Per-ingredient cost, cost per ml and serves per bottle
- Aggregate totals, cost per serve and share of total
- Bottle size precedence
- Pricing functions (food cost, profit, margin, suggested price)
- Markup/VAT/service price build-up
- Memoized computation through ComputationCache
"""

import math

import pytest

from bar_costing.models.enums import StockUnit
from bar_costing.services.computation_cache import ComputationCache
from bar_costing.services.cost_calculator import (
    build_price_breakdown,
    compute_cost,
    compute_cost_cached,
    compute_cost_line,
    resolve_bottle_size,
)
from bar_costing.services.dto import InventoryItem, RecipeIngredient


@pytest.fixture
def vodka():
    return InventoryItem(id=1, name="Vodka", unit_cost=20, bottle_size_ml=700)


@pytest.fixture
def tequila():
    return InventoryItem(id=2, name="Tequila", unit_cost=40, bottle_size_ml=700)


# ============================================================================
# Cost Line Tests
# ============================================================================


class TestComputeCostLine:
    """Test compute_cost_line()."""

    def test_single_ingredient(self, vodka):
        """Test 30ml against a 20.00 700ml bottle."""
        line = compute_cost_line(RecipeIngredient("Vodka", 30, "ml"), [vodka], 750)
        assert line.cost_per_ml == pytest.approx(0.028571, abs=1e-6)
        assert line.ingredient_cost == pytest.approx(0.857, abs=1e-3)
        assert line.qty_ml == 30
        assert line.serves_per_bottle == 23
        assert line.bottle_size == 700
        assert line.matched is True
        assert line.matched_item_id == 1

    def test_unmatched_ingredient_costs_nothing(self, vodka):
        line = compute_cost_line(RecipeIngredient("Angostura", 2, "dash"), [vodka], 750)
        assert line.matched is False
        assert line.ingredient_cost == 0.0
        assert line.cost_per_ml == 0.0
        assert line.qty_ml == pytest.approx(1.8)

    def test_zero_quantity(self, vodka):
        line = compute_cost_line(RecipeIngredient("Vodka", 0, "ml"), [vodka], 750)
        assert line.ingredient_cost == 0.0
        assert line.serves_per_bottle == 0

    def test_invalid_quantity_degrades_line_only(self, vodka):
        line = compute_cost_line(RecipeIngredient("Vodka", "lots", "ml"), [vodka], 750)
        assert line.qty == 0.0
        assert line.ingredient_cost == 0.0

    def test_zero_bottle_size_override(self, vodka):
        """Test a zero bottle size never divides by zero."""
        line = compute_cost_line(
            RecipeIngredient("Vodka", 30, "ml", bottle_size_override=0), [vodka], 750
        )
        assert line.cost_per_ml == 0.0
        assert line.serves_per_bottle == 0
        assert math.isfinite(line.ingredient_cost)

    def test_piece_priced_per_piece(self):
        mint = InventoryItem(id=4, name="Mint Sprig", unit_cost=0.25, base_unit="pieces")
        line = compute_cost_line(RecipeIngredient("Mint Sprig", 2, "piece"), [mint], 750)
        assert line.qty_ml == 0.0
        assert line.serves_per_bottle == 0
        assert line.ingredient_cost == pytest.approx(0.5)

    def test_piece_against_bottle_item_costs_nothing(self, vodka):
        line = compute_cost_line(RecipeIngredient("Vodka", 1, "piece"), [vodka], 750)
        assert line.ingredient_cost == 0.0

    def test_explicit_piece_stock_unit(self):
        orange = InventoryItem(id=6, name="Orange", unit_cost=0.4, stock_unit=StockUnit.PIECE)
        line = compute_cost_line(RecipeIngredient("Orange", 3, "piece"), [orange], 750)
        assert line.ingredient_cost == pytest.approx(1.2)


class TestResolveBottleSize:
    """Test bottle size precedence."""

    def test_override_wins(self, vodka):
        ingredient = RecipeIngredient("Vodka", 30, "ml", bottle_size_override=1000)
        assert resolve_bottle_size(ingredient, vodka, 750) == 1000

    def test_inventory_size(self, vodka):
        assert resolve_bottle_size(RecipeIngredient("Vodka", 30), vodka, 750) == 700

    def test_size_from_name(self):
        item = InventoryItem(id=1, name="Tanqueray 1L", unit_cost=30)
        assert resolve_bottle_size(RecipeIngredient("Tanqueray", 30), item, 750) == 1000

    def test_default(self):
        item = InventoryItem(id=1, name="Tanqueray", unit_cost=30)
        assert resolve_bottle_size(RecipeIngredient("Tanqueray", 30), item, 750) == 750
        assert resolve_bottle_size(RecipeIngredient("Tanqueray", 30), None, 750) == 750


# ============================================================================
# Recipe Cost Tests
# ============================================================================


class TestComputeCost:
    """Test compute_cost()."""

    def test_two_ingredients(self, vodka, tequila):
        """Test totals and food cost for 0.857 + 1.714."""
        summary = compute_cost(
            [RecipeIngredient("Vodka", 30, "ml"), RecipeIngredient("Tequila", 30, "ml")],
            [vodka, tequila],
            yield_qty=1,
        )
        assert summary.total_cost == pytest.approx(2.571, abs=1e-3)
        assert summary.cost_per_serve == pytest.approx(2.571, abs=1e-3)
        assert summary.food_cost_percent(10) == pytest.approx(25.71, abs=1e-2)
        assert summary.total_volume_ml == 60

    def test_line_costs_sum_to_total(self, bar_inventory):
        summary = compute_cost(
            [
                RecipeIngredient("Grey Goose", 45, "ml"),
                RecipeIngredient("Lime Juice", 2.5, "cl"),
                RecipeIngredient("House Sugar Syrup", 0.5, "oz"),
                RecipeIngredient("Mint Sprig", 3, "piece"),
                RecipeIngredient("Angostura", 2, "dash"),
            ],
            bar_inventory,
        )
        assert math.fsum(line.ingredient_cost for line in summary.breakdown) == pytest.approx(
            summary.total_cost
        )
        assert sum(line.percent_of_total for line in summary.breakdown) == pytest.approx(
            100, abs=0.01
        )
        assert summary.unmatched_ingredients == ("Angostura",)

    def test_breakdown_keeps_recipe_order(self, bar_inventory):
        names = ["Lime Juice", "Grey Goose", "Angostura"]
        summary = compute_cost([RecipeIngredient(name, 10) for name in names], bar_inventory)
        assert [line.ingredient_name for line in summary.breakdown] == names

    def test_zero_total_cost(self):
        summary = compute_cost([RecipeIngredient("Water", 100, "ml")], [])
        assert summary.total_cost == 0.0
        assert all(line.percent_of_total == 0.0 for line in summary.breakdown)

    def test_yield_divides_cost(self, vodka):
        summary = compute_cost([RecipeIngredient("Vodka", 700, "ml")], [vodka], yield_qty=10)
        assert summary.total_cost == pytest.approx(20.0)
        assert summary.cost_per_serve == pytest.approx(2.0)

    @pytest.mark.parametrize("yield_qty", [0, -3, "abc"])
    def test_yield_below_one_counts_as_one(self, vodka, yield_qty):
        summary = compute_cost([RecipeIngredient("Vodka", 35, "ml")], [vodka], yield_qty=yield_qty)
        assert summary.cost_per_serve == pytest.approx(summary.total_cost)

    def test_default_bottle_from_config(self, test_config):
        item = InventoryItem(id=1, name="Gin", unit_cost=15)
        summary = compute_cost([RecipeIngredient("Gin", 30)], [item])
        assert summary.breakdown[0].bottle_size == test_config.default_bottle_ml
        assert summary.breakdown[0].bottle_size == 750


class TestPricing:
    """Test pricing functions on RecipeCostSummary."""

    def test_suggested_price_hits_target_ratio(self, vodka, tequila):
        summary = compute_cost(
            [RecipeIngredient("Vodka", 30), RecipeIngredient("Tequila", 30)],
            [vodka, tequila],
        )
        assert summary.target_food_cost_ratio == 0.28
        assert summary.suggested_price * 0.28 == pytest.approx(summary.cost_per_serve)

    def test_custom_target_ratio(self, vodka):
        summary = compute_cost([RecipeIngredient("Vodka", 35)], [vodka], target_food_cost_ratio=0.2)
        assert summary.suggested_price == pytest.approx(5.0)

    def test_profit_and_margin(self, vodka):
        summary = compute_cost([RecipeIngredient("Vodka", 35)], [vodka])
        assert summary.cost_per_serve == pytest.approx(1.0)
        assert summary.profit_amount(5) == pytest.approx(4.0)
        assert summary.profit_margin(5) == pytest.approx(80.0)

    def test_zero_price(self, vodka):
        summary = compute_cost([RecipeIngredient("Vodka", 35)], [vodka])
        assert summary.food_cost_percent(0) == 0.0
        assert summary.profit_margin(0) == 0.0


class TestPriceBreakdown:
    """Test build_price_breakdown()."""

    def test_default_markup_vat_service(self):
        breakdown = build_price_breakdown(2.0)
        assert breakdown.markup_amount == pytest.approx(8.0)
        assert breakdown.subtotal == pytest.approx(10.0)
        assert breakdown.vat_amount == pytest.approx(0.5)
        assert breakdown.service_amount == pytest.approx(1.5)
        assert breakdown.suggested_price == pytest.approx(12.0)
        assert breakdown.final_price == pytest.approx(12.0)
        assert breakdown.profit == pytest.approx(10.0)
        assert breakdown.food_cost_percent == pytest.approx(16.667, abs=1e-3)

    def test_manual_price_overrides(self):
        breakdown = build_price_breakdown(2.0, manual_price=15)
        assert breakdown.suggested_price == pytest.approx(12.0)
        assert breakdown.final_price == 15
        assert breakdown.profit == pytest.approx(13.0)

    def test_zero_cost(self):
        breakdown = build_price_breakdown(0, markup_pct=300, vat_pct=0, service_pct=0)
        assert breakdown.final_price == 0.0
        assert breakdown.food_cost_percent == 0.0

    def test_from_summary(self, vodka):
        summary = compute_cost([RecipeIngredient("Vodka", 70)], [vodka])
        breakdown = summary.price_breakdown(markup_pct=100, vat_pct=0, service_pct=0)
        assert breakdown.final_price == pytest.approx(4.0)


# ============================================================================
# Memoization Tests
# ============================================================================


class TestComputeCostCached:
    """Test compute_cost_cached()."""

    def test_same_inputs_hit_cache(self, vodka):
        cache = ComputationCache(ttl_seconds=60)
        ingredients = [RecipeIngredient("Vodka", 30)]
        first = compute_cost_cached(cache, ingredients, [vodka])
        second = compute_cost_cached(cache, list(ingredients), [vodka])
        assert second is first
        assert cache.hits == 1
        assert cache.misses == 1

    def test_changed_cost_misses(self, vodka):
        cache = ComputationCache(ttl_seconds=60)
        ingredients = [RecipeIngredient("Vodka", 30)]
        first = compute_cost_cached(cache, ingredients, [vodka])
        cheaper = InventoryItem(id=1, name="Vodka", unit_cost=10, bottle_size_ml=700)
        second = compute_cost_cached(cache, ingredients, [cheaper])
        assert second.total_cost == pytest.approx(first.total_cost / 2)
        assert cache.misses == 2
