"""
Recipe cost calculation.

This module provides:
- Per-ingredient cost derivation (cost per ml, line cost, serves per bottle)
- Aggregate recipe cost (total, per serve, share of total)
- Markup-based price build-up (markup, VAT, service charge)
- A memoized entry point backed by an explicit ComputationCache

Cost Strategy:
- Inventory unit_cost is per bottle/container; cost per ml is
  unit_cost / bottle_size
- Bottle size precedence: ingredient override, inventory bottle_size_ml,
  size detected from the inventory item's name, configured default
- Unmatched ingredients stay in the breakdown at zero cost
- Every division is guarded to return 0 instead of NaN/Infinity
"""

import logging
import math
from dataclasses import replace
from typing import Optional, Sequence

from bar_costing.models.enums import StockUnit
from bar_costing.services import ingredient_matcher
from bar_costing.services.computation_cache import ComputationCache
from bar_costing.services.dto import (
    CostLine,
    InventoryItem,
    PriceBreakdown,
    RecipeCostSummary,
    RecipeIngredient,
)
from bar_costing.services.logging_utils import get_service_logger, log_operation
from bar_costing.services.unit_converter import is_count_unit, to_ml
from bar_costing.services.yield_estimator import resolve_stock_unit
from bar_costing.utils.bottle_size import detect_bottle_size_ml
from bar_costing.utils.config import get_config
from bar_costing.utils.validators import coerce_non_negative, coerce_number

logger = get_service_logger(__name__)


def resolve_bottle_size(
    ingredient: RecipeIngredient,
    item: Optional[InventoryItem],
    default_bottle_ml: float,
) -> float:
    """
    Pick the bottle size an ingredient is costed against.

    Args:
        ingredient: Recipe line (may carry bottle_size_override)
        item: Matched inventory item, or None
        default_bottle_ml: Fallback size

    Returns:
        Bottle size in ml (0 is possible when explicitly overridden to 0)
    """
    if ingredient.bottle_size_override is not None:
        return coerce_non_negative(ingredient.bottle_size_override)
    if item is not None:
        if item.bottle_size_ml is not None:
            return coerce_non_negative(item.bottle_size_ml)
        detected = detect_bottle_size_ml(item.name)
        if detected:
            return detected
    return coerce_non_negative(default_bottle_ml)


def _piece_cost(qty: float, item: Optional[InventoryItem]) -> float:
    """Cost of a counted line; only derivable when the item is stocked per piece."""
    if item is None or resolve_stock_unit(item) != StockUnit.PIECE:
        return 0.0
    return qty * coerce_non_negative(item.unit_cost)


def compute_cost_line(
    ingredient: RecipeIngredient,
    inventory: Sequence[InventoryItem],
    default_bottle_ml: float,
) -> CostLine:
    """
    Derive the cost of one recipe line.

    percent_of_total is left at 0; compute_cost fills it once the total
    is known.

    Args:
        ingredient: Recipe line
        inventory: Inventory snapshot to match against
        default_bottle_ml: Bottle size used when nothing else is known

    Returns:
        CostLine for the ingredient
    """
    qty = coerce_non_negative(ingredient.qty)
    item = ingredient_matcher.match(ingredient.ingredient_name, inventory)

    if item is None:
        log_operation(
            logger,
            operation="compute_cost",
            outcome="unmatched_ingredient",
            level=logging.DEBUG,
            ingredient_name=ingredient.ingredient_name,
        )

    bottle_size = resolve_bottle_size(ingredient, item, default_bottle_ml)
    unit_cost = coerce_non_negative(item.unit_cost) if item is not None else 0.0
    cost_per_ml = unit_cost / bottle_size if bottle_size > 0 else 0.0

    if is_count_unit(ingredient.unit):
        qty_ml = 0.0
        ingredient_cost = _piece_cost(qty, item)
        serves_per_bottle = 0
    else:
        qty_ml = to_ml(qty, ingredient.unit)
        ingredient_cost = qty_ml * cost_per_ml
        serves_per_bottle = math.floor(bottle_size / qty_ml) if qty_ml > 0 else 0

    return CostLine(
        ingredient_name=ingredient.ingredient_name,
        qty=qty,
        unit=ingredient.unit,
        qty_ml=qty_ml,
        cost_per_ml=cost_per_ml,
        ingredient_cost=ingredient_cost,
        percent_of_total=0.0,
        serves_per_bottle=serves_per_bottle,
        bottle_size=bottle_size,
        unit_cost=unit_cost,
        matched_item_id=item.id if item is not None else None,
        matched=item is not None,
    )


def compute_cost(
    ingredients: Sequence[RecipeIngredient],
    inventory: Sequence[InventoryItem],
    yield_qty: float = 1,
    default_bottle_ml: Optional[float] = None,
    target_food_cost_ratio: Optional[float] = None,
) -> RecipeCostSummary:
    """
    Compute per-ingredient and aggregate cost for a recipe.

    Transaction boundary: Pure computation (no database access).

    Args:
        ingredients: Ordered recipe lines
        inventory: Inventory snapshot
        yield_qty: Servings the recipe produces (values below 1 count as 1)
        default_bottle_ml: Fallback bottle size; None uses config
        target_food_cost_ratio: Ratio for suggested_price; None uses config

    Returns:
        RecipeCostSummary

    Example:
        >>> summary = compute_cost(
        ...     [RecipeIngredient("Vodka", 30, "ml")],
        ...     [InventoryItem(1, "Vodka", unit_cost=20, bottle_size_ml=700)],
        ...     yield_qty=1,
        ... )
        >>> round(summary.total_cost, 3)
        0.857
    """
    config = get_config()
    if default_bottle_ml is None:
        default_bottle_ml = config.default_bottle_ml
    if target_food_cost_ratio is None:
        target_food_cost_ratio = config.target_food_cost_ratio

    inventory = list(inventory)
    lines = [compute_cost_line(ing, inventory, default_bottle_ml) for ing in ingredients]

    total_cost = math.fsum(line.ingredient_cost for line in lines)
    total_volume_ml = math.fsum(line.qty_ml for line in lines)
    cost_per_serve = total_cost / max(coerce_number(yield_qty, default=1.0), 1.0)

    breakdown = tuple(
        replace(
            line,
            percent_of_total=line.ingredient_cost / total_cost * 100 if total_cost > 0 else 0.0,
        )
        for line in lines
    )

    return RecipeCostSummary(
        total_cost=total_cost,
        cost_per_serve=cost_per_serve,
        total_volume_ml=total_volume_ml,
        breakdown=breakdown,
        target_food_cost_ratio=coerce_non_negative(target_food_cost_ratio),
    )


def compute_cost_cached(
    cache: ComputationCache,
    ingredients: Sequence[RecipeIngredient],
    inventory: Sequence[InventoryItem],
    yield_qty: float = 1,
    default_bottle_ml: Optional[float] = None,
    target_food_cost_ratio: Optional[float] = None,
) -> RecipeCostSummary:
    """
    compute_cost memoized on its input tuple.

    Policy defaults are resolved before keying so a config change never
    serves a stale result under the same key.
    """
    config = get_config()
    if default_bottle_ml is None:
        default_bottle_ml = config.default_bottle_ml
    if target_food_cost_ratio is None:
        target_food_cost_ratio = config.target_food_cost_ratio

    ingredients = tuple(ingredients)
    inventory = tuple(inventory)
    key = (
        "compute_cost",
        ingredients,
        inventory,
        yield_qty,
        default_bottle_ml,
        target_food_cost_ratio,
    )
    return cache.get_or_compute(
        key,
        lambda: compute_cost(
            ingredients,
            inventory,
            yield_qty,
            default_bottle_ml=default_bottle_ml,
            target_food_cost_ratio=target_food_cost_ratio,
        ),
    )


def build_price_breakdown(
    cost_per_serve: float,
    markup_pct: Optional[float] = None,
    vat_pct: Optional[float] = None,
    service_pct: Optional[float] = None,
    manual_price: Optional[float] = None,
) -> PriceBreakdown:
    """
    Build a selling price from cost per serve with markup, VAT and service.

    subtotal = cost * (1 + markup%); VAT and service are both charged on the
    subtotal. A positive manual_price replaces the suggested price as the
    final price used for profit and food cost.

    Args:
        cost_per_serve: Ingredient cost of one serve
        markup_pct: Markup percentage; None uses config (400)
        vat_pct: VAT percentage; None uses config (5)
        service_pct: Service charge percentage; None uses config (15)
        manual_price: Optional price override

    Returns:
        PriceBreakdown
    """
    config = get_config()
    if markup_pct is None:
        markup_pct = config.default_markup_pct
    if vat_pct is None:
        vat_pct = config.default_vat_pct
    if service_pct is None:
        service_pct = config.default_service_pct

    cost = coerce_non_negative(cost_per_serve)
    markup_amount = cost * coerce_non_negative(markup_pct) / 100
    subtotal = cost + markup_amount
    vat_amount = subtotal * coerce_non_negative(vat_pct) / 100
    service_amount = subtotal * coerce_non_negative(service_pct) / 100
    suggested_price = subtotal + vat_amount + service_amount

    manual = coerce_non_negative(manual_price)
    final_price = manual if manual > 0 else suggested_price

    return PriceBreakdown(
        cost_per_serve=cost,
        markup_amount=markup_amount,
        subtotal=subtotal,
        vat_amount=vat_amount,
        service_amount=service_amount,
        suggested_price=suggested_price,
        final_price=final_price,
        profit=final_price - cost,
        food_cost_percent=cost / final_price * 100 if final_price > 0 else 0.0,
    )
