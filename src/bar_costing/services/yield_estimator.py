"""
Stock-based yield estimation.

Answers "how many serves can current stock make?" for one recipe line or
a whole recipe.

Stock Denomination:
- An explicit InventoryItem.stock_unit always wins
- Otherwise base_unit is read with a keyword heuristic: containing
  "bottle", or equal to "bot"/"btl"/"btls" (case-insensitive), means
  total_stock counts whole bottles
- Any other label is treated as milliliters. A label the heuristic does not
  recognize ("case", "crate") is silently read as ml, which can be wrong;
  set stock_unit on the record to avoid it
"""

import math
from typing import Any, Mapping, Optional, Sequence, Union

from bar_costing.models.enums import StockUnit
from bar_costing.services import ingredient_matcher
from bar_costing.services.dto import (
    InventoryItem,
    RecipeIngredient,
    RecipeServeEstimate,
    ServeEstimate,
)
from bar_costing.services.unit_converter import is_count_unit, to_ml
from bar_costing.utils.bottle_size import detect_bottle_size_ml
from bar_costing.utils.config import get_config
from bar_costing.utils.constants import BOTTLE_ABBREVIATIONS, BOTTLE_KEYWORD
from bar_costing.utils.validators import coerce_non_negative

_PIECE_LABELS = {"piece", "pieces", "pcs"}


def is_bottle_label(base_unit: Optional[str]) -> bool:
    """
    Keyword heuristic for bottle-denominated stock labels.

    Examples:
        >>> is_bottle_label("Bottles")
        True
        >>> is_bottle_label("btl")
        True
        >>> is_bottle_label("ml")
        False
    """
    if not base_unit:
        return False
    label = base_unit.strip().lower()
    return BOTTLE_KEYWORD in label or label in BOTTLE_ABBREVIATIONS


def resolve_stock_unit(item: InventoryItem) -> StockUnit:
    """
    Decide what an inventory item's total_stock counts.

    Returns:
        StockUnit.BOTTLE, StockUnit.PIECE or StockUnit.ML
    """
    if item.stock_unit is not None:
        return StockUnit(item.stock_unit)
    if is_bottle_label(item.base_unit):
        return StockUnit.BOTTLE
    if item.base_unit and item.base_unit.strip().lower() in _PIECE_LABELS:
        return StockUnit.PIECE
    return StockUnit.ML


def is_bottle_denominated(item: InventoryItem) -> bool:
    """True when the item's total_stock counts whole bottles."""
    return resolve_stock_unit(item) == StockUnit.BOTTLE


def _ingredient_fields(ingredient: Union[RecipeIngredient, Mapping[str, Any]]):
    if isinstance(ingredient, Mapping):
        return ingredient.get("qty"), ingredient.get("unit")
    return ingredient.qty, ingredient.unit


def total_serves_from_stock(
    ingredient: Union[RecipeIngredient, Mapping[str, Any]],
    inventory_item: InventoryItem,
    bottle_size_ml: float,
) -> int:
    """
    Whole serves obtainable from an item's current stock.

    Transaction boundary: Pure computation (no database access).

    Args:
        ingredient: Anything with qty and unit (RecipeIngredient or a dict)
        inventory_item: Item carrying total_stock and its denomination
        bottle_size_ml: Bottle size used when stock counts bottles

    Returns:
        Non-negative integer number of serves

    Examples:
        >>> item = InventoryItem(1, "Vodka", total_stock=5, base_unit="btl")
        >>> total_serves_from_stock({"qty": 30, "unit": "ml"}, item, 700)
        116
    """
    qty, unit = _ingredient_fields(ingredient)
    qty = coerce_non_negative(qty)
    stock = coerce_non_negative(inventory_item.total_stock)

    if is_count_unit(unit):
        per_serve = qty if qty > 0 else 1.0
        return math.floor(stock / per_serve)

    qty_ml = to_ml(qty, unit)
    if qty_ml <= 0:
        return 0

    if is_bottle_denominated(inventory_item):
        return math.floor((stock * coerce_non_negative(bottle_size_ml)) / qty_ml)

    return math.floor(stock / qty_ml)


def _stock_bottle_size(
    ingredient: RecipeIngredient, item: InventoryItem, default_bottle_ml: float
) -> float:
    if ingredient.bottle_size_override is not None:
        return coerce_non_negative(ingredient.bottle_size_override)
    if item.bottle_size_ml is not None:
        return coerce_non_negative(item.bottle_size_ml)
    return detect_bottle_size_ml(item.name) or default_bottle_ml


def estimate_recipe_serves(
    ingredients: Sequence[RecipeIngredient],
    inventory: Sequence[InventoryItem],
    default_bottle_ml: Optional[float] = None,
) -> RecipeServeEstimate:
    """
    Serves obtainable for a whole recipe from current stock.

    Each line is matched against inventory; the recipe can make as many
    serves as its scarcest matched ingredient allows. Unmatched lines are
    reported with 0 serves but do not limit the recipe; neither do lines
    whose quantity converts to 0 ml.

    Args:
        ingredients: Recipe lines (per serve)
        inventory: Inventory snapshot with total_stock
        default_bottle_ml: Bottle size fallback; None uses config

    Returns:
        RecipeServeEstimate
    """
    if default_bottle_ml is None:
        default_bottle_ml = get_config().default_bottle_ml

    inventory = list(inventory)
    lines = []
    max_serves = None
    limiting = None

    for ingredient in ingredients:
        item = ingredient_matcher.match(ingredient.ingredient_name, inventory)
        if item is None:
            lines.append(ServeEstimate(ingredient_name=ingredient.ingredient_name, serves=0))
            continue

        bottle_size = _stock_bottle_size(ingredient, item, default_bottle_ml)
        serves = total_serves_from_stock(ingredient, item, bottle_size)
        lines.append(
            ServeEstimate(
                ingredient_name=ingredient.ingredient_name,
                serves=serves,
                matched_item_id=item.id,
                matched=True,
            )
        )

        # Zero-volume lines (e.g. "0 ml" garnish) draw nothing from stock
        draws_stock = is_count_unit(ingredient.unit) or to_ml(ingredient.qty, ingredient.unit) > 0
        if draws_stock and (max_serves is None or serves < max_serves):
            max_serves = serves
            limiting = ingredient.ingredient_name

    return RecipeServeEstimate(
        lines=tuple(lines),
        max_serves=max_serves or 0,
        limiting_ingredient=limiting,
    )
