"""
Batch scaling and whole-bottle consumption.

This module provides functions for:
- Scaling a recipe to a batch factor or target volume
- Splitting each scaled ingredient into whole bottles plus leftover ml
- Aggregating bottles and leftover across a production batch

Sub-recipe inventory items (house mixes tracked in ml) never get a bottle
split. Ingredients with no matching item, or whose item has no bottle size,
only count toward total_ml.
"""

import math
from typing import List, Sequence

from bar_costing.services import ingredient_matcher
from bar_costing.services.dto import (
    InventoryItem,
    ProductionScale,
    RecipeIngredient,
    ScaledIngredient,
    ScaledLine,
)
from bar_costing.services.unit_converter import to_ml
from bar_costing.utils.validators import coerce_non_negative


def split_bottles(scaled_ml: float, bottle_size_ml: float) -> tuple[int, float]:
    """
    Split a volume into whole bottles and leftover ml.

    Transaction boundary: Pure computation (no database access).

    Args:
        scaled_ml: Volume consumed
        bottle_size_ml: Size of one bottle

    Returns:
        Tuple of (bottles, leftover_ml) with 0 <= leftover_ml < bottle_size_ml.
        bottles * bottle_size_ml + leftover_ml == scaled_ml holds exactly for
        whole-number ml and to within float rounding for decimal volumes
        (e.g. 3434.1 ml in 517.58 ml bottles reassembles to 3434.1000000000004).

    Examples:
        >>> split_bottles(2500, 750)
        (3, 250.0)
        >>> split_bottles(500, 750)
        (0, 500.0)
    """
    scaled_ml = coerce_non_negative(scaled_ml)
    bottle_size_ml = coerce_non_negative(bottle_size_ml)
    if bottle_size_ml <= 0:
        return 0, 0.0

    leftover_ml = math.fmod(scaled_ml, bottle_size_ml)
    bottles = round((scaled_ml - leftover_ml) / bottle_size_ml)
    return bottles, leftover_ml


def scale_production(
    scaled_ingredients: Sequence[ScaledIngredient],
    spirits: Sequence[InventoryItem],
) -> ProductionScale:
    """
    Compute whole-bottle consumption for a produced batch.

    Transaction boundary: Pure computation (no database access).

    total_leftover_ml only sums the leftover of lines that consumed at
    least one whole bottle; a line smaller than one bottle is a partial
    pour, not "extra" beyond full bottles.

    Args:
        scaled_ingredients: Batch amounts in ml
        spirits: Inventory items carrying bottle_size_ml

    Returns:
        ProductionScale with per-line results and totals
    """
    spirits = list(spirits)
    lines: List[ScaledLine] = []
    total_ml = 0.0
    total_bottles = 0
    total_leftover_ml = 0.0

    for scaled in scaled_ingredients:
        scaled_ml = coerce_non_negative(scaled.scaled_amount_ml)
        total_ml += scaled_ml

        spirit = ingredient_matcher.match(scaled.ingredient_name, spirits)
        is_sub_recipe = spirit is not None and spirit.is_sub_recipe

        bottles = 0
        leftover_ml = 0.0
        if spirit is not None and spirit.bottle_size_ml and not is_sub_recipe:
            bottles, leftover_ml = split_bottles(scaled_ml, spirit.bottle_size_ml)
            total_bottles += bottles
            if bottles > 0:
                total_leftover_ml += leftover_ml

        lines.append(
            ScaledLine(
                ingredient_name=scaled.ingredient_name,
                ml=scaled_ml,
                bottles=bottles,
                leftover_ml=leftover_ml,
                matched_item_id=spirit.id if spirit is not None else None,
                is_sub_recipe=is_sub_recipe,
            )
        )

    return ProductionScale(
        ingredients=tuple(lines),
        total_ml=total_ml,
        total_bottles=total_bottles,
        total_leftover_ml=total_leftover_ml,
    )


def scale_recipe(ingredients: Sequence[RecipeIngredient], factor: float) -> List[ScaledIngredient]:
    """
    Scale recipe lines by a multiplier, converting to ml.

    Counted ("piece") lines scale to 0 ml since they have no volume.

    Args:
        ingredients: Recipe lines for one serve/batch
        factor: Multiplier (negative or invalid treated as 0)

    Returns:
        ScaledIngredient list in recipe order
    """
    factor = coerce_non_negative(factor)
    return [
        ScaledIngredient(
            ingredient_name=ing.ingredient_name,
            scaled_amount_ml=to_ml(ing.qty, ing.unit) * factor,
        )
        for ing in ingredients
    ]


def scale_to_target(
    ingredients: Sequence[RecipeIngredient],
    base_yield_ml: float,
    target_ml: float,
) -> List[ScaledIngredient]:
    """
    Scale recipe lines so the batch yields target_ml.

    Args:
        ingredients: Recipe lines producing base_yield_ml
        base_yield_ml: Volume the unscaled recipe yields
        target_ml: Desired batch volume

    Returns:
        ScaledIngredient list (all 0 when base_yield_ml is 0)
    """
    base = coerce_non_negative(base_yield_ml)
    factor = coerce_non_negative(target_ml) / base if base > 0 else 0.0
    return scale_recipe(ingredients, factor)
