"""Data Transfer Objects for the costing calculators.

Inputs (RecipeIngredient, InventoryItem, ScaledIngredient) are frozen so
they are hashable and the pure calculators can be memoized on their input
tuple. Outputs are frozen too; nothing here is persisted.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

from bar_costing.models.enums import MatchKind, StockUnit
from bar_costing.utils.constants import SOURCE_TYPE_SPIRIT, SOURCE_TYPE_SUB_RECIPE


@dataclass(frozen=True)
class RecipeIngredient:
    """One line of a recipe.

    Attributes:
        ingredient_name: Free-text name, resolved against inventory by name
        qty: Quantity per recipe batch (non-negative)
        unit: Unit code from the conversion table ("ml", "oz", "piece", ...)
        bottle_size_override: Bottle size (ml) to cost against instead of
            the inventory item's
    """

    ingredient_name: str
    qty: float
    unit: str = "ml"
    bottle_size_override: Optional[float] = None


@dataclass(frozen=True)
class InventoryItem:
    """Snapshot of an inventory record used for costing and yield.

    Attributes:
        id: Inventory record identifier
        name: Display name (matched against recipe ingredient names)
        unit_cost: Cost per bottle/container (or per piece for counted items)
        bottle_size_ml: Container size in ml, when known
        base_unit: Free-text stock label ("btl", "bottle", "ml", ...)
        total_stock: Stock on hand, in bottles or ml depending on the label
        stock_unit: Explicit stock denomination; overrides base_unit when set
        source_type: "spirit" for purchased goods, "sub_recipe" for house mixes
    """

    id: Any
    name: str
    unit_cost: float = 0.0
    bottle_size_ml: Optional[float] = None
    base_unit: Optional[str] = None
    total_stock: Optional[float] = None
    stock_unit: Optional[StockUnit] = None
    source_type: str = SOURCE_TYPE_SPIRIT

    @property
    def is_sub_recipe(self) -> bool:
        return self.source_type == SOURCE_TYPE_SUB_RECIPE


@dataclass(frozen=True)
class MatchResult:
    """Matched inventory item plus how the match was made."""

    item: Optional[InventoryItem]
    kind: MatchKind

    @property
    def matched(self) -> bool:
        return self.item is not None


@dataclass(frozen=True)
class CostLine:
    """Per-ingredient cost derivation.

    An unmatched ingredient still appears with cost_per_ml == 0 and
    matched == False so callers can flag it.
    """

    ingredient_name: str
    qty: float
    unit: str
    qty_ml: float
    cost_per_ml: float
    ingredient_cost: float
    percent_of_total: float
    serves_per_bottle: int
    bottle_size: float
    unit_cost: float = 0.0
    matched_item_id: Any = None
    matched: bool = False


@dataclass(frozen=True)
class PriceBreakdown:
    """Markup-based selling price build-up for one serve."""

    cost_per_serve: float
    markup_amount: float
    subtotal: float
    vat_amount: float
    service_amount: float
    suggested_price: float
    final_price: float
    profit: float
    food_cost_percent: float


@dataclass(frozen=True)
class RecipeCostSummary:
    """Aggregate cost of a recipe with pure pricing functions.

    All monetary values are plain floats in the workspace's base currency.
    """

    total_cost: float
    cost_per_serve: float
    total_volume_ml: float
    breakdown: Tuple[CostLine, ...] = field(default_factory=tuple)
    target_food_cost_ratio: float = 0.28

    def food_cost_percent(self, price: float) -> float:
        """Cost per serve as a percentage of selling price (0 when price is 0)."""
        if not price:
            return 0.0
        return self.cost_per_serve / price * 100

    def profit_amount(self, price: float) -> float:
        """Selling price minus cost per serve."""
        return price - self.cost_per_serve

    def profit_margin(self, price: float) -> float:
        """Profit as a percentage of selling price (0 when price is 0)."""
        if not price:
            return 0.0
        return self.profit_amount(price) / price * 100

    @property
    def suggested_price(self) -> float:
        """Price that puts cost per serve at the target food cost ratio."""
        if self.target_food_cost_ratio <= 0:
            return 0.0
        return self.cost_per_serve / self.target_food_cost_ratio

    @property
    def unmatched_ingredients(self) -> Tuple[str, ...]:
        return tuple(line.ingredient_name for line in self.breakdown if not line.matched)

    def price_breakdown(
        self,
        markup_pct: Optional[float] = None,
        vat_pct: Optional[float] = None,
        service_pct: Optional[float] = None,
        manual_price: Optional[float] = None,
    ) -> PriceBreakdown:
        """Markup-based price build-up; see cost_calculator.build_price_breakdown."""
        from bar_costing.services.cost_calculator import build_price_breakdown

        return build_price_breakdown(
            self.cost_per_serve,
            markup_pct=markup_pct,
            vat_pct=vat_pct,
            service_pct=service_pct,
            manual_price=manual_price,
        )


@dataclass(frozen=True)
class ServeEstimate:
    """Stock-based serving count for one recipe line."""

    ingredient_name: str
    serves: int
    matched_item_id: Any = None
    matched: bool = False


@dataclass(frozen=True)
class RecipeServeEstimate:
    """Servings obtainable from stock for a whole recipe.

    max_serves is limited by the scarcest matched ingredient (0 when no
    line matched).
    """

    lines: Tuple[ServeEstimate, ...]
    max_serves: int
    limiting_ingredient: Optional[str] = None


@dataclass(frozen=True)
class ScaledIngredient:
    """An ingredient amount for a production batch, already in ml."""

    ingredient_name: str
    scaled_amount_ml: float


@dataclass(frozen=True)
class ScaledLine:
    """Whole-bottle split for one scaled ingredient."""

    ingredient_name: str
    ml: float
    bottles: int = 0
    leftover_ml: float = 0.0
    matched_item_id: Any = None
    is_sub_recipe: bool = False


@dataclass(frozen=True)
class ProductionScale:
    """Whole-bottle consumption for a production batch."""

    ingredients: Tuple[ScaledLine, ...]
    total_ml: float
    total_bottles: int
    total_leftover_ml: float
