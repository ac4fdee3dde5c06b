"""Services package - Costing computations and persisted ledgers.

Architecture:
- Pure computations: Stateless functions over frozen DTOs (no database access)
- Ledgers: Stateless functions over SQLAlchemy sessions
- Transactions: Managed via session_scope() context manager
- Exceptions: Consistent error handling via ServiceError hierarchy

Service Modules:
- unit_converter: Recipe units to milliliters
- ingredient_matcher: Free-text ingredient names to inventory items
- cost_calculator: Per-ingredient and recipe cost, price build-up
- yield_estimator: Serves obtainable from current stock
- batch_scaler: Batch scaling and whole-bottle consumption
- loss_ledger: Draft and persisted production losses
- production_ledger: Production batches, expiration and sub-recipe stock

Infrastructure:
- database: Session management and database utilities
- exceptions: Custom exception classes for service layer errors
- computation_cache: TTL memoization for pure computations
"""

# Service modules
from . import (
    database,
    unit_converter,
    ingredient_matcher,
    computation_cache,
    yield_estimator,
    cost_calculator,
    batch_scaler,
    loss_ledger,
    production_ledger,
)

from .computation_cache import ComputationCache
from .dto import (
    CostLine,
    InventoryItem,
    MatchResult,
    PriceBreakdown,
    ProductionScale,
    RecipeCostSummary,
    RecipeIngredient,
    RecipeServeEstimate,
    ScaledIngredient,
    ScaledLine,
    ServeEstimate,
)
from .exceptions import (
    ServiceError,
    ValidationError,
    DatabaseError,
    ProductionBatchNotFound,
    LossEntryNotFound,
    LossDraftNotFound,
    SubRecipeDepletionNotFound,
)

# Pure computations
from .unit_converter import to_ml
from .ingredient_matcher import match
from .cost_calculator import build_price_breakdown, compute_cost, compute_cost_cached
from .yield_estimator import estimate_recipe_serves, total_serves_from_stock
from .batch_scaler import scale_production, scale_recipe, scale_to_target

# Ledgers
from .loss_ledger import LossDraft, LossLedger, submit_losses
from .production_ledger import (
    RecipeProductionGroup,
    create_production_batch,
    expiration_status,
    productions_by_recipe,
    record_production_with_losses,
    total_produced,
)

__all__ = [
    # Modules
    "database",
    "unit_converter",
    "ingredient_matcher",
    "computation_cache",
    "yield_estimator",
    "cost_calculator",
    "batch_scaler",
    "loss_ledger",
    "production_ledger",
    # DTOs
    "CostLine",
    "InventoryItem",
    "MatchResult",
    "PriceBreakdown",
    "ProductionScale",
    "RecipeCostSummary",
    "RecipeIngredient",
    "RecipeServeEstimate",
    "ScaledIngredient",
    "ScaledLine",
    "ServeEstimate",
    "ComputationCache",
    # Exceptions
    "ServiceError",
    "ValidationError",
    "DatabaseError",
    "ProductionBatchNotFound",
    "LossEntryNotFound",
    "LossDraftNotFound",
    "SubRecipeDepletionNotFound",
    # Functions
    "to_ml",
    "match",
    "compute_cost",
    "compute_cost_cached",
    "build_price_breakdown",
    "total_serves_from_stock",
    "estimate_recipe_serves",
    "scale_production",
    "scale_recipe",
    "scale_to_target",
    "LossDraft",
    "LossLedger",
    "submit_losses",
    "RecipeProductionGroup",
    "create_production_batch",
    "total_produced",
    "productions_by_recipe",
    "expiration_status",
    "record_production_with_losses",
]
