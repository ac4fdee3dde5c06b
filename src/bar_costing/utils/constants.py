"""
Constants for the Bar Costing engine.

This module defines all system-wide constants including:
- Application metadata
- Unit conversion table (everything normalizes to milliliters)
- Stock unit keywords used to tell bottle counts from raw milliliters
- Loss reasons and costing policy defaults
"""

from typing import Dict, Set

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Bar Costing"
APP_VERSION = "0.1.0"
DATABASE_VERSION = "1.0"
DATABASE_FILENAME = "bar_costing.db"

# ============================================================================
# Units
# ============================================================================

# Conversion factors to milliliters. Weight units are treated as
# milliliter-equivalent (1 g ~ 1 ml) for costing purposes.
UNIT_TO_ML: Dict[str, float] = {
    "ml": 1.0,
    "L": 1000.0,
    "cl": 10.0,
    "oz": 29.5735,
    "dash": 0.9,
    "drop": 0.05,
    "tsp": 4.929,
    "tbsp": 14.787,
    "g": 1.0,
    "kg": 1000.0,
    "piece": 0.0,  # Count, not a volume
}

# Units measured as a count rather than a volume
COUNT_UNITS: Set[str] = {"piece"}

# Factor applied to units missing from UNIT_TO_ML
UNKNOWN_UNIT_FACTOR = 1.0

# ============================================================================
# Stock Units
# ============================================================================

# base_unit values that mean "total_stock counts whole bottles"
BOTTLE_KEYWORD = "bottle"
BOTTLE_ABBREVIATIONS: Set[str] = {"bot", "btl", "btls"}

# ============================================================================
# Inventory Source Types
# ============================================================================

SOURCE_TYPE_SPIRIT = "spirit"
SOURCE_TYPE_SUB_RECIPE = "sub_recipe"

# ============================================================================
# Costing Policy Defaults
# ============================================================================

DEFAULT_BOTTLE_ML = 750.0
DEFAULT_TARGET_FOOD_COST_RATIO = 0.28
DEFAULT_MARKUP_PCT = 400.0
DEFAULT_VAT_PCT = 5.0
DEFAULT_SERVICE_PCT = 15.0

# ============================================================================
# Production Tracking
# ============================================================================

EXPIRING_SOON_DAYS = 3
LOW_STOCK_RATIO = 0.5
TOP_LOSS_INGREDIENTS = 5

# ============================================================================
# Caching / Persistence
# ============================================================================

DEFAULT_CACHE_TTL_SECONDS = 300.0
DEFAULT_DATABASE_TIMEOUT_SECONDS = 30

# ============================================================================
# Validation
# ============================================================================

MAX_NAME_LENGTH = 200
MAX_NOTES_LENGTH = 2000
