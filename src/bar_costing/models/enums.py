"""
Enumerations for costing and production tracking.

This module contains enums used across the ledgers and calculators:
- LossReason: Reason classification for recorded losses
- ExpirationStatus: Freshness of a sub-recipe's produced batches
- StockStatus: Availability of a sub-recipe's produced stock
- StockUnit: What an inventory item's total_stock counts
- MatchKind: How an ingredient name was resolved against inventory
"""

from enum import Enum


class LossReason(str, Enum):
    """
    Categories for production losses.

    Values:
        SPILLAGE: Liquid spilled during batching or transfer
        EVAPORATION: Volume lost to heating or long infusions
        QUALITY_ISSUE: Batch or ingredient discarded for quality
        EQUIPMENT_RESIDUE: Volume left behind in equipment and containers
        OVERPOURING: Pour exceeded the measured amount
        PRODUCTION_LOSS: Yield shortfall of a produced sub-recipe
        BREAKAGE: Broken bottle or container
        TRAINING_WASTE: Product used for staff training
        OTHER: Catch-all category; use notes for specifics
    """

    SPILLAGE = "spillage"
    EVAPORATION = "evaporation"
    QUALITY_ISSUE = "quality_issue"
    EQUIPMENT_RESIDUE = "equipment_residue"
    OVERPOURING = "overpouring"
    PRODUCTION_LOSS = "production_loss"
    BREAKAGE = "breakage"
    TRAINING_WASTE = "training_waste"
    OTHER = "other"


class ExpirationStatus(str, Enum):
    """
    Expiration state of a sub-recipe, derived from its batches' dates.

    Never persisted; recomputed on every read.
    """

    EXPIRED = "expired"
    EXPIRING_SOON = "expiring-soon"
    FRESH = "fresh"


class StockStatus(str, Enum):
    """Availability of a sub-recipe's produced stock."""

    OUT_OF_STOCK = "out_of_stock"
    LOW_STOCK = "low_stock"
    IN_STOCK = "in_stock"


class StockUnit(str, Enum):
    """Explicit denomination of an inventory item's total_stock."""

    BOTTLE = "bottle"
    ML = "ml"
    PIECE = "piece"


class MatchKind(str, Enum):
    """How an ingredient name resolved against inventory candidates."""

    EXACT = "exact"
    SUBSTRING = "substring"
    NONE = "none"
