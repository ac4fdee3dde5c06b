"""
Database models package.

This package contains the SQLAlchemy ORM models for the persisted ledgers.
"""

from .base import Base, BaseModel
from .production_batch import ProductionBatch
from .loss_entry import LossEntry
from .sub_recipe_depletion import SubRecipeDepletion
from .enums import LossReason, ExpirationStatus, StockStatus, StockUnit, MatchKind

__all__ = [
    "Base",
    "BaseModel",
    # Ledgers
    "ProductionBatch",
    "LossEntry",
    "SubRecipeDepletion",
    # Enums
    "LossReason",
    "ExpirationStatus",
    "StockStatus",
    "StockUnit",
    "MatchKind",
]
