"""Utilities package for the Bar Costing engine."""

from .bottle_size import detect_bottle_size_ml
from .config import Config, get_config, reset_config
from .validators import coerce_non_negative, coerce_number

__all__ = [
    "Config",
    "get_config",
    "reset_config",
    "detect_bottle_size_ml",
    "coerce_number",
    "coerce_non_negative",
]
