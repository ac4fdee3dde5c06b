"""
Configuration management for the Bar Costing engine.

This module handles:
- Database path configuration
- Costing policy values (target food cost ratio, default bottle size)
- Production tracking thresholds
- Environment-specific configuration (production, development, test)
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .constants import (
    APP_NAME,
    APP_VERSION,
    DATABASE_FILENAME,
    DATABASE_VERSION,
    DEFAULT_BOTTLE_ML,
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_DATABASE_TIMEOUT_SECONDS,
    DEFAULT_MARKUP_PCT,
    DEFAULT_SERVICE_PCT,
    DEFAULT_TARGET_FOOD_COST_RATIO,
    DEFAULT_VAT_PCT,
    EXPIRING_SOON_DAYS,
    LOW_STOCK_RATIO,
)

logger = logging.getLogger(__name__)

ENV_VAR_ENVIRONMENT = "BAR_COSTING_ENV"
ENV_VAR_DATA_DIR = "BAR_COSTING_DATA_DIR"
ENV_VAR_TARGET_FOOD_COST = "BAR_COSTING_TARGET_FOOD_COST"
ENV_VAR_DEFAULT_BOTTLE_ML = "BAR_COSTING_DEFAULT_BOTTLE_ML"


def _env_float(name: str, default: float) -> float:
    """Read a float from the environment, falling back to default on bad input."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={raw!r}; using {default}")
        return default


class Config:
    """
    Application configuration manager.

    Holds database settings and the costing policy values that callers
    may override (target food cost ratio, default bottle size, markup).
    """

    def __init__(self, environment: str = "production"):
        """
        Initialize configuration.

        Args:
            environment: 'production', 'development' or 'test'
        """
        self.environment = environment
        self._app_name = APP_NAME
        self._app_version = APP_VERSION
        self._database_version = DATABASE_VERSION

        if environment == "test":
            self._base_dir = None
            self._database_path = None
        else:
            if environment == "development":
                self._base_dir = self._get_project_data_dir()
            else:
                self._base_dir = self._get_user_data_dir()
            self._database_path = self._base_dir / DATABASE_FILENAME

        # Costing policy
        self.target_food_cost_ratio = _env_float(
            ENV_VAR_TARGET_FOOD_COST, DEFAULT_TARGET_FOOD_COST_RATIO
        )
        self.default_bottle_ml = _env_float(ENV_VAR_DEFAULT_BOTTLE_ML, DEFAULT_BOTTLE_ML)
        self.default_markup_pct = DEFAULT_MARKUP_PCT
        self.default_vat_pct = DEFAULT_VAT_PCT
        self.default_service_pct = DEFAULT_SERVICE_PCT

        # Production tracking
        self.expiring_soon_days = EXPIRING_SOON_DAYS
        self.low_stock_ratio = LOW_STOCK_RATIO

        # Resources
        self.cache_ttl_seconds = DEFAULT_CACHE_TTL_SECONDS
        self.database_timeout = DEFAULT_DATABASE_TIMEOUT_SECONDS

    def _get_project_data_dir(self) -> Path:
        """Project data/ directory used in development."""
        project_root = Path(__file__).parent.parent.parent.parent
        return project_root / "data"

    def _get_user_data_dir(self) -> Path:
        """User data directory used in production (overridable via env)."""
        override = os.environ.get(ENV_VAR_DATA_DIR)
        if override:
            return Path(override)
        return Path.home() / ".bar_costing"

    def ensure_directories(self) -> None:
        """Create the database directory if it doesn't exist."""
        if self._base_dir is not None:
            self._base_dir.mkdir(parents=True, exist_ok=True)

    @property
    def app_name(self) -> str:
        """Application name."""
        return self._app_name

    @property
    def app_version(self) -> str:
        """Application version."""
        return self._app_version

    @property
    def database_version(self) -> str:
        """Database schema version."""
        return self._database_version

    @property
    def database_path(self) -> Optional[Path]:
        """Full path to the database file (None for in-memory test databases)."""
        return self._database_path

    @property
    def database_url(self) -> str:
        """
        SQLAlchemy database URL.

        Returns:
            Database URL string for SQLAlchemy
        """
        if self._database_path is None:
            return "sqlite:///:memory:"
        db_path_str = str(self._database_path).replace("\\", "/")
        return f"sqlite:///{db_path_str}"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_test(self) -> bool:
        """Check if running in test mode."""
        return self.environment == "test"

    def database_exists(self) -> bool:
        """Check if the database file exists."""
        if self._database_path is None:
            return False
        return self._database_path.exists()

    def __repr__(self) -> str:
        """String representation of config."""
        return (
            f"Config(environment='{self.environment}', "
            f"database_url='{self.database_url}', "
            f"target_food_cost_ratio={self.target_food_cost_ratio})"
        )


_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Get the global configuration instance.

    Once created, the singleton's environment cannot be changed by passing
    a different environment argument.

    Args:
        environment: Optional environment for initial creation. If None, uses
                    BAR_COSTING_ENV or defaults to production. Ignored if
                    singleton already exists.

    Returns:
        Config instance
    """
    global _config_instance

    if _config_instance is None:
        if environment is None:
            environment = os.environ.get(ENV_VAR_ENVIRONMENT, "production")
        _config_instance = Config(environment)
    elif environment is not None and environment != _config_instance.environment:
        logger.warning(
            f"get_config() called with environment='{environment}' but singleton "
            f"already exists with environment='{_config_instance.environment}'. "
            f"Returning existing singleton."
        )

    return _config_instance


def reset_config() -> None:
    """
    Reset the global configuration instance.

    Useful for testing.
    """
    global _config_instance
    _config_instance = None
