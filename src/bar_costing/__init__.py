"""Bar Costing - recipe costing and production reconciliation engine."""

from .utils.constants import APP_VERSION

__version__ = APP_VERSION
