"""Structured logging helpers for the calculators and ledgers.

Every service module logs under the 'bar_costing.services' prefix, and
ledger operations report "<operation>: <outcome>" with their context
(batch ids, sub-recipe ids, counts) attached to the record via 'extra'.

Usage:
    from bar_costing.services.logging_utils import get_service_logger, log_operation

    logger = get_service_logger(__name__)
    log_operation(logger, operation="submit_losses", outcome="success", entry_count=3)
"""

import logging
from typing import Any

# Attributes LogRecord already defines; 'extra' may not overwrite them
_RESERVED_RECORD_KEYS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


def get_service_logger(name: str) -> logging.Logger:
    """
    Get the service logger for a module.

    Args:
        name: Module name, usually __name__

    Returns:
        Logger named 'bar_costing.services.<module>'

    Example:
        >>> get_service_logger("bar_costing.services.production_ledger").name
        'bar_costing.services.production_ledger'
    """
    module_name = name.rsplit(".", 1)[-1]
    return logging.getLogger(f"bar_costing.services.{module_name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log a service operation with structured context.

    Context keys that clash with LogRecord attributes (e.g. "name",
    "module") are stored with a "ctx_" prefix instead of raising.

    Args:
        logger: Logger to write to
        operation: Operation name (e.g. "submit_losses", "compute_cost")
        outcome: Outcome (e.g. "success", "unmatched_ingredient", "error")
        level: Log level; calculators use DEBUG for per-line messages
        **context: Ids, counts and error text for the record

    Example:
        >>> log_operation(
        ...     logger,
        ...     operation="compute_cost",
        ...     outcome="unmatched_ingredient",
        ...     level=logging.DEBUG,
        ...     ingredient_name="House Bitters",
        ... )
    """
    extra = {"operation": operation, "outcome": outcome}
    for key, value in context.items():
        extra[f"ctx_{key}" if key in _RESERVED_RECORD_KEYS else key] = value
    logger.log(level, f"{operation}: {outcome}", extra=extra)
