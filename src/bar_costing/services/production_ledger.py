"""
Production Ledger - sub-recipe production batches and their freshness.

This module provides:
- CRUD over ProductionBatch records
- Aggregates: total produced per sub-recipe, productions grouped by recipe
- Expiration status derived from stored dates and the current time
- Atomic recording of a batch together with its loss entries
- Sub-recipe depletion tracking and stock status

Expiration status is never persisted: it is a pure function of "now" and
the batches' expiration dates and is recomputed on every read.

Concurrent edits are last-write-wins; there is no locking or version check.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func

from bar_costing.models import (
    ExpirationStatus,
    LossEntry,
    ProductionBatch,
    StockStatus,
    SubRecipeDepletion,
)
from bar_costing.services import loss_ledger
from bar_costing.services.database import run_in_session
from bar_costing.services.exceptions import (
    ProductionBatchNotFound,
    SubRecipeDepletionNotFound,
    ValidationError,
)
from bar_costing.services.logging_utils import get_service_logger, log_operation
from bar_costing.utils.config import get_config
from bar_costing.utils.datetime_utils import as_utc, to_storage_utc, utc_now
from bar_costing.utils.validators import (
    coerce_non_negative,
    validate_non_negative_number,
    validate_notes,
    validate_required_string,
)

logger = get_service_logger(__name__)

BATCH_EDITABLE_FIELDS = ("quantity_produced_ml", "expiration_date", "notes")


@dataclass
class RecipeProductionGroup:
    """All batches of one sub-recipe with derived totals.

    Attributes:
        sub_recipe_id: Sub-recipe identifier
        total_produced: Sum of quantity_produced_ml
        batches: Batch dicts, newest production first
        earliest_expiration: Minimum non-null expiration_date (None if none)
        latest_expiration: Maximum non-null expiration_date (None if none)
    """

    sub_recipe_id: str
    total_produced: float = 0.0
    batches: List[Dict[str, Any]] = field(default_factory=list)
    earliest_expiration: Optional[datetime] = None
    latest_expiration: Optional[datetime] = None


# =============================================================================
# Pure helpers
# =============================================================================


def classify_expiration(
    expiration_dates: Iterable[Optional[datetime]],
    now: Optional[datetime] = None,
    window_days: Optional[float] = None,
) -> ExpirationStatus:
    """
    Classify a set of expiration dates against the current time.

    Transaction boundary: Pure computation (no database access).

    - EXPIRED if any date is before now
    - EXPIRING_SOON if any date falls within [now, now + window_days]
      (both ends inclusive)
    - FRESH otherwise (including when there are no dates)

    Args:
        expiration_dates: Dates to check; None entries are ignored
        now: Reference time (default: current UTC time)
        window_days: Expiring-soon window; None uses config (3 days)

    Returns:
        ExpirationStatus
    """
    now = as_utc(now) if now is not None else utc_now()
    if window_days is None:
        window_days = get_config().expiring_soon_days
    soon_limit = now + timedelta(days=window_days)

    dates = [as_utc(d) for d in expiration_dates if d is not None]

    if any(d < now for d in dates):
        return ExpirationStatus.EXPIRED
    if any(now <= d <= soon_limit for d in dates):
        return ExpirationStatus.EXPIRING_SOON
    return ExpirationStatus.FRESH


def classify_stock(
    available_ml: float, total_yield_ml: float, low_stock_ratio: Optional[float] = None
) -> StockStatus:
    """
    Classify available sub-recipe stock.

    Args:
        available_ml: Produced minus depleted
        total_yield_ml: Volume one batch of the sub-recipe yields
        low_stock_ratio: Fraction of a batch below which stock is low;
            None uses config (0.5)

    Returns:
        StockStatus
    """
    if low_stock_ratio is None:
        low_stock_ratio = get_config().low_stock_ratio
    if available_ml <= 0:
        return StockStatus.OUT_OF_STOCK
    if available_ml < coerce_non_negative(total_yield_ml) * low_stock_ratio:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def production_batch_to_dict(batch: ProductionBatch) -> Dict[str, Any]:
    """Convert a ProductionBatch row to a plain dict."""
    return batch.to_dict()


def _validate_batch_fields(
    sub_recipe_id: Any,
    quantity_produced_ml: Any,
    notes: Optional[str],
    production_date: Any = None,
    expiration_date: Any = None,
) -> None:
    errors = []
    for label, value in (("Production date", production_date), ("Expiration date", expiration_date)):
        if value is not None and not isinstance(value, datetime):
            errors.append(f"{label}: Must be a datetime")
    for is_valid, error in (
        validate_required_string(sub_recipe_id, "Sub-recipe"),
        validate_non_negative_number(quantity_produced_ml, "Quantity produced"),
        validate_notes(notes),
    ):
        if not is_valid:
            errors.append(error)
    if errors:
        raise ValidationError(errors)


# =============================================================================
# CRUD
# =============================================================================


def _new_batch(
    sub_recipe_id: str,
    quantity_produced_ml: Any,
    produced_by_user_id: Optional[str],
    produced_by_name: Optional[str],
    production_date: Optional[datetime],
    expiration_date: Optional[datetime],
    notes: Optional[str],
    group_id: Optional[str],
    sub_recipe_name: Optional[str],
) -> ProductionBatch:
    _validate_batch_fields(
        sub_recipe_id, quantity_produced_ml, notes, production_date, expiration_date
    )
    return ProductionBatch(
        sub_recipe_id=str(sub_recipe_id),
        sub_recipe_name=sub_recipe_name,
        quantity_produced_ml=coerce_non_negative(quantity_produced_ml),
        produced_by_user_id=produced_by_user_id,
        produced_by_name=produced_by_name,
        production_date=to_storage_utc(production_date or utc_now()),
        expiration_date=to_storage_utc(expiration_date),
        notes=notes,
        group_id=group_id,
    )


def create_production_batch(
    sub_recipe_id: str,
    quantity_produced_ml: Any,
    produced_by_user_id: Optional[str] = None,
    produced_by_name: Optional[str] = None,
    production_date: Optional[datetime] = None,
    expiration_date: Optional[datetime] = None,
    notes: Optional[str] = None,
    group_id: Optional[str] = None,
    sub_recipe_name: Optional[str] = None,
    *,
    session=None,
) -> Dict[str, Any]:
    """
    Record a production batch.

    Args:
        sub_recipe_id: Sub-recipe produced
        quantity_produced_ml: Volume produced (must be >= 0)
        produced_by_user_id: Producer identifier
        produced_by_name: Producer display name
        production_date: When it was made (default: now)
        expiration_date: Optional expiry
        notes: Optional notes
        group_id: Optional workspace/team key
        sub_recipe_name: Display name snapshot
        session: Optional database session

    Returns:
        Created batch dict

    Raises:
        ValidationError: Missing sub-recipe or negative/non-numeric quantity
        DatabaseError: If the write fails (no retry)
    """
    batch = _new_batch(
        sub_recipe_id,
        quantity_produced_ml,
        produced_by_user_id,
        produced_by_name,
        production_date,
        expiration_date,
        notes,
        group_id,
        sub_recipe_name,
    )

    def _impl(session):
        session.add(batch)
        session.flush()
        return production_batch_to_dict(batch)

    result = run_in_session(
        logger, "create_production_batch", _impl, session, sub_recipe_id=str(sub_recipe_id)
    )
    logger.info(
        f"Recorded production batch {result['id']} for sub-recipe {sub_recipe_id}: "
        f"{result['quantity_produced_ml']}ml"
    )
    return result


def get_production_batch(batch_id: int, *, session=None) -> Dict[str, Any]:
    """
    Get one production batch.

    Raises:
        ProductionBatchNotFound: If no batch has this id
    """

    def _impl(session):
        batch = session.get(ProductionBatch, batch_id)
        if batch is None:
            raise ProductionBatchNotFound(batch_id)
        return production_batch_to_dict(batch)

    return run_in_session(
        logger, "get_production_batch", _impl, session, production_batch_id=batch_id
    )


def _batches(session, sub_recipe_id: Optional[str] = None) -> List[ProductionBatch]:
    query = session.query(ProductionBatch)
    if sub_recipe_id is not None:
        query = query.filter(ProductionBatch.sub_recipe_id == str(sub_recipe_id))
    return query.order_by(ProductionBatch.production_date.desc(), ProductionBatch.id.desc()).all()


def get_production_batches(
    sub_recipe_id: Optional[str] = None, *, session=None
) -> List[Dict[str, Any]]:
    """
    List production batches, newest production first.

    Args:
        sub_recipe_id: Only batches of this sub-recipe (default: all)
        session: Optional database session
    """

    def _impl(session):
        return [production_batch_to_dict(batch) for batch in _batches(session, sub_recipe_id)]

    return run_in_session(logger, "get_production_batches", _impl, session)


def update_production_batch(batch_id: int, *, session=None, **fields: Any) -> Dict[str, Any]:
    """
    Edit a production batch.

    Only quantity_produced_ml, expiration_date and notes may change; the
    rest of the record is immutable once created.

    Raises:
        ProductionBatchNotFound: If no batch has this id
        ValidationError: For other fields or a negative quantity
        DatabaseError: If the write fails
    """
    unknown = [name for name in fields if name not in BATCH_EDITABLE_FIELDS]
    if unknown:
        raise ValidationError([f"Field '{name}' cannot be edited" for name in unknown])

    changes: Dict[str, Any] = {}
    errors = []
    if "quantity_produced_ml" in fields:
        is_valid, error = validate_non_negative_number(
            fields["quantity_produced_ml"], "Quantity produced"
        )
        if not is_valid:
            errors.append(error)
        changes["quantity_produced_ml"] = coerce_non_negative(fields["quantity_produced_ml"])
    if "notes" in fields:
        is_valid, error = validate_notes(fields["notes"])
        if not is_valid:
            errors.append(error)
        changes["notes"] = fields["notes"]
    if "expiration_date" in fields:
        expiration_date = fields["expiration_date"]
        if expiration_date is not None and not isinstance(expiration_date, datetime):
            errors.append("Expiration date: Must be a datetime")
        else:
            changes["expiration_date"] = to_storage_utc(expiration_date)
    if errors:
        raise ValidationError(errors)

    def _impl(session):
        batch = session.get(ProductionBatch, batch_id)
        if batch is None:
            raise ProductionBatchNotFound(batch_id)
        batch.update_from_dict(changes)
        session.flush()
        return production_batch_to_dict(batch)

    result = run_in_session(
        logger, "update_production_batch", _impl, session, production_batch_id=batch_id
    )
    logger.info(f"Updated production batch {batch_id}: {sorted(changes)}")
    return result


def delete_production_batch(batch_id: int, *, session=None) -> None:
    """
    Delete a production batch.

    Loss entries and depletions that referenced it are kept with their
    batch reference cleared.

    Raises:
        ProductionBatchNotFound: If no batch has this id
        DatabaseError: If the delete fails
    """

    def _impl(session):
        batch = session.get(ProductionBatch, batch_id)
        if batch is None:
            raise ProductionBatchNotFound(batch_id)
        session.delete(batch)

    run_in_session(
        logger, "delete_production_batch", _impl, session, production_batch_id=batch_id
    )
    logger.info(f"Deleted production batch {batch_id}")


# =============================================================================
# Atomic batch + losses
# =============================================================================


def record_production_with_losses(
    ledger: loss_ledger.LossLedger,
    sub_recipe_id: str,
    quantity_produced_ml: Any,
    produced_by_user_id: Optional[str] = None,
    produced_by_name: Optional[str] = None,
    production_date: Optional[datetime] = None,
    expiration_date: Optional[datetime] = None,
    notes: Optional[str] = None,
    group_id: Optional[str] = None,
    sub_recipe_name: Optional[str] = None,
    expected_yield_ml: Optional[float] = None,
    *,
    session=None,
) -> Dict[str, Any]:
    """
    Record a production batch and its drafted losses in one transaction.

    Either the batch and every loss entry are written, or nothing is. The
    ledger is cleared only after a commit this function owns.

    Args:
        ledger: Draft losses for the batch (may be empty)
        expected_yield_ml: When given, a yield shortfall against
            quantity_produced_ml is stamped on each loss entry
        (other args as create_production_batch)

    Returns:
        Dict with "batch" (batch dict) and "losses" (loss entry dicts)

    Raises:
        ValidationError: Invalid batch fields or loss drafts
        DatabaseError: If any write fails; nothing is committed
    """
    batch = _new_batch(
        sub_recipe_id,
        quantity_produced_ml,
        produced_by_user_id,
        produced_by_name,
        production_date,
        expiration_date,
        notes,
        group_id,
        sub_recipe_name,
    )

    def _impl(session):
        session.add(batch)
        session.flush()
        losses = loss_ledger.submit_losses(
            ledger,
            production_batch_id=batch.id,
            sub_recipe_id=batch.sub_recipe_id,
            recorded_by_user_id=produced_by_user_id,
            session=session,
        )
        if expected_yield_ml is not None and losses:
            loss_ids = [loss["id"] for loss in losses]
            for entry in session.query(LossEntry).filter(LossEntry.id.in_(loss_ids)):
                entry.expected_yield_ml = coerce_non_negative(expected_yield_ml)
                entry.actual_yield_ml = batch.quantity_produced_ml
            session.flush()
            losses = [loss_ledger.get_loss_entry(loss_id, session=session) for loss_id in loss_ids]
        return {"batch": production_batch_to_dict(batch), "losses": losses}

    owns_transaction = session is None
    result = run_in_session(
        logger, "record_production_with_losses", _impl, session, sub_recipe_id=str(sub_recipe_id)
    )
    if owns_transaction:
        ledger.clear()
    log_operation(
        logger,
        operation="record_production_with_losses",
        outcome="success",
        production_batch_id=result["batch"]["id"],
        loss_count=len(result["losses"]),
    )
    return result


# =============================================================================
# Aggregates
# =============================================================================


def total_produced(sub_recipe_id: str, *, session=None) -> float:
    """Sum of quantity_produced_ml over all batches of a sub-recipe."""

    def _impl(session):
        total = (
            session.query(func.coalesce(func.sum(ProductionBatch.quantity_produced_ml), 0.0))
            .filter(ProductionBatch.sub_recipe_id == str(sub_recipe_id))
            .scalar()
        )
        return float(total or 0.0)

    return run_in_session(
        logger, "total_produced", _impl, session, sub_recipe_id=str(sub_recipe_id)
    )


def productions_by_recipe(*, session=None) -> List[RecipeProductionGroup]:
    """
    Group all batches by sub-recipe.

    Returns:
        RecipeProductionGroup per sub-recipe, ordered by sub_recipe_id
    """

    def _impl(session):
        groups: Dict[str, RecipeProductionGroup] = {}
        for batch in _batches(session):
            group = groups.setdefault(
                batch.sub_recipe_id, RecipeProductionGroup(sub_recipe_id=batch.sub_recipe_id)
            )
            group.total_produced += batch.quantity_produced_ml or 0.0
            group.batches.append(production_batch_to_dict(batch))

            expiration = as_utc(batch.expiration_date)
            if expiration is not None:
                if group.earliest_expiration is None or expiration < group.earliest_expiration:
                    group.earliest_expiration = expiration
                if group.latest_expiration is None or expiration > group.latest_expiration:
                    group.latest_expiration = expiration
        return [groups[key] for key in sorted(groups)]

    return run_in_session(logger, "productions_by_recipe", _impl, session)


def expiration_status(
    sub_recipe_id: str, now: Optional[datetime] = None, *, session=None
) -> ExpirationStatus:
    """
    Expiration status of a sub-recipe's batches at time `now`.

    Recomputed from stored dates on every call; never persisted.

    Args:
        sub_recipe_id: Sub-recipe to check
        now: Reference time (default: current UTC time)
        session: Optional database session

    Returns:
        ExpirationStatus.EXPIRED, EXPIRING_SOON or FRESH
    """

    def _impl(session):
        rows = (
            session.query(ProductionBatch.expiration_date)
            .filter(ProductionBatch.sub_recipe_id == str(sub_recipe_id))
            .filter(ProductionBatch.expiration_date.isnot(None))
            .all()
        )
        return classify_expiration([row[0] for row in rows], now)

    return run_in_session(
        logger, "expiration_status", _impl, session, sub_recipe_id=str(sub_recipe_id)
    )


# =============================================================================
# Sub-recipe depletion and stock
# =============================================================================


def record_depletion(
    sub_recipe_id: str,
    amount_used_ml: Any,
    production_batch_id: Optional[int] = None,
    notes: Optional[str] = None,
    *,
    session=None,
) -> Dict[str, Any]:
    """
    Record volume drawn from a sub-recipe's produced stock.

    Raises:
        ValidationError: Missing sub-recipe or negative/non-numeric amount
        DatabaseError: If the write fails
    """
    errors = []
    for is_valid, error in (
        validate_required_string(sub_recipe_id, "Sub-recipe"),
        validate_non_negative_number(amount_used_ml, "Amount used"),
        validate_notes(notes),
    ):
        if not is_valid:
            errors.append(error)
    if errors:
        raise ValidationError(errors)

    depletion = SubRecipeDepletion(
        sub_recipe_id=str(sub_recipe_id),
        amount_used_ml=coerce_non_negative(amount_used_ml),
        production_batch_id=production_batch_id,
        notes=notes,
    )

    def _impl(session):
        session.add(depletion)
        session.flush()
        return depletion.to_dict()

    return run_in_session(
        logger, "record_depletion", _impl, session, sub_recipe_id=str(sub_recipe_id)
    )


def delete_depletion(depletion_id: int, *, session=None) -> None:
    """
    Delete a depletion record.

    Raises:
        SubRecipeDepletionNotFound: If no record has this id
    """

    def _impl(session):
        depletion = session.get(SubRecipeDepletion, depletion_id)
        if depletion is None:
            raise SubRecipeDepletionNotFound(depletion_id)
        session.delete(depletion)

    run_in_session(
        logger, "delete_depletion", _impl, session, depletion_id=depletion_id
    )


def total_depleted(sub_recipe_id: str, *, session=None) -> float:
    """Sum of amount_used_ml over all depletions of a sub-recipe."""

    def _impl(session):
        total = (
            session.query(func.coalesce(func.sum(SubRecipeDepletion.amount_used_ml), 0.0))
            .filter(SubRecipeDepletion.sub_recipe_id == str(sub_recipe_id))
            .scalar()
        )
        return float(total or 0.0)

    return run_in_session(
        logger, "total_depleted", _impl, session, sub_recipe_id=str(sub_recipe_id)
    )


def available_stock(sub_recipe_id: str, *, session=None) -> float:
    """Produced minus depleted, floored at 0."""

    def _impl(session):
        produced = total_produced(sub_recipe_id, session=session)
        used = total_depleted(sub_recipe_id, session=session)
        return max(produced - used, 0.0)

    return run_in_session(
        logger, "available_stock", _impl, session, sub_recipe_id=str(sub_recipe_id)
    )


def stock_status(sub_recipe_id: str, total_yield_ml: float, *, session=None) -> StockStatus:
    """
    Stock status of a sub-recipe.

    Args:
        sub_recipe_id: Sub-recipe to check
        total_yield_ml: Volume one batch of it yields (low-stock reference)
        session: Optional database session

    Returns:
        StockStatus.OUT_OF_STOCK, LOW_STOCK or IN_STOCK
    """
    return classify_stock(available_stock(sub_recipe_id, session=session), total_yield_ml)
