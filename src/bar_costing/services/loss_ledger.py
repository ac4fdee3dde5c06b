"""
Loss Ledger - draft and persisted production losses.

This module provides:
- LossLedger: an in-memory list of draft loss entries edited before a
  batch is submitted
- submit_losses(): persists drafts as LossEntry rows
- Queries and edits over persisted loss entries for the reconciliation view
- Aggregates (total loss, losses by ingredient, summary)

Ingredient names on losses are free text and are not checked against the
recipe or the ingredient matcher.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_

from bar_costing.models import LossEntry, LossReason, ProductionBatch
from bar_costing.services.database import run_in_session
from bar_costing.services.exceptions import (
    LossDraftNotFound,
    LossEntryNotFound,
    ValidationError,
)
from bar_costing.services.logging_utils import get_service_logger, log_operation
from bar_costing.utils.constants import TOP_LOSS_INGREDIENTS
from bar_costing.utils.validators import coerce_non_negative, validate_name, validate_notes

logger = get_service_logger(__name__)

EDITABLE_FIELDS = ("ingredient_name", "loss_amount_ml", "loss_reason", "notes")


def coerce_loss_reason(value: Any) -> LossReason:
    """
    Convert a value to a LossReason.

    Raises:
        ValidationError: If the value is not a known reason
    """
    if isinstance(value, LossReason):
        return value
    try:
        return LossReason(str(value).strip().lower())
    except ValueError:
        raise ValidationError([f"Unknown loss reason: {value!r}"])


# =============================================================================
# Draft Ledger
# =============================================================================


@dataclass
class LossDraft:
    """A loss entry being edited before submission."""

    ingredient_name: str = ""
    loss_amount_ml: float = 0.0
    loss_reason: LossReason = LossReason.SPILLAGE
    notes: str = ""
    draft_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def is_blank(self) -> bool:
        return not self.ingredient_name.strip() and self.loss_amount_ml == 0


class LossLedger:
    """
    In-memory draft list of losses for one batch.

    Amounts are coerced to non-negative floats; a malformed amount becomes 0
    rather than raising. Unknown loss reasons raise ValidationError.

    Example:
        >>> ledger = LossLedger()
        >>> draft = ledger.add("Lime Juice", 50, "spillage")
        >>> ledger.update(draft.draft_id, "loss_amount_ml", 75)
        >>> ledger.total()
        75.0
    """

    def __init__(self):
        self._drafts: List[LossDraft] = []

    def add(
        self,
        ingredient_name: str = "",
        loss_amount_ml: Any = 0,
        loss_reason: Any = LossReason.SPILLAGE,
        notes: str = "",
    ) -> LossDraft:
        """Append a draft and return it."""
        draft = LossDraft(
            ingredient_name=ingredient_name or "",
            loss_amount_ml=coerce_non_negative(loss_amount_ml),
            loss_reason=coerce_loss_reason(loss_reason),
            notes=notes or "",
        )
        self._drafts.append(draft)
        return draft

    def _find(self, draft_id: str) -> LossDraft:
        for draft in self._drafts:
            if draft.draft_id == draft_id:
                return draft
        raise LossDraftNotFound(draft_id)

    def update(self, draft_id: str, field_name: str, value: Any) -> None:
        """
        Change one field of a draft.

        Raises:
            LossDraftNotFound: If no draft has this id
            ValidationError: If the field is not editable or the reason is unknown
        """
        draft = self._find(draft_id)
        if field_name not in EDITABLE_FIELDS:
            raise ValidationError([f"Field '{field_name}' cannot be edited"])

        if field_name == "loss_amount_ml":
            value = coerce_non_negative(value)
        elif field_name == "loss_reason":
            value = coerce_loss_reason(value)
        else:
            value = "" if value is None else str(value)

        setattr(draft, field_name, value)

    def remove(self, draft_id: str) -> None:
        """Remove a draft. Raises LossDraftNotFound if absent."""
        self._drafts.remove(self._find(draft_id))

    def total(self) -> float:
        """Sum of loss_amount_ml over all drafts."""
        return sum(draft.loss_amount_ml for draft in self._drafts)

    def clear(self) -> None:
        self._drafts.clear()

    @property
    def entries(self) -> List[LossDraft]:
        """Drafts in insertion order (a copy)."""
        return list(self._drafts)

    @property
    def is_empty(self) -> bool:
        return not self._drafts

    def __len__(self) -> int:
        return len(self._drafts)


# =============================================================================
# Persistence
# =============================================================================


def loss_entry_to_dict(entry: LossEntry) -> Dict[str, Any]:
    """Convert a LossEntry row to a plain dict for display collaborators."""
    result = entry.to_dict()
    batch = entry.production_batch
    result["sub_recipe_name"] = batch.sub_recipe_name if batch is not None else None
    return result


def _validate_draft(draft: LossDraft) -> None:
    errors = []
    is_valid, error = validate_name(draft.ingredient_name, "Ingredient name")
    if not is_valid:
        errors.append(error)
    is_valid, error = validate_notes(draft.notes)
    if not is_valid:
        errors.append(error)
    if errors:
        raise ValidationError(errors)


def _submit_losses_impl(
    ledger: LossLedger,
    production_batch_id: Optional[int],
    sub_recipe_id: Optional[str],
    recorded_by_user_id: Optional[str],
    session,
) -> List[Dict[str, Any]]:
    drafts = [draft for draft in ledger.entries if not draft.is_blank]
    for draft in drafts:
        _validate_draft(draft)

    rows = []
    for draft in drafts:
        row = LossEntry(
            production_batch_id=production_batch_id,
            sub_recipe_id=sub_recipe_id,
            ingredient_name=draft.ingredient_name.strip(),
            loss_amount_ml=draft.loss_amount_ml,
            loss_reason=draft.loss_reason.value,
            notes=draft.notes or None,
            recorded_by_user_id=recorded_by_user_id,
        )
        session.add(row)
        rows.append(row)
    session.flush()

    return [loss_entry_to_dict(row) for row in rows]


def submit_losses(
    ledger: LossLedger,
    production_batch_id: Optional[int] = None,
    sub_recipe_id: Optional[str] = None,
    recorded_by_user_id: Optional[str] = None,
    *,
    session=None,
) -> List[Dict[str, Any]]:
    """
    Persist a ledger's drafts as LossEntry rows.

    Blank drafts (no ingredient name and no amount) are skipped. When this
    function owns the transaction, the ledger is cleared after commit; with a
    caller-provided session the caller clears it once its transaction
    commits.

    This write is independent of the batch write. If the batch was created
    separately and this call fails, the batch stays; use
    production_ledger.record_production_with_losses() for an atomic write.

    Args:
        ledger: Draft losses
        production_batch_id: Batch the losses belong to
        sub_recipe_id: Sub-recipe the losses belong to
        recorded_by_user_id: Who recorded them
        session: Optional database session

    Returns:
        List of persisted loss entry dicts

    Raises:
        ValidationError: If a non-blank draft has no ingredient name
        DatabaseError: If the write fails (no retry)
    """
    owns_transaction = session is None
    result = run_in_session(
        logger,
        "submit_losses",
        lambda session: _submit_losses_impl(
            ledger, production_batch_id, sub_recipe_id, recorded_by_user_id, session
        ),
        session,
        production_batch_id=production_batch_id,
        sub_recipe_id=sub_recipe_id,
    )
    if owns_transaction:
        ledger.clear()
        log_operation(
            logger,
            operation="submit_losses",
            outcome="recorded",
            production_batch_id=production_batch_id,
            sub_recipe_id=sub_recipe_id,
            entry_count=len(result),
        )
    return result


def get_loss_entry(loss_entry_id: int, *, session=None) -> Dict[str, Any]:
    """
    Get one persisted loss entry.

    Raises:
        LossEntryNotFound: If no entry has this id
    """
    return run_in_session(
        logger,
        "get_loss_entry",
        lambda session: _get_loss_entry_impl(loss_entry_id, session),
        session,
        loss_entry_id=loss_entry_id,
    )


def _get_loss_entry_impl(loss_entry_id: int, session) -> Dict[str, Any]:
    entry = session.get(LossEntry, loss_entry_id)
    if entry is None:
        raise LossEntryNotFound(loss_entry_id)
    return loss_entry_to_dict(entry)


def _loss_query(session, production_batch_id, sub_recipe_id, search):
    query = session.query(LossEntry).outerjoin(
        ProductionBatch, LossEntry.production_batch_id == ProductionBatch.id
    )
    if production_batch_id is not None:
        query = query.filter(LossEntry.production_batch_id == production_batch_id)
    if sub_recipe_id is not None:
        query = query.filter(LossEntry.sub_recipe_id == sub_recipe_id)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(
                LossEntry.ingredient_name.ilike(pattern),
                LossEntry.loss_reason.ilike(pattern),
                LossEntry.notes.ilike(pattern),
                ProductionBatch.sub_recipe_name.ilike(pattern),
            )
        )
    return query


def get_loss_entries(
    production_batch_id: Optional[int] = None,
    sub_recipe_id: Optional[str] = None,
    search: Optional[str] = None,
    *,
    session=None,
) -> List[Dict[str, Any]]:
    """
    List persisted loss entries, newest first.

    Args:
        production_batch_id: Only losses recorded against this batch
        sub_recipe_id: Only losses recorded against this sub-recipe
        search: Case-insensitive text matched against ingredient, reason,
            notes and the batch's sub-recipe name
        session: Optional database session

    Returns:
        List of loss entry dicts
    """
    return run_in_session(
        logger,
        "get_loss_entries",
        lambda session: _get_loss_entries_impl(
            production_batch_id, sub_recipe_id, search, session
        ),
        session,
    )


def _get_loss_entries_impl(production_batch_id, sub_recipe_id, search, session):
    entries = (
        _loss_query(session, production_batch_id, sub_recipe_id, search)
        .order_by(LossEntry.created_at.desc(), LossEntry.id.desc())
        .all()
    )
    return [loss_entry_to_dict(entry) for entry in entries]


def update_loss_entry(loss_entry_id: int, *, session=None, **fields: Any) -> Dict[str, Any]:
    """
    Edit a persisted loss entry.

    Only ingredient_name, loss_amount_ml, loss_reason and notes may change.

    Raises:
        LossEntryNotFound: If no entry has this id
        ValidationError: For other fields or an unknown reason
        DatabaseError: If the write fails
    """
    unknown = [name for name in fields if name not in EDITABLE_FIELDS]
    if unknown:
        raise ValidationError([f"Field '{name}' cannot be edited" for name in unknown])

    changes: Dict[str, Any] = {}
    if "ingredient_name" in fields:
        is_valid, error = validate_name(fields["ingredient_name"], "Ingredient name")
        if not is_valid:
            raise ValidationError([error])
        changes["ingredient_name"] = fields["ingredient_name"].strip()
    if "loss_amount_ml" in fields:
        changes["loss_amount_ml"] = coerce_non_negative(fields["loss_amount_ml"])
    if "loss_reason" in fields:
        changes["loss_reason"] = coerce_loss_reason(fields["loss_reason"]).value
    if "notes" in fields:
        changes["notes"] = fields["notes"] or None

    def _impl(session):
        entry = session.get(LossEntry, loss_entry_id)
        if entry is None:
            raise LossEntryNotFound(loss_entry_id)
        entry.update_from_dict(changes)
        session.flush()
        return loss_entry_to_dict(entry)

    result = run_in_session(
        logger, "update_loss_entry", _impl, session, loss_entry_id=loss_entry_id
    )
    logger.info(f"Updated loss entry {loss_entry_id}: {sorted(changes)}")
    return result


def delete_loss_entry(loss_entry_id: int, *, session=None) -> None:
    """
    Delete a persisted loss entry.

    Raises:
        LossEntryNotFound: If no entry has this id
        DatabaseError: If the delete fails
    """

    def _impl(session):
        entry = session.get(LossEntry, loss_entry_id)
        if entry is None:
            raise LossEntryNotFound(loss_entry_id)
        session.delete(entry)

    run_in_session(logger, "delete_loss_entry", _impl, session, loss_entry_id=loss_entry_id)
    logger.info(f"Deleted loss entry {loss_entry_id}")


# =============================================================================
# Aggregates
# =============================================================================


def get_losses_by_ingredient(search: Optional[str] = None, *, session=None) -> List[Dict[str, Any]]:
    """
    Total loss per ingredient name, largest first.

    Returns:
        List of dicts with ingredient_name, total_loss_ml, count
    """
    return run_in_session(
        logger,
        "get_losses_by_ingredient",
        lambda session: _losses_by_ingredient_impl(search, session),
        session,
    )


def _losses_by_ingredient_impl(search, session):
    rows = (
        _loss_query(session, None, None, search)
        .with_entities(
            LossEntry.ingredient_name,
            func.coalesce(func.sum(LossEntry.loss_amount_ml), 0.0),
            func.count(LossEntry.id),
        )
        .group_by(LossEntry.ingredient_name)
        .all()
    )
    result = [
        {"ingredient_name": name, "total_loss_ml": float(total), "count": count}
        for name, total, count in rows
    ]
    result.sort(key=lambda row: (-row["total_loss_ml"], row["ingredient_name"]))
    return result


def get_loss_summary(search: Optional[str] = None, *, session=None) -> Dict[str, Any]:
    """
    Summary for the loss reconciliation view.

    Returns:
        Dict with keys:
            - total_loss_ml: Sum of all matching losses
            - count: Number of matching entries
            - top_ingredients: Up to five largest ingredients by total loss
            - batch_losses: Entries recorded against a production batch
            - sub_recipe_losses: Entries recorded against a sub-recipe
    """
    return run_in_session(
        logger,
        "get_loss_summary",
        lambda session: _loss_summary_impl(search, session),
        session,
    )


def _loss_summary_impl(search, session):
    entries = _loss_query(session, None, None, search).all()
    return {
        "total_loss_ml": sum(entry.loss_amount_ml or 0.0 for entry in entries),
        "count": len(entries),
        "top_ingredients": _losses_by_ingredient_impl(search, session)[:TOP_LOSS_INGREDIENTS],
        "batch_losses": sum(1 for entry in entries if entry.production_batch_id is not None),
        "sub_recipe_losses": sum(1 for entry in entries if entry.sub_recipe_id is not None),
    }
