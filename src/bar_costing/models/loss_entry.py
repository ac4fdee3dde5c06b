"""
LossEntry model for recorded production losses.

Loss entries start as client-side drafts (see services.loss_ledger) and
become rows here when submitted with a batch. The referenced ingredient is
free text and is not validated against the recipe.
"""

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Float,
    ForeignKey,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship

from .base import BaseModel


class LossEntry(BaseModel):
    """
    LossEntry model for durable loss records.

    The production_batch_id uses SET NULL on delete to preserve loss
    records for reconciliation even if the batch is deleted.

    Attributes:
        production_batch_id: FK to ProductionBatch (nullable for audit trail)
        sub_recipe_id: Sub-recipe the loss relates to, when recorded against one
        ingredient_name: Free-text ingredient name
        loss_amount_ml: Volume lost (must be >= 0)
        loss_reason: LossReason value
        notes: Optional details
        expected_yield_ml: Expected sub-recipe yield, for yield shortfall losses
        actual_yield_ml: Actual sub-recipe yield, for yield shortfall losses
        recorded_by_user_id: External identifier of whoever recorded it
    """

    __tablename__ = "loss_entries"

    production_batch_id = Column(
        Integer,
        ForeignKey("production_batches.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    sub_recipe_id = Column(String(64), nullable=True, index=True)

    ingredient_name = Column(String(200), nullable=False, default="")
    loss_amount_ml = Column(Float, nullable=False, default=0.0)
    loss_reason = Column(String(30), nullable=False, default="other")
    notes = Column(Text, nullable=True)

    expected_yield_ml = Column(Float, nullable=True)
    actual_yield_ml = Column(Float, nullable=True)
    recorded_by_user_id = Column(String(64), nullable=True)

    production_batch = relationship("ProductionBatch", back_populates="losses")

    __table_args__ = (
        Index("idx_loss_entry_reason", "loss_reason"),
        Index("idx_loss_entry_created", "created_at"),
        CheckConstraint("loss_amount_ml >= 0", name="ck_loss_entry_amount_non_negative"),
    )

    def __repr__(self) -> str:
        """String representation of loss entry."""
        return (
            f"LossEntry(id={self.id}, production_batch_id={self.production_batch_id}, "
            f"reason={self.loss_reason}, amount_ml={self.loss_amount_ml})"
        )
