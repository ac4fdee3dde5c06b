"""
ProductionBatch model for tracking sub-recipe production.

A production batch records one making of a house sub-recipe (syrup,
infusion, pre-batched mix): how much was produced, by whom, when, and when
it expires. Expiration status is never stored here; it is derived from
expiration_date at read time.
"""

from sqlalchemy import (
    Column,
    String,
    Text,
    DateTime,
    Float,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship

from .base import BaseModel
from bar_costing.utils.datetime_utils import utc_now


class ProductionBatch(BaseModel):
    """
    ProductionBatch model for recorded production events.

    Immutable once created except for quantity, expiration and notes.

    Attributes:
        sub_recipe_id: External identifier of the produced sub-recipe
        sub_recipe_name: Display name snapshot of the sub-recipe
        quantity_produced_ml: Volume produced (must be >= 0)
        produced_by_user_id: External identifier of the producer
        produced_by_name: Display name snapshot of the producer
        production_date: When the batch was made
        expiration_date: Optional best-before timestamp
        notes: Optional production notes
        group_id: Optional workspace/team grouping key
    """

    __tablename__ = "production_batches"

    sub_recipe_id = Column(String(64), nullable=False, index=True)
    sub_recipe_name = Column(String(200), nullable=True)

    quantity_produced_ml = Column(Float, nullable=False, default=0.0)

    produced_by_user_id = Column(String(64), nullable=True)
    produced_by_name = Column(String(200), nullable=True)

    production_date = Column(DateTime, nullable=False, default=utc_now)
    expiration_date = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    group_id = Column(String(64), nullable=True, index=True)

    # Loss rows keep their history if the batch is deleted (SET NULL)
    losses = relationship("LossEntry", back_populates="production_batch")
    depletions = relationship("SubRecipeDepletion", back_populates="production_batch")

    __table_args__ = (
        Index("idx_production_batch_expiration", "expiration_date"),
        Index("idx_production_batch_date", "production_date"),
        CheckConstraint(
            "quantity_produced_ml >= 0", name="ck_production_batch_quantity_non_negative"
        ),
    )

    def __repr__(self) -> str:
        """String representation of production batch."""
        return (
            f"ProductionBatch(id={self.id}, sub_recipe_id={self.sub_recipe_id}, "
            f"quantity_produced_ml={self.quantity_produced_ml})"
        )
