"""SubRecipeDepletion model: volume of a produced sub-recipe used up."""

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Float,
    ForeignKey,
    CheckConstraint,
)
from sqlalchemy.orm import relationship

from .base import BaseModel


class SubRecipeDepletion(BaseModel):
    """
    Records consumption of a sub-recipe's produced stock.

    Available stock of a sub-recipe is total produced minus total depleted.

    Attributes:
        sub_recipe_id: Sub-recipe whose stock was used
        amount_used_ml: Volume drawn down (must be >= 0)
        production_batch_id: Optional batch that consumed it (e.g. a cocktail batch)
        notes: Optional details
    """

    __tablename__ = "sub_recipe_depletions"

    sub_recipe_id = Column(String(64), nullable=False, index=True)
    amount_used_ml = Column(Float, nullable=False, default=0.0)
    production_batch_id = Column(
        Integer,
        ForeignKey("production_batches.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    notes = Column(Text, nullable=True)

    production_batch = relationship("ProductionBatch", back_populates="depletions")

    __table_args__ = (
        CheckConstraint("amount_used_ml >= 0", name="ck_sub_recipe_depletion_amount_non_negative"),
    )
