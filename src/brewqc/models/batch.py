"""Production batch database model."""

import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from brewqc.models.base import BaseModel

if TYPE_CHECKING:
    from brewqc.models.quality import QualityCheck
    from brewqc.models.recipe import Recipe


class BatchStatus(str, enum.Enum):
    """Production batch lifecycle status."""

    PLANNED = "planned"
    BREWING = "brewing"
    FERMENTING = "fermenting"
    CONDITIONING = "conditioning"
    PACKAGING = "packaging"
    COMPLETED = "completed"
    QUALITY_HOLD = "quality_hold"


class Batch(BaseModel):
    """
    A single production run of a recipe.

    Gravity readings and the brew date are filled in by the
    production subsystem while the batch ferments.
    """

    __tablename__ = "batches"

    batch_number: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    recipe_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("recipes.id"), index=True
    )
    status: Mapped[BatchStatus] = mapped_column(
        Enum(BatchStatus), default=BatchStatus.PLANNED, index=True
    )
    volume: Mapped[float | None] = mapped_column(Float)

    # Fermentation tracking
    brew_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    original_gravity: Mapped[float | None] = mapped_column(Float)
    final_gravity: Mapped[float | None] = mapped_column(Float)

    notes: Mapped[str | None] = mapped_column(Text)

    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="batches")
    quality_checks: Mapped[list["QualityCheck"]] = relationship(
        "QualityCheck",
        back_populates="batch",
        cascade="all, delete-orphan",
    )
