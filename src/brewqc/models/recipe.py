"""Recipe database model (read-only from the quality service's view)."""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from brewqc.models.base import BaseModel

if TYPE_CHECKING:
    from brewqc.models.batch import Batch


class Recipe(BaseModel):
    """
    Beer recipe master data.

    Only the fermentation targets matter to quality control:
    the target fermentation temperature and the expected
    fermentation length in days.
    """

    __tablename__ = "recipes"

    name: Mapped[str] = mapped_column(String(100), index=True)
    style: Mapped[str] = mapped_column(String(50))
    description: Mapped[str | None] = mapped_column(Text)
    yeast_strain: Mapped[str | None] = mapped_column(String(100))

    # Fermentation targets
    fermentation_temp: Mapped[float] = mapped_column(Float)
    estimated_days: Mapped[int] = mapped_column(Integer, default=14)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    batches: Mapped[list["Batch"]] = relationship("Batch", back_populates="recipe")
