"""Quality check database model."""

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from brewqc.models.base import BaseModel, utcnow

if TYPE_CHECKING:
    from brewqc.models.batch import Batch
    from brewqc.models.user import User


class QualityCheck(BaseModel):
    """
    One inspection event against a batch.

    Created by an inspector or by the automated assessment.
    The parameter bag is free-form JSON whose shape depends
    on the check type.
    """

    __tablename__ = "quality_checks"

    batch_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("batches.id", ondelete="CASCADE"), index=True
    )
    inspector_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), index=True
    )

    check_type: Mapped[str] = mapped_column(String(50), index=True)
    passed: Mapped[bool] = mapped_column(Boolean, index=True)
    parameters: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    notes: Mapped[str | None] = mapped_column(Text)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )

    batch: Mapped["Batch"] = relationship("Batch", back_populates="quality_checks")
    inspector: Mapped["User"] = relationship("User")
