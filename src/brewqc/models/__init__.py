"""SQLAlchemy database models for BrewQC."""

from brewqc.models.base import Base, BaseModel
from brewqc.models.recipe import Recipe
from brewqc.models.batch import Batch, BatchStatus
from brewqc.models.user import User
from brewqc.models.quality import QualityCheck

__all__ = [
    # Base
    "Base",
    "BaseModel",
    # Production
    "Recipe",
    "Batch",
    "BatchStatus",
    # Staff
    "User",
    # Quality
    "QualityCheck",
]
