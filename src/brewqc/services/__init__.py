"""Business logic services for BrewQC."""

from brewqc.services.quality_service import CHECK_TEMPLATES, QualityService

__all__ = [
    "QualityService",
    "CHECK_TEMPLATES",
]
