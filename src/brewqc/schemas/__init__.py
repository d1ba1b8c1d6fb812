"""Pydantic schemas for API request/response validation."""

from brewqc.schemas.common import (
    ErrorResponse,
    HealthCheck,
    Message,
    PaginatedResponse,
)
from brewqc.schemas.quality import (
    AutomatedAssessmentRequest,
    CheckParameters,
    CheckTemplate,
    DashboardAlerts,
    DashboardSummary,
    GravityParameters,
    PhParameters,
    QualityChecklist,
    QualityCheckCreate,
    QualityCheckResponse,
    QualityCheckUpdate,
    QualityDashboard,
    QualityMetrics,
    QualityStatistics,
    QualityTrend,
    SensorReadings,
    TemperatureParameters,
    TemplateCheckCreate,
    TemplateField,
    TrendPoint,
    TypeStatistics,
)

__all__ = [
    # Common
    "ErrorResponse",
    "HealthCheck",
    "Message",
    "PaginatedResponse",
    # Quality checks
    "QualityCheckCreate",
    "QualityCheckUpdate",
    "QualityCheckResponse",
    "AutomatedAssessmentRequest",
    "SensorReadings",
    "TemplateCheckCreate",
    # Parameter bags
    "CheckParameters",
    "TemperatureParameters",
    "GravityParameters",
    "PhParameters",
    # Templates
    "CheckTemplate",
    "TemplateField",
    # Reports
    "QualityMetrics",
    "QualityTrend",
    "TrendPoint",
    "QualityStatistics",
    "TypeStatistics",
    "QualityChecklist",
    "QualityDashboard",
    "DashboardSummary",
    "DashboardAlerts",
]
