"""Pydantic schemas for quality checks and derived quality reports."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

TrendDirection = Literal["improving", "declining", "stable"]
SortOrder = Literal["asc", "desc"]
DashboardPeriod = Literal["day", "week", "month", "quarter"]
ExportFormat = Literal["csv", "json"]


# Parameter bags


class CheckParameters(BaseModel):
    """Opaque parameter bag for check types without a known shape."""

    model_config = ConfigDict(extra="allow")


class TemperatureParameters(CheckParameters):
    """Parameters recorded by temperature checks."""

    measured: float | None = None
    target: float | None = None
    deviation: float | None = None


class GravityParameters(CheckParameters):
    """Parameters recorded by specific-gravity checks."""

    measured: float | None = None
    expected: float | None = None
    deviation: float | None = None
    specific_gravity: float | None = None


class PhParameters(CheckParameters):
    """Parameters recorded by pH checks."""

    ph: float | None = None
    measured: float | None = None
    acceptable_range: str | None = None


# Quality checks


class QualityCheckBase(BaseModel):
    """Base schema for quality checks."""

    check_type: str = Field(..., min_length=2, max_length=50)
    passed: bool
    parameters: dict[str, Any]
    notes: str | None = Field(None, max_length=1000)


class QualityCheckCreate(QualityCheckBase):
    """Schema for creating a quality check."""

    batch_id: str
    inspector_id: str


class QualityCheckUpdate(BaseModel):
    """Schema for partially updating a quality check."""

    check_type: str | None = Field(None, min_length=2, max_length=50)
    passed: bool | None = None
    parameters: dict[str, Any] | None = None
    notes: str | None = Field(None, max_length=1000)


class QualityCheckResponse(QualityCheckBase):
    """Response schema for quality checks."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    batch_id: str
    inspector_id: str
    timestamp: datetime
    created_at: datetime


class SensorReadings(BaseModel):
    """Sensor values submitted for automated assessment."""

    temperature: float | None = None
    gravity: float | None = Field(None, gt=0)
    ph: float | None = Field(None, ge=0, le=14)
    turbidity: float | None = Field(None, ge=0)
    color: float | None = Field(None, ge=0)


class AutomatedAssessmentRequest(BaseModel):
    """Request body for an automated assessment run."""

    batch_id: str
    inspector_id: str
    sensor_data: SensorReadings


class TemplateCheckCreate(BaseModel):
    """Request body for creating a check from an inspection template."""

    template: str
    batch_id: str
    inspector_id: str
    parameters: dict[str, Any]


# Templates


class TemplateField(BaseModel):
    """Descriptor of one input on an inspection template."""

    type: Literal["text", "textarea", "number", "select", "boolean"]
    required: bool = True
    min: float | None = None
    max: float | None = None
    options: list[str] | None = None


class CheckTemplate(BaseModel):
    """Inspection template shown to inspectors."""

    name: str
    parameters: dict[str, TemplateField]


# Derived reports


class QualityMetrics(BaseModel):
    """Quality score snapshot for one batch."""

    batch_id: str
    overall_score: float
    visual_score: float
    taste_score: float
    aroma_score: float
    gravity_accuracy: float
    ph_level: float
    microbiological_pass: bool
    notes: list[str]
    check_counts: dict[str, int]


class TrendPoint(BaseModel):
    """Single pass (1) / fail (0) observation."""

    date: datetime
    value: int
    batch_id: str


class QualityTrend(BaseModel):
    """Pass/fail history and trend for one check type."""

    metric: str
    values: list[TrendPoint]
    trend: TrendDirection


class TypeStatistics(BaseModel):
    """Pass statistics for one check type."""

    total: int = 0
    passed: int = 0
    pass_rate: float = 0.0


class QualityStatistics(BaseModel):
    """Aggregate pass statistics."""

    total_checks: int
    passed_checks: int
    failed_checks: int
    pass_rate: float
    checks_by_type: dict[str, TypeStatistics]


class QualityChecklist(BaseModel):
    """Outstanding inspections for a batch."""

    required: list[str]
    recommended: list[str]
    automated: list[str]


class DashboardSummary(QualityStatistics):
    """Statistics block of the quality dashboard."""

    period: DashboardPeriod


class DashboardAlerts(BaseModel):
    """Alert flags raised on the quality dashboard."""

    low_pass_rate: bool
    high_failure_count: bool
    critical_failures: int


class QualityDashboard(BaseModel):
    """Quality dashboard payload."""

    summary: DashboardSummary
    trends: list[QualityTrend]
    recent_failures: list[QualityCheckResponse]
    alerts: DashboardAlerts
