"""Quality API endpoints."""

import math

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from brewqc.core.config import settings
from brewqc.db import get_db
from brewqc.schemas.common import Message, PaginatedResponse
from brewqc.schemas.quality import (
    AutomatedAssessmentRequest,
    CheckTemplate,
    DashboardPeriod,
    ExportFormat,
    QualityChecklist,
    QualityCheckCreate,
    QualityCheckResponse,
    QualityCheckUpdate,
    QualityDashboard,
    QualityMetrics,
    QualityStatistics,
    QualityTrend,
    SortOrder,
    TemplateCheckCreate,
)
from brewqc.services.quality_service import QualityService

router = APIRouter()


def get_quality_service(db: AsyncSession = Depends(get_db)) -> QualityService:
    """Dependency for quality service."""
    return QualityService(db)


# Quality checks


@router.post(
    "/checks",
    response_model=QualityCheckResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_check(
    check_data: QualityCheckCreate,
    service: QualityService = Depends(get_quality_service),
) -> QualityCheckResponse:
    """
    Record a quality check.

    The batch and the inspector must both exist.
    """
    check = await service.create_check(check_data)
    return QualityCheckResponse.model_validate(check)


@router.post(
    "/checks/automated",
    response_model=list[QualityCheckResponse],
    status_code=status.HTTP_201_CREATED,
)
async def run_automated_assessment(
    request: AutomatedAssessmentRequest,
    service: QualityService = Depends(get_quality_service),
) -> list[QualityCheckResponse]:
    """
    Assess a batch from sensor readings.

    Creates one check per temperature, gravity or pH reading supplied.
    """
    checks = await service.run_automated_assessment(
        request.batch_id, request.inspector_id, request.sensor_data
    )
    return [QualityCheckResponse.model_validate(c) for c in checks]


@router.post(
    "/checks/from-template",
    response_model=QualityCheckResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_from_template(
    template_data: TemplateCheckCreate,
    service: QualityService = Depends(get_quality_service),
) -> QualityCheckResponse:
    """Record a check from an inspection template."""
    check = await service.create_from_template(template_data)
    return QualityCheckResponse.model_validate(check)


@router.get("/checks/failed", response_model=list[QualityCheckResponse])
async def list_failed_checks(
    limit: int = Query(20, ge=1, le=settings.max_page_size),
    service: QualityService = Depends(get_quality_service),
) -> list[QualityCheckResponse]:
    """Get the most recent failed checks."""
    checks = await service.get_failed_checks(limit)
    return [QualityCheckResponse.model_validate(c) for c in checks]


@router.get("/checks/{check_id}", response_model=QualityCheckResponse)
async def get_check(
    check_id: str,
    service: QualityService = Depends(get_quality_service),
) -> QualityCheckResponse:
    """Get a quality check by ID."""
    check = await service.get_check(check_id)
    return QualityCheckResponse.model_validate(check)


@router.patch("/checks/{check_id}", response_model=QualityCheckResponse)
async def update_check(
    check_id: str,
    update_data: QualityCheckUpdate,
    service: QualityService = Depends(get_quality_service),
) -> QualityCheckResponse:
    """Update the supplied fields of a quality check."""
    check = await service.update_check(check_id, update_data)
    return QualityCheckResponse.model_validate(check)


@router.delete("/checks/{check_id}", response_model=Message)
async def delete_check(
    check_id: str,
    service: QualityService = Depends(get_quality_service),
) -> Message:
    """Delete a quality check."""
    await service.delete_check(check_id)
    return Message(message=f"Quality check {check_id} deleted successfully")


# Batch views


@router.get(
    "/batches/{batch_id}/checks",
    response_model=PaginatedResponse[QualityCheckResponse],
)
async def list_batch_checks(
    batch_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=settings.max_page_size),
    sort_by: str = Query("timestamp"),
    sort_order: SortOrder = Query("desc"),
    service: QualityService = Depends(get_quality_service),
) -> PaginatedResponse[QualityCheckResponse]:
    """Get a page of a batch's quality checks."""
    checks, total = await service.list_checks(
        batch_id, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order
    )
    return PaginatedResponse[QualityCheckResponse](
        items=[QualityCheckResponse.model_validate(c) for c in checks],
        total=total,
        page=page,
        page_size=limit,
        pages=math.ceil(total / limit),
    )


@router.get("/batches/{batch_id}/metrics", response_model=QualityMetrics | None)
async def get_batch_metrics(
    batch_id: str,
    service: QualityService = Depends(get_quality_service),
) -> QualityMetrics | None:
    """
    Get quality scores for a batch.

    Returns null when nothing has been inspected yet.
    """
    return await service.compute_metrics(batch_id)


@router.get("/batches/{batch_id}/checklist", response_model=QualityChecklist)
async def get_batch_checklist(
    batch_id: str,
    service: QualityService = Depends(get_quality_service),
) -> QualityChecklist:
    """Get the inspections still outstanding for a batch."""
    return await service.generate_checklist(batch_id)


@router.get("/batches/{batch_id}/export")
async def export_batch_checks(
    batch_id: str,
    format: ExportFormat = Query("csv"),
    service: QualityService = Depends(get_quality_service),
) -> Response:
    """Download every check of a batch as CSV or JSON."""
    content = await service.export_checks(batch_id, format)
    media_type = "text/csv" if format == "csv" else "application/json"
    return Response(
        content=content,
        media_type=media_type,
        headers={
            "Content-Disposition": (
                f'attachment; filename="quality-checks-{batch_id}.{format}"'
            )
        },
    )


# Reports


@router.get("/trends", response_model=list[QualityTrend])
async def get_trends(
    recipe_id: str | None = None,
    check_type: str | None = None,
    days: int = Query(settings.default_trend_days, ge=1, le=365),
    service: QualityService = Depends(get_quality_service),
) -> list[QualityTrend]:
    """
    Get pass/fail trends per check type.

    Supports filtering by recipe and check type.
    """
    return await service.compute_trends(recipe_id, check_type, days)


@router.get("/statistics", response_model=QualityStatistics)
async def get_statistics(
    recipe_id: str | None = None,
    service: QualityService = Depends(get_quality_service),
) -> QualityStatistics:
    """Get pass statistics, optionally for one recipe."""
    return await service.get_statistics(recipe_id)


@router.get("/dashboard", response_model=QualityDashboard)
async def get_dashboard(
    period: DashboardPeriod = Query("week"),
    service: QualityService = Depends(get_quality_service),
) -> QualityDashboard:
    """Get the quality dashboard for a period."""
    return await service.get_dashboard(period)


@router.get("/templates", response_model=dict[str, CheckTemplate])
async def get_templates(
    service: QualityService = Depends(get_quality_service),
) -> dict[str, CheckTemplate]:
    """Get the inspection templates."""
    return service.get_templates()
