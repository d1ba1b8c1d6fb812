"""Quality service for brewery batch inspections."""

import csv
import io
import json
from datetime import datetime, timedelta, timezone

import structlog
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from brewqc.core.config import settings
from brewqc.core.errors import NotFoundError, ValidationError
from brewqc.models.batch import Batch
from brewqc.models.quality import QualityCheck
from brewqc.schemas.quality import (
    CheckParameters,
    CheckTemplate,
    DashboardAlerts,
    DashboardPeriod,
    DashboardSummary,
    ExportFormat,
    QualityChecklist,
    QualityCheckCreate,
    QualityCheckResponse,
    QualityCheckUpdate,
    QualityDashboard,
    QualityMetrics,
    QualityStatistics,
    QualityTrend,
    SensorReadings,
    TemplateCheckCreate,
    TemplateField,
    TrendPoint,
    TypeStatistics,
)
from brewqc.services.quality_analysis import (
    DIMENSION_KEYWORDS,
    as_utc,
    bucket_checks,
    classify_trend,
    days_since,
    dimension_score,
    expected_gravity,
    gravity_accuracy,
    overall_score,
    parse_check_parameters,
    pass_rate,
    read_ph,
)
from brewqc.stores import (
    BatchStore,
    CheckFilter,
    QualityCheckStore,
    SqlBatchStore,
    SqlQualityCheckStore,
    SqlUserStore,
    UserStore,
)

logger = structlog.get_logger()

CHECK_TEMPLATES: dict[str, CheckTemplate] = {
    "visual": CheckTemplate(
        name="Visual Inspection",
        parameters={
            "color": TemplateField(type="text"),
            "clarity": TemplateField(type="select", options=["Clear", "Hazy", "Cloudy"]),
            "foam": TemplateField(type="select", options=["Good", "Fair", "Poor"]),
            "sediment": TemplateField(type="boolean"),
        },
    ),
    "aroma": CheckTemplate(
        name="Aroma Assessment",
        parameters={
            "intensity": TemplateField(type="number", min=1, max=10),
            "character": TemplateField(type="text"),
            "off_flavors": TemplateField(type="boolean"),
            "notes": TemplateField(type="textarea", required=False),
        },
    ),
    "taste": CheckTemplate(
        name="Taste Test",
        parameters={
            "sweetness": TemplateField(type="number", min=1, max=10),
            "bitterness": TemplateField(type="number", min=1, max=10),
            "acidity": TemplateField(type="number", min=1, max=10),
            "balance": TemplateField(type="number", min=1, max=10),
            "finish": TemplateField(type="text"),
            "off_flavors": TemplateField(type="boolean"),
            "overall": TemplateField(type="number", min=1, max=10),
        },
    ),
    "gravity": CheckTemplate(
        name="Gravity Check",
        parameters={
            "specific_gravity": TemplateField(type="number", min=0.990, max=1.200),
            "temperature": TemplateField(type="number", min=32, max=100),
            "corrected_gravity": TemplateField(
                type="number", min=0.990, max=1.200, required=False
            ),
        },
    ),
    "ph": CheckTemplate(
        name="pH Measurement",
        parameters={
            "ph": TemplateField(type="number", min=3.0, max=5.0),
            "temperature": TemplateField(type="number", min=32, max=100),
        },
    ),
    "microbiological": CheckTemplate(
        name="Microbiological Check",
        parameters={
            "wild_yeast": TemplateField(type="boolean"),
            "bacteria": TemplateField(type="boolean"),
            "contamination": TemplateField(type="boolean"),
            "plating_method": TemplateField(type="text"),
            "incubation_days": TemplateField(type="number", min=1, max=14),
        },
    ),
}


class QualityService:
    """Service for quality check, scoring and trend operations."""

    SORTABLE_FIELDS = ("timestamp", "created_at", "check_type", "passed")

    # Automated assessment rules
    TEMPERATURE_TOLERANCE = 2.0  # degrees
    GRAVITY_TOLERANCE = 0.005  # SG
    PH_MIN = 3.8
    PH_MAX = 4.6

    # Checklist candidates
    REQUIRED_CHECKS = (
        "visual_inspection",
        "aroma_assessment",
        "taste_test",
        "final_gravity_check",
    )
    RECOMMENDED_CHECKS = (
        "color_measurement",
        "carbonation_level",
        "clarity_assessment",
        "foam_stability",
    )
    AUTOMATED_CHECKS = (
        "temperature_monitoring",
        "ph_measurement",
        "gravity_tracking",
    )

    PERIOD_DAYS: dict[str, int] = {"day": 1, "week": 7, "month": 30, "quarter": 90}
    CRITICAL_KEYWORDS = ("microbiological", "contamination")

    def __init__(
        self,
        db: AsyncSession,
        batches: BatchStore | None = None,
        users: UserStore | None = None,
        checks: QualityCheckStore | None = None,
    ):
        self.db = db
        self.batches = batches or SqlBatchStore(db)
        self.users = users or SqlUserStore(db)
        self.checks = checks or SqlQualityCheckStore(db)

    # Lookups

    async def _require_batch(self, batch_id: str) -> Batch:
        batch = await self.batches.find_by_id(batch_id)
        if batch is None:
            raise NotFoundError("Batch", batch_id)
        return batch

    async def _require_inspector(self, inspector_id: str) -> None:
        if await self.users.find_by_id(inspector_id) is None:
            raise NotFoundError("User", inspector_id)

    @staticmethod
    def _validate_parameters(check_type: str, parameters: dict | None) -> dict:
        parameters = parameters or {}
        try:
            bag = parse_check_parameters(check_type, parameters)
        except PydanticValidationError as exc:
            raise ValidationError(
                f"Invalid parameters for check type {check_type}: "
                f"{exc.errors()[0]['msg']}",
                field="parameters",
            ) from exc
        # Keep the caller's keys, with typed fields coerced
        return {
            key: value for key, value in bag.model_dump().items() if key in parameters
        }

    # Quality checks

    async def create_check(self, check_data: QualityCheckCreate) -> QualityCheck:
        """Create a quality check for an existing batch and inspector."""
        await self._require_batch(check_data.batch_id)
        await self._require_inspector(check_data.inspector_id)

        check = await self.checks.create(
            batch_id=check_data.batch_id,
            inspector_id=check_data.inspector_id,
            check_type=check_data.check_type,
            passed=check_data.passed,
            parameters=self._validate_parameters(
                check_data.check_type, check_data.parameters
            ),
            notes=check_data.notes,
        )
        logger.info(
            "Quality check created",
            check_id=check.id,
            batch_id=check.batch_id,
            check_type=check.check_type,
            passed=check.passed,
        )
        return check

    async def list_checks(
        self,
        batch_id: str,
        page: int = 1,
        limit: int = 50,
        sort_by: str = "timestamp",
        sort_order: str = "desc",
    ) -> tuple[list[QualityCheck], int]:
        """Get one page of a batch's checks plus the batch's total count."""
        if page < 1:
            raise ValidationError("page must be at least 1", field="page")
        if limit < 1 or limit > settings.max_page_size:
            raise ValidationError(
                f"limit must be between 1 and {settings.max_page_size}", field="limit"
            )
        if sort_by not in self.SORTABLE_FIELDS:
            raise ValidationError(
                f"Cannot sort by {sort_by}; expected one of "
                f"{', '.join(self.SORTABLE_FIELDS)}",
                field="sort_by",
            )
        if sort_order not in ("asc", "desc"):
            raise ValidationError("sort_order must be asc or desc", field="sort_order")

        await self._require_batch(batch_id)

        filters = CheckFilter(batch_id=batch_id)
        checks = await self.checks.find_many(
            filters,
            skip=(page - 1) * limit,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        total = await self.checks.count(filters)
        return checks, total

    async def get_check(self, check_id: str) -> QualityCheck:
        """Get a quality check by ID."""
        check = await self.checks.find_by_id(check_id)
        if check is None:
            raise NotFoundError("QualityCheck", check_id)
        return check

    async def update_check(
        self, check_id: str, update_data: QualityCheckUpdate
    ) -> QualityCheck:
        """
        Merge the explicitly supplied fields into a quality check.

        Notes may be cleared with an explicit null; null is ignored
        for the other fields.
        """
        check = await self.get_check(check_id)

        data = update_data.model_dump(exclude_unset=True)
        values = {
            field: value
            for field, value in data.items()
            if value is not None or field == "notes"
        }
        if "parameters" in values or "check_type" in values:
            values["parameters"] = self._validate_parameters(
                values.get("check_type", check.check_type),
                values.get("parameters", check.parameters),
            )

        check = await self.checks.update(check, values)
        logger.info("Quality check updated", check_id=check_id, fields=sorted(values))
        return check

    async def delete_check(self, check_id: str) -> None:
        """Delete a quality check."""
        check = await self.get_check(check_id)
        await self.checks.delete(check)
        logger.info("Quality check deleted", check_id=check_id)

    # Scoring

    async def compute_metrics(self, batch_id: str) -> QualityMetrics | None:
        """
        Score a batch from its recorded checks.

        Returns None when the batch has no checks yet.
        """
        batch = await self._require_batch(batch_id)
        checks = await self.checks.find_many(
            CheckFilter(batch_id=batch_id), sort_by="timestamp", sort_order="asc"
        )
        if not checks:
            return None

        buckets = bucket_checks(checks)
        visual = dimension_score(buckets["visual"])
        taste = dimension_score(buckets["taste"])
        aroma = dimension_score(buckets["aroma"])

        accuracy = None
        if buckets["gravity"]:
            accuracy = gravity_accuracy(batch.original_gravity, batch.final_gravity)

        ph_level = 0.0
        if buckets["ph"]:
            latest = buckets["ph"][-1]
            ph_level = read_ph(latest.parameters)

        micro = buckets["microbiological"]
        microbiological_pass = all(check.passed for check in micro)

        overall = overall_score(
            [
                (visual, bool(buckets["visual"])),
                (taste, bool(buckets["taste"])),
                (aroma, bool(buckets["aroma"])),
                (accuracy or 0.0, accuracy is not None),
            ],
            mode=settings.quality_score_mode,
        )

        return QualityMetrics(
            batch_id=batch_id,
            overall_score=overall,
            visual_score=visual,
            taste_score=taste,
            aroma_score=aroma,
            gravity_accuracy=accuracy or 0.0,
            ph_level=ph_level,
            microbiological_pass=microbiological_pass,
            notes=[check.notes for check in checks if check.notes],
            check_counts={key: len(buckets[key]) for key in DIMENSION_KEYWORDS},
        )

    async def compute_trends(
        self,
        recipe_id: str | None = None,
        check_type: str | None = None,
        days: int | None = None,
    ) -> list[QualityTrend]:
        """Classify pass/fail trends per check type over a trailing window."""
        days = days if days is not None else settings.default_trend_days
        if days < 1:
            raise ValidationError("days must be at least 1", field="days")

        since = datetime.now(timezone.utc) - timedelta(days=days)
        checks = await self.checks.find_many(
            CheckFilter(recipe_id=recipe_id, check_type=check_type, since=since),
            sort_by="timestamp",
            sort_order="asc",
        )

        grouped: dict[str, list[QualityCheck]] = {}
        for check in checks:
            grouped.setdefault(check.check_type, []).append(check)

        trends = []
        for metric, type_checks in grouped.items():
            values = [
                TrendPoint(
                    date=as_utc(check.timestamp),
                    value=1 if check.passed else 0,
                    batch_id=check.batch_id,
                )
                for check in type_checks
            ]
            trends.append(
                QualityTrend(
                    metric=metric,
                    values=values,
                    trend=classify_trend([point.value for point in values]),
                )
            )
        return trends

    async def get_statistics(self, recipe_id: str | None = None) -> QualityStatistics:
        """Get overall and per check type pass statistics."""
        checks = await self.checks.find_many(
            CheckFilter(recipe_id=recipe_id), sort_by="timestamp", sort_order="asc"
        )

        by_type: dict[str, TypeStatistics] = {}
        for check in checks:
            stats = by_type.setdefault(check.check_type, TypeStatistics())
            stats.total += 1
            if check.passed:
                stats.passed += 1
        for stats in by_type.values():
            stats.pass_rate = pass_rate(stats.passed, stats.total)

        total = len(checks)
        passed = sum(1 for check in checks if check.passed)
        return QualityStatistics(
            total_checks=total,
            passed_checks=passed,
            failed_checks=total - passed,
            pass_rate=pass_rate(passed, total),
            checks_by_type=by_type,
        )

    async def get_failed_checks(self, limit: int = 20) -> list[QualityCheck]:
        """Get the most recent failed checks."""
        if limit < 1 or limit > settings.max_page_size:
            raise ValidationError(
                f"limit must be between 1 and {settings.max_page_size}", field="limit"
            )
        return await self.checks.find_many(
            CheckFilter(passed=False),
            limit=limit,
            sort_by="timestamp",
            sort_order="desc",
        )

    # Automated assessment

    async def run_automated_assessment(
        self, batch_id: str, inspector_id: str, readings: SensorReadings
    ) -> list[QualityCheck]:
        """
        Turn sensor readings into pass/fail checks.

        Temperature, gravity and pH readings each produce one check.
        Turbidity and color are accepted but no rule scores them.
        """
        batch = await self._require_batch(batch_id)
        await self._require_inspector(inspector_id)

        # Read the fermentation context before any check is committed
        target = batch.recipe.fermentation_temp
        estimated_days = batch.recipe.estimated_days
        original_gravity = batch.original_gravity
        brew_date = batch.brew_date

        created: list[QualityCheck] = []

        if readings.temperature is not None:
            deviation = abs(readings.temperature - target)
            passed = deviation <= self.TEMPERATURE_TOLERANCE
            created.append(
                await self.create_check(
                    QualityCheckCreate(
                        batch_id=batch_id,
                        inspector_id=inspector_id,
                        check_type="temperature_automated",
                        passed=passed,
                        parameters={
                            "measured": readings.temperature,
                            "target": target,
                            "deviation": deviation,
                        },
                        notes=(
                            "Temperature within acceptable range"
                            if passed
                            else f"Temperature deviation: {deviation:g} degrees from target"
                        ),
                    )
                )
            )

        if readings.gravity is not None:
            elapsed = days_since(brew_date, datetime.now(timezone.utc))
            expected = expected_gravity(original_gravity, elapsed, estimated_days)
            deviation = abs(readings.gravity - expected)
            passed = deviation <= self.GRAVITY_TOLERANCE
            created.append(
                await self.create_check(
                    QualityCheckCreate(
                        batch_id=batch_id,
                        inspector_id=inspector_id,
                        check_type="gravity_automated",
                        passed=passed,
                        parameters={
                            "measured": readings.gravity,
                            "expected": expected,
                            "deviation": deviation,
                        },
                        notes=(
                            "Gravity within expected range"
                            if passed
                            else f"Gravity deviation: {deviation:.4f} SG from expected"
                        ),
                    )
                )
            )

        if readings.ph is not None:
            passed = self.PH_MIN <= readings.ph <= self.PH_MAX
            acceptable = f"{self.PH_MIN}-{self.PH_MAX}"
            created.append(
                await self.create_check(
                    QualityCheckCreate(
                        batch_id=batch_id,
                        inspector_id=inspector_id,
                        check_type="ph_automated",
                        passed=passed,
                        parameters={
                            "ph": readings.ph,
                            "measured": readings.ph,
                            "acceptable_range": acceptable,
                        },
                        notes=(
                            "pH within acceptable range"
                            if passed
                            else f"pH {readings.ph} outside acceptable range ({acceptable})"
                        ),
                    )
                )
            )

        logger.info(
            "Automated assessment completed",
            batch_id=batch_id,
            checks_created=len(created),
            failed=sum(1 for check in created if not check.passed),
        )
        return created

    async def generate_checklist(self, batch_id: str) -> QualityChecklist:
        """List the inspections a batch still needs."""
        await self._require_batch(batch_id)
        existing = {
            check.check_type
            for check in await self.checks.find_many(CheckFilter(batch_id=batch_id))
        }
        return QualityChecklist(
            required=[t for t in self.REQUIRED_CHECKS if t not in existing],
            recommended=[t for t in self.RECOMMENDED_CHECKS if t not in existing],
            automated=list(self.AUTOMATED_CHECKS),
        )

    # Templates

    def get_templates(self) -> dict[str, CheckTemplate]:
        """Get the inspection templates."""
        return CHECK_TEMPLATES

    @staticmethod
    def _template_passed(template: str, bag: CheckParameters) -> bool:
        values = bag.model_dump()
        if template == "visual":
            return values.get("clarity") == "Clear" and not values.get("sediment")
        if template == "gravity":
            gravity = values.get("specific_gravity")
            return gravity is not None and 0.990 <= gravity <= 1.200
        if template == "ph":
            ph = values.get("ph")
            return ph is not None and QualityService.PH_MIN <= ph <= QualityService.PH_MAX
        if template == "microbiological":
            return not any(
                values.get(key) for key in ("wild_yeast", "bacteria", "contamination")
            )
        # Sensory templates are judged by the inspector
        return True

    async def create_from_template(self, template_data: TemplateCheckCreate) -> QualityCheck:
        """Create a check from a template, deriving pass/fail from its inputs."""
        template = template_data.template
        if template not in CHECK_TEMPLATES:
            raise ValidationError(
                f"Unknown template {template}; expected one of "
                f"{', '.join(CHECK_TEMPLATES)}",
                field="template",
            )

        parameters = self._validate_parameters(template, template_data.parameters)
        passed = self._template_passed(
            template, parse_check_parameters(template, parameters)
        )
        check = await self.create_check(
            QualityCheckCreate(
                batch_id=template_data.batch_id,
                inspector_id=template_data.inspector_id,
                check_type=template,
                passed=passed,
                parameters=parameters,
            )
        )
        logger.info("Template check recorded", template=template, passed=passed)
        return check

    # Reporting

    async def get_dashboard(self, period: DashboardPeriod = "week") -> QualityDashboard:
        """Summarize statistics, trends and recent failures for a period."""
        statistics = await self.get_statistics()
        trends = await self.compute_trends(days=self.PERIOD_DAYS[period])
        failures = await self.get_failed_checks(settings.dashboard_recent_failures)

        critical = [
            check
            for check in failures
            if any(word in check.check_type.lower() for word in self.CRITICAL_KEYWORDS)
        ]
        return QualityDashboard(
            summary=DashboardSummary(**statistics.model_dump(), period=period),
            trends=trends[: settings.dashboard_trend_count],
            recent_failures=[QualityCheckResponse.model_validate(c) for c in failures],
            alerts=DashboardAlerts(
                low_pass_rate=statistics.pass_rate < settings.dashboard_low_pass_rate,
                high_failure_count=(
                    statistics.failed_checks > settings.dashboard_high_failure_count
                ),
                critical_failures=len(critical),
            ),
        )

    async def export_checks(self, batch_id: str, export_format: ExportFormat = "csv") -> str:
        """Render every check of a batch as CSV or JSON text."""
        if export_format not in ("csv", "json"):
            raise ValidationError(
                "Supported export formats: csv, json", field="format"
            )
        await self._require_batch(batch_id)
        checks = await self.checks.find_many(
            CheckFilter(batch_id=batch_id), sort_by="timestamp", sort_order="desc"
        )

        if export_format == "json":
            rows = [
                QualityCheckResponse.model_validate(check).model_dump(mode="json")
                for check in checks
            ]
            return json.dumps(rows, indent=2)

        inspectors = {
            user.id: user.full_name
            for user in await self.users.find_by_ids([c.inspector_id for c in checks])
        }
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(
            ["timestamp", "check_type", "passed", "inspector", "notes", "parameters"]
        )
        for check in checks:
            writer.writerow(
                [
                    as_utc(check.timestamp).isoformat(),
                    check.check_type,
                    "Pass" if check.passed else "Fail",
                    inspectors.get(check.inspector_id, "Unknown"),
                    check.notes or "",
                    json.dumps(check.parameters or {}, sort_keys=True),
                ]
            )
        return buffer.getvalue()
