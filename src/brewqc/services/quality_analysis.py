"""
Quality scoring and trend classification rules.

Pure functions shared by the quality service:
- Dimension bucketing of check types
- Pass-rate and gravity accuracy scores
- Attenuation-based gravity expectation
- Moving-window trend classification
- Typed reading of check parameter bags
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import Any, Protocol

import numpy as np

from brewqc.schemas.quality import (
    CheckParameters,
    GravityParameters,
    PhParameters,
    TemperatureParameters,
    TrendDirection,
)

# Order decides the dimension of labels containing several keywords
DIMENSION_KEYWORDS: tuple[str, ...] = (
    "visual",
    "taste",
    "aroma",
    "gravity",
    "ph",
    "microbiological",
)

PARAMETER_SHAPES: tuple[tuple[str, type[CheckParameters]], ...] = (
    ("temperature", TemperatureParameters),
    ("gravity", GravityParameters),
    ("ph", PhParameters),
)

# Simplified attenuation targets, not brewing-accurate
FINAL_GRAVITY_RATIO = 0.25
EXPECTED_ATTENUATION = 0.75

TREND_RECENT_WINDOW = 5
TREND_HISTORY_WINDOW = 10
TREND_MIN_POINTS = 3
TREND_THRESHOLD = 0.1


class _Check(Protocol):
    check_type: str
    passed: bool


def classify_dimension(check_type: str) -> str | None:
    """Return the score dimension of a check type, or None."""
    label = check_type.lower()
    for keyword in DIMENSION_KEYWORDS:
        if keyword in label:
            return keyword
    return None


def bucket_checks(checks: Iterable[_Check]) -> dict[str, list]:
    """Partition checks by dimension. Unmatched labels are dropped."""
    buckets: dict[str, list] = {keyword: [] for keyword in DIMENSION_KEYWORDS}
    for check in checks:
        dimension = classify_dimension(check.check_type)
        if dimension is not None:
            buckets[dimension].append(check)
    return buckets


def pass_rate(passed: int, total: int) -> float:
    """Percentage of passed checks, rounded to 2 decimals."""
    if total == 0:
        return 0.0
    return round(passed / total * 100, 2)


def dimension_score(checks: Sequence[_Check]) -> float:
    """Unrounded pass percentage of a bucket; 0 when empty."""
    if not checks:
        return 0.0
    passed = sum(1 for check in checks if check.passed)
    return passed / len(checks) * 100


def gravity_accuracy(
    original_gravity: float | None, final_gravity: float | None
) -> float | None:
    """
    Closeness of the final gravity to the simplified target.

    The target final gravity is a fixed fraction of the original
    gravity. Returns None when either reading is missing.
    """
    if not original_gravity or not final_gravity:
        return None
    expected = original_gravity * FINAL_GRAVITY_RATIO
    deviation = abs(expected - final_gravity)
    return max(0.0, (1 - deviation / expected) * 100)


def expected_gravity(
    original_gravity: float | None, days_elapsed: int, estimated_days: int
) -> float:
    """Gravity expected after days_elapsed of a linear fermentation."""
    if not original_gravity:
        return 1.000
    progress = min(days_elapsed / estimated_days, 1) if estimated_days > 0 else 1
    return original_gravity - (original_gravity * EXPECTED_ATTENUATION * progress)


def overall_score(scores: Sequence[tuple[float, bool]], mode: str = "legacy") -> float:
    """
    Mean of dimension scores, rounded to 2 decimals.

    Each entry is (score, has_data). Legacy mode ignores every zero
    score, strict mode ignores only entries without data.
    """
    if mode == "strict":
        included = [score for score, has_data in scores if has_data]
    else:
        included = [score for score, _ in scores if score > 0]
    if not included:
        return 0.0
    return round(sum(included) / len(included), 2)


def classify_trend(values: Sequence[int]) -> TrendDirection:
    """
    Compare the latest window of pass values with the one before it.

    Fewer than three points is always stable.
    """
    if len(values) < TREND_MIN_POINTS:
        return "stable"

    recent = values[-TREND_RECENT_WINDOW:]
    earlier = values[-TREND_HISTORY_WINDOW:-TREND_RECENT_WINDOW]
    if not recent or not earlier:
        return "stable"

    difference = float(np.mean(recent) - np.mean(earlier))
    if difference > TREND_THRESHOLD:
        return "improving"
    if difference < -TREND_THRESHOLD:
        return "declining"
    return "stable"


def parameter_shape(check_type: str) -> type[CheckParameters]:
    """Parameter model used for a check type."""
    label = check_type.lower()
    for keyword, shape in PARAMETER_SHAPES:
        if keyword in label:
            return shape
    return CheckParameters


def parse_check_parameters(check_type: str, raw: dict[str, Any] | None) -> CheckParameters:
    """Validate a parameter bag against the shape of its check type."""
    return parameter_shape(check_type).model_validate(raw or {})


def read_ph(parameters: dict[str, Any] | None) -> float:
    """pH recorded in a parameter bag; 0 when missing or not numeric."""
    value = (parameters or {}).get("ph")
    if isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes read back from the database as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_since(start: datetime | None, now: datetime) -> int:
    """Whole days elapsed since start; 0 when start is unknown."""
    if start is None:
        return 0
    return max((now - as_utc(start)).days, 0)
