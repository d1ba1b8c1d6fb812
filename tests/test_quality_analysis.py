from types import SimpleNamespace

import pytest

from brewqc.schemas.quality import (
    CheckParameters,
    GravityParameters,
    PhParameters,
    TemperatureParameters,
)
from brewqc.services.quality_analysis import (
    bucket_checks,
    classify_dimension,
    classify_trend,
    dimension_score,
    expected_gravity,
    gravity_accuracy,
    overall_score,
    parameter_shape,
    parse_check_parameters,
    pass_rate,
    read_ph,
)


def _check(check_type, passed=True):
    return SimpleNamespace(check_type=check_type, passed=passed)


def test_classify_dimension_is_case_insensitive():
    assert classify_dimension("Visual_Inspection") == "visual"
    assert classify_dimension("FINAL_GRAVITY_CHECK") == "gravity"
    assert classify_dimension("ph_automated") == "ph"
    assert classify_dimension("temperature_automated") is None


def test_classify_dimension_first_keyword_wins():
    assert classify_dimension("visual_taste_panel") == "visual"
    assert classify_dimension("aroma_and_taste") == "taste"


def test_bucket_checks_drops_unmatched_labels():
    buckets = bucket_checks(
        [_check("visual_inspection"), _check("carbonation_level"), _check("taste_test")]
    )
    assert len(buckets["visual"]) == 1
    assert len(buckets["taste"]) == 1
    assert sum(len(b) for b in buckets.values()) == 2


def test_dimension_score():
    assert dimension_score([]) == 0.0
    assert dimension_score([_check("a", True), _check("a", False)]) == pytest.approx(50.0)
    assert dimension_score([_check("a", False)]) == 0.0


def test_pass_rate_rounds_to_two_decimals():
    assert pass_rate(1, 3) == 33.33
    assert pass_rate(2, 3) == 66.67
    assert pass_rate(0, 0) == 0.0


def test_gravity_accuracy_uses_quarter_of_original_gravity():
    assert gravity_accuracy(60.0, 15.0) == pytest.approx(100.0)
    assert gravity_accuracy(60.0, 12.0) == pytest.approx(80.0)
    assert gravity_accuracy(1.050, 1.010) == 0.0
    assert gravity_accuracy(None, 1.010) is None
    assert gravity_accuracy(1.050, None) is None


def test_expected_gravity_follows_attenuation_progress():
    assert expected_gravity(1.060, 0, 14) == pytest.approx(1.060)
    assert expected_gravity(1.060, 7, 14) == pytest.approx(1.060 - 1.060 * 0.75 * 0.5)
    # Progress is capped once the estimated days have passed
    assert expected_gravity(1.060, 30, 14) == pytest.approx(1.060 * 0.25)
    assert expected_gravity(None, 7, 14) == 1.000


def test_overall_score_legacy_ignores_zero_scores():
    scores = [(50.0, True), (0.0, True), (0.0, False), (80.0, True)]
    assert overall_score(scores) == 65.0


def test_overall_score_strict_counts_failed_dimensions():
    scores = [(50.0, True), (0.0, True), (0.0, False), (80.0, True)]
    assert overall_score(scores, mode="strict") == pytest.approx(43.33)


def test_overall_score_without_data():
    assert overall_score([(0.0, False), (0.0, False)]) == 0.0


def test_classify_trend_needs_three_points():
    assert classify_trend([]) == "stable"
    assert classify_trend([0, 1]) == "stable"


def test_classify_trend_without_earlier_window_is_stable():
    assert classify_trend([0, 0, 1, 1, 1]) == "stable"


def test_classify_trend_improving_with_overlapping_windows():
    # Last five average 1.0, the three before them average 0.0
    assert classify_trend([0, 0, 0, 1, 1, 1, 1, 1]) == "improving"


def test_classify_trend_declining():
    assert classify_trend([1, 1, 1, 1, 1, 1, 0, 0, 0, 0]) == "declining"


def test_classify_trend_small_difference_is_stable():
    assert classify_trend([1, 1, 1, 1, 1, 1, 1, 1, 1, 1]) == "stable"
    assert classify_trend([1, 0, 0, 0, 0, 1, 0, 0, 0, 0]) == "stable"


def test_classify_trend_only_uses_last_ten_points():
    values = [0] * 20 + [1] * 10
    assert classify_trend(values) == "stable"


def test_parameter_shape_by_keyword():
    assert parameter_shape("temperature_automated") is TemperatureParameters
    assert parameter_shape("final_gravity_check") is GravityParameters
    assert parameter_shape("ph_measurement") is PhParameters
    assert parameter_shape("visual_inspection") is CheckParameters


def test_parse_check_parameters_keeps_unknown_keys():
    bag = parse_check_parameters("ph_manual", {"ph": "4.2", "meter": "A1"})
    assert bag.ph == 4.2
    assert bag.model_dump()["meter"] == "A1"


def test_parse_check_parameters_rejects_bad_types():
    with pytest.raises(ValueError):
        parse_check_parameters("ph_manual", {"ph": "sour"})


def test_read_ph_tolerates_unparseable_values():
    assert read_ph({"ph": 4.2}) == 4.2
    assert read_ph({"ph": "4.4"}) == 4.4
    assert read_ph({"ph": "about 4"}) == 0.0
    assert read_ph({"ph": None}) == 0.0
    assert read_ph({}) == 0.0
    assert read_ph(None) == 0.0
