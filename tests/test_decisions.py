from dataclasses import replace

import pytest

from analysis.decisions import (
    Confidence,
    Priority,
    Rating,
    build_recommendations,
    confidence_for,
    generate_verdict,
    priority_for_distance,
    rating_for_score,
    score_components,
)
from analysis.narratives import DEFAULT_NARRATIVES
from core.schema import DistributionStats, PercentileSet, SensitivityFactor

FACTORS = (
    SensitivityFactor("pricing_power", "Pricing Power", 0.6, "positive"),
    SensitivityFactor("execution_risk", "Execution Risk", -0.4, "negative"),
    SensitivityFactor("demand_strength", "Demand Strength", 0.2, "positive"),
    SensitivityFactor("operating_drag", "Operating Drag", -0.1, "negative"),
)


@pytest.mark.parametrize(
    "score, rating",
    [(100, Rating.EXCEPTIONAL), (85, Rating.EXCEPTIONAL), (84.9, Rating.STRONG),
     (70, Rating.STRONG), (69, Rating.STABLE), (55, Rating.STABLE),
     (54, Rating.CAUTION), (40, Rating.CAUTION), (39, Rating.CRITICAL), (0, Rating.CRITICAL)],
)
def test_rating_thresholds(score, rating):
    assert rating_for_score(score) is rating


def test_rating_is_monotone_in_score():
    ratings = [rating_for_score(s) for s in range(0, 101)]
    assert all(a <= b for a, b in zip(ratings, ratings[1:]))
    assert Rating.CRITICAL < Rating.CAUTION < Rating.STABLE < Rating.STRONG < Rating.EXCEPTIONAL
    assert max(Rating) is Rating.EXCEPTIONAL


def test_priority_bands():
    assert priority_for_distance(0.5) is Priority.CRITICAL
    assert priority_for_distance(0.3) is Priority.HIGH
    assert priority_for_distance(0.1) is Priority.MEDIUM
    assert priority_for_distance(0.05) is Priority.LOW


def test_confidence_levels():
    assert confidence_for(10_000, 0.2) is Confidence.HIGH
    assert confidence_for(10_000, 0.4) is Confidence.MEDIUM
    assert confidence_for(5_000, 0.1) is Confidence.MEDIUM
    assert confidence_for(4_999, 0.1) is Confidence.LOW
    assert confidence_for(20_000, float("inf")) is Confidence.LOW


def test_score_components_by_hand(small_result):
    result = replace(
        small_result,
        survival_rate=1.0,
        arr_percentiles=PercentileSet(4.0e6, 4.2e6, 4.5e6, 4.8e6, 5.2e6, 6.0e6, 6.5e6),
        arr_distribution=DistributionStats(5.0e6, 4.8e6, 0.0, 4.0e6, 6.5e6, 0.0),
        runway_percentiles=PercentileSet(36.0, 36.0, 36.0, 36.0, 40.0, 50.0, 60.0),
    )
    breakdown = score_components(result)
    assert breakdown.survival == 100.0
    assert breakdown.growth == 50.0
    assert breakdown.headroom == 25.0
    assert breakdown.runway == 100.0
    assert breakdown.consistency == 100.0
    assert breakdown.total == 80
    assert generate_verdict(result).overall_rating is Rating.STRONG


def test_non_positive_mean_gives_no_consistency(small_result):
    result = replace(small_result, arr_distribution=DistributionStats(0.0, 0.0, 1.0, -1.0, 1.0, 0.0))
    assert score_components(result).consistency == 0.0
    assert generate_verdict(result).confidence_level is Confidence.LOW


def test_verdict_is_deterministic_and_bounded(small_result):
    a = generate_verdict(small_result)
    assert a == generate_verdict(small_result)
    assert 0 <= a.overall_score <= 100
    assert a.overall_rating is rating_for_score(a.overall_score)


def test_no_factors_falls_back(small_result):
    verdict = generate_verdict(replace(small_result, sensitivity_factors=()))
    assert verdict.critical_lever == "Balanced execution"
    assert verdict.top_drivers == ()
    assert verdict.risk_mitigation == DEFAULT_NARRATIVES.mitigation_fallback


def test_factors_drive_lever_fields(small_result):
    verdict = generate_verdict(replace(small_result, sensitivity_factors=FACTORS))
    assert verdict.critical_lever == "Pricing Power"
    assert len(verdict.top_drivers) == 3
    assert verdict.top_drivers[0].startswith("1. Pricing Power")
    assert "pricing power" in verdict.risk_mitigation


def test_recommendations_ranked_by_distance(small_result):
    result = replace(small_result, survival_rate=0.2, sensitivity_factors=FACTORS)
    recs = build_recommendations(result)
    assert 1 <= len(recs) <= 4
    distances = [r.distance for r in recs]
    assert distances == sorted(distances, reverse=True)
    burn = [r for r in recs if r.action.startswith("Reduce monthly burn")]
    assert burn and burn[0].priority is Priority.CRITICAL
    assert burn[0].distance == pytest.approx(0.5 / 0.7)


def test_low_survival_is_primary_risk(small_result):
    verdict = generate_verdict(replace(small_result, survival_rate=0.3))
    assert verdict.primary_risk == DEFAULT_NARRATIVES.primary_risks["cash_depletion"]


def _healthy(result, factors):
    return replace(
        result,
        survival_rate=0.9,
        arr_distribution=DistributionStats(5.0e6, 4.8e6, 0.5e6, 4.0e6, 6.5e6, 0.0),
        runway_percentiles=PercentileSet(20.0, 22.0, 24.0, 30.0, 36.0, 40.0, 48.0),
        sensitivity_factors=factors,
    )


def test_healthy_result_names_top_lever_as_primary_risk(small_result):
    verdict = generate_verdict(_healthy(small_result, FACTORS))
    assert verdict.primary_risk == DEFAULT_NARRATIVES.primary_risks["lever_exposure"].format(
        label="Pricing Power", lever="pricing power"
    )


def test_rule_checks_outrank_top_lever(small_result):
    short_runway = replace(
        _healthy(small_result, FACTORS),
        runway_percentiles=PercentileSet(2.0, 3.0, 4.0, 30.0, 36.0, 40.0, 48.0),
    )
    assert generate_verdict(short_runway).primary_risk == DEFAULT_NARRATIVES.primary_risks["runway_compression"]


def test_healthy_result_without_factors_falls_back_to_market(small_result):
    verdict = generate_verdict(_healthy(small_result, ()))
    assert verdict.primary_risk == DEFAULT_NARRATIVES.primary_risks["market_dependency"]


def test_narrative_tables_can_be_swapped(small_result):
    tables = replace(
        DEFAULT_NARRATIVES,
        headlines={name: f"H-{name}" for name in DEFAULT_NARRATIVES.headlines},
    )
    verdict = generate_verdict(small_result, narratives=tables)
    assert verdict.headline == f"H-{verdict.overall_rating.value}"
    assert verdict.overall_score == generate_verdict(small_result).overall_score


def test_narrative_tables_are_immutable():
    with pytest.raises(TypeError):
        DEFAULT_NARRATIVES.headlines["STRONG"] = "changed"


def test_recommendation_frame(small_result):
    frame = generate_verdict(replace(small_result, sensitivity_factors=FACTORS)).to_dataframe()
    assert list(frame.columns) == ["Priority", "Category", "Action", "Rationale", "Impact", "Distance"]
    assert len(frame) <= 4
