"""
Verdict generator — turns a MonteCarloResult into a scored, rated read-out.

Pure mapping: the same result always yields the same verdict. No randomness,
no state between calls.

Score = weighted sum of five 0..100 components (SCORE_WEIGHTS):
    survival     survival rate * 100
    growth       50 + 2 * median ARR growth % vs starting ARR
    headroom     (P90 / P50 - 1) * 100 of final ARR
    runway       median final runway / 36 months * 100
    consistency  100 - coefficient of variation of final ARR * 100
Each component is clamped to [0, 100]; the total is rounded half-up.

Rating bands (RATING_THRESHOLDS) are shared by every consumer and are not
tunable per call:
    >= 85 EXCEPTIONAL, >= 70 STRONG, >= 55 STABLE, >= 40 CAUTION, else CRITICAL
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from functools import total_ordering
from typing import List, Tuple

import pandas as pd

from core.config import SimulationConfig
from core.schema import MonteCarloResult, SensitivityFactor, SingleSimulationResult
from core.utils import clamp, format_currency

from .narratives import DEFAULT_NARRATIVES, NarrativeTables


@total_ordering
class Rating(Enum):
    CRITICAL = "CRITICAL"
    CAUTION = "CAUTION"
    STABLE = "STABLE"
    STRONG = "STRONG"
    EXCEPTIONAL = "EXCEPTIONAL"

    @property
    def rank(self) -> int:
        return _RATING_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, Rating):
            return NotImplemented
        return self.rank < other.rank


_RATING_ORDER: Tuple[Rating, ...] = tuple(Rating)


class Confidence(Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Priority(Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


SCORE_WEIGHTS = {
    "survival": 0.35,
    "growth": 0.25,
    "headroom": 0.10,
    "runway": 0.20,
    "consistency": 0.10,
}

RATING_THRESHOLDS: Tuple[Tuple[int, Rating], ...] = (
    (85, Rating.EXCEPTIONAL),
    (70, Rating.STRONG),
    (55, Rating.STABLE),
    (40, Rating.CAUTION),
)

RUNWAY_REFERENCE_MONTHS = 36.0

# safe thresholds for rule-based recommendations
SAFE_SURVIVAL_RATE = 0.70
SAFE_GROWTH = 0.30
SAFE_RUNWAY_P25 = 12.0
LEVER_DISTANCE_SCALE = 0.25
MAX_RECOMMENDATIONS = 4

PRIORITY_BANDS: Tuple[Tuple[float, Priority], ...] = (
    (0.5, Priority.CRITICAL),
    (0.25, Priority.HIGH),
    (0.1, Priority.MEDIUM),
)


@dataclass(frozen=True)
class ScoreBreakdown:
    survival: float
    growth: float
    headroom: float
    runway: float
    consistency: float
    total: int


@dataclass(frozen=True)
class Recommendation:
    priority: Priority
    category: str
    action: str
    rationale: str
    impact: str
    distance: float  # normalized distance from the safe threshold; ranking key


@dataclass(frozen=True)
class Verdict:
    overall_score: int
    overall_rating: Rating
    headline: str
    summary: str

    survival_narrative: str
    growth_narrative: str
    runway_narrative: str

    best_case_narrative: str
    worst_case_narrative: str
    most_likely_narrative: str

    primary_risk: str
    risk_mitigation: str

    top_drivers: Tuple[str, ...]
    critical_lever: str

    recommendations: Tuple[Recommendation, ...]

    confidence_level: Confidence
    confidence_statement: str

    score_breakdown: ScoreBreakdown

    def to_dataframe(self) -> pd.DataFrame:
        """Recommendations as a table, highest priority first."""
        return pd.DataFrame(
            [
                {
                    "Priority": r.priority.value,
                    "Category": r.category,
                    "Action": r.action,
                    "Rationale": r.rationale,
                    "Impact": r.impact,
                    "Distance": r.distance,
                }
                for r in self.recommendations
            ],
            columns=["Priority", "Category", "Action", "Rationale", "Impact", "Distance"],
        )


# -- scoring -------------------------------------------------------------------


def rating_for_score(score: float) -> Rating:
    for floor, rating in RATING_THRESHOLDS:
        if score >= floor:
            return rating
    return Rating.CRITICAL


def priority_for_distance(distance: float) -> Priority:
    for floor, priority in PRIORITY_BANDS:
        if distance >= floor:
            return priority
    return Priority.LOW


def coefficient_of_variation(result: MonteCarloResult) -> float:
    """std / mean of final ARR; infinite when the mean is not positive."""
    mean = result.arr_distribution.mean
    if mean <= 0:
        return math.inf
    return result.arr_distribution.std_dev / mean


def _starting_arr(result: MonteCarloResult) -> float:
    config = result.config if result.config is not None else SimulationConfig()
    return float(config.starting_arr)


def median_growth(result: MonteCarloResult) -> float:
    """Median final ARR relative to starting ARR, as a fraction (0.3 = +30%)."""
    start = _starting_arr(result)
    if start <= 0:
        return 0.0
    return (result.arr_percentiles.p50 - start) / start


def score_components(result: MonteCarloResult) -> ScoreBreakdown:
    p50 = result.arr_percentiles.p50
    headroom = (result.arr_percentiles.p90 / p50 - 1.0) * 100 if p50 > 0 else 0.0
    cv = coefficient_of_variation(result)

    parts = {
        "survival": clamp(result.survival_rate * 100, 0.0, 100.0),
        "growth": clamp(50 + 2 * median_growth(result) * 100, 0.0, 100.0),
        "headroom": clamp(headroom, 0.0, 100.0),
        "runway": clamp(result.runway_percentiles.p50 / RUNWAY_REFERENCE_MONTHS * 100, 0.0, 100.0),
        "consistency": 0.0 if math.isinf(cv) else clamp(100 - cv * 100, 0.0, 100.0),
    }
    weighted = sum(SCORE_WEIGHTS[k] * v for k, v in parts.items())
    total = int(clamp(math.floor(weighted + 0.5), 0, 100))
    return ScoreBreakdown(total=total, **parts)


# -- narrative -----------------------------------------------------------------


def _pct(fraction: float) -> int:
    return int(math.floor(fraction * 100 + 0.5))


def _pick_floor_band(bands, value):
    """First (floor, template) row whose floor <= value; the last row catches the rest."""
    for floor, template in bands:
        if value >= floor:
            return template
    return bands[-1][1]


def _scenario_fields(sim: SingleSimulationResult) -> dict:
    return {
        "arr": format_currency(sim.final_arr),
        "cash": format_currency(sim.final_cash),
        "runway": int(round(sim.final_runway)),
        "month": sim.survival_months,
    }


def _primary_risk(
    result: MonteCarloResult, cv: float, factors: Tuple[SensitivityFactor, ...], tables: NarrativeTables
) -> str:
    """
    First matching rule wins: survival below 50%, then P25 runway under six
    months, then ARR CV above 0.5. Only a result that clears all three falls
    back to the top-ranked sensitivity factor, and to market dependency when
    there are none.
    """
    risks = tables.primary_risks
    if result.survival_rate < 0.5:
        return risks["cash_depletion"]
    if result.runway_percentiles.p25 < 6:
        return risks["runway_compression"]
    if cv > 0.5:
        return risks["outcome_volatility"]
    if factors:
        top = factors[0]
        return risks["lever_exposure"].format(label=top.label, lever=top.label.lower())
    return risks["market_dependency"]


def _risk_mitigation(factors: Tuple[SensitivityFactor, ...], tables: NarrativeTables) -> str:
    if not factors:
        return tables.mitigation_fallback
    top = factors[0]
    template = tables.mitigation_positive if top.direction == "positive" else tables.mitigation_negative
    return template.format(lever=top.label.lower(), impact_pct=_pct(abs(top.impact)))


def _top_drivers(factors: Tuple[SensitivityFactor, ...], tables: NarrativeTables) -> Tuple[str, ...]:
    return tuple(
        tables.top_driver.format(
            rank=i + 1,
            label=f.label,
            impact_pct=_pct(abs(f.impact)),
            verb="improves" if f.direction == "positive" else "reduces",
        )
        for i, f in enumerate(factors[:3])
    )


def _recommendation(key: str, distance: float, tables: NarrativeTables, **fmt) -> Recommendation:
    template = tables.recommendations[key]
    return Recommendation(
        priority=priority_for_distance(distance),
        category=template.category,
        action=template.action.format(**fmt),
        rationale=template.rationale.format(**fmt),
        impact=template.impact.format(**fmt),
        distance=distance,
    )


def build_recommendations(
    result: MonteCarloResult, tables: NarrativeTables = DEFAULT_NARRATIVES
) -> List[Recommendation]:
    """
    Candidates ranked by how far the result sits from the safe threshold.

    Rule candidates: distance = (threshold - value) / threshold.
    Lever candidates (top positive and top negative factor): 0.25 * |impact|.
    Stable sort, so equal distances keep the order candidates are listed in.
    """
    candidates: List[Recommendation] = []

    survival = result.survival_rate
    if survival < SAFE_SURVIVAL_RATE:
        candidates.append(_recommendation(
            "cut_burn", (SAFE_SURVIVAL_RATE - survival) / SAFE_SURVIVAL_RATE, tables,
            failure_pct=_pct(1 - survival),
        ))

    growth = median_growth(result)
    if growth < SAFE_GROWTH:
        candidates.append(_recommendation(
            "accelerate_growth", (SAFE_GROWTH - growth) / SAFE_GROWTH, tables,
            growth_pct=_pct(growth),
        ))

    runway_p25 = result.runway_percentiles.p25
    if runway_p25 < SAFE_RUNWAY_P25:
        candidates.append(_recommendation(
            "raise_funding", (SAFE_RUNWAY_P25 - runway_p25) / SAFE_RUNWAY_P25, tables,
            runway_p25=int(round(runway_p25)),
        ))

    factors = result.sensitivity_factors
    top_positive = next((f for f in factors if f.impact > 0), None)
    top_negative = next((f for f in factors if f.impact < 0), None)
    for key, factor in (("double_down", top_positive), ("mitigate_exposure", top_negative)):
        if factor is None:
            continue
        candidates.append(_recommendation(
            key, LEVER_DISTANCE_SCALE * abs(factor.impact), tables,
            lever=factor.label.lower(), impact_pct=_pct(abs(factor.impact)),
        ))

    candidates.sort(key=lambda r: r.distance, reverse=True)
    return candidates[:MAX_RECOMMENDATIONS]


def confidence_for(iterations: int, cv: float) -> Confidence:
    if iterations >= 10_000 and cv < 0.3:
        return Confidence.HIGH
    if iterations >= 5_000 and cv < 0.5:
        return Confidence.MEDIUM
    return Confidence.LOW


def generate_verdict(
    result: MonteCarloResult,
    *,
    narratives: NarrativeTables = DEFAULT_NARRATIVES,
) -> Verdict:
    """
    Score, rate and narrate a MonteCarloResult.

    Parameters
    ----------
    result : MonteCarloResult
        Output of the aggregator. Its config (if attached) supplies the
        starting ARR the growth component is measured against.
    narratives : NarrativeTables
        Phrase banks; swap them to re-word the verdict without touching
        the scoring.

    Returns
    -------
    Verdict
    """
    tables = narratives
    breakdown = score_components(result)
    rating = rating_for_score(breakdown.total)
    cv = coefficient_of_variation(result)
    factors = tuple(result.sensitivity_factors)
    survival_pct = _pct(result.survival_rate)
    arr_pct = result.arr_percentiles
    runway_pct = result.runway_percentiles

    summary = tables.summary.format(
        iterations=result.iterations,
        horizon=result.time_horizon_months,
        survival_pct=survival_pct,
        median_arr=format_currency(arr_pct.p50),
        suffix=tables.rating_suffixes[rating.value],
    )

    bands = tables.volatility_bands
    volatility, outlook = next(
        ((label, text) for ceiling, label, text in bands if cv < ceiling), bands[-1][1:]
    )
    growth_narrative = tables.growth.format(
        p10=format_currency(arr_pct.p10),
        p50=format_currency(arr_pct.p50),
        p90=format_currency(arr_pct.p90),
        volatility=volatility,
        outlook=outlook,
    )

    survival_narrative = _pick_floor_band(tables.survival_bands, survival_pct).format(
        survival_pct=survival_pct,
        median_months=int(round(result.median_survival_months)),
        horizon=result.time_horizon_months,
    )
    runway_narrative = _pick_floor_band(tables.runway_bands, runway_pct.p50).format(
        p25=int(round(runway_pct.p25)),
        p50=int(round(runway_pct.p50)),
        p75=int(round(runway_pct.p75)),
    )

    worst = result.worst_case
    worst_template = tables.worst_case_survived if worst.did_survive else tables.worst_case_failed

    level = confidence_for(result.iterations, cv)
    cv_pct = "n/a" if math.isinf(cv) else str(_pct(cv))

    return Verdict(
        overall_score=breakdown.total,
        overall_rating=rating,
        headline=tables.headlines[rating.value].format(survival_pct=survival_pct),
        summary=summary,
        survival_narrative=survival_narrative,
        growth_narrative=growth_narrative,
        runway_narrative=runway_narrative,
        best_case_narrative=tables.best_case.format(**_scenario_fields(result.best_case)),
        worst_case_narrative=worst_template.format(**_scenario_fields(worst)),
        most_likely_narrative=tables.most_likely.format(**_scenario_fields(result.median_case)),
        primary_risk=_primary_risk(result, cv, factors, tables),
        risk_mitigation=_risk_mitigation(factors, tables),
        top_drivers=_top_drivers(factors, tables),
        critical_lever=factors[0].label if factors else "Balanced execution",
        recommendations=tuple(build_recommendations(result, tables)),
        confidence_level=level,
        confidence_statement=tables.confidence[level.value].format(
            iterations=result.iterations, cv_pct=cv_pct
        ),
        score_breakdown=breakdown,
    )
