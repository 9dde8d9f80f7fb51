"""
Phrase banks for the verdict.

The verdict generator never hard-codes prose: it picks a band from the
numbers and formats the matching template from a NarrativeTables value.
Tables are immutable (mappings are frozen on construction), so a test or a
caller can swap in its own set with dataclasses.replace() without touching
module state.

Templates use str.format fields. Available fields are listed next to each
table.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple


@dataclass(frozen=True)
class RecommendationTemplate:
    category: str  # GROWTH / EFFICIENCY / RISK / STRATEGY
    action: str
    rationale: str
    impact: str


@dataclass(frozen=True)
class NarrativeTables:
    # keyed by rating name; fields: survival_pct
    headlines: Mapping[str, str]
    # keyed by rating name; no fields
    rating_suffixes: Mapping[str, str]
    # fields: iterations, horizon, survival_pct, median_arr, suffix
    summary: str
    # (minimum survival %, template), checked top-down, last entry is the floor
    # fields: survival_pct, median_months, horizon
    survival_bands: Tuple[Tuple[float, str], ...]
    # fields: p10, p50, p90, volatility, outlook
    growth: str
    # (maximum CV, volatility label, outlook), checked top-down
    volatility_bands: Tuple[Tuple[float, str, str], ...]
    # (minimum median runway, template); fields: p25, p50, p75
    runway_bands: Tuple[Tuple[float, str], ...]
    # fields: arr, cash, runway, month
    best_case: str
    worst_case_survived: str
    worst_case_failed: str
    most_likely: str
    # keys: cash_depletion, runway_compression, outcome_volatility,
    # lever_exposure (fields: label, lever), market_dependency
    primary_risks: Mapping[str, str]
    # fields: lever, impact_pct
    mitigation_positive: str
    mitigation_negative: str
    mitigation_fallback: str
    # fields: rank, label, impact_pct, verb
    top_driver: str
    # keys: cut_burn, accelerate_growth, raise_funding, double_down, mitigate_exposure
    # fields: failure_pct, growth_pct, runway_p25, lever, impact_pct
    recommendations: Mapping[str, RecommendationTemplate]
    # keyed by confidence level; fields: iterations, cv_pct
    confidence: Mapping[str, str]

    def __post_init__(self):
        for name in ("headlines", "rating_suffixes", "primary_risks", "recommendations", "confidence"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))
        for name in ("survival_bands", "volatility_bands", "runway_bands"):
            object.__setattr__(self, name, tuple(tuple(row) for row in getattr(self, name)))


DEFAULT_NARRATIVES = NarrativeTables(
    headlines={
        "EXCEPTIONAL": "{survival_pct}% survival rate with strong upside potential",
        "STRONG": "Solid trajectory with {survival_pct}% survival probability",
        "STABLE": "Moderate risk profile: {survival_pct}% of scenarios survive",
        "CAUTION": "Elevated risk detected: only {survival_pct}% survival rate",
        "CRITICAL": "Critical: {survival_pct}% survival rate requires immediate action",
    },
    rating_suffixes={
        "EXCEPTIONAL": "Current strategy configuration demonstrates exceptional resilience and growth potential.",
        "STRONG": "The current trajectory supports continued execution with standard monitoring.",
        "STABLE": "Consider optimizing key levers to improve outcome distribution.",
        "CAUTION": "Strategic adjustments recommended to improve survival probability.",
        "CRITICAL": "Immediate intervention required to avoid probable failure scenarios.",
    },
    summary=(
        "Analysis of {iterations:,} simulated scenarios over {horizon} months indicates a "
        "{survival_pct}% probability of survival with median ARR reaching {median_arr}. {suffix}"
    ),
    survival_bands=(
        (90, "Exceptional survivability. {survival_pct}% of scenarios maintain positive cash "
             "through the {horizon}-month horizon."),
        (70, "Strong survival profile. {survival_pct}% probability of operating through "
             "{horizon} months; median survival of {median_months} months."),
        (50, "Moderate survival risk. {survival_pct}% of scenarios survive the full horizon; "
             "median survival of {median_months} months suggests runway work is needed."),
        (0, "Critical survival risk. Only {survival_pct}% of scenarios reach month {horizon}; "
            "median survival of {median_months} months."),
    ),
    growth=(
        "ARR outcomes range from {p10} (P10) to {p90} (P90) with {p50} as the median. "
        "Distribution shows {volatility} volatility, indicating {outlook}."
    ),
    volatility_bands=(
        (0.3, "low", "a predictable growth pattern"),
        (0.5, "moderate", "manageable variance in expected outcomes"),
        (float("inf"), "high", "significant uncertainty in the growth trajectory"),
    ),
    runway_bands=(
        (24, "Runway position is strong. Median runway of {p50} months, P75 at {p75} months."),
        (12, "Runway is adequate but warrants attention. Median of {p50} months "
             "({p25}-{p75} interquartile range)."),
        (0, "Runway is critically short. Median of {p50} months, P25 at only {p25} months."),
    ),
    best_case="Optimistic scenario (P95): ARR reaches {arr} with {cash} cash and {runway} months runway.",
    worst_case_survived="Pessimistic scenario (P5): ARR at {arr} with {cash} cash and only {runway} months runway.",
    worst_case_failed="Pessimistic scenario (P5): ARR at {arr}; cash runs out in month {month}.",
    most_likely="Median scenario (P50): {arr} ARR with {cash} cash and {runway} months runway.",
    primary_risks={
        "cash_depletion": "Cash depletion. More than half of simulated scenarios run out of cash.",
        "runway_compression": "Runway compression. A quarter of scenarios end with under six months of runway.",
        "outcome_volatility": "Outcome volatility. High variance in final ARR creates planning uncertainty.",
        "lever_exposure": "Exposure to {lever}. Outcomes move most with this lever.",
        "market_dependency": "Market dependency. Outcomes are sensitive to external growth assumptions.",
    },
    mitigation_positive="Prioritize {lever}. It has the largest positive effect on outcomes ({impact_pct}% impact).",
    mitigation_negative="Reduce exposure to {lever}. It has the largest negative effect on outcomes ({impact_pct}% impact).",
    mitigation_fallback="Focus on balanced execution across all levers to maintain stability.",
    top_driver="{rank}. {label}: {impact_pct}% impact; increasing it {verb} outcomes",
    recommendations={
        "cut_burn": RecommendationTemplate(
            category="EFFICIENCY",
            action="Reduce monthly burn rate by 20-30%",
            rationale="Current burn creates a {failure_pct}% failure probability",
            impact="Could lift survival by 15-25 percentage points",
        ),
        "accelerate_growth": RecommendationTemplate(
            category="GROWTH",
            action="Accelerate demand generation initiatives",
            rationale="Median ARR growth of {growth_pct}% is below the 30% target",
            impact="Each 10% of growth adds significant enterprise value",
        ),
        "raise_funding": RecommendationTemplate(
            category="STRATEGY",
            action="Initiate funding discussions within 3 months",
            rationale="P25 runway is {runway_p25} months, under the 12-month floor",
            impact="Secures optionality and prevents forced decisions",
        ),
        "double_down": RecommendationTemplate(
            category="STRATEGY",
            action="Double down on {lever}",
            rationale="Largest positive impact ({impact_pct}%) on outcomes",
            impact="Best return on management effort",
        ),
        "mitigate_exposure": RecommendationTemplate(
            category="RISK",
            action="Mitigate {lever} exposure",
            rationale="Largest negative impact ({impact_pct}%) on outcomes",
            impact="Improves downside protection",
        ),
    },
    confidence={
        "HIGH": "High confidence. {iterations:,} simulations with low outcome variance (CV {cv_pct}%).",
        "MEDIUM": "Moderate confidence. {iterations:,} simulations with acceptable variance (CV {cv_pct}%).",
        "LOW": "Lower confidence: {iterations:,} simulations, CV {cv_pct}%. Plan for multiple outcomes.",
    },
)
