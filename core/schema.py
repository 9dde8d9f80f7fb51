"""
Data model shared by the engine and the analysis layer.

Every record here is a frozen dataclass: created once, never mutated. Re-runs
produce new objects instead of editing old ones.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Dict, Mapping, Optional, Tuple

import pandas as pd

from .config import SimulationConfig
from .utils import clamp


LEVER_MIN: float = 0.0
LEVER_MAX: float = 100.0
LEVER_NEUTRAL: float = 50.0

# Canonical lever order. Ties in rankings are broken by this order.
LEVER_NAMES: Tuple[str, ...] = (
    "demand_strength",
    "pricing_power",
    "expansion_velocity",
    "cost_discipline",
    "hiring_intensity",
    "operating_drag",
    "market_volatility",
    "execution_risk",
    "funding_pressure",
)

LEVER_LABELS: Mapping[str, str] = {
    "demand_strength": "Demand Strength",
    "pricing_power": "Pricing Power",
    "expansion_velocity": "Expansion Velocity",
    "cost_discipline": "Cost Discipline",
    "hiring_intensity": "Hiring Intensity",
    "operating_drag": "Operating Drag",
    "market_volatility": "Market Volatility",
    "execution_risk": "Execution Risk",
    "funding_pressure": "Funding Pressure",
}


@dataclass(frozen=True)
class LeverState:
    """
    Nine strategic levers, each on [0, 100] with 50 as the neutral midpoint.

    Growth levers: demand_strength, pricing_power, expansion_velocity
    Cost levers:   cost_discipline, hiring_intensity, operating_drag
    Risk levers:   market_volatility, execution_risk, funding_pressure
    """

    demand_strength: float = LEVER_NEUTRAL
    pricing_power: float = LEVER_NEUTRAL
    expansion_velocity: float = LEVER_NEUTRAL
    cost_discipline: float = LEVER_NEUTRAL
    hiring_intensity: float = LEVER_NEUTRAL
    operating_drag: float = LEVER_NEUTRAL
    market_volatility: float = LEVER_NEUTRAL
    execution_risk: float = LEVER_NEUTRAL
    funding_pressure: float = LEVER_NEUTRAL

    def as_dict(self) -> Dict[str, float]:
        return {name: float(getattr(self, name)) for name in LEVER_NAMES}

    def with_lever(self, name: str, value: float) -> "LeverState":
        """Return a copy with one lever moved, clamped to the lever range."""
        if name not in LEVER_NAMES:
            raise KeyError(f"Unknown lever: {name!r}")
        return replace(self, **{name: clamp(float(value), LEVER_MIN, LEVER_MAX)})


@dataclass(frozen=True)
class MonthlySnapshot:
    """State of one trajectory at the close of one month."""
    month: int
    arr: float
    cash: float
    burn: float
    runway: float
    growth_rate: float


@dataclass(frozen=True)
class SingleSimulationResult:
    """One simulated trajectory. Owned by the aggregator once created."""
    iteration_index: int
    final_arr: float
    final_cash: float
    final_runway: float
    survival_months: int
    did_survive: bool
    monthly_snapshots: Tuple[MonthlySnapshot, ...]
    peak_arr: float
    lowest_cash: float
    did_achieve_target: bool  # final ARR >= 2x starting ARR

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {f.name: getattr(s, f.name) for f in fields(MonthlySnapshot)}
                for s in self.monthly_snapshots
            ],
            columns=[f.name for f in fields(MonthlySnapshot)],
        )


@dataclass(frozen=True)
class DistributionStats:
    mean: float
    median: float
    std_dev: float
    min: float
    max: float
    skewness: float


@dataclass(frozen=True)
class HistogramBucket:
    min: float
    max: float
    count: int
    frequency: float


@dataclass(frozen=True)
class PercentileSet:
    """Nearest-rank percentiles; always p5 <= p10 <= ... <= p95."""
    p5: float
    p10: float
    p25: float
    p50: float
    p75: float
    p90: float
    p95: float

    def as_tuple(self) -> Tuple[float, ...]:
        return (self.p5, self.p10, self.p25, self.p50, self.p75, self.p90, self.p95)


@dataclass(frozen=True)
class ConfidenceBand:
    """Percentiles for one month, over the trajectories still alive at that month."""
    month: int
    p10: float
    p25: float
    p50: float
    p75: float
    p90: float
    alive_count: int


@dataclass(frozen=True)
class SensitivityFactor:
    lever: str
    label: str
    impact: float  # signed, in [-1, 1]
    direction: str  # "positive" | "negative"


@dataclass(frozen=True)
class MonteCarloResult:
    """
    Aggregate view of one ensemble run.

    best_case / median_case / worst_case are members of all_simulations,
    picked by rank from the ARR-ascending sort.
    """

    iterations: int
    time_horizon_months: int
    execution_time_ms: float

    survival_rate: float
    survival_by_month: Tuple[float, ...]
    median_survival_months: float

    arr_distribution: DistributionStats
    arr_histogram: Tuple[HistogramBucket, ...]
    arr_percentiles: PercentileSet
    arr_confidence_bands: Tuple[ConfidenceBand, ...]

    cash_distribution: DistributionStats
    cash_histogram: Tuple[HistogramBucket, ...]
    cash_percentiles: PercentileSet
    cash_confidence_bands: Tuple[ConfidenceBand, ...]

    runway_distribution: DistributionStats
    runway_histogram: Tuple[HistogramBucket, ...]
    runway_percentiles: PercentileSet

    best_case: SingleSimulationResult
    worst_case: SingleSimulationResult
    median_case: SingleSimulationResult

    sensitivity_factors: Tuple[SensitivityFactor, ...]
    all_simulations: Tuple[SingleSimulationResult, ...]

    config: Optional[SimulationConfig] = field(default=None)

    def summary_table(self) -> pd.DataFrame:
        """One row per metric with mean/median/std and the percentile set."""
        rows = []
        for label, dist, pct in (
            ("Final ARR", self.arr_distribution, self.arr_percentiles),
            ("Final Cash", self.cash_distribution, self.cash_percentiles),
            ("Final Runway (months)", self.runway_distribution, self.runway_percentiles),
        ):
            row = {
                "Metric": label,
                "Mean": dist.mean,
                "Median": dist.median,
                "Std Dev": dist.std_dev,
                "Skewness": dist.skewness,
                "Min": dist.min,
            }
            for name, value in zip(("P05", "P10", "P25", "P50", "P75", "P90", "P95"), pct.as_tuple()):
                row[name] = value
            row["Max"] = dist.max
            rows.append(row)
        return pd.DataFrame(rows)

    def bands_frame(self, metric: str = "arr") -> pd.DataFrame:
        """Confidence bands as a month-indexed DataFrame (months nobody reached are absent)."""
        if metric == "arr":
            bands = self.arr_confidence_bands
        elif metric == "cash":
            bands = self.cash_confidence_bands
        else:
            raise ValueError(f"No confidence bands for metric {metric!r}")
        cols = [f.name for f in fields(ConfidenceBand)]
        return pd.DataFrame(
            [{c: getattr(b, c) for c in cols} for b in bands],
            columns=cols,
        ).set_index("month")
