"""
Shock propagation — how the ensemble holds up when the market turns.

A shock of intensity I (percent, 0..200) pushes three levers at once:
    market_volatility  +0.30 * I
    demand_strength    -0.25 * I
    funding_pressure   +0.20 * I
(lever points, clamped to [0, 100]). The shocked levers are then run as a
small ensemble and classified by survival probability.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence

from core.config import SimulationConfig
from core.errors import InvalidConfiguration
from core.schema import LeverState
from core.utils import is_finite_number
from core.validation import validate_inputs
from engine.runner import run_batch

from .metrics import median_rank

logger = logging.getLogger(__name__)

MAX_SHOCK_INTENSITY = 200.0
DEFAULT_STRESS_RUNS = 200
DEFAULT_INTENSITIES = (0.0, 50.0, 100.0, 150.0, 200.0)

SHOCK_COEFFICIENTS = {
    "market_volatility": 0.30,
    "demand_strength": -0.25,
    "funding_pressure": 0.20,
}

# (minimum survival probability, label), checked top-down
CLASSIFICATION_BANDS = (
    (0.75, "Robust"),
    (0.55, "Stable"),
    (0.35, "Fragile"),
)


@dataclass(frozen=True)
class ShockResult:
    shock_intensity_pct: float
    survival_probability: float
    median_arr: float
    median_runway: float
    failure_probability: float
    classification: str


def classify_survival(probability: float) -> str:
    for floor, label in CLASSIFICATION_BANDS:
        if probability >= floor:
            return label
    return "Critical"


def apply_shock(levers: LeverState, intensity_pct: float) -> LeverState:
    """Return a new LeverState with the shock applied."""
    if not is_finite_number(intensity_pct) or not 0 <= intensity_pct <= MAX_SHOCK_INTENSITY:
        raise InvalidConfiguration(
            [f"shock intensity must lie in [0, {MAX_SHOCK_INTENSITY:.0f}], got {intensity_pct!r}."]
        )
    shocked = levers
    for name, coefficient in SHOCK_COEFFICIENTS.items():
        shocked = shocked.with_lever(name, getattr(levers, name) + coefficient * intensity_pct)
    return shocked


def compute_shock_propagation(
    levers: LeverState,
    config: SimulationConfig,
    intensity_pct: float,
    *,
    runs: int = DEFAULT_STRESS_RUNS,
) -> ShockResult:
    validate_inputs(levers, config)
    return _propagate(levers, config, intensity_pct, runs)


def _propagate(levers: LeverState, config: SimulationConfig, intensity_pct: float, runs: int) -> ShockResult:
    shocked = apply_shock(levers, intensity_pct)
    results = run_batch(shocked, config, runs)
    survival = sum(1 for r in results if r.did_survive) / len(results)
    outcome = ShockResult(
        shock_intensity_pct=float(intensity_pct),
        survival_probability=survival,
        median_arr=median_rank([r.final_arr for r in results]),
        median_runway=median_rank([r.final_runway for r in results]),
        failure_probability=1.0 - survival,
        classification=classify_survival(survival),
    )
    logger.info(
        "Shock %.0f%%: survival %.3f (%s)",
        intensity_pct, outcome.survival_probability, outcome.classification,
    )
    return outcome


def stress_curve(
    levers: LeverState,
    config: SimulationConfig,
    intensities: Sequence[float] = DEFAULT_INTENSITIES,
    *,
    runs: int = DEFAULT_STRESS_RUNS,
) -> List[ShockResult]:
    """Shock propagation at each intensity, in the order given."""
    validate_inputs(levers, config)
    return [_propagate(levers, config, i, runs) for i in intensities]
