"""
Lever sensitivity — which levers move the outcome, and which way.

Method (central finite difference):
  1. For each lever, build two lever states: value - delta and value + delta
     (clamped to the lever range).
  2. Run a mini-ensemble for each, over the same iteration indices as the
     baseline. Same indices mean same random draws, so the difference between
     the two runs is the lever's effect, not sampling noise.
  3. Outcome shift = weighted sum of
        survival rate (up - down)
        median final ARR (up - down) / baseline median ARR
        median final cash (up - down) / baseline median cash
  4. Rescale one-sided swings (lever already at a bound) to the full 2*delta
     span, clamp to [-1, 1]. Sign gives the direction.

Ranked by |impact| descending; ties keep canonical lever order.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from core.config import SensitivitySettings, SimulationConfig
from core.errors import InvalidConfiguration
from core.schema import (
    LEVER_LABELS,
    LEVER_NAMES,
    LeverState,
    MonteCarloResult,
    SensitivityFactor,
    SingleSimulationResult,
)
from core.utils import clamp
from core.validation import validate_inputs
from engine.runner import run_batch

from .metrics import median_rank

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchStats:
    """Headline outcomes of one mini-ensemble."""
    survival_rate: float
    median_arr: float
    median_cash: float
    median_runway: float


@dataclass(frozen=True)
class LeverSweep:
    lever: str
    low_value: float
    high_value: float
    low: BatchStats
    high: BatchStats

    @property
    def span(self) -> float:
        return self.high_value - self.low_value


@dataclass(frozen=True)
class TornadoBar:
    lever: str
    label: str
    low_survival: float
    high_survival: float
    low_median_arr: float
    high_median_arr: float
    spread: float  # |high_survival - low_survival|


def batch_stats(results: Sequence[SingleSimulationResult]) -> BatchStats:
    return BatchStats(
        survival_rate=sum(1 for r in results if r.did_survive) / len(results),
        median_arr=median_rank([r.final_arr for r in results]),
        median_cash=median_rank([r.final_cash for r in results]),
        median_runway=median_rank([r.final_runway for r in results]),
    )


def _check_settings(settings: SensitivitySettings) -> None:
    errors = []
    if not settings.perturbation > 0:
        errors.append(f"perturbation must be positive, got {settings.perturbation}.")
    if not (isinstance(settings.runs, int) and settings.runs > 0):
        errors.append(f"runs must be a positive integer, got {settings.runs!r}.")
    if errors:
        raise InvalidConfiguration(errors)


def sweep_levers(
    levers: LeverState,
    config: SimulationConfig,
    settings: SensitivitySettings,
    *,
    cancel_event: Optional[threading.Event] = None,
    deadline: Optional[float] = None,
) -> Dict[str, LeverSweep]:
    """Run the low/high mini-ensembles for every lever, stopping at deadline (time.monotonic())."""
    _check_settings(settings)
    sweeps: Dict[str, LeverSweep] = {}
    for name in LEVER_NAMES:
        value = float(getattr(levers, name))
        down = levers.with_lever(name, value - settings.perturbation)
        up = levers.with_lever(name, value + settings.perturbation)
        batch = dict(cancel_event=cancel_event, deadline=deadline)
        low = batch_stats(run_batch(down, config, settings.runs, **batch))
        high = batch_stats(run_batch(up, config, settings.runs, **batch))
        sweeps[name] = LeverSweep(
            lever=name,
            low_value=getattr(down, name),
            high_value=getattr(up, name),
            low=low,
            high=high,
        )
        logger.debug(
            "Sweep %s: survival %.3f -> %.3f, median ARR %.0f -> %.0f",
            name, low.survival_rate, high.survival_rate, low.median_arr, high.median_arr,
        )
    return sweeps


def _relative(delta: float, scale: float) -> float:
    return delta / max(abs(scale), 1.0)


def estimate_sensitivity(
    levers: LeverState,
    config: SimulationConfig,
    baseline_result: MonteCarloResult,
    *,
    settings: Optional[SensitivitySettings] = None,
    cancel_event: Optional[threading.Event] = None,
    deadline: Optional[float] = None,
) -> List[SensitivityFactor]:
    """
    One SensitivityFactor per lever, ranked by |impact| descending.

    baseline_result supplies the scale for ARR and cash shifts (its nearest-rank
    medians), so impacts read as "fraction of the baseline outcome".
    deadline is an absolute time.monotonic() cutoff shared with the main run;
    past it the pass raises SimulationTimeout.
    """
    settings = settings or SensitivitySettings()
    sweeps = sweep_levers(levers, config, settings, cancel_event=cancel_event, deadline=deadline)

    base_arr = baseline_result.arr_percentiles.p50
    base_cash = baseline_result.cash_percentiles.p50
    full_span = 2.0 * settings.perturbation

    factors: List[SensitivityFactor] = []
    for name in LEVER_NAMES:
        sweep = sweeps[name]
        raw = (
            settings.survival_weight * (sweep.high.survival_rate - sweep.low.survival_rate)
            + settings.arr_weight * _relative(sweep.high.median_arr - sweep.low.median_arr, base_arr)
            + settings.cash_weight * _relative(sweep.high.median_cash - sweep.low.median_cash, base_cash)
        )
        if sweep.span > 0:
            raw *= full_span / sweep.span
        impact = clamp(float(raw), -1.0, 1.0) if np.isfinite(raw) else 0.0
        factors.append(
            SensitivityFactor(
                lever=name,
                label=LEVER_LABELS[name],
                impact=impact,
                direction="positive" if impact >= 0 else "negative",
            )
        )

    # sorted() is stable: equal |impact| keeps lever order
    return sorted(factors, key=lambda f: abs(f.impact), reverse=True)


def compute_tornado(
    levers: LeverState,
    config: SimulationConfig,
    *,
    settings: Optional[SensitivitySettings] = None,
    top: Optional[int] = None,
) -> List[TornadoBar]:
    """Low/high survival and median ARR per lever, ordered by survival spread."""
    settings = settings or SensitivitySettings()
    validate_inputs(levers, config)
    sweeps = sweep_levers(levers, config, settings)
    bars = [
        TornadoBar(
            lever=name,
            label=LEVER_LABELS[name],
            low_survival=s.low.survival_rate,
            high_survival=s.high.survival_rate,
            low_median_arr=s.low.median_arr,
            high_median_arr=s.high.median_arr,
            spread=abs(s.high.survival_rate - s.low.survival_rate),
        )
        for name, s in sweeps.items()
    ]
    bars.sort(key=lambda b: b.spread, reverse=True)
    return bars[:top] if top is not None else bars
