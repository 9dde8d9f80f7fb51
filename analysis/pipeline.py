"""
End-to-end pipeline: levers -> ensemble -> aggregate -> sensitivity -> verdict.

This is the single place where the runner, the aggregator and the
sensitivity estimator are wired together; callers that want the pieces
separately use engine.runner and analysis.aggregator directly.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional

from core.config import SensitivitySettings, SimulationConfig
from core.schema import LeverState, MonteCarloResult

from engine.runner import Progress, ProgressCallback, run_ensemble, run_ensemble_async

from .aggregator import aggregate
from .decisions import Verdict, generate_verdict
from .metrics import DEFAULT_BUCKET_COUNT
from .sensitivity import estimate_sensitivity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationOutput:
    result: MonteCarloResult
    verdict: Verdict


def _deadline(timeout_seconds: Optional[float]) -> Optional[float]:
    return time.monotonic() + timeout_seconds if timeout_seconds is not None else None


def _finish(
    results,
    levers: LeverState,
    config: SimulationConfig,
    started: float,
    *,
    cancel_event: Optional[threading.Event],
    deadline: Optional[float],
    sensitivity: Optional[SensitivitySettings],
    bucket_count: int,
) -> MonteCarloResult:
    baseline = aggregate(results, config, bucket_count=bucket_count)
    factors = estimate_sensitivity(
        levers, config, baseline,
        settings=sensitivity, cancel_event=cancel_event, deadline=deadline,
    )
    elapsed_ms = (time.perf_counter() - started) * 1000.0
    logger.info(
        "Monte Carlo finished: %d iterations, survival %.3f, %.0f ms",
        baseline.iterations, baseline.survival_rate, elapsed_ms,
    )
    return replace(baseline, sensitivity_factors=tuple(factors), execution_time_ms=elapsed_ms)


def run_monte_carlo(
    levers: LeverState,
    config: Optional[SimulationConfig] = None,
    *,
    on_progress: Optional[Callable[[Progress], None]] = None,
    cancel_event: Optional[threading.Event] = None,
    timeout_seconds: Optional[float] = None,
    max_workers: Optional[int] = None,
    sensitivity: Optional[SensitivitySettings] = None,
    bucket_count: int = DEFAULT_BUCKET_COUNT,
) -> MonteCarloResult:
    """
    Run a full Monte Carlo analysis.

    Parameters
    ----------
    levers : LeverState
    config : SimulationConfig, optional
        Defaults to SimulationConfig() (10,000 iterations over 36 months).
    on_progress, cancel_event, timeout_seconds, max_workers
        Passed to engine.runner.run_ensemble. The cancel event and the
        timeout cover the sensitivity mini-ensembles too: timeout_seconds
        bounds the whole analysis, not just the main ensemble.
    sensitivity : SensitivitySettings, optional
        Finite-difference settings for the lever sensitivity pass.
    bucket_count : int
        Histogram buckets per metric.

    Returns
    -------
    MonteCarloResult with ranked sensitivity factors and measured execution time.

    Raises
    ------
    InvalidConfiguration, SimulationDivergence, Cancelled, SimulationTimeout
    """
    config = config or SimulationConfig()
    started = time.perf_counter()
    deadline = _deadline(timeout_seconds)
    results = run_ensemble(
        levers, config,
        on_progress=on_progress,
        cancel_event=cancel_event,
        timeout_seconds=timeout_seconds,
        deadline=deadline,
        max_workers=max_workers,
    )
    return _finish(
        results, levers, config, started,
        cancel_event=cancel_event, deadline=deadline,
        sensitivity=sensitivity, bucket_count=bucket_count,
    )


async def run_monte_carlo_async(
    levers: LeverState,
    config: Optional[SimulationConfig] = None,
    *,
    on_progress: Optional[ProgressCallback] = None,
    cancel_event: Optional[threading.Event] = None,
    timeout_seconds: Optional[float] = None,
    max_workers: Optional[int] = None,
    sensitivity: Optional[SensitivitySettings] = None,
    bucket_count: int = DEFAULT_BUCKET_COUNT,
) -> MonteCarloResult:
    """
    Same as run_monte_carlo, yielding to the event loop between chunks.

    Aggregation and the sensitivity pass run in a worker thread so the loop
    stays responsive until the result is ready.
    """
    config = config or SimulationConfig()
    started = time.perf_counter()
    deadline = _deadline(timeout_seconds)
    results = await run_ensemble_async(
        levers, config,
        on_progress=on_progress,
        cancel_event=cancel_event,
        timeout_seconds=timeout_seconds,
        deadline=deadline,
        max_workers=max_workers,
    )
    return await asyncio.to_thread(
        _finish, results, levers, config, started,
        cancel_event=cancel_event, deadline=deadline,
        sensitivity=sensitivity, bucket_count=bucket_count,
    )


def run_simulation(
    levers: LeverState,
    config: Optional[SimulationConfig] = None,
    **kwargs: Any,
) -> SimulationOutput:
    """run_monte_carlo followed by generate_verdict."""
    result = run_monte_carlo(levers, config, **kwargs)
    return SimulationOutput(result=result, verdict=generate_verdict(result))
