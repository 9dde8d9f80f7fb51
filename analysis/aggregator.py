"""
Reduce a completed ensemble into a MonteCarloResult.

Instead of: "final ARR = $5.1M" (one number, no context)
The reader gets: "ARR: median $5.1M, P10 $3.9M, P90 $6.6M, 97% survive 36 months"

All statistics go through analysis/metrics.py; this module only decides which
series are summarized and how the representative scenarios are picked.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from core.config import SimulationConfig
from core.errors import EmptyEnsemble, IncompleteEnsemble
from core.schema import MonteCarloResult, SensitivityFactor, SingleSimulationResult

from .metrics import (
    DEFAULT_BUCKET_COUNT,
    confidence_bands,
    distribution_stats,
    histogram,
    median_rank,
    percentiles,
    rank_index,
    survival_by_month,
)

BEST_CASE_RANK = 0.95
MEDIAN_CASE_RANK = 0.5
WORST_CASE_RANK = 0.05


def aggregate(
    results: Sequence[SingleSimulationResult],
    config: SimulationConfig,
    *,
    sensitivity_factors: Sequence[SensitivityFactor] = (),
    execution_time_ms: float = 0.0,
    bucket_count: int = DEFAULT_BUCKET_COUNT,
) -> MonteCarloResult:
    """
    Aggregate an ensemble into distribution summaries.

    Parameters
    ----------
    results : sequence of SingleSimulationResult
        The full ensemble; order does not matter.
    config : SimulationConfig
        The config that produced the ensemble (horizon, iteration count).
    sensitivity_factors : sequence of SensitivityFactor
        Attached as-is; see analysis/sensitivity.py.
    execution_time_ms : float
        Wall-clock time of the run, measured by the caller.
    bucket_count : int
        Histogram buckets per metric.

    Raises
    ------
    EmptyEnsemble
        If results is empty. This is a caller bug, not a degenerate case.
    IncompleteEnsemble
        If len(results) differs from config.iterations or an iteration index
        repeats. Statistics over a partial ensemble are never reported.
    """
    n = len(results)
    if n == 0:
        raise EmptyEnsemble("aggregate() called with an empty ensemble.")
    if n != config.iterations:
        raise IncompleteEnsemble(
            f"aggregate() got {n} trajectories, config expects {config.iterations}."
        )
    if len({r.iteration_index for r in results}) != n:
        raise IncompleteEnsemble("aggregate() got duplicate iteration indices.")

    horizon = int(config.time_horizon_months)
    # stable sort by iteration index first so ties in ARR resolve the same way every time
    ensemble = sorted(results, key=lambda r: r.iteration_index)

    final_arr = np.asarray([r.final_arr for r in ensemble], dtype=float)
    final_cash = np.asarray([r.final_cash for r in ensemble], dtype=float)
    final_runway = np.asarray([r.final_runway for r in ensemble], dtype=float)

    survival_rate = sum(1 for r in ensemble if r.did_survive) / n

    by_arr = [ensemble[i] for i in np.argsort(final_arr, kind="stable")]

    return MonteCarloResult(
        iterations=n,
        time_horizon_months=horizon,
        execution_time_ms=float(execution_time_ms),
        survival_rate=survival_rate,
        survival_by_month=tuple(survival_by_month(ensemble, horizon)),
        median_survival_months=median_rank([r.survival_months for r in ensemble]),
        arr_distribution=distribution_stats(final_arr),
        arr_histogram=tuple(histogram(final_arr, bucket_count)),
        arr_percentiles=percentiles(final_arr),
        arr_confidence_bands=tuple(confidence_bands(ensemble, horizon, "arr")),
        cash_distribution=distribution_stats(final_cash),
        cash_histogram=tuple(histogram(final_cash, bucket_count)),
        cash_percentiles=percentiles(final_cash),
        cash_confidence_bands=tuple(confidence_bands(ensemble, horizon, "cash")),
        runway_distribution=distribution_stats(final_runway),
        runway_histogram=tuple(histogram(final_runway, bucket_count)),
        runway_percentiles=percentiles(final_runway),
        best_case=by_arr[rank_index(BEST_CASE_RANK, n)],
        worst_case=by_arr[rank_index(WORST_CASE_RANK, n)],
        median_case=by_arr[rank_index(MEDIAN_CASE_RANK, n)],
        sensitivity_factors=tuple(sensitivity_factors),
        all_simulations=tuple(ensemble),
        config=config,
    )
