"""
Statistics primitives — the only implementation of percentiles, histograms and
distribution stats in the project. Everything else calls these.

Percentiles are nearest-rank, never interpolated:
    sorted ascending, index = min(floor(p * n / 100), n - 1)
The floor is taken in integer arithmetic so that e.g. p=95, n=20 lands on
index 19 exactly, with no float rounding in the way.
"""

from __future__ import annotations

from fractions import Fraction
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from core.errors import EmptyEnsemble
from core.schema import (
    ConfidenceBand,
    DistributionStats,
    HistogramBucket,
    PercentileSet,
    SingleSimulationResult,
)

DEFAULT_BUCKET_COUNT = 25

PERCENTILE_LEVELS: Tuple[int, ...] = (5, 10, 25, 50, 75, 90, 95)
BAND_LEVELS: Tuple[int, ...] = (10, 25, 50, 75, 90)


def _as_array(values: Iterable[float]) -> np.ndarray:
    arr = np.asarray(values if isinstance(values, np.ndarray) else list(values), dtype=float)
    if arr.size == 0:
        raise EmptyEnsemble("Cannot summarize an empty set of values.")
    return arr


def rank_index(fraction: float, n: int) -> int:
    """floor(fraction * n), clipped to the last index. fraction is read exactly (0.95 -> 95/100)."""
    f = Fraction(str(fraction))
    return min((f.numerator * n) // f.denominator, n - 1)


def percentile_index(p: int, n: int) -> int:
    return min((p * n) // 100, n - 1)


def percentiles_from_sorted(sorted_values: np.ndarray, levels: Sequence[int]) -> List[float]:
    n = len(sorted_values)
    return [float(sorted_values[percentile_index(p, n)]) for p in levels]


def percentiles(values: Iterable[float]) -> PercentileSet:
    arr = np.sort(_as_array(values))
    p5, p10, p25, p50, p75, p90, p95 = percentiles_from_sorted(arr, PERCENTILE_LEVELS)
    return PercentileSet(p5=p5, p10=p10, p25=p25, p50=p50, p75=p75, p90=p90, p95=p95)


def median_rank(values: Iterable[float]) -> float:
    """Nearest-rank p50."""
    arr = np.sort(_as_array(values))
    return percentiles_from_sorted(arr, (50,))[0]


def histogram(values: Iterable[float], bucket_count: int = DEFAULT_BUCKET_COUNT) -> List[HistogramBucket]:
    """
    Equal-width buckets over [min, max].

    v falls in bucket i iff edge_i <= v < edge_{i+1}; the last bucket is
    closed on both ends so the max is counted. With zero range every value
    lands in the last bucket.
    """
    if bucket_count <= 0:
        raise ValueError(f"bucket_count must be positive, got {bucket_count}.")
    arr = _as_array(values)
    lo = float(arr.min())
    hi = float(arr.max())
    width = (hi - lo) / bucket_count
    edges = [lo + i * width for i in range(bucket_count + 1)]
    edges[-1] = hi

    # count of interior edges <= v is the bucket index
    idx = np.searchsorted(np.asarray(edges[1:-1]), arr, side="right")
    counts = np.bincount(idx, minlength=bucket_count)

    n = len(arr)
    return [
        HistogramBucket(
            min=edges[i],
            max=edges[i + 1],
            count=int(counts[i]),
            frequency=float(counts[i]) / n,
        )
        for i in range(bucket_count)
    ]


def distribution_stats(values: Iterable[float]) -> DistributionStats:
    """Population moments; skewness uses std 1 when the values are constant."""
    arr = _as_array(values)
    mean = float(np.mean(arr))
    std = float(np.std(arr))
    guard = std if std != 0 else 1.0
    skew = float(np.mean(((arr - mean) / guard) ** 3))
    return DistributionStats(
        mean=mean,
        median=float(np.median(arr)),
        std_dev=std,
        min=float(arr.min()),
        max=float(arr.max()),
        skewness=skew,
    )


def confidence_bands(
    results: Sequence[SingleSimulationResult],
    horizon: int,
    metric: str = "arr",
) -> List[ConfidenceBand]:
    """
    Month-by-month percentile envelope over the trajectories alive at that month.

    Month m uses snapshot m-1 of every trajectory with at least m snapshots.
    The subset shrinks as ventures die; months that no trajectory reaches are
    left out rather than padded.
    """
    series = [[getattr(s, metric) for s in r.monthly_snapshots] for r in results]
    bands: List[ConfidenceBand] = []
    for month in range(1, horizon + 1):
        alive = [path[month - 1] for path in series if len(path) >= month]
        if not alive:
            continue
        arr = np.sort(np.asarray(alive, dtype=float))
        p10, p25, p50, p75, p90 = percentiles_from_sorted(arr, BAND_LEVELS)
        bands.append(
            ConfidenceBand(
                month=month, p10=p10, p25=p25, p50=p50, p75=p75, p90=p90,
                alive_count=len(alive),
            )
        )
    return bands


def survival_by_month(results: Sequence[SingleSimulationResult], horizon: int) -> List[float]:
    """Fraction of the ensemble with survival_months >= m, for m = 1..horizon."""
    n = len(results)
    if n == 0:
        raise EmptyEnsemble("Cannot compute survival over an empty ensemble.")
    months = np.asarray([r.survival_months for r in results], dtype=int)
    # alive_at[m] = count(survival_months >= m)
    counts = np.bincount(np.clip(months, 0, horizon), minlength=horizon + 1)
    alive_at = counts[::-1].cumsum()[::-1]
    return [float(alive_at[m]) / n for m in range(1, horizon + 1)]
