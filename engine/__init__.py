"""
Simulation engine — single-trajectory simulator + chunked Monte Carlo runner.
"""

from .runner import Progress, run_batch, run_ensemble, run_ensemble_async
from .trajectory import simulate

__all__ = [
    "simulate",
    "Progress",
    "run_ensemble",
    "run_ensemble_async",
    "run_batch",
]
