"""
Distributions package — seeded per-iteration random streams for the simulator.
"""

from .sampler import ShockPaths, iteration_rng, sample_shock_paths

__all__ = [
    "ShockPaths",
    "iteration_rng",
    "sample_shock_paths",
]
