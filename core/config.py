"""
Run configuration.
Validation lives in core/validation.py so that a bad config surfaces as
InvalidConfiguration at run time rather than at construction.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SimulationConfig:
    iterations: int = 10_000
    time_horizon_months: int = 36
    starting_cash: float = 4_000_000.0
    starting_arr: float = 4_800_000.0
    monthly_burn: float = 47_000.0

    # namespaces the per-iteration random streams; iteration i of seed s is
    # always the same trajectory
    seed: int = 0


@dataclass(frozen=True)
class SensitivitySettings:
    """Finite-difference settings for lever sensitivity runs."""
    perturbation: float = 10.0  # lever points, applied as +/-
    runs: int = 200             # mini-ensemble size per perturbed lever

    # weights of the outcome shift components
    survival_weight: float = 0.5
    arr_weight: float = 0.3
    cash_weight: float = 0.2
