"""
Base classes for dynamics models — the interface only, no implementations.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.config import SimulationConfig
from core.schema import LeverState


@dataclass(frozen=True)
class MonthlyDrivers:
    """
    Per-month dynamics for one run, derived from the levers.

    Growth rates are monthly fractions; volatility and shock terms are standard
    deviations of monthly growth. Burn terms are multiples of the configured
    base monthly burn.
    """

    base_growth: float
    expansion_boost: float
    pricing_multiplier: float
    volatility: float

    execution_shock_probability: float
    execution_shock_mean: float
    execution_shock_std: float

    funding_risk: float
    funding_stress_threshold: float  # fraction of starting cash below which funding bites

    burn_multiplier: float
    burn_volatility: float
    burn_floor: float  # minimum burn as a fraction of base burn


class DynamicsModel:
    """Interface for turning a lever configuration into monthly drivers."""

    def drivers(self, levers: LeverState, config: SimulationConfig) -> MonthlyDrivers:
        raise NotImplementedError
