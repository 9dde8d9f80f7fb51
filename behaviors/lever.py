"""
LeverDynamicsModel — the default mapping from the nine levers to monthly drivers.

At the neutral midpoint (every lever at 50):
  - expected organic growth is zero, pricing multiplier is 1.0
  - monthly growth volatility is 6%
  - a 5% monthly chance of an execution setback (~ -10% growth that month)
  - burn runs at 1.125x the configured base burn, +/-4% noise
"""

from __future__ import annotations

from dataclasses import dataclass

from core.config import SimulationConfig
from core.schema import LeverState

from .base import DynamicsModel, MonthlyDrivers


@dataclass(frozen=True)
class LeverDynamicsModel(DynamicsModel):

    execution_shock_mean: float = -0.10
    execution_shock_std: float = 0.05
    funding_stress_threshold: float = 0.30
    burn_floor: float = 0.50

    def drivers(self, levers: LeverState, config: SimulationConfig) -> MonthlyDrivers:
        # growth levers, centred on 50
        base_growth = (levers.demand_strength - 50.0) / 500.0         # -10% .. +10% monthly
        pricing_multiplier = 1.0 + (levers.pricing_power - 50.0) / 200.0  # 0.75x .. 1.25x
        expansion_boost = (levers.expansion_velocity - 50.0) / 400.0  # -12.5% .. +12.5%

        # cost levers, 0..1 intensities
        cost_efficiency = levers.cost_discipline / 100.0
        hiring_drag = levers.hiring_intensity / 150.0
        operating_cost = levers.operating_drag / 100.0

        # risk levers
        market_risk = levers.market_volatility / 100.0
        execution_risk = levers.execution_risk / 100.0
        funding_risk = levers.funding_pressure / 100.0

        burn_multiplier = (
            1.0
            + 0.30 * hiring_drag
            + 0.20 * operating_cost
            - 0.25 * cost_efficiency
            + 0.10 * funding_risk
        )

        return MonthlyDrivers(
            base_growth=base_growth,
            expansion_boost=expansion_boost,
            pricing_multiplier=pricing_multiplier,
            volatility=0.02 + 0.08 * market_risk,
            execution_shock_probability=0.10 * execution_risk,
            execution_shock_mean=self.execution_shock_mean,
            execution_shock_std=self.execution_shock_std,
            funding_risk=funding_risk,
            funding_stress_threshold=self.funding_stress_threshold,
            burn_multiplier=burn_multiplier,
            burn_volatility=0.02 + 0.04 * operating_cost,
            burn_floor=self.burn_floor,
        )
