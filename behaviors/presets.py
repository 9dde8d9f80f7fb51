"""
Named lever presets for side-by-side strategy comparison.

Each preset is one strategic posture expressed on the nine levers, paired
with the balance sheet it usually comes with. They are starting points for
scenario analysis, not calibrated benchmarks.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict

from core.config import SimulationConfig
from core.schema import LeverState


@dataclass(frozen=True)
class LeverPreset:
    """A named lever configuration and the starting position it assumes."""
    name: str
    description: str
    levers: LeverState
    starting_cash: float
    monthly_burn: float

    def config(self, base: SimulationConfig = SimulationConfig()) -> SimulationConfig:
        """Apply this preset's balance sheet to a base config."""
        return replace(base, starting_cash=self.starting_cash, monthly_burn=self.monthly_burn)


LEVER_PRESETS: Dict[str, LeverPreset] = {
    "neutral": LeverPreset(
        name="Neutral",
        description="Every lever at its midpoint",
        levers=LeverState(),
        starting_cash=4_000_000.0,
        monthly_burn=47_000.0,
    ),
    "current_trajectory": LeverPreset(
        name="Current Trajectory",
        description="Continue as-is with existing resources",
        levers=LeverState(
            demand_strength=60,
            pricing_power=55,
            expansion_velocity=50,
            cost_discipline=75,
            hiring_intensity=30,
            operating_drag=45,
            market_volatility=50,
            execution_risk=35,
            funding_pressure=55,
        ),
        starting_cash=2_800_000.0,
        monthly_burn=180_000.0,
    ),
    "series_b": LeverPreset(
        name="Series B Raise",
        description="Raise $15M, aggressive growth",
        levers=LeverState(
            demand_strength=85,
            pricing_power=72,
            expansion_velocity=80,
            cost_discipline=58,
            hiring_intensity=82,
            operating_drag=55,
            market_volatility=55,
            execution_risk=45,
            funding_pressure=25,
        ),
        starting_cash=19_500_000.0,
        monthly_burn=420_000.0,
    ),
    "profitability": LeverPreset(
        name="Profitability Push",
        description="Bootstrap to profitability, controlled burn",
        levers=LeverState(
            demand_strength=55,
            pricing_power=68,
            expansion_velocity=35,
            cost_discipline=92,
            hiring_intensity=15,
            operating_drag=30,
            market_volatility=45,
            execution_risk=30,
            funding_pressure=60,
        ),
        starting_cash=2_100_000.0,
        monthly_burn=45_000.0,
    ),
    "geographic_expansion": LeverPreset(
        name="Geographic Expansion",
        description="Raise $8M, open two new regions",
        levers=LeverState(
            demand_strength=75,
            pricing_power=62,
            expansion_velocity=72,
            cost_discipline=65,
            hiring_intensity=68,
            operating_drag=60,
            market_volatility=60,
            execution_risk=55,
            funding_pressure=40,
        ),
        starting_cash=11_200_000.0,
        monthly_burn=300_000.0,
    ),
}


def get_lever_preset(name: str) -> LeverPreset:
    """
    Return a named preset.

    Parameters
    ----------
    name : str
        One of: "neutral", "current_trajectory", "series_b",
        "profitability", "geographic_expansion"
    """
    if name not in LEVER_PRESETS:
        raise KeyError(
            f"Unknown preset '{name}'. "
            f"Available: {list(LEVER_PRESETS.keys())}"
        )
    return LEVER_PRESETS[name]
