"""Shared fixtures: small configs, a drift-free dynamics model and result builders."""

from __future__ import annotations

from typing import Optional, Sequence

import pytest

from analysis.aggregator import aggregate
from behaviors.base import DynamicsModel, MonthlyDrivers
from core.config import SimulationConfig
from core.schema import LeverState, MonthlySnapshot, SingleSimulationResult
from engine.runner import run_ensemble


class FlatModel(DynamicsModel):
    """No growth, no noise, burn exactly equal to the configured base burn."""

    def drivers(self, levers, config):
        return MonthlyDrivers(
            base_growth=0.0,
            expansion_boost=0.0,
            pricing_multiplier=1.0,
            volatility=0.0,
            execution_shock_probability=0.0,
            execution_shock_mean=0.0,
            execution_shock_std=0.0,
            funding_risk=0.0,
            funding_stress_threshold=0.0,
            burn_multiplier=1.0,
            burn_volatility=0.0,
            burn_floor=0.5,
        )


@pytest.fixture
def neutral_levers():
    return LeverState()


@pytest.fixture
def small_config():
    return SimulationConfig(iterations=60, time_horizon_months=12)


@pytest.fixture
def flat_model():
    return FlatModel()


@pytest.fixture
def small_result(neutral_levers, small_config):
    return aggregate(run_ensemble(neutral_levers, small_config), small_config)


@pytest.fixture
def make_result():
    """
    Build a SingleSimulationResult from an ARR path.

    Cash is taken from cash_path (defaults to 1.0 every month). A trajectory
    shorter than horizon is treated as dead in its last month.
    """

    def _make(
        index: int,
        arr_path: Sequence[float],
        horizon: int,
        cash_path: Optional[Sequence[float]] = None,
    ) -> SingleSimulationResult:
        cash_path = list(cash_path) if cash_path is not None else [1.0] * len(arr_path)
        snapshots = tuple(
            MonthlySnapshot(month=m + 1, arr=a, cash=c, burn=1.0, runway=float(m), growth_rate=0.0)
            for m, (a, c) in enumerate(zip(arr_path, cash_path))
        )
        died = len(arr_path) < horizon
        return SingleSimulationResult(
            iteration_index=index,
            final_arr=arr_path[-1],
            final_cash=cash_path[-1],
            final_runway=float(len(arr_path)),
            survival_months=len(arr_path),
            did_survive=not died,
            monthly_snapshots=snapshots,
            peak_arr=max(arr_path),
            lowest_cash=min(cash_path),
            did_achieve_target=False,
        )

    return _make
