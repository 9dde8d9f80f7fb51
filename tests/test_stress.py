import logging
import math

import pytest

from analysis.stress import apply_shock, classify_survival, compute_shock_propagation, stress_curve
from core.config import SimulationConfig
from core.errors import InvalidConfiguration
from core.schema import LeverState


def test_apply_shock_moves_three_levers():
    shocked = apply_shock(LeverState(), 100)
    assert shocked.market_volatility == 80.0
    assert shocked.demand_strength == 25.0
    assert shocked.funding_pressure == 70.0
    assert shocked.pricing_power == 50.0
    assert apply_shock(LeverState(), 0) == LeverState()


def test_apply_shock_clamps_to_lever_range():
    shocked = apply_shock(LeverState(), 200)
    assert shocked.market_volatility == 100.0
    assert shocked.demand_strength == 0.0
    assert shocked.funding_pressure == 90.0


@pytest.mark.parametrize("intensity", [-1, 200.5, math.nan])
def test_intensity_out_of_range(intensity):
    with pytest.raises(InvalidConfiguration):
        apply_shock(LeverState(), intensity)


@pytest.mark.parametrize(
    "probability, label",
    [(1.0, "Robust"), (0.75, "Robust"), (0.7499, "Stable"), (0.55, "Stable"),
     (0.35, "Fragile"), (0.3499, "Critical"), (0.0, "Critical")],
)
def test_classification_bands(probability, label):
    assert classify_survival(probability) == label


def test_shock_propagation(neutral_levers, small_config):
    outcome = compute_shock_propagation(neutral_levers, small_config, 50, runs=20)
    assert outcome.shock_intensity_pct == 50.0
    assert math.isclose(outcome.survival_probability + outcome.failure_probability, 1.0)
    assert outcome.classification == classify_survival(outcome.survival_probability)


def test_stress_curve_keeps_intensity_order(neutral_levers, small_config):
    curve = stress_curve(neutral_levers, small_config, (100, 0, 200), runs=10)
    assert [c.shock_intensity_pct for c in curve] == [100.0, 0.0, 200.0]


def test_stress_curve_logs_input_warnings_once(caplog):
    caplog.set_level(logging.WARNING)
    config = SimulationConfig(iterations=10, time_horizon_months=601)
    stress_curve(LeverState(), config, (0.0, 100.0), runs=5)
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING and "exceeds" in r.getMessage()]
    assert len(warnings) == 1
