import pytest

from behaviors.lever import LeverDynamicsModel
from core.config import SimulationConfig
from core.schema import LEVER_NAMES, LeverState


def test_neutral_drivers():
    d = LeverDynamicsModel().drivers(LeverState(), SimulationConfig())
    assert d.base_growth == 0.0
    assert d.expansion_boost == 0.0
    assert d.pricing_multiplier == 1.0
    assert d.volatility == pytest.approx(0.06)
    assert d.execution_shock_probability == pytest.approx(0.05)
    assert d.burn_multiplier == pytest.approx(1.125)


def test_levers_push_drivers_the_right_way():
    model = LeverDynamicsModel()
    config = SimulationConfig()
    low = model.drivers(LeverState(demand_strength=20, cost_discipline=20, market_volatility=20), config)
    high = model.drivers(LeverState(demand_strength=80, cost_discipline=80, market_volatility=80), config)
    assert high.base_growth > low.base_growth
    assert high.burn_multiplier < low.burn_multiplier
    assert high.volatility > low.volatility


def test_with_lever_clamps_and_copies():
    base = LeverState()
    moved = base.with_lever("hiring_intensity", 140)
    assert moved.hiring_intensity == 100.0
    assert base.hiring_intensity == 50.0
    assert list(moved.as_dict()) == list(LEVER_NAMES)
    with pytest.raises(KeyError):
        base.with_lever("burn", 10)
