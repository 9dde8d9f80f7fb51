import math

import pytest

from core.config import SimulationConfig
from core.errors import EngineError, InvalidConfiguration
from core.schema import LeverState
from core.validation import validate_config, validate_inputs, validate_levers


def test_defaults_are_valid():
    result = validate_inputs(LeverState(), SimulationConfig())
    assert result.is_valid
    assert result.summary() == "✓ All checks passed."


@pytest.mark.parametrize(
    "overrides, fragment",
    [
        ({"iterations": 0}, "iterations"),
        ({"iterations": -5}, "iterations"),
        ({"iterations": 10.0}, "iterations"),
        ({"iterations": True}, "iterations"),
        ({"time_horizon_months": 0}, "time_horizon_months"),
        ({"starting_cash": 0.0}, "starting_cash"),
        ({"starting_cash": math.inf}, "starting_cash"),
        ({"starting_arr": math.nan}, "starting_arr"),
        ({"monthly_burn": -1.0}, "monthly_burn"),
        ({"seed": -1}, "seed"),
    ],
)
def test_bad_config_is_rejected(overrides, fragment):
    config = SimulationConfig(**overrides)
    with pytest.raises(InvalidConfiguration) as exc:
        validate_inputs(LeverState(), config)
    assert any(fragment in e for e in exc.value.errors)


@pytest.mark.parametrize("value", [math.nan, math.inf, -0.5, 100.5])
def test_bad_lever_is_rejected(value):
    levers = LeverState(market_volatility=value)
    assert not validate_levers(levers).is_valid
    with pytest.raises(InvalidConfiguration, match="market_volatility"):
        validate_inputs(levers, SimulationConfig())


def test_all_errors_are_collected():
    config = SimulationConfig(iterations=0, time_horizon_months=0)
    with pytest.raises(InvalidConfiguration) as exc:
        validate_inputs(LeverState(demand_strength=math.nan), config)
    assert len(exc.value.errors) == 3


def test_invalid_configuration_is_a_value_error():
    with pytest.raises(ValueError):
        validate_inputs(LeverState(), SimulationConfig(iterations=0))
    assert issubclass(InvalidConfiguration, EngineError)


def test_long_horizon_warns_but_passes():
    result = validate_config(SimulationConfig(time_horizon_months=700))
    assert result.is_valid
    assert len(result.warnings) == 1
    assert "WARNINGS (1)" in result.summary()


def test_lever_bounds_are_inclusive():
    assert validate_levers(LeverState(demand_strength=0.0, pricing_power=100.0)).is_valid
