import threading
import time

import pytest

from analysis.sensitivity import compute_tornado, estimate_sensitivity
from core.config import SensitivitySettings
from core.errors import Cancelled, InvalidConfiguration, SimulationTimeout
from core.schema import LEVER_NAMES, LeverState

FAST = SensitivitySettings(runs=20)


@pytest.fixture
def factors(neutral_levers, small_config, small_result):
    return estimate_sensitivity(neutral_levers, small_config, small_result, settings=FAST)


def test_one_factor_per_lever(factors):
    assert len(factors) == 9
    assert sorted(f.lever for f in factors) == sorted(LEVER_NAMES)


def test_impacts_are_bounded_and_ranked(factors):
    magnitudes = [abs(f.impact) for f in factors]
    assert all(m <= 1.0 for m in magnitudes)
    assert magnitudes == sorted(magnitudes, reverse=True)
    for f in factors:
        assert f.direction == ("positive" if f.impact >= 0 else "negative")


def test_signs_follow_the_dynamics(factors):
    by_lever = {f.lever: f for f in factors}
    # more demand grows ARR on the same draws; more hiring only adds burn
    assert by_lever["demand_strength"].impact > 0
    assert by_lever["cost_discipline"].impact > 0
    assert by_lever["hiring_intensity"].impact < 0


def test_sensitivity_is_deterministic(neutral_levers, small_config, small_result, factors):
    again = estimate_sensitivity(neutral_levers, small_config, small_result, settings=FAST)
    assert again == factors


def test_levers_at_bounds(small_config, small_result):
    levers = LeverState(demand_strength=100.0, cost_discipline=0.0)
    result = estimate_sensitivity(levers, small_config, small_result, settings=FAST)
    assert len(result) == 9
    assert all(abs(f.impact) <= 1.0 for f in result)


def test_bad_settings_are_rejected(neutral_levers, small_config, small_result):
    with pytest.raises(InvalidConfiguration):
        estimate_sensitivity(
            neutral_levers, small_config, small_result, settings=SensitivitySettings(runs=0)
        )


def test_cancellation_is_honoured(neutral_levers, small_config, small_result):
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(Cancelled):
        estimate_sensitivity(
            neutral_levers, small_config, small_result, settings=FAST, cancel_event=cancel
        )


def test_deadline_is_honoured(neutral_levers, small_config, small_result):
    with pytest.raises(SimulationTimeout):
        estimate_sensitivity(
            neutral_levers, small_config, small_result, settings=FAST, deadline=time.monotonic()
        )


def test_tornado(neutral_levers, small_config):
    bars = compute_tornado(neutral_levers, small_config, settings=FAST)
    assert len(bars) == 9
    spreads = [b.spread for b in bars]
    assert spreads == sorted(spreads, reverse=True)
    assert len(compute_tornado(neutral_levers, small_config, settings=FAST, top=3)) == 3
