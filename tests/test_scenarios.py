"""End-to-end scenarios on the reference balance sheet."""

import asyncio
import threading
import time
from dataclasses import replace

import pytest

from analysis.aggregator import aggregate
from analysis.decisions import rating_for_score
from analysis.pipeline import run_monte_carlo, run_monte_carlo_async, run_simulation
from behaviors.presets import LEVER_PRESETS, get_lever_preset
from core.config import SensitivitySettings, SimulationConfig
from core.errors import Cancelled, InvalidConfiguration, SimulationTimeout
from core.schema import LeverState
from engine.runner import run_ensemble

REFERENCE = SimulationConfig(
    iterations=1000,
    time_horizon_months=36,
    starting_cash=4_000_000.0,
    starting_arr=4_800_000.0,
    monthly_burn=47_000.0,
)
FAST = SensitivitySettings(runs=20)


@pytest.fixture(scope="module")
def reference_result():
    return aggregate(run_ensemble(LeverState(), REFERENCE), REFERENCE)


def test_neutral_reference_survives(reference_result):
    assert reference_result.iterations == 1000
    assert reference_result.survival_rate > 0.8
    assert reference_result.median_survival_months == 36


def test_ten_times_burn_lowers_survival(reference_result):
    heavy = replace(REFERENCE, monthly_burn=REFERENCE.monthly_burn * 10)
    result = aggregate(run_ensemble(LeverState(), heavy), heavy)
    assert result.survival_rate < reference_result.survival_rate


def test_zero_iterations_returns_no_result():
    with pytest.raises(InvalidConfiguration):
        run_monte_carlo(LeverState(), replace(REFERENCE, iterations=0))


def test_cancel_after_first_chunk():
    cancel = threading.Event()
    with pytest.raises(Cancelled) as exc:
        run_monte_carlo(
            LeverState(), replace(REFERENCE, time_horizon_months=3),
            on_progress=lambda p: cancel.set(),
            cancel_event=cancel,
        )
    assert exc.value.completed_iterations == 500


def test_run_simulation_end_to_end():
    config = SimulationConfig(iterations=80, time_horizon_months=12)
    output = run_simulation(LeverState(), config, sensitivity=FAST)
    assert len(output.result.sensitivity_factors) == 9
    assert output.result.execution_time_ms > 0
    assert output.result.iterations == 80
    assert output.verdict.overall_rating is rating_for_score(output.verdict.overall_score)
    assert output.verdict.critical_lever == output.result.sensitivity_factors[0].label


def test_async_pipeline_matches_sync():
    config = SimulationConfig(iterations=40, time_horizon_months=6)
    sync = run_monte_carlo(LeverState(), config, sensitivity=FAST)
    result = asyncio.run(run_monte_carlo_async(LeverState(), config, sensitivity=FAST))
    assert result.all_simulations == sync.all_simulations
    assert result.sensitivity_factors == sync.sensitivity_factors


def test_timeout_covers_sensitivity_pass():
    # the main ensemble is one chunk; the budget runs out during the progress callback
    with pytest.raises(SimulationTimeout):
        run_monte_carlo(
            LeverState(), SimulationConfig(iterations=60, time_horizon_months=12),
            timeout_seconds=0.2,
            on_progress=lambda p: time.sleep(0.3),
            sensitivity=FAST,
        )


def test_async_pipeline_keeps_loop_responsive():
    config = SimulationConfig(iterations=60, time_horizon_months=12)
    ticks = 0
    at_last_chunk = []

    async def main():
        done = False

        async def ticker():
            nonlocal ticks
            while not done:
                ticks += 1
                await asyncio.sleep(0)

        def record(progress):
            if progress.completed_iterations == progress.total_iterations:
                at_last_chunk.append(ticks)

        task = asyncio.create_task(ticker())
        await run_monte_carlo_async(
            LeverState(), config, on_progress=record, sensitivity=SensitivitySettings(runs=50)
        )
        done = True
        await task

    asyncio.run(main())
    # aggregation and sensitivity must not hold the loop
    assert ticks - at_last_chunk[0] >= 10


@pytest.mark.parametrize("name", sorted(LEVER_PRESETS))
def test_presets_run(name):
    preset = get_lever_preset(name)
    config = preset.config(SimulationConfig(iterations=30, time_horizon_months=12))
    result = aggregate(run_ensemble(preset.levers, config), config)
    assert result.iterations == 30
    assert config.starting_cash == preset.starting_cash


def test_unknown_preset():
    with pytest.raises(KeyError):
        get_lever_preset("moonshot")
