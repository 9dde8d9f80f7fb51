"""
Trajectory simulator — one venture, one seeded random stream, month by month.

Survival convention:
  - A venture dies in the first month whose closing cash is <= 0. Cash of
    exactly zero is death.
  - survival_months is the month of death, or the horizon if it never dies.
  - did_survive is True iff no month within the horizon closed at <= 0 cash.
    A venture that dies in the final month has survival_months == horizon
    and did_survive == False.
  - The snapshot for the month of death is recorded; nothing after it is.
"""

from __future__ import annotations

import math
from typing import List, Optional

from behaviors.base import DynamicsModel
from behaviors.lever import LeverDynamicsModel
from core.config import SimulationConfig
from core.errors import SimulationDivergence
from core.schema import LeverState, MonthlySnapshot, SingleSimulationResult
from core.validation import check_inputs
from distributions.sampler import sample_shock_paths

from .events import simulate_month

TARGET_ARR_MULTIPLE = 2.0

_DEFAULT_MODEL = LeverDynamicsModel()


def simulate(
    iteration_index: int,
    levers: LeverState,
    config: SimulationConfig,
    *,
    model: Optional[DynamicsModel] = None,
) -> SingleSimulationResult:
    """
    Simulate one trajectory.

    Pure: the output depends only on the arguments. The same iteration_index
    with the same levers/config always yields a bit-identical result.

    Raises
    ------
    InvalidConfiguration
        Non-finite or out-of-range inputs, iterations <= 0, horizon <= 0.
    SimulationDivergence
        ARR or cash became non-finite mid-trajectory.
    """
    check_inputs(levers, config)
    if model is None:
        model = _DEFAULT_MODEL

    drivers = model.drivers(levers, config)
    horizon = int(config.time_horizon_months)
    shocks = sample_shock_paths(iteration_index, horizon, config.seed)

    # plain floats in the loop; numpy scalars are slow here
    market_z = shocks.market_z.tolist()
    execution_u = shocks.execution_u.tolist()
    execution_z = shocks.execution_z.tolist()
    burn_z = shocks.burn_z.tolist()

    base_burn = float(config.monthly_burn)
    starting_cash = float(config.starting_cash)
    arr = float(config.starting_arr)
    cash = starting_cash

    snapshots: List[MonthlySnapshot] = []
    peak_arr = arr
    lowest_cash = cash
    survival_months = horizon
    did_survive = True

    for t in range(horizon):
        month = t + 1
        event = simulate_month(
            arr=arr,
            cash=cash,
            drivers=drivers,
            base_burn=base_burn,
            starting_cash=starting_cash,
            market_z=market_z[t],
            execution_u=execution_u[t],
            execution_z=execution_z[t],
            burn_z=burn_z[t],
        )
        if not (math.isfinite(event.arr) and math.isfinite(event.cash)):
            raise SimulationDivergence(
                iteration_index, month, f"arr={event.arr!r}, cash={event.cash!r}"
            )

        arr = event.arr
        cash = event.cash
        peak_arr = max(peak_arr, arr)
        lowest_cash = min(lowest_cash, cash)

        snapshots.append(
            MonthlySnapshot(
                month=month,
                arr=arr,
                cash=cash,
                burn=event.burn,
                runway=event.runway,
                growth_rate=event.growth_rate,
            )
        )

        if cash <= 0:
            did_survive = False
            survival_months = month
            break

    last = snapshots[-1]
    return SingleSimulationResult(
        iteration_index=int(iteration_index),
        final_arr=last.arr,
        final_cash=last.cash,
        final_runway=last.runway,
        survival_months=survival_months,
        did_survive=did_survive,
        monthly_snapshots=tuple(snapshots),
        peak_arr=peak_arr,
        lowest_cash=lowest_cash,
        did_achieve_target=last.arr >= float(config.starting_arr) * TARGET_ARR_MULTIPLE,
    )
