"""
One month of venture dynamics — deterministic given the month's random draws.

Order within a month:
  1. growth = (organic + expansion + market shock + execution setback) x pricing
  2. funding pressure dampens growth once cash runs low
  3. ARR compounds by growth (floored at zero)
  4. burn = base burn x lever multiplier x (1 + noise), floored
  5. cash += ARR/12 - burn
  6. runway from the post-update position
"""

from __future__ import annotations

from dataclasses import dataclass

from behaviors.base import MonthlyDrivers

RUNWAY_CAP_MONTHS = 120.0


@dataclass(frozen=True)
class MonthEvent:
    """Result of advancing one trajectory by one month."""
    arr: float
    cash: float
    burn: float
    revenue: float
    growth_rate: float
    runway: float
    execution_setback: bool


def runway_months(cash: float, burn: float, revenue: float) -> float:
    """Months of cash left at the current net burn, capped; 0 once cash is gone."""
    if cash <= 0:
        return 0.0
    net_burn = burn - revenue
    if net_burn <= 0:
        return RUNWAY_CAP_MONTHS
    return min(cash / net_burn, RUNWAY_CAP_MONTHS)


def simulate_month(
    *,
    arr: float,
    cash: float,
    drivers: MonthlyDrivers,
    base_burn: float,
    starting_cash: float,
    market_z: float,
    execution_u: float,
    execution_z: float,
    burn_z: float,
) -> MonthEvent:
    """
    Advance ARR and cash by one month.

    Parameters
    ----------
    arr, cash : float
        Opening position for the month
    drivers : MonthlyDrivers
        Lever-derived dynamics for this run
    base_burn, starting_cash : float
        From the run config
    market_z, execution_u, execution_z, burn_z : float
        This month's draws (see distributions/sampler.py)
    """
    setback = execution_u < drivers.execution_shock_probability
    execution_shock = (
        drivers.execution_shock_mean + drivers.execution_shock_std * execution_z
        if setback else 0.0
    )

    growth = (
        drivers.base_growth
        + drivers.expansion_boost
        + drivers.volatility * market_z
        + execution_shock
    )
    growth *= drivers.pricing_multiplier

    if drivers.funding_risk > 0.5 and cash < starting_cash * drivers.funding_stress_threshold:
        growth *= 1.0 - drivers.funding_risk * 0.5

    new_arr = max(0.0, arr * (1.0 + growth))

    burn = base_burn * drivers.burn_multiplier * (1.0 + drivers.burn_volatility * burn_z)
    burn = max(burn, base_burn * drivers.burn_floor)

    revenue = new_arr / 12.0
    new_cash = cash + revenue - burn

    return MonthEvent(
        arr=new_arr,
        cash=new_cash,
        burn=burn,
        revenue=revenue,
        growth_rate=growth,
        runway=runway_months(new_cash, burn, revenue),
        execution_setback=setback,
    )
