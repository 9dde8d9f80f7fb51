"""
Per-iteration random streams and monthly shock draws.

Every iteration owns an independent numpy Generator derived from
SeedSequence(entropy=seed, spawn_key=(iteration_index,)). Nothing touches the
global numpy random state, so iterations can run in any order, in any process,
and iteration i still produces the same trajectory.

All draws for the whole horizon are taken up front with a fixed layout:
  market_z      standard normal   -> market growth shock
  execution_u   uniform [0, 1)    -> does an execution setback hit this month?
  execution_z   standard normal   -> size of the setback, if it hits
  burn_z        standard normal   -> burn noise

The layout does not depend on the levers. Two runs that differ only in lever
values therefore see identical random numbers (common random numbers), which
is what keeps finite-difference sensitivity estimates from drowning in noise.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


def iteration_rng(iteration_index: int, seed: int = 0) -> np.random.Generator:
    """Independent generator for one iteration."""
    ss = np.random.SeedSequence(entropy=int(seed), spawn_key=(int(iteration_index),))
    return np.random.default_rng(ss)


@dataclass(frozen=True)
class ShockPaths:
    """Monthly draws for one iteration; each array has shape (horizon,)."""
    market_z: np.ndarray
    execution_u: np.ndarray
    execution_z: np.ndarray
    burn_z: np.ndarray

    @property
    def horizon(self) -> int:
        return len(self.market_z)


def sample_shock_paths(iteration_index: int, horizon: int, seed: int = 0) -> ShockPaths:
    """Draw the full horizon of shocks for one iteration."""
    rng = iteration_rng(iteration_index, seed)
    normals = rng.standard_normal((horizon, 3))
    uniforms = rng.random(horizon)
    return ShockPaths(
        market_z=normals[:, 0],
        execution_u=uniforms,
        execution_z=normals[:, 1],
        burn_z=normals[:, 2],
    )
