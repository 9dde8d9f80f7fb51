"""
Error taxonomy for the engine.

Everything surfaces to the immediate caller. Nothing is retried: the
computation is deterministic, so there is nothing transient to retry.
"""

from __future__ import annotations

from typing import Iterable, List, Optional


class EngineError(Exception):
    """Base class for all engine failures."""


class InvalidConfiguration(EngineError, ValueError):
    """Levers or config rejected before any simulation work started."""

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        super().__init__("Invalid configuration: " + "; ".join(self.errors))


class SimulationDivergence(EngineError, ArithmeticError):
    """A trajectory produced non-finite state. The trajectory is rejected."""

    def __init__(self, iteration_index: int, month: int, detail: str):
        self.iteration_index = iteration_index
        self.month = month
        super().__init__(
            f"Iteration {iteration_index} diverged at month {month}: {detail}"
        )


class Cancelled(EngineError):
    """Run stopped at a chunk boundary on caller request. Partial results are discarded."""

    def __init__(self, completed_iterations: int, total_iterations: int, reason: Optional[str] = None):
        self.completed_iterations = completed_iterations
        self.total_iterations = total_iterations
        msg = f"Run cancelled after {completed_iterations}/{total_iterations} iterations"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class SimulationTimeout(Cancelled):
    """Run exceeded its wall-clock budget."""


class EmptyEnsemble(EngineError, ValueError):
    """Aggregation was asked to reduce zero trajectories."""


class IncompleteEnsemble(EngineError, ValueError):
    """Ensemble size or iteration indices do not match the config that produced it."""
