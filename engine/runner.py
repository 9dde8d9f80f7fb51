"""
Ensemble runner — orchestrates N independent trajectories through the simulator.

Iterations run in fixed-size chunks. Between chunks (and only there) the
runner:
  - checks the cancellation event and the wall-clock deadline
  - reports Progress(completed_iterations, total_iterations)
  - in the async variant, yields to the event loop

A cancelled or timed-out run raises Cancelled / SimulationTimeout and throws
away whatever it had; callers never see a truncated ensemble.

Each iteration writes exactly one slot of an EnsembleBuffer, keyed by its
iteration index, so the result is the same whether chunks run sequentially
or are fanned out over a process pool.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
import time
from concurrent.futures import Executor, Future, ProcessPoolExecutor
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple, Union

from core.config import SimulationConfig
from core.errors import Cancelled, SimulationTimeout
from core.schema import LeverState, SingleSimulationResult
from core.validation import check_inputs, validate_inputs

from .trajectory import simulate

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 500

SimulateFn = Callable[[int, LeverState, SimulationConfig], SingleSimulationResult]


@dataclass(frozen=True)
class Progress:
    completed_iterations: int
    total_iterations: int

    @property
    def fraction(self) -> float:
        return self.completed_iterations / self.total_iterations if self.total_iterations else 1.0


ProgressCallback = Callable[[Progress], Union[None, Awaitable[None]]]


class EnsembleBuffer:
    """Write-once result slots, one per iteration index."""

    def __init__(self, size: int):
        self._slots: List[Optional[SingleSimulationResult]] = [None] * size

    def put(self, result: SingleSimulationResult) -> None:
        i = result.iteration_index
        if not 0 <= i < len(self._slots):
            raise IndexError(f"iteration_index {i} outside 0..{len(self._slots) - 1}.")
        if self._slots[i] is not None:
            raise RuntimeError(f"Slot {i} written twice.")
        self._slots[i] = result

    @property
    def filled(self) -> int:
        return sum(1 for s in self._slots if s is not None)

    def collect(self) -> List[SingleSimulationResult]:
        missing = [i for i, s in enumerate(self._slots) if s is None]
        if missing:
            raise RuntimeError(f"{len(missing)} iterations never completed (first: {missing[0]}).")
        return list(self._slots)


def chunk_bounds(total: int, chunk_size: int) -> List[Tuple[int, int]]:
    """[(start, stop), ...] covering 0..total-1 in chunk_size steps."""
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}.")
    return [(start, min(start + chunk_size, total)) for start in range(0, total, chunk_size)]


def _simulate_range(
    simulate_fn: SimulateFn,
    start: int,
    stop: int,
    levers: LeverState,
    config: SimulationConfig,
) -> List[SingleSimulationResult]:
    return [simulate_fn(i, levers, config) for i in range(start, stop)]


def _split(start: int, stop: int, parts: int) -> List[Tuple[int, int]]:
    size = -(-(stop - start) // parts)
    return [(s, min(s + size, stop)) for s in range(start, stop, size)]


class _ChunkedRun:
    """Shared state and chunk mechanics for the sync and async drivers."""

    def __init__(
        self,
        levers: LeverState,
        config: SimulationConfig,
        *,
        cancel_event: Optional[threading.Event],
        chunk_size: int,
        timeout_seconds: Optional[float],
        deadline: Optional[float],
        simulate_fn: SimulateFn,
        executor: Optional[Executor],
        workers: int,
        log_warnings: bool,
    ):
        if log_warnings:
            validate_inputs(levers, config)
        else:
            check_inputs(levers, config)
        self.levers = levers
        self.config = config
        self.total = int(config.iterations)
        self.chunks = chunk_bounds(self.total, chunk_size)
        self.cancel_event = cancel_event
        self.deadline = _earliest(
            deadline,
            time.monotonic() + timeout_seconds if timeout_seconds is not None else None,
        )
        self.timeout_seconds = timeout_seconds
        self.simulate_fn = simulate_fn
        self.executor = executor
        self.workers = workers
        self.buffer = EnsembleBuffer(self.total)
        self.completed = 0

    def check_interrupts(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            logger.info("Cancellation requested at %d/%d iterations", self.completed, self.total)
            raise Cancelled(self.completed, self.total)
        if self.deadline is not None and time.monotonic() >= self.deadline:
            reason = f"timeout {self.timeout_seconds}s" if self.timeout_seconds is not None else "deadline"
            logger.info("%s reached at %d/%d iterations", reason, self.completed, self.total)
            raise SimulationTimeout(self.completed, self.total, reason=reason)

    def _submit(self, start: int, stop: int) -> List[Future]:
        return [
            self.executor.submit(_simulate_range, self.simulate_fn, s, e, self.levers, self.config)
            for s, e in _split(start, stop, self.workers)
        ]

    def _store(self, batches, stop: int) -> Progress:
        for batch in batches:
            for result in batch:
                self.buffer.put(result)
        start = self.completed
        self.completed = stop
        logger.debug("Chunk %d-%d done (%d/%d)", start, stop, self.completed, self.total)
        return Progress(self.completed, self.total)

    def run_chunk(self, start: int, stop: int) -> Progress:
        if self.executor is None:
            batches = [_simulate_range(self.simulate_fn, start, stop, self.levers, self.config)]
        else:
            batches = [f.result() for f in self._submit(start, stop)]
        return self._store(batches, stop)

    async def run_chunk_async(self, start: int, stop: int) -> Progress:
        if self.executor is None:
            batches = [_simulate_range(self.simulate_fn, start, stop, self.levers, self.config)]
        else:
            futures = self._submit(start, stop)
            batches = await asyncio.gather(*(asyncio.wrap_future(f) for f in futures))
        return self._store(batches, stop)


def _earliest(*deadlines: Optional[float]) -> Optional[float]:
    present = [d for d in deadlines if d is not None]
    return min(present) if present else None


def _make_executor(max_workers: Optional[int]) -> Optional[Executor]:
    if max_workers is None or max_workers <= 1:
        return None
    return ProcessPoolExecutor(max_workers=max_workers)


def run_ensemble(
    levers: LeverState,
    config: SimulationConfig,
    *,
    on_progress: Optional[Callable[[Progress], None]] = None,
    cancel_event: Optional[threading.Event] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    timeout_seconds: Optional[float] = None,
    deadline: Optional[float] = None,
    max_workers: Optional[int] = None,
    simulate_fn: SimulateFn = simulate,
    log_warnings: bool = True,
) -> List[SingleSimulationResult]:
    """
    Run config.iterations trajectories, indices 0..iterations-1.

    Parameters
    ----------
    levers, config
        Validated up front; InvalidConfiguration is raised before any work.
    on_progress : callable, optional
        Called with Progress after every chunk.
    cancel_event : threading.Event, optional
        Checked before each chunk starts; once set, the run raises Cancelled.
    chunk_size : int
        Iterations per chunk (default 500).
    timeout_seconds : float, optional
        Wall-clock budget, checked at chunk boundaries (SimulationTimeout).
    deadline : float, optional
        Absolute time.monotonic() value, for runs that share a budget with
        other work. The earlier of this and timeout_seconds applies.
    max_workers : int, optional
        > 1 fans each chunk out over a process pool. simulate_fn must be
        picklable (a module-level function) in that case.
    simulate_fn : callable
        The per-iteration simulator; defaults to engine.trajectory.simulate.
    log_warnings : bool
        Log input warnings once for this run. False for sub-runs whose
        parent already logged them.

    Returns
    -------
    List of SingleSimulationResult, ordered by iteration_index.
    """
    executor = _make_executor(max_workers)
    try:
        run = _ChunkedRun(
            levers, config,
            cancel_event=cancel_event,
            chunk_size=chunk_size,
            timeout_seconds=timeout_seconds,
            deadline=deadline,
            simulate_fn=simulate_fn,
            executor=executor,
            workers=max_workers or 1,
            log_warnings=log_warnings,
        )
        logger.info("Running %d iterations in %d chunks", run.total, len(run.chunks))
        for start, stop in run.chunks:
            run.check_interrupts()
            progress = run.run_chunk(start, stop)
            if on_progress is not None:
                on_progress(progress)
        results = run.buffer.collect()
    finally:
        if executor is not None:
            executor.shutdown(cancel_futures=True)
    logger.info("Completed %d iterations", len(results))
    return results


async def run_ensemble_async(
    levers: LeverState,
    config: SimulationConfig,
    *,
    on_progress: Optional[ProgressCallback] = None,
    cancel_event: Optional[threading.Event] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    timeout_seconds: Optional[float] = None,
    deadline: Optional[float] = None,
    max_workers: Optional[int] = None,
    simulate_fn: SimulateFn = simulate,
) -> List[SingleSimulationResult]:
    """
    Cooperative variant of run_ensemble for an asyncio host.

    Without a pool each chunk runs on the loop's thread; with one, the loop
    awaits the workers instead of blocking on them. After every chunk the
    progress callback (sync or async) is invoked and control is handed back
    to the loop. A task cancelled by the host stops at that suspension point.
    """
    executor = _make_executor(max_workers)
    try:
        run = _ChunkedRun(
            levers, config,
            cancel_event=cancel_event,
            chunk_size=chunk_size,
            timeout_seconds=timeout_seconds,
            deadline=deadline,
            simulate_fn=simulate_fn,
            executor=executor,
            workers=max_workers or 1,
            log_warnings=True,
        )
        logger.info("Running %d iterations in %d chunks (async)", run.total, len(run.chunks))
        for start, stop in run.chunks:
            run.check_interrupts()
            progress = await run.run_chunk_async(start, stop)
            if on_progress is not None:
                maybe = on_progress(progress)
                if inspect.isawaitable(maybe):
                    await maybe
            await asyncio.sleep(0)
        results = run.buffer.collect()
    finally:
        if executor is not None:
            executor.shutdown(cancel_futures=True)
    logger.info("Completed %d iterations", len(results))
    return results


def run_batch(
    levers: LeverState,
    config: SimulationConfig,
    iterations: int,
    *,
    cancel_event: Optional[threading.Event] = None,
    deadline: Optional[float] = None,
) -> Sequence[SingleSimulationResult]:
    """
    Small ensemble (indices 0..iterations-1) for perturbation and stress runs.

    Batches are sub-runs of a larger analysis: input warnings are not logged
    here, and deadline is the parent run's absolute cutoff.
    """
    return run_ensemble(
        levers,
        replace(config, iterations=iterations),
        cancel_event=cancel_event,
        deadline=deadline,
        log_warnings=False,
    )
