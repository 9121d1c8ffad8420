"""Isolated execution of independent tasks.

Bootstrap replicates and rolling windows are embarrassingly parallel: each
task only reads the (immutable) base series.  :func:`run_isolated` runs
them on a thread pool, turns expected failures into :class:`TaskOutcome`
records instead of exceptions, and honours a cooperative cancel signal.

Reproducibility does not depend on scheduling because every task draws
from its own stream, obtained with :func:`derive_seed`.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Generic, TypeVar

import numpy as np

from .errors import ScalingError

__all__ = ["TaskOutcome", "run_isolated", "derive_seed"]

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Failures a single task may have without affecting its siblings.
ISOLATED_ERRORS: tuple[type[BaseException], ...] = (ScalingError, ArithmeticError)


@dataclass(slots=True)
class TaskOutcome(Generic[T]):
    index: int
    value: T | None = None
    error: str | None = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.cancelled


def derive_seed(
    root: int | np.random.SeedSequence | None, *index: int
) -> np.random.SeedSequence:
    """Seed sequence for the task at ``index`` below ``root``.

    ``derive_seed(root, i)`` equals the ``i``-th child of
    ``SeedSequence(root).spawn(...)``, so per-task streams are fixed by the
    root seed and the index alone.
    """
    if isinstance(root, np.random.SeedSequence):
        return np.random.SeedSequence(
            root.entropy, spawn_key=tuple(root.spawn_key) + tuple(index)
        )
    return np.random.SeedSequence(root, spawn_key=tuple(int(i) for i in index))


def _run_one(
    func: Callable[[int], T],
    index: int,
    cancel: threading.Event | None,
) -> TaskOutcome[T]:
    if cancel is not None and cancel.is_set():
        return TaskOutcome(index, cancelled=True)
    try:
        return TaskOutcome(index, value=func(index))
    except ISOLATED_ERRORS as exc:
        logger.debug("Task %d failed: %s", index, exc)
        return TaskOutcome(index, error=f"{type(exc).__name__}: {exc}")


def run_isolated(
    func: Callable[[int], T],
    n_tasks: int,
    *,
    max_workers: int | None = None,
    cancel: threading.Event | None = None,
) -> list[TaskOutcome[T]]:
    """Evaluate ``func(i)`` for ``i in range(n_tasks)``.

    Parameters
    ----------
    func : callable
        Task body receiving the task index.
    n_tasks : int
        Number of tasks.
    max_workers : int, optional
        Thread-pool size; ``1`` runs the tasks inline in index order.
    cancel : threading.Event, optional
        Checked before each task starts; once set, the remaining tasks are
        reported as cancelled.

    Returns
    -------
    list of TaskOutcome
        One outcome per task, ordered by index.  Errors outside the
        package's exception family are not captured and propagate.
    """
    if n_tasks <= 0:
        return []

    if max_workers == 1:
        return [_run_one(func, i, cancel) for i in range(n_tasks)]

    outcomes: list[TaskOutcome[T]] = []
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [pool.submit(_run_one, func, i, cancel) for i in range(n_tasks)]
        for fut in as_completed(futures):
            outcomes.append(fut.result())
    outcomes.sort(key=lambda o: o.index)
    return outcomes
