"""Moving-block bootstrap (MBB) confidence interval for α.

Contiguous blocks keep the short-range serial dependence of the returns, so
the spread of α across resampled series reflects the dependence the
log–log fit sees on the data.  Each replicate

1. resamples the window with :func:`mbb_sample`,
2. rebuilds the overlapping VaR curve,
3. refits α,

and the 2.5 % / 97.5 % percentiles of the successful replicates form the
interval.  Replicate ``b`` draws from ``derive_seed(seed, b)``, hence the
result only depends on ``seed`` and not on the thread schedule.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import ArrayLike

from ..errors import BootstrapUnreliable, InsufficientData, InvalidParameter
from ..parallel import derive_seed, run_isolated
from ..preprocessing import AggregationMode, as_returns
from ..risk.var import _check_level
from .curve import build_curve, check_horizons
from .regression import fit

__all__ = [
    "BootstrapResult",
    "mbb_sample",
    "mbb_alpha_distribution",
    "mbb_alpha_ci",
]

logger = logging.getLogger(__name__)

MIN_SUCCESS_FRACTION = 0.5


@dataclass(slots=True)
class BootstrapResult:
    alphas: np.ndarray
    ci: tuple[float, float]
    n_requested: int
    n_succeeded: int
    n_failed: int
    n_cancelled: int = 0
    warnings: list[str] = field(default_factory=list)


# ------------------------------------------------------------------ #
def mbb_sample(
    x: ArrayLike,
    block_len: int,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Moving-block resample of *x* with exactly ``len(x)`` observations.

    Blocks of ``block_len`` consecutive values start at uniformly drawn
    offsets in ``[0, n - block_len]`` and are concatenated until the length
    reaches ``n``; the surplus of the last block is cut off.
    """
    arr = as_returns(x)
    n = arr.size
    block_len = int(block_len)
    if block_len <= 0:
        raise InvalidParameter(f"block_len must be positive, got {block_len}")
    if block_len > n:
        raise InvalidParameter(
            f"block_len ({block_len}) larger than the series ({n})"
        )

    rng = np.random.default_rng() if rng is None else rng
    n_blocks = -(-n // block_len)
    starts = rng.integers(0, n - block_len + 1, size=n_blocks)
    idx = (starts[:, None] + np.arange(block_len)).ravel()[:n]
    return arr[idx]


def _check_bootstrap_args(n: int, block_len: int, B: int) -> None:
    if block_len <= 0 or B <= 0:
        raise InvalidParameter("block_len and B must be positive")
    if n < 2 * block_len:
        raise InsufficientData(
            f"Window of {n} observations too short for block_len={block_len}"
        )


# ------------------------------------------------------------------ #
def mbb_alpha_distribution(
    window: ArrayLike,
    horizons: Iterable[int],
    q: float,
    block_len: int = 25,
    B: int = 500,
    seed: int | np.random.SeedSequence | None = 123,
    *,
    min_obs_per_h: int = 50,
    y_field: str = "var",
    max_workers: int | None = None,
    cancel: threading.Event | None = None,
) -> BootstrapResult:
    """Bootstrap distribution of α with failure accounting.

    Raises
    ------
    BootstrapUnreliable
        If fewer than half of the ``B`` requested replicates produced an
        estimate (failed and cancelled replicates both count against it).
    """
    q = _check_level(q)
    x = as_returns(window)
    hs = check_horizons(horizons)
    block_len, B = int(block_len), int(B)
    _check_bootstrap_args(x.size, block_len, B)

    def _replicate(b: int) -> float:
        rng = np.random.default_rng(derive_seed(seed, b))
        resampled = mbb_sample(x, block_len, rng)
        curve = build_curve(
            resampled, hs, q, AggregationMode.OVERLAPPING, min_obs_per_h
        )
        return fit(curve, y_field=y_field, min_obs_per_h=min_obs_per_h).alpha

    outcomes = run_isolated(_replicate, B, max_workers=max_workers, cancel=cancel)
    alphas = np.array([o.value for o in outcomes if o.ok], dtype=float)
    n_failed = sum(1 for o in outcomes if o.error is not None)
    n_cancelled = sum(1 for o in outcomes if o.cancelled)

    if alphas.size < MIN_SUCCESS_FRACTION * B:
        raise BootstrapUnreliable(
            f"Too many bootstrap replicates failed: {alphas.size}/{B} succeeded"
            f" ({n_failed} failed, {n_cancelled} cancelled)"
        )

    warnings: list[str] = []
    if n_failed:
        warnings.append(f"{n_failed}/{B} bootstrap replicates failed")
    if n_cancelled:
        warnings.append(f"Bootstrap cancelled; {n_cancelled}/{B} replicates not run")

    lower, upper = np.quantile(alphas, [0.025, 0.975])
    logger.debug("MBB finished: %d/%d valid replicates", alphas.size, B)
    return BootstrapResult(
        alphas=alphas,
        ci=(float(lower), float(upper)),
        n_requested=B,
        n_succeeded=int(alphas.size),
        n_failed=n_failed,
        n_cancelled=n_cancelled,
        warnings=warnings,
    )


def mbb_alpha_ci(
    window: ArrayLike,
    horizons: Iterable[int],
    q: float,
    block_len: int = 25,
    B: int = 500,
    seed: int | np.random.SeedSequence | None = 123,
    **kwargs,
) -> tuple[float, float]:
    """95 % percentile interval for α from ``B`` moving-block replicates."""
    return mbb_alpha_distribution(
        window, horizons, q, block_len, B, seed, **kwargs
    ).ci
