"""Rolling-window recomputation of the scaling exponent.

A window of ``window`` returns slides over the series in steps of
``step``; each window gets its own VaR curve and log–log fit, and
optionally a moving-block bootstrap interval.  Windows are independent and
run through :func:`~fractalrisk.parallel.run_isolated`; a window that fails
is recorded in ``RollingReport.failures`` instead of aborting the pass.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike

from ..analysis.common import compute_window_starts, describe_distribution
from ..config import BootstrapConfig
from ..errors import EmptyResult, InvalidParameter, ItemFailure, ScalingError
from ..parallel import derive_seed, run_isolated
from ..preprocessing import AggregationMode, as_returns
from ..preprocessing.core import _as_mode
from ..risk.var import _check_level
from .bootstrap import mbb_alpha_ci
from .curve import ScalingCurve, build_curve, check_horizons
from .regression import AlphaFit, fit

__all__ = [
    "RollingWindowResult",
    "RollingReport",
    "rolling",
    "rolling_curves",
]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RollingWindowResult:
    """Fit of one window; ``returns[start_idx:end_idx]`` is the window."""

    window_id: int
    start_idx: int
    end_idx: int
    fit: AlphaFit
    bootstrap_ci: tuple[float, float] | None = None


@dataclass(slots=True)
class RollingReport:
    windows: list[RollingWindowResult]
    n_windows: int
    failures: list[ItemFailure] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.windows)

    def __iter__(self) -> Iterator[RollingWindowResult]:
        return iter(self.windows)

    def __getitem__(self, i: int) -> RollingWindowResult:
        return self.windows[i]

    @property
    def alphas(self) -> np.ndarray:
        return np.array([w.fit.alpha for w in self.windows], dtype=float)

    def summary(self) -> dict[str, Any]:
        """Distribution of α across windows and a coarse stability label."""
        stats = describe_distribution(self.alphas)
        mean = stats.get("mean", 0.0)
        cv = stats["std"] / abs(mean) if mean else float("nan")
        if not np.isfinite(cv):
            stability = "undefined"
        elif cv < 0.1:
            stability = "high"
        elif cv < 0.2:
            stability = "medium"
        else:
            stability = "low"
        return {
            **stats,
            "coef_variation": cv,
            "stability": stability,
            "processed_windows": len(self.windows),
            "failed_windows": len(self.failures),
        }

    def to_frame(self) -> pd.DataFrame:
        rows = []
        for w in self.windows:
            lo, hi = w.bootstrap_ci if w.bootstrap_ci is not None else (np.nan, np.nan)
            rows.append(
                {
                    "window_id": w.window_id,
                    "start_idx": w.start_idx,
                    "end_idx": w.end_idx,
                    "alpha": w.fit.alpha,
                    "alpha_se": w.fit.alpha_se,
                    "alpha_ci_lower_param": w.fit.alpha_ci[0],
                    "alpha_ci_upper_param": w.fit.alpha_ci[1],
                    "alpha_ci_lower_boot": lo,
                    "alpha_ci_upper_boot": hi,
                    "r2": w.fit.r2,
                    "n_points": w.fit.n_points,
                }
            )
        return pd.DataFrame(rows)


def _window_bounds(n: int, window: int, step: int) -> list[int]:
    window, step = int(window), int(step)
    if window <= 0 or step <= 0:
        raise InvalidParameter("window and step must be positive integers")
    if window > n:
        raise InvalidParameter(f"Window ({window}) larger than the series ({n})")
    return compute_window_starts(n, window, step)


# ------------------------------------------------------------------ #
def rolling(
    returns: ArrayLike,
    horizons: Iterable[int],
    q: float,
    window: int = 750,
    step: int = 20,
    mode: AggregationMode | str = AggregationMode.OVERLAPPING,
    bootstrap: BootstrapConfig | None = None,
    *,
    min_obs_per_h: int = 50,
    max_workers: int | None = None,
    cancel: threading.Event | None = None,
) -> RollingReport:
    """Scaling exponent α on sliding windows.

    Parameters
    ----------
    returns : array-like
        Base-period returns.
    horizons : iterable of int
        Horizons of every per-window curve.
    q : float
        Confidence level.
    window, step : int
        Window length and offset between consecutive windows.
    mode : AggregationMode or str
        Aggregation used for the per-window curves.
    bootstrap : BootstrapConfig, optional
        When given with ``B > 0``, each window also gets a moving-block
        bootstrap interval seeded with ``derive_seed(bootstrap.seed, window_id)``.
    max_workers : int, optional
        Thread-pool size for the windows.  Bootstraps inside windows run
        inline whenever the windows themselves run in parallel.
    cancel : threading.Event, optional
        Stops launching further windows once set.

    Returns
    -------
    RollingReport
        Successful windows in order, plus the failed ones.
    """
    q = _check_level(q)
    mode = _as_mode(mode)
    hs = check_horizons(horizons)
    x = as_returns(returns)
    starts = _window_bounds(x.size, window, step)
    window = int(window)
    use_boot = bootstrap is not None and bootstrap.enabled
    inner_workers = None if max_workers == 1 else 1

    def _one(i: int) -> tuple[RollingWindowResult, list[str]]:
        start = starts[i]
        window_id = i + 1
        r_win = x[start : start + window]
        curve = build_curve(r_win, hs, q, mode, min_obs_per_h)
        alpha_fit = fit(curve, min_obs_per_h=min_obs_per_h)
        notes = [f"window {window_id}: {msg}" for msg in alpha_fit.warnings]

        ci = None
        if use_boot:
            try:
                ci = mbb_alpha_ci(
                    r_win,
                    hs,
                    q,
                    block_len=bootstrap.block_len,
                    B=bootstrap.B,
                    seed=derive_seed(bootstrap.seed, window_id),
                    min_obs_per_h=min_obs_per_h,
                    max_workers=inner_workers,
                    cancel=cancel,
                )
            except ScalingError as exc:
                notes.append(f"window {window_id}: bootstrap failed: {exc}")

        result = RollingWindowResult(
            window_id=window_id,
            start_idx=start,
            end_idx=start + window,
            fit=alpha_fit,
            bootstrap_ci=ci,
        )
        return result, notes

    outcomes = run_isolated(_one, len(starts), max_workers=max_workers, cancel=cancel)

    windows: list[RollingWindowResult] = []
    failures: list[ItemFailure] = []
    warnings: list[str] = []
    for o in outcomes:
        if o.ok:
            res, notes = o.value
            windows.append(res)
            warnings.extend(notes)
        elif o.cancelled:
            failures.append(ItemFailure(o.index + 1, "cancelled"))
        else:
            failures.append(ItemFailure(o.index + 1, o.error))
            warnings.append(f"window {o.index + 1} skipped: {o.error}")

    if not windows:
        raise EmptyResult("No window could be processed")

    logger.debug("Rolling alpha: %d/%d windows", len(windows), len(starts))
    return RollingReport(
        windows=windows, n_windows=len(starts), failures=failures, warnings=warnings
    )


def rolling_curves(
    returns: ArrayLike,
    horizons: Iterable[int],
    q: float,
    window: int = 750,
    step: int = 20,
    mode: AggregationMode | str = AggregationMode.OVERLAPPING,
    *,
    min_obs_per_h: int = 50,
    max_workers: int | None = None,
    cancel: threading.Event | None = None,
) -> tuple[list[tuple[int, ScalingCurve]], list[ItemFailure]]:
    """VaR/ES curve of every window as ``(window_id, curve)`` pairs.

    Failed windows are returned separately; unlike :func:`rolling` an empty
    result is not an error.
    """
    q = _check_level(q)
    mode = _as_mode(mode)
    hs = check_horizons(horizons)
    x = as_returns(returns)
    starts = _window_bounds(x.size, window, step)
    window = int(window)

    def _one(i: int) -> ScalingCurve:
        start = starts[i]
        return build_curve(x[start : start + window], hs, q, mode, min_obs_per_h)

    outcomes = run_isolated(_one, len(starts), max_workers=max_workers, cancel=cancel)
    curves = [(o.index + 1, o.value) for o in outcomes if o.ok]
    failures = [
        ItemFailure(o.index + 1, "cancelled" if o.cancelled else o.error)
        for o in outcomes
        if not o.ok
    ]
    return curves, failures
