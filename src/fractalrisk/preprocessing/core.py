"""Return-series preparation and horizon aggregation.

:func:`aggregate` is the horizon aggregator used by every risk computation
in the package.  The remaining helpers form the thin pandas boundary: they
turn priced, timestamped data into the plain return vectors the core works
on, and never run inside the core itself.
"""

from __future__ import annotations

import logging
from enum import Enum

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike
from scipy.stats import chi2, kurtosis, skew

from ..errors import EmptyInput, InsufficientData, InvalidParameter

__all__ = [
    "AggregationMode",
    "as_returns",
    "aggregate",
    "to_returns",
    "clean_returns",
    "summary_stats",
]

logger = logging.getLogger(__name__)


class AggregationMode(str, Enum):
    OVERLAPPING = "overlapping"
    NON_OVERLAPPING = "non_overlapping"


def _as_mode(mode: AggregationMode | str) -> AggregationMode:
    try:
        return AggregationMode(mode)
    except ValueError as exc:
        raise InvalidParameter(
            f"mode must be one of {[m.value for m in AggregationMode]}, got {mode!r}"
        ) from exc


def as_returns(series: pd.Series | ArrayLike) -> np.ndarray:
    """Return *series* as a validated one-dimensional float array.

    Accepts a :class:`pandas.Series`, a NumPy array or any sequence of
    numbers.  Float arrays are passed through without copying.
    """
    if isinstance(series, pd.Series):
        x = series.astype(float).to_numpy()
    else:
        x = np.asarray(series, dtype=float)

    if x.ndim != 1:
        raise InvalidParameter("Return series must be one-dimensional")
    if x.size == 0:
        raise EmptyInput("Return series is empty")
    if not np.all(np.isfinite(x)):
        raise InvalidParameter("Return series contains NaN or infinite values")
    return x


# ------------------------------------------------------------------ #
def aggregate(
    returns: ArrayLike,
    h: int,
    mode: AggregationMode | str = AggregationMode.NON_OVERLAPPING,
) -> np.ndarray:
    """Sum base-period returns into *h*-period returns.

    Parameters
    ----------
    returns : array-like
        Base-period log-returns.
    h : int
        Number of base periods per aggregated observation.
    mode : AggregationMode or str
        ``"non_overlapping"`` yields ``n // h`` disjoint block sums (the
        trailing remainder is dropped); ``"overlapping"`` yields the
        ``n - h + 1`` sliding-window sums.

    Returns
    -------
    ndarray
        Aggregated returns.  For ``h == 1`` the input is returned as is.
    """
    h = int(h)
    if h <= 0:
        raise InvalidParameter(f"Horizon must be positive, got h={h}")
    mode = _as_mode(mode)
    x = as_returns(returns)
    if h == 1:
        return x

    n = x.size
    if n < h:
        raise InsufficientData(
            f"Series of length {n} too short for horizon h={h}"
        )

    if mode is AggregationMode.OVERLAPPING:
        return np.convolve(x, np.ones(h), mode="valid")

    k = n // h
    return x[: k * h].reshape(k, h).sum(axis=1)


# ------------------------------------------------------------------ #
def to_returns(prices: pd.Series, method: str = "log") -> pd.Series:
    """Convert a price series into period returns.

    The series is sorted by its index first; the first observation is lost
    to differencing.  ``method`` is ``"log"`` (default) or ``"simple"``.
    """
    if method not in ("log", "simple"):
        raise InvalidParameter("method must be 'log' or 'simple'")
    if prices.empty:
        raise EmptyInput("Price series is empty")

    p = prices.sort_index().astype(float)
    if p.isna().any():
        raise InvalidParameter("Price series contains missing values")
    if (p <= 0).any():
        raise InvalidParameter("Price series contains non-positive values")
    if not p.index.is_unique:
        logger.debug("Duplicate timestamps in price series")

    if method == "log":
        r = np.log(p).diff()
    else:
        r = p.pct_change()
    return r.iloc[1:].rename("returns")


def clean_returns(
    returns: pd.Series, z_thresh: float = 5.0
) -> tuple[pd.Series, list[str]]:
    """Drop observations whose z-score exceeds ``z_thresh``.

    Returns the filtered copy and a list of diagnostic messages.  A series
    with zero standard deviation is returned unchanged with a warning.
    """
    r = returns.astype(float)
    sigma = float(r.std(ddof=1)) if len(r) > 1 else 0.0
    if sigma == 0.0 or not np.isfinite(sigma):
        return r.copy(), ["Zero standard deviation; no outliers removed"]

    z = (r - r.mean()).abs() / sigma
    mask = z > z_thresh
    n_out = int(mask.sum())
    warnings: list[str] = []
    if n_out:
        warnings.append(f"Removed {n_out} outliers (|z| > {z_thresh})")
    return r.loc[~mask].copy(), warnings


def summary_stats(returns: pd.Series | ArrayLike) -> dict[str, float]:
    """Descriptive statistics plus a Jarque–Bera normality test."""
    x = as_returns(returns)
    n = x.size
    qs = np.quantile(x, [0.01, 0.05, 0.25, 0.5, 0.75, 0.95, 0.99])
    sk = float(skew(x)) if n > 2 else 0.0
    ku = float(kurtosis(x)) if n > 3 else 0.0  # excess kurtosis
    jb = n * (sk**2 / 6.0 + ku**2 / 24.0)

    return {
        "n_obs": n,
        "mean": float(x.mean()),
        "std": float(x.std(ddof=1)) if n > 1 else 0.0,
        "skewness": sk,
        "kurtosis": ku,
        "min": float(x.min()),
        "max": float(x.max()),
        "q01": float(qs[0]),
        "q05": float(qs[1]),
        "q25": float(qs[2]),
        "median": float(qs[3]),
        "q75": float(qs[4]),
        "q95": float(qs[5]),
        "q99": float(qs[6]),
        "jarque_bera_stat": float(jb),
        "jarque_bera_pvalue": float(chi2.sf(jb, df=2)),
    }
