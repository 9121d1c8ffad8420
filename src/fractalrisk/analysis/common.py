"""Shared helpers for windowed and multi-horizon analyses.

Rolling calibration, horizon selection and summary statistics of windowed
estimates are needed by several entry points; they live here so the
scaling modules do not re-implement the bookkeeping.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import numpy as np

from ..errors import InsufficientData, InvalidParameter

__all__ = [
    "compute_window_starts",
    "auto_select_horizons",
    "estimate_sample_size_needed",
    "describe_distribution",
]

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# windowing
# ──────────────────────────────────────────────────────────────────────────────


def compute_window_starts(length: int, window: int, step: int) -> list[int]:
    """Return 0-based start offsets of the full windows of a rolling pass.

    Only windows that fit entirely are produced, i.e.
    ``(length - window) // step + 1`` of them.
    """

    window = int(window)
    step = int(step)
    if window <= 0 or step <= 0:
        raise InvalidParameter("window and step must be positive integers")
    if length < window:
        return []
    return list(range(0, length - window + 1, step))


# ──────────────────────────────────────────────────────────────────────────────
# horizon selection
# ──────────────────────────────────────────────────────────────────────────────


def auto_select_horizons(
    n_returns: int, min_blocks: int = 50, max_horizons: int = 8
) -> list[int]:
    """Suggest horizons leaving at least ``min_blocks`` disjoint blocks each.

    Small samples get the consecutive horizons ``1..max_h``; larger ones a
    log-spaced grid starting at 1.
    """

    if n_returns < min_blocks:
        raise InsufficientData(
            f"Sample too small for horizon selection: {n_returns} < {min_blocks}"
        )

    max_h = n_returns // min_blocks
    if max_h < 2:
        return [1]

    if max_h <= 10:
        horizons = list(range(1, min(max_h, max_horizons) + 1))
    else:
        grid = np.exp(np.linspace(0.0, np.log(max_h), max_horizons))
        horizons = sorted({int(h) for h in np.round(grid)} | {1})
        horizons = [h for h in horizons if h <= max_h]

    logger.debug("Selected horizons %s (max possible %d)", horizons, max_h)
    return horizons


def estimate_sample_size_needed(horizons: Sequence[int], min_blocks: int = 50) -> int:
    """Minimum series length giving ``min_blocks`` blocks at every horizon."""

    if len(horizons) == 0:
        return int(min_blocks)
    return int(max(horizons)) * int(min_blocks)


# ──────────────────────────────────────────────────────────────────────────────
# statistical summaries
# ──────────────────────────────────────────────────────────────────────────────


def describe_distribution(values: Sequence[float]) -> dict[str, Any]:
    """Location, dispersion and quantiles of a sample of estimates."""

    arr = np.asarray([v for v in values if np.isfinite(v)], dtype=float)
    if arr.size == 0:
        return {"count": 0}

    stats: dict[str, Any] = {
        "count": int(arr.size),
        "mean": float(arr.mean()),
        "median": float(np.median(arr)),
        "min": float(arr.min()),
        "max": float(arr.max()),
    }
    if arr.size > 1:
        stats.update(
            {
                "std": float(arr.std(ddof=1)),
                "q05": float(np.quantile(arr, 0.05)),
                "q25": float(np.quantile(arr, 0.25)),
                "q75": float(np.quantile(arr, 0.75)),
                "q95": float(np.quantile(arr, 0.95)),
            }
        )
    else:
        stats.update(
            {
                "std": 0.0,
                "q05": stats["min"],
                "q25": stats["min"],
                "q75": stats["max"],
                "q95": stats["max"],
            }
        )
    return stats
