"""Horizon curve of empirical VaR / ES.

For each horizon the base returns are aggregated and the empirical risk
estimator is applied, giving the table ``{h, VaR_h, ES_h, N_h}`` that the
log–log calibration consumes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike

from ..errors import EmptyResult, InsufficientData, InvalidParameter, ItemFailure
from ..preprocessing import AggregationMode, aggregate, as_returns
from ..preprocessing.core import _as_mode
from ..risk.var import _check_level, estimate

__all__ = ["RiskPoint", "ScalingCurve", "build_curve", "check_horizons"]

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class RiskPoint:
    h: int
    var: float
    es: float
    n: int


@dataclass(slots=True)
class ScalingCurve:
    """Ordered risk points with strictly increasing horizons."""

    points: list[RiskPoint]
    q: float
    mode: AggregationMode = AggregationMode.OVERLAPPING
    skipped: list[ItemFailure] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        hs = [p.h for p in self.points]
        if any(b <= a for a, b in zip(hs, hs[1:])):
            raise InvalidParameter("Curve horizons must be strictly increasing")

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[RiskPoint]:
        return iter(self.points)

    @property
    def horizons(self) -> np.ndarray:
        return np.array([p.h for p in self.points], dtype=int)

    @property
    def counts(self) -> np.ndarray:
        return np.array([p.n for p in self.points], dtype=int)

    def values(self, y_field: str = "var") -> np.ndarray:
        if y_field not in ("var", "es"):
            raise InvalidParameter(f"y_field must be 'var' or 'es', got {y_field!r}")
        return np.array([getattr(p, y_field) for p in self.points], dtype=float)

    def point(self, h: int) -> RiskPoint | None:
        for p in self.points:
            if p.h == h:
                return p
        return None

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "h": self.horizons,
                "VaR": self.values("var"),
                "ES": self.values("es"),
                "N": self.counts,
            }
        )


def check_horizons(horizons: Iterable[int]) -> list[int]:
    """Distinct, ascending horizons; rejects empty or non-positive input."""
    hs = sorted({int(h) for h in horizons})
    if not hs:
        raise InvalidParameter("Horizon list is empty")
    if hs[0] <= 0:
        raise InvalidParameter("All horizons must be positive")
    return hs


# ------------------------------------------------------------------ #
def build_curve(
    returns: ArrayLike,
    horizons: Iterable[int],
    q: float,
    mode: AggregationMode | str = AggregationMode.OVERLAPPING,
    min_obs_per_h: int = 50,
) -> ScalingCurve:
    """Empirical VaR/ES curve across *horizons*.

    Horizons whose aggregated sample has fewer than ``min_obs_per_h``
    observations, that exceed the series length, or whose loss quantile is
    not a loss (non-positive VaR/ES) are skipped and reported in
    ``curve.skipped``.  Raises :class:`EmptyResult` if no
    horizon survives.
    """
    q = _check_level(q)
    mode = _as_mode(mode)
    hs = check_horizons(horizons)
    x = as_returns(returns)

    points: list[RiskPoint] = []
    skipped: list[ItemFailure] = []
    warnings: list[str] = []

    for h in hs:
        try:
            sample = aggregate(x, h, mode)
        except InsufficientData as exc:
            skipped.append(ItemFailure(h, str(exc)))
            warnings.append(f"Horizon h={h} skipped: {exc}")
            continue

        if sample.size < min_obs_per_h:
            reason = f"only {sample.size} observations (< {min_obs_per_h})"
            skipped.append(ItemFailure(h, reason))
            warnings.append(f"Horizon h={h} skipped: {reason}")
            continue

        est = estimate(sample, q)
        warnings.extend(f"h={h}: {msg}" for msg in est.warnings)
        if est.var <= 0 or est.es <= 0:
            reason = f"non-positive risk estimate (VaR={est.var:.6g}, ES={est.es:.6g})"
            skipped.append(ItemFailure(h, reason))
            warnings.append(f"Horizon h={h} skipped: {reason}")
            continue
        points.append(RiskPoint(h=h, var=est.var, es=est.es, n=est.n))

    if not points:
        raise EmptyResult(
            f"No horizon could be processed ({len(skipped)} skipped)"
        )

    logger.debug("Built VaR/ES curve over %d horizons", len(points))
    return ScalingCurve(points, q=q, mode=mode, skipped=skipped, warnings=warnings)
