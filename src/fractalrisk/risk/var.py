"""Empirical risk measures and their horizon scaling.

* :func:`estimate`             – empirical VaR / ES of an aggregated sample
* :func:`theoretical_var_sqrt` – VaR scaled with the square-root-of-time rule
* :func:`theoretical_var_power` / :func:`scaled_risk` – VaR scaled as
  :math:`VaR_1 h^{\\alpha}`

VaR and ES are reported as positive magnitudes for the loss (left) tail.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import ArrayLike

from ..errors import EmptyInput, InvalidParameter

__all__ = [
    "RiskEstimate",
    "estimate",
    "theoretical_var_sqrt",
    "theoretical_var_power",
    "scaled_risk",
]

_TAILS = ("left", "right")


@dataclass(slots=True)
class RiskEstimate:
    var: float
    es: float
    n: int
    n_violations: int
    warnings: list[str] = field(default_factory=list)


def _check_level(q: float) -> float:
    q = float(q)
    if not 0.0 < q < 1.0:
        raise InvalidParameter(f"Confidence level q must lie in (0, 1), got {q}")
    return q


# ------------------------------------------------------------------ #
def estimate(sample: ArrayLike, q: float, tail: str = "left") -> RiskEstimate:
    """Empirical VaR and Expected Shortfall at confidence level *q*.

    The VaR threshold is the linearly interpolated empirical quantile at
    ``1 - q`` (left tail) or ``q`` (right tail).  ES is the mean of every
    observation at or beyond that threshold.  Should the tail set be empty,
    ES falls back to the sample extreme and a warning is attached; this
    biases ES towards the extreme in very small samples.
    """
    q = _check_level(q)
    if tail not in _TAILS:
        raise InvalidParameter(f"tail must be 'left' or 'right', got {tail!r}")

    x = np.asarray(sample, dtype=float).ravel()
    if x.size == 0:
        raise EmptyInput("Sample is empty")

    warnings: list[str] = []
    if tail == "left":
        threshold = float(np.quantile(x, 1.0 - q))
        beyond = x[x <= threshold]
        if beyond.size == 0:
            es = float(x.min())
            warnings.append("Empty tail set; ES falls back to the sample minimum")
        else:
            es = float(beyond.mean())
        var_mag, es_mag = -threshold, -es
    else:
        threshold = float(np.quantile(x, q))
        beyond = x[x >= threshold]
        if beyond.size == 0:
            es = float(x.max())
            warnings.append("Empty tail set; ES falls back to the sample maximum")
        else:
            es = float(beyond.mean())
        var_mag, es_mag = threshold, es

    return RiskEstimate(
        var=var_mag,
        es=es_mag,
        n=int(x.size),
        n_violations=int(beyond.size),
        warnings=warnings,
    )


# ------------------------------------------------------------------ #
def _check_scaling_args(var1: float, h: float) -> None:
    if h <= 0:
        raise InvalidParameter(f"Horizon must be positive, got h={h}")
    if var1 <= 0:
        raise InvalidParameter(f"Base VaR must be positive, got {var1}")


def theoretical_var_sqrt(var1: float, h: float) -> float:
    """VaR at horizon *h* under the square-root-of-time rule."""
    _check_scaling_args(var1, h)
    return float(var1 * np.sqrt(h))


def theoretical_var_power(var1: float, h: float, alpha: float) -> float:
    """VaR at horizon *h* under power-law scaling ``var1 * h**alpha``."""
    _check_scaling_args(var1, h)
    return float(var1 * float(h) ** alpha)


def scaled_risk(var1: float, h: int, alpha: float) -> float:
    """Scale a one-period risk figure to horizon *h* with exponent *alpha*."""
    return theoretical_var_power(var1, h, alpha)
