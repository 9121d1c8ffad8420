"""Log–log calibration of the risk scaling exponent.

The power law :math:`VaR_h = VaR_1 h^{\\alpha}` becomes linear after taking
logs,

.. math:: \\log VaR_h = c + \\alpha \\log h + \\varepsilon,

so :math:`\\alpha` is the OLS slope of the horizon curve in log–log space.
Standard errors, the Student-t confidence interval and the test against the
square-root-of-time value :math:`\\alpha_0 = 0.5` follow the textbook
simple-regression formulas with :math:`n-2` degrees of freedom.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import ArrayLike
from scipy.stats import t as student_t

from ..errors import InsufficientPoints, InvalidParameter, NumericalDegeneracy
from .curve import ScalingCurve

__all__ = [
    "OLSResult",
    "AlphaFit",
    "HypothesisTest",
    "ols_loglog",
    "fit",
    "test_alpha_hypothesis",
]

logger = logging.getLogger(__name__)

WEAK_R2 = 0.6
MIN_POINTS = 3


@dataclass(slots=True)
class OLSResult:
    slope: float
    intercept: float
    slope_se: float
    intercept_se: float
    r2: float
    adj_r2: float
    n: int
    residual_var: float


@dataclass(slots=True)
class AlphaFit:
    alpha: float
    alpha_se: float
    alpha_ci: tuple[float, float]
    intercept: float
    intercept_se: float
    r2: float
    adj_r2: float
    n_points: int
    null_alpha: float
    t_stat_vs_null: float
    p_value_vs_null: float
    horizons_used: np.ndarray
    y_field: str = "var"
    warnings: list[str] = field(default_factory=list)


@dataclass(slots=True)
class HypothesisTest:
    null_value: float
    t_statistic: float
    p_value: float
    reject: bool


# ------------------------------------------------------------------ #
def ols_loglog(h: ArrayLike, y: ArrayLike) -> OLSResult:
    """OLS of ``log(y)`` on ``log(h)`` with classical standard errors."""
    lx = np.log(np.asarray(h, dtype=float))
    ly = np.log(np.asarray(y, dtype=float))
    n = lx.size
    if n < MIN_POINTS:
        raise InsufficientPoints(f"Need at least {MIN_POINTS} points, got {n}")

    x_bar, y_bar = lx.mean(), ly.mean()
    sxx = float(np.sum((lx - x_bar) ** 2))
    if sxx <= 0.0:
        raise NumericalDegeneracy("Zero variance in log-horizons")
    sxy = float(np.sum((lx - x_bar) * (ly - y_bar)))

    slope = sxy / sxx
    intercept = float(y_bar - slope * x_bar)
    resid = ly - (intercept + slope * lx)
    ss_res = float(np.sum(resid**2))
    ss_tot = float(np.sum((ly - y_bar) ** 2))

    dof = n - 2
    s2 = ss_res / dof
    slope_se = math.sqrt(s2 / sxx)
    intercept_se = math.sqrt(s2 * (1.0 / n + x_bar**2 / sxx))
    r2 = 1.0 - ss_res / ss_tot if ss_tot > 0 else 1.0
    adj_r2 = 1.0 - (1.0 - r2) * (n - 1) / dof

    return OLSResult(
        slope=float(slope),
        intercept=intercept,
        slope_se=slope_se,
        intercept_se=intercept_se,
        r2=r2,
        adj_r2=adj_r2,
        n=n,
        residual_var=s2,
    )


def _t_test(estimate: float, se: float, null: float, dof: int) -> tuple[float, float]:
    if se > 0:
        t_stat = (estimate - null) / se
        return t_stat, float(2.0 * student_t.sf(abs(t_stat), dof))
    # exact fit: the estimate either equals the null or rejects it outright
    if estimate == null:
        return 0.0, 1.0
    return math.copysign(math.inf, estimate - null), 0.0


# ------------------------------------------------------------------ #
def fit(
    curve: ScalingCurve,
    y_field: str = "var",
    min_obs_per_h: int = 50,
    null_alpha: float = 0.5,
) -> AlphaFit:
    """Calibrate the scaling exponent α from a horizon curve.

    Parameters
    ----------
    curve : ScalingCurve
        Output of :func:`~fractalrisk.scaling.curve.build_curve`.
    y_field : {"var", "es"}
        Risk measure used as dependent variable.
    min_obs_per_h : int, default 50
        Points estimated from fewer observations are ignored.
    null_alpha : float, default 0.5
        Exponent under the null hypothesis (square-root-of-time).

    Returns
    -------
    AlphaFit
        Slope, intercept, inference and fit quality.  A weak log–log
        linearity (:math:`R^2 < 0.6`) or an exact fit is reported in
        ``warnings`` rather than raised.
    """
    hs = curve.horizons
    ys = curve.values(y_field)
    mask = (curve.counts >= min_obs_per_h) & (ys > 0)
    if mask.sum() < MIN_POINTS:
        raise InsufficientPoints(
            f"Too few points for log-log regression ({int(mask.sum())} < {MIN_POINTS})"
        )

    hs, ys = hs[mask], ys[mask]
    ols = ols_loglog(hs, ys)
    dof = ols.n - 2
    warnings: list[str] = []

    t_crit = float(student_t.ppf(0.975, dof))
    ci = (ols.slope - t_crit * ols.slope_se, ols.slope + t_crit * ols.slope_se)
    if ols.slope_se == 0.0:
        warnings.append("Zero residual variance; standard errors are degenerate")
    t_stat, p_value = _t_test(ols.slope, ols.slope_se, null_alpha, dof)

    if ols.r2 < WEAK_R2:
        warnings.append(f"Weak log-log linearity (R2={ols.r2:.3f} < {WEAK_R2})")

    logger.debug(
        "log-log fit: alpha=%.4f +/- %.4f, R2=%.3f", ols.slope, ols.slope_se, ols.r2
    )
    return AlphaFit(
        alpha=ols.slope,
        alpha_se=ols.slope_se,
        alpha_ci=ci,
        intercept=ols.intercept,
        intercept_se=ols.intercept_se,
        r2=ols.r2,
        adj_r2=ols.adj_r2,
        n_points=ols.n,
        null_alpha=float(null_alpha),
        t_stat_vs_null=t_stat,
        p_value_vs_null=p_value,
        horizons_used=hs,
        y_field=y_field,
        warnings=warnings,
    )


def test_alpha_hypothesis(
    alpha_fit: AlphaFit, null_value: float = 0.5, level: float = 0.05
) -> HypothesisTest:
    """Two-sided t-test of H0: α = ``null_value``."""
    if not 0.0 < level < 1.0:
        raise InvalidParameter("level must lie in (0, 1)")
    t_stat, p_value = _t_test(
        alpha_fit.alpha, alpha_fit.alpha_se, null_value, alpha_fit.n_points - 2
    )
    return HypothesisTest(
        null_value=float(null_value),
        t_statistic=t_stat,
        p_value=p_value,
        reject=p_value < level,
    )


# public API, not a test case
test_alpha_hypothesis.__test__ = False
