"""
Back‑testing of VaR coverage
============================
kupiec_pof                  – unconditional coverage (LR‑uc, χ²(1))
christoffersen_independence – first‑order Markov independence (LR‑ind, χ²(1))
christoffersen_combined     – conditional coverage LR‑cc = LR‑uc + LR‑ind (χ²(2))
coverage_backtest           – violation count of one VaR figure at horizon h
compare_scalings            – empirical vs √h vs h^α VaR across horizons
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike
from scipy.special import xlogy
from scipy.stats import chi2

from ..errors import EmptyResult, InsufficientData, InvalidParameter, ItemFailure, ScalingError
from ..preprocessing import AggregationMode, aggregate, as_returns
from ..scaling.curve import build_curve, check_horizons
from .var import _check_level, theoretical_var_power, theoretical_var_sqrt

__all__ = [
    "KupiecResult",
    "IndependenceResult",
    "CombinedCoverageResult",
    "BacktestResult",
    "ComparisonResult",
    "ComparisonReport",
    "kupiec_pof",
    "christoffersen_independence",
    "christoffersen_combined",
    "coverage_backtest",
    "compare_scalings",
    "backtest_summary_table",
]

logger = logging.getLogger(__name__)

SIGNIFICANCE = 0.05
MIN_BLOCKS = 10
METHODS = ("empirical", "sqrt", "alpha")


@dataclass(slots=True)
class KupiecResult:
    violations: int
    n: int
    expected_rate: float
    observed_rate: float
    lr_stat: float
    p_value: float
    reject: bool


@dataclass(slots=True)
class IndependenceResult:
    lr_stat: float
    p_value: float
    n00: int
    n01: int
    n10: int
    n11: int
    p01: float | None = None
    p11: float | None = None
    reject: bool = False

    @property
    def transition_counts(self) -> dict[str, int]:
        return {"n00": self.n00, "n01": self.n01, "n10": self.n10, "n11": self.n11}


@dataclass(slots=True)
class CombinedCoverageResult:
    kupiec: KupiecResult
    independence: IndependenceResult
    lr_stat: float
    p_value: float
    reject: bool


@dataclass(slots=True)
class BacktestResult:
    h: int
    var_hat: float
    q: float
    violations: int
    n_blocks: int
    observed_rate: float
    target_rate: float
    error: float
    kupiec_stat: float
    kupiec_pvalue: float
    kupiec_reject: bool
    violation_indices: np.ndarray
    warnings: list[str] = field(default_factory=list)

    def violation_sequence(self) -> np.ndarray:
        """Boolean hit sequence over the ``n_blocks`` aggregated returns."""
        seq = np.zeros(self.n_blocks, dtype=bool)
        seq[self.violation_indices] = True
        return seq


@dataclass(slots=True)
class ComparisonResult:
    h: int
    var_empirical: float
    var_sqrt: float
    var_alpha: float
    empirical: BacktestResult
    sqrt: BacktestResult
    alpha: BacktestResult

    @property
    def error_empirical(self) -> float:
        return self.empirical.error

    @property
    def error_sqrt(self) -> float:
        return self.sqrt.error

    @property
    def error_alpha(self) -> float:
        return self.alpha.error

    @property
    def rel_deviation_sqrt(self) -> float:
        """|VaR_sqrt - VaR_emp| / VaR_emp."""
        return abs(self.var_sqrt - self.var_empirical) / self.var_empirical

    @property
    def rel_deviation_alpha(self) -> float:
        return abs(self.var_alpha - self.var_empirical) / self.var_empirical


@dataclass(slots=True)
class ComparisonReport:
    rows: list[ComparisonResult]
    q: float
    alpha_star: float
    var1: float
    failures: list[ItemFailure] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[ComparisonResult]:
        return iter(self.rows)

    def __getitem__(self, i: int) -> ComparisonResult:
        return self.rows[i]

    def mean_abs_error(self, method: str) -> float:
        """Mean |observed - target| violation rate of *method* over horizons."""
        if method not in METHODS:
            raise InvalidParameter(f"method must be one of {METHODS}")
        return float(np.mean([abs(getattr(r, method).error) for r in self.rows]))

    def summary_table(self) -> pd.DataFrame:
        return backtest_summary_table(self)

    def to_frame(self) -> pd.DataFrame:
        records = []
        for r in self.rows:
            rec = {
                "h": r.h,
                "VaR_empirical": r.var_empirical,
                "VaR_sqrt": r.var_sqrt,
                "VaR_alpha": r.var_alpha,
            }
            for m in METHODS:
                bt: BacktestResult = getattr(r, m)
                rec[f"violations_{m}"] = bt.violations
                rec[f"rate_{m}"] = bt.observed_rate
                rec[f"error_{m}"] = bt.error
                rec[f"kupiec_pvalue_{m}"] = bt.kupiec_pvalue
            rec["N_blocks"] = r.empirical.n_blocks
            records.append(rec)
        return pd.DataFrame(records)


# ------------------------------------------------------------------ #
def kupiec_pof(violations: int, N: int, q: float) -> KupiecResult:
    """
    Kupiec (1995) proportion‑of‑failures test, H0: violation rate = 1 - q.

    With zero or ``N`` violations the likelihood under the alternative is
    one and the statistic reduces to ``-2 N log q`` or ``-2 N log(1 - q)``.
    """
    q = _check_level(q)
    violations, N = int(violations), int(N)
    if N <= 0 or violations < 0 or violations > N:
        raise InvalidParameter("Require N > 0 and 0 <= violations <= N")

    p_exp = 1.0 - q
    p_obs = violations / N

    if violations == 0:
        lr = -2.0 * N * math.log(q)
    elif violations == N:
        lr = -2.0 * N * math.log(1.0 - q)
    else:
        ll_h0 = violations * math.log(p_exp) + (N - violations) * math.log(q)
        ll_h1 = violations * math.log(p_obs) + (N - violations) * math.log(1.0 - p_obs)
        lr = -2.0 * (ll_h0 - ll_h1)
    lr = max(lr, 0.0)
    p_value = float(chi2.sf(lr, df=1))

    return KupiecResult(
        violations=violations,
        n=N,
        expected_rate=p_exp,
        observed_rate=p_obs,
        lr_stat=float(lr),
        p_value=p_value,
        reject=p_value < SIGNIFICANCE,
    )


# ------------------------------------------------------------------ #
def christoffersen_independence(violation_sequence: ArrayLike) -> IndependenceResult:
    """
    Christoffersen (1998) independence test on a 0/1 hit sequence.

    When no transition starts from a non‑violation or none starts from a
    violation the conditional probabilities are undefined and a neutral
    result (LR = 0, p = 1) is returned.
    """
    viol = np.asarray(violation_sequence, dtype=bool).ravel()
    if viol.size < 2:
        raise InsufficientData("Need at least two observations for the independence test")

    prev, curr = viol[:-1], viol[1:]
    n00 = int(np.sum(~prev & ~curr))
    n01 = int(np.sum(~prev & curr))
    n10 = int(np.sum(prev & ~curr))
    n11 = int(np.sum(prev & curr))
    n0, n1 = n00 + n01, n10 + n11

    if n0 == 0 or n1 == 0:
        return IndependenceResult(0.0, 1.0, n00, n01, n10, n11)

    p01 = n01 / n0
    p11 = n11 / n1
    p = (n01 + n11) / (n0 + n1)

    ll_h0 = xlogy(n01 + n11, p) + xlogy(n00 + n10, 1.0 - p)
    ll_h1 = xlogy(n01, p01) + xlogy(n00, 1.0 - p01) + xlogy(n11, p11) + xlogy(n10, 1.0 - p11)
    lr = max(float(-2.0 * (ll_h0 - ll_h1)), 0.0)
    p_value = float(chi2.sf(lr, df=1))

    return IndependenceResult(
        lr_stat=lr,
        p_value=p_value,
        n00=n00,
        n01=n01,
        n10=n10,
        n11=n11,
        p01=p01,
        p11=p11,
        reject=p_value < SIGNIFICANCE,
    )


def christoffersen_combined(violation_sequence: ArrayLike, q: float) -> CombinedCoverageResult:
    """Conditional coverage: Kupiec LR plus independence LR against χ²(2)."""
    viol = np.asarray(violation_sequence, dtype=bool).ravel()
    kup = kupiec_pof(int(viol.sum()), viol.size, q)
    ind = christoffersen_independence(viol)
    lr = kup.lr_stat + ind.lr_stat
    p_value = float(chi2.sf(lr, df=2))
    return CombinedCoverageResult(
        kupiec=kup,
        independence=ind,
        lr_stat=lr,
        p_value=p_value,
        reject=p_value < SIGNIFICANCE,
    )


# ------------------------------------------------------------------ #
def coverage_backtest(returns: ArrayLike, h: int, var_hat: float, q: float) -> BacktestResult:
    """
    Coverage of ``var_hat`` on non‑overlapping h‑period returns.

    A violation is an aggregated return strictly below ``-var_hat``.
    """
    q = _check_level(q)
    if int(h) <= 0:
        raise InvalidParameter(f"Horizon must be positive, got h={h}")
    if var_hat <= 0:
        raise InvalidParameter(f"VaR must be positive, got {var_hat}")

    rh = aggregate(returns, int(h), AggregationMode.NON_OVERLAPPING)
    n_blocks = rh.size
    warnings: list[str] = []
    if n_blocks < MIN_BLOCKS:
        warnings.append(f"Few blocks for backtest at h={h} ({n_blocks} < {MIN_BLOCKS})")

    hits = np.flatnonzero(rh < -var_hat)
    violations = int(hits.size)
    obs_rate = violations / n_blocks
    target = 1.0 - q
    kup = kupiec_pof(violations, n_blocks, q)

    logger.debug("Backtest h=%d: %d/%d violations", h, violations, n_blocks)
    return BacktestResult(
        h=int(h),
        var_hat=float(var_hat),
        q=q,
        violations=violations,
        n_blocks=n_blocks,
        observed_rate=obs_rate,
        target_rate=target,
        error=obs_rate - target,
        kupiec_stat=kup.lr_stat,
        kupiec_pvalue=kup.p_value,
        kupiec_reject=kup.reject,
        violation_indices=hits,
        warnings=warnings,
    )


def compare_scalings(
    returns: ArrayLike,
    horizons: Iterable[int],
    q: float,
    alpha_star: float,
    min_obs_per_h: int = 50,
) -> ComparisonReport:
    """
    Backtest empirical, √h‑scaled and h^α*‑scaled VaR at every horizon.

    Both theoretical curves are anchored at the empirical one‑period VaR;
    if h = 1 is not on the empirical curve the anchor is extrapolated from
    the smallest available horizon with √h and a warning is recorded.
    """
    q = _check_level(q)
    hs = check_horizons(horizons)
    x = as_returns(returns)
    curve = build_curve(x, hs, q, AggregationMode.OVERLAPPING, min_obs_per_h)
    warnings = list(curve.warnings)
    failures = list(curve.skipped)

    base = curve.point(1)
    if base is None:
        first = curve.points[0]
        var1 = first.var / math.sqrt(first.h)
        warnings.append(f"h=1 not on the empirical curve; baseline extrapolated from h={first.h}")
    else:
        var1 = base.var

    rows: list[ComparisonResult] = []
    for h in hs:
        point = curve.point(h)
        if point is None:
            continue
        try:
            v_sqrt = theoretical_var_sqrt(var1, h)
            v_alpha = theoretical_var_power(var1, h, alpha_star)
            bts = {
                "empirical": coverage_backtest(x, h, point.var, q),
                "sqrt": coverage_backtest(x, h, v_sqrt, q),
                "alpha": coverage_backtest(x, h, v_alpha, q),
            }
        except ScalingError as exc:
            failures.append(ItemFailure(h, str(exc)))
            warnings.append(f"Horizon h={h} skipped: {exc}")
            continue
        warnings.extend(bts["empirical"].warnings)
        rows.append(
            ComparisonResult(
                h=h,
                var_empirical=point.var,
                var_sqrt=v_sqrt,
                var_alpha=v_alpha,
                **bts,
            )
        )

    if not rows:
        raise EmptyResult("No horizon could be compared")

    logger.debug("Scaling comparison over %d horizons", len(rows))
    return ComparisonReport(
        rows=rows,
        q=q,
        alpha_star=float(alpha_star),
        var1=float(var1),
        failures=failures,
        warnings=warnings,
    )


def backtest_summary_table(report: ComparisonReport, methods: Iterable[str] = METHODS) -> pd.DataFrame:
    """Long table with one row per (method, horizon)."""
    records = []
    for m in methods:
        if m not in METHODS:
            raise InvalidParameter(f"Unknown method {m!r}")
        for r in report.rows:
            bt: BacktestResult = getattr(r, m)
            records.append(
                {
                    "method": m,
                    "h": r.h,
                    "VaR": bt.var_hat,
                    "violations": bt.violations,
                    "N_blocks": bt.n_blocks,
                    "observed_rate": bt.observed_rate,
                    "target_rate": bt.target_rate,
                    "error": bt.error,
                    "abs_error": abs(bt.error),
                    "kupiec_pvalue": bt.kupiec_pvalue,
                    "significant": bt.kupiec_pvalue < SIGNIFICANCE,
                }
            )
    return pd.DataFrame(records)
