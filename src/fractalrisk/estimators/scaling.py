"""
Risk‑scaling estimator
======================
Bundles the full single‑sample pipeline:

    1.  Empirical VaR / ES curve over the requested horizons
    2.  OLS of  log VaR_h  on  log h  → α  (and the same for ES)
    3.  Optional moving‑block bootstrap interval for α

The ES fit is attempted whenever the VaR fit succeeds; its failure is
reported in ``warnings`` rather than raised.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..errors import ScalingError
from ..preprocessing import AggregationMode
from ..preprocessing.core import _as_mode
from ..risk.var import _check_level, scaled_risk
from ..scaling.bootstrap import mbb_alpha_ci
from ..scaling.curve import ScalingCurve, build_curve, check_horizons
from ..scaling.regression import AlphaFit, fit
from ._base import BaseEstimator

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ScalingResult:
    curve: ScalingCurve
    var_fit: AlphaFit
    es_fit: AlphaFit | None = None
    bootstrap_ci: tuple[float, float] | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def alpha(self) -> float:
        return self.var_fit.alpha


class RiskScaling(BaseEstimator):
    """Empirical scaling exponent of VaR (and ES) across horizons."""

    def __init__(
        self,
        series,
        *,
        horizons: Iterable[int] = (1, 2, 5, 10, 20),
        q: float = 0.99,
        mode: AggregationMode | str = AggregationMode.OVERLAPPING,
        min_obs_per_h: int = 50,
        n_boot: int = 0,
        block_len: int = 25,
        seed: int | None = None,
    ):
        super().__init__(series)
        self.horizons = check_horizons(horizons)
        self.q = _check_level(q)
        self.mode = _as_mode(mode)
        self.min_obs_per_h = int(min_obs_per_h)
        self.n_boot = int(n_boot)
        self.block_len = int(block_len)
        self.seed = seed

    def fit(self, *, max_workers: int | None = None) -> "RiskScaling":
        # ------------------------------------------------------------------ #
        # 1. Empirical curve
        curve = build_curve(self.series, self.horizons, self.q, self.mode, self.min_obs_per_h)
        warnings = list(curve.warnings)

        # ------------------------------------------------------------------ #
        # 2. Log–log fits; VaR is mandatory, ES best effort
        var_fit = fit(curve, "var", self.min_obs_per_h)
        warnings.extend(var_fit.warnings)
        try:
            es_fit = fit(curve, "es", self.min_obs_per_h)
            warnings.extend(f"ES: {w}" for w in es_fit.warnings)
        except ScalingError as exc:
            es_fit = None
            warnings.append(f"ES fit failed: {exc}")

        # ------------------------------------------------------------------ #
        # 3. Bootstrap interval for α
        ci = None
        if self.n_boot > 0:
            try:
                ci = mbb_alpha_ci(
                    self.series,
                    self.horizons,
                    self.q,
                    block_len=self.block_len,
                    B=self.n_boot,
                    seed=self.seed,
                    min_obs_per_h=self.min_obs_per_h,
                    max_workers=max_workers,
                )
            except ScalingError as exc:
                warnings.append(f"Bootstrap failed: {exc}")

        logger.debug("RiskScaling fit: alpha=%.4f over %d horizons", var_fit.alpha, len(curve))
        self.result_ = ScalingResult(
            curve=curve, var_fit=var_fit, es_fit=es_fit, bootstrap_ci=ci, warnings=warnings
        )
        return self

    def predict(self, h: int) -> float:
        """VaR at horizon *h* scaled from the one‑period level with the fitted α."""
        res: ScalingResult = self._require_fit()
        base = res.curve.point(1)
        if base is None:
            raise ScalingError("h=1 is not on the fitted curve")
        return scaled_risk(base.var, h, res.var_fit.alpha)
