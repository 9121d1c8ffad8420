import numpy as np
import pandas as pd
import pytest

from fractalrisk.errors import InvalidParameter, ScalingError
from fractalrisk.estimators import RiskScaling, ScalingResult


@pytest.fixture(scope="module")
def returns():
    idx = pd.date_range("2000-01-03", periods=10_000, freq="B")
    return pd.Series(np.random.default_rng(0).normal(0, 0.01, idx.size), index=idx)


def test_risk_scaling_on_iid_returns(returns):
    est = RiskScaling(returns, q=0.99).fit()
    res = est.result_
    assert isinstance(res, ScalingResult)
    assert abs(res.alpha - 0.5) < 0.1
    assert res.es_fit is not None
    assert abs(res.es_fit.alpha - 0.5) < 0.1
    assert res.bootstrap_ci is None


def test_bootstrap_interval(returns):
    est = RiskScaling(returns[:2000], horizons=[1, 2, 5, 10], q=0.95, n_boot=30, seed=3)
    res = est.fit(max_workers=2).result_
    lo, hi = res.bootstrap_ci
    assert lo <= hi
    again = RiskScaling(returns[:2000], horizons=[1, 2, 5, 10], q=0.95, n_boot=30, seed=3)
    assert again.fit(max_workers=1).result_.bootstrap_ci == res.bootstrap_ci


def test_bootstrap_failure_is_a_warning(returns):
    # block longer than half the series
    est = RiskScaling(returns[:400], horizons=[1, 2, 5], q=0.95, n_boot=10, block_len=300)
    res = est.fit().result_
    assert res.bootstrap_ci is None
    assert any("Bootstrap failed" in w for w in res.warnings)


def test_predict(returns):
    est = RiskScaling(returns, horizons=[1, 2, 5, 10]).fit()
    var1 = est.result_.curve.point(1).var
    assert est.predict(10) == pytest.approx(var1 * 10 ** est.result_.alpha)


def test_unfitted_and_invalid():
    est = RiskScaling(np.random.default_rng(1).normal(size=500))
    with pytest.raises(ScalingError):
        est.predict(5)
    with pytest.raises(InvalidParameter):
        RiskScaling(np.zeros((10, 2)))
    with pytest.raises(InvalidParameter):
        RiskScaling(np.ones(10), q=0.0)
