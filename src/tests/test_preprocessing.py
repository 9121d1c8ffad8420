import numpy as np
import pandas as pd
import pytest

from fractalrisk.errors import EmptyInput, InsufficientData, InvalidParameter
from fractalrisk.preprocessing import (
    AggregationMode,
    aggregate,
    as_returns,
    clean_returns,
    summary_stats,
    to_returns,
)

R6 = [0.01, -0.02, 0.015, -0.01, 0.005, -0.008]


def test_aggregate_h1_is_identity():
    x = np.random.default_rng(0).normal(size=37)
    for mode in AggregationMode:
        np.testing.assert_array_equal(aggregate(x, 1, mode), x)


def test_aggregate_non_overlapping_blocks():
    out = aggregate(R6, 2, AggregationMode.NON_OVERLAPPING)
    np.testing.assert_allclose(out, [-0.01, 0.005, -0.003], atol=1e-12)


def test_aggregate_overlapping_windows():
    out = aggregate(R6, 2, "overlapping")
    assert len(out) == 5
    assert out[0] == pytest.approx(-0.01)
    assert out[-1] == pytest.approx(-0.003)


def test_aggregate_drops_trailing_remainder():
    out = aggregate(np.ones(7), 3, AggregationMode.NON_OVERLAPPING)
    np.testing.assert_array_equal(out, [3.0, 3.0])


def test_aggregate_horizon_longer_than_series():
    with pytest.raises(InsufficientData):
        aggregate(R6, 10)


def test_aggregate_rejects_bad_arguments():
    with pytest.raises(InvalidParameter):
        aggregate(R6, 0)
    with pytest.raises(InvalidParameter):
        aggregate(R6, 2, "weekly")
    with pytest.raises(InvalidParameter):
        aggregate([0.01, np.nan, 0.02], 1)
    with pytest.raises(EmptyInput):
        aggregate([], 1)


def test_as_returns_accepts_series_and_rejects_2d():
    s = pd.Series(R6, index=pd.date_range("2024-01-01", periods=6))
    np.testing.assert_array_equal(as_returns(s), np.array(R6))
    with pytest.raises(InvalidParameter):
        as_returns(np.zeros((3, 2)))


def test_to_returns_log_and_simple():
    idx = pd.date_range("2024-01-01", periods=3, freq="D")
    prices = pd.Series([121.0, 100.0, 110.0], index=idx[[2, 0, 1]])

    log_r = to_returns(prices)
    assert log_r.name == "returns"
    np.testing.assert_allclose(log_r.to_numpy(), [np.log(1.1)] * 2)

    simple = to_returns(prices, method="simple")
    np.testing.assert_allclose(simple.to_numpy(), [0.1, 0.1])


def test_to_returns_rejects_non_positive_prices():
    with pytest.raises(InvalidParameter):
        to_returns(pd.Series([1.0, 0.0, 2.0]))


def test_clean_returns_drops_outlier():
    rng = np.random.default_rng(1)
    r = pd.Series(np.append(rng.normal(0, 0.01, 500), 0.5))
    cleaned, warnings = clean_returns(r, z_thresh=5.0)
    assert len(cleaned) == 500
    assert warnings and "1 outliers" in warnings[0]


def test_clean_returns_constant_series_untouched():
    r = pd.Series(np.zeros(10))
    cleaned, warnings = clean_returns(r)
    assert len(cleaned) == 10
    assert warnings


def test_summary_stats_normal_sample():
    x = np.random.default_rng(2).normal(0, 0.01, 5000)
    stats = summary_stats(x)
    assert stats["n_obs"] == 5000
    assert abs(stats["skewness"]) < 0.2
    assert abs(stats["kurtosis"]) < 0.3
    assert stats["jarque_bera_pvalue"] > 0.001
    assert stats["q01"] < stats["median"] < stats["q99"]
