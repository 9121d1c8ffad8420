import numpy as np
import pytest

from fractalrisk.errors import EmptyResult, InvalidParameter
from fractalrisk.preprocessing import AggregationMode
from fractalrisk.scaling import RiskPoint, ScalingCurve, build_curve


def test_var_grows_with_horizon_for_iid_normal():
    x = np.random.default_rng(0).normal(0, 0.01, 20_000)
    curve = build_curve(x, [1, 2, 5, 10, 20], 0.99)
    assert list(curve.horizons) == [1, 2, 5, 10, 20]
    assert np.all(np.diff(curve.values("var")) > 0)
    assert np.all(curve.values("es") >= curve.values("var"))
    assert curve.skipped == []


def test_counts_follow_aggregation_mode():
    x = np.random.default_rng(1).normal(0, 0.01, 1000)
    over = build_curve(x, [1, 10], 0.95, AggregationMode.OVERLAPPING)
    disj = build_curve(x, [1, 10], 0.95, "non_overlapping")
    assert list(over.counts) == [1000, 991]
    assert list(disj.counts) == [1000, 100]


def test_short_horizons_are_skipped_not_raised():
    x = np.random.default_rng(2).normal(0, 0.01, 200)
    curve = build_curve(x, [300, 1, 5, 200], 0.95)
    assert list(curve.horizons) == [1, 5]
    assert [f.key for f in curve.skipped] == [200, 300]
    assert len(curve.warnings) == 2


def test_horizons_are_deduplicated_and_sorted():
    x = np.random.default_rng(3).normal(0, 0.01, 500)
    curve = build_curve(x, [5, 1, 5, 2], 0.95)
    assert list(curve.horizons) == [1, 2, 5]


def test_all_gains_give_empty_curve():
    x = np.abs(np.random.default_rng(4).normal(0, 0.01, 500)) + 0.001
    with pytest.raises(EmptyResult):
        build_curve(x, [1, 2, 5], 0.99)


def test_invalid_horizons():
    x = np.random.default_rng(5).normal(size=100)
    with pytest.raises(InvalidParameter):
        build_curve(x, [], 0.99)
    with pytest.raises(InvalidParameter):
        build_curve(x, [0, 1], 0.99)


def test_curve_requires_increasing_horizons():
    pts = [RiskPoint(2, 0.02, 0.03, 100), RiskPoint(1, 0.01, 0.02, 100)]
    with pytest.raises(InvalidParameter):
        ScalingCurve(pts, q=0.99)


def test_to_frame_columns():
    x = np.random.default_rng(6).normal(0, 0.01, 500)
    df = build_curve(x, [1, 2, 5], 0.95).to_frame()
    assert list(df.columns) == ["h", "VaR", "ES", "N"]
    assert len(df) == 3
