import numpy as np
import pytest

from fractalrisk.analysis import common
from fractalrisk.errors import InsufficientData, InvalidParameter


def test_compute_window_starts():
    starts = common.compute_window_starts(1200, 500, 100)
    assert starts == [0, 100, 200, 300, 400, 500, 600, 700]
    assert common.compute_window_starts(100, 500, 10) == []
    with pytest.raises(InvalidParameter):
        common.compute_window_starts(100, 10, 0)


def test_auto_select_horizons_small_sample():
    assert common.auto_select_horizons(300) == [1, 2, 3, 4, 5, 6]
    assert common.auto_select_horizons(60) == [1]


def test_auto_select_horizons_log_grid():
    hs = common.auto_select_horizons(5000)
    assert hs[0] == 1
    assert hs == sorted(set(hs))
    assert max(hs) <= 5000 // 50
    assert len(hs) <= 8


def test_auto_select_horizons_too_short():
    with pytest.raises(InsufficientData):
        common.auto_select_horizons(20)


def test_estimate_sample_size_needed():
    assert common.estimate_sample_size_needed([1, 5, 20]) == 1000
    assert common.estimate_sample_size_needed([10], min_blocks=30) == 300


def test_describe_distribution():
    values = [0.45, 0.5, 0.55, np.nan, 0.6]
    stats = common.describe_distribution(values)
    assert stats["count"] == 4
    assert stats["mean"] == pytest.approx(0.525)
    assert stats["min"] == 0.45 and stats["max"] == 0.6
    assert stats["q05"] <= stats["q25"] <= stats["q75"] <= stats["q95"]

    single = common.describe_distribution([0.5])
    assert single["std"] == 0.0
    assert common.describe_distribution([]) == {"count": 0}
