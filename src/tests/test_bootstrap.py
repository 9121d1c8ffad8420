import threading

import numpy as np
import pytest

from fractalrisk.errors import BootstrapUnreliable, InsufficientData, InvalidParameter
from fractalrisk.scaling import mbb_alpha_ci, mbb_alpha_distribution, mbb_sample

HORIZONS = [1, 2, 5, 10]


@pytest.fixture(scope="module")
def window():
    return np.random.default_rng(0).normal(0, 0.01, 1000)


@pytest.mark.parametrize("block_len", [1, 7, 25, 99, 100])
def test_mbb_sample_preserves_length(block_len):
    x = np.arange(100, dtype=float)
    out = mbb_sample(x, block_len, np.random.default_rng(block_len))
    assert out.shape == x.shape
    assert set(out).issubset(set(x))


def test_mbb_sample_keeps_blocks_contiguous():
    x = np.arange(100, dtype=float)
    out = mbb_sample(x, 10, np.random.default_rng(3))
    blocks = out.reshape(10, 10)
    assert np.all(np.diff(blocks, axis=1) == 1)


def test_mbb_sample_rejects_bad_block_len():
    with pytest.raises(InvalidParameter):
        mbb_sample(np.ones(10), 0)
    with pytest.raises(InvalidParameter):
        mbb_sample(np.ones(10), 11)


def test_ci_reproducible_and_schedule_independent(window):
    serial = mbb_alpha_distribution(window, HORIZONS, 0.95, B=40, seed=7, max_workers=1)
    pooled = mbb_alpha_distribution(window, HORIZONS, 0.95, B=40, seed=7, max_workers=4)
    np.testing.assert_array_equal(serial.alphas, pooled.alphas)
    assert serial.ci == pooled.ci
    assert serial.n_succeeded == 40
    assert serial.ci[0] <= serial.ci[1]


def test_ci_is_percentile_interval(window):
    dist = mbb_alpha_distribution(window, HORIZONS, 0.95, B=60, seed=11)
    lo, hi = mbb_alpha_ci(window, HORIZONS, 0.95, B=60, seed=11)
    assert (lo, hi) == dist.ci
    assert lo < np.median(dist.alphas) < hi
    assert 0.2 < np.median(dist.alphas) < 0.8


def test_different_seeds_differ(window):
    a = mbb_alpha_distribution(window, HORIZONS, 0.95, B=20, seed=1)
    b = mbb_alpha_distribution(window, HORIZONS, 0.95, B=20, seed=2)
    assert not np.array_equal(a.alphas, b.alphas)


def test_window_too_short_for_blocks():
    with pytest.raises(InsufficientData):
        mbb_alpha_ci(np.random.default_rng(1).normal(size=40), HORIZONS, 0.95, block_len=25)


def test_invalid_arguments(window):
    with pytest.raises(InvalidParameter):
        mbb_alpha_ci(window, HORIZONS, 0.95, B=0)
    with pytest.raises(InvalidParameter):
        mbb_alpha_ci(window, HORIZONS, 1.2, B=10)


def test_failing_replicates_make_bootstrap_unreliable(window):
    # with a single horizon no replicate can be fitted
    with pytest.raises(BootstrapUnreliable):
        mbb_alpha_ci(window, [1], 0.95, B=10, seed=0)


def test_cancel_before_start(window):
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(BootstrapUnreliable, match="cancelled"):
        mbb_alpha_distribution(window, HORIZONS, 0.95, B=10, cancel=cancel)
