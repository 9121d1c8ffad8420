import threading

import numpy as np
import pytest

from fractalrisk.errors import InsufficientData
from fractalrisk.parallel import derive_seed, run_isolated


def _task(i):
    if i % 3 == 2:
        raise InsufficientData(f"task {i} has no data")
    return i * i


@pytest.mark.parametrize("max_workers", [1, 4, None])
def test_outcomes_ordered_with_failures_captured(max_workers):
    outcomes = run_isolated(_task, 9, max_workers=max_workers)
    assert [o.index for o in outcomes] == list(range(9))
    assert [o.value for o in outcomes if o.ok] == [0, 1, 9, 16, 36, 49]
    failed = [o for o in outcomes if not o.ok]
    assert [o.index for o in failed] == [2, 5, 8]
    assert all(o.error.startswith("InsufficientData") for o in failed)


def test_unexpected_errors_propagate():
    def boom(i):
        raise RuntimeError("bug")

    with pytest.raises(RuntimeError):
        run_isolated(boom, 3, max_workers=2)


def test_cancelled_tasks_are_reported():
    cancel = threading.Event()

    def stop_after_first(i):
        cancel.set()
        return i

    outcomes = run_isolated(stop_after_first, 5, max_workers=1, cancel=cancel)
    assert outcomes[0].ok
    assert all(o.cancelled for o in outcomes[1:])


def test_no_tasks():
    assert run_isolated(_task, 0) == []


def test_derive_seed_matches_spawned_children():
    children = np.random.SeedSequence(7).spawn(4)
    for i, child in enumerate(children):
        np.testing.assert_array_equal(
            derive_seed(7, i).generate_state(4), child.generate_state(4)
        )


def test_derive_seed_nests():
    parent = derive_seed(7, 3)
    a = np.random.default_rng(derive_seed(parent, 1)).random(3)
    b = np.random.default_rng(derive_seed(7, 3, 1)).random(3)
    np.testing.assert_array_equal(a, b)
    c = np.random.default_rng(derive_seed(7, 3, 2)).random(3)
    assert not np.array_equal(a, c)
