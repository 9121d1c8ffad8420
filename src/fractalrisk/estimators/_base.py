"""
Common base class for the scaling estimators
============================================
* Accepts a pandas Series **or** a NumPy 1‑D array of returns.
* Internally stores `self.series` as a validated 1‑D float ndarray.
* Provides `.result_` for fit outputs.
"""

from __future__ import annotations

import abc
from typing import Any

import numpy as np
import pandas as pd

from ..errors import ScalingError
from ..preprocessing import as_returns


class BaseEstimator(abc.ABC):
    """Minimal parent class; concrete estimators implement `.fit()`.

    ``n_boot``, ``block_len`` and ``seed`` configure the optional
    moving‑block bootstrap; ``n_boot = 0`` disables it.
    """

    n_boot: int = 0
    block_len: int = 25
    seed: int | None = None

    def __init__(self, series: pd.Series | np.ndarray | list[float]):
        # Finite, non-empty, one-dimensional
        self.series = as_returns(series)
        self.result_: Any | None = None

    # ------------------------------------------------------------------
    @abc.abstractmethod
    def fit(self, **kwargs) -> "BaseEstimator":
        """Run the estimator and populate `self.result_`."""
        ...

    # ------------------------------------------------------------------
    def _require_fit(self) -> Any:
        if self.result_ is None:
            raise ScalingError(f"{type(self).__name__} is not fitted; call .fit() first")
        return self.result_
