from .common import (
    auto_select_horizons,
    compute_window_starts,
    describe_distribution,
    estimate_sample_size_needed,
)

__all__ = [
    "compute_window_starts",
    "auto_select_horizons",
    "estimate_sample_size_needed",
    "describe_distribution",
]
