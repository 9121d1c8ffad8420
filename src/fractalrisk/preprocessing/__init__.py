from .core import (
    AggregationMode,
    aggregate,
    as_returns,
    clean_returns,
    summary_stats,
    to_returns,
)

__all__ = [
    "AggregationMode",
    "aggregate",
    "as_returns",
    "clean_returns",
    "summary_stats",
    "to_returns",
]
