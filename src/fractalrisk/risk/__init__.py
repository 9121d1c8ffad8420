from .backtest import (
    BacktestResult,
    CombinedCoverageResult,
    ComparisonReport,
    ComparisonResult,
    IndependenceResult,
    KupiecResult,
    backtest_summary_table,
    christoffersen_combined,
    christoffersen_independence,
    compare_scalings,
    coverage_backtest,
    kupiec_pof,
)
from .var import (
    RiskEstimate,
    estimate,
    scaled_risk,
    theoretical_var_power,
    theoretical_var_sqrt,
)

__all__ = [
    "RiskEstimate",
    "estimate",
    "theoretical_var_sqrt",
    "theoretical_var_power",
    "scaled_risk",
    "KupiecResult",
    "IndependenceResult",
    "CombinedCoverageResult",
    "BacktestResult",
    "ComparisonResult",
    "ComparisonReport",
    "kupiec_pof",
    "christoffersen_independence",
    "christoffersen_combined",
    "coverage_backtest",
    "compare_scalings",
    "backtest_summary_table",
]
