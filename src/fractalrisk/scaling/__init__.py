from .bootstrap import BootstrapResult, mbb_alpha_ci, mbb_alpha_distribution, mbb_sample
from .curve import RiskPoint, ScalingCurve, build_curve
from .regression import AlphaFit, HypothesisTest, fit, ols_loglog, test_alpha_hypothesis
from .rolling import RollingReport, RollingWindowResult, rolling, rolling_curves

__all__ = [
    "RiskPoint",
    "ScalingCurve",
    "build_curve",
    "AlphaFit",
    "HypothesisTest",
    "fit",
    "ols_loglog",
    "test_alpha_hypothesis",
    "BootstrapResult",
    "mbb_sample",
    "mbb_alpha_ci",
    "mbb_alpha_distribution",
    "RollingWindowResult",
    "RollingReport",
    "rolling",
    "rolling_curves",
]
