import logging
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("fractalrisk")
except PackageNotFoundError:
    __version__ = "0.0.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from .config import BootstrapConfig, RollingConfig, ScalingConfig, load_config  # noqa
from .errors import (  # noqa
    BootstrapUnreliable,
    EmptyInput,
    EmptyResult,
    InsufficientData,
    InsufficientPoints,
    InvalidParameter,
    ItemFailure,
    NumericalDegeneracy,
    ScalingError,
)
from .estimators import RiskScaling, ScalingResult  # noqa
from .preprocessing import AggregationMode, aggregate  # noqa
from .risk import (  # noqa
    coverage_backtest,
    compare_scalings,
    estimate,
    kupiec_pof,
)
from .scaling import (  # noqa
    ScalingCurve,
    build_curve,
    fit,
    mbb_alpha_ci,
    rolling,
)

__all__ = [
    "AggregationMode",
    "aggregate",
    "estimate",
    "ScalingCurve",
    "build_curve",
    "fit",
    "mbb_alpha_ci",
    "rolling",
    "kupiec_pof",
    "coverage_backtest",
    "compare_scalings",
    "RiskScaling",
    "ScalingResult",
    "BootstrapConfig",
    "RollingConfig",
    "ScalingConfig",
    "load_config",
    "ScalingError",
    "InvalidParameter",
    "InsufficientData",
    "InsufficientPoints",
    "EmptyInput",
    "EmptyResult",
    "NumericalDegeneracy",
    "BootstrapUnreliable",
    "ItemFailure",
]
