from .scaling import RiskScaling, ScalingResult

__all__ = ["RiskScaling", "ScalingResult"]
