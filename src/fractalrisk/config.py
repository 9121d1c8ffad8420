"""
Call-site configuration
=======================
Plain dataclasses bundle the parameters accepted by the scaling functions.
:func:`load_config` merges a YAML file (or a mapping) over the structured
defaults with OmegaConf, e.g.::

    q: 0.975
    horizons: [1, 2, 5, 10, 20]
    bootstrap:
      block_len: 20
      B: 300
    rolling:
      window: 500
      step: 10
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional

from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from .errors import InvalidParameter
from .preprocessing.core import _as_mode

__all__ = ["BootstrapConfig", "RollingConfig", "ScalingConfig", "load_config"]


@dataclass
class BootstrapConfig:
    """Moving-block bootstrap settings; ``B == 0`` disables the bootstrap."""

    block_len: int = 25
    B: int = 0
    seed: Optional[int] = 123

    def __post_init__(self) -> None:
        if self.block_len <= 0:
            raise InvalidParameter("block_len must be positive")
        if self.B < 0:
            raise InvalidParameter("B must be non-negative")

    @property
    def enabled(self) -> bool:
        return self.B > 0


@dataclass
class RollingConfig:
    window: int = 750
    step: int = 20

    def __post_init__(self) -> None:
        if self.window <= 0 or self.step <= 0:
            raise InvalidParameter("window and step must be positive integers")


@dataclass
class ScalingConfig:
    q: float = 0.99
    horizons: List[int] = field(default_factory=lambda: [1, 2, 5, 10, 20])
    mode: str = "overlapping"
    min_obs_per_h: int = 50
    null_alpha: float = 0.5
    bootstrap: BootstrapConfig = field(default_factory=BootstrapConfig)
    rolling: RollingConfig = field(default_factory=RollingConfig)

    def __post_init__(self) -> None:
        if not 0.0 < self.q < 1.0:
            raise InvalidParameter("q must lie in (0, 1)")
        if not self.horizons or any(h <= 0 for h in self.horizons):
            raise InvalidParameter("horizons must be a non-empty list of positive integers")
        if self.min_obs_per_h < 0:
            raise InvalidParameter("min_obs_per_h must be non-negative")
        _as_mode(self.mode)


def load_config(source: str | Path | Mapping[str, Any] | None = None) -> ScalingConfig:
    """Build a :class:`ScalingConfig` from a YAML path or a mapping.

    Keys missing from *source* keep their defaults; unknown keys and values
    of the wrong type raise :class:`~fractalrisk.errors.InvalidParameter`.
    """
    try:
        base = OmegaConf.structured(ScalingConfig)
        if source is None:
            override = OmegaConf.create()
        elif isinstance(source, (str, Path)):
            override = OmegaConf.load(source)
        else:
            override = OmegaConf.create(dict(source))
        merged = OmegaConf.merge(base, override)
        return OmegaConf.to_object(merged)
    except OmegaConfBaseException as exc:
        raise InvalidParameter(f"Invalid configuration: {exc}") from exc
