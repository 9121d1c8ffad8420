"""
Exception taxonomy
==================
Every failure raised by the package derives from :class:`ScalingError` so
callers can catch the whole family at once.  Parameter errors additionally
subclass :class:`ValueError`.

Batch operations (curve building, rolling windows, bootstrap replicates) do
not raise for a single bad item; they record an :class:`ItemFailure` and
move on.  They only raise when nothing at all survived.
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
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


class ScalingError(Exception):
    """Base class of all errors raised by :mod:`fractalrisk`."""


class InvalidParameter(ScalingError, ValueError):
    """A call-site parameter is out of its admissible range."""


class InsufficientData(ScalingError):
    """The series is too short for the requested operation."""


class InsufficientPoints(InsufficientData):
    """Too few curve points survived filtering for a regression."""


class EmptyInput(ScalingError):
    """The input sample is empty."""


class EmptyResult(ScalingError):
    """Every item of a batch operation failed or was filtered out."""


class NumericalDegeneracy(ScalingError):
    """A statistic is undefined (e.g. zero regressor variance)."""


class BootstrapUnreliable(ScalingError):
    """Fewer than half of the bootstrap replicates succeeded."""


@dataclass(slots=True, frozen=True)
class ItemFailure:
    """A horizon, window or replicate excluded from a batch result."""

    key: int
    reason: str

    def __str__(self) -> str:
        return f"{self.key}: {self.reason}"
