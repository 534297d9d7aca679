"""Structured warning classes for the :mod:`ionfront` package."""
from __future__ import annotations


class IonFrontWarning(UserWarning):
    """Base warning class for ionfront."""


class PhysicsWarning(IonFrontWarning):
    """Physical parameter or regime warnings."""


class NumericalWarning(IonFrontWarning):
    """Numerical stability or accuracy warnings."""


__all__ = [
    "IonFrontWarning",
    "PhysicsWarning",
    "NumericalWarning",
]
