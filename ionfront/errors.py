"""Custom exceptions for the :mod:`ionfront` package."""
from __future__ import annotations


class IonFrontError(Exception):
    """Base exception for ionization front simulation errors."""


class ConfigurationError(IonFrontError, ValueError):
    """Invalid configuration file or run parameter."""


class NumericalDomainError(IonFrontError, ValueError):
    """A quantity left its physical domain (non-positive density or scale ratio)."""


class NumericalError(IonFrontError, RuntimeError):
    """Integration control failure such as exceeding the step limit."""


class SolverFailure(IonFrontError, RuntimeError):
    """The physical update for a step failed or produced non-finite state."""


__all__ = [
    "IonFrontError",
    "ConfigurationError",
    "NumericalDomainError",
    "NumericalError",
    "SolverFailure",
]
