"""Core package for one-dimensional ionization front simulations."""
from . import constants, thermo
from .errors import IonFrontError

__all__ = ["constants", "thermo", "IonFrontError"]
