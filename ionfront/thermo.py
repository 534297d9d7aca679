"""Temperature, pressure and density conversions for partially ionized gas.

The gas is treated as ideal and consists of hydrogen (with helium folded
into the mean molecular weight) plus a trace species that always supplies
free electrons.  All functions are pure and accept either Python floats or
NumPy arrays; array inputs broadcast in the usual way.

Conversions
-----------
``P = (n + n_e) k_B T``
    :func:`temperature_to_pressure` and its inverse
    :func:`pressure_to_temperature`.
``n_e = n (x_HII + abu_c)``
    :func:`electron_density`.
``rho = n mu m_p``
    :func:`number_density_to_mass_density` and its inverse
    :func:`mass_density_to_number_density`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np

from . import constants
from .errors import NumericalDomainError

ArrayOrFloat = Union[float, np.ndarray]

# Allowed deviation of xHI + xHII from one
XH_SUM_ATOL = 1.0e-6


def _as_numeric(value: ArrayOrFloat) -> ArrayOrFloat:
    if isinstance(value, (int, float, np.floating, np.integer)):
        return float(value)
    return np.asarray(value, dtype=float)


def _require_positive(value: ArrayOrFloat, label: str) -> None:
    arr = np.asarray(value, dtype=float)
    if not np.all(np.isfinite(arr)) or np.any(arr <= 0.0):
        raise NumericalDomainError(f"{label} must be finite and positive")


def _require_non_negative(value: ArrayOrFloat, label: str) -> None:
    arr = np.asarray(value, dtype=float)
    if not np.all(np.isfinite(arr)) or np.any(arr < 0.0):
        raise NumericalDomainError(f"{label} must be finite and non-negative")


def temperature_to_pressure(temper: ArrayOrFloat, ndens: ArrayOrFloat, eldens: ArrayOrFloat) -> ArrayOrFloat:
    """Return the gas pressure [erg cm^-3] for temperature ``temper`` [K].

    Parameters
    ----------
    temper:
        Gas temperature [K].
    ndens:
        Number density of heavy particles [cm^-3].
    eldens:
        Electron density [cm^-3].
    """
    ndens = _as_numeric(ndens)
    eldens = _as_numeric(eldens)
    _require_positive(ndens, "ndens")
    _require_non_negative(eldens, "eldens")
    return (ndens + eldens) * constants.K_B * _as_numeric(temper)


def pressure_to_temperature(pressr: ArrayOrFloat, ndens: ArrayOrFloat, eldens: ArrayOrFloat) -> ArrayOrFloat:
    """Return the gas temperature [K] for pressure ``pressr`` [erg cm^-3].

    Raises
    ------
    NumericalDomainError
        If ``ndens`` is not positive or ``eldens`` is negative.
    """
    ndens = _as_numeric(ndens)
    eldens = _as_numeric(eldens)
    _require_positive(ndens, "ndens")
    _require_non_negative(eldens, "eldens")
    return _as_numeric(pressr) / (constants.K_B * (ndens + eldens))


def electron_density(ndens: ArrayOrFloat, xh: Union[Sequence[float], np.ndarray]) -> ArrayOrFloat:
    """Return the electron density for hydrogen ionization fractions ``xh``.

    ``xh`` holds the neutral and ionized fractions along its last axis,
    ``xh[..., 0] + xh[..., 1] == 1``.  The trace abundance ``abu_c`` keeps
    the electron density finite in fully neutral gas.
    """
    ndens = _as_numeric(ndens)
    _require_positive(ndens, "ndens")
    fractions = np.asarray(xh, dtype=float)
    if fractions.ndim == 0 or fractions.shape[-1] != 2:
        raise NumericalDomainError("xh must hold (neutral, ionized) fractions along its last axis")
    if np.any((fractions < 0.0) | (fractions > 1.0)):
        raise NumericalDomainError("hydrogen fractions must lie in [0, 1]")
    if np.any(np.abs(fractions.sum(axis=-1) - 1.0) > XH_SUM_ATOL):
        raise NumericalDomainError("neutral and ionized fractions must sum to one")
    ionized = fractions[..., 1]
    if ionized.ndim == 0:
        ionized = float(ionized)
    return ndens * (ionized + constants.ABU_C)


def mass_density_to_number_density(rho: ArrayOrFloat) -> ArrayOrFloat:
    """Return the number density [cm^-3] for mass density ``rho`` [g cm^-3]."""

    rho = _as_numeric(rho)
    _require_positive(rho, "rho")
    return rho / (constants.MU * constants.M_P)


def number_density_to_mass_density(ndens: ArrayOrFloat) -> ArrayOrFloat:
    """Return the mass density [g cm^-3] for number density ``ndens`` [cm^-3]."""

    ndens = _as_numeric(ndens)
    _require_positive(ndens, "ndens")
    return ndens * constants.M_P * constants.MU


@dataclass(frozen=True)
class ThermodynamicSample:
    """Consistent thermodynamic state of a single cell.

    Attributes
    ----------
    temperature : float
        Gas temperature [K].
    pressure : float
        Gas pressure [erg cm^-3].
    number_density : float
        Hydrogen number density [cm^-3].
    electron_density : float
        Free electron density [cm^-3].
    ionization_fraction : tuple of float
        ``(x_HI, x_HII)``.
    mass_density : float
        Mass density [g cm^-3].
    """

    temperature: float
    pressure: float
    number_density: float
    electron_density: float
    ionization_fraction: tuple[float, float]
    mass_density: float

    @classmethod
    def from_temperature(cls, temperature: float, ndens: float, xh: Sequence[float]) -> "ThermodynamicSample":
        fractions = (float(xh[0]), float(xh[1]))
        eldens = electron_density(float(ndens), fractions)
        return cls(
            temperature=float(temperature),
            pressure=float(temperature_to_pressure(temperature, ndens, eldens)),
            number_density=float(ndens),
            electron_density=float(eldens),
            ionization_fraction=fractions,
            mass_density=float(number_density_to_mass_density(ndens)),
        )

    @classmethod
    def from_pressure(cls, pressure: float, ndens: float, xh: Sequence[float]) -> "ThermodynamicSample":
        fractions = (float(xh[0]), float(xh[1]))
        eldens = electron_density(float(ndens), fractions)
        return cls(
            temperature=float(pressure_to_temperature(pressure, ndens, eldens)),
            pressure=float(pressure),
            number_density=float(ndens),
            electron_density=float(eldens),
            ionization_fraction=fractions,
            mass_density=float(number_density_to_mass_density(ndens)),
        )


__all__ = [
    "temperature_to_pressure",
    "pressure_to_temperature",
    "electron_density",
    "mass_density_to_number_density",
    "number_density_to_mass_density",
    "ThermodynamicSample",
]
