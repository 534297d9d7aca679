"""Density, temperature and ionization state of the gas on the grid."""
from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from . import constants, thermo
from .errors import ConfigurationError
from .grid import SpatialGrid
from .schema import Material

logger = logging.getLogger(__name__)


def density_profile(r: np.ndarray, cfg: Material) -> np.ndarray:
    """Return the initial hydrogen number density [cm^-3] at radii ``r``.

    ``uniform`` fills every cell with ``n0``.  ``powerlaw`` follows
    ``n0 (r / r_core)^-alpha`` outside the core radius and stays flat at
    ``n0`` inside it.
    """
    if cfg.density_profile == "uniform":
        return np.full_like(r, cfg.n0_cm3, dtype=float)
    r_core = cfg.r_core_pc * constants.PC
    if r_core <= 0.0:
        raise ConfigurationError("material.r_core_pc must be positive for the powerlaw profile")
    ratio = np.maximum(r / r_core, 1.0)
    return cfg.n0_cm3 * ratio ** (-cfg.alpha)


@dataclass
class DensityField:
    """Per-cell gas state.

    Attributes
    ----------
    ndens : numpy.ndarray
        Hydrogen number density [cm^-3].
    temperature : numpy.ndarray
        Gas temperature [K].
    xh : numpy.ndarray
        Shape ``(n_cells, 2)``; neutral and ionized hydrogen fractions.
    """

    ndens: np.ndarray
    temperature: np.ndarray
    xh: np.ndarray

    @classmethod
    def build(cls, grid: SpatialGrid, cfg: Material) -> "DensityField":
        ndens = density_profile(grid.r, cfg)
        temperature = np.full(grid.n_cells, cfg.temperature_K, dtype=float)
        xh = np.empty((grid.n_cells, 2), dtype=float)
        xh[:, 1] = cfg.xhii_init
        xh[:, 0] = 1.0 - cfg.xhii_init
        logger.info(
            "material: profile=%s n0=%.3e cm^-3 T=%.3g K x_HII=%.3e",
            cfg.density_profile,
            cfg.n0_cm3,
            cfg.temperature_K,
            cfg.xhii_init,
        )
        return cls(ndens=ndens, temperature=temperature, xh=xh)

    def electron_density(self) -> np.ndarray:
        return thermo.electron_density(self.ndens, self.xh)

    def pressure(self) -> np.ndarray:
        return thermo.temperature_to_pressure(self.temperature, self.ndens, self.electron_density())

    def mass_density(self) -> np.ndarray:
        return thermo.number_density_to_mass_density(self.ndens)

    def sample(self, index: int) -> thermo.ThermodynamicSample:
        """Return the thermodynamic state of cell ``index``."""

        return thermo.ThermodynamicSample.from_temperature(
            self.temperature[index], self.ndens[index], self.xh[index]
        )


__all__ = ["DensityField", "density_profile"]
