"""Gray photo-ionization update for one time step.

Cells are swept outward from the source.  For each cell the photo-ionization
rate follows from the photons entering the cell and the fraction absorbed
in it (photon-conserving form)::

    Gamma_i = Ndot exp(-tau_in) (1 - exp(-dtau_i)) / (n_HI,i V_i)

and the ionized fraction relaxes analytically towards equilibrium,

    x(dt) = x_eq + (x0 - x_eq) exp(-dt / t_i),   1 / t_i = Gamma + n_e alpha_B

The electron density and the optical depth of the cell use the
time-averaged ionized fraction, so the update is iterated until that mean
stops changing.  The gas is isothermal; pressure is derived on demand from
temperature, density and ionization through :mod:`ionfront.thermo`.
"""
from __future__ import annotations

import logging
import math
import warnings

import numpy as np

from . import constants, thermo
from .errors import NumericalDomainError, SolverFailure
from .warnings import PhysicsWarning
from .grid import SpatialGrid
from .material import DensityField
from .schema import Config

logger = logging.getLogger(__name__)


def recombination_coefficient(temperature: float) -> float:
    """Return the case-B recombination coefficient [cm^3 s^-1]."""

    return constants.ALPHA_B_1E4 * (temperature / 1.0e4) ** constants.ALPHA_B_SLOPE


def relax_ionized_fraction(
    x_old: float,
    gamma: float,
    eldens: float,
    alpha: float,
    dt: float,
) -> tuple[float, float]:
    """Return ``(x_new, x_mean)`` after relaxing for ``dt`` seconds.

    ``x_mean`` is the time average of the ionized fraction over the step.
    """
    ionization = gamma
    recombination = eldens * alpha
    rate = ionization + recombination
    if rate <= 0.0:
        return x_old, x_old
    x_eq = ionization / rate
    arg = rate * dt
    decay = math.exp(-arg)
    x_new = x_eq + (x_old - x_eq) * decay
    x_mean = x_eq + (x_old - x_eq) * (-math.expm1(-arg)) / arg
    return x_new, x_mean


def _clip_fraction(value: float) -> float:
    return min(max(value, constants.FRACTION_MIN), 1.0 - constants.FRACTION_MIN)


class PhotoionizationSolver:
    """Advance hydrogen ionization on the grid for a single source.

    Parameters
    ----------
    grid, density:
        Grid geometry and gas state; both are read at every call so the
        cosmological rescaling between steps is picked up automatically.
    photons:
        Photon rate [s^-1] for spherical grids or flux [cm^-2 s^-1] for
        planar ones.
    """

    def __init__(
        self,
        grid: SpatialGrid,
        density: DensityField,
        photons: float,
        *,
        max_iterations: int = 10,
        convergence_tol: float = 1.0e-6,
    ) -> None:
        self.grid = grid
        self.density = density
        self.photons = float(photons)
        self.max_iterations = int(max_iterations)
        self.convergence_tol = float(convergence_tol)
        self.rates = np.zeros(grid.n_cells, dtype=float)
        self.unconverged_cells = 0
        t_min, t_max = constants.ALPHA_B_T_RANGE
        if np.any((density.temperature < t_min) | (density.temperature > t_max)):
            warnings.warn(
                f"case-B recombination fit used outside {t_min:.0e}-{t_max:.0e} K",
                PhysicsWarning,
                stacklevel=2,
            )

    @classmethod
    def from_config(cls, grid: SpatialGrid, density: DensityField, cfg: Config) -> "PhotoionizationSolver":
        photons = cfg.source.photon_rate_s if grid.geometry == "spherical" else cfg.source.flux_cm2_s
        return cls(
            grid,
            density,
            photons,
            max_iterations=cfg.numerics.max_iterations,
            convergence_tol=cfg.numerics.convergence_tol,
        )

    def _photoionization_rate(self, tau_in: float, dtau: float, n_hi: float, vol: float) -> float:
        if self.photons == 0.0:
            return 0.0
        absorbed = -math.expm1(-dtau) if dtau > 0.0 else 0.0
        return self.photons * math.exp(-tau_in) * absorbed / (n_hi * vol)

    def _evolve_cell(self, index: int, tau_in: float, dt: float) -> tuple[float, float]:
        density = self.density
        ndens = float(density.ndens[index])
        vol = float(self.grid.vol[index])
        dr = float(self.grid.dr)
        alpha = recombination_coefficient(float(density.temperature[index]))
        x_old = float(density.xh[index, 1])

        x_mean = x_old
        x_new = x_old
        gamma = 0.0
        for _ in range(self.max_iterations):
            n_hi = ndens * (1.0 - x_mean)
            dtau = n_hi * constants.SIGMA_H * dr
            gamma = self._photoionization_rate(tau_in, dtau, n_hi, vol)
            eldens = thermo.electron_density(ndens, (1.0 - x_mean, x_mean))
            x_new, x_mean_next = relax_ionized_fraction(x_old, gamma, eldens, alpha, dt)
            x_new = _clip_fraction(x_new)
            x_mean_next = _clip_fraction(x_mean_next)
            change = abs(x_mean_next - x_mean)
            x_mean = x_mean_next
            if change <= self.convergence_tol * x_mean:
                break
        else:
            self.unconverged_cells += 1

        self.rates[index] = gamma
        density.xh[index, 1] = x_new
        density.xh[index, 0] = 1.0 - x_new
        return x_new, x_mean

    def evolve_step(self, dt: float) -> None:
        """Advance every cell by ``dt`` seconds, sweeping away from the source."""

        if not math.isfinite(dt) or dt <= 0.0:
            raise NumericalDomainError(f"time step must be finite and positive (got {dt!r})")
        if np.any(self.density.ndens <= 0.0):
            raise NumericalDomainError("number density must be positive in every cell")
        self.unconverged_cells = 0
        dr = float(self.grid.dr)
        tau_in = 0.0
        for index in range(self.grid.n_cells):
            _, x_mean = self._evolve_cell(index, tau_in, dt)
            tau_in += float(self.density.ndens[index]) * (1.0 - x_mean) * constants.SIGMA_H * dr

        if not np.all(np.isfinite(self.density.xh)) or not np.all(np.isfinite(self.rates)):
            raise SolverFailure("photo-ionization update produced non-finite ionization fractions")
        if self.unconverged_cells:
            logger.debug(
                "evolve: %d cells did not converge within %d iterations",
                self.unconverged_cells,
                self.max_iterations,
            )


__all__ = [
    "PhotoionizationSolver",
    "recombination_coefficient",
    "relax_ionized_fraction",
]
