"""Configuration schema for ionization front simulations.

The Pydantic models below mirror the layout of the YAML configuration files
read by :func:`ionfront.run.load_config`.  A minimal file only needs the
``times`` block; everything else has defaults matching the classic
single-source test problem (uniform hydrogen at 1e-3 cm^-3 around a
5e48 s^-1 source).

Example::

    grid:
      n_cells: 200
      box_size_kpc: 6.6
    times:
      end_time_years: 5.0e8
      dt_years: 1.0e6
      output_interval_years: 5.0e7
    cosmology:
      enabled: true
      zred0: 9.0
"""
from __future__ import annotations

import warnings
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from . import constants
from .errors import ConfigurationError
from .warnings import NumericalWarning


class Grid(BaseModel):
    """Radial grid extent and resolution."""

    n_cells: int = Field(200, ge=1, description="Number of radial cells")
    box_size_kpc: float = Field(6.6, gt=0.0, description="Comoving box size [kpc]")
    geometry: Literal["spherical", "planar"] = Field(
        "spherical",
        description="'spherical' for a point source, 'planar' for a plane-parallel flux",
    )

    @property
    def box_size_cm(self) -> float:
        return self.box_size_kpc * constants.KPC


class Material(BaseModel):
    """Initial density, temperature and ionization state."""

    density_profile: Literal["uniform", "powerlaw"] = Field(
        "uniform",
        description="Radial density profile: 'uniform' or 'powerlaw' (n ∝ r^-alpha outside r_core)",
    )
    n0_cm3: float = Field(1.0e-3, gt=0.0, description="Reference hydrogen number density [cm^-3]")
    r_core_pc: float = Field(91.5, gt=0.0, description="Core radius of the powerlaw profile [pc]")
    alpha: float = Field(2.0, ge=0.0, description="Powerlaw index of the density profile")
    temperature_K: float = Field(1.0e4, gt=0.0, description="Initial (isothermal) gas temperature [K]")
    xhii_init: float = Field(1.2e-3, description="Initial ionized hydrogen fraction")

    @field_validator("xhii_init")
    def _validate_fraction(cls, value: float) -> float:
        if not (0.0 <= value <= 1.0):
            raise ConfigurationError("material.xhii_init must lie within [0, 1]")
        return value


class Source(BaseModel):
    """Ionizing source: photon rate for spherical grids, flux for planar ones."""

    photon_rate_s: float = Field(5.0e48, ge=0.0, description="Ionizing photon rate of the point source [s^-1]")
    flux_cm2_s: float = Field(1.0e6, ge=0.0, description="Ionizing photon flux onto the slab [cm^-2 s^-1]")


class Cosmology(BaseModel):
    """Expansion history used to convert comoving to proper quantities."""

    enabled: bool = Field(False, description="Apply cosmological rescaling of grid and densities")
    zred0: float = Field(9.0, ge=0.0, description="Redshift at t = 0")
    h: float = Field(0.7, gt=0.0, description="Dimensionless Hubble parameter")
    omega0: float = Field(0.27, gt=0.0, description="Matter density parameter")


class Times(BaseModel):
    """End time, nominal time step and output cadence (all in years)."""

    end_time_years: float = Field(..., gt=0.0, description="Simulation end time [yr]")
    dt_years: float = Field(..., gt=0.0, description="Nominal time step [yr]")
    output_interval_years: float = Field(..., gt=0.0, description="Time between snapshots [yr]")

    @model_validator(mode="after")
    def _check_cadence(self) -> "Times":
        if self.dt_years > self.end_time_years:
            warnings.warn(
                f"times.dt_years ({self.dt_years}) exceeds end_time_years ({self.end_time_years})",
                NumericalWarning,
            )
        return self

    @property
    def end_time_s(self) -> float:
        return self.end_time_years * constants.YEAR

    @property
    def dt_s(self) -> float:
        return self.dt_years * constants.YEAR

    @property
    def output_interval_s(self) -> float:
        return self.output_interval_years * constants.YEAR


class Numerics(BaseModel):
    """Integrator and solver control parameters."""

    max_steps: int = Field(
        50_000_000,
        ge=1,
        description="Abort the run when the step counter exceeds this value.",
    )
    max_iterations: int = Field(
        10,
        ge=1,
        description="Maximum iterations on the time-averaged electron density per cell.",
    )
    convergence_tol: float = Field(
        1.0e-6,
        gt=0.0,
        description="Relative change of the mean ionized fraction that ends the iteration.",
    )


class Progress(BaseModel):
    """Terminal progress bar controls."""

    enable: bool = False
    refresh_seconds: float = Field(1.0, gt=0.0)


class IO(BaseModel):
    """Output directories and verbosity."""

    outdir: Path = Path("out")
    quiet: bool = Field(
        False,
        description="Suppress INFO logging and Python warnings for cleaner CLI output.",
    )
    write_snapshots: bool = Field(True, description="Write per-cell Parquet tables at each output time.")
    compression: Literal["snappy", "gzip", "zstd", "none"] = "snappy"
    progress: Progress = Progress()


class Config(BaseModel):
    """Top-level configuration object."""

    grid: Grid = Grid()
    material: Material = Material()
    source: Source = Source()
    cosmology: Cosmology = Cosmology()
    times: Times
    numerics: Numerics = Numerics()
    io: IO = IO()


__all__ = [
    "Grid",
    "Material",
    "Source",
    "Cosmology",
    "Times",
    "Numerics",
    "Progress",
    "IO",
    "Config",
]
