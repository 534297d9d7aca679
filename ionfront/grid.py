"""Radial grid for the one-dimensional ionization front model.

Cells are equally spaced with centres at ``r_i = (i - 1/2) dr``.  Two
geometries are supported: ``"spherical"`` (shells around a point source)
and ``"planar"`` (slabs illuminated by a plane-parallel flux, unit area).
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

import numpy as np

from .errors import ConfigurationError

Geometry = Literal["spherical", "planar"]


def shell_volumes(r: np.ndarray, dr: float, geometry: Geometry = "spherical") -> np.ndarray:
    """Return cell volumes [cm^3] for centres ``r`` and width ``dr``.

    Planar cells have unit cross section so their volume equals ``dr``.
    """
    if geometry == "planar":
        return np.full_like(r, dr, dtype=float)
    r_in = r - 0.5 * dr
    r_out = r + 0.5 * dr
    return 4.0 * math.pi / 3.0 * (r_out**3 - r_in**3)


@dataclass
class SpatialGrid:
    """Cell centres, cell width and cell volumes.

    Parameters
    ----------
    r:
        Cell centre radii [cm].
    dr:
        Cell width [cm].
    vol:
        Cell volumes [cm^3].
    geometry:
        ``"spherical"`` or ``"planar"``.
    """

    r: np.ndarray
    dr: float
    vol: np.ndarray
    geometry: Geometry = "spherical"

    @classmethod
    def build(cls, n_cells: int, box_size: float, geometry: Geometry = "spherical") -> "SpatialGrid":
        """Generate ``n_cells`` equal cells spanning ``[0, box_size]``."""

        if n_cells < 1:
            raise ConfigurationError("grid needs at least one cell")
        if not math.isfinite(box_size) or box_size <= 0.0:
            raise ConfigurationError("grid box size must be finite and positive")
        dr = box_size / n_cells
        r = (np.arange(1, n_cells + 1, dtype=float) - 0.5) * dr
        return cls(r=r, dr=dr, vol=shell_volumes(r, dr, geometry), geometry=geometry)

    @property
    def n_cells(self) -> int:
        return int(self.r.size)

    @property
    def box_size(self) -> float:
        return self.n_cells * self.dr


__all__ = ["Geometry", "SpatialGrid", "shell_volumes"]
