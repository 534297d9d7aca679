"""Cosmological evolution of grid coordinates and densities.

When the universe expands by a factor ``k`` between two calls, proper
lengths grow by ``k``, volumes by ``k**3`` and number densities drop by
``k**3`` so that the comoving content ``ndens * vol`` of every cell is
unchanged.  The caller supplies the incremental ratio since the previous
call; no redshift bookkeeping happens here.
"""
from __future__ import annotations

import math

from .errors import NumericalDomainError
from .grid import SpatialGrid
from .material import DensityField


class CosmologicalScaler:
    """Apply expansion ratios in place to a grid and its density field."""

    def __init__(self, grid: SpatialGrid, density: DensityField) -> None:
        self.grid = grid
        self.density = density

    def rescale(self, scale_ratio: float) -> None:
        """Stretch the grid by ``scale_ratio`` and dilute the densities.

        Raises
        ------
        NumericalDomainError
            If ``scale_ratio`` is not finite and positive.
        """
        if not math.isfinite(scale_ratio) or scale_ratio <= 0.0:
            raise NumericalDomainError(f"scale ratio must be finite and positive (got {scale_ratio!r})")
        if scale_ratio == 1.0:
            return
        zfactor3 = scale_ratio * scale_ratio * scale_ratio

        self.grid.r *= scale_ratio
        self.grid.dr *= scale_ratio
        self.grid.vol *= zfactor3

        self.density.ndens /= zfactor3


__all__ = ["CosmologicalScaler"]
