"""Snapshot output for the time integration driver.

:class:`SnapshotRecorder` is the concrete writer handed to
:class:`ionfront.driver.TimeIntegrationDriver`.  Every call to
:meth:`SnapshotRecorder.output` records one row of the ionization front
time series and, unless disabled, writes the per-cell state to
``snapshots/snapshot_NNNN.parquet``.  :meth:`SnapshotRecorder.close`
writes ``series/ifront.parquet``.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from .. import constants
from ..evolve import PhotoionizationSolver
from ..grid import SpatialGrid
from ..material import DensityField
from ..cosmology import RedshiftEvolution
from . import writer

logger = logging.getLogger(__name__)

FRONT_THRESHOLD = 0.5


def front_radius(r: np.ndarray, dr: float, x_ionized: np.ndarray, threshold: float = FRONT_THRESHOLD) -> float:
    """Return the radius where the ionized fraction first drops below ``threshold``.

    The position is interpolated linearly between the two cells that
    bracket the crossing.  A fully ionized grid returns its outer edge and
    a grid whose first cell is already below the threshold returns zero.
    """
    below = np.nonzero(x_ionized < threshold)[0]
    if below.size == 0:
        return float(r[-1] + 0.5 * dr)
    first = int(below[0])
    if first == 0:
        return 0.0
    x_in = x_ionized[first - 1]
    x_out = x_ionized[first]
    weight = (x_in - threshold) / (x_in - x_out)
    return float(r[first - 1] + weight * (r[first] - r[first - 1]))


class SnapshotRecorder:
    """Write per-cell snapshots and accumulate the front time series."""

    def __init__(
        self,
        outdir: Path,
        grid: SpatialGrid,
        density: DensityField,
        *,
        solver: Optional[PhotoionizationSolver] = None,
        redshift: Optional[RedshiftEvolution] = None,
        write_snapshots: bool = True,
        compression: str = "snappy",
    ) -> None:
        self.outdir = Path(outdir)
        self.grid = grid
        self.density = density
        self.solver = solver
        self.redshift = redshift
        self.write_snapshots = write_snapshots
        self.compression = compression
        self.records: List[Dict[str, Any]] = []

    @property
    def n_outputs(self) -> int:
        return len(self.records)

    def _snapshot_frame(self) -> pd.DataFrame:
        grid = self.grid
        density = self.density
        frame = {
            "cell_index": np.arange(grid.n_cells),
            "r_cm": grid.r.copy(),
            "dr_cm": np.full(grid.n_cells, grid.dr),
            "vol_cm3": grid.vol.copy(),
            "ndens_cm3": density.ndens.copy(),
            "xHI": density.xh[:, 0].copy(),
            "xHII": density.xh[:, 1].copy(),
            "temperature_K": density.temperature.copy(),
            "eldens_cm3": density.electron_density(),
            "pressure_erg_cm3": density.pressure(),
            "rho_g_cm3": density.mass_density(),
        }
        if self.solver is not None:
            frame["gamma_s"] = self.solver.rates.copy()
        return pd.DataFrame(frame)

    def output(self, step_count: int, current_time: float, actual_dt: float, end_time: float) -> None:
        grid = self.grid
        x_ionized = self.density.xh[:, 1]
        mass = self.density.ndens * grid.vol
        r_front = front_radius(grid.r, grid.dr, x_ionized)
        record = {
            "step": int(step_count),
            "time_s": float(current_time),
            "time_yr": float(current_time / constants.YEAR),
            "dt_s": float(actual_dt),
            "zred": float(self.redshift.zred) if self.redshift is not None else float("nan"),
            "front_radius_cm": r_front,
            "front_radius_kpc": r_front / constants.KPC,
            "x_vol_mean": float(np.sum(x_ionized * grid.vol) / np.sum(grid.vol)),
            "x_mass_mean": float(np.sum(x_ionized * mass) / np.sum(mass)),
        }
        index = len(self.records)
        self.records.append(record)
        if self.write_snapshots:
            path = self.outdir / "snapshots" / f"snapshot_{index:04d}.parquet"
            writer.write_parquet(self._snapshot_frame(), path, compression=self.compression)
        logger.info(
            "output %d: step=%d t=%.4e yr front=%.4e kpc (end %.4e yr)",
            index,
            step_count,
            record["time_yr"],
            record["front_radius_kpc"],
            end_time / constants.YEAR,
        )

    def close(self) -> pd.DataFrame:
        """Write the accumulated front series and return it."""

        series = pd.DataFrame(self.records)
        writer.write_parquet(series, self.outdir / "series" / "ifront.parquet", compression=self.compression)
        return series


__all__ = ["FRONT_THRESHOLD", "SnapshotRecorder", "front_radius"]
