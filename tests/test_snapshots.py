"""Snapshot output and ionization front diagnostics."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from ionfront.io import writer
from ionfront.io.snapshots import SnapshotRecorder, front_radius


def test_front_radius_interpolates_crossing() -> None:
    r = np.array([1.0, 2.0, 3.0, 4.0])
    x = np.array([1.0, 0.8, 0.2, 0.0])
    assert front_radius(r, 1.0, x) == pytest.approx(2.5)


def test_front_radius_limits() -> None:
    r = np.array([0.5, 1.5, 2.5])
    assert front_radius(r, 1.0, np.ones(3)) == pytest.approx(3.0)
    assert front_radius(r, 1.0, np.zeros(3)) == 0.0


def test_recorder_writes_snapshots_and_series(tmp_path: Path, small_state) -> None:
    grid, density = small_state
    recorder = SnapshotRecorder(tmp_path, grid, density)
    recorder.output(0, 0.0, 1.0, 2.0)
    density.xh[:3] = [0.0, 1.0]
    recorder.output(4, 2.0, 0.5, 2.0)
    series = recorder.close()

    assert recorder.n_outputs == 2
    snap = pd.read_parquet(tmp_path / "snapshots" / "snapshot_0001.parquet")
    assert len(snap) == grid.n_cells
    np.testing.assert_allclose(snap["xHII"].to_numpy()[:3], 1.0)
    np.testing.assert_allclose(snap["pressure_erg_cm3"], density.pressure())

    stored = pd.read_parquet(tmp_path / "series" / "ifront.parquet")
    assert list(stored["step"]) == [0, 4]
    assert stored["front_radius_cm"].iloc[1] > stored["front_radius_cm"].iloc[0]
    assert series["x_vol_mean"].iloc[1] > series["x_vol_mean"].iloc[0]
    assert np.isnan(stored["zred"]).all()


def test_snapshots_can_be_disabled(tmp_path: Path, small_state) -> None:
    grid, density = small_state
    recorder = SnapshotRecorder(tmp_path, grid, density, write_snapshots=False)
    recorder.output(0, 0.0, 1.0, 1.0)
    recorder.close()
    assert not (tmp_path / "snapshots").exists()
    assert (tmp_path / "series" / "ifront.parquet").exists()


def test_parquet_units_metadata(tmp_path: Path) -> None:
    path = tmp_path / "t.parquet"
    writer.write_parquet(pd.DataFrame({"r_cm": [1.0], "custom": [2.0]}), path, compression="none")
    assert writer.read_units(path) == {"r_cm": "cm"}
