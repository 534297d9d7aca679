"""Configuration loading, end-to-end runs and the command line entry point."""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from ionfront import constants, run
from ionfront.errors import ConfigurationError
from ionfront.io import writer

BASE_YAML = """
grid:
  n_cells: 12
  box_size_kpc: 6.6
material:
  n0_cm3: 1.0e-3
times:
  end_time_years: 1.0e7
  dt_years: 1.0e6
  output_interval_years: 5.0e6
"""


def _write_config(tmp_path: Path, text: str = BASE_YAML) -> Path:
    path = tmp_path / "config.yml"
    path.write_text(text + f"io:\n  outdir: {tmp_path / 'out'}\n", encoding="utf-8")
    return path


def test_load_config_applies_overrides(tmp_path: Path) -> None:
    cfg = run.load_config(
        _write_config(tmp_path),
        overrides=["times.dt_years=2.5e5", "cosmology.enabled=true", "grid.geometry=planar"],
    )
    assert cfg.times.dt_years == pytest.approx(2.5e5)
    assert cfg.times.dt_s == pytest.approx(2.5e5 * constants.YEAR)
    assert cfg.cosmology.enabled is True
    assert cfg.grid.geometry == "planar"
    assert cfg.grid.n_cells == 12


@pytest.mark.parametrize(
    "override",
    ["times.dt_years=-1", "times.output_interval_years=0", "material.xhii_init=1.5", "grid.n_cells=0"],
)
def test_invalid_values_raise_configuration_error(tmp_path: Path, override: str) -> None:
    with pytest.raises(ConfigurationError):
        run.load_config(_write_config(tmp_path), overrides=[override])


def test_missing_times_block(tmp_path: Path) -> None:
    path = tmp_path / "config.yml"
    path.write_text("grid:\n  n_cells: 4\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        run.load_config(path)


def test_malformed_override(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        run.load_config(_write_config(tmp_path), overrides=["times.dt_years"])


def test_static_run_writes_outputs(tmp_path: Path) -> None:
    cfg = run.load_config(_write_config(tmp_path))
    run.run_simulation(cfg)
    outdir = tmp_path / "out"

    summary = json.loads((outdir / "summary.json").read_text())
    assert summary["steps"] == 10
    assert summary["n_outputs"] == 3
    assert summary["end_time_yr"] == pytest.approx(1.0e7, rel=1e-6)
    assert summary["cosmological"] is False
    assert summary["final_zred"] is None

    series = pd.read_parquet(outdir / "series" / "ifront.parquet")
    assert series["time_yr"].to_numpy() == pytest.approx([0.0, 5.0e6, 1.0e7], rel=1e-6)
    assert series["front_radius_cm"].is_monotonic_increasing
    assert writer.read_units(outdir / "series" / "ifront.parquet")["front_radius_cm"] == "cm"
    assert sorted(p.name for p in (outdir / "snapshots").iterdir()) == [
        "snapshot_0000.parquet",
        "snapshot_0001.parquet",
        "snapshot_0002.parquet",
    ]
    stored_cfg = json.loads((outdir / "run_config.json").read_text())
    assert stored_cfg["grid"]["n_cells"] == 12


def test_cosmological_run_expands_grid(tmp_path: Path) -> None:
    cfg = run.load_config(
        _write_config(tmp_path),
        overrides=["cosmology.enabled=true", "cosmology.zred0=9.0"],
    )
    run.run_simulation(cfg)
    outdir = tmp_path / "out"
    summary = json.loads((outdir / "summary.json").read_text())
    zred_final = summary["final_zred"]
    assert 0.0 < zred_final < 9.0

    first = pd.read_parquet(outdir / "snapshots" / "snapshot_0000.parquet")
    last = pd.read_parquet(outdir / "snapshots" / "snapshot_0002.parquet")
    assert last["r_cm"].iloc[0] / first["r_cm"].iloc[0] == pytest.approx(10.0 / (1.0 + zred_final), rel=1e-9)
    # comoving content per cell survives every rescale
    np.testing.assert_allclose(
        last["ndens_cm3"] * last["vol_cm3"],
        first["ndens_cm3"] * first["vol_cm3"],
        rtol=1e-9,
    )
    # the initial snapshot is already proper at z0
    assert first["ndens_cm3"].iloc[0] == pytest.approx(1.0e-3 * 1000.0, rel=1e-12)

    series = pd.read_parquet(outdir / "series" / "ifront.parquet")
    assert series["zred"].iloc[0] == pytest.approx(9.0)
    assert series["zred"].is_monotonic_decreasing


def test_main_exit_status(tmp_path: Path) -> None:
    path = _write_config(tmp_path)
    assert run.main(["--config", str(path), "--no-quiet", "--override", "io.write_snapshots=false"]) == 0
    assert (tmp_path / "out" / "summary.json").exists()
    assert not (tmp_path / "out" / "snapshots").exists()


def test_main_reports_configuration_failure(tmp_path: Path) -> None:
    path = _write_config(tmp_path)
    assert run.main(["--config", str(path), "--override", "times.end_time_years=-5"]) == 1


def test_main_reads_overrides_file(tmp_path: Path) -> None:
    path = _write_config(tmp_path)
    overrides = tmp_path / "overrides.txt"
    overrides.write_text("# shorter run\ntimes.end_time_years=5.0e6\n\nio.write_snapshots=false\n", encoding="utf-8")
    assert run.main(["--config", str(path), "--no-quiet", "--overrides-file", str(overrides)]) == 0
    summary = json.loads((tmp_path / "out" / "summary.json").read_text())
    assert summary["steps"] == 5
    assert summary["n_outputs"] == 2
