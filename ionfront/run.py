"""CLI entry point and run assembly for the ionization front simulation.

``run_simulation`` wires the collaborators of the time integration driver
together in the order the loop needs them: output, grid, material,
photo-ionization solver, clock and cosmology.  After the loop it writes
the front time series and ``summary.json``.
"""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import ValidationError

from . import config_utils, constants
from .cosmology import RedshiftEvolution
from .driver import SimulationClock, TimeIntegrationDriver
from .errors import ConfigurationError, IonFrontError
from .evolve import PhotoionizationSolver
from .grid import SpatialGrid
from .io import writer
from .io.snapshots import SnapshotRecorder
from .material import DensityField
from .runtime import ProgressReporter, RunClocks, format_exception_short, log_stage
from .scaling import CosmologicalScaler
from .schema import Config

logger = logging.getLogger(__name__)


def load_config(path: Path, overrides: Optional[Sequence[str]] = None) -> Config:
    """Load a YAML configuration file into a :class:`Config` instance."""

    from ruamel.yaml import YAML

    yaml = YAML(typ="safe")
    source_path = Path(path).resolve()
    with source_path.open("r", encoding="utf-8") as fh:
        data = yaml.load(fh)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration root must be a mapping")
    if overrides:
        data = config_utils.apply_overrides_dict(data, overrides)
    try:
        return Config(**data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration {source_path}: {exc}") from exc


@dataclass
class Simulation:
    """Collaborators assembled for one run."""

    cfg: Config
    grid: SpatialGrid
    density: DensityField
    solver: PhotoionizationSolver
    recorder: SnapshotRecorder
    driver: TimeIntegrationDriver
    clocks: RunClocks
    redshift: Optional[RedshiftEvolution] = None


def build_simulation(cfg: Config) -> Simulation:
    """Create grid, material, solver, writer and driver from ``cfg``."""

    clocks = RunClocks()
    outdir = Path(cfg.io.outdir)

    grid = SpatialGrid.build(cfg.grid.n_cells, cfg.grid.box_size_cm, cfg.grid.geometry)
    density = DensityField.build(grid, cfg.material)
    solver = PhotoionizationSolver.from_config(grid, density, cfg)
    clock = SimulationClock.from_times(cfg.times)

    redshift: Optional[RedshiftEvolution] = None
    scaler: Optional[CosmologicalScaler] = None
    if cfg.cosmology.enabled:
        redshift = RedshiftEvolution.from_config(cfg.cosmology)
        scaler = CosmologicalScaler(grid, density)

    recorder = SnapshotRecorder(
        outdir,
        grid,
        density,
        solver=solver,
        redshift=redshift,
        write_snapshots=cfg.io.write_snapshots,
        compression=cfg.io.compression,
    )
    progress = ProgressReporter(
        clock.end_time,
        refresh_seconds=cfg.io.progress.refresh_seconds,
        enabled=cfg.io.progress.enable,
    )
    driver = TimeIntegrationDriver(
        clock,
        solver,
        recorder,
        redshift=redshift,
        scaler=scaler,
        max_steps=cfg.numerics.max_steps,
        clocks=clocks,
        progress=progress,
    )
    log_stage(
        logger,
        "initialised",
        extra={"n_cells": grid.n_cells, "geometry": grid.geometry, "outdir": str(outdir)},
    )
    return Simulation(
        cfg=cfg,
        grid=grid,
        density=density,
        solver=solver,
        recorder=recorder,
        driver=driver,
        clocks=clocks,
        redshift=redshift,
    )


def close_down(sim: Simulation) -> None:
    """Write the front series, the run configuration and ``summary.json``."""

    outdir = Path(sim.cfg.io.outdir)
    series = sim.recorder.close()
    clock = sim.driver.clock
    summary = {
        "steps": clock.step_count,
        "end_time_s": clock.current_time,
        "end_time_yr": clock.current_time / constants.YEAR,
        "n_outputs": sim.recorder.n_outputs,
        "final_front_radius_kpc": float(series["front_radius_kpc"].iloc[-1]),
        "final_x_vol_mean": float(series["x_vol_mean"].iloc[-1]),
        "cosmological": sim.redshift is not None,
        "final_zred": sim.redshift.zred if sim.redshift is not None else None,
    }
    summary.update(sim.clocks.report())
    writer.write_run_config(sim.cfg.model_dump(mode="json"), outdir / "run_config.json")
    writer.write_summary(summary, outdir / "summary.json")


def run_simulation(cfg: Config) -> None:
    """Run the simulation described by ``cfg`` to completion."""

    sim = build_simulation(cfg)
    sim.driver.run()
    close_down(sim)


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point; returns the process exit status."""

    parser = argparse.ArgumentParser(description="Run a one-dimensional ionization front model")
    parser.add_argument("--config", type=Path, required=True, help="Path to YAML configuration")
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a console progress bar with ETA for the main integration loop.",
    )
    parser.add_argument(
        "--quiet",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Suppress INFO logs and Python warnings (defaults to io.quiet from the config).",
    )
    parser.add_argument(
        "--override",
        action="append",
        nargs="+",
        metavar="PATH=VALUE",
        help="Apply configuration overrides using dotted paths; e.g. --override times.dt_years=1e5",
    )
    parser.add_argument(
        "--overrides-file",
        action="append",
        type=Path,
        help="Load overrides from a file (one PATH=VALUE per line).",
    )
    args = parser.parse_args(argv)

    override_list: List[str] = []
    if args.overrides_file:
        for override_path in args.overrides_file:
            override_list.extend(config_utils.read_overrides_file(override_path))
    if args.override:
        for group in args.override:
            override_list.extend(group)

    try:
        cfg = load_config(args.config, overrides=override_list)
        if args.quiet is not None:
            cfg.io.quiet = bool(args.quiet)
        if args.progress:
            cfg.io.progress.enable = True
        config_utils.configure_logging(
            logging.WARNING if cfg.io.quiet else logging.INFO,
            suppress_warnings=cfg.io.quiet,
        )
        run_simulation(cfg)
    except IonFrontError as exc:
        logger.error("run failed: %s", format_exception_short(exc))
        return 1
    return 0


__all__ = [
    "Simulation",
    "load_config",
    "build_simulation",
    "close_down",
    "run_simulation",
    "main",
]

if __name__ == "__main__":  # pragma: no cover - standard CLI entrypoint
    sys.exit(main())
