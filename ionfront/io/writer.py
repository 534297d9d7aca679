"""Output helper utilities.

The routines in this module provide thin wrappers around :mod:`pandas`
functionality to serialise simulation results.  Parquet is used for
snapshots and the ionization front time series, JSON for run summaries.
All functions ensure that destination directories are created when
necessary.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

UNITS = {
    "cell_index": "count",
    "r_cm": "cm",
    "dr_cm": "cm",
    "vol_cm3": "cm^3",
    "ndens_cm3": "cm^-3",
    "xHI": "dimensionless",
    "xHII": "dimensionless",
    "temperature_K": "K",
    "eldens_cm3": "cm^-3",
    "pressure_erg_cm3": "erg cm^-3",
    "rho_g_cm3": "g cm^-3",
    "gamma_s": "s^-1",
    "step": "count",
    "time_s": "s",
    "time_yr": "yr",
    "dt_s": "s",
    "zred": "dimensionless",
    "front_radius_cm": "cm",
    "front_radius_kpc": "kpc",
    "x_vol_mean": "dimensionless",
    "x_mass_mean": "dimensionless",
}


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def write_parquet(df: pd.DataFrame, path: Path, *, compression: str = "snappy") -> None:
    """Write a DataFrame to a Parquet file using ``pyarrow``.

    Column units known to :data:`UNITS` are stored in the schema metadata
    under the ``units`` key.

    Parameters
    ----------
    df:
        Table to serialise.
    path:
        Destination file path.
    compression:
        Parquet codec or ``"none"``.
    """
    _ensure_parent(path)
    units = {name: UNITS[name] for name in df.columns if name in UNITS}
    table = pa.Table.from_pandas(df, preserve_index=False)
    metadata = dict(table.schema.metadata or {})
    metadata[b"units"] = json.dumps(units, sort_keys=True).encode("utf-8")
    table = table.replace_schema_metadata(metadata)
    compression_arg = None if compression == "none" else compression
    pq.write_table(table, path, compression=compression_arg)


def read_units(path: Path) -> dict[str, str]:
    """Return the unit metadata stored by :func:`write_parquet`."""

    metadata = pq.read_schema(path).metadata or {}
    raw = metadata.get(b"units")
    if raw is None:
        return {}
    return json.loads(raw.decode("utf-8"))


def write_summary(summary: Mapping[str, Any], path: Path) -> None:
    """Write a summary dictionary to ``summary.json``.

    The JSON file is formatted with a small indentation for human
    readability.
    """
    _ensure_parent(path)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(summary, fh, indent=2, sort_keys=True)


def write_run_config(config: Mapping[str, Any], path: Path) -> None:
    """Persist the resolved run configuration."""

    _ensure_parent(path)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(config, fh, indent=2, sort_keys=True, default=str)


__all__ = [
    "UNITS",
    "write_parquet",
    "read_units",
    "write_summary",
    "write_run_config",
]
