from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Tuple

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ionfront.grid import SpatialGrid  # noqa: E402
from ionfront.material import DensityField  # noqa: E402


class RecordingSolver:
    """Solver stub that records the requested step sizes."""

    def __init__(self, events: List[Tuple[str, float]] | None = None) -> None:
        self.steps: List[float] = []
        self.events = events

    def evolve_step(self, dt: float) -> None:
        self.steps.append(dt)
        if self.events is not None:
            self.events.append(("solve", dt))


class RecordingWriter:
    """Writer stub that records every output call."""

    def __init__(self) -> None:
        self.calls: List[Tuple[int, float, float, float]] = []

    def output(self, step_count: int, current_time: float, actual_dt: float, end_time: float) -> None:
        self.calls.append((step_count, current_time, actual_dt, end_time))

    @property
    def times(self) -> List[float]:
        return [call[1] for call in self.calls]


@pytest.fixture
def solver() -> RecordingSolver:
    return RecordingSolver()


@pytest.fixture
def recorder() -> RecordingWriter:
    return RecordingWriter()


@pytest.fixture
def small_state() -> Tuple[SpatialGrid, DensityField]:
    grid = SpatialGrid.build(8, 1.0e22)
    ndens = np.linspace(1.0e-3, 2.0e-3, grid.n_cells)
    xh = np.column_stack([np.full(grid.n_cells, 0.9), np.full(grid.n_cells, 0.1)])
    density = DensityField(ndens=ndens, temperature=np.full(grid.n_cells, 1.0e4), xh=xh)
    return grid, density
