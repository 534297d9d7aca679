"""Wall-clock and CPU time accounting for a run."""
from __future__ import annotations

import logging
import time
from typing import Dict

logger = logging.getLogger(__name__)


class RunClocks:
    """Accumulate wall and CPU time across the integration loop.

    ``update`` is called once per step; it folds the elapsed time into
    running totals so that long runs never depend on a single large
    counter difference.
    """

    def __init__(self) -> None:
        self.wall_s = 0.0
        self.cpu_s = 0.0
        self.updates = 0
        self._wall_mark = time.perf_counter()
        self._cpu_mark = time.process_time()

    def update(self) -> None:
        wall_now = time.perf_counter()
        cpu_now = time.process_time()
        self.wall_s += wall_now - self._wall_mark
        self.cpu_s += cpu_now - self._cpu_mark
        self._wall_mark = wall_now
        self._cpu_mark = cpu_now
        self.updates += 1

    def report(self) -> Dict[str, float]:
        """Fold in the time since the last update and log the totals."""

        self.update()
        logger.info("clocks: wall=%.3f s cpu=%.3f s", self.wall_s, self.cpu_s)
        return {"wall_time_s": self.wall_s, "cpu_time_s": self.cpu_s}


__all__ = ["RunClocks"]
