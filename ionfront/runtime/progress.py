"""Lightweight terminal progress reporting."""

from __future__ import annotations

import math
import sys
import time

from .. import constants

ETA_EWMA_ALPHA = 0.1
ETA_MIN_SAMPLES = 3


class ProgressReporter:
    """Terminal progress bar driven by simulated time, with ETA feedback.

    Steps are not known in advance because they shrink near output times,
    so progress is the fraction of the end time reached and the ETA is an
    exponentially weighted average of wall seconds per simulated second.
    """

    def __init__(
        self,
        total_time_s: float,
        *,
        refresh_seconds: float = 1.0,
        enabled: bool = False,
    ) -> None:
        self.total_time_s = max(float(total_time_s), 0.0)
        self.enabled = bool(enabled and self.total_time_s > 0.0)
        self.refresh_seconds = max(float(refresh_seconds), 0.1)
        self.start = time.monotonic()
        self.last = self.start
        self._finished = False
        self._isatty = sys.stdout.isatty()
        self._eta_rate: float | None = None
        self._eta_samples = 0
        self._last_wall: float | None = None
        self._last_sim_time: float | None = None

    def update(self, step_no: int, sim_time_s: float, *, force: bool = False) -> None:
        """Render the bar at most once per ``refresh_seconds`` unless forced."""

        if not self.enabled or self._finished:
            return
        now = time.monotonic()
        self._update_eta(sim_time_s, now)
        frac = min(max(sim_time_s / self.total_time_s, 0.0), 1.0)
        is_last = frac >= 1.0
        if not force and not is_last and (now - self.last) < self.refresh_seconds:
            return
        self.last = now
        bar_width = 28
        filled = int(bar_width * frac)
        bar = "#" * filled + "-" * (bar_width - filled)
        sim_years = sim_time_s / constants.YEAR
        eta_seconds = float("nan")
        if self._eta_rate is not None and self._eta_samples >= ETA_MIN_SAMPLES:
            eta_seconds = self._eta_rate * max(self.total_time_s - sim_time_s, 0.0)

        line = (
            f"[{bar}] {frac * 100:5.1f}% step {step_no} "
            f"t={sim_years:.3g} yr {self._format_eta(eta_seconds)}"
        )
        if self._isatty:
            sys.stdout.write(f"\r\033[2K{line}")
            if is_last:
                sys.stdout.write("\n")
        else:
            sys.stdout.write(f"{line}\n")
        if is_last:
            self._finished = True
        sys.stdout.flush()

    def finish(self, step_no: int, sim_time_s: float) -> None:
        """Force a final render to end the line cleanly."""

        if not self.enabled:
            return
        self.update(step_no, sim_time_s, force=True)

    @staticmethod
    def _format_eta(seconds: float) -> str:
        if not math.isfinite(seconds) or seconds < 0.0:
            return "ETA ?"
        if seconds >= 3600.0:
            return f"ETA {seconds/3600.0:.1f}h"
        if seconds >= 60.0:
            return f"ETA {seconds/60.0:.1f}m"
        return f"ETA {seconds:.0f}s"

    def _update_eta(self, sim_time_s: float, now: float) -> None:
        """Update the EWMA of wall seconds per simulated second."""

        if self._last_wall is not None and self._last_sim_time is not None:
            sim_delta = sim_time_s - self._last_sim_time
            if sim_delta > 0.0:
                rate = (now - self._last_wall) / sim_delta
                if math.isfinite(rate) and rate > 0.0:
                    if self._eta_rate is None:
                        self._eta_rate = rate
                    else:
                        self._eta_rate = ETA_EWMA_ALPHA * rate + (1.0 - ETA_EWMA_ALPHA) * self._eta_rate
                    self._eta_samples += 1
        self._last_wall = now
        self._last_sim_time = sim_time_s
