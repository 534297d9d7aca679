"""Time integration driver for the ionization front simulation.

The driver owns the simulation clock and walks through three states:

``INITIALIZING``
    The clock starts at ``t = 0`` with the first output due immediately.
    In cosmological mode the grid is rescaled once for the starting
    redshift.
``STEPPING``
    Each iteration writes a snapshot when one is due, picks the step size
    so that no output time is overshot, rescales comoving quantities with
    the expansion at the step midpoint, lets the solver advance the
    physics and advances the clock.
``TERMINATED``
    Once ``t`` reaches the end time the grid is rescaled to the final
    redshift and a last snapshot is written.

The physics solver, snapshot writer and redshift source are structural
protocols so the loop can be driven by stubs in tests.
"""
from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Protocol

from . import constants
from .errors import ConfigurationError, NumericalError
from .runtime import log_stage

if TYPE_CHECKING:
    from .runtime import ProgressReporter, RunClocks
    from .schema import Times

logger = logging.getLogger(__name__)

# Relative tolerance for hitting an output time and the end time
OUTPUT_RTOL = 1.0e-6
END_RTOL = 1.0e-6
MAX_STEPS = 50_000_000


class DriverState(enum.Enum):
    INITIALIZING = "initializing"
    STEPPING = "stepping"
    TERMINATED = "terminated"


class StepSolver(Protocol):
    """Advances the ionization and temperature state in place."""

    def evolve_step(self, dt: float) -> None:
        ...


class SnapshotWriter(Protocol):
    """Emits a snapshot of the current state."""

    def output(self, step_count: int, current_time: float, actual_dt: float, end_time: float) -> None:
        ...


class RedshiftSource(Protocol):
    """Evolves the redshift to ``time`` and returns the incremental scale ratio."""

    def evolve(self, time: float) -> float:
        ...


class Rescaler(Protocol):
    """Stretches comoving quantities by an incremental expansion ratio."""

    def rescale(self, scale_ratio: float) -> None:
        ...


@dataclass
class SimulationClock:
    """Simulated time bookkeeping.

    Attributes
    ----------
    end_time : float
        Time at which the run stops [s].
    nominal_time_step : float
        Step size used whenever no output time intervenes [s].
    output_interval : float
        Spacing between snapshots [s].
    current_time : float
        Current simulated time [s].
    next_output_time : float
        Time of the next snapshot [s].
    step_count : int
        Number of physics steps taken.
    last_dt : float or None
        Size of the most recent step [s].
    """

    end_time: float
    nominal_time_step: float
    output_interval: float
    current_time: float = 0.0
    next_output_time: float = 0.0
    step_count: int = 0
    last_dt: Optional[float] = None

    def __post_init__(self) -> None:
        for label in ("end_time", "nominal_time_step", "output_interval"):
            value = getattr(self, label)
            if not math.isfinite(value) or value <= 0.0:
                raise ConfigurationError(f"{label} must be finite and positive (got {value!r})")

    @classmethod
    def from_times(cls, times: "Times") -> "SimulationClock":
        return cls(
            end_time=times.end_time_s,
            nominal_time_step=times.dt_s,
            output_interval=times.output_interval_s,
        )

    def output_due(self) -> bool:
        """Return True when the current time matches the next output time.

        At ``t = 0`` the relative tolerance collapses to zero, so the
        initial snapshot is treated as due unconditionally.
        """
        if self.current_time == 0.0:
            return True
        return abs(self.current_time - self.next_output_time) <= OUTPUT_RTOL * self.current_time

    def advance_output(self) -> None:
        self.next_output_time += self.output_interval

    def choose_dt(self) -> float:
        """Return the nominal step clipped to the next output and end times."""

        actual_dt = min(self.next_output_time - self.current_time, self.nominal_time_step)
        return min(actual_dt, self.end_time - self.current_time)

    def reached_end(self) -> bool:
        return abs(self.current_time - self.end_time) < END_RTOL * self.end_time

    @property
    def reported_dt(self) -> float:
        return self.nominal_time_step if self.last_dt is None else self.last_dt


class TimeIntegrationDriver:
    """Run the step loop until the end time is reached.

    Parameters
    ----------
    clock:
        Clock holding end time, nominal step and output cadence.
    solver:
        Advances the physical state by a given time step.
    writer:
        Receives ``output(step_count, current_time, actual_dt, end_time)``
        at every output time and once after the loop.
    redshift, scaler:
        Redshift source and comoving-to-proper rescaler.  Cosmological mode
        is active when both are given.
    max_steps:
        Upper bound on the step counter.
    clocks, progress:
        Optional wall/CPU timers and progress bar updated after each step.
    """

    def __init__(
        self,
        clock: SimulationClock,
        solver: StepSolver,
        writer: SnapshotWriter,
        *,
        redshift: Optional[RedshiftSource] = None,
        scaler: Optional[Rescaler] = None,
        max_steps: int = MAX_STEPS,
        clocks: Optional["RunClocks"] = None,
        progress: Optional["ProgressReporter"] = None,
    ) -> None:
        if (redshift is None) != (scaler is None):
            raise ConfigurationError("cosmological mode needs both a redshift source and a scaler")
        if max_steps < 1:
            raise ConfigurationError("max_steps must be at least 1")
        self.clock = clock
        self.solver = solver
        self.writer = writer
        self.redshift = redshift
        self.scaler = scaler
        self.max_steps = int(max_steps)
        self.clocks = clocks
        self.progress = progress
        self.state = DriverState.INITIALIZING

    @property
    def cosmological(self) -> bool:
        return self.redshift is not None and self.scaler is not None

    def _rescale_to(self, time: float) -> None:
        if not self.cosmological:
            return
        ratio = self.redshift.evolve(time)
        self.scaler.rescale(ratio)

    def _emit_output(self) -> None:
        clock = self.clock
        self.writer.output(clock.step_count, clock.current_time, clock.reported_dt, clock.end_time)

    def step(self) -> bool:
        """Perform one iteration of the loop; return True once terminated."""

        clock = self.clock
        if self.state is DriverState.TERMINATED:
            return True
        if self.state is DriverState.INITIALIZING:
            raise NumericalError("driver must be initialised before stepping")

        if clock.output_due():
            self._emit_output()
            clock.advance_output()

        actual_dt = clock.choose_dt()
        if not actual_dt > 0.0:
            raise NumericalError(
                f"non-positive time step {actual_dt!r} at t={clock.current_time!r} s"
            )
        if clock.step_count >= self.max_steps:
            raise NumericalError(f"step limit of {self.max_steps} reached before the end time")
        clock.step_count += 1

        logger.debug(
            "Time, dt: %10.3e %10.3e (years)",
            clock.current_time / constants.YEAR,
            actual_dt / constants.YEAR,
        )

        # expansion evaluated at the step midpoint
        self._rescale_to(clock.current_time + 0.5 * actual_dt)

        self.solver.evolve_step(actual_dt)

        clock.current_time += actual_dt
        clock.last_dt = actual_dt

        if clock.reached_end():
            self.state = DriverState.TERMINATED
            return True

        if self.clocks is not None:
            self.clocks.update()
        if self.progress is not None:
            self.progress.update(clock.step_count, clock.current_time)
        return False

    def initialize(self) -> None:
        if self.state is not DriverState.INITIALIZING:
            raise NumericalError(f"driver already {self.state.value}; build a new driver to run again")
        clock = self.clock
        clock.current_time = 0.0
        clock.next_output_time = 0.0
        self._rescale_to(clock.current_time)
        self.state = DriverState.STEPPING
        log_stage(
            logger,
            "stepping",
            extra={
                "end_time_yr": clock.end_time / constants.YEAR,
                "dt_yr": clock.nominal_time_step / constants.YEAR,
                "output_interval_yr": clock.output_interval / constants.YEAR,
                "cosmological": self.cosmological,
            },
        )

    def finalize(self) -> None:
        self._rescale_to(self.clock.current_time)
        self._emit_output()
        if self.progress is not None:
            self.progress.finish(self.clock.step_count, self.clock.current_time)
        log_stage(logger, "terminated", extra={"steps": self.clock.step_count})

    def run(self) -> SimulationClock:
        """Integrate from ``t = 0`` to the end time and return the final clock."""

        self.initialize()
        while not self.step():
            pass
        self.finalize()
        return self.clock


__all__ = [
    "OUTPUT_RTOL",
    "END_RTOL",
    "MAX_STEPS",
    "DriverState",
    "StepSolver",
    "SnapshotWriter",
    "RedshiftSource",
    "Rescaler",
    "SimulationClock",
    "TimeIntegrationDriver",
]
