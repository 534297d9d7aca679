"""Runtime helpers used by the time integration driver."""

from .clocks import RunClocks
from .progress import ProgressReporter
from .helpers import format_exception_short, log_stage

__all__ = [
    "RunClocks",
    "ProgressReporter",
    "format_exception_short",
    "log_stage",
]
