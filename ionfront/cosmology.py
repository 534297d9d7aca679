"""Redshift evolution for an Einstein-de Sitter-like expansion history.

Simulated time runs from ``t = 0`` at the initial redshift ``z0``.  In the
matter dominated era the age of the universe at ``z0`` is

    t0 = 2 / (3 H0 sqrt(Omega0)) (1 + z0)^-3/2

and redshift and simulated time are related by
``1 + z = (1 + z0) (t0 / (t0 + t))^(2/3)``.
"""
from __future__ import annotations

import logging
import math

from . import constants
from .errors import NumericalDomainError
from .schema import Cosmology

logger = logging.getLogger(__name__)


def age_at_redshift(zred0: float, h: float, omega0: float) -> float:
    """Return the age of the universe [s] at redshift ``zred0``."""

    hubble0 = h * constants.H0_UNIT
    return 2.0 * (1.0 + zred0) ** (-1.5) / (3.0 * hubble0 * math.sqrt(omega0))


class RedshiftEvolution:
    """Track the current redshift and hand out incremental scale ratios.

    The reference redshift starts at zero so the first call to
    :meth:`evolve` returns ``1 / (1 + z0)``, converting comoving initial
    conditions to proper values at the starting redshift.
    """

    def __init__(self, zred0: float, h: float, omega0: float) -> None:
        if zred0 < 0.0 or h <= 0.0 or omega0 <= 0.0:
            raise NumericalDomainError("cosmology requires zred0 >= 0, h > 0 and omega0 > 0")
        self.zred0 = float(zred0)
        self.h = float(h)
        self.omega0 = float(omega0)
        self.t0 = age_at_redshift(self.zred0, self.h, self.omega0)
        self.zred = 0.0
        logger.info(
            "cosmology: z0=%.3f h=%.3f Omega0=%.3f t0=%.4e yr",
            self.zred0,
            self.h,
            self.omega0,
            self.t0 / constants.YEAR,
        )

    @classmethod
    def from_config(cls, cfg: Cosmology) -> "RedshiftEvolution":
        return cls(cfg.zred0, cfg.h, cfg.omega0)

    def time2zred(self, time: float) -> float:
        """Return the redshift reached after simulated time ``time`` [s]."""

        return -1.0 + (1.0 + self.zred0) * (self.t0 / (self.t0 + time)) ** (2.0 / 3.0)

    def zred2time(self, zred: float) -> float:
        """Return the simulated time [s] at which redshift ``zred`` is reached."""

        return self.t0 * (((1.0 + self.zred0) / (1.0 + zred)) ** 1.5 - 1.0)

    def evolve(self, time: float) -> float:
        """Advance the current redshift to ``time`` and return the scale ratio.

        The ratio ``(1 + z_prev) / (1 + z_new)`` is the factor by which proper
        lengths grew since the previous call.
        """
        zred_prev = self.zred
        self.zred = self.time2zred(time)
        ratio = (1.0 + zred_prev) / (1.0 + self.zred)
        if not math.isfinite(ratio) or ratio <= 0.0:
            raise NumericalDomainError(f"non-positive scale ratio {ratio!r} at t={time!r} s")
        return ratio


__all__ = ["RedshiftEvolution", "age_at_redshift"]
