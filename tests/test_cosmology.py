"""Redshift evolution and incremental scale ratios."""

from __future__ import annotations

import pytest

from ionfront import constants
from ionfront.cosmology import RedshiftEvolution, age_at_redshift
from ionfront.errors import NumericalDomainError
from ionfront.schema import Cosmology


@pytest.fixture
def evolution() -> RedshiftEvolution:
    return RedshiftEvolution.from_config(Cosmology(enabled=True, zred0=9.0, h=0.7, omega0=0.27))


def test_age_decreases_with_redshift() -> None:
    assert age_at_redshift(9.0, 0.7, 0.27) < age_at_redshift(6.0, 0.7, 0.27)
    # roughly half a gigayear at z = 9 for these parameters
    assert 3.0e8 < age_at_redshift(9.0, 0.7, 0.27) / constants.YEAR < 8.0e8


def test_time_redshift_inverse(evolution: RedshiftEvolution) -> None:
    assert evolution.time2zred(0.0) == pytest.approx(9.0, rel=1e-14)
    for years in (1.0e5, 1.0e7, 3.0e8):
        t = years * constants.YEAR
        assert evolution.zred2time(evolution.time2zred(t)) == pytest.approx(t, rel=1e-9)


def test_first_ratio_converts_comoving_to_initial_redshift(evolution: RedshiftEvolution) -> None:
    ratio = evolution.evolve(0.0)
    assert ratio == pytest.approx(1.0 / 10.0, rel=1e-14)
    assert evolution.zred == pytest.approx(9.0, rel=1e-14)


def test_ratios_telescope_to_current_redshift(evolution: RedshiftEvolution) -> None:
    product = 1.0
    zreds = []
    for years in (0.0, 1.0e6, 5.0e6, 2.0e7, 1.0e8):
        product *= evolution.evolve(years * constants.YEAR)
        zreds.append(evolution.zred)
    assert product == pytest.approx(1.0 / (1.0 + evolution.zred), rel=1e-12)
    assert all(later < earlier for earlier, later in zip(zreds, zreds[1:]))


def test_ratio_exceeds_one_as_universe_expands(evolution: RedshiftEvolution) -> None:
    evolution.evolve(0.0)
    assert evolution.evolve(1.0e7 * constants.YEAR) > 1.0


@pytest.mark.parametrize(
    "zred0,h,omega0",
    [(-0.5, 0.7, 0.27), (9.0, 0.0, 0.27), (9.0, 0.7, -0.1)],
)
def test_invalid_parameters(zred0: float, h: float, omega0: float) -> None:
    with pytest.raises(NumericalDomainError):
        RedshiftEvolution(zred0, h, omega0)


def test_negative_ratio_is_rejected(evolution: RedshiftEvolution) -> None:
    evolution.zred = -2.0
    with pytest.raises(NumericalDomainError):
        evolution.evolve(0.0)
