"""Comoving-to-proper rescaling of grid and densities."""

from __future__ import annotations

import numpy as np
import pytest

from ionfront.errors import NumericalDomainError
from ionfront.scaling import CosmologicalScaler


def _snapshot(grid, density):
    return grid.r.copy(), grid.dr, grid.vol.copy(), density.ndens.copy()


def test_unit_ratio_is_a_no_op(small_state) -> None:
    grid, density = small_state
    r, dr, vol, ndens = _snapshot(grid, density)
    CosmologicalScaler(grid, density).rescale(1.0)
    assert np.array_equal(grid.r, r)
    assert grid.dr == dr
    assert np.array_equal(grid.vol, vol)
    assert np.array_equal(density.ndens, ndens)


def test_lengths_volumes_and_densities_scale(small_state) -> None:
    grid, density = small_state
    r, dr, vol, ndens = _snapshot(grid, density)
    CosmologicalScaler(grid, density).rescale(2.0)
    np.testing.assert_allclose(grid.r, 2.0 * r, rtol=1e-15)
    assert grid.dr == pytest.approx(2.0 * dr, rel=1e-15)
    np.testing.assert_allclose(grid.vol, 8.0 * vol, rtol=1e-15)
    np.testing.assert_allclose(density.ndens, ndens / 8.0, rtol=1e-15)


@pytest.mark.parametrize("a,b", [(0.1, 0.5), (1.3, 0.77), (10.0, 4.0)])
def test_composition_matches_single_rescale(small_state, a: float, b: float) -> None:
    grid, density = small_state
    r, dr, vol, ndens = _snapshot(grid, density)
    scaler = CosmologicalScaler(grid, density)
    scaler.rescale(a)
    scaler.rescale(b)
    composed = _snapshot(grid, density)

    grid.r[:], grid.dr, grid.vol[:], density.ndens[:] = r, dr, vol, ndens
    scaler.rescale(a * b)
    once = _snapshot(grid, density)

    np.testing.assert_allclose(composed[0], once[0], rtol=1e-12)
    assert composed[1] == pytest.approx(once[1], rel=1e-12)
    np.testing.assert_allclose(composed[2], once[2], rtol=1e-12)
    np.testing.assert_allclose(composed[3], once[3], rtol=1e-12)


@pytest.mark.parametrize("ratio", [1.0e-3, 0.5, 1.1, 37.0])
def test_comoving_content_is_conserved(small_state, ratio: float) -> None:
    grid, density = small_state
    content = density.ndens * grid.vol
    CosmologicalScaler(grid, density).rescale(ratio)
    np.testing.assert_allclose(density.ndens * grid.vol, content, rtol=1e-12)


@pytest.mark.parametrize("ratio", [0.0, -1.0, float("nan"), float("inf")])
def test_invalid_ratio_is_rejected(small_state, ratio: float) -> None:
    grid, density = small_state
    r = grid.r.copy()
    with pytest.raises(NumericalDomainError):
        CosmologicalScaler(grid, density).rescale(ratio)
    assert np.array_equal(grid.r, r)
