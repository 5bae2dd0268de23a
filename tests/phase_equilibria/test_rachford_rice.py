"""Tests of the compiled Rachford-Rice kernels."""

from __future__ import annotations

import numpy as np
import pytest

from fluideq.phase_equilibria import phase_compositions, rachford_rice


@pytest.mark.parametrize(
    "z, K, beta",
    [
        ([0.5, 0.5], [2.0, 0.5], 0.5),
        # the middle component has a K-value of one, the last is non-volatile
        ([0.4, 0.3, 0.3], [3.0, 1.0, 0.0], 0.5 / 1.4),
        # a single volatile component, the root is on the bound of the window
        ([0.5, 0.5], [3.0, 0.0], 0.25),
    ],
)
def test_vapor_fraction(z: list, K: list, beta: float):
    z_, K_ = np.array(z), np.array(K)
    b = rachford_rice(z_, K_)
    assert b == pytest.approx(beta, rel=1e-12)

    x, y = phase_compositions(z_, K_, b)
    assert x.sum() == pytest.approx(1.0)
    assert y.sum() == pytest.approx(1.0)
    # mass balance
    assert np.allclose((1 - b) * x + b * y, z_)
    assert np.all(x >= 0.0) and np.all(y >= 0.0)


def test_compositions():
    x, y = phase_compositions(np.array([0.5, 0.5]), np.array([2.0, 0.5]), 0.5)
    assert np.allclose(x, [1 / 3, 2 / 3])
    assert np.allclose(y, [2 / 3, 1 / 3])


@pytest.mark.parametrize(
    "K",
    [
        # superheated vapor and subcooled liquid
        [2.0, 1.5],
        [0.5, 0.8],
    ],
)
def test_single_phase(K: list):
    assert np.isnan(rachford_rice(np.array([0.5, 0.5]), np.array(K)))
