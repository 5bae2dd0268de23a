"""Tests of bubble and dew point calculations of the propane-butane mixture."""

from __future__ import annotations

import numpy as np
import pytest

import fluideq as fe

T = 300.0
X = np.array([0.5, 0.5])


def assert_equilibrium(vle: fe.PhaseEquilibrium):
    vapor, liquid = vle.vapor, vle.liquid
    assert vapor.temperature == pytest.approx(liquid.temperature)
    assert vapor.pressure() == pytest.approx(liquid.pressure(), rel=1e-8)
    ln_f_v = np.log(vapor.molefracs) + vapor.ln_phi()
    ln_f_l = np.log(liquid.molefracs) + liquid.ln_phi()
    assert np.allclose(ln_f_v, ln_f_l, rtol=0.0, atol=1e-8)


@pytest.fixture(scope="module")
def bubble(propane_butane: fe.PengRobinson) -> fe.PhaseEquilibrium:
    return fe.bubble_point_tx(propane_butane, T, X)


@pytest.fixture(scope="module")
def dew(propane_butane: fe.PengRobinson) -> fe.PhaseEquilibrium:
    return fe.dew_point_tx(propane_butane, T, X)


def test_bubble_point(bubble: fe.PhaseEquilibrium):
    assert_equilibrium(bubble)
    assert np.allclose(bubble.liquid.molefracs, X)
    # the vapor is enriched in the light component
    assert bubble.vapor.molefracs[0] > 0.5
    assert 2.5e5 < bubble.pressure() < 1.1e6


def test_dew_point(bubble: fe.PhaseEquilibrium, dew: fe.PhaseEquilibrium):
    assert_equilibrium(dew)
    assert np.allclose(dew.vapor.molefracs, X)
    assert dew.liquid.molefracs[0] < 0.5
    assert dew.pressure() < bubble.pressure()


def test_pressure_specification(
    propane_butane: fe.PengRobinson,
    bubble: fe.PhaseEquilibrium,
    dew: fe.PhaseEquilibrium,
):
    vle = fe.bubble_point_px(propane_butane, bubble.pressure(), X)
    assert_equilibrium(vle)
    assert vle.temperature == pytest.approx(T, rel=1e-6)
    assert np.allclose(vle.vapor.molefracs, bubble.vapor.molefracs, atol=1e-6)

    vle = fe.dew_point_px(propane_butane, dew.pressure(), X)
    assert_equilibrium(vle)
    assert vle.temperature == pytest.approx(T, rel=1e-6)


def test_initial_values(propane_butane: fe.PengRobinson, bubble: fe.PhaseEquilibrium):
    vle = fe.bubble_point_tx(
        propane_butane,
        T,
        X,
        pressure=0.9 * bubble.pressure(),
        vapor_molefracs=np.array([0.6, 0.4]),
    )
    assert vle.pressure() == pytest.approx(bubble.pressure(), rel=1e-7)

    vle = fe.bubble_dew_point(
        propane_butane, fe.TPSpec.TEMPERATURE, T, X, bubble=False
    )
    assert vle.vapor.molefracs[0] == pytest.approx(0.5)


def test_incompatible_composition(propane_butane: fe.PengRobinson):
    with pytest.raises(fe.IncompatibleComponents):
        fe.bubble_point_tx(propane_butane, T, np.array([0.2, 0.3, 0.5]))
    with pytest.raises(fe.IncompatibleComponents):
        fe.dew_point_tx(propane_butane, T, X, liquid_molefracs=np.ones(3))


def test_density_failure_in_inner_loop(
    propane_butane: fe.PengRobinson, monkeypatch: pytest.MonkeyPatch
):
    """A density iteration exhausting its budget makes the inner loop fail."""

    def not_converged(cls, *args, **kwargs):
        raise fe.NotConverged("density_iteration")

    monkeypatch.setattr(fe.State, "new_npt", classmethod(not_converged))
    with pytest.raises(fe.IterationFailed) as err:
        fe.bubble_point_tx(propane_butane, T, X, 6e5)
    assert isinstance(err.value.__cause__, fe.NotConverged)
