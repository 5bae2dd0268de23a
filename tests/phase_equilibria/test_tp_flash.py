"""Tests of the isothermal-isobaric flash."""

from __future__ import annotations

import numpy as np
import pytest

import fluideq as fe

FEED = np.array([0.5, 0.5])


def assert_flash(vle: fe.PhaseEquilibrium, feed: np.ndarray, p: float):
    """Mass balance, pressure and equality of the fugacities of both phases."""
    vapor, liquid = vle.vapor, vle.liquid
    assert np.allclose(vapor.moles + liquid.moles, feed, rtol=0.0, atol=1e-10)
    assert vapor.pressure() == pytest.approx(p, rel=1e-8)
    assert liquid.pressure() == pytest.approx(p, rel=1e-8)
    ln_f_v = np.log(vapor.molefracs) + vapor.ln_phi()
    ln_f_l = np.log(liquid.molefracs) + liquid.ln_phi()
    assert np.allclose(ln_f_v, ln_f_l, rtol=0.0, atol=1e-8)
    assert vapor.density <= liquid.density


def test_vapor_liquid(propane_butane: fe.PengRobinson):
    p = 5e5
    vle = fe.tp_flash(propane_butane, 300.0, p, FEED)
    assert_flash(vle, FEED, p)
    assert vle.vapor.molefracs[0] > 0.5 > vle.liquid.molefracs[0]
    assert 0.0 < vle.vapor.total_moles < 1.0

    # the flash result as initial guess reproduces the result
    again = fe.tp_flash(propane_butane, 300.0, p, FEED, initial_state=vle)
    assert np.allclose(again.vapor.moles, vle.vapor.moles, atol=1e-8)

    # the phase compositions lie on the bubble and dew point curves
    bubble = fe.bubble_point_tx(propane_butane, 300.0, vle.liquid.molefracs)
    assert bubble.pressure() == pytest.approx(p, rel=1e-6)


def test_non_volatile_component(propane_butane: fe.PengRobinson):
    """Below the dew point of the feed, a non-volatile butane forces a liquid phase
    into which propane dissolves."""
    p = 3e5
    vle = fe.tp_flash(
        propane_butane, 300.0, p, FEED, non_volatile_components=[1]
    )
    assert vle.vapor.moles[1] == 0.0
    assert 0.0 < vle.vapor.moles[0] < FEED[0]
    assert np.allclose(vle.vapor.moles + vle.liquid.moles, FEED)
    assert vle.liquid.pressure() == pytest.approx(p, rel=1e-8)
    assert vle.vapor.ln_phi()[0] + np.log(vle.vapor.molefracs[0]) == pytest.approx(
        vle.liquid.ln_phi()[0] + np.log(vle.liquid.molefracs[0]), abs=1e-8
    )


@pytest.mark.parametrize("p", [1e5, 2e7])
def test_stable_feed(propane_butane: fe.PengRobinson, p: float):
    with pytest.raises(fe.NoPhaseSplit):
        fe.tp_flash(propane_butane, 300.0, p, FEED)


def test_liquid_liquid(symmetric_lle: fe.PengRobinson):
    """Two liquids of the symmetric mixture have mirrored compositions independent of
    the feed."""
    p = 2e6
    feed = np.array([0.4, 0.6])
    lle = fe.tp_flash(symmetric_lle, 250.0, p, feed)
    assert_flash(lle, feed, p)
    x1, x2 = lle.states[0].molefracs, lle.states[1].molefracs
    assert x1[0] == pytest.approx(x2[1], abs=1e-6)
    assert min(x1[0], x2[0]) < 0.1
    assert lle.states[0].density == pytest.approx(lle.states[1].density, rel=1e-6)


@pytest.mark.parametrize("p", [2e6, 3e6])
def test_liquid_liquid_symmetric_feed(symmetric_lle: fe.PengRobinson, p: float):
    """An equimolar feed splits into two liquids of equal amount."""
    lle = fe.tp_flash(symmetric_lle, 250.0, p, FEED)
    assert_flash(lle, FEED, p)
    assert lle.states[0].total_moles == pytest.approx(0.5, abs=1e-6)
    assert lle.states[0].molefracs[0] == pytest.approx(
        lle.states[1].molefracs[1], abs=1e-6
    )


@pytest.mark.parametrize("feed", [[0.002, 0.998], [0.998, 0.002]])
def test_liquid_liquid_outside_gap(symmetric_lle: fe.PengRobinson, feed: list):
    with pytest.raises(fe.NoPhaseSplit):
        fe.tp_flash(symmetric_lle, 250.0, 2e6, np.array(feed))


def test_vanishing_liquid(propane_butane: fe.PengRobinson):
    """Starting from an equilibrium at higher pressure, the liquid vanishes in the
    superheated vapor region."""
    vle = fe.tp_flash(propane_butane, 300.0, 5e5, FEED)
    with pytest.raises(fe.NoPhaseSplit):
        fe.tp_flash(propane_butane, 300.0, 1e5, FEED, initial_state=vle)
