"""Tests of the vapor-liquid equilibrium of pure components."""

from __future__ import annotations

import pytest

import fluideq as fe


@pytest.fixture(scope="module")
def vle_300(propane: fe.PengRobinson) -> fe.PhaseEquilibrium:
    return fe.pure_t(propane, 300.0)


def test_pure_t(vle_300: fe.PhaseEquilibrium):
    vapor, liquid = vle_300.vapor, vle_300.liquid
    assert vle_300.temperature == 300.0
    assert 9e5 < vle_300.pressure() < 1.2e6
    assert liquid.pressure() == pytest.approx(vapor.pressure(), rel=1e-10)
    assert liquid.chemical_potential()[0] == pytest.approx(
        vapor.chemical_potential()[0], rel=1e-10
    )
    assert vapor.density < liquid.density


def test_clausius_clapeyron(propane: fe.PengRobinson, vle_300: fe.PhaseEquilibrium):
    """The slope of the vapor pressure curve obeys ``dp/dT = dh / (T dv)``."""
    t, h = 300.0, 1e-3
    p_plus = fe.pure_t(propane, t + h).pressure()
    p_minus = fe.pure_t(propane, t - h).pressure()
    dp_dt = (p_plus - p_minus) / (2 * h)
    vapor, liquid = vle_300.vapor, vle_300.liquid
    dh = vapor.molar_enthalpy() - liquid.molar_enthalpy()
    dv = 1 / vapor.density - 1 / liquid.density
    assert dp_dt == pytest.approx(dh / (t * dv), rel=1e-5)


def test_pure_p(propane: fe.PengRobinson, vle_300: fe.PhaseEquilibrium):
    vle = fe.pure_p(propane, vle_300.pressure())
    assert vle.temperature == pytest.approx(300.0, rel=1e-8)
    assert vle.liquid.density == pytest.approx(vle_300.liquid.density, rel=1e-6)

    # warm start from a neighboring equilibrium
    vle = fe.pure_p(propane, 1.05 * vle_300.pressure(), initial_state=vle_300)
    assert vle.temperature > 300.0

    vle = fe.pure_t(propane, 305.0, initial_state=vle_300)
    assert vle.pressure() > vle_300.pressure()


def test_supercritical(propane: fe.PengRobinson):
    with pytest.raises(fe.SuperCritical):
        fe.pure_t(propane, 400.0)
    with pytest.raises(fe.SuperCritical):
        fe.pure_p(propane, 5e6)


def test_mixture_rejected(propane_butane: fe.PengRobinson):
    with pytest.raises(fe.IncompatibleComponents):
        fe.pure_t(propane_butane, 300.0)
    with pytest.raises(fe.UndeterminedState):
        fe.vle_pure_comps(propane_butane)


def test_pure_components_of_mixture(
    propane_butane: fe.PengRobinson, butane_record: fe.PengRobinsonRecord
):
    vles = fe.vle_pure_comps(propane_butane, temperature=300.0)
    assert len(vles) == 2
    for i, vle in enumerate(vles):
        assert vle is not None
        assert vle.eos is propane_butane
        assert vle.liquid.molefracs[i] == 1.0

    # propane is supercritical at 400 K
    p = fe.vapor_pressure(propane_butane, 400.0)
    assert p[0] is None
    assert p[1] is not None and p[1] < butane_record.pc

    t = fe.boiling_temperature(propane_butane, 1e5)
    assert t[0] is not None and t[1] is not None
    assert 220.0 < t[0] < t[1] < 285.0


@pytest.mark.parametrize("t", [340.0, 360.0, 368.0])
def test_pure_t_close_to_critical_point(
    propane: fe.PengRobinson, propane_record: fe.PengRobinsonRecord, t: float
):
    """Close to the critical temperature the liquid root vanishes at low pressures,
    which must not be mistaken for a supercritical temperature."""
    vle = fe.pure_t(propane, t)
    assert vle.pressure() < propane_record.pc
    assert vle.liquid.density > vle.vapor.density * (1 + 1e-3)
    assert vle.liquid.chemical_potential()[0] == pytest.approx(
        vle.vapor.chemical_potential()[0], rel=1e-10
    )
