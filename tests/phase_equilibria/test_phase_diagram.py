"""Tests of phase diagrams of pure components and binary mixtures."""

from __future__ import annotations

import logging

import numpy as np
import pytest

import fluideq as fe


def test_pure(propane: fe.PengRobinson, propane_record: fe.PengRobinsonRecord):
    dia = fe.PhaseDiagram.pure(propane, 250.0, 11)
    assert len(dia) == 11
    assert dia.failures == []

    t, p = dia.temperature(), dia.pressure()
    assert t[0] == 250.0
    assert t[-1] == pytest.approx(propane_record.tc, rel=1e-7)
    assert p[-1] == pytest.approx(propane_record.pc, rel=1e-6)
    assert np.all(np.diff(t) > 0.0) and np.all(np.diff(p) > 0.0)
    # the densities of both phases approach each other at the critical point
    assert np.all(dia.density_vapor()[:-1] < dia.density_liquid()[:-1])
    assert dia.density_vapor()[-1] == dia.density_liquid()[-1]
    assert np.all(dia.liquid_molefracs() == 0.0)

    data = dia.to_dict()
    assert set(data) == {
        "temperature",
        "pressure",
        "density vapor",
        "density liquid",
        "molar enthalpy vapor",
        "molar enthalpy liquid",
        "molar entropy vapor",
        "molar entropy liquid",
    }
    assert all(len(v) == 11 for v in data.values())
    # enthalpy of vaporization
    assert data["molar enthalpy vapor"][0] - data["molar enthalpy liquid"][0] > 1e4


@pytest.mark.parametrize("npoints", [0, 1])
def test_pure_too_few_points(propane: fe.PengRobinson, npoints: int):
    with pytest.raises(ValueError):
        fe.PhaseDiagram.pure(propane, 250.0, npoints)


def test_binary_pxy(propane_butane: fe.PengRobinson):
    dia = fe.PhaseDiagram.binary_vle(propane_butane, temperature=300.0, npoints=11)
    assert len(dia) == 11
    assert dia.failures == []

    x, y, p = dia.liquid_molefracs(), dia.vapor_molefracs(), dia.pressure()
    assert np.allclose(x, np.linspace(0.0, 1.0, 11))
    assert np.all(y >= x - 1e-12)
    assert np.all(np.diff(p) > 0.0)
    assert p[0] == pytest.approx(fe.vapor_pressure(propane_butane, 300.0)[1])
    assert set(dia.to_dict()) >= {"x0", "y0"}


def test_binary_txy(propane_butane: fe.PengRobinson):
    dia = fe.PhaseDiagram.binary_vle(propane_butane, pressure=1e5, npoints=7)
    assert len(dia) == 7
    assert np.all(np.diff(dia.temperature()) < 0.0)
    assert np.all(np.isclose(dia.pressure(), 1e5, rtol=1e-8))


def test_binary_supercritical(propane_butane: fe.PengRobinson):
    """Above the critical temperature of propane, the diagram ends at the critical
    point of the mixture."""
    npoints = 6
    dia = fe.PhaseDiagram.binary_vle(
        propane_butane, temperature=400.0, npoints=npoints
    )
    assert len(dia) + len(dia.failures) == npoints
    assert dia.liquid_molefracs()[0] == 0.0
    cp = dia.states[-1]
    assert cp.vapor is cp.liquid
    assert 0.0 < cp.liquid.molefracs[0] < 1.0


def test_binary_errors(propane: fe.PengRobinson, propane_butane: fe.PengRobinson):
    with pytest.raises(fe.IncompatibleComponents):
        fe.PhaseDiagram.binary_vle(propane, temperature=300.0)
    with pytest.raises(fe.UndeterminedState):
        fe.PhaseDiagram.binary_vle(propane_butane)
    # both components are supercritical
    with pytest.raises(fe.SuperCritical):
        fe.PhaseDiagram.binary_vle(propane_butane, temperature=450.0)


def test_lle(symmetric_lle: fe.PengRobinson):
    dia = fe.PhaseDiagram.lle(
        symmetric_lle, 0.5, 1e6, 5e6, temperature=250.0, npoints=5
    )
    assert len(dia) == 5
    assert np.allclose(dia.pressure(), np.linspace(5e6, 1e6, 5))
    for vle in dia.states:
        x1, x2 = vle.states[0].molefracs, vle.states[1].molefracs
        assert x1[0] == pytest.approx(x2[1], abs=1e-6)


def test_hetero(symmetric_lle: fe.PengRobinson):
    dia = fe.PhaseDiagramHetero.new(
        symmetric_lle,
        (0.05, 0.95),
        temperature=250.0,
        tp_lim_lle=2e6,
        npoints_vle=10,
        npoints_lle=4,
    )
    assert dia.heteroazeotrope is not None
    p_hetero = dia.heteroazeotrope.pressure()
    x_hetero = dia.heteroazeotrope.liquid1.molefracs[0]

    assert len(dia.vle1) + len(dia.vle1.failures) == 5
    assert len(dia.vle2) + len(dia.vle2.failures) == 5
    # the vapor-liquid branches end at the heteroazeotrope
    assert dia.vle1.liquid_molefracs()[0] == 0.0
    assert dia.vle1.liquid_molefracs()[-1] == pytest.approx(x_hetero, abs=1e-8)
    assert np.all(dia.vle1.pressure() <= p_hetero * (1 + 1e-6))

    vle = dia.vle
    assert len(vle) == len(dia.vle1) + len(dia.vle2)
    assert vle.liquid_molefracs()[-1] == 1.0

    assert dia.lle is not None
    assert dia.lle.pressure()[0] == pytest.approx(2e6)
    assert dia.lle.pressure()[-1] == pytest.approx(p_hetero)


def test_failures_are_recorded(caplog):
    dia = fe.PhaseDiagram([])
    with caplog.at_level(logging.WARNING):
        dia.add_failure(3, 0.25, fe.NotConverged("Bubble point"))
    assert len(dia) == 0
    assert dia.failures == [fe.DiagramFailure(3, 0.25, dia.failures[0].error)]
    assert "0.25" in caplog.text
    assert dia.to_dict()["temperature"] == []
