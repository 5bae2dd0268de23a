"""Tests of the critical point solvers.

For the Peng-Robinson EoS, the critical point of a pure component reproduces the
critical temperature and pressure of its parameters, and the critical
compressibility factor is a constant of the equation.

"""

from __future__ import annotations

import numpy as np
import pytest

import fluideq as fe

Z_CRIT = 0.307401308
"""Critical compressibility factor of the Peng-Robinson EoS."""


@pytest.mark.parametrize("initial_temperature", [None, 350.0])
def test_pure_component(
    propane: fe.PengRobinson,
    propane_record: fe.PengRobinsonRecord,
    initial_temperature,
):
    cp = fe.critical_point(propane, initial_temperature=initial_temperature)
    assert cp.temperature == pytest.approx(propane_record.tc, rel=1e-7)
    assert cp.pressure() == pytest.approx(propane_record.pc, rel=1e-6)
    assert cp.compressibility() == pytest.approx(Z_CRIT, rel=1e-5)
    # mechanical stability limit and inflection of the critical isotherm
    assert abs(cp.dp_dv()) * cp.volume / cp.pressure() < 1e-4


def test_pure_components_of_mixture(
    propane_butane: fe.PengRobinson,
    propane_record: fe.PengRobinsonRecord,
    butane_record: fe.PengRobinsonRecord,
):
    cps = fe.critical_point_pure(propane_butane)
    assert len(cps) == 2
    assert cps[0].temperature == pytest.approx(propane_record.tc, rel=1e-7)
    assert cps[1].temperature == pytest.approx(butane_record.tc, rel=1e-7)
    assert cps[1].eos.components() == 1


def test_mixture(
    propane_butane: fe.PengRobinson,
    propane_record: fe.PengRobinsonRecord,
    butane_record: fe.PengRobinsonRecord,
):
    """The critical line of a zeotropic mixture lies between the pure components in
    temperature and above them in pressure."""
    cp = fe.critical_point(propane_butane, np.array([0.5, 0.5]))
    assert propane_record.tc < cp.temperature < butane_record.tc
    assert cp.pressure() > butane_record.pc
    assert np.allclose(cp.molefracs, [0.5, 0.5])


def test_binary(propane_butane: fe.PengRobinson):
    t = 400.0
    cp = fe.critical_point_binary(propane_butane, temperature=t)
    assert cp.temperature == pytest.approx(t, rel=1e-6)
    assert 0.0 < cp.molefracs[0] < 1.0

    # the critical pressure passes through a maximum, a pressure between those of
    # the pure components is met only once
    p = 4e6
    cp = fe.critical_point_binary(propane_butane, pressure=p)
    assert cp.pressure() == pytest.approx(p, rel=1e-6)
    assert cp.molefracs[0] < 0.5


def test_binary_errors(propane: fe.PengRobinson, propane_butane: fe.PengRobinson):
    with pytest.raises(fe.IncompatibleComponents):
        fe.critical_point_binary(propane, temperature=300.0)
    with pytest.raises(fe.UndeterminedState):
        fe.critical_point_binary(propane_butane)
    with pytest.raises(fe.UndeterminedState):
        fe.critical_point_binary(propane_butane, temperature=300.0, pressure=1e5)
    # below the critical temperatures of both components
    with pytest.raises(fe.NotConverged):
        fe.critical_point_binary(propane_butane, temperature=300.0)
