"""Tests of the equation of state interface, the Peng-Robinson EoS and the ideal gas
models."""

from __future__ import annotations

import numpy as np
import pytest

import fluideq as fe


def test_parameter_validation(
    propane_record: fe.PengRobinsonRecord,
    butane_record: fe.PengRobinsonRecord,
    propane_joback_record: fe.JobackRecord,
):
    with pytest.raises(ValueError):
        fe.PengRobinsonParameters([])
    with pytest.raises(ValueError):
        records = [propane_record, butane_record]
        fe.PengRobinsonParameters(records, k_ij=np.zeros((3, 3)))
    with pytest.raises(ValueError):
        fe.PengRobinsonParameters(
            [propane_record, butane_record], k_ij=np.array([[0.0, 0.1], [0.2, 0.0]])
        )
    with pytest.raises(ValueError):
        fe.PengRobinsonParameters([fe.PengRobinsonRecord(-1.0, 1e6, 0.1)])
    with pytest.raises(fe.IncompatibleComponents):
        fe.PengRobinsonParameters(
            [propane_record, butane_record], joback_records=[propane_joback_record]
        )

    params = fe.PengRobinsonParameters.new_simple(
        [369.96, 425.2], [4250000.0, 3800000.0], [0.153, 0.199]
    )
    assert len(params) == 2
    assert np.all(params.k_ij == 0.0)


def test_critical_constants():
    assert fe.A_CRIT == pytest.approx(0.4572355289, rel=1e-9)
    assert fe.B_CRIT == pytest.approx(0.0777960739, rel=1e-9)


def test_subset(
    propane_butane: fe.PengRobinson,
    propane_record: fe.PengRobinsonRecord,
    butane_record: fe.PengRobinsonRecord,
):
    k_ij = np.array([[0.0, 0.02, 0.05], [0.02, 0.0, 0.01], [0.05, 0.01, 0.0]])
    records = [propane_record, butane_record, propane_record]
    params = fe.PengRobinsonParameters(records, k_ij)
    sub = fe.PengRobinson(params).subset([2, 0])
    assert sub.components() == 2
    assert sub.parameters.k_ij[0, 1] == pytest.approx(0.05)

    butane = propane_butane.subset([1])
    assert butane.components() == 1
    assert butane.parameters.records[0] == butane_record
    assert isinstance(butane.ideal_gas(), fe.Joback)


def test_moles_validation_and_max_density(
    propane: fe.PengRobinson,
    propane_butane: fe.PengRobinson,
    propane_record: fe.PengRobinsonRecord,
):
    assert np.allclose(propane.validate_moles(None), [fe.REFERENCE_MOLES])
    with pytest.raises(fe.IncompatibleComponents):
        propane_butane.validate_moles(None)
    with pytest.raises(fe.IncompatibleComponents):
        propane_butane.validate_moles(np.ones(3))

    b = fe.B_CRIT * fe.R_IDEAL_MOL * propane_record.tc / propane_record.pc
    assert propane.max_density() == pytest.approx(0.9 / b)


def test_molar_weight(propane: fe.PengRobinson):
    assert propane.molar_weight() == pytest.approx([0.0440962])
    eos = fe.PengRobinson(
        fe.PengRobinsonParameters.new_simple([369.96], [4250000.0], [0.153])
    )
    with pytest.raises(NotImplementedError):
        eos.molar_weight()


def test_residual_helmholtz_ideal_gas_limit(propane_butane: fe.PengRobinson):
    """The residual Helmholtz energy vanishes for large volumes, and the second virial
    coefficient ``B = b - a / (R T)`` is recovered."""
    t = 350.0
    moles = np.array([0.3, 0.7])
    volume = 1e3
    f = propane_butane.residual_helmholtz(fe.StateHD(t, volume, moles))
    assert abs(f) < 1e-5

    p = propane_butane.parameters
    sqrt_a = np.sqrt(p.a) * (1 + p.kappa * (1 - np.sqrt(t / p.tc)))
    x = moles / moles.sum()
    a_mix = np.dot(x, sqrt_a) ** 2
    b_mix = np.dot(x, p.b)
    second_virial = b_mix - a_mix / (fe.R_IDEAL_MOL * t)
    n = moles.sum()
    assert f == pytest.approx(n * n / volume * second_virial, rel=1e-4)


def test_state_hd_validation(propane: fe.PengRobinson):
    with pytest.raises(fe.InvalidState):
        fe.StateHD(300.0, -1.0, [1.0])
    with pytest.raises(fe.InvalidState):
        fe.StateHD(300.0, 1.0, [0.0])


def test_ideal_gas_heat_capacities(
    propane: fe.PengRobinson,
    propane_joback: fe.PengRobinson,
    propane_joback_record: fe.JobackRecord,
):
    """The ideal gas heat capacities equal the Joback polynomial, and the one of the
    default model equals that of a monoatomic gas."""
    t = 350.0
    state = fe.State.new_density(propane_joback, t, 10.0)
    c = propane_joback_record.coefficients()
    cp = sum(c[k] * t**k for k in range(5))
    assert state.c_p(fe.Contributions.IDEAL_GAS) == pytest.approx(cp, rel=1e-10)
    assert state.c_v(fe.Contributions.IDEAL_GAS) == pytest.approx(
        cp - fe.R_IDEAL_MOL, rel=1e-10
    )

    state = fe.State.new_density(propane, t, 10.0)
    assert state.c_v(fe.Contributions.IDEAL_GAS) == pytest.approx(
        1.5 * fe.R_IDEAL_MOL, rel=1e-10
    )


def test_reference_state(propane_joback: fe.PengRobinson):
    """Enthalpy and entropy of the ideal gas vanish at the standard state."""
    density = fe.P_REF / (fe.R_IDEAL_MOL * fe.T_REF)
    state = fe.State.new_density(propane_joback, fe.T_REF, density)
    ig = fe.Contributions.IDEAL_GAS
    assert abs(state.molar_enthalpy(ig)) < 1e-8
    assert abs(state.molar_entropy(ig)) < 1e-8
