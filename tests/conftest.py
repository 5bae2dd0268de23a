"""Contains fixtures shared by different testing modules.

All systems are described with the Peng-Robinson EoS. The critical point of a pure
component coincides with the critical temperature and pressure of its parameters,
which makes it a convenient reference.

"""

from __future__ import annotations

import numpy as np
import pytest

import fluideq as fe

PROPANE = fe.PengRobinsonRecord(
    tc=369.96, pc=4250000.0, acentric_factor=0.153, molarweight=44.0962
)
BUTANE = fe.PengRobinsonRecord(
    tc=425.2, pc=3800000.0, acentric_factor=0.199, molarweight=58.123
)

PROPANE_JOBACK = fe.JobackRecord(a=38.09, b=0.07884, c=2.516e-4, d=-1.815e-7)
BUTANE_JOBACK = fe.JobackRecord(a=37.182, b=0.17384, c=1.972e-4, d=-1.696e-7)


@pytest.fixture(scope="session")
def propane() -> fe.PengRobinson:
    """Pure propane with the default ideal gas model."""
    return fe.PengRobinson(fe.PengRobinsonParameters([PROPANE]))


@pytest.fixture(scope="session")
def propane_joback() -> fe.PengRobinson:
    """Pure propane with Joback heat capacities."""
    return fe.PengRobinson(
        fe.PengRobinsonParameters([PROPANE], joback_records=[PROPANE_JOBACK])
    )


@pytest.fixture(scope="session")
def propane_butane() -> fe.PengRobinson:
    """Binary mixture of propane and butane without interaction parameter."""
    return fe.PengRobinson(
        fe.PengRobinsonParameters(
            [PROPANE, BUTANE], joback_records=[PROPANE_JOBACK, BUTANE_JOBACK]
        )
    )


@pytest.fixture(scope="session")
def symmetric_lle() -> fe.PengRobinson:
    """Binary mixture of two identical propane-like components with a large binary
    interaction parameter.

    The mixture shows a liquid-liquid miscibility gap and a heteroazeotrope. Due to
    the symmetry, the liquid compositions are mirror images and the vapor at the
    heteroazeotrope is equimolar.

    """
    k_ij = np.array([[0.0, 0.35], [0.35, 0.0]])
    return fe.PengRobinson(fe.PengRobinsonParameters([PROPANE, PROPANE], k_ij))


@pytest.fixture(scope="session")
def propane_record() -> fe.PengRobinsonRecord:
    return PROPANE


@pytest.fixture(scope="session")
def butane_record() -> fe.PengRobinsonRecord:
    return BUTANE


@pytest.fixture(scope="session")
def propane_joback_record() -> fe.JobackRecord:
    return PROPANE_JOBACK
