"""Tests of the heteroazeotrope of a symmetric binary mixture with a miscibility gap.

Both components are identical apart from the binary interaction, hence the liquids
have mirrored compositions and the vapor is equimolar.

"""

from __future__ import annotations

import numpy as np
import pytest

import fluideq as fe

T = 250.0
X_INIT = (0.05, 0.95)


@pytest.fixture(scope="module")
def vlle(symmetric_lle: fe.PengRobinson) -> fe.ThreePhaseEquilibrium:
    return fe.heteroazeotrope_t(symmetric_lle, T, X_INIT)


def test_heteroazeotrope_t(vlle: fe.ThreePhaseEquilibrium, propane: fe.PengRobinson):
    vapor, l1, l2 = vlle.vapor, vlle.liquid1, vlle.liquid2
    assert vapor.molefracs[0] == pytest.approx(0.5, abs=1e-6)
    assert l1.molefracs[0] == pytest.approx(l2.molefracs[1], abs=1e-6)
    assert l1.molefracs[0] < 0.1

    p = vlle.pressure()
    for state in vlle.states:
        assert state.temperature == T
        assert state.pressure() == pytest.approx(p, rel=1e-7)
    ln_f = [np.log(s.molefracs) + s.ln_phi() for s in vlle.states]
    assert np.allclose(ln_f[0], ln_f[1], atol=1e-6)
    assert np.allclose(ln_f[0], ln_f[2], atol=1e-6)

    # close to the sum of the vapor pressures of both components
    p_sat = fe.pure_t(propane, T).pressure()
    assert 1.5 * p_sat < p < 2.5 * p_sat


def test_two_phase_views(vlle: fe.ThreePhaseEquilibrium):
    assert vlle.vle1().liquid is vlle.liquid1
    assert vlle.vle2().liquid is vlle.liquid2
    assert vlle.lle().states == (vlle.liquid1, vlle.liquid2)
    with pytest.raises(AttributeError):
        vlle.liquid
    assert "ThreePhaseEquilibrium(T=250.00000 K" in repr(vlle)


def test_heteroazeotrope_p(
    symmetric_lle: fe.PengRobinson, vlle: fe.ThreePhaseEquilibrium
):
    result = fe.heteroazeotrope_p(symmetric_lle, vlle.pressure(), X_INIT)
    assert result.temperature == pytest.approx(T, rel=1e-6)
    assert result.liquid1.molefracs[0] == pytest.approx(
        vlle.liquid1.molefracs[0], abs=1e-5
    )


def test_pure_component_rejected(propane: fe.PengRobinson):
    with pytest.raises(fe.IncompatibleComponents):
        fe.heteroazeotrope_t(propane, T, X_INIT)
