"""Tests of the tangent plane stability analysis."""

from __future__ import annotations

import numpy as np
import pytest

import fluideq as fe

FEED = np.array([0.5, 0.5])


@pytest.mark.parametrize(
    "pressure, density_initialization", [(1e5, "vapor"), (2e7, "liquid")]
)
def test_stable_states(
    propane_butane: fe.PengRobinson, pressure: float, density_initialization: str
):
    state = fe.State.new_npt(
        propane_butane, 300.0, pressure, FEED, density_initialization
    )
    assert fe.stability_analysis(state) == []
    assert fe.is_stable(state)


def test_vapor_liquid_instability(propane_butane: fe.PengRobinson):
    """Between dew and bubble point, the state splits into a vapor rich in propane and
    a liquid rich in butane."""
    state = fe.State.new_npt(propane_butane, 300.0, 5e5, FEED)
    trials = fe.stability_analysis(state)
    assert len(trials) > 0
    assert not fe.is_stable(state)
    for trial in trials:
        assert trial.pressure() == pytest.approx(5e5)
        assert trial.temperature == 300.0
        assert abs(trial.molefracs[0] - 0.5) > 1e-3


def test_liquid_liquid_instability(symmetric_lle: fe.PengRobinson):
    state = fe.State.new_npt(symmetric_lle, 250.0, 2e6, FEED, "liquid")
    trials = fe.stability_analysis(state)
    assert len(trials) > 0
    # the trial phases approach the nearly pure liquids of the miscibility gap
    assert any(min(t.molefracs) < 0.1 for t in trials)
