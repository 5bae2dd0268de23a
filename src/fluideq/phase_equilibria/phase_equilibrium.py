"""Containers for states in phase equilibrium."""

from __future__ import annotations

from enum import Enum
from typing import Optional

import numpy as np

from ..equation_of_state import EquationOfState
from ..state import DensityInitialization, State

__all__ = ["TPSpec", "PhaseEquilibrium", "ThreePhaseEquilibrium"]


class TPSpec(Enum):
    """The intensive variable which is fixed in a phase equilibrium calculation."""

    TEMPERATURE = "temperature"
    PRESSURE = "pressure"


class PhaseEquilibrium:
    """A vapor and a liquid state in equilibrium.

    The states share temperature and pressure, and their chemical potentials are equal
    within the tolerance of the solver that created them.

    Parameters:
        vapor: The vapor (or lighter liquid) state.
        liquid: The liquid state.

    """

    def __init__(self, vapor: State, liquid: State) -> None:
        self.states: tuple[State, State] = (vapor, liquid)

    @property
    def vapor(self) -> State:
        return self.states[0]

    @property
    def liquid(self) -> State:
        return self.states[1]

    @property
    def temperature(self) -> float:
        return self.vapor.temperature

    def pressure(self) -> float:
        return self.vapor.pressure()

    @property
    def eos(self) -> EquationOfState:
        return self.vapor.eos

    @classmethod
    def from_states(cls, state1: State, state2: State) -> PhaseEquilibrium:
        """Orders two states such that the one with lower density is the vapor."""
        if state1.density < state2.density:
            return cls(state1, state2)
        return cls(state2, state1)

    def update_pressure(
        self,
        temperature: float,
        pressure: float,
        density_initialization: Optional[tuple[DensityInitialization, ...]] = None,
    ) -> PhaseEquilibrium:
        """New equilibrium guess with both states moved to the given temperature and
        pressure at constant composition, starting the density iterations from the
        current densities."""
        init = density_initialization or tuple(s.density for s in self.states)
        states = [
            State.new_npt(s.eos, temperature, pressure, s.moles, i)
            for s, i in zip(self.states, init)
        ]
        return type(self)(*states)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(T={self.temperature:.5f} K, "
            f"p={self.pressure():.5f} Pa, "
            + ", ".join(
                f"x{i}={np.array2string(s.molefracs, precision=5)}"
                for i, s in enumerate(self.states)
            )
            + ")"
        )


class ThreePhaseEquilibrium(PhaseEquilibrium):
    """A vapor and two liquid states in equilibrium.

    Parameters:
        vapor: The vapor state.
        liquid1: The first liquid state.
        liquid2: The second liquid state.

    """

    def __init__(self, vapor: State, liquid1: State, liquid2: State) -> None:
        self.states = (vapor, liquid1, liquid2)  # type: ignore[assignment]

    @property
    def liquid(self) -> State:
        raise AttributeError("Use liquid1 or liquid2 in a three-phase equilibrium.")

    @property
    def liquid1(self) -> State:
        return self.states[1]

    @property
    def liquid2(self) -> State:
        return self.states[2]

    def vle1(self) -> PhaseEquilibrium:
        """The equilibrium between the vapor and the first liquid."""
        return PhaseEquilibrium(self.vapor, self.liquid1)

    def vle2(self) -> PhaseEquilibrium:
        """The equilibrium between the vapor and the second liquid."""
        return PhaseEquilibrium(self.vapor, self.liquid2)

    def lle(self) -> PhaseEquilibrium:
        """The equilibrium between the two liquids."""
        return PhaseEquilibrium(self.liquid1, self.liquid2)
