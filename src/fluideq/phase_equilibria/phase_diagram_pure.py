"""Phase diagrams as sequences of two-phase equilibria, and the vapor pressure curve
of pure components."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from ..equation_of_state import EquationOfState
from ..errors import EosError
from ..solver_options import SolverOptions
from ..state import critical_point
from ..utils import time_logger
from .bubble_dew import BubbleDewOptions
from .phase_equilibrium import PhaseEquilibrium
from .vle_pure import pure_t

__all__ = ["PhaseDiagram", "DiagramFailure"]

logger = logging.getLogger(__name__)

DEFAULT_POINTS: int = 51
"""Default number of points of binary phase diagrams."""


@dataclass(frozen=True)
class DiagramFailure:
    """A point of a phase diagram for which the equilibrium calculation failed."""

    index: int
    """Position of the point in the sequence of control values."""

    control: float
    """Control value of the point, i.e. temperature, pressure or mole fraction."""

    error: Exception
    """The exception raised by the solver."""


class PhaseDiagram:
    """Phase diagram consisting of a sequence of two-phase equilibria.

    The diagram is created by continuation, i.e. each equilibrium is used as initial
    guess for the next point. If the calculation fails for a point, the point is
    dropped and recorded in :attr:`failures`, and the next point is calculated without
    initial guess.

    Parameters:
        states: The equilibria.
        failures: ``default=None``

            The points for which the calculation failed.

    """

    def __init__(
        self,
        states: Sequence[PhaseEquilibrium],
        failures: Optional[Sequence[DiagramFailure]] = None,
    ) -> None:
        self.states: list[PhaseEquilibrium] = list(states)
        """The equilibria."""
        self.failures: list[DiagramFailure] = list(failures or [])
        """The points which were dropped from the diagram."""

    def __len__(self) -> int:
        return len(self.states)

    def add_failure(self, index: int, control: float, error: Exception) -> None:
        logger.warning(
            "Phase diagram: point %d (%.8g) dropped: %s", index, control, error
        )
        self.failures.append(DiagramFailure(index, control, error))

    # region constructors

    @classmethod
    @time_logger(sections=["phase_diagram"])
    def pure(
        cls,
        eos: EquationOfState,
        min_temperature: float,
        npoints: int,
        critical_temperature: Optional[float] = None,
        options: SolverOptions = SolverOptions(),
    ) -> PhaseDiagram:
        """Vapor pressure curve of a pure component.

        The equilibria are calculated at ``npoints - 1`` equally spaced temperatures
        between ``min_temperature`` and the critical temperature (exclusive). The
        critical point is the last entry of the diagram.

        Parameters:
            eos: Equation of state of a pure component.
            min_temperature: Lowest temperature in ``[K]``.
            npoints: Number of points including the critical point.
            critical_temperature: ``default=None``

                Initial guess of the critical temperature in ``[K]``.
            options: Options of :func:`~fluideq.phase_equilibria.pure_t`.

        Raises:
            ValueError: If ``npoints`` is less than two.
            NotConverged: If the critical point calculation fails.

        """
        if npoints < 2:
            raise ValueError(
                f"A vapor pressure curve needs at least two points, got {npoints}."
            )
        cp = critical_point(eos, None, critical_temperature)
        tc = cp.temperature
        max_temperature = min_temperature + (tc - min_temperature) * (
            (npoints - 2) / (npoints - 1)
        )
        temperatures = np.linspace(min_temperature, max_temperature, npoints - 1)

        diagram = cls([])
        vle: Optional[PhaseEquilibrium] = None
        for i, t in enumerate(temperatures):
            try:
                vle = pure_t(eos, float(t), vle, options)
            except (EosError, np.linalg.LinAlgError) as err:
                diagram.add_failure(i, float(t), err)
                vle = None
                continue
            diagram.states.append(vle)
        diagram.states.append(PhaseEquilibrium(cp, cp))
        return diagram

    @classmethod
    def binary_vle(
        cls,
        eos: EquationOfState,
        temperature: Optional[float] = None,
        pressure: Optional[float] = None,
        npoints: Optional[int] = None,
        x_lle: Optional[tuple[float, float]] = None,
        bubble_dew_options: BubbleDewOptions = (SolverOptions(), SolverOptions()),
    ) -> PhaseDiagram:
        """Vapor-liquid phase diagram of a binary mixture.

        Creates a pxy diagram if ``temperature`` is given and a Txy diagram if
        ``pressure`` is given. The diagram is ordered by increasing mole fraction of
        the first component in the liquid.

        If one component is supercritical, the diagram ends at the critical point of
        the mixture. If the mixture forms a heteroazeotrope and the compositions of
        the liquids are known, they can be passed as ``x_lle`` to restrict the
        diagram to the stable branches.

        See :func:`~fluideq.phase_equilibria.phase_diagram_binary.binary_vle`.

        """
        from .phase_diagram_binary import binary_vle

        return binary_vle(
            eos, temperature, pressure, npoints, x_lle, bubble_dew_options
        )

    @classmethod
    def lle(
        cls,
        eos: EquationOfState,
        x_feed: float,
        min_tp: float,
        max_tp: float,
        temperature: Optional[float] = None,
        pressure: Optional[float] = None,
        npoints: Optional[int] = None,
    ) -> PhaseDiagram:
        """Phase diagram of a binary mixture from flash calculations at a fixed feed
        composition, usually for liquid-liquid equilibria.

        See :func:`~fluideq.phase_equilibria.phase_diagram_binary.lle`.

        """
        from .phase_diagram_binary import lle

        return lle(eos, x_feed, min_tp, max_tp, temperature, pressure, npoints)

    # endregion

    # region accessors

    def temperature(self) -> np.ndarray:
        """Temperatures in ``[K]``."""
        return np.array([s.vapor.temperature for s in self.states])

    def pressure(self) -> np.ndarray:
        """Pressures in ``[Pa]``."""
        return np.array([s.vapor.pressure() for s in self.states])

    def density_vapor(self) -> np.ndarray:
        """Molar densities of the vapor in ``[mol / m^3]``."""
        return np.array([s.vapor.density for s in self.states])

    def density_liquid(self) -> np.ndarray:
        """Molar densities of the liquid in ``[mol / m^3]``."""
        return np.array([s.liquid.density for s in self.states])

    def molar_enthalpy_vapor(self) -> np.ndarray:
        return np.array([s.vapor.molar_enthalpy() for s in self.states])

    def molar_enthalpy_liquid(self) -> np.ndarray:
        return np.array([s.liquid.molar_enthalpy() for s in self.states])

    def molar_entropy_vapor(self) -> np.ndarray:
        return np.array([s.vapor.molar_entropy() for s in self.states])

    def molar_entropy_liquid(self) -> np.ndarray:
        return np.array([s.liquid.molar_entropy() for s in self.states])

    def vapor_molefracs(self) -> np.ndarray:
        """Mole fractions of the first component in the vapor.

        Zero for diagrams of pure components.

        """
        if self.states and self.states[0].eos.components() == 1:
            return np.zeros(len(self.states))
        return np.array([s.vapor.molefracs[0] for s in self.states])

    def liquid_molefracs(self) -> np.ndarray:
        """Mole fractions of the first component in the liquid.

        Zero for diagrams of pure components.

        """
        if self.states and self.states[0].eos.components() == 1:
            return np.zeros(len(self.states))
        return np.array([s.liquid.molefracs[0] for s in self.states])

    def to_dict(self) -> dict[str, list[float]]:
        """Properties of all equilibria in SI units, e.g. for the construction of a
        data frame.

        Keys are ``"temperature"``, ``"pressure"``, ``"density vapor"``,
        ``"density liquid"``, ``"molar enthalpy vapor"``, ``"molar enthalpy liquid"``,
        ``"molar entropy vapor"`` and ``"molar entropy liquid"``. Diagrams of mixtures
        additionally contain ``"x0"`` and ``"y0"``, the mole fractions of the first
        component in liquid and vapor.

        """
        result = {
            "temperature": self.temperature().tolist(),
            "pressure": self.pressure().tolist(),
            "density vapor": self.density_vapor().tolist(),
            "density liquid": self.density_liquid().tolist(),
            "molar enthalpy vapor": self.molar_enthalpy_vapor().tolist(),
            "molar enthalpy liquid": self.molar_enthalpy_liquid().tolist(),
            "molar entropy vapor": self.molar_entropy_vapor().tolist(),
            "molar entropy liquid": self.molar_entropy_liquid().tolist(),
        }
        if self.states and self.states[0].eos.components() > 1:
            result["x0"] = self.liquid_molefracs().tolist()
            result["y0"] = self.vapor_molefracs().tolist()
        return result

    # endregion

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({len(self.states)} states, "
            f"{len(self.failures)} failures)"
        )
