"""Txy and pxy phase diagrams of binary mixtures.

Vapor-liquid diagrams are traced by continuation of bubble (or dew) points, starting
at the vapor-liquid equilibrium of a pure component. Liquid-liquid diagrams are traced
by flash calculations at a fixed feed composition. Mixtures with a heteroazeotrope are
handled by :class:`PhaseDiagramHetero`, which restricts the vapor-liquid branches to
the compositions of the two liquids at the heteroazeotrope.

"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .._core import REFERENCE_MOLES
from ..equation_of_state import EquationOfState
from ..errors import EosError, IncompatibleComponents, SuperCritical, UndeterminedState
from ..solver_options import SolverOptions
from ..state import critical_point_binary
from ..utils import time_logger
from .bubble_dew import BubbleDewOptions, bubble_dew_point
from .heteroazeotrope import heteroazeotrope_p, heteroazeotrope_t
from .phase_diagram_pure import DEFAULT_POINTS, PhaseDiagram
from .phase_equilibrium import PhaseEquilibrium, ThreePhaseEquilibrium, TPSpec
from .tp_flash import tp_flash
from .vle_pure import vle_pure_comps

__all__ = ["binary_vle", "lle", "PhaseDiagramHetero"]

logger = logging.getLogger(__name__)


def _tp_spec(
    temperature: Optional[float], pressure: Optional[float]
) -> tuple[TPSpec, float]:
    if (temperature is None) == (pressure is None):
        raise UndeterminedState("Specify either temperature or pressure.")
    if temperature is not None:
        return TPSpec.TEMPERATURE, temperature
    return TPSpec.PRESSURE, pressure  # type: ignore[return-value]


def _free_variable(vle: PhaseEquilibrium, tp_spec: TPSpec) -> float:
    """The pressure of a pxy diagram point, or the temperature of a Txy point."""
    if tp_spec is TPSpec.TEMPERATURE:
        return vle.pressure()
    return vle.temperature


def _check_binary(eos: EquationOfState) -> None:
    if eos.components() != 2:
        raise IncompatibleComponents(2, eos.components())


def iterate_vle(
    eos: EquationOfState,
    tp_spec: TPSpec,
    tp_value: float,
    x_lim: tuple[float, float],
    vle_0: PhaseEquilibrium,
    vle_1: Optional[PhaseEquilibrium],
    npoints: int,
    bubble: bool,
    bubble_dew_options: BubbleDewOptions,
    diagram: PhaseDiagram,
) -> None:
    """Traces a branch of bubble (or dew) points and appends the equilibria to the
    diagram.

    The mole fraction of the first component in the specified phase runs from
    ``x_lim[0]`` to ``x_lim[1]``. ``vle_0`` is the first point of the branch. If given,
    ``vle_1`` is the last point and replaces the calculation at ``x_lim[1]``.

    Each point is initialized with the previous successful point. After a failure, the
    next point is calculated without initial guess.

    """
    x = np.linspace(x_lim[0], x_lim[1], npoints)
    x = x[1:-1] if vle_1 is not None else x[1:]

    tp_old: Optional[float] = _free_variable(vle_0, tp_spec)
    y_old: Optional[np.ndarray] = None
    diagram.states.append(vle_0)
    for i, xi in enumerate(x, start=1):
        try:
            vle = bubble_dew_point(
                eos,
                tp_spec,
                tp_value,
                np.array([xi, 1.0 - xi]),
                tp_old,
                y_old,
                bubble,
                bubble_dew_options,
            )
        except (EosError, np.linalg.LinAlgError) as err:
            diagram.add_failure(i, float(xi), err)
            tp_old, y_old = None, None
            continue
        y_old = (vle.vapor if bubble else vle.liquid).molefracs.copy()
        tp_old = _free_variable(vle, tp_spec)
        diagram.states.append(vle)
    if vle_1 is not None:
        diagram.states.append(vle_1)


def _pure_components(
    eos: EquationOfState, tp_spec: TPSpec, tp_value: float
) -> list[Optional[PhaseEquilibrium]]:
    """Equilibria of the pure components, ordered by increasing mole fraction of the
    first component, i.e. starting with the pure second component."""
    if tp_spec is TPSpec.TEMPERATURE:
        vle_sat = vle_pure_comps(eos, temperature=tp_value)
    else:
        vle_sat = vle_pure_comps(eos, pressure=tp_value)
    return [vle_sat[1], vle_sat[0]]


def new_vlle(
    eos: EquationOfState,
    tp_spec: TPSpec,
    tp_value: float,
    npoints: int,
    x_lle: tuple[float, float],
    vle_sat: list[Optional[PhaseEquilibrium]],
    bubble_dew_options: BubbleDewOptions,
) -> tuple[PhaseDiagram, PhaseDiagram]:
    """The two vapor-liquid branches of a mixture with a heteroazeotrope.

    The first branch runs from the pure second component to ``x_lle[0]``, the second
    from the pure first component to ``x_lle[1]``.

    Raises:
        SuperCritical: If one of the components has no vapor-liquid equilibrium.

    """
    vle2, vle1 = vle_sat
    if vle1 is None or vle2 is None:
        raise SuperCritical()
    dia1, dia2 = PhaseDiagram([]), PhaseDiagram([])
    iterate_vle(
        eos,
        tp_spec,
        tp_value,
        (0.0, x_lle[0]),
        vle2,
        None,
        npoints // 2,
        True,
        bubble_dew_options,
        dia1,
    )
    iterate_vle(
        eos,
        tp_spec,
        tp_value,
        (1.0, x_lle[1]),
        vle1,
        None,
        npoints - npoints // 2,
        True,
        bubble_dew_options,
        dia2,
    )
    return dia1, dia2


@time_logger(sections=["phase_diagram"])
def binary_vle(
    eos: EquationOfState,
    temperature: Optional[float] = None,
    pressure: Optional[float] = None,
    npoints: Optional[int] = None,
    x_lle: Optional[tuple[float, float]] = None,
    bubble_dew_options: BubbleDewOptions = (SolverOptions(), SolverOptions()),
) -> PhaseDiagram:
    """Vapor-liquid phase diagram of a binary mixture.

    Parameters:
        eos: Equation of state of a binary mixture.
        temperature: Temperature of a pxy diagram in ``[K]``.
        pressure: Pressure of a Txy diagram in ``[Pa]``. Exactly one of
            ``temperature`` and ``pressure`` must be given.
        npoints: ``default=None``

            Number of points, :data:`DEFAULT_POINTS` if not given.
        x_lle: ``default=None``

            Mole fractions of the first component in the two liquids of a
            heteroazeotrope. If given, the diagram consists of the two stable
            vapor-liquid branches only.
        bubble_dew_options: Options of the bubble and dew point calculations.

    Raises:
        IncompatibleComponents: If the mixture is not binary.
        UndeterminedState: If not exactly one of ``temperature`` and ``pressure`` is
            given.
        SuperCritical: If both components are supercritical, or one of them is and
            ``x_lle`` is given.

    Returns:
        The diagram. If both components are subcritical, it is ordered by
        increasing mole fraction of the first component in the liquid. Otherwise
        it connects the pure component with the critical point of the mixture, and
        Txy diagrams, which are traced with dew points, start at the critical point.

    """
    _check_binary(eos)
    tp_spec, tp_value = _tp_spec(temperature, pressure)
    npoints = npoints or DEFAULT_POINTS
    vle_sat = _pure_components(eos, tp_spec, tp_value)

    if x_lle is not None:
        dia1, dia2 = new_vlle(
            eos, tp_spec, tp_value, npoints, x_lle, vle_sat, bubble_dew_options
        )
        return PhaseDiagram(
            dia1.states + dia2.states[::-1], dia1.failures + dia2.failures
        )

    # dew points are used for supercritical Txy diagrams
    bubble = tp_spec is TPSpec.TEMPERATURE
    vle2, vle1 = vle_sat
    if vle1 is None and vle2 is None:
        raise SuperCritical()
    if vle1 is not None and vle2 is not None:
        x_lim = (0.0, 1.0)
        vle_lim = (vle2, vle1)
        bubble = True
    else:
        cp = critical_point_binary(eos, temperature, pressure)
        cp_vle = PhaseEquilibrium(cp, cp)
        logger.info(
            "Component %d is supercritical, diagram ends at x = %.6f",
            0 if vle1 is None else 1,
            cp.molefracs[0],
        )
        if vle2 is not None:
            x_lim = (0.0, float(cp.molefracs[0]))
            vle_lim = (vle2, cp_vle)
        else:
            x_lim = (1.0, float(cp.molefracs[0]))
            vle_lim = (vle1, cp_vle)  # type: ignore[assignment]

    diagram = PhaseDiagram([])
    iterate_vle(
        eos,
        tp_spec,
        tp_value,
        x_lim,
        vle_lim[0],
        vle_lim[1],
        npoints,
        bubble,
        bubble_dew_options,
        diagram,
    )
    if not bubble:
        diagram.states.reverse()
    return diagram


@time_logger(sections=["phase_diagram"])
def lle(
    eos: EquationOfState,
    x_feed: float,
    min_tp: float,
    max_tp: float,
    temperature: Optional[float] = None,
    pressure: Optional[float] = None,
    npoints: Optional[int] = None,
) -> PhaseDiagram:
    """Phase diagram of a binary mixture from flash calculations at fixed feed
    composition.

    The usual application are liquid-liquid equilibria, but vapor-liquid equilibria
    work as well, as long as the feed is in the two-phase region.

    Parameters:
        eos: Equation of state of a binary mixture.
        x_feed: Mole fraction of the first component in the feed.
        min_tp: Lower bound of the free variable, i.e. the pressure in ``[Pa]`` if
            ``temperature`` is given and the temperature in ``[K]`` otherwise.
        max_tp: Upper bound of the free variable.
        temperature: Temperature of a pxy diagram in ``[K]``.
        pressure: Pressure of a Txy diagram in ``[Pa]``.
        npoints: ``default=None``

            Number of points, :data:`DEFAULT_POINTS` if not given.

    Returns:
        The diagram. Pressures of pxy diagrams are traversed in decreasing order,
        temperatures of Txy diagrams in increasing order.

    """
    _check_binary(eos)
    tp_spec, tp_value = _tp_spec(temperature, pressure)
    npoints = npoints or DEFAULT_POINTS
    feed = np.array([x_feed, 1.0 - x_feed]) * REFERENCE_MOLES

    if tp_spec is TPSpec.TEMPERATURE:
        values = np.linspace(max_tp, min_tp, npoints)
    else:
        values = np.linspace(min_tp, max_tp, npoints)

    diagram = PhaseDiagram([])
    vle: Optional[PhaseEquilibrium] = None
    for i, value in enumerate(values):
        if tp_spec is TPSpec.TEMPERATURE:
            t, p = tp_value, float(value)
        else:
            t, p = float(value), tp_value
        try:
            vle = tp_flash(eos, t, p, feed, vle)
        except (EosError, np.linalg.LinAlgError) as err:
            diagram.add_failure(i, float(value), err)
            vle = None
            continue
        diagram.states.append(vle)
    return diagram


class PhaseDiagramHetero:
    """Phase diagram of a binary mixture with a heteroazeotrope.

    Use :meth:`new` to create the diagram.

    Parameters:
        vle1: Vapor-liquid branch from the pure second component to the first liquid
            of the heteroazeotrope.
        vle2: Vapor-liquid branch from the pure first component to the second liquid
            of the heteroazeotrope.
        lle: Liquid-liquid branch, if calculated.
        heteroazeotrope: The three-phase equilibrium.

    """

    def __init__(
        self,
        vle1: PhaseDiagram,
        vle2: PhaseDiagram,
        lle: Optional[PhaseDiagram] = None,
        heteroazeotrope: Optional[ThreePhaseEquilibrium] = None,
    ) -> None:
        self.vle1: PhaseDiagram = vle1
        self.vle2: PhaseDiagram = vle2
        self.lle: Optional[PhaseDiagram] = lle
        self.heteroazeotrope: Optional[ThreePhaseEquilibrium] = heteroazeotrope

    @classmethod
    @time_logger(sections=["phase_diagram"])
    def new(
        cls,
        eos: EquationOfState,
        x_lle: tuple[float, float],
        temperature: Optional[float] = None,
        pressure: Optional[float] = None,
        tp_lim_lle: Optional[float] = None,
        npoints_vle: Optional[int] = None,
        npoints_lle: Optional[int] = None,
        bubble_dew_options: BubbleDewOptions = (SolverOptions(), SolverOptions()),
    ) -> PhaseDiagramHetero:
        """Calculates the heteroazeotrope and the branches of the phase diagram.

        Parameters:
            eos: Equation of state of a binary mixture.
            x_lle: Estimated mole fractions of the first component in the two liquids,
                used to initialize the heteroazeotrope.
            temperature: Temperature of a pxy diagram in ``[K]``.
            pressure: Pressure of a Txy diagram in ``[Pa]``.
            tp_lim_lle: ``default=None``

                Limit of the liquid-liquid branch, i.e. the maximum pressure of a pxy
                diagram or the minimum temperature of a Txy diagram. If not given, the
                liquid-liquid branch is not calculated.
            npoints_vle: Number of points of both vapor-liquid branches together.
            npoints_lle: Number of points of the liquid-liquid branch.
            bubble_dew_options: Options of the bubble point calculations.

        Raises:
            SuperCritical: If one of the components has no vapor-liquid equilibrium.
            NotConverged: If the heteroazeotrope cannot be found.

        """
        _check_binary(eos)
        tp_spec, tp_value = _tp_spec(temperature, pressure)
        npoints_vle = npoints_vle or DEFAULT_POINTS
        vle_sat = _pure_components(eos, tp_spec, tp_value)

        if tp_spec is TPSpec.TEMPERATURE:
            vlle = heteroazeotrope_t(
                eos, tp_value, x_lle, bubble_dew_options=bubble_dew_options
            )
        else:
            vlle = heteroazeotrope_p(
                eos, tp_value, x_lle, bubble_dew_options=bubble_dew_options
            )
        x_hetero = (
            float(vlle.liquid1.molefracs[0]),
            float(vlle.liquid2.molefracs[0]),
        )

        dia1, dia2 = new_vlle(
            eos, tp_spec, tp_value, npoints_vle, x_hetero, vle_sat, bubble_dew_options
        )

        dia_lle: Optional[PhaseDiagram] = None
        if tp_lim_lle is not None:
            tp_hetero = _free_variable(vlle, tp_spec)
            dia_lle = lle(
                eos,
                0.5 * (x_hetero[0] + x_hetero[1]),
                tp_lim_lle if tp_spec is TPSpec.PRESSURE else tp_hetero,
                tp_hetero if tp_spec is TPSpec.PRESSURE else tp_lim_lle,
                temperature,
                pressure,
                npoints_lle,
            )
        return cls(dia1, dia2, dia_lle, vlle)

    @property
    def vle(self) -> PhaseDiagram:
        """Both vapor-liquid branches combined, ordered by increasing mole fraction of
        the first component in the liquid."""
        return PhaseDiagram(
            self.vle1.states + self.vle2.states[::-1],
            self.vle1.failures + self.vle2.failures,
        )
