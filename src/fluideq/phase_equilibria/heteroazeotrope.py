"""Heteroazeotropes, i.e. three-phase equilibria of a vapor and two liquids, of binary
mixtures.

The unknowns are the partial densities of the three phases, and additionally the
temperature if the pressure is specified. The residual consists of the differences of
the chemical potentials of each liquid to the vapor and of the pressure conditions,
and is solved with a Newton method. The initial guess is obtained from bubble points
at the estimated compositions of the two liquids.

"""

from __future__ import annotations

import logging
from typing import Union

import numpy as np

from .._core import R_IDEAL_MOL
from ..equation_of_state import EquationOfState
from ..errors import IncompatibleComponents, IterationFailed, NotConverged
from ..linalg import lu_solve
from ..solver_options import SolverOptions, log_iter, log_result
from ..state import State
from ..utils import time_logger
from .bubble_dew import BubbleDewOptions, bubble_point_px, bubble_point_tx
from .phase_equilibrium import ThreePhaseEquilibrium

__all__ = ["heteroazeotrope_t", "heteroazeotrope_p"]

logger = logging.getLogger(__name__)

MAX_ITER_HETERO: int = 50
"""Default maximum number of Newton iterations."""

TOL_HETERO: float = 1e-8
"""Default tolerance of the scaled residual."""

LiquidCompositions = tuple[Union[float, np.ndarray], Union[float, np.ndarray]]
"""Estimated compositions of the two liquids, either as mole fraction of the first
component or as arrays of mole fractions."""


def _molefracs(x: Union[float, np.ndarray]) -> np.ndarray:
    if np.ndim(x) == 0:
        return np.array([float(x), 1.0 - float(x)])  # type: ignore[arg-type]
    x = np.asarray(x, dtype=float)
    return x / x.sum()


def _check_binary(eos: EquationOfState) -> None:
    if eos.components() != 2:
        raise IncompatibleComponents(2, eos.components())


def _update_states(
    eos: EquationOfState, temperature: float, states: list[State], dx: np.ndarray
) -> list[State]:
    """Subtracts the Newton step from the partial densities of all phases."""
    if not (np.isfinite(temperature) and temperature > 0.0):
        raise IterationFailed("Heteroazeotrope")
    nc = eos.components()
    new_states = []
    for j, s in enumerate(states):
        rho = s.partial_density - dx[j * nc : (j + 1) * nc]
        if np.any(rho <= 0.0) or not np.all(np.isfinite(rho)):
            raise IterationFailed("Heteroazeotrope")
        if rho.sum() >= eos.max_density(rho / rho.sum()):
            raise IterationFailed("Heteroazeotrope")
        new_states.append(State.new_partial_density(eos, temperature, rho))
    return new_states


@time_logger(sections=["phase_equilibria"])
def heteroazeotrope_t(
    eos: EquationOfState,
    temperature: float,
    x_init: LiquidCompositions,
    options: SolverOptions = SolverOptions(),
    bubble_dew_options: BubbleDewOptions = (SolverOptions(), SolverOptions()),
) -> ThreePhaseEquilibrium:
    """Calculates the heteroazeotrope of a binary mixture at given temperature.

    Parameters:
        eos: Equation of state of a binary mixture.
        temperature: Temperature in ``[K]``.
        x_init: Estimated compositions of the two liquids.
        options: Options of the Newton solver.
        bubble_dew_options: Options of the bubble point calculations providing the
            initial guess.

    Raises:
        IncompatibleComponents: If the mixture is not binary.
        IterationFailed: If a Newton step results in a non-physical density.
        NotConverged: If the iteration budget is exhausted.

    Returns:
        The vapor and the two liquids in equilibrium.

    """
    _check_binary(eos)
    max_iter, tol, verbosity = options.unwrap_or(MAX_ITER_HETERO, TOL_HETERO)
    nc = eos.components()

    vle1 = bubble_point_tx(
        eos, temperature, _molefracs(x_init[0]), options=bubble_dew_options
    )
    vle2 = bubble_point_tx(
        eos, temperature, _molefracs(x_init[1]), options=bubble_dew_options
    )
    p0 = 0.5 * (vle1.pressure() + vle2.pressure())
    nv0 = 0.5 * (vle1.vapor.moles + vle2.vapor.moles)
    v = State.new_npt(eos, temperature, p0, nv0, "vapor")
    l1, l2 = vle1.liquid, vle2.liquid

    mu_scale = R_IDEAL_MOL * temperature
    p_scale = p0
    zeros = np.zeros((nc, nc))
    log_iter(logger, verbosity, " iter |    residual    |   pressure")
    for k in range(1, max_iter + 1):
        mu_v = v.chemical_potential()
        p_v = v.pressure()
        res = np.concatenate(
            [
                (l1.chemical_potential() - mu_v) / mu_scale,
                (l2.chemical_potential() - mu_v) / mu_scale,
                [(l1.pressure() - p_v) / p_scale, (l2.pressure() - p_v) / p_scale],
            ]
        )
        norm = float(np.linalg.norm(res))
        log_iter(logger, verbosity, " %4d | %14.8e | %14.8e", k, norm, p_v)
        if norm < tol:
            log_result(
                logger,
                verbosity,
                "Heteroazeotrope: T = %.5f K, p = %.8e Pa, converged in %d step(s)",
                temperature,
                p_v,
                k,
            )
            return ThreePhaseEquilibrium(v, l1, l2)

        # derivatives w.r.t. the partial densities
        dmu_l1 = l1.dmu_dni() * l1.volume / mu_scale
        dmu_l2 = l2.dmu_dni() * l2.volume / mu_scale
        dmu_v = v.dmu_dni() * v.volume / mu_scale
        dp_l1 = l1.dp_dni() * l1.volume / p_scale
        dp_l2 = l2.dp_dni() * l2.volume / p_scale
        dp_v = v.dp_dni() * v.volume / p_scale
        z = np.zeros(nc)
        jac = np.block(
            [
                [dmu_l1, zeros, -dmu_v],
                [zeros, dmu_l2, -dmu_v],
                [dp_l1[np.newaxis], z[np.newaxis], -dp_v[np.newaxis]],
                [z[np.newaxis], dp_l2[np.newaxis], -dp_v[np.newaxis]],
            ]
        )
        dx = lu_solve(jac, res)
        l1, l2, v = _update_states(eos, temperature, [l1, l2, v], dx)

    raise NotConverged("Heteroazeotrope")


@time_logger(sections=["phase_equilibria"])
def heteroazeotrope_p(
    eos: EquationOfState,
    pressure: float,
    x_init: LiquidCompositions,
    options: SolverOptions = SolverOptions(),
    bubble_dew_options: BubbleDewOptions = (SolverOptions(), SolverOptions()),
) -> ThreePhaseEquilibrium:
    """Calculates the heteroazeotrope of a binary mixture at given pressure.

    Same as :func:`heteroazeotrope_t`, with the temperature as additional unknown and
    the pressure of all three phases fixed.

    """
    _check_binary(eos)
    max_iter, tol, verbosity = options.unwrap_or(MAX_ITER_HETERO, TOL_HETERO)
    nc = eos.components()

    vle1 = bubble_point_px(
        eos, pressure, _molefracs(x_init[0]), options=bubble_dew_options
    )
    vle2 = bubble_point_px(
        eos, pressure, _molefracs(x_init[1]), options=bubble_dew_options
    )
    t = 0.5 * (vle1.temperature + vle2.temperature)
    nv0 = 0.5 * (vle1.vapor.moles + vle2.vapor.moles)
    v = State.new_npt(eos, t, pressure, nv0, "vapor")
    l1 = State.new_partial_density(eos, t, vle1.liquid.partial_density)
    l2 = State.new_partial_density(eos, t, vle2.liquid.partial_density)

    mu_scale = R_IDEAL_MOL * t
    p_scale = pressure
    zeros = np.zeros((nc, nc))
    z = np.zeros(nc)
    log_iter(logger, verbosity, " iter |    residual    |  temperature")
    for k in range(1, max_iter + 1):
        mu_v = v.chemical_potential()
        res = np.concatenate(
            [
                (l1.chemical_potential() - mu_v) / mu_scale,
                (l2.chemical_potential() - mu_v) / mu_scale,
                [
                    (l1.pressure() - pressure) / p_scale,
                    (l2.pressure() - pressure) / p_scale,
                    (v.pressure() - pressure) / p_scale,
                ],
            ]
        )
        norm = float(np.linalg.norm(res))
        log_iter(logger, verbosity, " %4d | %14.8e | %14.8f", k, norm, t)
        if norm < tol:
            log_result(
                logger,
                verbosity,
                "Heteroazeotrope: p = %.8e Pa, T = %.5f K, converged in %d step(s)",
                pressure,
                t,
                k,
            )
            return ThreePhaseEquilibrium(v, l1, l2)

        # derivatives w.r.t. the partial densities and the temperature
        dmu_l1 = l1.dmu_dni() * l1.volume / mu_scale
        dmu_l2 = l2.dmu_dni() * l2.volume / mu_scale
        dmu_v = v.dmu_dni() * v.volume / mu_scale
        dp_l1 = l1.dp_dni() * l1.volume / p_scale
        dp_l2 = l2.dp_dni() * l2.volume / p_scale
        dp_v = v.dp_dni() * v.volume / p_scale
        dmu_dt_v = v.dmu_dt()
        dmu_dt_l1 = (l1.dmu_dt() - dmu_dt_v) / mu_scale
        dmu_dt_l2 = (l2.dmu_dt() - dmu_dt_v) / mu_scale
        dp_dt = np.array([l1.dp_dt(), l2.dp_dt(), v.dp_dt()]) / p_scale
        jac = np.block(
            [
                [dmu_l1, zeros, -dmu_v, dmu_dt_l1[:, np.newaxis]],
                [zeros, dmu_l2, -dmu_v, dmu_dt_l2[:, np.newaxis]],
                [dp_l1[np.newaxis], z[np.newaxis], z[np.newaxis], dp_dt[[0], None]],
                [z[np.newaxis], dp_l2[np.newaxis], z[np.newaxis], dp_dt[[1], None]],
                [z[np.newaxis], z[np.newaxis], dp_v[np.newaxis], dp_dt[[2], None]],
            ]
        )
        dx = lu_solve(jac, res)
        t_new = t - dx[-1]
        l1, l2, v = _update_states(eos, t_new, [l1, l2, v], dx[:-1])
        t = t_new

    raise NotConverged("Heteroazeotrope")
