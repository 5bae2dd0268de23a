"""Isothermal-isobaric two-phase flash.

The flash is initialized with the K-values of a stability analysis of the feed (or of
a given equilibrium). A few steps of successive substitution with the Rachford-Rice
equation are followed by a Newton method on the amounts of the components in the
vapor phase, which minimizes the Gibbs energy of the system.

References:
    [1] `Michelsen (1982) <https://doi.org/10.1016/0378-3812(82)85002-4>`_

"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

from ..equation_of_state import EquationOfState
from ..errors import NoPhaseSplit, NotConverged, TrivialSolution
from ..linalg import lu_solve
from ..solver_options import SolverOptions, log_iter, log_result
from ..state import State, stability_analysis
from ..utils import time_logger
from .phase_equilibrium import PhaseEquilibrium
from .rachford_rice import phase_compositions, rachford_rice

__all__ = ["tp_flash"]

logger = logging.getLogger(__name__)

MAX_ITER_TP: int = 100
"""Default maximum number of iterations of the flash."""

TOL_TP: float = 1e-10
"""Default tolerance of the logarithmic fugacity differences."""

SUCCESSIVE_SUBSTITUTION_STEPS: int = 5
"""Number of successive substitution steps before switching to the Newton method."""

MIN_PHASE_FRACTION: float = 1e-12
"""Phase fraction below which a phase is considered to vanish."""


def _initial_phases(
    eos: EquationOfState,
    temperature: float,
    pressure: float,
    feed: np.ndarray,
    volatile: np.ndarray,
    initial_state: Optional[PhaseEquilibrium],
    options: SolverOptions,
) -> tuple[State, State]:
    """Vapor and liquid from which the K-values of the first iteration are evaluated.

    The phases are taken from a previous equilibrium or from the stability analysis of
    the feed: Two unstable trial phases are used as they are, a single trial phase is
    paired with the feed. If some components are non-volatile, a vapor of the
    volatile components is paired with the feed as liquid.

    """
    if initial_state is not None:
        return initial_state.vapor, initial_state.liquid
    if not np.all(volatile | (feed == 0.0)):
        vapor = State.new_npt(
            eos, temperature, pressure, np.where(volatile, feed, 0.0), "vapor"
        )
        liquid = State.new_npt(eos, temperature, pressure, feed, "liquid")
        return vapor, liquid

    feed_state = State.new_npt(eos, temperature, pressure, feed)
    candidates = stability_analysis(feed_state, options)
    if not candidates:
        raise NoPhaseSplit()
    if len(candidates) == 1:
        phases = [candidates[0], feed_state]
    else:
        phases = candidates[:2]
    phases.sort(key=lambda s: s.density)
    return phases[0], phases[1]


def _k_values(vapor: State, liquid: State, volatile: np.ndarray) -> np.ndarray:
    """K-values ``phi^L / phi^V`` of the volatile components, zero otherwise."""
    k_values = np.zeros(volatile.shape[0])
    k_values[volatile] = np.exp(liquid.ln_phi()[volatile] - vapor.ln_phi()[volatile])
    return k_values


def _fugacity_residual(
    vapor: State, liquid: State, volatile: np.ndarray
) -> np.ndarray:
    """``ln f_i^V - ln f_i^L`` of the volatile components."""
    with np.errstate(divide="ignore", invalid="ignore"):
        g = (
            np.log(vapor.molefracs)
            + vapor.ln_phi()
            - np.log(liquid.molefracs)
            - liquid.ln_phi()
        )
    return g[volatile]


def _dln_fugacity_dn(state: State) -> np.ndarray:
    """Derivatives of the logarithmic fugacities w.r.t. the amounts of the components
    at constant temperature and pressure."""
    n = state.moles
    with np.errstate(divide="ignore"):
        return state.dln_phi_dnj() + np.diag(1.0 / n) - 1.0 / state.total_moles


@time_logger(sections=["phase_equilibria"])
def tp_flash(
    eos: EquationOfState,
    temperature: float,
    pressure: float,
    feed: np.ndarray,
    initial_state: Optional[PhaseEquilibrium] = None,
    options: SolverOptions = SolverOptions(),
    non_volatile_components: Optional[Sequence[int]] = None,
) -> PhaseEquilibrium:
    """Performs a flash at given temperature, pressure and feed.

    Parameters:
        eos: Equation of state.
        temperature: Temperature in ``[K]``.
        pressure: Pressure in ``[Pa]``.
        feed: ``shape=(num_components,)``

            Amounts of the components in the feed in ``[mol]``.
        initial_state: ``default=None``

            Equilibrium whose fugacity coefficients give the initial K-values. If not
            given, the flash is initialized with a stability analysis of the feed.
        options: Options of the flash and of the stability analysis.
        non_volatile_components: ``default=None``

            Indices of components which are not present in the vapor phase.

    Raises:
        NoPhaseSplit: If the feed is stable, if no vapor fraction in ``(0, 1)``
            satisfies the Rachford-Rice equation or if one of the phases vanishes.
        TrivialSolution: If both phases collapse onto the feed.
        NotConverged: If the iteration budget is exhausted.

    Returns:
        The equilibrium, with the phase of lower density as first state.

    """
    feed = eos.validate_moles(feed)
    max_iter, tol, verbosity = options.unwrap_or(MAX_ITER_TP, TOL_TP)
    total = float(feed.sum())
    z = feed / total

    volatile = np.ones(feed.shape[0], dtype=bool)
    if non_volatile_components is not None:
        volatile[list(non_volatile_components)] = False
    volatile &= feed > 0.0

    vapor, liquid = _initial_phases(
        eos, temperature, pressure, feed, volatile, initial_state, options
    )
    k_values = _k_values(vapor, liquid, volatile)
    init_v, init_l = vapor.density, liquid.density

    log_iter(logger, verbosity, " iter |    residual    |  vapor fraction")
    for k in range(1, max_iter + 1):
        newton = k > SUCCESSIVE_SUBSTITUTION_STEPS
        if newton:
            # Newton step on the vapor amounts of the volatile components
            g = _fugacity_residual(vapor, liquid, volatile)
            hess = _dln_fugacity_dn(vapor) + _dln_fugacity_dn(liquid)
            dn = lu_solve(hess[np.ix_(volatile, volatile)], g)
            n_v = vapor.moles.copy()
            n_v[volatile] -= dn
            n_l = feed - n_v
            # fall back to successive substitution if a phase is depleted
            newton = bool(
                np.all(n_v[volatile] > 0.0) and np.all(n_l[volatile] > 0.0)
            )
        if not newton:
            beta = rachford_rice(z, k_values)
            if np.isnan(beta):
                raise NoPhaseSplit()
            _, y = phase_compositions(z, k_values, beta)
            n_v = beta * total * y
            n_l = np.maximum(feed - n_v, 0.0)

        if min(n_v.sum(), n_l.sum()) <= MIN_PHASE_FRACTION * total:
            # one of the phases vanishes
            raise NoPhaseSplit()

        vapor = State.new_npt(eos, temperature, pressure, n_v, init_v)
        liquid = State.new_npt(eos, temperature, pressure, n_l, init_l)
        init_v, init_l = vapor.density, liquid.density

        if (
            np.linalg.norm(vapor.molefracs - liquid.molefracs) < 1e-8
            and abs(vapor.density - liquid.density) < 1e-8 * liquid.density
        ):
            raise TrivialSolution()

        g = _fugacity_residual(vapor, liquid, volatile)
        error = float(np.linalg.norm(g))
        log_iter(
            logger,
            verbosity,
            " %4d | %14.8e | %14.8f",
            k,
            error,
            vapor.total_moles / total,
        )
        if error < tol:
            log_result(
                logger,
                verbosity,
                "Tp flash: T = %.5f K, p = %.8e Pa, converged in %d step(s)",
                temperature,
                pressure,
                k,
            )
            return PhaseEquilibrium.from_states(vapor, liquid)

        k_values = _k_values(vapor, liquid, volatile)

    raise NotConverged("Tp flash")
