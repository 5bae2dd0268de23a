"""Critical point solvers for pure components and mixtures of fixed composition, and
for binary mixtures at given temperature or pressure.

The critical point of a mixture with amounts :math:`n_i` is characterized by two
conditions on the Helmholtz energy :math:`F = A / (RT)` (see Michelsen and Mollerup,
Thermodynamic Models: Fundamentals & Computational Aspects):

1. The smallest eigenvalue of :math:`Q_{ij} = \\sqrt{n_i n_j}
   \\partial^2 F / \\partial n_i \\partial n_j` vanishes (stability limit).
2. The third derivative of :math:`F` along :math:`\\Delta n_i = s u_i \\sqrt{n_i}`,
   with :math:`u` the corresponding eigenvector, vanishes.

Both conditions are solved with a Newton method in temperature and density. The
Hessian is obtained with hyper-dual numbers, the third derivative with
:class:`~fluideq.dual.Dual3`, both nested over :class:`~fluideq.dual.Dual` to get the
Jacobian of the residual.

"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import numpy as np
import scipy.optimize

from ..dual import Dual, Dual3, HyperDual, eps, value
from ..equation_of_state import EquationOfState, StateHD
from ..errors import (
    EosError,
    IncompatibleComponents,
    IterationFailed,
    NotConverged,
    UndeterminedState,
)
from ..linalg import lu_solve, smallest_eigenpair
from ..solver_options import SolverOptions, log_iter, log_result
from ..utils import time_logger
from .state import State

__all__ = ["critical_point", "critical_point_pure", "critical_point_binary"]

logger = logging.getLogger(__name__)

MAX_ITER_CRIT_POINT: int = 50
"""Default maximum number of Newton iterations of the critical point solver."""

TOL_CRIT_POINT: float = 1e-8
"""Default tolerance of the critical point residual."""

TRIAL_TEMPERATURES: tuple[float, ...] = (300.0, 700.0, 500.0)
"""Initial temperatures in ``[K]`` tried in sequence if none is given."""


def _critical_point_objective(
    eos: EquationOfState, temperature: Dual, density: Dual, moles: np.ndarray
) -> tuple[Any, Any]:
    """Residual of the critical point conditions, differentiable with respect to the
    seeded direction of ``temperature`` and ``density``."""
    nc = moles.shape[0]
    sqrt_n = np.sqrt(moles)
    volume = moles.sum() / density
    ideal_gas = eos.ideal_gas()

    def helmholtz(state: StateHD) -> Any:
        return eos.residual_helmholtz(state) + ideal_gas.helmholtz(state)

    # scaled Hessian w.r.t. the amounts of substance
    t_hd = HyperDual(temperature)
    v_hd = HyperDual(volume)
    q = np.empty((nc, nc), dtype=object)
    for i in range(nc):
        for j in range(i, nc):
            n = [HyperDual(Dual(m)) for m in moles]
            if i == j:
                n[i] = HyperDual(Dual(moles[i]), 1.0, 1.0, 0.0)
            else:
                n[i] = HyperDual(Dual(moles[i]), 1.0, 0.0, 0.0)
                n[j] = HyperDual(Dual(moles[j]), 0.0, 1.0, 0.0)
            f = helmholtz(StateHD(t_hd, v_hd, n))
            q[i, j] = q[j, i] = f.eps1eps2 * (sqrt_n[i] * sqrt_n[j])

    eigenvalue, eigenvector = smallest_eigenpair(q)

    # third derivative along the eigenvector
    n3 = [Dual3(Dual(moles[i]), eigenvector[i] * sqrt_n[i]) for i in range(nc)]
    f3 = helmholtz(StateHD(Dual3(temperature), Dual3(volume), n3))
    return eigenvalue, f3.v3


def _critical_point_newton(
    eos: EquationOfState,
    moles: np.ndarray,
    initial_temperature: float,
    options: SolverOptions,
) -> State:
    max_iter, tol, verbosity = options.unwrap_or(MAX_ITER_CRIT_POINT, TOL_CRIT_POINT)
    max_density = eos.max_density(moles)
    t = initial_temperature
    rho = 0.3 * max_density

    log_iter(logger, verbosity, " iter |    residual    |  temperature   |    density")
    log_iter(logger, verbosity, " %4d |                | %14.8f | %14.8f", 0, t, rho)
    for k in range(1, max_iter + 1):
        res_t = _critical_point_objective(eos, Dual(t, 1.0), Dual(rho, 0.0), moles)
        res_r = _critical_point_objective(eos, Dual(t, 0.0), Dual(rho, 1.0), moles)
        res = np.array([value(r) for r in res_t])
        jac = np.array(
            [
                [eps(res_t[0]), eps(res_r[0])],
                [eps(res_t[1]), eps(res_r[1])],
            ],
            dtype=float,
        )
        if not np.all(np.isfinite(res)):
            raise IterationFailed("Critical point")
        delta = lu_solve(jac, res)

        # the step is shortened as a whole, keeping its direction
        scale = min(
            1.0,
            0.25 * t / max(abs(delta[0]), 1e-300),
            0.03 * max_density / max(abs(delta[1]), 1e-300),
        )
        delta = scale * delta
        t -= float(delta[0])
        rho = max(rho - float(delta[1]), 1e-4 * max_density)

        norm = float(np.linalg.norm(res))
        log_iter(logger, verbosity, " %4d | %14.8e | %14.8f | %14.8f", k, norm, t, rho)
        if norm < tol:
            log_result(
                logger,
                verbosity,
                "Critical point calculation converged in %d step(s)",
                k,
            )
            return State(eos, t, moles.sum() / rho, moles)

    raise NotConverged("Critical point")


@time_logger(sections=["critical_point"])
def critical_point(
    eos: EquationOfState,
    moles: Optional[np.ndarray] = None,
    initial_temperature: Optional[float] = None,
    options: SolverOptions = SolverOptions(),
) -> State:
    """Calculates the critical point of a system with fixed composition.

    Parameters:
        eos: Equation of state.
        moles: ``shape=(num_components,), default=None``

            Composition of the system in ``[mol]``. Can be omitted for pure
            components.
        initial_temperature: ``default=None``

            Initial guess of the critical temperature in ``[K]``. If not given, the
            temperatures in :data:`TRIAL_TEMPERATURES` are tried in sequence.
        options: Options of the Newton solver.

    Raises:
        NotConverged: If the solver does not converge for any initial temperature.

    Returns:
        The critical state.

    """
    moles = eos.validate_moles(moles)
    trials: Sequence[float] = (
        TRIAL_TEMPERATURES if initial_temperature is None else (initial_temperature,)
    )
    error: Exception = NotConverged("Critical point")
    for t0 in trials:
        try:
            return _critical_point_newton(eos, moles, t0, options)
        except (EosError, np.linalg.LinAlgError) as err:
            logger.debug("Critical point from T = %.2f K failed: %s", t0, err)
            error = err
    raise error


@time_logger(sections=["critical_point"])
def critical_point_pure(
    eos: EquationOfState,
    initial_temperature: Optional[float] = None,
    options: SolverOptions = SolverOptions(),
) -> list[State]:
    """Calculates the critical points of all pure components of a mixture.

    Returns:
        One critical state per component, each with respect to the equation of state
        of the pure component.

    """
    return [
        critical_point(eos.subset([i]), None, initial_temperature, options)
        for i in range(eos.components())
    ]


@time_logger(sections=["critical_point"])
def critical_point_binary(
    eos: EquationOfState,
    temperature: Optional[float] = None,
    pressure: Optional[float] = None,
    initial_temperature: Optional[float] = None,
    options: SolverOptions = SolverOptions(),
) -> State:
    """Calculates the critical point of a binary mixture at given temperature or
    pressure.

    The mole fraction of the first component is found with Brent's method on the
    interval ``[1e-10, 1 - 1e-10]``, solving for the critical temperature (or
    pressure) of the mixture to match the specification.

    Parameters:
        eos: Equation of state of a binary mixture.
        temperature: Temperature in ``[K]``.
        pressure: Pressure in ``[Pa]``. Exactly one of ``temperature`` and ``pressure``
            must be given.
        initial_temperature: Initial guess for the inner critical point calculations.
        options: Options of Brent's method, also passed to the inner critical point
            calculations.

    Raises:
        IncompatibleComponents: If the mixture is not binary.
        UndeterminedState: If not exactly one of ``temperature`` and ``pressure`` is
            given.
        NotConverged: If the specification is not bracketed by the pure components
            or the iteration does not converge.

    Returns:
        The critical state.

    """
    if eos.components() != 2:
        raise IncompatibleComponents(2, eos.components())
    if (temperature is None) == (pressure is None):
        raise UndeterminedState("Specify either temperature or pressure.")

    max_iter, tol, verbosity = options.unwrap_or(MAX_ITER_CRIT_POINT, TOL_CRIT_POINT)
    states: dict[float, State] = {}

    def critical_state(x: float) -> State:
        if x not in states:
            states[x] = critical_point(
                eos, np.array([x, 1.0 - x]), initial_temperature, options
            )
        return states[x]

    def objective(x: float) -> float:
        state = critical_state(x)
        if temperature is not None:
            return state.temperature - temperature
        return state.pressure() - pressure  # type: ignore[operator]

    x_lo, x_hi = 1e-10, 1.0 - 1e-10
    if objective(x_lo) * objective(x_hi) > 0.0:
        raise NotConverged("Binary critical point")

    x, result = scipy.optimize.brentq(
        objective, x_lo, x_hi, xtol=tol, maxiter=max_iter, full_output=True, disp=False
    )
    if not result.converged:
        raise NotConverged("Binary critical point")
    log_result(
        logger,
        verbosity,
        "Binary critical point converged in %d step(s), x = %.8f",
        result.iterations,
        x,
    )
    return critical_state(x)
