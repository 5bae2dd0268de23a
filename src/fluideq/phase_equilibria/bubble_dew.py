"""Bubble and dew point calculations for mixtures.

The composition of one phase (the liquid for bubble points, the vapor for dew points)
and either temperature or pressure are specified. The composition of the incipient
phase and the free intensive variable are found with two nested loops:

- The inner loop is a Newton method on the free variable, solving
  :math:`\\ln \\sum_i x_i K_i = 0`, with
  :math:`K_i = \\varphi_i^{\\text{spec}} / \\varphi_i^{\\text{incipient}}`.
- The outer loop updates the composition of the incipient phase by successive
  substitution, :math:`x_i^{\\text{incipient}} = x_i K_i / \\sum_j x_j K_j`.

"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from ..equation_of_state import EquationOfState
from ..errors import (
    EosError,
    IncompatibleComponents,
    IterationFailed,
    NotConverged,
    TrivialSolution,
)
from ..solver_options import SolverOptions, log_iter, log_result
from ..state import DensityInitialization, State
from ..utils import time_logger
from .phase_equilibrium import PhaseEquilibrium, TPSpec

__all__ = [
    "bubble_dew_point",
    "bubble_point_tx",
    "bubble_point_px",
    "dew_point_tx",
    "dew_point_px",
]

logger = logging.getLogger(__name__)

MAX_ITER_INNER: int = 20
"""Default maximum number of Newton iterations on temperature or pressure."""

TOL_INNER: float = 1e-10
"""Default tolerance of the inner loop."""

MAX_ITER_OUTER: int = 400
"""Default maximum number of composition updates."""

TOL_OUTER: float = 1e-10
"""Default tolerance of the composition of the incipient phase."""

MAX_ITER_INIT: int = 50
"""Maximum number of iterations of the initial temperature estimate."""

TRIAL_TEMPERATURE: float = 300.0
"""Initial temperature in ``[K]`` of the estimate at given pressure."""

TRIAL_PRESSURES: tuple[float, ...] = (1e5, 1e6, 1e7, 1e8)
"""Pressures in ``[Pa]`` at which liquid fugacities are evaluated for the initial
estimate at given temperature, tried in sequence."""

BubbleDewOptions = tuple[SolverOptions, SolverOptions]
"""Options of the inner and the outer loop."""


def _normalize(x: np.ndarray) -> np.ndarray:
    x = np.asarray(x, dtype=float)
    return x / x.sum()


def _liquid_fugacity(
    eos: EquationOfState, temperature: float, pressure: float, x: np.ndarray
) -> tuple[np.ndarray, State]:
    """Fugacities divided by mole fraction, ``phi_i p``, of a liquid."""
    liquid = State.new_npt(eos, temperature, pressure, x, "liquid")
    return np.exp(liquid.ln_phi()) * pressure, liquid


def _ideal_estimate_t(
    eos: EquationOfState, temperature: float, x: np.ndarray, bubble: bool
) -> tuple[float, np.ndarray]:
    """Pressure and incipient composition assuming an ideal vapor, at given
    temperature."""
    error: Optional[EosError] = None
    for p_trial in TRIAL_PRESSURES:
        try:
            f_l, _ = _liquid_fugacity(eos, temperature, p_trial, x)
        except EosError as err:
            error = err
            continue
        if bubble:
            p = float(np.sum(x * f_l))
            return p, _normalize(x * f_l / p)
        p = 1.0 / float(np.sum(x / f_l))
        return p, _normalize(x * p / f_l)
    if error is None:
        raise IterationFailed("Bubble/dew point initialization")
    raise error


def _ideal_estimate_p(
    eos: EquationOfState, pressure: float, x: np.ndarray, bubble: bool
) -> tuple[float, np.ndarray]:
    """Temperature and incipient composition assuming an ideal vapor, at given
    pressure.

    A Newton method in temperature is used on the logarithm of the estimated pressure.
    The temperature is decreased whenever no liquid root exists.

    """
    t = TRIAL_TEMPERATURE
    for _ in range(MAX_ITER_INIT):
        try:
            f_l, liquid = _liquid_fugacity(eos, t, pressure, x)
        except EosError:
            t *= 0.9
            continue
        dln_phi_dt = liquid.dln_phi_dt()
        if bubble:
            w = x * f_l
            p_est = float(w.sum())
            dlnp_dt = float(np.sum(w * dln_phi_dt)) / p_est
        else:
            w = x / f_l
            p_est = 1.0 / float(w.sum())
            dlnp_dt = float(np.sum(w * dln_phi_dt)) * p_est
        g = np.log(p_est / pressure)
        if abs(g) < 1e-8:
            break
        dt = float(np.clip(-g / dlnp_dt, -0.25 * t, 0.25 * t))
        t += dt
    else:
        raise NotConverged("Bubble/dew point initialization")

    if bubble:
        return t, _normalize(x * f_l / p_est)
    return t, _normalize(x * p_est / f_l)


def _inner_loop(
    eos: EquationOfState,
    tp_spec: TPSpec,
    temperature: float,
    pressure: float,
    x_spec: np.ndarray,
    x_inc: np.ndarray,
    init_spec: DensityInitialization,
    init_inc: DensityInitialization,
    options: SolverOptions,
) -> tuple[float, float, State, State]:
    """Newton iteration on the free intensive variable at fixed compositions."""
    max_iter, tol, verbosity = options.unwrap_or(MAX_ITER_INNER, TOL_INNER)
    t, p = temperature, pressure
    for k in range(1, max_iter + 1):
        try:
            spec = State.new_npt(eos, t, p, x_spec, init_spec)
            inc = State.new_npt(eos, t, p, x_inc, init_inc)
        except NotConverged as err:
            raise IterationFailed("Bubble/dew point inner loop") from err
        k_values = np.exp(spec.ln_phi() - inc.ln_phi())
        s = float(np.sum(x_spec * k_values))
        g = np.log(s)
        log_iter(
            logger, verbosity, "   inner %3d | %14.8e | %14.8f | %14.8e", k, g, t, p
        )
        if abs(g) < tol:
            return t, p, spec, inc

        if tp_spec is TPSpec.TEMPERATURE:
            dln_k = spec.dln_phi_dp() - inc.dln_phi_dp()
            dg = np.sum(x_spec * k_values * dln_k) / s
            p -= float(np.clip(g / dg, -0.5 * p, 0.5 * p))
        else:
            dln_k = spec.dln_phi_dt() - inc.dln_phi_dt()
            dg = np.sum(x_spec * k_values * dln_k) / s
            t -= float(np.clip(g / dg, -0.25 * t, 0.25 * t))
        if not (np.isfinite(t) and np.isfinite(p)):
            raise IterationFailed("Bubble/dew point inner loop")
        init_spec, init_inc = spec.density, inc.density

    raise IterationFailed("Bubble/dew point inner loop")


@time_logger(sections=["phase_equilibria"])
def bubble_dew_point(
    eos: EquationOfState,
    tp_spec: TPSpec,
    tp_value: float,
    molefracs_spec: np.ndarray,
    tp_init: Optional[float] = None,
    molefracs_init: Optional[np.ndarray] = None,
    bubble: bool = True,
    options: BubbleDewOptions = (SolverOptions(), SolverOptions()),
) -> PhaseEquilibrium:
    """Calculates a bubble or dew point of a mixture.

    Parameters:
        eos: Equation of state.
        tp_spec: Whether ``tp_value`` is the temperature or the pressure.
        tp_value: Temperature in ``[K]`` or pressure in ``[Pa]``.
        molefracs_spec: ``shape=(num_components,)``

            Composition of the specified phase, i.e. of the liquid for bubble points
            and of the vapor for dew points.
        tp_init: ``default=None``

            Initial guess of the free intensive variable (pressure if the
            temperature is given and vice versa).
        molefracs_init: ``default=None``

            Initial guess of the composition of the incipient phase.
        bubble: ``default=True``

            Calculate a bubble point if ``True``, a dew point otherwise.
        options: Options of the inner loop (Newton on temperature or pressure) and of
            the outer loop (composition of the incipient phase).

    Raises:
        IncompatibleComponents: If the composition does not match the equation of
            state.
        IterationFailed: If the inner loop does not converge.
        NotConverged: If the outer loop does not converge.
        TrivialSolution: If the incipient phase collapses onto the specified phase.

    Returns:
        The equilibrium, with the vapor as first state.

    """
    nc = eos.components()
    x_spec = _normalize(molefracs_spec)
    if x_spec.shape != (nc,):
        raise IncompatibleComponents(nc, x_spec.size)
    options_inner, options_outer = options
    max_iter, tol, verbosity = options_outer.unwrap_or(MAX_ITER_OUTER, TOL_OUTER)

    init_spec: DensityInitialization = "liquid" if bubble else "vapor"
    init_inc: DensityInitialization = "vapor" if bubble else "liquid"

    # initial guess of the free variable and the incipient composition
    if tp_spec is TPSpec.TEMPERATURE:
        t = tp_value
        if tp_init is None:
            p, x_inc = _ideal_estimate_t(eos, t, x_spec, bubble)
        else:
            p, x_inc = tp_init, x_spec
    else:
        p = tp_value
        if tp_init is None:
            t, x_inc = _ideal_estimate_p(eos, p, x_spec, bubble)
        else:
            t, x_inc = tp_init, x_spec
    if molefracs_init is not None:
        x_inc = _normalize(molefracs_init)
        if x_inc.shape != (nc,):
            raise IncompatibleComponents(nc, x_inc.size)

    kind = "Bubble" if bubble else "Dew"
    log_iter(logger, verbosity, " outer |    residual    |  temperature   |   pressure")
    for k in range(1, max_iter + 1):
        t, p, spec, inc = _inner_loop(
            eos, tp_spec, t, p, x_spec, x_inc, init_spec, init_inc, options_inner
        )
        k_values = np.exp(spec.ln_phi() - inc.ln_phi())
        x_new = x_spec * k_values
        x_new /= x_new.sum()
        error = float(np.linalg.norm(x_new - x_inc))
        log_iter(logger, verbosity, " %5d | %14.8e | %14.8f | %14.8e", k, error, t, p)

        if (
            np.linalg.norm(x_new - x_spec) < 1e-8
            and abs(spec.density - inc.density) < 1e-8 * spec.density
        ):
            raise TrivialSolution()

        x_inc = x_new
        init_spec, init_inc = spec.density, inc.density
        if error < tol:
            inc = State.new_npt(eos, t, p, x_inc, init_inc)
            log_result(
                logger,
                verbosity,
                "%s point: T = %.5f K, p = %.8e Pa, converged in %d step(s)",
                kind,
                t,
                p,
                k,
            )
            if bubble:
                return PhaseEquilibrium(inc, spec)
            return PhaseEquilibrium(spec, inc)

    raise NotConverged(f"{kind} point")


def bubble_point_tx(
    eos: EquationOfState,
    temperature: float,
    liquid_molefracs: np.ndarray,
    pressure: Optional[float] = None,
    vapor_molefracs: Optional[np.ndarray] = None,
    options: BubbleDewOptions = (SolverOptions(), SolverOptions()),
) -> PhaseEquilibrium:
    """Bubble point at given temperature and liquid composition."""
    return bubble_dew_point(
        eos,
        TPSpec.TEMPERATURE,
        temperature,
        liquid_molefracs,
        pressure,
        vapor_molefracs,
        True,
        options,
    )


def bubble_point_px(
    eos: EquationOfState,
    pressure: float,
    liquid_molefracs: np.ndarray,
    temperature: Optional[float] = None,
    vapor_molefracs: Optional[np.ndarray] = None,
    options: BubbleDewOptions = (SolverOptions(), SolverOptions()),
) -> PhaseEquilibrium:
    """Bubble point at given pressure and liquid composition."""
    return bubble_dew_point(
        eos,
        TPSpec.PRESSURE,
        pressure,
        liquid_molefracs,
        temperature,
        vapor_molefracs,
        True,
        options,
    )


def dew_point_tx(
    eos: EquationOfState,
    temperature: float,
    vapor_molefracs: np.ndarray,
    pressure: Optional[float] = None,
    liquid_molefracs: Optional[np.ndarray] = None,
    options: BubbleDewOptions = (SolverOptions(), SolverOptions()),
) -> PhaseEquilibrium:
    """Dew point at given temperature and vapor composition."""
    return bubble_dew_point(
        eos,
        TPSpec.TEMPERATURE,
        temperature,
        vapor_molefracs,
        pressure,
        liquid_molefracs,
        False,
        options,
    )


def dew_point_px(
    eos: EquationOfState,
    pressure: float,
    vapor_molefracs: np.ndarray,
    temperature: Optional[float] = None,
    liquid_molefracs: Optional[np.ndarray] = None,
    options: BubbleDewOptions = (SolverOptions(), SolverOptions()),
) -> PhaseEquilibrium:
    """Dew point at given pressure and vapor composition."""
    return bubble_dew_point(
        eos,
        TPSpec.PRESSURE,
        pressure,
        vapor_molefracs,
        temperature,
        liquid_molefracs,
        False,
        options,
    )
