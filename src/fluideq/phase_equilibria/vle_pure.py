"""Vapor-liquid equilibria of pure components.

At fixed temperature, the densities of both phases are found with a Newton method on
the conditions of mechanical and chemical equilibrium. At fixed pressure, a Newton
method in temperature is used on the equality of the fugacities.

"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .._core import R_IDEAL_MOL
from ..equation_of_state import EquationOfState
from ..errors import (
    EosError,
    IncompatibleComponents,
    IterationFailed,
    NotConverged,
    SuperCritical,
    UndeterminedState,
)
from ..linalg import lu_solve
from ..solver_options import SolverOptions, log_iter, log_result
from ..state import DensityInitialization, State, critical_point
from ..utils import time_logger
from .phase_equilibrium import PhaseEquilibrium

__all__ = [
    "pure_t",
    "pure_p",
    "vle_pure_comps",
    "vapor_pressure",
    "boiling_temperature",
]

logger = logging.getLogger(__name__)

MAX_ITER_PURE: int = 50
"""Default maximum number of iterations of the pure component solvers."""

TOL_PURE: float = 1e-12
"""Default tolerance of the pure component solvers."""

TRIAL_PRESSURES: tuple[float, ...] = (1e5, 1e6, 1e7, 1e8)
"""Pressures in ``[Pa]`` at which a liquid root is searched to estimate the vapor
pressure, tried in sequence."""

_TRIVIAL_DENSITY_RATIO: float = 1e-6
"""Relative difference of the densities below which both phases are considered
identical."""


def _check_pure(eos: EquationOfState) -> None:
    if eos.components() != 1:
        raise IncompatibleComponents(1, eos.components())


def _is_trivial(vapor: State, liquid: State) -> bool:
    return abs(liquid.density - vapor.density) < _TRIVIAL_DENSITY_RATIO * liquid.density


def _estimate_vapor_pressure(eos: EquationOfState, temperature: float) -> float:
    """Vapor pressure estimate assuming an ideal vapor phase, i.e. the fugacity of the
    liquid at the lowest trial pressure at which a liquid root exists."""
    error: Optional[EosError] = None
    for p_trial in TRIAL_PRESSURES:
        try:
            liquid = State.new_npt(eos, temperature, p_trial, None, "liquid")
        except EosError as err:
            error = err
            continue
        return float(np.exp(liquid.ln_phi()[0]) * p_trial)
    if error is None:
        raise IterationFailed("pure_t initialization")
    raise error


def _init_pure_t(eos: EquationOfState, temperature: float) -> PhaseEquilibrium:
    """Liquid and vapor root at the estimated vapor pressure.

    If one of the roots does not exist, the pressure is moved into the interval
    between the spinodal pressures of liquid and vapor by bisection in ``ln p``.
    Roots which coincide indicate a supercritical temperature.

    """
    p = _estimate_vapor_pressure(eos, temperature)
    p_lo, p_hi = 0.0, np.inf
    for _ in range(MAX_ITER_PURE):
        try:
            liquid = State.new_npt(eos, temperature, p, None, "liquid")
        except EosError:
            # below the liquid spinodal
            p_lo = p
            p = 2.0 * p if np.isinf(p_hi) else float(np.sqrt(p * p_hi))
            continue
        try:
            vapor = State.new_npt(eos, temperature, p, None, "vapor")
        except EosError:
            # above the vapor spinodal
            p_hi = p
            p = 0.5 * p if p_lo == 0.0 else float(np.sqrt(p * p_lo))
            continue
        if _is_trivial(vapor, liquid):
            raise SuperCritical()
        return PhaseEquilibrium(vapor, liquid)
    raise NotConverged("pure_t initialization")


def _fugacity_step(
    eos: EquationOfState, temperature: float, vle: PhaseEquilibrium
) -> PhaseEquilibrium:
    """Successive substitution of the pressure, ``p = p * phi_l / phi_v``, used when a
    Newton step leaves the stable branches."""
    p = vle.vapor.pressure()
    ln_k = vle.liquid.ln_phi()[0] - vle.vapor.ln_phi()[0]
    p = p * float(np.exp(ln_k))
    liquid = State.new_npt(eos, temperature, p, None, vle.liquid.density)
    vapor = State.new_npt(eos, temperature, p, None, vle.vapor.density)
    return PhaseEquilibrium(vapor, liquid)


@time_logger(sections=["phase_equilibria"])
def pure_t(
    eos: EquationOfState,
    temperature: float,
    initial_state: Optional[PhaseEquilibrium] = None,
    options: SolverOptions = SolverOptions(),
) -> PhaseEquilibrium:
    """Calculates the vapor-liquid equilibrium of a pure component at given
    temperature.

    The unknowns are the molar densities of liquid and vapor. The residual

    .. math::

        \\left[\\frac{p_l - p_v}{R T \\rho_v}, \\frac{\\mu_l - \\mu_v}{R T}\\right]

    is solved with a Newton method, where the derivatives of the chemical potentials
    follow from the Gibbs-Duhem relation :math:`d\\mu = dp / \\rho`.

    Parameters:
        eos: Equation of state of a pure component.
        temperature: Temperature in ``[K]``.
        initial_state: ``default=None``

            Initial guess. If not given, the vapor pressure is estimated from the
            fugacity of the liquid assuming an ideal vapor.
        options: Options of the Newton solver.

    Raises:
        IncompatibleComponents: If the equation of state is not a pure component.
        SuperCritical: If the phases collapse onto each other.
        NotConverged: If the iteration budget is exhausted.

    Returns:
        The vapor and the liquid state in equilibrium.

    """
    _check_pure(eos)
    max_iter, tol, verbosity = options.unwrap_or(MAX_ITER_PURE, TOL_PURE)
    rt = R_IDEAL_MOL * temperature
    max_density = eos.max_density()

    if initial_state is None:
        vle = _init_pure_t(eos, temperature)
    else:
        vle = PhaseEquilibrium(
            State.new_density(eos, temperature, initial_state.vapor.density),
            State.new_density(eos, temperature, initial_state.liquid.density),
        )

    log_iter(
        logger, verbosity, " iter |    residual    |  density vap   |  density liq"
    )
    for k in range(1, max_iter + 1):
        vapor, liquid = vle.vapor, vle.liquid
        rho_v, rho_l = vapor.density, liquid.density
        p_scale = rt * rho_v
        dp_l = liquid.dp_drho()
        dp_v = vapor.dp_drho()

        res = np.array(
            [
                (liquid.pressure() - vapor.pressure()) / p_scale,
                (liquid.chemical_potential()[0] - vapor.chemical_potential()[0]) / rt,
            ]
        )
        norm = float(np.linalg.norm(res))
        log_iter(
            logger, verbosity, " %4d | %14.8e | %14.8f | %14.8f", k, norm, rho_v, rho_l
        )
        if norm < tol:
            if _is_trivial(vapor, liquid):
                raise SuperCritical()
            log_result(
                logger,
                verbosity,
                "pure_t: T = %.5f K, p = %.8e Pa, converged in %d step(s)",
                temperature,
                vapor.pressure(),
                k,
            )
            return vle

        jac = np.array(
            [
                [dp_l / p_scale, -dp_v / p_scale],
                [dp_l / (rho_l * rt), -dp_v / (rho_v * rt)],
            ]
        )
        delta = lu_solve(jac, res)
        rho_l_new = rho_l - delta[0]
        rho_v_new = rho_v - delta[1]

        newton_valid = 0.0 < rho_v_new < rho_l_new < max_density
        if newton_valid:
            vapor_new = State.new_density(eos, temperature, rho_v_new)
            liquid_new = State.new_density(eos, temperature, rho_l_new)
            newton_valid = vapor_new.dp_drho() > 0.0 and liquid_new.dp_drho() > 0.0
        if newton_valid:
            vle = PhaseEquilibrium(vapor_new, liquid_new)
        else:
            vle = _fugacity_step(eos, temperature, vle)

        if _is_trivial(vle.vapor, vle.liquid):
            raise SuperCritical()

    raise NotConverged("pure_t")


def _initial_temperature_pure_p(eos: EquationOfState, pressure: float) -> float:
    """Temperature estimate from the critical point, assuming a linear dependency of
    the logarithmic vapor pressure on the inverse temperature."""
    cp = critical_point(eos)
    tc, pc = cp.temperature, cp.pressure()
    if pressure >= pc:
        raise SuperCritical(
            f"Pressure {pressure} Pa exceeds the critical pressure {pc} Pa."
        )
    t0 = tc / (1.0 - 3.0 / (7.0 * np.log(10.0)) * np.log(pressure / pc))
    return float(min(t0, 0.99 * tc))


@time_logger(sections=["phase_equilibria"])
def pure_p(
    eos: EquationOfState,
    pressure: float,
    initial_state: Optional[PhaseEquilibrium] = None,
    options: SolverOptions = SolverOptions(),
) -> PhaseEquilibrium:
    """Calculates the vapor-liquid equilibrium of a pure component at given pressure.

    A Newton method in temperature solves :math:`\\ln\\varphi_l - \\ln\\varphi_v = 0`,
    with the derivative :math:`-(h_l - h_v) / (R T^2)`.

    Parameters:
        eos: Equation of state of a pure component.
        pressure: Pressure in ``[Pa]``.
        initial_state: ``default=None``

            Initial guess. If not given, the temperature is estimated from the critical
            point.
        options: Options of the Newton solver.

    Raises:
        IncompatibleComponents: If the equation of state is not a pure component.
        SuperCritical: If the pressure is above the critical pressure, or if the
            phases collapse onto each other.
        NotConverged: If the iteration budget is exhausted.

    Returns:
        The vapor and the liquid state in equilibrium.

    """
    _check_pure(eos)
    max_iter, tol, verbosity = options.unwrap_or(MAX_ITER_PURE, TOL_PURE)

    init_l: DensityInitialization
    init_v: DensityInitialization
    if initial_state is None:
        t = _initial_temperature_pure_p(eos, pressure)
        init_l, init_v = "liquid", "vapor"
    else:
        t = initial_state.temperature
        init_l, init_v = initial_state.liquid.density, initial_state.vapor.density

    t_valid: Optional[float] = None
    log_iter(logger, verbosity, " iter |    residual    |  temperature")
    for k in range(1, max_iter + 1):
        try:
            liquid = State.new_npt(eos, t, pressure, None, init_l)
        except EosError:
            # no liquid root: temperature too high
            t = 0.9 * t if t_valid is None else 0.5 * (t + t_valid)
            init_l, init_v = "liquid", "vapor"
            continue
        try:
            vapor = State.new_npt(eos, t, pressure, None, init_v)
        except EosError:
            # no vapor root: temperature too low
            t = 1.1 * t if t_valid is None else 0.5 * (t + t_valid)
            init_l, init_v = "liquid", "vapor"
            continue

        if _is_trivial(vapor, liquid):
            if t_valid is None:
                raise SuperCritical()
            t = 0.5 * (t + t_valid)
            init_l, init_v = "liquid", "vapor"
            continue
        t_valid = t

        f = liquid.ln_phi()[0] - vapor.ln_phi()[0]
        log_iter(logger, verbosity, " %4d | %14.8e | %14.8f", k, abs(f), t)
        if abs(f) < tol:
            log_result(
                logger,
                verbosity,
                "pure_p: p = %.8e Pa, T = %.5f K, converged in %d step(s)",
                pressure,
                t,
                k,
            )
            return PhaseEquilibrium(vapor, liquid)

        df = -(liquid.molar_enthalpy() - vapor.molar_enthalpy()) / (
            R_IDEAL_MOL * t * t
        )
        dt = float(np.clip(-f / df, -0.25 * t, 0.25 * t))
        t += dt
        init_l, init_v = liquid.density, vapor.density

    raise NotConverged("pure_p")


@time_logger(sections=["phase_equilibria"])
def vle_pure_comps(
    eos: EquationOfState,
    temperature: Optional[float] = None,
    pressure: Optional[float] = None,
) -> list[Optional[PhaseEquilibrium]]:
    """Calculates the vapor-liquid equilibria of all pure components of a mixture at
    given temperature or pressure.

    The resulting states belong to the equation of state of the mixture, with one mole
    of the respective component and no other components.

    Parameters:
        eos: Equation of state.
        temperature: Temperature in ``[K]``.
        pressure: Pressure in ``[Pa]``. Exactly one of ``temperature`` and ``pressure``
            must be given.

    Returns:
        One entry per component, ``None`` where the calculation failed, e.g. because
        the component is supercritical.

    """
    if (temperature is None) == (pressure is None):
        raise UndeterminedState("Specify either temperature or pressure.")

    nc = eos.components()
    out: list[Optional[PhaseEquilibrium]] = []
    for i in range(nc):
        pure_eos = eos.subset([i])
        try:
            if temperature is not None:
                vle = pure_t(pure_eos, temperature)
            else:
                vle = pure_p(pure_eos, pressure)  # type: ignore[arg-type]
        except (EosError, np.linalg.LinAlgError) as err:
            logger.debug("VLE of pure component %d failed: %s", i, err)
            out.append(None)
            continue

        moles = np.zeros(nc)
        moles[i] = 1.0
        states = [
            State(eos, s.temperature, s.volume / s.total_moles, moles)
            for s in vle.states
        ]
        out.append(PhaseEquilibrium(*states))
    return out


def vapor_pressure(eos: EquationOfState, temperature: float) -> list[Optional[float]]:
    """Vapor pressures in ``[Pa]`` of all pure components at given temperature,
    ``None`` for components without a vapor-liquid equilibrium."""
    return [
        None if vle is None else vle.pressure()
        for vle in vle_pure_comps(eos, temperature=temperature)
    ]


def boiling_temperature(eos: EquationOfState, pressure: float) -> list[Optional[float]]:
    """Boiling temperatures in ``[K]`` of all pure components at given pressure,
    ``None`` for components without a vapor-liquid equilibrium."""
    return [
        None if vle is None else vle.temperature
        for vle in vle_pure_comps(eos, pressure=pressure)
    ]
