"""Root finding for the density at given temperature, pressure and composition."""

from __future__ import annotations

import logging
from typing import Literal, Optional

import numpy as np

from .._core import R_IDEAL_MOL
from ..dual import HyperDual
from ..equation_of_state import EquationOfState, StateHD
from ..errors import InvalidState, IterationFailed, NotConverged

__all__ = ["density_iteration", "pressure_and_derivative"]

logger = logging.getLogger(__name__)

MAX_ITER_DENSITY: int = 50
"""Maximum number of Newton iterations of :func:`density_iteration`."""

TOL_DENSITY: float = 1e-12
"""Relative tolerance of the density in :func:`density_iteration`."""

BRANCH_SAMPLES: int = 16
"""Number of densities at which the sign of ``dp / drho`` is checked to verify that a
root lies on the requested branch."""


def pressure_and_derivative(
    eos: EquationOfState, temperature: float, density: float, moles: np.ndarray
) -> tuple[float, float]:
    """Pressure and its derivative with respect to the molar density at constant
    temperature and composition.

    Parameters:
        eos: Equation of state.
        temperature: Temperature in ``[K]``.
        density: Total molar density in ``[mol / m^3]``.
        moles: ``shape=(num_components,)``

            Amounts of the components in ``[mol]``.

    Returns:
        The pressure in ``[Pa]`` and ``dp / drho`` in ``[Pa m^3 / mol]``.

    """
    n = float(moles.sum())
    v = n / density
    rt = R_IDEAL_MOL * temperature
    state = StateHD(temperature, HyperDual(v, 1.0, 1.0, 0.0), moles)
    a = eos.residual_helmholtz(state)
    p = n * rt / v - rt * a.eps1
    dp_dv = -n * rt / v**2 - rt * a.eps1eps2
    return p, -dp_dv * v * v / n


def _is_monotonous(
    eos: EquationOfState,
    temperature: float,
    moles: np.ndarray,
    rho_from: float,
    rho_to: float,
) -> bool:
    """Checks ``dp / drho > 0`` at equidistant densities strictly between both
    bounds."""
    for rho in np.linspace(rho_from, rho_to, BRANCH_SAMPLES + 2)[1:-1]:
        _, dp_drho = pressure_and_derivative(eos, temperature, float(rho), moles)
        if not dp_drho > 0.0:
            return False
    return True


def density_iteration(
    eos: EquationOfState,
    temperature: float,
    pressure: float,
    moles: np.ndarray,
    initial_density: float,
    branch: Optional[Literal["vapor", "liquid"]] = None,
) -> float:
    """Newton iteration for the molar density at which the equation of state yields
    the given pressure.

    Steps into the mechanically unstable region (``dp / drho <= 0``) are bisected back
    towards the last stable iterate. A Newton step may still jump across the unstable
    region. Therefore the root is only accepted if the pressure is monotonous between
    the root and

    - zero density, if ``branch == "vapor"``,
    - the maximum density, if ``branch == "liquid"``,
    - the first stable iterate otherwise.

    Parameters:
        eos: Equation of state.
        temperature: Temperature in ``[K]``.
        pressure: Pressure in ``[Pa]``.
        moles: ``shape=(num_components,)``

            Amounts of the components in ``[mol]``.
        initial_density: Initial guess of the molar density in ``[mol / m^3]``.
        branch: ``default=None``

            The branch of the pressure isotherm the root has to lie on.

    Raises:
        InvalidState: If the initial density is not positive.
        IterationFailed: If no root exists on the requested branch.
        NotConverged: If the iteration budget is exhausted.

    Returns:
        The molar density in ``[mol / m^3]``.

    """
    if not initial_density > 0.0:
        raise InvalidState("density_iteration", "density", initial_density)
    max_density = eos.max_density(moles)
    rho = min(initial_density, 0.99 * max_density)
    liquid_like = rho > 0.5 * max_density

    rho_stable = None
    rho_first = None
    for k in range(1, MAX_ITER_DENSITY + 1):
        p, dp_drho = pressure_and_derivative(eos, temperature, rho, moles)

        if not np.isfinite(p) or dp_drho <= 0.0:
            if rho_stable is None:
                # The initial guess lies in the unstable region
                rho = 0.5 * (rho + max_density) if liquid_like else 0.5 * rho
            else:
                rho_unstable = rho
                rho = 0.5 * (rho_stable + rho_unstable)
                if abs(rho_unstable - rho_stable) < 1e-10 * rho:
                    raise IterationFailed("density_iteration")
            continue

        rho_stable = rho
        if rho_first is None:
            rho_first = rho
        delta = (p - pressure) / dp_drho
        rho_new = rho - delta
        if rho_new <= 0.0:
            rho_new = 0.5 * rho
        elif rho_new >= max_density:
            rho_new = 0.5 * (rho + max_density)

        logger.debug(
            "density iteration %3d: rho = %.12e, dp = %.6e", k, rho, p - pressure
        )
        if abs(delta) < TOL_DENSITY * rho:
            if branch == "vapor":
                bound = 0.0
            elif branch == "liquid":
                bound = 0.99 * max_density
            else:
                bound = rho_first
            if not _is_monotonous(eos, temperature, moles, bound, rho_new):
                logger.debug(
                    "density iteration: root %.8e is not on the %s branch",
                    rho_new,
                    branch or "initial",
                )
                raise IterationFailed("density_iteration")
            return rho_new
        rho = rho_new

    raise NotConverged("density_iteration")
