"""Stability analysis of a homogeneous phase based on the tangent plane distance.

A state with mole fractions :math:`z` at temperature :math:`T` and pressure :math:`p` is
stable if the tangent plane distance

.. math::

    tm(W) = 1 + \\sum_i W_i (\\ln W_i + \\ln \\varphi_i(W) - d_i - 1),
    \\quad d_i = \\ln z_i + \\ln \\varphi_i(z),

is non-negative for all trial phases :math:`W`. Stationary points of :math:`tm` are
found by successive substitution :math:`\\ln W_i = d_i - \\ln \\varphi_i(W)`, at which
:math:`tm = 1 - \\sum_i W_i`.

References:
    [1] `Michelsen (1982) <https://doi.org/10.1016/0378-3812(82)85001-2>`_

"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from ..errors import EosError, NotConverged
from ..solver_options import SolverOptions, log_iter, log_result
from ..utils import time_logger
from .state import DensityInitialization, State

__all__ = ["stability_analysis", "is_stable"]

logger = logging.getLogger(__name__)

MAX_ITER_STABILITY: int = 200
"""Default maximum number of successive substitution steps per trial phase."""

TOL_STABILITY: float = 1e-10
"""Default tolerance of the logarithmic trial phase amounts."""

MINIMUM_TPD: float = -1e-8
"""Trial phases with a tangent plane distance below this value indicate instability."""

_TRIAL_IMPURITY: float = 1e-3
"""Combined mole fraction of all other components in a nearly pure trial phase."""


def _trial_phases(z: np.ndarray) -> list[tuple[np.ndarray, DensityInitialization]]:
    """Initial compositions and density initializations of the trial phases.

    One nearly pure liquid per component, and a vapor and a liquid of feed
    composition.

    """
    nc = z.shape[0]
    trials: list[tuple[np.ndarray, DensityInitialization]] = []
    if nc > 1:
        for i in range(nc):
            x = np.full(nc, _TRIAL_IMPURITY / (nc - 1))
            x[i] = 1.0 - _TRIAL_IMPURITY
            trials.append((x, "liquid"))
    trials.append((z.copy(), "vapor"))
    trials.append((z.copy(), "liquid"))
    return trials


def _is_same_phase(a: State, b: State) -> bool:
    """Two states are considered equal if composition and density coincide."""
    return bool(
        np.max(np.abs(a.molefracs - b.molefracs)) < 1e-5
        and abs(a.density - b.density) < 1e-5 * b.density
    )


def _minimize_tpd(
    state: State,
    pressure: float,
    d: np.ndarray,
    x0: np.ndarray,
    density_initialization: DensityInitialization,
    options: SolverOptions,
) -> tuple[float, State]:
    """Successive substitution for a stationary point of the tangent plane distance,
    starting from the composition ``x0``."""
    max_iter, tol, verbosity = options.unwrap_or(MAX_ITER_STABILITY, TOL_STABILITY)
    eos = state.eos
    t = state.temperature
    n = state.total_moles

    x = x0
    with np.errstate(divide="ignore"):
        ln_w = np.log(x)
    density: DensityInitialization = density_initialization
    for k in range(1, max_iter + 1):
        trial = State.new_npt(eos, t, pressure, x * n, density)
        ln_w_new = d - trial.ln_phi()
        with np.errstate(invalid="ignore"):
            delta = np.abs(ln_w_new - ln_w)
        # absent components have ln_w = -inf in both iterates
        error = float(np.max(np.where(np.isfinite(ln_w_new), delta, 0.0)))
        ln_w = ln_w_new
        w = np.exp(ln_w)
        x = w / w.sum()
        density = trial.density
        log_iter(
            logger, verbosity, " %4d | %14.8e | tpd = %14.8e", k, error, 1 - w.sum()
        )
        if error < tol:
            tpd = 1.0 - float(w.sum())
            return tpd, State.new_npt(eos, t, pressure, x * n, density)

    raise NotConverged("Stability analysis")


@time_logger(sections=["phase_equilibria"])
def stability_analysis(
    state: State, options: SolverOptions = SolverOptions()
) -> list[State]:
    """Performs a stability analysis of a homogeneous state.

    Parameters:
        state: The state to be analyzed.
        options: Options of the successive substitution of each trial phase.

    Raises:
        EosError: The error of the last trial phase, if the iteration failed for all
            trial phases.

    Returns:
        The trial phases which lower the Gibbs energy of the system, i.e. which have a
        negative tangent plane distance and differ from the state and from each other.
        The list is empty if the state is stable.

    """
    z = state.molefracs
    p = state.pressure()
    with np.errstate(divide="ignore"):
        d = np.log(z) + state.ln_phi()

    candidates: list[State] = []
    error: Optional[Exception] = None
    successful = 0
    for x0, density_initialization in _trial_phases(z):
        try:
            tpd, trial = _minimize_tpd(state, p, d, x0, density_initialization, options)
        except (EosError, np.linalg.LinAlgError) as err:
            logger.debug(
                "Trial phase %s (%s) failed: %s", x0, density_initialization, err
            )
            error = err
            continue
        successful += 1
        if tpd >= MINIMUM_TPD or _is_same_phase(trial, state):
            continue
        if any(_is_same_phase(trial, c) for c in candidates):
            continue
        candidates.append(trial)

    if successful == 0 and error is not None:
        raise error
    log_result(
        logger,
        options.verbosity,
        "Stability analysis: %d unstable trial phase(s) found",
        len(candidates),
    )
    return candidates


def is_stable(state: State, options: SolverOptions = SolverOptions()) -> bool:
    """Returns ``True`` if the stability analysis finds no trial phase lowering the
    Gibbs energy of the system."""
    return len(stability_analysis(state, options)) == 0
