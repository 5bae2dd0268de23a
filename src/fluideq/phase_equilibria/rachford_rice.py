"""Compiled kernels for the two-phase Rachford-Rice equation

.. math::

    f(\\beta) = \\sum_i \\frac{z_i (K_i - 1)}{1 + \\beta (K_i - 1)} = 0,

with :math:`\\beta` the vapor fraction, :math:`z` the feed fractions and
:math:`K_i = y_i / x_i`.

The root is searched in the window of Michelsen, intersected with ``[0, 1]``, where
:math:`f` is monotonously decreasing and all phase compositions are non-negative.

References:
    [1] `Michelsen and Mollerup (2007), Thermodynamic Models: Fundamentals &
        Computational Aspects`

"""

from __future__ import annotations

import numba
import numpy as np

from .._core import NUMBA_CACHE, NUMBA_FAST_MATH

__all__ = ["rachford_rice", "phase_compositions"]

_MAX_ITER_RR: int = 100
_TOL_RR: float = 1e-14


@numba.njit(
    numba.f8(numba.f8[:], numba.f8[:], numba.f8),
    fastmath=NUMBA_FAST_MATH,
    cache=NUMBA_CACHE,
)
def _rr_residual(z: np.ndarray, K: np.ndarray, beta: float) -> float:
    """Value of the Rachford-Rice function for vapor fraction ``beta``."""
    return np.sum(z * (K - 1) / (1 + beta * (K - 1)))


@numba.njit(
    numba.f8(numba.f8[:], numba.f8[:], numba.f8),
    fastmath=NUMBA_FAST_MATH,
    cache=NUMBA_CACHE,
)
def _rr_derivative(z: np.ndarray, K: np.ndarray, beta: float) -> float:
    """Derivative of the Rachford-Rice function w.r.t. ``beta``."""
    d = 1 + beta * (K - 1)
    return -np.sum(z * (K - 1) ** 2 / (d * d))


@numba.njit(
    numba.types.UniTuple(numba.f8, 2)(numba.f8[:], numba.f8[:]),
    fastmath=NUMBA_FAST_MATH,
    cache=NUMBA_CACHE,
)
def _rr_window(z: np.ndarray, K: np.ndarray) -> tuple[float, float]:
    """Bounds of the vapor fraction for which all phase compositions are
    non-negative, intersected with ``[0, 1]``."""
    beta_min = 0.0
    beta_max = 1.0
    for i in range(z.shape[0]):
        if K[i] > 1.0:
            b = (K[i] * z[i] - 1.0) / (K[i] - 1.0)
            if b > beta_min:
                beta_min = b
        elif K[i] < 1.0:
            b = (1.0 - z[i]) / (1.0 - K[i])
            if b < beta_max:
                beta_max = b
    return beta_min, beta_max


@numba.njit(
    numba.f8(numba.f8[:], numba.f8[:]), fastmath=NUMBA_FAST_MATH, cache=NUMBA_CACHE
)
def rachford_rice(z: np.ndarray, K: np.ndarray) -> float:
    """Solves the Rachford-Rice equation for the vapor fraction.

    A Newton method is used, which falls back to bisection whenever the Newton step
    leaves the current bracket of the root.

    Parameters:
        z: ``shape=(num_components,)``

            Feed fractions.
        K: ``shape=(num_components,)``

            K-values. Non-volatile components have a K-value of zero.

    Returns:
        The vapor fraction in ``(0, 1)``, or ``nan`` if no root exists in this
        interval, i.e. if the feed is a single phase liquid or vapor for the given
        K-values.

    """
    lo, hi = _rr_window(z, K)
    if lo >= hi:
        return np.nan
    f_lo = _rr_residual(z, K, lo)
    f_hi = _rr_residual(z, K, hi)
    # f >= 0 at an interior lower bound and f <= 0 at an interior upper bound, a
    # violation is round-off and the root is the bound. This is the case for a single
    # volatile component.
    if lo > 0.0 and f_lo <= 0.0:
        return lo
    if hi < 1.0 and f_hi >= 0.0:
        return hi
    # f is decreasing: a root inside requires a sign change
    if f_lo <= 0.0 or f_hi >= 0.0:
        return np.nan

    beta = 0.5 * (lo + hi)
    for _ in range(_MAX_ITER_RR):
        f = _rr_residual(z, K, beta)
        if f > 0.0:
            lo = beta
        else:
            hi = beta
        step = f / _rr_derivative(z, K, beta)
        beta_new = beta - step
        if beta_new <= lo or beta_new >= hi:
            beta_new = 0.5 * (lo + hi)
        if abs(beta_new - beta) < _TOL_RR:
            return beta_new
        beta = beta_new
    return beta


@numba.njit(
    numba.types.UniTuple(numba.f8[:], 2)(numba.f8[:], numba.f8[:], numba.f8),
    fastmath=NUMBA_FAST_MATH,
    cache=NUMBA_CACHE,
)
def phase_compositions(
    z: np.ndarray, K: np.ndarray, beta: float
) -> tuple[np.ndarray, np.ndarray]:
    """Liquid and vapor compositions for the vapor fraction ``beta``.

    Returns:
        The normalized liquid fractions :math:`x` and vapor fractions :math:`y`.

    """
    x = z / (1 + beta * (K - 1))
    y = K * x
    return x / x.sum(), y / y.sum()
