"""Dense linear algebra used by the Newton solvers.

The systems arising in the phase equilibrium solvers are small (at most a few times
the number of components), hence dense LAPACK routines from scipy are used directly.

"""

from __future__ import annotations

from typing import Any

import numpy as np
import scipy.linalg

from .dual import Dual, eps, re

__all__ = ["lu_solve", "smallest_eigenpair"]


def lu_solve(matrix: np.ndarray, rhs: np.ndarray) -> np.ndarray:
    """Solves ``matrix @ x = rhs`` using a dense LU factorization.

    Parameters:
        matrix: ``shape=(n, n)``

            System matrix.
        rhs: ``shape=(n,)``

            Right-hand side.

    Raises:
        numpy.linalg.LinAlgError: If the matrix is singular or contains non-finite
            entries.

    Returns:
        The solution vector.

    """
    matrix = np.asarray(matrix, dtype=float)
    rhs = np.asarray(rhs, dtype=float)
    if not (np.all(np.isfinite(matrix)) and np.all(np.isfinite(rhs))):
        raise np.linalg.LinAlgError("Linear system contains non-finite entries.")
    lu, piv = scipy.linalg.lu_factor(matrix, check_finite=False)
    if np.any(np.diag(lu) == 0.0):
        raise np.linalg.LinAlgError("Singular matrix in LU decomposition.")
    return scipy.linalg.lu_solve((lu, piv), rhs, check_finite=False)


def smallest_eigenpair(matrix: np.ndarray) -> tuple[Any, np.ndarray]:
    """Computes the smallest eigenvalue and the corresponding eigenvector of a
    symmetric matrix.

    If the entries of ``matrix`` are :class:`~fluideq.dual.Dual` numbers, the
    derivatives of the eigenpair are obtained from first order perturbation theory:

    .. math::

        \\lambda' = u^T Q' u, \\quad
        u' = \\sum_{k \\neq 0} u_k \\frac{u_k^T Q' u}{\\lambda - \\lambda_k}.

    The sign of the eigenvector is fixed such that its entry of largest magnitude is
    positive.

    Parameters:
        matrix: ``shape=(n, n)``

            Symmetric matrix of floats or :class:`~fluideq.dual.Dual`.

    Raises:
        numpy.linalg.LinAlgError: If the smallest eigenvalue is degenerate and
            derivatives are requested.

    Returns:
        The eigenvalue and the eigenvector, as floats or dual numbers matching the
        input.

    """
    is_dual = any(isinstance(x, Dual) for x in np.ravel(matrix))
    q = np.array([[re(x) for x in row] for row in matrix], dtype=float)
    w, v = scipy.linalg.eigh(q)
    lam = w[0]
    u = v[:, 0]
    if u[np.argmax(np.abs(u))] < 0.0:
        u = -u
        v[:, 0] = u

    if not is_dual:
        return lam, u

    dq = np.array([[eps(x) for x in row] for row in matrix], dtype=float)
    dq_u = dq @ u
    dlam = u @ dq_u
    du = np.zeros_like(u)
    for k in range(1, w.shape[0]):
        gap = lam - w[k]
        if abs(gap) <= 1e-14 * max(1.0, abs(lam)):
            raise np.linalg.LinAlgError("Degenerate smallest eigenvalue.")
        du += v[:, k] * (v[:, k] @ dq_u) / gap

    evec = np.array([Dual(u_i, du_i) for u_i, du_i in zip(u, du)], dtype=object)
    return Dual(lam, dlam), evec
