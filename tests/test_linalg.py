"""Tests of the dense linear algebra in :mod:`fluideq.linalg`."""

from __future__ import annotations

import numpy as np
import pytest
import scipy.linalg

from fluideq.dual import Dual
from fluideq.linalg import lu_solve, smallest_eigenpair


def test_lu_solve():
    a = np.array([[4.0, 1.0, 0.0], [1.0, 3.0, -1.0], [0.0, -1.0, 2.0]])
    b = np.array([1.0, 2.0, 3.0])
    x = lu_solve(a, b)
    assert np.allclose(a @ x, b, rtol=0.0, atol=1e-14)

    # singular matrices and non-finite entries are rejected
    with pytest.raises(np.linalg.LinAlgError):
        lu_solve(np.array([[1.0, 2.0], [2.0, 4.0]]), np.ones(2))
    with pytest.raises(np.linalg.LinAlgError):
        lu_solve(np.array([[1.0, np.nan], [0.0, 1.0]]), np.ones(2))


def test_smallest_eigenpair_float():
    q = np.diag([3.0, 1.0, 2.0])
    lam, u = smallest_eigenpair(q)
    assert lam == pytest.approx(1.0)
    assert np.allclose(u, [0.0, 1.0, 0.0])

    # the sign is fixed such that the largest entry is positive
    lam, u = smallest_eigenpair(-np.eye(2) + np.array([[0.0, 0.5], [0.5, 0.0]]))
    assert lam == pytest.approx(-1.5)
    assert u[np.argmax(np.abs(u))] > 0.0


def test_smallest_eigenpair_derivatives():
    """The derivatives of the eigenpair of ``A + t B`` at ``t = 0`` are compared with
    central finite differences."""
    a = np.array([[2.0, 0.5, 0.1], [0.5, 3.0, 0.2], [0.1, 0.2, 4.0]])
    b = np.array([[1.0, 0.3, 0.0], [0.3, -0.5, 0.4], [0.0, 0.4, 0.2]])
    q = np.array(
        [[Dual(a[i, j], b[i, j]) for j in range(3)] for i in range(3)], dtype=object
    )
    lam, u = smallest_eigenpair(q)

    def eigenpair(t: float) -> tuple[float, np.ndarray]:
        w, v = scipy.linalg.eigh(a + t * b)
        vec = v[:, 0]
        if vec[np.argmax(np.abs(vec))] < 0.0:
            vec = -vec
        return w[0], vec

    h = 1e-6
    lam_p, u_p = eigenpair(h)
    lam_m, u_m = eigenpair(-h)

    assert lam.re == pytest.approx(eigenpair(0.0)[0])
    assert lam.eps == pytest.approx((lam_p - lam_m) / (2 * h), rel=1e-6)
    du = np.array([x.eps for x in u])
    assert np.allclose(du, (u_p - u_m) / (2 * h), rtol=1e-5, atol=1e-8)
