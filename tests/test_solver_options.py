"""Tests of the solver options and the logging helpers."""

from __future__ import annotations

import logging

import pytest

import fluideq as fe
from fluideq.solver_options import log_iter, log_result
from fluideq.utils import time_logger


def test_unwrap_or():
    assert fe.SolverOptions().unwrap_or(10, 1e-8) == (10, 1e-8, fe.Verbosity.NONE)
    options = fe.SolverOptions(max_iter=3, verbosity=fe.Verbosity.ITER)
    assert options.unwrap_or(10, 1e-8) == (3, 1e-8, fe.Verbosity.ITER)


@pytest.mark.parametrize(
    "verbosity, n_messages",
    [(fe.Verbosity.NONE, 0), (fe.Verbosity.RESULT, 1), (fe.Verbosity.ITER, 2)],
)
def test_verbosity(caplog, verbosity: fe.Verbosity, n_messages: int):
    logger = logging.getLogger("fluideq.test")
    with caplog.at_level(logging.INFO, logger="fluideq.test"):
        log_iter(logger, verbosity, "iteration %d", 1)
        log_result(logger, verbosity, "converged")
    assert len(caplog.records) == n_messages


def test_solver_output(caplog, propane: fe.PengRobinson):
    """Solvers report their progress through the logger of their module."""
    options = fe.SolverOptions(verbosity=fe.Verbosity.ITER)
    with caplog.at_level(logging.INFO, logger="fluideq"):
        fe.critical_point(propane, options=options)
    assert any("fluideq.state.critical_point" == r.name for r in caplog.records)


def test_time_logger_is_transparent():
    @time_logger(sections=["state"])
    def add(a, b=1):
        """Adds."""
        return a + b

    assert add(1, b=2) == 3
    assert add.__name__ == "add"
    assert add.__doc__ == "Adds."
