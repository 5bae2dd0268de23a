"""Options passed to the iterative solvers and helpers for logging their progress."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

__all__ = ["Verbosity", "SolverOptions"]


class Verbosity(IntEnum):
    """Amount of output produced by an iterative solver.

    Messages are emitted through the logger of the module implementing the solver,
    at level INFO.

    """

    NONE = 0
    """No output."""
    RESULT = 1
    """A single line summarizing the result of the solver."""
    ITER = 2
    """The result and one line per iteration."""


@dataclass(frozen=True)
class SolverOptions:
    """Iteration budget, tolerance and verbosity of a single solver call.

    Fields which are ``None`` are replaced by the default of the respective solver.

    """

    max_iter: Optional[int] = None
    """Maximum number of iterations."""

    tol: Optional[float] = None
    """Tolerance of the convergence criterion."""

    verbosity: Verbosity = Verbosity.NONE
    """See :class:`Verbosity`."""

    def unwrap_or(self, max_iter: int, tol: float) -> tuple[int, float, Verbosity]:
        """Returns the options, with the given defaults substituted for unset
        fields."""
        return (
            max_iter if self.max_iter is None else self.max_iter,
            tol if self.tol is None else self.tol,
            self.verbosity,
        )


def log_iter(
    logger: logging.Logger, verbosity: Verbosity, msg: str, *args: object
) -> None:
    """Logs ``msg`` if the verbosity includes per-iteration output."""
    if verbosity >= Verbosity.ITER:
        logger.info(msg, *args)


def log_result(
    logger: logging.Logger, verbosity: Verbosity, msg: str, *args: object
) -> None:
    """Logs ``msg`` if the verbosity includes a result summary."""
    if verbosity >= Verbosity.RESULT:
        logger.info(msg, *args)
