"""Contains the exception classes raised by the state and phase equilibrium solvers.

All exceptions derive from :class:`EosError`. Exceptions signalling invalid user input
additionally derive from :class:`ValueError`.

Failures of the dense linear algebra are not wrapped and surface as
:class:`numpy.linalg.LinAlgError`.

"""

from __future__ import annotations

__all__ = [
    "EosError",
    "NotConverged",
    "IterationFailed",
    "TrivialSolution",
    "IncompatibleComponents",
    "InvalidState",
    "UndeterminedState",
    "SuperCritical",
    "NoPhaseSplit",
]


class EosError(RuntimeError):
    """Base class for all errors raised by ``fluideq``."""


class NotConverged(EosError):
    """An iterative solver exhausted its iteration budget.

    Parameters:
        name: Name of the solver, used in the message.

    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"`{name}` did not converge within the maximum number of iterations."
        )


class IterationFailed(EosError):
    """An iteration produced a non-physical or unusable intermediate result.

    Parameters:
        name: Name of the solver, used in the message.

    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"`{name}` encountered illegal values during the iteration.")


class TrivialSolution(EosError):
    """The phases of an equilibrium calculation collapsed onto each other."""

    def __init__(self) -> None:
        super().__init__("Iteration resulted in trivial solution.")


class IncompatibleComponents(EosError, ValueError):
    """The number of components of some input does not match the equation of state.

    Parameters:
        expected: Number of components of the equation of state.
        got: Number of components of the input.

    """

    def __init__(self, expected: int, got: int) -> None:
        self.expected = expected
        self.got = got
        super().__init__(
            f"Equation of state is initialized for {expected} components while the "
            f"input specifies {got} components."
        )


class InvalidState(EosError, ValueError):
    """A state variable holds a non-physical value.

    Parameters:
        where: The routine which detected the invalid value.
        name: Name of the offending variable.
        value: The offending value.

    """

    def __init__(self, where: str, name: str, value: float) -> None:
        self.where = where
        self.variable = name
        self.value = value
        super().__init__(f"Invalid state in {where}: {name} = {value}.")


class UndeterminedState(EosError, ValueError):
    """The given combination of state variables does not define a state."""


class SuperCritical(EosError):
    """The requested equilibrium does not exist because the system is supercritical."""

    def __init__(self, msg: str = "The system is supercritical.") -> None:
        super().__init__(msg)


class NoPhaseSplit(EosError):
    """The flash did not find two distinct phases."""

    def __init__(self) -> None:
        super().__init__("No phase split according to stability analysis.")
