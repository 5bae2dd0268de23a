"""Ideal gas heat capacities following the group contribution method of Joback and
Reid.

Only the evaluation of the heat capacity polynomial is implemented here. The
coefficients are the sums of the group increments, which are supplied by the user.

References:
    [1] `Joback and Reid (1987) <https://doi.org/10.1080/00986448708960487>`_

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from ._core import T_REF
from .dual import log
from .equation_of_state import IdealGasContribution

__all__ = ["JobackRecord", "Joback"]


@dataclass(frozen=True)
class JobackRecord:
    """Sums of the Joback group increments for the ideal gas heat capacity of one
    component.

    The heat capacity in ``[J / mol K]`` reads

    .. math::

        c_p(T) = (a - 37.93) + (b + 0.21) T + (c - 3.91 \\cdot 10^{-4}) T^2
        + (d + 2.06 \\cdot 10^{-7}) T^3 + e T^4.

    """

    a: float
    b: float
    c: float
    d: float
    e: float = 0.0

    def coefficients(self) -> tuple[float, float, float, float, float]:
        """Polynomial coefficients of :math:`c_p` in ascending powers of ``T``."""
        return (
            self.a - 37.93,
            self.b + 0.21,
            self.c - 3.91e-4,
            self.d + 2.06e-7,
            self.e,
        )


class Joback(IdealGasContribution):
    """Ideal gas contribution with Joback heat capacities.

    Parameters:
        records: One record per component.

    """

    def __init__(self, records: Sequence[JobackRecord]) -> None:
        if len(records) == 0:
            raise ValueError("At least one Joback record is required.")
        self.records: list[JobackRecord] = list(records)

    def components(self) -> int:
        return len(self.records)

    def subset(self, component_list: Sequence[int]) -> Joback:
        return Joback([self.records[i] for i in component_list])

    def enthalpy_integral(self, temperature: Any) -> list[Any]:
        t0 = T_REF
        h = []
        for record in self.records:
            c = record.coefficients()
            h.append(
                sum(
                    c[k] / (k + 1) * (temperature ** (k + 1) - t0 ** (k + 1))
                    for k in range(5)
                )
            )
        return h

    def entropy_integral(self, temperature: Any) -> list[Any]:
        t0 = T_REF
        s = []
        for record in self.records:
            c = record.coefficients()
            s.append(
                c[0] * log(temperature / t0)
                + sum(
                    c[k] / k * (temperature**k - t0**k) for k in range(1, 5)
                )
            )
        return s
