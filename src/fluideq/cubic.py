"""Implementation of the Peng-Robinson equation of state.

The Peng-Robinson EoS serves as the reference model of the package. Its residual
Helmholtz energy for a mixture with van der Waals one-fluid mixing rules reads

.. math::

    \\frac{A^{res}}{RT} = n \\ln\\frac{V}{V - nb}
    - \\frac{n a}{2 \\sqrt{2} b R T}
    \\ln\\frac{V + (1 + \\sqrt{2}) n b}{V + (1 - \\sqrt{2}) n b},

with :math:`a = \\sum_i \\sum_j x_i x_j \\sqrt{a_i a_j} (1 - k_{ij})` and
:math:`b = \\sum_i x_i b_i`.

References:
    [1] `Peng and Robinson (1976) <https://doi.org/10.1021/i160057a011>`_

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

import numpy as np

from ._core import R_IDEAL_MOL
from .dual import log, safe_sum, sqrt
from .equation_of_state import (
    DefaultIdealGas,
    EquationOfState,
    IdealGasContribution,
    StateHD,
)
from .errors import IncompatibleComponents
from .joback import Joback, JobackRecord

__all__ = [
    "A_CRIT",
    "B_CRIT",
    "PengRobinsonRecord",
    "PengRobinsonParameters",
    "PengRobinson",
]


A_CRIT: float = (
    1
    / 512
    * (
        -59
        + 3 * np.cbrt(276231 - 192512 * np.sqrt(2))
        + 3 * np.cbrt(276231 + 192512 * np.sqrt(2))
    )
)
"""Critical, non-dimensional cohesion value in the Peng-Robinson EoS,
~ 0.457235529."""

B_CRIT: float = (
    1
    / 32
    * (-1 - 3 * np.cbrt(16 * np.sqrt(2) - 13) + 3 * np.cbrt(16 * np.sqrt(2) + 13))
)
"""Critical, non-dimensional covolume in the Peng-Robinson EoS, ~ 0.077796073."""

_SQRT2 = np.sqrt(2.0)


@dataclass(frozen=True)
class PengRobinsonRecord:
    """Peng-Robinson parameters of a single substance."""

    tc: float
    """Critical temperature in ``[K]``."""
    pc: float
    """Critical pressure in ``[Pa]``."""
    acentric_factor: float
    """Acentric factor ``[-]``."""
    molarweight: Optional[float] = None
    """Molar weight in ``[g / mol]``."""


def _a_cor(omega: float) -> float:
    """Cohesion correction parameter depending on the acentric factor.

    References:
        `Zhu et al. (2014), Appendix A
        <https://doi.org/10.1016/j.fluid.2014.07.003>`_

    """
    if omega < 0.491:
        return 0.37464 + 1.54226 * omega - 0.26992 * omega**2
    else:
        return 0.379642 + 1.48503 * omega - 0.164423 * omega**2 + 0.016666 * omega**3


class PengRobinsonParameters:
    """Peng-Robinson parameters for one or more substances.

    Parameters:
        records: Pure component records.
        k_ij: ``shape=(num_components, num_components), default=None``

            Symmetric matrix of binary interaction parameters. Zero if not given.
        joback_records: ``default=None``

            Ideal gas heat capacities. If not given, the ideal gas contribution is
            :class:`~fluideq.equation_of_state.DefaultIdealGas`.

    Raises:
        ValueError: If the sizes of the parameters are inconsistent or a critical
            property is not positive.

    """

    def __init__(
        self,
        records: Sequence[PengRobinsonRecord],
        k_ij: Optional[np.ndarray] = None,
        joback_records: Optional[Sequence[JobackRecord]] = None,
    ) -> None:
        n = len(records)
        if n == 0:
            raise ValueError("At least one component is required.")
        if k_ij is None:
            k_ij = np.zeros((n, n))
        k_ij = np.asarray(k_ij, dtype=float)
        if k_ij.shape != (n, n):
            raise ValueError(f"Binary interaction matrix must be of shape ({n}, {n}).")
        if not np.allclose(k_ij, k_ij.T):
            raise ValueError("Binary interaction matrix must be symmetric.")
        if joback_records is not None and len(joback_records) != n:
            raise IncompatibleComponents(n, len(joback_records))
        for r in records:
            if r.tc <= 0.0 or r.pc <= 0.0:
                raise ValueError(f"Non-physical critical properties in {r}.")

        self.records: list[PengRobinsonRecord] = list(records)
        self.k_ij: np.ndarray = k_ij
        self.joback_records: Optional[list[JobackRecord]] = (
            None if joback_records is None else list(joback_records)
        )

        self.tc = np.array([r.tc for r in records])
        pc = np.array([r.pc for r in records])
        self.a = A_CRIT * (R_IDEAL_MOL * self.tc) ** 2 / pc
        """Critical cohesions in ``[Pa m^6 / mol^2]``."""
        self.b = B_CRIT * R_IDEAL_MOL * self.tc / pc
        """Covolumes in ``[m^3 / mol]``."""
        self.kappa = np.array([_a_cor(r.acentric_factor) for r in records])

    @classmethod
    def new_simple(
        cls,
        tc: Sequence[float],
        pc: Sequence[float],
        acentric_factor: Sequence[float],
        molarweight: Optional[Sequence[float]] = None,
    ) -> PengRobinsonParameters:
        """Builds a parameter set without binary interaction parameters from arrays of
        pure component properties."""
        n = len(tc)
        if molarweight is None:
            molarweight = [None] * n  # type: ignore[list-item]
        if any(len(x) != n for x in (pc, acentric_factor, molarweight)):
            raise ValueError("Each component has to have parameters.")
        records = [
            PengRobinsonRecord(tc[i], pc[i], acentric_factor[i], molarweight[i])
            for i in range(n)
        ]
        return cls(records)

    def subset(self, component_list: Sequence[int]) -> PengRobinsonParameters:
        idx = list(component_list)
        return PengRobinsonParameters(
            [self.records[i] for i in idx],
            self.k_ij[np.ix_(idx, idx)],
            None
            if self.joback_records is None
            else [self.joback_records[i] for i in idx],
        )

    def __len__(self) -> int:
        return len(self.records)


class PengRobinson(EquationOfState):
    """The Peng-Robinson equation of state with van der Waals one-fluid mixing rules.

    Parameters:
        parameters: Component parameters.

    """

    def __init__(self, parameters: PengRobinsonParameters) -> None:
        self.parameters = parameters
        if parameters.joback_records is None:
            self._ideal_gas: IdealGasContribution = DefaultIdealGas(len(parameters))
        else:
            self._ideal_gas = Joback(parameters.joback_records)

    def components(self) -> int:
        return len(self.parameters)

    def subset(self, component_list: Sequence[int]) -> PengRobinson:
        return PengRobinson(self.parameters.subset(component_list))

    def compute_max_density(self, moles: np.ndarray) -> float:
        x = moles / moles.sum()
        return 0.9 / float(np.dot(x, self.parameters.b))

    def ideal_gas(self) -> IdealGasContribution:
        return self._ideal_gas

    def molar_weight(self) -> np.ndarray:
        mw = [r.molarweight for r in self.parameters.records]
        if any(m is None for m in mw):
            return super().molar_weight()
        return np.array(mw, dtype=float) * 1e-3

    def residual_helmholtz(self, state: StateHD) -> Any:
        p = self.parameters
        t = state.temperature
        x = state.molefracs
        n = state.total_moles
        nc = self.components()

        # temperature dependent cohesion of the pure components
        ak = [
            p.a[i] * (1.0 + p.kappa[i] * (1.0 - sqrt(t / p.tc[i]))) ** 2
            for i in range(nc)
        ]
        sqrt_ak = [sqrt(a) for a in ak]

        # mixing rules
        a_mix = safe_sum(
            [
                x[i] * x[j] * sqrt_ak[i] * sqrt_ak[j] * (1.0 - p.k_ij[i, j])
                for i in range(nc)
                for j in range(nc)
            ]
        )
        b_mix = safe_sum([x[i] * p.b[i] for i in range(nc)])

        v = state.volume
        nb = n * b_mix
        return n * (
            -log(1.0 - nb / v)
            - a_mix
            / (b_mix * t * (2.0 * _SQRT2 * R_IDEAL_MOL))
            * log((v + (1.0 + _SQRT2) * nb) / (v + (1.0 - _SQRT2) * nb))
        )

    def __repr__(self) -> str:
        return f"PengRobinson(components={self.components()})"
