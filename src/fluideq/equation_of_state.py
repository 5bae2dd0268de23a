"""Contains the contract every equation of state must fulfill, the generalized state
it is evaluated on and the ideal gas contributions.

An equation of state (EoS) provides the residual Helmholtz energy of a fluid as a
function of temperature, volume and amount of substance. It is written generic in the
number type: the solvers evaluate it with floats and with the dual numbers of
:mod:`fluideq.dual` to obtain exact partial derivatives.

All Helmholtz energies are *reduced* by :math:`RT`, i.e. an EoS returns
:math:`A^{res} / (RT)` in ``[mol]``. Temperatures are in ``[K]``, volumes in ``[m^3]``,
amounts in ``[mol]``.

"""

from __future__ import annotations

import abc
from typing import Any, Optional, Sequence

import numpy as np

from ._core import P_REF, R_IDEAL_MOL, REFERENCE_MOLES, T_REF
from .dual import log, safe_sum, value
from .errors import IncompatibleComponents, InvalidState

__all__ = [
    "StateHD",
    "EquationOfState",
    "IdealGasContribution",
    "DefaultIdealGas",
]


class StateHD:
    """Thermodynamic state with temperature, volume and moles given as (possibly
    dual) numbers.

    This is the object every equation of state is evaluated on. It is created by the
    solvers with the derivative directions seeded as needed, and discarded after the
    evaluation.

    Parameters:
        temperature: Temperature in ``[K]``.
        volume: Volume in ``[m^3]``.
        moles: ``shape=(num_components,)``

            Amount of each component in ``[mol]``.

    Raises:
        InvalidState: If the total amount or the volume are not positive.

    """

    def __init__(self, temperature: Any, volume: Any, moles: Sequence[Any]) -> None:
        self.temperature = temperature
        """Temperature in ``[K]``."""
        self.volume = volume
        """Volume in ``[m^3]``."""
        self.moles: np.ndarray = np.asarray(moles)
        """Amount of each component in ``[mol]``."""
        self.total_moles = safe_sum(list(self.moles))
        """Total amount of substance in ``[mol]``."""

        if not value(self.total_moles) > 0.0:
            raise InvalidState("StateHD", "total moles", value(self.total_moles))
        if not value(volume) > 0.0:
            raise InvalidState("StateHD", "volume", value(volume))

        self.molefracs: np.ndarray = self.moles / self.total_moles
        """Mole fractions of the components."""
        self.partial_density: np.ndarray = self.moles / self.volume
        """Molar densities of the components in ``[mol / m^3]``."""
        self.density = self.total_moles / self.volume
        """Total molar density in ``[mol / m^3]``."""

    @property
    def components(self) -> int:
        return self.moles.shape[0]


class IdealGasContribution(abc.ABC):
    """Ideal gas part of the Helmholtz energy.

    The reduced ideal gas Helmholtz energy is

    .. math::

        \\frac{A^{ig}}{RT} = \\sum_i n_i \\left( g_i(T)
        + \\ln \\frac{\\rho_i R T}{p^0} - 1 \\right),

    with :math:`g_i(T) = (h_i(T) - T s_i(T)) / (RT)` the reduced ideal gas Gibbs energy
    of the pure component at standard pressure :math:`p^0`, obtained by integrating
    the ideal gas heat capacity from the standard state
    (:data:`~fluideq._core.T_REF`, :data:`~fluideq._core.P_REF`).

    Components with zero amount do not contribute.

    """

    @abc.abstractmethod
    def components(self) -> int:
        """Number of components."""

    @abc.abstractmethod
    def subset(self, component_list: Sequence[int]) -> IdealGasContribution:
        """The contribution of a subset of the components."""

    @abc.abstractmethod
    def enthalpy_integral(self, temperature: Any) -> list[Any]:
        """Integrals :math:`\\int_{T^0}^{T} c_{p,i} dT` per component in
        ``[J / mol]``."""

    @abc.abstractmethod
    def entropy_integral(self, temperature: Any) -> list[Any]:
        """Integrals :math:`\\int_{T^0}^{T} c_{p,i} / T dT` per component in
        ``[J / mol K]``."""

    def helmholtz(self, state: StateHD) -> Any:
        """Reduced ideal gas Helmholtz energy :math:`A^{ig} / (RT)` in ``[mol]``."""
        t = state.temperature
        h = self.enthalpy_integral(t)
        s = self.entropy_integral(t)
        rt = t * R_IDEAL_MOL
        terms = []
        for i in range(state.components):
            n_i = state.moles[i]
            if value(n_i) == 0.0:
                continue
            g_i = (h[i] - t * s[i]) / rt
            terms.append(n_i * (g_i + log(state.partial_density[i] * rt / P_REF) - 1.0))
        return safe_sum(terms)


class DefaultIdealGas(IdealGasContribution):
    """Ideal gas contribution with a constant heat capacity :math:`c_p = 5/2 R` for
    all components.

    Used if an equation of state is not equipped with an ideal gas model. Properties
    which do not depend on the temperature dependence of the ideal gas (pressure,
    fugacities, phase equilibria) are unaffected by this choice.

    Parameters:
        num_components: Number of components.

    """

    CP: float = 2.5 * R_IDEAL_MOL
    """Molar isobaric heat capacity in ``[J / mol K]``."""

    def __init__(self, num_components: int) -> None:
        self._num_components = num_components

    def components(self) -> int:
        return self._num_components

    def subset(self, component_list: Sequence[int]) -> DefaultIdealGas:
        return DefaultIdealGas(len(component_list))

    def enthalpy_integral(self, temperature: Any) -> list[Any]:
        h = (temperature - T_REF) * self.CP
        return [h] * self._num_components

    def entropy_integral(self, temperature: Any) -> list[Any]:
        s = log(temperature / T_REF) * self.CP
        return [s] * self._num_components


class EquationOfState(abc.ABC):
    """Abstract base class of all equations of state.

    Implementations provide the residual Helmholtz energy and the structural
    information the solvers rely on. Every method must be side-effect free.

    """

    @abc.abstractmethod
    def components(self) -> int:
        """Number of components of the mixture."""

    @abc.abstractmethod
    def subset(self, component_list: Sequence[int]) -> EquationOfState:
        """Creates the equation of state for a subset of the components.

        Parameters:
            component_list: Indices of the components to keep, in the order of the new
                equation of state.

        """

    @abc.abstractmethod
    def compute_max_density(self, moles: np.ndarray) -> float:
        """Upper bound of the molar density in ``[mol / m^3]`` for the given
        composition.

        Density iterations never go beyond this value.

        """

    @abc.abstractmethod
    def residual_helmholtz(self, state: StateHD) -> Any:
        """Reduced residual Helmholtz energy :math:`A^{res} / (RT)` in ``[mol]``."""

    def residual_helmholtz_contributions(self, state: StateHD) -> list[tuple[str, Any]]:
        """Contributions to the reduced residual Helmholtz energy, with their names.

        The sum of all contributions must equal :meth:`residual_helmholtz`. The default
        is a single contribution named after the class.

        """
        return [(type(self).__name__, self.residual_helmholtz(state))]

    def ideal_gas(self) -> IdealGasContribution:
        """The ideal gas contribution. Defaults to :class:`DefaultIdealGas`."""
        return DefaultIdealGas(self.components())

    def molar_weight(self) -> np.ndarray:
        """Molar weights of the components in ``[kg / mol]``.

        Raises:
            NotImplementedError: If the model does not provide molar weights. Mass
                specific properties are unavailable in that case.

        """
        raise NotImplementedError(
            f"{type(self).__name__} does not provide molar weights."
        )

    def validate_moles(self, moles: Optional[np.ndarray]) -> np.ndarray:
        """Checks the amounts of substance against the number of components.

        Parameters:
            moles: ``shape=(num_components,)``

                Amount of each component in ``[mol]``. Can be omitted for pure
                components, in which case the reference amount is used.

        Raises:
            IncompatibleComponents: If the length of ``moles`` does not match, or if
                ``moles`` is omitted for a mixture.

        Returns:
            The amounts as float array.

        """
        n = self.components()
        if moles is None:
            if n == 1:
                return np.array([REFERENCE_MOLES])
            raise IncompatibleComponents(n, 0)
        moles = np.asarray(moles, dtype=float)
        if moles.ndim != 1 or moles.shape[0] != n:
            raise IncompatibleComponents(n, moles.size)
        return moles

    def max_density(self, moles: Optional[np.ndarray] = None) -> float:
        """Maximum molar density in ``[mol / m^3]`` for the given composition."""
        return self.compute_max_density(self.validate_moles(moles))
