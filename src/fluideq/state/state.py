"""Contains the thermodynamic state of a homogeneous phase and all properties derived
from the equation of state.

A :class:`State` is defined by temperature, volume and the amounts of the components.
Other specifications (pressure, density, enthalpy, ...) are converted into these
variables when the state is created. All properties are partial derivatives of the
Helmholtz energy and evaluated on demand by seeding dual numbers, see
:mod:`fluideq.dual`.

All quantities are in SI units, with amounts in ``[mol]``. Molar properties are
divided by the total amount, specific properties by the total mass.

"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Hashable, Literal, Optional, Sequence, Union

import numpy as np

from .._core import R_IDEAL_MOL, REFERENCE_MOLES
from ..dual import Dual, Dual3, DualNumber, HyperDual, value
from ..equation_of_state import EquationOfState, StateHD
from ..errors import (
    EosError,
    IncompatibleComponents,
    InvalidState,
    IterationFailed,
    NotConverged,
    UndeterminedState,
)
from ..utils import time_logger
from .density_iteration import density_iteration

__all__ = [
    "Contributions",
    "DensityInitialization",
    "State",
]

logger = logging.getLogger(__name__)

DensityInitialization = Union[Literal["vapor", "liquid"], float, None]
"""Initial guess for the density iteration when a state is created from temperature
and pressure.

- ``"vapor"``: Start from the ideal gas density.
- ``"liquid"``: Start close to the maximum density of the equation of state.
- A float: Start from the given molar density in ``[mol / m^3]``.
- ``None``: Compute both roots and return the one with the lower Gibbs energy.

"""

MAX_ITER_TEMPERATURE: int = 50
"""Maximum number of iterations when a state is created from pressure and a caloric
property."""

TOL_TEMPERATURE: float = 1e-10
"""Relative tolerance of the temperature in the caloric state iterations."""

LIQUID_INITIAL_DENSITY: float = 0.75
"""Initial density of the liquid density iteration, relative to the maximum density."""


class Contributions(Enum):
    """Parts of the Helmholtz energy included in the evaluation of a property."""

    IDEAL_GAS = "ideal gas"
    RESIDUAL = "residual"
    TOTAL = "total"


def _check_positive(where: str, name: str, x: float) -> float:
    x = float(x)
    if not (np.isfinite(x) and x > 0.0):
        raise InvalidState(where, name, x)
    return x


def _derivative(f: Any, part: str) -> float:
    # f is a float if it does not depend on the seeded variable
    return float(getattr(f, part)) if isinstance(f, DualNumber) else 0.0


class State:
    """Thermodynamic state of a homogeneous phase.

    The state is immutable. Properties are evaluated lazily, each call re-evaluates
    the equation of state.

    Parameters:
        eos: Equation of state.
        temperature: Temperature in ``[K]``.
        volume: Volume in ``[m^3]``.
        moles: ``shape=(num_components,), default=None``

            Amounts of the components in ``[mol]``. Can be omitted for pure
            components.

    Raises:
        IncompatibleComponents: If the number of components does not match the
            equation of state.
        InvalidState: If a variable is non-physical or the density exceeds the
            maximum density of the equation of state.

    """

    def __init__(
        self,
        eos: EquationOfState,
        temperature: float,
        volume: float,
        moles: Optional[np.ndarray] = None,
    ) -> None:
        moles = eos.validate_moles(moles)
        if np.any(~np.isfinite(moles)) or np.any(moles < 0.0):
            raise InvalidState("State", "moles", float(np.min(moles)))

        self.eos: EquationOfState = eos
        """The equation of state the properties are evaluated with."""
        self.temperature: float = _check_positive("State", "temperature", temperature)
        """Temperature in ``[K]``."""
        self.volume: float = _check_positive("State", "volume", volume)
        """Volume in ``[m^3]``."""
        self.moles: np.ndarray = moles
        """Amounts of the components in ``[mol]``."""
        self.total_moles: float = _check_positive(
            "State", "total moles", float(moles.sum())
        )
        """Total amount of substance in ``[mol]``."""
        self.partial_density: np.ndarray = moles / self.volume
        """Molar densities of the components in ``[mol / m^3]``."""
        self.density: float = self.total_moles / self.volume
        """Total molar density in ``[mol / m^3]``."""
        self.molefracs: np.ndarray = moles / self.total_moles
        """Mole fractions of the components."""

        if self.density > eos.max_density(moles) * (1.0 + 1e-12):
            raise InvalidState("State", "density", self.density)

    # region construction

    @classmethod
    def new_nvt(
        cls,
        eos: EquationOfState,
        temperature: float,
        volume: float,
        moles: Optional[np.ndarray] = None,
    ) -> State:
        """State at given temperature, volume and moles."""
        return cls(eos, temperature, volume, moles)

    @classmethod
    def new_density(
        cls,
        eos: EquationOfState,
        temperature: float,
        density: float,
        moles: Optional[np.ndarray] = None,
    ) -> State:
        """State at given temperature, molar density and moles."""
        moles = eos.validate_moles(moles)
        density = _check_positive("State.new_density", "density", density)
        return cls(eos, temperature, moles.sum() / density, moles)

    @classmethod
    def new_partial_density(
        cls, eos: EquationOfState, temperature: float, partial_density: np.ndarray
    ) -> State:
        """State at given temperature and partial densities, scaled to the reference
        amount of substance."""
        partial_density = np.asarray(partial_density, dtype=float)
        if partial_density.shape != (eos.components(),):
            raise IncompatibleComponents(eos.components(), partial_density.size)
        density = _check_positive(
            "State.new_partial_density", "density", partial_density.sum()
        )
        moles = partial_density / density * REFERENCE_MOLES
        return cls(eos, temperature, REFERENCE_MOLES / density, moles)

    @classmethod
    def new_npt(
        cls,
        eos: EquationOfState,
        temperature: float,
        pressure: float,
        moles: Optional[np.ndarray] = None,
        density_initialization: DensityInitialization = None,
    ) -> State:
        """State at given temperature, pressure and moles.

        The density is found by :func:`~fluideq.state.density_iteration`.

        Parameters:
            eos: Equation of state.
            temperature: Temperature in ``[K]``.
            pressure: Pressure in ``[Pa]``.
            moles: ``shape=(num_components,), default=None``

                Amounts of the components in ``[mol]``.
            density_initialization: ``default=None``

                See :data:`DensityInitialization`.

        Raises:
            IterationFailed: If no root exists for the chosen initialization.
            NotConverged: If the density iteration does not converge.

        """
        moles = eos.validate_moles(moles)
        temperature = _check_positive("State.new_npt", "temperature", temperature)
        pressure = _check_positive("State.new_npt", "pressure", pressure)

        if density_initialization is None:
            vapor: Optional[State] = None
            liquid: Optional[State] = None
            error: Optional[EosError] = None
            try:
                vapor = cls.new_npt(eos, temperature, pressure, moles, "vapor")
            except EosError as err:
                error = err
            try:
                liquid = cls.new_npt(eos, temperature, pressure, moles, "liquid")
            except EosError as err:
                error = err
            if vapor is not None and liquid is not None:
                if liquid.molar_gibbs_energy() < vapor.molar_gibbs_energy():
                    return liquid
                return vapor
            elif vapor is not None:
                return vapor
            elif liquid is not None:
                return liquid
            if error is None:
                raise IterationFailed("State.new_npt")
            raise error

        max_density = eos.max_density(moles)
        branch: Optional[Literal["vapor", "liquid"]] = None
        if density_initialization == "vapor":
            branch = "vapor"
            rho0 = min(
                pressure / (R_IDEAL_MOL * temperature), 0.5 * max_density
            )
        elif density_initialization == "liquid":
            branch = "liquid"
            rho0 = LIQUID_INITIAL_DENSITY * max_density
        elif isinstance(density_initialization, str):
            raise ValueError(
                f"Unknown density initialization '{density_initialization}'."
            )
        else:
            rho0 = float(density_initialization)

        rho = density_iteration(eos, temperature, pressure, moles, rho0, branch)
        return cls(eos, temperature, moles.sum() / rho, moles)

    @classmethod
    def _new_npx(
        cls,
        eos: EquationOfState,
        pressure: float,
        moles: Optional[np.ndarray],
        target: float,
        prop: str,
        initial_temperature: Optional[float],
        density_initialization: DensityInitialization,
    ) -> State:
        """Newton iteration in temperature at constant pressure, such that the molar
        property ``prop`` equals ``target``."""
        name = {"enthalpy": "new_nph", "entropy": "new_nps"}.get(prop, "new_npu")
        moles = eos.validate_moles(moles)
        t = 298.15 if initial_temperature is None else initial_temperature
        t = _check_positive(f"State.{name}", "temperature", t)
        density: DensityInitialization = density_initialization

        for _ in range(MAX_ITER_TEMPERATURE):
            state = cls.new_npt(eos, t, pressure, moles, density)
            c_p = state.c_p()
            if prop == "enthalpy":
                f = state.molar_enthalpy()
                df = c_p
            elif prop == "entropy":
                f = state.molar_entropy()
                df = c_p / t
            else:
                f = state.molar_internal_energy()
                df = c_p + pressure * state.dp_dt() / state.dp_dv() / state.total_moles
            dt = -(f - target) / df
            dt = float(np.clip(dt, -0.25 * t, 0.25 * t))
            if abs(dt) < TOL_TEMPERATURE * t:
                return state
            t += dt
            density = state.density

        raise NotConverged(f"State.{name}")

    @classmethod
    @time_logger(sections=["state"])
    def new_nph(
        cls,
        eos: EquationOfState,
        pressure: float,
        molar_enthalpy: float,
        moles: Optional[np.ndarray] = None,
        initial_temperature: Optional[float] = None,
        density_initialization: DensityInitialization = None,
    ) -> State:
        """State at given pressure, molar enthalpy in ``[J / mol]`` and moles."""
        return cls._new_npx(
            eos,
            pressure,
            moles,
            molar_enthalpy,
            "enthalpy",
            initial_temperature,
            density_initialization,
        )

    @classmethod
    @time_logger(sections=["state"])
    def new_nps(
        cls,
        eos: EquationOfState,
        pressure: float,
        molar_entropy: float,
        moles: Optional[np.ndarray] = None,
        initial_temperature: Optional[float] = None,
        density_initialization: DensityInitialization = None,
    ) -> State:
        """State at given pressure, molar entropy in ``[J / mol K]`` and moles."""
        return cls._new_npx(
            eos,
            pressure,
            moles,
            molar_entropy,
            "entropy",
            initial_temperature,
            density_initialization,
        )

    @classmethod
    @time_logger(sections=["state"])
    def new_npu(
        cls,
        eos: EquationOfState,
        pressure: float,
        molar_internal_energy: float,
        moles: Optional[np.ndarray] = None,
        initial_temperature: Optional[float] = None,
        density_initialization: DensityInitialization = None,
    ) -> State:
        """State at given pressure, molar internal energy in ``[J / mol]`` and
        moles."""
        return cls._new_npx(
            eos,
            pressure,
            moles,
            molar_internal_energy,
            "internal_energy",
            initial_temperature,
            density_initialization,
        )

    @classmethod
    def from_spec(
        cls,
        eos: EquationOfState,
        temperature: Optional[float] = None,
        volume: Optional[float] = None,
        density: Optional[float] = None,
        partial_density: Optional[np.ndarray] = None,
        total_moles: Optional[float] = None,
        moles: Optional[np.ndarray] = None,
        molefracs: Optional[np.ndarray] = None,
        pressure: Optional[float] = None,
        molar_enthalpy: Optional[float] = None,
        molar_entropy: Optional[float] = None,
        molar_internal_energy: Optional[float] = None,
        density_initialization: DensityInitialization = None,
        initial_temperature: Optional[float] = None,
    ) -> State:
        """Creates a state from any admissible combination of state variables.

        The composition is given by one of ``moles``, ``molefracs`` or
        ``partial_density`` (optional for pure components). The size of the system is
        given by ``moles``, ``total_moles``, or ``volume`` together with a density, and
        defaults to the reference amount. The thermodynamic state is given by one of

        - ``temperature`` and ``volume`` or ``density`` (or ``partial_density``),
        - ``temperature`` and ``pressure``,
        - ``pressure`` and one of ``molar_enthalpy``, ``molar_entropy``,
          ``molar_internal_energy``.

        Raises:
            UndeterminedState: If the given variables under- or over-determine the
                state.

        """
        nc = eos.components()

        # composition
        given = [x is not None for x in (moles, molefracs, partial_density)]
        if sum(given) > 1:
            raise UndeterminedState(
                "Composition is over-determined: give only one of moles, molefracs "
                "and partial_density."
            )
        if partial_density is not None:
            partial_density = np.asarray(partial_density, dtype=float)
            if partial_density.shape != (nc,):
                raise IncompatibleComponents(nc, partial_density.size)
            if density is not None:
                raise UndeterminedState("Both density and partial_density are given.")
            density = float(partial_density.sum())
            x = partial_density / density
        elif moles is not None:
            moles = eos.validate_moles(moles)
            x = moles / moles.sum()
        elif molefracs is not None:
            x = np.asarray(molefracs, dtype=float)
            if x.shape != (nc,):
                raise IncompatibleComponents(nc, x.size)
            x = x / x.sum()
        elif nc == 1:
            x = np.ones(1)
        else:
            raise UndeterminedState("Missing composition of the mixture.")

        # system size
        if moles is not None:
            if total_moles is not None and not np.isclose(total_moles, moles.sum()):
                raise UndeterminedState("Both moles and total_moles are given.")
            n = moles
        elif total_moles is not None:
            n = x * total_moles
        elif volume is not None and density is not None:
            n = x * density * volume
        else:
            n = x * REFERENCE_MOLES

        if density is not None and volume is not None:
            if not np.isclose(volume, n.sum() / density):
                raise UndeterminedState("Volume and density are inconsistent.")

        caloric = {
            "molar_enthalpy": molar_enthalpy,
            "molar_entropy": molar_entropy,
            "molar_internal_energy": molar_internal_energy,
        }
        caloric = {k: v for k, v in caloric.items() if v is not None}
        volumetric = volume is not None or density is not None

        if temperature is not None and not caloric:
            if volumetric and pressure is None:
                v = volume if volume is not None else n.sum() / density
                return cls(eos, temperature, v, n)
            if pressure is not None and not volumetric:
                return cls.new_npt(
                    eos, temperature, pressure, n, density_initialization
                )
        elif (
            pressure is not None
            and len(caloric) == 1
            and not volumetric
            and temperature is None
        ):
            ((name, target),) = caloric.items()
            prop = name[len("molar_") :]
            return cls._new_npx(
                eos,
                pressure,
                n,
                target,
                prop,
                initial_temperature,
                density_initialization,
            )

        raise UndeterminedState(
            "State is not uniquely determined by the given variables."
        )

    # endregion

    # region derivative engine

    def _helmholtz(self, state: StateHD, contributions: Contributions) -> Any:
        """Reduced Helmholtz energy ``A / (R T)`` of the chosen contributions."""
        if contributions is Contributions.RESIDUAL:
            return self.eos.residual_helmholtz(state)
        ideal = self.eos.ideal_gas().helmholtz(state)
        if contributions is Contributions.IDEAL_GAS:
            return ideal
        return ideal + self.eos.residual_helmholtz(state)

    def _seeded(self, number: type, seeds: dict[Hashable, tuple]) -> StateHD:
        """Generalized state with the derivative parts of the variables ``"T"``,
        ``"V"`` and the component indices set according to ``seeds``."""

        def var(key: Hashable, x: float) -> Any:
            return number(x, *seeds[key]) if key in seeds else number(x)

        t = var("T", self.temperature)
        v = var("V", self.volume)
        n = [var(i, m) for i, m in enumerate(self.moles)]
        return StateHD(t, v, n)

    def _first(
        self, wrt: Hashable, contributions: Contributions
    ) -> tuple[float, float]:
        """Value and first derivative of ``A / (R T)``."""
        f = self._helmholtz(self._seeded(Dual, {wrt: (1.0,)}), contributions)
        return value(f), _derivative(f, "eps")

    def _second(
        self, wrt1: Hashable, wrt2: Hashable, contributions: Contributions
    ) -> float:
        """Second partial derivative of ``A / (R T)``."""
        if wrt1 == wrt2:
            seeds = {wrt1: (1.0, 1.0, 0.0)}
        else:
            seeds = {wrt1: (1.0, 0.0, 0.0), wrt2: (0.0, 1.0, 0.0)}
        f = self._helmholtz(self._seeded(HyperDual, seeds), contributions)
        return _derivative(f, "eps1eps2")

    def _third(self, wrt: Hashable, contributions: Contributions) -> float:
        """Third partial derivative of ``A / (R T)`` with respect to one variable."""
        f = self._helmholtz(self._seeded(Dual3, {wrt: (1.0, 0.0, 0.0)}), contributions)
        return _derivative(f, "v3")

    def _components(self) -> range:
        return range(self.eos.components())

    # endregion

    # region properties

    def pressure(self, contributions: Contributions = Contributions.TOTAL) -> float:
        """Pressure in ``[Pa]``."""
        return -R_IDEAL_MOL * self.temperature * self._first("V", contributions)[1]

    def compressibility(
        self, contributions: Contributions = Contributions.TOTAL
    ) -> float:
        """Compressibility factor ``p V / (n R T)``."""
        return (
            self.pressure(contributions)
            * self.volume
            / (self.total_moles * R_IDEAL_MOL * self.temperature)
        )

    def dp_dv(self, contributions: Contributions = Contributions.TOTAL) -> float:
        """Partial derivative of the pressure w.r.t. volume in ``[Pa / m^3]``."""
        return -R_IDEAL_MOL * self.temperature * self._second("V", "V", contributions)

    def dp_drho(self, contributions: Contributions = Contributions.TOTAL) -> float:
        """Partial derivative of the pressure w.r.t. molar density at constant
        composition in ``[Pa m^3 / mol]``."""
        return -self.volume**2 / self.total_moles * self.dp_dv(contributions)

    def dp_dt(self, contributions: Contributions = Contributions.TOTAL) -> float:
        """Partial derivative of the pressure w.r.t. temperature in ``[Pa / K]``."""
        f_v = self._first("V", contributions)[1]
        f_vt = self._second("V", "T", contributions)
        return -R_IDEAL_MOL * (f_v + self.temperature * f_vt)

    def dp_dni(self, contributions: Contributions = Contributions.TOTAL) -> np.ndarray:
        """Partial derivatives of the pressure w.r.t. the amounts of the components in
        ``[Pa / mol]``."""
        rt = R_IDEAL_MOL * self.temperature
        return np.array(
            [-rt * self._second("V", i, contributions) for i in self._components()]
        )

    def d2p_dv2(self, contributions: Contributions = Contributions.TOTAL) -> float:
        """Second partial derivative of the pressure w.r.t. volume."""
        return -R_IDEAL_MOL * self.temperature * self._third("V", contributions)

    def d2p_drho2(self, contributions: Contributions = Contributions.TOTAL) -> float:
        """Second partial derivative of the pressure w.r.t. molar density."""
        v, n = self.volume, self.total_moles
        return self.d2p_dv2(contributions) * (v * v / n) ** 2 + self.dp_dv(
            contributions
        ) * (2.0 * v**3 / n**2)

    def molar_volume(
        self, contributions: Contributions = Contributions.TOTAL
    ) -> np.ndarray:
        """Partial molar volumes of the components in ``[m^3 / mol]``."""
        return -self.dp_dni(contributions) / self.dp_dv()

    def chemical_potential(
        self, contributions: Contributions = Contributions.TOTAL
    ) -> np.ndarray:
        """Chemical potentials of the components in ``[J / mol]``.

        Absent components have a chemical potential of ``-inf`` if the ideal gas
        contribution is included.

        """
        rt = R_IDEAL_MOL * self.temperature
        mu = np.array(
            [rt * self._first(i, contributions)[1] for i in self._components()]
        )
        if contributions is not Contributions.RESIDUAL:
            mu[self.moles == 0.0] = -np.inf
        return mu

    def dmu_dt(self, contributions: Contributions = Contributions.TOTAL) -> np.ndarray:
        """Partial derivatives of the chemical potentials w.r.t. temperature in
        ``[J / mol K]``."""
        out = np.empty(self.eos.components())
        for i in self._components():
            f_i = self._first(i, contributions)[1]
            f_it = self._second(i, "T", contributions)
            out[i] = R_IDEAL_MOL * (f_i + self.temperature * f_it)
        return out

    def dmu_dni(self, contributions: Contributions = Contributions.TOTAL) -> np.ndarray:
        """Partial derivatives of the chemical potentials w.r.t. the amounts of the
        components in ``[J / mol^2]``."""
        rt = R_IDEAL_MOL * self.temperature
        nc = self.eos.components()
        out = np.empty((nc, nc))
        for i in range(nc):
            for j in range(i, nc):
                out[i, j] = out[j, i] = rt * self._second(i, j, contributions)
        return out

    def ln_phi(self) -> np.ndarray:
        """Natural logarithms of the fugacity coefficients."""
        f_res = np.array(
            [self._first(i, Contributions.RESIDUAL)[1] for i in self._components()]
        )
        return f_res - np.log(self.compressibility())

    def dln_phi_dt(self) -> np.ndarray:
        """Partial derivatives of the logarithmic fugacity coefficients w.r.t.
        temperature at constant pressure in ``[1 / K]``."""
        dv_dt = -self.dp_dt() / self.dp_dv()
        res = Contributions.RESIDUAL
        out = np.empty(self.eos.components())
        for i in self._components():
            out[i] = (
                self._second(i, "T", res)
                + self._second(i, "V", res) * dv_dt
                - dv_dt / self.volume
                + 1.0 / self.temperature
            )
        return out

    def dln_phi_dp(self) -> np.ndarray:
        """Partial derivatives of the logarithmic fugacity coefficients w.r.t.
        pressure at constant temperature in ``[1 / Pa]``."""
        return self.molar_volume() / (
            R_IDEAL_MOL * self.temperature
        ) - 1.0 / self.pressure()

    def dln_phi_dnj(self) -> np.ndarray:
        """Partial derivatives of the logarithmic fugacity coefficients w.r.t. the
        amounts of the components at constant temperature and pressure in
        ``[1 / mol]``."""
        res = Contributions.RESIDUAL
        v_i = self.molar_volume()
        nc = self.eos.components()
        f_ij = np.empty((nc, nc))
        for i in range(nc):
            for j in range(i, nc):
                f_ij[i, j] = f_ij[j, i] = self._second(i, j, res)
        f_iv = np.array([self._second(i, "V", res) for i in range(nc)])
        return (
            f_ij
            + np.outer(f_iv, v_i)
            - v_i[np.newaxis, :] / self.volume
            + 1.0 / self.total_moles
        )

    def thermodynamic_factor(self) -> np.ndarray:
        """Thermodynamic factor of the mixture,
        ``Gamma_ij = delta_ij + x_i (dln_phi_i / dx_j)`` for the first
        ``num_components - 1`` components, with the last mole fraction eliminated."""
        q = self.dln_phi_dnj() * self.total_moles
        x = self.molefracs
        nc = self.eos.components()
        gamma = np.eye(nc - 1)
        for i in range(nc - 1):
            for j in range(nc - 1):
                gamma[i, j] += x[i] * (q[i, j] - q[i, nc - 1])
        return gamma

    def helmholtz_energy(
        self, contributions: Contributions = Contributions.TOTAL
    ) -> float:
        """Helmholtz energy in ``[J]``."""
        f = self._helmholtz(self._seeded(float, {}), contributions)
        return R_IDEAL_MOL * self.temperature * value(f)

    def molar_helmholtz_energy(
        self, contributions: Contributions = Contributions.TOTAL
    ) -> float:
        """Molar Helmholtz energy in ``[J / mol]``."""
        return self.helmholtz_energy(contributions) / self.total_moles

    def entropy(self, contributions: Contributions = Contributions.TOTAL) -> float:
        """Entropy in ``[J / K]``."""
        f, f_t = self._first("T", contributions)
        return -R_IDEAL_MOL * (f + self.temperature * f_t)

    def molar_entropy(
        self, contributions: Contributions = Contributions.TOTAL
    ) -> float:
        """Molar entropy in ``[J / mol K]``."""
        return self.entropy(contributions) / self.total_moles

    def ds_dt(self, contributions: Contributions = Contributions.TOTAL) -> float:
        """Partial derivative of the entropy w.r.t. temperature in ``[J / K^2]``."""
        f_t = self._first("T", contributions)[1]
        f_tt = self._second("T", "T", contributions)
        return -R_IDEAL_MOL * (2.0 * f_t + self.temperature * f_tt)

    def partial_molar_entropy(self) -> np.ndarray:
        """Partial molar entropies of the components in ``[J / mol K]``."""
        return -(self.dmu_dt() + self.dp_dni() * self.dp_dt() / self.dp_dv())

    def internal_energy(
        self, contributions: Contributions = Contributions.TOTAL
    ) -> float:
        """Internal energy in ``[J]``."""
        f_t = self._first("T", contributions)[1]
        return -R_IDEAL_MOL * self.temperature**2 * f_t

    def molar_internal_energy(
        self, contributions: Contributions = Contributions.TOTAL
    ) -> float:
        """Molar internal energy in ``[J / mol]``."""
        return self.internal_energy(contributions) / self.total_moles

    def enthalpy(self, contributions: Contributions = Contributions.TOTAL) -> float:
        """Enthalpy in ``[J]``."""
        return (
            self.internal_energy(contributions)
            + self.pressure(contributions) * self.volume
        )

    def molar_enthalpy(
        self, contributions: Contributions = Contributions.TOTAL
    ) -> float:
        """Molar enthalpy in ``[J / mol]``."""
        return self.enthalpy(contributions) / self.total_moles

    def partial_molar_enthalpy(self) -> np.ndarray:
        """Partial molar enthalpies of the components in ``[J / mol]``."""
        t = self.temperature
        return self.chemical_potential() + t * self.partial_molar_entropy()

    def gibbs_energy(self, contributions: Contributions = Contributions.TOTAL) -> float:
        """Gibbs energy in ``[J]``."""
        return (
            self.helmholtz_energy(contributions)
            + self.pressure(contributions) * self.volume
        )

    def molar_gibbs_energy(
        self, contributions: Contributions = Contributions.TOTAL
    ) -> float:
        """Molar Gibbs energy in ``[J / mol]``."""
        return self.gibbs_energy(contributions) / self.total_moles

    def c_v(self, contributions: Contributions = Contributions.TOTAL) -> float:
        """Molar isochoric heat capacity in ``[J / mol K]``."""
        return self.temperature * self.ds_dt(contributions) / self.total_moles

    def dc_v_dt(self, contributions: Contributions = Contributions.TOTAL) -> float:
        """Partial derivative of the molar isochoric heat capacity w.r.t.
        temperature in ``[J / mol K^2]``."""
        t = self.temperature
        f_t = self._first("T", contributions)[1]
        f_tt = self._second("T", "T", contributions)
        f_ttt = self._third("T", contributions)
        return (
            -R_IDEAL_MOL
            * (2.0 * f_t + 4.0 * t * f_tt + t * t * f_ttt)
            / self.total_moles
        )

    def c_p(self, contributions: Contributions = Contributions.TOTAL) -> float:
        """Molar isobaric heat capacity in ``[J / mol K]``."""
        if contributions is Contributions.IDEAL_GAS:
            return self.c_v(contributions) + R_IDEAL_MOL
        c_p = self.c_v() - self.temperature / self.total_moles * self.dp_dt() ** 2 / (
            self.dp_dv()
        )
        if contributions is Contributions.RESIDUAL:
            return c_p - self.c_p(Contributions.IDEAL_GAS)
        return c_p

    def isothermal_compressibility(self) -> float:
        """Isothermal compressibility in ``[1 / Pa]``."""
        return -1.0 / (self.dp_dv() * self.volume)

    def isentropic_compressibility(self) -> float:
        """Isentropic compressibility in ``[1 / Pa]``."""
        return self.isothermal_compressibility() * self.c_v() / self.c_p()

    def joule_thomson(self) -> float:
        """Joule-Thomson coefficient in ``[K / Pa]``."""
        alpha = -self.dp_dt() / (self.dp_dv() * self.volume)
        return (
            self.volume
            * (self.temperature * alpha - 1.0)
            / (self.total_moles * self.c_p())
        )

    def structure_factor(self) -> float:
        """Structure factor at zero wave number."""
        return -(R_IDEAL_MOL * self.temperature * self.total_moles) / (
            self.volume**2 * self.dp_dv()
        )

    # endregion

    # region contributions

    def helmholtz_energy_contributions(self) -> list[tuple[str, float]]:
        """Helmholtz energy in ``[J]`` of the ideal gas and of each contribution of
        the equation of state."""
        state = self._seeded(float, {})
        rt = R_IDEAL_MOL * self.temperature
        out = [("Ideal gas", rt * value(self.eos.ideal_gas().helmholtz(state)))]
        for name, f in self.eos.residual_helmholtz_contributions(state):
            out.append((name, rt * value(f)))
        return out

    def pressure_contributions(self) -> list[tuple[str, float]]:
        """Pressure in ``[Pa]`` of the ideal gas and of each contribution of the
        equation of state."""
        state = self._seeded(Dual, {"V": (1.0,)})
        rt = R_IDEAL_MOL * self.temperature
        out = [("Ideal gas", self.density * rt)]
        for name, f in self.eos.residual_helmholtz_contributions(state):
            out.append((name, -rt * _derivative(f, "eps")))
        return out

    def chemical_potential_contributions(
        self, component: int
    ) -> list[tuple[str, float]]:
        """Chemical potential in ``[J / mol]`` of one component, split into the ideal
        gas and each contribution of the equation of state."""
        state = self._seeded(Dual, {component: (1.0,)})
        rt = R_IDEAL_MOL * self.temperature
        ideal = self.eos.ideal_gas().helmholtz(state)
        mu_ig = rt * _derivative(ideal, "eps")
        if self.moles[component] == 0.0:
            mu_ig = -np.inf
        out = [("Ideal gas", mu_ig)]
        for name, f in self.eos.residual_helmholtz_contributions(state):
            out.append((name, rt * _derivative(f, "eps")))
        return out

    # endregion

    # region mass specific properties

    def total_molar_weight(self) -> float:
        """Molar weight of the mixture in ``[kg / mol]``."""
        return float(np.dot(self.molefracs, self.eos.molar_weight()))

    def mass(self) -> np.ndarray:
        """Masses of the components in ``[kg]``."""
        return self.moles * self.eos.molar_weight()

    def total_mass(self) -> float:
        """Total mass in ``[kg]``."""
        return float(self.mass().sum())

    def mass_density(self) -> float:
        """Mass density in ``[kg / m^3]``."""
        return self.density * self.total_molar_weight()

    def massfracs(self) -> np.ndarray:
        """Mass fractions of the components."""
        return self.mass() / self.total_mass()

    def speed_of_sound(self) -> float:
        """Speed of sound in ``[m / s]``."""
        kappa_s = self.isentropic_compressibility()
        return float(np.sqrt(1.0 / (self.mass_density() * kappa_s)))

    def specific_helmholtz_energy(
        self, contributions: Contributions = Contributions.TOTAL
    ) -> float:
        """Specific Helmholtz energy in ``[J / kg]``."""
        return self.molar_helmholtz_energy(contributions) / self.total_molar_weight()

    def specific_entropy(
        self, contributions: Contributions = Contributions.TOTAL
    ) -> float:
        """Specific entropy in ``[J / kg K]``."""
        return self.molar_entropy(contributions) / self.total_molar_weight()

    def specific_internal_energy(
        self, contributions: Contributions = Contributions.TOTAL
    ) -> float:
        """Specific internal energy in ``[J / kg]``."""
        return self.molar_internal_energy(contributions) / self.total_molar_weight()

    def specific_enthalpy(
        self, contributions: Contributions = Contributions.TOTAL
    ) -> float:
        """Specific enthalpy in ``[J / kg]``."""
        return self.molar_enthalpy(contributions) / self.total_molar_weight()

    def specific_gibbs_energy(
        self, contributions: Contributions = Contributions.TOTAL
    ) -> float:
        """Specific Gibbs energy in ``[J / kg]``."""
        return self.molar_gibbs_energy(contributions) / self.total_molar_weight()

    # endregion

    def __repr__(self) -> str:
        return (
            f"State(T={self.temperature:.5f} K, rho={self.density:.5f} mol/m^3, "
            f"x={np.array2string(self.molefracs, precision=5)})"
        )
