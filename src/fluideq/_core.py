"""This private module contains central constants and flags for the entire package.

Changes here should be done with much care.

"""

from __future__ import annotations

__all__ = [
    "R_IDEAL_MOL",
    "P_REF",
    "T_REF",
    "REFERENCE_MOLES",
]


NUMBA_CACHE: bool = True
"""Flag to instruct the numba compiler to cache (!and use cached!) functions.

This might cause some confusion in the developing process due to some lack in numba's
caching functionality.
(Does not recognize changes in nested functions and hence does not trigger
re-compilation).

Use with care.

See Also:
    https://numba.readthedocs.io/en/stable/user/jit.html#cache

"""

NUMBA_FAST_MATH: bool = False
"""Flag to instruct the numba compiler to use it's ``fastmath`` functions.

To be used with care, due to loss in precision.

See Also:
    https://numba.readthedocs.io/en/stable/reference/jit-compilation.html#numba.jit

"""

R_IDEAL_MOL: float = 8.31446261815324
"""Universal gas constant in ``[J / K mol]``."""

P_REF: float = 1e5
"""Standard state pressure of the ideal gas contributions in ``[Pa]``."""

T_REF: float = 298.15
"""Standard state temperature of the ideal gas contributions in ``[K]``.

Ideal gas enthalpies and entropies of all components vanish at ``T_REF`` and
``P_REF``.

"""

REFERENCE_MOLES: float = 1.0
"""Amount of substance in ``[mol]`` used whenever a state is requested without
specifying the system size (e.g. pure components or mole fractions only)."""
