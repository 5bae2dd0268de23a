"""Sub-package with solvers for phase equilibria and the construction of phase
diagrams.

.. rubric:: Module guide

Equilibria of two or three phases are stored in the containers of
:mod:`~fluideq.phase_equilibria.phase_equilibrium`. The solvers are

1. :mod:`~fluideq.phase_equilibria.vle_pure` for pure components at given temperature
   or pressure,
2. :mod:`~fluideq.phase_equilibria.bubble_dew` for bubble and dew points of mixtures,
3. :mod:`~fluideq.phase_equilibria.tp_flash` for isothermal-isobaric flashes, with the
   compiled Rachford-Rice solver in :mod:`~fluideq.phase_equilibria.rachford_rice`,
4. :mod:`~fluideq.phase_equilibria.heteroazeotrope` for vapor-liquid-liquid equilibria
   of binary mixtures.

Phase diagrams are sequences of equilibria obtained by continuation, see
:mod:`~fluideq.phase_equilibria.phase_diagram_pure` and
:mod:`~fluideq.phase_equilibria.phase_diagram_binary`.

"""

__all__ = []

from . import (
    bubble_dew,
    heteroazeotrope,
    phase_diagram_binary,
    phase_diagram_pure,
    phase_equilibrium,
    rachford_rice,
    tp_flash,
    vle_pure,
)

# Extend before the star imports, which shadow some modules with equally named
# functions.
__all__.extend(phase_equilibrium.__all__)
__all__.extend(rachford_rice.__all__)
__all__.extend(vle_pure.__all__)
__all__.extend(bubble_dew.__all__)
__all__.extend(tp_flash.__all__)
__all__.extend(heteroazeotrope.__all__)
__all__.extend(phase_diagram_pure.__all__)
__all__.extend(phase_diagram_binary.__all__)

from .phase_equilibrium import *
from .rachford_rice import *
from .vle_pure import *
from .bubble_dew import *
from .tp_flash import *
from .heteroazeotrope import *
from .phase_diagram_pure import *
from .phase_diagram_binary import *
