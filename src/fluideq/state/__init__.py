"""Sub-package containing the thermodynamic state of a homogeneous phase, critical
point solvers and the stability analysis."""

__all__ = []

from . import critical_point, density_iteration, stability_analysis, state

# Extend before the star imports, which shadow the modules with equally named
# functions.
__all__.extend(state.__all__)
__all__.extend(density_iteration.__all__)
__all__.extend(critical_point.__all__)
__all__.extend(stability_analysis.__all__)

from .critical_point import *
from .density_iteration import *
from .stability_analysis import *
from .state import *
