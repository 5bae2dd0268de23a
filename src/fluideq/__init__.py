"""   fluideq.

Root directory for the fluideq package, a library for thermodynamic states and phase
equilibria of fluids described by Helmholtz energy equations of state. Contains the
following sub-packages and modules:

dual: Dual numbers for the automatic differentiation of the Helmholtz energy.

equation_of_state: Interfaces for residual and ideal gas Helmholtz energy models.

cubic, joback: The Peng-Robinson equation of state and Joback ideal gas model.

state: Thermodynamic states, density iteration, critical points, stability analysis.

phase_equilibria: Pure component equilibria, bubble and dew points, flash,
heteroazeotropes and phase diagrams.

utils: Logging of solver timings.

All quantities are in SI units.

isort:skip_file

"""

import configparser
import os
from pathlib import Path

__version__ = "0.1.0"

# Try to read the config file from the directory where python process was launched
try:
    cwd = Path(os.getcwd())
    pth = cwd / Path("fluideq.cfg")
    cfg = configparser.ConfigParser()
    cfg.read(pth)
    config = dict(cfg)
except (OSError, configparser.Error):
    # the assumption is that no configurations are given
    config = {}

from fluideq._core import *
from fluideq.errors import *
from fluideq.solver_options import Verbosity, SolverOptions

from fluideq import dual
from fluideq.equation_of_state import *
from fluideq.cubic import *
from fluideq.joback import *

from fluideq.state import *
from fluideq.phase_equilibria import *

from fluideq import utils
