"""Timing logger for fluideq.

Logging is controlled by the configuration file fluideq.cfg, which should be
placed in the current working directory (where the python script is initiated).
All logging-related information is located in a section in the cfg-file with
heading logging; see sample file below.

By default, logging is switched off. It can be turned on by setting the keyword
'active' to True.

Logging can be time consuming if applied to functions called many times, hence only
the public entry points of the solvers are decorated. They are classified as relevant
for the following categories

    all: Used to log all decorated functions.
    state: Construction of states by iterative solvers.
    critical_point: Critical point solvers.
    phase_equilibria: Flash, stability analysis, bubble and dew points.
    phase_diagram: Phase diagram continuation.

Example logging section of fluideq.cfg:

    [logging]
    # Activate logging. Without this, the rest of the section has no effect
    active: True
    # To only log specific sections, use e.g.
    sections: critical_point
    # multiple sections are separated by commas:
    sections: state, phase_diagram

"""

from __future__ import annotations

import functools
import inspect
import logging
import os
import time
from typing import Dict, Sequence

import fluideq as fe

__all__ = ["time_logger"]


# Try to access configuration information, as activated by the import of fluideq
try:
    config: Dict = fe.config["logging"]  # type: ignore
    raw_sections = config.get("sections", "all")
    active_sections = [s.strip().lower() for s in raw_sections.split(",")]
    logger_is_active = config.get("active", "false").strip().lower() == "true"
    always_log = "all" in active_sections

except KeyError:
    config = {}
    active_sections = ["all"]
    logger_is_active = False
    always_log = True

t_logger = logging.getLogger("fluideq.Timer")
t_logger.setLevel(logging.INFO)


if logger_is_active and not t_logger.hasHandlers():
    # Add handler to write to file.
    time_handler = logging.FileHandler("FluidEqTimings.log")
    time_handler.setLevel(logging.INFO)
    time_formatter = logging.Formatter("%(message)s")
    time_handler.setFormatter(time_formatter)
    t_logger.addHandler(time_handler)

# Find where in the file path the directory 'fluideq' is located.
# We will use this below to strip away the common parts of file names.
separator = os.sep
path_length = __file__.split(separator).index("fluideq")


def time_logger(sections: Sequence[str]):
    """A decorator that measures elapsed time for a function."""

    def inner_func(func):
        @functools.wraps(func)
        def log_time(*args, **kwargs):
            if not logger_is_active:
                return func(*args, **kwargs)
            elif always_log or any([s in active_sections for s in sections]):
                # Name of the file relative to the package directory
                fn = separator.join(
                    inspect.getfile(func).split(separator)[path_length + 1 :]
                )
                name = f"{func.__name__} in file {fn}."

                t_logger.log(level=logging.INFO, msg=f"Calling {name}")

                start_time = time.perf_counter()
                value = func(*args, **kwargs)
                run_time = time.perf_counter() - start_time

                t_logger.log(
                    level=logging.INFO,
                    msg=f"Finished {name} Elapsed time: {run_time:.8f} s",
                )

                return value
            else:
                return func(*args, **kwargs)

        return log_time

    return inner_func
