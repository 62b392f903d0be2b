"""
satrack: satellite tracking from Two-Line Element sets.

Parses NORAD TLEs, propagates them with near-Earth SGP4 or a quick
mean-element two-body model, and converts between classical orbital
elements, inertial state vectors and Euler-angle reference frames.
"""

from __future__ import annotations

__version__ = "0.1.0-dev"

from satrack.core.errors import (
    MalformedTLE,
    NumericFieldError,
    PropagationError,
    SatrackError,
    SolverNonConvergence,
)
from satrack.core.tle import TLE, parse_tle, load_tles
from satrack.core.timescale import JulianDate, greenwich_sidereal_time, local_sidereal_time
from satrack.core.linalg import Vector3, Matrix3
from satrack.core.frames import EulerAngles, EulerOrder, ReferenceFrame, rotate_between
from satrack.core.kepler import solve_kepler
from satrack.core.state import StateVectors
from satrack.core.elements import COE, propagate_mean_elements
from satrack.core.propagation import SGP4Model, propagate, propagate_batch

__all__ = [
    "__version__",
    "TLE",
    "parse_tle",
    "load_tles",
    "JulianDate",
    "greenwich_sidereal_time",
    "local_sidereal_time",
    "Vector3",
    "Matrix3",
    "EulerAngles",
    "EulerOrder",
    "ReferenceFrame",
    "rotate_between",
    "solve_kepler",
    "StateVectors",
    "COE",
    "propagate_mean_elements",
    "SGP4Model",
    "propagate",
    "propagate_batch",
    "SatrackError",
    "MalformedTLE",
    "NumericFieldError",
    "SolverNonConvergence",
    "PropagationError",
]
