"""Physical constants and solver defaults for orbital mechanics.

All values in SI units unless otherwise noted. The SGP4 model constants
are the fixed WGS-72-era values of Spacetrack Report #3 and are expressed
in that model's canonical units (Earth radii and minutes).
"""

from __future__ import annotations

import math

# --- Earth parameters (two-body / mean-element path) ---
EARTH_MU_M3_S2: float = 3.986004418e14
"""Earth gravitational parameter (GM) in m³/s²."""

EARTH_RADIUS_M: float = 6.3781363e6
"""Equatorial radius of Earth in m."""

J2_DRIFT_COEFFICIENT: float = -2.064734896e14
"""Mean-element node drift coefficient in deg/day. Scaled by a**-3.5 with a in meters,
so the resulting drift is negligible; use SGP4 for physical J2 rates."""

# --- SGP4 model constants (WGS-72) ---
CK2: float = 5.413080e-4
"""Second zonal harmonic term, 0.5 * J2 * AE**2."""

CK4: float = 0.62098875e-6
"""Fourth zonal harmonic term, -0.375 * J4 * AE**4."""

QOMS2T: float = 1.88027916e-9
"""Drag density parameter ((q0 - s) * AE / XKMPER)**4."""

S: float = 1.01222928
"""Drag density parameter s in Earth radii."""

XJ3: float = -0.253881e-5
"""Third zonal harmonic J3."""

XKE: float = 0.743669161e-1
"""sqrt(GM) in (Earth radii)**1.5 / minute."""

XKMPER: float = 6378.135
"""Earth equatorial radius in km used by SGP4."""

AE: float = 1.0
"""Distance unit of the SGP4 model, in Earth radii."""

TWO_THIRDS: float = 2.0 / 3.0

# --- Time ---
SECONDS_PER_DAY: float = 86400.0
MINUTES_PER_DAY: float = 1440.0
HOURS_PER_DAY: float = 24.0

J2000: float = 2451545.0
"""Julian Date of the J2000 epoch, 2000-01-01 12:00:00."""

GMST_AT_J2000_HOURS: float = 18.697374558
"""Greenwich mean sidereal time at J2000 in hours."""

GMST_HOURS_PER_DAY: float = 24.06570982419076
"""Sidereal hours elapsed per solar day."""

TWO_PI: float = 2.0 * math.pi

# --- Solver defaults ---
KEPLER_TOLERANCE: float = 1e-7
"""Convergence threshold on successive Newton-Raphson iterates (radians)."""

KEPLER_MAX_ITERATIONS: int = 50
"""Iteration cap before a Newton-Raphson solve is reported as non-convergent."""

ECCENTRICITY_EPSILON: float = 1e-4
"""Eccentricity below which SGP4 drops the e0-divided drag terms."""

ANGULAR_EPSILON: float = 1e-11
"""Magnitude below which node or eccentricity vectors are treated as zero."""
