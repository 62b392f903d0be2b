"""Kepler's equation and anomaly conversions.

All angles in this module are in radians. Converted anomalies are returned
in [0, 2π).
"""

from __future__ import annotations

import logging
import math
from typing import Callable

from satrack.core.errors import SolverNonConvergence
from satrack.utils.constants import (
    EARTH_MU_M3_S2,
    KEPLER_MAX_ITERATIONS,
    KEPLER_TOLERANCE,
    SECONDS_PER_DAY,
    TWO_PI,
)

logger = logging.getLogger(__name__)


def newton_raphson(
    function: Callable[[float], float],
    derivative: Callable[[float], float],
    initial: float,
    *,
    tolerance: float = KEPLER_TOLERANCE,
    max_iterations: int = KEPLER_MAX_ITERATIONS,
) -> float:
    """Find a root of ``function`` by Newton-Raphson iteration.

    Iterates ``x <- x - f(x) / f'(x)`` from ``initial`` until two successive
    iterates differ by at most ``tolerance``.

    Args:
        function: The function whose root is sought.
        derivative: Its first derivative.
        initial: Starting guess.
        tolerance: Convergence threshold on the step size.
        max_iterations: Maximum number of updates.

    Returns:
        The converged iterate.

    Raises:
        SolverNonConvergence: If ``max_iterations`` updates do not converge.
    """
    x = initial
    step = math.inf
    for _ in range(max_iterations):
        x_next = x - function(x) / derivative(x)
        step = abs(x_next - x)
        x = x_next
        if step <= tolerance:
            return x
    logger.error(
        "Newton-Raphson failed to converge from %r after %d iterations",
        initial,
        max_iterations,
    )
    raise SolverNonConvergence(max_iterations, step)


def solve_kepler(
    mean_anomaly: float,
    eccentricity: float,
    *,
    tolerance: float = KEPLER_TOLERANCE,
    max_iterations: int = KEPLER_MAX_ITERATIONS,
) -> float:
    """Solve ``M = E - e sin E`` for the eccentric anomaly ``E``.

    The iteration is seeded with ``E = M``, so the result lies on the same
    revolution as ``mean_anomaly``.
    """
    return newton_raphson(
        lambda E: E - eccentricity * math.sin(E) - mean_anomaly,
        lambda E: 1.0 - eccentricity * math.cos(E),
        mean_anomaly,
        tolerance=tolerance,
        max_iterations=max_iterations,
    )


def _wrap(angle: float, period: float) -> float:
    wrapped = angle % period
    # Tiny negative angles round up to exactly one period.
    return 0.0 if wrapped >= period else wrapped


def wrap_two_pi(angle: float) -> float:
    """Map an angle into [0, 2π)."""
    return _wrap(angle, TWO_PI)


def wrap_degrees(angle: float) -> float:
    """Map an angle in degrees into [0, 360)."""
    return _wrap(angle, 360.0)


def atan2_positive(y: float, x: float) -> float:
    """``atan2`` mapped into [0, 2π)."""
    return wrap_two_pi(math.atan2(y, x))


def mean_to_eccentric(mean_anomaly: float, eccentricity: float) -> float:
    return solve_kepler(mean_anomaly, eccentricity)


def eccentric_to_true(eccentric_anomaly: float, eccentricity: float) -> float:
    return atan2_positive(
        math.sqrt(1.0 - eccentricity**2) * math.sin(eccentric_anomaly),
        math.cos(eccentric_anomaly) - eccentricity,
    )


def mean_to_true(mean_anomaly: float, eccentricity: float) -> float:
    return eccentric_to_true(mean_to_eccentric(mean_anomaly, eccentricity), eccentricity)


def true_to_eccentric(true_anomaly: float, eccentricity: float) -> float:
    return atan2_positive(
        math.sqrt(1.0 - eccentricity**2) * math.sin(true_anomaly),
        math.cos(true_anomaly) + eccentricity,
    )


def eccentric_to_mean(eccentric_anomaly: float, eccentricity: float) -> float:
    return eccentric_anomaly - eccentricity * math.sin(eccentric_anomaly)


def true_to_mean(true_anomaly: float, eccentricity: float) -> float:
    return eccentric_to_mean(true_to_eccentric(true_anomaly, eccentricity), eccentricity)


def mean_motion_to_semi_major_axis(rev_per_day: float, mu: float = EARTH_MU_M3_S2) -> float:
    """Semi-major axis in meters for a mean motion in rev/day (Kepler's third law)."""
    n = rev_per_day * TWO_PI / SECONDS_PER_DAY
    return (mu / n**2) ** (1.0 / 3.0)


def semi_major_axis_to_mean_motion(semi_major_axis_m: float, mu: float = EARTH_MU_M3_S2) -> float:
    """Mean motion in rad/s for a semi-major axis in meters."""
    return math.sqrt(mu / semi_major_axis_m**3)
