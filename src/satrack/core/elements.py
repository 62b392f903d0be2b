"""Classical orbital elements and the two-body state conversion.

Methods follow Bate, Mueller & White, *Fundamentals of Astrodynamics*:
section 2.4 for state vectors to elements, and section 10.3.5 for the
secular mean-element drift applied to TLE elements.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Union

from satrack.core.frames import EulerAngles, EulerOrder, rotate_from
from satrack.core.kepler import (
    eccentric_to_true,
    mean_to_true,
    semi_major_axis_to_mean_motion,
    solve_kepler,
    true_to_eccentric,
    true_to_mean,
    wrap_degrees,
)
from satrack.core.linalg import Vector3, clamp
from satrack.core.state import StateVectors
from satrack.core.timescale import JulianDate
from satrack.core.tle import TLE
from satrack.utils.constants import (
    ANGULAR_EPSILON,
    EARTH_MU_M3_S2,
    J2_DRIFT_COEFFICIENT,
    SECONDS_PER_DAY,
    TWO_PI,
)

logger = logging.getLogger(__name__)

PERIFOCAL_TO_INERTIAL = EulerOrder.from_string("ZXZ")

_Z_HAT = Vector3(0.0, 0.0, 1.0)

Offset = Union[float, JulianDate]


@dataclass(frozen=True)
class COE:
    """Classical orbital elements.

    Attributes:
        semi_major_axis_m: Semi-major axis in meters.
        eccentricity: Orbital eccentricity.
        raan_deg: Right ascension of the ascending node.
        arg_perigee_deg: Argument of perigee.
        inclination_deg: Inclination, between 0 and 180 degrees.
        true_anomaly_deg: True anomaly.
    """

    semi_major_axis_m: float
    eccentricity: float
    raan_deg: float
    arg_perigee_deg: float
    inclination_deg: float
    true_anomaly_deg: float

    @classmethod
    def from_tle(cls, tle: TLE, dt_days: float = 0.0) -> COE:
        """Mean elements of a TLE, optionally drifted ``dt_days`` from its epoch.

        Mean anomaly advances with the TLE's mean motion and its first two
        derivatives. Semi-major axis and eccentricity decay linearly with the
        first derivative, and the node and perigee drift linearly with the
        mean-element J2 coefficient. Inclination is held constant.

        Args:
            tle: Source element set.
            dt_days: Offset from the TLE epoch in solar days.
        """
        n0 = tle.mean_motion_rev_per_day
        e0 = tle.eccentricity
        a0 = (EARTH_MU_M3_S2 / (n0 * TWO_PI / SECONDS_PER_DAY) ** 2) ** (1.0 / 3.0)

        delta_m = (
            n0 * dt_days
            + tle.mean_motion_dot * dt_days**2
            + tle.mean_motion_ddot * dt_days**3
        ) * TWO_PI
        mean_anomaly = (math.radians(tle.mean_anomaly_deg) + delta_m) % TWO_PI

        n0_dot = 2.0 * tle.mean_motion_dot
        a_dot = -2.0 * a0 * n0_dot / (3.0 * n0)
        e_dot = -2.0 * (1.0 - e0) * n0_dot / (3.0 * n0)
        node_dot = (
            J2_DRIFT_COEFFICIENT
            * a0**-3.5
            * (1.0 - e0**2) ** -2
            * math.cos(math.radians(tle.inclination_deg))
        )

        return cls(
            semi_major_axis_m=a0 + a_dot * dt_days,
            eccentricity=e0 + e_dot * dt_days,
            raan_deg=wrap_degrees(tle.raan_deg + node_dot * dt_days),
            arg_perigee_deg=wrap_degrees(tle.arg_perigee_deg + 0.5 * node_dot * dt_days),
            inclination_deg=tle.inclination_deg,
            true_anomaly_deg=math.degrees(mean_to_true(mean_anomaly, e0)),
        )

    @classmethod
    def from_state_vectors(cls, position: Vector3, velocity: Vector3) -> COE:
        """Determine the osculating elements of an inertial position/velocity pair.

        Equatorial orbits have no line of nodes: RAAN is reported as 0 and the
        argument of perigee is measured from the x-axis. Circular orbits have
        no perigee: the argument of perigee is 0 and the true anomaly is
        measured from the ascending node.
        """
        r = position.magnitude()
        v_sq = velocity.dot(velocity)
        r_dot_v = position.dot(velocity)

        h = position.cross(velocity)
        h_mag = h.magnitude()
        node = _Z_HAT.cross(h)
        e_vec = (position * (v_sq - EARTH_MU_M3_S2 / r) - velocity * r_dot_v) / EARTH_MU_M3_S2
        ecc = e_vec.magnitude()

        inclination = math.degrees(math.acos(clamp(h.z / h_mag, -1.0, 1.0)))

        node_mag = node.magnitude()
        equatorial = node_mag <= ANGULAR_EPSILON * h_mag
        if equatorial:
            node_hat = Vector3(1.0, 0.0, 0.0)
            raan = 0.0
        else:
            node_hat = node / node_mag
            raan = math.degrees(math.acos(clamp(node_hat.x, -1.0, 1.0)))
            if node_hat.y < 0.0:
                raan = 360.0 - raan

        if ecc > ANGULAR_EPSILON:
            aop = math.degrees(node_hat.angle_to(e_vec))
            if equatorial:
                if node_hat.cross(e_vec).dot(h) < 0.0:
                    aop = 360.0 - aop
            elif e_vec.z < 0.0:
                aop = 360.0 - aop
            true_anomaly = math.degrees(e_vec.angle_to(position))
            if r_dot_v < 0.0:
                true_anomaly = 360.0 - true_anomaly
        else:
            aop = 0.0
            true_anomaly = math.degrees(node_hat.angle_to(position))
            if node_hat.cross(position).dot(h) < 0.0:
                true_anomaly = 360.0 - true_anomaly

        return cls(
            semi_major_axis_m=h_mag**2 / ((1.0 - ecc**2) * EARTH_MU_M3_S2),
            eccentricity=ecc,
            raan_deg=wrap_degrees(raan),
            arg_perigee_deg=wrap_degrees(aop),
            inclination_deg=inclination,
            true_anomaly_deg=wrap_degrees(true_anomaly),
        )

    @classmethod
    def from_state(cls, state: StateVectors) -> COE:
        return cls.from_state_vectors(state.position, state.velocity)

    @property
    def mean_motion_rad_s(self) -> float:
        return semi_major_axis_to_mean_motion(self.semi_major_axis_m)

    @property
    def period_s(self) -> float:
        return TWO_PI / self.mean_motion_rad_s

    @property
    def eccentric_anomaly_deg(self) -> float:
        return math.degrees(
            true_to_eccentric(math.radians(self.true_anomaly_deg), self.eccentricity)
        )

    @property
    def mean_anomaly_deg(self) -> float:
        return math.degrees(
            true_to_mean(math.radians(self.true_anomaly_deg), self.eccentricity)
        )

    def to_state_vectors(self, dt_days: float = 0.0, *, conic_radius: bool = False) -> StateVectors:
        """Inertial state on the unperturbed orbit ``dt_days`` from now.

        The elements themselves are held fixed; only the anomaly advances.

        By default the radius is ``a(1 - e cos E)`` with the eccentric anomaly
        read as degrees, the convention the reference ISS mean-element states
        were published in. It stays within ``2ae`` of the conic radius. Pass
        ``conic_radius=True`` for the exact two-body radius, which makes the
        state satisfy vis-viva and invert cleanly through
        :meth:`from_state_vectors`.

        Args:
            dt_days: Offset in solar days; negative values give past states.
            conic_radius: Use the exact two-body radius ``a(1 - e cos E)``.
        """
        a = self.semi_major_axis_m
        e = self.eccentricity
        mean_anomaly = (
            true_to_mean(math.radians(self.true_anomaly_deg), e)
            + dt_days * SECONDS_PER_DAY * self.mean_motion_rad_s
        )
        eccentric = solve_kepler(mean_anomaly, e)
        true_anomaly = eccentric_to_true(eccentric, e)
        if conic_radius:
            radius = a * (1.0 - e * math.cos(eccentric))
        else:
            radius = a * (1.0 - e * math.cos(math.radians(eccentric)))

        position_pf = Vector3(math.cos(true_anomaly), math.sin(true_anomaly), 0.0) * radius
        velocity_pf = Vector3(
            -math.sin(eccentric),
            math.sqrt(1.0 - e**2) * math.cos(eccentric),
            0.0,
        ) * (math.sqrt(EARTH_MU_M3_S2 * a) / radius)

        angles = EulerAngles(self.raan_deg, self.inclination_deg, self.arg_perigee_deg)
        return StateVectors(
            position=rotate_from(PERIFOCAL_TO_INERTIAL, position_pf, angles),
            velocity=rotate_from(PERIFOCAL_TO_INERTIAL, velocity_pf, angles),
        )


def offset_days(tle: TLE, offset: Offset) -> float:
    """Days from the TLE epoch to ``offset`` (a day count or a Julian Date)."""
    if isinstance(offset, JulianDate):
        return offset.difference(JulianDate.from_tle(tle))
    return float(offset)


def propagate_mean_elements(
    tle: TLE, offset: Offset = 0.0, *, conic_radius: bool = False
) -> StateVectors:
    """Quick two-body state from a TLE's drifted mean elements.

    Args:
        tle: Source element set.
        offset: Days since the TLE epoch, or an absolute Julian Date.
        conic_radius: Use the exact two-body radius, see
            :meth:`COE.to_state_vectors`.

    Returns:
        Inertial position (m) and velocity (m/s).
    """
    dt = offset_days(tle, offset)
    state = COE.from_tle(tle, dt).to_state_vectors(conic_radius=conic_radius)
    logger.debug(
        "Mean-element state for catalog number %d at %+.6f days", tle.catalog_number, dt
    )
    return state
