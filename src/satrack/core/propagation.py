"""Orbital propagation via SGP4.

Near-Earth SGP4 as published in Spacetrack Report #3 (Hoots & Roehrich,
1980), with the WGS-72 constants from ``satrack.utils.constants``. Output is
in the TEME frame native to the model, scaled to meters and meters/second.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from satrack.core.elements import Offset, offset_days
from satrack.core.errors import PropagationError, SolverNonConvergence
from satrack.core.kepler import atan2_positive, newton_raphson
from satrack.core.linalg import Vector3
from satrack.core.state import StateVectors
from satrack.core.tle import TLE
from satrack.utils.constants import (
    AE,
    CK2,
    CK4,
    ECCENTRICITY_EPSILON,
    MINUTES_PER_DAY,
    QOMS2T,
    S,
    TWO_PI,
    TWO_THIRDS,
    XJ3,
    XKE,
    XKMPER,
)

logger = logging.getLogger(__name__)

POSITION_SCALE_M = XKMPER * 1000.0
"""Earth radii to meters."""

VELOCITY_SCALE_M_S = XKMPER * 1000.0 / 60.0
"""Earth radii per minute to meters per second."""

DEEP_SPACE_PERIOD_MIN = 225.0
"""Orbital period at and above which SGP4 needs deep-space terms."""

_XLCOF_DENOMINATOR_FLOOR = 1.5e-12
_MIN_ECCENTRICITY = -1e-3
_ECCENTRICITY_FLOOR = 1e-6


@dataclass(frozen=True)
class SGP4Model:
    """Time-independent SGP4 state for one element set.

    Angles are in radians, distances in Earth radii and time in minutes.
    Build with :meth:`from_tle`; the fields are the initialisation
    coefficients of the model and are not meant to be set by hand.
    """

    catalog_number: int
    bstar: float
    # mean elements at epoch
    xm0: float
    xnode0: float
    omega0: float
    e0: float
    xincl: float
    xn0dp: float
    a0dp: float
    # trigonometric and polynomial functions of inclination
    cosi0: float
    sini0: float
    x3thm1: float
    x1mth2: float
    x7thm1: float
    # drag
    simplified: bool
    s4: float
    tsi: float
    eta: float
    c1: float
    c4: float
    c5: float
    d2: float
    d3: float
    d4: float
    t2cof: float
    t3cof: float
    t4cof: float
    t5cof: float
    # secular rates
    xmdot: float
    omgdot: float
    xnodot: float
    omgcof: float
    xmcof: float
    xnodcf: float
    # long-period periodics
    xlcof: float
    aycof: float
    delm0: float
    sinm0: float

    @classmethod
    def from_tle(cls, tle: TLE) -> SGP4Model:
        """Initialise the model from a TLE's mean elements."""
        e0 = tle.eccentricity
        xincl = math.radians(tle.inclination_deg)
        omega0 = math.radians(tle.arg_perigee_deg)
        xm0 = math.radians(tle.mean_anomaly_deg)
        xn0 = tle.mean_motion_rev_per_day * TWO_PI / MINUTES_PER_DAY
        bstar = tle.bstar

        # Recover the original mean motion and semi-major axis.
        a1 = (XKE / xn0) ** TWO_THIRDS
        cosi0 = math.cos(xincl)
        theta2 = cosi0 * cosi0
        x3thm1 = 3.0 * theta2 - 1.0
        beta02 = 1.0 - e0 * e0
        beta0 = math.sqrt(beta02)
        del1 = 1.5 * CK2 * x3thm1 / (a1 * a1 * beta0 * beta02)
        a0 = a1 * (1.0 - del1 * (0.5 * TWO_THIRDS + del1 * (1.0 + 134.0 / 81.0 * del1)))
        del0 = 1.5 * CK2 * x3thm1 / (a0 * a0 * beta0 * beta02)
        xn0dp = xn0 / (1.0 + del0)
        a0dp = a0 / (1.0 - del0)

        period_min = TWO_PI / xn0dp
        if period_min >= DEEP_SPACE_PERIOD_MIN:
            logger.warning(
                "Catalog number %d has a %.1f min period; deep-space terms are not modelled",
                tle.catalog_number,
                period_min,
            )

        # Perigee below 220 km: truncate drag to the C1 terms.
        simplified = a0dp * (1.0 - e0) / AE < 220.0 / XKMPER + AE

        s4 = S
        qoms24 = QOMS2T
        perigee_km = (a0dp * (1.0 - e0) - AE) * XKMPER
        if perigee_km < 156.0:
            s4 = 20.0 if perigee_km <= 98.0 else perigee_km - 78.0
            qoms24 = ((120.0 - s4) * AE / XKMPER) ** 4
            s4 = s4 / XKMPER + AE

        pinvsq = 1.0 / (a0dp * a0dp * beta02 * beta02)
        tsi = 1.0 / (a0dp - s4)
        eta = a0dp * e0 * tsi
        etasq = eta * eta
        eeta = e0 * eta
        psisq = abs(1.0 - etasq)
        coef = qoms24 * tsi**4
        coef1 = coef / psisq**3.5
        c2 = coef1 * xn0dp * (
            a0dp * (1.0 + 1.5 * etasq + eeta * (4.0 + etasq))
            + 0.75 * CK2 * tsi / psisq * x3thm1 * (8.0 + 3.0 * etasq * (8.0 + etasq))
        )
        c1 = bstar * c2
        sini0 = math.sin(xincl)
        a30vk2 = -XJ3 / CK2 * AE**3
        if e0 > ECCENTRICITY_EPSILON:
            c3 = coef * tsi * a30vk2 * xn0dp * AE * sini0 / e0
        else:
            c3 = 0.0
        x1mth2 = 1.0 - theta2
        c4 = 2.0 * xn0dp * coef1 * a0dp * beta02 * (
            eta * (2.0 + 0.5 * etasq)
            + e0 * (0.5 + 2.0 * etasq)
            - 2.0 * CK2 * tsi / (a0dp * psisq) * (
                -3.0 * x3thm1 * (1.0 - 2.0 * eeta + etasq * (1.5 - 0.5 * eeta))
                + 0.75 * x1mth2 * (2.0 * etasq - eeta * (1.0 + etasq)) * math.cos(2.0 * omega0)
            )
        )
        c5 = 2.0 * coef1 * a0dp * beta02 * (1.0 + 2.75 * (etasq + eeta) + eeta * etasq)

        theta4 = theta2 * theta2
        temp1 = 3.0 * CK2 * pinvsq * xn0dp
        temp2 = temp1 * CK2 * pinvsq
        temp3 = 1.25 * CK4 * pinvsq * pinvsq * xn0dp
        xmdot = (
            xn0dp
            + 0.5 * temp1 * beta0 * x3thm1
            + 0.0625 * temp2 * beta0 * (13.0 - 78.0 * theta2 + 137.0 * theta4)
        )
        x1m5th = 1.0 - 5.0 * theta2
        omgdot = (
            -0.5 * temp1 * x1m5th
            + 0.0625 * temp2 * (7.0 - 114.0 * theta2 + 395.0 * theta4)
            + temp3 * (3.0 - 36.0 * theta2 + 49.0 * theta4)
        )
        xhdot1 = -temp1 * cosi0
        xnodot = xhdot1 + (
            0.5 * temp2 * (4.0 - 19.0 * theta2) + 2.0 * temp3 * (3.0 - 7.0 * theta2)
        ) * cosi0

        omgcof = bstar * c3 * math.cos(omega0)
        xmcof = -TWO_THIRDS * coef * bstar * AE / eeta if e0 > ECCENTRICITY_EPSILON else 0.0
        xnodcf = 3.5 * beta02 * xhdot1 * c1

        denominator = 1.0 + cosi0
        if abs(denominator) < _XLCOF_DENOMINATOR_FLOOR:
            denominator = _XLCOF_DENOMINATOR_FLOOR
        xlcof = 0.125 * a30vk2 * sini0 * (3.0 + 5.0 * cosi0) / denominator
        aycof = 0.25 * a30vk2 * sini0

        d2 = d3 = d4 = t3cof = t4cof = t5cof = 0.0
        if not simplified:
            c1sq = c1 * c1
            d2 = 4.0 * a0dp * tsi * c1sq
            temp = d2 * tsi * c1 / 3.0
            d3 = (17.0 * a0dp + s4) * temp
            d4 = 0.5 * temp * a0dp * tsi * (221.0 * a0dp + 31.0 * s4) * c1
            t3cof = d2 + 2.0 * c1sq
            t4cof = 0.25 * (3.0 * d3 + c1 * (12.0 * d2 + 10.0 * c1sq))
            t5cof = 0.2 * (3.0 * d4 + 12.0 * c1 * d3 + 6.0 * d2 * d2 + 15.0 * c1sq * (2.0 * d2 + c1sq))

        logger.debug(
            "Initialised SGP4 for catalog number %d (perigee %.1f km, simplified=%s)",
            tle.catalog_number,
            perigee_km,
            simplified,
        )
        return cls(
            catalog_number=tle.catalog_number,
            bstar=bstar,
            xm0=xm0,
            xnode0=math.radians(tle.raan_deg),
            omega0=omega0,
            e0=e0,
            xincl=xincl,
            xn0dp=xn0dp,
            a0dp=a0dp,
            cosi0=cosi0,
            sini0=sini0,
            x3thm1=x3thm1,
            x1mth2=x1mth2,
            x7thm1=7.0 * theta2 - 1.0,
            simplified=simplified,
            s4=s4,
            tsi=tsi,
            eta=eta,
            c1=c1,
            c4=c4,
            c5=c5,
            d2=d2,
            d3=d3,
            d4=d4,
            t2cof=1.5 * c1,
            t3cof=t3cof,
            t4cof=t4cof,
            t5cof=t5cof,
            xmdot=xmdot,
            omgdot=omgdot,
            xnodot=xnodot,
            omgcof=omgcof,
            xmcof=xmcof,
            xnodcf=xnodcf,
            xlcof=xlcof,
            aycof=aycof,
            delm0=(1.0 + eta * math.cos(xm0)) ** 3,
            sinm0=math.sin(xm0),
        )

    @property
    def period_minutes(self) -> float:
        return TWO_PI / self.xn0dp

    def step(self, tsince: float) -> tuple[Vector3, Vector3]:
        """Evaluate the model ``tsince`` minutes from epoch.

        Returns:
            Position in Earth radii and velocity in Earth radii per minute.

        Raises:
            PropagationError: If drag drives the eccentricity out of [0, 1).
            SolverNonConvergence: If the Kepler solve does not converge.
        """
        # Secular gravity and atmospheric drag.
        xmdf = self.xm0 + self.xmdot * tsince
        omgadf = self.omega0 + self.omgdot * tsince
        xnoddf = self.xnode0 + self.xnodot * tsince
        omega = omgadf
        xmp = xmdf
        tsq = tsince * tsince
        xnode = xnoddf + self.xnodcf * tsq
        tempa = 1.0 - self.c1 * tsince
        tempe = self.bstar * self.c4 * tsince
        templ = self.t2cof * tsq
        if not self.simplified:
            delomg = self.omgcof * tsince
            delm = self.xmcof * ((1.0 + self.eta * math.cos(xmdf)) ** 3 - self.delm0)
            temp = delomg + delm
            xmp = xmdf + temp
            omega = omgadf - temp
            tcube = tsq * tsince
            tfour = tsince * tcube
            tempa = tempa - self.d2 * tsq - self.d3 * tcube - self.d4 * tfour
            tempe = tempe + self.bstar * self.c5 * (math.sin(xmp) - self.sinm0)
            templ = templ + self.t3cof * tcube + tfour * (self.t4cof + tsince * self.t5cof)

        a = self.a0dp * tempa * tempa
        e = self.e0 - tempe
        if not _MIN_ECCENTRICITY <= e < 1.0:
            logger.error(
                "Eccentricity %.6g out of range for catalog number %d at %+.3f min",
                e,
                self.catalog_number,
                tsince,
            )
            raise PropagationError(
                f"Eccentricity {e:.6g} outside [0, 1) for catalog number "
                f"{self.catalog_number} at {tsince:+.3f} min"
            )
        # Drag can push near-circular orbits marginally negative.
        e = max(e, _ECCENTRICITY_FLOOR)
        xl = xmp + omega + xnode + self.xn0dp * templ
        beta = math.sqrt(1.0 - e * e)
        xn = XKE / a**1.5

        # Long-period periodics.
        axn = e * math.cos(omega)
        temp = 1.0 / (a * beta * beta)
        xlt = xl + temp * self.xlcof * axn
        ayn = e * math.sin(omega) + temp * self.aycof

        # Kepler's equation in eccentric longitude.
        capu = (xlt - xnode) % TWO_PI
        epw = newton_raphson(
            lambda x: x - axn * math.sin(x) + ayn * math.cos(x) - capu,
            lambda x: 1.0 - axn * math.cos(x) - ayn * math.sin(x),
            capu,
        )
        sinepw = math.sin(epw)
        cosepw = math.cos(epw)
        ecose = axn * cosepw + ayn * sinepw
        esine = axn * sinepw - ayn * cosepw

        # Short-period preliminary quantities.
        elsq = axn * axn + ayn * ayn
        temp = 1.0 - elsq
        pl = a * temp
        r = a * (1.0 - ecose)
        temp1 = 1.0 / r
        rdot = XKE * math.sqrt(a) * esine * temp1
        rfdot = XKE * math.sqrt(pl) * temp1
        temp2 = a * temp1
        betal = math.sqrt(temp)
        temp3 = 1.0 / (1.0 + betal)
        cosu = temp2 * (cosepw - axn + ayn * esine * temp3)
        sinu = temp2 * (sinepw - ayn - axn * esine * temp3)
        u = atan2_positive(sinu, cosu)
        sin2u = 2.0 * sinu * cosu
        cos2u = 2.0 * cosu * cosu - 1.0
        temp = 1.0 / pl
        temp1 = CK2 * temp
        temp2 = temp1 * temp

        # Short-period periodics.
        rk = r * (1.0 - 1.5 * temp2 * betal * self.x3thm1) + 0.5 * temp1 * self.x1mth2 * cos2u
        uk = u - 0.25 * temp2 * self.x7thm1 * sin2u
        xnodek = xnode + 1.5 * temp2 * self.cosi0 * sin2u
        xinck = self.xincl + 1.5 * temp2 * self.cosi0 * self.sini0 * cos2u
        rdotk = rdot - xn * temp1 * self.x1mth2 * sin2u
        rfdotk = rfdot + xn * temp1 * (self.x1mth2 * cos2u + 1.5 * self.x3thm1)

        # Orientation vectors.
        sinuk = math.sin(uk)
        cosuk = math.cos(uk)
        sinik = math.sin(xinck)
        cosik = math.cos(xinck)
        sinnok = math.sin(xnodek)
        cosnok = math.cos(xnodek)
        xmx = -sinnok * cosik
        xmy = cosnok * cosik
        u_vec = Vector3(xmx * sinuk + cosnok * cosuk, xmy * sinuk + sinnok * cosuk, sinik * sinuk)
        v_vec = Vector3(xmx * cosuk - cosnok * sinuk, xmy * cosuk - sinnok * sinuk, sinik * cosuk)

        return u_vec * rk, u_vec * rdotk + v_vec * rfdotk

    def propagate(self, dt_days: float) -> StateVectors:
        """State ``dt_days`` solar days from epoch, in meters and meters/second."""
        position, velocity = self.step(dt_days * MINUTES_PER_DAY)
        return StateVectors(position * POSITION_SCALE_M, velocity * VELOCITY_SCALE_M_S)


def propagate(tle: TLE, offset: Offset) -> StateVectors:
    """Propagate a single TLE using SGP4.

    Args:
        tle: A parsed TLE object.
        offset: Signed solar days since the TLE epoch, or an absolute
            ``JulianDate``.

    Returns:
        TEME position (m) and velocity (m/s).

    Raises:
        PropagationError: If the element set degenerates at ``offset``.
        SolverNonConvergence: If the Kepler solve does not converge.
    """
    dt = offset_days(tle, offset)
    state = SGP4Model.from_tle(tle).propagate(dt)
    logger.debug("Propagated catalog number %d by %+.6f days", tle.catalog_number, dt)
    return state


def propagate_batch(
    tles: Sequence[TLE], offset: Offset
) -> tuple[NDArray[np.float64], NDArray[np.bool_]]:
    """Propagate many TLEs to a single offset.

    A ``JulianDate`` offset is resolved against each TLE's own epoch, so the
    whole batch lands on the same instant.

    Args:
        tles: TLE objects to propagate.
        offset: Days since each epoch, or an absolute ``JulianDate``.

    Returns:
        Tuple of:
            - states: Array of shape (n, 6) with [x,y,z,vx,vy,vz] in m, m/s
              (NaN where propagation failed)
            - valid_mask: Boolean array of shape (n,) indicating which
              propagations succeeded
    """
    n = len(tles)
    states = np.full((n, 6), np.nan, dtype=np.float64)
    valid_mask = np.zeros(n, dtype=np.bool_)

    for i, tle in enumerate(tles):
        try:
            state = SGP4Model.from_tle(tle).propagate(offset_days(tle, offset))
        except (PropagationError, SolverNonConvergence) as exc:
            logger.warning("Skipping catalog number %d: %s", tle.catalog_number, exc)
            continue
        states[i] = state.to_array()
        valid_mask[i] = True

    logger.debug("Propagated %d/%d TLEs", int(valid_mask.sum()), n)
    return states, valid_mask
