"""Integration test: parse → propagate → convert end-to-end."""
from __future__ import annotations

from datetime import timedelta

import numpy as np
import pytest

from satrack import (
    COE,
    JulianDate,
    TLE,
    ReferenceFrame,
    EulerAngles,
    load_tles,
    parse_tle,
    propagate,
    propagate_batch,
    propagate_mean_elements,
    greenwich_sidereal_time,
)

# Hardcoded real TLEs (no network calls)
ISS_TLE_TEXT = """\
ISS (ZARYA)
1 25544U 98067A   24045.54896019  .00016717  00000-0  30093-3 0  9993
2 25544  51.6412 207.4925 0004948 290.5508 178.9792 15.49583488439596
"""

OTHER_TLES_TEXT = """\
CSS (TIANHE)
1 48274U 21035A   24045.50261574  .00021540  00000-0  25163-3 0  9993
2 48274  41.4681 279.1498 0005372 149.8847 345.3740 15.62096269157018
HST
1 20580U 90037B   24045.55478014  .00001456  00000-0  73052-4 0  9994
2 20580  28.4701  41.0696 0002622 348.3544 140.2428 15.09435694872912
NOAA 18
1 28654U 05018A   24045.52083333  .00000149  00000-0  10834-3 0  9994
2 28654  98.9710 100.7890 0014048 313.6230  46.3750 14.12905012970123
"""

EARTH_RADIUS_KM = 6378.135


@pytest.fixture
def iss_tle() -> TLE:
    tles = parse_tle(ISS_TLE_TEXT)
    assert len(tles) == 1
    return tles[0]


@pytest.fixture
def catalog() -> list[TLE]:
    return parse_tle(OTHER_TLES_TEXT)


def test_parse_iss_tle(iss_tle: TLE):
    """Parse hardcoded ISS TLE."""
    assert iss_tle.catalog_number == 25544
    assert iss_tle.name == "ISS (ZARYA)"


def test_load_tles_matches_parse(iss_tle: TLE):
    """Raw three-line records parse to the same element set."""
    loaded = load_tles([ISS_TLE_TEXT])
    assert loaded == [iss_tle]


def test_propagate_iss_24h(iss_tle: TLE):
    """Propagate ISS 24 hours and verify position is in LEO range."""
    epoch = JulianDate.from_tle(iss_tle)
    for hours in range(0, 25, 6):
        when = JulianDate.from_datetime(iss_tle.epoch + timedelta(hours=hours))
        assert when.difference(epoch) == pytest.approx(hours / 24.0, abs=1e-6)
        state = propagate(iss_tle, when)
        altitude_km = state.radius_m / 1000.0 - EARTH_RADIUS_KM
        assert 200.0 < altitude_km < 500.0, f"ISS altitude {altitude_km:.1f} km at +{hours}h"


def test_mean_elements_track_sgp4(iss_tle: TLE):
    """The two-body model stays close to SGP4 over the first hour."""
    for dt in (0.0, 1.0 / 24.0):
        sgp4_state = propagate(iss_tle, dt)
        mean_state = propagate_mean_elements(iss_tle, dt)
        separation = np.linalg.norm(sgp4_state.to_array()[:3] - mean_state.to_array()[:3])
        assert separation < 100e3


def test_batch_catalog(iss_tle: TLE, catalog: list[TLE]):
    """Propagate a small catalog to one absolute instant."""
    when = JulianDate.from_tle(iss_tle).future(0.5)
    states, valid = propagate_batch([iss_tle, *catalog], when)
    assert states.shape == (4, 6)
    assert valid.all()
    radii_km = np.linalg.norm(states[:, :3], axis=1) / 1000.0
    assert np.all(radii_km > EARTH_RADIUS_KM + 200.0)
    assert np.all(radii_km < EARTH_RADIUS_KM + 1000.0)


def test_state_to_elements_round_trip(iss_tle: TLE):
    """Elements recovered from an SGP4 state describe a near-circular LEO orbit."""
    elements = COE.from_state(propagate(iss_tle, 0.25))
    assert elements.eccentricity < 0.01
    assert elements.inclination_deg == pytest.approx(iss_tle.inclination_deg, abs=0.1)
    assert elements.period_s / 60.0 == pytest.approx(1440.0 / iss_tle.mean_motion_rev_per_day, abs=1.0)
    back = elements.to_state_vectors(conic_radius=True)
    np.testing.assert_allclose(back.to_array(), propagate(iss_tle, 0.25).to_array(), atol=1e-3)


def test_orbit_plane_frame(iss_tle: TLE):
    """Rotating a state into its orbit-plane frame leaves no out-of-plane component."""
    state = propagate_mean_elements(iss_tle, 0.1)
    elements = COE.from_state(state)
    plane = ReferenceFrame(
        "ZXZ",
        EulerAngles(elements.raan_deg, elements.inclination_deg, elements.arg_perigee_deg),
    )
    in_plane = plane.to_frame(state.position)
    assert abs(in_plane.z) < 1e-3 * state.radius_m


def test_sidereal_time_at_epoch(iss_tle: TLE):
    gmst = greenwich_sidereal_time(JulianDate.from_tle(iss_tle))
    assert 0.0 <= gmst < 24.0
