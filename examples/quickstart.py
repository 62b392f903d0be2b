"""satrack Quickstart: parse a TLE, propagate it and inspect its elements."""

from satrack import COE, JulianDate, greenwich_sidereal_time, parse_tle, propagate

# ISS (ZARYA) TLE
tle_text = """
ISS (ZARYA)
1 25544U 98067A   24045.54896019  .00016717  00000-0  30093-3 0  9993
2 25544  51.6412 207.4925 0004948 290.5508 178.9792 15.49583488439596
""".strip()

# Parse it
tles = parse_tle(tle_text)
iss = tles[0]

print(f"Satellite: {iss.name}")
print(f"NORAD ID:  {iss.catalog_number}")
print(f"Epoch:     {iss.epoch}")
print(f"Incl:      {iss.inclination_deg:.4f}°")
print(f"Ecc:       {iss.eccentricity:.7f}")
print(f"Period:    {1440 / iss.mean_motion_rev_per_day:.1f} min")

# SGP4 state 90 minutes after epoch (TEME, meters)
state = propagate(iss, 90.0 / 1440.0)
x, y, z = state.position
print(f"Position:  ({x / 1e3:.3f}, {y / 1e3:.3f}, {z / 1e3:.3f}) km")
print(f"Speed:     {state.speed_m_s / 1e3:.4f} km/s")

# Osculating elements of that state
elements = COE.from_state(state)
print(f"a:         {elements.semi_major_axis_m / 1e3:.3f} km")
print(f"e:         {elements.eccentricity:.7f}")
print(f"nu:        {elements.true_anomaly_deg:.4f}°")

gmst = greenwich_sidereal_time(JulianDate.from_tle(iss).future(90.0 / 1440.0))
print(f"GMST:      {gmst:.6f} h")
