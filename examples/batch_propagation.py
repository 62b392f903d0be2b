"""satrack Batch Propagation: move a catalog of TLEs to one instant.

Every TLE is propagated to the same absolute Julian Date regardless of its
own epoch. Element sets that fail to propagate come back as NaN rows.
"""

import logging
from datetime import datetime, timezone

import numpy as np

from satrack import JulianDate, parse_tle, propagate_batch

logging.basicConfig(level=logging.INFO)

catalog_text = """\
ISS (ZARYA)
1 25544U 98067A   24045.54896019  .00016717  00000-0  30093-3 0  9993
2 25544  51.6412 207.4925 0004948 290.5508 178.9792 15.49583488439596
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

tles = parse_tle(catalog_text)
when = JulianDate.from_datetime(datetime(2024, 2, 15, 0, 0, tzinfo=timezone.utc))

states, valid = propagate_batch(tles, when)
altitudes_km = np.linalg.norm(states[:, :3], axis=1) / 1e3 - 6378.135

print(f"Propagated {valid.sum()}/{len(tles)} TLEs to JD {when.value:.5f}")
for tle, ok, altitude in zip(tles, valid, altitudes_km):
    status = f"{altitude:8.1f} km" if ok else "   failed"
    print(f"{tle.catalog_number:>6}  {tle.name:<14} {status}")
