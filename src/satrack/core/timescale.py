"""Julian Dates and sidereal time.

Every instant is reduced to a single continuous day count (the Julian Date),
so time offsets between two instants are plain subtraction and the SGP4
propagator only ever sees "days since the TLE epoch".
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from satrack.utils.constants import (
    GMST_AT_J2000_HOURS,
    GMST_HOURS_PER_DAY,
    HOURS_PER_DAY,
    J2000,
    MINUTES_PER_DAY,
    SECONDS_PER_DAY,
)

if TYPE_CHECKING:
    from satrack.core.tle import TLE


# First Julian Day Number of the Gregorian calendar (1582-10-15).
_GREGORIAN_START_JDN = 2299161


def _idiv(a: float, b: float) -> int:
    """Integer division truncating toward zero."""
    return int(a / b)


def _julian_day_number(year: int, month: int, day: int) -> int:
    """Gregorian calendar date to Julian Day Number (the JD at noon)."""
    m = _idiv(month - 14, 12)
    return (
        _idiv(1461 * (year + 4800 + m), 4)
        + _idiv(367 * (month - 2 - 12 * m), 12)
        - _idiv(3 * _idiv(year + 4900 + m, 100), 4)
        + day
        - 32075
    )


@dataclass(frozen=True, order=True)
class JulianDate:
    """A point in time as days since 4713 BCE January 1, 12:00.

    Attributes:
        value: The Julian Date.
    """

    value: float

    @classmethod
    def from_calendar(
        cls,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: float = 0.0,
        *,
        utc_offset_hours: float = 0.0,
    ) -> JulianDate:
        """Build a Julian Date from Gregorian calendar fields.

        Args:
            year: Calendar year.
            month: Month number, starting at 1.
            day: Day of the month.
            hour: Hour of the day (24 hour clock).
            minute: Minute of the hour.
            second: Seconds, may include a fractional part.
            utc_offset_hours: Offset of the given local time from UTC.

        Returns:
            The corresponding UTC Julian Date.
        """
        jdn = _julian_day_number(year, month, day)
        return cls(
            jdn
            + (hour - 12) / HOURS_PER_DAY
            + minute / MINUTES_PER_DAY
            + second / SECONDS_PER_DAY
            - utc_offset_hours / HOURS_PER_DAY
        )

    @classmethod
    def from_tle(cls, tle: TLE) -> JulianDate:
        """Julian Date of a TLE epoch.

        The fractional day of year is counted from 00:00 on December 31 of the
        previous year, so day 1.0 is January 1 at midnight.
        """
        anchor = cls.from_calendar(tle.epoch_year - 1, 12, 31)
        return anchor.future(tle.epoch_day)

    @classmethod
    def from_datetime(cls, dt: datetime) -> JulianDate:
        """Julian Date of a datetime. Naive datetimes are taken to be UTC."""
        if dt.tzinfo is not None:
            dt = dt.astimezone(timezone.utc)
        return cls.from_calendar(
            dt.year,
            dt.month,
            dt.day,
            dt.hour,
            dt.minute,
            dt.second + dt.microsecond / 1e6,
        )

    @property
    def number(self) -> int:
        """Integer part of the Julian Date."""
        return int(self.value)

    @property
    def fraction(self) -> float:
        """Fractional part of the Julian Date (days past noon)."""
        return self.value - int(self.value)

    def difference(self, other: JulianDate) -> float:
        """Days from ``other`` to this date; negative if this date is earlier."""
        return self.value - other.value

    def future(self, days: float) -> JulianDate:
        """A new Julian Date ``days`` after this one (before, if negative)."""
        return JulianDate(self.value + days)

    def to_datetime(self) -> datetime:
        """Convert back to a UTC datetime."""
        shifted = self.value + 0.5
        z = int(shifted)
        f = shifted - z
        if z < _GREGORIAN_START_JDN:
            a = z
        else:
            alpha = int((z - 1867216.25) / 36524.25)
            a = z + 1 + alpha - int(alpha / 4)
        b = a + 1524
        c = int((b - 122.1) / 365.25)
        d = int(365.25 * c)
        e = int((b - d) / 30.6001)
        day = b - d - int(30.6001 * e) + f
        month = e - 1 if e < 14 else e - 13
        year = c - 4716 if month > 2 else c - 4715
        whole_day = int(day)
        return datetime(year, month, whole_day, tzinfo=timezone.utc) + timedelta(
            days=day - whole_day
        )


def greenwich_sidereal_time(jd: JulianDate, *, utc_offset_hours: float = 0.0) -> float:
    """Greenwich mean sidereal time in hours, in [0, 24).

    Args:
        jd: The instant, as a Julian Date.
        utc_offset_hours: Offset of ``jd`` from UTC, if it holds local time.
    """
    days = jd.value - utc_offset_hours / HOURS_PER_DAY - J2000
    return (GMST_AT_J2000_HOURS + GMST_HOURS_PER_DAY * days) % HOURS_PER_DAY


def local_sidereal_time(jd: JulianDate, longitude_deg: float) -> float:
    """Local mean sidereal time in hours, in [0, 24).

    Args:
        jd: The instant, as a UTC Julian Date.
        longitude_deg: Observer longitude, east positive.
    """
    return (greenwich_sidereal_time(jd) + longitude_deg / 15.0) % HOURS_PER_DAY


def earth_rotation_angle(jd: JulianDate) -> float:
    """Angle between the Greenwich meridian and the vernal equinox, in degrees."""
    return greenwich_sidereal_time(jd) / HOURS_PER_DAY * 360.0
