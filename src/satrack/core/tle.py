"""TLE (Two-Line Element) parsing.

This module turns NORAD two-line element text into an immutable ``TLE``
record. Fields are extracted token by token, the way the element set is laid
out by whitespace, with NORAD's packed exponential notation decoded for the
second mean-motion derivative and the B* drag term.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, TypeVar

from satrack.core.errors import MalformedTLE, NumericFieldError

logger = logging.getLogger(__name__)

LINE1_TOKENS = 9
LINE2_TOKENS = 8

# Optional sign, five mantissa digits with an implied leading decimal point,
# then a signed single-digit power of ten: "-11606-4" -> -0.11606e-4.
_PACKED_EXPONENT = re.compile(r"^([+-]?)(\d{5})([+-]\d)$")

_T = TypeVar("_T")


@dataclass(frozen=True)
class TLE:
    """A parsed Two-Line Element set.

    Angles are in degrees, mean motion in revolutions per day.

    Attributes:
        name: Satellite name (line 0).
        catalog_number: NORAD catalog number.
        classification: Classification flag (U, C or S).
        cospar_id: International designator, e.g. ``98067A``.
        epoch_year: Four-digit epoch year.
        epoch_day: Fractional day of year of the epoch.
        mean_motion_dot: First derivative of mean motion over two (rev/day²).
        mean_motion_ddot: Second derivative of mean motion over six (rev/day³).
        bstar: B* drag term (1/Earth radii).
        ephemeris_type: Ephemeris type, almost always 0.
        element_set_number: Element set number.
        inclination_deg: Orbital inclination.
        raan_deg: Right ascension of the ascending node.
        eccentricity: Orbital eccentricity.
        arg_perigee_deg: Argument of perigee.
        mean_anomaly_deg: Mean anomaly.
        mean_motion_rev_per_day: Mean motion.
        revolution_number: Revolution number at epoch.
        line1: Raw TLE line 1.
        line2: Raw TLE line 2.
    """

    name: str
    catalog_number: int
    classification: str
    cospar_id: str
    epoch_year: int
    epoch_day: float
    mean_motion_dot: float
    mean_motion_ddot: float
    bstar: float
    ephemeris_type: int
    element_set_number: int
    inclination_deg: float
    raan_deg: float
    eccentricity: float
    arg_perigee_deg: float
    mean_anomaly_deg: float
    mean_motion_rev_per_day: float
    revolution_number: int
    line1: str = field(default="", repr=False, compare=False)
    line2: str = field(default="", repr=False, compare=False)

    @classmethod
    def from_string(cls, text: str, *, checksum: bool = False) -> TLE:
        """Parse a three-line TLE (name line followed by the two data lines).

        Args:
            text: The TLE text, lines separated by newlines.
            checksum: Also verify the checksum digit of each data line.

        Returns:
            A parsed TLE object.

        Raises:
            MalformedTLE: If the text does not have exactly three lines, a data
                line has the wrong number of tokens, or a checksum fails.
            NumericFieldError: If a field cannot be decoded.
        """
        lines = [line.rstrip("\r") for line in text.rstrip("\r\n").split("\n")]
        if len(lines) > 3:
            logger.error("TLE has %d lines, expected 3", len(lines))
            raise MalformedTLE("Too many lines in TLE, expected 3")
        if len(lines) < 3:
            logger.error("TLE has %d lines, expected 3", len(lines))
            raise MalformedTLE("Too few lines in TLE, expected 3")
        return cls.from_lines(lines[1], lines[2], name=lines[0], checksum=checksum)

    @classmethod
    def from_lines(
        cls, line1: str, line2: str, name: str = "", *, checksum: bool = False
    ) -> TLE:
        """Parse a TLE from its two data lines.

        Args:
            line1: TLE line 1.
            line2: TLE line 2.
            name: Optional satellite name (line 0).
            checksum: Also verify the checksum digit of each data line.

        Returns:
            A parsed TLE object.

        Raises:
            MalformedTLE: If a line has the wrong number of tokens or a
                checksum fails.
            NumericFieldError: If a field cannot be decoded.
        """
        line1 = line1.strip()
        line2 = line2.strip()
        tokens1 = line1.split()
        tokens2 = line2.split()

        if len(tokens1) != LINE1_TOKENS:
            logger.error("Invalid TLE line 1: %r", line1)
            raise MalformedTLE(
                f"Line 1 token count mismatch: expected {LINE1_TOKENS}, got {len(tokens1)}"
            )
        if len(tokens2) != LINE2_TOKENS:
            logger.error("Invalid TLE line 2: %r", line2)
            raise MalformedTLE(
                f"Line 2 token count mismatch: expected {LINE2_TOKENS}, got {len(tokens2)}"
            )
        if checksum:
            for number, line in ((1, line1), (2, line2)):
                if not verify_checksum(line):
                    logger.error("Checksum mismatch on TLE line %d: %r", number, line)
                    raise MalformedTLE(f"Checksum mismatch on line {number}")

        satnum = tokens1[1]
        epoch = tokens1[3]
        epoch_year = _parse("epoch year", epoch[:2], int)
        epoch_year += 1900 if epoch_year >= 57 else 2000

        mean_motion_token = tokens2[7]
        eccentricity = _parse("eccentricity", tokens2[4], lambda s: float("0." + s))
        inclination = _parse("inclination", tokens2[2], float)
        mean_motion = _parse("mean motion", mean_motion_token[:-6], float)

        if not 0.0 <= eccentricity < 1.0:
            raise _out_of_range("eccentricity", tokens2[4], "must be in [0, 1)")
        if not 0.0 <= inclination <= 180.0:
            raise _out_of_range("inclination", tokens2[2], "must be in [0, 180]")
        if mean_motion <= 0.0:
            raise _out_of_range("mean motion", mean_motion_token, "must be positive")

        tle = cls(
            name=name.strip(),
            catalog_number=_parse("catalog number", satnum[:-1], int),
            classification=satnum[-1],
            cospar_id=tokens1[2],
            epoch_year=epoch_year,
            epoch_day=_parse("epoch day", epoch[2:], float),
            mean_motion_dot=_parse("mean motion dot", tokens1[4], float),
            mean_motion_ddot=decode_packed_exponent(tokens1[5], "mean motion ddot"),
            bstar=decode_packed_exponent(tokens1[6], "bstar"),
            ephemeris_type=_parse("ephemeris type", tokens1[7], int),
            element_set_number=_parse("element set number", tokens1[8][:-1], int),
            inclination_deg=inclination,
            raan_deg=_parse("raan", tokens2[3], float),
            eccentricity=eccentricity,
            arg_perigee_deg=_parse("argument of perigee", tokens2[5], float),
            mean_anomaly_deg=_parse("mean anomaly", tokens2[6], float),
            mean_motion_rev_per_day=mean_motion,
            revolution_number=_parse(
                "revolution number", mean_motion_token[-6:-1], int
            ),
            line1=line1,
            line2=line2,
        )
        logger.debug(
            "Parsed TLE for catalog number %d (epoch %d/%.8f)",
            tle.catalog_number,
            tle.epoch_year,
            tle.epoch_day,
        )
        return tle

    @property
    def epoch(self) -> datetime:
        """Epoch as a UTC datetime."""
        return datetime(self.epoch_year, 1, 1, tzinfo=timezone.utc) + timedelta(
            days=self.epoch_day - 1
        )

    def __str__(self) -> str:
        return f"{self.name}\n{self.line1}\n{self.line2}"


def decode_packed_exponent(token: str, field_name: str = "packed exponent") -> float:
    """Decode NORAD's packed exponential notation.

    ``11606-4`` is ``0.11606e-4``; a leading sign applies to the mantissa.

    Raises:
        NumericFieldError: If ``token`` is not in packed exponential form.
    """
    match = _PACKED_EXPONENT.match(token)
    if match is None:
        logger.error("Invalid packed exponent for %s: %r", field_name, token)
        raise NumericFieldError(field_name, token, "expected packed exponential form")
    sign, mantissa, exponent = match.groups()
    return float(f"{sign}0.{mantissa}e{exponent}")


def compute_checksum(line: str) -> int:
    """Modulo-10 checksum of a TLE data line.

    Digits count at face value and ``-`` counts as one; every other character
    is ignored. The final (checksum) column itself is excluded.
    """
    total = 0
    for char in line.rstrip()[:-1]:
        if char.isdigit():
            total += int(char)
        elif char == "-":
            total += 1
    return total % 10


def verify_checksum(line: str) -> bool:
    """Whether the last character of ``line`` matches its computed checksum."""
    line = line.rstrip()
    if not line or not line[-1].isdigit():
        return False
    return compute_checksum(line) == int(line[-1])


def parse_tle(text: str) -> list[TLE]:
    """Parse one or more TLEs from text.

    Handles both 2-line and 3-line (with name) formats.

    Args:
        text: Raw TLE text, one or more TLE sets separated by newlines.

    Returns:
        A list of parsed TLE objects.
    """
    lines = [l.rstrip() for l in text.strip().splitlines() if l.strip()]
    tles: list[TLE] = []
    i = 0

    while i < len(lines):
        if lines[i].startswith("1 ") and i + 1 < len(lines) and lines[i + 1].startswith("2 "):
            tles.append(TLE.from_lines(lines[i], lines[i + 1]))
            i += 2
        elif (
            not lines[i].startswith("1 ")
            and not lines[i].startswith("2 ")
            and i + 2 < len(lines)
            and lines[i + 1].startswith("1 ")
            and lines[i + 2].startswith("2 ")
        ):
            tles.append(TLE.from_lines(lines[i + 1], lines[i + 2], name=lines[i]))
            i += 3
        else:
            logger.warning("Skipping unrecognized TLE line: %r", lines[i])
            i += 1

    logger.debug("Parsed %d TLEs from text", len(tles))
    return tles


def load_tles(records: Iterable[str], *, checksum: bool = False) -> list[TLE]:
    """Parse raw three-line TLE strings, e.g. as returned by a TLE source.

    Args:
        records: Iterable of three-line TLE strings.
        checksum: Also verify data-line checksums.

    Returns:
        One TLE per record, in order.
    """
    return [TLE.from_string(record, checksum=checksum) for record in records]


def _parse(field_name: str, token: str, convert: Callable[[str], _T]) -> _T:
    try:
        return convert(token)
    except ValueError:
        logger.error("Invalid %s field: %r", field_name, token)
        raise NumericFieldError(field_name, token) from None


def _out_of_range(field_name: str, token: str, reason: str) -> NumericFieldError:
    logger.error("TLE %s out of range: %r (%s)", field_name, token, reason)
    return NumericFieldError(field_name, token, reason)
