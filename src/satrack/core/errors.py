"""Exception types raised by satrack."""

from __future__ import annotations


class SatrackError(Exception):
    """Base class for all satrack errors."""


class MalformedTLE(SatrackError, ValueError):
    """A TLE has the wrong structure (line count, token count or checksum)."""


class NumericFieldError(SatrackError, ValueError):
    """A TLE field could not be decoded into a valid number.

    Attributes:
        field: Name of the offending TLE field.
        token: Raw text that failed to parse.
    """

    def __init__(self, field: str, token: str, reason: str = "") -> None:
        self.field = field
        self.token = token
        message = f"Invalid {field} field: {token!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class SolverNonConvergence(SatrackError, RuntimeError):
    """Newton-Raphson iteration hit its cap without meeting the tolerance.

    Attributes:
        iterations: Number of iterations performed.
        step: Size of the last update.
    """

    def __init__(self, iterations: int, step: float) -> None:
        self.iterations = iterations
        self.step = step
        super().__init__(
            f"Newton-Raphson did not converge after {iterations} iterations "
            f"(last step {step:.3e})"
        )


class PropagationError(SatrackError, ValueError):
    """SGP4 produced a degenerate orbit (e.g. eccentricity outside [0, 1))."""
