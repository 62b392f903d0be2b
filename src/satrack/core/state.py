"""Inertial state vectors."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from satrack.core.linalg import Vector3


@dataclass(frozen=True)
class StateVectors:
    """Position and velocity in an Earth-centered inertial frame.

    Attributes:
        position: Position in meters.
        velocity: Velocity in meters/second.
    """

    position: Vector3
    velocity: Vector3

    @classmethod
    def from_array(cls, values: NDArray[np.float64]) -> StateVectors:
        """Build from a (6,) array ``[x, y, z, vx, vy, vz]``."""
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
        if arr.shape != (6,):
            raise ValueError(f"Expected 6 components, got {arr.size}")
        return cls(Vector3.from_array(arr[:3]), Vector3.from_array(arr[3:]))

    def to_array(self) -> NDArray[np.float64]:
        """``[x, y, z, vx, vy, vz]`` as a (6,) array."""
        return np.concatenate([self.position.to_array(), self.velocity.to_array()])

    @property
    def radius_m(self) -> float:
        return self.position.magnitude()

    @property
    def speed_m_s(self) -> float:
        return self.velocity.magnitude()
