"""Rotation matrices and Euler-angle reference frames.

All angles are in degrees at this module's boundary. Rotation matrices are
right-handed and active: the columns of a rotation matrix are the basis
vectors of the rotated frame expressed in the base frame.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Union

from satrack.core.kepler import wrap_degrees
from satrack.core.linalg import Matrix3, Vector3


class Axis(Enum):
    """Principal coordinate axes."""

    X = 0
    Y = 1
    Z = 2


@dataclass(frozen=True)
class EulerOrder:
    """The three axes of an Euler rotation sequence, in the order applied.

    Attributes:
        first: Axis of the first rotation.
        second: Axis of the second rotation.
        third: Axis of the third rotation.
    """

    first: Axis
    second: Axis
    third: Axis

    @classmethod
    def from_string(cls, order: str) -> EulerOrder:
        """Parse an axis sequence such as ``"ZXZ"`` (case-insensitive).

        Raises:
            ValueError: If ``order`` is not three characters drawn from x, y, z.
        """
        if len(order) != 3:
            raise ValueError(
                f"Euler order needs exactly 3 axes, got {len(order)} ({order!r})"
            )
        axes = []
        for position, letter in enumerate(order.upper()):
            try:
                axes.append(Axis[letter])
            except KeyError:
                raise ValueError(
                    f"Invalid Euler rotation axis {letter!r} at position {position}"
                ) from None
        return cls(*axes)

    def reversed(self) -> EulerOrder:
        return EulerOrder(self.third, self.second, self.first)

    def __iter__(self):
        yield self.first
        yield self.second
        yield self.third

    def __str__(self) -> str:
        return "".join(axis.name for axis in self)


@dataclass(frozen=True)
class EulerAngles:
    """Three rotation angles in degrees, normalised into [0, 360)."""

    alpha: float = 0.0
    beta: float = 0.0
    gamma: float = 0.0

    def __post_init__(self) -> None:
        for name in ("alpha", "beta", "gamma"):
            object.__setattr__(self, name, wrap_degrees(getattr(self, name)))

    def __iter__(self):
        yield self.alpha
        yield self.beta
        yield self.gamma

    def __getitem__(self, index: int) -> float:
        return (self.alpha, self.beta, self.gamma)[index]

    def reversed(self) -> EulerAngles:
        return EulerAngles(self.gamma, self.beta, self.alpha)


OrderLike = Union[EulerOrder, str]


def _as_order(order: OrderLike) -> EulerOrder:
    return order if isinstance(order, EulerOrder) else EulerOrder.from_string(order)


def principal_rotation(axis: Axis, angle_deg: float) -> Matrix3:
    """Right-handed rotation matrix about a single coordinate axis."""
    angle = math.radians(angle_deg)
    c = math.cos(angle)
    s = math.sin(angle)
    if axis is Axis.X:
        return Matrix3(((1.0, 0.0, 0.0), (0.0, c, -s), (0.0, s, c)))
    if axis is Axis.Y:
        return Matrix3(((c, 0.0, s), (0.0, 1.0, 0.0), (-s, 0.0, c)))
    return Matrix3(((c, -s, 0.0), (s, c, 0.0), (0.0, 0.0, 1.0)))


def euler_matrix(order: OrderLike, angles: EulerAngles) -> Matrix3:
    """Intrinsic Euler rotation, ``R(first) @ R(second) @ R(third)``.

    With order ``ZXZ`` and angles (RAAN, inclination, argument of perigee) this
    is the perifocal-to-inertial rotation.
    """
    first, second, third = _as_order(order)
    return (
        principal_rotation(first, angles.alpha)
        @ principal_rotation(second, angles.beta)
        @ principal_rotation(third, angles.gamma)
    )


def euler_matrix_extrinsic(order: OrderLike, angles: EulerAngles) -> Matrix3:
    """Extrinsic Euler rotation about the fixed base axes, in ``order``."""
    return euler_matrix(_as_order(order).reversed(), angles.reversed())


def axis_angle_rotation(axis: Vector3, angle_deg: float) -> Matrix3:
    """Rotation by ``angle_deg`` about an arbitrary axis (Rodrigues' formula)."""
    k = axis.normalized()
    w = Matrix3(((0.0, -k.z, k.y), (k.z, 0.0, -k.x), (-k.y, k.x, 0.0)))
    angle = math.radians(angle_deg)
    return (
        Matrix3.identity()
        + w * math.sin(angle)
        + (w @ w) * (2.0 * math.sin(angle / 2.0) ** 2)
    )


def _resolve(rotation: Matrix3 | OrderLike, angles: EulerAngles | None) -> Matrix3:
    if isinstance(rotation, Matrix3):
        return rotation
    if angles is None:
        raise TypeError("Euler angles are required when rotating by an Euler order")
    return euler_matrix(rotation, angles)


def rotate_from(
    rotation: Matrix3 | OrderLike, vector: Vector3, angles: EulerAngles | None = None
) -> Vector3:
    """Express a vector given in the rotated frame in base-frame coordinates.

    Args:
        rotation: A rotation matrix, or an Euler order combined with ``angles``.
        vector: Components in the rotated frame.
        angles: Euler angles, when ``rotation`` is an order.
    """
    return _resolve(rotation, angles) @ vector


def rotate_to(
    rotation: Matrix3 | OrderLike, vector: Vector3, angles: EulerAngles | None = None
) -> Vector3:
    """Express a base-frame vector in the rotated frame (applies the transpose)."""
    return _resolve(rotation, angles).transpose() @ vector


class ReferenceFrame:
    """A frame defined by an Euler rotation from the base frame.

    The rotation matrix is computed on first use and cached; assigning new
    angles drops the cache.
    """

    def __init__(self, order: OrderLike, angles: EulerAngles | None = None) -> None:
        self._order = _as_order(order)
        self._angles = angles if angles is not None else EulerAngles()
        self._matrix: Matrix3 | None = None

    def __repr__(self) -> str:
        return f"ReferenceFrame(order={str(self._order)!r}, angles={self._angles!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReferenceFrame):
            return NotImplemented
        return self._order == other._order and self._angles == other._angles

    __hash__ = None  # mutable angles

    @property
    def order(self) -> EulerOrder:
        return self._order

    @property
    def angles(self) -> EulerAngles:
        return self._angles

    @angles.setter
    def angles(self, angles: EulerAngles) -> None:
        if angles != self._angles:
            self._angles = angles
            self._matrix = None

    @property
    def matrix(self) -> Matrix3:
        if self._matrix is None:
            self._matrix = euler_matrix(self._order, self._angles)
        return self._matrix

    def axis_vector(self, axis: Axis) -> Vector3:
        """Basis vector of this frame along ``axis``, in base-frame coordinates."""
        return self.matrix.column(axis.value)

    def to_frame(self, vector: Vector3) -> Vector3:
        """Base-frame vector expressed in this frame."""
        return rotate_to(self.matrix, vector)

    def from_frame(self, vector: Vector3) -> Vector3:
        """Vector given in this frame expressed in the base frame."""
        return rotate_from(self.matrix, vector)


def rotate_between(source: ReferenceFrame, target: ReferenceFrame, vector: Vector3) -> Vector3:
    """Re-express a vector given in ``source`` coordinates in ``target`` coordinates."""
    return (target.matrix.transpose() @ source.matrix) @ vector
