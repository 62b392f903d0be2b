"""Three-dimensional vector and matrix value types.

Both types are frozen dataclasses: every operation returns a new value, so
instances can be shared freely between callers without aliasing surprises.
Use ``to_array``/``from_array`` to move between these types and numpy.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Sequence, overload

import numpy as np
from numpy.typing import ArrayLike, NDArray


@dataclass(frozen=True)
class Vector3:
    """A Cartesian 3-vector."""

    x: float
    y: float
    z: float

    @classmethod
    def zero(cls) -> Vector3:
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def from_array(cls, values: ArrayLike) -> Vector3:
        """Build a vector from any length-3 sequence or array.

        Raises:
            ValueError: If ``values`` does not hold exactly three elements.
        """
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
        if arr.shape != (3,):
            raise ValueError(f"Expected 3 components, got {arr.size}")
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    def to_array(self) -> NDArray[np.float64]:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __getitem__(self, index: int) -> float:
        return (self.x, self.y, self.z)[index]

    def __len__(self) -> int:
        return 3

    def __add__(self, other: Vector3) -> Vector3:
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> Vector3:
        return Vector3(-self.x, -self.y, -self.z)

    def __mul__(self, scalar: float) -> Vector3:
        return self.scale(scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vector3:
        return Vector3(self.x / scalar, self.y / scalar, self.z / scalar)

    def scale(self, scalar: float) -> Vector3:
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    def dot(self, other: Vector3) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vector3) -> Vector3:
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def magnitude(self) -> float:
        """Euclidean norm, sqrt(x² + y² + z²)."""
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalized(self) -> Vector3:
        """Unit vector in the same direction.

        Raises:
            ValueError: If this is the zero vector.
        """
        mag = self.magnitude()
        if mag == 0.0:
            raise ValueError("Cannot normalize a zero vector")
        return self / mag

    def angle_to(self, other: Vector3) -> float:
        """Angle between two vectors in radians, in [0, π].

        The cosine is clamped to [-1, 1] so rounding noise on (anti)parallel
        vectors does not leave acos's domain.
        """
        cos_angle = self.dot(other) / (self.magnitude() * other.magnitude())
        return math.acos(clamp(cos_angle, -1.0, 1.0))


@dataclass(frozen=True)
class Matrix3:
    """A dense 3x3 matrix stored row-major as nested tuples."""

    rows: tuple[tuple[float, float, float], ...]

    def __post_init__(self) -> None:
        if len(self.rows) != 3 or any(len(row) != 3 for row in self.rows):
            raise ValueError("Matrix3 requires exactly 3 rows of 3 elements")
        object.__setattr__(
            self, "rows", tuple(tuple(float(v) for v in row) for row in self.rows)
        )

    @classmethod
    def identity(cls) -> Matrix3:
        return cls(((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0)))

    @classmethod
    def zeros(cls) -> Matrix3:
        return cls(((0.0, 0.0, 0.0),) * 3)

    @classmethod
    def from_rows(cls, r0: Sequence[float], r1: Sequence[float], r2: Sequence[float]) -> Matrix3:
        return cls((tuple(r0), tuple(r1), tuple(r2)))

    @classmethod
    def from_columns(cls, c0: Vector3, c1: Vector3, c2: Vector3) -> Matrix3:
        """Build a matrix whose columns are the given vectors.

        When the columns are the basis vectors of a rotated frame expressed in
        the base frame, the result maps rotated-frame coordinates to the base.
        """
        return cls(((c0.x, c1.x, c2.x), (c0.y, c1.y, c2.y), (c0.z, c1.z, c2.z)))

    @classmethod
    def from_array(cls, values: ArrayLike) -> Matrix3:
        arr = np.asarray(values, dtype=np.float64)
        if arr.shape != (3, 3):
            raise ValueError(f"Expected a 3x3 array, got shape {arr.shape}")
        return cls(tuple(tuple(float(v) for v in row) for row in arr))

    def to_array(self) -> NDArray[np.float64]:
        return np.array(self.rows, dtype=np.float64)

    def __getitem__(self, index: tuple[int, int]) -> float:
        i, j = index
        return self.rows[i][j]

    def row(self, index: int) -> Vector3:
        return Vector3(*self.rows[index])

    def column(self, index: int) -> Vector3:
        return Vector3(self.rows[0][index], self.rows[1][index], self.rows[2][index])

    def transpose(self) -> Matrix3:
        return Matrix3(tuple(zip(*self.rows)))

    @property
    def T(self) -> Matrix3:
        return self.transpose()

    def determinant(self) -> float:
        return float(np.linalg.det(self.to_array()))

    def __add__(self, other: Matrix3) -> Matrix3:
        return Matrix3.from_array(self.to_array() + other.to_array())

    def __sub__(self, other: Matrix3) -> Matrix3:
        return Matrix3.from_array(self.to_array() - other.to_array())

    def __mul__(self, scalar: float) -> Matrix3:
        return Matrix3.from_array(self.to_array() * scalar)

    __rmul__ = __mul__

    @overload
    def __matmul__(self, other: Matrix3) -> Matrix3: ...

    @overload
    def __matmul__(self, other: Vector3) -> Vector3: ...

    def __matmul__(self, other):
        if isinstance(other, Matrix3):
            return Matrix3.from_array(self.to_array() @ other.to_array())
        if isinstance(other, Vector3):
            r = self.rows
            return Vector3(
                r[0][0] * other.x + r[0][1] * other.y + r[0][2] * other.z,
                r[1][0] * other.x + r[1][1] * other.y + r[1][2] * other.z,
                r[2][0] * other.x + r[2][1] * other.y + r[2][2] * other.z,
            )
        return NotImplemented


def clamp(value: float, lower: float, upper: float) -> float:
    """Restrict ``value`` to ``[lower, upper]``."""
    return max(lower, min(upper, value))
