"""Tests for rotations and Euler-angle reference frames."""

from __future__ import annotations

import math

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from satrack.core.frames import (
    Axis,
    EulerAngles,
    EulerOrder,
    ReferenceFrame,
    axis_angle_rotation,
    euler_matrix,
    euler_matrix_extrinsic,
    principal_rotation,
    rotate_between,
    rotate_from,
    rotate_to,
)
from satrack.core.linalg import Matrix3, Vector3

X = Vector3(1.0, 0.0, 0.0)
Y = Vector3(0.0, 1.0, 0.0)
Z = Vector3(0.0, 0.0, 1.0)

ANGLE_SETS = [
    (336.0056, 51.6445, 51.7508),
    (30.0, 45.0, 60.0),
    (0.0, 90.0, 0.0),
    (200.0, 170.0, 355.0),
]


def assert_vectors_close(actual: Vector3, expected: Vector3, atol: float = 1e-12) -> None:
    np.testing.assert_allclose(actual.to_array(), expected.to_array(), atol=atol)


class TestPrincipalRotation:
    def test_about_z(self) -> None:
        assert_vectors_close(principal_rotation(Axis.Z, 90.0) @ X, Y)

    def test_about_x(self) -> None:
        assert_vectors_close(principal_rotation(Axis.X, 90.0) @ Y, Z)

    def test_about_y(self) -> None:
        assert_vectors_close(principal_rotation(Axis.Y, 90.0) @ Z, X)

    @pytest.mark.parametrize("axis", list(Axis))
    def test_orthonormal(self, axis: Axis) -> None:
        m = principal_rotation(axis, 37.5).to_array()
        np.testing.assert_allclose(m @ m.T, np.eye(3), atol=1e-14)
        assert np.linalg.det(m) == pytest.approx(1.0)


class TestEulerOrder:
    def test_from_string(self) -> None:
        order = EulerOrder.from_string("zxz")
        assert order == EulerOrder(Axis.Z, Axis.X, Axis.Z)
        assert str(order) == "ZXZ"
        assert list(order.reversed()) == [Axis.Z, Axis.X, Axis.Z]
        assert str(EulerOrder.from_string("XYZ").reversed()) == "ZYX"

    def test_invalid_axis_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid Euler rotation axis 'A' at position 2"):
            EulerOrder.from_string("ZXA")

    @pytest.mark.parametrize("order", ["", "ZX", "ZXZX"])
    def test_invalid_length_raises(self, order: str) -> None:
        with pytest.raises(ValueError, match="exactly 3 axes"):
            EulerOrder.from_string(order)


class TestEulerAngles:
    def test_normalised(self) -> None:
        angles = EulerAngles(-90.0, 360.0, 725.0)
        assert tuple(angles) == pytest.approx((270.0, 0.0, 5.0))

    @pytest.mark.parametrize("angle", [-1e-20, -1e-15, -360.0, 720.0])
    def test_normalised_range_is_half_open(self, angle: float) -> None:
        angles = EulerAngles(angle, angle, angle)
        for value in angles:
            assert 0.0 <= value < 360.0

    def test_indexing_and_reverse(self) -> None:
        angles = EulerAngles(10.0, 20.0, 30.0)
        assert angles[0] == 10.0
        assert angles.reversed() == EulerAngles(30.0, 20.0, 10.0)


class TestEulerMatrix:
    @pytest.mark.parametrize("angles", ANGLE_SETS)
    @pytest.mark.parametrize("order", ["ZXZ", "XYZ", "ZYX", "YXY"])
    def test_intrinsic_matches_scipy(self, order: str, angles: tuple[float, float, float]) -> None:
        ours = euler_matrix(order, EulerAngles(*angles)).to_array()
        expected = Rotation.from_euler(order, angles, degrees=True).as_matrix()
        np.testing.assert_allclose(ours, expected, atol=1e-12)

    @pytest.mark.parametrize("angles", ANGLE_SETS)
    @pytest.mark.parametrize("order", ["zxz", "xyz", "zyx"])
    def test_extrinsic_matches_scipy(self, order: str, angles: tuple[float, float, float]) -> None:
        ours = euler_matrix_extrinsic(order, EulerAngles(*angles)).to_array()
        expected = Rotation.from_euler(order, angles, degrees=True).as_matrix()
        np.testing.assert_allclose(ours, expected, atol=1e-12)

    def test_perifocal_to_inertial_node_line(self) -> None:
        # With zero argument of perigee, perigee sits on the ascending node.
        raan = 40.0
        m = euler_matrix("ZXZ", EulerAngles(raan, 60.0, 0.0))
        expected = Vector3(math.cos(math.radians(raan)), math.sin(math.radians(raan)), 0.0)
        assert_vectors_close(m @ X, expected)


class TestAxisAngle:
    def test_body_diagonal_cycles_axes(self) -> None:
        m = axis_angle_rotation(Vector3(1.0, 1.0, 1.0), 120.0)
        assert_vectors_close(m @ X, Y)
        assert_vectors_close(m @ Y, Z)

    def test_matches_scipy(self) -> None:
        axis = Vector3(0.3, -0.5, 0.8)
        unit = axis.normalized().to_array()
        ours = axis_angle_rotation(axis, 73.0).to_array()
        expected = Rotation.from_rotvec(unit * math.radians(73.0)).as_matrix()
        np.testing.assert_allclose(ours, expected, atol=1e-12)

    def test_matches_principal_rotation(self) -> None:
        np.testing.assert_allclose(
            axis_angle_rotation(Z, 25.0).to_array(),
            principal_rotation(Axis.Z, 25.0).to_array(),
            atol=1e-14,
        )

    def test_zero_axis_raises(self) -> None:
        with pytest.raises(ValueError):
            axis_angle_rotation(Vector3.zero(), 10.0)


class TestRotate:
    @pytest.mark.parametrize("angles", ANGLE_SETS)
    def test_rotate_to_inverts_rotate_from(self, angles: tuple[float, float, float]) -> None:
        v = Vector3(3796651.8, 2625110.4, 4981712.1)
        euler = EulerAngles(*angles)
        back = rotate_to("ZXZ", rotate_from("ZXZ", v, euler), euler)
        assert_vectors_close(back, v, atol=1e-6)

    def test_accepts_matrix(self) -> None:
        m = principal_rotation(Axis.Z, 90.0)
        assert_vectors_close(rotate_from(m, X), Y)
        assert_vectors_close(rotate_to(m, Y), X)

    def test_order_without_angles_raises(self) -> None:
        with pytest.raises(TypeError):
            rotate_from("ZXZ", X)

    def test_preserves_length(self) -> None:
        v = Vector3(1.0, -2.0, 0.5)
        rotated = rotate_from(EulerOrder.from_string("ZYZ"), v, EulerAngles(12.0, 34.0, 56.0))
        assert rotated.magnitude() == pytest.approx(v.magnitude())


class TestReferenceFrame:
    def test_matrix_is_cached(self) -> None:
        frame = ReferenceFrame("ZXZ", EulerAngles(30.0, 45.0, 60.0))
        assert frame.matrix is frame.matrix

    def test_new_angles_invalidate_cache(self) -> None:
        frame = ReferenceFrame("ZXZ", EulerAngles(30.0, 45.0, 60.0))
        before = frame.matrix
        frame.angles = EulerAngles(10.0, 20.0, 30.0)
        after = frame.matrix
        assert after is not before
        np.testing.assert_allclose(
            after.to_array(),
            euler_matrix("ZXZ", EulerAngles(10.0, 20.0, 30.0)).to_array(),
        )

    def test_same_angles_keep_cache(self) -> None:
        frame = ReferenceFrame("ZXZ", EulerAngles(30.0, 45.0, 60.0))
        before = frame.matrix
        frame.angles = EulerAngles(30.0, 45.0, 60.0)
        assert frame.matrix is before

    def test_default_is_identity(self) -> None:
        frame = ReferenceFrame("ZXZ")
        assert frame.matrix == Matrix3.identity()

    def test_axis_vector_is_orbit_normal(self) -> None:
        raan, inc = 336.0056, 51.6445
        frame = ReferenceFrame("ZXZ", EulerAngles(raan, inc, 51.7508))
        r, i = math.radians(raan), math.radians(inc)
        expected = Vector3(math.sin(i) * math.sin(r), -math.sin(i) * math.cos(r), math.cos(i))
        assert_vectors_close(frame.axis_vector(Axis.Z), expected)

    def test_to_and_from_frame(self) -> None:
        frame = ReferenceFrame("XYZ", EulerAngles(15.0, -30.0, 80.0))
        v = Vector3(1.0, 2.0, 3.0)
        assert_vectors_close(frame.from_frame(frame.to_frame(v)), v)

    def test_equality(self) -> None:
        a = ReferenceFrame("ZXZ", EulerAngles(1.0, 2.0, 3.0))
        b = ReferenceFrame(EulerOrder.from_string("ZXZ"), EulerAngles(1.0, 2.0, 3.0))
        assert a == b
        assert a != ReferenceFrame("ZYZ", EulerAngles(1.0, 2.0, 3.0))
        with pytest.raises(TypeError):
            hash(a)


class TestRotateBetween:
    def test_composes_from_and_to(self) -> None:
        source = ReferenceFrame("ZXZ", EulerAngles(336.0, 51.6, 51.8))
        target = ReferenceFrame("ZYX", EulerAngles(20.0, 10.0, 5.0))
        v = Vector3(7000.0, -1200.0, 300.0)
        assert_vectors_close(
            rotate_between(source, target, v),
            target.to_frame(source.from_frame(v)),
            atol=1e-9,
        )

    def test_from_base_frame(self) -> None:
        base = ReferenceFrame("ZXZ")
        target = ReferenceFrame("ZXZ", EulerAngles(90.0, 0.0, 0.0))
        assert_vectors_close(rotate_between(base, target, Y), X)

    def test_same_frame_is_identity(self) -> None:
        frame = ReferenceFrame("XYX", EulerAngles(11.0, 22.0, 33.0))
        v = Vector3(-4.0, 5.0, 6.0)
        assert_vectors_close(rotate_between(frame, frame, v), v, atol=1e-12)
