"""Tests for inertial state vectors."""

import numpy as np
import pytest

from satrack.core.linalg import Vector3
from satrack.core.state import StateVectors


def test_array_round_trip() -> None:
    values = np.array([3796772.3, 2625193.8, 4981870.2, -5864.5, 4451.6, 2125.8])
    state = StateVectors.from_array(values)
    assert state.position == Vector3(3796772.3, 2625193.8, 4981870.2)
    np.testing.assert_array_equal(state.to_array(), values)


def test_accepts_column_vector() -> None:
    state = StateVectors.from_array(np.arange(6.0).reshape(6, 1))
    assert state.velocity == Vector3(3.0, 4.0, 5.0)


@pytest.mark.parametrize("size", [3, 5, 7])
def test_wrong_size_raises(size: int) -> None:
    with pytest.raises(ValueError, match="Expected 6 components"):
        StateVectors.from_array(np.zeros(size))


def test_radius_and_speed() -> None:
    state = StateVectors(Vector3(3.0, 4.0, 0.0), Vector3(0.0, 0.0, -2.0))
    assert state.radius_m == pytest.approx(5.0)
    assert state.speed_m_s == pytest.approx(2.0)
