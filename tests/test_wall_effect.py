"""
Tests for the wall proximity model.
"""

import pytest
import numpy as np

from rotorsim.physics.wall_effect import (
    WallParameters,
    WallState,
    calculate_wall_effect,
    interference_factor,
    pressure_coefficient,
)


RADIUS = 0.12
WALL_NORMAL = np.array([-1.0, 0.0, 0.0])   # wall on the +x side, facing the rotor


def params(distance, thrust=2.0, ct=0.01):
    return WallParameters(wall_normal=WALL_NORMAL, wall_distance=distance, rotor_radius=RADIUS,
                          disk_loading=thrust / (np.pi * RADIUS ** 2), thrust=thrust,
                          thrust_coefficient=ct)


class TestCoefficients:

    def test_pressure_coefficient(self):
        assert pressure_coefficient(1.5, 0.01) == pytest.approx(0.01 / (np.pi * 2.25) * np.exp(-3.0))

    def test_pressure_coefficient_at_contact(self):
        assert pressure_coefficient(0.0, 0.01) == 0.0

    def test_interference_falls_with_distance(self):
        still = np.zeros(3)
        assert interference_factor(0.5, WALL_NORMAL, still) > interference_factor(2.0, WALL_NORMAL, still)
        assert interference_factor(1.0, WALL_NORMAL, still) == pytest.approx(0.5)

    def test_motion_normal_to_wall_amplifies(self):
        toward = interference_factor(1.0, WALL_NORMAL, np.array([3.0, 0.0, 0.0]))
        along = interference_factor(1.0, WALL_NORMAL, np.array([0.0, 3.0, 0.0]))
        assert toward == pytest.approx(1.0)
        assert along == pytest.approx(0.5)


@pytest.mark.physics
class TestWallLoads:

    def test_far_wall_image_force(self):
        pitch = 0.2
        state = calculate_wall_effect(params(0.3), np.zeros(3), np.zeros(3), pitch)

        d = 0.3 / RADIUS
        expected = 2.0 * pressure_coefficient(d, 0.01) / (1.0 + d) * np.sin(pitch)
        np.testing.assert_allclose(state.induced_force, [expected, 0.0, 0.0], atol=1e-15)
        assert state.effective_distance == 0.3

    def test_near_wall_pushes_away(self):
        state = calculate_wall_effect(params(RADIUS), np.zeros(3), np.zeros(3), 0.2)
        # Half the thrust along the wall normal at one radius
        assert np.dot(state.induced_force, WALL_NORMAL) == pytest.approx(1.0, rel=1e-2)

    def test_push_grows_toward_wall(self):
        near = calculate_wall_effect(params(0.05), np.zeros(3), np.zeros(3), 0.2)
        far = calculate_wall_effect(params(0.2), np.zeros(3), np.zeros(3), 0.2)
        assert np.dot(near.induced_force, WALL_NORMAL) > np.dot(far.induced_force, WALL_NORMAL) > 0.0

    def test_zero_pitch_leaves_only_normal_push(self):
        state = calculate_wall_effect(params(0.3), np.zeros(3), np.zeros(3), 0.0)
        np.testing.assert_allclose(state.induced_force, np.zeros(3), atol=1e-15)
        np.testing.assert_allclose(state.induced_moment, np.zeros(3), atol=1e-15)

    def test_no_thrust_no_effect(self):
        state = calculate_wall_effect(params(0.05, thrust=0.0), np.zeros(3), np.zeros(3), 0.2)
        np.testing.assert_array_equal(state.induced_force, np.zeros(3))
        assert state.pressure_coefficient == 0.0

    def test_none_state(self):
        state = WallState.none()
        np.testing.assert_array_equal(state.induced_force, np.zeros(3))
        np.testing.assert_array_equal(state.induced_moment, np.zeros(3))
