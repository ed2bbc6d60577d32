"""
Tests for the ground effect model.
"""

import pytest
import numpy as np

from rotorsim.physics.ground_effect import (
    MAX_THRUST_MULTIPLIER,
    MIN_THRUST_MULTIPLIER,
    GroundEffectParams,
    base_ground_effect,
    calculate_ground_effect,
    recirculation_factor,
)


RADIUS = 0.1


def params(**overrides):
    values = dict(rotor_radius=RADIUS, thrust_coefficient=0.01, collective_pitch=0.2)
    values.update(overrides)
    return GroundEffectParams(**values)


def at_normalized_height(h_bar, **overrides):
    return calculate_ground_effect(params(**overrides), h_bar * 2.0 * RADIUS)


@pytest.mark.physics
class TestThrustMultiplier:

    @pytest.mark.parametrize("speed", [0.0, 2.0, 10.0])
    @pytest.mark.parametrize("ct", [0.0, 0.005, 0.02, 0.1])
    @pytest.mark.parametrize("pitch", [0.0, 0.2, 0.6])
    def test_bounded_for_all_heights(self, speed, ct, pitch):
        for h_bar in np.linspace(0.0, 3.0, 61):
            state = at_normalized_height(h_bar, thrust_coefficient=ct, collective_pitch=pitch,
                                         velocity=np.array([speed, 0.0, 0.0]))
            assert MIN_THRUST_MULTIPLIER <= state.thrust_multiplier <= MAX_THRUST_MULTIPLIER

    def test_close_to_ground_exceeds_free_air(self):
        near = at_normalized_height(0.05)
        far = at_normalized_height(2.0)
        assert near.thrust_multiplier > far.thrust_multiplier

    def test_free_air(self):
        state = at_normalized_height(2.5)
        assert state.thrust_multiplier == 1.0
        assert state.induced_power_ratio == pytest.approx(1.0)
        assert state.recirculation_factor == 1.0

    def test_base_saturates_near_ground(self):
        assert base_ground_effect(0.05, 0.01) == MAX_THRUST_MULTIPLIER
        assert base_ground_effect(0.15, 0.01) == MAX_THRUST_MULTIPLIER

    def test_base_decreases_with_height(self):
        values = [base_ground_effect(h, 0.01) for h in (0.5, 0.75, 1.0, 1.5, 2.0)]
        assert all(a >= b for a, b in zip(values, values[1:]))

    def test_effective_height_and_normal(self):
        state = calculate_ground_effect(params(), 0.3)
        assert state.effective_height == 0.3
        np.testing.assert_array_equal(state.surface_normal, [0.0, 0.0, 1.0])


@pytest.mark.physics
class TestPowerAndRecirculation:

    def test_induced_power_reduced_in_ground_effect(self):
        state = at_normalized_height(0.6)
        assert state.thrust_multiplier > 1.0
        assert state.induced_power_ratio < 1.0

    def test_recirculation_fades_with_speed(self):
        hover = recirculation_factor(0.3, 0.0, 0.2)
        moving = recirculation_factor(0.3, 20.0, 0.2)
        assert hover < moving <= 1.0

    def test_recirculation_inactive_above_one_diameter(self):
        assert recirculation_factor(1.0, 0.0, 0.2) == 1.0


class TestDegenerate:

    def test_zero_radius_is_neutral(self):
        state = calculate_ground_effect(params(rotor_radius=0.0), 0.5)
        assert state.thrust_multiplier == 1.0
        assert state.induced_power_ratio == 1.0
