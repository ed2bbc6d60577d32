"""
Tests for blade flapping dynamics.

Convergence is checked on a full-scale articulated rotor (UH-60 class blade
with a stiff hinge spring) where the flapping time constants are well
resolved at a 1 ms tick.
"""

import pytest
import numpy as np

from rotorsim.physics.blade_flapping import (
    BladeProperties,
    BladeState,
    calculate_blade_state,
    steady_coning_angle,
)
from rotorsim.physics.constants import RPM_TO_RAD


def full_scale_blade() -> BladeProperties:
    mass, grip, spring = 110.0, 5.0, 54250.0
    inertia = mass * grip ** 2 / 3.0
    return BladeProperties(
        mass=mass,
        hinge_offset=0.381,
        lock_number=8.0,
        spring_constant=spring,
        natural_frequency=np.sqrt(spring / inertia),
        blade_grip=grip,
    )


def drone_blade() -> BladeProperties:
    return BladeProperties.from_rotor(rotor_mass=0.1, blade_radius=0.12, blade_count=2)


class TestBladeProperties:

    def test_from_rotor_defaults(self):
        props = drone_blade()
        assert props.mass == pytest.approx(0.05)
        assert props.hinge_offset == pytest.approx(0.006)
        assert props.blade_grip == pytest.approx(0.114)
        assert props.lock_number == 5.0
        assert props.spring_constant == 1000.0

    def test_natural_frequency_from_inertia(self):
        props = drone_blade()
        assert props.natural_frequency == pytest.approx(np.sqrt(props.spring_constant / props.moment_of_inertia))

    def test_properties_immutable(self):
        props = drone_blade()
        with pytest.raises(AttributeError):
            props.mass = 1.0


@pytest.mark.physics
class TestFlappingConvergence:

    def test_flapping_settles_in_forward_flight(self):
        props = full_scale_blade()
        state = None
        previous_angle = 0.0
        for _ in range(1000):
            previous_angle = state.flapping_angle if state else 0.0
            state = calculate_blade_state(props, rotor_speed=27.0, forward_velocity=30.0,
                                          air_density=1.225, collective_pitch=0.105,
                                          cyclic_pitch=0.052, shaft_tilt=-0.052,
                                          delta_time=0.001, previous=state)

        assert abs(state.flapping_rate) < 0.1
        assert abs(state.flapping_angle - previous_angle) < 0.01
        assert np.isfinite(state.flapping_angle)

    def test_forward_flight_tilts_tip_path_plane_back(self):
        props = full_scale_blade()
        state = None
        for _ in range(500):
            state = calculate_blade_state(props, 27.0, 30.0, 1.225, 0.105, 0.0, 0.0, 0.001, state)
        assert state.flapping_angle > 0.0
        assert state.tip_path_plane[0] > 0.0


@pytest.mark.physics
class TestTipPathPlane:

    @pytest.mark.parametrize("rpm", [100.0, 5000.0, 15000.0])
    @pytest.mark.parametrize("pitch", [-0.5, 0.0, 0.3, 1.2])
    @pytest.mark.parametrize("velocity", [0.0, 15.0, 60.0])
    def test_unit_length(self, rpm, pitch, velocity):
        props = drone_blade()
        state = None
        for _ in range(5):
            state = calculate_blade_state(props, rpm * RPM_TO_RAD, velocity, 1.225,
                                          pitch, 0.1, 0.05, 1.0 / 60.0, state)
        assert np.linalg.norm(state.tip_path_plane) == pytest.approx(1.0, abs=1e-9)

    def test_shaft_tilt_without_flapping(self):
        props = drone_blade()
        state = calculate_blade_state(props, 500.0, 0.0, 1.225, 0.0, 0.0, 0.3, 0.0)
        # Rotation about x moves the normal into the y-z plane
        assert state.tip_path_plane[0] == pytest.approx(0.0, abs=1e-12)
        assert state.tip_path_plane[1] == pytest.approx(-np.sin(0.3))


class TestBladeStateOutputs:

    def test_stopped_rotor_is_neutral(self):
        state = calculate_blade_state(drone_blade(), 0.0, 10.0, 1.225, 0.2, 0.0, 0.0, 0.01,
                                      previous=BladeState(flapping_angle=0.1, flapping_rate=1.0))
        assert state.flapping_angle == 0.0
        assert state.flapping_rate == 0.0
        np.testing.assert_array_equal(state.tip_path_plane, [0.0, 0.0, 1.0])

    def test_coning_angle(self):
        props = drone_blade()
        omega = 5000.0 * RPM_TO_RAD
        state = calculate_blade_state(props, omega, 0.0, 1.225, 0.2, 0.0, 0.0, 0.01)
        expected = np.arctan2(props.lock_number * 0.2 / 6.0, props.mass * omega ** 2 * props.hinge_offset)
        assert state.coning_angle == pytest.approx(expected)
        assert steady_coning_angle(props, omega, 0.2) > 0.0

    def test_lead_lag_from_flapping(self):
        props = full_scale_blade()
        state = calculate_blade_state(props, 27.0, 30.0, 1.225, 0.105, 0.0, 0.0, 0.01)
        expected = -2.0 * state.flapping_angle * state.flapping_rate / 27.0
        assert state.lead_lag_angle == pytest.approx(expected)

    def test_disk_loading(self):
        props = drone_blade()
        state = calculate_blade_state(props, 500.0, 0.0, 1.225, 0.2, 0.0, 0.0, 0.01)
        expected = props.mass * 9.80665 / (np.pi * props.total_radius ** 2)
        assert state.disk_loading == pytest.approx(expected)


@pytest.mark.physics
class TestAzimuth:

    def test_azimuth_carried_between_ticks(self):
        props = drone_blade()
        first = calculate_blade_state(props, 500.0, 10.0, 1.225, 0.2, 0.0, 0.0, 0.01)
        assert first.azimuth == pytest.approx(5.0)

        second = calculate_blade_state(props, 500.0, 10.0, 1.225, 0.2, 0.0, 0.0, 0.01, first)
        assert second.azimuth == pytest.approx(10.0 % (2.0 * np.pi))
        assert 0.0 <= second.azimuth < 2.0 * np.pi

    def test_zero_tick_keeps_azimuth(self):
        props = drone_blade()
        state = calculate_blade_state(props, 500.0, 0.0, 1.225, 0.2, 0.0, 0.0, 0.0,
                                      previous=BladeState(azimuth=1.25))
        assert state.azimuth == 1.25

    def test_steady_flapping_independent_of_tick_length(self):
        props = full_scale_blade()

        def mean_flapping(delta_time):
            ticks = int(round(3.0 / delta_time))
            window = int(round(1.0 / delta_time))
            state = None
            angles = []
            for _ in range(ticks):
                state = calculate_blade_state(props, 27.0, 30.0, 1.225, 0.105, 0.2, 0.0,
                                              delta_time, state)
                angles.append(state.flapping_angle)
            return float(np.mean(angles[-window:]))

        assert mean_flapping(1.0 / 60.0) == pytest.approx(mean_flapping(0.001), abs=0.02)
