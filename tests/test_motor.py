"""
Tests for the brushless motor model.
"""

import pytest
import numpy as np

from rotorsim.physics.motor import (
    MAX_EFFICIENCY,
    MotorParameters,
    MotorState,
    adjusted_resistance,
    back_emf,
    calculate_motor_state,
    effective_thermal_resistance,
    torque_constant,
)


AMBIENT = 288.15


@pytest.fixture
def motor():
    return MotorParameters()


class TestElectrical:

    def test_back_emf_follows_kv(self):
        assert back_emf(5000.0, 1000.0) == pytest.approx(5.0)
        assert back_emf(0.0, 1000.0) == 0.0

    def test_torque_constant(self):
        assert torque_constant(1000.0) == pytest.approx(60.0 / (2.0 * np.pi * 1000.0))

    def test_resistance_reference_temperature(self):
        assert adjusted_resistance(0.1, 293.15) == pytest.approx(0.1)
        assert adjusted_resistance(0.1, 343.15) == pytest.approx(0.1 * 1.2)

    def test_forced_cooling(self):
        assert effective_thermal_resistance(10.0, 0.0) == 10.0
        assert effective_thermal_resistance(10.0, 10000.0) == pytest.approx(10.0 / 1.5)

    def test_current_limited_at_low_speed(self, motor):
        state = calculate_motor_state(motor, 1000.0, 0.0, AMBIENT, 0.01)
        assert state.current == pytest.approx(motor.max_current)
        assert state.power_consumption == pytest.approx(motor.voltage * motor.max_current)

    def test_current_from_voltage_balance(self, motor):
        state = calculate_motor_state(motor, 10000.0, 0.0, AMBIENT, 0.01)
        expected = (motor.voltage - 10.0) / adjusted_resistance(motor.resistance, AMBIENT)
        assert state.current == pytest.approx(expected)
        assert state.back_emf == pytest.approx(10.0)


@pytest.mark.physics
class TestPowerAndEfficiency:

    def test_efficiency_bounds(self, motor):
        for rpm in np.linspace(500.0, 11000.0, 12):
            state = calculate_motor_state(motor, rpm, 0.0, AMBIENT, 0.01)
            assert 0.0 <= state.efficiency <= MAX_EFFICIENCY

    def test_regenerating_motor_reports_zero_efficiency(self, motor):
        state = calculate_motor_state(motor, 12000.0, 0.0, AMBIENT, 0.01)
        assert state.current < 0.0
        assert state.current_torque < 0.0
        assert state.efficiency == 0.0

    def test_net_torque(self, motor):
        state = calculate_motor_state(motor, 9000.0, 0.02, AMBIENT, 0.01)
        assert state.net_torque == pytest.approx(state.current_torque - 0.02)

    def test_loss_breakdown(self, motor):
        state = calculate_motor_state(motor, 8000.0, 0.0, AMBIENT, 0.01)
        assert state.copper_losses == pytest.approx(state.current ** 2 * adjusted_resistance(motor.resistance, AMBIENT))
        assert state.iron_losses > 0.0
        assert state.mechanical_losses > 0.0


@pytest.mark.physics
class TestThermal:

    def test_winding_starts_at_ambient(self, motor):
        state = calculate_motor_state(motor, 0.0, 0.0, AMBIENT, 0.01)
        assert state.winding_temperature == pytest.approx(AMBIENT)

    def test_heats_under_load(self, motor):
        state = None
        for _ in range(100):
            state = calculate_motor_state(motor, 2000.0, 0.0, AMBIENT, 0.1, state)
        assert state.winding_temperature > AMBIENT + 1.0

    def test_stopped_motor_cools(self, motor):
        hot = MotorState(winding_temperature=AMBIENT + 40.0)
        state = calculate_motor_state(motor, 0.0, 0.0, AMBIENT, 1.0, hot)
        assert AMBIENT < state.winding_temperature < hot.winding_temperature
        assert state.current == 0.0
        assert state.power_consumption == 0.0

    def test_hot_winding_draws_less_current(self, motor):
        cold = calculate_motor_state(motor, 10000.0, 0.0, AMBIENT, 0.01)
        hot = calculate_motor_state(motor, 10000.0, 0.0, AMBIENT, 0.01,
                                    MotorState(winding_temperature=AMBIENT + 60.0))
        assert hot.current < cold.current
