"""
Tests for airframe composition and battery drain.
"""

import logging

import pytest
import numpy as np

from rotorsim.airframe import (
    Airframe,
    BatteryBody,
    BodyKind,
    FuselageBody,
    RotorBody,
    WingBody,
)
from rotorsim.rotor import RotorInitInfo


DT = 1.0 / 60.0


@pytest.fixture
def airframe(config, body):
    frame = Airframe(body, config=config)
    frame.add(FuselageBody(mass=0.6))
    for x, y, spin in ((0.2, 0.2, 1), (-0.2, -0.2, 1), (0.2, -0.2, -1), (-0.2, 0.2, -1)):
        frame.add_rotor(RotorInitInfo(mass=0.05, blade_radius=0.12, spin_direction=spin,
                                      offset=np.array([x, y, 0.0])))
    return frame


class TestComposition:

    def test_part_kinds(self, airframe):
        assert len(airframe.parts_of(BodyKind.ROTOR)) == 4
        assert len(airframe.parts_of(BodyKind.FUSELAGE)) == 1
        assert airframe.parts_of(BodyKind.WING) == []

    def test_total_mass(self, airframe):
        airframe.add(WingBody(mass=0.1, area=0.05))
        airframe.add(BatteryBody(mass=0.3, capacity_wh=20.0))
        assert airframe.mass == pytest.approx(0.6 + 4 * 0.05 + 0.1 + 0.3)

    def test_rotors_registered_on_shared_body(self, airframe, body):
        ids = airframe.rotor_ids()
        assert len(set(ids)) == 4
        for rotor_id in ids:
            assert airframe.registry.get(rotor_id).body is body

    def test_remove_rotor(self, airframe):
        part = airframe.parts_of(BodyKind.ROTOR)[0]
        rotor_id = part.rotor_id
        airframe.remove(part)

        assert rotor_id not in airframe.registry
        assert part.rotor_id is None
        assert len(airframe.rotor_ids()) == 3

    def test_rotor_body_mass(self):
        part = RotorBody(RotorInitInfo(mass=0.07, blade_radius=0.1))
        assert part.mass == 0.07
        assert part.kind is BodyKind.ROTOR

    def test_no_battery(self, airframe):
        assert airframe.battery is None


class TestBattery:

    def test_starts_full(self):
        battery = BatteryBody(mass=0.3, capacity_wh=10.0)
        assert battery.level == pytest.approx(36000.0)
        assert battery.state_of_charge == pytest.approx(1.0)
        assert not battery.is_depleted

    def test_drain(self):
        battery = BatteryBody(mass=0.3, capacity_wh=10.0)
        battery.drain(360.0, 10.0)
        assert battery.state_of_charge == pytest.approx(0.9)

    def test_never_charges_or_goes_negative(self):
        battery = BatteryBody(mass=0.3, capacity_wh=1.0)
        battery.drain(-100.0, 10.0)
        assert battery.level == pytest.approx(3600.0)
        battery.drain(1.0e6, 10.0)
        assert battery.level == 0.0
        assert battery.is_depleted

    def test_zero_capacity(self):
        assert BatteryBody(mass=0.1, capacity_wh=0.0).state_of_charge == 0.0


@pytest.mark.integration
class TestAirframeTick:

    def test_hover_tick(self, airframe, body):
        airframe.set_all_rpm(8000.0)
        airframe.step(DT)

        total_thrust = sum(airframe.registry.get_thrust(i) for i in airframe.rotor_ids())
        assert total_thrust > 0.0
        assert body.applied_force[2] == pytest.approx(total_thrust)
        # Two rotors each way: reaction torques cancel
        np.testing.assert_allclose(body.applied_torque, np.zeros(3), atol=1e-12)

    def test_electrical_power(self, airframe):
        assert airframe.electrical_power() == 0.0
        airframe.set_all_rpm(8000.0)
        airframe.step(DT)
        assert airframe.electrical_power() > 0.0

    def test_battery_drains(self, airframe):
        battery = airframe.add(BatteryBody(mass=0.3, capacity_wh=20.0))
        airframe.set_all_rpm(8000.0)
        airframe.step(DT)

        assert battery.state_of_charge < 1.0
        assert battery.level == pytest.approx(battery.capacity_joules - airframe.electrical_power() * DT)

    def test_depleted_battery_stops_rotors(self, airframe, caplog):
        battery = airframe.add(BatteryBody(mass=0.3, capacity_wh=1.0e-4))
        airframe.set_all_rpm(8000.0)

        with caplog.at_level(logging.WARNING, logger="rotorsim.airframe"):
            airframe.step(DT)

        assert battery.is_depleted
        assert "depleted" in caplog.text
        assert all(airframe.registry.get(i).rpm == 0.0 for i in airframe.rotor_ids())

        airframe.set_all_rpm(8000.0)
        airframe.step(DT)
        assert all(airframe.registry.get_thrust(i) == 0.0 for i in airframe.rotor_ids())
