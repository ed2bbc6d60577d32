"""
Tests for rotor telemetry recording and export.
"""

import csv
import json
import os

import pytest

from rotorsim.logging import RotorTelemetryLogger
from rotorsim.physics.rotor_physics import RotorPhysicsOrchestrator


DT = 1.0 / 60.0


@pytest.fixture
def flown(config, registry, rotor_info, body):
    """Registry with one spinning rotor, run for ten ticks with telemetry."""
    telemetry = RotorTelemetryLogger()
    rotor_id = registry.create(rotor_info, body)
    registry.set_rpm(rotor_id, 7000.0)
    orchestrator = RotorPhysicsOrchestrator(config, telemetry=telemetry)
    for _ in range(10):
        orchestrator.step(registry, DT)
    return telemetry, registry, rotor_id


class TestRecording:

    def test_one_snapshot_per_tick(self, flown):
        telemetry, registry, rotor_id = flown
        points = telemetry.for_rotor(rotor_id)
        assert len(points) == 10
        assert points[1].time == pytest.approx(DT)

        last = points[-1]
        assert last.rpm == 7000.0
        assert last.thrust > 0.0
        assert last.air_density > 1.0
        assert last.motor_temperature > 0.0
        assert last.ground_effect_multiplier == 1.0

    def test_log_frequency(self, registry, rotor_info, body):
        telemetry = RotorTelemetryLogger(log_frequency=3)
        rotor = registry.get(registry.create(rotor_info, body))
        recorded = [telemetry.record(i * DT, rotor) for i in range(7)]
        assert sum(r is not None for r in recorded) == 3

    def test_invalid_frequency(self):
        with pytest.raises(ValueError):
            RotorTelemetryLogger(log_frequency=0)

    def test_bounded_buffer(self, registry, rotor_info, body):
        telemetry = RotorTelemetryLogger(max_points=5)
        rotor = registry.get(registry.create(rotor_info, body))
        for i in range(12):
            telemetry.record(i * DT, rotor)
        assert len(telemetry.snapshots) == 5
        assert telemetry.snapshots[0].time == pytest.approx(7 * DT)

    def test_unflown_rotor_snapshot(self, registry, rotor_info, body):
        telemetry = RotorTelemetryLogger()
        snapshot = telemetry.record(0.0, registry.get(registry.create(rotor_info, body)))
        assert snapshot.air_density == 0.0
        assert snapshot.motor_temperature == 0.0

    def test_clear(self, flown):
        telemetry, _, _ = flown
        telemetry.clear()
        assert len(telemetry.snapshots) == 0


class TestSummary:

    def test_summary(self, flown):
        telemetry, registry, rotor_id = flown
        summary = telemetry.get_summary()

        assert summary['total_points'] == 10
        rotor_summary = summary['rotors'][str(rotor_id)]
        assert rotor_summary['points'] == 10
        assert rotor_summary['duration'] == pytest.approx(9 * DT)
        assert rotor_summary['max_thrust'] >= rotor_summary['mean_thrust'] > 0.0

    def test_empty_summary(self):
        assert RotorTelemetryLogger().get_summary() == {'total_points': 0, 'rotors': {}}


class TestExport:

    def test_csv_export(self, flown, temp_dir):
        telemetry, _, _ = flown
        path = os.path.join(temp_dir, "telemetry.csv")
        assert telemetry.export_csv(path)

        with open(path, newline='') as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 10
        assert float(rows[0]['rpm']) == 7000.0

    def test_csv_export_empty(self, temp_dir):
        assert not RotorTelemetryLogger().export_csv(os.path.join(temp_dir, "empty.csv"))

    def test_json_export(self, flown, temp_dir):
        telemetry, _, _ = flown
        path = os.path.join(temp_dir, "telemetry.json")
        assert telemetry.export_json(path)

        with open(path) as f:
            data = json.load(f)
        assert data['summary']['total_points'] == 10
        assert len(data['snapshots']) == 10

    def test_export_to_missing_directory(self, flown, temp_dir):
        telemetry, _, _ = flown
        assert not telemetry.export_json(os.path.join(temp_dir, "missing", "out.json"))
