"""
Rotor telemetry logger.

Records one snapshot per rotor per tick (loads, speed, power, proximity
effects, flapping and motor thermal state) and exports the run to CSV or
JSON for offline analysis.
"""

import csv
import json
import logging
import numpy as np
from collections import deque
from dataclasses import dataclass, asdict
from typing import TYPE_CHECKING, Any, Deque, Dict, List, Optional

if TYPE_CHECKING:
    from rotorsim.rotor import RotorInstance

logger = logging.getLogger(__name__)


@dataclass
class RotorSnapshot:
    """Single rotor data point."""
    time: float
    rotor_id: int

    # Rotor loads
    rpm: float
    thrust: float
    torque: float
    power: float
    thrust_coefficient: float

    # Environment
    altitude: float
    air_density: float
    ground_effect_multiplier: float

    # Blade and motor
    flapping_angle: float
    coning_angle: float
    motor_temperature: float
    motor_efficiency: float
    electrical_power: float

    # External load magnitudes
    wall_force: float
    wash_force: float
    turbulence_velocity: float


class RotorTelemetryLogger:
    """
    In-memory telemetry recorder.

    Snapshots are kept in a bounded buffer; the oldest are dropped once
    `max_points` is reached.
    """

    def __init__(self, log_frequency: int = 1, max_points: int = 100000):
        """
        Initialize telemetry logger.

        Args:
            log_frequency: Record every N calls per rotor (1 = every tick)
            max_points: Maximum snapshots kept in memory
        """
        if log_frequency < 1:
            raise ValueError("log_frequency must be at least 1")
        self.log_frequency = log_frequency
        self.max_points = max_points
        self.snapshots: Deque[RotorSnapshot] = deque(maxlen=max_points)
        self._calls: Dict[int, int] = {}

    def record(self, simulation_time: float, rotor: "RotorInstance") -> Optional[RotorSnapshot]:
        """
        Record the current state of a rotor.

        Args:
            simulation_time: Simulation time of the tick (s)
            rotor: Rotor after its tick update

        Returns:
            The stored snapshot, or None if skipped by the log frequency
        """
        count = self._calls.get(rotor.rotor_id, 0)
        self._calls[rotor.rotor_id] = count + 1
        if count % self.log_frequency:
            return None

        snapshot = self._create_snapshot(simulation_time, rotor)
        self.snapshots.append(snapshot)
        return snapshot

    def _create_snapshot(self, simulation_time: float, rotor: "RotorInstance") -> RotorSnapshot:
        state = rotor.state
        position, _ = rotor.world_pose()
        motor = state.motor

        return RotorSnapshot(
            time=float(simulation_time),
            rotor_id=rotor.rotor_id,
            rpm=float(rotor.rpm),
            thrust=float(state.current_thrust),
            torque=float(state.aero_torque),
            power=float(state.power_consumption),
            thrust_coefficient=float(state.thrust_coefficient),
            altitude=float(position[2]),
            air_density=float(state.atmosphere.density) if state.atmosphere else 0.0,
            ground_effect_multiplier=float(state.ground_effect.thrust_multiplier),
            flapping_angle=float(state.blade.flapping_angle),
            coning_angle=float(state.blade.coning_angle),
            motor_temperature=float(motor.winding_temperature) if motor else 0.0,
            motor_efficiency=float(motor.efficiency) if motor else 0.0,
            electrical_power=float(motor.power_consumption) if motor else 0.0,
            wall_force=float(np.linalg.norm(state.wall.induced_force)),
            wash_force=float(np.linalg.norm(state.wash_force)),
            turbulence_velocity=float(np.linalg.norm(state.turbulence.velocity)),
        )

    def for_rotor(self, rotor_id: int) -> List[RotorSnapshot]:
        return [s for s in self.snapshots if s.rotor_id == rotor_id]

    def export_csv(self, filename: str) -> bool:
        """
        Export snapshots to CSV file.

        Args:
            filename: Output CSV filename

        Returns:
            True if export successful, False otherwise
        """
        if not self.snapshots:
            return False

        try:
            with open(filename, 'w', newline='') as csvfile:
                fieldnames = list(asdict(self.snapshots[0]).keys())
                writer = csv.DictWriter(csvfile, fieldnames=fieldnames)
                writer.writeheader()
                for snapshot in self.snapshots:
                    writer.writerow(asdict(snapshot))
            return True

        except OSError as e:
            logger.error("Error exporting telemetry CSV to %s: %s", filename, e)
            return False

    def export_json(self, filename: str) -> bool:
        """
        Export snapshots and summary to JSON file.

        Args:
            filename: Output JSON filename

        Returns:
            True if export successful, False otherwise
        """
        try:
            export_data = {
                'summary': self.get_summary(),
                'snapshots': [asdict(snapshot) for snapshot in self.snapshots],
            }
            with open(filename, 'w') as jsonfile:
                json.dump(export_data, jsonfile, indent=2)
            return True

        except OSError as e:
            logger.error("Error exporting telemetry JSON to %s: %s", filename, e)
            return False

    def get_summary(self) -> Dict[str, Any]:
        """Summary statistics per rotor."""
        summary: Dict[str, Any] = {'total_points': len(self.snapshots), 'rotors': {}}

        for rotor_id in sorted({s.rotor_id for s in self.snapshots}):
            points = self.for_rotor(rotor_id)
            thrust = np.array([p.thrust for p in points])
            power = np.array([p.power for p in points])
            summary['rotors'][str(rotor_id)] = {
                'points': len(points),
                'duration': points[-1].time - points[0].time,
                'mean_thrust': float(np.mean(thrust)),
                'max_thrust': float(np.max(thrust)),
                'mean_power': float(np.mean(power)),
                'max_motor_temperature': max(p.motor_temperature for p in points),
                'max_ground_effect_multiplier': max(p.ground_effect_multiplier for p in points),
            }

        return summary

    def clear(self) -> None:
        self.snapshots.clear()
        self._calls.clear()
