"""
Airframe composition.

An airframe is one rigid body made of a small, closed set of part kinds:
fuselage, rotors, wings and batteries. Rotor parts are registered with a
RotorRegistry and driven by a RotorPhysicsOrchestrator; the battery is
drained by the electrical power the rotor motors draw.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from rotorsim.config import ConfigLoader, get_config
from rotorsim.interfaces import CollisionWorld, RigidBodyHandle
from rotorsim.logging.telemetry import RotorTelemetryLogger
from rotorsim.physics.rotor_physics import RotorPhysicsOrchestrator
from rotorsim.rotor import RotorInitInfo, RotorRegistry

logger = logging.getLogger(__name__)


class BodyKind(Enum):
    FUSELAGE = "fuselage"
    ROTOR = "rotor"
    WING = "wing"
    BATTERY = "battery"


@dataclass
class FuselageBody:
    mass: float
    kind: BodyKind = field(default=BodyKind.FUSELAGE, init=False)


@dataclass
class WingBody:
    mass: float
    area: float = 0.0   # m²
    kind: BodyKind = field(default=BodyKind.WING, init=False)


@dataclass
class RotorBody:
    info: RotorInitInfo
    rotor_id: Optional[int] = None
    kind: BodyKind = field(default=BodyKind.ROTOR, init=False)

    @property
    def mass(self) -> float:
        return self.info.mass


@dataclass
class BatteryBody:
    """Battery with a simple energy reservoir."""
    mass: float
    capacity_wh: float
    voltage: float = 11.1
    internal_resistance: float = 0.0   # Ω
    c_rating: float = 0.0
    level: float = field(default=0.0, init=False)   # J
    kind: BodyKind = field(default=BodyKind.BATTERY, init=False)

    def __post_init__(self):
        self.level = self.capacity_joules

    @property
    def capacity_joules(self) -> float:
        return self.capacity_wh * 3600.0

    @property
    def state_of_charge(self) -> float:
        if self.capacity_joules <= 0.0:
            return 0.0
        return self.level / self.capacity_joules

    @property
    def is_depleted(self) -> bool:
        return self.level <= 0.0

    def drain(self, power: float, dt: float) -> float:
        """
        Remove energy drawn at `power` watts for `dt` seconds.

        Returns:
            Remaining energy (J), never below zero
        """
        self.level = max(0.0, self.level - max(power, 0.0) * dt)
        return self.level


Body = Union[FuselageBody, RotorBody, WingBody, BatteryBody]


class Airframe:
    """
    One rigid body carrying fuselage, rotor, wing and battery parts.

    Args:
        body: Rigid body shared by all parts
        world: Collision world used for rotor wall detection
        config: Configuration, defaults to the global config
        telemetry: Optional rotor telemetry recorder
    """

    def __init__(self,
                 body: RigidBodyHandle,
                 world: Optional[CollisionWorld] = None,
                 config: Optional[ConfigLoader] = None,
                 telemetry: Optional[RotorTelemetryLogger] = None):
        self.body = body
        self.world = world
        self.config = config or get_config()
        self.registry = RotorRegistry(self.config)
        self.physics = RotorPhysicsOrchestrator(self.config, telemetry)
        self.parts: List[Body] = []

    def add(self, part: Body) -> Body:
        """Attach a part; rotor parts are registered and get a rotor id."""
        if part.kind is BodyKind.ROTOR:
            part.rotor_id = self.registry.create(part.info, self.body, self.world)
        self.parts.append(part)
        return part

    def add_rotor(self, info: RotorInitInfo) -> int:
        return self.add(RotorBody(info)).rotor_id

    def remove(self, part: Body) -> None:
        self.parts.remove(part)
        if part.kind is BodyKind.ROTOR and part.rotor_id is not None:
            self.registry.remove(part.rotor_id)
            part.rotor_id = None

    def parts_of(self, kind: BodyKind) -> List[Body]:
        return [part for part in self.parts if part.kind is kind]

    @property
    def mass(self) -> float:
        return sum(part.mass for part in self.parts)

    @property
    def battery(self) -> Optional[BatteryBody]:
        batteries = self.parts_of(BodyKind.BATTERY)
        return batteries[0] if batteries else None

    def rotor_ids(self) -> List[int]:
        return [part.rotor_id for part in self.parts_of(BodyKind.ROTOR)]

    def set_rpm(self, rotor_id: int, rpm: float) -> float:
        return self.registry.set_rpm(rotor_id, rpm)

    def set_all_rpm(self, rpm: float) -> None:
        for rotor_id in self.rotor_ids():
            self.registry.set_rpm(rotor_id, rpm)

    def electrical_power(self) -> float:
        """Total electrical power drawn by the rotor motors (W)."""
        total = 0.0
        for rotor in self.registry:
            if rotor.state.motor is not None:
                total += max(rotor.state.motor.power_consumption, 0.0)
        return total

    def step(self, dt: float) -> None:
        """
        Run one rotor physics tick and drain the battery.

        A depleted battery stops all rotors before the tick.
        """
        battery = self.battery
        if battery is not None and battery.is_depleted:
            self.set_all_rpm(0.0)

        self.physics.step(self.registry, dt)

        if battery is not None and not battery.is_depleted:
            battery.drain(self.electrical_power(), dt)
            if battery.is_depleted:
                logger.warning("Battery depleted, stopping rotors")
                self.set_all_rpm(0.0)
