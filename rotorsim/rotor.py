"""
Rotor instances and their registry.

A RotorInstance aggregates the static description of one rotor, its derived
blade and motor parameters, the per-tick dynamic state and non-owning
references to the rigid body and collision world it lives in. The
RotorRegistry creates, looks up and removes instances by integer id.
"""

import logging
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from rotorsim.config import ConfigLoader, get_config
from rotorsim.interfaces import CollisionWorld, RigidBodyHandle
from rotorsim.physics.atmosphere import AtmosphericConditions
from rotorsim.physics.blade_flapping import BladeProperties, BladeState
from rotorsim.physics.constants import MAX_RPM, PI, UP_AXIS
from rotorsim.physics.dynamic_inflow import InflowState
from rotorsim.physics.ground_effect import GroundEffectState
from rotorsim.physics.motor import MotorParameters, MotorState
from rotorsim.physics.rotor_physics import initialize_blade_properties, initialize_motor_parameters
from rotorsim.physics.tip_vortex import VortexState
from rotorsim.physics.turbulence import TurbulenceState
from rotorsim.physics.wall_effect import WallState
from rotorsim.utils.maths import normalize_vector

logger = logging.getLogger(__name__)


@dataclass
class RotorInitInfo:
    """Static rotor description supplied at creation."""
    mass: float                 # kg
    blade_radius: float         # m
    blade_count: int = 2
    blade_pitch: float = 0.2    # rad, collective
    disc_area: Optional[float] = None  # m², defaults to πR²
    rotor_normal: np.ndarray = field(default_factory=lambda: UP_AXIS.copy())  # body frame
    spin_direction: int = 1     # +1 counter-clockwise about the normal, -1 clockwise
    offset: np.ndarray = field(default_factory=lambda: np.zeros(3))  # body frame, from body origin

    def __post_init__(self):
        if self.mass <= 0.0:
            raise ValueError(f"Rotor mass must be positive, got {self.mass}")
        if self.blade_radius <= 0.0:
            raise ValueError(f"Blade radius must be positive, got {self.blade_radius}")
        if self.blade_count < 1:
            raise ValueError(f"Blade count must be at least 1, got {self.blade_count}")
        if self.spin_direction not in (1, -1):
            raise ValueError(f"Spin direction must be +1 or -1, got {self.spin_direction}")

        if self.disc_area is not None and self.disc_area < 0.0:
            raise ValueError(f"Disc area must be non-negative, got {self.disc_area}")
        if not self.disc_area:
            self.disc_area = PI * self.blade_radius ** 2

        normal = normalize_vector(self.rotor_normal)
        self.rotor_normal = normal if np.any(normal) else UP_AXIS.copy()
        self.offset = np.asarray(self.offset, dtype=float)


@dataclass
class RotorDynamicState:
    """Per-rotor state overwritten every tick."""
    current_thrust: float = 0.0        # N
    aero_torque: float = 0.0           # N⋅m, shaft torque from the BEM solve
    thrust_coefficient: float = 0.0
    induced_velocity: float = 0.0      # m/s
    power_consumption: float = 0.0     # W, aerodynamic power
    atmosphere: Optional[AtmosphericConditions] = None
    ground_effect: GroundEffectState = field(default_factory=GroundEffectState)
    blade: BladeState = field(default_factory=BladeState)
    vortex: VortexState = field(default_factory=VortexState)
    motor: Optional[MotorState] = None
    wall: WallState = field(default_factory=WallState.none)
    turbulence: TurbulenceState = field(default_factory=TurbulenceState)
    inflow: Optional[InflowState] = None
    wash_force: np.ndarray = field(default_factory=lambda: np.zeros(3))
    wash_torque: np.ndarray = field(default_factory=lambda: np.zeros(3))


@dataclass
class RotorInstance:
    rotor_id: int
    info: RotorInitInfo
    blade_properties: BladeProperties
    motor_parameters: MotorParameters
    body: Optional[RigidBodyHandle] = None
    world: Optional[CollisionWorld] = None
    rpm: float = 0.0
    state: RotorDynamicState = field(default_factory=RotorDynamicState)

    @property
    def radius(self) -> float:
        return self.info.blade_radius

    @property
    def area(self) -> float:
        return self.info.disc_area

    @property
    def is_active(self) -> bool:
        """A rotor takes part in the tick only while attached to a rigid body."""
        return self.body is not None

    def world_pose(self):
        """
        Rotor hub position and thrust axis in world frame.

        Returns:
            (position, normal) tuple, or hub at origin and up axis when detached
        """
        if self.body is None:
            return np.zeros(3), self.info.rotor_normal.copy()
        position, attitude = self.body.get_world_transform()
        hub = np.asarray(position, dtype=float) + np.asarray(attitude.rotate(self.info.offset))
        normal = normalize_vector(attitude.rotate(self.info.rotor_normal))
        return hub, normal


class RotorRegistry:
    """
    Owns rotor instances and hands out integer ids.

    Args:
        config: Configuration used to derive blade and motor defaults
    """

    def __init__(self, config: Optional[ConfigLoader] = None):
        self.config = config or get_config()
        self.max_rpm = float(self.config.get("simulation.max_rpm", MAX_RPM))
        self._rotors: Dict[int, RotorInstance] = {}
        self._next_id = 0

    def create(self,
               info: RotorInitInfo,
               body: Optional[RigidBodyHandle] = None,
               world: Optional[CollisionWorld] = None) -> int:
        """
        Create a rotor and derive its static parameters.

        Args:
            info: Static rotor description
            body: Rigid body the rotor pushes on
            world: Collision world used for wall detection

        Returns:
            New rotor id
        """
        rotor_id = self._next_id
        self._next_id += 1

        self._rotors[rotor_id] = RotorInstance(
            rotor_id=rotor_id,
            info=info,
            blade_properties=initialize_blade_properties(info.mass, info.blade_radius,
                                                         info.blade_count, self.config),
            motor_parameters=initialize_motor_parameters(self.config),
            body=body,
            world=world,
        )
        logger.info("Created rotor %d (R=%.3f m, %d blades)", rotor_id, info.blade_radius, info.blade_count)
        return rotor_id

    def remove(self, rotor_id: int) -> None:
        """Remove a rotor. The rigid body is left to its owner."""
        del self._rotors[rotor_id]
        logger.info("Removed rotor %d", rotor_id)

    def get(self, rotor_id: int) -> RotorInstance:
        """
        Look up a rotor.

        Raises:
            KeyError: If the id is unknown
        """
        try:
            return self._rotors[rotor_id]
        except KeyError:
            raise KeyError(f"Unknown rotor id {rotor_id}") from None

    def set_rpm(self, rotor_id: int, rpm: float) -> float:
        """
        Set the target RPM of a rotor, clamped to [0, max_rpm].

        Returns:
            The RPM actually applied
        """
        rotor = self.get(rotor_id)
        clamped = float(np.clip(rpm, 0.0, self.max_rpm))
        if clamped != rpm:
            logger.warning("Rotor %d RPM request %.1f clamped to %.1f", rotor_id, rpm, clamped)
        rotor.rpm = clamped
        return clamped

    def get_thrust(self, rotor_id: int) -> float:
        """Thrust cached by the last tick (N)."""
        return self.get(rotor_id).state.current_thrust

    def get_power_consumption(self, rotor_id: int) -> float:
        """Aerodynamic power from the last tick (W)."""
        return self.get(rotor_id).state.power_consumption

    def active(self) -> List[RotorInstance]:
        return [rotor for rotor in self._rotors.values() if rotor.is_active]

    def __iter__(self) -> Iterator[RotorInstance]:
        return iter(list(self._rotors.values()))

    def __len__(self) -> int:
        return len(self._rotors)

    def __contains__(self, rotor_id: int) -> bool:
        return rotor_id in self._rotors
