"""
Capabilities the rotor physics needs from an external physics engine.

The rotor models never integrate rigid bodies or perform collision detection
themselves. They read pose and velocity from a rigid-body handle, push forces
and torques back into it, and ask a collision world for ray casts.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Protocol, Tuple

from pyquaternion import Quaternion


@dataclass
class RayHit:
    """Result of a ray cast."""
    has_hit: bool = False
    hit_normal: np.ndarray = field(default_factory=lambda: np.zeros(3))
    hit_fraction: float = 1.0   # fraction of origin→target where the hit occurred

    @classmethod
    def miss(cls) -> "RayHit":
        return cls()


class RigidBodyHandle(Protocol):
    """World-frame access to one rigid body owned by the physics engine."""

    def get_world_transform(self) -> Tuple[np.ndarray, Quaternion]:
        ...

    def get_linear_velocity(self) -> np.ndarray:
        ...

    def get_angular_velocity(self) -> np.ndarray:
        ...

    def apply_central_force(self, force: np.ndarray) -> None:
        ...

    def apply_torque(self, torque: np.ndarray) -> None:
        ...

    def set_damping(self, linear: float, angular: float) -> None:
        ...


class CollisionWorld(Protocol):
    """Ray-cast queries against the engine's static and dynamic geometry."""

    def ray_test(self, origin: np.ndarray, target: np.ndarray) -> RayHit:
        ...
