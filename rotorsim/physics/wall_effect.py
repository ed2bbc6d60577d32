"""
Wall proximity effect.

Image-method model of the force and moment induced on a rotor by a nearby
vertical surface. The wall is found by the caller (usually a ray cast); this
module only turns the hit geometry into loads.
"""

import numpy as np
from dataclasses import dataclass, field

from rotorsim.physics.constants import PI
from rotorsim.utils.maths import normalize_vector


# Below this distance ratio a direct wall-normal push is added
NEAR_WALL_RATIO = 2.0


@dataclass
class WallParameters:
    """Rotor and wall geometry for one evaluation."""
    wall_normal: np.ndarray       # unit normal of the hit surface
    wall_distance: float          # m, rotor hub to wall
    rotor_radius: float           # m
    disk_loading: float           # N/m²
    thrust: float                 # N
    thrust_coefficient: float     # T / (ρ A (ΩR)²)


@dataclass
class WallState:
    induced_force: np.ndarray = field(default_factory=lambda: np.zeros(3))   # N
    induced_moment: np.ndarray = field(default_factory=lambda: np.zeros(3))  # N⋅m
    pressure_coefficient: float = 0.0
    effective_distance: float = 0.0
    interference_factor: float = 0.0

    @classmethod
    def none(cls) -> "WallState":
        """State used when no wall is in range."""
        return cls()


def pressure_coefficient(distance_ratio: float, thrust_coefficient: float) -> float:
    """Near-wall pressure coefficient Ct/(π⋅d²)⋅e^(−2d)."""
    if distance_ratio <= 0.0:
        return 0.0
    return float(thrust_coefficient / (PI * distance_ratio ** 2) * np.exp(-2.0 * distance_ratio))


def interference_factor(distance_ratio: float, wall_normal: np.ndarray, rotor_velocity: np.ndarray) -> float:
    """Distance falloff amplified by motion toward or away from the wall."""
    alignment = float(np.dot(wall_normal, normalize_vector(rotor_velocity)))
    return (1.0 / (1.0 + distance_ratio)) * (1.0 + abs(alignment))


def image_direction(rotor_position: np.ndarray, wall_normal: np.ndarray, wall_distance: float) -> np.ndarray:
    """Unit vector from the rotor's mirror image across the wall back to the rotor."""
    image_position = rotor_position + 2.0 * wall_distance * wall_normal
    return normalize_vector(rotor_position - image_position)


def calculate_wall_effect(params: WallParameters,
                          rotor_position: np.ndarray,
                          rotor_velocity: np.ndarray,
                          collective_pitch: float) -> WallState:
    """
    Compute wall-induced loads on a rotor.

    Args:
        params: Wall hit and rotor parameters
        rotor_position: Rotor hub position in world frame (m)
        rotor_velocity: Rotor linear velocity in world frame (m/s)
        collective_pitch: Collective pitch (rad), scales the image force

    Returns:
        WallState with world-frame force and moment
    """
    if params.rotor_radius <= 0.0 or params.thrust <= 0.0:
        return WallState.none()

    wall_normal = normalize_vector(params.wall_normal)
    distance_ratio = params.wall_distance / params.rotor_radius

    pc = pressure_coefficient(distance_ratio, params.thrust_coefficient)
    interference = interference_factor(distance_ratio, wall_normal, rotor_velocity)

    # Mirror-image influence
    influence = image_direction(np.asarray(rotor_position, dtype=float),
                                wall_normal, params.wall_distance) * interference
    force = influence * params.thrust * pc

    force_arm = wall_normal * params.rotor_radius
    moment = np.cross(force_arm, force)

    pitch_factor = abs(np.sin(collective_pitch))
    force = force * pitch_factor
    moment = moment * pitch_factor

    if distance_ratio < NEAR_WALL_RATIO:
        normal_scale = 1.0 - distance_ratio / NEAR_WALL_RATIO
        force = force + wall_normal * params.thrust * normal_scale

    return WallState(
        induced_force=force,
        induced_moment=moment,
        pressure_coefficient=pc,
        effective_distance=params.wall_distance,
        interference_factor=interference,
    )
