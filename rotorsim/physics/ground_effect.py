"""
Ground effect model.

Height-dependent thrust augmentation, induced power reduction and flow
recirculation for a rotor operating above a flat ground plane.
"""

import numpy as np
from dataclasses import dataclass, field

from rotorsim.physics.constants import UP_AXIS


MAX_THRUST_MULTIPLIER = 1.4
MIN_THRUST_MULTIPLIER = 1.0


@dataclass
class GroundEffectParams:
    """Rotor inputs to the ground effect model."""
    rotor_radius: float           # m
    thrust_coefficient: float     # T / (ρ A (ΩR)²)
    collective_pitch: float       # rad
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))  # m/s
    disk_loading: float = 0.0     # N/m²


@dataclass
class GroundEffectState:
    thrust_multiplier: float = 1.0
    induced_power_ratio: float = 1.0
    recirculation_factor: float = 1.0
    effective_height: float = 0.0
    surface_normal: np.ndarray = field(default_factory=lambda: UP_AXIS.copy())


def base_ground_effect(normalized_height: float, thrust_coefficient: float) -> float:
    """
    Thrust multiplier before recirculation losses.

    Cheeseman-Bennett style image solution with a thrust-coefficient correction
    and a reduction very close to the ground.

    Args:
        normalized_height: Height above ground in rotor diameters
        thrust_coefficient: Rotor thrust coefficient

    Returns:
        Thrust multiplier in [1.0, 1.4]
    """
    if normalized_height < 0.1:
        return MAX_THRUST_MULTIPLIER
    if normalized_height > 2.0:
        return MIN_THRUST_MULTIPLIER

    denominator = 1.0 - (1.0 / (4.0 * normalized_height)) ** 2
    if denominator <= 1.0 / MAX_THRUST_MULTIPLIER:
        # Singular close to the plane, the image solution saturates
        return MAX_THRUST_MULTIPLIER
    base_factor = 1.0 / denominator

    thrust_correction = 1.0 + 0.1 * np.sqrt(max(thrust_coefficient, 0.0) / 0.02)

    proximity_factor = 1.0
    if normalized_height < 0.5:
        proximity_factor = 0.9 + 0.1 * np.sqrt(normalized_height / 0.5)

    multiplier = base_factor * thrust_correction * proximity_factor
    return float(np.clip(multiplier, MIN_THRUST_MULTIPLIER, MAX_THRUST_MULTIPLIER))


def recirculation_factor(normalized_height: float,
                         velocity_magnitude: float,
                         collective_pitch: float) -> float:
    """Fraction of thrust kept after ground-vortex recirculation (<= 1)."""
    if normalized_height >= 1.0:
        return 1.0

    height_factor = np.sqrt(1.0 - normalized_height)
    velocity_factor = np.exp(-velocity_magnitude / 5.0)
    pitch_factor = 1.0 + 0.15 * abs(np.sin(collective_pitch))

    return float(1.0 - 0.2 * height_factor * velocity_factor * pitch_factor)


def induced_power_ratio(thrust_multiplier: float, normalized_height: float) -> float:
    """Induced power in ground effect relative to free air."""
    ratio = 1.0 / thrust_multiplier ** 1.5

    # Viscous penalty very close to the ground
    if normalized_height < 0.5:
        ratio += 0.15 * (1.0 - normalized_height / 0.5) ** 0.7

    return float(ratio)


def calculate_ground_effect(params: GroundEffectParams, height_agl: float) -> GroundEffectState:
    """
    Evaluate ground effect at a height above ground.

    Args:
        params: Rotor parameters
        height_agl: Height of the rotor hub above ground level (m)

    Returns:
        GroundEffectState with the thrust multiplier clamped to [1.0, 1.4]
    """
    if params.rotor_radius <= 0.0:
        return GroundEffectState(effective_height=height_agl)

    normalized_height = max(height_agl, 0.0) / (2.0 * params.rotor_radius)

    multiplier = base_ground_effect(normalized_height, params.thrust_coefficient)
    recirculation = recirculation_factor(
        normalized_height,
        float(np.linalg.norm(params.velocity)),
        params.collective_pitch,
    )
    multiplier = float(np.clip(multiplier * recirculation,
                               MIN_THRUST_MULTIPLIER, MAX_THRUST_MULTIPLIER))

    return GroundEffectState(
        thrust_multiplier=multiplier,
        induced_power_ratio=induced_power_ratio(multiplier, normalized_height),
        recirculation_factor=recirculation,
        effective_height=height_agl,
    )
