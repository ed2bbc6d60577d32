"""
Prop wash (rotor downwash) model.

A rotor's wake is described by a uniform momentum-theory downwash along the
rotor axis, a tip-vortex vorticity and an intensity metric. Other rotors
sample it through a Gaussian radial and exponential axial falloff.
"""

import numpy as np
from dataclasses import dataclass, field

from rotorsim.physics.atmosphere import AtmosphericConditions
from rotorsim.physics.constants import PI, RPM_TO_RAD
from rotorsim.utils.maths import normalize_vector


WAKE_EXPANSION_RATE = 0.15
TIP_VORTEX_FRACTION = 0.8
AXIAL_DECAY_RADII = 3.0


@dataclass
class PropWashField:
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))   # m/s, wash direction
    vorticity: np.ndarray = field(default_factory=lambda: np.zeros(3))  # 1/s
    intensity: float = 0.0
    wake_radius: float = 0.0   # m


def calculate_prop_wash(rotor_normal: np.ndarray,
                        rpm: float,
                        area: float,
                        radius: float,
                        blade_count: int,
                        conditions: AtmosphericConditions,
                        thrust: float) -> PropWashField:
    """
    Build the wash field of one rotor.

    The wash travels against the rotor normal (thrust pushes air the other
    way), with speed v_i = √(T / 2ρA).

    Args:
        rotor_normal: Rotor thrust axis in world frame
        rpm: Rotor speed (RPM)
        area: Disc area (m²)
        radius: Rotor radius (m)
        blade_count: Number of blades
        conditions: Atmospheric conditions at the rotor
        thrust: Rotor thrust (N)

    Returns:
        PropWashField, empty for a stopped or non-thrusting rotor
    """
    omega = rpm * RPM_TO_RAD
    if omega <= 0.0 or thrust <= 0.0 or area <= 0.0 or radius <= 0.0 or blade_count <= 0:
        return PropWashField()

    rho = conditions.density
    induced_velocity = np.sqrt(thrust / (2.0 * rho * area))
    wake_radius = radius * (1.0 + WAKE_EXPANSION_RATE)

    gamma = thrust / (rho * omega * radius * blade_count)
    tip_vortex_strength = TIP_VORTEX_FRACTION * gamma

    normal = normalize_vector(rotor_normal)
    return PropWashField(
        velocity=-normal * induced_velocity,
        vorticity=normal * (tip_vortex_strength / (2.0 * PI * wake_radius)),
        intensity=float(thrust / (rho * area * induced_velocity ** 2)),
        wake_radius=float(wake_radius),
    )


def calculate_prop_wash_influence(wash: PropWashField,
                                  wash_origin: np.ndarray,
                                  affected_point: np.ndarray,
                                  rotor_radius: float) -> float:
    """
    Scalar influence of a wash field at a point.

    Args:
        wash: Wash field of the source rotor
        wash_origin: Source rotor hub position (m)
        affected_point: Point being evaluated (m)
        rotor_radius: Source rotor radius (m)

    Returns:
        intensity ⋅ radial falloff ⋅ axial falloff, zero behind the origin
    """
    direction = normalize_vector(wash.velocity)
    if not np.any(direction) or rotor_radius <= 0.0:
        return 0.0

    displacement = np.asarray(affected_point, dtype=float) - np.asarray(wash_origin, dtype=float)
    axial_distance = float(np.dot(displacement, direction))
    if axial_distance < 0.0:
        return 0.0

    radial_distance = np.linalg.norm(displacement - axial_distance * direction)
    wake_radius = rotor_radius * (1.0 + WAKE_EXPANSION_RATE * axial_distance / rotor_radius)

    radial_factor = np.exp(-(radial_distance / wake_radius) ** 2)
    axial_factor = np.exp(-axial_distance / (AXIAL_DECAY_RADII * rotor_radius))

    return float(wash.intensity * radial_factor * axial_factor)
