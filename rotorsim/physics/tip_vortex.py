"""
Trailing tip vortex model.

Each blade sheds a tip vortex that is followed along a helix. The induced
velocity at an evaluation point is the sum over blades of a desingularized
line-vortex (Lamb-Oseen style) velocity. Circulation dissipates with wake age
and the viscous core grows with it.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Optional

from rotorsim.physics.constants import PI, UP_AXIS
from rotorsim.utils.maths import normalize_vector


LIFT_SLOPE = 2.0 * PI
DISSIPATION_TIME = 5.0      # s
CORE_RATIO = 0.05           # initial core radius / chord
CORE_GROWTH_RATE = 1.0e-4
MIN_DISTANCE = 1.0e-3       # m


@dataclass
class VortexParameters:
    blade_tip_speed: float    # m/s
    blade_chord: float        # m
    effective_aoa: float      # rad
    blade_span: float         # m, helix radius
    blade_count: int


@dataclass
class VortexState:
    induced_velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))  # m/s
    core_radius: float = 0.0           # m
    circulation_strength: float = 0.0  # m²/s
    wake_age: float = 0.0              # s
    dissipation_factor: float = 1.0


def circulation(params: VortexParameters) -> float:
    """Bound circulation Γ = ½⋅Cl⋅c⋅V_tip."""
    return 0.5 * LIFT_SLOPE * params.effective_aoa * params.blade_chord * params.blade_tip_speed


def core_radius(blade_chord: float, wake_age: float, reynolds_number: float) -> float:
    initial_core = CORE_RATIO * blade_chord
    return initial_core * (1.0 + CORE_GROWTH_RATE * wake_age * np.sqrt(max(reynolds_number, 0.0)))


def vortex_induced_velocity(vortex_position: np.ndarray,
                            evaluation_point: np.ndarray,
                            strength: float,
                            core: float) -> np.ndarray:
    """
    Induced velocity of one vortex element.

    Magnitude Γ/(2π⋅d)⋅(1 − exp(−(d/r_c)²)), directed along r × up. Points
    closer than 1 mm contribute nothing.
    """
    r = evaluation_point - vortex_position
    distance = np.linalg.norm(r)
    if distance < MIN_DISTANCE or core <= 0.0:
        return np.zeros(3)

    magnitude = strength / (2.0 * PI * distance)
    magnitude *= 1.0 - np.exp(-(distance / core) ** 2)
    return normalize_vector(np.cross(r, UP_AXIS)) * magnitude


def calculate_tip_vortex(params: VortexParameters,
                         air_density: float,
                         air_viscosity: float,
                         rotor_speed: float,
                         forward_velocity: float,
                         rotor_position: np.ndarray,
                         evaluation_point: np.ndarray,
                         delta_time: float,
                         previous: Optional[VortexState] = None) -> VortexState:
    """
    Advance the vortex wake by one tick and evaluate its induced velocity.

    Args:
        params: Blade and vortex parameters
        air_density: Air density (kg/m³)
        air_viscosity: Dynamic viscosity (kg/(m⋅s))
        rotor_speed: Rotor angular speed Ω (rad/s)
        forward_velocity: Airspeed advecting the wake (m/s)
        rotor_position: Rotor hub position (m)
        evaluation_point: Point where the induced velocity is evaluated (m)
        delta_time: Tick length (s)
        previous: Vortex state from the previous tick, carries wake age

    Returns:
        New VortexState, or the zero state for a stopped rotor
    """
    if rotor_speed <= 0.0 or params.blade_count <= 0:
        return VortexState()

    previous = previous or VortexState()
    wake_age = previous.wake_age + delta_time
    dissipation = float(np.exp(-wake_age / DISSIPATION_TIME))

    reynolds = 0.0
    if air_viscosity > 0.0:
        reynolds = params.blade_tip_speed * params.blade_chord * air_density / air_viscosity

    gamma = circulation(params)
    core = core_radius(params.blade_chord, wake_age, reynolds)

    rotor_position = np.asarray(rotor_position, dtype=float)
    evaluation_point = np.asarray(evaluation_point, dtype=float)

    induced = np.zeros(3)
    for blade in range(params.blade_count):
        azimuth = 2.0 * PI * blade / params.blade_count + rotor_speed * wake_age
        vortex_position = rotor_position + np.array([
            params.blade_span * np.cos(azimuth),
            params.blade_span * np.sin(azimuth),
            -forward_velocity * wake_age,
        ])
        induced += vortex_induced_velocity(vortex_position, evaluation_point, gamma * dissipation, core)

    return VortexState(
        induced_velocity=induced,
        core_radius=float(core),
        circulation_strength=float(gamma),
        wake_age=wake_age,
        dissipation_factor=dissipation,
    )
