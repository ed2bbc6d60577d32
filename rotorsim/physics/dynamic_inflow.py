"""
Pitt-Peters three-state dynamic inflow.

States are the mean inflow λ₀ and the first harmonic (fore-aft λ₁ₛ and
side-to-side λ₁c) inflow ratios, all normalized by the tip speed ΩR. The
first-order system

    M⋅λ̇ = F − λ

is advanced with one explicit Euler step per tick.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Optional

from rotorsim.physics.constants import PI
from rotorsim.utils.maths import normalize_vector


WAKE_SKEW_THRESHOLD = 0.001   # rad
MIN_MASS_FRACTION = 0.05      # floor on skew-corrected harmonic mass terms


@dataclass
class InflowState:
    mean_inflow: float = 0.0          # λ₀
    longitudinal_inflow: float = 0.0  # λ₁ₛ
    lateral_inflow: float = 0.0       # λ₁c
    induced_velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))  # m/s
    wake_skew: float = 0.0            # χ, rad
    dynamic_tpp: float = 0.0          # rad

    def as_vector(self) -> np.ndarray:
        return np.array([self.mean_inflow, self.longitudinal_inflow, self.lateral_inflow])


def mass_matrix(advance_ratio: float, wake_skew: float) -> np.ndarray:
    """
    Diagonal apparent-mass matrix.

    Args:
        advance_ratio: μ = V / (ΩR)
        wake_skew: Wake skew angle χ in radians

    Returns:
        3x3 diagonal matrix diag(8/3π, 16/45π/v_m, 16/45π/v_m) with the
        harmonic terms scaled by (1 − sin χ) and (1 + sin χ) once the wake is
        skewed
    """
    vm = np.sqrt(1.0 + advance_ratio ** 2)
    harmonic = 16.0 / (45.0 * PI * vm)
    diagonal = np.array([8.0 / (3.0 * PI), harmonic, harmonic])

    if abs(wake_skew) > WAKE_SKEW_THRESHOLD:
        skew = np.sin(wake_skew)
        diagonal[1] = harmonic * max(1.0 - skew, MIN_MASS_FRACTION)
        diagonal[2] = harmonic * max(1.0 + skew, MIN_MASS_FRACTION)

    return np.diag(diagonal)


def forcing_terms(thrust_coefficient: float, advance_ratio: float, collective_pitch: float) -> np.ndarray:
    """Forcing vector from thrust coefficient and pitch-advance coupling."""
    pitch_term = collective_pitch * advance_ratio
    return np.array([
        thrust_coefficient / 2.0,
        pitch_term * np.cos(advance_ratio),
        pitch_term * np.sin(advance_ratio),
    ])


def hover_induced_velocity(disk_loading: float, air_density: float) -> float:
    """Momentum-theory hover induced velocity √(DL / 2ρ)."""
    if disk_loading <= 0.0 or air_density <= 0.0:
        return 0.0
    return float(np.sqrt(disk_loading / (2.0 * air_density)))


def calculate_inflow(thrust_coefficient: float,
                     disk_loading: float,
                     forward_velocity: float,
                     rotor_radius: float,
                     rotor_speed: float,
                     air_density: float,
                     rotor_normal: np.ndarray,
                     collective_pitch: float,
                     delta_time: float,
                     previous: Optional[InflowState] = None) -> InflowState:
    """
    Advance the inflow states by one tick.

    Args:
        thrust_coefficient: Rotor thrust coefficient
        disk_loading: Thrust per unit disc area (N/m²)
        forward_velocity: Edgewise airspeed (m/s)
        rotor_radius: Rotor radius (m)
        rotor_speed: Rotor angular speed Ω (rad/s)
        air_density: Air density (kg/m³)
        rotor_normal: Rotor normal in world frame
        collective_pitch: Collective pitch (rad)
        delta_time: Tick length (s)
        previous: Inflow state from the previous tick

    Returns:
        New InflowState. A stopped rotor returns the zero state.
    """
    tip_speed = rotor_speed * rotor_radius
    if rotor_speed <= 0.0 or rotor_radius <= 0.0:
        return InflowState()

    previous = previous or InflowState()
    advance_ratio = forward_velocity / tip_speed

    wake_skew = float(np.arctan2(forward_velocity, hover_induced_velocity(disk_loading, air_density)))

    mass = mass_matrix(advance_ratio, wake_skew)
    forcing = forcing_terms(thrust_coefficient, advance_ratio, collective_pitch)

    # Explicit Euler; a step never overshoots the forcing on a stiff state
    inflow = previous.as_vector()
    gain = np.minimum(delta_time / np.diag(mass), 1.0)
    inflow = inflow + gain * (forcing - inflow)

    mean, longitudinal, lateral = (float(v) for v in inflow)
    total_inflow = mean + longitudinal * np.cos(wake_skew) + lateral * np.sin(wake_skew)

    return InflowState(
        mean_inflow=mean,
        longitudinal_inflow=longitudinal,
        lateral_inflow=lateral,
        induced_velocity=normalize_vector(rotor_normal) * total_inflow * tip_speed,
        wake_skew=wake_skew,
        dynamic_tpp=float(np.arctan2(longitudinal, mean)),
    )
