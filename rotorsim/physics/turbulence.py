"""
Atmospheric turbulence model.

Von Karman style length scales and intensities that blend from surface-layer
values to free-atmosphere values with altitude. The gust components are a
deterministic function of simulation time: the same timestamp always yields
the same gust, which keeps runs reproducible.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Optional

from rotorsim.physics.atmosphere import AtmosphericConditions
from rotorsim.physics.constants import ISA, PI, TURBULENCE, TurbulenceConstants
from rotorsim.utils.maths import clamp, smoothstep


# Per-axis offsets into the time hash so the three axes decorrelate
HASH_SHIFTS = (0.0, 17.31, 43.07)


@dataclass
class TurbulenceState:
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))          # m/s
    angular_velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))  # rad/s
    intensity: float = 0.0        # σ, gust amplitude (m/s)
    length_scale: float = 0.0     # L_u, m
    lateral_scale: float = 0.0    # L_v, m
    vertical_scale: float = 0.0   # L_w, m
    time_scale: float = 0.0       # s
    stability: float = 0.0        # −1 unstable .. +1 stable
    shear_factor: float = 1.0     # log-law wind profile, reported only


def pseudo_random(x: float) -> float:
    """Sine hash of x mapped to [−1, 1). Deterministic, not statistically validated."""
    value = np.sin(x * 12.9898) * 43758.5453
    return float(2.0 * (value - np.floor(value)) - 1.0)


class TurbulenceModel:
    """
    Altitude-dependent gust generator.

    Args:
        constants: Turbulence constants, defaults to TURBULENCE
    """

    def __init__(self, constants: Optional[TurbulenceConstants] = None):
        self.constants = constants or TURBULENCE

    def stability(self, altitude: float, conditions: AtmosphericConditions) -> float:
        """Deviation of the actual lapse rate from the standard one, in [−1, 1]."""
        if altitude <= 0.0:
            return 0.0
        actual_lapse = (conditions.temperature - ISA.SEA_LEVEL_TEMPERATURE) / altitude
        deviation = (actual_lapse - ISA.LAPSE_RATE) / abs(ISA.LAPSE_RATE)
        return clamp(deviation, -1.0, 1.0)

    def shear_factor(self, altitude: float) -> float:
        """Log-law wind profile relative to the reference height."""
        c = self.constants
        height = max(altitude, 2.0 * c.ROUGHNESS_LENGTH)
        factor = np.log(height / c.ROUGHNESS_LENGTH) / np.log(c.REFERENCE_HEIGHT / c.ROUGHNESS_LENGTH)
        return clamp(float(factor), 0.0, c.MAX_SHEAR_FACTOR)

    def calculate(self,
                  altitude: float,
                  airspeed: float,
                  conditions: AtmosphericConditions,
                  time: float) -> TurbulenceState:
        """
        Evaluate the turbulence field.

        Args:
            altitude: Altitude above sea level (m)
            airspeed: Airspeed magnitude (m/s)
            conditions: Atmospheric conditions at altitude
            time: Simulation time (s), seeds the gust generator

        Returns:
            TurbulenceState with gust velocities in world frame
        """
        c = self.constants

        stability = self.stability(altitude, conditions)
        shear = self.shear_factor(altitude)

        blend = smoothstep(c.BLEND_START, c.BLEND_END, altitude)
        length_scale = c.SURFACE_LENGTH_SCALE + blend * (c.FREE_LENGTH_SCALE - c.SURFACE_LENGTH_SCALE)
        scales = np.array([
            length_scale,
            length_scale * c.LATERAL_SCALE_RATIO,
            length_scale * c.VERTICAL_SCALE_RATIO,
        ])

        intensity = c.SURFACE_INTENSITY + blend * (c.FREE_INTENSITY - c.SURFACE_INTENSITY)
        intensity *= 1.0 + c.STABILITY_GAIN * stability

        effective_speed = max(airspeed, 1.0)

        velocity = np.zeros(3)
        for axis in range(3):
            phase_shift = 2.0 * PI * axis / 3.0
            jitter = 0.5 * pseudo_random(time + HASH_SHIFTS[axis])
            velocity[axis] = intensity * np.sin(2.0 * PI / scales[axis] * time + phase_shift + jitter)

        angular_velocity = velocity * c.ANGULAR_FACTOR / scales

        return TurbulenceState(
            velocity=velocity,
            angular_velocity=angular_velocity,
            intensity=float(intensity),
            length_scale=float(scales[0]),
            lateral_scale=float(scales[1]),
            vertical_scale=float(scales[2]),
            time_scale=float(length_scale / effective_speed),
            stability=float(stability),
            shear_factor=float(shear),
        )


_default_model = TurbulenceModel()


def calculate_turbulence(altitude: float,
                         airspeed: float,
                         conditions: AtmosphericConditions,
                         time: float) -> TurbulenceState:
    """Turbulence from the default model."""
    return _default_model.calculate(altitude, airspeed, conditions, time)
