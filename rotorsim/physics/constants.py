"""
Physical constants shared by the rotor models.
"""

import numpy as np
from dataclasses import dataclass


PI = np.pi
RPM_TO_RAD = (2.0 * PI) / 60.0

MAX_RPM = 15000.0
UP_AXIS = np.array([0.0, 0.0, 1.0])


@dataclass(frozen=True)
class ISAConstants:
    """International Standard Atmosphere constants (troposphere + isothermal layer)."""
    SEA_LEVEL_PRESSURE: float = 101325.0     # Pa
    SEA_LEVEL_TEMPERATURE: float = 288.15    # K
    SEA_LEVEL_DENSITY: float = 1.225         # kg/m³
    LAPSE_RATE: float = -0.0065              # K/m (troposphere)
    GAS_CONSTANT: float = 287.05             # J/(kg⋅K)
    GRAVITY: float = 9.80665                 # m/s²
    TROPOPAUSE_ALTITUDE: float = 11000.0     # m
    TROPOPAUSE_TEMPERATURE: float = 216.65   # K
    GAMMA: float = 1.4                       # Ratio of specific heats
    MAX_ALTITUDE: float = 86000.0            # m, upper validity bound

    # Sutherland's law
    SUTHERLAND_TEMPERATURE: float = 273.15   # K
    SUTHERLAND_CONSTANT: float = 110.4       # K
    SUTHERLAND_REF_VISCOSITY: float = 1.716e-5  # kg/(m⋅s)


@dataclass(frozen=True)
class TurbulenceConstants:
    """Boundary-layer and free-atmosphere turbulence parameters."""
    SURFACE_LENGTH_SCALE: float = 100.0      # m
    FREE_LENGTH_SCALE: float = 1000.0        # m
    SURFACE_INTENSITY: float = 0.15
    FREE_INTENSITY: float = 0.10
    BLEND_START: float = 800.0               # m
    BLEND_END: float = 1200.0                # m
    LATERAL_SCALE_RATIO: float = 0.8
    VERTICAL_SCALE_RATIO: float = 0.5
    STABILITY_GAIN: float = 0.1
    ANGULAR_FACTOR: float = 0.2
    ROUGHNESS_LENGTH: float = 0.03           # m, open terrain
    REFERENCE_HEIGHT: float = 6.1            # m (20 ft)
    MAX_SHEAR_FACTOR: float = 2.0


ISA = ISAConstants()
TURBULENCE = TurbulenceConstants()
