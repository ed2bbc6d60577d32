"""
RotorSim - Multirotor Rotor Aerodynamics and Actuator Simulation

Per-tick rotor physics for multirotor aircraft: atmosphere, blade-element
thrust, flapping, inflow, proximity effects, tip vortices, prop wash,
turbulence and an electro-thermal motor model.
"""

__version__ = "0.1.0"

from rotorsim.physics.atmosphere import (
    AtmosphericConditions,
    AtmosphereDomainError,
    InvalidAltitudeError,
    AltitudeOutOfRangeError,
    calculate_atmospheric_conditions,
)
from rotorsim.rotor import RotorInitInfo, RotorInstance, RotorRegistry
from rotorsim.physics.rotor_physics import RotorPhysicsOrchestrator
from rotorsim.airframe import Airframe, BodyKind

__all__ = [
    "AtmosphericConditions",
    "AtmosphereDomainError",
    "InvalidAltitudeError",
    "AltitudeOutOfRangeError",
    "calculate_atmospheric_conditions",
    "RotorInitInfo",
    "RotorInstance",
    "RotorRegistry",
    "RotorPhysicsOrchestrator",
    "Airframe",
    "BodyKind",
]
