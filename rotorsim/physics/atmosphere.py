"""
Atmospheric modeling for rotor simulation.

This module provides the International Standard Atmosphere (ISA) for the
troposphere and the isothermal layer above the tropopause, including dynamic
viscosity (Sutherland's law) and Mach number for a given airspeed.

This is the only model in the package that validates its input domain: an
altitude below sea level or above 86 km raises instead of being clamped.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional

from rotorsim.physics.constants import ISAConstants, ISA


class AtmosphereDomainError(ValueError):
    """Altitude outside the domain the atmosphere model is defined on."""


class InvalidAltitudeError(AtmosphereDomainError):
    """Raised for negative altitudes."""


class AltitudeOutOfRangeError(AtmosphereDomainError):
    """Raised for altitudes above the model ceiling."""


@dataclass
class AtmosphericConditions:
    """Air properties at one altitude and airspeed."""
    density: float          # kg/m³
    temperature: float      # K
    pressure: float         # Pa
    viscosity: float        # kg/(m⋅s)
    mach_factor: float      # dimensionless
    speed_of_sound: float   # m/s


class AtmosphereModel:
    """
    International Standard Atmosphere (ISA) model.

    Below the tropopause temperature falls linearly with the standard lapse
    rate and pressure follows the barometric power law. Above it temperature
    is constant and pressure decays exponentially from the tropopause value.

    Valid altitude range: 0 to 86,000 meters.
    """

    def __init__(self, constants: Optional[ISAConstants] = None):
        self.constants = constants or ISA

        # Pressure at the tropopause, base of the isothermal layer
        c = self.constants
        self._tropopause_pressure = c.SEA_LEVEL_PRESSURE * (
            c.TROPOPAUSE_TEMPERATURE / c.SEA_LEVEL_TEMPERATURE
        ) ** self._barometric_exponent()

    def _barometric_exponent(self) -> float:
        c = self.constants
        return -c.GRAVITY / (c.GAS_CONSTANT * c.LAPSE_RATE)

    def validate_altitude(self, altitude: float) -> None:
        """
        Check that an altitude lies inside the model domain.

        Args:
            altitude: Altitude in meters above sea level

        Raises:
            InvalidAltitudeError: If altitude is negative
            AltitudeOutOfRangeError: If altitude exceeds the model ceiling
        """
        if altitude < 0.0:
            raise InvalidAltitudeError(
                f"Altitude must be non-negative, got {altitude} m")
        if altitude > self.constants.MAX_ALTITUDE:
            raise AltitudeOutOfRangeError(
                f"Altitude {altitude} m exceeds model ceiling of "
                f"{self.constants.MAX_ALTITUDE} m")

    def get_temperature(self, altitude: float) -> float:
        """Get static temperature (K) at a validated altitude."""
        c = self.constants
        if altitude <= c.TROPOPAUSE_ALTITUDE:
            return c.SEA_LEVEL_TEMPERATURE + c.LAPSE_RATE * altitude
        return c.TROPOPAUSE_TEMPERATURE

    def get_pressure(self, altitude: float) -> float:
        """Get static pressure (Pa) at a validated altitude."""
        c = self.constants
        if altitude <= c.TROPOPAUSE_ALTITUDE:
            temperature = self.get_temperature(altitude)
            return c.SEA_LEVEL_PRESSURE * (
                temperature / c.SEA_LEVEL_TEMPERATURE) ** self._barometric_exponent()

        exponent = (-c.GRAVITY * (altitude - c.TROPOPAUSE_ALTITUDE) /
                    (c.GAS_CONSTANT * c.TROPOPAUSE_TEMPERATURE))
        return self._tropopause_pressure * np.exp(exponent)

    def get_viscosity(self, temperature: float) -> float:
        """
        Dynamic viscosity from Sutherland's law.

        Args:
            temperature: Static temperature in Kelvin

        Returns:
            Dynamic viscosity in kg/(m⋅s)
        """
        c = self.constants
        t_ref = c.SUTHERLAND_TEMPERATURE
        s = c.SUTHERLAND_CONSTANT
        return (c.SUTHERLAND_REF_VISCOSITY * (temperature / t_ref) ** 1.5 *
                (t_ref + s) / (temperature + s))

    def get_speed_of_sound(self, temperature: float) -> float:
        """Speed of sound a = √(γ⋅R⋅T) in m/s."""
        c = self.constants
        return float(np.sqrt(c.GAMMA * c.GAS_CONSTANT * temperature))

    def get_conditions(self, altitude: float, velocity: float) -> AtmosphericConditions:
        """
        Get all atmospheric properties at once.

        Args:
            altitude: Altitude in meters above sea level, within [0, 86000]
            velocity: Airspeed magnitude in m/s, used for the Mach number

        Returns:
            AtmosphericConditions at the requested altitude

        Raises:
            InvalidAltitudeError: If altitude is negative
            AltitudeOutOfRangeError: If altitude exceeds 86,000 m
        """
        self.validate_altitude(altitude)

        temperature = self.get_temperature(altitude)
        pressure = self.get_pressure(altitude)

        # Ideal gas law: ρ = P / (R * T)
        density = pressure / (self.constants.GAS_CONSTANT * temperature)

        speed_of_sound = self.get_speed_of_sound(temperature)
        mach = velocity / speed_of_sound if speed_of_sound > 0.0 else 0.0

        return AtmosphericConditions(
            density=float(density),
            temperature=float(temperature),
            pressure=float(pressure),
            viscosity=float(self.get_viscosity(temperature)),
            mach_factor=float(mach),
            speed_of_sound=speed_of_sound,
        )


_default_model = AtmosphereModel()


def calculate_atmospheric_conditions(altitude: float, velocity: float) -> AtmosphericConditions:
    """Atmospheric conditions from the standard ISA model."""
    return _default_model.get_conditions(altitude, velocity)
