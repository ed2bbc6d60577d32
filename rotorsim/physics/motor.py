"""
Brushless DC motor model.

Electrical model (back-EMF, temperature-compensated winding resistance,
current limit), torque with a load-dependent efficiency factor, a loss
breakdown (copper, iron, mechanical) and a first-order thermal model of the
winding.
"""

from dataclasses import dataclass
from typing import Optional

from rotorsim.physics.constants import PI, RPM_TO_RAD
from rotorsim.utils.maths import clamp


RESISTANCE_TEMP_COEFFICIENT = 0.004  # 1/°C
RESISTANCE_REFERENCE_TEMP = 20.0     # °C
KELVIN_OFFSET = 273.15

MAX_EFFICIENCY = 0.95

# Loss coefficients
HYSTERESIS_COEFFICIENT = 0.01
EDDY_COEFFICIENT = 1.0e-4
FRICTION_COEFFICIENT = 5.0e-4
WINDAGE_COEFFICIENT = 2.0e-8
BEARING_COEFFICIENT = 1.0e-4


@dataclass(frozen=True)
class MotorParameters:
    kv_rating: float = 1000.0          # RPM/V
    resistance: float = 0.1            # Ω
    inductance: float = 1.0e-4         # H
    inertia: float = 1.0e-4            # kg⋅m²
    thermal_resistance: float = 10.0   # K/W
    thermal_capacity: float = 100.0    # J/K
    voltage: float = 11.1              # V
    max_current: float = 30.0          # A


@dataclass
class MotorState:
    current_torque: float = 0.0        # N⋅m
    power_consumption: float = 0.0     # W, electrical input
    winding_temperature: float = 288.15  # K
    efficiency: float = 0.0
    back_emf: float = 0.0              # V
    current: float = 0.0               # A
    copper_losses: float = 0.0         # W
    iron_losses: float = 0.0           # W
    mechanical_losses: float = 0.0     # W
    net_torque: float = 0.0            # N⋅m, motor minus load


def back_emf(rpm: float, kv_rating: float) -> float:
    """Back-EMF voltage at a shaft speed."""
    omega = rpm * PI / 30.0
    return omega / (kv_rating * RPM_TO_RAD)


def torque_constant(kv_rating: float) -> float:
    """Kt in N⋅m/A for a motor of the given Kv."""
    return 60.0 / (2.0 * PI * kv_rating)


def adjusted_resistance(resistance: float, winding_temperature: float) -> float:
    """Winding resistance corrected to the winding temperature (K)."""
    celsius = winding_temperature - KELVIN_OFFSET
    return resistance * (1.0 + RESISTANCE_TEMP_COEFFICIENT * (celsius - RESISTANCE_REFERENCE_TEMP))


def effective_thermal_resistance(thermal_resistance: float, rpm: float) -> float:
    """Thermal resistance reduced by forced cooling at speed."""
    return thermal_resistance / (1.0 + 0.5 * (abs(rpm) / 10000.0) ** 0.7)


def calculate_motor_state(params: MotorParameters,
                          rpm: float,
                          load_torque: float,
                          ambient_temperature: float,
                          delta_time: float,
                          previous: Optional[MotorState] = None) -> MotorState:
    """
    Advance the motor by one tick.

    Args:
        params: Static motor parameters
        rpm: Shaft speed (RPM)
        load_torque: Aerodynamic load on the shaft (N⋅m)
        ambient_temperature: Ambient air temperature (K)
        delta_time: Tick length (s)
        previous: Motor state from the previous tick, carries the winding
            temperature. The winding starts at ambient.

    Returns:
        New MotorState. A stopped motor only cools toward ambient.
    """
    winding_temperature = previous.winding_temperature if previous else ambient_temperature
    r_thermal = effective_thermal_resistance(params.thermal_resistance, rpm)

    def thermal_step(heat: float) -> float:
        rise = (heat * r_thermal - (winding_temperature - ambient_temperature)) / params.thermal_capacity
        return winding_temperature + rise * delta_time

    if rpm <= 0.0 or params.kv_rating <= 0.0:
        return MotorState(winding_temperature=thermal_step(0.0))

    emf = back_emf(rpm, params.kv_rating)
    r_adj = adjusted_resistance(params.resistance, winding_temperature)
    current = clamp((params.voltage - emf) / r_adj, -params.max_current, params.max_current)

    # Efficiency falls off at high speed under high load
    speed_factor = emf / params.voltage if params.voltage > 0.0 else 0.0
    load_factor = abs(current) / params.max_current if params.max_current > 0.0 else 0.0
    efficiency_factor = MAX_EFFICIENCY * (1.0 - 0.2 * speed_factor * load_factor)

    torque = current * torque_constant(params.kv_rating) * efficiency_factor

    # Losses
    copper = current ** 2 * r_adj
    frequency = rpm / 60.0
    iron = HYSTERESIS_COEFFICIENT * emf ** 2 + EDDY_COEFFICIENT * emf ** 2 * frequency
    mechanical = (FRICTION_COEFFICIENT * abs(rpm) +
                  WINDAGE_COEFFICIENT * rpm ** 2 +
                  BEARING_COEFFICIENT * abs(torque * rpm))

    input_power = params.voltage * current
    output_power = torque * rpm * RPM_TO_RAD
    efficiency = clamp(output_power / input_power, 0.0, MAX_EFFICIENCY) if input_power > 0.0 else 0.0

    return MotorState(
        current_torque=float(torque),
        power_consumption=float(input_power),
        winding_temperature=float(thermal_step(copper + iron + mechanical)),
        efficiency=float(efficiency),
        back_emf=float(emf),
        current=float(current),
        copper_losses=float(copper),
        iron_losses=float(iron),
        mechanical_losses=float(mechanical),
        net_torque=float(torque - load_torque),
    )
