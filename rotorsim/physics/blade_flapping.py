"""
Blade flapping dynamics.

Single-blade flapping about an offset hinge, driven by the aerodynamic moment
of the blade section and restrained by the hinge spring and aerodynamic
(Lock number) damping:

    β̈ = −ω_n²(β − β₀) − (γΩ/8)⋅β̇ + M_aero / (m⋅e²)

The equation is integrated with classic fourth-order Runge-Kutta over one
simulation tick. The blade azimuth is part of the integration state: it
continues from the previous tick and advances by Ω⋅dt across the stages.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Optional

from rotorsim.physics.constants import ISA, PI, UP_AXIS
from rotorsim.utils.maths import axis_rotation, normalize_vector


# RK4 step size is limited to this fraction of the fastest time constant
MAX_STEP_FRACTION = 0.5
MAX_SUBSTEPS = 2000

AOA_LIMIT = 0.3           # rad
LIFT_SLOPE = 2.0 * PI
CHORD_RATIO = 0.1         # chord / total radius
REFERENCE_STATION = 0.75  # fraction of total radius


@dataclass(frozen=True)
class BladeProperties:
    """Static blade parameters, fixed at rotor initialization."""
    mass: float               # kg, single blade
    hinge_offset: float       # m, shaft to flap hinge
    lock_number: float        # γ, aerodynamic to inertial force ratio
    spring_constant: float    # N⋅m/rad, flap hinge spring
    natural_frequency: float  # rad/s
    blade_grip: float         # m, hinge to tip

    @property
    def moment_of_inertia(self) -> float:
        """Flapping inertia of a uniform blade about its hinge."""
        return self.mass * self.blade_grip ** 2 / 3.0

    @property
    def total_radius(self) -> float:
        return self.hinge_offset + self.blade_grip

    @classmethod
    def from_rotor(cls,
                   rotor_mass: float,
                   blade_radius: float,
                   blade_count: int,
                   hinge_offset_ratio: float = 0.05,
                   lock_number: float = 5.0,
                   spring_constant: float = 1000.0,
                   blade_grip_ratio: float = 0.95) -> "BladeProperties":
        """
        Derive blade properties from rotor mass and geometry.

        Args:
            rotor_mass: Total rotor mass (kg), split evenly across blades
            blade_radius: Rotor radius (m)
            blade_count: Number of blades
            hinge_offset_ratio: Hinge offset as a fraction of radius
            lock_number: Blade Lock number
            spring_constant: Flap hinge spring stiffness (N⋅m/rad)
            blade_grip_ratio: Hinge-to-tip length as a fraction of radius

        Returns:
            BladeProperties with natural frequency √(K / I_β)
        """
        mass = rotor_mass / max(blade_count, 1)
        blade_grip = blade_grip_ratio * blade_radius
        inertia = mass * blade_grip ** 2 / 3.0
        natural_frequency = np.sqrt(spring_constant / inertia) if inertia > 0.0 else 0.0

        return cls(
            mass=mass,
            hinge_offset=hinge_offset_ratio * blade_radius,
            lock_number=lock_number,
            spring_constant=spring_constant,
            natural_frequency=float(natural_frequency),
            blade_grip=blade_grip,
        )


@dataclass
class BladeState:
    flapping_angle: float = 0.0   # β, rad
    flapping_rate: float = 0.0    # β̇, rad/s
    coning_angle: float = 0.0     # β₀, rad
    lead_lag_angle: float = 0.0   # ξ, rad
    tip_path_plane: np.ndarray = field(default_factory=lambda: UP_AXIS.copy())
    disk_loading: float = 0.0     # N/m²
    azimuth: float = 0.0          # ψ, rad, carried between ticks


def steady_coning_angle(props: BladeProperties, rotor_speed: float, collective_pitch: float) -> float:
    """Equilibrium of aerodynamic and centrifugal moments: atan2(γθ/6, mΩ²e)."""
    return float(np.arctan2(props.lock_number * collective_pitch / 6.0,
                            props.mass * rotor_speed ** 2 * props.hinge_offset))


def aerodynamic_moment(props: BladeProperties,
                       rotor_speed: float,
                       forward_velocity: float,
                       air_density: float,
                       collective_pitch: float,
                       cyclic_pitch: float,
                       azimuth: float,
                       beta: float,
                       beta_dot: float) -> float:
    """
    Aerodynamic flapping moment at one azimuth.

    Sectional lift at the 3/4-radius station, from the local dynamic pressure
    and a 2π lift slope, acting over the hinge-offset lever arm. The advancing
    blade sees Ω⋅r + V⋅sin ψ, and flapping motion reduces the angle of attack
    through the perpendicular velocity V⋅sin β + β̇⋅r.
    """
    radius = props.total_radius
    chord = CHORD_RATIO * radius
    station = REFERENCE_STATION * radius

    pitch = collective_pitch + cyclic_pitch * np.sin(azimuth)
    u_t = rotor_speed * station + forward_velocity * np.sin(azimuth)
    u_p = forward_velocity * np.sin(beta) + beta_dot * station

    alpha = np.clip(pitch - np.arctan2(u_p, u_t), -AOA_LIMIT, AOA_LIMIT)
    dynamic_pressure = 0.5 * air_density * (u_t * u_t + u_p * u_p)
    sectional_lift = dynamic_pressure * LIFT_SLOPE * alpha * chord

    return float(sectional_lift * props.hinge_offset ** 2)


def calculate_blade_state(props: BladeProperties,
                          rotor_speed: float,
                          forward_velocity: float,
                          air_density: float,
                          collective_pitch: float,
                          cyclic_pitch: float,
                          shaft_tilt: float,
                          delta_time: float,
                          previous: Optional[BladeState] = None) -> BladeState:
    """
    Advance the flapping state by one tick.

    Args:
        props: Static blade properties
        rotor_speed: Rotor angular speed Ω (rad/s)
        forward_velocity: Airspeed in the rotor plane (m/s)
        air_density: Air density (kg/m³)
        collective_pitch: Collective pitch (rad)
        cyclic_pitch: Cyclic pitch amplitude (rad)
        shaft_tilt: Shaft tilt about the x axis (rad)
        delta_time: Tick length (s)
        previous: Flapping state from the previous tick

    Returns:
        New BladeState. A stopped rotor returns the neutral state.
    """
    inertia_term = props.mass * props.hinge_offset ** 2
    if rotor_speed <= 0.0 or inertia_term <= 0.0:
        return BladeState()

    previous = previous or BladeState()
    beta = previous.flapping_angle
    beta_dot = previous.flapping_rate

    beta_0 = steady_coning_angle(props, rotor_speed, collective_pitch)
    omega_n_sq = props.natural_frequency ** 2
    damping = props.lock_number * rotor_speed / 8.0

    def derivatives(azimuth: float, b: float, bd: float):
        moment = aerodynamic_moment(props, rotor_speed, forward_velocity, air_density,
                                    collective_pitch, cyclic_pitch, azimuth, b, bd)
        b_ddot = -omega_n_sq * (b - beta_0) - damping * bd + moment / inertia_term
        return bd, b_ddot

    # Sub-step so every RK4 step resolves the fastest flapping time constant
    fastest_rate = props.natural_frequency + damping
    max_step = MAX_STEP_FRACTION / fastest_rate if fastest_rate > 0.0 else delta_time
    substeps = int(min(max(np.ceil(delta_time / max_step), 1), MAX_SUBSTEPS)) if delta_time > 0.0 else 0
    h = delta_time / substeps if substeps else 0.0

    azimuth = previous.azimuth
    for _ in range(substeps):
        half_turn = rotor_speed * h / 2.0

        k1_b, k1_bd = derivatives(azimuth, beta, beta_dot)
        k2_b, k2_bd = derivatives(azimuth + half_turn,
                                  beta + h * k1_b / 2.0, beta_dot + h * k1_bd / 2.0)
        k3_b, k3_bd = derivatives(azimuth + half_turn,
                                  beta + h * k2_b / 2.0, beta_dot + h * k2_bd / 2.0)
        k4_b, k4_bd = derivatives(azimuth + 2.0 * half_turn,
                                  beta + h * k3_b, beta_dot + h * k3_bd)

        beta += (h / 6.0) * (k1_b + 2.0 * k2_b + 2.0 * k3_b + k4_b)
        beta_dot += (h / 6.0) * (k1_bd + 2.0 * k2_bd + 2.0 * k3_bd + k4_bd)
        azimuth = (azimuth + rotor_speed * h) % (2.0 * PI)

    # Coriolis-driven lead-lag
    lead_lag = -2.0 * beta * beta_dot / rotor_speed if abs(rotor_speed) > 1.0 else 0.0

    # Tip-path plane: shaft tilt about x, then flapping about y, applied to up
    rotation = axis_rotation([1.0, 0.0, 0.0], shaft_tilt) * axis_rotation([0.0, 1.0, 0.0], beta)
    tip_path_plane = normalize_vector(rotation.rotate(UP_AXIS))

    radius = props.total_radius
    disk_loading = props.mass * ISA.GRAVITY / (PI * radius ** 2)

    return BladeState(
        flapping_angle=float(beta),
        flapping_rate=float(beta_dot),
        coning_angle=beta_0,
        lead_lag_angle=float(lead_lag),
        tip_path_plane=tip_path_plane,
        disk_loading=float(disk_loading),
        azimuth=float(azimuth),
    )
