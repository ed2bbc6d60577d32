"""
Blade Element Momentum (BEM) thrust and torque solver.

Each blade is discretized into radial elements from root to tip. Element
loads are computed from the local velocity triangle and summed over all
blades. Two aerodynamic variants are provided:

- DETAILED: tapered and twisted blade, momentum-theory inflow estimated from
  the previous thrust, sine lift curve with post-stall degradation, Reynolds
  corrections and Prandtl tip loss.
- BASIC: single pass, constant chord, linear washout, 2π lift slope clipped to
  |Cl| <= 1.5, no tip loss or stall model.
"""

import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from rotorsim.physics.atmosphere import AtmosphericConditions
from rotorsim.physics.constants import PI, RPM_TO_RAD


class AeroModel(Enum):
    """Blade aerodynamics variant used by the solver."""
    BASIC = "basic"
    DETAILED = "detailed"

    @classmethod
    def from_value(cls, value: Union[str, "AeroModel"]) -> "AeroModel":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown aero model '{value}', expected one of "
                f"{[m.value for m in cls]}") from None


@dataclass
class BEMResult:
    """Integrated rotor loads for one evaluation."""
    thrust: float               # N, along the rotor normal
    torque: float               # N⋅m, aerodynamic shaft torque
    thrust_coefficient: float   # T / (ρ A (ΩR)²)
    induced_velocity: float     # m/s, momentum-theory estimate used for inflow
    mean_angle_of_attack: float  # rad, averaged over elements

    @classmethod
    def zero(cls) -> "BEMResult":
        return cls(0.0, 0.0, 0.0, 0.0, 0.0)


class BEMSolver:
    """
    Blade-element thrust/torque integrator.

    The detailed model follows the usual element formulation:
        φ = atan2(U_P, U_T),  α = θ(r) − φ
        dL = ½ρV²c⋅Cl⋅F⋅dr,   dD = ½ρV²c⋅Cd⋅F⋅dr
        dT = dL cos φ − dD sin φ,   dQ = (dL sin φ + dD cos φ)⋅r
    with Prandtl tip loss F = (2/π)⋅acos(exp(−B/2⋅(R−r)/(r⋅sin φ))).
    """

    # Detailed blade geometry (fractions of radius)
    ROOT_CHORD_RATIO = 0.15
    TIP_CHORD_RATIO = 0.08
    ROOT_TWIST = np.radians(10.0)

    # Airfoil model
    LIFT_SLOPE = 6.2
    STALL_ANGLE = np.radians(12.0)
    BASE_DRAG = 0.015
    DRAG_PER_RADIAN = 0.015
    REFERENCE_REYNOLDS = 1.0e5

    # Basic model
    BASIC_CHORD_RATIO = 0.1
    BASIC_LIFT_SLOPE = 2.0 * PI
    BASIC_MAX_CL = 1.5

    def __init__(self,
                 model: Union[str, AeroModel] = AeroModel.DETAILED,
                 num_elements: int = 10):
        """
        Initialize solver.

        Args:
            model: Aerodynamic variant, AeroModel or its string value
            num_elements: Number of radial elements per blade
        """
        if num_elements < 1:
            raise ValueError("num_elements must be at least 1")
        self.model = AeroModel.from_value(model)
        self.num_elements = num_elements

    def solve(self,
              rpm: float,
              blade_radius: float,
              blade_count: int,
              blade_pitch: float,
              conditions: AtmosphericConditions,
              axial_velocity: float = 0.0,
              forward_speed: float = 0.0,
              current_thrust: float = 0.0,
              disc_area: Optional[float] = None) -> BEMResult:
        """
        Integrate thrust and torque over the rotor.

        Args:
            rpm: Rotor speed in RPM
            blade_radius: Blade radius in meters
            blade_count: Number of blades
            blade_pitch: Collective pitch at the tip in radians
            conditions: Atmospheric conditions at the rotor
            axial_velocity: Body velocity projected onto the rotor normal (m/s)
            forward_speed: Body speed magnitude (m/s), used by the basic model
            current_thrust: Thrust from the previous evaluation (N), used to
                estimate the induced inflow in the detailed model
            disc_area: Rotor disc area (m²), defaults to πR²

        Returns:
            BEMResult, all zeros for non-positive rotor speed or radius
        """
        omega = rpm * RPM_TO_RAD
        if omega <= 0.0 or blade_radius <= 0.0 or blade_count <= 0:
            return BEMResult.zero()

        area = disc_area if disc_area else PI * blade_radius ** 2

        if self.model is AeroModel.BASIC:
            thrust, torque, mean_aoa = self._solve_basic(
                omega, blade_radius, blade_count, blade_pitch, conditions, forward_speed)
        else:
            thrust, torque, mean_aoa = self._solve_detailed(
                omega, blade_radius, blade_count, blade_pitch, conditions,
                axial_velocity, current_thrust, area)

        tip_speed = omega * blade_radius
        thrust_coefficient = thrust / (conditions.density * area * tip_speed ** 2)
        induced_velocity = tip_speed * np.sqrt(max(thrust_coefficient, 0.0) / 2.0)

        return BEMResult(
            thrust=float(thrust),
            torque=float(torque),
            thrust_coefficient=float(thrust_coefficient),
            induced_velocity=float(induced_velocity),
            mean_angle_of_attack=float(mean_aoa),
        )

    def _element_radii(self, blade_radius: float):
        dr = blade_radius / self.num_elements
        r = (np.arange(self.num_elements) + 0.5) * dr
        return r, dr

    def _solve_detailed(self, omega, blade_radius, blade_count, blade_pitch,
                        conditions, axial_velocity, current_thrust, area):
        r, dr = self._element_radii(blade_radius)
        x = r / blade_radius

        # Linear taper and twist from root to tip
        chord = blade_radius * (self.ROOT_CHORD_RATIO +
                                (self.TIP_CHORD_RATIO - self.ROOT_CHORD_RATIO) * x)
        twist = blade_pitch + self.ROOT_TWIST * (1.0 - x)

        # Momentum-theory inflow from the previous thrust: λ = √(Ct/2)
        tip_speed = omega * blade_radius
        ct_previous = max(current_thrust, 0.0) / (conditions.density * area * tip_speed ** 2)
        induced = tip_speed * np.sqrt(ct_previous / 2.0)

        u_t = omega * r
        u_p = np.full_like(r, induced + axial_velocity)
        phi = np.arctan2(u_p, u_t)
        alpha = twist - phi
        velocity_sq = u_t ** 2 + u_p ** 2

        reynolds = (conditions.density * np.sqrt(velocity_sq) * chord /
                    conditions.viscosity)
        reynolds = np.maximum(reynolds, 1.0)

        cl = self.lift_coefficient(alpha, reynolds)
        cd = self.drag_coefficient(alpha, reynolds)

        loss = self.tip_loss(r, phi, blade_radius, blade_count)
        cl = cl * loss
        cd = cd * loss

        q_c = 0.5 * conditions.density * velocity_sq * chord * dr
        d_lift = q_c * cl
        d_drag = q_c * cd

        d_normal = d_lift * np.cos(phi) - d_drag * np.sin(phi)
        d_tangential = d_lift * np.sin(phi) + d_drag * np.cos(phi)

        thrust = np.sum(d_normal) * blade_count
        torque = np.sum(d_tangential * r) * blade_count
        return thrust, torque, np.mean(alpha)

    def _solve_basic(self, omega, blade_radius, blade_count, blade_pitch,
                     conditions, forward_speed):
        r, dr = self._element_radii(blade_radius)
        chord = self.BASIC_CHORD_RATIO * blade_radius
        local_pitch = blade_pitch * (1.0 - r / blade_radius)

        u_t = omega * r
        velocity_sq = u_t ** 2 + forward_speed ** 2
        phi = np.arctan2(forward_speed, u_t)

        aoa = local_pitch - phi
        cl = np.clip(self.BASIC_LIFT_SLOPE * aoa, -self.BASIC_MAX_CL, self.BASIC_MAX_CL)

        q_c = 0.5 * conditions.density * velocity_sq * chord * dr
        thrust = np.sum(q_c * cl) * blade_count
        torque = np.sum(q_c * (cl * np.sin(phi) + self.BASE_DRAG * np.cos(phi)) * r) * blade_count
        return thrust, torque, np.mean(aoa)

    def lift_coefficient(self, alpha: np.ndarray, reynolds: np.ndarray) -> np.ndarray:
        """
        Sectional lift coefficient.

        Cl = 6.2⋅sin(α) up to ±12°, beyond which lift degrades linearly to half
        the stall value at twice the stall angle. A low-Reynolds correction in
        [0.7, 1.0] scales the result.
        """
        alpha = np.asarray(alpha, dtype=float)
        abs_alpha = np.abs(alpha)
        cl_attached = self.LIFT_SLOPE * np.sin(alpha)

        cl_stall = self.LIFT_SLOPE * np.sin(self.STALL_ANGLE)
        overshoot = np.minimum((abs_alpha - self.STALL_ANGLE) / self.STALL_ANGLE, 1.0)
        cl_post = np.sign(alpha) * cl_stall * (1.0 - 0.5 * overshoot)

        cl = np.where(abs_alpha <= self.STALL_ANGLE, cl_attached, cl_post)
        return cl * self.reynolds_lift_factor(reynolds)

    def drag_coefficient(self, alpha: np.ndarray, reynolds: np.ndarray) -> np.ndarray:
        """Sectional drag: Cd = 0.015 + 0.015⋅|α| + skin-friction Reynolds term."""
        reynolds = np.maximum(np.asarray(reynolds, dtype=float), 1.0)
        skin_friction = 0.074 / reynolds ** 0.2
        return self.BASE_DRAG + self.DRAG_PER_RADIAN * np.abs(alpha) + skin_friction

    def reynolds_lift_factor(self, reynolds: np.ndarray) -> np.ndarray:
        reynolds = np.maximum(np.asarray(reynolds, dtype=float), 1.0)
        return np.clip((reynolds / self.REFERENCE_REYNOLDS) ** 0.1, 0.7, 1.0)

    @staticmethod
    def tip_loss(r: np.ndarray, phi: np.ndarray, blade_radius: float, blade_count: int) -> np.ndarray:
        """
        Prandtl tip-loss factor per element.

        Elements with (near) zero inflow angle get F = 1.
        """
        sin_phi = np.abs(np.sin(phi))
        loss = np.ones_like(r)
        active = sin_phi > 1e-6
        if np.any(active):
            f = (blade_count / 2.0) * (blade_radius - r[active]) / (r[active] * sin_phi[active])
            loss[active] = (2.0 / PI) * np.arccos(np.exp(-f))
        return loss
