"""
Rotor physics orchestration.

Runs every rotor sub-model once per tick and pushes the resulting forces and
torques into the rigid bodies the rotors are attached to. A tick has two
phases:

1. For every active rotor: read pose and velocity and evaluate the
   atmosphere. Only once every rotor has been sampled: solve blade-element
   thrust and apply ground effect. An atmosphere domain error therefore
   leaves every rotor untouched.
2. For every active rotor: power, blade flapping, tip vortex, motor, optional
   dynamic inflow, wall effect, turbulence, prop wash from all other rotors
   (using their phase-1 thrust), then the rotor's own thrust and reaction
   torque.

Computing all thrusts up front gives every rotor the same view of its
neighbours regardless of iteration order.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

from rotorsim.config import ConfigLoader, get_config
from rotorsim.physics.atmosphere import AtmosphericConditions, calculate_atmospheric_conditions
from rotorsim.physics.bem import BEMSolver
from rotorsim.physics.blade_flapping import BladeProperties, calculate_blade_state
from rotorsim.physics.constants import RPM_TO_RAD
from rotorsim.physics.dynamic_inflow import calculate_inflow
from rotorsim.physics.ground_effect import GroundEffectParams, calculate_ground_effect
from rotorsim.physics.motor import MotorParameters, calculate_motor_state
from rotorsim.physics.prop_wash import PropWashField, calculate_prop_wash, calculate_prop_wash_influence
from rotorsim.physics.tip_vortex import VortexParameters, calculate_tip_vortex
from rotorsim.physics.turbulence import TurbulenceModel
from rotorsim.physics.wall_effect import WallParameters, WallState, calculate_wall_effect

if TYPE_CHECKING:
    from rotorsim.logging.telemetry import RotorTelemetryLogger
    from rotorsim.rotor import RotorInstance

logger = logging.getLogger(__name__)

# Blade chord used by the vortex model, fraction of radius
VORTEX_CHORD_RATIO = 0.1

# Coupling gains from wash field to body loads
WASH_FORCE_GAIN = 0.5
WASH_TORQUE_GAIN = 0.3


def initialize_blade_properties(rotor_mass: float,
                                blade_radius: float,
                                blade_count: int,
                                config: Optional[ConfigLoader] = None) -> BladeProperties:
    """Derive blade properties from rotor geometry and the `blade` config section."""
    config = config or get_config()
    return BladeProperties.from_rotor(
        rotor_mass=rotor_mass,
        blade_radius=blade_radius,
        blade_count=blade_count,
        hinge_offset_ratio=float(config.get("blade.hinge_offset_ratio", 0.05)),
        lock_number=float(config.get("blade.lock_number", 5.0)),
        spring_constant=float(config.get("blade.spring_constant", 1000.0)),
        blade_grip_ratio=float(config.get("blade.blade_grip_ratio", 0.95)),
    )


def initialize_motor_parameters(config: Optional[ConfigLoader] = None) -> MotorParameters:
    """Motor parameters from the `motor` config section."""
    config = config or get_config()
    defaults = MotorParameters()
    values = {
        name: float(config.get(f"motor.{name}", getattr(defaults, name)))
        for name in MotorParameters.__dataclass_fields__
    }
    return MotorParameters(**values)


@dataclass
class RotorFrame:
    """Kinematics and air data of one rotor, sampled at the start of a tick."""
    position: np.ndarray
    normal: np.ndarray
    velocity: np.ndarray
    conditions: AtmosphericConditions

    @property
    def altitude(self) -> float:
        return float(self.position[2])

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))

    @property
    def axial_velocity(self) -> float:
        return float(np.dot(self.velocity, self.normal))

    @property
    def edgewise_speed(self) -> float:
        """Speed in the rotor plane."""
        in_plane = self.velocity - self.axial_velocity * self.normal
        return float(np.linalg.norm(in_plane))


class RotorPhysicsOrchestrator:
    """
    Per-tick composition of all rotor models.

    Args:
        config: Configuration, defaults to the global config
        telemetry: Optional recorder receiving one snapshot per rotor per tick
    """

    def __init__(self,
                 config: Optional[ConfigLoader] = None,
                 telemetry: Optional["RotorTelemetryLogger"] = None):
        self.config = config or get_config()
        self.telemetry = telemetry

        self.solver = BEMSolver(
            model=self.config.get("simulation.aero_model", "detailed"),
            num_elements=int(self.config.get("simulation.bem_elements", 10)),
        )
        self.turbulence_model = TurbulenceModel()

        self.enable_wall_effect = bool(self.config.get("simulation.enable_wall_effect", True))
        self.enable_turbulence = bool(self.config.get("simulation.enable_turbulence", True))
        self.enable_prop_wash = bool(self.config.get("simulation.enable_prop_wash", True))
        self.enable_dynamic_inflow = bool(self.config.get("simulation.enable_dynamic_inflow", False))

        self.linear_damping = float(self.config.get("damping.linear", 0.1))
        self.angular_damping = float(self.config.get("damping.angular", 0.3))

        self.wall_detection_factor = float(self.config.get("wall.detection_radius_factor", 2.0))
        self.wall_ray_directions = [
            np.asarray(d, dtype=float) for d in self.config.get("wall.ray_directions", [])
        ]

        self.profile_drag_coefficient = float(self.config.get("power.profile_drag_coefficient", 0.012))
        self.parasitic_area = float(self.config.get("power.parasitic_area", 0.002))

        self.simulation_time = 0.0

    # Sampling

    def sample_frame(self, rotor: "RotorInstance") -> RotorFrame:
        """
        Read rotor pose and velocity and evaluate the atmosphere there.

        Raises:
            AtmosphereDomainError: If the rotor hub is below sea level or above
                the atmosphere model ceiling
        """
        position, normal = rotor.world_pose()
        velocity = np.asarray(rotor.body.get_linear_velocity(), dtype=float)
        conditions = calculate_atmospheric_conditions(float(position[2]), float(np.linalg.norm(velocity)))
        return RotorFrame(position=position, normal=normal, velocity=velocity, conditions=conditions)

    # Sub-model updates

    def calculate_thrust(self, rotor: "RotorInstance", frame: RotorFrame) -> float:
        """
        Blade-element thrust with ground effect applied.

        Caches thrust, shaft torque, thrust coefficient, induced velocity and
        the ground effect state on the rotor.

        Returns:
            Thrust along the rotor normal (N)
        """
        state = rotor.state
        result = self.solver.solve(
            rpm=rotor.rpm,
            blade_radius=rotor.radius,
            blade_count=rotor.info.blade_count,
            blade_pitch=rotor.info.blade_pitch,
            conditions=frame.conditions,
            axial_velocity=frame.axial_velocity,
            forward_speed=frame.speed,
            current_thrust=state.current_thrust,
            disc_area=rotor.area,
        )

        ground = calculate_ground_effect(
            GroundEffectParams(
                rotor_radius=rotor.radius,
                thrust_coefficient=result.thrust_coefficient,
                collective_pitch=rotor.info.blade_pitch,
                velocity=frame.velocity,
                disk_loading=result.thrust / rotor.area,
            ),
            frame.altitude,
        )

        state.ground_effect = ground
        state.current_thrust = result.thrust * ground.thrust_multiplier
        state.aero_torque = result.torque
        state.thrust_coefficient = result.thrust_coefficient
        state.induced_velocity = result.induced_velocity
        return state.current_thrust

    def calculate_power(self, rotor: "RotorInstance", thrust: float, frame: RotorFrame) -> float:
        """
        Aerodynamic power: induced + profile + parasitic.

        P = T⋅√(T/2ρA) + ⅛⋅ρ⋅A⋅Cd0⋅(ΩR)³ + ½⋅ρ⋅V³⋅f
        """
        omega = rotor.rpm * RPM_TO_RAD
        if omega <= 0.0:
            return 0.0

        rho = frame.conditions.density
        induced_velocity = np.sqrt(max(thrust, 0.0) / (2.0 * rho * rotor.area))

        induced_power = thrust * induced_velocity
        profile_power = (1.0 / 8.0) * rho * rotor.area * self.profile_drag_coefficient * (omega * rotor.radius) ** 3
        parasitic_power = 0.5 * rho * frame.speed ** 3 * self.parasitic_area

        return float(induced_power + profile_power + parasitic_power)

    def update_blade_state(self, rotor: "RotorInstance", frame: RotorFrame, dt: float) -> None:
        rotor.state.blade = calculate_blade_state(
            rotor.blade_properties,
            rotor.rpm * RPM_TO_RAD,
            frame.edgewise_speed,
            frame.conditions.density,
            rotor.info.blade_pitch,
            0.0,  # cyclic pitch
            0.0,  # shaft tilt
            dt,
            previous=rotor.state.blade,
        )

    def update_vortex_state(self, rotor: "RotorInstance", frame: RotorFrame, dt: float) -> None:
        omega = rotor.rpm * RPM_TO_RAD
        params = VortexParameters(
            blade_tip_speed=omega * rotor.radius,
            blade_chord=VORTEX_CHORD_RATIO * rotor.radius,
            effective_aoa=rotor.info.blade_pitch,
            blade_span=rotor.radius,
            blade_count=rotor.info.blade_count,
        )
        # Evaluated one radius below the hub along the rotor axis
        rotor.state.vortex = calculate_tip_vortex(
            params,
            frame.conditions.density,
            frame.conditions.viscosity,
            omega,
            frame.speed,
            frame.position,
            frame.position - frame.normal * rotor.radius,
            dt,
            previous=rotor.state.vortex,
        )

    def update_motor_state(self, rotor: "RotorInstance", frame: RotorFrame, dt: float) -> None:
        omega = rotor.rpm * RPM_TO_RAD
        load_torque = rotor.state.power_consumption / omega if omega > 0.0 else 0.0
        rotor.state.motor = calculate_motor_state(
            rotor.motor_parameters,
            rotor.rpm,
            load_torque,
            frame.conditions.temperature,
            dt,
            previous=rotor.state.motor,
        )

    def update_inflow_state(self, rotor: "RotorInstance", frame: RotorFrame, dt: float) -> None:
        state = rotor.state
        state.inflow = calculate_inflow(
            thrust_coefficient=state.thrust_coefficient,
            disk_loading=state.current_thrust / rotor.area,
            forward_velocity=frame.edgewise_speed,
            rotor_radius=rotor.radius,
            rotor_speed=rotor.rpm * RPM_TO_RAD,
            air_density=frame.conditions.density,
            rotor_normal=frame.normal,
            collective_pitch=rotor.info.blade_pitch,
            delta_time=dt,
            previous=state.inflow,
        )

    # Loads

    def find_wall(self, rotor: "RotorInstance", frame: RotorFrame):
        """
        Ray cast for the closest wall within the detection radius.

        Returns:
            (normal, distance) of the closest hit, or None
        """
        if rotor.world is None:
            return None

        detection_radius = self.wall_detection_factor * rotor.radius
        closest = None
        for direction in self.wall_ray_directions:
            hit = rotor.world.ray_test(frame.position, frame.position + direction * detection_radius)
            if not hit.has_hit:
                continue
            distance = hit.hit_fraction * detection_radius
            if closest is None or distance < closest[1]:
                closest = (np.asarray(hit.hit_normal, dtype=float), distance)
        return closest

    def apply_wall_effects(self, rotor: "RotorInstance", frame: RotorFrame) -> None:
        wall = self.find_wall(rotor, frame)
        if wall is None:
            rotor.state.wall = WallState.none()
            return

        normal, distance = wall
        state = rotor.state
        state.wall = calculate_wall_effect(
            WallParameters(
                wall_normal=normal,
                wall_distance=distance,
                rotor_radius=rotor.radius,
                disk_loading=state.blade.disk_loading,
                thrust=state.current_thrust,
                thrust_coefficient=state.thrust_coefficient,
            ),
            frame.position,
            frame.velocity,
            rotor.info.blade_pitch,
        )
        logger.debug("Rotor %d wall hit at %.3f m, force %.3f N", rotor.rotor_id, distance,
                     np.linalg.norm(state.wall.induced_force))

        rotor.body.apply_central_force(state.wall.induced_force)
        rotor.body.apply_torque(state.wall.induced_moment)

    def apply_turbulence(self, rotor: "RotorInstance", frame: RotorFrame) -> None:
        turbulence = self.turbulence_model.calculate(
            frame.altitude, frame.speed, frame.conditions, self.simulation_time)
        rotor.state.turbulence = turbulence

        rotor.body.apply_central_force(turbulence.velocity * rotor.info.mass)
        rotor.body.apply_torque(turbulence.angular_velocity * rotor.info.mass * rotor.radius)

    def build_wash_field(self, rotor: "RotorInstance", frame: RotorFrame) -> PropWashField:
        return calculate_prop_wash(
            frame.normal,
            rotor.rpm,
            rotor.area,
            rotor.radius,
            rotor.info.blade_count,
            frame.conditions,
            rotor.state.current_thrust,
        )

    def apply_prop_wash(self,
                        rotor: "RotorInstance",
                        frame: RotorFrame,
                        sources: List[tuple]) -> None:
        """
        Accumulate wash from other rotors.

        Args:
            rotor: Rotor receiving the wash
            frame: Its sampled frame
            sources: (source rotor, source frame, wash field) tuples
        """
        total_velocity = np.zeros(3)
        total_vorticity = np.zeros(3)
        for source, source_frame, wash in sources:
            if source is rotor:
                continue
            influence = calculate_prop_wash_influence(wash, source_frame.position, frame.position, source.radius)
            total_velocity += wash.velocity * influence
            total_vorticity += wash.vorticity * influence

        state = rotor.state
        state.wash_force = total_velocity * rotor.info.mass * WASH_FORCE_GAIN
        state.wash_torque = total_vorticity * rotor.info.mass * rotor.radius * WASH_TORQUE_GAIN

        rotor.body.apply_central_force(state.wash_force)
        rotor.body.apply_torque(state.wash_torque)

    def apply_rotor_loads(self, rotor: "RotorInstance", frame: RotorFrame) -> None:
        """Own thrust along the normal, shaft reaction torque and body damping."""
        state = rotor.state
        rotor.body.apply_central_force(frame.normal * state.current_thrust)
        rotor.body.apply_torque(-rotor.info.spin_direction * frame.normal * state.aero_torque)
        rotor.body.set_damping(self.linear_damping, self.angular_damping)

    # Tick

    def step(self, rotors: Iterable["RotorInstance"], dt: float) -> None:
        """
        Advance all rotors by one tick.

        Rotors without a rigid body are skipped.

        Args:
            rotors: Rotor instances taking part in this tick
            dt: Tick length (s)

        Raises:
            AtmosphereDomainError: If any rotor hub leaves the atmosphere domain
        """
        active = [rotor for rotor in rotors if rotor.is_active]

        # Phase 1: sample every frame before any thrust changes, then thrust
        frames: Dict[int, RotorFrame] = {rotor.rotor_id: self.sample_frame(rotor) for rotor in active}
        for rotor in active:
            self.calculate_thrust(rotor, frames[rotor.rotor_id])

        sources = []
        if self.enable_prop_wash:
            sources = [(rotor, frames[rotor.rotor_id], self.build_wash_field(rotor, frames[rotor.rotor_id]))
                       for rotor in active]

        # Phase 2: state updates and loads
        for rotor in active:
            frame = frames[rotor.rotor_id]
            state = rotor.state

            state.atmosphere = frame.conditions
            state.power_consumption = self.calculate_power(rotor, state.current_thrust, frame)

            self.update_blade_state(rotor, frame, dt)
            self.update_vortex_state(rotor, frame, dt)
            self.update_motor_state(rotor, frame, dt)
            if self.enable_dynamic_inflow:
                self.update_inflow_state(rotor, frame, dt)

            if self.enable_wall_effect:
                self.apply_wall_effects(rotor, frame)
            if self.enable_turbulence:
                self.apply_turbulence(rotor, frame)
            if self.enable_prop_wash:
                self.apply_prop_wash(rotor, frame, sources)

            self.apply_rotor_loads(rotor, frame)

            logger.debug("Rotor %d: rpm=%.0f thrust=%.3f N power=%.1f W mult=%.3f",
                         rotor.rotor_id, rotor.rpm, state.current_thrust,
                         state.power_consumption, state.ground_effect.thrust_multiplier)

            if self.telemetry is not None:
                self.telemetry.record(self.simulation_time, rotor)

        self.simulation_time += dt

    def reset(self) -> None:
        self.simulation_time = 0.0
