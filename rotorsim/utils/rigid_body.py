"""
Reference rigid body and collision world.

A small 6-DOF rigid body with quaternion attitude and a ray-cast world made of
infinite planes. Both implement the engine capabilities declared in
rotorsim.interfaces, so rotor physics can run stand-alone or in tests without
an external physics engine.
"""

import numpy as np
from dataclasses import dataclass
from typing import List, Optional, Tuple
from pyquaternion import Quaternion

from rotorsim.interfaces import RayHit
from rotorsim.utils.maths import normalize_vector


class RigidBody:
    """
    6-DOF rigid body with quaternion attitude.

    Forces and torques are accumulated in world frame and consumed by
    update(). Linear and angular damping follow the usual engine convention:
    velocity is scaled by (1 − damping)^dt every step. Angular velocity is
    kept in world frame.
    """

    # Numerical stability limits
    MAX_LINEAR_VELOCITY = 200.0    # m/s
    MAX_ANGULAR_VELOCITY = 100.0   # rad/s
    MAX_FORCE = 1.0e5              # N
    MAX_TORQUE = 1.0e4             # N⋅m

    def __init__(self,
                 mass: float = 1.0,
                 inertia: Optional[np.ndarray] = None,
                 position: Optional[np.ndarray] = None,
                 velocity: Optional[np.ndarray] = None,
                 quaternion: Optional[Quaternion] = None,
                 angular_velocity: Optional[np.ndarray] = None,
                 gravity: Optional[np.ndarray] = None):
        """
        Initialize rigid body.

        Args:
            mass: Mass of the body (kg)
            inertia: 3x3 body-frame inertia matrix (kg⋅m²)
            position: Initial position [x, y, z] (m)
            velocity: Initial velocity [vx, vy, vz] (m/s)
            quaternion: Initial attitude
            angular_velocity: Initial world-frame angular velocity (rad/s)
            gravity: Gravity vector (m/s²), defaults to [0, 0, -9.81]
        """
        if mass <= 0.0:
            raise ValueError("mass must be positive")
        self.mass = mass

        self.inertia = inertia.copy() if inertia is not None else np.diag([0.01, 0.01, 0.02])
        self.inertia_inv = np.linalg.inv(self.inertia)

        self.position = position.copy() if position is not None else np.zeros(3)
        self.velocity = velocity.copy() if velocity is not None else np.zeros(3)
        self.quaternion = quaternion if quaternion is not None else Quaternion(1, 0, 0, 0)
        self.angular_velocity = angular_velocity.copy() if angular_velocity is not None else np.zeros(3)
        self.gravity = np.asarray(gravity, dtype=float).copy() if gravity is not None else np.array([0.0, 0.0, -9.81])

        self.linear_damping = 0.0
        self.angular_damping = 0.0

        self.applied_force = np.zeros(3)
        self.applied_torque = np.zeros(3)

    # Engine capabilities

    def get_world_transform(self) -> Tuple[np.ndarray, Quaternion]:
        return self.position.copy(), Quaternion(self.quaternion)

    def get_linear_velocity(self) -> np.ndarray:
        return self.velocity.copy()

    def get_angular_velocity(self) -> np.ndarray:
        return self.angular_velocity.copy()

    def apply_central_force(self, force: np.ndarray) -> None:
        self.applied_force += np.asarray(force, dtype=float)

    def apply_torque(self, torque: np.ndarray) -> None:
        self.applied_torque += np.asarray(torque, dtype=float)

    def set_damping(self, linear: float, angular: float) -> None:
        self.linear_damping = linear
        self.angular_damping = angular

    # Integration

    def update(self, dt: float) -> None:
        """
        Advance the body by one step with semi-implicit Euler.

        Args:
            dt: Time step (s)
        """
        force = self._sanitize_vector(self.applied_force, self.MAX_FORCE)
        torque = self._sanitize_vector(self.applied_torque, self.MAX_TORQUE)

        # Linear motion
        acceleration = force / self.mass + self.gravity
        self.velocity += acceleration * dt
        self.velocity *= (1.0 - self.linear_damping) ** dt
        self.velocity = self._sanitize_vector(self.velocity, self.MAX_LINEAR_VELOCITY)
        self.position += self.velocity * dt

        # Angular motion, Euler's equations in body frame
        omega_body = self.quaternion.inverse.rotate(self.angular_velocity)
        torque_body = self.quaternion.inverse.rotate(torque)
        gyroscopic = np.cross(omega_body, self.inertia @ omega_body)
        angular_acceleration = self.inertia_inv @ (torque_body - gyroscopic)
        omega_body = omega_body + angular_acceleration * dt

        self.angular_velocity = np.asarray(self.quaternion.rotate(omega_body))
        self.angular_velocity *= (1.0 - self.angular_damping) ** dt
        self.angular_velocity = self._sanitize_vector(self.angular_velocity, self.MAX_ANGULAR_VELOCITY)

        self._update_quaternion(dt)

        self.applied_force = np.zeros(3)
        self.applied_torque = np.zeros(3)

    def _update_quaternion(self, dt: float) -> None:
        """Integrate attitude: q̇ = 0.5 * ω * q with world-frame ω."""
        if np.linalg.norm(self.angular_velocity) > 1e-12:
            omega_quaternion = Quaternion(0, *self.angular_velocity)
            self.quaternion += 0.5 * omega_quaternion * self.quaternion * dt
            self.quaternion = self.quaternion.normalised

    def _sanitize_vector(self, vector: np.ndarray, max_magnitude: float) -> np.ndarray:
        """Replace non-finite values and clamp the magnitude."""
        vector = np.nan_to_num(vector, nan=0.0, posinf=max_magnitude, neginf=-max_magnitude)
        magnitude = np.linalg.norm(vector)
        if magnitude > max_magnitude:
            vector = vector * (max_magnitude / magnitude)
        return vector


@dataclass
class Plane:
    """Infinite plane through `point` with outward `normal`."""
    point: np.ndarray
    normal: np.ndarray


class PlaneCollisionWorld:
    """
    Collision world of infinite planes.

    Ray casts report the closest plane crossed between origin and target.
    """

    def __init__(self, planes: Optional[List[Plane]] = None):
        self.planes: List[Plane] = []
        for plane in planes or []:
            self.add_plane(plane.point, plane.normal)

    def add_plane(self, point: np.ndarray, normal: np.ndarray) -> Plane:
        plane = Plane(np.asarray(point, dtype=float), normalize_vector(normal))
        self.planes.append(plane)
        return plane

    def add_wall(self, x: Optional[float] = None, y: Optional[float] = None) -> Plane:
        """
        Add a vertical wall at a constant x or y, facing the origin.

        Args:
            x: Wall position along x (m)
            y: Wall position along y (m)
        """
        if (x is None) == (y is None):
            raise ValueError("Specify exactly one of x or y")
        if x is not None:
            return self.add_plane([x, 0.0, 0.0], [-np.sign(x) or -1.0, 0.0, 0.0])
        return self.add_plane([0.0, y, 0.0], [0.0, -np.sign(y) or -1.0, 0.0])

    def ray_test(self, origin: np.ndarray, target: np.ndarray) -> RayHit:
        origin = np.asarray(origin, dtype=float)
        segment = np.asarray(target, dtype=float) - origin

        closest = RayHit.miss()
        for plane in self.planes:
            denominator = float(np.dot(plane.normal, segment))
            if abs(denominator) < 1e-12:
                continue
            fraction = float(np.dot(plane.normal, plane.point - origin)) / denominator
            if 0.0 <= fraction <= 1.0 and fraction < closest.hit_fraction:
                closest = RayHit(has_hit=True, hit_normal=plane.normal.copy(), hit_fraction=fraction)
        return closest
