"""Mathematical utilities for RotorSim"""

import numpy as np
from pyquaternion import Quaternion


def normalize_vector(vector: np.ndarray, epsilon: float = 1e-8) -> np.ndarray:
    """
    Normalize a vector to unit length with numerical stability.

    Args:
        vector: Input vector to normalize
        epsilon: Minimum norm threshold to avoid division by zero

    Returns:
        Normalized vector, or zero vector if input norm is below epsilon
    """
    vector = np.asarray(vector, dtype=float)
    norm = np.linalg.norm(vector)
    if norm < epsilon:
        return np.zeros_like(vector)
    return vector / norm


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value between min and max."""
    return max(min_val, min(max_val, value))


def smoothstep(edge0: float, edge1: float, x: float) -> float:
    """Cubic Hermite blend from 0 at edge0 to 1 at edge1."""
    t = clamp((x - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def axis_rotation(axis: np.ndarray, angle: float) -> Quaternion:
    """Rotation quaternion of `angle` radians about `axis`."""
    return Quaternion(axis=np.asarray(axis, dtype=float), angle=float(angle))
