"""
Pytest configuration and shared fixtures for the RotorSim test suite.

Provides custom markers, a reference rigid body and collision world standing
in for an external physics engine, and configuration fixtures.
"""

import pytest
import numpy as np
import tempfile

from rotorsim.config import ConfigLoader, reset_config
from rotorsim.physics.atmosphere import calculate_atmospheric_conditions
from rotorsim.physics.rotor_physics import RotorPhysicsOrchestrator
from rotorsim.rotor import RotorInitInfo, RotorRegistry
from rotorsim.utils.rigid_body import PlaneCollisionWorld, RigidBody


def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "physics: marks tests that validate physical behaviour of a model"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests that run the full per-tick pipeline"
    )


@pytest.fixture(autouse=True)
def clean_global_config():
    """Never leak the global config instance between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sea_level():
    """Standard sea-level atmosphere at rest."""
    return calculate_atmospheric_conditions(0.0, 0.0)


@pytest.fixture
def config():
    """Packaged configuration with stochastic and cross-rotor loads switched off."""
    loader = ConfigLoader()
    loader.update({
        "simulation": {
            "enable_turbulence": False,
            "enable_prop_wash": False,
            "enable_wall_effect": False,
        }
    })
    return loader


@pytest.fixture
def rotor_info():
    """Small quadcopter-class rotor."""
    return RotorInitInfo(mass=0.1, blade_radius=0.12, blade_count=2, blade_pitch=0.2)


def make_body(altitude: float = 50.0, **kwargs) -> RigidBody:
    """Rigid body at rest at the given altitude."""
    return RigidBody(mass=1.0, position=np.array([0.0, 0.0, altitude]), **kwargs)


@pytest.fixture
def body():
    return make_body()


@pytest.fixture
def empty_world():
    return PlaneCollisionWorld()


@pytest.fixture
def registry(config):
    return RotorRegistry(config)


@pytest.fixture
def orchestrator(config):
    return RotorPhysicsOrchestrator(config)
