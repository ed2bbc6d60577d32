"""
Configuration management for RotorSim.

Loads simulation, blade, motor, damping, wall-detection and power-model
settings from YAML with dot-notation access. Values missing from the file
fall back to the built-in defaults.
"""

import copy
import logging
import yaml
from typing import Dict, Any, Optional
from pathlib import Path

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Central configuration loader for rotor physics components."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration loader.

        Args:
            config_path: Path to configuration file. If None, uses the packaged config.yaml
        """
        if config_path is None:
            config_path = Path(__file__).parent / "config.yaml"

        self.config_path = Path(config_path)
        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file, layered over the defaults."""
        config = self._get_default_config()
        if not self.config_path.exists():
            logger.warning("Config file %s not found, using defaults", self.config_path)
            return config

        try:
            with open(self.config_path, 'r') as f:
                loaded = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Failed to load config from %s: %s", self.config_path, e)
            return config

        if isinstance(loaded, dict):
            self._deep_update(config, loaded)
            logger.info("Loaded config from %s", self.config_path)
        else:
            logger.warning("Config file %s is empty or not a mapping, using defaults", self.config_path)
        return config

    def _get_default_config(self) -> Dict[str, Any]:
        """Return default configuration values."""
        return {
            # Tick and model selection
            "simulation": {
                "dt": 1.0 / 60.0,
                "max_rpm": 15000.0,
                "aero_model": "detailed",
                "bem_elements": 10,
                "enable_wall_effect": True,
                "enable_turbulence": True,
                "enable_prop_wash": True,
                "enable_dynamic_inflow": False
            },

            # Blade properties derived at rotor creation
            "blade": {
                "hinge_offset_ratio": 0.05,
                "lock_number": 5.0,
                "spring_constant": 1000.0,
                "blade_grip_ratio": 0.95
            },

            # Motor parameters assigned at rotor creation
            "motor": {
                "kv_rating": 1000.0,
                "resistance": 0.1,
                "inductance": 1.0e-4,
                "inertia": 1.0e-4,
                "thermal_resistance": 10.0,
                "thermal_capacity": 100.0,
                "voltage": 11.1,
                "max_current": 30.0
            },

            # Rigid-body damping set every tick
            "damping": {
                "linear": 0.1,
                "angular": 0.3
            },

            # Wall detection ray casts
            "wall": {
                "detection_radius_factor": 2.0,
                "ray_directions": [[1.0, 0.0, 0.0], [-1.0, 0.0, 0.0],
                                   [0.0, 1.0, 0.0], [0.0, -1.0, 0.0]]
            },

            # Rotor power model
            "power": {
                "profile_drag_coefficient": 0.012,
                "parasitic_area": 0.002
            }
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "motor.kv_rating")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "simulation.aero_model")
            value: Value to set
        """
        keys = key.split('.')
        config = self._config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def update(self, new_config: Dict[str, Any]) -> None:
        """
        Update configuration with new values.

        Args:
            new_config: Dictionary of new configuration values
        """
        self._deep_update(self._config, new_config)

    def _deep_update(self, base: Dict[str, Any], update: Dict[str, Any]) -> None:
        """Recursively update nested dictionaries."""
        for key, value in update.items():
            if isinstance(value, dict) and key in base and isinstance(base[key], dict):
                self._deep_update(base[key], value)
            else:
                base[key] = value

    def save(self, path: Optional[str] = None) -> None:
        """
        Save current configuration to YAML file.

        Args:
            path: Path to save file. If None, uses original config path.
        """
        save_path = Path(path) if path else self.config_path
        save_path.parent.mkdir(parents=True, exist_ok=True)

        with open(save_path, 'w') as f:
            yaml.dump(self._config, f, default_flow_style=False, indent=2)

    def section(self, name: str) -> Dict[str, Any]:
        """Get a copy of one top-level section."""
        return copy.deepcopy(self._config.get(name, {}))

    def __repr__(self) -> str:
        return f"ConfigLoader(config_path={self.config_path})"


# Global configuration instance
_global_config = None


def get_config(config_path: Optional[str] = None) -> ConfigLoader:
    """
    Get global configuration instance.

    Args:
        config_path: Path to configuration file. Only used for first call.

    Returns:
        Global ConfigLoader instance
    """
    global _global_config
    if _global_config is None:
        _global_config = ConfigLoader(config_path)
    return _global_config


def reset_config() -> None:
    """Reset global configuration instance (mainly for testing)."""
    global _global_config
    _global_config = None
