"""
Configuration manager for route dead reckoning sessions.
"""

import copy
import json
import logging
import os
from typing import Any, Dict, Optional

from .estimation.speed_estimator import DEFAULT_PARAMS as SPEED_ESTIMATOR_DEFAULTS
from .navigation.projector import DEFAULT_PARAMS as ROUTE_PROJECTOR_DEFAULTS
from .navigation.projector import RouteProjector
from .sensors.imu import IMUProcessor

logger = logging.getLogger(__name__)


class Config:
    """Configuration manager for the dead reckoning pipeline."""

    DEFAULT_CONFIG = {
        # Speed estimator tuning
        "speed_estimator": dict(SPEED_ESTIMATOR_DEFAULTS),

        # Route projection
        "route_projector": dict(ROUTE_PROJECTOR_DEFAULTS),

        # IMU preprocessing
        "imu": {
            "apply_filtering": False,
            "alpha_accel": 0.5,
            "alpha_gyro": 0.5
        }
    }

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Optional path to a JSON configuration file whose
                values override the defaults
        """
        self.config_file = config_file
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)

        if config_file is not None:
            if os.path.exists(config_file):
                self.load_config()
            else:
                logger.info("Config file %s not found, using defaults", config_file)

    def load_config(self) -> bool:
        """
        Load configuration from file.

        Returns:
            True if loaded successfully
        """
        try:
            with open(self.config_file, 'r') as f:
                file_config = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Failed to load config %s: %s", self.config_file, e)
            return False

        # Merge with defaults (file config overrides defaults)
        self._merge_config(self.config, file_config)
        logger.info("Configuration loaded from %s", self.config_file)
        return True

    def save_config(self, config_file: Optional[str] = None) -> bool:
        """
        Save current configuration to file.

        Returns:
            True if saved successfully
        """
        path = config_file or self.config_file
        if path is None:
            logger.warning("No config file path given")
            return False

        try:
            with open(path, 'w') as f:
                json.dump(self.config, f, indent=2)
        except OSError as e:
            logger.warning("Failed to save config %s: %s", path, e)
            return False

        logger.info("Configuration saved to %s", path)
        return True

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]):
        """Recursively merge configuration dictionaries."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def get(self, key: str, default=None):
        """Get configuration value with optional default."""
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any):
        """Set configuration value."""
        keys = key.split('.')
        config = self.config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    # Property accessors for common configuration values
    @property
    def speed_estimator(self) -> Dict[str, float]:
        return self.config["speed_estimator"]

    @property
    def route_projector(self) -> Dict[str, float]:
        return self.config["route_projector"]

    @property
    def imu(self) -> Dict[str, Any]:
        return self.config["imu"]

    def create_imu_processor(self) -> IMUProcessor:
        """IMU processor configured from the imu section."""
        return IMUProcessor(
            apply_filtering=self.imu["apply_filtering"],
            alpha_accel=self.imu["alpha_accel"],
            alpha_gyro=self.imu["alpha_gyro"]
        )

    def create_route_projector(self) -> RouteProjector:
        """New navigation session configured from this configuration."""
        return RouteProjector(
            estimator_params=self.speed_estimator,
            params=self.route_projector,
            imu_processor=self.create_imu_processor()
        )

    def dumps(self) -> str:
        """Current configuration as indented JSON."""
        return json.dumps(self.config, indent=2)
