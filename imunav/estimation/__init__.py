"""
Speed and distance estimation from inertial sensors.
"""

from .speed_estimator import SpeedEstimator
from .state import EstimatorState, MotionState, SpeedUpdate
from .models import SpeedMotionModel, VibrationSpeedModel

__all__ = [
    "SpeedEstimator",
    "EstimatorState",
    "MotionState",
    "SpeedUpdate",
    "SpeedMotionModel",
    "VibrationSpeedModel",
]
