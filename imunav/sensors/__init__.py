"""
Sensor data types, preprocessing and frame transforms.
"""

from .imu import IMUProcessor, IMUSample
from .orientation import OrientationTransform, rotation_matrix_from_vector

__all__ = ["IMUProcessor", "IMUSample", "OrientationTransform", "rotation_matrix_from_vector"]
