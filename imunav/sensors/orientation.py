"""
Device-to-world frame transform for accelerometer readings.
"""

import logging
import math
import numpy as np
from typing import Optional, Sequence

from ..math.constants import GRAVITY_MS2

logger = logging.getLogger(__name__)


def rotation_matrix_from_vector(rotation_vector: Sequence[float]) -> np.ndarray:
    """
    Convert a rotation vector sensor reading to a rotation matrix.

    The rotation vector holds the vector part of a unit quaternion
    [x, y, z] and optionally its scalar part as a fourth element. When
    the scalar is absent it is recovered from the unit-norm constraint.

    Args:
        rotation_vector: [x, y, z] or [x, y, z, w]

    Returns:
        3x3 device-to-world rotation matrix R such that v_world = R @ v_device

    Raises:
        ValueError: If the vector does not have 3 or 4 elements
    """
    v = np.asarray(rotation_vector, dtype=float)
    if v.shape not in ((3,), (4,)):
        raise ValueError(f"Expected 3 or 4 element rotation vector, got shape {v.shape}")

    qx, qy, qz = v[:3]
    if v.shape == (4,):
        qw = v[3]
    else:
        qw = math.sqrt(max(0.0, 1.0 - (qx * qx + qy * qy + qz * qz)))

    return np.array([
        [1.0 - 2.0 * (qy * qy + qz * qz), 2.0 * (qx * qy - qw * qz), 2.0 * (qx * qz + qw * qy)],
        [2.0 * (qx * qy + qw * qz), 1.0 - 2.0 * (qx * qx + qz * qz), 2.0 * (qy * qz - qw * qx)],
        [2.0 * (qx * qz - qw * qy), 2.0 * (qy * qz + qw * qx), 1.0 - 2.0 * (qx * qx + qy * qy)],
    ])


class OrientationTransform:
    """
    Holds the most recent device orientation and rotates accelerometer
    readings into the world frame (X east, Y north, Z up).

    The orientation is a single slot overwritten on every update. Updates
    must be delivered through the same processing point as IMU samples
    so a reader never observes a partially written matrix.
    """

    def __init__(self, gravity: float = GRAVITY_MS2):
        self.gravity = gravity
        self._rotation: Optional[np.ndarray] = None

    @property
    def has_orientation(self) -> bool:
        return self._rotation is not None

    @property
    def rotation_matrix(self) -> Optional[np.ndarray]:
        if self._rotation is None:
            return None
        return self._rotation.copy()

    def update_orientation(self, rotation_matrix: Sequence[float]):
        """
        Store a new device-to-world rotation.

        Args:
            rotation_matrix: 9 floats in row-major order or a 3x3 array

        Raises:
            ValueError: If the input cannot be shaped into a 3x3 matrix
        """
        matrix = np.asarray(rotation_matrix, dtype=float)
        if matrix.size != 9:
            raise ValueError(f"Rotation matrix must have 9 elements, got {matrix.size}")
        matrix = matrix.reshape(3, 3)

        if not np.all(np.isfinite(matrix)):
            logger.warning("Ignoring orientation update with non-finite values")
            return

        self._rotation = matrix

    def update_rotation_vector(self, rotation_vector: Sequence[float]):
        """Store a new orientation given as a rotation vector reading."""
        self.update_orientation(rotation_matrix_from_vector(rotation_vector))

    def reset(self):
        """Forget the stored orientation."""
        self._rotation = None

    def to_world_frame(self, accel: Sequence[float]) -> np.ndarray:
        """
        Rotate a device-frame acceleration into the world frame and
        remove gravity from the vertical component.

        Without a known orientation the device Z axis is assumed to be
        vertical and gravity is subtracted from it directly. This is a
        coarse approximation that only holds for an upright device.

        Args:
            accel: Accelerometer reading [x, y, z] (m/s²)

        Returns:
            Linear acceleration [x, y, z] in the world frame (m/s²)
        """
        world = np.asarray(accel, dtype=float)
        if self._rotation is not None:
            world = self._rotation @ world
        else:
            world = world.copy()
        world[2] -= self.gravity
        return world

    def forward_acceleration(self, accel: Sequence[float]) -> float:
        """
        Magnitude of the acceleration driving motion along the route.

        With an orientation this is the horizontal (X/Y) magnitude in the
        world frame. Without one the device axes are not trusted to be
        level, so the full gravity-compensated magnitude is used.

        Args:
            accel: Accelerometer reading [x, y, z] (m/s²)

        Returns:
            Non-negative acceleration magnitude (m/s²)
        """
        world = self.to_world_frame(accel)
        if self._rotation is not None:
            return float(math.hypot(world[0], world[1]))
        return float(np.linalg.norm(world))
