"""
IMU sample representation and optional preprocessing.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from ..math.constants import GRAVITY_MS2

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IMUSample:
    """One combined accelerometer + gyroscope reading."""

    # Monotonic sensor timestamp (nanoseconds)
    timestamp_ns: int

    # Accelerometer data (m/s²), device frame, gravity included
    accel_x: float
    accel_y: float
    accel_z: float

    # Gyroscope data (rad/s), device frame
    gyro_x: float
    gyro_y: float
    gyro_z: float

    @classmethod
    def from_arrays(cls, timestamp_ns: int, accel: Sequence[float],
                    gyro: Sequence[float]) -> 'IMUSample':
        """Build a sample from [x, y, z] accelerometer and gyroscope vectors."""
        if len(accel) != 3 or len(gyro) != 3:
            raise ValueError("Accelerometer and gyroscope readings must have 3 elements")
        return cls(
            timestamp_ns=int(timestamp_ns),
            accel_x=float(accel[0]),
            accel_y=float(accel[1]),
            accel_z=float(accel[2]),
            gyro_x=float(gyro[0]),
            gyro_y=float(gyro[1]),
            gyro_z=float(gyro[2])
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'IMUSample':
        """
        Parse the sensor stream format.

        Args:
            data: {"timestampNanos": int, "accel": [x, y, z], "gyro": [x, y, z]}

        Returns:
            IMUSample
        """
        try:
            return cls.from_arrays(data["timestampNanos"], data["accel"], data["gyro"])
        except KeyError as e:
            raise ValueError(f"IMU sample missing field {e}") from e

    @property
    def acceleration(self) -> np.ndarray:
        """Get acceleration as numpy array."""
        return np.array([self.accel_x, self.accel_y, self.accel_z])

    @property
    def angular_velocity(self) -> np.ndarray:
        """Get angular velocity as numpy array."""
        return np.array([self.gyro_x, self.gyro_y, self.gyro_z])

    def with_values(self, accel: np.ndarray, gyro: np.ndarray) -> 'IMUSample':
        """Copy of this sample carrying new sensor values."""
        return IMUSample.from_arrays(self.timestamp_ns, accel, gyro)


class IMUProcessor:
    """
    Optional bias calibration and smoothing applied to samples before
    they reach the speed estimator.
    """

    def __init__(self, apply_filtering: bool = False,
                 alpha_accel: float = 0.5, alpha_gyro: float = 0.5):
        """
        Initialize IMU processor.

        Args:
            apply_filtering: Whether to low-pass filter samples
            alpha_accel: Accelerometer smoothing coefficient (1.0 = no smoothing)
            alpha_gyro: Gyroscope smoothing coefficient (1.0 = no smoothing)
        """
        self.apply_filtering = apply_filtering
        self.alpha_accel = alpha_accel
        self.alpha_gyro = alpha_gyro

        # Calibration offsets
        self.accel_offset = np.zeros(3)
        self.gyro_offset = np.zeros(3)
        self.is_calibrated = False

        # Filter memory, seeded by the first sample
        self.filtered_accel = None
        self.filtered_gyro = None

        self.sample_count = 0

    def calibrate(self, calibration_data: List[IMUSample],
                  static_threshold: float = 0.5, min_samples: int = 50) -> bool:
        """
        Calibrate sensor biases from samples recorded while stationary.

        The device is assumed upright, so the accelerometer Z axis should
        read +1 g and every other channel zero.

        Args:
            calibration_data: IMU samples recorded while stationary
            static_threshold: Max per-axis accelerometer std (m/s²)
            min_samples: Minimum number of samples required

        Returns:
            True if calibration successful
        """
        if len(calibration_data) < min_samples:
            logger.warning("Need at least %d samples for calibration, got %d",
                           min_samples, len(calibration_data))
            return False

        accels = np.array([s.acceleration for s in calibration_data])
        gyros = np.array([s.angular_velocity for s in calibration_data])

        if np.max(np.std(accels, axis=0)) > static_threshold:
            logger.warning("Calibration data appears to be from moving condition")
            return False

        self.gyro_offset = np.mean(gyros, axis=0)
        self.accel_offset = np.mean(accels, axis=0)
        self.accel_offset[2] -= GRAVITY_MS2
        self.is_calibrated = True

        logger.info("IMU calibration complete: accel offset %s m/s², gyro offset %s rad/s",
                    np.round(self.accel_offset, 3).tolist(),
                    np.round(self.gyro_offset, 3).tolist())
        return True

    def apply_calibration(self, sample: IMUSample) -> IMUSample:
        """Apply calibration offsets to a sample."""
        if not self.is_calibrated:
            return sample
        return sample.with_values(sample.acceleration - self.accel_offset,
                                  sample.angular_velocity - self.gyro_offset)

    def apply_low_pass_filter(self, sample: IMUSample) -> IMUSample:
        """Exponential moving average over accelerometer and gyroscope."""
        if self.filtered_accel is None:
            self.filtered_accel = sample.acceleration
            self.filtered_gyro = sample.angular_velocity
        else:
            self.filtered_accel = ((1 - self.alpha_accel) * self.filtered_accel
                                   + self.alpha_accel * sample.acceleration)
            self.filtered_gyro = ((1 - self.alpha_gyro) * self.filtered_gyro
                                  + self.alpha_gyro * sample.angular_velocity)
        return sample.with_values(self.filtered_accel, self.filtered_gyro)

    def process(self, sample: IMUSample) -> IMUSample:
        """
        Process a sample with calibration and (optionally) filtering.

        Args:
            sample: Raw IMU sample

        Returns:
            Processed IMU sample
        """
        processed = self.apply_calibration(sample)
        if self.apply_filtering:
            processed = self.apply_low_pass_filter(processed)
        self.sample_count += 1
        return processed

    def reset_filter(self):
        """Forget filter memory, keeping calibration."""
        self.filtered_accel = None
        self.filtered_gyro = None

    def get_statistics(self) -> dict:
        """Get processor statistics."""
        return {
            'sample_count': self.sample_count,
            'is_calibrated': self.is_calibrated,
            'accel_offset': self.accel_offset.tolist(),
            'gyro_offset': self.gyro_offset.tolist()
        }
