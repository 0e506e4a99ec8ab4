#!/usr/bin/env python3
"""
Unit tests for IMU samples, preprocessing and frame transforms.
"""

import math
import unittest
import numpy as np
import sys
import os

# Add package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from imunav.sensors import IMUProcessor, IMUSample, OrientationTransform, rotation_matrix_from_vector
from imunav.math.constants import GRAVITY_MS2

G = GRAVITY_MS2


class TestIMUSample(unittest.TestCase):
    """Test IMUSample construction."""

    def test_from_dict(self):
        """Parse the sensor stream format."""
        sample = IMUSample.from_dict({
            "timestampNanos": 1_000_000_000,
            "accel": [0.1, 0.2, 9.8],
            "gyro": [0.0, 0.01, 0.02]
        })

        self.assertEqual(sample.timestamp_ns, 1_000_000_000)
        np.testing.assert_array_almost_equal(sample.acceleration, [0.1, 0.2, 9.8])
        np.testing.assert_array_almost_equal(sample.angular_velocity, [0.0, 0.01, 0.02])

    def test_from_dict_missing_field(self):
        """Missing fields raise ValueError."""
        with self.assertRaises(ValueError):
            IMUSample.from_dict({"timestampNanos": 0, "accel": [0, 0, 0]})

    def test_from_arrays_wrong_length(self):
        """Vectors must have three elements."""
        with self.assertRaises(ValueError):
            IMUSample.from_arrays(0, [0.0, 0.0], [0.0, 0.0, 0.0])


class TestIMUProcessor(unittest.TestCase):
    """Test calibration and filtering."""

    def _static_samples(self, count=60):
        return [
            IMUSample.from_arrays(i * 10_000_000, [0.1, -0.2, G + 0.3], [0.01, 0.0, -0.02])
            for i in range(count)
        ]

    def test_calibration(self):
        """Static samples yield accelerometer and gyro offsets."""
        processor = IMUProcessor()
        self.assertTrue(processor.calibrate(self._static_samples()))

        np.testing.assert_array_almost_equal(processor.accel_offset, [0.1, -0.2, 0.3])
        np.testing.assert_array_almost_equal(processor.gyro_offset, [0.01, 0.0, -0.02])

        corrected = processor.process(self._static_samples(1)[0])
        np.testing.assert_array_almost_equal(corrected.acceleration, [0.0, 0.0, G])
        np.testing.assert_array_almost_equal(corrected.angular_velocity, [0.0, 0.0, 0.0])

    def test_calibration_needs_enough_samples(self):
        """Too few samples are rejected."""
        processor = IMUProcessor()
        self.assertFalse(processor.calibrate(self._static_samples(10)))
        self.assertFalse(processor.is_calibrated)

    def test_calibration_rejects_motion(self):
        """Samples recorded while moving are rejected."""
        samples = [
            IMUSample.from_arrays(i, [3.0 * (i % 2), 0.0, G], [0.0, 0.0, 0.0])
            for i in range(60)
        ]
        processor = IMUProcessor()
        self.assertFalse(processor.calibrate(samples))

    def test_uncalibrated_passthrough(self):
        """Without calibration or filtering samples are unchanged."""
        processor = IMUProcessor()
        sample = IMUSample.from_arrays(5, [1.0, 2.0, 3.0], [0.1, 0.2, 0.3])
        self.assertEqual(processor.process(sample), sample)
        self.assertEqual(processor.get_statistics()['sample_count'], 1)

    def test_low_pass_filter(self):
        """Filter starts at the first sample and moves toward new values."""
        processor = IMUProcessor(apply_filtering=True, alpha_accel=0.5, alpha_gyro=0.5)

        first = processor.process(IMUSample.from_arrays(0, [0.0, 0.0, G], [0.0, 0.0, 0.0]))
        np.testing.assert_array_almost_equal(first.acceleration, [0.0, 0.0, G])

        second = processor.process(IMUSample.from_arrays(1, [2.0, 0.0, G], [0.2, 0.0, 0.0]))
        np.testing.assert_array_almost_equal(second.acceleration, [1.0, 0.0, G])
        np.testing.assert_array_almost_equal(second.angular_velocity, [0.1, 0.0, 0.0])
        self.assertEqual(second.timestamp_ns, 1)

        processor.reset_filter()
        third = processor.process(IMUSample.from_arrays(2, [4.0, 0.0, G], [0.0, 0.0, 0.0]))
        np.testing.assert_array_almost_equal(third.acceleration, [4.0, 0.0, G])


class TestRotationMatrixFromVector(unittest.TestCase):
    """Test rotation vector conversion."""

    def test_zero_vector_is_identity(self):
        np.testing.assert_array_almost_equal(rotation_matrix_from_vector([0.0, 0.0, 0.0]), np.eye(3))

    def test_rotation_about_z(self):
        """90 degrees about Z maps device X onto world Y."""
        s = math.sin(math.pi / 4)
        R = rotation_matrix_from_vector([0.0, 0.0, s])

        np.testing.assert_array_almost_equal(R @ np.array([1.0, 0.0, 0.0]), [0.0, 1.0, 0.0])
        np.testing.assert_array_almost_equal(R @ R.T, np.eye(3))

    def test_explicit_scalar_part(self):
        """Four element vectors use the given scalar part."""
        s = math.sin(math.pi / 4)
        R3 = rotation_matrix_from_vector([s, 0.0, 0.0])
        R4 = rotation_matrix_from_vector([s, 0.0, 0.0, math.cos(math.pi / 4)])
        np.testing.assert_array_almost_equal(R3, R4)

    def test_wrong_shape(self):
        with self.assertRaises(ValueError):
            rotation_matrix_from_vector([0.0, 0.0])


class TestOrientationTransform(unittest.TestCase):
    """Test device to world frame transform."""

    def test_fallback_removes_gravity_from_device_z(self):
        """Without orientation the device Z axis is treated as vertical."""
        transform = OrientationTransform()
        self.assertFalse(transform.has_orientation)

        np.testing.assert_array_almost_equal(transform.to_world_frame([0.0, 0.0, G]), [0.0, 0.0, 0.0])
        self.assertAlmostEqual(transform.forward_acceleration([1.0, 0.0, G]), 1.0)

    def test_fallback_includes_vertical_residual(self):
        """Fallback magnitude includes the gravity-compensated Z component."""
        transform = OrientationTransform()
        self.assertAlmostEqual(transform.forward_acceleration([3.0, 0.0, G + 4.0]), 5.0)

    def test_identity_orientation_uses_horizontal_components(self):
        """With orientation only horizontal world components count."""
        transform = OrientationTransform()
        transform.update_orientation(np.eye(3).flatten().tolist())

        np.testing.assert_array_almost_equal(transform.to_world_frame([3.0, 4.0, G + 2.0]), [3.0, 4.0, 2.0])
        self.assertAlmostEqual(transform.forward_acceleration([3.0, 4.0, G + 2.0]), 5.0)

    def test_device_lying_on_side(self):
        """Gravity along device Y is removed once rotated to world Z."""
        transform = OrientationTransform()
        transform.update_orientation([
            1.0, 0.0, 0.0,
            0.0, 0.0, -1.0,
            0.0, 1.0, 0.0,
        ])

        np.testing.assert_array_almost_equal(transform.to_world_frame([0.0, G, 0.0]), [0.0, 0.0, 0.0])
        self.assertAlmostEqual(transform.forward_acceleration([1.5, G, 0.0]), 1.5)

    def test_orientation_is_overwritten(self):
        """The latest orientation always wins."""
        transform = OrientationTransform()
        transform.update_orientation(np.eye(3))
        transform.update_rotation_vector([0.0, 0.0, math.sin(math.pi / 4)])

        np.testing.assert_array_almost_equal(transform.to_world_frame([1.0, 0.0, G]), [0.0, 1.0, 0.0])

    def test_wrong_size_raises(self):
        transform = OrientationTransform()
        with self.assertRaises(ValueError):
            transform.update_orientation([1.0, 0.0, 0.0])

    def test_non_finite_orientation_ignored(self):
        transform = OrientationTransform()
        transform.update_orientation([float('nan')] * 9)
        self.assertFalse(transform.has_orientation)

    def test_reset(self):
        transform = OrientationTransform()
        transform.update_orientation(np.eye(3))
        transform.reset()
        self.assertIsNone(transform.rotation_matrix)


if __name__ == '__main__':
    unittest.main()
