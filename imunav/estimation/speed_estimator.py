"""
Kalman-filtered forward speed and distance estimation from IMU samples.
"""

import logging
import math
import numpy as np
from collections import deque
from typing import Any, Dict, Optional, Sequence

from .state import EstimatorState, MotionState, SpeedUpdate
from .models import SpeedMotionModel, VibrationSpeedModel
from ..sensors.imu import IMUSample
from ..sensors.orientation import OrientationTransform
from ..math.constants import *

logger = logging.getLogger(__name__)

# Tolerance for accumulated dwell time against the configured duration
_DWELL_EPSILON_S = 1e-9

def _as_vector(values: Sequence[float]) -> Optional[np.ndarray]:
    """Reading as a 3 element float array, None if malformed."""
    try:
        vector = np.asarray(values, dtype=float)
    except (TypeError, ValueError):
        return None
    return vector if vector.shape == (3,) else None


DEFAULT_PARAMS = {
    'max_speed': MAX_SPEED_MS,
    'zvu_accel_threshold': ZVU_ACCEL_THRESHOLD,
    'zvu_gyro_threshold': ZVU_GYRO_THRESHOLD,
    'zvu_dwell': ZVU_DWELL_S,
    'process_noise': PROCESS_NOISE,
    'measurement_noise': MEASUREMENT_NOISE,
    'initial_variance': INITIAL_SPEED_VARIANCE,
    'stationary_variance': STATIONARY_SPEED_VARIANCE,
    'vibration_window': VIBRATION_WINDOW_SIZE,
    'vibration_min_samples': VIBRATION_MIN_SAMPLES,
    'vibration_speed_scale': VIBRATION_SPEED_SCALE,
    'max_sample_gap': MAX_SAMPLE_GAP_S,
}


class SpeedEstimator:
    """
    Estimates forward speed and cumulative distance from IMU samples.

    Only speed is tracked, not direction: the agent is assumed to follow
    a known route forward, so distance travelled along the route is the
    integral of speed. Each sample goes through

    1. gravity removal and forward acceleration extraction
    2. zero-velocity detection (instant start, debounced stop)
    3. Kalman prediction from acceleration
    4. Kalman update with a vibration-derived speed hint
    5. distance integration

    Samples must be fed sequentially from a single task. Invalid samples
    (non-increasing timestamps, stream gaps, non-finite values) are
    skipped and the previous estimate is returned.
    """

    def __init__(self, params: Dict[str, float] = None,
                 orientation: Optional[OrientationTransform] = None):
        """
        Initialize the speed estimator.

        Args:
            params: Overrides for DEFAULT_PARAMS
            orientation: Frame transform to use (a new one if omitted)
        """
        self.params = dict(DEFAULT_PARAMS)
        if params:
            self.params.update(params)

        self.orientation = orientation or OrientationTransform()
        self._state = self._initial_state()

        # Statistics
        self.processed_count = 0
        self.skipped_count = 0
        self.gap_count = 0
        self.zvu_count = 0

    def _initial_state(self) -> EstimatorState:
        return EstimatorState(
            speed_variance=self.params['initial_variance'],
            accel_history=deque(maxlen=int(self.params['vibration_window']))
        )

    @property
    def state(self) -> EstimatorState:
        """Snapshot of the current estimator state."""
        return self._state.copy()

    def reset(self):
        """Reset estimator for a new navigation session."""
        self._state = self._initial_state()
        self.processed_count = 0
        self.skipped_count = 0
        self.gap_count = 0
        self.zvu_count = 0

    def set_distance_traveled(self, distance: float):
        """Set the cumulative distance, e.g. when starting mid-route."""
        self._state.cumulative_distance = max(0.0, float(distance))

    def update_orientation(self, rotation_matrix: Sequence[float]):
        """Update the device orientation from a row-major rotation matrix."""
        self.orientation.update_orientation(rotation_matrix)

    def update_rotation_vector(self, rotation_vector: Sequence[float]):
        """Update the device orientation from a rotation vector reading."""
        self.orientation.update_rotation_vector(rotation_vector)

    def will_integrate(self, sample: IMUSample) -> bool:
        """
        Check whether a sample would be integrated rather than skipped.

        False for the clock-anchoring first sample, non-increasing
        timestamps, stream gaps and non-finite values. Nothing is mutated.
        """
        last = self._state.last_timestamp_ns
        if last is None:
            return False

        dt = (sample.timestamp_ns - last) / NANOS_PER_SECOND
        if dt <= 0 or dt > self.params['max_sample_gap']:
            return False

        return bool(np.all(np.isfinite(sample.acceleration))
                    and np.all(np.isfinite(sample.angular_velocity)))

    def process_sample(self, sample: IMUSample) -> SpeedUpdate:
        """Process an IMU sample. See process_reading."""
        return self.process_reading(sample.timestamp_ns,
                                    sample.acceleration,
                                    sample.angular_velocity)

    def process_reading(self, timestamp_ns: int, accel: Sequence[float],
                        gyro: Sequence[float]) -> SpeedUpdate:
        """
        Process an IMU reading and update speed/distance estimates.

        Args:
            timestamp_ns: Sensor timestamp in nanoseconds
            accel: Accelerometer reading [x, y, z] in m/s²
            gyro: Gyroscope reading [x, y, z] in rad/s

        Returns:
            SpeedUpdate with the current estimate
        """
        state = self._state

        accel = _as_vector(accel)
        gyro = _as_vector(gyro)
        if accel is None or gyro is None:
            logger.debug("Skipping malformed sample at %s ns", timestamp_ns)
            self.skipped_count += 1
            return self._current_update()

        if state.last_timestamp_ns is None:
            # First sample only anchors the clock
            state.last_timestamp_ns = int(timestamp_ns)
            return self._current_update()

        dt = (timestamp_ns - state.last_timestamp_ns) / NANOS_PER_SECOND

        if dt <= 0:
            self.skipped_count += 1
            return self._current_update()

        if dt > self.params['max_sample_gap']:
            # Stream gap: re-anchor the clock, integrate nothing
            logger.debug("Skipping sample after %.3fs stream gap", dt)
            state.last_timestamp_ns = int(timestamp_ns)
            self.gap_count += 1
            return self._current_update()

        accel_mag = self.orientation.forward_acceleration(accel)
        gyro_mag = float(np.linalg.norm(gyro))

        if not (math.isfinite(accel_mag) and math.isfinite(gyro_mag)):
            self.skipped_count += 1
            return self._current_update()

        state.last_timestamp_ns = int(timestamp_ns)
        self._update_motion_state(accel_mag, gyro_mag, dt)

        if state.motion_state is MotionState.STATIONARY:
            state.speed = 0.0
            self.processed_count += 1
            return self._current_update()

        predicted_speed, predicted_variance = SpeedMotionModel.predict(
            state.speed, state.speed_variance, accel_mag, dt,
            self.params['process_noise']
        )

        state.accel_history.append(accel_mag)
        hint = VibrationSpeedModel.speed_hint(
            state.accel_history,
            int(self.params['vibration_min_samples']),
            self.params['vibration_speed_scale'],
            self.params['max_speed']
        )

        if hint > 0:
            speed, variance = SpeedMotionModel.update(
                predicted_speed, predicted_variance, hint,
                self.params['measurement_noise']
            )
        else:
            speed, variance = predicted_speed, predicted_variance

        state.speed = SpeedMotionModel.clamp_speed(speed, self.params['max_speed'])
        state.speed_variance = variance
        state.cumulative_distance += state.speed * dt

        self.processed_count += 1
        return self._current_update()

    def _update_motion_state(self, accel_mag: float, gyro_mag: float, dt: float):
        """Advance the zero-velocity state machine by one sample."""
        state = self._state
        low_motion = (accel_mag < self.params['zvu_accel_threshold']
                      and gyro_mag < self.params['zvu_gyro_threshold'])

        if not low_motion:
            state.low_motion_samples = 0
            state.low_motion_time = 0.0
            if state.motion_state is MotionState.STATIONARY:
                state.motion_state = MotionState.MOVING
                logger.debug("Motion detected (accel=%.3f m/s², gyro=%.3f rad/s)",
                             accel_mag, gyro_mag)
            return

        state.low_motion_samples += 1
        state.low_motion_time += dt

        if (state.motion_state is MotionState.MOVING
                and state.low_motion_time + _DWELL_EPSILON_S >= self.params['zvu_dwell']):
            # Zero velocity update
            state.motion_state = MotionState.STATIONARY
            state.speed = 0.0
            state.speed_variance = self.params['stationary_variance']
            self.zvu_count += 1
            logger.debug("Stop detected after %d low-motion samples (%.2fs)",
                         state.low_motion_samples, state.low_motion_time)

    def _current_update(self) -> SpeedUpdate:
        state = self._state
        return SpeedUpdate(
            speed=state.speed,
            cumulative_distance=state.cumulative_distance,
            is_stationary=state.is_stationary
        )

    def get_speed(self) -> float:
        """Get current speed in m/s."""
        return self._state.speed

    def get_speed_kmh(self) -> float:
        """Get current speed in km/h for display."""
        return self._state.speed * MS_TO_KMH

    def get_distance_traveled(self) -> float:
        """Get total distance traveled in meters."""
        return self._state.cumulative_distance

    def get_statistics(self) -> Dict[str, Any]:
        """Get estimator statistics."""
        return {
            'processed_samples': self.processed_count,
            'skipped_samples': self.skipped_count,
            'stream_gaps': self.gap_count,
            'zero_velocity_updates': self.zvu_count,
            'speed_variance': self._state.speed_variance,
            'motion_state': self._state.motion_state.value
        }
