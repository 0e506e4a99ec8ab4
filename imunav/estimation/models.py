"""
Process and measurement models for the scalar speed Kalman filter.
"""

import numpy as np
from typing import Iterable, Tuple


class SpeedMotionModel:
    """
    Scalar forward-speed model driven by measured acceleration.

    State: speed (m/s) with variance P.
    """

    @staticmethod
    def predict(speed: float, variance: float, accel: float, dt: float,
                process_noise: float) -> Tuple[float, float]:
        """
        Predict the next speed by integrating acceleration.

        Args:
            speed: Current speed estimate (m/s)
            variance: Current speed variance
            accel: Forward acceleration magnitude (m/s²)
            dt: Time step in seconds
            process_noise: Variance growth per second

        Returns:
            (predicted_speed, predicted_variance)
        """
        return speed + accel * dt, variance + process_noise * dt

    @staticmethod
    def kalman_gain(variance: float, measurement_noise: float) -> float:
        """Weight given to a measurement against the prediction."""
        return variance / (variance + measurement_noise)

    @staticmethod
    def update(predicted_speed: float, predicted_variance: float,
               measured_speed: float, measurement_noise: float) -> Tuple[float, float]:
        """
        Correct the prediction with a speed measurement.

        Args:
            predicted_speed: Prior speed (m/s)
            predicted_variance: Prior variance
            measured_speed: Measured speed (m/s)
            measurement_noise: Measurement variance

        Returns:
            (speed, variance) after the update
        """
        gain = SpeedMotionModel.kalman_gain(predicted_variance, measurement_noise)
        speed = predicted_speed + gain * (measured_speed - predicted_speed)
        variance = (1.0 - gain) * predicted_variance
        return speed, variance

    @staticmethod
    def clamp_speed(speed: float, max_speed: float) -> float:
        """Clamp to [0, max_speed]; the filter tracks forward speed only."""
        return min(max_speed, max(0.0, speed))


class VibrationSpeedModel:
    """
    Weak speed measurement derived from road vibration.

    Vibration energy grows with vehicle speed, so the standard deviation
    of recent acceleration magnitudes gives a rough speed hint. It only
    serves to bound integration drift.
    """

    @staticmethod
    def speed_hint(history: Iterable[float], min_samples: int, scale: float,
                   max_speed: float) -> float:
        """
        Map acceleration variability to an approximate speed.

        Args:
            history: Recent acceleration magnitudes (m/s²)
            min_samples: Samples required before a hint is produced
            scale: Speed per unit of acceleration standard deviation
            max_speed: Upper bound of the hint (m/s)

        Returns:
            Speed hint in m/s, 0.0 when unavailable
        """
        values = np.fromiter(history, dtype=float)
        if values.size < min_samples:
            return 0.0
        return float(np.clip(np.std(values) * scale, 0.0, max_speed))
