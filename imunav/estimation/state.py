"""
Speed estimator state representation.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Optional

from ..math.constants import INITIAL_SPEED_VARIANCE, VIBRATION_WINDOW_SIZE


class MotionState(Enum):
    """Zero-velocity state machine states."""

    STATIONARY = "stationary"
    MOVING = "moving"


@dataclass
class EstimatorState:
    """
    Mutable per-session state of the speed estimator.

    - speed: Forward speed estimate (m/s), never negative
    - speed_variance: Kalman variance of the speed estimate
    - motion_state: Current zero-velocity state
    - low_motion_samples / low_motion_time: Dwell counters of the current
      run of below-threshold samples
    - accel_history: Recent forward acceleration magnitudes (bounded)
    - last_timestamp_ns: Timestamp of the last accepted sample
    - cumulative_distance: Distance travelled since session start (meters)
    """

    speed: float = 0.0
    speed_variance: float = INITIAL_SPEED_VARIANCE
    motion_state: MotionState = MotionState.STATIONARY

    low_motion_samples: int = 0
    low_motion_time: float = 0.0

    accel_history: Deque[float] = field(
        default_factory=lambda: deque(maxlen=VIBRATION_WINDOW_SIZE)
    )

    last_timestamp_ns: Optional[int] = None
    cumulative_distance: float = 0.0

    @property
    def is_stationary(self) -> bool:
        return self.motion_state is MotionState.STATIONARY

    def copy(self) -> 'EstimatorState':
        """Create a copy of the state."""
        return EstimatorState(
            speed=self.speed,
            speed_variance=self.speed_variance,
            motion_state=self.motion_state,
            low_motion_samples=self.low_motion_samples,
            low_motion_time=self.low_motion_time,
            accel_history=deque(self.accel_history, maxlen=self.accel_history.maxlen),
            last_timestamp_ns=self.last_timestamp_ns,
            cumulative_distance=self.cumulative_distance
        )

    def __str__(self) -> str:
        return (
            f"EstimatorState(speed={self.speed:.2f}, "
            f"variance={self.speed_variance:.3f}, "
            f"state={self.motion_state.value}, "
            f"distance={self.cumulative_distance:.1f})"
        )


@dataclass(frozen=True)
class SpeedUpdate:
    """Result of processing one IMU sample."""

    speed: float                # m/s
    cumulative_distance: float  # meters since session start
    is_stationary: bool
