"""
One-dimensional dead reckoning along a known route.

Since the agent follows a pre-calculated route, full 2D dead reckoning is
not needed: speed is estimated from the IMU, integrated into distance
travelled, and that distance is projected onto the route polyline.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from .map_matcher import MapMatcher, SnapResult
from .position import EstimatedPosition
from .route import Route
from ..estimation import SpeedEstimator
from ..sensors.imu import IMUProcessor, IMUSample
from ..math.utils import calculate_bearing
from ..math.constants import *

logger = logging.getLogger(__name__)

DEFAULT_PARAMS = {
    'arrival_tolerance': ARRIVAL_TOLERANCE_M,
    'max_snap_distance': MAX_SNAP_DISTANCE_M,
}


def confidence_for_speed(speed: float, is_stationary: bool = False) -> float:
    """
    Position confidence for the current motion.

    Integration error accumulates faster at higher speed, so confidence
    never increases with speed.

    Args:
        speed: Speed estimate (m/s)
        is_stationary: Whether a zero-velocity state is active

    Returns:
        Confidence in [0, 1]
    """
    if is_stationary:
        return STATIONARY_CONFIDENCE
    for upper_speed, confidence in CONFIDENCE_TIERS:
        if speed < upper_speed:
            return confidence
    return HIGH_SPEED_CONFIDENCE


@dataclass
class NavigationSessionState:
    """Mutable state of one navigation session."""

    route: Route
    distance_on_route: float = 0.0
    confidence: float = MAX_CONFIDENCE
    current_heading: float = 0.0
    last_timestamp_ns: Optional[int] = None


class RouteProjector:
    """
    Dead reckoning session that turns IMU samples into positions on a route.

    One instance per navigation session. All calls that mutate it
    (samples, orientation updates, manual corrections) must come from a
    single task in order.
    """

    def __init__(self, estimator_params: Dict[str, float] = None,
                 params: Dict[str, float] = None,
                 imu_processor: Optional[IMUProcessor] = None,
                 map_matcher: Optional[MapMatcher] = None):
        """
        Initialize the projector.

        Args:
            estimator_params: Speed estimator parameter overrides
            params: Overrides for DEFAULT_PARAMS
            imu_processor: Optional preprocessing applied to each sample
            map_matcher: Map matcher used for re-anchoring
        """
        self.params = dict(DEFAULT_PARAMS)
        if params:
            self.params.update(params)

        self.speed_estimator = SpeedEstimator(estimator_params)
        self.imu_processor = imu_processor
        self.map_matcher = map_matcher or MapMatcher()

        self.session: Optional[NavigationSessionState] = None
        self.start_distance = 0.0
        self.last_position: Optional[EstimatedPosition] = None

    @property
    def route(self) -> Optional[Route]:
        return self.session.route if self.session else None

    def initialize(self, route: Route, start_distance: float = 0.0):
        """
        Start navigating a route.

        Args:
            route: Route to follow
            start_distance: Starting distance from the route start (meters)
        """
        start = min(max(0.0, float(start_distance)), route.total_distance)

        self.speed_estimator.reset()
        self.speed_estimator.set_distance_traveled(start)
        if self.imu_processor is not None:
            self.imu_processor.reset_filter()

        self.start_distance = start
        self.session = NavigationSessionState(
            route=route,
            distance_on_route=start,
            confidence=0.0 if route.is_empty() else MAX_CONFIDENCE
        )
        self.last_position = None

        if not route.is_empty():
            self.session.current_heading = self._locate(route, start)[2]

        logger.info("Navigation initialized: %d points, %.1f m, starting at %.1f m",
                    len(route), route.total_distance, start)

    def reset(self):
        """Restart the current route from its starting distance."""
        if self.session is None:
            self.speed_estimator.reset()
            return
        self.initialize(self.session.route, self.start_distance)

    def update_orientation(self, rotation_matrix: Sequence[float]):
        """Update device orientation from a row-major rotation matrix."""
        self.speed_estimator.update_orientation(rotation_matrix)

    def update_rotation_vector(self, rotation_vector: Sequence[float]):
        """Update device orientation from a rotation vector reading."""
        self.speed_estimator.update_rotation_vector(rotation_vector)

    def process_reading(self, timestamp_ns: int, accel: Sequence[float],
                        gyro: Sequence[float]) -> EstimatedPosition:
        """
        Process an IMU reading and get the updated position on the route.

        Args:
            timestamp_ns: Sensor timestamp in nanoseconds
            accel: Accelerometer reading [x, y, z] in m/s²
            gyro: Gyroscope reading [x, y, z] in rad/s

        Returns:
            Estimated position on the route. A malformed reading is
            skipped and the previous position returned.
        """
        try:
            sample = IMUSample.from_arrays(timestamp_ns, accel, gyro)
        except (TypeError, ValueError) as e:
            logger.debug("Skipping malformed reading: %s", e)
            self.speed_estimator.skipped_count += 1
            session = self.session
            if session is None or session.route.is_empty():
                return self._fallback_position(0)
            if self.last_position is None:
                self.last_position = self._snapshot(session.last_timestamp_ns or 0)
            return self.last_position
        return self.process_sample(sample)

    def process_sample(self, sample: IMUSample) -> EstimatedPosition:
        """
        Process an IMU sample and get the updated position on the route.

        Without a route (or with an empty one) a fallback position at
        (0, 0) with zero confidence is returned.
        """
        session = self.session
        if session is None or session.route.is_empty():
            return self._fallback_position(sample.timestamp_ns)

        # Skipped samples must not reach the filter memory
        if self.imu_processor is not None and self.speed_estimator.will_integrate(sample):
            sample = self.imu_processor.process(sample)

        update = self.speed_estimator.process_sample(sample)
        route = session.route

        distance = min(max(0.0, update.cumulative_distance), route.total_distance)
        if distance != update.cumulative_distance:
            self.speed_estimator.set_distance_traveled(distance)

        lat, lon, heading = self._locate(route, distance)

        session.distance_on_route = distance
        session.current_heading = heading
        session.confidence = confidence_for_speed(update.speed, update.is_stationary)
        session.last_timestamp_ns = sample.timestamp_ns

        self.last_position = EstimatedPosition(
            latitude=lat,
            longitude=lon,
            heading=heading,
            speed=update.speed,
            distance_on_route=distance,
            confidence=session.confidence,
            timestamp_ns=sample.timestamp_ns
        )
        return self.last_position

    def _snapshot(self, timestamp_ns: int) -> EstimatedPosition:
        """Position for the current session state without a new sample."""
        session = self.session
        lat, lon, _ = self._locate(session.route, session.distance_on_route)
        return EstimatedPosition(
            latitude=lat,
            longitude=lon,
            heading=session.current_heading,
            speed=self.speed_estimator.get_speed(),
            distance_on_route=session.distance_on_route,
            confidence=session.confidence,
            timestamp_ns=timestamp_ns
        )

    def _locate(self, route: Route, distance: float) -> Tuple[float, float, float]:
        """
        Interpolate position and heading at a distance along the route.

        Returns:
            (lat, lon, heading)
        """
        points = route.points
        previous_heading = self.session.current_heading if self.session else 0.0

        if len(points) == 1:
            return points[0].lat, points[0].lon, previous_heading

        index = route.segment_index(distance)
        p1 = points[index]
        p2 = points[index + 1]
        segment_start = route.cumulative_distances[index]
        segment_length = route.cumulative_distances[index + 1] - segment_start

        if segment_length <= 0:
            # Zero-length segment has no direction
            return p1.lat, p1.lon, previous_heading

        heading = calculate_bearing(p1.lat, p1.lon, p2.lat, p2.lon)

        if distance <= 0:
            return points[0].lat, points[0].lon, heading
        if distance >= route.total_distance:
            return points[-1].lat, points[-1].lon, heading

        fraction = min(1.0, max(0.0, (distance - segment_start) / segment_length))
        lat = p1.lat + (p2.lat - p1.lat) * fraction
        lon = p1.lon + (p2.lon - p1.lon) * fraction
        return lat, lon, heading

    def _fallback_position(self, timestamp_ns: int) -> EstimatedPosition:
        return EstimatedPosition(
            latitude=0.0,
            longitude=0.0,
            heading=0.0,
            speed=0.0,
            distance_on_route=0.0,
            confidence=0.0,
            timestamp_ns=timestamp_ns
        )

    def set_position_on_route(self, distance_from_start: float):
        """
        Manually set the position on the route (e.g. user correction).

        Confidence is reset to its maximum and the current position is
        moved to the new location.
        """
        session = self.session
        if session is None or session.route.is_empty():
            logger.warning("Cannot set position without a route")
            return

        distance = min(max(0.0, float(distance_from_start)), session.route.total_distance)
        self.speed_estimator.set_distance_traveled(distance)
        session.distance_on_route = distance
        session.current_heading = self._locate(session.route, distance)[2]
        session.confidence = MAX_CONFIDENCE
        self.last_position = self._snapshot(session.last_timestamp_ns or 0)
        logger.info("Position on route set to %.1f m", distance)

    def anchor_to_fix(self, lat: float, lon: float) -> Optional[SnapResult]:
        """
        Re-anchor the position on the route from an out-of-band fix.

        The fix is projected onto the nearest point of the route and
        accepted only if it lies within max_snap_distance of it.

        Args:
            lat, lon: Position fix (degrees)

        Returns:
            SnapResult used for the correction, or None if rejected
        """
        session = self.session
        if session is None or session.route.is_empty():
            return None

        snap = self.map_matcher.snap_to_route(lat, lon, session.route)
        if snap.perpendicular_distance > self.params['max_snap_distance']:
            logger.warning("Rejected fix %.1f m away from route (limit %.1f m)",
                           snap.perpendicular_distance, self.params['max_snap_distance'])
            return None

        self.set_position_on_route(snap.distance_on_route)
        return snap

    def is_navigation_complete(self) -> bool:
        """Check if the end of the route has been reached."""
        session = self.session
        if session is None:
            return True
        return (session.distance_on_route
                >= session.route.total_distance - self.params['arrival_tolerance'])

    def get_current_position(self) -> Optional[EstimatedPosition]:
        """Last position produced by process_sample."""
        return self.last_position

    def get_remaining_distance(self) -> float:
        """Get remaining distance on route in meters."""
        session = self.session
        if session is None:
            return 0.0
        return max(0.0, session.route.total_distance - session.distance_on_route)

    def get_speed_kmh(self) -> float:
        """Get current speed in km/h."""
        return self.speed_estimator.get_speed_kmh()

    def get_statistics(self) -> Dict[str, Any]:
        """Get session statistics."""
        stats = self.speed_estimator.get_statistics()
        stats.update({
            'distance_on_route': self.session.distance_on_route if self.session else 0.0,
            'confidence': self.session.confidence if self.session else 0.0,
            'remaining_distance': self.get_remaining_distance()
        })
        return stats
