"""
Estimated position snapshots produced per IMU sample.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class EstimatedPosition:
    """Estimated position on the route."""

    latitude: float
    longitude: float
    heading: float            # radians, 0 = North, clockwise
    speed: float              # m/s
    distance_on_route: float  # meters from route start
    confidence: float         # 0-1, watch this to detect degraded estimates
    timestamp_ns: int

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the position output format."""
        return {
            'lat': self.latitude,
            'lon': self.longitude,
            'headingRadians': self.heading,
            'speedMetersPerSecond': self.speed,
            'distanceOnRouteMeters': self.distance_on_route,
            'confidence': self.confidence,
            'timestampNanos': self.timestamp_ns
        }

    def __str__(self) -> str:
        return (
            f"EstimatedPosition(lat={self.latitude:.6f}, lon={self.longitude:.6f}, "
            f"heading={self.heading:.3f}, speed={self.speed:.2f}, "
            f"distance={self.distance_on_route:.1f}, confidence={self.confidence:.2f})"
        )
