"""
Route geometry with precomputed cumulative distances.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

from ..math.utils import haversine_distance
from ..math.constants import FALLBACK_AVERAGE_SPEED_MS, FALLBACK_POINT_SPACING_M

LatLon = Tuple[float, float]


@dataclass(frozen=True)
class RoutePoint:
    """A point on the route."""

    lat: float
    lon: float
    distance_from_start: float = 0.0  # meters from route start


@dataclass(frozen=True)
class Route:
    """
    An immutable route polyline.

    points: Ordered route points, start to end
    total_distance: Route length in meters as reported by its source
    estimated_travel_time: Expected travel time in seconds
    cumulative_distances: Great-circle distance from the start to each
        point, derived once from the geometry (non-decreasing)
    """

    points: Tuple[RoutePoint, ...]
    total_distance: float
    estimated_travel_time: int = 0
    cumulative_distances: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        points = tuple(self.points)
        object.__setattr__(self, 'points', points)

        for prev, curr in zip(points, points[1:]):
            if curr.distance_from_start < prev.distance_from_start:
                raise ValueError("Route point distances must be non-decreasing")

        segments = [
            haversine_distance(p1.lat, p1.lon, p2.lat, p2.lon)
            for p1, p2 in zip(points, points[1:])
        ]
        if points:
            cumulative = np.concatenate(([0.0], np.cumsum(segments)))
        else:
            cumulative = np.zeros(0)
        cumulative.setflags(write=False)
        object.__setattr__(self, 'cumulative_distances', cumulative)

    @classmethod
    def from_coordinates(cls, coordinates: Sequence[LatLon],
                         estimated_travel_time: Optional[int] = None,
                         average_speed: float = FALLBACK_AVERAGE_SPEED_MS) -> 'Route':
        """
        Build a route from (lat, lon) pairs, measuring its length.

        Args:
            coordinates: Ordered (lat, lon) pairs in degrees
            estimated_travel_time: Travel time in seconds (derived from
                average_speed when omitted)
            average_speed: Speed used to derive the travel time (m/s)

        Returns:
            Route whose total distance is the sum of its segment lengths
        """
        points = [RoutePoint(float(lat), float(lon)) for lat, lon in coordinates]
        measured = cls(points, 0.0)
        cumulative = measured.cumulative_distances
        points = [
            RoutePoint(p.lat, p.lon, float(d)) for p, d in zip(points, cumulative)
        ]
        total = float(cumulative[-1]) if len(cumulative) else 0.0
        if estimated_travel_time is None:
            estimated_travel_time = int(total / average_speed)
        return cls(points, total, estimated_travel_time)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Route':
        """
        Parse the route service format.

        Args:
            data: {"points": [{"lat", "lon", "distanceFromStart"}, ...],
                   "totalDistanceMeters": float,
                   "estimatedTravelTimeSeconds": int}

        Returns:
            Route

        Raises:
            ValueError: If a required field is missing
        """
        try:
            points = [
                RoutePoint(float(p["lat"]), float(p["lon"]),
                           float(p.get("distanceFromStart", 0.0)))
                for p in data["points"]
            ]
            return cls(points, float(data["totalDistanceMeters"]),
                       int(data.get("estimatedTravelTimeSeconds", 0)))
        except KeyError as e:
            raise ValueError(f"Route data missing field {e}") from e

    def is_empty(self) -> bool:
        return len(self.points) == 0

    def __len__(self) -> int:
        return len(self.points)

    def segment_length(self, index: int) -> float:
        """Length of the segment from point index to index + 1 (meters)."""
        return float(self.cumulative_distances[index + 1] - self.cumulative_distances[index])

    def segment_index(self, distance: float) -> int:
        """
        Index of the segment containing a distance along the route.

        Binary search for the first cumulative distance >= distance; the
        containing segment starts at the preceding point. The result is
        clamped to a valid segment.

        Args:
            distance: Distance from the route start (meters)

        Returns:
            Segment start index in [0, len(points) - 2]

        Raises:
            ValueError: If the route has fewer than two points
        """
        if len(self.points) < 2:
            raise ValueError("Route has no segments")
        insertion = int(np.searchsorted(self.cumulative_distances, distance, side='left'))
        return min(max(insertion - 1, 0), len(self.points) - 2)


def build_straight_line_route(origin: LatLon, destination: LatLon,
                              point_spacing: float = FALLBACK_POINT_SPACING_M,
                              average_speed: float = FALLBACK_AVERAGE_SPEED_MS) -> Route:
    """
    Create a straight-line route with intermediate points.

    Used when no road routing is available.

    Args:
        origin: (lat, lon) of the start
        destination: (lat, lon) of the end
        point_spacing: Approximate spacing of intermediate points (meters)
        average_speed: Speed assumed for the travel time (m/s)

    Returns:
        Route from origin to destination
    """
    total_distance = haversine_distance(origin[0], origin[1], destination[0], destination[1])
    num_segments = max(2, int(total_distance / point_spacing))

    points = []
    for i in range(num_segments + 1):
        fraction = i / num_segments
        points.append(RoutePoint(
            origin[0] + (destination[0] - origin[0]) * fraction,
            origin[1] + (destination[1] - origin[1]) * fraction,
            total_distance * fraction
        ))

    return Route(points, total_distance, int(total_distance / average_speed))
