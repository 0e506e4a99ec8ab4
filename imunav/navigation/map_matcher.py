"""
Map matching utilities for projecting positions onto a route.
"""

import math
from typing import NamedTuple

from .route import Route
from ..math.utils import calculate_bearing, closest_point_on_segment, haversine_distance


class SnapResult(NamedTuple):
    """Closest point on a route to a query position."""

    lat: float
    lon: float
    distance_on_route: float       # meters from route start
    perpendicular_distance: float  # meters from the query position


class MapMatcher:
    """
    Nearest-point projection of arbitrary positions onto a route.

    Used to seed or correct the dead-reckoned distance from an
    out-of-band position fix.
    """

    @staticmethod
    def snap_to_route(lat: float, lon: float, route: Route) -> SnapResult:
        """
        Find the closest point on the route to a given position.

        Every segment is scanned; when several segments are equally close
        the first one wins.

        Args:
            lat, lon: Query position (degrees)
            route: Route to project onto

        Returns:
            SnapResult with the matched point and its distance along the route
        """
        if route.is_empty():
            return SnapResult(0.0, 0.0, 0.0, math.inf)

        if len(route) == 1:
            p = route.points[0]
            return SnapResult(p.lat, p.lon, 0.0, haversine_distance(lat, lon, p.lat, p.lon))

        best = None
        cumulative = route.cumulative_distances

        for i, (p1, p2) in enumerate(zip(route.points, route.points[1:])):
            projection = closest_point_on_segment(lat, lon, p1.lat, p1.lon, p2.lat, p2.lon)

            if best is None or projection.distance < best.perpendicular_distance:
                along = cumulative[i] + projection.fraction * (cumulative[i + 1] - cumulative[i])
                best = SnapResult(projection.lat, projection.lon, float(along),
                                  projection.distance)

        return best

    @staticmethod
    def heading_at_distance(route: Route, distance: float) -> float:
        """
        Route heading at a given distance from the start.

        Args:
            route: Route to query
            distance: Distance from the route start (meters)

        Returns:
            Heading in radians (0 = North, clockwise), 0.0 without segments
        """
        if len(route) < 2:
            return 0.0

        index = route.segment_index(distance)
        p1 = route.points[index]
        p2 = route.points[index + 1]
        return calculate_bearing(p1.lat, p1.lon, p2.lat, p2.lon)
