"""
Mathematical and geodesic utility functions for route dead reckoning.
"""

import math
from typing import NamedTuple

from .constants import EARTH_RADIUS_M


class SegmentProjection(NamedTuple):
    """Closest point on a route segment to a query point."""

    lat: float
    lon: float
    fraction: float  # Position along the segment in [0, 1]
    distance: float  # Great-circle distance from the query point (meters)


def wrap_angle(angle):
    """
    Wrap angle to [0, 2*pi) range.

    Args:
        angle (float): Angle in radians

    Returns:
        float: Wrapped angle in [0, 2*pi)
    """
    return angle % (2 * math.pi)


def haversine_distance(lat1, lon1, lat2, lon2):
    """
    Calculate the great circle distance between two points on Earth.

    Args:
        lat1, lon1: Latitude and longitude of first point (degrees)
        lat2, lon2: Latitude and longitude of second point (degrees)

    Returns:
        float: Distance in meters
    """
    # Convert to radians
    lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])

    # Haversine formula
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = math.sin(dlat/2)**2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon/2)**2
    c = 2 * math.asin(math.sqrt(min(1.0, a)))

    return EARTH_RADIUS_M * c


def calculate_bearing(lat1, lon1, lat2, lon2):
    """
    Calculate the initial bearing from point 1 to point 2.

    The bearing is measured clockwise from true North. When both points
    coincide the direction is undefined and 0.0 (North) is returned.

    Args:
        lat1, lon1: Starting latitude and longitude (degrees)
        lat2, lon2: Ending latitude and longitude (degrees)

    Returns:
        float: Bearing in radians [0, 2*pi)
    """
    # Convert to radians
    lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])

    dlon = lon2 - lon1

    y = math.sin(dlon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)

    if x == 0.0 and y == 0.0:
        return 0.0

    bearing = math.atan2(y, x)

    # Convert to [0, 2*pi) range
    return wrap_angle(bearing)


def closest_point_on_segment(lat, lon, lat1, lon1, lat2, lon2) -> SegmentProjection:
    """
    Project a point onto the segment between two route points.

    The projection parameter is computed in a local equirectangular plane
    (longitudes scaled by the cosine of the segment's mean latitude) and
    clamped to [0, 1], so the result never extends past either endpoint.
    The returned distance is the true great-circle distance to the clamped
    point.

    Args:
        lat, lon: Query point (degrees)
        lat1, lon1: Segment start (degrees)
        lat2, lon2: Segment end (degrees)

    Returns:
        SegmentProjection with the closest point, its fraction along the
        segment and its distance from the query point
    """
    lon_scale = math.cos(math.radians((lat1 + lat2) / 2.0))

    dx = (lon2 - lon1) * lon_scale
    dy = lat2 - lat1
    length_sq = dx * dx + dy * dy

    if length_sq == 0.0:
        # Degenerate segment, both endpoints coincide
        return SegmentProjection(lat1, lon1, 0.0, haversine_distance(lat, lon, lat1, lon1))

    px = (lon - lon1) * lon_scale
    py = lat - lat1
    t = (px * dx + py * dy) / length_sq
    t = min(1.0, max(0.0, t))

    closest_lat = lat1 + t * (lat2 - lat1)
    closest_lon = lon1 + t * (lon2 - lon1)

    return SegmentProjection(
        closest_lat,
        closest_lon,
        t,
        haversine_distance(lat, lon, closest_lat, closest_lon)
    )
