"""
Inertial dead reckoning along pre-computed routes.

This package provides platform-independent implementations of:
- Kalman-filtered speed estimation with zero-velocity updates
- Projection of travelled distance onto a route polyline
- Map matching of position fixes onto a route
- Geodesic utilities
"""

__version__ = "1.0.0"

from .estimation import SpeedEstimator
from .sensors import IMUProcessor, IMUSample, OrientationTransform
from .navigation import EstimatedPosition, MapMatcher, Route, RoutePoint, RouteProjector
from .math import haversine_distance, calculate_bearing, closest_point_on_segment
from .config import Config

__all__ = [
    "SpeedEstimator",
    "IMUProcessor",
    "IMUSample",
    "OrientationTransform",
    "EstimatedPosition",
    "MapMatcher",
    "Route",
    "RoutePoint",
    "RouteProjector",
    "haversine_distance",
    "calculate_bearing",
    "closest_point_on_segment",
    "Config",
]
