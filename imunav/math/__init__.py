"""
Mathematical and geodesic utilities for route dead reckoning.
"""

from .utils import (
    SegmentProjection,
    wrap_angle,
    haversine_distance,
    calculate_bearing,
    closest_point_on_segment,
)
from .constants import *

__all__ = [
    "SegmentProjection",
    "wrap_angle",
    "haversine_distance",
    "calculate_bearing",
    "closest_point_on_segment",
]
