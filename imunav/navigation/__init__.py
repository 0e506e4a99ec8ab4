"""
Route model, dead reckoning along routes and map matching.
"""

from .route import Route, RoutePoint, build_straight_line_route
from .position import EstimatedPosition
from .projector import RouteProjector, NavigationSessionState, confidence_for_speed
from .map_matcher import MapMatcher, SnapResult
from .state import (
    NavigationState,
    Idle,
    RouteSelected,
    RouteLoaded,
    Navigating,
    Error,
    describe_state,
    navigating,
    next_waypoint_index,
)

__all__ = [
    "Route",
    "RoutePoint",
    "build_straight_line_route",
    "EstimatedPosition",
    "RouteProjector",
    "NavigationSessionState",
    "confidence_for_speed",
    "MapMatcher",
    "SnapResult",
    "NavigationState",
    "Idle",
    "RouteSelected",
    "RouteLoaded",
    "Navigating",
    "Error",
    "describe_state",
    "navigating",
    "next_waypoint_index",
]
