"""
Navigation session states.

NavigationState is a closed union of plain dataclasses. Consumers match
on it with isinstance checks covering every member.
"""

from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np

from .position import EstimatedPosition
from .route import Route
from ..math.constants import MS_TO_KMH


@dataclass(frozen=True)
class Idle:
    """No route selected."""


@dataclass(frozen=True)
class RouteSelected:
    """Origin and destination chosen, route not yet calculated."""

    origin: Tuple[float, float]       # (lat, lon)
    destination: Tuple[float, float]  # (lat, lon)


@dataclass(frozen=True)
class RouteLoaded:
    """Route calculated, navigation not started."""

    route: Route


@dataclass(frozen=True)
class Navigating:
    """Navigation in progress."""

    route: Route
    current_position: EstimatedPosition
    next_waypoint_index: int


@dataclass(frozen=True)
class Error:
    """Navigation failed."""

    message: str


NavigationState = Union[Idle, RouteSelected, RouteLoaded, Navigating, Error]


def next_waypoint_index(route: Route, distance: float) -> int:
    """
    Index of the first route point strictly ahead of a distance.

    Args:
        route: Route being followed
        distance: Distance from the route start (meters)

    Returns:
        Point index, len(route.points) once the end is passed
    """
    return int(np.searchsorted(route.cumulative_distances, distance, side='right'))


def navigating(route: Route, position: EstimatedPosition) -> Navigating:
    """Navigating state for a freshly estimated position."""
    return Navigating(route, position, next_waypoint_index(route, position.distance_on_route))


def describe_state(state: NavigationState) -> str:
    """
    Short human readable status line.

    Raises:
        TypeError: If state is not a NavigationState member
    """
    if isinstance(state, Idle):
        return "Select origin and destination"
    if isinstance(state, RouteSelected):
        return (f"Route from ({state.origin[0]:.5f}, {state.origin[1]:.5f}) "
                f"to ({state.destination[0]:.5f}, {state.destination[1]:.5f})")
    if isinstance(state, RouteLoaded):
        return (f"Route: {state.route.total_distance / 1000:.1f} km, "
                f"~{state.route.estimated_travel_time // 60} min")
    if isinstance(state, Navigating):
        remaining = state.route.total_distance - state.current_position.distance_on_route
        return (f"Navigating: {remaining / 1000:.2f} km remaining, "
                f"{state.current_position.speed * MS_TO_KMH:.0f} km/h")
    if isinstance(state, Error):
        return f"Error: {state.message}"
    raise TypeError(f"Unknown navigation state: {state!r}")
