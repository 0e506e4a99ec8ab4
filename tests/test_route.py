#!/usr/bin/env python3
"""
Unit tests for the route model.
"""

import math
import unittest
import numpy as np
import sys
import os

# Add package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from imunav.navigation import Route, RoutePoint, build_straight_line_route
from imunav.math import haversine_distance
from imunav.math.constants import EARTH_RADIUS_M

# Latitude step of 100 m along a meridian
LAT_STEP_100M = math.degrees(100.0 / EARTH_RADIUS_M)


def linear_segment_index(route, distance):
    """Reference segment lookup by linear scan."""
    cumulative = route.cumulative_distances
    for i in range(len(cumulative)):
        if cumulative[i] >= distance:
            return min(max(i - 1, 0), len(cumulative) - 2)
    return len(cumulative) - 2


class TestRoute(unittest.TestCase):
    """Test Route construction and lookup."""

    def setUp(self):
        self.route = Route.from_coordinates([
            (0.0, 0.0),
            (LAT_STEP_100M, 0.0),
            (2 * LAT_STEP_100M, 0.0),
        ])

    def test_from_coordinates(self):
        """Distances and total are measured from the geometry."""
        self.assertEqual(len(self.route), 3)
        self.assertAlmostEqual(self.route.total_distance, 200.0, places=6)
        self.assertAlmostEqual(self.route.points[1].distance_from_start, 100.0, places=6)
        np.testing.assert_array_almost_equal(self.route.cumulative_distances, [0.0, 100.0, 200.0])
        self.assertEqual(self.route.estimated_travel_time, int(self.route.total_distance / 11.1))

    def test_total_matches_segment_sum(self):
        route = Route.from_coordinates([(37.77, -122.42), (37.78, -122.41), (37.79, -122.43)])
        segments = sum(
            haversine_distance(p1.lat, p1.lon, p2.lat, p2.lon)
            for p1, p2 in zip(route.points, route.points[1:])
        )
        self.assertAlmostEqual(route.total_distance, segments, places=6)

    def test_cumulative_distances_read_only(self):
        with self.assertRaises(ValueError):
            self.route.cumulative_distances[0] = 5.0

    def test_decreasing_distances_rejected(self):
        with self.assertRaises(ValueError):
            Route([RoutePoint(0.0, 0.0, 10.0), RoutePoint(0.0, 0.001, 5.0)], 10.0)

    def test_empty_route(self):
        route = Route.from_coordinates([])
        self.assertTrue(route.is_empty())
        self.assertEqual(route.total_distance, 0.0)
        self.assertEqual(len(route.cumulative_distances), 0)

    def test_from_dict(self):
        route = Route.from_dict({
            "points": [
                {"lat": 0.0, "lon": 0.0, "distanceFromStart": 0.0},
                {"lat": LAT_STEP_100M, "lon": 0.0, "distanceFromStart": 100.0},
            ],
            "totalDistanceMeters": 101.5,
            "estimatedTravelTimeSeconds": 12
        })

        self.assertEqual(len(route), 2)
        self.assertEqual(route.total_distance, 101.5)
        self.assertEqual(route.estimated_travel_time, 12)
        self.assertAlmostEqual(route.cumulative_distances[-1], 100.0, places=6)

    def test_from_dict_missing_field(self):
        with self.assertRaises(ValueError):
            Route.from_dict({"points": []})

    def test_segment_index_boundaries(self):
        self.assertEqual(self.route.segment_index(0.0), 0)
        self.assertEqual(self.route.segment_index(-5.0), 0)
        self.assertEqual(self.route.segment_index(50.0), 0)
        self.assertEqual(self.route.segment_index(150.0), 1)
        self.assertEqual(self.route.segment_index(500.0), 1)

    def test_segment_index_matches_linear_scan(self):
        """Binary search agrees with a linear scan for arbitrary distances."""
        rng = np.random.RandomState(7)
        coords = np.cumsum(rng.uniform(-0.001, 0.002, size=(25, 2)), axis=0)
        route = Route.from_coordinates([tuple(c) for c in coords])

        distances = np.concatenate((
            rng.uniform(-10.0, route.total_distance + 10.0, size=200),
            route.cumulative_distances,
        ))
        for d in distances:
            self.assertEqual(route.segment_index(d), linear_segment_index(route, d), msg=f"d={d}")

    def test_segment_index_needs_segments(self):
        route = Route.from_coordinates([(1.0, 1.0)])
        with self.assertRaises(ValueError):
            route.segment_index(0.0)

    def test_segment_length(self):
        self.assertAlmostEqual(self.route.segment_length(1), 100.0, places=6)


class TestStraightLineRoute(unittest.TestCase):
    """Test the straight-line fallback route."""

    def test_intermediate_points(self):
        origin = (0.0, 0.0)
        destination = (10.5 * LAT_STEP_100M, 0.0)
        route = build_straight_line_route(origin, destination)

        self.assertEqual(len(route), 11)
        self.assertAlmostEqual(route.total_distance, 1050.0, places=6)
        self.assertEqual(route.points[0].lat, 0.0)
        self.assertAlmostEqual(route.points[-1].lat, destination[0], places=12)
        self.assertAlmostEqual(route.points[5].distance_from_start, 525.0, places=6)
        self.assertEqual(route.estimated_travel_time, int(route.total_distance / 11.1))

    def test_short_route_has_two_segments(self):
        route = build_straight_line_route((0.0, 0.0), (0.0, 0.0003))
        self.assertEqual(len(route), 3)


if __name__ == '__main__':
    unittest.main()
