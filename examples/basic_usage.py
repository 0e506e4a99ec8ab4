#!/usr/bin/env python3
"""
Basic usage example of route dead reckoning.

This example follows a straight-line route using simulated IMU samples
only, without any position fixes after the start.
"""

import sys
import os
import logging
import math
import numpy as np

# Add package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from imunav import Config
from imunav.navigation import (
    RouteLoaded,
    RouteSelected,
    build_straight_line_route,
    describe_state,
    navigating,
)
from imunav.math.constants import GRAVITY_MS2


def simulate_drive(duration=120, dt=0.01, stop_at=90.0):
    """
    Simulate a vehicle accelerating, cruising and stopping.

    The phone is mounted rotated 90 degrees about the vertical axis, so
    forward motion shows up on the device X axis while the rotation
    vector sensor reports the mounting.

    Args:
        duration: Simulation duration in seconds
        dt: Time step in seconds
        stop_at: Time at which the vehicle stops

    Yields:
        (timestamp_ns, accel, gyro) tuples
    """
    gyro_noise = 0.005  # rad/s

    steps = int(duration / dt)
    for i in range(steps):
        t = i * dt

        forward = 1.2 if t < 10.0 else 0.0
        if t < stop_at:
            accel_noise = 0.05  # m/s²
            engine_vibration = 0.3  # m/s²
        else:
            # Engine off
            accel_noise = 0.01
            engine_vibration = 0.0

        vibration = engine_vibration * math.sin(2 * math.pi * 25.0 * t)
        accel = [
            forward + vibration + np.random.normal(0, accel_noise),
            np.random.normal(0, accel_noise),
            GRAVITY_MS2 + np.random.normal(0, accel_noise),
        ]
        gyro = np.random.normal(0, gyro_noise, size=3).tolist()

        yield int(t * 1e9), accel, gyro


def main():
    """Main example function."""
    logging.basicConfig(level=logging.INFO,
                        format='%(asctime)s %(name)s %(levelname)s: %(message)s')

    print("Route Dead Reckoning - Basic Usage Example")
    print("=" * 50)

    origin = (37.7749, -122.4194)
    destination = (37.7849, -122.4194)
    print(describe_state(RouteSelected(origin, destination)))

    route = build_straight_line_route(origin, destination)
    print(describe_state(RouteLoaded(route)))

    config = Config()
    projector = config.create_route_projector()
    projector.initialize(route)
    projector.update_rotation_vector([0.0, 0.0, math.sin(math.pi / 4)])

    print()
    print("Starting simulation (120 seconds at 100 Hz)...")

    last_print_time = 0
    print_interval = 10_000_000_000  # Print status every 10 seconds

    position = None
    for timestamp_ns, accel, gyro in simulate_drive():
        position = projector.process_reading(timestamp_ns, accel, gyro)

        if timestamp_ns - last_print_time >= print_interval:
            print_status(position)
            print(f"  {describe_state(navigating(route, position))}")
            last_print_time = timestamp_ns

        if projector.is_navigation_complete():
            print("Arrived at destination")
            break

    print("\nSimulation completed!")

    stats = projector.get_statistics()
    print("\n=== Final Statistics ===")
    print(f"Processed Samples: {stats['processed_samples']}")
    print(f"Skipped Samples: {stats['skipped_samples']}")
    print(f"Zero Velocity Updates: {stats['zero_velocity_updates']}")
    print(f"Distance on Route: {stats['distance_on_route']:.1f} m")
    print(f"Remaining Distance: {stats['remaining_distance']:.1f} m")
    if position is not None:
        print(f"Final Position: {position}")


def print_status(position):
    """Print current navigation status."""
    print(f"Time: {position.timestamp_ns / 1e9:.1f}s")
    print(f"  Position: [{position.latitude:.6f}, {position.longitude:.6f}]")
    print(f"  Speed:    {position.speed:5.2f} m/s ({position.speed * 3.6:5.1f} km/h)")
    print(f"  Heading:  {position.heading:6.3f} rad ({np.degrees(position.heading):6.1f}°)")
    print(f"  Distance: {position.distance_on_route:7.1f} m (confidence {position.confidence:.2f})")
    print()


if __name__ == "__main__":
    main()
