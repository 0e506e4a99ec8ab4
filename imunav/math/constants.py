"""
Mathematical and physical constants for route dead reckoning.
"""

# Earth parameters
EARTH_RADIUS_M = 6371000.0  # Mean Earth radius in meters
GRAVITY_MS2 = 9.80665       # Standard gravity in m/s²

# Conversion factors
MS_TO_KMH = 3.6
NANOS_PER_SECOND = 1_000_000_000

# Speed limits
MAX_SPEED_MS = 50.0  # ~180 km/h

# Zero velocity detection
ZVU_ACCEL_THRESHOLD = 0.4   # m/s², horizontal acceleration below this is "still"
ZVU_GYRO_THRESHOLD = 0.08   # rad/s, angular rate below this is "still"
ZVU_DWELL_S = 0.5           # Continuous low-motion time before declaring a stop

# Speed Kalman filter
PROCESS_NOISE = 0.5               # Speed variance growth per second
MEASUREMENT_NOISE = 2.0           # Variance of the vibration speed hint
INITIAL_SPEED_VARIANCE = 10.0
STATIONARY_SPEED_VARIANCE = 0.1   # Variance after a zero-velocity update

# Vibration speed hint (rough heuristic, needs per-vehicle tuning)
VIBRATION_WINDOW_SIZE = 100
VIBRATION_MIN_SAMPLES = 20
VIBRATION_SPEED_SCALE = 1.5       # m/s of speed per m/s² of acceleration std

# Sample stream sanity
MAX_SAMPLE_GAP_S = 0.5

# Route projection
ARRIVAL_TOLERANCE_M = 20.0
MAX_SNAP_DISTANCE_M = 50.0
MAX_CONFIDENCE = 1.0

# Confidence tiers: (upper speed bound in m/s, confidence)
STATIONARY_CONFIDENCE = 0.95
CONFIDENCE_TIERS = (
    (5.0, 0.8),
    (20.0, 0.6),
)
HIGH_SPEED_CONFIDENCE = 0.4

# Straight-line fallback routes
FALLBACK_POINT_SPACING_M = 100.0
FALLBACK_AVERAGE_SPEED_MS = 11.1  # 40 km/h
