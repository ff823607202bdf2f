"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

EARTH_RADIUS_METERS = 6_371_000

# Anti-spoofing heuristic
LOCATION_HISTORY_CAPACITY = 10
INITIAL_CONFIDENCE = 100
MIN_VALID_CONFIDENCE = 60
SUSPICIOUS_ACCURACY_METERS = 5
ACCURACY_PENALTY = 30
MAX_PLAUSIBLE_SPEED_MPS = 50
TELEPORT_PENALTY = 40
FAKE_PATTERN_PENALTY = 30
FAKE_COORDINATE_RADIUS_METERS = 1
EXCESS_ZEROS_MARKER = "00000"
FAKE_REFERENCE_COORDINATES = (
    (0.0, 0.0),
    (-6.9174639, 110.2024914),
)

# Attendance attempts per session: a cap per hour and a minimum gap.
MAX_ATTEMPTS_PER_HOUR = 5
ATTEMPT_WINDOW_SECONDS = 3600
MIN_SECONDS_BETWEEN_ATTEMPTS = 30

# Fixed policy cutoff, independent of the schedule's check-out window.
# Pending product clarification; do not merge into Schedule.check_out_end.
LATE_CHECKOUT_CUTOFF = time(17, 15, 0)

# Options handed to the browser's one-shot geolocation request.
GEOLOCATION_OPTIONS = {
    "enableHighAccuracy": True,
    "timeout": 15000,
    "maximumAge": 0,
}

LATE_ARRIVAL_VIOLATION = "Terlambat"
LATE_ARRIVAL_POINTS = 5

DEFAULT_SESSION_DAYS = 7
DEFAULT_PERMIT_LIST_LIMIT = 200
BASE_DISCIPLINE_SCORE = 100
