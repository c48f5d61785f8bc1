"""
Ground Track Configuration and Constants

This module contains sample TLE data, physical constants and the tuning values
used by the antemeridian search and ground-track builders.

Constants:
    WGS-72 Earth shape as specified by Vallado et al. (2006, AAS 06-675),
    matching the gravity model sgp4 uses when parsing TLE lines.

Sample TLE Data:
    Hardcoded ISS and geostationary TLE sets for demonstrations and testing.
    Propagation accuracy degrades with distance from the epoch, so use these
    only near their epochs or where the exact position does not matter.

Environment Overrides:
    TLE_TRACK_OBSERVER_LAT       Default observer latitude (degrees)
    TLE_TRACK_OBSERVER_LNG       Default observer longitude (degrees)
    TLE_TRACK_OBSERVER_HEIGHT_KM Default observer height above the ellipsoid (km)
    TLE_TRACK_CACHE_MAX_ENTRIES  Bound the memoization cache (unbounded if unset)
    TLE_TRACK_LOG_LEVEL          Log level used by demo.py

References:
    Vallado, D. A., Crawford, P., Hujsak, R., & Kelso, T. S. (2006).
    Revisiting Spacetrack Report #3. AIAA 2006-6753.
"""

import os
from typing import Dict, Optional

# WGS-72 Earth shape (per Vallado et al. 2006, AAS 06-675)
EARTH_RADIUS_KM: float = 6378.135  # Earth equatorial radius (km)
EARTH_FLATTENING: float = 1.0 / 298.26

# Time
MS_PER_SECOND: int = 1000
MS_PER_MINUTE: int = 60 * MS_PER_SECOND
MS_PER_DAY: int = 24 * 60 * MS_PER_MINUTE
MINUTES_PER_DAY: float = 1440.0

# Antemeridian crossing search
SEARCH_INITIAL_STEP_MS: int = 10 * MS_PER_MINUTE
SEARCH_REFINE_STEP_MS: int = 20 * MS_PER_SECOND  # first refinement clamps to this
SEARCH_RESOLUTION_MS: int = 500
SEARCH_MAX_TRIES: int = 1000
NEAR_ANTEMERIDIAN_DEG: float = 100.0

# Orbit tracks
TRACK_STEP_MS: int = MS_PER_MINUTE
TRACK_REFINE_STEP_MS: int = 500
TRACK_MAX_DURATION_MS: int = 100 * MS_PER_MINUTE
NEXT_ORBIT_MARGIN_MS: int = 30 * MS_PER_MINUTE
PREVIOUS_ORBIT_OFFSET_MS: int = 10 * MS_PER_SECOND
LONG_HORIZON_STEP_MS: int = 10 * MS_PER_MINUTE
LONG_HORIZON_DURATION_MS: int = MS_PER_DAY

# Bearing
BEARING_OFFSET_MS: int = 10 * MS_PER_SECOND

UNKNOWN_SATELLITE_NAME: str = "Unknown"


def _optional_int(value: Optional[str]) -> Optional[int]:
    return int(value) if value else None


class TrackerConfig:
    OBSERVER_LAT = float(os.getenv('TLE_TRACK_OBSERVER_LAT', '36.9613422'))
    OBSERVER_LNG = float(os.getenv('TLE_TRACK_OBSERVER_LNG', '-122.0308'))
    OBSERVER_HEIGHT_KM = float(os.getenv('TLE_TRACK_OBSERVER_HEIGHT_KM', '0.370'))
    CACHE_MAX_ENTRIES = _optional_int(os.getenv('TLE_TRACK_CACHE_MAX_ENTRIES'))
    LOG_LEVEL = os.getenv('TLE_TRACK_LOG_LEVEL', 'INFO').upper()


config = TrackerConfig()

# Sample TLE sets
# ISS 2017 is the set most ground-track examples are written against.
SAMPLE_TLES: Dict[str, Dict[str, str]] = {
    'iss_2017': {
        'name': 'ISS (ZARYA)',
        'line1': '1 25544U 98067A   17206.18396726  .00001961  00000-0  36771-4 0  9993',
        'line2': '2 25544  51.6400 208.9163 0006317  69.9862  25.2906 15.54225995 67660',
    },
    'iss_2023': {
        'name': 'ISS (ZARYA)',
        'line1': '1 25544U 98067A   23259.57580000  .00012022  00000-0  21844-3 0  9995',
        'line2': '2 25544  51.6416 220.9944 0004263 122.0101 312.2755 15.49541986415598',
    },
    # Near-zero inclination, ~1 rev/day, parked near 75 W
    'geostationary': {
        'name': 'GOES 16',
        'line1': '1 41866U 16071A   23259.50000000 -.00000099  00000-0  00000-0 0  9995',
        'line2': '2 41866   0.0500  90.0000 0001000 270.0000 100.0000  1.00271000 25000',
    },
}
