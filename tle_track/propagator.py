"""
SGP4 Propagator

Default propagation backend for TLETracker, built on the proven sgp4 library
(based on Vallado et al. 2006). sgp4 provides the TEME position and velocity;
the frame helpers here turn them into earth-fixed, geodetic and observer
look-angle coordinates.

Any object with the same methods can be passed to TLETracker instead:

    initialize(line1, line2) -> handle
    propagate(handle, timestamp_ms) -> (position_km, velocity_km_s)
    sidereal_time(timestamp_ms) -> gmst (radians)
    eci_to_ecf(position, gmst) -> position_ecf
    eci_to_geodetic(position, gmst) -> Geodetic
    ecf_to_look_angles(observer: Geodetic, position_ecf) -> LookAngles

References:
- Vallado, D. A., et al. (2006). "Revisiting Spacetrack Report #3." AIAA 2006-6753
- Rhodes, B. sgp4 library: https://pypi.org/project/sgp4/
"""

import logging
import math
from typing import Tuple

import numpy as np
from sgp4.api import Satrec
from sgp4.propagation import gstime

from tle_track.config import EARTH_FLATTENING, EARTH_RADIUS_KM
from tle_track.exceptions import PropagationError
from tle_track.geometry import Geodetic, LookAngles, wrap_longitude
from tle_track.timeutils import timestamp_to_jd_fr

logger = logging.getLogger(__name__)


# SGP4 error code meanings
SGP4_ERROR_CODES = {
    0: "No error",
    1: "Mean eccentricity < 0.0 or > 1.0",
    2: "Mean motion < 0.0",
    3: "Perturbed eccentricity < 0.0 or > 1.0",
    4: "Semi-latus rectum < 0.0",
    5: "Satellite has decayed",
    6: "Satellite has decayed (low altitude)",
}

_E2 = 2.0 * EARTH_FLATTENING - EARTH_FLATTENING * EARTH_FLATTENING
_B = EARTH_RADIUS_KM * (1.0 - EARTH_FLATTENING)


class SGP4Propagator:
    """Propagator collaborator backed by sgp4.api.Satrec."""

    def initialize(self, line1: str, line2: str) -> Satrec:
        """Load a satellite record from TLE lines."""
        try:
            return Satrec.twoline2rv(line1, line2)
        except ValueError as e:
            raise PropagationError(f"Failed to load satellite: {e}") from e

    def propagate(self, satrec: Satrec, timestamp_ms: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Propagate to a timestamp.

        Returns:
            (position_km, velocity_km_s) in the TEME frame

        Raises:
            PropagationError: If sgp4 reports a non-zero error code
        """
        jd, fr = timestamp_to_jd_fr(timestamp_ms)
        error, position, velocity = satrec.sgp4(jd, fr)

        if error != 0:
            message = SGP4_ERROR_CODES.get(error, f"Unknown error code {error}")
            logger.warning(f"SGP4 error {error} for satellite {satrec.satnum} at {timestamp_ms}: {message}")
            raise PropagationError(f"SGP4 error {error}: {message}", error_code=error)

        return np.array(position), np.array(velocity)

    def sidereal_time(self, timestamp_ms: int) -> float:
        """Greenwich Mean Sidereal Time in radians."""
        jd, fr = timestamp_to_jd_fr(timestamp_ms)
        return gstime(jd + fr)

    def eci_to_ecf(self, position: np.ndarray, gmst: float) -> np.ndarray:
        """Rotate a TEME position into the earth-fixed frame."""
        cos_g = math.cos(gmst)
        sin_g = math.sin(gmst)
        return np.array([
            cos_g * position[0] + sin_g * position[1],
            -sin_g * position[0] + cos_g * position[1],
            position[2],
        ])

    def eci_to_geodetic(self, position: np.ndarray, gmst: float) -> Geodetic:
        """
        TEME position to geodetic coordinates using Bowring's method.

        Returns:
            Geodetic(latitude rad, longitude rad in [-pi, pi], height km)
        """
        x, y, z = position
        longitude = wrap_longitude(math.atan2(y, x) - gmst)

        # Distance from z-axis
        p = math.sqrt(x * x + y * y)

        # Handle pole cases
        if p < 1e-10:
            latitude = math.pi / 2.0 if z > 0 else -math.pi / 2.0
            return Geodetic(latitude, longitude, abs(z) - _B)

        ep2 = _E2 / (1.0 - _E2)
        theta = math.atan2(z * EARTH_RADIUS_KM, p * _B)

        # Usually converges in 2-3 iterations
        for _ in range(5):
            sin_theta = math.sin(theta)
            cos_theta = math.cos(theta)

            latitude = math.atan2(
                z + ep2 * _B * sin_theta ** 3,
                p - _E2 * EARTH_RADIUS_KM * cos_theta ** 3,
            )

            # Reduced latitude for the next pass
            new_theta = math.atan2((1.0 - EARTH_FLATTENING) * math.sin(latitude), math.cos(latitude))
            if abs(new_theta - theta) < 1e-12:
                break
            theta = new_theta

        cos_lat = math.cos(latitude)
        sin_lat = math.sin(latitude)
        n = EARTH_RADIUS_KM / math.sqrt(1.0 - _E2 * sin_lat * sin_lat)

        if cos_lat > 1e-10:
            height = p / cos_lat - n
        else:
            height = z / sin_lat - n * (1.0 - _E2)

        return Geodetic(latitude, longitude, height)

    def geodetic_to_ecf(self, observer: Geodetic) -> np.ndarray:
        """Geodetic (radians, km) to earth-fixed position (km)."""
        sin_lat = math.sin(observer.latitude)
        cos_lat = math.cos(observer.latitude)
        n = EARTH_RADIUS_KM / math.sqrt(1.0 - _E2 * sin_lat * sin_lat)
        return np.array([
            (n + observer.height) * cos_lat * math.cos(observer.longitude),
            (n + observer.height) * cos_lat * math.sin(observer.longitude),
            (n * (1.0 - _E2) + observer.height) * sin_lat,
        ])

    def ecf_to_look_angles(self, observer: Geodetic, position_ecf: np.ndarray) -> LookAngles:
        """Azimuth, elevation and range from an observer to an earth-fixed position."""
        dx = position_ecf - self.geodetic_to_ecf(observer)

        sl, cl = math.sin(observer.latitude), math.cos(observer.latitude)
        sn, cn = math.sin(observer.longitude), math.cos(observer.longitude)

        east = -sn * dx[0] + cn * dx[1]
        north = -sl * cn * dx[0] - sl * sn * dx[1] + cl * dx[2]
        up = cl * cn * dx[0] + cl * sn * dx[1] + sl * dx[2]

        range_km = float(np.sqrt(east ** 2 + north ** 2 + up ** 2))
        elevation = math.atan2(up, math.sqrt(east ** 2 + north ** 2))
        azimuth = math.atan2(east, north) % (2.0 * math.pi)

        return LookAngles(azimuth, elevation, range_km)
