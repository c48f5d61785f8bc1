"""
Ground-track geometry: value types and pure spherical helpers.
"""

import math
from dataclasses import dataclass
from typing import NamedTuple, Optional

from tle_track.config import NEAR_ANTEMERIDIAN_DEG


class GroundPosition(NamedTuple):
    """Sub-satellite point in degrees."""

    lat: float
    lng: float


class Geodetic(NamedTuple):
    """Geodetic position; angles in radians, height in km."""

    latitude: float
    longitude: float
    height: float


class LookAngles(NamedTuple):
    """Observer look angles; angles in radians, range in km."""

    azimuth: float
    elevation: float
    range_km: float


@dataclass(frozen=True)
class SatelliteState:
    """
    Satellite position and look angles from an earth observer.

    Attributes:
        lat: Sub-satellite latitude (degrees)
        lng: Sub-satellite longitude (degrees)
        height_km: Satellite altitude above the ellipsoid (km)
        azimuth_deg: Compass heading from the observer (0 = north, 90 = east)
        elevation_deg: Elevation above the observer's horizon (90 = overhead)
        range_km: Distance from the observer to the satellite (km)
        velocity_km_s: Inertial speed (km/s)
    """

    lat: float
    lng: float
    height_km: float
    azimuth_deg: float
    elevation_deg: float
    range_km: float
    velocity_km_s: float

    @property
    def position(self) -> GroundPosition:
        return GroundPosition(self.lat, self.lng)


@dataclass(frozen=True)
class Bearing:
    """Compass bearing of the satellite's motion, e.g. Bearing(-147.2, 'SW')."""

    degrees: float
    compass: str


def radians_to_degrees(radians: float) -> float:
    return radians * (180.0 / math.pi)


def degrees_to_radians(degrees: float) -> float:
    return degrees * (math.pi / 180.0)


def wrap_longitude(radians: float) -> float:
    """Wrap a longitude in radians to [-pi, pi]."""
    return (radians + math.pi) % (2.0 * math.pi) - math.pi


def crosses_antemeridian(longitude1: Optional[float], longitude2: Optional[float]) -> bool:
    """
    Determine if a pair of longitudes (degrees) lies on both sides of the
    antemeridian.

    A sign change only counts when at least one longitude is more than
    100 degrees from the prime meridian, where sign changes are harmless.
    """
    if longitude1 is None or longitude2 is None:
        return False

    if (longitude1 >= 0) == (longitude2 >= 0):
        return False

    return abs(longitude1) > NEAR_ANTEMERIDIAN_DEG or abs(longitude2) > NEAR_ANTEMERIDIAN_DEG


def initial_bearing(start: GroundPosition, end: GroundPosition) -> Bearing:
    """
    Initial great-circle bearing from start to end.

    The compass label comes from the signs of the latitude and longitude
    deltas, so it is only meaningful for closely spaced points that do not
    straddle the antemeridian.
    """
    lat1 = degrees_to_radians(start.lat)
    lat2 = degrees_to_radians(end.lat)
    lon1 = degrees_to_radians(start.lng)
    lon2 = degrees_to_radians(end.lng)

    north_south = "S" if lat1 >= lat2 else "N"
    east_west = "W" if lon1 >= lon2 else "E"

    y = math.sin(lon2 - lon1) * math.cos(lat2)
    x = (math.cos(lat1) * math.sin(lat2)) - (
        math.sin(lat1) * math.cos(lat2) * math.cos(lon2 - lon1)
    )

    return Bearing(
        degrees=radians_to_degrees(math.atan2(y, x)),
        compass=f"{north_south}{east_west}",
    )
