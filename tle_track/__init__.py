"""
tle_track - TLE parsing and antemeridian-safe ground tracks

Modules:
    tracker: TLETracker, the ground track engine
    tle: TLE record, parser and checksum validation
    fields: Fixed-column field schema and codecs
    cache: Per-tracker memoization cache
    propagator: sgp4 propagation backend and frame transforms
    geometry: Position types, antemeridian test and bearing math
    timeutils: Epoch and timestamp conversion
    config: Constants and environment configuration
    logging_config: Logging setup for applications
    exceptions: Error taxonomy
"""

__version__ = "1.0.0"

from tle_track.cache import CrossingHistory, TLECache
from tle_track.exceptions import (
    FieldDecodeError,
    InvalidInputError,
    MalformedLineError,
    PropagationError,
    TLEError,
    ValidationError,
)
from tle_track.fields import FIELDS, FieldDescriptor, FieldType
from tle_track.geometry import Bearing, GroundPosition, SatelliteState, crosses_antemeridian
from tle_track.propagator import SGP4Propagator
from tle_track.tle import TLE, fix_checksum, is_valid_tle, line_checksum, parse_tle
from tle_track.tracker import TLETracker

__all__ = [
    "TLETracker",
    "TLE",
    "parse_tle",
    "is_valid_tle",
    "line_checksum",
    "fix_checksum",
    "FIELDS",
    "FieldDescriptor",
    "FieldType",
    "TLECache",
    "CrossingHistory",
    "SGP4Propagator",
    "GroundPosition",
    "SatelliteState",
    "Bearing",
    "crosses_antemeridian",
    "TLEError",
    "InvalidInputError",
    "FieldDecodeError",
    "MalformedLineError",
    "ValidationError",
    "PropagationError",
]
