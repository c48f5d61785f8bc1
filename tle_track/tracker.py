"""
TLE Ground Track Engine

Parses and validates TLEs, reads their fixed-column fields and derives
antemeridian-safe ground tracks from a propagator.

Features:
- Field accessors for every TLE column (get_inclination, get_bstar_drag, ...)
- Satellite position and look angles from an earth observer
- Search for the last antemeridian crossing of a ground track
- Orbit tracks split at the antemeridian, ready for web maps
- Memoization of every derived value on the tracker instance

Example:
    tracker = TLETracker()
    tracker.lat_lon(iss_2017, 1501039265000)
    -> GroundPosition(lat=34.45..., lng=-117.46...)
    tracker.ground_track(iss_2017)
    -> [[(lat, lng), ...], [(lat, lng), ...], [(lat, lng), ...]]

All times are Unix timestamps in milliseconds; datetimes are accepted too.
"""

import logging
from datetime import datetime
from typing import Any, List, Optional, Tuple, Union

import numpy as np

from tle_track.cache import TLECache
from tle_track.config import (
    BEARING_OFFSET_MS,
    LONG_HORIZON_DURATION_MS,
    LONG_HORIZON_STEP_MS,
    MINUTES_PER_DAY,
    MS_PER_DAY,
    MS_PER_MINUTE,
    NEXT_ORBIT_MARGIN_MS,
    PREVIOUS_ORBIT_OFFSET_MS,
    SEARCH_INITIAL_STEP_MS,
    SEARCH_MAX_TRIES,
    SEARCH_REFINE_STEP_MS,
    SEARCH_RESOLUTION_MS,
    TRACK_MAX_DURATION_MS,
    TRACK_REFINE_STEP_MS,
    TRACK_STEP_MS,
    config,
)
from tle_track.exceptions import (
    InvalidInputError,
    MalformedLineError,
    PropagationError,
    ValidationError,
)
from tle_track.fields import FieldDescriptor, FieldValue, decode_field, get_descriptor
from tle_track.geometry import (
    Bearing,
    Geodetic,
    GroundPosition,
    SatelliteState,
    crosses_antemeridian,
    degrees_to_radians,
    initial_bearing,
    radians_to_degrees,
)
from tle_track.propagator import SGP4Propagator
from tle_track.timeutils import (
    TimeLike,
    day_of_year_to_timestamp,
    resolve_epoch_year,
    timestamp_to_datetime,
    to_timestamp_ms,
)
from tle_track.tle import TLE, is_valid_tle, line_checksum, parse_tle, raw_lines

logger = logging.getLogger(__name__)

Track = List[Tuple[float, float]]


class TLETracker:
    """
    Ground track engine for one or more satellites.

    Derived values are memoized in self.cache for the life of the tracker,
    keyed by the TLE fingerprint, so repeated queries for the same satellite
    and time never reach the propagator twice.
    """

    def __init__(
        self,
        propagator: Any = None,
        cache: Optional[TLECache] = None,
        observer_lat: Optional[float] = None,
        observer_lng: Optional[float] = None,
        observer_height_km: Optional[float] = None,
    ):
        """
        Initialize the tracker.

        Args:
            propagator: Propagation backend (default: SGP4Propagator)
            cache: Memoization cache (default: new TLECache sized from config)
            observer_lat: Default observer latitude in degrees
            observer_lng: Default observer longitude in degrees
            observer_height_km: Default observer height in km
        """
        self.propagator = propagator if propagator is not None else SGP4Propagator()
        self.cache = cache if cache is not None else TLECache(config.CACHE_MAX_ENTRIES)
        self.observer_lat = config.OBSERVER_LAT if observer_lat is None else observer_lat
        self.observer_lng = config.OBSERVER_LNG if observer_lng is None else observer_lng
        self.observer_height_km = (
            config.OBSERVER_HEIGHT_KM if observer_height_km is None else observer_height_km
        )

    # ------------------------------------------------------------------
    # Parsing and validation
    # ------------------------------------------------------------------

    def parse(self, tle_input: Any) -> TLE:
        """
        Parse a TLE from a string, list of lines, mapping or TLE record.

        Equal raw input returns the same record instance.

        Raises:
            InvalidInputError: If the input cannot be parsed
        """
        if isinstance(tle_input, TLE):
            return tle_input
        if hasattr(tle_input, "lines") and not isinstance(tle_input, str):
            return parse_tle(tle_input)

        lines = raw_lines(tle_input)
        return self.cache.get_or_compute(("parse", lines), lambda: parse_tle(lines))

    def is_valid(self, tle: Any) -> bool:
        """
        Determine if a TLE is valid, checking for the presence of line numbers
        and making sure the calculated checksums match the expected ones.
        """
        record = self.parse(tle)
        return self.cache.get_or_compute(
            ("is_valid", record.fingerprint), lambda: is_valid_tle(record)
        )

    def line_checksums(self, tle: Any) -> List[int]:
        """Calculated checksum of each TLE line."""
        return [line_checksum(line) for line in self.parse(tle).lines]

    def _require_valid(self, record: TLE) -> None:
        try:
            valid = self.is_valid(record)
        except MalformedLineError as e:
            raise ValidationError(f"TLE could not be parsed: {e}") from e

        if not valid:
            logger.warning(f"Rejected invalid TLE for {record.name}")
            raise ValidationError(f"TLE could not be parsed: {record.lines!r}")

    # ------------------------------------------------------------------
    # Field accessors
    # ------------------------------------------------------------------

    def get_field(self, field: Union[str, FieldDescriptor], tle: Any) -> FieldValue:
        """
        Read one fixed-column value from a TLE.

        Args:
            field: Field descriptor or its name (see tle_track.fields.FIELDS)
            tle: TLE in any form accepted by parse()
        """
        descriptor = field if isinstance(field, FieldDescriptor) else get_descriptor(field)
        record = self.parse(tle)
        if len(record.lines) < descriptor.line:
            raise InvalidInputError(f"TLE has no line {descriptor.line} for {descriptor.name}")
        return decode_field(descriptor, record.lines[descriptor.line - 1])

    def get_line_number1(self, tle: Any) -> int:
        return self.get_field("line_number1", tle)

    def get_satellite_number(self, tle: Any) -> int:
        """NORAD catalog number, e.g. 25544."""
        return self.get_field("satellite_number", tle)

    def get_classification(self, tle: Any) -> str:
        """'U' unclassified, 'C' classified or 'S' secret."""
        return self.get_field("classification", tle)

    def get_int_designator_year(self, tle: Any) -> int:
        return self.get_field("int_designator_year", tle)

    def get_int_designator_launch_number(self, tle: Any) -> int:
        return self.get_field("int_designator_launch_number", tle)

    def get_int_designator_piece_of_launch(self, tle: Any) -> str:
        return self.get_field("int_designator_piece_of_launch", tle)

    def get_epoch_year(self, tle: Any) -> int:
        """Two-digit epoch year, e.g. 17."""
        return self.get_field("epoch_year", tle)

    def get_epoch_day(self, tle: Any) -> float:
        """Fractional day of the year of the epoch, e.g. 206.18396726."""
        return self.get_field("epoch_day", tle)

    def get_first_time_derivative(self, tle: Any) -> float:
        return self.get_field("first_time_derivative", tle)

    def get_second_time_derivative(self, tle: Any) -> float:
        return self.get_field("second_time_derivative", tle)

    def get_bstar_drag(self, tle: Any) -> float:
        """BSTAR drag term, e.g. 0.000036771."""
        return self.get_field("bstar_drag", tle)

    def get_orbit_model(self, tle: Any) -> int:
        return self.get_field("orbit_model", tle)

    def get_tle_set_number(self, tle: Any) -> int:
        return self.get_field("tle_set_number", tle)

    def get_checksum1(self, tle: Any) -> int:
        return self.get_field("checksum1", tle)

    def get_line_number2(self, tle: Any) -> int:
        return self.get_field("line_number2", tle)

    def get_satellite_number2(self, tle: Any) -> int:
        return self.get_field("satellite_number2", tle)

    def get_inclination(self, tle: Any) -> float:
        """Inclination in degrees."""
        return self.get_field("inclination", tle)

    def get_right_ascension(self, tle: Any) -> float:
        """Right ascension of the ascending node in degrees."""
        return self.get_field("right_ascension", tle)

    def get_eccentricity(self, tle: Any) -> float:
        return self.get_field("eccentricity", tle)

    def get_perigee(self, tle: Any) -> float:
        """Argument of perigee in degrees."""
        return self.get_field("perigee", tle)

    def get_mean_anomaly(self, tle: Any) -> float:
        return self.get_field("mean_anomaly", tle)

    def get_mean_motion(self, tle: Any) -> float:
        """Revolutions per day."""
        return self.get_field("mean_motion", tle)

    def get_rev_number_at_epoch(self, tle: Any) -> int:
        return self.get_field("rev_number_at_epoch", tle)

    def get_checksum2(self, tle: Any) -> int:
        return self.get_field("checksum2", tle)

    def get_satellite_name(self, tle: Any) -> str:
        """Name from the title line of a 3-line TLE, otherwise 'Unknown'."""
        return self.parse(tle).name

    def get_epoch_timestamp(self, tle: Any) -> int:
        """
        Unix timestamp (ms) of the TLE epoch.

        Example:
            get_epoch_timestamp(iss_2017)
            -> 1500956694771
        """
        year = resolve_epoch_year(self.get_epoch_year(tle))
        return day_of_year_to_timestamp(self.get_epoch_day(tle), year)

    def get_epoch_datetime(self, tle: Any) -> datetime:
        return timestamp_to_datetime(self.get_epoch_timestamp(tle))

    def average_orbit_period_minutes(self, tle: Any) -> float:
        """Average orbit length in minutes, from the mean motion."""
        record = self.parse(tle)
        return self.cache.get_or_compute(
            ("average_orbit_period_minutes", record.fingerprint),
            lambda: MINUTES_PER_DAY / self._mean_motion(record),
        )

    def orbit_period_ms(self, tle: Any) -> int:
        """Average orbit length in milliseconds."""
        return int(MS_PER_DAY / self._mean_motion(self.parse(tle)))

    def _mean_motion(self, record: TLE) -> float:
        mean_motion = self.get_mean_motion(record)
        if not mean_motion:
            raise ValidationError(f"TLE for {record.name} has no usable mean motion")
        return mean_motion

    # ------------------------------------------------------------------
    # Position queries
    # ------------------------------------------------------------------

    def satellite_state(
        self,
        tle: Any,
        time: TimeLike = None,
        observer_lat: Optional[float] = None,
        observer_lng: Optional[float] = None,
        observer_height_km: Optional[float] = None,
    ) -> SatelliteState:
        """
        Determine satellite position and look angles from an earth observer.

        Args:
            tle: TLE in any form accepted by parse()
            time: Timestamp in ms or datetime (default: now)
            observer_lat: Observer latitude in degrees (default: tracker observer)
            observer_lng: Observer longitude in degrees (default: tracker observer)
            observer_height_km: Observer height in km (default: tracker observer)

        Returns:
            SatelliteState

        Raises:
            PropagationError: If the propagator rejects the elements or is missing
        """
        record = self.parse(tle)
        if len(record.lines) != 2:
            raise InvalidInputError(f"Expected two TLE lines, got {len(record.lines)}")

        timestamp_ms = to_timestamp_ms(time)
        observer = (
            self.observer_lat if observer_lat is None else observer_lat,
            self.observer_lng if observer_lng is None else observer_lng,
            self.observer_height_km if observer_height_km is None else observer_height_km,
        )

        key = ("satellite_state", record.fingerprint, timestamp_ms) + observer
        return self.cache.get_or_compute(
            key, lambda: self._compute_satellite_state(record, timestamp_ms, *observer)
        )

    ground_position = satellite_state

    def _propagator_handle(self, record: TLE) -> Any:
        return self.cache.get_or_compute(
            ("propagator_handle", record.fingerprint),
            lambda: self.propagator.initialize(record.line1, record.line2),
        )

    def _compute_satellite_state(
        self, record: TLE, timestamp_ms: int, obs_lat: float, obs_lng: float, obs_height: float
    ) -> SatelliteState:
        if self.propagator is None:
            raise PropagationError("No propagator available")

        handle = self._propagator_handle(record)
        position_eci, velocity_eci = self.propagator.propagate(handle, timestamp_ms)

        # Sidereal time for the inertial to earth-fixed transforms
        gmst = self.propagator.sidereal_time(timestamp_ms)
        position_ecf = self.propagator.eci_to_ecf(position_eci, gmst)
        position_gd = self.propagator.eci_to_geodetic(position_eci, gmst)

        observer_gd = Geodetic(
            degrees_to_radians(obs_lat), degrees_to_radians(obs_lng), obs_height
        )
        look_angles = self.propagator.ecf_to_look_angles(observer_gd, position_ecf)

        return SatelliteState(
            lat=radians_to_degrees(position_gd.latitude),
            lng=radians_to_degrees(position_gd.longitude),
            height_km=float(position_gd.height),
            azimuth_deg=radians_to_degrees(look_angles.azimuth),
            elevation_deg=radians_to_degrees(look_angles.elevation),
            range_km=float(look_angles.range_km),
            velocity_km_s=float(np.linalg.norm(velocity_eci)),
        )

    def lat_lon(self, tle: Any, time: TimeLike = None) -> GroundPosition:
        """
        Sub-satellite point at a time (default: now).

        Raises:
            ValidationError: If the TLE fails line-number or checksum checks
        """
        record = self.parse(tle)
        self._require_valid(record)
        return self.satellite_state(record, time).position

    def lat_lon_array(self, tle: Any, time: TimeLike = None) -> List[float]:
        """Sub-satellite point as [lat, lng]."""
        return list(self.lat_lon(tle, time))

    def lat_lon_at_epoch(self, tle: Any) -> GroundPosition:
        """Position of the satellite at the time the TLE was generated."""
        return self.lat_lon(tle, self.get_epoch_timestamp(tle))

    # ------------------------------------------------------------------
    # Antemeridian crossings
    # ------------------------------------------------------------------

    def _cached_crossing(self, record: TLE, time_ms: int) -> Tuple[bool, Optional[int]]:
        history = self.cache.crossing_history(record.fingerprint)
        if history.exhausted:
            return True, None

        orbit_ms = self.average_orbit_period_minutes(record) * MS_PER_MINUTE
        for crossing_ms in history.times_ms:
            if 0 < time_ms - crossing_ms < orbit_ms:
                return True, crossing_ms
        return False, None

    def last_antemeridian_crossing(self, tle: Any, time: TimeLike = None) -> Optional[int]:
        """
        Determine the last time (ms) the ground track crossed the antemeridian.

        Steps back from `time` until the longitude changes sides, then
        bisects the step down to half a second. Orbits whose ground track never
        reaches the antemeridian (geostationary satellites) are remembered
        and return None.

        Args:
            tle: TLE in any form accepted by parse()
            time: Reference timestamp in ms or datetime (default: now)

        Returns:
            Crossing timestamp in ms, or None if there is no crossing
        """
        record = self.parse(tle)
        time_ms = to_timestamp_ms(time)

        found, cached = self._cached_crossing(record, time_ms)
        if found:
            return cached

        step = SEARCH_INITIAL_STEP_MS
        cur_time_ms = time_ms
        last_lng = None
        tries = 0
        converged = False
        while tries < SEARCH_MAX_TRIES:
            lng = self.lat_lon(record, cur_time_ms).lng

            if crosses_antemeridian(last_lng, lng):
                # Back up and refine
                cur_time_ms += step
                step = SEARCH_REFINE_STEP_MS if step > SEARCH_REFINE_STEP_MS else step // 2
            else:
                cur_time_ms -= step
                last_lng = lng

            tries += 1
            if step < SEARCH_RESOLUTION_MS:
                converged = True
                break

        if not converged:
            logger.info(
                f"No antemeridian crossing found for {record.name} after {tries} tries"
            )
            self.cache.mark_no_crossings(record.fingerprint)
            return None

        crossing_ms = int(cur_time_ms)
        logger.debug(f"Antemeridian crossing for {record.name} at {crossing_ms} ({tries} tries)")
        self.cache.record_crossing(record.fingerprint, crossing_ms)
        return crossing_ms

    # ------------------------------------------------------------------
    # Orbit and ground tracks
    # ------------------------------------------------------------------

    def orbit_track(
        self,
        tle: Any,
        start_time_ms: Optional[int],
        step_ms: Optional[int] = None,
        max_duration_ms: Optional[int] = TRACK_MAX_DURATION_MS,
    ) -> Track:
        """
        Generate (lat, lng) pairs from start_time_ms until the ground track
        crosses the antemeridian, which is considered the end of the orbit.

        Args:
            tle: TLE in any form accepted by parse()
            start_time_ms: First sample time; None or 0 yields an empty track
            step_ms: Sampling interval (default: 1 minute)
            max_duration_ms: Stop after this long even without a crossing
                (None for no limit)
        """
        if not start_time_ms:
            return []

        record = self.parse(tle)
        start_ms = to_timestamp_ms(start_time_ms)
        step = step_ms or TRACK_STEP_MS

        key = ("orbit_track", record.fingerprint, round(start_ms / 10000), step, max_duration_ms)
        track = self.cache.get_or_compute(
            key, lambda: self._walk_orbit(record, start_ms, step, max_duration_ms)
        )
        return list(track)

    def _walk_orbit(
        self, record: TLE, start_ms: int, step: int, max_duration_ms: Optional[int]
    ) -> Track:
        lat_lngs = []
        cur_time_ms = start_ms
        last_lng = None
        while True:
            position = self.lat_lon(record, cur_time_ms)

            if crosses_antemeridian(last_lng, position.lng):
                if step <= TRACK_REFINE_STEP_MS:
                    break

                # Go back to the last point and close in at the finer step
                cur_time_ms = cur_time_ms - step + TRACK_REFINE_STEP_MS
                step = TRACK_REFINE_STEP_MS
            else:
                lat_lngs.append((position.lat, position.lng))
                cur_time_ms += step
                last_lng = position.lng

            if max_duration_ms is not None and cur_time_ms - start_ms > max_duration_ms:
                break

        return lat_lngs

    def ground_track(
        self, tle: Any, step_ms: Optional[int] = None, time: TimeLike = None
    ) -> List[Track]:
        """
        Calculate the previous, current and next orbit tracks as lists of
        (lat, lng) pairs, each running from one antemeridian crossing to the
        next.

        Satellites whose ground track never crosses the antemeridian get a
        single 24 hour track sampled every 10 minutes instead.

        Example:
            tracker.ground_track(iss_2017)
            ->
            [
                # previous orbit
                [(45.85524291891481, -179.93297540317567), ...],
                # current orbit
                [(51.26165992503701, -179.9398612198045), ...],
                # next orbit
                [(51.0273714070371, -179.9190165549038), ...],
            ]
        """
        record = self.parse(tle)
        time_ms = to_timestamp_ms(time)

        cur_orbit_start_ms = self.last_antemeridian_crossing(record, time_ms)

        if cur_orbit_start_ms is None:
            # Geosynchronous or otherwise unusual orbit
            key = ("ground_track", record.fingerprint, step_ms, round(time_ms / 1000))
            tracks = self.cache.get_or_compute(
                key,
                lambda: [
                    self.orbit_track(
                        record, time_ms, LONG_HORIZON_STEP_MS, LONG_HORIZON_DURATION_MS
                    )
                ],
            )
        else:
            key = ("ground_track", record.fingerprint, step_ms, round(cur_orbit_start_ms / 1000))
            tracks = self.cache.get_or_compute(
                key, lambda: self._three_orbits(record, cur_orbit_start_ms, step_ms)
            )

        return [list(track) for track in tracks]

    def _three_orbits(
        self, record: TLE, cur_orbit_start_ms: int, step_ms: Optional[int]
    ) -> List[Track]:
        orbit_ms = self.orbit_period_ms(record)

        last_orbit_start_ms = self.last_antemeridian_crossing(
            record, cur_orbit_start_ms - PREVIOUS_ORBIT_OFFSET_MS
        )
        next_orbit_start_ms = self.last_antemeridian_crossing(
            record, cur_orbit_start_ms + orbit_ms + NEXT_ORBIT_MARGIN_MS
        )

        orbit_start_times = (last_orbit_start_ms, cur_orbit_start_ms, next_orbit_start_ms)
        return [
            self.orbit_track(record, start_ms, step_ms, 2 * orbit_ms)
            for start_ms in orbit_start_times
        ]

    def ground_track_lng_lat(
        self, tle: Any, step_ms: Optional[int] = None, time: TimeLike = None
    ) -> List[Track]:
        """
        Same as ground_track, with points as (lng, lat) pairs for GeoJSON.
        """
        return [
            [(lng, lat) for lat, lng in track]
            for track in self.ground_track(tle, step_ms, time)
        ]

    # ------------------------------------------------------------------
    # Bearing
    # ------------------------------------------------------------------

    def bearing(self, tle: Any, time: TimeLike = None) -> Optional[Bearing]:
        """
        Compass bearing of the satellite's motion, useful for pitched map views.

        Compares positions 10 seconds apart. Returns None when the two points
        straddle the antemeridian, and the result is unreliable at the
        extremes of an orbit where latitude hardly changes.
        """
        record = self.parse(tle)
        time_ms = to_timestamp_ms(time)

        start = self.lat_lon(record, time_ms)
        end = self.lat_lon(record, time_ms + BEARING_OFFSET_MS)

        if crosses_antemeridian(start.lng, end.lng):
            logger.debug(f"No bearing for {record.name} at {time_ms}: antemeridian crossing")
            return None

        return initial_bearing(start, end)
