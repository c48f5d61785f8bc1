"""
TLE Ground Track Demonstration

This script demonstrates the key capabilities of the tle_track package:
- TLE parsing, checksum validation and field access
- Satellite position and look angles from an earth observer
- Antemeridian crossing search
- Ground tracks split at the antemeridian (optionally as GeoJSON)
- Direction of motion

Usage:
    python demo.py [--satellite NAME] [--time MS] [--geojson] [--verbose]

Arguments:
    --satellite: Sample TLE to use (iss_2017, iss_2023, geostationary)
    --time: Unix timestamp in ms (default: one hour after the TLE epoch)
    --geojson: Print the ground track as a GeoJSON MultiLineString
    --verbose: Enable debug logging
"""

import argparse
import json
import logging
from typing import Any, Dict, List, Optional

from tle_track.config import MS_PER_MINUTE, SAMPLE_TLES, config
from tle_track.logging_config import configure_logging, get_logger
from tle_track.tracker import TLETracker

logger = get_logger(__name__)


def demonstrate_tle_fields(tracker: TLETracker, tle: str) -> None:
    """
    Demonstrate TLE validation and field accessors.

    Parameters
    ----------
    tracker : TLETracker
        Tracker instance
    tle : str
        Three-line TLE text
    """
    name = tracker.get_satellite_name(tle)
    logger.info(f"Parsing TLE for {name}")

    logger.info(f"Valid: {tracker.is_valid(tle)} (checksums {tracker.line_checksums(tle)})")
    logger.info(f"NORAD ID: {tracker.get_satellite_number(tle)}")
    logger.info(f"Epoch: {tracker.get_epoch_datetime(tle).isoformat()}")
    logger.info(f"Inclination: {tracker.get_inclination(tle):.4f} degrees")
    logger.info(f"RAAN: {tracker.get_right_ascension(tle):.4f} degrees")
    logger.info(f"Eccentricity: {tracker.get_eccentricity(tle):.7f}")
    logger.info(f"Mean Motion: {tracker.get_mean_motion(tle):.8f} rev/day")
    logger.info(f"B* Drag: {tracker.get_bstar_drag(tle):.5e}")
    logger.info(f"Orbit period: {tracker.average_orbit_period_minutes(tle):.2f} minutes")


def demonstrate_position(tracker: TLETracker, tle: str, time_ms: int) -> None:
    """Log position, look angles and bearing at several times."""
    logger.info(
        f"Observer at {config.OBSERVER_LAT:.4f}, {config.OBSERVER_LNG:.4f} "
        f"({config.OBSERVER_HEIGHT_KM:.3f} km)"
    )

    for minutes in (0, 15, 30, 45):
        t = time_ms + minutes * MS_PER_MINUTE
        state = tracker.satellite_state(tle, t)
        bearing = tracker.bearing(tle, t)
        heading = f"{bearing.degrees:7.2f} {bearing.compass}" if bearing else "    n/a"

        logger.info(
            f"t+{minutes:2d}min: "
            f"lat={state.lat:7.3f} lng={state.lng:8.3f} h={state.height_km:7.1f}km "
            f"az={state.azimuth_deg:6.1f} el={state.elevation_deg:6.1f} "
            f"range={state.range_km:8.1f}km bearing={heading}"
        )


def ground_track_geojson(tracks: List[List[Any]], name: str) -> Dict[str, Any]:
    """Wrap (lng, lat) tracks in a GeoJSON Feature."""
    return {
        "type": "Feature",
        "properties": {"name": name},
        "geometry": {
            "type": "MultiLineString",
            "coordinates": [[list(point) for point in track] for track in tracks],
        },
    }


def demonstrate_ground_track(
    tracker: TLETracker, tle: str, time_ms: int, geojson: bool = False
) -> Optional[Dict[str, Any]]:
    """Log the antemeridian crossing and ground track summary."""
    crossing_ms = tracker.last_antemeridian_crossing(tle, time_ms)
    if crossing_ms is None:
        logger.info("Ground track never crosses the antemeridian")
    else:
        minutes_ago = (time_ms - crossing_ms) / MS_PER_MINUTE
        logger.info(f"Last antemeridian crossing: {crossing_ms} ({minutes_ago:.1f} min earlier)")

    tracks = tracker.ground_track(tle, time=time_ms)
    labels = ("previous", "current", "next") if len(tracks) == 3 else ("day",)
    for label, track in zip(labels, tracks):
        if track:
            logger.info(
                f"{label:>8} orbit: {len(track)} points, "
                f"from ({track[0][0]:.2f}, {track[0][1]:.2f}) "
                f"to ({track[-1][0]:.2f}, {track[-1][1]:.2f})"
            )

    if geojson:
        return ground_track_geojson(
            tracker.ground_track_lng_lat(tle, time=time_ms), tracker.get_satellite_name(tle)
        )
    return None


def main() -> None:
    """Main demonstration entry point."""
    parser = argparse.ArgumentParser(description="TLE Ground Track Demonstration")
    parser.add_argument(
        "--satellite",
        choices=sorted(SAMPLE_TLES),
        default="iss_2017",
        help="Sample TLE to use",
    )
    parser.add_argument("--time", type=int, help="Unix timestamp in ms")
    parser.add_argument("--geojson", action="store_true", help="Print ground track as GeoJSON")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    configure_logging(level=logging.DEBUG if args.verbose else None)

    sample = SAMPLE_TLES[args.satellite]
    tle = "\n".join([sample["name"], sample["line1"], sample["line2"]])

    tracker = TLETracker()
    time_ms = args.time if args.time is not None else tracker.get_epoch_timestamp(tle) + 60 * MS_PER_MINUTE

    logger.info("TLE Ground Track Demonstration")
    logger.info("=" * 60)

    demonstrate_tle_fields(tracker, tle)

    logger.info("")
    demonstrate_position(tracker, tle, time_ms)

    logger.info("")
    feature = demonstrate_ground_track(tracker, tle, time_ms, geojson=args.geojson)

    logger.info("=" * 60)
    logger.info(f"Cache: {tracker.cache.stats()}")

    if feature is not None:
        print(json.dumps(feature))


if __name__ == "__main__":
    main()
