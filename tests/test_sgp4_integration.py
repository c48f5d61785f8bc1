"""
Integration Tests with the sgp4 Propagator

Tests TLETracker end to end against the sgp4 library, using ISS and
geostationary TLE sets near their epochs.

Run with:
    python -m pytest tests/test_sgp4_integration.py -v
"""

import math
import unittest
from unittest import mock

from sgp4.api import Satrec

from tle_track.config import MS_PER_DAY, MS_PER_MINUTE, SAMPLE_TLES
from tle_track.exceptions import PropagationError
from tle_track.geometry import crosses_antemeridian
from tle_track.propagator import SGP4Propagator
from tle_track.timeutils import day_of_year_to_timestamp
from tle_track.tracker import TLETracker


def tle_text(key):
    sample = SAMPLE_TLES[key]
    return "\n".join([sample["name"], sample["line1"], sample["line2"]])


class TestISSPropagation(unittest.TestCase):
    """Test positions and tracks of the ISS."""

    def setUp(self):
        self.tracker = TLETracker()
        self.tle = tle_text("iss_2023")
        self.epoch_ms = self.tracker.get_epoch_timestamp(self.tle)

    def test_satellite_state_is_plausible(self):
        """Test that the ISS state is within its known envelope."""
        state = self.tracker.satellite_state(self.tle, self.epoch_ms + 10 * MS_PER_MINUTE)

        self.assertLessEqual(abs(state.lat), 52.0)
        self.assertLessEqual(abs(state.lng), 180.0)
        self.assertGreater(state.height_km, 370.0)
        self.assertLess(state.height_km, 460.0)
        self.assertGreater(state.velocity_km_s, 7.5)
        self.assertLess(state.velocity_km_s, 7.8)
        self.assertGreaterEqual(state.azimuth_deg, 0.0)
        self.assertLess(state.azimuth_deg, 360.0)
        self.assertGreaterEqual(state.elevation_deg, -90.0)
        self.assertLessEqual(state.elevation_deg, 90.0)
        self.assertGreater(state.range_km, 0.0)

    def test_height_matches_sgp4_radius(self):
        """Test that the height agrees with the sgp4 position vector."""
        time_ms = self.epoch_ms + 25 * MS_PER_MINUTE
        state = self.tracker.satellite_state(self.tle, time_ms)

        propagator = SGP4Propagator()
        satrec = propagator.initialize(SAMPLE_TLES["iss_2023"]["line1"], SAMPLE_TLES["iss_2023"]["line2"])
        position, _ = propagator.propagate(satrec, time_ms)
        radius = math.sqrt(sum(component ** 2 for component in position))

        # Within the spread of the ellipsoid radius
        self.assertLess(abs(radius - state.height_km - 6378.135), 25.0)

    def test_lat_lon_matches_state(self):
        """Test that lat_lon agrees with satellite_state."""
        time_ms = self.epoch_ms + 5 * MS_PER_MINUTE
        position = self.tracker.lat_lon(self.tle, time_ms)
        state = self.tracker.satellite_state(self.tle, time_ms)
        self.assertEqual(position, state.position)

    def test_consecutive_crossings_are_one_orbit_apart(self):
        """Test that consecutive crossings are about one period apart."""
        period_ms = self.tracker.orbit_period_ms(self.tle)

        first = self.tracker.last_antemeridian_crossing(self.tle, self.epoch_ms + 3 * 60 * MS_PER_MINUTE)
        self.assertIsNotNone(first)
        second = self.tracker.last_antemeridian_crossing(self.tle, first + period_ms + 30 * MS_PER_MINUTE)

        self.assertGreater(second, first)
        self.assertGreater(second - first, 0.8 * period_ms)
        self.assertLess(second - first, 1.3 * period_ms)

    def test_crossing_is_at_the_antemeridian(self):
        """Test that the longitude is close to 180 at a crossing."""
        crossing = self.tracker.last_antemeridian_crossing(self.tle, self.epoch_ms + 60 * MS_PER_MINUTE)

        self.assertLessEqual(crossing, self.epoch_ms + 60 * MS_PER_MINUTE)
        lng = self.tracker.lat_lon(self.tle, crossing).lng
        self.assertLess(abs(abs(lng) - 180.0), 0.5)

        before = self.tracker.lat_lon(self.tle, crossing - 1000).lng
        self.assertTrue(crosses_antemeridian(before, lng))

    def test_ground_track(self):
        """Test the ISS ground track."""
        tracks = self.tracker.ground_track(self.tle, time=self.epoch_ms + 3 * 60 * MS_PER_MINUTE)
        self.assertEqual(len(tracks), 3)

        for track in tracks:
            self.assertGreater(len(track), 80)
            for (lat, lng1), (_, lng2) in zip(track, track[1:]):
                self.assertLessEqual(abs(lat), 52.0)
                self.assertFalse(crosses_antemeridian(lng1, lng2))

    def test_bearing(self):
        """Test that the ISS ground track heads east between crossings."""
        crossing = self.tracker.last_antemeridian_crossing(self.tle, self.epoch_ms + 3 * 60 * MS_PER_MINUTE)
        self.assertIsNotNone(crossing)

        bearing = self.tracker.bearing(self.tle, crossing + 20 * MS_PER_MINUTE)

        self.assertIsNotNone(bearing)
        self.assertTrue(bearing.compass.endswith("E"))
        self.assertGreater(bearing.degrees, 0.0)
        self.assertLess(bearing.degrees, 180.0)

    def test_reference_position(self):
        """Test the ISS 2017 position and look angles from southern California."""
        state = self.tracker.satellite_state(
            tle_text("iss_2017"), 1501039265000, 34.243889, -116.911389, 0.0
        )

        self.assertAlmostEqual(state.lat, 34.4511, delta=0.05)
        self.assertAlmostEqual(state.lng, -117.4618, delta=0.05)
        self.assertAlmostEqual(state.azimuth_deg, 294.58, delta=0.5)
        self.assertAlmostEqual(state.elevation_deg, 81.64, delta=0.1)
        self.assertAlmostEqual(state.range_km, 406.6, delta=1.0)

    def test_reference_lat_lon(self):
        """Test lat_lon at the ISS 2017 reference time."""
        position = self.tracker.lat_lon(tle_text("iss_2017"), 1501039265000)

        self.assertAlmostEqual(position.lat, 34.4511, delta=0.05)
        self.assertAlmostEqual(position.lng, -117.4618, delta=0.05)


class TestGeostationary(unittest.TestCase):
    """Test a satellite whose ground track never reaches the antemeridian."""

    def setUp(self):
        self.tracker = TLETracker()
        self.tle = tle_text("geostationary")
        self.epoch_ms = self.tracker.get_epoch_timestamp(self.tle)

    def test_position(self):
        """Test the geostationary sub-satellite point."""
        position = self.tracker.lat_lon(self.tle, self.epoch_ms)
        self.assertLess(abs(position.lat), 1.0)
        self.assertGreater(position.lng, -80.0)
        self.assertLess(position.lng, -70.0)

    def test_no_crossing(self):
        """Test that a geostationary satellite never crosses."""
        self.assertIsNone(self.tracker.last_antemeridian_crossing(self.tle, self.epoch_ms))

    def test_single_day_long_track(self):
        """Test the single day-long geostationary track."""
        tracks = self.tracker.ground_track(self.tle, time=self.epoch_ms)
        self.assertEqual(len(tracks), 1)
        self.assertGreater(len(tracks[0]), 100)
        for _, lng in tracks[0]:
            self.assertGreater(lng, -80.0)
            self.assertLess(lng, -70.0)


class TestPropagationErrors(unittest.TestCase):
    """Test translation of sgp4 error codes."""

    def setUp(self):
        self.propagator = SGP4Propagator()

    def test_error_code_raises(self):
        """Test that an sgp4 error code raises PropagationError."""
        satrec = mock.Mock(satnum=25544)
        satrec.sgp4.return_value = (6, (math.nan,) * 3, (math.nan,) * 3)

        with self.assertRaises(PropagationError) as ctx:
            self.propagator.propagate(satrec, 1694872149120)
        self.assertEqual(ctx.exception.error_code, 6)
        self.assertIn("decayed", str(ctx.exception))

    def test_decayed_satellite(self):
        """Test propagating a decaying satellite far past its epoch."""
        # Very high drag at low altitude, propagated a year past its epoch
        line1 = "1 44444U 19999A   23259.50000000  .10000000  00000-0  50000-2 0  9999"
        line2 = "2 44444  51.6400 100.0000 0005000  90.0000 270.0000 16.50000000 99999"
        satrec = self.propagator.initialize(line1, line2)
        epoch_ms = day_of_year_to_timestamp(259.5, 2023)

        with self.assertRaises(PropagationError) as ctx:
            self.propagator.propagate(satrec, epoch_ms + 365 * MS_PER_DAY)
        self.assertIn(ctx.exception.error_code, range(1, 7))

    def test_initialize_returns_satrec(self):
        """Test that initialize builds an sgp4 Satrec."""
        sample = SAMPLE_TLES["iss_2023"]
        self.assertIsInstance(self.propagator.initialize(sample["line1"], sample["line2"]), Satrec)


if __name__ == "__main__":
    unittest.main()
