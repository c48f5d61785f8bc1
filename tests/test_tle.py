"""
Unit Tests for TLE Parsing and Checksum Validation

Run with:
    python -m pytest tests/test_tle.py -v
"""

import unittest
from types import SimpleNamespace

from tle_track.config import SAMPLE_TLES
from tle_track.exceptions import InvalidInputError, MalformedLineError
from tle_track.tle import TLE, fix_checksum, is_valid_tle, line_checksum, parse_tle


class TestParseTLE(unittest.TestCase):
    """Test the accepted input shapes."""

    def setUp(self):
        sample = SAMPLE_TLES["iss_2017"]
        self.name = sample["name"]
        self.line1 = sample["line1"]
        self.line2 = sample["line2"]

    def test_two_line_string(self):
        """Test parsing a two-line string."""
        tle = parse_tle(f"{self.line1}\n{self.line2}")
        self.assertEqual(tle.name, "Unknown")
        self.assertEqual(tle.lines, (self.line1, self.line2))

    def test_three_line_string(self):
        """Test parsing a three-line string with a name."""
        tle = parse_tle(f"{self.name}\n{self.line1}\n{self.line2}")
        self.assertEqual(tle.name, "ISS (ZARYA)")
        self.assertEqual(tle.line1, self.line1)
        self.assertEqual(tle.line2, self.line2)

    def test_surrounding_whitespace_and_blank_lines(self):
        """Test that whitespace and blank lines are ignored."""
        tle = parse_tle(f"\n  {self.name}  \r\n\n {self.line1}\n{self.line2}   \n\n")
        self.assertEqual(tle.name, "ISS (ZARYA)")
        self.assertEqual(tle.lines, (self.line1, self.line2))

    def test_list_of_lines(self):
        """Test parsing a list of lines."""
        tle = parse_tle([self.name, self.line1, self.line2])
        self.assertEqual(tle.name, "ISS (ZARYA)")
        self.assertEqual(tle.lines, (self.line1, self.line2))

    def test_mapping(self):
        """Test parsing a mapping with name and lines."""
        tle = parse_tle({"name": self.name, "line1": self.line1, "line2": self.line2})
        self.assertEqual(tle.name, "ISS (ZARYA)")
        self.assertEqual(tle.lines, (self.line1, self.line2))

    def test_mapping_without_name(self):
        """Test parsing a mapping without a name."""
        tle = parse_tle({"line1": self.line1, "line2": self.line2})
        self.assertEqual(tle.name, "Unknown")

    def test_record_passes_through(self):
        """Test that a parsed record is returned unchanged."""
        tle = parse_tle([self.line1, self.line2])
        self.assertIs(parse_tle(tle), tle)

    def test_object_with_lines(self):
        """Test parsing an object with a lines attribute."""
        record = SimpleNamespace(name="ISS", lines=[self.line1, self.line2])
        tle = parse_tle(record)
        self.assertEqual(tle.name, "ISS")
        self.assertEqual(tle.lines, (self.line1, self.line2))

    def test_single_line_is_kept(self):
        """Test that a single line is kept for validation to reject."""
        tle = parse_tle(self.line1)
        self.assertEqual(tle.lines, (self.line1,))

    def test_invalid_inputs(self):
        """Test that unparseable inputs raise InvalidInputError."""
        for bad_input in (None, 42, "", "   \n  ", [], {"line1": self.line1}, [self.line1, 2]):
            with self.subTest(bad_input=bad_input):
                with self.assertRaises(InvalidInputError):
                    parse_tle(bad_input)

    def test_fingerprint_ignores_name(self):
        """Test that the fingerprint ignores the name line."""
        named = parse_tle([self.name, self.line1, self.line2])
        unnamed = parse_tle([self.line1, self.line2])
        self.assertEqual(named.fingerprint, unnamed.fingerprint)

    def test_fingerprint_distinguishes_sets(self):
        """Test that different element sets have different fingerprints."""
        other = SAMPLE_TLES["iss_2023"]
        tle_2017 = parse_tle([self.line1, self.line2])
        tle_2023 = parse_tle([other["line1"], other["line2"]])
        self.assertNotEqual(tle_2017.fingerprint, tle_2023.fingerprint)

    def test_str(self):
        """Test the string form of a record."""
        tle = parse_tle([self.name, self.line1, self.line2])
        self.assertEqual(str(tle), f"{self.name}\n{self.line1}\n{self.line2}")


class TestChecksum(unittest.TestCase):
    """Test line checksums and TLE validation."""

    def test_sample_checksums(self):
        """Test the checksums of the sample TLEs."""
        for key, sample in SAMPLE_TLES.items():
            for line in (sample["line1"], sample["line2"]):
                with self.subTest(sample=key, line=line[0]):
                    self.assertEqual(line_checksum(line), int(line[-1]))

    def test_digits_and_minus_signs(self):
        """Test that digits and minus signs count toward the checksum."""
        self.assertEqual(line_checksum("1234x"), 0)      # 1+2+3+4 = 10
        self.assertEqual(line_checksum("9-9-0"), 0)      # 9+1+9+1 = 20
        self.assertEqual(line_checksum("12 -.+AB7"), 4)  # 1+2+1 = 4

    def test_synthetic_lines(self):
        """Test checksums of generated lines."""
        for digit in range(10):
            for minus_count in range(6):
                line = "A" + str(digit) * 7 + " -" * minus_count + ".X0"
                with self.subTest(digit=digit, minus_count=minus_count):
                    self.assertEqual(line_checksum(line), (digit * 7 + minus_count) % 10)

    def test_checksum_character_is_excluded(self):
        """Test that the last character is left out of the checksum."""
        self.assertEqual(line_checksum("12"), 1)
        self.assertEqual(line_checksum("19"), 1)

    def test_empty_body(self):
        """Test that a line with no body raises MalformedLineError."""
        with self.assertRaises(MalformedLineError):
            line_checksum("1")
        with self.assertRaises(MalformedLineError):
            line_checksum("")

    def test_fix_checksum(self):
        """Test rewriting a wrong checksum digit."""
        line1 = SAMPLE_TLES["iss_2017"]["line1"]
        broken = line1[:-1] + "0"
        self.assertEqual(fix_checksum(broken), line1)

    def test_valid(self):
        """Test that the sample TLEs are valid."""
        for sample in SAMPLE_TLES.values():
            tle = parse_tle([sample["line1"], sample["line2"]])
            self.assertTrue(is_valid_tle(tle))

    def test_valid_with_name(self):
        """Test that a name line does not affect validation."""
        sample = SAMPLE_TLES["iss_2023"]
        tle = parse_tle([sample["name"], sample["line1"], sample["line2"]])
        self.assertTrue(is_valid_tle(tle))

    def test_wrong_checksum(self):
        """Test that a wrong checksum is invalid."""
        sample = SAMPLE_TLES["iss_2017"]
        tle = parse_tle([sample["line1"][:-1] + "4", sample["line2"]])
        self.assertFalse(is_valid_tle(tle))

    def test_swapped_lines(self):
        """Test that swapped lines are invalid."""
        sample = SAMPLE_TLES["iss_2017"]
        tle = parse_tle([sample["line2"], sample["line1"]])
        self.assertFalse(is_valid_tle(tle))

    def test_wrong_line_count(self):
        """Test that anything but two element lines is invalid."""
        sample = SAMPLE_TLES["iss_2017"]
        self.assertFalse(is_valid_tle(parse_tle(sample["line1"])))
        self.assertFalse(is_valid_tle(TLE("X", (sample["line1"], sample["line2"], sample["line2"]))))

    def test_non_numeric_checksum_column(self):
        """Test that a non-numeric checksum is invalid."""
        sample = SAMPLE_TLES["iss_2017"]
        tle = parse_tle([sample["line1"][:-1] + "x", sample["line2"]])
        self.assertFalse(is_valid_tle(tle))

    def test_truncated_line(self):
        """Test that a truncated line is invalid."""
        sample = SAMPLE_TLES["iss_2017"]
        tle = parse_tle([sample["line1"][:60], sample["line2"]])
        self.assertFalse(is_valid_tle(tle))


if __name__ == "__main__":
    unittest.main()
