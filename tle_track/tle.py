"""
TLE Record, Parser and Checksum Validator

Normalizes the shapes a TLE arrives in (a multi-line string, a list of lines,
a mapping with line1/line2 keys or an already parsed record) into an immutable
TLE record, and validates line numbers and checksums.

Example:
    tle = parse_tle("ISS (ZARYA)\\n1 25544U ...\\n2 25544 ...")
    tle.name       -> 'ISS (ZARYA)'
    is_valid_tle(tle) -> True
"""

import hashlib
from collections.abc import Mapping
from dataclasses import dataclass
from functools import cached_property
from typing import Any, Iterable, List, Tuple

from tle_track.config import UNKNOWN_SATELLITE_NAME
from tle_track.exceptions import FieldDecodeError, InvalidInputError, MalformedLineError
from tle_track.fields import FIELDS, decode_field


@dataclass(frozen=True)
class TLE:
    """
    A parsed Two-Line Element set.

    Attributes:
        name: Satellite name from the optional title line, or 'Unknown'
        lines: Trimmed element lines; a valid TLE has exactly two
    """

    name: str
    lines: Tuple[str, ...]

    @property
    def line1(self) -> str:
        return self.lines[0]

    @property
    def line2(self) -> str:
        return self.lines[1]

    @cached_property
    def fingerprint(self) -> str:
        """Identity of the element lines, used in every cache key."""
        return hashlib.sha1("\n".join(self.lines).encode("utf-8")).hexdigest()

    def __str__(self) -> str:
        return "\n".join((self.name,) + self.lines)


def _clean_lines(raw_lines: Iterable[Any]) -> List[str]:
    lines = []
    for line in raw_lines:
        if not isinstance(line, str):
            raise InvalidInputError(f"TLE lines must be strings, got {type(line).__name__}")
        if line.strip():
            lines.append(line.strip())
    return lines


def raw_lines(tle_input: Any) -> Tuple[str, ...]:
    """
    Split raw TLE input into trimmed, non-blank lines (name line included).

    Raises:
        InvalidInputError: If the input is not a string, a list/tuple of
            strings or a mapping with line1/line2 keys.
    """
    if isinstance(tle_input, str):
        lines = _clean_lines(tle_input.splitlines())
    elif isinstance(tle_input, (list, tuple)):
        lines = _clean_lines(tle_input)
    elif isinstance(tle_input, Mapping) and "line1" in tle_input and "line2" in tle_input:
        named = [tle_input["name"]] if tle_input.get("name") else []
        lines = _clean_lines(named + [tle_input["line1"], tle_input["line2"]])
    else:
        raise InvalidInputError(f"TLE input is invalid: {type(tle_input).__name__}")

    if not lines:
        raise InvalidInputError("TLE input contains no lines")
    return tuple(lines)


def parse_tle(tle_input: Any) -> TLE:
    """
    Parse a TLE from a string, sequence of lines, mapping or record.

    Both two and three-line variants are accepted. With more than two lines
    the first one is taken as the satellite name.

    Args:
        tle_input: Raw TLE data or an object carrying `lines` (and `name`)

    Returns:
        TLE record

    Raises:
        InvalidInputError: If the input shape cannot be parsed
    """
    if isinstance(tle_input, TLE):
        return tle_input
    if hasattr(tle_input, "lines") and not isinstance(tle_input, (str, Mapping)):
        lines = tuple(_clean_lines(tle_input.lines))
        if not lines:
            raise InvalidInputError("TLE record contains no lines")
        name = getattr(tle_input, "name", None) or UNKNOWN_SATELLITE_NAME
        return TLE(name=name, lines=lines)

    lines = raw_lines(tle_input)
    if len(lines) > 2:
        return TLE(name=lines[0], lines=lines[1:])
    return TLE(name=UNKNOWN_SATELLITE_NAME, lines=lines)


def line_checksum(line: str) -> int:
    """
    Calculate the checksum of a single TLE line.

    Checksum = modulo 10 of the sum of all digits (including the line number)
    plus 1 for each minus sign. Everything else counts as zero. The final
    character, the checksum itself, is excluded.

    Raises:
        MalformedLineError: If the line has no characters before the checksum
    """
    body = line[:-1]
    if not body:
        raise MalformedLineError(f"TLE line has no body to checksum: {line!r}")

    checksum = 0
    for char in body:
        if char.isdigit():
            checksum += int(char)
        elif char == "-":
            checksum += 1
    return checksum % 10


def fix_checksum(line: str) -> str:
    """Replace the last character of a TLE line with the correct checksum."""
    return line[:-1] + str(line_checksum(line))


def is_valid_tle(tle: TLE) -> bool:
    """
    Check line numbers and checksums of a parsed TLE.

    Returns False for anything structurally wrong; never raises for invalid
    data, except MalformedLineError for a single-character line.
    """
    if len(tle.lines) != 2:
        return False

    for line_number, line in enumerate(tle.lines, start=1):
        try:
            parsed_line_number = decode_field(FIELDS[f"line_number{line_number}"], line)
            parsed_checksum = decode_field(FIELDS[f"checksum{line_number}"], line)
        except FieldDecodeError:
            return False

        if parsed_line_number != line_number:
            return False
        if parsed_checksum != line_checksum(line):
            return False

    return True
