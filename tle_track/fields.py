"""
TLE Field Schema

Fixed locations of orbital element values as they have appeared going back to
punch cards, and the codecs for the numeric conventions used in those columns.

Column layout (0-based, end exclusive) follows the published 69-character
format: https://en.wikipedia.org/wiki/Two-line_element_set

Encodings:
    INTEGER            "25544"     -> 25544
    FLOAT              "51.6416"   -> 51.6416
    CHAR               "A  "       -> "A"
    DECIMAL_ASSUMED    "0004263"   -> 0.0004263
    DECIMAL_ASSUMED_E  " 36771-4"  -> 0.000036771
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Union

from tle_track.exceptions import FieldDecodeError

FieldValue = Union[int, float, str, None]


class FieldType(Enum):
    """Data formats for TLE orbital elements."""

    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    CHAR = "CHAR"
    DECIMAL_ASSUMED = "DECIMAL_ASSUMED"      # 12345   -> 0.12345
    DECIMAL_ASSUMED_E = "DECIMAL_ASSUMED_E"  # 12345-2 -> 0.0012345


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Location and encoding of one value in a TLE line.

    Attributes:
        name: Field name, also the suffix of the tracker accessor (get_<name>)
        line: TLE line holding the value (1 or 2)
        start: 0-based start column
        length: Column width
        encoding: How the substring is decoded
        decimals: Digits after the decimal point when re-encoding a FLOAT
        fill: Padding character when re-encoding
    """

    name: str
    line: int
    start: int
    length: int
    encoding: FieldType
    decimals: Optional[int] = None
    fill: str = " "

    @property
    def end(self) -> int:
        return self.start + self.length

    def extract(self, line: str) -> str:
        """Raw substring of the column, possibly short if the line is."""
        return line[self.start:self.end]


_I = FieldType.INTEGER
_F = FieldType.FLOAT
_C = FieldType.CHAR

LINE1_FIELDS = (
    # TLE line number. Always 1 for valid TLEs.
    FieldDescriptor("line_number1", 1, 0, 1, _I),
    # NORAD catalog number (Sputnik's rocket was 00001). Example: 25544
    FieldDescriptor("satellite_number", 1, 2, 5, _I, fill="0"),
    # 'U' unclassified, 'C' classified, 'S' secret
    FieldDescriptor("classification", 1, 7, 1, _C),
    # International designator: last two digits of launch year
    FieldDescriptor("int_designator_year", 1, 9, 2, _I, fill="0"),
    # International designator: launch number of the year
    FieldDescriptor("int_designator_launch_number", 1, 11, 3, _I, fill="0"),
    # International designator: piece of the launch, e.g. 'A'
    FieldDescriptor("int_designator_piece_of_launch", 1, 14, 3, _C),
    # Two-digit epoch year; 57-99 are 1900s, 00-56 are 2000s
    FieldDescriptor("epoch_year", 1, 18, 2, _I, fill="0"),
    # Fractional day of the year; 1.5 is noon on January 1st
    FieldDescriptor("epoch_day", 1, 20, 12, _F, decimals=8, fill="0"),
    # First time derivative of mean motion / 2 (rev/day^2)
    FieldDescriptor("first_time_derivative", 1, 33, 10, _F, decimals=8),
    # Second time derivative of mean motion / 6 (rev/day^3)
    FieldDescriptor("second_time_derivative", 1, 44, 8, FieldType.DECIMAL_ASSUMED_E),
    # BSTAR drag term (1/earth radii)
    FieldDescriptor("bstar_drag", 1, 53, 8, FieldType.DECIMAL_ASSUMED_E),
    # Ephemeris type, always 0 in distributed data
    FieldDescriptor("orbit_model", 1, 62, 1, _I),
    # Element set number, incremented when a new TLE is generated
    FieldDescriptor("tle_set_number", 1, 64, 4, _I),
    FieldDescriptor("checksum1", 1, 68, 1, _I),
)

LINE2_FIELDS = (
    # TLE line number. Always 2 for valid TLEs.
    FieldDescriptor("line_number2", 2, 0, 1, _I),
    # Same catalog number as line 1
    FieldDescriptor("satellite_number2", 2, 2, 5, _I, fill="0"),
    # Degrees
    FieldDescriptor("inclination", 2, 8, 8, _F, decimals=4),
    # Right ascension of the ascending node, degrees
    FieldDescriptor("right_ascension", 2, 17, 8, _F, decimals=4),
    FieldDescriptor("eccentricity", 2, 26, 7, FieldType.DECIMAL_ASSUMED),
    # Argument of perigee, degrees
    FieldDescriptor("perigee", 2, 34, 8, _F, decimals=4),
    # Degrees
    FieldDescriptor("mean_anomaly", 2, 43, 8, _F, decimals=4),
    # Revolutions per day
    FieldDescriptor("mean_motion", 2, 52, 11, _F, decimals=8),
    # Total revolutions completed at the epoch
    FieldDescriptor("rev_number_at_epoch", 2, 63, 5, _I),
    FieldDescriptor("checksum2", 2, 68, 1, _I),
)

FIELDS: Dict[str, FieldDescriptor] = {
    descriptor.name: descriptor for descriptor in LINE1_FIELDS + LINE2_FIELDS
}


def get_descriptor(name: str) -> FieldDescriptor:
    """Look up a field descriptor by name."""
    try:
        return FIELDS[name]
    except KeyError:
        raise KeyError(f"Unknown TLE field: {name!r}") from None


def decimal_assumed_e_to_float(raw: str) -> Optional[float]:
    """
    Convert the TLE "leading decimal assumed" notation with exponent to a float.

    The last two characters are the signed power of ten; the digits before
    them carry an implied leading decimal point. The result is reported to
    5 significant figures.

    Example:
        decimal_assumed_e_to_float('12345-4')
        -> 1.2345e-05
    """
    text = raw.strip()
    if not text:
        return None

    mantissa_text, exponent_text = text[:-2].strip(), text[-2:]
    sign = 1.0
    if mantissa_text[:1] in ("-", "+"):
        sign = -1.0 if mantissa_text[0] == "-" else 1.0
        mantissa_text = mantissa_text[1:]

    try:
        exponent = int(exponent_text)
    except ValueError:
        raise FieldDecodeError(f"Invalid exponent in {raw!r}") from None
    if not mantissa_text.isdigit():
        raise FieldDecodeError(f"Invalid assumed-decimal mantissa in {raw!r}")

    value = sign * float(f"0.{mantissa_text}") * 10.0 ** exponent
    return float(f"{value:.5g}")


def decode_value(raw: str, encoding: FieldType) -> FieldValue:
    """Decode a raw column substring. Blank numeric columns decode to None."""
    if encoding is FieldType.CHAR:
        return raw.strip()
    if encoding is FieldType.DECIMAL_ASSUMED_E:
        return decimal_assumed_e_to_float(raw)

    text = raw.strip()
    if not text:
        return None

    try:
        if encoding is FieldType.INTEGER:
            return int(text)
        if encoding is FieldType.FLOAT:
            return float(text)
    except ValueError:
        raise FieldDecodeError(f"Cannot decode {raw!r} as {encoding.value}") from None

    # DECIMAL_ASSUMED
    if not text.isdigit():
        raise FieldDecodeError(f"Cannot decode {raw!r} as {encoding.value}")
    return float(f"0.{text}")


def decode_field(descriptor: FieldDescriptor, line: str) -> FieldValue:
    """Extract and decode one field from a TLE line."""
    return decode_value(descriptor.extract(line), descriptor.encoding)


def _format_float(value: float, descriptor: FieldDescriptor) -> str:
    sign = "-" if value < 0 else ""
    body = f"{abs(value):.{descriptor.decimals}f}"
    # ".00012022" style when the leading zero and a sign column do not fit
    if len(body) + 1 > descriptor.length and body.startswith("0."):
        body = body[1:]
    return sign + body


def _format_exponential(value: float) -> str:
    """Format a number in TLE exponential notation (" 12345-3")."""
    if value == 0.0:
        return " 00000-0"

    sign = "-" if value < 0 else " "
    abs_val = abs(value)

    exp = int(math.floor(math.log10(abs_val))) + 1
    mantissa = int(round(abs_val / 10 ** exp * 100000))
    if mantissa >= 100000:
        mantissa //= 10
        exp += 1

    return f"{sign}{mantissa:05d}{exp:+d}"


def encode_field(descriptor: FieldDescriptor, value: FieldValue) -> str:
    """
    Render a decoded value back into its column, padded to the column width.

    Catalog numbers, years, launch numbers and the epoch day are zero filled;
    everything else is right aligned with spaces, as in distributed TLEs.
    """
    if value is None:
        return " " * descriptor.length

    encoding = descriptor.encoding
    if encoding is FieldType.CHAR:
        return str(value).ljust(descriptor.length)
    if encoding is FieldType.INTEGER:
        text = str(int(value))
    elif encoding is FieldType.FLOAT:
        text = _format_float(float(value), descriptor)
    elif encoding is FieldType.DECIMAL_ASSUMED:
        text = f"{float(value):.{descriptor.length}f}"[2:]
    else:
        text = _format_exponential(float(value))

    if len(text) > descriptor.length:
        raise ValueError(
            f"{value!r} does not fit in {descriptor.name} ({descriptor.length} columns)"
        )
    return text.rjust(descriptor.length, descriptor.fill)
