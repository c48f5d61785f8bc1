"""Exceptions raised by tle_track."""

from typing import Optional


class TLEError(Exception):
    """Base class for all tle_track errors."""


class InvalidInputError(TLEError, ValueError):
    """TLE input is not a string, a sequence of lines or a parsed record."""


class FieldDecodeError(TLEError, ValueError):
    """A fixed-column value could not be decoded."""


class MalformedLineError(TLEError, ValueError):
    """A checksum was requested for a line with no body."""


class ValidationError(TLEError, ValueError):
    """TLE failed line-number or checksum validation."""


class PropagationError(TLEError, RuntimeError):
    """The propagator rejected the elements or is not available."""

    def __init__(self, message: str, error_code: Optional[int] = None):
        super().__init__(message)
        self.error_code = error_code
