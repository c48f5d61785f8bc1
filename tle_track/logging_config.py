"""
Logging Configuration

Logging setup for applications built on tle_track.

The package logs through module loggers under the "tle_track" name.
tle_track.cache reports every cache miss at DEBUG. tle_track.tracker
reports crossing searches and skipped bearings at DEBUG, orbits without
an antemeridian crossing at INFO and rejected TLEs at WARNING.
tle_track.propagator logs sgp4 error codes at WARNING before raising
PropagationError. No handlers are installed on import; the application
calls configure_logging() once (demo.py does) and the level defaults to
TLE_TRACK_LOG_LEVEL.

Usage:
    from tle_track.logging_config import get_logger, configure_logging

    configure_logging()                  # level from TLE_TRACK_LOG_LEVEL
    configure_logging(logging.DEBUG, log_file="tle_track.log")
    logger = get_logger(__name__)
"""

import logging
import sys
from typing import Optional, Union

from tle_track import config as settings

# Default logging format
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: Optional[Union[int, str]] = None, log_file: Optional[str] = None) -> None:
    """
    Configure logging for the entire application.

    Parameters
    ----------
    level : int or str, optional
        Logging level (e.g., logging.DEBUG, "INFO"). If None, uses
        config.LOG_LEVEL from TLE_TRACK_LOG_LEVEL.
    log_file : str, optional
        Path to log file. If None, logs only to console.
    """
    if level is None:
        level = settings.config.LOG_LEVEL

    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance.

    Parameters
    ----------
    name : str
        Name of the logger (typically __name__)

    Returns
    -------
    logging.Logger
        Configured logger instance
    """
    return logging.getLogger(name)
