"""Exception types for the import pipeline.

Two propagation policies are in play:
- DayFetchError is raised for a single day and handled by the date range
  driver (reported, the day contributes no points, the run continues).
- UploadError is raised by the InfluxDB sink and is fatal to the run.
"""

from __future__ import annotations

from datetime import date


class WundergroundImportError(Exception):
    """Base class for all import errors."""


class RecordParseError(WundergroundImportError, ValueError):
    """A single raw record could not be mapped to a point."""


class DayFetchError(WundergroundImportError):
    """Fetching or parsing one day of history failed."""

    def __init__(self, day: date, message: str) -> None:
        super().__init__(message)
        self.day = day


class UploadError(WundergroundImportError):
    """Writing the batch to InfluxDB failed."""
