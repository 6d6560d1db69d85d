"""Time-series point and batch structures.

A Point is what every record mapper emits, regardless of the response
format it came from:
- time is timezone-aware UTC
- tags always carry station and provider
- fields hold only non-null numbers or strings
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Union

PROVIDER = "wunderground"

TAG_STATION = "station"
TAG_PROVIDER = "provider"
TAG_SOFTWARE = "software"

FieldValue = Union[float, int, str]


def station_tags(station_id: str) -> dict[str, str]:
    """Return the fixed tag set for a station."""
    return {TAG_STATION: station_id, TAG_PROVIDER: PROVIDER}


@dataclass
class Point:
    """One timestamped, tagged observation ready for InfluxDB."""

    measurement: str
    time: datetime
    tags: dict[str, str] = field(default_factory=dict)
    fields: dict[str, FieldValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.time.tzinfo is None:
            raise ValueError(f"Point time must be timezone-aware, got {self.time!r}")
        self.time = self.time.astimezone(timezone.utc)

    def to_influx(self) -> dict[str, Any]:
        """Return the dict shape accepted by InfluxDBClient.write_points."""
        return {
            "measurement": self.measurement,
            "tags": dict(self.tags),
            "time": self.time,
            "fields": dict(self.fields),
        }


@dataclass
class Batch:
    """All points collected in one run, bound for one measurement and database.

    Entries may be None; they are skipped on output.
    """

    measurement: str
    database: str
    points: list[Point | None] = field(default_factory=list)

    def __post_init__(self) -> None:
        errors = []
        if not self.measurement:
            errors.append("measurement name must not be empty")
        if not self.database:
            errors.append("database name must not be empty")
        if errors:
            raise ValueError("Batch initialization failed:\n  - " + "\n  - ".join(errors))

    def add_points(self, points: Iterable[Point | None]) -> None:
        self.points.extend(points)

    def valid_points(self) -> list[Point]:
        return [p for p in self.points if p is not None]

    def __len__(self) -> int:
        return len(self.points)
