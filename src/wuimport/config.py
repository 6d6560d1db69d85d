"""Run configuration for the Weather Underground importer.

The CLI builds one ImportConfig at startup and hands it to the pipeline.
Nothing downstream reads flags or environment variables directly.
"""

from __future__ import annotations

import json
import re
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Literal
from urllib.parse import urlsplit

FLAG_DATE_FORMAT = "%Y-%m-%d"
FLAG_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
SOURCES = ("csv", "json")

DEFAULT_INFLUX_ADDR = "http://localhost:8086"
DEFAULT_INFLUX_PORT = 8086


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def parse_flag_date(value: str | date | None, default: date) -> date:
    """Parse a YYYY-MM-DD flag value, falling back to default when unset.

    Raises:
        ValueError: If the value is not a valid YYYY-MM-DD date
    """
    if value is None or value == "":
        return default
    if isinstance(value, date):
        return value
    # strptime alone accepts unpadded months and days
    if not FLAG_DATE_PATTERN.fullmatch(value):
        raise ValueError(f"invalid date {value!r}, expected YYYY-MM-DD")
    try:
        return datetime.strptime(value, FLAG_DATE_FORMAT).date()
    except ValueError as e:
        raise ValueError(f"invalid date {value!r}, expected YYYY-MM-DD") from e


def _mask(secret: str | None) -> str | None:
    if not secret:
        return secret
    return "***"


@dataclass
class InfluxConfig:
    """Connection settings for the InfluxDB sink.

    Attributes:
        addr: HTTP address, e.g. "http://localhost:8086"
        username: InfluxDB username (empty when auth is disabled)
        password: InfluxDB password
        database: Target database name
        timeout: Request timeout in seconds for the ping and the write
    """
    addr: str = DEFAULT_INFLUX_ADDR
    username: str = ""
    password: str = ""
    database: str = "weather"
    timeout: float = 1.0

    @property
    def host(self) -> str:
        return urlsplit(self.addr).hostname or "localhost"

    @property
    def port(self) -> int:
        return urlsplit(self.addr).port or DEFAULT_INFLUX_PORT

    @property
    def ssl(self) -> bool:
        return urlsplit(self.addr).scheme == "https"

    @property
    def path(self) -> str:
        return urlsplit(self.addr).path.strip("/")

    def errors(self) -> list[str]:
        errors = []
        parts = urlsplit(self.addr)
        if parts.scheme not in ("http", "https") or not parts.hostname:
            errors.append(f"influx addr must be an http(s) URL, got {self.addr!r}")
        if self.timeout <= 0:
            errors.append(f"influx timeout must be positive, got {self.timeout}")
        return errors


@dataclass
class ImportConfig:
    """Configuration for one import run.

    Attributes:
        station_id: Weather Underground station ID (e.g., "KCASANFR123")
        start_date: First day to fetch (inclusive, UTC)
        end_date: Last day to fetch (inclusive, UTC)
        source: Response format to request ("json" or legacy "csv")
        api_key: weather.com API key, required for the JSON source
        measurement: InfluxDB measurement name for every point
        upload: Write to InfluxDB when True, print line protocol otherwise
        influx: InfluxDB connection settings
        http_timeout: Timeout in seconds for each per-day request
        validate: Fail the run when the collected batch breaks schema checks
    """

    station_id: str
    start_date: date = field(default_factory=lambda: utc_today() - timedelta(days=1))
    end_date: date = field(default_factory=utc_today)
    source: Literal["csv", "json"] = "json"
    api_key: str | None = None
    measurement: str = "weather"
    upload: bool = False
    influx: InfluxConfig = field(default_factory=InfluxConfig)
    http_timeout: float = 30.0
    validate: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.influx, dict):
            self.influx = InfluxConfig(**self.influx)
        self._validate()

    def _validate(self) -> None:
        errors = []

        if not self.station_id or not self.station_id.strip():
            errors.append("please specify a station ID")

        if self.start_date > self.end_date:
            errors.append(
                f"start_date ({self.start_date}) must not be after "
                f"end_date ({self.end_date})"
            )

        if self.source not in SOURCES:
            errors.append(f"source must be one of {list(SOURCES)}, got {self.source!r}")
        elif self.source == "json" and not self.api_key:
            errors.append("please specify an API key for the json source")

        if self.http_timeout <= 0:
            errors.append(f"http_timeout must be positive, got {self.http_timeout}")

        if self.upload:
            errors.extend(self.influx.errors())

        if errors:
            raise ValueError("ImportConfig validation failed:\n  - " + "\n  - ".join(errors))

    @property
    def num_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def to_dict(self) -> dict[str, Any]:
        """Convert config to a dictionary with secrets masked."""
        d = asdict(self)
        d["start_date"] = self.start_date.isoformat()
        d["end_date"] = self.end_date.isoformat()
        d["api_key"] = _mask(self.api_key)
        d["influx"]["password"] = _mask(self.influx.password)
        return d

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)
