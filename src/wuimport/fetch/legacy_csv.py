"""Fetch daily PWS history from the legacy WXDailyHistory CSV endpoint.

The endpoint answers with comma separated lines interleaved with "<br>"
markers. The first data line is a fixed header; every later line is one
observation with 16 positional fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Iterator

import requests

from wuimport.errors import DayFetchError, RecordParseError
from wuimport.fetch.http import build_url, get_day
from wuimport.schemas.point import TAG_SOFTWARE, Point, station_tags

LEGACY_CSV_URL = "https://www.wunderground.com/weatherstation/WXDailyHistory.asp"

DATA_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LINE_BREAK = "<br>"

RECORD_NAMES = [
    "Time",
    "TemperatureC",
    "DewpointC",
    "PressurehPa",
    "WindDirection",
    "WindDirectionDegrees",
    "WindSpeedKMH",
    "WindSpeedGustKMH",
    "Humidity",
    "HourlyPrecipMM",
    "Conditions",
    "Clouds",
    "dailyrainMM",
    "SolarRadiationWatts/m^2",
    "SoftwareType",
    "DateUTC",
]
NUM_RECORDS = len(RECORD_NAMES)

# Field name, record position, label used in error messages
FLOAT_FIELDS = [
    ("temperature", 1, "temperature"),
    ("dewpoint", 2, "dewpoint"),
    ("pressure", 3, "pressure"),
    ("wind_direction", 5, "wind direction"),
    ("wind_speed", 6, "wind speed"),
    ("wind_speed_gust", 7, "wind speed gust"),
    ("hourly_precipitation", 9, "hourly precipitation mm"),
    ("solar_radiation", 13, "solar radiation"),
]
WIND_DIRECTION_NAME_POS = 4
HUMIDITY_POS = 8
SOFTWARE_POS = 14
DATE_UTC_POS = 15


def build_query(station_id: str, day: date) -> dict[str, str]:
    return {
        "ID": station_id,
        "graphspan": "day",
        "format": "0",
        "day": str(day.day),
        "month": str(day.month),
        "year": str(day.year),
    }


def iter_csv_rows(text: str) -> Iterator[list[str]]:
    """Yield comma-split rows, skipping blank lines and "<br>" markers."""
    for raw in text.splitlines():
        line = raw.strip()
        if line == "" or line == LINE_BREAK:
            continue
        line = line.removesuffix(LINE_BREAK)
        yield line.split(",")


def _parse_float(records: list[str], pos: int, label: str) -> float:
    try:
        return float(records[pos])
    except ValueError as e:
        raise RecordParseError(f"failed to parse {label} {records[pos]!r}: {e}") from e


def parse_record(records: list[str], measurement: str, station_id: str) -> Point:
    """Map one positional CSV row to a point.

    Raises:
        RecordParseError: If the timestamp or any numeric field fails to parse
    """
    try:
        ts = datetime.strptime(records[DATE_UTC_POS], DATA_DATE_FORMAT)
    except ValueError as e:
        raise RecordParseError(
            f"failed to parse date {records[DATE_UTC_POS]!r}: {e}"
        ) from e

    tags = station_tags(station_id)
    tags[TAG_SOFTWARE] = records[SOFTWARE_POS]

    fields: dict[str, float | int | str] = {}
    for name, pos, label in FLOAT_FIELDS:
        fields[name] = _parse_float(records, pos, label)
    fields["wind_direction_name"] = records[WIND_DIRECTION_NAME_POS]

    try:
        fields["humidity"] = int(records[HUMIDITY_POS])
    except ValueError as e:
        raise RecordParseError(
            f"failed to parse humidity {records[HUMIDITY_POS]!r}: {e}"
        ) from e

    return Point(
        measurement=measurement,
        time=ts.replace(tzinfo=timezone.utc),
        tags=tags,
        fields=fields,
    )


def parse_daily_csv(
    text: str,
    day: date,
    measurement: str,
    station_id: str,
    url: str = LEGACY_CSV_URL,
) -> list[Point]:
    """Parse one day of legacy CSV into points.

    Raises:
        DayFetchError: On a header mismatch, a short row or a bad record
    """
    points: list[Point] = []
    for i, records in enumerate(iter_csv_rows(text)):
        if i == 0:
            if records != RECORD_NAMES:
                raise DayFetchError(
                    day,
                    f"invalid first record in {url}: got {records!r}, expected {RECORD_NAMES!r}",
                )
            continue

        if len(records) < NUM_RECORDS:
            raise DayFetchError(
                day,
                f"invalid number of records for {day} in {url} in record {i}: {len(records)}",
            )

        try:
            points.append(parse_record(records, measurement, station_id))
        except RecordParseError as e:
            raise DayFetchError(
                day, f"error while parsing record {i} for {day} in {url}: {e}"
            ) from e

    return points


@dataclass
class LegacyCsvFetcher:
    """Per-day fetcher for the WXDailyHistory CSV endpoint."""

    station_id: str
    measurement: str = "weather"
    session: requests.Session = field(default_factory=requests.Session)
    base_url: str = LEGACY_CSV_URL
    timeout: float = 30.0

    def fetch_day(self, day: date) -> list[Point]:
        params = build_query(self.station_id, day)
        text = get_day(self.session, self.base_url, params, day, self.timeout)
        return parse_daily_csv(
            text,
            day,
            measurement=self.measurement,
            station_id=self.station_id,
            url=build_url(self.base_url, params),
        )
