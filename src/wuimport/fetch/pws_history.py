"""Fetch daily PWS history from the weather.com v2 JSON API.

Each observation is mapped twice into the same point:
- the flat legacy field set the CSV importer produced, so existing
  dashboards keep working
- every high/low/average reading verbatim, under snake_case names

Humidity: the legacy "humidity" field is always an integer, rounded from
humidityAvg. humidity_high/low/average and every other
reading are floats, whether the API sent 57 or 56.5.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

import requests

from wuimport.errors import DayFetchError, RecordParseError
from wuimport.fetch.http import get_day, redacted_url
from wuimport.schemas.point import Point, station_tags

PWS_HISTORY_URL = "https://api.weather.com/v2/pws/history/all"

API_KEY_PARAM = "apiKey"

# metric sub-object key -> field name
METRIC_FIELDS = {
    "tempHigh": "temperature_high",
    "tempLow": "temperature_low",
    "tempAvg": "temperature_average",
    "windspeedHigh": "wind_speed_high",
    "windspeedLow": "wind_speed_low",
    "windspeedAvg": "wind_speed_average",
    "windgustHigh": "wind_gust_high",
    "windgustLow": "wind_gust_low",
    "windgustAvg": "wind_gust_average",
    "dewptHigh": "dewpoint_high",
    "dewptLow": "dewpoint_low",
    "dewptAvg": "dewpoint_average",
    "windchillHigh": "wind_chill_high",
    "windchillLow": "wind_chill_low",
    "windchillAvg": "wind_chill_average",
    "heatindexHigh": "heat_index_high",
    "heatindexLow": "heat_index_low",
    "heatindexAvg": "heat_index_average",
    "pressureMax": "pressure_max",
    "pressureMin": "pressure_min",
    "pressureTrend": "pressure_trend",
    "precipRate": "precipitation_rate",
    "precipTotal": "precipitation_total",
}

# top-level observation key -> field name
OBSERVATION_FIELDS = {
    "uvHigh": "uv_high",
    "humidityHigh": "humidity_high",
    "humidityLow": "humidity_low",
    "humidityAvg": "humidity_average",
    "solarRadiationHigh": "solar_radiation_high",
    "winddirAvg": "wind_direction_average",
}


def build_query(station_id: str, api_key: str, day: date) -> dict[str, str]:
    return {
        "stationId": station_id,
        API_KEY_PARAM: api_key,
        "format": "json",
        "units": "m",
        "date": day.strftime("%Y%m%d"),
    }


def _number(value: Any, key: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise RecordParseError(f"expected a number for {key}, got {value!r}")
    if not math.isfinite(value):
        raise RecordParseError(f"expected a finite number for {key}, got {value!r}")
    # JSON integers and decimals share one field type in InfluxDB
    return float(value)


def _parse_obs_time(value: Any) -> datetime:
    if not isinstance(value, str):
        raise RecordParseError(f"missing obsTimeUtc, got {value!r}")
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise RecordParseError(f"failed to parse obsTimeUtc {value!r}: {e}") from e
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _legacy_fields(obs: dict[str, Any], metric: dict[str, Any]) -> dict[str, float | int]:
    fields: dict[str, float | int | None] = {
        "temperature": _number(metric.get("tempAvg"), "tempAvg"),
        "dewpoint": _number(metric.get("dewptAvg"), "dewptAvg"),
        "wind_direction": _number(obs.get("winddirAvg"), "winddirAvg"),
        "wind_speed": _number(metric.get("windspeedAvg"), "windspeedAvg"),
        "wind_speed_gust": _number(metric.get("windgustAvg"), "windgustAvg"),
        "solar_radiation": _number(obs.get("solarRadiationHigh"), "solarRadiationHigh"),
    }

    pressure_max = _number(metric.get("pressureMax"), "pressureMax")
    pressure_min = _number(metric.get("pressureMin"), "pressureMin")
    if pressure_max is not None and pressure_min is not None:
        fields["pressure"] = (pressure_max + pressure_min) / 2

    humidity = _number(obs.get("humidityAvg"), "humidityAvg")
    if humidity is not None:
        fields["humidity"] = int(round(humidity))

    return {k: v for k, v in fields.items() if v is not None}


def parse_observation(
    obs: Any,
    measurement: str,
    station_id: str | None = None,
) -> Point:
    """Map one decoded observation object to a point.

    The station tag comes from the observation's stationID, falling back to
    station_id when the API leaves it out.

    Raises:
        RecordParseError: If the observation is malformed
    """
    if not isinstance(obs, dict):
        raise RecordParseError(f"observation must be an object, got {type(obs).__name__}")

    metric = obs.get("metric")
    if not isinstance(metric, dict):
        raise RecordParseError("observation has no metric object")

    station = obs.get("stationID") or station_id
    if not station:
        raise RecordParseError("observation has no stationID")

    fields: dict[str, float | int | str] = _legacy_fields(obs, metric)
    for key, name in METRIC_FIELDS.items():
        value = _number(metric.get(key), key)
        if value is not None:
            fields[name] = value
    for key, name in OBSERVATION_FIELDS.items():
        value = _number(obs.get(key), key)
        if value is not None:
            fields[name] = value

    return Point(
        measurement=measurement,
        time=_parse_obs_time(obs.get("obsTimeUtc")),
        tags=station_tags(station),
        fields=fields,
    )


def parse_daily_json(
    text: str,
    day: date,
    measurement: str,
    station_id: str | None = None,
    url: str = PWS_HISTORY_URL,
) -> list[Point]:
    """Parse one day of JSON history into points.

    Raises:
        DayFetchError: If the body is not a JSON object with an observations
            list, or any observation is malformed
    """
    try:
        data = json.loads(text)
    except ValueError as e:
        raise DayFetchError(day, f"failed to decode response from {url}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("observations"), list):
        raise DayFetchError(day, f"response from {url} has no observations list")

    points: list[Point] = []
    for i, obs in enumerate(data["observations"]):
        try:
            points.append(parse_observation(obs, measurement, station_id))
        except RecordParseError as e:
            raise DayFetchError(
                day, f"error while parsing observation {i} for {day} in {url}: {e}"
            ) from e
    return points


@dataclass
class PwsHistoryFetcher:
    """Per-day fetcher for the weather.com PWS history API."""

    station_id: str
    api_key: str
    measurement: str = "weather"
    session: requests.Session = field(default_factory=requests.Session)
    base_url: str = PWS_HISTORY_URL
    timeout: float = 30.0

    def fetch_day(self, day: date) -> list[Point]:
        params = build_query(self.station_id, self.api_key, day)
        text = get_day(
            self.session,
            self.base_url,
            params,
            day,
            self.timeout,
            secrets=[API_KEY_PARAM],
        )
        return parse_daily_json(
            text,
            day,
            measurement=self.measurement,
            station_id=self.station_id,
            url=redacted_url(self.base_url, params, [API_KEY_PARAM]),
        )
