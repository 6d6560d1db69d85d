"""Per-day fetchers for Weather Underground history.

Both response formats sit behind the same capability: fetch one day,
return that day's points. make_fetcher picks one from the run config.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol, runtime_checkable

import requests

from wuimport.config import ImportConfig
from wuimport.fetch.legacy_csv import LegacyCsvFetcher
from wuimport.fetch.pws_history import PwsHistoryFetcher
from wuimport.schemas.point import Point


@runtime_checkable
class DayFetcher(Protocol):
    """Fetch and map one calendar day of observations.

    Implementations raise DayFetchError for any per-day failure.
    """

    def fetch_day(self, day: date) -> list[Point]:
        ...


def make_fetcher(
    config: ImportConfig,
    session: requests.Session | None = None,
) -> DayFetcher:
    """Build the fetcher for config.source."""
    session = session or requests.Session()
    if config.source == "csv":
        return LegacyCsvFetcher(
            station_id=config.station_id,
            measurement=config.measurement,
            session=session,
            timeout=config.http_timeout,
        )
    if config.source == "json":
        return PwsHistoryFetcher(
            station_id=config.station_id,
            api_key=config.api_key or "",
            measurement=config.measurement,
            session=session,
            timeout=config.http_timeout,
        )
    raise ValueError(f"Unknown source: {config.source}")


__all__ = [
    "DayFetcher",
    "LegacyCsvFetcher",
    "PwsHistoryFetcher",
    "make_fetcher",
]
