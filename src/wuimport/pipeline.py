"""Date range driver for the Weather Underground import.

Pipeline flow:
    iter_days -> fetcher.fetch_day (per day, failures reported and skipped)
    -> Batch -> validate (optional) -> print_batch | upload_batch (fail fast)
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, Iterator, TextIO

from wuimport.config import ImportConfig
from wuimport.errors import DayFetchError
from wuimport.fetch import DayFetcher, make_fetcher
from wuimport.schemas.point import Batch
from wuimport.schemas.points import describe_points, points_to_frame, validate_points
from wuimport.sink import print_batch, upload_batch

DayErrorHandler = Callable[[date, DayFetchError], None]


@dataclass
class RunSummary:
    """Counts for one pass over the date range."""

    days: int = 0
    failed_days: list[date] = field(default_factory=list)
    points: int = 0

    @property
    def ok_days(self) -> int:
        return self.days - len(self.failed_days)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from start to end, both inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def report_day_error(day: date, error: DayFetchError) -> None:
    print(f"[wunderground] failed to get points for {day}: {error}", file=sys.stderr)


def collect_batch(
    fetcher: DayFetcher,
    start: date,
    end: date,
    batch: Batch,
    on_error: DayErrorHandler = report_day_error,
) -> RunSummary:
    """Fetch every day in [start, end] into batch, one request at a time.

    A DayFetchError is handed to on_error and the day adds no points.
    """
    summary = RunSummary()
    for day in iter_days(start, end):
        summary.days += 1
        try:
            points = fetcher.fetch_day(day)
        except DayFetchError as e:
            summary.failed_days.append(day)
            on_error(day, e)
            continue
        batch.add_points(points)
        summary.points += len(points)
    return summary


def run_import(
    config: ImportConfig,
    fetcher: DayFetcher | None = None,
    stdout: TextIO | None = None,
) -> RunSummary:
    """Run a whole import described by config.

    Raises:
        ValueError: If the batch cannot be created or fails validation
        UploadError: If writing to InfluxDB fails
    """
    batch = Batch(measurement=config.measurement, database=config.influx.database)
    fetcher = fetcher or make_fetcher(config)

    print(
        f"[wunderground] Fetching {config.station_id} ({config.source}) "
        f"from {config.start_date} to {config.end_date}",
        file=sys.stderr,
    )
    summary = collect_batch(fetcher, config.start_date, config.end_date, batch)

    df = points_to_frame(batch.valid_points())
    print(
        f"[wunderground] days={summary.days} failed={len(summary.failed_days)} "
        f"{describe_points(df)}",
        file=sys.stderr,
    )
    if config.validate:
        validate_points(df)

    if config.upload:
        upload_batch(batch, config.influx)
    else:
        print_batch(batch, stdout)
    return summary
