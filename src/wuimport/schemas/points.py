"""Tabular view of a point batch.

Flattening points into a DataFrame lets the run report coverage and, when
asked, reject a batch before anything is printed or written:
- time is tz-aware UTC
- station and provider are never null
- (time, station) is unique
- temperature and humidity stay inside physical bounds
"""

from __future__ import annotations

from typing import Iterable

import pandas as pd

from wuimport.schemas.point import TAG_PROVIDER, TAG_STATION, Point
from wuimport.schemas.validate import (
    require_columns,
    require_no_nulls,
    require_range,
    require_timezone_utc,
    require_unique,
)

TIME_COLUMN = "time"
REQUIRED_COLUMNS = [TIME_COLUMN, TAG_STATION, TAG_PROVIDER]

_DATASET_NAME = "wunderground_points"


def points_to_frame(points: Iterable[Point]) -> pd.DataFrame:
    """Flatten points into one row per point: time, tags, then fields."""
    rows = [{TIME_COLUMN: p.time, **p.tags, **p.fields} for p in points]
    if not rows:
        return pd.DataFrame(columns=REQUIRED_COLUMNS)

    df = pd.DataFrame(rows)
    df[TIME_COLUMN] = pd.to_datetime(df[TIME_COLUMN], utc=True)
    return df


def validate_points(df: pd.DataFrame, require_unique_keys: bool = True) -> None:
    """Validate a frame produced by points_to_frame.

    Raises:
        ValueError: If any check fails
    """
    require_columns(df.columns, REQUIRED_COLUMNS, dataset=_DATASET_NAME)

    if df.empty:
        return

    require_timezone_utc(df, TIME_COLUMN, dataset=_DATASET_NAME)
    require_no_nulls(df, REQUIRED_COLUMNS, dataset=_DATASET_NAME)

    require_range(df, "temperature", lo=-90, hi=60, allow_null=True, dataset=_DATASET_NAME)
    require_range(df, "humidity", lo=0, hi=100, allow_null=True, dataset=_DATASET_NAME)

    if require_unique_keys:
        require_unique(df, [TIME_COLUMN, TAG_STATION], dataset=_DATASET_NAME)


def describe_points(df: pd.DataFrame) -> str:
    """One-line summary of a point frame for progress output."""
    if df.empty:
        return "rows=0"
    min_ts = df[TIME_COLUMN].min()
    max_ts = df[TIME_COLUMN].max()
    stations = ",".join(sorted(df[TAG_STATION].dropna().unique()))
    return f"rows={len(df)} stations={stations} coverage={min_ts} -> {max_ts}"
