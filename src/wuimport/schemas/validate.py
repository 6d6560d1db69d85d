"""Validation helpers for point batches.

All helpers take a DataFrame built from points and raise ValueError with:
- Dataset name (if provided)
- Offending columns
- Count of failing rows
- Sample of failing row indices (first 5)
"""

from __future__ import annotations

from typing import Any, Iterable

import pandas as pd


def _format_error(
    dataset: str | None,
    rule: str,
    detail: str,
    failing_indices: list[Any] | None = None,
    count: int | None = None,
) -> str:
    parts = []
    if dataset:
        parts.append(f"[{dataset}]")
    parts.append(rule)
    parts.append(f": {detail}")
    if count is not None:
        parts.append(f" ({count} rows)")
    if failing_indices:
        parts.append(f" | sample indices: {failing_indices[:5]}")
    return "".join(parts)


def require_columns(
    df_columns: Iterable[str],
    required: Iterable[str],
    dataset: str | None = None,
) -> None:
    """Raise ValueError if required columns are missing."""
    missing = set(required) - set(df_columns)
    if missing:
        raise ValueError(
            _format_error(dataset, "Missing columns", f"{sorted(missing)}")
        )


def require_no_nulls(
    df: pd.DataFrame,
    cols: Iterable[str],
    dataset: str | None = None,
) -> None:
    """Raise ValueError if any of cols contains nulls.

    Columns absent from df are ignored; require_columns reports those.
    """
    for col in cols:
        if col not in df.columns:
            continue

        null_mask = df[col].isna()
        null_count = int(null_mask.sum())
        if null_count:
            raise ValueError(
                _format_error(
                    dataset,
                    "Null values",
                    f"column '{col}' has nulls",
                    df.index[null_mask].tolist(),
                    null_count,
                )
            )


def require_unique(
    df: pd.DataFrame,
    key_cols: list[str],
    dataset: str | None = None,
) -> None:
    """Raise ValueError if the key columns repeat a combination."""
    if df.empty or any(col not in df.columns for col in key_cols):
        return

    dup_mask = df.duplicated(subset=key_cols, keep=False)
    dup_count = int(dup_mask.sum())
    if dup_count:
        raise ValueError(
            _format_error(
                dataset,
                "Duplicate keys",
                f"columns {key_cols} have duplicates",
                df.index[dup_mask].tolist(),
                dup_count,
            )
        )


def require_timezone_utc(
    df: pd.DataFrame,
    ts_col: str,
    dataset: str | None = None,
) -> None:
    """Raise ValueError if ts_col is not a tz-aware UTC datetime column."""
    if ts_col not in df.columns or df.empty:
        return

    dtype = df[ts_col].dtype
    tz = getattr(dtype, "tz", None)
    if tz is None:
        raise ValueError(
            _format_error(
                dataset,
                "Timezone required",
                f"column '{ts_col}' must be tz-aware UTC, got {dtype}",
            )
        )

    if str(tz).upper() not in ("UTC", "TIMEZONE.UTC", "ZONEINFO.ZONEINFO('UTC')"):
        raise ValueError(
            _format_error(
                dataset,
                "Wrong timezone",
                f"column '{ts_col}' must be UTC, got {tz}",
            )
        )


def require_range(
    df: pd.DataFrame,
    col: str,
    lo: float,
    hi: float,
    allow_null: bool = False,
    dataset: str | None = None,
) -> None:
    """Raise ValueError if values in col fall outside [lo, hi]."""
    if col not in df.columns or df.empty:
        return

    series = pd.to_numeric(df[col], errors="coerce")
    if allow_null:
        series = series.dropna()

    out_of_range = (series < lo) | (series > hi) | series.isna()
    bad_count = int(out_of_range.sum())
    if bad_count:
        raise ValueError(
            _format_error(
                dataset,
                "Out of range",
                f"column '{col}' must be in [{lo}, {hi}]",
                series.index[out_of_range].tolist(),
                bad_count,
            )
        )
