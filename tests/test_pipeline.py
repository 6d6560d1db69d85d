"""Tests for the date range driver."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone

import pytest

from wuimport.config import ImportConfig, InfluxConfig
from wuimport.errors import DayFetchError, UploadError
from wuimport.fetch import DayFetcher, LegacyCsvFetcher, PwsHistoryFetcher, make_fetcher
from wuimport.pipeline import collect_batch, iter_days, run_import
from wuimport.schemas.point import Batch, Point, station_tags


@dataclass
class RecordingFetcher:
    """Returns one point per day, failing on the given days."""

    fail_on: set[date] = field(default_factory=set)
    calls: list[date] = field(default_factory=list)

    def fetch_day(self, day: date) -> list[Point]:
        self.calls.append(day)
        if day in self.fail_on:
            raise DayFetchError(day, f"boom on {day}")
        ts = datetime(day.year, day.month, day.day, 12, tzinfo=timezone.utc)
        return [
            Point(
                measurement="weather",
                time=ts,
                tags=station_tags("KXXTEST1"),
                fields={"temperature": 20.0, "humidity": 50},
            )
        ]


def _batch() -> Batch:
    return Batch(measurement="weather", database="weather")


class TestIterDays:
    @pytest.mark.parametrize("n_days", [1, 2, 31, 366])
    def test_count_is_inclusive(self, n_days: int) -> None:
        start = date(2024, 1, 1)
        end = start + timedelta(days=n_days - 1)
        days = list(iter_days(start, end))

        assert len(days) == n_days
        assert days[0] == start
        assert days[-1] == end

    def test_ascending_across_month_and_leap_day(self) -> None:
        days = list(iter_days(date(2024, 2, 27), date(2024, 3, 2)))
        assert days == [
            date(2024, 2, 27),
            date(2024, 2, 28),
            date(2024, 2, 29),
            date(2024, 3, 1),
            date(2024, 3, 2),
        ]

    def test_reversed_range_is_empty(self) -> None:
        assert list(iter_days(date(2024, 1, 2), date(2024, 1, 1))) == []


class TestCollectBatch:
    def test_one_fetch_per_day_in_order(self) -> None:
        fetcher = RecordingFetcher()
        batch = _batch()

        summary = collect_batch(fetcher, date(2024, 1, 1), date(2024, 1, 5), batch)

        assert fetcher.calls == list(iter_days(date(2024, 1, 1), date(2024, 1, 5)))
        assert summary.days == 5
        assert summary.points == 5
        assert len(batch) == 5

    def test_failed_day_is_skipped_not_fatal(self) -> None:
        bad_day = date(2024, 1, 2)
        fetcher = RecordingFetcher(fail_on={bad_day})
        batch = _batch()
        errors = []

        summary = collect_batch(
            fetcher,
            date(2024, 1, 1),
            date(2024, 1, 3),
            batch,
            on_error=lambda day, e: errors.append((day, str(e))),
        )

        assert len(fetcher.calls) == 3
        assert summary.failed_days == [bad_day]
        assert summary.ok_days == 2
        assert len(batch) == 2
        assert errors == [(bad_day, "boom on 2024-01-02")]

    def test_default_handler_reports_to_stderr(self, capsys) -> None:
        fetcher = RecordingFetcher(fail_on={date(2024, 1, 1)})
        collect_batch(fetcher, date(2024, 1, 1), date(2024, 1, 1), _batch())

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "failed to get points for 2024-01-01" in captured.err

    def test_csv_header_mismatch_only_fails_that_day(
        self, make_session, fake_response, legacy_csv_text: str
    ) -> None:
        broken = legacy_csv_text.replace("Humidity", "humidity")

        def handler(url: str):
            body = broken if "day=2&" in url else legacy_csv_text
            return fake_response(text=body)

        fetcher = LegacyCsvFetcher(station_id="KTEST1", session=make_session(handler=handler))
        batch = _batch()
        summary = collect_batch(
            fetcher, date(2018, 6, 1), date(2018, 6, 3), batch, on_error=lambda d, e: None
        )

        assert summary.failed_days == [date(2018, 6, 2)]
        assert len(batch) == 6


class TestMakeFetcher:
    def test_csv(self) -> None:
        config = ImportConfig(station_id="KTEST1", source="csv")
        fetcher = make_fetcher(config)
        assert isinstance(fetcher, LegacyCsvFetcher)
        assert isinstance(fetcher, DayFetcher)

    def test_json(self) -> None:
        config = ImportConfig(station_id="KTEST1", source="json", api_key="secret")
        fetcher = make_fetcher(config)
        assert isinstance(fetcher, PwsHistoryFetcher)
        assert fetcher.api_key == "secret"


class TestRunImport:
    def test_print_mode(self) -> None:
        config = ImportConfig(
            station_id="KXXTEST1",
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 3),
            source="csv",
        )
        out = io.StringIO()

        summary = run_import(config, fetcher=RecordingFetcher(), stdout=out)

        lines = out.getvalue().splitlines()
        assert summary.points == 3
        assert len(lines) == 3
        assert all(line.startswith("weather,") for line in lines)

    def test_upload_failure_is_fatal_after_fetching(self, monkeypatch) -> None:
        def _fail(batch, influx):
            raise UploadError("InfluxDB at http://localhost:8086 is not reachable")

        monkeypatch.setattr("wuimport.pipeline.upload_batch", _fail)
        fetcher = RecordingFetcher()
        config = ImportConfig(
            station_id="KXXTEST1",
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 2),
            source="csv",
            upload=True,
            influx=InfluxConfig(),
        )

        with pytest.raises(UploadError):
            run_import(config, fetcher=fetcher)
        assert len(fetcher.calls) == 2

    def test_validate_rejects_bad_batch(self) -> None:
        @dataclass
        class HotFetcher:
            def fetch_day(self, day: date) -> list[Point]:
                return [
                    Point(
                        measurement="weather",
                        time=datetime(2024, 1, 1, tzinfo=timezone.utc),
                        tags=station_tags("KXXTEST1"),
                        fields={"temperature": 95.0},
                    )
                ]

        config = ImportConfig(
            station_id="KXXTEST1",
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 1),
            source="csv",
            validate=True,
        )
        out = io.StringIO()
        with pytest.raises(ValueError, match="Out of range"):
            run_import(config, fetcher=HotFetcher(), stdout=out)
        assert out.getvalue() == ""
