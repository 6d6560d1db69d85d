"""Pytest configuration and fixtures."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable
from urllib.parse import parse_qs, urlsplit

import pytest

from wuimport.schemas.point import Point, station_tags

# Directory containing test fixtures
FIXTURES_DIR = Path(__file__).parent / "fixtures"


@dataclass
class FakeResponse:
    status_code: int = 200
    text: str = ""
    reason: str = "OK"


@dataclass
class FakeSession:
    """Stands in for requests.Session; routes each GET through handler."""

    handler: Callable[[str], FakeResponse]
    calls: list[str] = field(default_factory=list)

    def get(self, url: str, timeout: float | None = None) -> FakeResponse:
        self.calls.append(url)
        return self.handler(url)

    def queries(self) -> list[dict[str, str]]:
        """Decoded query string of every call, in call order."""
        return [
            {k: v[0] for k, v in parse_qs(urlsplit(url).query).items()}
            for url in self.calls
        ]


@pytest.fixture
def fake_response() -> type[FakeResponse]:
    return FakeResponse


@pytest.fixture
def legacy_csv_text() -> str:
    """One day of legacy WXDailyHistory CSV."""
    return (FIXTURES_DIR / "legacy_day.csv").read_text()


@pytest.fixture
def pws_json_text() -> str:
    """One day of v2 PWS history JSON."""
    return (FIXTURES_DIR / "pws_history_day.json").read_text()


@pytest.fixture
def make_session():
    """Factory fixture for fake sessions.

    Pass either a single body returned for every call, or a handler.
    """

    def _make(
        body: str | None = None,
        status_code: int = 200,
        handler: Callable[[str], FakeResponse] | None = None,
    ) -> FakeSession:
        if handler is None:
            reason = "OK" if status_code == 200 else "Error"
            response = FakeResponse(status_code=status_code, text=body or "", reason=reason)
            handler = lambda url: response  # noqa: E731
        return FakeSession(handler=handler)

    return _make


@pytest.fixture
def make_point():
    """Factory fixture for creating points."""

    def _make(
        station_id: str = "KXXTEST1",
        ts: datetime | None = None,
        temperature: float = 21.5,
        humidity: int = 55,
        measurement: str = "weather",
    ) -> Point:
        if ts is None:
            ts = datetime(2024, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
        return Point(
            measurement=measurement,
            time=ts,
            tags=station_tags(station_id),
            fields={"temperature": temperature, "humidity": humidity},
        )

    return _make
