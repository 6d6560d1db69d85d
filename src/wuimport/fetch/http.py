"""HTTP access shared by the per-day fetchers."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping

import requests

from wuimport.errors import DayFetchError


def build_url(base_url: str, params: Mapping[str, str]) -> str:
    return requests.Request("GET", base_url, params=dict(params)).prepare().url


def redacted_url(
    base_url: str,
    params: Mapping[str, str],
    secrets: Iterable[str] = (),
) -> str:
    """Build the request URL with secret query values masked, for messages."""
    hidden = set(secrets)
    shown = {k: ("***" if k in hidden else v) for k, v in params.items()}
    return build_url(base_url, shown)


def get_day(
    session: requests.Session,
    base_url: str,
    params: Mapping[str, str],
    day: date,
    timeout: float,
    secrets: Iterable[str] = (),
) -> str:
    """GET one day of history and return the response body.

    Raises:
        DayFetchError: On transport failure or any status other than 200
    """
    url = build_url(base_url, params)
    shown = redacted_url(base_url, params, secrets)
    try:
        response = session.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise DayFetchError(day, f"failed to get {shown}: {e}") from e

    if response.status_code != 200:
        raise DayFetchError(
            day,
            f"failed to get {shown}: status code {response.status_code} {response.reason}",
        )
    return response.text
