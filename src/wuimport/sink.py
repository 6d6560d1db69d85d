"""Output stage: print a batch as line protocol or write it to InfluxDB."""

from __future__ import annotations

import sys
from typing import Any, Callable, TextIO

import requests
from influxdb import InfluxDBClient
from influxdb.exceptions import InfluxDBClientError, InfluxDBServerError
from influxdb.line_protocol import make_lines

from wuimport.config import InfluxConfig
from wuimport.errors import UploadError
from wuimport.schemas.point import Batch, Point

# Points are stored with second precision, printed with nanoseconds.
WRITE_PRECISION = "s"

_CLIENT_ERRORS = (requests.RequestException, InfluxDBClientError, InfluxDBServerError)


def point_to_line(point: Point) -> str:
    """Render a point as one line of InfluxDB line protocol, ns timestamp."""
    return make_lines({"points": [point.to_influx()]}, precision="n").rstrip("\n")


def print_batch(batch: Batch, stream: TextIO | None = None) -> int:
    """Write each non-null point to stream, one line each.

    Returns:
        Number of lines written
    """
    out = stream or sys.stdout
    count = 0
    for point in batch.points:
        if point is None:
            continue
        print(point_to_line(point), file=out)
        count += 1
    return count


def open_client(
    influx: InfluxConfig,
    client_factory: Callable[..., Any] | None = None,
) -> Any:
    factory = client_factory or InfluxDBClient
    return factory(
        host=influx.host,
        port=influx.port,
        username=influx.username,
        password=influx.password,
        database=influx.database,
        ssl=influx.ssl,
        verify_ssl=influx.ssl,
        timeout=influx.timeout,
        retries=1,
        path=influx.path,
    )


def upload_batch(
    batch: Batch,
    influx: InfluxConfig,
    client_factory: Callable[..., Any] | None = None,
) -> int:
    """Ping InfluxDB, write the whole batch in one call, then close the client.

    Returns:
        Number of points written

    Raises:
        UploadError: If the client cannot be created, the ping fails or the
            write fails
    """
    try:
        client = open_client(influx, client_factory)
    except (*_CLIENT_ERRORS, ValueError) as e:
        raise UploadError(f"failed to create InfluxDB client for {influx.addr}: {e}") from e

    try:
        try:
            client.ping()
        except _CLIENT_ERRORS as e:
            raise UploadError(f"InfluxDB at {influx.addr} is not reachable: {e}") from e

        points = [p.to_influx() for p in batch.valid_points()]
        if not points:
            print(f"[influx] nothing to write to {batch.database}", file=sys.stderr)
            return 0

        try:
            client.write_points(
                points,
                time_precision=WRITE_PRECISION,
                database=batch.database,
            )
        except _CLIENT_ERRORS as e:
            raise UploadError(
                f"failed to write {len(points)} points to {batch.database}: {e}"
            ) from e
    finally:
        client.close()

    print(f"[influx] wrote {len(points)} points to {batch.database}", file=sys.stderr)
    return len(points)
