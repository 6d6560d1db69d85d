"""Command line entry point for the Weather Underground importer.

Usage:
    wunderground-import -i KCASANFR123 --api-key $KEY -s 2024-01-01 -e 2024-01-31
    wunderground-import -i KCASANFR123 --source csv --upload --influx-db weather

Environment (also read from a .env file in the working directory):
    WUNDERGROUND_API_KEY  default for --api-key
    INFLUX_PASSWORD       default for --influx-password
"""

from __future__ import annotations

import argparse
import os
import sys
from datetime import timedelta

from dotenv import find_dotenv, load_dotenv

from wuimport.config import (
    DEFAULT_INFLUX_ADDR,
    SOURCES,
    ImportConfig,
    InfluxConfig,
    parse_flag_date,
    utc_today,
)
from wuimport.errors import UploadError
from wuimport.pipeline import run_import


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wunderground-import",
        description="Import Weather Underground PWS history into InfluxDB.",
    )
    parser.add_argument(
        "--upload",
        action="store_true",
        help="Upload data to InfluxDB, otherwise the data will be printed",
    )
    parser.add_argument("--influx-addr", default=DEFAULT_INFLUX_ADDR, help="InfluxDB HTTP address")
    parser.add_argument("--influx-user", default="", help="InfluxDB username")
    parser.add_argument(
        "--influx-password",
        default=os.environ.get("INFLUX_PASSWORD", ""),
        help="InfluxDB password",
    )
    parser.add_argument("--influx-db", default="weather", help="InfluxDB database")
    parser.add_argument(
        "--influx-timeout",
        type=float,
        default=1.0,
        help="InfluxDB ping/write timeout in seconds (default: 1)",
    )
    parser.add_argument("--measurement-name", default="weather", help="Measurement name")
    parser.add_argument("-i", "--station-id", default="", help="Wunderground station ID")
    parser.add_argument(
        "-s",
        "--start-date",
        default="",
        help="Start date (YYYY-MM-DD), default is yesterday",
    )
    parser.add_argument(
        "-e",
        "--end-date",
        default="",
        help="End date (YYYY-MM-DD, inclusive), default is today",
    )
    parser.add_argument(
        "--source",
        choices=SOURCES,
        default="json",
        help="History format to request: json (v2 API) or csv (legacy)",
    )
    parser.add_argument(
        "--api-key",
        default=os.environ.get("WUNDERGROUND_API_KEY"),
        help="weather.com API key (json source only)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Per-day HTTP timeout in seconds (default: 30)",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Fail before output if the collected points break schema checks",
    )
    return parser


def build_config(args: argparse.Namespace) -> ImportConfig:
    """Turn parsed flags into an ImportConfig.

    Raises:
        ValueError: On malformed dates or invalid settings
    """
    today = utc_today()
    return ImportConfig(
        station_id=args.station_id,
        start_date=parse_flag_date(args.start_date, today - timedelta(days=1)),
        end_date=parse_flag_date(args.end_date, today),
        source=args.source,
        api_key=args.api_key,
        measurement=args.measurement_name,
        upload=args.upload,
        influx=InfluxConfig(
            addr=args.influx_addr,
            username=args.influx_user,
            password=args.influx_password,
            database=args.influx_db,
            timeout=args.influx_timeout,
        ),
        http_timeout=args.timeout,
        validate=args.validate,
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    load_dotenv(find_dotenv(usecwd=True))
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except ValueError as e:
        parser.print_usage(sys.stderr)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        run_import(config)
    except (UploadError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
