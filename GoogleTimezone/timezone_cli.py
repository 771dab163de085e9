"""Command-line tool for testing Google Maps Time Zone API lookups."""
import argparse
import json
import logging
import os
import sys
from datetime import datetime
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from cache_store import FileCacheStore
from timezone_client import TimezoneClient
from timezone_response import TimezoneResponse
from timezone_result import is_failure

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_CACHE_FILE = os.path.join(BASE_DIR, ".timezone-cache.json")
DEFAULT_CACHE_DURATION = 86400

_TRUE_VALUES = {"1", "true", "yes", "on"}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("Google timezone lookup")
    parser.add_argument("--lat", type=float, help="Latitude (-90 to 90)")
    parser.add_argument("--lon", type=float, help="Longitude (-180 to 180)")
    parser.add_argument("--timestamp", help="Epoch seconds or ISO date/time (default: now)")
    parser.add_argument("--language", help="Language code for the timezone name, e.g. fr")
    parser.add_argument("--no-cache", action="store_true", help="Disable response caching")
    parser.add_argument("--cache-duration", type=int, help="Cache lifetime in seconds")
    parser.add_argument("--cache-file", default=DEFAULT_CACHE_FILE)
    parser.add_argument("--clear-cache", action="store_true", help="Delete all cached lookups")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    if (args.lat is None) != (args.lon is None):
        parser.error("--lat and --lon must be given together")
    if args.lat is None and not args.clear_cache:
        parser.error("nothing to do: give --lat/--lon or --clear-cache")
    return args


def setup_logging(log_file: Optional[str], verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.WARNING
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers
    )
    # urllib3 logs request lines at DEBUG, query string and API key included
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def load_config() -> Tuple[str, bool, int]:
    load_dotenv()
    api_key = os.getenv("GOOGLE_TIMEZONE_API_KEY")
    enable_cache = os.getenv("GOOGLE_TIMEZONE_ENABLE_CACHE", "true").strip().lower() in _TRUE_VALUES
    cache_duration = os.getenv("GOOGLE_TIMEZONE_CACHE_DURATION", str(DEFAULT_CACHE_DURATION))

    if not api_key:
        raise SystemExit("Missing GOOGLE_TIMEZONE_API_KEY in environment")

    try:
        cache_duration_val = int(cache_duration)
    except ValueError as exc:
        raise SystemExit(f"Invalid cache duration: {exc}") from exc

    logging.info("Configuration loaded: cache=%s duration=%ss", enable_cache, cache_duration_val)
    return api_key, enable_cache, cache_duration_val


def parse_timestamp(value: Optional[str]) -> Optional[int]:
    """Accept epoch seconds or an ISO-8601 date/time (naive means local time)."""
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return int(datetime.fromisoformat(value).timestamp())
    except ValueError as exc:
        raise SystemExit(f"Invalid timestamp: {value}") from exc


def build_client(api_key: str, enable_cache: bool, cache_duration: int, cache_file: str) -> TimezoneClient:
    store = FileCacheStore(cache_file)
    client = TimezoneClient(
        api_key=api_key,
        enable_cache=enable_cache,
        cache_expiration=cache_duration,
        cache_store=store,
    )
    logging.info("Timezone client ready (cache=%s, ttl=%ss)", enable_cache, cache_duration)
    return client


def _seconds(value: Optional[int]) -> str:
    return f"{value} seconds" if value is not None else "N/A"


def format_timezone_lines(result: TimezoneResponse) -> List[str]:
    local = result.local_datetime()
    rows = [
        ("Timezone ID", result.timezone_id() or "N/A"),
        ("Timezone Name", result.timezone_name() or "N/A"),
        ("Abbreviated Name", result.abbreviated_name() or "N/A"),
        ("Raw UTC Offset", _seconds(result.raw_offset())),
        ("DST Offset", _seconds(result.dst_offset())),
        ("Total Offset", _seconds(result.total_offset())),
        ("Formatted Offset", result.formatted_offset() or "N/A"),
        ("Is DST Active", "Yes" if result.is_dst() else "No"),
        ("Local Date/Time", local.strftime("%Y-%m-%d %H:%M:%S") if local else "N/A"),
    ]
    width = max(len(label) for label, _ in rows)
    return [f"{label:<{width}}  {value}" for label, value in rows]


def run(args: argparse.Namespace, client: TimezoneClient) -> int:
    exit_code = 0

    if args.lat is not None:
        result = client.get_timezone(
            args.lat,
            args.lon,
            parse_timestamp(args.timestamp),
            args.language or None,
        )
        if is_failure(result):
            logging.error("Timezone lookup failed (%s): %s", result.kind.value, result.message)
            print(result.message, file=sys.stderr)
            exit_code = 1
        elif args.json:
            print(json.dumps(result.to_dict(include_datetime=True), indent=2))
        else:
            print("\n".join(format_timezone_lines(result)))

    if args.clear_cache:
        if client.clear_cache():
            print("Cache cleared successfully")
        else:
            print("Failed to clear cache", file=sys.stderr)
            exit_code = 1

    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    api_key, enable_cache, cache_duration = load_config()

    if args.no_cache:
        enable_cache = False
    if args.cache_duration is not None:
        cache_duration = args.cache_duration

    client = build_client(api_key, enable_cache, cache_duration, args.cache_file)
    return run(args, client)


if __name__ == "__main__":
    sys.exit(main())
