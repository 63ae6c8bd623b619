"""CLI entry point for orbit assignment.

    uv run python -m clockrings.orbits --at "2024-01-15 12:30" Asia/Tokyo Europe/London
"""

import argparse
import logging
from datetime import datetime

from dotenv import load_dotenv

load_dotenv()

from pytz import utc  # noqa: E402

from clockrings.constants import LabelMetrics, log_level  # noqa: E402
from clockrings.distribution import distribute_cities  # noqa: E402
from clockrings.models import WorldCity  # noqa: E402
from clockrings.timezones import recommended_identifiers  # noqa: E402


def _parse_at(value: str) -> datetime:
    """Naive values are UTC; an ISO string with an offset keeps it."""
    at = datetime.fromisoformat(value)
    return at if at.tzinfo is not None else utc.localize(at)


def format_rows(cities: list[WorldCity], at: datetime, lang: str = "en") -> list[str]:
    """One line per city: code, local time, ring. Conflict lines follow."""
    result = distribute_cities(cities, at, LabelMetrics.from_env(), lang=lang)
    rows: list[str] = []
    for city in cities:
        orbit = result.assignment.get(city.id)
        tz = city.time_zone
        if orbit is None or tz is None:
            rows.append(f"{city.iata_code:<4}  --:--  skipped ({city.time_zone_identifier})")
            continue
        local = at.astimezone(tz).strftime("%H:%M")
        rows.append(f"{city.iata_code:<4}  {local}  orbit {orbit}")
    rows.extend(result.conflicts)
    return rows


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Assign world-clock city labels to the two label rings."
    )
    parser.add_argument(
        "zones", nargs="*", help="IANA time zone identifiers (default: recommended set)"
    )
    parser.add_argument(
        "--at", type=_parse_at, default=None, help="Instant, 'YYYY-MM-DD HH:MM' UTC"
    )
    parser.add_argument("--lang", default="en", choices=["en", "ru"])
    args = parser.parse_args(argv)

    logging.basicConfig(level=log_level(), format="%(levelname)s %(name)s: %(message)s")

    at = args.at or datetime.now(utc)
    cities = [WorldCity.make(z) for z in (args.zones or recommended_identifiers())]
    for row in format_rows(cities, at, args.lang):
        print(row)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
