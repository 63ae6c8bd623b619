"""Time-zone directory: IANA identifiers to city names, offsets and label codes."""

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo

from pytz import UnknownTimeZoneError, common_timezones, timezone, utc

logger = logging.getLogger(__name__)

# City name → 3-letter IATA metropolitan code shown on the label rings
IATA_CODES: dict[str, str] = {
    # Americas
    "New York": "NYC",
    "Los Angeles": "LAX",
    "San Francisco": "SFO",
    "Chicago": "CHI",
    "Miami": "MIA",
    "Denver": "DEN",
    "Phoenix": "PHX",
    # Europe
    "London": "LON",
    "Paris": "PAR",
    "Berlin": "BER",
    "Rome": "ROM",
    "Madrid": "MAD",
    "Amsterdam": "AMS",
    "Brussels": "BRU",
    "Vienna": "VIE",
    "Prague": "PRG",
    "Warsaw": "WAW",
    "Athens": "ATH",
    "Lisbon": "LIS",
    "Dublin": "DUB",
    "Copenhagen": "CPH",
    "Stockholm": "STO",
    "Oslo": "OSL",
    "Helsinki": "HEL",
    "Moscow": "MOW",
    "Saint Petersburg": "LED",
    # Asia
    "Tokyo": "TYO",
    "Shanghai": "SHA",
    "Beijing": "BJS",
    "Hong Kong": "HKG",
    "Singapore": "SIN",
    "Dubai": "DXB",
    "Bangkok": "BKK",
    "Seoul": "SEL",
    "Delhi": "DEL",
    "Mumbai": "BOM",
    "Istanbul": "IST",
    "Tel Aviv": "TLV",
    # Oceania
    "Sydney": "SYD",
    "Melbourne": "MEL",
    "Auckland": "AKL",
    # South America
    "Rio de Janeiro": "RIO",
    "Sao Paulo": "SAO",
    "Buenos Aires": "BUE",
    # Africa
    "Cairo": "CAI",
    "Johannesburg": "JNB",
    "Cape Town": "CPT",
}

DEFAULT_IDENTIFIERS = (
    "Europe/London",
    "America/New_York",
    "Europe/Berlin",
    "Asia/Tokyo",
    "Asia/Shanghai",
)


@dataclass(frozen=True)
class TimeZoneEntry:
    """One row of the city picker catalogue."""

    id: str  # IANA identifier
    name: str  # "Tokyo, Asia"
    gmt_offset: str  # "GMT+9:00"

    @property
    def display_name(self) -> str:
        return f"{self.name} ({self.gmt_offset})"


def resolve_time_zone(identifier: str) -> tzinfo | None:
    """pytz zone for an IANA identifier, or None if pytz does not know it."""
    try:
        return timezone(identifier)
    except UnknownTimeZoneError:
        return None


def city_name(identifier: str) -> str:
    """Last path segment with spaces: America/New_York → New York."""
    return identifier.split("/")[-1].replace("_", " ")


def display_name(identifier: str) -> str:
    """City name followed by its region: America/New_York → New York, America."""
    parts = identifier.split("/")
    city = city_name(identifier)
    if len(parts) > 1:
        region = parts[0].replace("_", " ")
        if region:
            return f"{city}, {region}"
    return city


def iata_code(name: str) -> str:
    """Label code for a city name; unknown cities use their first three letters."""
    code = IATA_CODES.get(name)
    if code is not None:
        return code
    return name[:3].upper()


def gmt_offset_string(identifier: str, at: datetime | None = None) -> str:
    """UTC offset of a zone at an instant, e.g. "GMT+5:30" or "GMT-3:00".

    Unknown identifiers yield plain "GMT".
    """
    tz = resolve_time_zone(identifier)
    if tz is None:
        return "GMT"
    if at is None:
        at = datetime.now(utc)
    elif at.tzinfo is None:
        at = utc.localize(at)
    offset = at.astimezone(tz).utcoffset()
    seconds = int(offset.total_seconds()) if offset is not None else 0
    sign = "-" if seconds < 0 else "+"
    hours, remainder = divmod(abs(seconds), 3600)
    return f"GMT{sign}{hours}:{remainder // 60:02d}"


def all_entries(at: datetime | None = None) -> list[TimeZoneEntry]:
    """Catalogue of selectable zones, sorted case-insensitively by name."""
    entries = [
        TimeZoneEntry(
            id=identifier,
            name=display_name(identifier),
            gmt_offset=gmt_offset_string(identifier, at),
        )
        for identifier in common_timezones
    ]
    return sorted(entries, key=lambda e: e.name.casefold())


def recommended_identifiers(base: str = "UTC") -> list[str]:
    """Default selection: the caller's own zone first, then the usual hubs."""
    identifiers: list[str] = []
    for identifier in (base, *DEFAULT_IDENTIFIERS):
        if identifier in identifiers:
            continue
        if resolve_time_zone(identifier) is None:
            logger.debug("Skipping unknown default zone %s", identifier)
            continue
        identifiers.append(identifier)
    return identifiers
