"""Data model definitions: cities in, label intervals and orbit assignments out."""

import uuid
from dataclasses import dataclass, field
from datetime import tzinfo

from clockrings.geometry import Arc, free_arcs, intervals_overlap
from clockrings.timezones import city_name, iata_code, resolve_time_zone


@dataclass(frozen=True)
class WorldCity:
    """A city shown on the dial. Consumed by the engine, owned by the caller."""

    name: str  # "Tokyo"
    time_zone_identifier: str  # IANA identifier ("Asia/Tokyo")
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    code: str | None = None  # Label override; None = derive from name

    @property
    def time_zone(self) -> tzinfo | None:
        return resolve_time_zone(self.time_zone_identifier)

    @property
    def iata_code(self) -> str:
        """Short label drawn on the ring ("TYO")."""
        if self.code is not None:
            return self.code
        return iata_code(city_name(self.time_zone_identifier))

    @classmethod
    def make(cls, identifier: str) -> "WorldCity":
        """City named after its zone, keyed by the zone identifier."""
        return cls(
            name=city_name(identifier), time_zone_identifier=identifier, id=identifier
        )

    @classmethod
    def from_identifiers(cls, identifiers: list[str]) -> tuple["WorldCity", ...]:
        """Cities for every identifier pytz can resolve; the rest are dropped."""
        return tuple(
            cls.make(identifier)
            for identifier in identifiers
            if resolve_time_zone(identifier) is not None
        )


@dataclass(frozen=True)
class LabelInterval:
    """Angular extent of one city label. Never wraps past 2π."""

    city_id: str
    angle: float  # Label center, radians in [0, 2π)
    start: float  # Radians, start <= end
    end: float

    @property
    def arc(self) -> Arc:
        return (self.start, self.end)

    def overlaps(self, other: "LabelInterval") -> bool:
        return intervals_overlap(self.arc, other.arc)


@dataclass(frozen=True)
class OrbitDistributionResult:
    """Engine output. The sole input to ring renderers and the city picker."""

    assignment: dict[str, int]  # city id → orbit (1 = outer, 2 = middle)
    intervals: tuple[LabelInterval, ...] = ()
    conflicts: tuple[str, ...] = ()  # One line per city that still collides

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    @property
    def conflict_message(self) -> str | None:
        return "\n".join(self.conflicts) if self.conflicts else None

    def cities_on(self, orbit: int) -> list[str]:
        return [city_id for city_id, o in self.assignment.items() if o == orbit]

    def free_arcs(self, orbit: int) -> list[Arc]:
        """Arcs of the given ring not covered by any label placed on it."""
        placed = set(self.cities_on(orbit))
        return free_arcs(
            [interval.arc for interval in self.intervals if interval.city_id in placed]
        )
