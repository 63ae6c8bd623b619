"""Orbit assignment engine: spread city labels over two rings without overlap.

Pipeline: cities → label intervals (seam-split) → overlap clusters → orbits.
Clusters of overlapping labels are dealt round-robin across the two rings in
angle order; isolated labels go to whichever ring currently holds fewer.
"""

import logging
import math
from collections.abc import Iterable, Sequence
from datetime import datetime

from clockrings.constants import LabelMetrics
from clockrings.geometry import (
    TWO_PI,
    calculate_arrow_angle,
    local_hour24,
    normalize_angle,
    split_arc,
)
from clockrings.i18n import t
from clockrings.models import LabelInterval, OrbitDistributionResult, WorldCity

logger = logging.getLogger(__name__)


class CitySelectionError(Exception):
    """Candidate city rejected by the picker."""


def build_intervals(
    cities: Iterable[WorldCity], at: datetime, metrics: LabelMetrics
) -> list[LabelInterval]:
    """Label intervals for every city with a resolvable zone, sorted by start.

    Ties on start are broken by city id so the order never depends on input order.
    """
    intervals: list[LabelInterval] = []
    for city in cities:
        tz = city.time_zone
        if tz is None:
            logger.debug(
                "Skipping %s: unknown time zone %r", city.name, city.time_zone_identifier
            )
            continue
        center = normalize_angle(calculate_arrow_angle(local_hour24(at, tz)))
        half_span = metrics.span(city.iata_code) / 2
        for start, end in split_arc(center - half_span, center + half_span):
            intervals.append(
                LabelInterval(city_id=city.id, angle=center, start=start, end=end)
            )
    intervals.sort(key=lambda i: (i.start, i.city_id))
    return intervals


def build_clusters(
    intervals: Sequence[LabelInterval], seam_tolerance: float
) -> list[list[str]]:
    """Group city ids whose intervals overlap, directly or through other members.

    Expects intervals sorted by start. A cluster's intervals are all intervals of
    its member cities, so the second half of a seam-split label rejoins the
    cluster its first half started.
    """
    by_city: dict[str, list[LabelInterval]] = {}
    for interval in intervals:
        by_city.setdefault(interval.city_id, []).append(interval)

    clusters: list[list[str]] = []
    for interval in intervals:
        target = next(
            (
                cluster
                for cluster in clusters
                if any(
                    interval.overlaps(other)
                    for city_id in cluster
                    for other in by_city[city_id]
                )
            ),
            None,
        )
        if target is None:
            clusters.append([interval.city_id])
        elif interval.city_id not in target:
            target.append(interval.city_id)

    # Join the first and last clusters when they touch across the 0/2π seam.
    # Only this one pair is checked.
    if len(clusters) > 1:
        first, last = clusters[0], clusters[-1]
        heads = [i for city_id in first for i in by_city[city_id] if i.start < math.pi]
        tails = [i for city_id in last for i in by_city[city_id] if i.end > math.pi]
        if any(
            (TWO_PI - tail.end) + head.start < seam_tolerance
            for tail in tails
            for head in heads
        ):
            for city_id in last:
                if city_id not in first:
                    first.append(city_id)
            clusters.pop()

    return clusters


def _dial_order(members: Sequence[str], centers: dict[str, float]) -> list[str]:
    """Members in clockwise order, starting after the widest empty gap.

    A cluster straddling the 0/2π seam then reads 352.5°, 0°, 7.5°.
    """
    angles = sorted(centers[city_id] for city_id in members)
    gaps = [
        (angles[(index + 1) % len(angles)] - angle) % TWO_PI
        for index, angle in enumerate(angles)
    ]
    anchor = angles[(gaps.index(max(gaps)) + 1) % len(angles)]
    return sorted(
        members, key=lambda city_id: ((centers[city_id] - anchor) % TWO_PI, city_id)
    )


def distribute_clusters(
    clusters: Sequence[Sequence[str]], centers: dict[str, float]
) -> dict[str, int]:
    """Greedy ring assignment.

    Singletons go to the ring with fewer cities so far (ties: orbit 1).
    Larger clusters alternate 1, 2, 1, ... in dial order, so neighbours
    land on different rings even across the seam.
    """
    assignment: dict[str, int] = {}
    counts = {1: 0, 2: 0}
    for cluster in clusters:
        members = list(dict.fromkeys(cluster))
        if len(members) == 1:
            orbit = 1 if counts[1] <= counts[2] else 2
            assignment[members[0]] = orbit
            counts[orbit] += 1
            continue
        for index, city_id in enumerate(_dial_order(members, centers)):
            orbit = 1 if index % 2 == 0 else 2
            assignment[city_id] = orbit
            counts[orbit] += 1
    return assignment


def find_orbit_conflicts(
    intervals: Sequence[LabelInterval], assignment: dict[str, int]
) -> list[tuple[str, str]]:
    """Pairs of distinct cities sharing a ring whose labels overlap.

    Each pair is ``(smaller_id, larger_id)``; the list is sorted.
    """
    pairs: set[tuple[str, str]] = set()
    for index, a in enumerate(intervals):
        orbit = assignment.get(a.city_id)
        if orbit is None:
            continue
        for b in intervals[index + 1 :]:
            if b.city_id == a.city_id or assignment.get(b.city_id) != orbit:
                continue
            if a.overlaps(b):
                pairs.add((min(a.city_id, b.city_id), max(a.city_id, b.city_id)))
    return sorted(pairs)


def _assign(
    cities: Sequence[WorldCity], at: datetime, metrics: LabelMetrics
) -> tuple[list[LabelInterval], dict[str, int]]:
    intervals = build_intervals(cities, at, metrics)
    clusters = build_clusters(intervals, metrics.seam_merge_tolerance)
    centers = {interval.city_id: interval.angle for interval in intervals}
    assignment = distribute_clusters(clusters, centers)
    logger.debug(
        "%d cities → %d intervals, %d clusters, orbit sizes %d/%d",
        len(cities),
        len(intervals),
        len(clusters),
        sum(1 for o in assignment.values() if o == 1),
        sum(1 for o in assignment.values() if o == 2),
    )
    return intervals, assignment


def _describe_conflicts(
    cities: Sequence[WorldCity], pairs: list[tuple[str, str]], lang: str
) -> list[str]:
    """One line per city that collides with a city listed before it."""
    position: dict[str, int] = {}
    names: dict[str, str] = {}
    for index, city in enumerate(cities):
        position.setdefault(city.id, index)
        names.setdefault(city.id, city.name)

    blamed = {max(pair, key=lambda city_id: position[city_id]) for pair in pairs}
    return [
        t("conflict_both_orbits", lang, name=names[city_id])
        for city_id in sorted(blamed, key=lambda city_id: position[city_id])
    ]


def assign_orbits(
    cities: Iterable[WorldCity], at: datetime, metrics: LabelMetrics | None = None
) -> dict[str, int]:
    """Map each city id to orbit 1 (outer ring) or 2 (middle ring).

    Args:
        cities: Cities to place. Cities with an unknown zone are left out.
        at: Instant to evaluate local times at. Naive values are read as UTC.
        metrics: Label sizing; defaults to the built-in clock constants.

    Returns:
        City id → orbit, one entry per city with a resolvable zone.
    """
    _, assignment = _assign(list(cities), at, metrics or LabelMetrics())
    return assignment


def distribute_cities(
    cities: Iterable[WorldCity],
    at: datetime,
    metrics: LabelMetrics | None = None,
    lang: str = "en",
) -> OrbitDistributionResult:
    """Run :func:`assign_orbits` and report labels that still collide.

    The engine always produces an assignment; a cluster of three or more
    overlapping labels can leave two of them on the same ring. Those cities are
    listed in ``conflicts`` instead of being dropped.

    Args:
        cities: Cities to place.
        at: Instant to evaluate local times at.
        metrics: Label sizing; defaults to the built-in clock constants.
        lang: Language code ('en' or 'ru') for conflict lines.

    Returns:
        OrbitDistributionResult with assignment, intervals and conflict lines.
    """
    cities = list(cities)
    if not cities:
        return OrbitDistributionResult(assignment={})

    intervals, assignment = _assign(cities, at, metrics or LabelMetrics())
    conflicts = _describe_conflicts(
        cities, find_orbit_conflicts(intervals, assignment), lang
    )
    if conflicts:
        logger.warning("Label collisions: %s", "; ".join(conflicts))
    return OrbitDistributionResult(
        assignment=assignment, intervals=tuple(intervals), conflicts=tuple(conflicts)
    )


def check_city_addition(
    cities: Sequence[WorldCity],
    candidate: WorldCity,
    at: datetime,
    metrics: LabelMetrics | None = None,
    lang: str = "en",
) -> OrbitDistributionResult:
    """Distribution the clock would show with ``candidate`` appended."""
    return distribute_cities([*cities, candidate], at, metrics, lang)


def would_conflict(
    cities: Sequence[WorldCity],
    candidate: WorldCity,
    at: datetime,
    metrics: LabelMetrics | None = None,
) -> bool:
    """True if adding ``candidate`` creates a same-ring overlap that was not there before.

    Collisions already present in ``cities`` do not count against the candidate.
    """
    metrics = metrics or LabelMetrics()
    before = set(find_orbit_conflicts(*_assign(list(cities), at, metrics)))
    after = set(find_orbit_conflicts(*_assign([*cities, candidate], at, metrics)))
    return bool(after - before)


def add_city(
    cities: Sequence[WorldCity],
    candidate: WorldCity,
    at: datetime,
    metrics: LabelMetrics | None = None,
    lang: str = "en",
) -> tuple[WorldCity, ...]:
    """Return the selection with ``candidate`` appended.

    Raises:
        CitySelectionError: If the candidate's zone is unknown, the zone is
            already selected, or the new label cannot fit on either ring.
    """
    if candidate.time_zone is None:
        raise CitySelectionError(
            t("error_unknown_zone", lang, identifier=candidate.time_zone_identifier)
        )
    if any(c.time_zone_identifier == candidate.time_zone_identifier for c in cities):
        raise CitySelectionError(t("error_duplicate", lang, name=candidate.name))
    if would_conflict(cities, candidate, at, metrics):
        raise CitySelectionError(t("error_conflict", lang, name=candidate.name))

    logger.info("Added %s (%s)", candidate.name, candidate.time_zone_identifier)
    return (*cities, candidate)
