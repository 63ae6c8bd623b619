"""Tests for orbit assignment, clustering and conflict reporting.

Fixture cities at 12:30 UTC (see conftest.py):

    Kolkata    18:00 →   0°     Kathmandu 18:15 → 3.75°
    Dhaka      18:30 →   7.5°   Yangon    19:00 → 15°
    Etc/GMT+6  06:30 → 187.5°   Karachi   17:30 → 352.5°

Every label is three letters wide: 0.192 rad ≈ 11° including padding.
"""

import math
import random

import pytest

from clockrings.constants import LabelMetrics
from clockrings.distribution import (
    CitySelectionError,
    add_city,
    assign_orbits,
    build_clusters,
    build_intervals,
    check_city_addition,
    distribute_cities,
    distribute_clusters,
    find_orbit_conflicts,
    would_conflict,
)
from clockrings.geometry import TWO_PI
from clockrings.models import LabelInterval, WorldCity

# Eight zones three hours apart: every label is isolated.
SPREAD_ZONES = [
    "Etc/GMT",
    "Etc/GMT-3",
    "Etc/GMT-6",
    "Etc/GMT-9",
    "Etc/GMT+3",
    "Etc/GMT+6",
    "Etc/GMT+9",
    "Etc/GMT-12",
]


def _interval(city_id, start, end):
    return LabelInterval(city_id=city_id, angle=(start + end) / 2, start=start, end=end)


class TestIntervalConstruction:
    def test_seam_label_splits_in_two(self, kolkata, at):
        intervals = build_intervals([kolkata], at, LabelMetrics())
        assert len(intervals) == 2
        assert {i.city_id for i in intervals} == {kolkata.id}
        half = LabelMetrics().span("KOL") / 2
        assert intervals[0].start == pytest.approx(0.0)
        assert intervals[0].end == pytest.approx(half)
        assert intervals[1].start == pytest.approx(TWO_PI - half)
        assert intervals[1].end == pytest.approx(TWO_PI)

    def test_intervals_are_sorted_and_non_wrapping(self, kolkata, kathmandu, central, at):
        intervals = build_intervals([central, kolkata, kathmandu], at, LabelMetrics())
        starts = [i.start for i in intervals]
        assert starts == sorted(starts)
        assert all(i.start <= i.end for i in intervals)
        assert all(0.0 <= i.angle < TWO_PI for i in intervals)

    def test_unknown_zone_is_skipped(self, at):
        mars = WorldCity(name="Olympus", time_zone_identifier="Mars/Olympus_Mons")
        assert build_intervals([mars], at, LabelMetrics()) == []

    def test_empty_code_takes_one_letter(self, at):
        blank = WorldCity(name="Blank", time_zone_identifier="UTC", id="blank", code="")
        (interval,) = build_intervals([blank], at, LabelMetrics())
        assert interval.end - interval.start == pytest.approx(LabelMetrics().span("X"))
        assert interval.end > interval.start


class TestClusters:
    def test_overlapping_labels_share_a_cluster(self):
        intervals = [_interval("a", 0.0, 1.0), _interval("b", 0.5, 1.5), _interval("c", 3.0, 3.2)]
        assert build_clusters(intervals, 0.01) == [["a", "b"], ["c"]]

    def test_transitive_overlap(self):
        intervals = [_interval("a", 0.0, 1.0), _interval("b", 0.9, 2.0), _interval("c", 1.9, 2.5)]
        assert build_clusters(intervals, 0.01) == [["a", "b", "c"]]

    def test_split_label_rejoins_its_own_cluster(self):
        intervals = [
            _interval("a", 0.0, 0.1),
            _interval("b", 3.0, 3.2),
            _interval("a", TWO_PI - 0.1, TWO_PI),
        ]
        assert build_clusters(intervals, 0.01) == [["a"], ["b"]]

    def test_seam_neighbours_are_merged(self):
        intervals = [
            _interval("a", 0.001, 0.2),
            _interval("c", 3.0, 3.2),
            _interval("b", 6.0, TWO_PI - 0.002),
        ]
        assert build_clusters(intervals, 0.01) == [["a", "b"], ["c"]]

    def test_seam_gap_above_tolerance_keeps_clusters_apart(self):
        intervals = [
            _interval("a", 0.03, 0.2),
            _interval("c", 3.0, 3.2),
            _interval("b", 6.0, TWO_PI - 0.03),
        ]
        assert build_clusters(intervals, 0.01) == [["a"], ["c"], ["b"]]

    def test_only_first_and_last_clusters_are_checked(self):
        # "d" also ends near the seam but is not the last cluster, so it stays alone.
        intervals = [
            _interval("a", 0.001, 0.2),
            _interval("c", 3.0, 3.2),
            _interval("d", 5.0, TWO_PI - 0.004),
            _interval("b", TWO_PI - 0.003, TWO_PI - 0.002),
        ]
        assert build_clusters(intervals, 0.01) == [["a", "b"], ["c"], ["d"]]


class TestClusterDistribution:
    def test_singletons_balance_and_clusters_alternate(self):
        clusters = [["a"], ["b", "c"], ["d"], ["e"]]
        centers = {"a": 0.1, "b": 1.0, "c": 0.5, "d": 3.0, "e": 4.0}
        assert distribute_clusters(clusters, centers) == {
            "a": 1,
            "c": 1,
            "b": 2,
            "d": 2,
            "e": 1,
        }

    def test_duplicate_ids_count_once(self):
        assert distribute_clusters([["a", "a"]], {"a": 0.0}) == {"a": 1}

    def test_equal_angles_break_ties_by_id(self):
        assignment = distribute_clusters([["z", "m"]], {"z": 1.0, "m": 1.0})
        assert assignment == {"m": 1, "z": 2}

    def test_seam_cluster_alternates_in_dial_order(self):
        """352.5°, 0°, 7.5° read clockwise from 352.5°, not from 0°."""
        centers = {"a": 0.0, "b": math.radians(7.5), "c": math.radians(352.5)}
        assert distribute_clusters([["a", "b", "c"]], centers) == {
            "c": 1,
            "a": 2,
            "b": 1,
        }


class TestAssignOrbits:
    def test_empty_input(self, at):
        assert assign_orbits([], at) == {}
        result = distribute_cities([], at)
        assert result.assignment == {}
        assert result.conflict_message is None

    def test_three_city_scenario(self, kolkata, kathmandu, central, at):
        """0° and 3.75° overlap and split across rings; 187.5° takes orbit 1."""
        assignment = assign_orbits([kolkata, kathmandu, central], at)
        assert assignment == {kolkata.id: 1, kathmandu.id: 2, central.id: 1}

    def test_seam_city_appears_once(self, kolkata, at):
        assert assign_orbits([kolkata], at) == {kolkata.id: 1}

    def test_seam_city_among_others(self, kolkata, central, yangon, at):
        assignment = assign_orbits([central, yangon, kolkata], at)
        assert sorted(assignment) == sorted([central.id, yangon.id, kolkata.id])

    def test_deterministic_and_order_independent(self, kolkata, kathmandu, dhaka, central, at):
        cities = [kolkata, kathmandu, dhaka, central]
        expected = assign_orbits(cities, at)
        assert assign_orbits(cities, at) == expected
        shuffled = cities[:]
        random.Random(7).shuffle(shuffled)
        assert assign_orbits(shuffled, at) == expected
        assert assign_orbits(list(reversed(cities)), at) == expected

    def test_unresolvable_city_is_absent(self, kolkata, at):
        mars = WorldCity(name="Olympus", time_zone_identifier="Mars/Olympus_Mons")
        assignment = assign_orbits([mars, kolkata], at)
        assert assignment == {kolkata.id: 1}

    def test_orbit_values(self, at):
        cities = [WorldCity.make(z) for z in SPREAD_ZONES]
        assert set(assign_orbits(cities, at).values()) <= {1, 2}

    def test_isolated_cities_stay_balanced(self, at):
        cities = []
        for zone in SPREAD_ZONES:
            cities.append(WorldCity.make(zone))
            orbits = list(assign_orbits(cities, at).values())
            assert len(orbits) == len(cities)
            assert abs(orbits.count(1) - orbits.count(2)) <= 1

    def test_pairs_never_share_a_ring(self, kolkata, kathmandu, central, at):
        result = distribute_cities([kolkata, kathmandu, central], at)
        assert find_orbit_conflicts(result.intervals, result.assignment) == []
        assert not result.has_conflicts

    def test_custom_metrics_widen_labels(self, kolkata, yangon, at):
        """15° apart: separate labels by default, one cluster with a larger font."""
        default = LabelMetrics()
        wide = LabelMetrics(font_size_ratio=0.2)
        narrow_intervals = build_intervals([kolkata, yangon], at, default)
        wide_intervals = build_intervals([kolkata, yangon], at, wide)
        assert len(build_clusters(narrow_intervals, default.seam_merge_tolerance)) == 2
        assert build_clusters(wide_intervals, wide.seam_merge_tolerance) == [
            [kolkata.id, yangon.id]
        ]
        assert assign_orbits([kolkata, yangon], at, wide) == {kolkata.id: 1, yangon.id: 2}


class TestDenseClusters:
    """Clusters of three or more can leave two labels on one ring."""

    def test_three_mutually_overlapping_labels_conflict(self, kolkata, kathmandu, dhaka, at):
        result = distribute_cities([kolkata, kathmandu, dhaka], at)
        assert result.assignment == {kolkata.id: 1, kathmandu.id: 2, dhaka.id: 1}
        assert find_orbit_conflicts(result.intervals, result.assignment) == [
            (dhaka.id, kolkata.id)
        ]
        assert result.conflicts == ("Cannot place Dhaka - both orbits are occupied",)

    def test_chain_cluster_without_conflict(self, kolkata, dhaka, yangon, at):
        """0°–7.5°–15°: the ends do not touch, so orbit 1 holds both."""
        result = distribute_cities([kolkata, dhaka, yangon], at)
        assert result.assignment == {kolkata.id: 1, dhaka.id: 2, yangon.id: 1}
        assert not result.has_conflicts

    def test_chain_across_the_seam(self, karachi, kolkata, dhaka, at):
        """352.5°–0°–7.5°: the split label sits in the middle and takes orbit 2."""
        result = distribute_cities([kolkata, dhaka, karachi], at)
        assert result.assignment == {karachi.id: 1, kolkata.id: 2, dhaka.id: 1}
        assert find_orbit_conflicts(result.intervals, result.assignment) == []
        assert not result.has_conflicts

    def test_seam_merge_joins_pair_with_last_cluster(self, karachi, dhaka, yangon, at):
        """A 4° gap across the seam merges once the tolerance allows it."""
        loose = LabelMetrics(seam_merge_tolerance=0.1)
        intervals = build_intervals([dhaka, yangon, karachi], at, loose)
        assert build_clusters(intervals, LabelMetrics().seam_merge_tolerance) == [
            [dhaka.id, yangon.id],
            [karachi.id],
        ]
        assert build_clusters(intervals, loose.seam_merge_tolerance) == [
            [dhaka.id, yangon.id, karachi.id]
        ]
        result = distribute_cities([dhaka, yangon, karachi], at, loose)
        assert result.assignment == {karachi.id: 1, dhaka.id: 2, yangon.id: 1}
        assert not result.has_conflicts

    def test_conflict_lines_are_localized(self, kolkata, kathmandu, dhaka, at):
        result = distribute_cities([kolkata, kathmandu, dhaka], at, lang="ru")
        assert result.conflict_message == "Невозможно разместить Dhaka: обе орбиты заняты"


class TestFindConflicts:
    def test_same_ring_overlap(self):
        intervals = [_interval("a", 0.0, 1.0), _interval("b", 0.5, 1.5), _interval("c", 2.0, 3.0)]
        assert find_orbit_conflicts(intervals, {"a": 1, "b": 1, "c": 1}) == [("a", "b")]
        assert find_orbit_conflicts(intervals, {"a": 1, "b": 2, "c": 1}) == []

    def test_split_halves_of_one_city_do_not_conflict(self):
        intervals = [_interval("a", 0.0, 0.1), _interval("a", TWO_PI - 0.1, TWO_PI)]
        assert find_orbit_conflicts(intervals, {"a": 1}) == []


class TestResultHelpers:
    def test_cities_on_and_free_arcs(self, kolkata, kathmandu, central, at):
        result = distribute_cities([kolkata, kathmandu, central], at)
        assert sorted(result.cities_on(1)) == sorted([kolkata.id, central.id])
        assert result.cities_on(2) == [kathmandu.id]
        free = sum(
            (e - s) if s <= e else (TWO_PI - s + e) for s, e in result.free_arcs(2)
        )
        assert free == pytest.approx(TWO_PI - LabelMetrics().span("KAT"))


class TestCitySelection:
    def test_check_includes_candidate(self, kolkata, kathmandu, at):
        result = check_city_addition([kolkata], kathmandu, at)
        assert result.assignment == {kolkata.id: 1, kathmandu.id: 2}

    def test_overlapping_pair_is_accepted(self, kolkata, kathmandu, at):
        assert add_city([kolkata], kathmandu, at) == (kolkata, kathmandu)

    def test_third_overlapping_label_is_rejected(self, kolkata, kathmandu, dhaka, at):
        assert would_conflict([kolkata, kathmandu], dhaka, at)
        with pytest.raises(CitySelectionError, match="Dhaka"):
            add_city([kolkata, kathmandu], dhaka, at)

    def test_chain_is_accepted(self, kolkata, dhaka, yangon, at):
        assert not would_conflict([kolkata, dhaka], yangon, at)
        assert len(add_city([kolkata, dhaka], yangon, at)) == 3

    def test_chain_across_the_seam_is_accepted(self, kolkata, dhaka, karachi, at):
        assert not would_conflict([kolkata, dhaka], karachi, at)
        assert add_city([kolkata, dhaka], karachi, at) == (kolkata, dhaka, karachi)

    def test_existing_collisions_do_not_block(self, kolkata, kathmandu, dhaka, central, at):
        assert not would_conflict([kolkata, kathmandu, dhaka], central, at)

    def test_duplicate_zone_is_rejected(self, kolkata, at):
        twin = WorldCity(name="Calcutta", time_zone_identifier="Asia/Kolkata")
        with pytest.raises(CitySelectionError, match="already"):
            add_city([kolkata], twin, at)

    def test_unknown_zone_is_rejected(self, kolkata, at):
        mars = WorldCity(name="Olympus", time_zone_identifier="Mars/Olympus_Mons")
        with pytest.raises(CitySelectionError, match="Mars/Olympus_Mons"):
            add_city([kolkata], mars, at, lang="ru")


def test_label_span_constant(at):
    """Three letters at the default ratio span about 11°."""
    assert math.degrees(LabelMetrics().span("TYO")) == pytest.approx(11.0, abs=0.01)
