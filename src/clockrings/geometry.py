"""Angle and arc helpers for the 24-hour dial.

Angles are radians. The dial puts 18:00 local time at angle 0 and moves
15° per hour, so 00:00 sits at 90°, 06:00 at 180° and 12:00 at 270°.

Arcs are ``(start, end)`` pairs. Inside the engine every stored arc is
non-wrapping (``start <= end``); :func:`free_arcs` is the only helper that
returns seam-crossing arcs, marked by ``start > end``.
"""

import math
from datetime import datetime, tzinfo

from pytz import utc

from clockrings.constants import DEGREES_PER_HOUR, REFERENCE_HOUR

TWO_PI = 2 * math.pi

Arc = tuple[float, float]


def normalize_angle(angle: float) -> float:
    """Reduce any finite angle into [0, 2π)."""
    result = math.fmod(angle, TWO_PI)
    if result < 0:
        result += TWO_PI
    # -1e-17 + 2π rounds up to exactly 2π
    if result >= TWO_PI:
        result -= TWO_PI
    return result


def calculate_arrow_angle(hour24: float) -> float:
    """Angle of a city's arrow for a local time given as ``hour + minute / 60``.

    The result is not normalized: it lies in [-3π/2, π/2).
    """
    normalized = hour24 % 24.0
    degrees = normalized * DEGREES_PER_HOUR - REFERENCE_HOUR * DEGREES_PER_HOUR
    return math.radians(degrees)


def local_hour24(at: datetime, tz: tzinfo) -> float:
    """Local civil time of ``at`` in ``tz`` as ``hour + minute / 60``.

    Seconds are ignored. A naive ``at`` is read as UTC.
    """
    if at.tzinfo is None:
        at = utc.localize(at)
    local = at.astimezone(tz)
    return local.hour + local.minute / 60.0


def intervals_overlap(a: Arc, b: Arc) -> bool:
    """Closed-interval overlap of two non-wrapping arcs; touching ends count."""
    return not (a[1] < b[0] or b[1] < a[0])


def split_arc(start: float, end: float) -> list[Arc]:
    """Normalize a raw arc and cut it at the 0/2π seam if it crosses it."""
    start = normalize_angle(start)
    end = normalize_angle(end)
    if start > end:
        return [(start, TWO_PI), (0.0, end)]
    return [(start, end)]


def merge_intervals(arcs: list[Arc]) -> list[Arc]:
    """Fuse overlapping or touching non-wrapping arcs, sorted by start."""
    merged: list[Arc] = []
    for start, end in sorted(arcs):
        if merged and start <= merged[-1][1]:
            prev_start, prev_end = merged[-1]
            merged[-1] = (prev_start, max(prev_end, end))
        else:
            merged.append((start, end))
    return merged


def free_arcs(arcs: list[Arc]) -> list[Arc]:
    """Parts of the circle not covered by any arc.

    Gaps are returned in increasing start order; a gap crossing the seam comes
    last and has ``start > end``.
    """
    merged = merge_intervals(arcs)
    if not merged:
        return [(0.0, TWO_PI)]

    gaps: list[Arc] = []
    for (_, prev_end), (next_start, _) in zip(merged, merged[1:]):
        if prev_end < next_start:
            gaps.append((prev_end, next_start))

    first_start = merged[0][0]
    last_end = merged[-1][1]
    if first_start > 0 and last_end < TWO_PI:
        gaps.append((last_end, first_start))
    elif first_start > 0:
        gaps.insert(0, (0.0, first_start))
    elif last_end < TWO_PI:
        gaps.append((last_end, TWO_PI))
    return gaps


def arc_length(start: float, end: float) -> float:
    if start <= end:
        return end - start
    return (TWO_PI - start) + end
