"""
Bounded Collection Manager

Keeps the in-memory route and segment lists within fixed caps so a
multi-day trek cannot grow memory without bound.

Two independent degradation policies:
- route: uniform-stride resampling to exactly `cap` points
- segments: contiguous buckets merged into one weighted segment each

Both are pure and idempotent for a given cap.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from trailmind.shared.constants import TerrainType
from .schemas import LocationSample, TrailSegment

logger = logging.getLogger(__name__)


ROUTE_CAP = 4000
ROUTE_CAP_UNDER_PRESSURE = 1500
SEGMENT_CAP = 6000
SEGMENT_CAP_UNDER_PRESSURE = 2200


def downsample_route(points: Sequence[LocationSample], limit: int) -> List[LocationSample]:
    """
    Resample a route to exactly `limit` points.

    Index i of the result takes source index i * (n-1) / (limit-1) rounded
    half up, so the first and last points are always kept.

    Args:
        points: Route in time order
        limit: Maximum number of points (must be > 1 to have an effect)

    Returns:
        The route unchanged when it is within the cap, else a new list
    """
    n = len(points)
    if limit <= 1 or n <= limit:
        return list(points)

    stride = (n - 1) / (limit - 1)
    return [points[min(math.floor(i * stride + 0.5), n - 1)] for i in range(limit)]


def _weighted_average(items: Iterable[Tuple[float, float]]) -> float:
    """Average of (value, weight) pairs; negative weights count as zero."""
    total_weight = 0.0
    weighted_sum = 0.0
    for value, weight in items:
        w = max(0.0, weight)
        total_weight += w
        weighted_sum += value * w
    if total_weight <= 0:
        return 0.0
    return weighted_sum / total_weight


def _dominant_terrain(bucket: Sequence[TrailSegment]) -> TerrainType:
    """Terrain with the most cumulative time; ties go to the first seen."""
    scores: Dict[TerrainType, float] = {}
    for segment in bucket:
        scores[segment.terrain] = scores.get(segment.terrain, 0.0) + max(segment.duration, 1.0)

    best = TerrainType.FLAT
    best_score = -1.0
    for terrain, score in scores.items():
        if score > best_score:
            best, best_score = terrain, score
    return best


def merge_bucket(bucket: Sequence[TrailSegment]) -> TrailSegment:
    """
    Merge contiguous segments into one.

    Sums: duration, distance, elevation delta.
    Duration-weighted: heart rate, cadence.
    Distance-weighted (min weight 1 m): slope.
    """
    first, last = bucket[0], bucket[-1]

    duration = sum(s.duration for s in bucket)
    distance = sum(s.distance for s in bucket)
    elevation = sum(s.elevation_delta for s in bucket)

    return TrailSegment(
        started_at=first.started_at,
        ended_at=last.ended_at,
        duration=duration,
        distance=distance,
        elevation_delta=elevation,
        slope_percent=_weighted_average((s.slope_percent, max(s.distance, 1.0)) for s in bucket),
        average_speed=distance / duration if duration > 0 else 0.0,
        heart_rate=_weighted_average((s.heart_rate, s.duration) for s in bucket),
        cadence=_weighted_average((s.cadence, s.duration) for s in bucket),
        terrain=_dominant_terrain(bucket),
    )


def merge_segments(segments: Sequence[TrailSegment], limit: int) -> List[TrailSegment]:
    """
    Merge segments into ceil(n / limit)-sized buckets.

    Returns:
        The list unchanged when within the cap, else at most `limit` segments
    """
    n = len(segments)
    if limit <= 0 or n <= limit:
        return list(segments)

    bucket_size = math.ceil(n / limit)
    return [
        merge_bucket(segments[start:start + bucket_size])
        for start in range(0, n, bucket_size)
    ]


@dataclass
class CollectionCaps:
    """Caps for normal operation and under memory pressure."""
    route: int = ROUTE_CAP
    route_under_pressure: int = ROUTE_CAP_UNDER_PRESSURE
    segments: int = SEGMENT_CAP
    segments_under_pressure: int = SEGMENT_CAP_UNDER_PRESSURE


class BoundedCollectionManager:
    """
    Applies the caps to a session's route and segment lists.

    Once a memory-pressure signal has been received the reduced caps stay
    in effect for the rest of the session.
    """

    def __init__(self, caps: Optional[CollectionCaps] = None, under_pressure: bool = False):
        self.caps = caps or CollectionCaps()
        self.under_pressure = under_pressure

    @property
    def route_cap(self) -> int:
        return self.caps.route_under_pressure if self.under_pressure else self.caps.route

    @property
    def segment_cap(self) -> int:
        return self.caps.segments_under_pressure if self.under_pressure else self.caps.segments

    def compact(
        self,
        route: List[LocationSample],
        segments: List[TrailSegment]
    ) -> Tuple[List[LocationSample], List[TrailSegment]]:
        """Bring both lists within the current caps."""
        if len(route) > self.route_cap:
            before = len(route)
            route = downsample_route(route, self.route_cap)
            logger.debug(f"Route downsampled {before} -> {len(route)} points")

        if len(segments) > self.segment_cap:
            before = len(segments)
            segments = merge_segments(segments, self.segment_cap)
            logger.debug(f"Segments merged {before} -> {len(segments)}")

        return route, segments

    def enter_memory_pressure(
        self,
        route: List[LocationSample],
        segments: List[TrailSegment]
    ) -> Tuple[List[LocationSample], List[TrailSegment]]:
        """Switch to the reduced caps and compact immediately."""
        if not self.under_pressure:
            logger.info("Memory pressure: switching to reduced collection caps")
        self.under_pressure = True
        return self.compact(route, segments)

    def reset(self) -> None:
        self.under_pressure = False
