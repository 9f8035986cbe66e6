"""
Tests for bounded route/segment collections.
"""

from datetime import datetime, timedelta, timezone

import pytest

from trailmind.shared.constants import TerrainType
from trailmind.features.tracking.schemas import TrailSegment
from trailmind.features.tracking.downsampling import (
    BoundedCollectionManager,
    CollectionCaps,
    downsample_route,
    merge_bucket,
    merge_segments,
)


START = datetime(2026, 6, 1, 8, 0, tzinfo=timezone.utc)


def make_segment(index, duration=5.0, distance=6.0, terrain=TerrainType.FLAT,
                 heart_rate=0.0, cadence=0.0, slope=0.0, elevation=0.0):
    started = START + timedelta(seconds=index * duration)
    return TrailSegment(
        started_at=started,
        ended_at=started + timedelta(seconds=duration),
        duration=duration,
        distance=distance,
        elevation_delta=elevation,
        slope_percent=slope,
        average_speed=distance / duration,
        heart_rate=heart_rate,
        cadence=cadence,
        terrain=terrain,
    )


# =============================================================================
# Test Route Downsampling
# =============================================================================

class TestDownsampleRoute:

    def test_within_cap_unchanged(self, make_sample):
        route = [make_sample(i, north_m=i) for i in range(10)]
        assert downsample_route(route, 10) == route

    def test_exact_cap_and_endpoints(self, make_sample):
        """10000 points down to 4000 keeps first and last."""
        route = [make_sample(i, north_m=i) for i in range(10_000)]
        result = downsample_route(route, 4000)
        assert len(result) == 4000
        assert result[0] == route[0]
        assert result[-1] == route[-1]

    def test_uniform_stride(self, make_sample):
        route = [make_sample(i) for i in range(5)]
        result = downsample_route(route, 3)
        assert result == [route[0], route[2], route[4]]

    def test_halves_round_up(self, make_sample):
        """7 -> 5 points: stride 1.5, so 4.5 picks index 5, not 4."""
        route = [make_sample(i) for i in range(7)]
        result = downsample_route(route, 5)
        assert result == [route[0], route[2], route[3], route[5], route[6]]

    def test_keeps_time_order(self, make_sample):
        route = [make_sample(i) for i in range(1000)]
        result = downsample_route(route, 37)
        stamps = [p.timestamp for p in result]
        assert stamps == sorted(stamps)

    def test_idempotent(self, make_sample):
        route = [make_sample(i) for i in range(500)]
        once = downsample_route(route, 100)
        assert downsample_route(once, 100) == once


# =============================================================================
# Test Segment Merging
# =============================================================================

class TestMergeBucket:

    def test_sums_and_weights(self):
        bucket = [
            make_segment(0, duration=10, distance=10, heart_rate=100, cadence=1.0, slope=0, elevation=1),
            make_segment(1, duration=30, distance=30, heart_rate=140, cadence=2.0, slope=20, elevation=6),
        ]
        merged = merge_bucket(bucket)

        assert merged.duration == 40
        assert merged.distance == 40
        assert merged.elevation_delta == 7
        assert merged.heart_rate == pytest.approx(130.0)
        assert merged.cadence == pytest.approx(1.75)
        assert merged.slope_percent == pytest.approx(15.0)
        assert merged.average_speed == pytest.approx(1.0)
        assert merged.started_at == bucket[0].started_at
        assert merged.ended_at == bucket[-1].ended_at

    def test_dominant_terrain_by_time(self):
        bucket = [
            make_segment(0, duration=5, terrain=TerrainType.FLAT),
            make_segment(1, duration=20, terrain=TerrainType.CLIMB),
            make_segment(2, duration=5, terrain=TerrainType.FLAT),
        ]
        assert merge_bucket(bucket).terrain == TerrainType.CLIMB

    def test_dominant_terrain_tie_goes_to_first_seen(self):
        bucket = [
            make_segment(0, duration=5, terrain=TerrainType.DOWNHILL),
            make_segment(1, duration=5, terrain=TerrainType.TECHNICAL),
        ]
        assert merge_bucket(bucket).terrain == TerrainType.DOWNHILL


class TestMergeSegments:

    def test_within_cap_unchanged(self):
        segments = [make_segment(i) for i in range(5)]
        assert merge_segments(segments, 5) == segments

    def test_never_exceeds_cap(self):
        segments = [make_segment(i) for i in range(10)]
        merged = merge_segments(segments, 4)
        assert len(merged) == 4

    def test_preserves_totals(self):
        segments = [make_segment(i, distance=3 + i % 4) for i in range(101)]
        merged = merge_segments(segments, 10)
        assert len(merged) <= 10
        assert sum(s.distance for s in merged) == pytest.approx(sum(s.distance for s in segments))
        assert sum(s.duration for s in merged) == pytest.approx(sum(s.duration for s in segments))


# =============================================================================
# Test Manager
# =============================================================================

class TestBoundedCollectionManager:

    def test_compact_applies_normal_caps(self, make_sample):
        manager = BoundedCollectionManager(CollectionCaps(route=10, route_under_pressure=4,
                                                          segments=6, segments_under_pressure=3))
        route = [make_sample(i) for i in range(25)]
        segments = [make_segment(i) for i in range(12)]

        route, segments = manager.compact(route, segments)
        assert len(route) == 10
        assert len(segments) <= 6

    def test_memory_pressure_is_sticky(self, make_sample):
        manager = BoundedCollectionManager(CollectionCaps(route=10, route_under_pressure=4,
                                                          segments=6, segments_under_pressure=3))
        route = [make_sample(i) for i in range(8)]
        route, _ = manager.enter_memory_pressure(route, [])
        assert len(route) == 4
        assert manager.under_pressure

        route = route + [make_sample(100 + i) for i in range(5)]
        route, _ = manager.compact(route, [])
        assert len(route) == 4

    def test_reset_restores_normal_caps(self):
        manager = BoundedCollectionManager(under_pressure=True)
        manager.reset()
        assert manager.route_cap == 4000
        assert manager.segment_cap == 6000

    def test_default_pressure_caps(self):
        manager = BoundedCollectionManager(under_pressure=True)
        assert manager.route_cap == 1500
        assert manager.segment_cap == 2200
