"""
Live tracking module.

Usage:
    from trailmind.features.tracking import SegmentBuilder, LocationSample
    from trailmind.features.tracking.downsampling import merge_segments

Components:
- LocationSample, TrailSegment: immutable records
- SegmentBuilder: sample-by-sample segment construction
- classify_terrain: terrain class + pacing/safety guidance
- BoundedCollectionManager: route/segment caps
"""

from .schemas import LocationSample, TrailSegment, trail_difficulty_score
from .segmenter import (
    SegmentBuilder,
    SegmenterConfig,
    BuiltSegment,
    TerrainInsight,
    classify_terrain,
    bounded_vertical_delta,
)
from .downsampling import (
    BoundedCollectionManager,
    CollectionCaps,
    downsample_route,
    merge_segments,
)

__all__ = [
    # Schemas
    "LocationSample",
    "TrailSegment",
    "trail_difficulty_score",
    # Segmenter
    "SegmentBuilder",
    "SegmenterConfig",
    "BuiltSegment",
    "TerrainInsight",
    "classify_terrain",
    "bounded_vertical_delta",
    # Collections
    "BoundedCollectionManager",
    "CollectionCaps",
    "downsample_route",
    "merge_segments",
]
