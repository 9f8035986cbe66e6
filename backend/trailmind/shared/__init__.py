"""
Shared utilities (NOT business logic).

Usage:
    from trailmind.shared import haversine, AltitudeFilter
    from trailmind.shared.formatters import format_duration
"""
from .geo import (
    haversine,
    slope_percent,
    EARTH_RADIUS_M,
)
from .elevation import (
    AltitudeFilter,
    filter_altitude,
    smoothing_factor,
    calculate_elevation_changes,
    RELIABLE_VERTICAL_ACCURACY_M,
)
from .formatters import (
    format_duration,
    format_distance,
    format_elevation,
    format_percent,
)
from .constants import (
    TerrainType,
    FitnessCondition,
    SessionStatus,
)
from .exceptions import (
    TrailMindError,
    CheckpointError,
    ReplayError,
)

__all__ = [
    # geo
    "haversine",
    "slope_percent",
    "EARTH_RADIUS_M",
    # elevation
    "AltitudeFilter",
    "filter_altitude",
    "smoothing_factor",
    "calculate_elevation_changes",
    "RELIABLE_VERTICAL_ACCURACY_M",
    # formatters
    "format_duration",
    "format_distance",
    "format_elevation",
    "format_percent",
    # constants
    "TerrainType",
    "FitnessCondition",
    "SessionStatus",
    # exceptions
    "TrailMindError",
    "CheckpointError",
    "ReplayError",
]
