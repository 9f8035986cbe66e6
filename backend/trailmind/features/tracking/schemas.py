"""
Tracking schemas.

Pydantic records for raw location samples and derived trail segments.
Both are immutable and JSON round-trippable (they are stored in checkpoints).
"""
import math
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from trailmind.shared.constants import TerrainType


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so elapsed-time arithmetic never mixes kinds."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class LocationSample(BaseModel):
    """
    A single location fix from the location source.

    Position and altitude must be finite numbers. Non-finite accuracies are
    read as "unknown" (-1) and a non-finite speed as 0.
    """
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)
    altitude: float = Field(default=0.0, allow_inf_nan=False, description="Meters")
    speed: float = Field(default=0.0, description="m/s, never negative")
    horizontal_accuracy: float = Field(default=5.0, description="Meters, negative = invalid")
    vertical_accuracy: float = Field(default=-1.0, description="Meters, negative = unknown")

    @field_validator('timestamp')
    @classmethod
    def aware_timestamp(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    @field_validator('speed')
    @classmethod
    def clamp_speed(cls, v: float) -> float:
        """Location sources report -1 when speed is unknown."""
        if not math.isfinite(v):
            return 0.0
        return max(0.0, v)

    @field_validator('horizontal_accuracy', 'vertical_accuracy')
    @classmethod
    def unknown_accuracy(cls, v: float) -> float:
        return v if math.isfinite(v) else -1.0

    @property
    def is_finite(self) -> bool:
        """False only for instances built without validation."""
        return all(
            math.isfinite(v)
            for v in (self.latitude, self.longitude, self.altitude, self.horizontal_accuracy)
        )


class TrailSegment(BaseModel):
    """
    Interval between two consecutive accepted samples.

    Duration is clamped to at least one second so per-second rates never
    divide by zero. Terrain is fixed at creation.
    """
    model_config = ConfigDict(frozen=True)

    started_at: datetime
    ended_at: datetime
    duration: float = Field(..., description="Seconds, >= 1")
    distance: float = Field(..., description="Great-circle meters")
    elevation_delta: float = Field(default=0.0, description="Filtered signed meters")
    slope_percent: float = 0.0
    average_speed: float = 0.0
    heart_rate: float = Field(default=0.0, description="bpm, 0 = unknown")
    cadence: float = 0.0
    terrain: TerrainType = TerrainType.FLAT

    @field_validator('started_at', 'ended_at')
    @classmethod
    def aware_bounds(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    @field_validator('duration')
    @classmethod
    def clamp_duration(cls, v: float) -> float:
        return max(1.0, v)

    @field_validator('distance', 'heart_rate', 'cadence', 'average_speed')
    @classmethod
    def clamp_non_negative(cls, v: float) -> float:
        return max(0.0, v)

    @property
    def elevation_gain(self) -> float:
        """Positive part of the elevation delta."""
        return max(0.0, self.elevation_delta)

    @property
    def effort_index(self) -> float:
        """Rough per-segment effort used by the trail difficulty score."""
        slope_load = max(0.0, self.slope_percent) * 0.9
        heart_rate_load = self.heart_rate * 0.2
        return slope_load + heart_rate_load + self.cadence * 0.05


def trail_difficulty_score(segments: list[TrailSegment]) -> float:
    """
    Difficulty of a trail so far (0-100).

    Mean segment effort index halved and capped at 100; 0 with no segments.
    """
    if not segments:
        return 0.0
    avg_effort = sum(s.effort_index for s in segments) / len(segments)
    return min(100.0, avg_effort / 2)
