"""
Session schemas.

- SessionCheckpoint: the only durable record of an in-progress session
- LiveSnapshot: read-only projection for presentation/insight consumers
- CompletedHike: finished session handed to the archive collaborator
"""
import uuid
from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from trailmind.shared.constants import SessionStatus, TerrainType
from trailmind.shared.elevation import calculate_elevation_changes
from trailmind.features.tracking.schemas import (
    LocationSample,
    TrailSegment,
    ensure_aware,
    trail_difficulty_score,
)
from trailmind.features.fatigue.schemas import FatigueState
from trailmind.features.safety.schemas import SafetyState


CHECKPOINT_VERSION = 1


class SessionCheckpoint(BaseModel):
    """
    Complete snapshot needed to resume a session after a restart.

    Fields added after version 1 must have defaults so older files still load.
    """
    model_config = ConfigDict(frozen=True)

    version: int = CHECKPOINT_VERSION
    started_at: datetime
    last_check_in: datetime
    route: List[LocationSample] = Field(default_factory=list)
    segments: List[TrailSegment] = Field(default_factory=list)
    fatigue_state: FatigueState = Field(default_factory=FatigueState)
    safety_state: SafetyState = Field(default_factory=SafetyState)
    cadence: float = 0.0
    speed: float = 0.0
    slope_percent: float = 0.0
    battery_level: float = 1.0
    terrain: TerrainType = TerrainType.FLAT
    pacing_advice: str = ""
    terrain_safety_hint: str = ""
    current_altitude: float = 0.0
    is_paused: bool = False
    paused_accumulated_seconds: float = 0.0
    paused_started_at: Optional[datetime] = None
    last_filtered_altitude: Optional[float] = None
    memory_pressure: bool = False

    @field_validator('started_at', 'last_check_in', 'paused_started_at')
    @classmethod
    def aware_times(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_aware(v) if v is not None else None

    @model_validator(mode='after')
    def paused_consistency(self) -> "SessionCheckpoint":
        """A paused checkpoint must say when the pause started."""
        if self.is_paused and self.paused_started_at is None:
            raise ValueError("paused checkpoint without paused_started_at")
        return self


class LiveSnapshot(BaseModel):
    """Read-only view of the live session."""
    model_config = ConfigDict(frozen=True)

    status: SessionStatus
    elapsed_seconds: float
    distance_meters: float
    elevation_gain: float
    speed: float
    slope_percent: float
    heart_rate: Optional[float]
    heart_rate_source: str
    cadence: float
    battery_level: float
    current_altitude: float
    fatigue: FatigueState
    safety: SafetyState
    terrain: TerrainType
    pacing_advice: str
    terrain_safety_hint: str
    trail_difficulty_score: float
    energy_outlook: str


class CompletedHike(BaseModel):
    """A finished session, as given to the archive."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = ""
    started_at: datetime
    ended_at: datetime
    elapsed_seconds: float = Field(..., ge=0, description="Active time, pauses excluded")
    route: List[LocationSample] = Field(default_factory=list)
    segments: List[TrailSegment] = Field(default_factory=list)
    final_fatigue: FatigueState
    final_safety: SafetyState

    @model_validator(mode='after')
    def default_name(self) -> "CompletedHike":
        self.name = self.name.strip()
        if not self.name:
            self.name = f"Hike {self.started_at:%b %d, %Y %H:%M}"
        return self

    @property
    def total_distance(self) -> float:
        return sum(s.distance for s in self.segments)

    @property
    def elevation_changes(self) -> Tuple[float, float]:
        """(gain, loss) in meters over all segments."""
        return calculate_elevation_changes(s.elevation_delta for s in self.segments)

    @property
    def total_elevation_gain(self) -> float:
        return self.elevation_changes[0]

    @property
    def total_elevation_loss(self) -> float:
        return self.elevation_changes[1]

    @property
    def duration_seconds(self) -> float:
        """Wall-clock duration, pauses included."""
        return (self.ended_at - self.started_at).total_seconds()

    @property
    def trail_difficulty_score(self) -> float:
        return trail_difficulty_score(self.segments)


def energy_outlook(status: SessionStatus, energy_remaining: float) -> str:
    """Plain-language outlook on whether energy lasts for the route."""
    if not status.is_active:
        return "Start tracking to estimate energy."
    if energy_remaining > 0.55:
        return "Likely enough energy for the current route."
    if energy_remaining > 0.3:
        return "Energy is moderate. Plan a short break soon."
    return "Energy is low. Consider turning back early."
