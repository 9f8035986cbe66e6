"""
Post-hike analysis schemas.
"""

from typing import List

from pydantic import BaseModel, Field


class PerformanceInsight(BaseModel):
    """One titled observation about the hike."""
    title: str
    detail: str


class RecoveryReport(BaseModel):
    """Recovery estimate derived from muscle load."""
    muscle_load: float = Field(..., ge=0, le=100)
    recovery_hours: float
    readiness_score: float = Field(..., ge=0, le=100)
    recommendations: List[str] = Field(default_factory=list)


class PostHikeReport(BaseModel):
    """Full post-hike summary."""
    insights: List[PerformanceInsight] = Field(default_factory=list)
    recovery: RecoveryReport
    fatigue_tolerance_trend: str
    climb_efficiency: float = Field(..., ge=0, le=100)
    terrain_adaptation: float = Field(..., ge=0, le=100)
