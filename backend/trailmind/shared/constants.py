"""
Unified constants and enums.

This module provides a single source of truth for naming shared
across features (tracking, fatigue, session).
"""

from enum import Enum


class TerrainType(str, Enum):
    """
    Terrain class of a trail segment.

    Assigned when the segment is built and never changed afterwards.
    """
    FLAT = "Flat"
    CLIMB = "Climb"
    DOWNHILL = "Downhill"
    TECHNICAL = "Technical"


class FitnessCondition(str, Enum):
    """Self-reported fitness tier of the hiker."""
    BEGINNER = "Beginner"
    MODERATE = "Moderate"
    ADVANCED = "Advanced"

    @property
    def fatigue_multiplier(self) -> float:
        """How much faster load accumulates relative to a moderate hiker."""
        return CONDITION_FATIGUE_MULTIPLIER[self]

    @property
    def reserve_factor(self) -> float:
        """Scale of the caloric reserve relative to a moderate hiker."""
        return CONDITION_RESERVE_FACTOR[self]


CONDITION_FATIGUE_MULTIPLIER: dict[FitnessCondition, float] = {
    FitnessCondition.BEGINNER: 1.16,
    FitnessCondition.MODERATE: 1.0,
    FitnessCondition.ADVANCED: 0.9,
}

CONDITION_RESERVE_FACTOR: dict[FitnessCondition, float] = {
    FitnessCondition.BEGINNER: 0.9,
    FitnessCondition.MODERATE: 1.0,
    FitnessCondition.ADVANCED: 1.12,
}


class SessionStatus(str, Enum):
    """Lifecycle state of a tracking session."""
    IDLE = "idle"
    TRACKING = "tracking"
    PAUSED = "paused"

    @property
    def is_active(self) -> bool:
        return self is not SessionStatus.IDLE
