"""
Fatigue/energy module.

Usage:
    from trailmind.features.fatigue import FatigueScoringService, FatigueState
    from trailmind.features.fatigue.calculators import impulse_load

Components:
- FatigueScoringService: pure per-step evaluator (heart-rate and fallback paths)
- FatigueState: cumulative state record
- UserProfile: optional hiker profile
"""

from .schemas import FatigueState, UserProfile
from .service import FatigueScoringService, FatigueConfig, LoadPath

__all__ = [
    "FatigueState",
    "UserProfile",
    "FatigueScoringService",
    "FatigueConfig",
    "LoadPath",
]
