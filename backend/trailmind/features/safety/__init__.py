"""
Safety module.

Usage:
    from trailmind.features.safety import SafetyEvaluationService, SafetyState
"""

from .schemas import SafetyState
from .service import SafetyEvaluationService, SafetyConfig

__all__ = [
    "SafetyState",
    "SafetyEvaluationService",
    "SafetyConfig",
]
