"""
Post-hike analysis module.

Usage:
    from trailmind.features.analysis import PostHikeAnalysisService

    report = PostHikeAnalysisService().build_report(hike, history=archive.all())
"""

from .schemas import PerformanceInsight, RecoveryReport, PostHikeReport
from .service import PostHikeAnalysisService, fatigue_trend, recovery_recommendations

__all__ = [
    "PerformanceInsight",
    "RecoveryReport",
    "PostHikeReport",
    "PostHikeAnalysisService",
    "fatigue_trend",
    "recovery_recommendations",
]
