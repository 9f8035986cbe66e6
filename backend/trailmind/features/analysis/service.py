"""
Post-Hike Analysis Service

Turns a CompletedHike (plus earlier hikes) into a PostHikeReport:
- peak-load segment and pacing insights
- climb efficiency and terrain adaptation scores
- recovery estimate
- fatigue tolerance trend against history
"""

import logging
from typing import List, Optional, Sequence

from trailmind.shared.constants import TerrainType
from trailmind.features.session.schemas import CompletedHike
from .schemas import PerformanceInsight, PostHikeReport, RecoveryReport

logger = logging.getLogger(__name__)


# Climb efficiency: average climb speed (m/s) scaled to 0-100
CLIMB_EFFICIENCY_FACTOR = 48.0
# Each distinct terrain type is worth this many points
TERRAIN_VARIETY_POINTS = 25.0

HARD_PACING_SCORE = 70.0

# Recovery
MUSCLE_LOAD_FATIGUE_WEIGHT = 0.4
RECOVERY_HOURS_PER_LOAD = 0.45
MIN_RECOVERY_HOURS = 8.0
READINESS_PENALTY_PER_LOAD = 0.7

HIGH_MUSCLE_LOAD = 70.0
MODERATE_MUSCLE_LOAD = 45.0

# Fatigue more than this many points above the historical mean is "higher"
TREND_TOLERANCE = 8.0

TREND_BASELINE = "Baseline established"
TREND_IMPROVING = "Improving fatigue tolerance"
TREND_HIGHER = "Higher fatigue than usual"
TREND_STABLE = "Stable fatigue tolerance"


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def recovery_recommendations(muscle_load: float) -> List[str]:
    """Recovery suggestions by muscle-load band."""
    if muscle_load > HIGH_MUSCLE_LOAD:
        return ["Light walk", "Hydration", "Longer sleep", "Gentle stretching"]
    if muscle_load > MODERATE_MUSCLE_LOAD:
        return ["Mobility", "Easy walk", "Protein-rich meal"]
    return ["Optional easy walk", "Normal routine"]


def fatigue_trend(current_score: float, historical: Sequence[CompletedHike]) -> str:
    """Compare the final fatigue score with the mean of earlier hikes."""
    if not historical:
        return TREND_BASELINE

    historical_avg = _mean([h.final_fatigue.score for h in historical])
    if current_score < historical_avg:
        return TREND_IMPROVING
    if current_score > historical_avg + TREND_TOLERANCE:
        return TREND_HIGHER
    return TREND_STABLE


class PostHikeAnalysisService:
    """
    Builds post-hike reports.

    Stateless; safe to share.
    """

    def build_report(
        self,
        hike: CompletedHike,
        history: Optional[Sequence[CompletedHike]] = None,
    ) -> PostHikeReport:
        """
        Analyse a finished hike.

        Args:
            hike: The hike to analyse
            history: Earlier hikes for the trend (the hike itself is excluded)

        Returns:
            PostHikeReport
        """
        history = [h for h in (history or []) if h.id != hike.id]
        segments = hike.segments

        climb_speeds = [s.average_speed for s in segments if s.terrain == TerrainType.CLIMB]
        climb_efficiency = min(100.0, max(0.0, _mean(climb_speeds) * CLIMB_EFFICIENCY_FACTOR))
        terrain_adaptation = min(100.0, len({s.terrain for s in segments}) * TERRAIN_VARIETY_POINTS)

        insights = []
        if segments:
            peak = max(segments, key=lambda s: s.effort_index)
            offset_min = max(0.0, (peak.started_at - hike.started_at).total_seconds() / 60)
            insights.append(PerformanceInsight(
                title="Peak Load Segment",
                detail=(
                    f"Highest effort was around {round(offset_min)} min. "
                    "Consider a short pause before similar climbs."
                ),
            ))

        final_score = hike.final_fatigue.score
        if final_score > HARD_PACING_SCORE:
            pacing = "You pushed hard relative to terrain. Slower first climb should reduce late fatigue drop."
        else:
            pacing = "Your pacing matched terrain load well for most segments."
        insights.append(PerformanceInsight(title="Pacing", detail=pacing))

        muscle_load = min(100.0, hike.trail_difficulty_score + final_score * MUSCLE_LOAD_FATIGUE_WEIGHT)
        recovery = RecoveryReport(
            muscle_load=muscle_load,
            recovery_hours=max(MIN_RECOVERY_HOURS, muscle_load * RECOVERY_HOURS_PER_LOAD),
            readiness_score=max(0.0, 100 - muscle_load * READINESS_PENALTY_PER_LOAD),
            recommendations=recovery_recommendations(muscle_load),
        )

        report = PostHikeReport(
            insights=insights,
            recovery=recovery,
            fatigue_tolerance_trend=fatigue_trend(final_score, history),
            climb_efficiency=climb_efficiency,
            terrain_adaptation=terrain_adaptation,
        )

        logger.debug(
            f"Report for hike {hike.id}: muscle_load={muscle_load:.1f}, "
            f"trend='{report.fatigue_tolerance_trend}'"
        )
        return report
