"""
Safety Evaluation Service

Rule check over fatigue, battery, check-in cadence and elapsed time.
Each rule is independent; the recommendation follows a fixed priority:

    over-fatigued > low battery > check-in due > energy risk > stable
"""

from dataclasses import dataclass
from typing import Optional

from trailmind.features.fatigue.schemas import FatigueState
from .schemas import SafetyState


@dataclass
class SafetyConfig:
    """Thresholds for the safety rules."""
    check_in_interval_seconds: float = 20 * 60
    low_battery_level: float = 0.2
    over_fatigue_score: float = 80.0
    energy_risk_level: float = 0.25
    energy_risk_after_seconds: float = 35 * 60


RECOMMEND_OVER_FATIGUED = "High fatigue detected. Pause now and reassess return plan."
RECOMMEND_LOW_BATTERY = "Battery low. Enable power saving and plan turn-back point."
RECOMMEND_CHECK_IN = "Send check-in update to safety contact."
RECOMMEND_ENERGY_RISK = "Energy may be insufficient for return. Consider shortening route."
RECOMMEND_STABLE = "Safety status stable."


class SafetyEvaluationService:
    """Pure safety evaluator."""

    def __init__(self, config: Optional[SafetyConfig] = None):
        self.config = config or SafetyConfig()

    def evaluate(
        self,
        fatigue: FatigueState,
        battery_level: float,
        seconds_since_check_in: float,
        elapsed_seconds: float
    ) -> SafetyState:
        """
        Evaluate all safety rules.

        Args:
            fatigue: Current fatigue state
            battery_level: Battery fraction 0-1 (1.0 when unknown)
            seconds_since_check_in: Time since the last explicit check-in
            elapsed_seconds: Active session time

        Returns:
            Fresh SafetyState
        """
        cfg = self.config

        check_in_due = seconds_since_check_in > cfg.check_in_interval_seconds
        low_battery = battery_level < cfg.low_battery_level
        over_fatigued = fatigue.score > cfg.over_fatigue_score
        energy_risk = (
            fatigue.energy_remaining < cfg.energy_risk_level
            and elapsed_seconds > cfg.energy_risk_after_seconds
        )

        if over_fatigued:
            recommendation = RECOMMEND_OVER_FATIGUED
        elif low_battery:
            recommendation = RECOMMEND_LOW_BATTERY
        elif check_in_due:
            recommendation = RECOMMEND_CHECK_IN
        elif energy_risk:
            recommendation = RECOMMEND_ENERGY_RISK
        else:
            recommendation = RECOMMEND_STABLE

        return SafetyState(
            check_in_due=check_in_due,
            low_battery=low_battery,
            over_fatigued=over_fatigued,
            return_home_energy_risk=energy_risk,
            recommendation=recommendation,
        )
