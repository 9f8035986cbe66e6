"""
Fatigue/Energy Scoring Service

Blends two independent estimates into one 0-100 fatigue score:

1. Training load - TRIMP-like impulse accumulated over the session,
   normalized against the hiker's load capacity.
2. Caloric balance - estimated kcal burned vs. reserve plus food eaten.

The load estimate has two paths, chosen per call:
- heart-rate path: usable heart rate (> 30 bpm) AND a profile
- fallback path: intensity estimated from speed/slope/cadence

The blend weights, exponents and thresholds are empirically tuned;
they are kept in FatigueConfig instead of being re-derived.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .schemas import FatigueState, UserProfile
from .calculators.trimp import (
    heart_rate_reserve_ratio,
    impulse_load,
    movement_intensity,
    load_capacity,
    load_score,
)
from .calculators.energy import (
    calories_per_minute,
    baseline_reserve,
    energy_remaining,
    DEFAULT_WEIGHT_KG,
)

logger = logging.getLogger(__name__)


class LoadPath(str, Enum):
    """Which load estimate produced a FatigueState."""
    HEART_RATE = "heart_rate"
    FALLBACK = "fallback"


@dataclass
class FatigueConfig:
    """Tunable constants of the fatigue model."""
    # Step accounting
    max_step_seconds: float = 15.0
    restored_step_seconds: float = 1.0
    min_heart_rate: float = 30.0

    # Impulse
    impulse_weight: float = 0.64
    heart_rate_exponent: float = 1.92
    fallback_exponent: float = 1.7
    max_reserve_ratio: float = 1.2
    min_fallback_intensity: float = 0.12
    max_fallback_intensity: float = 1.1

    # Capacity
    capacity_base: float = 260.0
    capacity_min: float = 120.0
    capacity_max: float = 420.0

    # Blend: score = load * w + depletion * (1 - w)
    heart_rate_load_weight: float = 0.75
    fallback_load_weight: float = 0.8

    # Break thresholds
    heart_rate_break_score: float = 88.0
    fallback_break_score: float = 82.0
    break_heart_rate_fraction: float = 0.9
    heart_rate_low_energy: float = 0.12
    fallback_low_energy: float = 0.15

    # Reason ladder
    high_load_score: float = 60.0
    moderate_load_score: float = 35.0

    fuel_efficiency: float = 0.92


# Reason texts, highest priority first
REASON_CRITICAL_ENERGY = "Energy reserves critically low. Eat and rest before continuing."
REASON_NEAR_EXHAUSTION = "Near exhaustion. Stop for a proper break now."
REASON_HIGH_LOAD = "High load accumulated. Ease the pace and plan a short break."
REASON_MODERATE_LOAD = "Steady load. Keep pace controlled on climbs."
REASON_CONTROLLED = "Body load is controlled."


def _finite(value: Optional[float], default: float = 0.0) -> float:
    if value is None or not math.isfinite(value):
        return default
    return value


class FatigueScoringService:
    """
    Stateless fatigue/energy evaluator.

    evaluate() is a pure function of its inputs: it never raises and never
    does I/O. Missing profile or heart rate silently selects the fallback path.

    Example (heart-rate path, 1 minute at 150 bpm, resting 60, max 190):
        ratio = (150 - 60) / (190 - 60) = 0.692
        load  = 1 * 0.692 * 0.64 * e^(1.92 * 0.692) = 1.67 units
    """

    def __init__(self, config: Optional[FatigueConfig] = None):
        self.config = config or FatigueConfig()

    def step_seconds(self, previous: FatigueState, elapsed_total: float) -> float:
        """
        Seconds of effort since the previous evaluation.

        A state restored with load but without elapsed continuity counts
        as a single second, so a recovery never books a huge step.
        """
        if previous.last_elapsed_seconds <= 0 and previous.accumulated_load > 0:
            return self.config.restored_step_seconds

        step = elapsed_total - previous.last_elapsed_seconds
        return min(self.config.max_step_seconds, max(0.0, step))

    def select_path(self, heart_rate: Optional[float], profile: Optional[UserProfile]) -> LoadPath:
        if profile is not None and heart_rate is not None and heart_rate > self.config.min_heart_rate:
            return LoadPath.HEART_RATE
        return LoadPath.FALLBACK

    def evaluate(
        self,
        previous: FatigueState,
        elapsed_total: float,
        speed: float,
        slope_percent: float,
        heart_rate: Optional[float] = None,
        cadence: float = 0.0,
        profile: Optional[UserProfile] = None
    ) -> FatigueState:
        """
        Advance the fatigue state by one step.

        Args:
            previous: State after the last evaluation
            elapsed_total: Active session seconds (pauses excluded)
            speed: Current speed in m/s
            slope_percent: Current slope
            heart_rate: Latest heart rate, None when unavailable/stale
            cadence: Steps per second
            profile: Hiker profile, None when not provided

        Returns:
            New FatigueState
        """
        cfg = self.config
        elapsed_total = max(0.0, _finite(elapsed_total))
        speed = max(0.0, _finite(speed))
        slope_percent = _finite(slope_percent)
        cadence = max(0.0, _finite(cadence))
        heart_rate = None if heart_rate is None else _finite(heart_rate)

        minutes = self.step_seconds(previous, elapsed_total) / 60

        # Caloric balance (both paths)
        weight = profile.weight_kg if profile is not None else DEFAULT_WEIGHT_KG
        burned = previous.calories_burned + calories_per_minute(speed, slope_percent, weight) * minutes
        energy = energy_remaining(
            baseline_reserve(profile),
            previous.calories_consumed,
            burned,
            cfg.fuel_efficiency,
        )
        depletion = (1 - energy) * 100

        path = self.select_path(heart_rate, profile)
        max_hr_exceeded = False

        if path is LoadPath.HEART_RATE:
            max_hr = profile.resolved_max_heart_rate
            ratio = heart_rate_reserve_ratio(
                heart_rate,
                profile.resolved_resting_heart_rate,
                max_hr,
                cfg.max_reserve_ratio,
            )
            step_load = impulse_load(minutes, ratio, cfg.heart_rate_exponent, cfg.impulse_weight)
            load_weight = cfg.heart_rate_load_weight
            break_score = cfg.heart_rate_break_score
            low_energy = cfg.heart_rate_low_energy
            max_hr_exceeded = heart_rate > max_hr * cfg.break_heart_rate_fraction
        else:
            intensity = movement_intensity(
                speed, slope_percent, cadence,
                cfg.min_fallback_intensity, cfg.max_fallback_intensity,
            )
            step_load = impulse_load(minutes, intensity, cfg.fallback_exponent, cfg.impulse_weight)
            load_weight = cfg.fallback_load_weight
            break_score = cfg.fallback_break_score
            low_energy = cfg.fallback_low_energy

        accumulated = previous.accumulated_load + step_load
        capacity = load_capacity(profile, cfg.capacity_base, cfg.capacity_min, cfg.capacity_max)

        score = load_score(accumulated, capacity) * load_weight + depletion * (1 - load_weight)
        score = min(100.0, max(0.0, score))

        energy_critical = energy < low_energy
        near_exhaustion = score > break_score or max_hr_exceeded
        needs_break = energy_critical or near_exhaustion

        return FatigueState(
            score=score,
            accumulated_load=accumulated,
            energy_remaining=energy,
            needs_break=needs_break,
            reason=self._reason(score, energy_critical, near_exhaustion),
            last_elapsed_seconds=max(previous.last_elapsed_seconds, elapsed_total),
            calories_burned=burned,
            calories_consumed=previous.calories_consumed,
        )

    def add_fuel(self, state: FatigueState, kcal: float) -> FatigueState:
        """
        Record food/drink intake.

        Non-positive or non-finite amounts are ignored.
        """
        kcal = _finite(kcal)
        if kcal <= 0:
            logger.warning(f"Ignored fuel intake of {kcal} kcal")
            return state
        return state.model_copy(update={"calories_consumed": state.calories_consumed + kcal})

    def _reason(self, score: float, energy_critical: bool, near_exhaustion: bool) -> str:
        if energy_critical:
            return REASON_CRITICAL_ENERGY
        if near_exhaustion:
            return REASON_NEAR_EXHAUSTION
        if score > self.config.high_load_score:
            return REASON_HIGH_LOAD
        if score > self.config.moderate_load_score:
            return REASON_MODERATE_LOAD
        return REASON_CONTROLLED
