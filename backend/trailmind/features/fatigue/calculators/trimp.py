"""
Training impulse (TRIMP-like) load.

Banister-style impulse: time spent at an intensity is weighted
exponentially, so hard minutes count far more than easy ones.

    load = minutes * intensity * 0.64 * exp(k * intensity)

k = 1.92 when intensity comes from heart-rate reserve,
k = 1.70 when it is estimated from movement (no heart rate).
"""

import math
from typing import Optional

from ..schemas import UserProfile


IMPULSE_WEIGHT = 0.64
HEART_RATE_EXPONENT = 1.92
FALLBACK_EXPONENT = 1.7
MAX_RESERVE_RATIO = 1.2


def heart_rate_reserve_ratio(
    heart_rate: float,
    resting_heart_rate: float,
    max_heart_rate: float,
    upper: float = MAX_RESERVE_RATIO
) -> float:
    """
    Fraction of the resting-to-max range currently in use.

    Returns:
        Ratio clamped to [0, upper]; 0 for a degenerate range
    """
    span = max_heart_rate - resting_heart_rate
    if span <= 0:
        return 0.0
    ratio = (heart_rate - resting_heart_rate) / span
    return min(upper, max(0.0, ratio))


def impulse_load(
    minutes: float,
    intensity: float,
    exponent: float,
    weight: float = IMPULSE_WEIGHT
) -> float:
    """Load units for `minutes` spent at `intensity`."""
    if minutes <= 0 or intensity <= 0:
        return 0.0
    return minutes * intensity * weight * math.exp(exponent * intensity)


def movement_intensity(
    speed: float,
    slope_percent: float,
    cadence: float,
    lower: float = 0.12,
    upper: float = 1.1
) -> float:
    """
    Pseudo-intensity when no heart rate is available.

    Weighted sum of pace, climbing, descending and step rate;
    roughly comparable to a heart-rate reserve ratio.
    """
    pace_term = 0.28 * min(max(0.0, speed) / 1.4, 2.0)
    climb_term = 0.022 * max(0.0, slope_percent)
    descent_term = 0.008 * max(0.0, -slope_percent)
    cadence_term = 0.12 * max(0.0, cadence - 1.0)

    intensity = 0.18 + pace_term + climb_term + descent_term + cadence_term
    return min(upper, max(lower, intensity))


def load_capacity(
    profile: Optional[UserProfile],
    base: float = 260.0,
    lower: float = 120.0,
    upper: float = 420.0
) -> float:
    """
    Load at which the load score reaches 100.

    Fitter hikers (lower fatigue multiplier) tolerate more load.
    """
    multiplier = profile.fatigue_multiplier if profile is not None else 1.0
    return min(upper, max(lower, base / multiplier))


def load_score(accumulated_load: float, capacity: float) -> float:
    """Accumulated load as a 0-100 score."""
    if capacity <= 0:
        return 100.0
    return min(100.0, max(0.0, accumulated_load / capacity * 100))
