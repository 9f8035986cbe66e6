"""
Fatigue calculators.

- trimp: heart-rate reserve and exponential impulse load
- energy: caloric expenditure and remaining-energy fraction
"""
from .trimp import (
    heart_rate_reserve_ratio,
    impulse_load,
    movement_intensity,
    load_capacity,
    load_score,
    HEART_RATE_EXPONENT,
    FALLBACK_EXPONENT,
    IMPULSE_WEIGHT,
)
from .energy import (
    calories_per_minute,
    baseline_reserve,
    energy_remaining,
    FUEL_EFFICIENCY,
)

__all__ = [
    "heart_rate_reserve_ratio",
    "impulse_load",
    "movement_intensity",
    "load_capacity",
    "load_score",
    "HEART_RATE_EXPONENT",
    "FALLBACK_EXPONENT",
    "IMPULSE_WEIGHT",
    "calories_per_minute",
    "baseline_reserve",
    "energy_remaining",
    "FUEL_EFFICIENCY",
]
