"""
Caloric balance.

Energy expenditure follows the ACSM walking equation:

    VO2 (ml/kg/min) = 3.5 + 0.1 * v + k * v * |grade|

    v     - horizontal speed in m/min
    grade - slope as decimal
    k     - 1.8 uphill, 0.3 downhill (eccentric work is cheaper)

kcal/min ~= VO2 * weight_kg / 1000 * 5 (5 kcal per litre of O2).
"""

from typing import Optional

from ..schemas import UserProfile


RESTING_VO2 = 3.5
HORIZONTAL_COST = 0.1
UPHILL_COST = 1.8
DOWNHILL_COST = 0.3
KCAL_PER_LITRE_O2 = 5.0

MIN_KCAL_PER_MIN = 1.0
MAX_KCAL_PER_MIN = 18.0

DEFAULT_WEIGHT_KG = 75.0
RESERVE_KCAL_PER_KG = 24.0
DEFAULT_RESERVE_KCAL = 1800.0
MIN_RESERVE_KCAL = 1100.0
MAX_RESERVE_KCAL = 2600.0
SENIOR_RESERVE_FACTOR = 0.92

# Only part of what is eaten during a hike becomes available energy
FUEL_EFFICIENCY = 0.92


def calories_per_minute(
    speed: float,
    slope_percent: float,
    weight_kg: float = DEFAULT_WEIGHT_KG
) -> float:
    """
    Estimated energy expenditure.

    Args:
        speed: Horizontal speed in m/s
        slope_percent: Current slope (10.0 = 10%)
        weight_kg: Body weight

    Returns:
        kcal per minute, clamped to [1, 18]
    """
    v = max(0.0, speed) * 60
    grade = slope_percent / 100
    vertical_cost = UPHILL_COST if grade > 0 else DOWNHILL_COST

    vo2 = RESTING_VO2 + HORIZONTAL_COST * v + vertical_cost * v * abs(grade)
    kcal = vo2 * weight_kg / 1000 * KCAL_PER_LITRE_O2
    return min(MAX_KCAL_PER_MIN, max(MIN_KCAL_PER_MIN, kcal))


def baseline_reserve(profile: Optional[UserProfile]) -> float:
    """
    Energy available for the hike before any food, in kcal.

    Scales with body weight, condition tier and age.
    """
    if profile is None:
        return DEFAULT_RESERVE_KCAL

    reserve = profile.weight_kg * RESERVE_KCAL_PER_KG * profile.condition.reserve_factor
    if profile.age >= 55:
        reserve *= SENIOR_RESERVE_FACTOR
    return min(MAX_RESERVE_KCAL, max(MIN_RESERVE_KCAL, reserve))


def energy_remaining(
    reserve_kcal: float,
    consumed_kcal: float,
    burned_kcal: float,
    fuel_efficiency: float = FUEL_EFFICIENCY
) -> float:
    """Remaining energy fraction in [0, 1]."""
    if reserve_kcal <= 0:
        return 0.0
    fraction = (reserve_kcal + consumed_kcal * fuel_efficiency - burned_kcal) / reserve_kcal
    return min(1.0, max(0.0, fraction))
