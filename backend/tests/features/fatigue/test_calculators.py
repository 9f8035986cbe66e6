"""
Tests for fatigue calculators (training impulse and caloric balance).
"""

import math

import pytest

from trailmind.shared.constants import FitnessCondition
from trailmind.features.fatigue.schemas import UserProfile
from trailmind.features.fatigue.calculators import (
    heart_rate_reserve_ratio,
    impulse_load,
    movement_intensity,
    load_capacity,
    load_score,
    calories_per_minute,
    baseline_reserve,
    energy_remaining,
)


def make_profile(**overrides):
    values = dict(age=30, weight_kg=70, height_cm=175)
    values.update(overrides)
    return UserProfile(**values)


# =============================================================================
# Test Training Impulse
# =============================================================================

class TestHeartRateReserveRatio:

    def test_mid_range(self):
        assert heart_rate_reserve_ratio(150, 60, 190) == pytest.approx(90 / 130)

    def test_clamped_at_zero(self):
        assert heart_rate_reserve_ratio(50, 60, 190) == 0.0

    def test_clamped_at_upper(self):
        assert heart_rate_reserve_ratio(260, 60, 190) == 1.2

    def test_degenerate_range(self):
        assert heart_rate_reserve_ratio(150, 190, 190) == 0.0


class TestImpulseLoad:

    def test_one_minute_heart_rate_example(self):
        """1 min at 150 bpm, resting 60, max 190."""
        ratio = heart_rate_reserve_ratio(150, 60, 190)
        load = impulse_load(1.0, ratio, 1.92)
        assert load == pytest.approx(1.674, abs=0.01)

    def test_formula(self):
        expected = 2.0 * 0.5 * 0.64 * math.exp(1.7 * 0.5)
        assert impulse_load(2.0, 0.5, 1.7) == pytest.approx(expected)

    def test_zero_time_or_intensity(self):
        assert impulse_load(0, 0.8, 1.92) == 0.0
        assert impulse_load(1, 0, 1.92) == 0.0

    def test_hard_minutes_count_more(self):
        assert impulse_load(1, 0.9, 1.92) > 2 * impulse_load(1, 0.45, 1.92)


class TestMovementIntensity:

    def test_standing_still(self):
        assert movement_intensity(0, 0, 0) == pytest.approx(0.18)

    def test_brisk_walk(self):
        assert movement_intensity(1.4, 0, 1.0) == pytest.approx(0.46)

    def test_climbing_raises_intensity(self):
        assert movement_intensity(1.0, 15, 1.5) > movement_intensity(1.0, 0, 1.5)

    def test_bounds(self):
        assert movement_intensity(10, 50, 3) == 1.1
        assert movement_intensity(0, 0, 0, lower=0.3) == 0.3


class TestLoadCapacity:

    def test_no_profile(self):
        assert load_capacity(None) == 260

    def test_moderate_profile(self):
        assert load_capacity(make_profile()) == pytest.approx(260)

    def test_fitter_hiker_tolerates_more(self):
        advanced = make_profile(condition=FitnessCondition.ADVANCED)
        assert load_capacity(advanced) == pytest.approx(260 / 0.9)

    def test_multiplier_adjustments(self):
        profile = make_profile(age=60, weight_kg=100, condition=FitnessCondition.BEGINNER)
        assert profile.fatigue_multiplier == pytest.approx(1.29)
        assert load_capacity(profile) == pytest.approx(260 / 1.29)

    def test_load_score_clamped(self):
        assert load_score(130, 260) == pytest.approx(50)
        assert load_score(10_000, 260) == 100
        assert load_score(5, 0) == 100


# =============================================================================
# Test Caloric Balance
# =============================================================================

class TestCaloriesPerMinute:

    def test_flat_walk(self):
        """v = 72 m/min: VO2 = 3.5 + 7.2 = 10.7 ml/kg/min."""
        assert calories_per_minute(1.2, 0, 75) == pytest.approx(4.0125)

    def test_uphill(self):
        assert calories_per_minute(1.0, 10, 70) == pytest.approx(7.105)

    def test_downhill_cheaper_than_uphill(self):
        assert calories_per_minute(1.0, -10, 70) == pytest.approx(3.955)

    def test_resting(self):
        assert calories_per_minute(0, 0, 75) == pytest.approx(1.3125)

    def test_clamped(self):
        assert calories_per_minute(5, 40, 120) == 18.0
        assert calories_per_minute(0, 0, 30) == 1.0


class TestBaselineReserve:

    def test_no_profile(self):
        assert baseline_reserve(None) == 1800

    def test_scales_with_weight(self):
        assert baseline_reserve(make_profile()) == pytest.approx(1680)

    def test_condition_and_age(self):
        advanced = make_profile(condition=FitnessCondition.ADVANCED)
        assert baseline_reserve(advanced) == pytest.approx(1881.6)

        senior = make_profile(age=60, condition=FitnessCondition.BEGINNER)
        assert baseline_reserve(senior) == pytest.approx(70 * 24 * 0.9 * 0.92)

    def test_clamped(self):
        assert baseline_reserve(make_profile(weight_kg=40)) == 1100
        assert baseline_reserve(make_profile(weight_kg=150)) == 2600


class TestEnergyRemaining:

    def test_half_used(self):
        assert energy_remaining(1800, 0, 900) == pytest.approx(0.5)

    def test_fuel_counts_at_efficiency(self):
        assert energy_remaining(1800, 500, 900) == pytest.approx((1800 + 460 - 900) / 1800)

    def test_bounds(self):
        assert energy_remaining(1800, 0, 5000) == 0.0
        assert energy_remaining(1800, 3000, 0) == 1.0
        assert energy_remaining(0, 0, 0) == 0.0
