"""
Tests for SafetyEvaluationService.

Tests each rule in isolation and the recommendation priority.
"""

import pytest

from trailmind.features.fatigue import FatigueState
from trailmind.features.safety import SafetyEvaluationService, SafetyState
from trailmind.features.safety.service import (
    RECOMMEND_CHECK_IN,
    RECOMMEND_ENERGY_RISK,
    RECOMMEND_LOW_BATTERY,
    RECOMMEND_OVER_FATIGUED,
    RECOMMEND_STABLE,
)


MINUTE = 60


@pytest.fixture
def service():
    return SafetyEvaluationService()


@pytest.fixture
def fresh():
    return FatigueState.initial()


# =============================================================================
# Test Individual Rules
# =============================================================================

class TestRules:

    def test_all_clear(self, service, fresh):
        state = service.evaluate(fresh, 0.8, 5 * MINUTE, 30 * MINUTE)
        assert not state.has_alert
        assert state.recommendation == RECOMMEND_STABLE

    def test_check_in_due_after_twenty_minutes(self, service, fresh):
        assert not service.evaluate(fresh, 1.0, 20 * MINUTE, 0).check_in_due
        assert service.evaluate(fresh, 1.0, 20 * MINUTE + 1, 0).check_in_due

    def test_low_battery(self, service, fresh):
        assert service.evaluate(fresh, 0.19, 0, 0).low_battery
        assert not service.evaluate(fresh, 0.2, 0, 0).low_battery

    def test_over_fatigued(self, service):
        assert service.evaluate(FatigueState(score=81), 1.0, 0, 0).over_fatigued
        assert not service.evaluate(FatigueState(score=80), 1.0, 0, 0).over_fatigued

    def test_energy_risk_needs_time_on_trail(self, service):
        low = FatigueState(energy_remaining=0.2)
        assert not service.evaluate(low, 1.0, 0, 35 * MINUTE).return_home_energy_risk
        assert service.evaluate(low, 1.0, 0, 35 * MINUTE + 1).return_home_energy_risk

    def test_energy_risk_needs_low_energy(self, service):
        ok = FatigueState(energy_remaining=0.25)
        assert not service.evaluate(ok, 1.0, 0, 3 * 3600).return_home_energy_risk


# =============================================================================
# Test Recommendation Priority
# =============================================================================

class TestRecommendationPriority:

    def test_over_fatigue_wins(self, service):
        fatigue = FatigueState(score=95, energy_remaining=0.1)
        state = service.evaluate(fatigue, 0.1, 30 * MINUTE, 60 * MINUTE)
        assert state.over_fatigued and state.low_battery and state.check_in_due
        assert state.return_home_energy_risk
        assert state.recommendation == RECOMMEND_OVER_FATIGUED

    def test_battery_before_check_in(self, service, fresh):
        state = service.evaluate(fresh, 0.1, 30 * MINUTE, 0)
        assert state.recommendation == RECOMMEND_LOW_BATTERY

    def test_check_in_before_energy(self, service):
        state = service.evaluate(FatigueState(energy_remaining=0.1), 1.0, 30 * MINUTE, 60 * MINUTE)
        assert state.recommendation == RECOMMEND_CHECK_IN

    def test_energy_risk_alone(self, service):
        state = service.evaluate(FatigueState(energy_remaining=0.1), 1.0, 0, 60 * MINUTE)
        assert state.recommendation == RECOMMEND_ENERGY_RISK


class TestSafetyState:

    def test_calm_default(self):
        calm = SafetyState.calm()
        assert not calm.has_alert
        assert calm.recommendation == "All good"
