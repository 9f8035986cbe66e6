"""
Fatigue schemas.

FatigueState is the cumulative physiological state of a session.
UserProfile is the optional body/fitness description of the hiker.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from trailmind.shared.constants import FitnessCondition


# Used when the profile does not carry measured heart-rate values
DEFAULT_RESTING_HEART_RATE = 62.0


class FatigueState(BaseModel):
    """
    Cumulative fatigue/energy state.

    score and energy_remaining are clamped on construction;
    accumulated_load and calories_burned only ever grow.
    """
    model_config = ConfigDict(frozen=True)

    score: float = 0.0
    accumulated_load: float = Field(default=0.0, description="TRIMP-like training impulse")
    energy_remaining: float = 1.0
    needs_break: bool = False
    reason: str = "Fresh start"
    last_elapsed_seconds: float = 0.0
    calories_burned: float = 0.0
    calories_consumed: float = 0.0

    @field_validator('score')
    @classmethod
    def clamp_score(cls, v: float) -> float:
        return min(100.0, max(0.0, v))

    @field_validator('energy_remaining')
    @classmethod
    def clamp_energy(cls, v: float) -> float:
        return min(1.0, max(0.0, v))

    @field_validator('accumulated_load', 'calories_burned', 'calories_consumed', 'last_elapsed_seconds')
    @classmethod
    def clamp_non_negative(cls, v: float) -> float:
        return max(0.0, v)

    @classmethod
    def initial(cls) -> "FatigueState":
        return cls()


class UserProfile(BaseModel):
    """Hiker profile. Absence of a profile selects the fallback fatigue path."""
    age: int = Field(..., ge=5, le=110)
    weight_kg: float = Field(..., gt=20, le=300)
    height_cm: float = Field(..., gt=80, le=250)
    condition: FitnessCondition = FitnessCondition.MODERATE
    resting_heart_rate: Optional[float] = Field(default=None, gt=25, lt=140)
    max_heart_rate: Optional[float] = Field(default=None, gt=90, lt=240)

    @property
    def resolved_resting_heart_rate(self) -> float:
        if self.resting_heart_rate is not None:
            return self.resting_heart_rate
        return DEFAULT_RESTING_HEART_RATE

    @property
    def resolved_max_heart_rate(self) -> float:
        """Measured max HR, else Tanaka's age estimate (208 - 0.7 * age)."""
        if self.max_heart_rate is not None:
            return self.max_heart_rate
        return 208.0 - 0.7 * self.age

    @property
    def fatigue_multiplier(self) -> float:
        """Condition multiplier adjusted for age and weight, within [0.75, 1.35]."""
        multiplier = self.condition.fatigue_multiplier
        if self.age >= 55:
            multiplier += 0.08
        if self.weight_kg >= 95:
            multiplier += 0.05
        return min(1.35, max(0.75, multiplier))
