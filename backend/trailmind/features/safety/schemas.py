"""
Safety schemas.
"""
from pydantic import BaseModel, ConfigDict


class SafetyState(BaseModel):
    """
    Safety flags plus one recommendation.

    Always recomputed as a whole from the current inputs.
    """
    model_config = ConfigDict(frozen=True)

    check_in_due: bool = False
    low_battery: bool = False
    over_fatigued: bool = False
    return_home_energy_risk: bool = False
    recommendation: str = "All good"

    @classmethod
    def calm(cls) -> "SafetyState":
        return cls()

    @property
    def has_alert(self) -> bool:
        return (
            self.check_in_due
            or self.low_battery
            or self.over_fatigued
            or self.return_home_energy_risk
        )
