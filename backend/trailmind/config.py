"""
Engine Configuration

Uses Pydantic Settings for type-safe configuration.
Values can be overridden with TRAILMIND_* environment variables or a .env file.
"""

from pathlib import Path
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Per-installation state directory (checkpoint lives here)
DEFAULT_STATE_DIR = Path.home() / ".trailmind"


class Settings(BaseSettings):
    """Engine settings with validation."""

    # === Core ===
    log_level: str = Field(default="INFO", description="Logging level")

    # === Checkpoint ===
    checkpoint_dir: Path = Field(
        default=DEFAULT_STATE_DIR,
        description="Directory holding the active hike checkpoint"
    )
    checkpoint_filename: str = Field(default="active-hike-checkpoint.json")
    checkpoint_save_interval_seconds: float = Field(
        default=4.0,
        description="Minimum seconds between non-forced checkpoint saves"
    )

    # === Live session ===
    tick_interval_seconds: float = Field(default=1.0, gt=0)
    heart_rate_stale_after_seconds: float = Field(default=25.0, gt=0)
    max_horizontal_accuracy_m: float = Field(
        default=65.0,
        description="Location samples less accurate than this are dropped"
    )
    event_queue_size: int = Field(default=256, ge=1)

    # === Bounded collections ===
    route_cap: int = Field(default=4000, ge=2)
    route_cap_under_pressure: int = Field(default=1500, ge=2)
    segment_cap: int = Field(default=6000, ge=1)
    segment_cap_under_pressure: int = Field(default=2200, ge=1)

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept 'debug', 'Info', ... as well."""
        return v.strip().upper()

    @field_validator('checkpoint_dir', mode='before')
    @classmethod
    def expand_checkpoint_dir(cls, v):
        """Expand '~' in user supplied paths."""
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    @model_validator(mode='after')
    def check_pressure_caps(self) -> "Settings":
        """Memory-pressure caps must never exceed the normal caps."""
        if self.route_cap_under_pressure > self.route_cap:
            self.route_cap_under_pressure = self.route_cap
        if self.segment_cap_under_pressure > self.segment_cap:
            self.segment_cap_under_pressure = self.segment_cap
        return self

    @property
    def checkpoint_path(self) -> Path:
        return self.checkpoint_dir / self.checkpoint_filename

    model_config = SettingsConfigDict(
        env_prefix="TRAILMIND_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
