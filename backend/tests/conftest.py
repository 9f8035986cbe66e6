"""
Shared fixtures for engine tests.

Samples are generated on a straight south-to-north line so distances are
easy to reason about: `north_m` meters from the base point.
"""

import math
from datetime import datetime, timedelta, timezone

import pytest

from trailmind.config import Settings
from trailmind.shared.geo import EARTH_RADIUS_M
from trailmind.features.tracking.schemas import LocationSample
from trailmind.features.fatigue.schemas import UserProfile
from trailmind.features.session import CheckpointStore, HikeSessionEngine, InMemoryHikeArchive


T0 = datetime(2026, 6, 1, 8, 0, tzinfo=timezone.utc)
BASE_LAT = 46.5
BASE_LON = 7.9
METERS_PER_DEGREE_LAT = EARTH_RADIUS_M * math.pi / 180


class FakeClock:
    """Manually advanced clock for the engine."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


def build_sample(
    seconds: float,
    north_m: float = 0.0,
    altitude: float = 1000.0,
    horizontal_accuracy: float = 5.0,
    vertical_accuracy: float = 3.0,
    speed: float = 0.0,
) -> LocationSample:
    return LocationSample(
        timestamp=T0 + timedelta(seconds=seconds),
        latitude=BASE_LAT + north_m / METERS_PER_DEGREE_LAT,
        longitude=BASE_LON,
        altitude=altitude,
        speed=speed,
        horizontal_accuracy=horizontal_accuracy,
        vertical_accuracy=vertical_accuracy,
    )


@pytest.fixture
def make_sample():
    """Factory: make_sample(seconds_after_t0, north_m=..., altitude=...)."""
    return build_sample


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine_settings(tmp_path):
    """Settings pointing at a per-test state directory."""
    return Settings(checkpoint_dir=tmp_path / "state")


@pytest.fixture
def store(engine_settings):
    return CheckpointStore(engine_settings.checkpoint_path)


@pytest.fixture
def archive():
    return InMemoryHikeArchive()


@pytest.fixture
def engine(store, archive, clock, engine_settings):
    """Engine wired to a fake clock and a temp checkpoint file."""
    return HikeSessionEngine(
        store=store,
        archive=archive,
        clock=clock,
        config=engine_settings,
    )


@pytest.fixture
def profile():
    """Profile with measured resting 60 / max 190 bpm."""
    return UserProfile(
        age=30,
        weight_kg=70,
        height_cm=175,
        resting_heart_rate=60,
        max_heart_rate=190,
    )
