"""
Tests for location sample validation.
"""

import math
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from trailmind.features.tracking.schemas import LocationSample


T0 = datetime(2026, 6, 1, 8, 0, tzinfo=timezone.utc)


def sample(**overrides):
    fields = dict(timestamp=T0, latitude=46.5, longitude=7.9, altitude=1000.0,
                  speed=1.2, horizontal_accuracy=5.0, vertical_accuracy=3.0)
    fields.update(overrides)
    return LocationSample(**fields)


class TestLocationSample:

    @pytest.mark.parametrize("field", ["latitude", "longitude", "altitude"])
    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_position_rejected(self, field, value):
        with pytest.raises(ValidationError):
            sample(**{field: value})

    def test_non_finite_accuracy_becomes_unknown(self):
        s = sample(horizontal_accuracy=math.nan, vertical_accuracy=math.inf)
        assert s.horizontal_accuracy == -1.0
        assert s.vertical_accuracy == -1.0

    def test_speed_clamped(self):
        assert sample(speed=-1).speed == 0.0
        assert sample(speed=math.nan).speed == 0.0

    def test_naive_timestamp_is_utc(self):
        s = sample(timestamp=datetime(2026, 6, 1, 8, 0))
        assert s.timestamp == T0

    def test_json_round_trip(self):
        s = sample(horizontal_accuracy=math.nan)
        assert LocationSample.model_validate_json(s.model_dump_json()) == s

    def test_is_finite(self):
        assert sample().is_finite
