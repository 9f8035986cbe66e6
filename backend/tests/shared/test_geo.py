"""
Tests for shared geographic functions.

Tests the haversine distance and slope calculations.
"""

import pytest

from trailmind.shared.geo import (
    haversine,
    slope_percent,
    EARTH_RADIUS_M,
)


# =============================================================================
# Test Haversine Distance
# =============================================================================

class TestHaversine:
    """Tests for haversine function."""

    def test_same_point(self):
        """Distance between same point should be 0."""
        assert haversine(46.5, 7.9, 46.5, 7.9) == 0.0

    def test_known_distance_zurich_geneva(self):
        """Zurich to Geneva is roughly 224 km as the crow flies."""
        dist = haversine(47.3769, 8.5417, 46.2044, 6.1432)
        assert 215_000 < dist < 235_000

    def test_small_distance(self):
        """0.001 degree latitude is about 111 meters."""
        dist = haversine(46.0, 7.0, 46.001, 7.0)
        assert 110 < dist < 112

    def test_symmetry(self):
        """Distance A->B should equal B->A."""
        dist_ab = haversine(46.0, 7.0, 47.0, 8.0)
        dist_ba = haversine(47.0, 8.0, 46.0, 7.0)
        assert dist_ab == pytest.approx(dist_ba, rel=1e-9)

    def test_north_south_degree(self):
        """1 degree latitude is about 111 km everywhere."""
        dist = haversine(0.0, 0.0, 1.0, 0.0)
        assert 110_000 < dist < 112_000

    def test_earth_radius_constant(self):
        assert EARTH_RADIUS_M == 6_371_000.0

    def test_antipodal_points_do_not_fail(self):
        """Half the circumference, no math domain error."""
        dist = haversine(0.0, 0.0, 0.0, 180.0)
        assert dist == pytest.approx(EARTH_RADIUS_M * 3.141592653589793, rel=1e-6)


# =============================================================================
# Test Slope
# =============================================================================

class TestSlope:
    """Tests for slope helpers."""

    def test_climb(self):
        assert slope_percent(100, 10) == pytest.approx(10.0)

    def test_descent_is_negative(self):
        assert slope_percent(200, -12) == pytest.approx(-6.0)

    def test_zero_distance(self):
        """No horizontal movement means no slope, not a division error."""
        assert slope_percent(0, 5) == 0.0


