"""
Geographic utility functions.

This is the SINGLE SOURCE OF TRUTH for geographic calculations.
All distances are in meters.
"""
import math

# Mean Earth radius in meters
EARTH_RADIUS_M = 6_371_000.0


def haversine(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate great-circle distance between two points.

    Args:
        lat1, lon1: First point coordinates (degrees)
        lat2, lon2: Second point coordinates (degrees)

    Returns:
        Distance in meters
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) *
        math.sin(delta_lon / 2) ** 2
    )
    # Rounding can push `a` a hair outside [0, 1] for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def slope_percent(distance_m: float, elevation_delta_m: float) -> float:
    """
    Calculate slope as percentage.

    Args:
        distance_m: Horizontal distance in meters
        elevation_delta_m: Signed elevation change in meters

    Returns:
        Slope in percent (10.0 = 10%), 0 when distance is not positive
    """
    if distance_m <= 0:
        return 0.0
    return elevation_delta_m / distance_m * 100

