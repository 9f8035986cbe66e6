"""
Elevation processing utilities.

This is the SINGLE SOURCE OF TRUTH for elevation calculations:
- live altitude smoothing weighted by the sensor's vertical accuracy
- gain/loss totals over a sequence of elevation changes
"""
import math
from typing import Iterable, Optional, Tuple


# Readings less accurate than this are not trusted at all
RELIABLE_VERTICAL_ACCURACY_M = 16.0

# (accuracy upper bound in meters, smoothing factor); first match wins
SMOOTHING_STEPS: Tuple[Tuple[float, float], ...] = (
    (4.0, 0.45),
    (8.0, 0.32),
)
DEFAULT_SMOOTHING = 0.20


def smoothing_factor(vertical_accuracy_m: float) -> float:
    """
    Pick the exponential smoothing factor for a reading.

    Better accuracy means the new reading is trusted more.
    """
    for upper_bound, alpha in SMOOTHING_STEPS:
        if vertical_accuracy_m <= upper_bound:
            return alpha
    return DEFAULT_SMOOTHING


def filter_altitude(
    raw_altitude_m: float,
    vertical_accuracy_m: float,
    previous_m: Optional[float]
) -> Optional[float]:
    """
    Smooth one altitude reading.

    Args:
        raw_altitude_m: Altitude reported by the sensor
        vertical_accuracy_m: Reported vertical accuracy (negative = unknown)
        previous_m: Previous filtered value, None for the first reading

    Returns:
        New filtered altitude in meters; None only while no finite
        reading has been seen

    Notes:
        - Unknown, non-finite or unreliable (> 16 m) accuracy: previous
          value is carried forward unchanged (raw value if there is none)
        - Non-finite raw value: previous value is carried forward
        - First reliable reading initializes the filter with the raw value
    """
    if not math.isfinite(raw_altitude_m):
        return previous_m

    if (not math.isfinite(vertical_accuracy_m)
            or vertical_accuracy_m < 0
            or vertical_accuracy_m > RELIABLE_VERTICAL_ACCURACY_M):
        return previous_m if previous_m is not None else raw_altitude_m

    if previous_m is None:
        return raw_altitude_m

    alpha = smoothing_factor(vertical_accuracy_m)
    return previous_m + (raw_altitude_m - previous_m) * alpha


class AltitudeFilter:
    """
    Stateful wrapper around filter_altitude().

    Keeps the last filtered value so a session (or a restored checkpoint)
    continues smoothing from where it stopped.
    """

    def __init__(self, last_value: Optional[float] = None):
        self.last_value = last_value

    def update(self, raw_altitude_m: float, vertical_accuracy_m: float) -> Optional[float]:
        self.last_value = filter_altitude(
            raw_altitude_m, vertical_accuracy_m, self.last_value
        )
        return self.last_value

    def reset(self, last_value: Optional[float] = None) -> None:
        self.last_value = last_value


def calculate_elevation_changes(
    deltas: Iterable[float]
) -> Tuple[float, float]:
    """
    Calculate total elevation gain and loss.

    Args:
        deltas: Signed elevation changes in meters

    Returns:
        Tuple of (gain_m, loss_m), both non-negative
    """
    gain = 0.0
    loss = 0.0

    for diff in deltas:
        if diff > 0:
            gain += diff
        else:
            loss += abs(diff)

    return gain, loss
