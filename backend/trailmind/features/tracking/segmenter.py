"""
Live Segment Builder

Turns consecutive accepted location samples into TrailSegments.

Unlike route segmentation after the fact, this runs sample by sample:
the previous accepted sample is kept as an anchor and every new sample
closes one segment against it.

Vertical noise handling (applied in this order):
1. cap: |delta| <= 4.5 m/s * duration rejects altimeter/GPS spikes
2. gate: |delta| < 1.4 m is treated as no change (sensor jitter)
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from trailmind.shared.constants import TerrainType
from trailmind.shared.geo import haversine, slope_percent
from .schemas import LocationSample, TrailSegment

logger = logging.getLogger(__name__)


# Segment builder constants
MAX_VERTICAL_SPEED_MPS = 4.5      # Faster climbs/descents are sensor spikes
VERTICAL_NOISE_GATE_M = 1.4       # Smaller changes are jitter
MIN_SEGMENT_SECONDS = 1.0         # Avoids divide-by-zero on duplicate timestamps
MAX_HORIZONTAL_ACCURACY_M = 65.0

# Terrain thresholds
CLIMB_SLOPE_PERCENT = 10.0
DOWNHILL_SLOPE_PERCENT = -6.0
TECHNICAL_CADENCE = 1.25          # steps/s, short choppy steps
FAST_CLIMB_SPEED_MPS = 1.2


@dataclass
class SegmenterConfig:
    """Configuration for the live segment builder."""
    max_vertical_speed_mps: float = MAX_VERTICAL_SPEED_MPS
    vertical_noise_gate_m: float = VERTICAL_NOISE_GATE_M
    min_segment_seconds: float = MIN_SEGMENT_SECONDS
    max_horizontal_accuracy_m: float = MAX_HORIZONTAL_ACCURACY_M


@dataclass(frozen=True)
class TerrainInsight:
    """Terrain class plus the guidance shown for it."""
    terrain: TerrainType
    pacing_advice: str
    safety_hint: str


@dataclass(frozen=True)
class BuiltSegment:
    """A freshly emitted segment and the terrain insight it was classified with."""
    segment: TrailSegment
    insight: TerrainInsight


def classify_terrain(speed: float, slope_pct: float, cadence: float) -> TerrainInsight:
    """
    Classify terrain from movement metrics.

    Rules are evaluated in order, first match wins:
        slope > 10%     -> Climb
        slope < -6%     -> Downhill
        cadence < 1.25  -> Technical
        otherwise       -> Flat
    """
    if slope_pct > CLIMB_SLOPE_PERCENT:
        return TerrainInsight(
            terrain=TerrainType.CLIMB,
            pacing_advice=(
                "Slow down slightly to protect energy."
                if speed > FAST_CLIMB_SPEED_MPS
                else "Good uphill pacing."
            ),
            safety_hint="Keep short steps and stable rhythm on steep grade.",
        )

    if slope_pct < DOWNHILL_SLOPE_PERCENT:
        return TerrainInsight(
            terrain=TerrainType.DOWNHILL,
            pacing_advice="Control stride and avoid sudden acceleration.",
            safety_hint="Downhill load stresses knees. Keep cadence balanced.",
        )

    if cadence < TECHNICAL_CADENCE:
        return TerrainInsight(
            terrain=TerrainType.TECHNICAL,
            pacing_advice="Use shorter, frequent steps through technical patches.",
            safety_hint="Watch footing and maintain center of gravity.",
        )

    return TerrainInsight(
        terrain=TerrainType.FLAT,
        pacing_advice="Maintain current rhythm.",
        safety_hint="Hydrate early before next climb.",
    )


def bounded_vertical_delta(
    raw_delta_m: float,
    duration_s: float,
    max_vertical_speed_mps: float = MAX_VERTICAL_SPEED_MPS,
    noise_gate_m: float = VERTICAL_NOISE_GATE_M
) -> float:
    """
    Cap a vertical change to a plausible rate, then drop jitter.

    Args:
        raw_delta_m: Filtered altitude difference between the samples
        duration_s: Segment duration (already clamped to >= 1 s)

    Returns:
        Signed vertical delta in meters
    """
    if not math.isfinite(raw_delta_m):
        return 0.0

    limit = max_vertical_speed_mps * duration_s
    capped = max(-limit, min(limit, raw_delta_m))
    if abs(capped) < noise_gate_m:
        return 0.0
    return capped


class SegmentBuilder:
    """
    Builds trail segments from a live stream of samples.

    Usage:
        builder = SegmentBuilder()
        if builder.accept(sample):
            built = builder.add(sample, filtered_altitude, heart_rate, cadence)
    """

    def __init__(self, config: Optional[SegmenterConfig] = None):
        self.config = config or SegmenterConfig()
        self._anchor: Optional[LocationSample] = None
        self._anchor_altitude: float = 0.0
        self._last_accepted_at: Optional[datetime] = None

    @property
    def anchor(self) -> Optional[LocationSample]:
        return self._anchor

    def accept(self, sample: LocationSample) -> bool:
        """
        Decide whether a sample enters the pipeline at all.

        Rejects non-finite or too coarse horizontal fixes and samples older
        than the last accepted one. Accepted samples advance the ordering mark.
        """
        if not sample.is_finite:
            logger.debug(f"Dropped non-finite sample at {sample.timestamp}")
            return False

        accuracy = sample.horizontal_accuracy
        if accuracy < 0 or accuracy > self.config.max_horizontal_accuracy_m:
            logger.debug(f"Dropped sample at {sample.timestamp}: horizontal accuracy {accuracy}")
            return False

        if self._last_accepted_at is not None and sample.timestamp < self._last_accepted_at:
            logger.debug(f"Dropped out-of-order sample at {sample.timestamp}")
            return False

        self._last_accepted_at = sample.timestamp
        return True

    def add(
        self,
        sample: LocationSample,
        filtered_altitude: float,
        heart_rate: Optional[float] = None,
        cadence: float = 0.0
    ) -> Optional[BuiltSegment]:
        """
        Close a segment against the anchor, or become the anchor.

        Returns:
            BuiltSegment, or None when the sample only became the anchor
        """
        anchor = self._anchor
        anchor_altitude = self._anchor_altitude
        self._anchor = sample
        self._anchor_altitude = filtered_altitude

        if anchor is None:
            return None

        distance = haversine(
            anchor.latitude, anchor.longitude,
            sample.latitude, sample.longitude
        )
        elapsed = (sample.timestamp - anchor.timestamp).total_seconds()
        duration = max(self.config.min_segment_seconds, elapsed)

        vertical = bounded_vertical_delta(
            filtered_altitude - anchor_altitude,
            duration,
            self.config.max_vertical_speed_mps,
            self.config.vertical_noise_gate_m,
        )
        slope = slope_percent(distance, vertical)
        speed = distance / duration

        insight = classify_terrain(speed, slope, cadence)

        segment = TrailSegment(
            started_at=anchor.timestamp,
            ended_at=sample.timestamp,
            duration=duration,
            distance=distance,
            elevation_delta=vertical,
            slope_percent=slope,
            average_speed=speed,
            heart_rate=heart_rate or 0.0,
            cadence=cadence,
            terrain=insight.terrain,
        )
        return BuiltSegment(segment=segment, insight=insight)

    def reset_anchor(self) -> None:
        """Next sample starts a fresh segment (used after resume/recovery)."""
        self._anchor = None
        self._anchor_altitude = 0.0

    def reset(self) -> None:
        """Forget everything (new session)."""
        self.reset_anchor()
        self._last_accepted_at = None
