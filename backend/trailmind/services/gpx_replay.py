"""
GPX Replay Service

Turns a recorded GPX track into LocationSamples so the live engine can be
driven from a file instead of a GPS receiver.
"""

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

import gpxpy

from trailmind.shared.exceptions import ReplayError
from trailmind.shared.geo import haversine
from trailmind.features.tracking.schemas import LocationSample, ensure_aware

logger = logging.getLogger(__name__)


# Spacing used for points without timestamps
DEFAULT_POINT_INTERVAL_SECONDS = 5.0

# Recorded tracks carry no accuracy data; assume a good fix
REPLAY_HORIZONTAL_ACCURACY_M = 5.0
REPLAY_VERTICAL_ACCURACY_M = 3.0


class GPXReplayService:
    """Builds replayable samples from GPX content."""

    @staticmethod
    def parse(
        content: bytes,
        start_time: Optional[datetime] = None,
        interval_seconds: float = DEFAULT_POINT_INTERVAL_SECONDS,
    ) -> Tuple[Optional[str], List[LocationSample]]:
        """
        Parse GPX content into time-ordered samples.

        Track points are preferred; route points are used when the file has
        no tracks. Points without a time are spaced `interval_seconds`
        after the previous one (or `start_time` / now for the first).

        Args:
            content: GPX file content as bytes
            start_time: Time of the first point when the file has none
            interval_seconds: Spacing for untimed points

        Returns:
            (track name, samples)

        Raises:
            ReplayError: If the GPX is invalid or has no points
        """
        try:
            gpx = gpxpy.parse(content.decode('utf-8'))
        except Exception as e:
            logger.error(f"Failed to parse GPX: {e}")
            raise ReplayError(f"Invalid GPX file: {e}")

        raw = []
        for track in gpx.tracks:
            for segment in track.segments:
                raw.extend(segment.points)

        if not raw:
            for route in gpx.routes:
                raw.extend(route.points)

        if not raw:
            raise ReplayError("GPX file contains no track or route points")

        name = gpx.name or (gpx.tracks[0].name if gpx.tracks else None)

        samples: List[LocationSample] = []
        previous: Optional[LocationSample] = None
        clock = ensure_aware(start_time) if start_time else datetime.now(timezone.utc)

        for point in raw:
            if point.time is not None:
                timestamp = ensure_aware(point.time)
            elif previous is not None:
                timestamp = previous.timestamp + timedelta(seconds=interval_seconds)
            else:
                timestamp = clock

            if previous is not None and timestamp < previous.timestamp:
                logger.debug(f"Skipping out-of-order point at {timestamp.isoformat()}")
                continue

            speed = 0.0
            if previous is not None:
                dt = (timestamp - previous.timestamp).total_seconds()
                if dt > 0:
                    speed = haversine(
                        previous.latitude, previous.longitude,
                        point.latitude, point.longitude
                    ) / dt

            elevation = point.elevation
            if elevation is not None and not math.isfinite(elevation):
                elevation = None

            sample = LocationSample(
                timestamp=timestamp,
                latitude=point.latitude,
                longitude=point.longitude,
                altitude=elevation if elevation is not None else 0.0,
                speed=speed,
                horizontal_accuracy=REPLAY_HORIZONTAL_ACCURACY_M,
                vertical_accuracy=(
                    REPLAY_VERTICAL_ACCURACY_M if elevation is not None else -1.0
                ),
            )
            samples.append(sample)
            previous = sample

        logger.info(f"Loaded {len(samples)} replay samples from GPX '{name or 'unnamed'}'")
        return name, samples
