"""
Elapsed-time accounting across pause/resume cycles.

    elapsed(now) = now - started_at
                   - paused_accumulated_seconds
                   - (now - paused_started_at, while paused)

This is the single formula used wherever elapsed time is needed:
elapsed never advances while paused and never goes negative.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class SessionClock:
    started_at: datetime
    paused_accumulated_seconds: float = 0.0
    paused_started_at: Optional[datetime] = None

    @property
    def is_paused(self) -> bool:
        return self.paused_started_at is not None

    def elapsed_at(self, now: datetime) -> float:
        """Active seconds at `now`."""
        total = (now - self.started_at).total_seconds() - self.paused_accumulated_seconds
        if self.paused_started_at is not None:
            total -= max(0.0, (now - self.paused_started_at).total_seconds())
        return max(0.0, total)

    def pause(self, now: datetime) -> bool:
        if self.is_paused:
            return False
        self.paused_started_at = now
        return True

    def resume(self, now: datetime) -> float:
        """
        Fold the current pause into the accumulated total.

        Returns:
            Length of the pause that just ended (0 if not paused)
        """
        if self.paused_started_at is None:
            return 0.0
        paused_for = max(0.0, (now - self.paused_started_at).total_seconds())
        self.paused_accumulated_seconds += paused_for
        self.paused_started_at = None
        return paused_for
