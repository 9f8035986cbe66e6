"""
Completed-hike archive collaborator.

Durable storage of finished sessions lives outside the engine; the engine
only needs somewhere to hand a CompletedHike when a session stops.
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from .schemas import CompletedHike

logger = logging.getLogger(__name__)


class HikeArchive(ABC):
    """Accepts finished sessions for durable storage."""

    @abstractmethod
    def add(self, hike: CompletedHike) -> None:
        """Store a finished session."""
        pass


class InMemoryHikeArchive(HikeArchive):
    """Keeps finished sessions in a list (tests, CLI replay)."""

    def __init__(self):
        self._hikes: List[CompletedHike] = []

    def add(self, hike: CompletedHike) -> None:
        self._hikes.append(hike)
        logger.debug(f"Archived hike {hike.id} ({len(hike.segments)} segments)")

    def all(self) -> List[CompletedHike]:
        return list(self._hikes)

    def __len__(self) -> int:
        return len(self._hikes)
