"""
Hike session module.

Usage:
    from trailmind.features.session import HikeSessionEngine, CheckpointStore
    from trailmind.features.session.runner import LiveSessionRunner, LocationEvent

Components:
- HikeSessionEngine: Idle/Tracking/Paused state machine and pipeline
- SessionClock: pause-aware elapsed time
- CheckpointStore, SaveCadence: crash-safe persistence and its throttle
- HikeArchive: collaborator receiving completed hikes
- LiveSessionRunner: asyncio driver (event queue, tick loop, threaded writes)
"""

from .schemas import (
    CHECKPOINT_VERSION,
    SessionCheckpoint,
    LiveSnapshot,
    CompletedHike,
    energy_outlook,
)
from .clock import SessionClock
from .checkpoint import CheckpointStore, SaveCadence
from .archive import HikeArchive, InMemoryHikeArchive
from .service import HikeSessionEngine
from .runner import (
    LiveSessionRunner,
    LocationEvent,
    HeartRateEvent,
    CadenceEvent,
    BatteryEvent,
    FuelEvent,
    CheckInEvent,
    MemoryPressureEvent,
    BackgroundEvent,
    TerminateEvent,
)

__all__ = [
    # Schemas
    "CHECKPOINT_VERSION",
    "SessionCheckpoint",
    "LiveSnapshot",
    "CompletedHike",
    "energy_outlook",
    # Engine
    "SessionClock",
    "HikeSessionEngine",
    # Persistence
    "CheckpointStore",
    "SaveCadence",
    "HikeArchive",
    "InMemoryHikeArchive",
    # Runner
    "LiveSessionRunner",
    "LocationEvent",
    "HeartRateEvent",
    "CadenceEvent",
    "BatteryEvent",
    "FuelEvent",
    "CheckInEvent",
    "MemoryPressureEvent",
    "BackgroundEvent",
    "TerminateEvent",
]
