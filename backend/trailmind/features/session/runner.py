"""
Live session runner.

Drives a HikeSessionEngine from asyncio: sensor events are queued and
applied one at a time, a tick loop refreshes the engine once per interval,
and checkpoint writes are pushed to a worker thread so file I/O never
blocks the loop.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Union

from trailmind.config import settings
from trailmind.shared.constants import SessionStatus
from trailmind.features.tracking.schemas import LocationSample
from .schemas import CompletedHike, SessionCheckpoint
from .service import HikeSessionEngine

logger = logging.getLogger(__name__)


# =============================================================================
# Events
# =============================================================================

@dataclass(frozen=True)
class LocationEvent:
    sample: LocationSample


@dataclass(frozen=True)
class HeartRateEvent:
    bpm: Optional[float]
    source: Optional[str] = None


@dataclass(frozen=True)
class CadenceEvent:
    cadence: float


@dataclass(frozen=True)
class BatteryEvent:
    level: float


@dataclass(frozen=True)
class FuelEvent:
    kcal: float


@dataclass(frozen=True)
class CheckInEvent:
    pass


@dataclass(frozen=True)
class MemoryPressureEvent:
    pass


@dataclass(frozen=True)
class BackgroundEvent:
    """Host app is leaving the foreground."""


@dataclass(frozen=True)
class TerminateEvent:
    """Host process is about to exit."""


SessionEvent = Union[
    LocationEvent,
    HeartRateEvent,
    CadenceEvent,
    BatteryEvent,
    FuelEvent,
    CheckInEvent,
    MemoryPressureEvent,
    BackgroundEvent,
    TerminateEvent,
]


# =============================================================================
# Runner
# =============================================================================

class LiveSessionRunner:
    """
    Async driver for one engine.

    Call `start()` to recover or begin a session and launch the loops.
    Call `stop()` to drain queued events, finish the session and wait for
    outstanding checkpoint writes.

    Usage:
        runner = LiveSessionRunner(engine)
        await runner.start()
        await runner.submit(LocationEvent(sample))
        # ... later ...
        hike = await runner.stop()
    """

    def __init__(
        self,
        engine: HikeSessionEngine,
        tick_interval: Optional[float] = None,
        queue_size: Optional[int] = None,
    ):
        self.engine = engine
        self.tick_interval = tick_interval or settings.tick_interval_seconds
        self.queue_size = queue_size or settings.event_queue_size

        self._running = False
        self._queue: Optional[asyncio.Queue] = None
        self._consumer_task: Optional[asyncio.Task] = None
        self._tick_task: Optional[asyncio.Task] = None
        # Engine mutations are serialized through this lock
        self._lock = asyncio.Lock()
        # Checkpoint writes run in order, one at a time
        self._write_lock = asyncio.Lock()
        # Keep strong references to write tasks to prevent GC
        self._write_tasks: set[asyncio.Task] = set()

        self._persist = engine.checkpoint_writer
        engine.checkpoint_writer = self._schedule_write

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def pending_writes(self) -> int:
        return len(self._write_tasks)

    async def start(self, recover: bool = True) -> SessionStatus:
        """
        Restore a checkpointed session (if any and `recover`), otherwise
        start a fresh one, then launch the event and tick loops.
        """
        if self._running:
            return self.engine.status

        async with self._lock:
            if not (recover and self.engine.recover()):
                self.engine.start()

        self._queue = asyncio.Queue(maxsize=self.queue_size)
        self._running = True
        self._consumer_task = asyncio.create_task(self._consume_loop())
        self._tick_task = asyncio.create_task(self._tick_loop())
        logger.info(f"Live session runner started ({self.engine.status.value})")
        return self.engine.status

    async def submit(self, event: SessionEvent) -> None:
        """Queue an event; waits while the queue is full."""
        if not self._running:
            logger.debug(f"Dropped {type(event).__name__}: runner not running")
            return
        await self._queue.put(event)

    async def drain(self) -> None:
        """Wait until every queued event has been applied."""
        if self._queue is not None:
            await self._queue.join()

    async def pause(self) -> bool:
        await self.drain()
        async with self._lock:
            return self.engine.pause()

    async def resume(self) -> bool:
        await self.drain()
        async with self._lock:
            return self.engine.resume()

    async def stop(self, name: Optional[str] = None) -> Optional[CompletedHike]:
        """
        Finish the session.

        Queued events are applied first. Outstanding checkpoint writes are
        awaited before the checkpoint is deleted, so no stale write can
        land after it.
        """
        if not self._running:
            return None

        await self.drain()
        self._running = False
        for task in (self._consumer_task, self._tick_task):
            if task:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._consumer_task = None
        self._tick_task = None

        await self.flush()

        async with self._lock:
            hike = self.engine.stop(name)

        logger.info("Live session runner stopped")
        return hike

    async def flush(self) -> None:
        """Wait for all scheduled checkpoint writes."""
        while self._write_tasks:
            await asyncio.gather(*list(self._write_tasks), return_exceptions=True)

    # =========================================================================
    # Loops
    # =========================================================================

    async def _consume_loop(self):
        """Apply queued events in arrival order."""
        while self._running:
            event = await self._queue.get()
            try:
                async with self._lock:
                    self._apply(event)
            except Exception as e:
                logger.error(f"Error applying {type(event).__name__}: {e}")
            finally:
                self._queue.task_done()

    async def _tick_loop(self):
        """Periodic engine refresh."""
        while self._running:
            await asyncio.sleep(self.tick_interval)
            try:
                async with self._lock:
                    self.engine.tick()
            except Exception as e:
                logger.error(f"Tick error: {e}")

    def _apply(self, event: SessionEvent) -> None:
        engine = self.engine
        if isinstance(event, LocationEvent):
            engine.ingest_location(event.sample)
        elif isinstance(event, HeartRateEvent):
            engine.record_heart_rate(event.bpm, event.source)
        elif isinstance(event, CadenceEvent):
            engine.record_cadence(event.cadence)
        elif isinstance(event, BatteryEvent):
            engine.record_battery(event.level)
        elif isinstance(event, FuelEvent):
            engine.log_fuel_intake(event.kcal)
        elif isinstance(event, CheckInEvent):
            engine.check_in()
        elif isinstance(event, MemoryPressureEvent):
            engine.handle_memory_pressure()
        elif isinstance(event, BackgroundEvent):
            engine.enter_background()
        elif isinstance(event, TerminateEvent):
            engine.will_terminate()
        else:
            logger.warning(f"Unknown session event: {event!r}")

    # =========================================================================
    # Checkpoint writes
    # =========================================================================

    def _schedule_write(self, checkpoint: SessionCheckpoint) -> None:
        """Engine-side writer: hand the checkpoint to a background write."""
        task = asyncio.get_running_loop().create_task(self._write(checkpoint))
        self._write_tasks.add(task)
        task.add_done_callback(self._write_tasks.discard)

    async def _write(self, checkpoint: SessionCheckpoint) -> None:
        async with self._write_lock:
            try:
                await asyncio.to_thread(self._persist, checkpoint)
            except Exception as e:
                logger.warning(f"Checkpoint write failed: {e}")
