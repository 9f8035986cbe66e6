"""
Hike Session Engine

Owns one tracking session end to end:

    Idle -> Tracking <-> Paused -> Idle
    (cold start with a checkpoint restores straight into Tracking/Paused)

Pipeline per accepted location sample:

    altitude filter -> segment builder -> fatigue model -> safety evaluator
        -> bounded collections -> checkpoint cadence

The engine is a synchronous single-writer core: every mutation goes through
its methods, and callers must not invoke them concurrently (LiveSessionRunner
serializes them for async use). Consumers get immutable LiveSnapshots, never
the live lists.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from trailmind.config import Settings, settings as default_settings
from trailmind.shared.constants import SessionStatus, TerrainType
from trailmind.shared.elevation import AltitudeFilter
from trailmind.features.tracking.schemas import LocationSample, TrailSegment, trail_difficulty_score
from trailmind.features.tracking.segmenter import SegmentBuilder, SegmenterConfig
from trailmind.features.tracking.downsampling import BoundedCollectionManager, CollectionCaps
from trailmind.features.fatigue.schemas import FatigueState, UserProfile
from trailmind.features.fatigue.service import FatigueScoringService
from trailmind.features.safety.schemas import SafetyState
from trailmind.features.safety.service import SafetyEvaluationService
from .archive import HikeArchive, InMemoryHikeArchive
from .checkpoint import CheckpointStore, SaveCadence
from .clock import SessionClock
from .schemas import CompletedHike, LiveSnapshot, SessionCheckpoint, energy_outlook

logger = logging.getLogger(__name__)


HEART_RATE_WAITING = "Waiting for heart-rate source"
HEART_RATE_STALE = "Heart-rate signal lost"
INITIAL_PACING_ADVICE = "Start moving to get pacing guidance."


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class LiveState:
    """Mutable state of the active session."""
    clock: SessionClock
    last_check_in: datetime
    route: List[LocationSample] = field(default_factory=list)
    segments: List[TrailSegment] = field(default_factory=list)
    fatigue: FatigueState = field(default_factory=FatigueState.initial)
    safety: SafetyState = field(default_factory=SafetyState.calm)
    elapsed: float = 0.0
    speed: float = 0.0
    slope_percent: float = 0.0
    terrain: TerrainType = TerrainType.FLAT
    pacing_advice: str = INITIAL_PACING_ADVICE
    terrain_safety_hint: str = ""
    current_altitude: float = 0.0


class HikeSessionEngine:
    """
    Tracking session state machine.

    Usage:
        engine = HikeSessionEngine(store=CheckpointStore(path))
        engine.recover() or engine.start()
        engine.ingest_location(sample)
        engine.tick()                 # once per second
        hike = engine.stop()
    """

    def __init__(
        self,
        store: Optional[CheckpointStore] = None,
        archive: Optional[HikeArchive] = None,
        profile: Optional[UserProfile] = None,
        clock: Callable[[], datetime] = utc_now,
        config: Optional[Settings] = None,
        fatigue_service: Optional[FatigueScoringService] = None,
        safety_service: Optional[SafetyEvaluationService] = None,
        checkpoint_writer: Optional[Callable[[SessionCheckpoint], object]] = None,
    ):
        self.config = config or default_settings
        self.store = store if store is not None else CheckpointStore(self.config.checkpoint_path)
        self.archive = archive if archive is not None else InMemoryHikeArchive()
        self.profile = profile
        self._now = clock

        self.fatigue_service = fatigue_service or FatigueScoringService()
        self.safety_service = safety_service or SafetyEvaluationService()
        self.altitude_filter = AltitudeFilter()
        self.segment_builder = SegmentBuilder(
            SegmenterConfig(max_horizontal_accuracy_m=self.config.max_horizontal_accuracy_m)
        )
        self.collections = BoundedCollectionManager(CollectionCaps(
            route=self.config.route_cap,
            route_under_pressure=self.config.route_cap_under_pressure,
            segments=self.config.segment_cap,
            segments_under_pressure=self.config.segment_cap_under_pressure,
        ))
        self.save_cadence = SaveCadence(self.config.checkpoint_save_interval_seconds)
        self.checkpoint_writer = checkpoint_writer or self.store.save

        self._status = SessionStatus.IDLE
        self._state: Optional[LiveState] = None

        # Latest sensor readings (live even between sessions)
        self._heart_rate: Optional[float] = None
        self._heart_rate_at: Optional[datetime] = None
        self._heart_rate_source = HEART_RATE_WAITING
        self._cadence = 0.0
        self._battery_level = 1.0

    # =========================================================================
    # Read-only views
    # =========================================================================

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def is_tracking(self) -> bool:
        return self._status is SessionStatus.TRACKING

    @property
    def is_paused(self) -> bool:
        return self._status is SessionStatus.PAUSED

    @property
    def elapsed(self) -> float:
        """Elapsed seconds as of the last refresh (tick, sample, transition)."""
        return self._state.elapsed if self._state else 0.0

    @property
    def route(self) -> Tuple[LocationSample, ...]:
        return tuple(self._state.route) if self._state else ()

    @property
    def segments(self) -> Tuple[TrailSegment, ...]:
        return tuple(self._state.segments) if self._state else ()

    @property
    def fatigue_state(self) -> FatigueState:
        return self._state.fatigue if self._state else FatigueState.initial()

    @property
    def safety_state(self) -> SafetyState:
        return self._state.safety if self._state else SafetyState.calm()

    @property
    def heart_rate(self) -> Optional[float]:
        return self._heart_rate

    @property
    def heart_rate_source(self) -> str:
        return self._heart_rate_source

    @property
    def battery_level(self) -> float:
        return self._battery_level

    def elapsed_at(self, now: datetime) -> float:
        """Active seconds at `now` (0 when idle)."""
        if self._state is None:
            return 0.0
        return self._state.clock.elapsed_at(now)

    def snapshot(self) -> LiveSnapshot:
        """Immutable projection of the live session."""
        state = self._state
        if state is None:
            return LiveSnapshot(
                status=self._status,
                elapsed_seconds=0.0,
                distance_meters=0.0,
                elevation_gain=0.0,
                speed=0.0,
                slope_percent=0.0,
                heart_rate=self._heart_rate,
                heart_rate_source=self._heart_rate_source,
                cadence=self._cadence,
                battery_level=self._battery_level,
                current_altitude=self.altitude_filter.last_value or 0.0,
                fatigue=FatigueState.initial(),
                safety=SafetyState.calm(),
                terrain=TerrainType.FLAT,
                pacing_advice=INITIAL_PACING_ADVICE,
                terrain_safety_hint="",
                trail_difficulty_score=0.0,
                energy_outlook=energy_outlook(self._status, 1.0),
            )

        return LiveSnapshot(
            status=self._status,
            elapsed_seconds=state.clock.elapsed_at(self._now()),
            distance_meters=sum(s.distance for s in state.segments),
            elevation_gain=sum(s.elevation_gain for s in state.segments),
            speed=state.speed,
            slope_percent=state.slope_percent,
            heart_rate=self._heart_rate,
            heart_rate_source=self._heart_rate_source,
            cadence=self._cadence,
            battery_level=self._battery_level,
            current_altitude=state.current_altitude,
            fatigue=state.fatigue,
            safety=state.safety,
            terrain=state.terrain,
            pacing_advice=state.pacing_advice,
            terrain_safety_hint=state.terrain_safety_hint,
            trail_difficulty_score=trail_difficulty_score(state.segments),
            energy_outlook=energy_outlook(self._status, state.fatigue.energy_remaining),
        )

    # =========================================================================
    # Transitions
    # =========================================================================

    def start(self) -> bool:
        """Start a fresh session. Any previous checkpoint is discarded."""
        if self._status.is_active:
            logger.debug(f"start() ignored in state {self._status.value}")
            return False

        now = self._now()
        self.store.clear()
        self.altitude_filter.reset()
        self.segment_builder.reset()
        self.collections.reset()
        self.save_cadence.reset()

        self._state = LiveState(clock=SessionClock(started_at=now), last_check_in=now)
        self._status = SessionStatus.TRACKING
        self._refresh_safety(now)
        self.save_checkpoint(now)

        logger.info(f"Session started at {now.isoformat()}")
        return True

    def pause(self) -> bool:
        """Freeze elapsed time; speed and slope drop to zero."""
        if self._status is not SessionStatus.TRACKING:
            logger.debug(f"pause() ignored in state {self._status.value}")
            return False

        now = self._now()
        state = self._state
        state.clock.pause(now)
        state.elapsed = state.clock.elapsed_at(now)
        state.speed = 0.0
        state.slope_percent = 0.0
        self._status = SessionStatus.PAUSED
        self._refresh_safety(now)
        self.save_checkpoint(now, force=True)

        logger.info(f"Session paused at {state.elapsed:.0f}s elapsed")
        return True

    def resume(self) -> bool:
        """Continue after a pause; the next sample opens a fresh segment."""
        if self._status is not SessionStatus.PAUSED:
            logger.debug(f"resume() ignored in state {self._status.value}")
            return False

        now = self._now()
        state = self._state
        paused_for = state.clock.resume(now)
        self.segment_builder.reset_anchor()
        state.elapsed = state.clock.elapsed_at(now)
        self._status = SessionStatus.TRACKING
        self._refresh_safety(now)
        self.save_checkpoint(now, force=True)

        logger.info(f"Session resumed after {paused_for:.0f}s pause")
        return True

    def stop(self, name: Optional[str] = None) -> Optional[CompletedHike]:
        """
        Finish the session.

        The completed hike goes to the archive and the checkpoint is deleted.

        Returns:
            The CompletedHike, or None if no session was active
        """
        if not self._status.is_active:
            logger.debug("stop() ignored: no active session")
            return None

        now = self._now()
        state = self._state
        state.elapsed = state.clock.elapsed_at(now)

        hike = CompletedHike(
            name=name or "",
            started_at=state.clock.started_at,
            ended_at=now,
            elapsed_seconds=state.elapsed,
            route=list(state.route),
            segments=list(state.segments),
            final_fatigue=state.fatigue,
            final_safety=state.safety,
        )

        # Idle first: late ticks and samples become no-ops
        self._status = SessionStatus.IDLE
        self._state = None
        self.segment_builder.reset()
        self.save_cadence.reset()

        try:
            self.archive.add(hike)
        except Exception as e:
            logger.error(f"Archive rejected hike {hike.id}: {e}")

        self.store.clear()
        logger.info(
            f"Session stopped: {hike.elapsed_seconds:.0f}s active, "
            f"{hike.total_distance:.0f}m, {len(hike.segments)} segments"
        )
        return hike

    def recover(self) -> bool:
        """
        Restore an interrupted session from the checkpoint.

        Must run before the first new sample is ingested.

        Returns:
            True when a session was restored
        """
        if self._status.is_active:
            logger.debug("recover() ignored: session already active")
            return False

        checkpoint = self.store.load()
        if checkpoint is None:
            return False

        now = self._now()
        clock = SessionClock(
            started_at=checkpoint.started_at,
            paused_accumulated_seconds=checkpoint.paused_accumulated_seconds,
            paused_started_at=checkpoint.paused_started_at if checkpoint.is_paused else None,
        )
        self._state = LiveState(
            clock=clock,
            last_check_in=checkpoint.last_check_in,
            route=list(checkpoint.route),
            segments=list(checkpoint.segments),
            fatigue=checkpoint.fatigue_state,
            safety=checkpoint.safety_state,
            elapsed=clock.elapsed_at(now),
            speed=checkpoint.speed,
            slope_percent=checkpoint.slope_percent,
            terrain=checkpoint.terrain,
            pacing_advice=checkpoint.pacing_advice,
            terrain_safety_hint=checkpoint.terrain_safety_hint,
            current_altitude=checkpoint.current_altitude,
        )
        self._cadence = checkpoint.cadence
        self._battery_level = checkpoint.battery_level
        self.altitude_filter.reset(checkpoint.last_filtered_altitude)
        self.segment_builder.reset()
        self.collections.under_pressure = checkpoint.memory_pressure
        self.save_cadence.reset()
        self._status = SessionStatus.PAUSED if checkpoint.is_paused else SessionStatus.TRACKING

        logger.info(
            f"Recovered session from checkpoint: {self._status.value}, "
            f"{len(checkpoint.route)} points, {self._state.elapsed:.0f}s elapsed"
        )
        return True

    # =========================================================================
    # Inputs
    # =========================================================================

    def ingest_location(self, sample: LocationSample) -> Optional[TrailSegment]:
        """
        Process one location sample.

        The altitude filter runs whenever a session is active (paused too);
        route, segments and load only advance while tracking.

        Returns:
            The segment closed by this sample, if any
        """
        if not self._status.is_active:
            return None
        if not self.segment_builder.accept(sample):
            return None

        state = self._state
        filtered = self.altitude_filter.update(sample.altitude, sample.vertical_accuracy)
        if filtered is not None:
            state.current_altitude = filtered

        if self._status is SessionStatus.PAUSED:
            return None

        now = self._now()
        self._expire_heart_rate(now)
        state.route.append(sample)

        built = self.segment_builder.add(
            sample,
            state.current_altitude,
            self._heart_rate,
            self._cadence,
        )
        if built is not None:
            state.segments.append(built.segment)
            state.speed = built.segment.average_speed
            state.slope_percent = built.segment.slope_percent
            state.terrain = built.insight.terrain
            state.pacing_advice = built.insight.pacing_advice
            state.terrain_safety_hint = built.insight.safety_hint
            self._refresh_fatigue(now)
            self._refresh_safety(now)

        state.route, state.segments = self.collections.compact(state.route, state.segments)
        self.save_checkpoint(now)
        return built.segment if built is not None else None

    def record_heart_rate(self, bpm: Optional[float], source_label: Optional[str] = None) -> None:
        """Latest heart rate; None/non-positive readings mean no signal."""
        if source_label:
            self._heart_rate_source = source_label
        if bpm is None or not math.isfinite(bpm) or bpm <= 0:
            self._heart_rate = None
            return
        self._heart_rate = bpm
        self._heart_rate_at = self._now()

    def record_cadence(self, cadence: float) -> None:
        self._cadence = cadence if math.isfinite(cadence) and cadence > 0 else 0.0

    def record_battery(self, level: float) -> None:
        """Battery fraction, clamped to [0, 1]. Refreshes safety."""
        if not math.isfinite(level):
            return
        self._battery_level = min(1.0, max(0.0, level))
        if self._status.is_active:
            self._refresh_safety(self._now())

    def tick(self) -> None:
        """
        Periodic refresh: elapsed time, heart-rate staleness, safety,
        checkpoint cadence. No-op when no session is active.
        """
        if not self._status.is_active:
            return

        now = self._now()
        self._state.elapsed = self._state.clock.elapsed_at(now)
        self._expire_heart_rate(now)
        self._refresh_safety(now)
        self.save_checkpoint(now)

    def check_in(self) -> bool:
        """Record an explicit safety check-in."""
        if not self._status.is_active:
            return False

        now = self._now()
        self._state.last_check_in = now
        self._refresh_safety(now)
        self.save_checkpoint(now, force=True)
        logger.info("Safety check-in recorded")
        return True

    def log_fuel_intake(self, kcal: float) -> bool:
        """
        Add eaten calories to the energy balance.

        Returns:
            False when no session is active or the amount was not positive
        """
        if not self._status.is_active:
            return False

        state = self._state
        fueled = self.fatigue_service.add_fuel(state.fatigue, kcal)
        if fueled is state.fatigue:
            return False

        now = self._now()
        state.fatigue = fueled
        self._refresh_fatigue(now)
        self._refresh_safety(now)
        self.save_checkpoint(now, force=True)
        logger.info(f"Fuel intake of {kcal:.0f} kcal recorded")
        return True

    def handle_memory_pressure(self) -> None:
        """Shrink collections to the reduced caps and save immediately."""
        if not self._status.is_active:
            logger.debug(f"handle_memory_pressure() ignored in state {self._status.value}")
            return

        state = self._state
        state.route, state.segments = self.collections.enter_memory_pressure(
            state.route, state.segments
        )
        self.save_checkpoint(force=True)

    def enter_background(self) -> None:
        """Process is about to lose the foreground; persist now."""
        self.save_checkpoint(force=True)

    def will_terminate(self) -> None:
        """Process is about to exit; persist now."""
        self.save_checkpoint(force=True)

    # =========================================================================
    # Checkpointing
    # =========================================================================

    def build_checkpoint(self) -> SessionCheckpoint:
        """
        Capture the active session.

        Raises:
            RuntimeError: If no session is active
        """
        state = self._state
        if state is None:
            raise RuntimeError("No active session to checkpoint")

        return SessionCheckpoint(
            started_at=state.clock.started_at,
            last_check_in=state.last_check_in,
            route=list(state.route),
            segments=list(state.segments),
            fatigue_state=state.fatigue,
            safety_state=state.safety,
            cadence=self._cadence,
            speed=state.speed,
            slope_percent=state.slope_percent,
            battery_level=self._battery_level,
            terrain=state.terrain,
            pacing_advice=state.pacing_advice,
            terrain_safety_hint=state.terrain_safety_hint,
            current_altitude=state.current_altitude,
            is_paused=self._status is SessionStatus.PAUSED,
            paused_accumulated_seconds=state.clock.paused_accumulated_seconds,
            paused_started_at=state.clock.paused_started_at,
            last_filtered_altitude=self.altitude_filter.last_value,
            memory_pressure=self.collections.under_pressure,
        )

    def save_checkpoint(self, now: Optional[datetime] = None, force: bool = False) -> bool:
        """
        Hand a checkpoint to the writer if one is due.

        Returns:
            True when a checkpoint was handed off
        """
        if not self._status.is_active:
            return False

        now = now or self._now()
        if not self.save_cadence.is_due(now, force):
            return False

        checkpoint = self.build_checkpoint()
        self.save_cadence.mark_saved(now)
        self.checkpoint_writer(checkpoint)
        return True

    # =========================================================================
    # Internals
    # =========================================================================

    def _expire_heart_rate(self, now: datetime) -> None:
        if self._heart_rate is None or self._heart_rate_at is None:
            return
        silence = (now - self._heart_rate_at).total_seconds()
        if silence > self.config.heart_rate_stale_after_seconds:
            logger.info(f"Heart rate stale after {silence:.0f}s of silence")
            self._heart_rate = None
            self._heart_rate_source = HEART_RATE_STALE

    def _refresh_fatigue(self, now: datetime) -> None:
        state = self._state
        state.elapsed = state.clock.elapsed_at(now)
        state.fatigue = self.fatigue_service.evaluate(
            state.fatigue,
            state.elapsed,
            state.speed,
            state.slope_percent,
            self._heart_rate,
            self._cadence,
            self.profile,
        )

    def _refresh_safety(self, now: datetime) -> None:
        state = self._state
        state.safety = self.safety_service.evaluate(
            state.fatigue,
            self._battery_level,
            (now - state.last_check_in).total_seconds(),
            state.elapsed,
        )
