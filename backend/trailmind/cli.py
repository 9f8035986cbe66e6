"""
Command line tools for the TrailMind engine.

Usage:
    trailmind replay track.gpx
    trailmind replay track.gpx --heart-rate 140 --weight 72 --age 41 --condition Advanced
    trailmind show-checkpoint --checkpoint-dir ~/.trailmind
"""

import logging
import sys
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from trailmind.config import settings
from trailmind.shared.constants import FitnessCondition
from trailmind.shared.exceptions import CheckpointError, ReplayError
from trailmind.shared.formatters import (
    format_distance,
    format_duration,
    format_elevation,
    format_percent,
)
from trailmind.features.fatigue import UserProfile
from trailmind.features.session import (
    CheckpointStore,
    CompletedHike,
    HikeSessionEngine,
    InMemoryHikeArchive,
    LiveSnapshot,
)
from trailmind.features.analysis import PostHikeAnalysisService, PostHikeReport
from trailmind.services.gpx_replay import GPXReplayService, DEFAULT_POINT_INTERVAL_SECONDS

logger = logging.getLogger(__name__)


# Profile values used when only some profile options are given
DEFAULT_AGE = 35
DEFAULT_WEIGHT_KG = 75.0
DEFAULT_HEIGHT_CM = 175.0


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


class ReplayClock:
    """Clock that follows the replayed track instead of the wall clock."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def build_profile(
    age: Optional[int],
    weight: Optional[float],
    height: Optional[float],
    condition: Optional[str],
    heart_rate: Optional[float],
) -> Optional[UserProfile]:
    """
    Profile from CLI options.

    None when no profile option and no heart rate is given (fallback model).
    A heart rate alone gets a default profile so the heart-rate model runs.
    """
    if all(v is None for v in (age, weight, height, condition, heart_rate)):
        return None
    try:
        return UserProfile(
            age=age if age is not None else DEFAULT_AGE,
            weight_kg=weight if weight is not None else DEFAULT_WEIGHT_KG,
            height_cm=height if height is not None else DEFAULT_HEIGHT_CM,
            condition=FitnessCondition(condition) if condition else FitnessCondition.MODERATE,
        )
    except ValidationError as e:
        raise click.BadParameter(f"invalid profile: {e.errors()[0]['msg']}")


def replay_track(
    content: bytes,
    store: CheckpointStore,
    profile: Optional[UserProfile] = None,
    heart_rate: Optional[float] = None,
    name: Optional[str] = None,
    interval_seconds: float = DEFAULT_POINT_INTERVAL_SECONDS,
) -> tuple[LiveSnapshot, CompletedHike]:
    """
    Feed a GPX track through a fresh engine.

    Raises:
        ReplayError: If the track cannot be loaded
    """
    track_name, samples = GPXReplayService.parse(content, interval_seconds=interval_seconds)

    clock = ReplayClock(samples[0].timestamp)
    engine = HikeSessionEngine(
        store=store,
        archive=InMemoryHikeArchive(),
        profile=profile,
        clock=clock,
    )
    engine.start()

    for sample in samples:
        clock.now = sample.timestamp
        if heart_rate is not None:
            engine.record_heart_rate(heart_rate, "Replay")
        engine.ingest_location(sample)
        engine.tick()

    snapshot = engine.snapshot()
    hike = engine.stop(name or track_name)
    return snapshot, hike


def render_summary(snapshot: LiveSnapshot, hike: CompletedHike, report: PostHikeReport) -> str:
    fatigue = snapshot.fatigue
    lines = [
        f"Hike: {hike.name}",
        "-" * 60,
        f"Active time:     {format_duration(hike.elapsed_seconds)}",
        f"Total time:      {format_duration(hike.duration_seconds)}",
        f"Distance:        {format_distance(hike.total_distance)}",
        f"Elevation gain:  {format_elevation(hike.total_elevation_gain)}",
        f"Elevation loss:  {format_elevation(hike.total_elevation_loss)}",
        f"Segments:        {len(hike.segments)}",
        f"Difficulty:      {hike.trail_difficulty_score:.0f}/100",
        "",
        f"Fatigue score:   {fatigue.score:.0f}/100 ({fatigue.reason})",
        f"Energy left:     {format_percent(fatigue.energy_remaining)}",
        f"Calories burned: {fatigue.calories_burned:.0f} kcal",
        f"Outlook:         {snapshot.energy_outlook}",
        f"Safety:          {snapshot.safety.recommendation}",
        "",
        "Insights:",
    ]
    for insight in report.insights:
        lines.append(f"  - {insight.title}: {insight.detail}")

    recovery = report.recovery
    lines += [
        "",
        f"Muscle load:     {recovery.muscle_load:.0f}/100",
        f"Recovery:        {recovery.recovery_hours:.0f} h "
        f"(readiness {recovery.readiness_score:.0f}/100)",
        f"Recommendations: {', '.join(recovery.recommendations)}",
        f"Climb efficiency:   {report.climb_efficiency:.0f}/100",
        f"Terrain adaptation: {report.terrain_adaptation:.0f}/100",
        f"Trend:           {report.fatigue_tolerance_trend}",
    ]
    return "\n".join(lines)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
def cli(verbose):
    """TrailMind hike tracking engine tools."""
    configure_logging("DEBUG" if verbose else settings.log_level)


@cli.command()
@click.argument("gpx_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--checkpoint-dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Keep checkpoints here (default: a throwaway directory)"
)
@click.option("--heart-rate", default=None, type=float, help="Constant heart rate (bpm) fed with every point")
@click.option("--weight", default=None, type=float, help="Body weight in kg")
@click.option("--age", default=None, type=int, help="Age in years")
@click.option("--height", default=None, type=float, help="Height in cm")
@click.option(
    "--condition",
    default=None,
    type=click.Choice([c.value for c in FitnessCondition]),
    help="Fitness tier"
)
@click.option("--name", default=None, help="Hike name (default: GPX track name)")
@click.option(
    "--interval",
    default=DEFAULT_POINT_INTERVAL_SECONDS,
    type=click.FloatRange(min=0.1),
    help="Seconds between points that carry no time"
)
def replay(gpx_file, checkpoint_dir, heart_rate, weight, age, height, condition, name, interval):
    """
    Replay a recorded GPX track through the live engine.

    Prints the final live metrics and the post-hike report.
    """
    profile = build_profile(age, weight, height, condition, heart_rate)
    content = gpx_file.read_bytes()

    with tempfile.TemporaryDirectory(prefix="trailmind-replay-") as tmp:
        directory = checkpoint_dir or Path(tmp)
        store = CheckpointStore(directory / settings.checkpoint_filename)
        try:
            snapshot, hike = replay_track(content, store, profile, heart_rate, name, interval)
        except ReplayError as e:
            raise click.ClickException(str(e))

    report = PostHikeAnalysisService().build_report(hike)
    click.echo(render_summary(snapshot, hike, report))


@cli.command("show-checkpoint")
@click.option(
    "--checkpoint-dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory holding the checkpoint (default: configured state directory)"
)
def show_checkpoint(checkpoint_dir):
    """Describe the interrupted session checkpoint, if any."""
    path = (checkpoint_dir / settings.checkpoint_filename) if checkpoint_dir else settings.checkpoint_path
    store = CheckpointStore(path)

    if not store.exists():
        click.echo("No active hike checkpoint.")
        return

    try:
        checkpoint = store.read()
    except CheckpointError as e:
        raise click.ClickException(f"Checkpoint unreadable: {e}")

    state = "paused" if checkpoint.is_paused else "tracking"
    click.echo(f"Checkpoint: {path}")
    click.echo(f"Started:    {checkpoint.started_at.isoformat()} ({state})")
    click.echo(f"Points:     {len(checkpoint.route)}")
    click.echo(f"Segments:   {len(checkpoint.segments)}")
    click.echo(f"Fatigue:    {checkpoint.fatigue_state.score:.0f}/100")
    click.echo(f"Energy:     {format_percent(checkpoint.fatigue_state.energy_remaining)}")


if __name__ == "__main__":
    cli()
