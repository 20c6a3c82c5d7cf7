"""
Replay Session.

Host-facing facade for one race replay. Owns the loaded tracks, the race
time bounds, the per-racer search hints and the simulation clock, and
answers the rendering queries:

- racer_positions(): marker positions for the current frame
- leaderboard(): ranked rows with current segment speed
- racer_telemetry(racer_id): live readout for the selected racer
- timeline(): progress and durations for the timeline control
"""

import logging
import time
from typing import Callable, Dict, Hashable, List, Optional, Sequence, Tuple

from replay_core.domain.ranking import RankingEngine
from replay_core.geo.interpolator import PositionInterpolator
from replay_core.geo.kinematics import cardinal_direction, speed_and_heading
from replay_core.metrics import get_metrics
from replay_core.proto import (
    LeaderboardEntry,
    RacerPosition,
    RacerTelemetry,
    TimelineState,
    TrackPath,
)
from replay_core.timing import AnimationScheduler, FrameSource, SchedulerConfig

logger = logging.getLogger(__name__)


def race_bounds(
    paths: Sequence[TrackPath],
    event_start: Optional[float] = None,
    event_end: Optional[float] = None,
) -> Tuple[float, float]:
    """
    Race start/end instants derived from the tracks.

    Args:
        paths: All racer tracks
        event_start: Declared event start, used if no track has points
        event_end: Declared event end, used if no track has points

    Returns:
        (start_time, end_time): min first timestamp and max last timestamp;
        falls back to the declared dates, then to the current time
    """
    firsts = [p.first_timestamp for p in paths if not p.is_empty]
    lasts = [p.last_timestamp for p in paths if not p.is_empty]

    now = time.time()
    start_time = min(firsts) if firsts else (event_start if event_start is not None else now)
    end_time = max(lasts) if lasts else (event_end if event_end is not None else now)

    return start_time, end_time


class ReplaySession:
    """
    One active race replay.

    Usage:
        source = ManualFrameSource()
        session = ReplaySession(source)
        session.load_tracks(paths)

        session.play()
        source.fire(0.0)
        source.fire(1.0)

        for racer_id, pos in session.racer_positions().items():
            draw_marker(racer_id, pos.lat, pos.lon)

        board = session.leaderboard()
        session.close()
    """

    def __init__(
        self,
        frame_source: FrameSource,
        config: Optional[SchedulerConfig] = None,
        on_frame: Optional[Callable[["ReplaySession"], None]] = None,
    ):
        """
        Initialize an empty session.

        Args:
            frame_source: Host frame callback capability
            config: Scheduler configuration (uses defaults if None)
            on_frame: Called with the session after every applied tick and
                every scrub
        """
        self.on_frame = on_frame
        self.metrics = get_metrics()

        self.paths: List[TrackPath] = []
        self._paths_by_id: Dict[Hashable, TrackPath] = {}

        self.interpolator = PositionInterpolator()
        self.ranking = RankingEngine()

        start_time, end_time = race_bounds([])
        self.scheduler = AnimationScheduler(
            start_time,
            end_time,
            frame_source,
            config=config,
            on_advance=self._on_advance,
        )

    # ------------------------------------------------------------------
    # Data loading
    # ------------------------------------------------------------------

    def load_tracks(
        self,
        paths: Sequence[TrackPath],
        event_start: Optional[float] = None,
        event_end: Optional[float] = None,
    ):
        """
        Replace the dataset. Clears search hints and rewinds the clock.
        A second track with an already loaded racer_id is skipped.

        Args:
            paths: All racer tracks of the event
            event_start: Declared event start (fallback bound)
            event_end: Declared event end (fallback bound)
        """
        self.scheduler.pause()

        self.paths = []
        self._paths_by_id = {}
        for path in paths:
            if path.racer_id in self._paths_by_id:
                # First track wins
                self.metrics.increment_drop('duplicate_racer')
                logger.warning("Duplicate track for racer %s ignored", path.racer_id)
                continue
            self.paths.append(path)
            self._paths_by_id[path.racer_id] = path
        self.interpolator.reset()

        start_time, end_time = race_bounds(self.paths, event_start, event_end)
        self.scheduler.reset(start_time, end_time)

        for path in self.paths:
            if path.is_empty:
                self.metrics.increment_drop('empty_track')
                logger.debug("Racer %s has an empty track", path.racer_id)

        self.metrics.increment('tracks_loaded', len(self.paths))
        logger.info("Loaded %d tracks, race %.3f -> %.3f (%.1f s)",
                    len(self.paths), start_time, end_time, end_time - start_time)

    # ------------------------------------------------------------------
    # Clock pass-throughs
    # ------------------------------------------------------------------

    @property
    def simulation_time(self) -> float:
        return self.scheduler.simulation_time

    @property
    def start_time(self) -> float:
        return self.scheduler.start_time

    @property
    def end_time(self) -> float:
        return self.scheduler.end_time

    @property
    def is_playing(self) -> bool:
        return self.scheduler.is_playing

    def play(self, now: Optional[float] = None):
        self.scheduler.play(now)

    def pause(self):
        self.scheduler.pause()

    def toggle_play_pause(self, now: Optional[float] = None):
        self.scheduler.toggle_play_pause(now)

    def scrub(self, progress_percent: float):
        self.scheduler.scrub(progress_percent)

    def set_speed(self, multiplier: float):
        self.scheduler.set_speed(multiplier)

    def timeline(self) -> TimelineState:
        return self.scheduler.timeline()

    def close(self):
        """Teardown: no frame callback may fire into this session afterwards."""
        self.scheduler.close()
        logger.debug("Replay session closed")

    # ------------------------------------------------------------------
    # Rendering queries
    # ------------------------------------------------------------------

    def racer_positions(self) -> Dict[Hashable, RacerPosition]:
        """
        Marker positions at the current simulation time.

        Returns:
            racer_id -> RacerPosition; racers with empty tracks are omitted
        """
        sim_time = self.scheduler.simulation_time
        positions = {}

        for path in self.paths:
            located = self.interpolator.locate(path, sim_time)
            if located is None:
                continue
            positions[path.racer_id] = RacerPosition(
                racer_id=path.racer_id,
                lat=located.lat,
                lon=located.lon,
                segment_index=located.found_segment_index,
            )

        return positions

    def leaderboard(self) -> List[LeaderboardEntry]:
        """
        Ranked rows at the current simulation time.

        Returns:
            LeaderboardEntry list, best first
        """
        sim_time = self.scheduler.simulation_time
        entries = []

        for progress in self.ranking.placings(self.paths, sim_time):
            path = self._paths_by_id[progress.racer_id]
            entries.append(LeaderboardEntry(
                racer_id=progress.racer_id,
                rank=progress.rank,
                track_color=path.track_color,
                speed_kph=self._segment_speed_kph(path, sim_time),
                distance_m=progress.distance_m,
                has_finished=progress.has_finished,
            ))

        return entries

    def racer_telemetry(self, racer_id: Hashable) -> Optional[RacerTelemetry]:
        """
        Live readout for one racer.

        Args:
            racer_id: Selected racer

        Returns:
            RacerTelemetry, or None if the racer is unknown, has no position,
            or has fewer than two points
        """
        path = self._paths_by_id.get(racer_id)
        if path is None:
            return None

        sim_time = self.scheduler.simulation_time
        located = self.interpolator.locate(path, sim_time)
        if located is None or located.found_segment_index >= len(path.points) - 1:
            return None

        i = located.found_segment_index
        segment = speed_and_heading(path.points[i], path.points[i + 1])

        rank = None
        for progress in self.ranking.placings(self.paths, sim_time):
            if progress.racer_id == racer_id:
                rank = progress.rank
                break

        return RacerTelemetry(
            racer_id=racer_id,
            lat=located.lat,
            lon=located.lon,
            speed_kph=segment.speed_kph,
            heading_degrees=segment.heading_degrees,
            cardinal_direction=cardinal_direction(segment.heading_degrees),
            rank=rank,
            total_racer_count=len(self.paths),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _segment_speed_kph(self, path: TrackPath, sim_time: float) -> float:
        """Speed on the segment bracketing sim_time (0 for single-point tracks)."""
        located = self.interpolator.peek(path, sim_time)
        if located is None or located.found_segment_index >= len(path.points) - 1:
            return 0.0

        i = located.found_segment_index
        return speed_and_heading(path.points[i], path.points[i + 1]).speed_kph

    def _on_advance(self, scheduler: AnimationScheduler):
        if self.on_frame is not None:
            self.on_frame(self)
