"""
Headless race replay.

Loads one GPX file per racer, replays the race on a fixed-interval frame
timer and logs the timeline and leaderboard as the clock advances.

    python main.py alice.gpx bob.gpx --speed 60
    python main.py run1.gpx run2.gpx --event-type time_trial --debug
"""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from replay_core import config
from replay_core.domain import ReplaySession
from replay_core.io import (
    EVENT_TYPE_RACE,
    EVENT_TYPE_TIME_TRIAL,
    TrackLoadError,
    generate_track_color,
    load_gpx_track,
)
from replay_core.metrics import get_metrics
from replay_core.proto import TrackPath
from replay_core.timing import IntervalFrameSource, SchedulerConfig

logging.basicConfig(
    level=getattr(logging, config.LOGGING_CONFIG["level"]),
    format=config.LOGGING_CONFIG["format"]
)
logger = logging.getLogger(__name__)


def load_tracks(files: List[str], event_type: str) -> List[TrackPath]:
    """
    Load one track per GPX file; the file stem is the racer id.

    Raises:
        TrackLoadError: If any file cannot be parsed
    """
    paths = []
    colors: List[str] = []

    for file_name in files:
        color = generate_track_color(colors)
        path = load_gpx_track(file_name, Path(file_name).stem, event_type, color)
        if path is None:
            logger.warning("%s has no timed points, skipped", file_name)
            continue
        colors.append(color)
        paths.append(path)

    return paths


class HeadlessReplay:
    """Runs a ReplaySession to completion on an asyncio frame timer."""

    def __init__(self, paths: List[TrackPath], speed: float, interval_s: float):
        """
        Initialize replay host.

        Args:
            paths: Racer tracks
            speed: Speed multiplier
            interval_s: Seconds between frames
        """
        self.paths = paths
        self.speed = speed
        self.interval_s = interval_s
        self.frame_count = 0
        self.session: Optional[ReplaySession] = None
        self._finished: Optional[asyncio.Event] = None

    async def run(self):
        """Play the race from start to end."""
        loop = asyncio.get_running_loop()
        self._finished = asyncio.Event()

        source = IntervalFrameSource(self.interval_s, loop)
        self.session = ReplaySession(
            source,
            config=SchedulerConfig(initial_speed=self.speed),
            on_frame=self._on_frame,
        )
        self.session.load_tracks(self.paths)

        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.stop)
            except NotImplementedError:
                # Windows event loops
                pass

        self.session.play(source.now())
        await self._finished.wait()

        self._log_leaderboard()
        self.session.close()

    def stop(self):
        """Stop playback (signal handler)."""
        logger.info("Stopping replay...")
        if self.session is not None:
            self.session.pause()
        if self._finished is not None:
            self._finished.set()

    def _on_frame(self, session: ReplaySession):
        self.frame_count += 1

        if self.frame_count % config.OUTPUT_CONFIG["print_interval"] == 0:
            self._log_leaderboard()

        if not session.is_playing:
            self._finished.set()

    def _log_leaderboard(self):
        timeline = self.session.timeline()
        logger.info("[%s / %s] %.1f%%", timeline.elapsed_label, timeline.total_label,
                    timeline.progress_percent)

        for entry in self.session.leaderboard()[:config.OUTPUT_CONFIG["leaderboard_size"]]:
            status = "finished" if entry.has_finished else f"{entry.speed_kph:6.1f} km/h"
            logger.info("  %2d. %-20s %9.1f m  %s", entry.rank, entry.racer_id,
                        entry.distance_m, status)


def main():
    """Entry point."""
    parser = argparse.ArgumentParser(description='Headless GPS race replay')
    parser.add_argument('files', nargs='+',
                        help='GPX files, one per racer')
    parser.add_argument('--event-type', '-e', choices=[EVENT_TYPE_RACE, EVENT_TYPE_TIME_TRIAL],
                        default=EVENT_TYPE_RACE,
                        help='time_trial aligns all tracks to a common start')
    parser.add_argument('--speed', '-s', type=float, default=config.REPLAY_CONFIG["initial_speed"],
                        help='Speed multiplier')
    parser.add_argument('--interval', '-i', type=float, default=config.REPLAY_CONFIG["frame_interval_s"],
                        help='Seconds between frames')
    parser.add_argument('--debug', '-d', action='store_true',
                        help='Enable debug logging')

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.speed <= 0:
        parser.error("--speed must be positive")

    try:
        paths = load_tracks(args.files, args.event_type)
    except TrackLoadError as e:
        logger.error("%s", e)
        sys.exit(1)

    if not paths:
        logger.error("No usable tracks")
        sys.exit(1)

    replay = HeadlessReplay(paths, args.speed, args.interval)
    asyncio.run(replay.run())

    get_metrics().log_summary()


if __name__ == "__main__":
    main()
