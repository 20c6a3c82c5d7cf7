"""
Animation Scheduler (simulation clock).

Converts host frame callbacks into simulation-time advances scaled by a
speed multiplier, with play / pause / scrub / set_speed controls.

States: PAUSED (initial, at start_time) and PLAYING.

- play(): PAUSED -> PLAYING, registers for the next frame
- pause(): PLAYING -> PAUSED, cancels the pending registration
- tick(now): advance by (now - last sample) * speed; reaching end_time
  clamps and auto-stops, otherwise re-registers
- scrub(percent): always PAUSED, jumps synchronously
- set_speed(multiplier): applies from the next tick

At most one frame registration is outstanding at any time.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from replay_core.config import REPLAY_CONFIG
from replay_core.metrics import get_metrics
from replay_core.proto import TimelineState
from replay_core.timing.frame_source import FrameSource

logger = logging.getLogger(__name__)


class PlaybackState(Enum):
    """Simulation clock state."""

    PAUSED = 0
    PLAYING = 1


@dataclass
class SchedulerConfig:
    """
    Configuration for the animation scheduler.

    Attributes:
        initial_speed: Simulation seconds per wall-clock second
    """

    initial_speed: float = field(default_factory=lambda: REPLAY_CONFIG["initial_speed"])


class AnimationScheduler:
    """
    Variable-speed, seekable simulation clock driven by a FrameSource.

    Usage:
        source = ManualFrameSource()
        scheduler = AnimationScheduler(start, end, source)

        scheduler.play()
        source.fire(0.0)       # first tick: no advance
        source.fire(1.0)       # +1 s * speed

        scheduler.scrub(50.0)  # paused at the midpoint
        scheduler.set_speed(10.0)

    Notes:
        - end_time < start_time is not rejected: progress reads 0 and the
          first tick clamps to end_time and pauses
        - set_speed() rejects non-positive multipliers with ValueError
    """

    def __init__(
        self,
        start_time: float,
        end_time: float,
        frame_source: FrameSource,
        config: Optional[SchedulerConfig] = None,
        on_advance: Optional[Callable[["AnimationScheduler"], None]] = None,
    ):
        """
        Initialize scheduler, paused at start_time.

        Args:
            start_time: First instant of the race (epoch seconds)
            end_time: Last instant of the race (epoch seconds)
            frame_source: Host frame callback capability
            config: Scheduler configuration (uses defaults if None)
            on_advance: Called with the scheduler after every applied tick
                and every scrub
        """
        self.config = config or SchedulerConfig()
        self.frame_source = frame_source
        self.on_advance = on_advance
        self.metrics = get_metrics()

        self.start_time = start_time
        self.end_time = end_time
        self.simulation_time = start_time
        self.state = PlaybackState.PAUSED
        self.speed_multiplier = self.config.initial_speed
        self.last_wall_clock_sample: Optional[float] = None

        self._pending_handle = None
        self._closed = False

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def is_playing(self) -> bool:
        """Check if the clock is advancing."""
        return self.state == PlaybackState.PLAYING

    @property
    def has_pending_frame(self) -> bool:
        """Check if a frame registration is outstanding."""
        return self._pending_handle is not None

    @property
    def total_s(self) -> float:
        """Race duration in seconds."""
        return self.end_time - self.start_time

    @property
    def elapsed_s(self) -> float:
        """Simulation seconds since start."""
        return self.simulation_time - self.start_time

    @property
    def progress_percent(self) -> float:
        """Timeline position (0-100); 0 for an empty or inverted range."""
        total = self.total_s
        if total <= 0:
            return 0.0
        return (self.elapsed_s / total) * 100.0

    def timeline(self) -> TimelineState:
        """Snapshot for the timeline control."""
        return TimelineState(
            simulation_time=self.simulation_time,
            progress_percent=self.progress_percent,
            elapsed_s=self.elapsed_s,
            total_s=self.total_s,
            is_playing=self.is_playing,
            speed_multiplier=self.speed_multiplier,
        )

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------

    def play(self, now: Optional[float] = None):
        """
        Start advancing the clock.

        Args:
            now: Wall-clock sample in the frame source's timebase. If None,
                the first tick after play() does not advance time.
        """
        if self._closed:
            logger.warning("play() ignored: scheduler is closed")
            return

        if self.is_playing:
            return

        self.state = PlaybackState.PLAYING
        self.last_wall_clock_sample = now
        self._register()
        logger.info("Playback started at t=%.3f (speed %.2fx)",
                    self.simulation_time, self.speed_multiplier)

    def pause(self):
        """Stop advancing the clock and cancel the pending frame."""
        self._cancel_pending()

        if not self.is_playing:
            return

        self.state = PlaybackState.PAUSED
        logger.info("Playback paused at t=%.3f", self.simulation_time)

    def toggle_play_pause(self, now: Optional[float] = None):
        """Play if paused, pause if playing."""
        if self.is_playing:
            self.pause()
        else:
            self.play(now)

    def scrub(self, progress_percent: float):
        """
        Seek to a timeline position. Always leaves the clock paused.

        Args:
            progress_percent: Target position, clamped to [0, 100]
        """
        self.pause()

        percent = min(max(progress_percent, 0.0), 100.0)
        self.simulation_time = self.start_time + self.total_s * percent / 100.0

        self.metrics.increment('scrubs')
        logger.debug("Scrubbed to %.1f%% (t=%.3f)", percent, self.simulation_time)
        self._notify()

    def set_speed(self, multiplier: float):
        """
        Change the speed multiplier from the next tick on.

        Args:
            multiplier: Simulation seconds per wall-clock second (> 0)

        Raises:
            ValueError: If multiplier is not positive
        """
        if not multiplier > 0:
            raise ValueError(f"Speed multiplier must be positive: {multiplier}")

        self.speed_multiplier = multiplier
        logger.debug("Speed set to %.2fx", multiplier)

    def reset(self, start_time: float, end_time: float):
        """
        Re-arm for a new dataset: paused at the new start_time.

        Args:
            start_time: First instant of the race
            end_time: Last instant of the race
        """
        self.pause()
        self.start_time = start_time
        self.end_time = end_time
        self.simulation_time = start_time
        self.last_wall_clock_sample = None

    def close(self):
        """Teardown: cancel any pending frame; later play() calls are ignored."""
        self.pause()
        self._closed = True

    # ------------------------------------------------------------------
    # Frame callback
    # ------------------------------------------------------------------

    def tick(self, now: float):
        """
        Advance the clock for one host frame.

        Args:
            now: Wall-clock sample of this frame (seconds)
        """
        if not self.is_playing:
            # Stale callback after pause/scrub/auto-stop
            self.metrics.increment_drop('stale_tick')
            return

        self._pending_handle = None

        if self.last_wall_clock_sample is None:
            delta_wall = 0.0
        else:
            delta_wall = max(now - self.last_wall_clock_sample, 0.0)

        new_time = self.simulation_time + delta_wall * self.speed_multiplier

        if new_time >= self.end_time:
            self.simulation_time = self.end_time
            self.state = PlaybackState.PAUSED
            self.metrics.increment('auto_stops')
            logger.info("Race end reached at t=%.3f, playback stopped", self.end_time)
        else:
            self.simulation_time = new_time
            self._register()

        self.last_wall_clock_sample = now

        self.metrics.increment('frames_ticked')
        self.metrics.record_histogram('tick_delta_wall_s', delta_wall)
        self._notify()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _register(self):
        """Register for exactly one next frame."""
        self._cancel_pending()
        self._pending_handle = self.frame_source.register_next_frame(self.tick)

    def _cancel_pending(self):
        if self._pending_handle is not None:
            self.frame_source.cancel(self._pending_handle)
            self._pending_handle = None

    def _notify(self):
        if self.on_advance is not None:
            self.on_advance(self)
