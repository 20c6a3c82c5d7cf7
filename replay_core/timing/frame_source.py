"""
Host frame callback sources.

The scheduler never sleeps or spins; it asks its host to "call me back once,
at the next rendering opportunity" and re-registers on every tick while
playing. A FrameSource is that capability:

    handle = source.register_next_frame(callback)   # callback(wall_clock_s)
    source.cancel(handle)

Implementations:
- ManualFrameSource: deterministic, driven by fire(now); tests and batch runs
- IntervalFrameSource: fixed-interval timer on an asyncio event loop
"""

import asyncio
import itertools
import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]


class FrameSource(ABC):
    """Capability to request a single callback at the next frame."""

    @abstractmethod
    def register_next_frame(self, callback: FrameCallback):
        """
        Request one call of callback(wall_clock_s) at the next frame.

        Returns:
            Opaque handle accepted by cancel()
        """

    @abstractmethod
    def cancel(self, handle):
        """Withdraw a registration; unknown or already fired handles are ignored."""


class ManualFrameSource(FrameSource):
    """
    Frame source driven explicitly by the caller.

    Usage:
        source = ManualFrameSource()
        scheduler = AnimationScheduler(start, end, source)
        scheduler.play()
        source.fire(0.0)
        source.fire(0.5)   # advances by 0.5 s * speed
    """

    def __init__(self):
        """Initialize with no pending registrations."""
        self._pending: Dict[int, FrameCallback] = {}
        self._handles = itertools.count(1)
        self.fired_count = 0
        self.max_pending = 0

    @property
    def pending_count(self) -> int:
        """Number of callbacks waiting for the next frame."""
        return len(self._pending)

    @property
    def has_pending(self) -> bool:
        """Check if any callback is registered."""
        return bool(self._pending)

    def register_next_frame(self, callback: FrameCallback) -> int:
        handle = next(self._handles)
        self._pending[handle] = callback
        self.max_pending = max(self.max_pending, len(self._pending))
        return handle

    def cancel(self, handle):
        self._pending.pop(handle, None)

    def fire(self, now: float) -> int:
        """
        Deliver one frame to every callback registered before this call.

        Callbacks registered while firing wait for the next fire().

        Args:
            now: Wall-clock sample passed to the callbacks (seconds)

        Returns:
            Number of callbacks invoked
        """
        due = list(self._pending.items())
        self._pending.clear()

        for _, callback in due:
            callback(now)

        self.fired_count += len(due)
        return len(due)

    def run(self, start: float, step_s: float, max_frames: int) -> int:
        """
        Fire frames at a fixed wall-clock step until nothing is pending.

        Args:
            start: Wall-clock sample of the first frame
            step_s: Wall-clock seconds between frames
            max_frames: Upper bound on frames fired

        Returns:
            Number of frames fired
        """
        frames = 0
        now = start
        while self._pending and frames < max_frames:
            self.fire(now)
            now += step_s
            frames += 1
        return frames


class IntervalFrameSource(FrameSource):
    """
    Fixed-interval timer frame source on an asyncio event loop.

    Callbacks run on the loop thread, one frame interval after
    registration, and receive loop.time() as the wall-clock sample.
    """

    def __init__(self, interval_s: float, loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Initialize frame source.

        Args:
            interval_s: Seconds between frames
            loop: Event loop to schedule on (running loop if None)
        """
        if interval_s <= 0:
            raise ValueError(f"Frame interval must be positive: {interval_s}")

        self.interval_s = interval_s
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        """Wall-clock sample in the same timebase as delivered frames."""
        return self.loop.time()

    def register_next_frame(self, callback: FrameCallback) -> asyncio.TimerHandle:
        loop = self.loop
        return loop.call_later(self.interval_s, lambda: callback(loop.time()))

    def cancel(self, handle):
        if handle is not None:
            handle.cancel()
