"""
Timing Module: Simulation clock and host frame callbacks.

Key classes:
- AnimationScheduler: play / pause / scrub / set_speed simulation clock
- FrameSource: injected "call me at the next frame" capability
- ManualFrameSource: deterministic frame source for tests and batch runs
- IntervalFrameSource: fixed-interval asyncio timer frame source
"""

from .frame_source import (
    FrameSource,
    ManualFrameSource,
    IntervalFrameSource,
)
from .animation_scheduler import (
    AnimationScheduler,
    PlaybackState,
    SchedulerConfig,
)

__all__ = [
    'FrameSource',
    'ManualFrameSource',
    'IntervalFrameSource',
    'AnimationScheduler',
    'PlaybackState',
    'SchedulerConfig',
]
