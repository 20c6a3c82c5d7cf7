"""
Protocol Module: Data schemas exchanged with collaborators.

- Inputs: TrackPoint, TrackPath (immutable per replay session)
- Outputs: RacerPosition, RacerProgress, LeaderboardEntry, RacerTelemetry,
  TimelineState (ephemeral, recomputed per query)
"""

from .track import (
    TrackPoint,
    TrackPath,
    create_track_path,
    path_length_m,
)
from .racer_progress import (
    RacerPosition,
    RacerProgress,
    LeaderboardEntry,
    RacerTelemetry,
)
from .timeline_state import (
    TimelineState,
    format_duration,
)

__all__ = [
    # Inputs
    'TrackPoint',
    'TrackPath',
    'create_track_path',
    'path_length_m',
    # Outputs
    'RacerPosition',
    'RacerProgress',
    'LeaderboardEntry',
    'RacerTelemetry',
    'TimelineState',
    'format_duration',
]
