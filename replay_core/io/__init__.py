"""
I/O Module: Track data loading.

- GPX parsing into TrackPath (gpxpy)
- Time-trial timestamp normalization
- Track colour assignment
"""

from .gpx_loader import (
    EVENT_TYPE_RACE,
    EVENT_TYPE_TIME_TRIAL,
    TrackLoadError,
    generate_track_color,
    load_gpx_track,
    normalize_to_epoch,
    parse_gpx_track,
)

__all__ = [
    'EVENT_TYPE_RACE',
    'EVENT_TYPE_TIME_TRIAL',
    'TrackLoadError',
    'generate_track_color',
    'load_gpx_track',
    'normalize_to_epoch',
    'parse_gpx_track',
]
