"""
GPX track loading.

Turns an uploaded GPX document into a TrackPath ready for replay:
1. Parse with gpxpy
2. Flatten tracks -> segments -> points (points without a time are skipped)
3. For time-trial events, re-anchor timestamps to the Unix epoch so tracks
   recorded on different days start together (elapsed time is preserved)
4. Precompute total distance
"""

import logging
import random
from pathlib import Path
from typing import IO, Iterable, List, Optional, Union

import gpxpy
import gpxpy.gpx

from replay_core.metrics import get_metrics
from replay_core.proto import TrackPath, TrackPoint, create_track_path

logger = logging.getLogger(__name__)

EVENT_TYPE_RACE = "race"
EVENT_TYPE_TIME_TRIAL = "time_trial"


class TrackLoadError(Exception):
    """GPX document could not be read or parsed."""


def _extract_points(gpx: gpxpy.gpx.GPX, racer_id) -> List[TrackPoint]:
    """
    Flatten every track segment into TrackPoints, in document order.

    Raises:
        TrackLoadError: If a fix has coordinates out of range
    """
    metrics = get_metrics()
    points = []

    for track in gpx.tracks:
        for segment in track.segments:
            for point in segment.points:
                if point.time is None:
                    metrics.increment_drop('untimed_point')
                    continue
                try:
                    points.append(TrackPoint.from_datetime(point.latitude, point.longitude, point.time))
                except ValueError as e:
                    raise TrackLoadError(
                        f"Invalid fix for racer {racer_id} at {point.time.isoformat()}: {e}"
                    ) from e

    return points


def normalize_to_epoch(points: Iterable[TrackPoint]) -> List[TrackPoint]:
    """
    Re-anchor timestamps so the first point is at the Unix epoch.

    Args:
        points: Points in document order

    Returns:
        New points with timestamp = original - first timestamp
    """
    points = list(points)
    if not points:
        return points

    origin = points[0].timestamp
    return [TrackPoint(lat=p.lat, lon=p.lon, timestamp=p.timestamp - origin) for p in points]


def parse_gpx_track(
    source: Union[str, IO],
    racer_id,
    event_type: str = EVENT_TYPE_RACE,
    track_color: str = "",
) -> Optional[TrackPath]:
    """
    Build a TrackPath from GPX content.

    Args:
        source: GPX XML string or open file object
        racer_id: Racer identifier for the track
        event_type: "race" or "time_trial"
        track_color: Display colour of the racer

    Returns:
        TrackPath, or None if the document contains no timed point

    Raises:
        TrackLoadError: If the document is not valid GPX
    """
    try:
        gpx = gpxpy.parse(source)
    except gpxpy.gpx.GPXException as e:
        raise TrackLoadError(f"Invalid GPX for racer {racer_id}: {e}") from e

    points = _extract_points(gpx, racer_id)
    if not points:
        logger.info("Racer %s: GPX contains no timed points, track ignored", racer_id)
        return None

    if event_type == EVENT_TYPE_TIME_TRIAL:
        points = normalize_to_epoch(points)

    path = create_track_path(racer_id, points, track_color)
    logger.debug("Racer %s: %d points, %.1f m", racer_id, len(path.points), path.total_distance_m)
    return path


def load_gpx_track(
    file_path: Union[str, Path],
    racer_id,
    event_type: str = EVENT_TYPE_RACE,
    track_color: str = "",
) -> Optional[TrackPath]:
    """
    Read a GPX file from disk and build its TrackPath.

    Raises:
        TrackLoadError: If the file cannot be read or decoded as UTF-8, or
            is not valid GPX
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            return parse_gpx_track(f, racer_id, event_type, track_color)
    except UnicodeDecodeError as e:
        raise TrackLoadError(f"Cannot decode {file_path} as UTF-8: {e}") from e
    except OSError as e:
        raise TrackLoadError(f"Cannot read {file_path}: {e}") from e


def generate_track_color(existing: Iterable[str] = (), rng: Optional[random.Random] = None) -> str:
    """
    Random "#rrggbb" colour not already used in the event.

    Args:
        existing: Colours already assigned (case-insensitive)
        rng: Random source (module random if None)

    Returns:
        Unused colour string
    """
    rng = rng or random
    taken = {c.lower() for c in existing}

    while True:
        color = f"#{rng.randrange(0x1000000):06x}"
        if color not in taken:
            return color
