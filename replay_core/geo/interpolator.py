"""
Position Interpolation along a GPS track.

Finds the segment bracketing a target time and interpolates along the
great-circle arc between its endpoints (slerp). A search hint (the segment
index found by the previous query) makes forward playback amortized O(1);
queries that move backwards fall back to a scan from the start.

Usage:
    interpolator = PositionInterpolator()

    # Once per frame, per racer
    position = interpolator.locate(path, sim_time)
    if position is not None:
        marker.move_to(position.lat, position.lon)

    # When a new event is loaded
    interpolator.reset()
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Hashable, Optional, Tuple

import numpy as np

from replay_core.config import KINEMATICS_CONFIG
from replay_core.metrics import get_metrics
from replay_core.proto.track import TrackPath, TrackPoint

logger = logging.getLogger(__name__)

SLERP_EPSILON_RAD = KINEMATICS_CONFIG["slerp_epsilon_rad"]


@dataclass
class InterpolatedPosition:
    """
    Result of a position query.

    Attributes:
        lat: Latitude (degrees)
        lon: Longitude (degrees)
        found_segment_index: Index i of the segment [i, i+1] used; pass it
            back as the search hint of the next query
    """

    lat: float
    lon: float
    found_segment_index: int


def _unit_vector(lat_rad: float, lon_rad: float) -> np.ndarray:
    """Point on the unit sphere."""
    cos_lat = math.cos(lat_rad)
    return np.array([
        cos_lat * math.cos(lon_rad),
        cos_lat * math.sin(lon_rad),
        math.sin(lat_rad),
    ])


def slerp(p1: TrackPoint, p2: TrackPoint, factor: float) -> Tuple[float, float]:
    """
    Spherical linear interpolation between two fixes.

    Args:
        p1: Start point
        p2: End point
        factor: Fraction of the arc from p1 (0.0) to p2 (1.0)

    Returns:
        (lat, lon) in degrees; p1 itself when the points are closer than
        SLERP_EPSILON_RAD
    """
    lat1, lon1 = math.radians(p1.lat), math.radians(p1.lon)
    lat2, lon2 = math.radians(p2.lat), math.radians(p2.lon)

    # Angular separation (spherical law of cosines); clamp against rounding
    cos_omega = (math.sin(lat1) * math.sin(lat2)
                 + math.cos(lat1) * math.cos(lat2) * math.cos(lon2 - lon1))
    omega = math.acos(min(1.0, max(-1.0, cos_omega)))

    if omega < SLERP_EPSILON_RAD:
        return (p1.lat, p1.lon)

    sin_omega = math.sin(omega)
    weight_1 = math.sin((1.0 - factor) * omega) / sin_omega
    weight_2 = math.sin(factor * omega) / sin_omega

    x, y, z = weight_1 * _unit_vector(lat1, lon1) + weight_2 * _unit_vector(lat2, lon2)

    lat = math.degrees(math.atan2(z, math.hypot(x, y)))
    lon = math.degrees(math.atan2(y, x))
    return (lat, lon)


def _interpolate_segment(points, i: int, target_time: float) -> InterpolatedPosition:
    """Interpolate within segment [i, i+1], which must bracket target_time."""
    p1, p2 = points[i], points[i + 1]
    duration = p2.timestamp - p1.timestamp

    if duration == 0:
        return InterpolatedPosition(lat=p1.lat, lon=p1.lon, found_segment_index=i)

    factor = (target_time - p1.timestamp) / duration
    lat, lon = slerp(p1, p2, factor)
    return InterpolatedPosition(lat=lat, lon=lon, found_segment_index=i)


def position_at(
    path: TrackPath,
    target_time: float,
    search_hint: int = 0
) -> Optional[InterpolatedPosition]:
    """
    Position of a racer at target_time.

    Args:
        path: Racer track (points ascending by timestamp)
        target_time: Simulation instant (epoch seconds)
        search_hint: Segment index to start the forward scan from

    Returns:
        InterpolatedPosition, or None for an empty track

    Notes:
        - Before the first fix: first point, index 0
        - At or after the last fix: last point, index len-2
        - Forward scan from search_hint, then full scan of [0, search_hint)
        - If no segment brackets target_time, the last point is returned
    """
    points = path.points
    n = len(points)

    if n == 0:
        return None

    if n == 1:
        return InterpolatedPosition(lat=points[0].lat, lon=points[0].lon, found_segment_index=0)

    first, last = points[0], points[-1]

    if target_time <= first.timestamp:
        return InterpolatedPosition(lat=first.lat, lon=first.lon, found_segment_index=0)

    if target_time >= last.timestamp:
        return InterpolatedPosition(lat=last.lat, lon=last.lon, found_segment_index=n - 2)

    start = min(max(search_hint, 0), n - 1)

    # Forward playback: usually found at or just after the hint
    for i in range(start, n - 1):
        if points[i].timestamp <= target_time <= points[i + 1].timestamp:
            return _interpolate_segment(points, i, target_time)

    # Target moved backwards (scrub)
    for i in range(0, start):
        if points[i].timestamp <= target_time <= points[i + 1].timestamp:
            return _interpolate_segment(points, i, target_time)

    return InterpolatedPosition(lat=last.lat, lon=last.lon, found_segment_index=n - 2)


class SearchHintTable:
    """
    Per-racer last-found segment index.

    Owned by one replay session, mutated only by the context that advances
    the simulation clock. Must be cleared whenever tracks are reloaded.
    """

    def __init__(self):
        """Initialize empty table."""
        self._hints: Dict[Hashable, int] = {}

    def get(self, racer_id: Hashable) -> int:
        """Hint for a racer (0 if unknown)."""
        return self._hints.get(racer_id, 0)

    def update(self, racer_id: Hashable, segment_index: int):
        """Store the segment index found by the last query."""
        self._hints[racer_id] = segment_index

    def clear(self):
        """Forget all hints."""
        self._hints.clear()

    def __len__(self) -> int:
        return len(self._hints)

    def __contains__(self, racer_id) -> bool:
        return racer_id in self._hints


class PositionInterpolator:
    """
    Hint-caching position lookup for all racers of a session.

    Wraps position_at() with a SearchHintTable so repeated queries at
    increasing simulation times stay cheap.
    """

    def __init__(self, hints: Optional[SearchHintTable] = None):
        """
        Initialize interpolator.

        Args:
            hints: Hint table to use (a new one if None)
        """
        self.hints = hints if hints is not None else SearchHintTable()
        self.metrics = get_metrics()

    def locate(self, path: TrackPath, target_time: float) -> Optional[InterpolatedPosition]:
        """
        Position of a racer, reading and updating its search hint.

        Args:
            path: Racer track
            target_time: Simulation instant

        Returns:
            InterpolatedPosition, or None for an empty track
        """
        hint = self.hints.get(path.racer_id)
        position = position_at(path, target_time, hint)

        self.metrics.increment('position_queries')

        if position is None:
            return None

        if position.found_segment_index < hint:
            self.metrics.increment('hint_fallback_scans')

        self.hints.update(path.racer_id, position.found_segment_index)
        return position

    def peek(self, path: TrackPath, target_time: float) -> Optional[InterpolatedPosition]:
        """Position of a racer using its hint, without updating the hint."""
        return position_at(path, target_time, self.hints.get(path.racer_id))

    def reset(self):
        """Clear all hints (new dataset)."""
        self.hints.clear()
        logger.debug("Search hints cleared")
