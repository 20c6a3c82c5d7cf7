"""
Track Point and Track Path Schemas.

Immutable input data for the replay engine. A TrackPath is created once per
replay session by the data-loading collaborator and treated as read-only for
the lifetime of the session.

Timestamps are float seconds since the Unix epoch (UTC).
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Hashable, Iterable, Optional, Tuple

import numpy as np

from replay_core.config import KINEMATICS_CONFIG


@dataclass(frozen=True)
class TrackPoint:
    """
    Single GPS fix of a racer.

    Attributes:
        lat: Latitude (degrees, WGS84)
        lon: Longitude (degrees, WGS84)
        timestamp: Time of the fix (seconds since Unix epoch, UTC)
    """

    lat: float
    lon: float
    timestamp: float

    def __post_init__(self):
        """Validate coordinate ranges."""
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude must be in [-90, 90]: {self.lat}")

        if not -180.0 <= self.lon <= 180.0:
            raise ValueError(f"Longitude must be in [-180, 180]: {self.lon}")

    @classmethod
    def from_datetime(cls, lat: float, lon: float, when: datetime) -> "TrackPoint":
        """
        Build a point from a datetime (naive datetimes are taken as UTC).

        Args:
            lat: Latitude (degrees)
            lon: Longitude (degrees)
            when: Time of the fix

        Returns:
            TrackPoint with an epoch-seconds timestamp
        """
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        return cls(lat=lat, lon=lon, timestamp=when.timestamp())

    @property
    def time_utc(self) -> datetime:
        """Timestamp as an aware UTC datetime."""
        return datetime.fromtimestamp(self.timestamp, tz=timezone.utc)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'lat': self.lat,
            'lon': self.lon,
            'timestamp': self.time_utc.isoformat(),
        }


@dataclass(frozen=True)
class TrackPath:
    """
    Complete track of one racer.

    Attributes:
        racer_id: Racer identifier
        points: Fixes in ascending timestamp order (assumed, not enforced)
        track_color: Opaque display value (e.g. "#1f77b4")
        total_distance_m: Sum of haversine distances between consecutive points

    Notes:
        - Use create_track_path() so total_distance_m is computed once
        - total_distance_m is 0 for tracks with fewer than 2 points
        - Tracks with total_distance_m == 0 are excluded from ranking
    """

    racer_id: Hashable
    points: Tuple[TrackPoint, ...]
    track_color: str = ""
    total_distance_m: float = 0.0

    def __post_init__(self):
        """Validate track path."""
        if self.total_distance_m < 0:
            raise ValueError(f"Total distance cannot be negative: {self.total_distance_m}")

    @property
    def is_empty(self) -> bool:
        """Check if the track has no points."""
        return len(self.points) == 0

    @property
    def first_timestamp(self) -> Optional[float]:
        """Timestamp of the first point, None for an empty track."""
        return self.points[0].timestamp if self.points else None

    @property
    def last_timestamp(self) -> Optional[float]:
        """Timestamp of the last point, None for an empty track."""
        return self.points[-1].timestamp if self.points else None

    @property
    def duration_s(self) -> float:
        """Elapsed time between first and last point."""
        if len(self.points) < 2:
            return 0.0
        return self.points[-1].timestamp - self.points[0].timestamp

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'racer_id': self.racer_id,
            'points': [p.to_dict() for p in self.points],
            'track_color': self.track_color,
            'total_distance_m': self.total_distance_m,
        }


def path_length_m(points: Tuple[TrackPoint, ...]) -> float:
    """
    Sum of great-circle distances between consecutive points.

    Vectorized haversine over the whole track.

    Args:
        points: Ordered track points

    Returns:
        Length in meters (0 for fewer than 2 points)
    """
    if len(points) < 2:
        return 0.0

    lat = np.radians([p.lat for p in points])
    lon = np.radians([p.lon for p in points])

    dlat = np.diff(lat)
    dlon = np.diff(lon)

    a = (np.sin(dlat / 2) ** 2
         + np.cos(lat[:-1]) * np.cos(lat[1:]) * np.sin(dlon / 2) ** 2)
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))

    return float(np.sum(KINEMATICS_CONFIG["earth_radius_m"] * c))


def create_track_path(
    racer_id: Hashable,
    points: Iterable[TrackPoint],
    track_color: str = ""
) -> TrackPath:
    """
    Create a TrackPath with its total distance precomputed.

    Args:
        racer_id: Racer identifier
        points: Ordered track points
        track_color: Display colour

    Returns:
        TrackPath ready for replay
    """
    points = tuple(points)
    return TrackPath(
        racer_id=racer_id,
        points=points,
        track_color=track_color,
        total_distance_m=path_length_m(points),
    )
