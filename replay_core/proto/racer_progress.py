"""
Replay Output Schemas.

Ephemeral per-query outputs consumed by rendering/UI collaborators:
- RacerPosition: marker placement for one racer at one frame
- RacerProgress: one row of the computed placings
- LeaderboardEntry: placings row enriched for display
- RacerTelemetry: live readout for a single selected racer
"""

from dataclasses import dataclass
from typing import Hashable, Optional


@dataclass
class RacerPosition:
    """
    Interpolated position of a racer at the current simulation time.

    Attributes:
        racer_id: Racer identifier
        lat: Latitude (degrees)
        lon: Longitude (degrees)
        segment_index: Index i of the bracketing segment [i, i+1]
    """

    racer_id: Hashable
    lat: float
    lon: float
    segment_index: int

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'racer_id': self.racer_id,
            'lat': self.lat,
            'lon': self.lon,
            'segment_index': self.segment_index,
        }


@dataclass
class RacerProgress:
    """
    Progress and rank of one racer at a target time.

    Attributes:
        racer_id: Racer identifier
        distance_m: Distance travelled along the track (m)
        ranking_score: Finish timestamp for finished racers (earlier is
            better), distance remaining for racers still on course (smaller
            is better), +inf for racers without a position
        finish_timestamp: Finish time, None while still racing
        rank: 1-based place

    Notes:
        - ranking_score values are only comparable within the same
          partition (finished vs. unfinished)
    """

    racer_id: Hashable
    distance_m: float
    ranking_score: float
    finish_timestamp: Optional[float] = None
    rank: int = 0

    @property
    def has_finished(self) -> bool:
        """Check if the racer had finished at the target time."""
        return self.finish_timestamp is not None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'racer_id': self.racer_id,
            'distance_m': self.distance_m,
            'ranking_score': self.ranking_score,
            'finish_timestamp': self.finish_timestamp,
            'rank': self.rank,
        }


@dataclass
class LeaderboardEntry:
    """
    Leaderboard row for display.

    Attributes:
        racer_id: Racer identifier
        rank: 1-based place
        track_color: Display colour of the racer's track
        speed_kph: Speed on the current segment (km/h)
        distance_m: Distance travelled (m)
        has_finished: True once the racer crossed its last point
    """

    racer_id: Hashable
    rank: int
    track_color: str
    speed_kph: float
    distance_m: float
    has_finished: bool = False

    def __post_init__(self):
        """Validate leaderboard entry."""
        if self.rank < 1:
            raise ValueError(f"Rank must be 1-based: {self.rank}")

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'racer_id': self.racer_id,
            'rank': self.rank,
            'track_color': self.track_color,
            'speed_kph': self.speed_kph,
            'distance_m': self.distance_m,
            'has_finished': self.has_finished,
        }


@dataclass
class RacerTelemetry:
    """
    Live readout for the selected racer.

    Attributes:
        racer_id: Racer identifier
        lat: Latitude (degrees)
        lon: Longitude (degrees)
        speed_kph: Speed on the current segment (km/h)
        heading_degrees: Initial bearing of the current segment [0, 360)
        cardinal_direction: Compass point (N, NE, ... NW)
        rank: 1-based place, None if the racer is excluded from ranking
        total_racer_count: Number of racers loaded in the session
    """

    racer_id: Hashable
    lat: float
    lon: float
    speed_kph: float
    heading_degrees: float
    cardinal_direction: str
    rank: Optional[int]
    total_racer_count: int

    @property
    def position_label(self) -> str:
        """Place as shown in the racer popup, e.g. "2 / 5"."""
        rank = self.rank if self.rank is not None else "N/A"
        return f"{rank} / {self.total_racer_count}"

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'racer_id': self.racer_id,
            'lat': self.lat,
            'lon': self.lon,
            'speed_kph': self.speed_kph,
            'heading_degrees': self.heading_degrees,
            'cardinal_direction': self.cardinal_direction,
            'rank': self.rank,
            'total_racer_count': self.total_racer_count,
        }
