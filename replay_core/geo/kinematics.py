"""
Great-circle kinematics on a spherical Earth.

Pure functions, no state:
- distance_m: haversine distance between two fixes
- initial_bearing_deg: initial great-circle bearing, normalized to [0, 360)
- speed_and_heading: segment speed (km/h) and heading between two track points
- cardinal_direction: heading to one of 8 compass points
"""

import math
from dataclasses import dataclass

from replay_core.config import KINEMATICS_CONFIG

EARTH_RADIUS_M = KINEMATICS_CONFIG["earth_radius_m"]

CARDINAL_DIRECTIONS = ('N', 'NE', 'E', 'SE', 'S', 'SW', 'W', 'NW')


@dataclass
class SpeedHeading:
    """
    Speed and heading over one segment.

    Attributes:
        speed_kph: Average speed over the segment (km/h)
        heading_degrees: Initial bearing from start to end [0, 360)
    """

    speed_kph: float
    heading_degrees: float

    @property
    def cardinal(self) -> str:
        """Compass point of the heading."""
        return cardinal_direction(self.heading_degrees)


def distance_m(p1, p2) -> float:
    """
    Haversine great-circle distance.

    Args:
        p1: Start, any object with lat/lon in degrees
        p2: End, any object with lat/lon in degrees

    Returns:
        Distance in meters
    """
    lat1 = math.radians(p1.lat)
    lat2 = math.radians(p2.lat)
    dlat = math.radians(p2.lat - p1.lat)
    dlon = math.radians(p2.lon - p1.lon)

    a = (math.sin(dlat / 2) ** 2
         + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def initial_bearing_deg(p1, p2) -> float:
    """
    Initial great-circle bearing from p1 to p2.

    Returns:
        Bearing in degrees, clockwise from north, in [0, 360)
    """
    lat1 = math.radians(p1.lat)
    lat2 = math.radians(p2.lat)
    dlon = math.radians(p2.lon - p1.lon)

    y = math.sin(dlon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)

    # % can yield 360.0 for tiny negative angles
    bearing = (math.degrees(math.atan2(y, x)) + 360.0) % 360.0
    return 0.0 if bearing >= 360.0 else bearing


def speed_and_heading(p1, p2) -> SpeedHeading:
    """
    Average speed and heading between two track points.

    Args:
        p1: Earlier TrackPoint
        p2: Later TrackPoint

    Returns:
        SpeedHeading; (0, 0) when the time delta is zero or negative
    """
    dt_s = p2.timestamp - p1.timestamp
    if dt_s <= 0:
        return SpeedHeading(speed_kph=0.0, heading_degrees=0.0)

    speed_mps = distance_m(p1, p2) / dt_s
    return SpeedHeading(
        speed_kph=speed_mps * 3.6,
        heading_degrees=initial_bearing_deg(p1, p2),
    )


def cardinal_direction(heading: float) -> str:
    """
    Map a heading to a compass point.

    Args:
        heading: Degrees, nominally [0, 360)

    Returns:
        One of N, NE, E, SE, S, SW, W, NW
    """
    # Half-way headings round up (22.5 -> NE)
    return CARDINAL_DIRECTIONS[math.floor(heading / 45 + 0.5) % 8]
