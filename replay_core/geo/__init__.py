"""
Geo Module: Spherical-Earth kinematics and track interpolation.

Key pieces:
- distance_m / initial_bearing_deg / speed_and_heading / cardinal_direction
- position_at: slerp position on a track at a target time (hinted search)
- PositionInterpolator: position_at with a per-racer search-hint table
"""

from .kinematics import (
    CARDINAL_DIRECTIONS,
    EARTH_RADIUS_M,
    SpeedHeading,
    cardinal_direction,
    distance_m,
    initial_bearing_deg,
    speed_and_heading,
)
from .interpolator import (
    InterpolatedPosition,
    PositionInterpolator,
    SearchHintTable,
    position_at,
    slerp,
)

__all__ = [
    # Kinematics
    'CARDINAL_DIRECTIONS',
    'EARTH_RADIUS_M',
    'SpeedHeading',
    'cardinal_direction',
    'distance_m',
    'initial_bearing_deg',
    'speed_and_heading',
    # Interpolation
    'InterpolatedPosition',
    'PositionInterpolator',
    'SearchHintTable',
    'position_at',
    'slerp',
]
