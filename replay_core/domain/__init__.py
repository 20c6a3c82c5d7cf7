"""
Domain Module: Race placings and the replay session facade.

Implements:
- Live ranking (finished racers by finish time, others by distance remaining)
- Replay session (tracks, bounds, search hints, clock, rendering queries)
"""

from .ranking import (
    RankingEngine,
    distance_travelled_m,
    placings,
)
from .replay_session import (
    ReplaySession,
    race_bounds,
)

__all__ = [
    'RankingEngine',
    'distance_travelled_m',
    'placings',
    'ReplaySession',
    'race_bounds',
]
