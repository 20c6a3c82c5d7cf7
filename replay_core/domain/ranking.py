"""
Live Race Placings.

Ranks racers at an arbitrary simulation time. Racers who have reached
their last fix are "finished" and ordered by finish time; everyone else is
ordered by distance remaining on their own track.

The two ranking scores (finish timestamp, distance remaining) live on
different scales and are never compared with each other: all finished
racers rank ahead of all racers still on course.
"""

import logging
import math
from typing import List, Optional, Sequence

from replay_core.geo.interpolator import position_at
from replay_core.geo.kinematics import distance_m
from replay_core.metrics import get_metrics
from replay_core.proto import RacerProgress, TrackPath

logger = logging.getLogger(__name__)


class RankingEngine:
    """
    Compute placings for all racers at a target time.

    Usage:
        engine = RankingEngine()
        for progress in engine.placings(paths, sim_time):
            print(progress.rank, progress.racer_id, progress.distance_m)

    Notes:
        - Tracks with total_distance_m == 0 are excluded
        - Distance travelled uses a full linear scan per racer (no hints)
    """

    def __init__(self):
        """Initialize ranking engine."""
        self.metrics = get_metrics()

    def placings(self, paths: Sequence[TrackPath], target_time: float) -> List[RacerProgress]:
        """
        Ranked progress of every non-degenerate racer.

        Args:
            paths: All racer tracks of the event
            target_time: Simulation instant

        Returns:
            RacerProgress list sorted best to worst, ranks 1..N
        """
        self.metrics.increment('ranking_queries')

        progress = []
        for path in paths:
            if path.total_distance_m <= 0:
                self.metrics.increment_drop('zero_distance_track')
                logger.debug("Racer %s excluded from ranking (zero distance)", path.racer_id)
                continue
            progress.append(self.racer_progress(path, target_time))

        progress.sort(key=_sort_key)

        for rank, entry in enumerate(progress, start=1):
            entry.rank = rank

        return progress

    def racer_progress(self, path: TrackPath, target_time: float) -> RacerProgress:
        """
        Unranked progress of one racer.

        Args:
            path: Racer track with total_distance_m > 0
            target_time: Simulation instant

        Returns:
            RacerProgress with rank left at 0
        """
        points = path.points
        finish_timestamp = points[-1].timestamp

        if target_time >= finish_timestamp:
            return RacerProgress(
                racer_id=path.racer_id,
                distance_m=path.total_distance_m,
                ranking_score=finish_timestamp,
                finish_timestamp=finish_timestamp,
            )

        travelled = distance_travelled_m(path, target_time)
        if travelled is None:
            # Not started yet
            return RacerProgress(
                racer_id=path.racer_id,
                distance_m=0.0,
                ranking_score=math.inf,
            )

        return RacerProgress(
            racer_id=path.racer_id,
            distance_m=travelled,
            ranking_score=path.total_distance_m - travelled,
        )


def distance_travelled_m(path: TrackPath, target_time: float) -> Optional[float]:
    """
    Distance covered along a track up to target_time.

    Args:
        path: Racer track
        target_time: Simulation instant before the racer's finish

    Returns:
        Meters travelled, or None if no fix is at or before target_time or
        the racer has already reached its last fix
    """
    points = path.points

    last_full = -1
    for i, point in enumerate(points):
        if point.timestamp <= target_time:
            last_full = i
        else:
            break

    if last_full < 0 or last_full >= len(points) - 1:
        return None

    travelled = 0.0
    for i in range(last_full):
        travelled += distance_m(points[i], points[i + 1])

    position = position_at(path, target_time, last_full)
    if position is None:
        return None

    return travelled + distance_m(points[last_full], position)


def _sort_key(progress: RacerProgress):
    """Finished racers first (by finish time), then by distance remaining."""
    return (0 if progress.has_finished else 1, progress.ranking_score)


def placings(paths: Sequence[TrackPath], target_time: float) -> List[RacerProgress]:
    """Convenience wrapper around RankingEngine().placings()."""
    return RankingEngine().placings(paths, target_time)
