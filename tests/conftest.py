"""
Pytest configuration and shared fixtures for race replay tests.

This module provides reusable fixtures for testing kinematics, track
interpolation, ranking and the animation clock.
"""

import sys
import math
from pathlib import Path
from typing import List, Tuple

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from replay_core.metrics import reset_metrics, get_metrics
from replay_core.proto import TrackPoint, TrackPath, create_track_path
from replay_core.timing import ManualFrameSource


# Base epoch for test tracks (2024-05-04 10:00:00 UTC)
T0 = 1714816800.0

# Roughly 111 m per 0.001 degree of latitude
METERS_PER_MILLIDEGREE = 6371e3 * math.radians(0.001)


# =============================================================================
# Track Builders
# =============================================================================


def make_track(
    racer_id,
    samples: List[Tuple[float, float, float]],
    color: str = "#ff0000",
    t0: float = T0,
) -> TrackPath:
    """
    Build a TrackPath from (seconds_after_t0, lat, lon) samples.

    Args:
        racer_id: Racer identifier.
        samples: List of (offset_s, lat, lon).
        color: Track colour.
        t0: Base epoch for offsets.

    Returns:
        TrackPath with precomputed total distance.
    """
    points = [TrackPoint(lat=lat, lon=lon, timestamp=t0 + dt) for dt, lat, lon in samples]
    return create_track_path(racer_id, points, color)


def straight_north_track(racer_id, duration_s: float, n_segments: int = 10, color: str = "#ff0000") -> TrackPath:
    """
    Track heading due north along lon=0, 0.001 deg per segment, evenly timed.

    Args:
        racer_id: Racer identifier.
        duration_s: Time from first to last point.
        n_segments: Number of segments.
        color: Track colour.
    """
    step = duration_s / n_segments
    samples = [(i * step, i * 0.001, 0.0) for i in range(n_segments + 1)]
    return make_track(racer_id, samples, color)


# =============================================================================
# Metrics Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_metrics():
    """
    Fresh global metrics collector for every test.

    Components capture the collector at construction, so this runs before
    any of them are built.
    """
    reset_metrics()
    return get_metrics()


# =============================================================================
# Track Fixtures
# =============================================================================


@pytest.fixture
def two_point_track() -> TrackPath:
    """
    Two points 10 s apart, 0.001 deg of longitude apart on the equator.

    Returns:
        TrackPath for racer "A".
    """
    return make_track("A", [(0.0, 0.0, 0.0), (10.0, 0.0, 0.001)])


@pytest.fixture
def winding_track() -> TrackPath:
    """
    Multi-segment track with turns and uneven timing.

    Returns:
        TrackPath for racer "W".
    """
    return make_track("W", [
        (0.0, 22.2900, 114.1700),
        (7.0, 22.2910, 114.1700),
        (15.0, 22.2910, 114.1715),
        (18.0, 22.2898, 114.1722),
        (30.0, 22.2880, 114.1710),
        (31.0, 22.2880, 114.1709),
        (45.0, 22.2900, 114.1700),
    ])


@pytest.fixture
def race_paths() -> List[TrackPath]:
    """
    Three racers on the same 1.1 km northbound course.

    - "fast" finishes at t=100 s
    - "mid" finishes at t=200 s
    - "slow" finishes at t=300 s

    Returns:
        List of TrackPaths.
    """
    return [
        straight_north_track("fast", 100.0, color="#ff0000"),
        straight_north_track("mid", 200.0, color="#00ff00"),
        straight_north_track("slow", 300.0, color="#0000ff"),
    ]


# =============================================================================
# Clock Fixtures
# =============================================================================


@pytest.fixture
def frame_source() -> ManualFrameSource:
    """
    Deterministic frame source.

    Returns:
        ManualFrameSource with nothing pending.
    """
    return ManualFrameSource()


# =============================================================================
# Helper Functions
# =============================================================================


def great_circle_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Reference great-circle distance via the spherical law of cosines.

    Args:
        lat1, lon1: First point in degrees.
        lat2, lon2: Second point in degrees.

    Returns:
        Distance in meters.
    """
    p1, p2 = math.radians(lat1), math.radians(lat2)
    dl = math.radians(lon2 - lon1)
    cos_c = math.sin(p1) * math.sin(p2) + math.cos(p1) * math.cos(p2) * math.cos(dl)
    return 6371e3 * math.acos(min(1.0, max(-1.0, cos_c)))
