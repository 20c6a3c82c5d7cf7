"""
Unit tests for great-circle kinematics.

Tests cover:
- Haversine distance
- Initial bearing normalization
- Speed and heading over a segment (including zero/negative time deltas)
- Compass point mapping
"""

import math

import pytest

from replay_core.geo import (
    CARDINAL_DIRECTIONS,
    SpeedHeading,
    cardinal_direction,
    distance_m,
    initial_bearing_deg,
    speed_and_heading,
)
from replay_core.proto import TrackPoint
from tests.conftest import T0, METERS_PER_MILLIDEGREE, great_circle_m


def pt(lat, lon, dt=0.0):
    """Track point dt seconds after T0."""
    return TrackPoint(lat=lat, lon=lon, timestamp=T0 + dt)


# =============================================================================
# Test Distance
# =============================================================================


class TestDistance:
    """Tests for haversine distance."""

    def test_same_point_is_zero(self):
        """Test distance from a point to itself."""
        p = pt(22.29, 114.17)
        assert distance_m(p, p) == 0.0

    def test_one_millidegree_on_equator(self):
        """Test 0.001 deg of longitude on the equator (~111 m)."""
        d = distance_m(pt(0.0, 0.0), pt(0.0, 0.001))
        assert d == pytest.approx(METERS_PER_MILLIDEGREE, rel=1e-9)

    def test_symmetric(self):
        """Test distance is symmetric."""
        a, b = pt(22.29, 114.17), pt(22.31, 114.20)
        assert distance_m(a, b) == pytest.approx(distance_m(b, a))

    def test_matches_reference_formula(self):
        """Test against the spherical law of cosines for a long segment."""
        d = distance_m(pt(51.5074, -0.1278), pt(48.8566, 2.3522))
        assert d == pytest.approx(great_circle_m(51.5074, -0.1278, 48.8566, 2.3522), rel=1e-6)
        # London - Paris is ~344 km
        assert 340e3 < d < 348e3

    def test_accepts_any_lat_lon_object(self):
        """Test duck typing: anything with lat/lon works."""

        class LatLon:
            def __init__(self, lat, lon):
                self.lat = lat
                self.lon = lon

        assert distance_m(LatLon(0.0, 0.0), pt(0.0, 0.001)) > 0


# =============================================================================
# Test Bearing
# =============================================================================


class TestBearing:
    """Tests for initial great-circle bearing."""

    @pytest.mark.parametrize("end, expected", [
        ((0.001, 0.0), 0.0),      # North
        ((0.0, 0.001), 90.0),     # East
        ((-0.001, 0.0), 180.0),   # South
        ((0.0, -0.001), 270.0),   # West
    ])
    def test_cardinal_bearings(self, end, expected):
        """Test bearings along the axes."""
        bearing = initial_bearing_deg(pt(0.0, 0.0), pt(*end))
        assert bearing == pytest.approx(expected, abs=1e-9)

    def test_range(self):
        """Test bearing is always in [0, 360)."""
        origin = pt(10.0, 10.0)
        for k in range(36):
            angle = math.radians(k * 10)
            end = pt(10.0 + 0.01 * math.cos(angle), 10.0 + 0.01 * math.sin(angle))
            bearing = initial_bearing_deg(origin, end)
            assert 0.0 <= bearing < 360.0


# =============================================================================
# Test Speed and Heading
# =============================================================================


class TestSpeedAndHeading:
    """Tests for segment speed and heading."""

    def test_speed_kph(self):
        """Test ~111 m in 10 s is ~40 km/h heading east."""
        result = speed_and_heading(pt(0.0, 0.0, 0.0), pt(0.0, 0.001, 10.0))

        assert isinstance(result, SpeedHeading)
        assert result.speed_kph == pytest.approx(METERS_PER_MILLIDEGREE / 10.0 * 3.6)
        assert result.heading_degrees == pytest.approx(90.0)
        assert result.cardinal == 'E'

    def test_identical_timestamps_return_zero(self):
        """Test zero time delta never divides by zero."""
        result = speed_and_heading(pt(0.0, 0.0, 5.0), pt(0.0, 0.001, 5.0))

        assert result.speed_kph == 0.0
        assert result.heading_degrees == 0.0

    def test_out_of_order_timestamps_return_zero(self):
        """Test negative time delta returns zeros."""
        result = speed_and_heading(pt(0.0, 0.0, 10.0), pt(0.0, 0.001, 0.0))

        assert result.speed_kph == 0.0
        assert result.heading_degrees == 0.0

    def test_stationary(self):
        """Test no movement gives zero speed."""
        result = speed_and_heading(pt(1.0, 1.0, 0.0), pt(1.0, 1.0, 30.0))
        assert result.speed_kph == 0.0


# =============================================================================
# Test Cardinal Direction
# =============================================================================


class TestCardinalDirection:
    """Tests for heading to compass point mapping."""

    @pytest.mark.parametrize("heading, expected", [
        (0.0, 'N'),
        (22.4, 'N'),
        (22.5, 'NE'),
        (45.0, 'NE'),
        (90.0, 'E'),
        (135.0, 'SE'),
        (180.0, 'S'),
        (225.0, 'SW'),
        (270.0, 'W'),
        (315.0, 'NW'),
        (337.4, 'NW'),
        (337.5, 'N'),
        (359.9, 'N'),
    ])
    def test_mapping(self, heading, expected):
        """Test each sector maps to its compass point."""
        assert cardinal_direction(heading) == expected

    def test_table(self):
        """Test the 8-point table order."""
        assert CARDINAL_DIRECTIONS == ('N', 'NE', 'E', 'SE', 'S', 'SW', 'W', 'NW')
