"""
Tests for constants, the geodetic point type, errors and logging.
"""

import dataclasses
import logging
import math

import pytest

from common.constants import GeodeticConstants, WGS84Ellipsoid
from common.errors import (
    GeoConvertError,
    InvalidCoordinateRange,
    InvalidMgrsText,
    InvalidPrecision,
    InvalidProjectedCoordinate,
    InvalidZone,
)
from common.logging_config import get_logger
from common.types import GeodeticPoint


class TestConstants:
    """Test the WGS84 parameters and derived quantities."""

    def test_defining_parameters(self):
        """Test a and f."""
        assert WGS84Ellipsoid.a == 6_378_137.0
        assert WGS84Ellipsoid.f == 1 / 298.257223563
        assert GeodeticConstants.UTM_SCALE_FACTOR.value == 0.9996
        assert GeodeticConstants.UPS_SCALE_FACTOR.value == 0.994

    def test_derived_parameters(self):
        """Test b, e², e and n against published values."""
        assert WGS84Ellipsoid.b == pytest.approx(6_356_752.314245, abs=1e-6)
        assert WGS84Ellipsoid.e2 == pytest.approx(0.00669437999014, rel=1e-12)
        assert WGS84Ellipsoid.es == pytest.approx(math.sqrt(0.00669437999014), rel=1e-12)
        assert WGS84Ellipsoid.n == pytest.approx(0.0016792203863837, rel=1e-12)

    def test_constants_are_frozen(self):
        """Test constant records cannot be modified."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            GeodeticConstants.EARTH_SEMI_MAJOR_AXIS.value = 0.0


class TestGeodeticPoint:
    """Test the validated geodetic point."""

    @pytest.mark.parametrize("lat,lon", [
        (90.0, 0.0), (-90.0, 0.0), (0.0, -180.0), (0.0, 179.999999),
    ])
    def test_accepts_range_limits(self, lat, lon):
        """Test the closed latitude range and half-open longitude range."""
        point = GeodeticPoint(lat, lon)
        assert point.latitude == lat
        assert point.longitude == lon

    @pytest.mark.parametrize("lat,lon,message", [
        (90.1, 0.0, "Latitude"),
        (-100.0, 0.0, "Latitude"),
        (0.0, 180.0, "Longitude"),
        (0.0, -200.0, "Longitude"),
        (math.nan, 0.0, "Latitude"),
        (0.0, math.inf, "Longitude"),
    ])
    def test_rejects_out_of_range(self, lat, lon, message):
        """Test invalid positions are rejected with the offending axis named."""
        with pytest.raises(InvalidCoordinateRange, match=message):
            GeodeticPoint(lat, lon)

    def test_is_north(self):
        """Test the equator counts as north."""
        assert GeodeticPoint(0.0, 0.0).is_north
        assert GeodeticPoint(12.0, 0.0).is_north
        assert not GeodeticPoint(-0.5, 0.0).is_north

    def test_str(self):
        """Test the text form is 'lat lon'."""
        assert str(GeodeticPoint(40.748333, -73.985278)) == "40.748333 -73.985278"

    def test_radians(self):
        """Test conversion to and from radians."""
        point = GeodeticPoint(45.0, -90.0)
        lat, lon = point.to_radians()
        assert lat == pytest.approx(math.pi / 4)
        assert lon == pytest.approx(-math.pi / 2)
        again = GeodeticPoint.from_radians(lat, lon)
        assert again.latitude == pytest.approx(45.0)
        assert again.longitude == pytest.approx(-90.0)

    def test_frozen(self):
        """Test points are immutable."""
        point = GeodeticPoint(1.0, 2.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            point.latitude = 3.0

    def test_haversine(self):
        """Test the spherical distance on simple arcs."""
        radius = GeodeticConstants.EARTH_MEAN_RADIUS.value
        origin = GeodeticPoint(0.0, 0.0)
        assert origin.haversine_to(origin) == 0.0
        assert origin.haversine_to(GeodeticPoint(90.0, 0.0)) == pytest.approx(radius * math.pi / 2, rel=1e-12)
        assert origin.haversine_to(GeodeticPoint(0.0, 1.0)) == pytest.approx(radius * math.pi / 180, rel=1e-12)


class TestErrors:
    """Test the error hierarchy."""

    @pytest.mark.parametrize("error", [
        InvalidCoordinateRange("x"),
        InvalidZone(61),
        InvalidPrecision(12),
        InvalidProjectedCoordinate("x"),
        InvalidMgrsText("x"),
    ])
    def test_hierarchy(self, error):
        """Test every error is a GeoConvertError and a ValueError."""
        assert isinstance(error, GeoConvertError)
        assert isinstance(error, ValueError)

    def test_messages(self):
        """Test default messages carry the rejected value."""
        assert str(InvalidZone(61)) == "Zone 61 not in range [0, 60]"
        assert str(InvalidPrecision(12)) == "MGRS precision 12 not in range [-1, 11]"
        assert str(InvalidPrecision(0, 1, 11)) == "MGRS precision 0 not in range [1, 11]"


class TestLogging:
    """Test the logger factory."""

    def test_single_handler(self):
        """Test repeated calls do not stack handlers."""
        first = get_logger("geogrid.test")
        second = get_logger("geogrid.test", logging.DEBUG)
        assert first is second
        assert len(second.handlers) == 1
        assert second.level == logging.DEBUG

    def test_format(self):
        """Test the pipe-separated record format."""
        handler = get_logger("geogrid.test.format").handlers[0]
        assert handler.formatter._fmt == '%(asctime)s | %(name)s | %(levelname)s | %(message)s'
