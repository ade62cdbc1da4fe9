"""
Tests for the Transverse Mercator and Polar Stereographic projections.
"""

import inspect
import math

import numpy as np
import pytest
from pyproj import Transformer

from geospatial.projections import (
    ConformalProjection,
    PolarStereographic,
    TransverseMercator,
    ups_projection,
    utm_projection,
)


class TestTransverseMercatorSeries:
    """Test the precomputed Krüger series."""

    def test_rectifying_radius(self):
        """Test a1 = b1·a against the published WGS84 value."""
        assert utm_projection().rectifying_radius == pytest.approx(6367449.145823415, rel=1e-12)

    def test_series_coefficients(self):
        """Test the leading alpha and beta coefficients for WGS84."""
        tm = utm_projection()
        assert tm.alpha[1] == pytest.approx(8.377318206244698e-4, rel=1e-10)
        assert tm.alpha[2] == pytest.approx(7.608527773572307e-7, rel=1e-9)
        assert tm.beta[1] == pytest.approx(8.377321640579488e-4, rel=1e-10)
        assert len(tm.alpha) == 7
        assert len(tm.beta) == 7

    def test_instances_are_cached_and_identical(self):
        """Test that the shared instance is reused and fresh ones match it."""
        assert utm_projection() is utm_projection()
        assert ups_projection() is ups_projection()
        fresh = TransverseMercator()
        assert fresh.alpha == utm_projection().alpha
        assert fresh.beta == utm_projection().beta

    def test_rejects_bad_scale_factor(self):
        """Test that a non-positive scale factor is rejected."""
        with pytest.raises(ValueError):
            TransverseMercator(0.0)


class TestTransverseMercator:
    """Test forward and reverse Transverse Mercator."""

    def test_origin(self):
        """Test that the origin maps to (0, 0)."""
        x, y = utm_projection().forward(0.0, 0.0, 0.0)
        assert x == 0.0
        assert y == 0.0

    def test_central_meridian_has_zero_x(self):
        """Test that points on the central meridian have x = 0."""
        x, y = utm_projection().forward(-75.0, 45.0, -75.0)
        assert x == 0.0
        assert y > 0

    def test_pole(self):
        """Test the pole maps to the quarter meridian and back."""
        tm = utm_projection()
        x, y = tm.forward(3.0, 90.0, 10.0)
        assert x == pytest.approx(0.0, abs=1e-9)
        assert y == pytest.approx(tm.rectifying_radius * tm.scale_factor * math.pi / 2, rel=1e-15)
        lat, _ = tm.reverse(3.0, x, y)
        assert lat == pytest.approx(90.0, abs=1e-12)

    def test_backside_of_equator(self):
        """Test the antipodal equator point folds onto the far side."""
        tm = utm_projection()
        x, y = tm.forward(0.0, 0.0, 180.0)
        assert x == pytest.approx(0.0, abs=1e-9)
        assert y == pytest.approx(-tm.rectifying_radius * tm.scale_factor * math.pi, rel=1e-15)

    def test_symmetry(self):
        """Test mirror symmetry in latitude and longitude offset."""
        tm = utm_projection()
        x1, y1 = tm.forward(0.0, 30.0, 2.0)
        x2, y2 = tm.forward(0.0, -30.0, -2.0)
        assert x1 == pytest.approx(-x2, rel=1e-15)
        assert y1 == pytest.approx(-y2, rel=1e-15)

    @pytest.mark.parametrize("lat,lon", [
        (0.0, 0.0), (40.748333, 1.014722), (-33.9, -2.5), (60.0, 3.0),
        (83.9, -3.0), (-79.9, 2.9), (10.0, 10.0), (45.0, 30.0),
    ])
    def test_round_trip(self, lat, lon):
        """Test reverse(forward(p)) ≈ p."""
        tm = utm_projection()
        x, y = tm.forward(0.0, lat, lon)
        lat2, lon2 = tm.reverse(0.0, x, y)
        assert lat2 == pytest.approx(lat, abs=1e-10)
        assert lon2 == pytest.approx(lon, abs=1e-10)

    @pytest.mark.parametrize("lat,lon", [
        (40.748333, -73.985278), (0.5, -77.9), (-45.0, -72.1), (70.0, -75.0),
    ])
    def test_matches_proj(self, lat, lon):
        """Test agreement with PROJ's tmerc within 1 mm."""
        proj = Transformer.from_crs(
            "EPSG:4326",
            "+proj=tmerc +lat_0=0 +lon_0=-75 +k=0.9996 +x_0=0 +y_0=0 +ellps=WGS84 +units=m +no_defs",
            always_xy=True,
        )
        x_ref, y_ref = proj.transform(lon, lat)
        x, y = utm_projection().forward(-75.0, lat, lon)
        assert x == pytest.approx(x_ref, abs=1e-3)
        assert y == pytest.approx(y_ref, abs=1e-3)


class TestPolarStereographic:
    """Test forward and reverse Polar Stereographic."""

    def test_pole_is_origin(self):
        """Test both poles map to the origin."""
        ps = ups_projection()
        assert ps.forward(True, 90.0, 0.0) == pytest.approx((0.0, 0.0), abs=1e-9)
        assert ps.forward(False, -90.0, 45.0) == pytest.approx((0.0, 0.0), abs=1e-9)

    def test_origin_is_pole(self):
        """Test the origin maps back to the pole."""
        ps = ups_projection()
        lat, _ = ps.reverse(True, 0.0, 0.0)
        assert lat == pytest.approx(90.0, abs=1e-12)
        lat, _ = ps.reverse(False, 0.0, 0.0)
        assert lat == pytest.approx(-90.0, abs=1e-12)

    def test_axis_orientation(self):
        """Test the y axis sign convention in each hemisphere."""
        ps = ups_projection()
        x, y = ps.forward(True, 85.0, 0.0)
        assert x == pytest.approx(0.0, abs=1e-9)
        assert y < 0
        x, y = ps.forward(False, -85.0, 0.0)
        assert x == pytest.approx(0.0, abs=1e-9)
        assert y > 0
        x, _ = ps.forward(True, 85.0, 90.0)
        assert x > 0

    @pytest.mark.parametrize("northp,lat,lon", [
        (True, 84.5, 0.0), (True, 88.0, 135.0), (True, 89.999, -60.0),
        (False, -80.5, 10.0), (False, -87.0, -170.0), (False, -60.0, 90.0),
    ])
    def test_round_trip(self, northp, lat, lon):
        """Test reverse(forward(p)) ≈ p."""
        ps = ups_projection()
        x, y = ps.forward(northp, lat, lon)
        lat2, lon2 = ps.reverse(northp, x, y)
        assert lat2 == pytest.approx(lat, abs=1e-10)
        assert lon2 == pytest.approx(lon, abs=1e-9)

    @pytest.mark.parametrize("northp,lat,lon,epsg", [
        (True, 85.0, 30.0, "EPSG:32661"),
        (True, 88.5, -120.0, "EPSG:32661"),
        (False, -81.0, 60.0, "EPSG:32761"),
        (False, -89.0, -10.0, "EPSG:32761"),
    ])
    def test_matches_proj_ups(self, northp, lat, lon, epsg):
        """Test agreement with the EPSG UPS definitions within 1 mm."""
        x_ref, y_ref = Transformer.from_crs("EPSG:4326", epsg, always_xy=True).transform(lon, lat)
        x, y = ups_projection().forward(northp, lat, lon)
        assert x + 2_000_000 == pytest.approx(x_ref, abs=1e-3)
        assert y + 2_000_000 == pytest.approx(y_ref, abs=1e-3)

    def test_scale_factor(self):
        """Test the UPS scale factor is used."""
        assert ups_projection().scale_factor == 0.994
        assert isinstance(ups_projection(), PolarStereographic)
        assert np.isfinite(PolarStereographic(1.0).forward(True, 45.0, 0.0)).all()


class TestProjectionInterface:
    """Test the shared base class and the per-projection call signatures."""

    def test_base_is_abstract(self):
        """Test the base class cannot be instantiated."""
        with pytest.raises(TypeError):
            ConformalProjection(1.0)

    def test_only_name_is_abstract(self):
        """Test forward/reverse are declared by each projection, not the base."""
        assert ConformalProjection.__abstractmethods__ == frozenset({"name"})
        assert not hasattr(ConformalProjection, "forward")
        assert not hasattr(ConformalProjection, "reverse")

    @pytest.mark.parametrize("cls,forward_args,reverse_args", [
        (TransverseMercator, ["lon0", "lat", "lon"], ["lon0", "x", "y"]),
        (PolarStereographic, ["northp", "lat", "lon"], ["northp", "x", "y"]),
    ])
    def test_signatures(self, cls, forward_args, reverse_args):
        """Test each projection names its own leading argument."""
        assert list(inspect.signature(cls.forward).parameters)[1:] == forward_args
        assert list(inspect.signature(cls.reverse).parameters)[1:] == reverse_args

    def test_rejects_bad_scale_factor(self):
        """Test the shared constructor validates k0."""
        with pytest.raises(ValueError, match="not positive"):
            TransverseMercator(0.0)
