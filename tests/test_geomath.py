"""
Tests for the geodetic math kernel.
"""

import math

import pytest

from common.constants import WGS84Ellipsoid
from geospatial.geomath import (
    TAU_MAX,
    ang_diff,
    ang_normalize,
    eatanhe,
    polyval,
    sum_error,
    taupf,
    tauf,
)


ES = WGS84Ellipsoid.es


class TestAngNormalize:
    """Test reduction of angles to [-180, 180]."""

    @pytest.mark.parametrize("angle,expected", [
        (0.0, 0.0),
        (190.0, -170.0),
        (-190.0, 170.0),
        (360.0, 0.0),
        (725.0, 5.0),
        (-73.5, -73.5),
    ])
    def test_reduces_into_range(self, angle, expected):
        """Test ordinary reductions."""
        assert ang_normalize(angle) == pytest.approx(expected, abs=1e-12)

    def test_half_turn_keeps_sign(self):
        """Test that exactly ±180 keeps the sign of the input."""
        assert ang_normalize(180.0) == 180.0
        assert ang_normalize(-180.0) == -180.0
        assert ang_normalize(540.0) == 180.0
        assert ang_normalize(-540.0) == -180.0


class TestSumError:
    """Test the error-free two-sum."""

    def test_recovers_lost_low_order_bits(self):
        """Test that the rounding error of a sum is returned exactly."""
        s, t = sum_error(1.0, 1e-20)
        assert s == 1.0
        assert t == 1e-20

    def test_zero_sum(self):
        """Test the error term of a zero sum."""
        s, t = sum_error(1.5, -1.5)
        assert s == 0.0
        assert t == 0.0


class TestAngDiff:
    """Test accurate angle differences."""

    def test_simple_difference(self):
        """Test differences that need no reduction."""
        assert ang_diff(10.0, 30.0) == pytest.approx(20.0)
        assert ang_diff(30.0, 10.0) == pytest.approx(-20.0)

    def test_wraps_across_antimeridian(self):
        """Test that differences are taken the short way round."""
        assert ang_diff(170.0, -170.0) == pytest.approx(20.0)
        assert ang_diff(-170.0, 170.0) == pytest.approx(-20.0)

    def test_half_turn_sign_follows_exact_difference(self):
        """Test that ±180 takes its sign from y - x."""
        assert ang_diff(0.0, 180.0) == 180.0
        assert ang_diff(0.0, -180.0) == -180.0

    def test_central_meridian_offset(self):
        """Test a typical UTM longitude offset."""
        assert ang_diff(-75.0, -73.985278) == pytest.approx(1.014722, abs=1e-12)


class TestEatanhe:
    """Test e·atanh(e·x)."""

    def test_zero_eccentricity(self):
        """Test that a sphere contributes nothing."""
        assert eatanhe(0.5, 0.0) == 0.0

    def test_oblate(self):
        """Test the oblate (es > 0) branch."""
        assert eatanhe(0.5, ES) == pytest.approx(ES * math.atanh(ES * 0.5), rel=1e-15)

    def test_prolate(self):
        """Test the prolate (es < 0) branch."""
        assert eatanhe(0.5, -0.1) == pytest.approx(0.1 * math.atan(-0.05), rel=1e-15)


class TestConformalLatitude:
    """Test taupf and its inverse tauf."""

    def test_equator_is_fixed_point(self):
        """Test that tau = 0 maps to 0."""
        assert taupf(0.0, ES) == 0.0
        assert tauf(0.0, ES) == 0.0

    def test_non_finite_passthrough(self):
        """Test that infinite tau is returned unchanged."""
        assert taupf(math.inf, ES) == math.inf
        assert taupf(-math.inf, ES) == -math.inf

    def test_conformal_latitude_is_smaller(self):
        """Test that |chi| < |phi| on an oblate ellipsoid."""
        tau = math.tan(math.radians(45.0))
        assert 0 < taupf(tau, ES) < tau

    @pytest.mark.parametrize("tau", [-10.0, -1.0, 1e-8, 0.5, 1.0, 3.7, 100.0, 1e8])
    def test_inverse_round_trip(self, tau):
        """Test that tauf inverts taupf to near machine precision."""
        assert tauf(taupf(tau, ES), ES) == pytest.approx(tau, rel=1e-13)

    def test_huge_seed_returned_directly(self):
        """Test that seeds beyond TAU_MAX skip the iteration."""
        taup = 10 * TAU_MAX
        tau = tauf(taup, ES)
        assert tau > TAU_MAX
        assert math.isfinite(tau)


class TestPolyval:
    """Test Horner evaluation."""

    def test_highest_degree_first(self):
        """Test 1·x² + 2·x + 3 at x = 2."""
        assert polyval([1, 2, 3], 2.0) == 11.0

    def test_empty_is_zero(self):
        """Test the zero polynomial."""
        assert polyval([], 5.0) == 0.0

    def test_constant(self):
        """Test a degree-zero polynomial."""
        assert polyval([7], 123.0) == 7.0
