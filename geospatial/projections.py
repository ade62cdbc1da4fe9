"""
Conformal Projections Underlying the Universal Grids.

This module implements the two projections used by UTM and UPS:
Transverse Mercator for the band -80° ≤ φ < 84° and Polar Stereographic
for the caps.

Scientific Context
------------------
Domain: Cartography, mathematical geodesy
Model: Conformal projections of the WGS84 ellipsoid

Why Not a Classical Series
--------------------------
1. The Redfearn/Thomas series used in older UTM software degrades to
   metre-level errors a few degrees from the central meridian.
2. Krüger's series in the third flattening n, carried to order n⁶, stays
   below 5 nm everywhere within 35° of the central meridian, which
   covers every legal UTM coordinate with a large margin.
3. The Polar Stereographic projection is closed form once the conformal
   latitude is known.

Implementation
--------------
Both projections run entirely on the kernel in ``geospatial.geomath``.
Series coefficients are computed once per instance; ``utm_projection()``
and ``ups_projection()`` hand out process-wide cached instances, which are
immutable and safe to share.

References
----------
- Karney, C.F.F. (2011). Transverse Mercator with an accuracy of a few
  nanometers. Journal of Geodesy, 85(8), 475-485.
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS Prof. Paper 1395.
"""

from abc import ABC, abstractmethod
from functools import lru_cache
from typing import List, Tuple
import numpy as np

from common.constants import GeodeticConstants, EllipsoidParameters, WGS84Ellipsoid
from geospatial.geomath import (
    DBL_EPSILON,
    QD,
    HD,
    ang_diff,
    ang_normalize,
    eatanhe,
    polyval,
    taupf,
    tauf,
)


# Order of the Krüger series
MAXPOW: int = 6

# Rectifying radius factor b1 = (1 + n²/4 + n⁴/64 + n⁶/256) / (1 + n)
B1_COEFF: Tuple[int, ...] = (1, 4, 64, 256, 256)

# Forward series (alpha), n⁶ rational coefficients, one block per order:
# numerator polynomial in n (highest degree first) followed by its divisor
ALP_COEFF: Tuple[int, ...] = (
    31564, -66675, 34440, 47250, -100800, 75600, 151200,
    -1983433, 863232, 748608, -1161216, 524160, 1935360,
    670412, 406647, -533952, 184464, 725760,
    6601661, -7732800, 2230245, 7257600,
    -13675556, 3438171, 7983360,
    212378941, 319334400,
)

# Reverse series (beta), same layout
BET_COEFF: Tuple[int, ...] = (
    384796, -382725, -6720, 932400, -1612800, 1209600, 2419200,
    -1118711, 1695744, -1174656, 258048, 80640, 3870720,
    22276, -16929, -15984, 12852, 362880,
    -830251, -158400, 197865, 7257600,
    -435388, 453717, 15966720,
    20648693, 638668800,
)


def _series(coeffs: Tuple[int, ...], n: float) -> List[float]:
    """Expand a packed coefficient table into [0, c1, ..., c6] for a given n."""
    out = [0.0] * (MAXPOW + 1)
    o = 0
    d = n
    for l in range(1, MAXPOW + 1):
        m = MAXPOW - l
        out[l] = d * polyval(coeffs[o:o + m + 1], n) / coeffs[o + m + 1]
        o += m + 2
        d *= n
    return out


def _clenshaw(coeffs: List[float], sign: float, zeta: complex) -> complex:
    """Sum sign·Σ c_j sin(2jζ) for complex ζ.

    Uses Clenshaw's recurrence on the argument 2 cos 2ζ; only the
    combination needed by the projections is returned: ζ plus the series.
    """
    xi, eta = zeta.real, zeta.imag
    c0 = np.cos(2 * xi)
    ch0 = np.cosh(2 * eta)
    s0 = np.sin(2 * xi)
    sh0 = np.sinh(2 * eta)

    a = complex(2 * c0 * ch0, -2 * s0 * sh0)
    n = MAXPOW
    y0 = complex(sign * coeffs[n]) if n & 1 else complex(0.0)
    y1 = complex(0.0)
    if n & 1:
        n -= 1
    while n > 0:
        y1 = a * y0 - y1 + sign * coeffs[n]
        n -= 1
        y0 = a * y1 - y0 + sign * coeffs[n]
        n -= 1

    a = complex(s0 * ch0, c0 * sh0)
    return zeta + a * y0


class ConformalProjection(ABC):
    """Abstract base class for the grid projections.

    Concrete projections map geodetic degrees to metres on the plane
    before any false easting/northing is applied. Each one defines
    ``forward`` and ``reverse`` with its own leading argument: the central
    meridian for Transverse Mercator, the hemisphere for Polar
    Stereographic.
    """

    def __init__(self, scale_factor: float, ellipsoid: EllipsoidParameters = WGS84Ellipsoid):
        if not np.isfinite(scale_factor) or scale_factor <= 0:
            raise ValueError(f"Scale factor {scale_factor} is not positive")
        self._k0 = scale_factor
        self._ellipsoid = ellipsoid
        self._es = ellipsoid.es

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of the projection."""
        pass

    @property
    def scale_factor(self) -> float:
        """Central scale factor k0."""
        return self._k0

    @property
    def ellipsoid(self) -> EllipsoidParameters:
        return self._ellipsoid


class TransverseMercator(ConformalProjection):
    """Transverse Mercator projection using Krüger's series to order n⁶.

    Parameters
    ----------
    scale_factor : float
        Scale factor on the central meridian (0.9996 for UTM).
    ellipsoid : EllipsoidParameters
        Reference ellipsoid (default: WGS84).

    Notes
    -----
    Symmetry is used to fold every input into the first quadrant
    (lat ≥ 0, 0 ≤ λ ≤ 90). Longitudes more than 90° from the central
    meridian are reflected through the "backside" of the ellipsoid, so the
    projection is defined, if not useful, over the whole globe.
    """

    def __init__(
        self,
        scale_factor: float = GeodeticConstants.UTM_SCALE_FACTOR.value,
        ellipsoid: EllipsoidParameters = WGS84Ellipsoid
    ):
        super().__init__(scale_factor, ellipsoid)
        n = ellipsoid.n
        # Rectifying radius, scaled: a1 = b1 * a
        self._b1 = polyval(B1_COEFF[:4], n**2) / (B1_COEFF[4] * (1 + n))
        self._a1 = self._b1 * ellipsoid.a
        self._alp = _series(ALP_COEFF, n)
        self._bet = _series(BET_COEFF, n)

    @property
    def name(self) -> str:
        return f"Transverse Mercator (k0={self._k0})"

    @property
    def rectifying_radius(self) -> float:
        """a1 = b1·a, the radius of the rectifying sphere in metres."""
        return self._a1

    @property
    def alpha(self) -> Tuple[float, ...]:
        """Forward series coefficients alpha[1..6] (index 0 unused)."""
        return tuple(self._alp)

    @property
    def beta(self) -> Tuple[float, ...]:
        """Reverse series coefficients beta[1..6] (index 0 unused)."""
        return tuple(self._bet)

    def forward(self, lon0: float, lat: float, lon: float) -> Tuple[float, float]:
        """Project a geodetic position.

        Parameters
        ----------
        lon0 : float
            Central meridian in degrees.
        lat, lon : float
            Geodetic position in degrees.

        Returns
        -------
        Tuple[float, float]
            (x, y) in metres relative to the central meridian and equator.
        """
        lon = ang_diff(lon0, lon)

        latsign = -1.0 if np.signbit(lat) else 1.0
        lonsign = -1.0 if np.signbit(lon) else 1.0
        lat *= latsign
        lon *= lonsign

        backside = lon > QD
        if backside:
            if lat == 0:
                latsign = -1.0
            lon = HD - lon

        phi = np.radians(lat)
        lam = np.radians(lon)

        if lat != QD:
            tau = np.sin(phi) / np.cos(phi)
            taup = taupf(tau, self._es)
            xip = np.arctan2(taup, np.cos(lam))
            etap = np.arcsinh(np.sin(lam) / np.hypot(taup, np.cos(lam)))
        else:
            xip = np.pi / 2
            etap = 0.0

        zeta = _clenshaw(self._alp, 1.0, complex(xip, etap))
        xi, eta = zeta.real, zeta.imag

        y = self._a1 * self._k0 * (np.pi - xi if backside else xi) * latsign
        x = self._a1 * self._k0 * eta * lonsign
        return float(x), float(y)

    def reverse(self, lon0: float, x: float, y: float) -> Tuple[float, float]:
        """Unproject a planar position.

        Parameters
        ----------
        lon0 : float
            Central meridian in degrees.
        x, y : float
            Position in metres relative to the central meridian and equator.

        Returns
        -------
        Tuple[float, float]
            (lat, lon) in degrees; lon normalized to [-180, 180].
        """
        xi = y / (self._a1 * self._k0)
        eta = x / (self._a1 * self._k0)

        xisign = -1.0 if np.signbit(xi) else 1.0
        etasign = -1.0 if np.signbit(eta) else 1.0
        xi *= xisign
        eta *= etasign

        backside = xi > np.pi / 2
        if backside:
            xi = np.pi - xi

        zeta = _clenshaw(self._bet, -1.0, complex(xi, eta))
        xip, etap = zeta.real, zeta.imag

        s = np.sinh(etap)
        c = max(0.0, np.cos(xip))
        r = np.hypot(s, c)
        if r != 0:
            lon = float(np.degrees(np.arctan2(s, c)))
            tau = tauf(np.sin(xip) / r, self._es)
            lat = float(np.degrees(np.arctan(tau)))
        else:
            # Pole
            lat = QD
            lon = 0.0

        lat *= xisign
        if backside:
            lon = HD - lon
        lon *= etasign
        lon = ang_normalize(lon + lon0)
        return lat, lon


class PolarStereographic(ConformalProjection):
    """Polar Stereographic projection centred on either pole.

    Parameters
    ----------
    scale_factor : float
        Scale factor at the pole (0.994 for UPS).
    ellipsoid : EllipsoidParameters
        Reference ellipsoid (default: WGS84).

    Notes
    -----
    The southern aspect is computed by mirroring latitude into the north.
    The y axis points away from the 180° meridian in the north and towards
    it in the south, matching the UPS convention.
    """

    def __init__(
        self,
        scale_factor: float = GeodeticConstants.UPS_SCALE_FACTOR.value,
        ellipsoid: EllipsoidParameters = WGS84Ellipsoid
    ):
        super().__init__(scale_factor, ellipsoid)
        self._c = (1 - ellipsoid.f) * np.exp(eatanhe(1.0, self._es))

    @property
    def name(self) -> str:
        return f"Polar Stereographic (k0={self._k0})"

    def forward(self, northp: bool, lat: float, lon: float) -> Tuple[float, float]:
        """Project a geodetic position.

        Parameters
        ----------
        northp : bool
            True for the north polar aspect.
        lat, lon : float
            Geodetic position in degrees.

        Returns
        -------
        Tuple[float, float]
            (x, y) in metres relative to the pole.
        """
        lat = lat if northp else -lat
        tau = np.tan(np.radians(lat))
        taup = taupf(tau, self._es)
        rho = np.hypot(1.0, taup) + abs(taup)
        if taup >= 0:
            rho = 1 / rho if lat != QD else 0.0
        rho *= 2 * self._k0 * self._ellipsoid.a / self._c

        lam = np.radians(lon)
        x = np.sin(lam) * rho
        y = np.cos(lam) * (-rho if northp else rho)
        return float(x), float(y)

    def reverse(self, northp: bool, x: float, y: float) -> Tuple[float, float]:
        """Unproject a planar position.

        Parameters
        ----------
        northp : bool
            True for the north polar aspect.
        x, y : float
            Position in metres relative to the pole.

        Returns
        -------
        Tuple[float, float]
            (lat, lon) in degrees.
        """
        rho = np.hypot(x, y)
        t = rho / (2 * self._k0 * self._ellipsoid.a / self._c) if rho != 0 else DBL_EPSILON**2
        taup = (1 / t - t) / 2
        tau = tauf(taup, self._es)
        lat = float(np.degrees(np.arctan(tau)))
        lon = float(np.degrees(np.arctan2(x, -y if northp else y)))
        return (lat if northp else -lat), lon


@lru_cache(maxsize=None)
def utm_projection() -> TransverseMercator:
    """Shared Transverse Mercator instance with the UTM scale factor."""
    return TransverseMercator(GeodeticConstants.UTM_SCALE_FACTOR.value)


@lru_cache(maxsize=None)
def ups_projection() -> PolarStereographic:
    """Shared Polar Stereographic instance with the UPS scale factor."""
    return PolarStereographic(GeodeticConstants.UPS_SCALE_FACTOR.value)
