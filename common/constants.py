"""
Geodetic Constants for Grid Coordinate Conversion.

This module provides the ellipsoid and grid constants with their
uncertainty bounds and sources. All constants are defined with SI units
and traceable to authoritative sources.

References
----------
- WGS84 parameters: NIMA TR8350.2, Third Edition, 2000
- UTM/UPS scale factors: DMA TM 8358.2, The Universal Grids, 1989
- Mean radius: Moritz, H. (2000). Geodetic Reference System 1980.
"""

from dataclasses import dataclass
from typing import Final
import numpy as np


@dataclass(frozen=True)
class Constant:
    """A physical constant with uncertainty and provenance.

    Attributes
    ----------
    value : float
        The nominal value of the constant.
    uncertainty : float
        The standard uncertainty (1-sigma) of the constant.
    unit : str
        The SI unit of the constant.
    source : str
        Reference for the constant value.
    description : str
        Human-readable description of the constant.
    """
    value: float
    uncertainty: float
    unit: str
    source: str
    description: str


class GeodeticConstants:
    """Registry of geodetic constants used throughout the library.

    Earth Geometry (WGS84)
    ----------------------
    These constants define the reference ellipsoid used for every
    projection. Only WGS84 is supported.

    Grid Scale Factors
    ------------------
    Central scale factors of the two conformal projections underlying
    the universal grids.
    """

    # =========================================================================
    # WGS84 Ellipsoid Parameters
    # Reference: NIMA TR8350.2, Third Edition, 2000
    # =========================================================================

    EARTH_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,  # Defined exactly
        unit="m",
        source="WGS84, NIMA TR8350.2",
        description="Semi-major axis (equatorial radius) of WGS84 ellipsoid"
    )

    EARTH_FLATTENING: Final[Constant] = Constant(
        value=1.0 / 298.257223563,
        uncertainty=0.0,  # Defined exactly
        unit="dimensionless",
        source="WGS84, NIMA TR8350.2",
        description="Flattening of WGS84 ellipsoid: f = (a - b) / a"
    )

    EARTH_MEAN_RADIUS: Final[Constant] = Constant(
        value=6_371_008.8,
        uncertainty=0.1,
        unit="m",
        source="IUGG mean radius",
        description="Mean radius of Earth (spherical approximations only)"
    )

    # =========================================================================
    # Universal Grid Scale Factors
    # Reference: DMA TM 8358.2
    # =========================================================================

    UTM_SCALE_FACTOR: Final[Constant] = Constant(
        value=0.9996,
        uncertainty=0.0,  # Defined exactly
        unit="dimensionless",
        source="DMA TM 8358.2",
        description="Central meridian scale factor of UTM"
    )

    UPS_SCALE_FACTOR: Final[Constant] = Constant(
        value=0.994,
        uncertainty=0.0,  # Defined exactly
        unit="dimensionless",
        source="DMA TM 8358.2",
        description="Scale factor at the pole of UPS"
    )


@dataclass(frozen=True)
class EllipsoidParameters:
    """Parameters defining a reference ellipsoid.

    Attributes
    ----------
    a : float
        Semi-major axis (equatorial radius) in meters.
    f : float
        Flattening: f = (a - b) / a
    name : str
        Identifier for the ellipsoid.

    Derived Parameters
    ------------------
    b : float
        Semi-minor axis (polar radius) in meters.
    e2 : float
        First eccentricity squared: e² = f(2 - f)
    es : float
        Eccentricity carrying the sign of f: sign(f)·sqrt(|e²|)
    n : float
        Third flattening: n = f / (2 - f)
    """
    a: float
    f: float
    name: str

    @property
    def b(self) -> float:
        """Semi-minor axis in meters."""
        return self.a * (1 - self.f)

    @property
    def e2(self) -> float:
        """First eccentricity squared."""
        return self.f * (2 - self.f)

    @property
    def es(self) -> float:
        """Signed eccentricity."""
        return float(np.copysign(np.sqrt(np.abs(self.e2)), self.f))

    @property
    def n(self) -> float:
        """Third flattening."""
        return self.f / (2 - self.f)


# WGS84 ellipsoid - the only reference supported by this library
WGS84Ellipsoid = EllipsoidParameters(
    a=GeodeticConstants.EARTH_SEMI_MAJOR_AXIS.value,
    f=GeodeticConstants.EARTH_FLATTENING.value,
    name="WGS84"
)
