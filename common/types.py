"""
Type Definitions for Geographic Positions.

This module defines the geodetic point used at the boundary of the
conversion engine. Grid types (UTM/UPS and MGRS) live next to the code
that produces them in ``geospatial``.

Design Rationale
----------------
Positions are validated once, at construction. Every downstream function
may then assume a finite latitude in [-90, 90] and a longitude in
[-180, 180) without re-checking.
"""

from dataclasses import dataclass
from typing import Tuple
import numpy as np

from common.constants import GeodeticConstants
from common.errors import InvalidCoordinateRange


@dataclass(frozen=True)
class GeodeticPoint:
    """A WGS84 geodetic position in DEGREES.

    Attributes
    ----------
    latitude : float
        Geodetic latitude in degrees. Range: [-90, 90].
    longitude : float
        Geodetic longitude in degrees. Range: [-180, 180).

    Raises
    ------
    InvalidCoordinateRange
        If either value is non-finite or outside its range.

    Examples
    --------
    >>> p = GeodeticPoint(40.748333, -73.985278)
    >>> p.is_north
    True
    >>> str(p)
    '40.748333 -73.985278'
    """
    latitude: float  # degrees
    longitude: float  # degrees

    def __post_init__(self):
        """Validate coordinate ranges."""
        lat, lon = self.latitude, self.longitude
        if not np.isfinite(lat) or not -90.0 <= lat <= 90.0:
            raise InvalidCoordinateRange(
                f"Latitude {lat} outside of valid range [-90, 90]"
            )
        if not np.isfinite(lon) or not -180.0 <= lon < 180.0:
            raise InvalidCoordinateRange(
                f"Longitude {lon} outside of valid range [-180, 180)"
            )
        # Store plain floats so numpy scalars do not leak into repr/equality
        object.__setattr__(self, "latitude", float(lat))
        object.__setattr__(self, "longitude", float(lon))

    @property
    def is_north(self) -> bool:
        """Whether the point lies in the northern hemisphere (lat >= 0)."""
        return self.latitude >= 0.0

    def to_radians(self) -> Tuple[float, float]:
        """Return (latitude, longitude) in radians."""
        return float(np.radians(self.latitude)), float(np.radians(self.longitude))

    @classmethod
    def from_radians(cls, lat_rad: float, lon_rad: float) -> 'GeodeticPoint':
        """Create a point from radians (convenience constructor).

        Parameters
        ----------
        lat_rad : float
            Latitude in radians.
        lon_rad : float
            Longitude in radians.

        Returns
        -------
        GeodeticPoint
            Point with internally stored degrees.
        """
        return cls(
            latitude=float(np.degrees(lat_rad)),
            longitude=float(np.degrees(lon_rad))
        )

    def haversine_to(self, other: 'GeodeticPoint') -> float:
        """Great-circle distance to another point on a spherical Earth.

        Parameters
        ----------
        other : GeodeticPoint
            The second point.

        Returns
        -------
        float
            Distance in meters using the IUGG mean radius.

        Notes
        -----
        The spherical model is off by up to ~0.5% from the ellipsoidal
        geodesic; use ``geospatial.geodesic_distance`` when that matters.
        """
        R = GeodeticConstants.EARTH_MEAN_RADIUS.value
        lat1, lon1 = self.to_radians()
        lat2, lon2 = other.to_radians()

        a = (np.sin((lat2 - lat1) / 2)**2
             + np.cos(lat1) * np.cos(lat2) * np.sin((lon2 - lon1) / 2)**2)
        return float(2 * R * np.arcsin(np.sqrt(a)))

    def __str__(self) -> str:
        return f"{self.latitude!r} {self.longitude!r}"
