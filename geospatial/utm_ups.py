"""
UTM/UPS Coordinate Assembly.

This module converts between geodetic positions and projected grid
coordinates: Transverse Mercator about the zone's central meridian for
UTM, Polar Stereographic about the nearer pole for UPS, plus the false
easting and northing of the quadrant.

Scientific Context
------------------
Domain: Grid reference systems
Model: UTM (k0 = 0.9996) and UPS (k0 = 0.994) on WGS84

Conventions
-----------
- Hemisphere is chosen by the sign of latitude; the equator is north.
- Zone 0 denotes UPS.
- UTM false easting 500 km; false northing 0 (north) or 10,000 km (south).
- UPS false easting and northing 2,000 km.

References
----------
- DMA TM 8358.2, The Universal Grids: UTM and UPS, 1989.
- EPSG Geodetic Parameter Dataset: codes 32601-32660, 32701-32760,
  32661 and 32761.
"""

from dataclasses import dataclass
from typing import Tuple
import numpy as np
from numpy.typing import NDArray

from pyproj import CRS

from common.errors import InvalidCoordinateRange
from common.logging_config import get_logger
from common.types import GeodeticPoint
from geospatial.geomath import HD
from geospatial.projections import ups_projection, utm_projection
from geospatial.zones import (
    FALSE_EASTING,
    FALSE_NORTHING,
    UPS,
    central_meridian,
    check_coords,
    hemisphere_letter,
    quadrant_index,
    standard_zone,
    validate_zone,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProjectedCoordinate:
    """A UTM or UPS grid coordinate.

    Attributes
    ----------
    zone : int
        UTM zone in [1, 60], or 0 for UPS.
    is_north : bool
        Hemisphere of the coordinate.
    easting : float
        Easting in METERS, false easting included.
    northing : float
        Northing in METERS, false northing included.

    Raises
    ------
    InvalidZone
        If the zone is outside [0, 60].
    InvalidProjectedCoordinate
        If easting or northing is non-finite or more than one 100 km tile
        outside the legal window of the zone and hemisphere.

    Examples
    --------
    >>> c = ProjectedCoordinate(18, True, 585664.121, 4511315.422)
    >>> c.epsg_code
    32618
    """
    zone: int
    is_north: bool
    easting: float  # m
    northing: float  # m

    def __post_init__(self):
        """Validate zone and coordinate window."""
        validate_zone(self.zone)
        check_coords(self.zone != UPS, self.is_north, self.easting, self.northing)
        object.__setattr__(self, "zone", int(self.zone))
        object.__setattr__(self, "is_north", bool(self.is_north))
        object.__setattr__(self, "easting", float(self.easting))
        object.__setattr__(self, "northing", float(self.northing))

    @property
    def is_utm(self) -> bool:
        return self.zone != UPS

    @property
    def hemisphere(self) -> str:
        """'N' or 'S'."""
        return hemisphere_letter(self.is_north)

    @property
    def epsg_code(self) -> int:
        """EPSG code of the WGS84 UTM/UPS system this coordinate lives in."""
        if self.is_utm:
            return (32600 if self.is_north else 32700) + self.zone
        return 32661 if self.is_north else 32761

    def to_crs(self) -> CRS:
        """Coordinate reference system for use with pyproj."""
        return CRS.from_epsg(self.epsg_code)

    def to_geodetic(self) -> GeodeticPoint:
        return projected_to_geodetic(self)

    def __str__(self) -> str:
        return f"{self.zone}{self.hemisphere.lower()} {self.easting} {self.northing}"


def geodetic_to_projected(point: GeodeticPoint) -> ProjectedCoordinate:
    """Convert a geodetic position to its standard UTM/UPS coordinate.

    Parameters
    ----------
    point : GeodeticPoint
        Position in degrees.

    Returns
    -------
    ProjectedCoordinate
        Coordinate in the standard zone for the position.

    Raises
    ------
    InvalidProjectedCoordinate
        Only if the projected result falls outside its window, which cannot
        happen for a valid GeodeticPoint.

    Examples
    --------
    >>> c = geodetic_to_projected(GeodeticPoint(40.748333, -73.985278))
    >>> c.zone, c.is_north
    (18, True)
    """
    lat, lon = point.latitude, point.longitude
    northp = lat >= 0
    zone = standard_zone(lat, lon)
    utmp = zone != UPS

    if utmp:
        x, y = utm_projection().forward(central_meridian(zone), lat, lon)
    else:
        x, y = ups_projection().forward(northp, lat, lon)

    ind = quadrant_index(utmp, northp)
    x += FALSE_EASTING[ind]
    y += FALSE_NORTHING[ind]

    return ProjectedCoordinate(zone, northp, x, y)


def projected_to_geodetic(coord: ProjectedCoordinate) -> GeodeticPoint:
    """Convert a UTM/UPS coordinate back to a geodetic position.

    Parameters
    ----------
    coord : ProjectedCoordinate
        Grid coordinate.

    Returns
    -------
    GeodeticPoint
        Position in degrees. A longitude of exactly +180 is returned as -180.
    """
    ind = quadrant_index(coord.is_utm, coord.is_north)
    x = coord.easting - FALSE_EASTING[ind]
    y = coord.northing - FALSE_NORTHING[ind]

    if coord.is_utm:
        lat, lon = utm_projection().reverse(central_meridian(coord.zone), x, y)
    else:
        lat, lon = ups_projection().reverse(coord.is_north, x, y)

    if lon == HD:
        lon = -HD
    return GeodeticPoint(lat, lon)


def geodetic_to_projected_batch(
    lats: NDArray[np.float64],
    lons: NDArray[np.float64]
) -> Tuple[NDArray[np.int64], NDArray[np.bool_], NDArray[np.float64], NDArray[np.float64]]:
    """Convert arrays of positions to UTM/UPS.

    A convenience loop over :func:`geodetic_to_projected`; each element
    gets its own zone, so the work is not vectorised.

    Parameters
    ----------
    lats, lons : ndarray
        Latitudes and longitudes in degrees; broadcast against each other.

    Returns
    -------
    Tuple[ndarray, ndarray, ndarray, ndarray]
        (zones, is_north, eastings, northings), each with the broadcast shape.

    Raises
    ------
    InvalidCoordinateRange
        On the first invalid position; its flat index is included in the
        message.
    """
    lats, lons = np.broadcast_arrays(np.asarray(lats, dtype=np.float64),
                                     np.asarray(lons, dtype=np.float64))
    shape = lats.shape
    zones = np.empty(shape, dtype=np.int64)
    norths = np.empty(shape, dtype=np.bool_)
    eastings = np.empty(shape, dtype=np.float64)
    northings = np.empty(shape, dtype=np.float64)

    for i, (lat, lon) in enumerate(zip(lats.ravel(), lons.ravel())):
        try:
            coord = geodetic_to_projected(GeodeticPoint(lat, lon))
        except InvalidCoordinateRange as exc:
            raise InvalidCoordinateRange(f"Position {i}: {exc}") from exc
        idx = np.unravel_index(i, shape)
        zones[idx] = coord.zone
        norths[idx] = coord.is_north
        eastings[idx] = coord.easting
        northings[idx] = coord.northing

    logger.debug(f"Projected {lats.size} positions")
    return zones, norths, eastings, northings


def projected_to_geodetic_batch(
    zones: NDArray[np.int64],
    norths: NDArray[np.bool_],
    eastings: NDArray[np.float64],
    northings: NDArray[np.float64]
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Convert arrays of UTM/UPS coordinates to geodetic degrees.

    A convenience loop over :func:`projected_to_geodetic`, one element at a
    time.

    Returns
    -------
    Tuple[ndarray, ndarray]
        (latitudes, longitudes) with the broadcast shape of the inputs.
    """
    zones, norths, eastings, northings = np.broadcast_arrays(
        np.asarray(zones), np.asarray(norths),
        np.asarray(eastings, dtype=np.float64), np.asarray(northings, dtype=np.float64)
    )
    lats = np.empty(zones.shape, dtype=np.float64)
    lons = np.empty(zones.shape, dtype=np.float64)

    for idx in np.ndindex(zones.shape):
        point = projected_to_geodetic(ProjectedCoordinate(
            int(zones[idx]), bool(norths[idx]), eastings[idx], northings[idx]
        ))
        lats[idx] = point.latitude
        lons[idx] = point.longitude

    return lats, lons
