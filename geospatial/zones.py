"""
UTM/UPS Zone Selection and Grid Constants.

This module owns the integer geometry of the universal grids: 100 km
tiles, the legal easting/northing windows for each hemisphere and
projection, zone selection with the Norway and Svalbard exceptions, and
latitude bands.

Scientific Context
------------------
Domain: Military grid reference systems
Model: UTM zones 1-60 (6° wide) between 80°S and 84°N, UPS caps poleward

Grid Geometry
-------------
All windows below are expressed in tiles of 100 km. A quadrant index
``ind = 2·utm + north`` selects the row of each table:

=====  =========  ============  =============  ==============
 ind    grid       false E/N     easting        northing
=====  =========  ============  =============  ==============
  0     UPS S      20 / 20       [8, 32]        [8, 32]
  1     UPS N      20 / 20       [13, 27]       [13, 27]
  2     UTM S       5 / 100      [1, 9]         [10, 195]
  3     UTM N       5 / 0        [1, 9]         [-90, 95]
=====  =========  ============  =============  ==============

The UTM windows overlap the equator by 10 tiles in both directions so
that points can be carried in the "wrong" hemisphere.

References
----------
- DMA TM 8358.2, The Universal Grids: UTM and UPS, 1989.
- NGA.SIG.0012_2.0.0_UTMUPS, 2014.
"""

import math
from typing import Tuple
import numpy as np

from common.errors import InvalidProjectedCoordinate, InvalidZone
from common.logging_config import get_logger
from geospatial.geomath import ang_normalize

logger = get_logger(__name__)


# =========================================================================
# Grid constants
# =========================================================================

TILE: int = 100_000  # metres

UPS: int = 0
MINUTMZONE: int = 1
MAXUTMZONE: int = 60
MINZONE: int = UPS
MAXZONE: int = MAXUTMZONE

MINUTMCOL: int = 1
MAXUTMCOL: int = 9
MINUTM_S_ROW: int = 10
MAXUTM_S_ROW: int = 100
MINUTM_N_ROW: int = 0
MAXUTM_N_ROW: int = 95
MINUPS_S_IND: int = 8
MAXUPS_S_IND: int = 32
MINUPS_N_IND: int = 13
MAXUPS_N_IND: int = 27

UPSEASTING: int = 20  # tiles
UTMEASTING: int = 5   # tiles
UTM_N_SHIFT: int = (MAXUTM_S_ROW - MINUTM_N_ROW) * TILE  # 10,000 km

# Indexed by quadrant_index(utmp, northp); first two in metres, rest in tiles
FALSE_EASTING: Tuple[int, ...] = (
    UPSEASTING * TILE, UPSEASTING * TILE,
    UTMEASTING * TILE, UTMEASTING * TILE,
)
FALSE_NORTHING: Tuple[int, ...] = (
    UPSEASTING * TILE, UPSEASTING * TILE,
    MAXUTM_S_ROW * TILE, MINUTM_N_ROW * TILE,
)
MIN_EASTING: Tuple[int, ...] = (MINUPS_S_IND, MINUPS_N_IND, MINUTMCOL, MINUTMCOL)
MAX_EASTING: Tuple[int, ...] = (MAXUPS_S_IND, MAXUPS_N_IND, MAXUTMCOL, MAXUTMCOL)
MIN_NORTHING: Tuple[int, ...] = (
    MINUPS_S_IND, MINUPS_N_IND,
    MINUTM_S_ROW, MINUTM_S_ROW - MAXUTM_S_ROW,
)
MAX_NORTHING: Tuple[int, ...] = (
    MAXUPS_S_IND, MAXUPS_N_IND,
    MAXUTM_N_ROW + MAXUTM_S_ROW, MAXUTM_N_ROW,
)

# UTM is restricted to [-80, 84)
UTM_MIN_LATITUDE: float = -80.0
UTM_MAX_LATITUDE: float = 84.0


def quadrant_index(utmp: bool, northp: bool) -> int:
    """Row of the grid tables for a projection/hemisphere pair."""
    return (2 if utmp else 0) + (1 if northp else 0)


def hemisphere_letter(northp: bool) -> str:
    return "N" if northp else "S"


def validate_zone(zone: int) -> int:
    """Return ``zone`` if it is UPS (0) or a UTM zone 1-60.

    Raises
    ------
    InvalidZone
        For any other value.
    """
    if not MINZONE <= zone <= MAXZONE:
        logger.debug(f"Rejected zone {zone}")
        raise InvalidZone(zone)
    return zone


def latitude_band(lat: float) -> int:
    """Latitude band index in [-10, 9] (C..X), 8° each, X extended to 84°.

    Parameters
    ----------
    lat : float
        Latitude in degrees.

    Returns
    -------
    int
        ``(floor(lat) + 80) // 8 - 10`` clamped to [-10, 9].
    """
    lat_int = math.floor(lat)
    return max(-10, min(9, (lat_int + 80) // 8 - 10))


def central_meridian(zone: int) -> float:
    """Central meridian of a UTM zone in degrees."""
    return 6.0 * zone - 183.0


def standard_zone(lat: float, lon: float) -> int:
    """Select the standard UTM zone, or UPS, for a geodetic position.

    Parameters
    ----------
    lat : float
        Latitude in degrees.
    lon : float
        Longitude in degrees (any range; it is normalized).

    Returns
    -------
    int
        0 for UPS, otherwise a UTM zone in [1, 60].

    Notes
    -----
    Two exceptions to the regular 6° zones apply:

    - Norway: band V (56°N-64°N) widens zone 32 west to 3°E.
    - Svalbard: band X (72°N-84°N) uses only the odd zones 31, 33, 35, 37,
      each 12° wide, between 0°E and 42°E.
    """
    if not UTM_MIN_LATITUDE <= lat < UTM_MAX_LATITUDE:
        return UPS

    lon_int = math.floor(ang_normalize(lon))
    if lon_int == 180:
        lon_int = -180
    zone = (lon_int + 186) // 6
    band = latitude_band(lat)

    if band == 7 and zone == 31 and lon_int >= 3:
        logger.debug(f"Norway exception at ({lat}, {lon}): zone 31 -> 32")
        zone = 32
    elif band == 9 and 0 <= lon_int < 42:
        svalbard = 2 * ((lon_int + 183) // 12) + 1
        logger.debug(f"Svalbard exception at ({lat}, {lon}): zone {zone} -> {svalbard}")
        zone = svalbard

    return zone


def check_coords(utmp: bool, northp: bool, x: float, y: float) -> None:
    """Check that an easting/northing lies within the window of its grid.

    The window is the legal MGRS range widened by one tile on every side,
    which admits points slightly outside the nominal zone.

    Parameters
    ----------
    utmp : bool
        True for UTM, False for UPS.
    northp : bool
        Hemisphere.
    x, y : float
        Easting and northing in metres (false offsets included).

    Raises
    ------
    InvalidProjectedCoordinate
        If either value is non-finite or outside the window.
    """
    grid = "UTM" if utmp else "UPS"
    hemi = hemisphere_letter(northp)

    if not (np.isfinite(x) and np.isfinite(y)):
        logger.debug(f"Rejected non-finite {grid} coordinate ({x}, {y})")
        raise InvalidProjectedCoordinate(
            f"Easting/northing ({x}, {y}) not finite for {grid}"
        )

    ind = quadrant_index(utmp, northp)
    slop = TILE

    for axis, value, lo, hi in (
        ("Easting", x, MIN_EASTING[ind], MAX_EASTING[ind]),
        ("Northing", y, MIN_NORTHING[ind], MAX_NORTHING[ind]),
    ):
        low = lo * TILE - slop
        high = hi * TILE + slop
        if value < low or value > high:
            logger.debug(f"Rejected {axis.lower()} {value} for {grid} {hemi}")
            raise InvalidProjectedCoordinate(
                f"{axis} {value / 1000:.2f}km not in {grid} range for "
                f"{hemi} hemisphere [{low / 1000:.2f}km, {high / 1000:.2f}km]"
            )
