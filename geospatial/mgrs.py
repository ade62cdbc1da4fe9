"""
Military Grid Reference System (MGRS) Codec.

This module parses and formats MGRS strings on top of the UTM/UPS
coordinates of ``geospatial.utm_ups``.

Scientific Context
------------------
Domain: Military grid reference systems
Model: 100 km square identification over UTM/UPS

String Layout
-------------
::

    ZZ B C R EEEEE NNNNN
    |  | | | |     +-- northing digits within the square
    |  | | | +-------- easting digits within the square (same count)
    |  | | +---------- 100 km row letter
    |  | +------------ 100 km column letter
    |  +-------------- latitude band (C..X for UTM, A/B/Y/Z for UPS)
    +----------------- UTM zone, 1-2 digits (absent for UPS)

Precision ``p`` is the number of digits per axis. ``p = 0`` names a
100 km square; ``p = 5`` a 1 m square; ``p = 11`` a 1 µm square.
``p = -1`` stands for the grid zone designator alone ("18T", "Z").

Parsed strings decode to the CENTRE of the square they name, so
formatting the decoded coordinate at the same precision reproduces the
input. Formatting truncates, never rounds.

Row Letters and Latitude Bands
------------------------------
UTM row letters repeat every 2,000 km, so the band letter is needed to
pick the right cycle. ``utm_row`` resolves this with a window of rows
that are safely inside each band, plus four exceptional blocks where a
row straddles a band edge at the zone margin.

References
----------
- DMA TM 8358.1, Datums, Ellipsoids, Grids and Grid Reference Systems, 1990.
- NGA.SIG.0012_2.0.0_UTMUPS, 2014.
"""

import math
from dataclasses import dataclass, replace
from typing import Tuple

from common.errors import InvalidMgrsText, InvalidPrecision, InvalidProjectedCoordinate
from common.logging_config import get_logger
from common.types import GeodeticPoint
from geospatial.geomath import QD
from geospatial.utm_ups import (
    ProjectedCoordinate,
    geodetic_to_projected,
    projected_to_geodetic,
)
from geospatial.zones import (
    MAX_EASTING,
    MAX_NORTHING,
    MAXUTM_S_ROW,
    MIN_EASTING,
    MIN_NORTHING,
    MINUPS_N_IND,
    MINUPS_S_IND,
    MINUTM_N_ROW,
    MINUTMCOL,
    TILE,
    UPS,
    UPSEASTING,
    UTM_N_SHIFT,
    UTMEASTING,
    hemisphere_letter,
    latitude_band,
    quadrant_index,
)

logger = get_logger(__name__)


# =========================================================================
# Letter tables
# =========================================================================

HEMISPHERES: str = "SN"
UTMCOLS: Tuple[str, ...] = ("ABCDEFGH", "JKLMNPQR", "STUVWXYZ")
UTMROW: str = "ABCDEFGHJKLMNPQRSTUV"
UPSCOLS: Tuple[str, ...] = ("JKLPQRSTUXYZ", "ABCFGHJKLPQR", "RSTUXYZ", "ABCFGHJ")
UPSROWS: Tuple[str, ...] = ("ABCDEFGHJKLMNPQRSTUVWXYZ", "ABCDEFGHJKLMNP")
LATBAND: str = "CDEFGHJKLMNPQRSTUVWX"
UPSBAND: str = "ABYZ"
DIGITS: str = "0123456789"

BASE: int = 10
UTM_ROW_PERIOD: int = 20
UTM_EVEN_ROW_SHIFT: int = 5
MIN_PRECISION: int = -1
MAX_PRECISION: int = 11
MULT: int = 1_000_000  # 10**(MAX_PRECISION - 5), µm per metre

# Shift applied to a coordinate lying exactly on an excluded upper limit
EPS_M: float = 2.0 ** -(53 - 25)
# Latitudes closer to the equator than this take their band from the hemisphere
ANG_EPS: float = 2.0 ** -(53 - 7)


@dataclass(frozen=True)
class MgrsCoordinate:
    """An MGRS reference: a UTM/UPS coordinate plus a precision.

    Attributes
    ----------
    utm : ProjectedCoordinate
        The position. For a parsed string, the centre of the named square.
    precision : int
        Digits per axis in [-1, 11]; -1 keeps only the grid zone designator.

    Raises
    ------
    InvalidPrecision
        If precision is outside [-1, 11].

    Examples
    --------
    >>> m = parse_mgrs("18TWL856641113154")
    >>> m.precision
    6
    >>> str(m.with_precision(2))
    '18TWL8511'
    """
    utm: ProjectedCoordinate
    precision: int

    def __post_init__(self):
        if not MIN_PRECISION <= self.precision <= MAX_PRECISION:
            logger.debug(f"Rejected MGRS precision {self.precision}")
            raise InvalidPrecision(self.precision, MIN_PRECISION, MAX_PRECISION)

    @classmethod
    def parse(cls, text: str) -> 'MgrsCoordinate':
        return parse_mgrs(text)

    @property
    def zone(self) -> int:
        return self.utm.zone

    @property
    def is_north(self) -> bool:
        return self.utm.is_north

    @property
    def is_utm(self) -> bool:
        return self.utm.is_utm

    @property
    def easting(self) -> float:
        return self.utm.easting

    @property
    def northing(self) -> float:
        return self.utm.northing

    def with_precision(self, precision: int) -> 'MgrsCoordinate':
        """Same position at a different precision.

        Parameters
        ----------
        precision : int
            New precision in [1, 11].

        Raises
        ------
        InvalidPrecision
            If precision is outside [1, 11].
        """
        if not 1 <= precision <= MAX_PRECISION:
            raise InvalidPrecision(precision, 1, MAX_PRECISION)
        return replace(self, precision=precision)

    def to_geodetic(self) -> GeodeticPoint:
        return projected_to_geodetic(self.utm)

    def __str__(self) -> str:
        return format_mgrs(self)


def utm_row(band: int, col: int, row: int) -> int:
    """Resolve a UTM row letter index to an absolute row within a band.

    Parameters
    ----------
    band : int
        Latitude band index in [-10, 9].
    col : int
        Column index within the zone, 0-7.
    row : int
        Row letter index, 0-19, already corrected for zone parity.

    Returns
    -------
    int
        Absolute row in 100 km tiles counted from the equator (negative in
        the south), or ``MAXUTM_S_ROW`` if the block is not in the band.

    Notes
    -----
    Safe row windows by band (in tiles):

    ======  ======  ======
     band   minrow  maxrow
    ======  ======  ======
     -10     -90     -81
      -1      -9      -1
       0       0       8
       7      62      70
       8      71      79
       9      80      94
    ======  ======  ======

    Blocks just outside a window are still accepted where a band edge
    cuts a row at the zone margins (rows 70/71 and 79/80, mirrored in the
    south).
    """
    c = 100 * (8 * band + 4) / QD
    northp = band >= 0
    min_row = math.floor(c - 4.3 - 0.1 * northp) if band > -10 else -90
    max_row = math.floor(c + 4.4 - 0.1 * northp) if band < 9 else 94
    # Truncating division, matching the window table above
    base_row = int((min_row + max_row) / 2) - UTM_ROW_PERIOD // 2

    # Shift by the multiple of the period closest to the band centre
    row = (row - base_row + MAXUTM_S_ROW) % UTM_ROW_PERIOD + base_row

    if not min_row <= row <= max_row:
        safe_band = band if band >= 0 else -band - 1
        safe_row = row if row >= 0 else -row - 1
        safe_col = col if col < 4 else -col + 7
        if not ((safe_row == 70 and safe_band == 8 and safe_col >= 2)
                or (safe_row == 71 and safe_band == 7 and safe_col <= 2)
                or (safe_row == 79 and safe_band == 9 and safe_col >= 1)
                or (safe_row == 80 and safe_band == 8 and safe_col <= 1)):
            row = MAXUTM_S_ROW

    return row


def check_mgrs_coords(utmp: bool, northp: bool, x: float, y: float) -> Tuple[bool, float, float]:
    """Strict MGRS window check used before formatting.

    Limits are closed below and open above. A value exactly on an upper
    limit is shifted down by ``EPS_M``. UTM northings are folded into the
    hemisphere they belong to; a northing exactly on the equator stays in
    the south.

    Returns
    -------
    Tuple[bool, float, float]
        (northp, x, y), possibly adjusted.

    Raises
    ------
    InvalidProjectedCoordinate
        If easting or northing is outside the MGRS window.
    """
    ix = math.floor(x / TILE)
    iy = math.floor(y / TILE)
    ind = quadrant_index(utmp, northp)
    grid = "UTM" if utmp else "UPS"
    hemi = hemisphere_letter(northp)

    if not MIN_EASTING[ind] <= ix < MAX_EASTING[ind]:
        if ix == MAX_EASTING[ind] and x == MAX_EASTING[ind] * TILE:
            x -= EPS_M
        else:
            raise InvalidProjectedCoordinate(
                f"Easting {x / 1000:.2f}km not in MGRS/{grid} range for "
                f"{hemi} hemisphere [{MIN_EASTING[ind] * TILE / 1000:.2f}km, "
                f"{MAX_EASTING[ind] * TILE / 1000:.2f}km]"
            )

    if not MIN_NORTHING[ind] <= iy < MAX_NORTHING[ind]:
        if iy == MAX_NORTHING[ind] and y == MAX_NORTHING[ind] * TILE:
            y -= EPS_M
        else:
            raise InvalidProjectedCoordinate(
                f"Northing {y / 1000:.2f}km not in MGRS/{grid} range for "
                f"{hemi} hemisphere [{MIN_NORTHING[ind] * TILE / 1000:.2f}km, "
                f"{MAX_NORTHING[ind] * TILE / 1000:.2f}km]"
            )

    if utmp:
        if northp and iy < MINUTM_N_ROW:
            northp = False
            y += UTM_N_SHIFT
        elif not northp and iy >= MAXUTM_S_ROW:
            if y == MAXUTM_S_ROW * TILE:
                y -= EPS_M
            else:
                northp = True
                y -= UTM_N_SHIFT

    return northp, x, y


def _approximate_latitude(utm: ProjectedCoordinate) -> float:
    """Latitude good enough to pick the band letter of a UTM coordinate."""
    ys = (utm.northing if utm.is_north else utm.northing - UTM_N_SHIFT) / TILE
    if abs(ys) < 1:
        return 0.9 * ys

    lat_poleward = 0.901 * ys + (1 if ys > 0 else -1) * 0.135
    lat_eastward = 0.902 * ys * (1 - 1.85e-6 * ys**2)
    if latitude_band(lat_poleward) == latitude_band(lat_eastward):
        return lat_poleward

    logger.debug(f"Band estimate ambiguous for northing {utm.northing}; using inverse projection")
    return projected_to_geodetic(utm).latitude


def format_mgrs(mgrs: MgrsCoordinate) -> str:
    """Format an MGRS coordinate as text.

    Parameters
    ----------
    mgrs : MgrsCoordinate
        Coordinate and precision.

    Returns
    -------
    str
        The MGRS string, ``(2 if UTM else 0) + 3 + 2·precision``
        characters long. Digits are truncated, not rounded.

    Raises
    ------
    InvalidProjectedCoordinate
        If the coordinate is outside the MGRS window, or its latitude band
        cannot host the row it falls in.
    """
    utm = mgrs.utm
    prec = mgrs.precision
    utmp = utm.is_utm

    lat = _approximate_latitude(utm) if utmp else 0.0
    northp, x, y = check_mgrs_coords(utmp, utm.is_north, utm.easting, utm.northing)

    ix = math.floor(x * MULT)
    iy = math.floor(y * MULT)
    m = MULT * TILE
    xh = ix // m
    yh = iy // m

    if utmp:
        zonem = utm.zone - 1
        band = (0 if northp else -1) if abs(lat) < ANG_EPS else latitude_band(lat)
        col = xh - MINUTMCOL
        row = utm_row(band, col, yh % UTM_ROW_PERIOD)
        if row != yh - (MINUTM_N_ROW if northp else MAXUTM_S_ROW):
            logger.debug(f"Row {yh} not in band {LATBAND[10 + band]} for {utm}")
            raise InvalidProjectedCoordinate(
                f"Latitude {lat} is inconsistent with UTM coordinates"
            )
        letters = (
            f"{utm.zone:02d}"
            + LATBAND[10 + band]
            + UTMCOLS[zonem % 3][col]
            + UTMROW[(yh + (UTM_EVEN_ROW_SHIFT if zonem & 1 else 0)) % UTM_ROW_PERIOD]
        )
    else:
        eastp = xh >= UPSEASTING
        band = (2 if northp else 0) + (1 if eastp else 0)
        min_ind = MINUPS_N_IND if northp else MINUPS_S_IND
        letters = (
            UPSBAND[band]
            + UPSCOLS[band][xh - (UPSEASTING if eastp else min_ind)]
            + UPSROWS[int(northp)][yh - min_ind]
        )

    digits = ""
    if prec > 0:
        d = BASE ** (MAX_PRECISION - prec)
        digits = f"{(ix - m * xh) // d:0{prec}d}{(iy - m * yh) // d:0{prec}d}"

    text = letters + digits
    return text[:(2 if utmp else 0) + 3 + 2 * prec]


def parse_mgrs(text: str) -> MgrsCoordinate:
    """Parse an MGRS string.

    Parameters
    ----------
    text : str
        MGRS reference, case-insensitive, without spaces.

    Returns
    -------
    MgrsCoordinate
        Centre of the named square, with precision equal to the number of
        digits per axis (-1 for a bare grid zone designator).

    Raises
    ------
    InvalidMgrsText
        If the string is malformed; the message names the offending part.

    Examples
    --------
    >>> m = parse_mgrs("18TWL856641113154")
    >>> m.easting, m.northing
    (585664.15, 4511315.45)
    """
    if not text.isascii():
        raise InvalidMgrsText(f"MGRS string {text!r} contains unicode")

    mgrs = text.upper()
    length = len(mgrs)

    if mgrs.startswith("INV"):
        raise InvalidMgrsText(f"Starts with 'INV': {text}")

    p = 0
    zone = 0
    while p < length and mgrs[p] in DIGITS:
        zone = BASE * zone + DIGITS.index(mgrs[p])
        p += 1
    if p > 0 and not 1 <= zone <= 60:
        raise InvalidMgrsText(f"Zone {zone} not in [1,60]")
    if p > 2:
        raise InvalidMgrsText(f"More than 2 digits at start of MGRS {text[:p]}")
    if length - p < 1:
        raise InvalidMgrsText(f"Too short: {text}")

    utmp = zone != UPS
    zonem = zone - 1
    band_letters = LATBAND if utmp else UPSBAND
    iband = band_letters.find(mgrs[p])
    if iband < 0:
        raise InvalidMgrsText(
            f"Band letter {mgrs[p]} not in {'UTM' if utmp else 'UPS'} set {band_letters}"
        )
    p += 1
    northp = iband >= (10 if utmp else 2)

    if p == length:
        # Grid zone designator only: pick a representative square
        deg = UTM_N_SHIFT / (QD * TILE)
        if utmp:
            # Zone 31V is narrowed by the Norway exception
            x = TILE * (4 if zone == 31 and iband == 17 else UTMEASTING)
            y = math.floor(8 * (iband - 9.5) * deg + 0.5) * TILE + (0 if northp else UTM_N_SHIFT)
        else:
            x = ((1 if iband & 1 else -1) * math.floor(4 * deg + 0.5) + UPSEASTING) * TILE
            y = UPSEASTING * TILE
        return MgrsCoordinate(ProjectedCoordinate(zone, northp, x, y), -1)

    if length - p == 1:
        raise InvalidMgrsText(f"Missing row letter in {text}")

    col_letters = UTMCOLS[zonem % 3] if utmp else UPSCOLS[iband]
    row_letters = UTMROW if utmp else UPSROWS[int(northp)]

    icol = col_letters.find(mgrs[p])
    if icol < 0:
        where = f"zone {mgrs[:p - 1]}" if utmp else f"UPS band {mgrs[p - 1]}"
        raise InvalidMgrsText(f"Column letter {mgrs[p]} not in {where} set {col_letters}")
    p += 1

    irow = row_letters.find(mgrs[p])
    if irow < 0:
        where = "UTM" if utmp else f"UPS {HEMISPHERES[int(northp)]}"
        raise InvalidMgrsText(f"Row letter {mgrs[p]} not in {where} set {row_letters}")
    p += 1

    if utmp:
        if zonem & 1:
            irow = (irow + UTM_ROW_PERIOD - UTM_EVEN_ROW_SHIFT) % UTM_ROW_PERIOD
        iband -= 10
        irow = utm_row(iband, icol, irow)
        if irow == MAXUTM_S_ROW:
            raise InvalidMgrsText(f"Block {mgrs[p - 2:p]} not in zone/band {mgrs[:p - 2]}")
        irow = irow if northp else irow + MAXUTM_S_ROW
        icol += MINUTMCOL
    else:
        min_ind = MINUPS_N_IND if northp else MINUPS_S_IND
        icol += UPSEASTING if iband & 1 else min_ind
        irow += min_ind

    tail = mgrs[p:]
    if any(ch not in DIGITS for ch in tail):
        raise InvalidMgrsText(f"Encountered a non-digit in {tail}")
    if len(tail) % 2:
        raise InvalidMgrsText(f"Not an even number of digits in {tail}")
    prec = len(tail) // 2
    if prec > MAX_PRECISION:
        raise InvalidMgrsText(f"More than {2 * MAX_PRECISION} digits in {tail}")

    # Integer arithmetic keeps every digit exact until the final division
    x, y, unit = icol, irow, 1
    for i in range(prec):
        unit *= BASE
        x = BASE * x + DIGITS.index(tail[i])
        y = BASE * y + DIGITS.index(tail[i + prec])

    # Centre of the square
    unit *= 2
    x = 2 * x + 1
    y = 2 * y + 1

    return MgrsCoordinate(
        ProjectedCoordinate(zone, northp, TILE * x / unit, TILE * y / unit),
        prec
    )


def projected_to_mgrs(coord: ProjectedCoordinate, precision: int) -> MgrsCoordinate:
    """Attach an MGRS precision to a UTM/UPS coordinate.

    Raises
    ------
    InvalidPrecision
        If precision is outside [-1, 11].
    """
    return MgrsCoordinate(coord, precision)


def mgrs_to_projected(mgrs: MgrsCoordinate) -> ProjectedCoordinate:
    """UTM/UPS coordinate of an MGRS reference (the square centre if parsed)."""
    return mgrs.utm


def geodetic_to_mgrs(point: GeodeticPoint, precision: int) -> MgrsCoordinate:
    """Convert a geodetic position to MGRS at the given precision."""
    return projected_to_mgrs(geodetic_to_projected(point), precision)


def mgrs_to_geodetic(mgrs: MgrsCoordinate) -> GeodeticPoint:
    """Convert an MGRS reference to a geodetic position."""
    return projected_to_geodetic(mgrs.utm)
