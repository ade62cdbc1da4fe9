"""
Error Types for Coordinate Conversion.

Every failure raised by the conversion engine derives from
``GeoConvertError``, which itself is a ``ValueError``. Callers that only
care about "bad input" can keep catching ``ValueError``; callers that need
to distinguish the cause catch the specific subclass.
"""

from typing import Optional


class GeoConvertError(ValueError):
    """Base class for all coordinate conversion failures."""


class InvalidCoordinateRange(GeoConvertError):
    """Latitude or longitude outside its valid domain, or not finite."""


class InvalidZone(GeoConvertError):
    """UTM zone number outside [0, 60] (0 denotes UPS).

    Attributes
    ----------
    zone : int
        The rejected zone number.
    """

    def __init__(self, zone: int, message: Optional[str] = None):
        self.zone = zone
        super().__init__(message or f"Zone {zone} not in range [0, 60]")


class InvalidPrecision(GeoConvertError):
    """MGRS precision outside the accepted range.

    Attributes
    ----------
    precision : int
        The rejected precision.
    """

    def __init__(self, precision: int, low: int = -1, high: int = 11):
        self.precision = precision
        super().__init__(
            f"MGRS precision {precision} not in range [{low}, {high}]"
        )


class InvalidProjectedCoordinate(GeoConvertError):
    """Easting or northing outside the window allowed for its zone."""


class InvalidMgrsText(GeoConvertError):
    """Malformed MGRS string."""
