"""
Common utilities and infrastructure for the grid coordinate library.

This package provides foundational components used across all modules:
- Geodetic constants with provenance
- The validated geodetic point type
- Error hierarchy
- Logging configuration
"""

from common.constants import (
    Constant,
    GeodeticConstants,
    EllipsoidParameters,
    WGS84Ellipsoid,
)
from common.errors import (
    GeoConvertError,
    InvalidCoordinateRange,
    InvalidZone,
    InvalidPrecision,
    InvalidProjectedCoordinate,
    InvalidMgrsText,
)
from common.types import GeodeticPoint
from common.logging_config import get_logger

__all__ = [
    "Constant",
    "GeodeticConstants",
    "EllipsoidParameters",
    "WGS84Ellipsoid",
    "GeoConvertError",
    "InvalidCoordinateRange",
    "InvalidZone",
    "InvalidPrecision",
    "InvalidProjectedCoordinate",
    "InvalidMgrsText",
    "GeodeticPoint",
    "get_logger",
]
