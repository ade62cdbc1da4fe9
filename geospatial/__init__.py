"""
Geospatial Module for WGS84 Grid Coordinate Conversion.

All conversions between geodetic, UTM/UPS and MGRS representations go
through this package.

This module provides:
- Conformal latitude math kernel
- Transverse Mercator and Polar Stereographic projections
- UTM/UPS zone selection and coordinate assembly
- MGRS parsing and formatting
- Geodesic and haversine distances
"""

from geospatial.projections import (
    ConformalProjection,
    TransverseMercator,
    PolarStereographic,
    utm_projection,
    ups_projection,
)

from geospatial.zones import (
    standard_zone,
    latitude_band,
    central_meridian,
)

from geospatial.utm_ups import (
    ProjectedCoordinate,
    geodetic_to_projected,
    projected_to_geodetic,
    geodetic_to_projected_batch,
    projected_to_geodetic_batch,
)

from geospatial.mgrs import (
    MgrsCoordinate,
    parse_mgrs,
    format_mgrs,
    projected_to_mgrs,
    mgrs_to_projected,
    geodetic_to_mgrs,
    mgrs_to_geodetic,
)

from geospatial.distance_calculations import (
    GeodesicResult,
    geodesic_inverse,
    geodesic_distance,
    geodesic_distance_batch,
    haversine_distance,
)

__all__ = [
    # Projections
    "ConformalProjection",
    "TransverseMercator",
    "PolarStereographic",
    "utm_projection",
    "ups_projection",
    # Zones
    "standard_zone",
    "latitude_band",
    "central_meridian",
    # UTM/UPS
    "ProjectedCoordinate",
    "geodetic_to_projected",
    "projected_to_geodetic",
    "geodetic_to_projected_batch",
    "projected_to_geodetic_batch",
    # MGRS
    "MgrsCoordinate",
    "parse_mgrs",
    "format_mgrs",
    "projected_to_mgrs",
    "mgrs_to_projected",
    "geodetic_to_mgrs",
    "mgrs_to_geodetic",
    # Distances
    "GeodesicResult",
    "geodesic_inverse",
    "geodesic_distance",
    "geodesic_distance_batch",
    "haversine_distance",
]
