"""Coordinate Reference System (CRS) constants and checks used throughout spatialselect.

This module defines the standard CRS objects used for geographic transformations:
- LATLON_CRS: WGS84 geographic coordinates (EPSG:4326)
- XY_CRS: Web Mercator projected coordinates (EPSG:3857)

and the helpers that turn user input into a pyproj CRS and enforce the
alignment rules every spatial comparison depends on. All failures are reported
as CRSMismatchError.
"""

from __future__ import annotations

from typing import Any, Optional

from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError

from spatialselect.utils.exceptions import CRSMismatchError

# WGS84 latitude/longitude coordinate system (EPSG:4326)
# Standard GPS coordinates in decimal degrees
LATLON_CRS = CRS(4326)

# Web Mercator projected coordinate system (EPSG:3857)
# Coordinates are in meters (easting, northing)
XY_CRS = CRS(3857)


def as_crs(value: Any) -> CRS:
    """
    Parse a user supplied CRS into a pyproj CRS.

    Args:
        value: A pyproj.CRS, an EPSG integer, an authority string such as
            'EPSG:32618', a proj string or WKT

    Returns:
        The parsed pyproj CRS

    Raises:
        CRSMismatchError: If the value is None or cannot be parsed

    Examples:
        >>> as_crs(32618).to_epsg()
        32618
        >>> as_crs('EPSG:4326') == LATLON_CRS
        True
    """
    if value is None:
        raise CRSMismatchError("coordinate reference system is undefined")
    if isinstance(value, CRS):
        return value
    try:
        return CRS.from_user_input(value)
    except (CRSError, ProjError) as e:
        raise CRSMismatchError(
            f"Could not parse coordinate reference system: {value}"
        ) from e


def crs_equals(a: Optional[CRS], b: Optional[CRS]) -> bool:
    """
    Check whether two CRS are identical.

    Undefined CRS never match anything, including another undefined CRS.
    """
    if a is None or b is None:
        return False
    return as_crs(a) == as_crs(b)


def ensure_projected(crs: Any) -> CRS:
    """
    Require a projected (linear unit) CRS.

    Buffering or measuring a metric distance in a geographic CRS gives results
    in degrees, so callers that work in meters check their CRS with this first.

    Raises:
        CRSMismatchError: If the CRS is undefined or not projected
    """
    parsed = as_crs(crs)
    if not parsed.is_projected:
        raise CRSMismatchError(
            f"a projected crs is required but got {parsed.to_string()}; "
            "reproject the data first (see utm_crs_for)"
        )
    return parsed


def transformer_between(source: Any, target: Any) -> Transformer:
    """
    Build an x/y ordered transformer between two CRS.

    Raises:
        CRSMismatchError: If either CRS is undefined or no transformation exists
    """
    source_crs = as_crs(source)
    target_crs = as_crs(target)
    try:
        return Transformer.from_crs(source_crs, target_crs, always_xy=True)
    except ProjError as e:
        raise CRSMismatchError(
            f"no transformation from {source_crs.to_string()} to {target_crs.to_string()}"
        ) from e


def estimate_utm_zone(lon: float) -> int:
    """
    Estimate the UTM zone number (1-60) for a longitude in degrees.

    Examples:
        >>> estimate_utm_zone(-75.16)  # Philadelphia
        18
    """
    # zones are 6 degrees wide, starting at -180
    zone = int((lon + 180) / 6) + 1
    return min(max(zone, 1), 60)


def utm_crs_for(lon: float, lat: float) -> CRS:
    """
    Pick the WGS84 / UTM projected CRS covering a location.

    Args:
        lon: Longitude in decimal degrees
        lat: Latitude in decimal degrees

    Returns:
        EPSG:326xx in the northern hemisphere, EPSG:327xx in the southern one

    Examples:
        >>> utm_crs_for(-75.16522, 39.95258).to_epsg()
        32618
    """
    zone = estimate_utm_zone(lon)
    base = 32600 if lat >= 0 else 32700
    return CRS(base + zone)
