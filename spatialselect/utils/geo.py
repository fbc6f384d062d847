from __future__ import annotations

import math
from typing import Any, Tuple

from shapely.geometry import Point
from shapely.geometry.base import BaseGeometry
from shapely.ops import transform

from spatialselect.utils.crs import crs_equals, transformer_between
from spatialselect.utils.exceptions import CRSMismatchError


def reproject_xy(x: float, y: float, source_crs: Any, target_crs: Any) -> Tuple[float, float]:
    """
    Transform a single x/y pair between two coordinate reference systems.

    The pair is always given and returned in x/y (easting/northing, or
    longitude/latitude) order regardless of the axis order the CRS declares.

    Args:
        x: The x-coordinate (longitude or easting)
        y: The y-coordinate (latitude or northing)
        source_crs: The CRS the pair is expressed in
        target_crs: The CRS to express the pair in

    Returns:
        A tuple of (x, y) in the target CRS

    Raises:
        CRSMismatchError: If either CRS is undefined, no transformation exists,
            or the transformation produces non-finite values

    Examples:
        >>> # Philadelphia City Hall into UTM zone 18N
        >>> x, y = reproject_xy(-75.16522, 39.95258, 'EPSG:4326', 'EPSG:32618')
        >>> print(f"X: {x:.0f}m, Y: {y:.0f}m")
    """
    transformer = transformer_between(source_crs, target_crs)
    new_x, new_y = transformer.transform(x, y)

    if not (math.isfinite(new_x) and math.isfinite(new_y)):
        raise CRSMismatchError(
            f"Unable to convert {source_crs} ({x}, {y}) -> {target_crs} ({new_x}, {new_y})"
        )

    return new_x, new_y


def reproject_geometry(geom: BaseGeometry, source_crs: Any, target_crs: Any) -> BaseGeometry:
    """
    Transform a shapely geometry between two coordinate reference systems.

    Returns the geometry itself when both CRS are equal.

    Raises:
        CRSMismatchError: If either CRS is undefined or no transformation exists
    """
    if crs_equals(source_crs, target_crs):
        return geom

    project = transformer_between(source_crs, target_crs).transform
    return transform(project, geom)


def is_finite_point(geom: Any) -> bool:
    """True for a non-empty shapely Point with finite x and y."""
    if not isinstance(geom, Point) or geom.is_empty:
        return False
    return math.isfinite(geom.x) and math.isfinite(geom.y)
