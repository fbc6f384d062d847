from __future__ import annotations

import json
import math
from numbers import Integral, Real
from typing import Any

from geopandas import GeoDataFrame
from pyproj import CRS
from shapely.geometry import Polygon, mapping
from shapely.geometry.base import BaseGeometry

from spatialselect.constructs.coordinate import Coordinate
from spatialselect.constructs.layer import GeometryLayer
from spatialselect.utils.crs import LATLON_CRS, ensure_projected
from spatialselect.utils.exceptions import InvalidParameterError
from spatialselect.utils.geo import reproject_geometry
from spatialselect.utils.keys import DEFAULT_BUFFER_RESOLUTION


def validate_radius(radius: Any) -> float:
    """
    Check that a buffer radius is a finite number greater than zero.

    Raises:
        InvalidParameterError: For booleans, non-numbers, NaN, infinity, zero or
            negative values
    """
    if isinstance(radius, bool) or not isinstance(radius, Real):
        raise InvalidParameterError(f"radius must be a number but got {radius!r}")
    if not math.isfinite(radius) or radius <= 0:
        raise InvalidParameterError(
            f"radius must be a finite number greater than zero but got {radius}"
        )
    return float(radius)


def validate_resolution(resolution: Any) -> int:
    """
    Check that a buffer resolution is a positive integer, numpy integers included.

    Raises:
        InvalidParameterError: For booleans, non-integers and values below one
    """
    if isinstance(resolution, bool) or not isinstance(resolution, Integral) or resolution < 1:
        raise InvalidParameterError(
            f"resolution must be a positive integer but got {resolution!r}"
        )
    return int(resolution)


class Buffer:
    """
    A disk-shaped polygon built around a center coordinate.

    The polygon is shapely's approximation of every point within `radius` of the
    center: a regular polygon with `resolution` segments per quarter circle. The
    radius is expressed in the linear unit of the CRS, which must be projected.

    Args:
        center: The coordinate the buffer is built around
        radius: The buffer distance in CRS units (meters for UTM and Web Mercator)
        geometry: The buffer polygon
        crs: The CRS of the polygon, equal to the center's CRS

    Examples:
        >>> from spatialselect.constructs.buffer import Buffer
        >>> from spatialselect.constructs.coordinate import Coordinate
        >>>
        >>> city_hall = Coordinate.from_lat_lon(39.95258, -75.16522).to_crs(32618)
        >>> buffer = Buffer.from_coordinate(city_hall, 2000)
        >>> print(round(buffer.geometry.area / 1e6, 1))  # square kilometers
        12.5
    """

    def __init__(self, center: Coordinate, radius: float, geometry: Polygon, crs: CRS):
        self.center = center
        self.radius = radius
        self.geometry = geometry
        self.crs = crs

    def __repr__(self):
        return f"Buffer(center={self.center}, radius={self.radius})"

    @classmethod
    def from_coordinate(
        cls,
        center: Coordinate,
        radius: float,
        resolution: int = DEFAULT_BUFFER_RESOLUTION,
    ) -> Buffer:
        """
        Create a buffer by expanding a coordinate radially by a fixed distance.

        Args:
            center: The coordinate to buffer. Must be in a projected CRS.
            radius: The buffer distance, greater than zero, in the units of the center's CRS
            resolution: Number of segments used to approximate a quarter circle. Default is 16.

        Returns:
            A new Buffer in the center's CRS

        Raises:
            InvalidParameterError: If the radius is not a positive finite number or
                the resolution is not a positive integer
            CRSMismatchError: If the center's CRS is undefined or geographic

        Examples:
            >>> center = Coordinate.from_xy(485900.0, 4422500.0, 32618)
            >>> small = Buffer.from_coordinate(center, 500, resolution=4)
        """
        radius = validate_radius(radius)
        resolution = validate_resolution(resolution)
        crs = ensure_projected(center.crs)

        polygon = center.geom.buffer(radius, quad_segs=resolution)

        return Buffer(center=center, radius=radius, geometry=polygon, crs=crs)

    def intersects(self, geom: BaseGeometry) -> bool:
        """
        Test whether a geometry shares at least one point with the buffer.

        Boundary contact counts as intersecting. The geometry must be expressed in
        the buffer's CRS.
        """
        return self.geometry.intersects(geom)

    def to_layer(self) -> GeometryLayer:
        """
        Wrap the buffer polygon in a single-feature GeometryLayer.

        The feature carries the radius as an attribute, which makes the buffer easy
        to write next to a selection for inspection.
        """
        frame = GeoDataFrame(
            {"radius": [self.radius]},
            geometry=[self.geometry],
            crs=self.crs,
        )
        return GeometryLayer(frame)

    def to_geojson(self) -> str:
        """
        Convert the buffer polygon to a GeoJSON geometry string.

        The polygon is transformed to WGS84 (EPSG:4326) first, since GeoJSON uses
        lon/lat coordinates by convention.

        Examples:
            >>> buffer = Buffer.from_coordinate(center, 2000)
            >>> with open('buffer.geojson', 'w') as f:
            ...     f.write(buffer.to_geojson())
        """
        geometry = reproject_geometry(self.geometry, self.crs, LATLON_CRS)

        return json.dumps(mapping(geometry))
