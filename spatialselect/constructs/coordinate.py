from __future__ import annotations

from typing import Any, NamedTuple, Optional

from pyproj import CRS
from shapely.geometry import Point

from spatialselect.utils.crs import LATLON_CRS, as_crs
from spatialselect.utils.geo import is_finite_point, reproject_xy


class Coordinate(NamedTuple):
    """
    Represents a single point location with a coordinate reference system (CRS).

    A Coordinate is an immutable object that combines a spatial point geometry with its
    coordinate reference system, allowing for accurate coordinate transformations between
    different projection systems. It is the "center" of a radius selection.

    Attributes:
        coordinate_id: An optional identifier for this coordinate (can be any hashable type)
        geom: The Shapely Point geometry representing the spatial location
        crs: The pyproj CRS (Coordinate Reference System) defining the coordinate space
        x: The x-coordinate value (longitude in lat/lon systems, easting in projected systems)
        y: The y-coordinate value (latitude in lat/lon systems, northing in projected systems)

    Examples:
        >>> from spatialselect.constructs.coordinate import Coordinate
        >>> # Philadelphia City Hall from latitude and longitude
        >>> city_hall = Coordinate.from_lat_lon(39.95258, -75.16522)
        >>> print(city_hall.x, city_hall.y)
        -75.16522 39.95258

        >>> # Transform to UTM zone 18N
        >>> projected = city_hall.to_crs('EPSG:32618')
        >>> print(projected.crs.to_epsg())
        32618
    """

    coordinate_id: Any
    geom: Point
    crs: Optional[CRS]

    def __repr__(self):
        crs_a = self.crs.to_authority() if self.crs else "Null"
        return f"Coordinate(coordinate_id={self.coordinate_id}, x={self.x}, y={self.y}, crs={crs_a})"

    @classmethod
    def from_lat_lon(cls, lat: float, lon: float, coordinate_id: Any = None) -> Coordinate:
        """
        Create a coordinate from latitude and longitude values in WGS84 (EPSG:4326).

        Args:
            lat: The latitude in decimal degrees (range: -90 to 90)
            lon: The longitude in decimal degrees (range: -180 to 180)
            coordinate_id: An optional identifier for the coordinate

        Returns:
            A new Coordinate instance in EPSG:4326 CRS

        Examples:
            >>> city_hall = Coordinate.from_lat_lon(39.95258, -75.16522)
            >>> print(f"Lat: {city_hall.y}, Lon: {city_hall.x}")
            Lat: 39.95258, Lon: -75.16522
        """
        return cls(coordinate_id=coordinate_id, geom=Point(lon, lat), crs=LATLON_CRS)

    @classmethod
    def from_xy(cls, x: float, y: float, crs: Any, coordinate_id: Any = None) -> Coordinate:
        """
        Create a coordinate from x/y values in any coordinate reference system.

        Args:
            x: The x-coordinate (easting or longitude)
            y: The y-coordinate (northing or latitude)
            crs: Anything pyproj.CRS() accepts, e.g. 32618 or 'EPSG:32618'
            coordinate_id: An optional identifier for the coordinate

        Raises:
            CRSMismatchError: If the crs cannot be parsed

        Examples:
            >>> center = Coordinate.from_xy(485900.0, 4422500.0, 32618)
        """
        return cls(coordinate_id=coordinate_id, geom=Point(x, y), crs=as_crs(crs))

    @property
    def x(self) -> float:
        return self.geom.x

    @property
    def y(self) -> float:
        return self.geom.y

    @property
    def is_valid(self) -> bool:
        """True when the geometry is a non-empty Point with finite coordinates."""
        return is_finite_point(self.geom)

    def to_crs(self, new_crs: Any) -> Coordinate:
        """
        Transform this coordinate to a different coordinate reference system (CRS).

        If the target CRS is the same as the current CRS, the original coordinate is
        returned unchanged.

        Args:
            new_crs: The target CRS. Can be a pyproj.CRS object, an EPSG code as a string
                (e.g., 'EPSG:4326'), an integer EPSG code, or any CRS format that pyproj.CRS() accepts

        Returns:
            A new Coordinate instance with transformed geometry in the target CRS.
            The coordinate_id is preserved from the original coordinate.

        Raises:
            CRSMismatchError: If either CRS is undefined or cannot be parsed, if no
                transformation exists, or if the transformation results in infinite
                coordinate values

        Examples:
            >>> coord = Coordinate.from_lat_lon(39.95258, -75.16522)
            >>> utm_coord = coord.to_crs(32618)  # UTM Zone 18N
        """
        new_crs = as_crs(new_crs)
        current_crs = as_crs(self.crs)

        if new_crs == current_crs:
            return self

        new_x, new_y = reproject_xy(self.geom.x, self.geom.y, current_crs, new_crs)

        return Coordinate(
            coordinate_id=self.coordinate_id,
            geom=Point(new_x, new_y),
            crs=new_crs,
        )
