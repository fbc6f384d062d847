from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd
from geopandas import GeoDataFrame, GeoSeries, points_from_xy
from pyproj import CRS
from pyproj.exceptions import CRSError, ProjError

from spatialselect.utils.crs import LATLON_CRS, as_crs, utm_crs_for
from spatialselect.utils.exceptions import (
    CRSMismatchError,
    InvalidParameterError,
    LoadError,
)
from spatialselect.utils.keys import DEFAULT_X_COLUMN, DEFAULT_Y_COLUMN

log = logging.getLogger(__name__)


class GeometryLayer:
    """
    An ordered collection of vector features sharing one coordinate reference system.

    A GeometryLayer wraps a GeoDataFrame: each row is a feature with one geometry
    (point, line or polygon) and a set of named scalar attributes (the non-geometry
    columns). Layers are treated as immutable values; every operation returns a new
    layer and leaves its input untouched.

    The underlying GeoDataFrame must have unique indices, since the index labels
    identify features across selections - duplicate indices will raise an
    IndexError during initialization.

    Attributes:
        crs: The coordinate reference system of every feature (None if undefined)
        index: The pandas Index identifying the features
        columns: The attribute names, excluding the geometry column
        geometry: The GeoSeries of feature geometries

    Examples:
        >>> import geopandas as gpd
        >>> from shapely.geometry import box
        >>> from spatialselect.constructs.layer import GeometryLayer
        >>>
        >>> frame = gpd.GeoDataFrame(
        ...     {'GEOID': ['42101000100', '42101000200']},
        ...     geometry=[box(0, 0, 100, 100), box(100, 0, 200, 100)],
        ...     crs='EPSG:32618',
        ... )
        >>> tracts = GeometryLayer(frame)
        >>> print(len(tracts), tracts.columns)
        2 ['GEOID']
    """

    _frame: GeoDataFrame

    def __init__(self, frame: GeoDataFrame):
        if not isinstance(frame, GeoDataFrame):
            raise TypeError(f"Expected GeoDataFrame, got {type(frame)}")
        if frame.index.has_duplicates:
            duplicates = frame.index[frame.index.duplicated()].values
            raise IndexError(
                f"GeometryLayer cannot have duplicates in the index but found {duplicates}"
            )
        self._frame = frame

    def __getitem__(self, i) -> GeometryLayer:
        if isinstance(i, int):
            i = [i]
        new_frame = self._frame.iloc[i]
        return GeometryLayer(new_frame)

    def __len__(self):
        """Number of features."""
        return len(self._frame)

    def __str__(self):
        output_lines = [
            "spatialselect GeometryLayer object",
            f"crs: {self.crs.to_string() if self.crs is not None else None}",
            f"features: {len(self)}",
            f"frame: {self._frame}",
        ]
        return "\n".join(output_lines)

    def __repr__(self):
        return self.__str__()

    @property
    def index(self) -> pd.Index:
        """Get index to underlying GeoDataFrame."""
        return self._frame.index

    @property
    def crs(self) -> Optional[CRS]:
        """Get Coordinate Reference System(CRS) to underlying GeoDataFrame."""
        return self._frame.crs

    @property
    def geometry(self) -> GeoSeries:
        return self._frame.geometry.copy()

    @property
    def columns(self) -> List[str]:
        gname = self._frame.geometry.name
        return [c for c in self._frame.columns if c != gname]

    @property
    def is_empty(self) -> bool:
        return len(self._frame) == 0

    def feature(self, label: Any) -> Dict[str, Any]:
        """
        Get the attributes and geometry of one feature by its index label.

        Raises:
            KeyError: If no feature has that label
        """
        row = self._frame.loc[label]
        return row.to_dict()

    def to_geo_dataframe(self) -> GeoDataFrame:
        """Return a copy of the underlying GeoDataFrame."""
        return self._frame.copy()

    @classmethod
    def from_geo_dataframe(
        cls,
        frame: GeoDataFrame,
        crs: Optional[Any] = None,
    ) -> GeometryLayer:
        """
        Create a layer from a GeoPandas GeoDataFrame.

        All attribute columns and the index are retained. The frame is copied so later
        changes to it do not leak into the layer.

        Args:
            frame: A GeoDataFrame with an active geometry column and unique index values
            crs: A CRS to assign when the frame has none. Ignored if the frame already
                carries a CRS; use to_crs to reproject instead.

        Returns:
            A new GeometryLayer instance

        Examples:
            >>> import geopandas as gpd
            >>> from shapely.geometry import Point
            >>>
            >>> gdf = gpd.GeoDataFrame(
            ...     {'name': ['City Hall']},
            ...     geometry=[Point(-75.16522, 39.95258)],
            ...     crs='EPSG:4326'
            ... )
            >>> layer = GeometryLayer.from_geo_dataframe(gdf)
        """
        frame = frame.copy()
        if frame.crs is None and crs is not None:
            frame = frame.set_crs(as_crs(crs))
        return GeometryLayer(frame)

    @classmethod
    def from_dataframe(
        cls,
        dataframe: pd.DataFrame,
        x_column: str = DEFAULT_X_COLUMN,
        y_column: str = DEFAULT_Y_COLUMN,
        crs: Any = LATLON_CRS,
    ) -> GeometryLayer:
        """
        Create a point layer from a pandas DataFrame with coordinate columns.

        Every other column becomes a feature attribute. The coordinate columns are kept
        as attributes as well.

        Args:
            dataframe: A pandas DataFrame containing one point per row
            x_column: The name of the column with x values (longitude by default)
            y_column: The name of the column with y values (latitude by default)
            crs: The CRS the coordinates are expressed in. Default is WGS84 (EPSG:4326).

        Returns:
            A new GeometryLayer of Point features

        Raises:
            InvalidParameterError: If a coordinate column is missing

        Examples:
            >>> import pandas as pd
            >>> df = pd.DataFrame({
            ...     'shooting_id': [1, 2],
            ...     'lat': [39.9526, 39.9496],
            ...     'lng': [-75.1652, -75.1503],
            ... })
            >>> shootings = GeometryLayer.from_dataframe(df, x_column='lng', y_column='lat')
        """
        missing = [c for c in (x_column, y_column) if c not in dataframe.columns]
        if missing:
            raise InvalidParameterError(
                f"coordinate columns {missing} not found; available columns are "
                f"{list(dataframe.columns)}"
            )

        frame = GeoDataFrame(
            dataframe.copy(),
            geometry=points_from_xy(dataframe[x_column], dataframe[y_column]),
            crs=as_crs(crs),
        )

        return GeometryLayer(frame)

    @classmethod
    def from_csv(
        cls,
        file: Union[str, Path],
        x_column: str = DEFAULT_X_COLUMN,
        y_column: str = DEFAULT_Y_COLUMN,
        crs: Any = LATLON_CRS,
    ) -> GeometryLayer:
        """
        Create a point layer from a CSV file with coordinate columns.

        Args:
            file: Path to the CSV file (as string or Path object)
            x_column: The name of the column with x values (longitude by default)
            y_column: The name of the column with y values (latitude by default)
            crs: The CRS the coordinates are expressed in. Default is WGS84 (EPSG:4326).

        Returns:
            A new GeometryLayer of Point features

        Raises:
            LoadError: If the file does not exist, is not a csv file, or lacks the
                coordinate columns

        Examples:
            >>> shootings = GeometryLayer.from_csv('shootings.csv', x_column='lng', y_column='lat')
        """
        filepath = Path(file)
        if not filepath.is_file():
            raise LoadError(f"csv file not found: {filepath}")
        elif not filepath.suffix.lower() == ".csv":
            raise LoadError(
                f"file of type {filepath.suffix} does not appear to be a csv file"
            )

        columns = pd.read_csv(filepath, nrows=0).columns.to_list()
        if x_column in columns and y_column in columns:
            df = pd.read_csv(filepath)
            return GeometryLayer.from_dataframe(df, x_column, y_column, crs)
        else:
            raise LoadError(
                "Could not find any geometry information in the file; "
                f"Make sure there are {x_column} and {y_column} columns "
                "[and provide the x/y column names to this function]"
            )

    @classmethod
    def from_file(
        cls,
        file: Union[str, Path],
        layer: Optional[str] = None,
    ) -> GeometryLayer:
        """
        Load a layer from a vector file (GeoPackage, Shapefile or GeoJSON).

        See spatialselect.io.vector.read_layer.
        """
        from spatialselect.io.vector import read_layer

        return read_layer(file, layer=layer)

    def to_file(
        self,
        file: Union[str, Path],
        overwrite: bool = False,
        layer_name: Optional[str] = None,
    ) -> Path:
        """
        Write the layer to a vector file chosen by extension.

        See spatialselect.io.vector.write_layer.
        """
        from spatialselect.io.vector import write_layer

        return write_layer(self, file, overwrite=overwrite, layer_name=layer_name)

    def subset(self, mask: Union[Sequence[bool], np.ndarray, pd.Series]) -> GeometryLayer:
        """
        Keep the features for which a positional boolean mask is true.

        Order, index labels, attributes and geometries of the kept features are
        preserved.

        Args:
            mask: One boolean per feature, in layer order

        Raises:
            InvalidParameterError: If the mask length differs from the layer length
        """
        mask = np.asarray(mask, dtype=bool)
        if mask.shape != (len(self._frame),):
            raise InvalidParameterError(
                f"mask has {mask.size} values but the layer has {len(self._frame)} features"
            )
        return GeometryLayer(self._frame[mask])

    def drop(self, index: List) -> GeometryLayer:
        """
        Remove features from the layer by their index labels.

        Args:
            index: A list of index labels (not integer positions) of the features to remove

        Returns:
            A new GeometryLayer without the specified features
        """
        new_frame = self._frame.drop(index)

        return GeometryLayer(new_frame)

    def to_crs(self, new_crs: Any) -> GeometryLayer:
        """
        Transform the layer to a different coordinate reference system (CRS).

        Args:
            new_crs: The target CRS. Can be a pyproj.CRS object, EPSG code string
                (e.g., 'EPSG:4326'), or any format accepted by pyproj.CRS()

        Returns:
            A new GeometryLayer with all geometries transformed to the target CRS, or
            this layer if it is already in that CRS

        Raises:
            CRSMismatchError: If the layer's CRS is undefined, the target cannot be
                parsed, or no transformation exists

        Examples:
            >>> tracts_utm = tracts.to_crs('EPSG:32618')
        """
        target = as_crs(new_crs)
        if self.crs is None:
            raise CRSMismatchError(
                "cannot reproject a layer with an undefined crs; assign one with "
                "GeometryLayer.from_geo_dataframe(frame, crs=...) first"
            )
        if target == self.crs:
            return self

        log.debug(
            "reprojecting %d features from %s to %s",
            len(self),
            self.crs.to_string(),
            target.to_string(),
        )
        try:
            new_frame = self._frame.to_crs(target)
        except (CRSError, ProjError, ValueError) as e:
            raise CRSMismatchError(
                f"could not reproject layer from {self.crs.to_string()} to {target.to_string()}"
            ) from e

        return GeometryLayer(new_frame)

    def to_projected(self) -> GeometryLayer:
        """
        Reproject the layer into the UTM zone covering the center of its bounds.

        Distances and buffers need a projected CRS; this picks a sensible one for data
        that arrives in lat/lon.

        Raises:
            CRSMismatchError: If the layer's CRS is undefined
            InvalidParameterError: If the layer has no features to locate
        """
        if self.crs is None:
            raise CRSMismatchError("cannot project a layer with an undefined crs")
        if self.is_empty:
            raise InvalidParameterError("cannot choose a utm zone for an empty layer")

        latlon = self.to_crs(LATLON_CRS)
        minx, miny, maxx, maxy = latlon._frame.total_bounds
        target = utm_crs_for((minx + maxx) / 2, (miny + maxy) / 2)

        return self.to_crs(target)
