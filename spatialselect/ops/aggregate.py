"""
Point-in-polygon aggregation.

Summarise a point layer per polygon of another layer: how many points each
polygon holds, or a statistic of a point attribute. The result always has exactly
one value per polygon, in polygon order, so it can be attached to the polygon
layer directly.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Union

import numpy as np
import pandas as pd
from geopandas import GeoDataFrame, sjoin

from spatialselect.constructs.layer import GeometryLayer
from spatialselect.utils.exceptions import CRSMismatchError, InvalidParameterError
from spatialselect.utils.keys import DEFAULT_COUNT_KEY

log = logging.getLogger(__name__)

# "within" leaves points on a polygon boundary out, "intersects" counts them
AGGREGATION_PREDICATES = ("within", "intersects")

AGGREGATION_FUNCTIONS = (
    "sum",
    "mean",
    "median",
    "min",
    "max",
    "count",
    "std",
    "var",
    "first",
    "last",
    "nunique",
)

# Columns carrying each point's and each polygon's position through the spatial join
_POINT_POSITION = "_point_position"
_POLYGON_POSITION = "_polygon_position"


def _check_output_column(polygons: GeometryLayer, column: str):
    if column in polygons.columns:
        raise InvalidParameterError(
            f"polygon layer already has a column named {column!r}; choose another name"
        )


def _points_per_polygon(
    points: GeometryLayer,
    polygons: GeometryLayer,
    predicate: str,
) -> pd.DataFrame:
    """
    Pair every point with each polygon it relates to.

    Returns the positions of the point and of the related polygon; a point related
    to several polygons appears once per polygon, a point related to none is dropped.
    Only geometries take part in the join, so attribute names never collide with
    the join's own columns.
    """
    if predicate not in AGGREGATION_PREDICATES:
        raise InvalidParameterError(
            f"predicate must be one of {AGGREGATION_PREDICATES} but got {predicate!r}"
        )
    if polygons.crs is None:
        raise CRSMismatchError("polygon layer has an undefined crs")

    aligned = points.to_crs(polygons.crs)

    left = GeoDataFrame(
        {_POINT_POSITION: np.arange(len(aligned))},
        geometry=aligned.geometry.values,
        crs=polygons.crs,
    )
    right = GeoDataFrame(
        {_POLYGON_POSITION: np.arange(len(polygons))},
        geometry=polygons.geometry.values,
        crs=polygons.crs,
    )

    if len(left) == 0 or len(right) == 0:
        return pd.DataFrame({_POINT_POSITION: [], _POLYGON_POSITION: []}, dtype="int64")

    joined = sjoin(left, right, how="inner", predicate=predicate)

    return pd.DataFrame(joined[[_POINT_POSITION, _POLYGON_POSITION]]).reset_index(drop=True)


def count_points_in_polygons(
    points: GeometryLayer,
    polygons: GeometryLayer,
    column: str = DEFAULT_COUNT_KEY,
    predicate: str = "within",
) -> GeometryLayer:
    """
    Count the points that fall in each polygon.

    Args:
        points: The point layer. It is reprojected into the polygons' CRS if needed.
        polygons: The polygon layer to count into
        column: Name of the new count column. Default is "count".
        predicate: "within" (default) excludes points on a polygon's boundary,
            "intersects" includes them

    Returns:
        A copy of the polygon layer with an integer count column; polygons without
        points get 0

    Raises:
        CRSMismatchError: If either layer has an undefined CRS or no transformation exists
        InvalidParameterError: If the predicate is unknown or the column already exists

    Examples:
        >>> from spatialselect.ops.aggregate import count_points_in_polygons
        >>>
        >>> tracts = count_points_in_polygons(shootings, tracts, column='shootings')
        >>> print(tracts.to_geo_dataframe()['shootings'].sum())
    """
    _check_output_column(polygons, column)

    joined = _points_per_polygon(points, polygons, predicate)

    counts = (
        joined.groupby(_POLYGON_POSITION)
        .size()
        .reindex(np.arange(len(polygons)), fill_value=0)
    )

    frame = polygons.to_geo_dataframe()
    frame[column] = counts.to_numpy(dtype="int64")

    log.debug(
        "counted %d point-polygon pairs over %d polygons", len(joined), len(polygons)
    )

    return GeometryLayer(frame)


def aggregate_points_in_polygons(
    points: GeometryLayer,
    polygons: GeometryLayer,
    value_column: str,
    aggfunc: Union[str, Callable] = "sum",
    column: Optional[str] = None,
    predicate: str = "within",
) -> GeometryLayer:
    """
    Summarise a point attribute over the points in each polygon.

    Args:
        points: The point layer. It is reprojected into the polygons' CRS if needed.
        polygons: The polygon layer to aggregate into
        value_column: The point attribute to aggregate
        aggfunc: A pandas aggregation name from AGGREGATION_FUNCTIONS or a callable
            taking a Series. Default is "sum".
        column: Name of the new column. Default is "<value_column>_<aggfunc>" for
            named functions and value_column for callables.
        predicate: "within" (default) or "intersects"

    Returns:
        A copy of the polygon layer with the aggregate column. Polygons without points
        get NaN, except for "count" and "nunique" which give 0.

    Raises:
        CRSMismatchError: If either layer has an undefined CRS or no transformation exists
        InvalidParameterError: If the value column is missing, the aggregation or
            predicate is unknown, or the output column already exists

    Examples:
        >>> from spatialselect.ops.aggregate import aggregate_points_in_polygons
        >>>
        >>> tracts = aggregate_points_in_polygons(shootings, tracts, 'victims', 'sum')
        >>> print(tracts.columns)  # [..., 'victims_sum']
    """
    if value_column not in points.columns:
        raise InvalidParameterError(
            f"value column {value_column!r} not found in point columns {points.columns}"
        )
    if isinstance(aggfunc, str):
        if aggfunc not in AGGREGATION_FUNCTIONS:
            raise InvalidParameterError(
                f"aggfunc must be one of {AGGREGATION_FUNCTIONS} or a callable but got {aggfunc!r}"
            )
        default_column = f"{value_column}_{aggfunc}"
    elif callable(aggfunc):
        default_column = value_column
    else:
        raise InvalidParameterError(f"aggfunc must be a string or callable, got {aggfunc!r}")

    column = column if column is not None else default_column
    _check_output_column(polygons, column)

    joined = _points_per_polygon(points, polygons, predicate)

    positions = np.arange(len(polygons))
    if len(joined) == 0:
        values = pd.Series(np.nan, index=positions)
    else:
        point_values = points.to_geo_dataframe()[value_column]
        paired = pd.Series(
            point_values.iloc[joined[_POINT_POSITION].to_numpy()].to_numpy(),
            name=value_column,
        )
        values = (
            paired.groupby(joined[_POLYGON_POSITION].to_numpy())
            .agg(aggfunc)
            .reindex(positions)
        )

    if aggfunc in ("count", "nunique"):
        values = values.fillna(0).astype("int64")

    frame = polygons.to_geo_dataframe()
    frame[column] = values.to_numpy()

    log.debug(
        "aggregated %s of %s over %d polygons", aggfunc, value_column, len(polygons)
    )

    return GeometryLayer(frame)
