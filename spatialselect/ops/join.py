from __future__ import annotations

import logging
from typing import Optional, Tuple, Union

import pandas as pd
from geopandas import GeoDataFrame

from spatialselect.constructs.layer import GeometryLayer
from spatialselect.utils.exceptions import InvalidParameterError
from spatialselect.utils.keys import DEFAULT_JOIN_SUFFIXES

log = logging.getLogger(__name__)

JOIN_MODES = ("inner", "left")


def _as_table(table: Union[pd.DataFrame, GeometryLayer]) -> pd.DataFrame:
    if isinstance(table, GeometryLayer):
        frame = table.to_geo_dataframe()
        return pd.DataFrame(frame.drop(columns=frame.geometry.name))
    elif isinstance(table, pd.DataFrame):
        if isinstance(table, GeoDataFrame):
            return pd.DataFrame(table.drop(columns=table.geometry.name))
        return table
    raise InvalidParameterError(
        f"can only join a DataFrame or a GeometryLayer but got {type(table)}"
    )


def attribute_join(
    layer: GeometryLayer,
    table: Union[pd.DataFrame, GeometryLayer],
    left_on: str,
    right_on: Optional[str] = None,
    how: str = "inner",
    suffixes: Tuple[str, str] = DEFAULT_JOIN_SUFFIXES,
) -> GeometryLayer:
    """
    Combine a geometry layer with a table by matching key column values.

    This is an equi-join: a feature is paired with every table row whose key equals
    the feature's key. The geometry always comes from the layer; when the table is
    itself a GeometryLayer or GeoDataFrame its geometry is ignored.

    Args:
        layer: The layer supplying geometries and the left key
        table: The attributes to attach, as a DataFrame or GeometryLayer
        left_on: The key column in the layer
        right_on: The key column in the table. Default is the same name as left_on.
        how: "inner" drops unmatched rows on either side, "left" keeps every feature
            of the layer and fills missing attributes with NaN. Default is "inner".
        suffixes: Suffixes for overlapping non-key column names, (layer, table).
            Default is ("", "_right").

    Returns:
        A new GeometryLayer in the layer's CRS with a fresh RangeIndex, ordered by the
        layer's features

    Raises:
        InvalidParameterError: If how is not supported, a key column is missing, or
            the key columns have incompatible types

    Examples:
        >>> import pandas as pd
        >>> from spatialselect.ops.join import attribute_join
        >>>
        >>> income = pd.read_csv('PhillyIncome.csv')
        >>> tracts_with_income = attribute_join(tracts, income, left_on='GEOID10', right_on='GEOID')
        >>> print(tracts_with_income.columns)
    """
    if how not in JOIN_MODES:
        raise InvalidParameterError(f"how must be one of {JOIN_MODES} but got {how!r}")

    if right_on is None:
        right_on = left_on

    table = _as_table(table)

    if left_on not in layer.columns:
        raise InvalidParameterError(
            f"key column {left_on!r} not found in layer columns {layer.columns}"
        )
    if right_on not in table.columns:
        raise InvalidParameterError(
            f"key column {right_on!r} not found in table columns {list(table.columns)}"
        )

    frame = layer.to_geo_dataframe()
    gname = frame.geometry.name

    try:
        merged = frame.merge(
            table,
            how=how,
            left_on=left_on,
            right_on=right_on,
            suffixes=suffixes,
        )
    except ValueError as e:
        raise InvalidParameterError(
            f"could not join on {left_on!r} and {right_on!r}: {e}"
        ) from e

    merged = GeoDataFrame(merged, geometry=gname, crs=layer.crs)

    if len(merged) == 0 and len(layer) > 0:
        log.warning(
            "attribute join on %s/%s matched no features; check the key values and types",
            left_on,
            right_on,
        )

    log.debug(
        "joined %d features with %d rows into %d features (%s)",
        len(layer),
        len(table),
        len(merged),
        how,
    )

    return GeometryLayer(merged)
