from __future__ import annotations

import logging
from typing import Any, Optional

from spatialselect.constructs.buffer import Buffer, validate_radius, validate_resolution
from spatialselect.constructs.coordinate import Coordinate
from spatialselect.constructs.layer import GeometryLayer
from spatialselect.selectors.selector_interface import SelectorInterface
from spatialselect.utils.crs import as_crs, ensure_projected
from spatialselect.utils.exceptions import CRSMismatchError, InvalidParameterError
from spatialselect.utils.keys import DEFAULT_BUFFER_RESOLUTION

log = logging.getLogger(__name__)


class RadiusSelector(SelectorInterface):
    """
    Selects the features of a layer that lie within a distance of a center point.

    The center is reprojected into the layer's CRS, buffered by the radius, and
    every feature that shares at least one point with the buffer is kept. Features
    that only touch the buffer edge are included. Geometries are never clipped;
    the result is the ordered subset of the input features.

    Buffering needs a linear unit, so the selection runs in a projected CRS: the
    layer's own CRS by default, or `working_crs` when the layer is geographic.
    A geographic CRS is never buffered in degrees; it is rejected instead.

    Args:
        center: The center of the search. Any defined CRS; it is reprojected as needed.
        radius_meters: The search distance, greater than zero, in the linear unit of
            the working CRS (meters for UTM and Web Mercator)
        resolution: Segments per quarter circle of the buffer polygon. Default is 16.
        working_crs: A projected CRS to run the selection in. Default is None, which
            uses the layer's CRS.

    Raises:
        InvalidParameterError: If the radius is not a positive finite number, the
            resolution is not a positive integer, or the center is not a Coordinate
            with a finite, non-empty point
        CRSMismatchError: If working_crs cannot be parsed or is geographic

    Examples:
        >>> from spatialselect.constructs.coordinate import Coordinate
        >>> from spatialselect.selectors.radius import RadiusSelector
        >>>
        >>> city_hall = Coordinate.from_lat_lon(39.95258, -75.16522)
        >>> selector = RadiusSelector(city_hall, radius_meters=2000)
        >>>
        >>> # tracts are in UTM zone 18N; the center is reprojected automatically
        >>> nearby_tracts = selector.select(tracts_utm)
        >>>
        >>> # a lat/lon layer needs an explicit projected working crs
        >>> nearby_tracts = RadiusSelector(city_hall, 2000, working_crs=32618).select(tracts_latlon)
    """

    def __init__(
        self,
        center: Coordinate,
        radius_meters: float,
        resolution: int = DEFAULT_BUFFER_RESOLUTION,
        working_crs: Optional[Any] = None,
    ):
        self.radius = validate_radius(radius_meters)
        self.resolution = validate_resolution(resolution)

        if not isinstance(center, Coordinate) or not center.is_valid:
            raise InvalidParameterError(
                f"center must be a Coordinate with a finite point but got {getattr(center, 'geom', center)!r}"
            )
        self.center = center

        if working_crs is not None:
            working_crs = ensure_projected(as_crs(working_crs))
        self.working_crs = working_crs

    def __repr__(self):
        return (
            f"RadiusSelector(center={self.center}, radius={self.radius}, "
            f"resolution={self.resolution})"
        )

    def buffer_for(self, layer: GeometryLayer) -> Buffer:
        """
        Build the search buffer this selector uses for a layer.

        Args:
            layer: The layer the buffer will be compared against

        Returns:
            The Buffer around the reprojected center, in the working CRS

        Raises:
            CRSMismatchError: If the layer or the center has an undefined CRS, the
                working CRS is geographic, or the center cannot be reprojected
        """
        if layer.crs is None:
            raise CRSMismatchError(
                "reference layer has an undefined crs; cannot align the center with it"
            )

        working_crs = self.working_crs if self.working_crs is not None else layer.crs
        working_crs = ensure_projected(working_crs)

        center = self.center.to_crs(working_crs)

        return Buffer.from_coordinate(center, self.radius, self.resolution)

    def select(self, layer: GeometryLayer) -> GeometryLayer:
        """
        Select every feature that intersects a buffer of the radius around the center.

        Args:
            layer: The reference layer to select from

        Returns:
            The features of the layer intersecting the buffer, in their original order,
            with the layer's CRS, attributes, index labels and unaltered geometries.
            An empty layer gives an empty result.

        Raises:
            CRSMismatchError: If the layer or the center has an undefined CRS, the
                selection would run in a geographic CRS, or no transformation exists

        Examples:
            >>> selector = RadiusSelector(city_hall, radius_meters=2000)
            >>> nearby = selector.select(tracts_utm)
            >>> print(nearby.index.tolist())
        """
        buffer = self.buffer_for(layer)

        candidates = layer.to_crs(buffer.crs)
        hits = candidates.geometry.intersects(buffer.geometry).to_numpy()

        selected = layer.subset(hits)

        log.debug(
            "selected %d of %d features within %s of (%s, %s)",
            len(selected),
            len(layer),
            self.radius,
            buffer.center.x,
            buffer.center.y,
        )

        return selected


def select_within_radius(
    center: Coordinate,
    reference_layer: GeometryLayer,
    radius_meters: float,
    resolution: int = DEFAULT_BUFFER_RESOLUTION,
    working_crs: Optional[Any] = None,
) -> GeometryLayer:
    """
    Select the features of a layer within a distance of a center point.

    This is the functional form of RadiusSelector: reproject the center into the
    reference layer's CRS, buffer it by the radius, and keep every feature that
    intersects the buffer (boundary contact included), preserving order and
    attributes.

    Args:
        center: The center of the search
        reference_layer: The layer to select from
        radius_meters: The search distance, greater than zero, in the working CRS's unit
        resolution: Segments per quarter circle of the buffer polygon. Default is 16.
        working_crs: A projected CRS to run the selection in. Default is the layer's CRS.

    Returns:
        The selected features as a new GeometryLayer

    Raises:
        InvalidParameterError: If the radius or the center is malformed
        CRSMismatchError: If the CRS cannot be aligned or is not projected

    Examples:
        >>> city_hall = Coordinate.from_lat_lon(39.95258, -75.16522)
        >>> nearby = select_within_radius(city_hall, tracts_utm, 2000)
    """
    selector = RadiusSelector(
        center,
        radius_meters,
        resolution=resolution,
        working_crs=working_crs,
    )
    return selector.select(reference_layer)
