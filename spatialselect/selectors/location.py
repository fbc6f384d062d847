from __future__ import annotations

import logging

import numpy as np

from spatialselect.constructs.layer import GeometryLayer
from spatialselect.selectors.selector_interface import SelectorInterface
from spatialselect.utils.exceptions import CRSMismatchError, InvalidParameterError

log = logging.getLogger(__name__)

# Binary predicates a feature can be tested with against a mask geometry,
# read as "feature <predicate> mask"
SUPPORTED_PREDICATES = (
    "intersects",
    "within",
    "contains",
    "touches",
    "crosses",
    "overlaps",
    "covers",
    "covered_by",
)


class LocationSelector(SelectorInterface):
    """
    Selects the features of a layer by their spatial relation to another layer.

    A feature is kept when `predicate(feature, mask_feature)` holds for at least one
    feature of the mask layer, e.g. the tracts that intersect a study area or the
    points that lie within a set of polygons. The mask is reprojected into the
    layer's CRS before testing.

    Args:
        mask_layer: The layer whose geometries define the selection area
        predicate: One of SUPPORTED_PREDICATES. Default is "intersects", which counts
            boundary contact.

    Raises:
        InvalidParameterError: If the predicate is not supported

    Examples:
        >>> from spatialselect.selectors.location import LocationSelector
        >>>
        >>> # shootings that happened inside the selected tracts
        >>> selector = LocationSelector(nearby_tracts, predicate="within")
        >>> nearby_shootings = selector.select(shootings)
    """

    def __init__(self, mask_layer: GeometryLayer, predicate: str = "intersects"):
        if predicate not in SUPPORTED_PREDICATES:
            raise InvalidParameterError(
                f"predicate must be one of {SUPPORTED_PREDICATES} but got {predicate!r}"
            )
        self.mask_layer = mask_layer
        self.predicate = predicate

    def select(self, layer: GeometryLayer) -> GeometryLayer:
        if layer.crs is None or self.mask_layer.crs is None:
            raise CRSMismatchError(
                "both the layer and the mask layer need a defined crs to be compared"
            )

        mask = self.mask_layer.to_crs(layer.crs)
        geoms = layer.geometry

        hits = np.zeros(len(layer), dtype=bool)
        for mask_geom in mask.geometry:
            if mask_geom is None or mask_geom.is_empty:
                continue
            relation = getattr(geoms, self.predicate)(mask_geom)
            hits |= relation.to_numpy(dtype=bool)

        selected = layer.subset(hits)

        log.debug(
            "selected %d of %d features %s %d mask features",
            len(selected),
            len(layer),
            self.predicate,
            len(mask),
        )

        return selected
