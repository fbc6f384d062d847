from abc import ABCMeta, abstractmethod
from typing import List

from spatialselect.constructs.layer import GeometryLayer


class SelectorInterface(metaclass=ABCMeta):
    """
    Abstract base class defining the interface for all spatial selections.

    A selector holds the parameters of a spatial query (a center and radius, a
    mask layer and predicate, ...) and applies it to any number of layers.
    Selection never alters geometries: the result is always an ordered subset of
    the input layer's features.

    Examples:
        >>> from spatialselect.selectors.radius import RadiusSelector
        >>> from spatialselect.selectors.location import LocationSelector
        >>>
        >>> # All selectors follow the same interface
        >>> selector = RadiusSelector(city_hall, radius_meters=2000)
        >>> nearby = selector.select(tracts)
    """

    @abstractmethod
    def select(self, layer: GeometryLayer) -> GeometryLayer:
        """
        Select the features of a layer that satisfy this selector's spatial query.

        Args:
            layer: The reference layer to select from

        Returns:
            A GeometryLayer holding the selected features in their original order, with
            the input's CRS, attributes, index labels and geometries
        """

    def select_batch(self, layers: List[GeometryLayer]) -> List[GeometryLayer]:
        return [self.select(layer) for layer in layers]
