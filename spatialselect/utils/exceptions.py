class SpatialSelectException(Exception):
    """Base class for all errors raised by spatialselect."""


class LoadError(SpatialSelectException):
    """A vector source is missing, unreadable or in an unsupported format."""


class CRSMismatchError(SpatialSelectException):
    """
    Two geometries or layers cannot be compared because a coordinate reference
    system is undefined, unparseable, geographic where a projected one is
    required, or has no transformation path to the other.
    """


class InvalidParameterError(SpatialSelectException, ValueError):
    """A caller supplied a bad radius, center, column name or mode."""
