"""Default names and values shared across spatialselect.

These constants are the library's configuration: every function that uses one
also accepts a keyword argument to override it.
"""

# Column added by count_points_in_polygons
DEFAULT_COUNT_KEY = "count"

# Segments per quarter circle when buffering a coordinate
DEFAULT_BUFFER_RESOLUTION = 16

# Suffixes applied to overlapping non-key columns in an attribute join
DEFAULT_JOIN_SUFFIXES = ("", "_right")

# Default column names when building point layers from tables
DEFAULT_X_COLUMN = "longitude"
DEFAULT_Y_COLUMN = "latitude"
