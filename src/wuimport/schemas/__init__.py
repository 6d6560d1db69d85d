"""Schema definitions for the importer.

This package defines the contract layer - what a point and a batch look
like. Nothing here talks to the network.

Schemas:
- point: Point and Batch structures, fixed tag names
- points: DataFrame view of a batch and its validator
- validate: Validation helpers
"""

from wuimport.schemas.point import (
    PROVIDER,
    TAG_PROVIDER,
    TAG_SOFTWARE,
    TAG_STATION,
    Batch,
    Point,
    station_tags,
)
from wuimport.schemas.points import (
    REQUIRED_COLUMNS as POINTS_REQUIRED_COLUMNS,
    describe_points,
    points_to_frame,
    validate_points,
)
from wuimport.schemas.validate import (
    require_columns,
    require_no_nulls,
    require_range,
    require_timezone_utc,
    require_unique,
)

__all__ = [
    # Points
    "PROVIDER",
    "TAG_STATION",
    "TAG_PROVIDER",
    "TAG_SOFTWARE",
    "Point",
    "Batch",
    "station_tags",
    # Point frames
    "POINTS_REQUIRED_COLUMNS",
    "points_to_frame",
    "validate_points",
    "describe_points",
    # Validation helpers
    "require_columns",
    "require_no_nulls",
    "require_unique",
    "require_timezone_utc",
    "require_range",
]
