"""Geometry primitives for Station Assignment

Coordinate transforms between WGS84 and the Greek Grid, polygon containment by ray
casting, and great-circle distance.
"""

from .coordinate_transform import (
    GeoPoint,
    ProjectedPoint,
    ProjectionParams,
    GridEnvelope,
    GeoBoundingBox,
    GREEK_GRID,
    GREECE_TERRITORY,
    PROJECTIONS,
    get_projection,
    get_transformer,
    project,
    unproject,
    linear_unproject,
)
from .polygon_geometry import (
    Coordinate,
    Ring,
    Polygon,
    MultiPolygon,
    contains_point,
    contains_point_with_holes,
    contains_point_multi_polygon,
)
from .distance import EARTH_RADIUS_METERS, haversine_distance, distance_between

__all__ = [
    # Transforms
    'GeoPoint',
    'ProjectedPoint',
    'ProjectionParams',
    'GridEnvelope',
    'GeoBoundingBox',
    'GREEK_GRID',
    'GREECE_TERRITORY',
    'PROJECTIONS',
    'get_projection',
    'get_transformer',
    'project',
    'unproject',
    'linear_unproject',
    # Containment
    'Coordinate',
    'Ring',
    'Polygon',
    'MultiPolygon',
    'contains_point',
    'contains_point_with_holes',
    'contains_point_multi_polygon',
    # Distance
    'EARTH_RADIUS_METERS',
    'haversine_distance',
    'distance_between',
]
