"""Fire district boundary loading and lookup"""

from .boundary_parser import (
    DEFAULT_OWNER_PROPERTY,
    DEFAULT_ID_PROPERTY,
    parse_point,
    parse_ring,
    parse_polygon,
    parse_multi_polygon,
    parse_district_document,
    parse_district_documents,
)
from .boundary_store import BoundaryStore

__all__ = [
    'DEFAULT_OWNER_PROPERTY',
    'DEFAULT_ID_PROPERTY',
    'parse_point',
    'parse_ring',
    'parse_polygon',
    'parse_multi_polygon',
    'parse_district_document',
    'parse_district_documents',
    'BoundaryStore',
]
