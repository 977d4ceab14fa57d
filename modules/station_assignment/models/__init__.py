"""Data models for Station Assignment"""

from .station import AgencyKind, Agency, Station, FireStation, StationBoundary, StationLike
from .district import District, GeometryKind, BoundaryParseWarning
from .assignment import (
    AssignmentMethod,
    AssignmentRequest,
    AssignmentResult,
    BatchAssignmentResult,
    IncidentRecord,
)
from .module_config import (
    StationAssignmentConfig,
    CacheSettings,
    DistrictSettings,
    RepositorySettings,
    DEFAULT_AGENCY_CODES,
)

__all__ = [
    'AgencyKind',
    'Agency',
    'Station',
    'FireStation',
    'StationBoundary',
    'StationLike',
    'District',
    'GeometryKind',
    'BoundaryParseWarning',
    'AssignmentMethod',
    'AssignmentRequest',
    'AssignmentResult',
    'BatchAssignmentResult',
    'IncidentRecord',
    'StationAssignmentConfig',
    'CacheSettings',
    'DistrictSettings',
    'RepositorySettings',
    'DEFAULT_AGENCY_CODES',
]
