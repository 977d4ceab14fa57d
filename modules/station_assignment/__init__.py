"""Station Assignment Module

Assigns emergency incidents to the responsible fire station by fire-district
containment, or to the nearest coast guard, police or hospital station by
great-circle distance.
"""

from .assignment import StationAssignmentEngine, ServiceBoundaryResolver, find_nearest_station
from .boundaries import BoundaryStore
from .caching import GeographicLookupCache, LookupKey
from .models import AgencyKind, AssignmentMethod, AssignmentRequest, AssignmentResult

__all__ = [
    'StationAssignmentEngine',
    'ServiceBoundaryResolver',
    'find_nearest_station',
    'BoundaryStore',
    'GeographicLookupCache',
    'LookupKey',
    'AgencyKind',
    'AssignmentMethod',
    'AssignmentRequest',
    'AssignmentResult',
]

__version__ = "1.0.0"
