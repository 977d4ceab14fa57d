"""Station assignment engine and service boundary resolution"""

from .station_assignment_engine import StationAssignmentEngine, find_nearest_station, FIRE_DISTRICT_SCOPE
from .service_boundary_resolver import ServiceBoundaryResolver, SERVICE_BOUNDARY_SCOPE

__all__ = [
    'StationAssignmentEngine',
    'find_nearest_station',
    'FIRE_DISTRICT_SCOPE',
    'ServiceBoundaryResolver',
    'SERVICE_BOUNDARY_SCOPE',
]
