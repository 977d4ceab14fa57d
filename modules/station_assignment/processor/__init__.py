"""Station Assignment Processing Logic

This package contains the batch processing implementation for the station assignment
module, including the StationAssignmentProcessor class that implements the
ModuleProcessor interface.
"""

from .station_assignment_processor import StationAssignmentProcessor, MODULE_NAME

__all__ = ['StationAssignmentProcessor', 'MODULE_NAME']
