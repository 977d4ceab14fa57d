"""Station and district repositories"""

from .interfaces import StationRepository, DistrictRepository
from .json_repository import JsonStationRepository, GeoJsonDistrictRepository

__all__ = [
    'StationRepository',
    'DistrictRepository',
    'JsonStationRepository',
    'GeoJsonDistrictRepository',
]
