"""Service Boundary Resolver

Finds the fire station whose service boundary contains a WGS84 point. Where
boundaries overlap, the station with the smallest declared area wins; equal
areas keep the first station in repository order. This is a separate policy from
the first-match rule used for fire-district lookups.
"""

import json
import logging
from typing import List, Optional

from ims_core.exceptions import IMSDataSourceError
from ..boundaries import parse_ring
from ..caching import GeographicLookupCache, LookupKey
from ..geometry import contains_point
from ..models import FireStation

logger = logging.getLogger(__name__)

SERVICE_BOUNDARY_SCOPE = "service_boundary"


class ServiceBoundaryResolver:
    """Smallest-area service boundary lookup over fire stations."""

    def __init__(self, station_repository, lookup_cache: Optional[GeographicLookupCache] = None):
        self.station_repository = station_repository
        self.lookup_cache = lookup_cache or GeographicLookupCache()

    def find_station_by_coordinates(self, latitude: float, longitude: float) -> Optional[FireStation]:
        """Fire station whose service boundary contains the point.

        Results, including misses, are cached per point.

        Args:
            latitude: Point latitude (WGS84)
            longitude: Point longitude (WGS84)

        Returns:
            The containing FireStation with the smallest area, or None
        """
        try:
            key = LookupKey.for_point(SERVICE_BOUNDARY_SCOPE, latitude, longitude,
                                      getattr(self.station_repository, "station_set_version", None))
            return self.lookup_cache.get_or_compute(key, lambda: self._resolve(latitude, longitude))
        except IMSDataSourceError as e:
            logger.error(f"Station data unavailable for boundary lookup: {e}")
            return None
        except Exception as e:
            logger.error(f"Error finding station by coordinates ({latitude}, {longitude}): {e}")
            return None

    def get_all_stations(self) -> List[FireStation]:
        """All fire stations with boundaries, served from the cached snapshot."""
        return self.lookup_cache.get_all_stations(self.station_repository.list_fire_stations_with_boundaries)

    def clear_cache(self) -> None:
        self.lookup_cache.clear()

    def _resolve(self, latitude: float, longitude: float) -> Optional[FireStation]:
        best: Optional[FireStation] = None
        smallest_area = float('inf')

        for station in self.get_all_stations():
            if station.area < smallest_area and self._boundaries_contain(station, latitude, longitude):
                best = station
                smallest_area = station.area

        if best is None:
            logger.debug(f"No service boundary contains ({latitude}, {longitude})")
        return best

    @staticmethod
    def _boundaries_contain(station: FireStation, latitude: float, longitude: float) -> bool:
        for boundary in station.boundaries:
            try:
                coordinates = json.loads(boundary.coordinates_json)
            except json.JSONDecodeError as e:
                logger.warning(f"Skipping boundary {boundary.id} of station {station.id}: invalid JSON ({e})")
                continue

            # Rings are stored as [lon, lat] pairs
            if contains_point(parse_ring(coordinates), longitude, latitude):
                return True
        return False
