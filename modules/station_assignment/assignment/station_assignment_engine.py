"""Station Assignment Engine

Assigns an incident location to a station of the requested agency:

- Fire incidents are matched against fire-district polygons in Greek Grid
  coordinates; the district's owner name identifies the station.
- Coast guard, police and hospital incidents go to the nearest station of the
  agency by great-circle distance.

Public entry points never raise; failures are logged and reported as ``None``.
"""

import logging
import math
from typing import Iterable, List, Optional, Tuple, TypeVar

from ims_core.exceptions import IMSDataSourceError
from ..boundaries import BoundaryStore
from ..caching import GeographicLookupCache, LookupKey
from ..geometry import GeoPoint, haversine_distance, project
from ..models import (
    AgencyKind,
    AssignmentMethod,
    AssignmentRequest,
    AssignmentResult,
    District,
    Station,
    StationAssignmentConfig,
    StationLike,
)

logger = logging.getLogger(__name__)

S = TypeVar('S', bound=StationLike)

FIRE_DISTRICT_SCOPE = "fire_district"


def find_nearest_station(point: GeoPoint, candidates: Iterable[S]) -> Optional[Tuple[S, float]]:
    """Nearest candidate to a point by haversine distance.

    Candidates whose distance cannot be computed are logged and skipped. Ties keep
    the first candidate in input order.

    Args:
        point: Reference location
        candidates: Stations (anything with ``id``, ``name``, ``latitude``, ``longitude``)

    Returns:
        Tuple of (nearest station, distance in meters), or None when no candidate qualifies
    """
    nearest: Optional[S] = None
    nearest_distance = float('inf')

    for candidate in candidates:
        try:
            distance = haversine_distance(point.latitude, point.longitude,
                                          candidate.latitude, candidate.longitude)
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Skipping station {getattr(candidate, 'id', '?')} in nearest search: {e}")
            continue

        if math.isnan(distance):
            logger.warning(f"Skipping station {candidate.id} in nearest search: distance is not a number")
            continue

        if distance < nearest_distance:
            nearest = candidate
            nearest_distance = distance

    if nearest is None:
        return None
    return nearest, nearest_distance


class StationAssignmentEngine:
    """Resolves incidents to stations for the supported agencies."""

    def __init__(self, station_repository, boundary_store: BoundaryStore,
                 lookup_cache: Optional[GeographicLookupCache] = None,
                 config: Optional[StationAssignmentConfig] = None):
        """
        Args:
            station_repository: StationRepository providing station records
            boundary_store: Fire-district store queried in grid coordinates
            lookup_cache: Cache for district lookups; created from config when omitted
            config: Module settings; defaults apply when omitted
        """
        self.config = config or StationAssignmentConfig()
        self.station_repository = station_repository
        self.boundary_store = boundary_store
        self.lookup_cache = lookup_cache or GeographicLookupCache(
            stations_ttl_seconds=self.config.cache.stations_ttl_seconds,
            lookup_ttl_seconds=self.config.cache.lookup_ttl_seconds,
            max_entries=self.config.cache.max_entries,
        )

    def assign(self, request: AssignmentRequest) -> Optional[AssignmentResult]:
        """Assign an incident to a station.

        Args:
            request: Incident location and agency

        Returns:
            AssignmentResult, or None when no station could be assigned
        """
        try:
            if request.agency_kind.uses_district_boundaries():
                return self._assign_by_district(request.latitude, request.longitude)
            return self._assign_nearest(request.latitude, request.longitude, request.agency_kind)
        except IMSDataSourceError as e:
            logger.error(f"Station data unavailable for {request.agency_kind.value} assignment: {e}")
            return None
        except Exception as e:
            logger.error(f"Error assigning {request.agency_kind.value} station for "
                         f"({request.latitude}, {request.longitude}): {e}")
            return None

    def assign_location(self, latitude: float, longitude: float, agency: str) -> Optional[AssignmentResult]:
        """Validate raw request values and assign.

        Zero latitude or longitude and empty or unsupported agency names are
        rejected with a warning.
        """
        if not agency or not agency.strip():
            logger.warning("Assignment rejected: agency type is required")
            return None

        kind = AgencyKind.parse(agency)
        if kind is None:
            logger.warning(f"Assignment rejected: unsupported agency type '{agency}'")
            return None

        if latitude == 0 or longitude == 0:
            logger.warning(f"Assignment rejected: invalid coordinates ({latitude}, {longitude})")
            return None

        try:
            request = AssignmentRequest(latitude=latitude, longitude=longitude, agency_kind=kind)
        except ValueError as e:
            logger.warning(f"Assignment rejected: {e}")
            return None

        return self.assign(request)

    def find_fire_station(self, latitude: float, longitude: float) -> Optional[Station]:
        return self._find_station(latitude, longitude, AgencyKind.FIRE)

    def find_nearest_coast_guard_station(self, latitude: float, longitude: float) -> Optional[Station]:
        return self._find_station(latitude, longitude, AgencyKind.COASTGUARD)

    def find_nearest_police_station(self, latitude: float, longitude: float) -> Optional[Station]:
        return self._find_station(latitude, longitude, AgencyKind.POLICE)

    def find_nearest_hospital(self, latitude: float, longitude: float) -> Optional[Station]:
        return self._find_station(latitude, longitude, AgencyKind.HOSPITAL)

    def _find_station(self, latitude: float, longitude: float, kind: AgencyKind) -> Optional[Station]:
        try:
            request = AssignmentRequest(latitude=latitude, longitude=longitude, agency_kind=kind)
        except ValueError as e:
            logger.warning(f"Invalid coordinates ({latitude}, {longitude}): {e}")
            return None

        result = self.assign(request)
        if result is None:
            return None

        try:
            for station in self.station_repository.list_stations(kind):
                if station.id == result.station_id:
                    return station
        except IMSDataSourceError as e:
            logger.error(f"Station data unavailable for {kind.value}: {e}")
        return None

    def _assign_by_district(self, latitude: float, longitude: float) -> Optional[AssignmentResult]:
        territory = self.config.territory
        if not territory.contains(latitude, longitude):
            logger.warning(f"Coordinates ({latitude}, {longitude}) are outside the operating territory")
            return None

        projected = project(GeoPoint(latitude=latitude, longitude=longitude), self.config.projection)
        if projected is None:
            if self.config.fire_nearest_fallback:
                logger.warning(f"Projection unavailable for ({latitude}, {longitude}), "
                               f"falling back to nearest fire station")
                return self._assign_nearest(latitude, longitude, AgencyKind.FIRE)
            logger.warning(f"Projection unavailable for ({latitude}, {longitude})")
            return None

        key = LookupKey.for_point(FIRE_DISTRICT_SCOPE, latitude, longitude, self._station_set_version())
        district: Optional[District] = self.lookup_cache.get_or_compute(
            key, lambda: self.boundary_store.find_containing_district(projected.x, projected.y)
        )
        if district is None:
            logger.info(f"No fire district contains ({latitude}, {longitude})")
            return None

        stations = self.station_repository.list_stations(AgencyKind.FIRE)
        station = next((s for s in stations if s.name == district.owner_station_name), None)
        if station is None:
            logger.error(f"Fire district {district.document_id} is owned by '{district.owner_station_name}' "
                         f"but no fire station has that name")
            return None

        logger.debug(f"Fire incident at ({latitude}, {longitude}) assigned to {station.name} by district")
        return AssignmentResult(
            station_id=station.id,
            station_name=station.name,
            assignment_method=AssignmentMethod.DISTRICT,
            district_name=district.owner_station_name,
            distance_meters=0.0,
        )

    def _assign_nearest(self, latitude: float, longitude: float, kind: AgencyKind) -> Optional[AssignmentResult]:
        stations: List[Station] = self.station_repository.list_stations(kind)
        if not stations:
            logger.warning(f"No {kind.value} stations available")
            return None

        nearest = find_nearest_station(GeoPoint(latitude=latitude, longitude=longitude), stations)
        if nearest is None:
            logger.warning(f"No {kind.value} station could be ranked for ({latitude}, {longitude})")
            return None

        station, distance = nearest
        logger.debug(f"{kind.value} incident at ({latitude}, {longitude}) assigned to "
                     f"{station.name} at {distance:.0f}m")
        return AssignmentResult(
            station_id=station.id,
            station_name=station.name,
            assignment_method=AssignmentMethod.NEAREST,
            district_name="",
            distance_meters=distance,
        )

    def _station_set_version(self) -> Optional[str]:
        return getattr(self.station_repository, "station_set_version", None)
