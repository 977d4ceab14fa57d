"""Repository Protocols

Contracts the assignment engine and boundary store consume. Implementations raise
``IMSDataSourceError`` when the underlying store is unavailable.
"""

from typing import Any, Dict, List, Optional, Protocol

from ..models import AgencyKind, FireStation, Station


class StationRepository(Protocol):
    """Source of station records."""

    station_set_version: Optional[str]

    def list_stations(self, agency_kind: AgencyKind) -> List[Station]:
        """Stations of one agency, in store order."""
        ...

    def list_fire_stations_with_boundaries(self) -> List[FireStation]:
        """Fire stations with their declared area and service boundary rings."""
        ...


class DistrictRepository(Protocol):
    """Source of raw fire-district documents (GeoJSON-like features)."""

    def list_raw_district_documents(self) -> List[Dict[str, Any]]:
        ...
