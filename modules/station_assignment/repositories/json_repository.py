"""JSON File Repositories

File-backed implementations of the repository protocols:

- ``JsonStationRepository`` reads a stations document holding agencies, stations
  and fire-station service boundaries.
- ``GeoJsonDistrictRepository`` reads a GeoJSON FeatureCollection of fire districts
  in Greek Grid coordinates.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional, Tuple, Union

from pydantic import ValidationError
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from ims_core.exceptions import IMSDataSourceError
from ..models import (
    DEFAULT_AGENCY_CODES,
    Agency,
    AgencyKind,
    FireStation,
    Station,
    StationBoundary,
)

logger = logging.getLogger(__name__)


def _read_json(path: Path) -> Any:
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


class StationDocument(NamedTuple):
    """Immutable in-memory view of one read of the stations file."""
    agencies: Tuple[Agency, ...]
    stations: Tuple[Dict[str, Any], ...]
    version: Optional[str]


class JsonStationRepository:
    """Station repository backed by a JSON document.

    The document is read on first use and kept in memory until ``reload()``.
    Transient read errors are retried with a fixed delay. Station records that
    fail validation are logged and left out of the listing.

    Expected layout::

        {"version": "...",
         "agencies": [{"id": 1, "code": "FIRE", "name": "..."}],
         "stations": [{"id": 5, "name": "...", "agency_id": 1,
                       "latitude": 37.98, "longitude": 23.72,
                       "area": 42.5, "boundaries": [{"id": 1, "coordinates": [[lon, lat], ...]}]}]}
    """

    def __init__(self, path: Union[str, Path],
                 agency_codes: Optional[Dict[str, str]] = None,
                 max_retry_attempts: int = 3,
                 retry_delay_seconds: float = 1.0):
        """
        Args:
            path: Location of the stations document
            agency_codes: Agency kind value to agency code mapping
            max_retry_attempts: Attempts per read before giving up
            retry_delay_seconds: Wait between attempts
        """
        self.path = Path(path)
        self.agency_codes = dict(agency_codes or DEFAULT_AGENCY_CODES)
        self.max_retry_attempts = max_retry_attempts
        self.retry_delay_seconds = retry_delay_seconds
        self._lock = threading.Lock()
        self._document: Optional[StationDocument] = None

    @property
    def station_set_version(self) -> Optional[str]:
        """Version of the stations document, reading the file if needed.

        Raises:
            IMSDataSourceError: If the stations file cannot be loaded
        """
        return self._ensure_document().version

    def _load_document(self) -> Dict[str, Any]:
        if not self.path.exists():
            raise IMSDataSourceError(
                f"Stations file not found: {self.path}",
                {"path": str(self.path)}
            )

        retryer = Retrying(
            stop=stop_after_attempt(self.max_retry_attempts),
            wait=wait_fixed(self.retry_delay_seconds),
            retry=retry_if_exception_type(OSError),
            reraise=True
        )
        try:
            document = retryer(_read_json, self.path)
        except json.JSONDecodeError as e:
            raise IMSDataSourceError(
                f"Invalid JSON in stations file: {str(e)}",
                {"path": str(self.path)}
            )
        except OSError as e:
            raise IMSDataSourceError(
                f"Failed to read stations file after {self.max_retry_attempts} attempts: {str(e)}",
                {"path": str(self.path)}
            )

        if not isinstance(document, dict):
            raise IMSDataSourceError("Stations document must be a JSON object", {"path": str(self.path)})
        return document

    def _ensure_document(self) -> StationDocument:
        with self._lock:
            if self._document is not None:
                return self._document

            raw = self._load_document()
            try:
                agencies = tuple(Agency(**record) for record in raw.get("agencies", []))
            except (TypeError, ValidationError) as e:
                raise IMSDataSourceError(f"Invalid agency record: {str(e)}", {"path": str(self.path)})

            stations = raw.get("stations", [])
            if not isinstance(stations, list):
                raise IMSDataSourceError("'stations' must be a list", {"path": str(self.path)})

            version = raw.get("version")
            self._document = StationDocument(
                agencies=agencies,
                stations=tuple(stations),
                version=str(version) if version is not None else None,
            )
            logger.info(f"Loaded {len(stations)} stations and {len(agencies)} agencies from {self.path}")
            return self._document

    def reload(self) -> None:
        """Discard the in-memory document so the next call reads the file again."""
        with self._lock:
            self._document = None

    def list_agencies(self) -> List[Agency]:
        return list(self._ensure_document().agencies)

    def get_agency(self, agency_kind: AgencyKind) -> Agency:
        """Find the agency record for an agency kind by its configured code.

        Raises:
            IMSDataSourceError: If no agency carries the configured code
        """
        return self._find_agency(self._ensure_document(), agency_kind)

    def _find_agency(self, document: StationDocument, agency_kind: AgencyKind) -> Agency:
        code = self.agency_codes.get(agency_kind.value)
        for agency in document.agencies:
            if agency.code == code:
                return agency
        raise IMSDataSourceError(
            f"Agency not found for {agency_kind.value}",
            {"code": code}
        )

    def list_stations(self, agency_kind: AgencyKind) -> List[Station]:
        """Valid stations of one agency, in file order.

        Raises:
            IMSDataSourceError: If the file cannot be loaded or the agency is missing
        """
        document = self._ensure_document()
        agency = self._find_agency(document, agency_kind)
        model = FireStation if agency_kind is AgencyKind.FIRE else Station

        stations = []
        for record in document.stations:
            if not isinstance(record, dict) or record.get("agency_id") != agency.id:
                continue
            try:
                stations.append(self._build_station(record, model))
            except (KeyError, TypeError, AttributeError, ValueError) as e:
                logger.warning(f"Skipping invalid station record {record.get('id')} in {self.path}: {e}")
        return stations

    def list_fire_stations_with_boundaries(self) -> List[FireStation]:
        return [station for station in self.list_stations(AgencyKind.FIRE)
                if isinstance(station, FireStation) and station.boundaries]

    def _build_station(self, record: Dict[str, Any], model: type) -> Station:
        if model is FireStation:
            boundaries = [self._build_boundary(boundary, record.get("id"))
                          for boundary in record.get("boundaries", [])]
            return FireStation(
                id=record["id"],
                name=record["name"],
                agency_id=record["agency_id"],
                latitude=record["latitude"],
                longitude=record["longitude"],
                area=record.get("area", 0.0),
                boundaries=boundaries,
            )
        return Station(
            id=record["id"],
            name=record["name"],
            agency_id=record["agency_id"],
            latitude=record["latitude"],
            longitude=record["longitude"],
        )

    @staticmethod
    def _build_boundary(boundary: Dict[str, Any], station_id: Any) -> StationBoundary:
        # Boundary rings are stored either as raw JSON text or as nested lists
        coordinates_json = boundary.get("coordinates_json")
        if coordinates_json is None:
            coordinates_json = json.dumps(boundary.get("coordinates", []))
        return StationBoundary(
            id=boundary["id"],
            station_id=boundary.get("station_id", station_id),
            coordinates_json=coordinates_json,
        )


class GeoJsonDistrictRepository:
    """District repository backed by a GeoJSON FeatureCollection file.

    Features are returned as plain dictionaries; parsing and validation happen in
    the boundary store. The file is read on every call.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def list_raw_district_documents(self) -> List[Dict[str, Any]]:
        """
        Returns:
            Raw feature dictionaries in file order

        Raises:
            IMSDataSourceError: If the file is missing, unreadable or not a FeatureCollection
        """
        try:
            document = _read_json(self.path)
        except FileNotFoundError:
            raise IMSDataSourceError(f"District file not found: {self.path}", {"path": str(self.path)})
        except json.JSONDecodeError as e:
            raise IMSDataSourceError(f"Invalid JSON in district file: {str(e)}", {"path": str(self.path)})
        except OSError as e:
            raise IMSDataSourceError(f"Failed to read district file: {str(e)}", {"path": str(self.path)})

        if isinstance(document, list):
            return document

        if not isinstance(document, dict) or not isinstance(document.get("features"), list):
            raise IMSDataSourceError(
                "District file must be a GeoJSON FeatureCollection",
                {"path": str(self.path)}
            )

        features = document["features"]
        logger.debug(f"Read {len(features)} district documents from {self.path}")
        return features
