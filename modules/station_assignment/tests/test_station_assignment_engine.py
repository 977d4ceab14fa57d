"""Tests for the station assignment engine."""

import json
import logging
import math
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import Mock, patch

import pytest

from ims_core.exceptions import IMSDataSourceError
from modules.station_assignment.assignment import StationAssignmentEngine, find_nearest_station
from modules.station_assignment.assignment.station_assignment_engine import FIRE_DISTRICT_SCOPE
from modules.station_assignment.caching import LookupKey
from modules.station_assignment.boundaries import BoundaryStore
from modules.station_assignment.geometry import EARTH_RADIUS_METERS, GeoPoint
from modules.station_assignment.models import (
    AgencyKind,
    AssignmentMethod,
    AssignmentRequest,
    Station,
    StationAssignmentConfig,
)
from modules.station_assignment.repositories import GeoJsonDistrictRepository, JsonStationRepository

DATA_DIR = Path(__file__).resolve().parents[3] / "data"


def meters_north(latitude, meters):
    return latitude + math.degrees(meters / EARTH_RADIUS_METERS)


@pytest.fixture
def station_repository():
    return JsonStationRepository(DATA_DIR / "stations.json")


@pytest.fixture
def boundary_store():
    return BoundaryStore(GeoJsonDistrictRepository(DATA_DIR / "fire_districts.geojson"))


@pytest.fixture
def engine(station_repository, boundary_store):
    return StationAssignmentEngine(station_repository, boundary_store)


def mock_repository(stations):
    repository = Mock(spec=["list_stations", "list_fire_stations_with_boundaries"])
    repository.list_stations.return_value = stations
    return repository


class TestDistrictAssignment:
    """Fire incidents resolved through fire-district polygons."""

    def test_point_in_station_1_district(self, engine):
        result = engine.assign(AssignmentRequest(latitude=37.9908, longitude=23.7383, agency_kind="fire"))

        assert result.station_id == 5
        assert result.station_name == "Station_1"
        assert result.assignment_method is AssignmentMethod.DISTRICT
        assert result.district_name == "Station_1"
        assert result.distance_meters == 0

    def test_response_uses_camel_case_keys(self, engine):
        result = engine.assign(AssignmentRequest(latitude=37.9908, longitude=23.7383, agency_kind="fire"))

        assert result.to_response() == {
            "stationId": 5,
            "stationName": "Station_1",
            "assignmentMethod": "District",
            "districtName": "Station_1",
            "distanceMeters": 0.0,
        }

    def test_outside_territory_returns_none_without_scanning(self, engine, boundary_store, caplog):
        with caplog.at_level(logging.WARNING):
            result = engine.assign(AssignmentRequest(latitude=0.0, longitude=0.0, agency_kind=AgencyKind.FIRE))

        assert result is None
        assert boundary_store.scan_count == 0
        assert "outside the operating territory" in caplog.text

    def test_point_outside_all_districts_is_cached(self, engine, boundary_store):
        request = AssignmentRequest(latitude=40.0, longitude=22.0, agency_kind=AgencyKind.FIRE)

        assert engine.assign(request) is None
        assert engine.assign(request) is None
        assert boundary_store.scan_count == 1

    def test_repeated_hits_scan_once(self, engine, boundary_store):
        request = AssignmentRequest(latitude=37.9908, longitude=23.7383, agency_kind=AgencyKind.FIRE)
        engine.assign(request)
        engine.assign(request)
        assert boundary_store.scan_count == 1

    def test_first_lookup_is_keyed_by_station_file_version(self, engine):
        engine.assign(AssignmentRequest(latitude=37.9908, longitude=23.7383, agency_kind=AgencyKind.FIRE))

        compute = Mock()
        key = LookupKey.for_point(FIRE_DISTRICT_SCOPE, 37.9908, 23.7383, "2025-09-22")
        district = engine.lookup_cache.get_or_compute(key, compute)

        compute.assert_not_called()
        assert district.owner_station_name == "Station_1"

    def test_district_owner_without_station_returns_none(self, boundary_store, caplog):
        repository = mock_repository([Station(id=9, name="Other", agency_id=2, latitude=38.0, longitude=23.7)])
        engine = StationAssignmentEngine(repository, boundary_store)

        with caplog.at_level(logging.ERROR):
            result = engine.assign(AssignmentRequest(latitude=37.9908, longitude=23.7383, agency_kind="fire"))

        assert result is None
        assert "no fire station has that name" in caplog.text

    def test_transform_failure_falls_back_to_nearest_fire_station(self, engine):
        with patch('modules.station_assignment.assignment.station_assignment_engine.project',
                   return_value=None):
            result = engine.assign(AssignmentRequest(latitude=37.9420, longitude=23.6470, agency_kind="fire"))

        assert result.station_id == 6
        assert result.assignment_method is AssignmentMethod.NEAREST
        assert result.distance_meters < 100

    def test_transform_failure_without_fallback(self, station_repository, boundary_store):
        config = StationAssignmentConfig(fire_nearest_fallback=False)
        engine = StationAssignmentEngine(station_repository, boundary_store, config=config)

        with patch('modules.station_assignment.assignment.station_assignment_engine.project',
                   return_value=None):
            result = engine.assign(AssignmentRequest(latitude=37.9908, longitude=23.7383, agency_kind="fire"))

        assert result is None


class TestNearestAssignment:
    """Coast guard, police and hospital incidents resolved by distance."""

    def test_hospital_at_500m_beats_1500m(self, boundary_store):
        far = Station(id=31, name="Far Hospital", agency_id=4,
                      latitude=meters_north(37.90, 1500), longitude=23.70)
        near = Station(id=30, name="Near Hospital", agency_id=4,
                       latitude=meters_north(37.90, 500), longitude=23.70)
        repository = mock_repository([far, near])
        engine = StationAssignmentEngine(repository, boundary_store)

        result = engine.assign(AssignmentRequest(latitude=37.90, longitude=23.70, agency_kind="hospital"))

        assert result.station_id == 30
        assert result.assignment_method is AssignmentMethod.NEAREST
        assert result.distance_meters == pytest.approx(500, abs=0.01)
        assert result.district_name == ""
        assert result.to_response()["districtName"] == ""
        repository.list_stations.assert_called_once_with(AgencyKind.HOSPITAL)

    def test_invalid_station_record_excluded_from_nearest_search(self, tmp_path, boundary_store, caplog):
        path = tmp_path / "stations.json"
        path.write_text(json.dumps({
            "version": "1",
            "agencies": [{"id": 4, "code": "EKAB", "name": "EKAB"}],
            "stations": [
                {"id": 1, "name": "Good Hospital", "agency_id": 4, "latitude": 37.9045, "longitude": 23.70},
                {"id": 2, "name": "Broken Hospital", "agency_id": 4, "latitude": 137.0, "longitude": 23.70},
            ],
        }))
        engine = StationAssignmentEngine(JsonStationRepository(path), boundary_store)

        with caplog.at_level(logging.WARNING):
            result = engine.assign(AssignmentRequest(latitude=37.90, longitude=23.70, agency_kind="hospital"))

        assert result.station_id == 1
        assert "Skipping invalid station record 2" in caplog.text

    def test_nearest_path_does_not_touch_districts(self, engine, boundary_store):
        engine.assign(AssignmentRequest(latitude=37.9350, longitude=23.6400, agency_kind="coastguard"))
        assert not boundary_store.is_loaded

    def test_coast_guard_from_sample_data(self, engine):
        result = engine.assign(AssignmentRequest(latitude=37.9350, longitude=23.6400, agency_kind="coast_guard"))
        assert result.station_name == "Piraeus Central Port Authority"

    def test_no_candidates_returns_none(self, boundary_store):
        engine = StationAssignmentEngine(mock_repository([]), boundary_store)
        assert engine.assign(AssignmentRequest(latitude=37.9, longitude=23.7, agency_kind="police")) is None

    def test_store_unavailable_returns_none(self, boundary_store, caplog):
        repository = mock_repository([])
        repository.list_stations.side_effect = IMSDataSourceError("Agency not found for police")
        engine = StationAssignmentEngine(repository, boundary_store)

        with caplog.at_level(logging.ERROR):
            result = engine.assign(AssignmentRequest(latitude=37.9, longitude=23.7, agency_kind="police"))

        assert result is None
        assert "Agency not found for police" in caplog.text


class TestFindNearestStation:
    """Test the generic nearest-station search."""

    def test_ties_keep_first_candidate(self):
        point = GeoPoint(latitude=38.0, longitude=23.0)
        first = SimpleNamespace(id=1, name="first", latitude=38.01, longitude=23.0)
        second = SimpleNamespace(id=2, name="second", latitude=38.01, longitude=23.0)

        station, _ = find_nearest_station(point, [first, second])
        assert station is first

    def test_bad_candidates_are_skipped(self):
        point = GeoPoint(latitude=38.0, longitude=23.0)
        broken = SimpleNamespace(id=1, name="broken", latitude=None, longitude=23.0)
        good = SimpleNamespace(id=2, name="good", latitude=38.5, longitude=23.0)

        station, distance = find_nearest_station(point, [broken, good])
        assert station is good
        assert distance > 0

    def test_empty_candidates(self):
        assert find_nearest_station(GeoPoint(latitude=38.0, longitude=23.0), []) is None


class TestAssignLocation:
    """Test raw request validation."""

    @pytest.mark.parametrize("latitude,longitude,agency", [
        (0.0, 23.7, "fire"),
        (37.9, 0.0, "fire"),
        (37.9, 23.7, ""),
        (37.9, 23.7, "   "),
        (37.9, 23.7, "army"),
        (95.0, 23.7, "police"),
    ])
    def test_invalid_requests_rejected(self, engine, latitude, longitude, agency):
        assert engine.assign_location(latitude, longitude, agency) is None

    def test_agency_case_insensitive(self, engine):
        result = engine.assign_location(37.9908, 23.7383, "FIRE")
        assert result.station_id == 5

    def test_coast_guard_spelling_variants(self, engine):
        for agency in ("coastguard", "Coast-Guard", "COAST_GUARD"):
            assert engine.assign_location(37.9350, 23.6400, agency) is not None


class TestConvenienceLookups:
    """Test per-agency convenience entry points."""

    def test_find_fire_station(self, engine):
        station = engine.find_fire_station(37.9908, 23.7383)
        assert station.id == 5

    def test_find_nearest_police_station(self, engine):
        station = engine.find_nearest_police_station(37.9841, 23.7281)
        assert station.name == "Omonia Police Station"

    def test_find_nearest_hospital(self, engine):
        station = engine.find_nearest_hospital(37.9420, 23.6580)
        assert station.id == 31

    def test_find_nearest_coast_guard_station(self, engine):
        station = engine.find_nearest_coast_guard_station(38.02, 24.00)
        assert station.id == 11

    def test_invalid_coordinates(self, engine):
        assert engine.find_nearest_hospital(120.0, 23.0) is None
