"""Tests for smallest-area service boundary resolution."""

import json
import logging
from pathlib import Path
from unittest.mock import Mock

import pytest

from ims_core.exceptions import IMSDataSourceError
from modules.station_assignment.assignment import ServiceBoundaryResolver
from modules.station_assignment.boundaries import BoundaryStore
from modules.station_assignment.caching import GeographicLookupCache
from modules.station_assignment.models import FireStation, StationBoundary
from modules.station_assignment.repositories import JsonStationRepository

DATA_DIR = Path(__file__).resolve().parents[3] / "data"

LARGE_RING = [[23.66, 37.94], [23.80, 37.94], [23.80, 38.04], [23.66, 38.04]]
SMALL_RING = [[23.60, 37.90], [23.69, 37.90], [23.69, 37.97], [23.60, 37.97]]
# Inside both rings
OVERLAP_POINT = (37.95, 23.68)


def fire_station(station_id, name, area, ring, boundary_id=None):
    return FireStation(
        id=station_id,
        name=name,
        agency_id=2,
        latitude=ring[0][1],
        longitude=ring[0][0],
        area=area,
        boundaries=[StationBoundary(id=boundary_id or station_id, station_id=station_id,
                                    coordinates_json=json.dumps(ring))],
    )


def repository_with(stations):
    repository = Mock(spec=["list_stations", "list_fire_stations_with_boundaries"])
    repository.list_fire_stations_with_boundaries.return_value = stations
    return repository


class TestSmallestAreaPolicy:
    """Test tie-breaking among overlapping service boundaries."""

    def test_smallest_area_wins(self):
        stations = [fire_station(5, "Large", 42.5, LARGE_RING), fire_station(6, "Small", 12.0, SMALL_RING)]
        resolver = ServiceBoundaryResolver(repository_with(stations))

        assert resolver.find_station_by_coordinates(*OVERLAP_POINT).id == 6

    def test_equal_areas_keep_first(self):
        stations = [fire_station(5, "First", 10.0, LARGE_RING), fire_station(6, "Second", 10.0, SMALL_RING)]
        resolver = ServiceBoundaryResolver(repository_with(stations))

        assert resolver.find_station_by_coordinates(*OVERLAP_POINT).id == 5

    def test_only_one_containing_boundary(self):
        stations = [fire_station(5, "Large", 42.5, LARGE_RING), fire_station(6, "Small", 12.0, SMALL_RING)]
        resolver = ServiceBoundaryResolver(repository_with(stations))

        assert resolver.find_station_by_coordinates(38.02, 23.78).id == 5
        assert resolver.find_station_by_coordinates(37.91, 23.61).id == 6
        assert resolver.find_station_by_coordinates(39.0, 22.0) is None

    def test_first_match_and_smallest_area_policies_differ(self):
        """The same overlapping fixture resolves differently under the two policies."""
        stations = [fire_station(5, "Large", 42.5, LARGE_RING), fire_station(6, "Small", 12.0, SMALL_RING)]
        districts = Mock()
        districts.list_raw_district_documents.return_value = [
            {"properties": {"OBJECTID": s.id, "PYR_YPIRES": s.name},
             "geometry": {"type": "Polygon", "coordinates": [json.loads(s.boundaries[0].coordinates_json)]}}
            for s in stations
        ]
        store = BoundaryStore(districts)
        resolver = ServiceBoundaryResolver(repository_with(stations))

        latitude, longitude = OVERLAP_POINT
        assert store.find_containing_district(longitude, latitude).owner_station_name == "Large"
        assert resolver.find_station_by_coordinates(latitude, longitude).name == "Small"

    def test_invalid_boundary_json_skipped(self, caplog):
        broken = FireStation(id=7, name="Broken", agency_id=2, latitude=37.95, longitude=23.68, area=1.0,
                             boundaries=[StationBoundary(id=99, station_id=7, coordinates_json="[[23.6, oops")])
        stations = [broken, fire_station(5, "Large", 42.5, LARGE_RING)]
        resolver = ServiceBoundaryResolver(repository_with(stations))

        with caplog.at_level(logging.WARNING):
            station = resolver.find_station_by_coordinates(*OVERLAP_POINT)

        assert station.id == 5
        assert "boundary 99" in caplog.text


class TestResolverCaching:
    """Test cache use by the resolver."""

    def test_station_snapshot_loaded_once(self):
        repository = repository_with([fire_station(5, "Large", 42.5, LARGE_RING)])
        resolver = ServiceBoundaryResolver(repository)

        resolver.find_station_by_coordinates(38.00, 23.70)
        resolver.find_station_by_coordinates(38.01, 23.71)

        repository.list_fire_stations_with_boundaries.assert_called_once()

    def test_misses_are_cached(self):
        cache = GeographicLookupCache()
        resolver = ServiceBoundaryResolver(repository_with([fire_station(5, "Large", 42.5, LARGE_RING)]), cache)

        assert resolver.find_station_by_coordinates(39.0, 22.0) is None
        assert resolver.find_station_by_coordinates(39.0, 22.0) is None
        assert cache.get_cache_statistics()["hits"] >= 1
        assert cache.get_cache_statistics()["cached_lookups"] == 1

    def test_clear_cache_reloads_snapshot(self):
        repository = repository_with([fire_station(5, "Large", 42.5, LARGE_RING)])
        resolver = ServiceBoundaryResolver(repository)

        resolver.get_all_stations()
        resolver.clear_cache()
        resolver.get_all_stations()

        assert repository.list_fire_stations_with_boundaries.call_count == 2

    def test_repository_failure_returns_none_and_is_not_cached(self):
        repository = repository_with([])
        repository.list_fire_stations_with_boundaries.side_effect = [
            IMSDataSourceError("Stations file not found"),
            [fire_station(5, "Large", 42.5, LARGE_RING)],
        ]
        resolver = ServiceBoundaryResolver(repository)

        assert resolver.find_station_by_coordinates(*OVERLAP_POINT) is None
        assert resolver.find_station_by_coordinates(*OVERLAP_POINT).id == 5


def test_sample_data_prefers_smaller_station():
    resolver = ServiceBoundaryResolver(JsonStationRepository(DATA_DIR / "stations.json"))
    station = resolver.find_station_by_coordinates(*OVERLAP_POINT)
    assert station.name == "Station_2"


def test_first_lookup_from_file_is_reused():
    cache = GeographicLookupCache()
    resolver = ServiceBoundaryResolver(JsonStationRepository(DATA_DIR / "stations.json"), cache)

    first = resolver.find_station_by_coordinates(*OVERLAP_POINT)
    misses = cache.get_cache_statistics()["misses"]
    second = resolver.find_station_by_coordinates(*OVERLAP_POINT)

    assert first == second
    assert cache.get_cache_statistics()["misses"] == misses
    assert cache.get_cache_statistics()["cached_lookups"] == 1


def test_missing_stations_file_returns_none(tmp_path, caplog):
    resolver = ServiceBoundaryResolver(JsonStationRepository(tmp_path / "missing.json"))

    with caplog.at_level(logging.ERROR):
        assert resolver.find_station_by_coordinates(*OVERLAP_POINT) is None

    assert "Stations file not found" in caplog.text
