"""Tests for the StationAssignmentProcessor batch module."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from ims_core.config import ConfigLoader
from ims_core.exceptions import IMSDataSourceError
from ims_core.interfaces import ModuleProcessor
from modules.station_assignment.processor import StationAssignmentProcessor

ROOT_DIR = Path(__file__).resolve().parents[3]
DATA_DIR = ROOT_DIR / "data"


@pytest.fixture
def incidents():
    return {
        "incidents": [
            {"incident_id": "INC-1", "latitude": 37.9908, "longitude": 23.7383, "agency": "fire"},
            {"incident_id": "INC-2", "latitude": 37.9000, "longitude": 23.7000, "agency": "hospital"},
            {"incident_id": "INC-3", "latitude": 0.0, "longitude": 23.7000, "agency": "police"},
            {"incident_id": "INC-4", "latitude": 37.9350, "longitude": 23.6400, "agency": "army"},
            {"incident_id": "INC-5", "agency": "fire"},
        ]
    }


@pytest.fixture
def workspace(tmp_path, incidents):
    """Environment configuration pointing at the sample data and a temporary output."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    incidents_path = tmp_path / "incidents.json"
    incidents_path.write_text(json.dumps(incidents))

    environment_config = {
        "shared": {
            "data_sources": {
                "stations": str(DATA_DIR / "stations.json"),
                "fire_districts": str(DATA_DIR / "fire_districts.geojson"),
                "incidents": str(incidents_path),
            },
            "processing": {"batch_size": 2, "output_path": "output/assignments.json"},
        },
        "environments": {
            "development": {"logging": {"level": "DEBUG", "format": "standard"}},
            "production": {"logging": {"level": "INFO", "format": "json"},
                           "data_sources": {"stations": str(tmp_path / "missing.json")}},
        },
        "validation": {"required_environment_variables": []},
    }
    (config_dir / "environment_config.json").write_text(json.dumps(environment_config))
    return tmp_path


@pytest.fixture
def config_loader(workspace):
    return ConfigLoader(str(workspace / "config"), str(ROOT_DIR / "modules"))


@pytest.fixture
def processor(config_loader):
    return StationAssignmentProcessor(config_loader, "development")


class TestStationAssignmentProcessor:
    """Test batch assignment processing."""

    def test_implements_module_processor(self, processor):
        assert isinstance(processor, ModuleProcessor)

    def test_validate_configuration(self, processor):
        assert processor.validate_configuration() is True

    def test_missing_data_source_fails_validation(self, config_loader):
        processor = StationAssignmentProcessor(config_loader, "production")
        assert processor.validate_configuration() is False

        result = processor.process()
        assert result.success is False
        assert result.errors == ["Configuration validation failed"]

    def test_process_assigns_and_writes_output(self, processor, workspace):
        result = processor.process(dry_run=False)

        assert result.success is True
        assert result.records_processed == 4
        assert result.summary.assigned_count == 2
        assert result.summary.unassigned_count == 2
        assert len(result.summary.batch_results) == 2
        assert result.summary.method_summary == {"District": 1, "Nearest": 1}
        assert result.summary.get_assignment_rate() == 0.5
        assert any("Invalid incident record #4" in error for error in result.errors)

        output = json.loads((workspace / "output" / "assignments.json").read_text())
        rows = {row["incident_id"]: row for row in output["assignments"]}
        assert rows["INC-1"]["assignment"]["stationId"] == 5
        assert rows["INC-1"]["assignment"]["assignmentMethod"] == "District"
        assert rows["INC-2"]["assignment"]["assignmentMethod"] == "Nearest"
        assert rows["INC-3"]["assignment"] is None
        assert rows["INC-4"]["assignment"] is None

    def test_unwritable_output_fails_processing(self, processor, workspace):
        # A file where the output directory should be
        (workspace / "output").write_text("")

        result = processor.process(dry_run=False)

        assert result.success is False
        assert "Failed to write assignments" in result.errors[0]
        assert result.summary.error_occurred_at is not None

    def test_dry_run_does_not_write(self, processor, workspace):
        result = processor.process(dry_run=True)

        assert result.success is True
        assert result.summary.output_path is None
        assert result.summary.dry_run is True
        assert not (workspace / "output").exists()

    def test_batch_summaries(self, processor):
        processor.initialize()
        incidents, errors = processor.load_incidents()
        _, batches = processor.assign_incidents(incidents, batch_size=3)

        assert [b.records_processed for b in batches] == [3, 1]
        assert batches[0].method_summary == {"District": 1, "Nearest": 1}
        assert batches[0].assigned_count == 2
        assert batches[1].unassigned_count == 1
        assert len(errors) == 1

    def test_get_status_reports_components(self, processor):
        status = processor.get_status()
        assert status.module_name == "station_assignment"
        assert status.status == "ready"
        assert status.last_run is None

        processor.process(dry_run=True)
        status = processor.get_status()
        assert status.last_run is not None
        assert status.environment == "development"
        assert [c.name for c in status.components] == ["boundary_store", "lookup_cache"]
        assert status.get_component("boundary_store").details["district_count"] == 2
        assert "hits" in status.get_component("lookup_cache").details

    def test_boundary_store_failure_marks_module_unhealthy(self, processor):
        processor.initialize()
        with patch.object(processor.boundary_store.district_repository, "list_raw_district_documents",
                          side_effect=IMSDataSourceError("District file not found")):
            processor.boundary_store.ensure_loaded()

        status = processor.get_status()
        store = status.get_component("boundary_store")
        assert store.ready is False
        assert "District file not found" in store.last_error
        assert status.health_check is False
        assert status.status == "error"

    def test_engine_created_once(self, processor):
        assert processor.initialize() is processor.initialize()

    def test_find_station_by_boundary_uses_smallest_area(self, processor):
        station = processor.find_station_by_boundary(37.95, 23.68)

        assert station.id == 6
        assert station.area == 12.0
        assert processor.find_station_by_boundary(40.0, 22.0) is None
