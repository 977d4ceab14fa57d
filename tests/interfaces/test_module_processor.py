"""Tests for ModuleProcessor interface and related models."""

import pytest
from datetime import datetime
from pydantic import ValidationError

from ims_core.interfaces import (
    ComponentStatus,
    ModuleProcessor,
    ModuleStatus,
    ProcessingResult,
    RunSummary,
)


class TestProcessingResult:
    """Test cases for ProcessingResult Pydantic model."""

    def test_valid_processing_result(self):
        result = ProcessingResult(
            success=True,
            records_processed=40,
            summary=RunSummary(assigned_count=38, unassigned_count=2, method_summary={"District": 30, "Nearest": 8}),
            execution_time=1.25
        )

        assert result.success is True
        assert result.records_processed == 40
        assert result.errors == []
        assert result.summary.unassigned_count == 2
        assert result.summary.get_assignment_rate() == 0.95
        assert result.execution_time == 1.25

    def test_processing_result_with_errors(self):
        result = ProcessingResult(
            success=False,
            records_processed=0,
            errors=["District file not found", "Invalid incident record #3"],
            execution_time=0.1
        )

        assert result.success is False
        assert len(result.errors) == 2
        assert "District file not found" in result.errors
        assert result.summary.assigned_count == 0

    @pytest.mark.parametrize("field,value", [
        ("records_processed", -5),
        ("execution_time", -1.0),
    ])
    def test_negative_values_invalid(self, field, value):
        kwargs = {"success": True, "records_processed": 10, "execution_time": 1.0}
        kwargs[field] = value

        with pytest.raises(ValidationError) as exc_info:
            ProcessingResult(**kwargs)

        errors = exc_info.value.errors()
        assert any("greater than or equal to 0" in str(error) for error in errors)

    def test_failed_result_records_failure_time(self):
        result = ProcessingResult.failed(["Configuration validation failed"], dry_run=True)

        assert result.success is False
        assert result.records_processed == 0
        assert result.execution_time == 0.0
        assert result.summary.dry_run is True
        assert result.summary.error_occurred_at is not None


class TestRunSummary:
    """Test cases for RunSummary totals."""

    def test_empty_run_has_zero_assignment_rate(self):
        summary = RunSummary()

        assert summary.get_assignment_rate() == 0.0
        assert summary.output_path is None
        assert summary.batch_results == []

    def test_negative_counts_invalid(self):
        with pytest.raises(ValidationError):
            RunSummary(assigned_count=-1)


class TestComponentStatus:
    """Test cases for ComponentStatus."""

    def test_name_required(self):
        with pytest.raises(ValidationError):
            ComponentStatus(name="", ready=True)

    def test_failed_component(self):
        component = ComponentStatus(name="boundary_store", ready=False, last_error="District file not found")

        assert component.ready is False
        assert component.details == {}


class TestModuleStatus:
    """Test cases for ModuleStatus Pydantic model."""

    def test_valid_module_status(self):
        last_run = datetime.now()
        status = ModuleStatus(
            module_name="station_assignment",
            is_configured=True,
            last_run=last_run,
            status="ready",
            health_check=True
        )

        assert status.module_name == "station_assignment"
        assert status.last_run == last_run
        assert status.components == []
        assert status.get_component("boundary_store") is None

    def test_module_status_without_last_run(self):
        status = ModuleStatus(
            module_name="station_assignment",
            is_configured=False,
            status="error",
            health_check=False
        )

        assert status.last_run is None
        assert status.status == "error"

    def test_module_status_carries_components(self):
        """Test component status survives serialization."""
        status = ModuleStatus(
            module_name="station_assignment",
            environment="development",
            is_configured=True,
            status="ready",
            health_check=True,
            components=[ComponentStatus(name="boundary_store", ready=True, details={"district_count": 3})]
        )

        assert status.get_component("boundary_store").details["district_count"] == 3
        data = status.model_dump()
        assert data["components"][0]["name"] == "boundary_store"
        assert data["environment"] == "development"
        assert data["last_run"] is None
        assert data["health_check"] is True


class TestModuleProcessor:
    """Test cases for ModuleProcessor abstract base class."""

    def test_cannot_instantiate_abstract_class(self):
        with pytest.raises(TypeError) as exc_info:
            ModuleProcessor()

        assert "Can't instantiate abstract class" in str(exc_info.value)

    def test_abstract_methods_required(self):
        """Test that all abstract methods must be implemented in subclasses."""

        class IncompleteModule(ModuleProcessor):
            pass

        with pytest.raises(TypeError) as exc_info:
            IncompleteModule()

        error_message = str(exc_info.value)
        for method in ["__init__", "validate_configuration", "process", "get_status"]:
            assert method in error_message

    def test_concrete_implementation_works(self):
        """Test that a complete implementation can be instantiated."""

        class ConcreteModule(ModuleProcessor):

            def __init__(self, config_loader):
                self.config_loader = config_loader

            def validate_configuration(self) -> bool:
                return True

            def process(self, dry_run: bool = False) -> ProcessingResult:
                return ProcessingResult(
                    success=True,
                    records_processed=0 if dry_run else 10,
                    execution_time=0.5
                )

            def get_status(self) -> ModuleStatus:
                return ModuleStatus(
                    module_name="concrete_module",
                    is_configured=True,
                    status="ready",
                    health_check=True
                )

        module = ConcreteModule("config_loader")

        assert module.config_loader == "config_loader"
        assert module.validate_configuration() is True
        assert module.process(dry_run=True).records_processed == 0
        assert module.process().records_processed == 10
        assert module.get_status().module_name == "concrete_module"
