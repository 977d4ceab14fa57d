"""IMS Module Processor Interface

Contract shared by IMS assignment modules: a processor validates its
configuration, runs a batch assignment pass and reports the health of the
components it depends on. Run summaries and component status are typed so the
CLI and callers read them without guessing dictionary keys.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class RunSummary(BaseModel):
    """Totals for one batch assignment run."""

    dry_run: bool = False
    environment: Optional[str] = None
    assigned_count: int = Field(0, ge=0, description="Incidents assigned to a station")
    unassigned_count: int = Field(0, ge=0, description="Valid incidents with no station")
    method_summary: Dict[str, int] = Field(default_factory=dict, description="Assignments per method")
    batch_results: List[Dict[str, Any]] = Field(default_factory=list, description="Per-batch results")
    output_path: Optional[str] = Field(None, description="Written output file; None on dry runs")
    error_occurred_at: Optional[datetime] = None

    def get_assignment_rate(self) -> float:
        """Fraction of valid incidents that were assigned."""
        total = self.assigned_count + self.unassigned_count
        return self.assigned_count / total if total else 0.0


class ProcessingResult(BaseModel):
    """Outcome of ModuleProcessor.process."""

    success: bool = Field(..., description="Whether the run completed")
    records_processed: int = Field(ge=0, description="Number of incidents read")
    errors: List[str] = Field(default_factory=list, description="Invalid records and run failures")
    summary: RunSummary = Field(default_factory=RunSummary)
    execution_time: float = Field(ge=0.0, description="Run time in seconds")

    @classmethod
    def failed(cls, errors: List[str], dry_run: bool = False,
               execution_time: float = 0.0) -> "ProcessingResult":
        return cls(
            success=False,
            records_processed=0,
            errors=errors,
            summary=RunSummary(dry_run=dry_run, error_occurred_at=datetime.now()),
            execution_time=execution_time,
        )


class ComponentStatus(BaseModel):
    """Health of one component a module depends on, such as a boundary store or cache."""

    name: str = Field(..., min_length=1)
    ready: bool
    last_error: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict, description="Component counters")


class ModuleStatus(BaseModel):
    """Operational status of a module and its components."""

    module_name: str = Field(..., description="Name of the processing module")
    environment: Optional[str] = None
    is_configured: bool = Field(..., description="Whether configuration and data sources are valid")
    last_run: Optional[datetime] = Field(None, description="Timestamp of the last successful run")
    status: str = Field(..., description="'ready', 'running', 'error' or 'disabled'")
    health_check: bool = Field(..., description="Configured and no component reporting an error")
    components: List[ComponentStatus] = Field(default_factory=list)

    def get_component(self, name: str) -> Optional[ComponentStatus]:
        return next((component for component in self.components if component.name == name), None)


class ModuleProcessor(ABC):
    """Abstract base class for IMS assignment modules."""

    @abstractmethod
    def __init__(self, config_loader, environment: str = "development"):
        """Bind the module to shared configuration.

        Args:
            config_loader: ConfigLoader providing environment and module configuration
            environment: Environment whose data sources are used
        """

    @abstractmethod
    def validate_configuration(self) -> bool:
        """Check module configuration and required data sources."""

    @abstractmethod
    def process(self, dry_run: bool = False) -> ProcessingResult:
        """Run one batch assignment pass.

        Args:
            dry_run: If True, assign incidents without writing output

        Returns:
            ProcessingResult: Run outcome with a RunSummary of assignment totals
        """

    @abstractmethod
    def get_status(self) -> ModuleStatus:
        """Report configuration state and component health."""
