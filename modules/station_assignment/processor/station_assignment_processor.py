"""StationAssignmentProcessor Implementation

Batch assignment of incidents to stations, implementing the ModuleProcessor
interface. Incidents are read from the configured ``incidents`` data source,
assigned in batches through the StationAssignmentEngine and written to the
configured output file unless running in dry-run mode.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from ims_core.config import ConfigLoader
from ims_core.exceptions import (
    IMSConfigurationError,
    IMSDataSourceError,
    IMSProcessingError,
    IMSValidationError,
)
from ims_core.interfaces import ComponentStatus, ModuleProcessor, ModuleStatus, ProcessingResult, RunSummary
from ims_core.utils import log_performance
from ..assignment import ServiceBoundaryResolver, StationAssignmentEngine
from ..boundaries import BoundaryStore
from ..caching import GeographicLookupCache
from ..models import BatchAssignmentResult, FireStation, IncidentRecord, StationAssignmentConfig
from ..repositories import GeoJsonDistrictRepository, JsonStationRepository

logger = logging.getLogger(__name__)

MODULE_NAME = "station_assignment"
DEFAULT_BATCH_SIZE = 100


class StationAssignmentProcessor(ModuleProcessor):
    """Station assignment processor implementing the ModuleProcessor interface.

    Builds the assignment engine from environment and module configuration on
    first use. The boundary store and lookup cache live as long as the processor.
    """

    def __init__(self, config_loader: ConfigLoader, environment: str = "development"):
        """Initialize station assignment processor with shared configuration.

        Args:
            config_loader: ConfigLoader instance providing access to framework configuration
            environment: Environment whose data sources and processing settings are used
        """
        self.config_loader = config_loader
        self.environment = environment
        self._last_run: Optional[datetime] = None
        self._module_config: Optional[StationAssignmentConfig] = None
        self._configuration_valid: Optional[bool] = None

        self.station_repository: Optional[JsonStationRepository] = None
        self.boundary_store: Optional[BoundaryStore] = None
        self.lookup_cache: Optional[GeographicLookupCache] = None
        self.engine: Optional[StationAssignmentEngine] = None
        self.boundary_resolver: Optional[ServiceBoundaryResolver] = None

        logger.info(f"StationAssignmentProcessor initialized for environment: {environment}")

    def get_module_config(self) -> StationAssignmentConfig:
        """Validated module configuration, loaded on first call.

        Raises:
            IMSConfigurationError: If the configuration file cannot be loaded
            IMSValidationError: If the configuration values are invalid
        """
        if self._module_config is None:
            raw_config = self.config_loader.load_module_config(MODULE_NAME)
            try:
                self._module_config = StationAssignmentConfig(**raw_config)
            except ValidationError as e:
                raise IMSValidationError(
                    f"Invalid station assignment configuration: {e}",
                    {"module": MODULE_NAME}
                )
        return self._module_config

    def initialize(self) -> StationAssignmentEngine:
        """Create repositories, boundary store, cache and engine if not yet created."""
        if self.engine is not None:
            return self.engine

        config = self.get_module_config()
        stations_path = self.config_loader.get_data_source_path(self.environment, "stations")
        districts_path = self.config_loader.get_data_source_path(self.environment, "fire_districts")

        self.station_repository = JsonStationRepository(
            stations_path,
            agency_codes=config.agencies,
            max_retry_attempts=config.repository.max_retry_attempts,
            retry_delay_seconds=config.repository.retry_delay_seconds,
        )
        self.boundary_store = BoundaryStore(
            GeoJsonDistrictRepository(districts_path),
            owner_property=config.districts.owner_property,
            id_property=config.districts.id_property,
        )
        self.lookup_cache = GeographicLookupCache(
            stations_ttl_seconds=config.cache.stations_ttl_seconds,
            lookup_ttl_seconds=config.cache.lookup_ttl_seconds,
            max_entries=config.cache.max_entries,
        )
        self.engine = StationAssignmentEngine(
            self.station_repository, self.boundary_store, self.lookup_cache, config
        )
        self.boundary_resolver = ServiceBoundaryResolver(self.station_repository, self.lookup_cache)

        logger.info(f"Station assignment engine initialized (stations={stations_path}, districts={districts_path})")
        return self.engine

    def find_station_by_boundary(self, latitude: float, longitude: float) -> Optional[FireStation]:
        """Fire station whose declared service boundary contains the point.

        Overlapping boundaries resolve to the station with the smallest declared
        area, independently of fire-district assignment.
        """
        self.initialize()
        return self.boundary_resolver.find_station_by_coordinates(latitude, longitude)

    def validate_configuration(self) -> bool:
        """Validate environment and module configuration and the required data files.

        Returns:
            bool: True if configuration is valid and complete, False otherwise
        """
        if self._configuration_valid is not None:
            return self._configuration_valid

        try:
            env_config = self.config_loader.load_environment_config(self.environment)
            self.get_module_config()

            for source_name in ("stations", "fire_districts"):
                path = self.config_loader.get_data_source_path(self.environment, source_name)
                if not path.exists():
                    logger.error(f"Data source '{source_name}' not found: {path}")
                    self._configuration_valid = False
                    return False

            batch_size = env_config.get("processing", {}).get("batch_size", DEFAULT_BATCH_SIZE)
            if not isinstance(batch_size, int) or batch_size < 1:
                logger.error(f"Invalid processing batch_size: {batch_size}")
                self._configuration_valid = False
                return False

            logger.info("Module configuration validation successful")
            self._configuration_valid = True
            return True

        except (IMSConfigurationError, IMSValidationError) as e:
            logger.error(f"Configuration validation failed: {e}")
            self._configuration_valid = False
            return False

    def process(self, dry_run: bool = False) -> ProcessingResult:
        """Assign every incident in the configured incidents file.

        Args:
            dry_run: If True, assign incidents without writing the output file

        Returns:
            ProcessingResult: Standardized result object with success status, metrics, and errors
        """
        start_time = datetime.now()
        logger.info(f"Starting station assignment batch process (dry_run={dry_run})")

        if not self.validate_configuration():
            return ProcessingResult.failed(["Configuration validation failed"], dry_run=dry_run)

        try:
            self.initialize()
            env_config = self.config_loader.load_environment_config(self.environment)
            processing_config = env_config.get("processing", {})
            batch_size = processing_config.get("batch_size", DEFAULT_BATCH_SIZE)

            incidents, errors = self.load_incidents()
            assignments, batch_results = self.assign_incidents(incidents, batch_size)
            errors.extend(error for batch in batch_results for error in batch.errors)

            output_path = None
            if not dry_run:
                output_path = self._resolve_output_path(processing_config.get("output_path"))
                self.write_assignments(assignments, output_path)
            else:
                logger.info(f"Dry run: would write {len(assignments)} assignments")

            self._last_run = datetime.now()
            execution_time = (datetime.now() - start_time).total_seconds()
            assigned = sum(batch.assigned_count for batch in batch_results)
            method_summary: Dict[str, int] = {}
            for batch in batch_results:
                for method, count in batch.method_summary.items():
                    method_summary[method] = method_summary.get(method, 0) + count

            logger.info(f"Processing completed: {assigned}/{len(incidents)} incidents assigned "
                        f"in {execution_time:.2f}s")

            return ProcessingResult(
                success=True,
                records_processed=len(incidents),
                errors=errors,
                summary=RunSummary(
                    dry_run=dry_run,
                    environment=self.environment,
                    assigned_count=assigned,
                    unassigned_count=len(incidents) - assigned,
                    method_summary=method_summary,
                    batch_results=[batch.model_dump() for batch in batch_results],
                    output_path=str(output_path) if output_path else None,
                ),
                execution_time=execution_time
            )

        except (IMSConfigurationError, IMSDataSourceError, IMSProcessingError, IMSValidationError) as e:
            execution_time = (datetime.now() - start_time).total_seconds()
            logger.error(f"Processing failed: {e}")
            return ProcessingResult.failed([str(e)], dry_run=dry_run, execution_time=execution_time)

    def load_incidents(self) -> Tuple[List[IncidentRecord], List[str]]:
        """Read incidents from the configured ``incidents`` data source.

        Returns:
            Tuple of (valid IncidentRecords, error messages for invalid records)

        Raises:
            IMSDataSourceError: If the incidents file cannot be read
        """
        path = self.config_loader.get_data_source_path(self.environment, "incidents")
        try:
            with open(path, 'r', encoding='utf-8') as f:
                document = json.load(f)
        except FileNotFoundError:
            raise IMSDataSourceError(f"Incidents file not found: {path}", {"path": str(path)})
        except json.JSONDecodeError as e:
            raise IMSDataSourceError(f"Invalid JSON in incidents file: {e}", {"path": str(path)})

        records = document.get("incidents", []) if isinstance(document, dict) else document
        if not isinstance(records, list):
            raise IMSDataSourceError("Incidents file must contain a list of incidents", {"path": str(path)})

        incidents: List[IncidentRecord] = []
        errors: List[str] = []
        for index, record in enumerate(records):
            try:
                incidents.append(IncidentRecord(**record))
            except (TypeError, ValidationError) as e:
                errors.append(f"Invalid incident record #{index}: {e}")

        logger.info(f"Loaded {len(incidents)} incidents from {path} ({len(errors)} invalid)")
        return incidents, errors

    @log_performance
    def assign_incidents(self, incidents: List[IncidentRecord],
                         batch_size: int = DEFAULT_BATCH_SIZE) -> Tuple[List[Dict[str, Any]], List[BatchAssignmentResult]]:
        """Assign incidents in batches.

        Args:
            incidents: Incidents to assign
            batch_size: Number of incidents per batch

        Returns:
            Tuple of (assignment rows in input order, BatchAssignmentResult per batch)
        """
        engine = self.initialize()
        assignments: List[Dict[str, Any]] = []
        batch_results: List[BatchAssignmentResult] = []

        for batch_start in range(0, len(incidents), batch_size):
            batch = incidents[batch_start:batch_start + batch_size]
            batch_number = batch_start // batch_size + 1
            batch_begin = datetime.now()
            method_summary: Dict[str, int] = {}
            assigned = 0

            for incident in batch:
                result = engine.assign_location(incident.latitude, incident.longitude, incident.agency)
                if result is not None:
                    assigned += 1
                    method = result.assignment_method.value
                    method_summary[method] = method_summary.get(method, 0) + 1

                assignments.append({
                    "incident_id": incident.incident_id,
                    "agency": incident.agency,
                    "assignment": result.to_response() if result else None,
                })

            batch_result = BatchAssignmentResult(
                batch_number=batch_number,
                records_processed=len(batch),
                assigned_count=assigned,
                unassigned_count=len(batch) - assigned,
                processing_time=(datetime.now() - batch_begin).total_seconds(),
                method_summary=method_summary,
            )
            logger.debug(f"Batch {batch_number}: {assigned}/{len(batch)} assigned "
                         f"({batch_result.get_success_rate():.0%})")
            batch_results.append(batch_result)

        return assignments, batch_results

    def write_assignments(self, assignments: List[Dict[str, Any]], output_path: Path) -> None:
        """Write assignment rows as JSON.

        Raises:
            IMSProcessingError: If the output file cannot be written
        """
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, 'w', encoding='utf-8') as f:
                json.dump({"generated_at": datetime.now().isoformat(), "assignments": assignments},
                          f, indent=2)
        except OSError as e:
            raise IMSProcessingError(f"Failed to write assignments: {e}", {"path": str(output_path)})
        logger.info(f"Wrote {len(assignments)} assignments to {output_path}")

    def _resolve_output_path(self, output_path: Optional[str]) -> Path:
        if not output_path:
            raise IMSConfigurationError(f"processing.output_path not configured for {self.environment}")
        path = Path(output_path)
        if not path.is_absolute():
            path = self.config_loader.config_dir.parent / path
        return path

    def get_status(self) -> ModuleStatus:
        """Get current module processing status.

        Returns:
            ModuleStatus: Current module status, with boundary store and cache components
        """
        is_configured = self.validate_configuration()
        components: List[ComponentStatus] = []
        if self.boundary_store is not None:
            store_status = self.boundary_store.get_status()
            components.append(ComponentStatus(
                name="boundary_store",
                ready=store_status["last_error"] is None,
                last_error=store_status["last_error"],
                details=store_status,
            ))
        if self.lookup_cache is not None:
            components.append(ComponentStatus(
                name="lookup_cache",
                ready=True,
                details=self.lookup_cache.get_cache_statistics(),
            ))

        healthy = is_configured and all(component.ready for component in components)
        return ModuleStatus(
            module_name=MODULE_NAME,
            environment=self.environment,
            is_configured=is_configured,
            last_run=self._last_run,
            status="ready" if healthy else "error",
            health_check=healthy,
            components=components
        )
