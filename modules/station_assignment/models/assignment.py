"""Assignment Request and Result Models

Input and output models of the station assignment engine, plus the per-batch
summary reported by the batch processor.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .station import AgencyKind


class AssignmentMethod(str, Enum):
    """How a station was selected."""
    DISTRICT = "District"
    NEAREST = "Nearest"


class AssignmentRequest(BaseModel):
    """Incident location and the agency to assign it to."""
    latitude: float = Field(..., ge=-90, le=90, description="Incident latitude (WGS84)")
    longitude: float = Field(..., ge=-180, le=180, description="Incident longitude (WGS84)")
    agency_kind: AgencyKind = Field(..., description="Agency responsible for the incident")

    @field_validator('agency_kind', mode='before')
    @classmethod
    def parse_agency_kind(cls, v):
        """Accept agency names in any case and the coast guard spelling variants."""
        if isinstance(v, str):
            kind = AgencyKind.parse(v)
            if kind is None:
                raise ValueError(f"Unsupported agency type: {v}")
            return kind
        return v


class AssignmentResult(BaseModel):
    """Station assigned to an incident.

    Serialised with camelCase keys via ``model_dump(by_alias=True)``.
    """
    model_config = ConfigDict(populate_by_name=True)

    station_id: int = Field(..., alias="stationId")
    station_name: str = Field(..., alias="stationName")
    assignment_method: AssignmentMethod = Field(..., alias="assignmentMethod")
    district_name: str = Field("", alias="districtName", description="Owning district; empty for nearest-station assignments")
    distance_meters: Optional[float] = Field(None, ge=0, alias="distanceMeters")

    def to_response(self) -> Dict[str, object]:
        return self.model_dump(by_alias=True, mode='json')


class BatchAssignmentResult(BaseModel):
    """Result of assigning one batch of incidents.

    Tracks assignment counts by method and the incidents that could not be assigned.
    """
    batch_number: int = Field(ge=1, description="Sequential batch number")
    records_processed: int = Field(ge=0, description="Number of incidents in this batch")
    assigned_count: int = Field(ge=0, description="Incidents assigned to a station")
    unassigned_count: int = Field(ge=0, description="Incidents with no station")
    processing_time: float = Field(ge=0, description="Time taken for the batch in seconds")
    errors: List[str] = Field(default_factory=list, description="Invalid incident records")
    method_summary: Dict[str, int] = Field(default_factory=dict, description="Assignments per method")

    def get_success_rate(self) -> float:
        """Fraction of incidents in the batch that were assigned."""
        if self.records_processed == 0:
            return 0.0
        return self.assigned_count / self.records_processed


class IncidentRecord(BaseModel):
    """Incident read from the batch incidents file.

    Coordinates and agency are kept raw; validation happens in the engine so that
    rejected incidents are reported rather than failing the whole file.
    """
    incident_id: str = Field(..., min_length=1)
    latitude: float
    longitude: float
    agency: str = ""

    @field_validator('incident_id', mode='before')
    @classmethod
    def coerce_incident_id(cls, v):
        return str(v) if isinstance(v, int) else v
