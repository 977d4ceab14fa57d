"""Station Assignment Module Configuration

Validated view of ``station_assignment_config.json``.
"""

from typing import Dict

from pydantic import BaseModel, Field, field_validator

from ..geometry import GREECE_TERRITORY, GREEK_GRID, GeoBoundingBox, ProjectionParams
from .station import AgencyKind


class CacheSettings(BaseModel):
    """Time-to-live settings for the geographic lookup cache."""
    stations_ttl_seconds: float = Field(1800, gt=0, description="TTL of the all-stations snapshot")
    lookup_ttl_seconds: float = Field(600, gt=0, description="TTL of per-point lookups")
    max_entries: int = Field(10000, ge=1, description="Maximum cached point lookups")


class DistrictSettings(BaseModel):
    """Property names read from raw district documents."""
    owner_property: str = Field("PYR_YPIRES", min_length=1)
    id_property: str = Field("OBJECTID", min_length=1)


class RepositorySettings(BaseModel):
    """Retry behaviour of file-backed repositories."""
    max_retry_attempts: int = Field(3, ge=1, le=10)
    retry_delay_seconds: float = Field(1.0, ge=0)


DEFAULT_AGENCY_CODES = {
    AgencyKind.FIRE.value: "FIRE",
    AgencyKind.COASTGUARD.value: "HCG",
    AgencyKind.POLICE.value: "POLICE",
    AgencyKind.HOSPITAL.value: "EKAB",
}


class StationAssignmentConfig(BaseModel):
    """Settings of the station assignment module."""
    projection: ProjectionParams = GREEK_GRID
    territory: GeoBoundingBox = GREECE_TERRITORY
    cache: CacheSettings = Field(default_factory=CacheSettings)
    districts: DistrictSettings = Field(default_factory=DistrictSettings)
    agencies: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_AGENCY_CODES))
    repository: RepositorySettings = Field(default_factory=RepositorySettings)
    fire_nearest_fallback: bool = True

    @field_validator('agencies')
    @classmethod
    def validate_agencies(cls, v: Dict[str, str]) -> Dict[str, str]:
        """Normalise agency keys and require a code for every agency kind."""
        normalized = {}
        for key, code in v.items():
            kind = AgencyKind.parse(key)
            if kind is None:
                raise ValueError(f"Unknown agency in configuration: {key}")
            if not code:
                raise ValueError(f"Empty agency code for: {key}")
            normalized[kind.value] = code

        missing = [kind.value for kind in AgencyKind if kind.value not in normalized]
        if missing:
            raise ValueError(f"Missing agency codes for: {missing}")
        return normalized

    def agency_code(self, kind: AgencyKind) -> str:
        return self.agencies[kind.value]
