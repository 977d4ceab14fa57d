"""Station and Agency Models

Station records served by the station repository. Every station variant satisfies
the ``StationLike`` protocol consumed by the generic nearest-station search.
"""

from enum import Enum
from typing import List, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


class AgencyKind(str, Enum):
    """Emergency agency an incident can be assigned to."""
    FIRE = "fire"
    COASTGUARD = "coastguard"
    POLICE = "police"
    HOSPITAL = "hospital"

    @classmethod
    def parse(cls, value: str) -> Optional['AgencyKind']:
        """Parse an agency name case-insensitively.

        Accepts ``coast_guard`` and ``coast-guard`` as aliases of ``coastguard``.

        Returns:
            The matching AgencyKind, or None when the value is empty or unsupported
        """
        if not value:
            return None
        normalized = value.strip().lower().replace("_", "").replace("-", "")
        for kind in cls:
            if kind.value == normalized:
                return kind
        return None

    def uses_district_boundaries(self) -> bool:
        return self is AgencyKind.FIRE


@runtime_checkable
class StationLike(Protocol):
    """Anything with an identity and a WGS84 position."""
    id: int
    name: str
    latitude: float
    longitude: float


class Agency(BaseModel):
    """Agency record (e.g. code 'FIRE', name 'Hellenic Fire Service')."""
    model_config = ConfigDict(frozen=True)

    id: int
    code: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)


class Station(BaseModel):
    """Operational station belonging to one agency."""
    model_config = ConfigDict(frozen=True)

    id: int
    name: str = Field(..., min_length=1)
    agency_id: int
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class StationBoundary(BaseModel):
    """Service boundary ring of a fire station.

    ``coordinates_json`` holds a single ring as JSON text of ``[lon, lat]`` pairs.
    """
    model_config = ConfigDict(frozen=True)

    id: int
    station_id: int
    coordinates_json: str


class FireStation(Station):
    """Fire station with its declared service area (km²) and boundary rings."""
    area: float = Field(0.0, ge=0, description="Declared service area in square kilometres")
    boundaries: List[StationBoundary] = Field(default_factory=list)
