"""District Models

Parsed fire-district geometry in Greek Grid coordinates and the warnings produced
while parsing raw district documents.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field

from ..geometry import MultiPolygon, Polygon, contains_point_multi_polygon, contains_point_with_holes


class GeometryKind(str, Enum):
    POLYGON = "Polygon"
    MULTI_POLYGON = "MultiPolygon"


@dataclass(frozen=True)
class District:
    """Jurisdiction polygon owned by a single station.

    Attributes:
        owner_station_name: Name of the owning station, never empty
        geometry_kind: Polygon or MultiPolygon
        geometry: Rings of ``(x, y)`` grid coordinates, nested per ``geometry_kind``
        document_id: Identifier of the source document, used in diagnostics
    """
    owner_station_name: str
    geometry_kind: GeometryKind
    geometry: Union[Polygon, MultiPolygon]
    document_id: Optional[str] = None

    def __post_init__(self):
        if not self.owner_station_name:
            raise ValueError("District owner station name must not be empty")

    def contains(self, x: float, y: float) -> bool:
        if self.geometry_kind is GeometryKind.POLYGON:
            return contains_point_with_holes(self.geometry, x, y)
        return contains_point_multi_polygon(self.geometry, x, y)


class BoundaryParseWarning(BaseModel):
    """A raw district document that was skipped during boundary loading."""
    document_id: Optional[str] = Field(None, description="Identifier of the skipped document")
    reason: str = Field(..., description="Why the document was skipped")
