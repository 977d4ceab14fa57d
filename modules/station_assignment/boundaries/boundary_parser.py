"""District Document Parser

Turns raw GeoJSON-like district features into ``District`` records. Anything that
cannot be used is dropped: malformed points and empty rings/polygons silently,
whole documents with a ``BoundaryParseWarning``.
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..geometry import Coordinate
from ..models import BoundaryParseWarning, District, GeometryKind

logger = logging.getLogger(__name__)

DEFAULT_OWNER_PROPERTY = "PYR_YPIRES"
DEFAULT_ID_PROPERTY = "OBJECTID"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def parse_point(value: Any) -> Optional[Coordinate]:
    """First two values of a position as ``(x, y)``, or None when they are not numbers."""
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        return None
    x, y = value[0], value[1]
    if not (_is_number(x) and _is_number(y)):
        return None
    return (float(x), float(y))


def parse_ring(value: Any) -> Tuple[Coordinate, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    points = (parse_point(point) for point in value)
    return tuple(point for point in points if point is not None)


def parse_polygon(value: Any) -> Tuple[Tuple[Coordinate, ...], ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    rings = (parse_ring(ring) for ring in value)
    return tuple(ring for ring in rings if ring)


def parse_multi_polygon(value: Any) -> Tuple[Tuple[Tuple[Coordinate, ...], ...], ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    polygons = (parse_polygon(polygon) for polygon in value)
    return tuple(polygon for polygon in polygons if polygon)


def get_document_id(document: Dict[str, Any], id_property: str = DEFAULT_ID_PROPERTY,
                    index: Optional[int] = None) -> Optional[str]:
    """Best available identifier of a raw district document for diagnostics."""
    properties = document.get("properties") if isinstance(document, dict) else None
    if isinstance(properties, dict) and properties.get(id_property) is not None:
        return str(properties[id_property])
    if isinstance(document, dict) and document.get("id") is not None:
        return str(document["id"])
    return f"#{index}" if index is not None else None


def parse_district_document(document: Any,
                            owner_property: str = DEFAULT_OWNER_PROPERTY,
                            id_property: str = DEFAULT_ID_PROPERTY,
                            index: Optional[int] = None) -> Tuple[Optional[District], Optional[BoundaryParseWarning]]:
    """Parse one raw district feature.

    Args:
        document: Raw feature with ``properties`` and ``geometry``
        owner_property: Property holding the owning station name
        id_property: Property identifying the document
        index: Position of the document in its source, used when it has no identifier

    Returns:
        ``(district, None)`` on success or ``(None, warning)`` when the document is skipped
    """
    if not isinstance(document, dict):
        return None, BoundaryParseWarning(document_id=f"#{index}" if index is not None else None,
                                          reason="Document is not an object")

    document_id = get_document_id(document, id_property, index)

    properties = document.get("properties")
    if not isinstance(properties, dict):
        return None, BoundaryParseWarning(document_id=document_id, reason="Missing properties")

    owner = properties.get(owner_property)
    if not isinstance(owner, str) or not owner.strip():
        return None, BoundaryParseWarning(document_id=document_id,
                                          reason=f"Missing owner property '{owner_property}'")

    geometry = document.get("geometry")
    if not isinstance(geometry, dict):
        return None, BoundaryParseWarning(document_id=document_id, reason="Missing geometry")

    geometry_type = geometry.get("type")
    coordinates = geometry.get("coordinates")
    if geometry_type == GeometryKind.POLYGON.value:
        kind = GeometryKind.POLYGON
        parsed = parse_polygon(coordinates)
    elif geometry_type == GeometryKind.MULTI_POLYGON.value:
        kind = GeometryKind.MULTI_POLYGON
        parsed = parse_multi_polygon(coordinates)
    else:
        return None, BoundaryParseWarning(document_id=document_id,
                                          reason=f"Unsupported geometry type: {geometry_type}")

    if not parsed:
        return None, BoundaryParseWarning(document_id=document_id, reason="Geometry has no usable rings")

    district = District(
        owner_station_name=owner.strip(),
        geometry_kind=kind,
        geometry=parsed,
        document_id=document_id,
    )
    return district, None


def parse_district_documents(documents: Iterable[Any],
                             owner_property: str = DEFAULT_OWNER_PROPERTY,
                             id_property: str = DEFAULT_ID_PROPERTY) -> Tuple[List[District], List[BoundaryParseWarning]]:
    """Parse raw district features, preserving input order.

    Returns:
        Tuple of (districts, warnings for skipped documents)
    """
    districts: List[District] = []
    warnings: List[BoundaryParseWarning] = []

    for index, document in enumerate(documents):
        district, warning = parse_district_document(document, owner_property, id_property, index)
        if warning is not None:
            logger.warning(f"Skipping district document {warning.document_id}: {warning.reason}")
            warnings.append(warning)
            continue
        districts.append(district)

    return districts, warnings
