"""Polygon Containment Tests

Even-odd ray casting on planar rings. Coordinates are plain ``(x, y)`` pairs so the
same routines serve both projected grid geometry and ``[lon, lat]`` degree rings.

A ring is a sequence of vertices; closure is implicit, so a repeated closing vertex
is harmless. Points exactly on an edge or vertex are classified by the half-open
crossing rule ``(yi > y) != (yj > y)``: points on the bottom or left edges of an
axis-aligned square count as inside, points on the top or right edges as outside.
Callers should not rely on either outcome.
"""

from typing import Sequence, Tuple

Coordinate = Tuple[float, float]
Ring = Sequence[Coordinate]
Polygon = Sequence[Ring]
MultiPolygon = Sequence[Polygon]

MIN_RING_VERTICES = 3


def contains_point(ring: Ring, x: float, y: float) -> bool:
    """Test whether a point lies inside a single ring.

    Args:
        ring: Ordered ring vertices
        x: Point x (easting or longitude)
        y: Point y (northing or latitude)

    Returns:
        True if the ring crosses a horizontal ray from the point an odd number of
        times. Rings with fewer than three vertices contain nothing.
    """
    count = len(ring)
    if count < MIN_RING_VERTICES:
        return False

    inside = False
    j = count - 1
    for i in range(count):
        xi, yi = ring[i][0], ring[i][1]
        xj, yj = ring[j][0], ring[j][1]
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def contains_point_with_holes(polygon: Polygon, x: float, y: float) -> bool:
    """Test a point against a polygon given as outer ring followed by holes.

    Holes with fewer than three vertices are ignored. An empty polygon or a
    degenerate outer ring contains nothing.
    """
    if not polygon:
        return False

    if not contains_point(polygon[0], x, y):
        return False

    for hole in polygon[1:]:
        if len(hole) >= MIN_RING_VERTICES and contains_point(hole, x, y):
            return False
    return True


def contains_point_multi_polygon(multi_polygon: MultiPolygon, x: float, y: float) -> bool:
    """True if any member polygon (holes respected) contains the point."""
    return any(contains_point_with_holes(polygon, x, y) for polygon in multi_polygon)
