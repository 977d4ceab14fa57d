"""Great-circle distance on a spherical Earth."""

import math

from .coordinate_transform import GeoPoint

EARTH_RADIUS_METERS = 6371000.0


def haversine_distance(latitude1: float, longitude1: float,
                       latitude2: float, longitude2: float) -> float:
    """Haversine distance between two WGS84 points.

    Args:
        latitude1: Latitude of the first point in decimal degrees
        longitude1: Longitude of the first point in decimal degrees
        latitude2: Latitude of the second point in decimal degrees
        longitude2: Longitude of the second point in decimal degrees

    Returns:
        Distance in meters on a sphere of radius ``EARTH_RADIUS_METERS``
    """
    phi1 = math.radians(latitude1)
    phi2 = math.radians(latitude2)
    delta_phi = math.radians(latitude2 - latitude1)
    delta_lambda = math.radians(longitude2 - longitude1)

    h = (math.sin(delta_phi / 2) ** 2
         + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2)
    # Rounding can push h marginally past 1 for antipodal points
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_METERS * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def distance_between(a: GeoPoint, b: GeoPoint) -> float:
    return haversine_distance(a.latitude, a.longitude, b.latitude, b.longitude)
