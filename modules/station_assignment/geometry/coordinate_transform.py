"""Coordinate Transform between WGS84 and Transverse-Mercator grids

Converts geodetic (latitude, longitude) points to a projected Transverse-Mercator
grid and back. The projection is described by a named ``ProjectionParams`` bundle;
``GREEK_GRID`` (EPSG:2100) is the grid used by fire-district boundary geometry.

The forward path goes through a cached pyproj ``Transformer`` built from the
projection parameters. The inverse path uses the standard Transverse-Mercator
series (footpoint latitude via the ``e1`` series and the usual D power series).
No datum shift is applied: at regional scale the difference between the GGRS87
and WGS84 datums is below the resolution that matters for jurisdiction lookup.

Transforms never raise. On numerical failure they return ``None`` which callers
treat as "transform unavailable".
"""

import logging
import math
from functools import lru_cache
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pyproj import CRS, Transformer
from pyproj.exceptions import ProjError

logger = logging.getLogger(__name__)

_NEAR_ZERO = 1e-12


class GridEnvelope(BaseModel):
    """Validity envelope of a projected grid, in grid units (meters)."""
    model_config = ConfigDict(frozen=True)

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @model_validator(mode='after')
    def validate_extent(self) -> 'GridEnvelope':
        """Ensure the envelope is not inverted."""
        if self.min_x >= self.max_x or self.min_y >= self.max_y:
            raise ValueError(f"Invalid grid envelope: {self.min_x},{self.min_y} - {self.max_x},{self.max_y}")
        return self

    def clamp(self, x: float, y: float) -> Tuple[float, float]:
        return (min(max(x, self.min_x), self.max_x),
                min(max(y, self.min_y), self.max_y))


class GeoBoundingBox(BaseModel):
    """Geodetic bounding box of an operating territory, in decimal degrees."""
    model_config = ConfigDict(frozen=True)

    min_latitude: float = Field(ge=-90, le=90)
    max_latitude: float = Field(ge=-90, le=90)
    min_longitude: float = Field(ge=-180, le=180)
    max_longitude: float = Field(ge=-180, le=180)

    @model_validator(mode='after')
    def validate_extent(self) -> 'GeoBoundingBox':
        """Ensure the bounding box is not inverted."""
        if self.min_latitude >= self.max_latitude or self.min_longitude >= self.max_longitude:
            raise ValueError(
                f"Invalid bounding box: lat [{self.min_latitude}, {self.max_latitude}], "
                f"lon [{self.min_longitude}, {self.max_longitude}]"
            )
        return self

    def contains(self, latitude: float, longitude: float) -> bool:
        """Check whether a point lies inside the box (edges inclusive)."""
        return (self.min_latitude <= latitude <= self.max_latitude and
                self.min_longitude <= longitude <= self.max_longitude)

    def clamp(self, latitude: float, longitude: float) -> Tuple[float, float]:
        return (min(max(latitude, self.min_latitude), self.max_latitude),
                min(max(longitude, self.min_longitude), self.max_longitude))


class GeoPoint(BaseModel):
    """Immutable WGS84 point in decimal degrees."""
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")


class ProjectedPoint(BaseModel):
    """Point in a projected grid, in meters."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class ProjectionParams(BaseModel):
    """Parameters of a named Transverse-Mercator projection.

    Attributes:
        name: Projection identifier (e.g. 'EPSG:2100')
        false_easting: False easting in meters
        false_northing: False northing in meters
        central_meridian_degrees: Longitude of the central meridian
        scale_factor: Scale factor on the central meridian (k0)
        semi_major_axis_meters: Ellipsoid semi-major axis (a)
        flattening: Ellipsoid flattening (f), not its inverse
        latitude_of_origin_degrees: Latitude of the grid origin
        validity_envelope: Optional grid extent that projected results are clamped to
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    false_easting: float
    false_northing: float
    central_meridian_degrees: float = Field(ge=-180, le=180)
    scale_factor: float = Field(gt=0)
    semi_major_axis_meters: float = Field(gt=0)
    flattening: float = Field(ge=0, lt=1)
    latitude_of_origin_degrees: float = Field(0.0, ge=-90, le=90)
    validity_envelope: Optional[GridEnvelope] = None

    @property
    def eccentricity_squared(self) -> float:
        return 2 * self.flattening - self.flattening ** 2

    @property
    def second_eccentricity_squared(self) -> float:
        e2 = self.eccentricity_squared
        return e2 / (1 - e2)

    @property
    def proj4(self) -> str:
        """PROJ string of the Transverse-Mercator grid on its own ellipsoid."""
        semi_minor_axis = self.semi_major_axis_meters * (1 - self.flattening)
        return (f"+proj=tmerc +lat_0={self.latitude_of_origin_degrees!r} "
                f"+lon_0={self.central_meridian_degrees!r} +k={self.scale_factor!r} "
                f"+x_0={self.false_easting!r} +y_0={self.false_northing!r} "
                f"+a={self.semi_major_axis_meters!r} +b={semi_minor_axis!r} +units=m +no_defs")


GREEK_GRID = ProjectionParams(
    name="EPSG:2100",
    false_easting=500000.0,
    false_northing=0.0,
    central_meridian_degrees=24.0,
    scale_factor=0.9996,
    semi_major_axis_meters=6378137.0,
    flattening=1 / 298.257222101,
    latitude_of_origin_degrees=0.0,
    validity_envelope=GridEnvelope(min_x=0.0, min_y=3700000.0, max_x=1100000.0, max_y=4800000.0),
)

GREECE_TERRITORY = GeoBoundingBox(
    min_latitude=34.0,
    max_latitude=42.0,
    min_longitude=19.0,
    max_longitude=30.0,
)

PROJECTIONS: Dict[str, ProjectionParams] = {GREEK_GRID.name: GREEK_GRID}


def get_projection(name: str) -> Optional[ProjectionParams]:
    """Look up a predefined projection by name (case-insensitive)."""
    for projection_name, projection in PROJECTIONS.items():
        if projection_name.lower() == name.lower():
            return projection
    return None


def _meridian_arc(latitude_rad: float, a: float, e2: float) -> float:
    """Meridian distance from the equator to the given latitude."""
    e4 = e2 * e2
    e6 = e4 * e2
    return a * ((1 - e2 / 4 - 3 * e4 / 64 - 5 * e6 / 256) * latitude_rad
                - (3 * e2 / 8 + 3 * e4 / 32 + 45 * e6 / 1024) * math.sin(2 * latitude_rad)
                + (15 * e4 / 256 + 45 * e6 / 1024) * math.sin(4 * latitude_rad)
                - (35 * e6 / 3072) * math.sin(6 * latitude_rad))


def _all_finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


@lru_cache(maxsize=8)
def _transformer_for(proj_string: str) -> Transformer:
    projected_crs = CRS.from_proj4(proj_string)
    transformer = Transformer.from_crs(projected_crs.geodetic_crs, projected_crs, always_xy=True)
    logger.debug(f"Created transformer for {proj_string}")
    return transformer


def get_transformer(projection: ProjectionParams = GREEK_GRID) -> Transformer:
    """Cached geodetic-to-grid transformer for a projection.

    Raises:
        CRSError: If the projection parameters do not describe a valid CRS
    """
    return _transformer_for(projection.proj4)


def project(point: GeoPoint, projection: ProjectionParams = GREEK_GRID) -> Optional[ProjectedPoint]:
    """Project a WGS84 point onto a Transverse-Mercator grid.

    Args:
        point: Geodetic point to project
        projection: Target projection parameters

    Returns:
        ProjectedPoint clamped to the projection's validity envelope, or None when
        the transform is unavailable
    """
    try:
        # always_xy: pyproj takes (lon, lat) and returns (easting, northing)
        x, y = get_transformer(projection).transform(point.longitude, point.latitude, errcheck=True)
    except ProjError as e:
        logger.warning(f"Projection to {projection.name} failed for "
                       f"({point.latitude}, {point.longitude}): {e}")
        return None

    if not _all_finite(x, y):
        logger.warning(f"Projection to {projection.name} produced non-finite result for "
                       f"({point.latitude}, {point.longitude})")
        return None

    if projection.validity_envelope is not None:
        x, y = projection.validity_envelope.clamp(x, y)

    return ProjectedPoint(x=x, y=y)


def unproject(point: ProjectedPoint,
              projection: ProjectionParams = GREEK_GRID,
              territory: Optional[GeoBoundingBox] = GREECE_TERRITORY) -> Optional[GeoPoint]:
    """Convert a grid point back to WGS84.

    Removes the false easting/northing, recovers the footpoint latitude with the
    ``e1`` series and applies the inverse correction terms.

    Args:
        point: Projected grid point
        projection: Source projection parameters
        territory: Optional bounding box the result is clamped to

    Returns:
        GeoPoint, or None when the transform is numerically unavailable
    """
    try:
        a = projection.semi_major_axis_meters
        k0 = projection.scale_factor
        e2 = projection.eccentricity_squared
        ep2 = projection.second_eccentricity_squared
        e4 = e2 * e2
        e6 = e4 * e2

        easting = point.x - projection.false_easting
        northing = point.y - projection.false_northing

        lam0 = math.radians(projection.central_meridian_degrees)
        m0 = _meridian_arc(math.radians(projection.latitude_of_origin_degrees), a, e2)

        m = m0 + northing / k0
        mu = m / (a * (1 - e2 / 4 - 3 * e4 / 64 - 5 * e6 / 256))

        sqrt_one_minus_e2 = math.sqrt(1 - e2)
        e1 = (1 - sqrt_one_minus_e2) / (1 + sqrt_one_minus_e2)
        j1 = 3 * e1 / 2 - 27 * e1 ** 3 / 32
        j2 = 21 * e1 ** 2 / 16 - 55 * e1 ** 4 / 32
        j3 = 151 * e1 ** 3 / 96
        j4 = 1097 * e1 ** 4 / 512
        phi1 = (mu + j1 * math.sin(2 * mu) + j2 * math.sin(4 * mu)
                + j3 * math.sin(6 * mu) + j4 * math.sin(8 * mu))

        sin_phi1 = math.sin(phi1)
        cos_phi1 = math.cos(phi1)
        if abs(cos_phi1) < _NEAR_ZERO:
            logger.warning(f"Inverse projection from {projection.name} degenerate at footpoint latitude")
            return None
        tan_phi1 = math.tan(phi1)

        c1 = ep2 * cos_phi1 * cos_phi1
        t1 = tan_phi1 * tan_phi1
        denominator = 1 - e2 * sin_phi1 * sin_phi1
        n1 = a / math.sqrt(denominator)
        r1 = a * (1 - e2) / denominator ** 1.5
        d = easting / (n1 * k0)

        phi = phi1 - (n1 * tan_phi1 / r1) * (
            d ** 2 / 2
            - (5 + 3 * t1 + 10 * c1 - 4 * c1 * c1 - 9 * ep2) * d ** 4 / 24
            + (61 + 90 * t1 + 298 * c1 + 45 * t1 * t1 - 252 * ep2 - 3 * c1 * c1) * d ** 6 / 720)
        lam = lam0 + (d
                      - (1 + 2 * t1 + c1) * d ** 3 / 6
                      + (5 - 2 * c1 + 28 * t1 - 3 * c1 * c1 + 8 * ep2 + 24 * t1 * t1) * d ** 5 / 120) / cos_phi1

        latitude = math.degrees(phi)
        longitude = math.degrees(lam)
    except (ArithmeticError, ValueError) as e:
        logger.warning(f"Inverse projection from {projection.name} failed for ({point.x}, {point.y}): {e}")
        return None

    return _finish_geodetic(latitude, longitude, territory)


def linear_unproject(point: ProjectedPoint,
                     projection: ProjectionParams = GREEK_GRID,
                     reference_latitude: Optional[float] = None,
                     territory: Optional[GeoBoundingBox] = GREECE_TERRITORY) -> Optional[GeoPoint]:
    """Coarse linear grid-to-geodetic approximation.

    ``lon = cm + E / (k0 * R * cos(ref_lat))`` and ``lat = N / (k0 * R)``, with R the
    semi-major axis. When no reference latitude is given the estimated latitude is
    used. Accurate to a few hundredths of a degree near the central meridian.
    """
    try:
        scaled_radius = projection.scale_factor * projection.semi_major_axis_meters
        easting = point.x - projection.false_easting
        northing = point.y - projection.false_northing

        latitude = math.degrees(northing / scaled_radius)
        ref = latitude if reference_latitude is None else reference_latitude
        cos_ref = math.cos(math.radians(ref))
        if abs(cos_ref) < _NEAR_ZERO:
            return None
        longitude = projection.central_meridian_degrees + math.degrees(easting / (scaled_radius * cos_ref))
    except (ArithmeticError, ValueError) as e:
        logger.warning(f"Linear inverse projection from {projection.name} failed: {e}")
        return None

    return _finish_geodetic(latitude, longitude, territory)


def _finish_geodetic(latitude: float, longitude: float,
                     territory: Optional[GeoBoundingBox]) -> Optional[GeoPoint]:
    if not _all_finite(latitude, longitude):
        return None

    if territory is not None:
        latitude, longitude = territory.clamp(latitude, longitude)
    else:
        latitude = min(max(latitude, -90.0), 90.0)
        longitude = ((longitude + 180.0) % 360.0) - 180.0

    return GeoPoint(latitude=latitude, longitude=longitude)
