"""Geographic Lookup Cache

Read-through TTL cache for station lookups by coordinate. Two maps are kept:

- a single-entry snapshot of all fire stations with their service boundaries
  (long TTL, default 30 minutes);
- per-point lookup results keyed by ``LookupKey`` (short TTL, default 10 minutes).

``None`` results are cached like any other value, so repeated misses for the same
point do not repeat the underlying scan. Compute callbacks run outside the lock;
concurrent misses for the same key may compute twice and the last writer wins.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, List, NamedTuple, Optional, TypeVar

from cachetools import TTLCache

logger = logging.getLogger(__name__)

T = TypeVar('T')

ALL_STATIONS_KEY = "all_stations_with_boundaries"
COORDINATE_PRECISION = 6

_MISSING = object()


class LookupKey(NamedTuple):
    """Cache key of a point lookup.

    ``scope`` separates lookup categories sharing one cache, e.g. fire-district
    matches and service-boundary matches for the same coordinates.
    """
    scope: str
    station_set_version: Optional[str]
    latitude: float
    longitude: float

    @classmethod
    def for_point(cls, scope: str, latitude: float, longitude: float,
                  station_set_version: Optional[str] = None) -> 'LookupKey':
        """Build a key with coordinates quantized to six decimal places (about 0.1 m)."""
        return cls(scope, station_set_version,
                   round(latitude, COORDINATE_PRECISION),
                   round(longitude, COORDINATE_PRECISION))

    def describe(self) -> str:
        return f"{self.scope}_{self.latitude:.6f}_{self.longitude:.6f}"


class GeographicLookupCache:
    """Thread-safe TTL cache for geographic station lookups."""

    def __init__(self, stations_ttl_seconds: float = 1800,
                 lookup_ttl_seconds: float = 600,
                 max_entries: int = 10000,
                 timer: Callable[[], float] = time.monotonic):
        """
        Args:
            stations_ttl_seconds: Lifetime of the all-stations snapshot
            lookup_ttl_seconds: Lifetime of a point lookup result
            max_entries: Maximum number of cached point lookups
            timer: Clock used for expiry, injectable for tests
        """
        self.stations_ttl_seconds = stations_ttl_seconds
        self.lookup_ttl_seconds = lookup_ttl_seconds
        self.max_entries = max_entries
        self._lock = threading.Lock()
        self._stations = TTLCache(maxsize=1, ttl=stations_ttl_seconds, timer=timer)
        self._lookups = TTLCache(maxsize=max_entries, ttl=lookup_ttl_seconds, timer=timer)
        self.hits = 0
        self.misses = 0

    def get_or_compute(self, key: LookupKey, compute: Callable[[], Optional[T]]) -> Optional[T]:
        """Return the cached value for ``key`` or compute and store it.

        Args:
            key: Lookup key
            compute: Zero-argument callable producing the value; may return None

        Returns:
            Cached or freshly computed value
        """
        with self._lock:
            value = self._lookups.get(key, _MISSING)
            if value is not _MISSING:
                self.hits += 1
                return value
            self.misses += 1

        logger.debug(f"Lookup cache miss for {key.describe()}")
        value = compute()

        with self._lock:
            self._lookups[key] = value
        return value

    def get_all_stations(self, compute: Callable[[], List[T]]) -> List[T]:
        """Snapshot of all stations with boundaries, refreshed after its TTL."""
        with self._lock:
            stations = self._stations.get(ALL_STATIONS_KEY, _MISSING)
            if stations is not _MISSING:
                self.hits += 1
                return stations
            self.misses += 1

        stations = compute()
        logger.debug(f"Cached {len(stations)} stations with boundaries for {self.stations_ttl_seconds}s")

        with self._lock:
            self._stations[ALL_STATIONS_KEY] = stations
        return stations

    def clear(self) -> None:
        """Drop the all-stations snapshot. Point lookups expire on their own TTL."""
        with self._lock:
            self._stations.pop(ALL_STATIONS_KEY, None)
        logger.info("Station snapshot cleared from geographic lookup cache")

    def get_cache_statistics(self) -> Dict[str, Any]:
        with self._lock:
            has_snapshot = ALL_STATIONS_KEY in self._stations
            lookup_count = len(self._lookups)
            hits, misses = self.hits, self.misses

        total = hits + misses
        return {
            "all_stations_cached": has_snapshot,
            "cached_lookups": lookup_count,
            "stations_ttl_seconds": self.stations_ttl_seconds,
            "lookup_ttl_seconds": self.lookup_ttl_seconds,
            "max_entries": self.max_entries,
            "hits": hits,
            "misses": misses,
            "hit_rate": hits / total if total else 0.0,
        }
