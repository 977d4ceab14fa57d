"""Fire District Boundary Store

Lazily loads fire-district geometry from a ``DistrictRepository`` and answers
point-in-district queries in Greek Grid coordinates.

The store loads at most once per lifetime (until ``invalidate()``). Loading is
double-checked under an injected lock; readers take a reference to the immutable
district tuple and never block once it is published. A failed load leaves the
store loaded but empty and is not retried automatically.
"""

import logging
import threading
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from ims_core.exceptions import IMSDataSourceError
from ims_core.utils import log_performance
from ..models import BoundaryParseWarning, District
from .boundary_parser import DEFAULT_ID_PROPERTY, DEFAULT_OWNER_PROPERTY, parse_district_documents

logger = logging.getLogger(__name__)


class BoundaryStore:
    """In-memory cache of parsed fire districts."""

    def __init__(self, district_repository,
                 owner_property: str = DEFAULT_OWNER_PROPERTY,
                 id_property: str = DEFAULT_ID_PROPERTY,
                 lock: Optional[threading.Lock] = None):
        """
        Args:
            district_repository: Object with ``list_raw_district_documents()``
            owner_property: Feature property holding the owning station name
            id_property: Feature property identifying a district document
            lock: Lock guarding the load; a new one is created when omitted
        """
        self.district_repository = district_repository
        self.owner_property = owner_property
        self.id_property = id_property
        self._lock = lock if lock is not None else threading.Lock()
        self._counter_lock = threading.Lock()

        self._districts: Tuple[District, ...] = ()
        self._warnings: Tuple[BoundaryParseWarning, ...] = ()
        self._loaded = False
        self._last_error: Optional[str] = None
        self._loaded_at: Optional[datetime] = None

        self.load_count = 0
        self.scan_count = 0

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def districts(self) -> Tuple[District, ...]:
        return self._districts

    @property
    def warnings(self) -> Tuple[BoundaryParseWarning, ...]:
        return self._warnings

    def ensure_loaded(self) -> bool:
        """Load districts on first use.

        Returns:
            True if at least one district is available after loading
        """
        if not self._loaded:
            with self._lock:
                if not self._loaded:
                    self._load()
        return bool(self._districts)

    @log_performance
    def _load(self) -> None:
        # Caller holds self._lock
        self.load_count += 1
        districts: Tuple[District, ...] = ()
        warnings: Tuple[BoundaryParseWarning, ...] = ()
        self._last_error = None

        try:
            documents = self.district_repository.list_raw_district_documents()
            parsed, skipped = parse_district_documents(documents, self.owner_property, self.id_property)
            districts = tuple(parsed)
            warnings = tuple(skipped)
            logger.info(f"Loaded {len(districts)} fire districts ({len(warnings)} skipped)")
        except IMSDataSourceError as e:
            self._last_error = str(e)
            logger.error(f"Failed to load fire districts, continuing with no districts: {e}")
        except Exception as e:
            self._last_error = str(e)
            logger.error(f"Unexpected error loading fire districts, continuing with no districts: {e}")

        self._districts = districts
        self._warnings = warnings
        self._loaded_at = datetime.now()
        # Publish last so readers never see a partial state
        self._loaded = True

    def find_containing_district(self, x: float, y: float) -> Optional[District]:
        """First district in load order whose geometry contains the grid point.

        Args:
            x: Easting in the district grid
            y: Northing in the district grid

        Returns:
            The containing District, or None
        """
        self.ensure_loaded()
        with self._counter_lock:
            self.scan_count += 1

        for district in self._districts:
            if district.contains(x, y):
                return district
        return None

    def invalidate(self) -> None:
        """Reset to "not loaded" so the next query reloads from the repository."""
        with self._lock:
            self._loaded = False
            self._districts = ()
            self._warnings = ()
            self._loaded_at = None
        logger.info("Fire district cache invalidated")

    def get_status(self) -> Dict[str, Any]:
        return {
            "loaded": self._loaded,
            "district_count": len(self._districts),
            "skipped_count": len(self._warnings),
            "load_count": self.load_count,
            "scan_count": self.scan_count,
            "loaded_at": self._loaded_at.isoformat() if self._loaded_at else None,
            "last_error": self._last_error,
        }
