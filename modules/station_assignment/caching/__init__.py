"""Caching for geographic station lookups"""

from .geographic_lookup_cache import GeographicLookupCache, LookupKey, ALL_STATIONS_KEY

__all__ = ['GeographicLookupCache', 'LookupKey', 'ALL_STATIONS_KEY']
