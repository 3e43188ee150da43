"""All-pairs path cache: building, persistence and validation."""

from .paths import BuildStats, PathsCache, build_all, lookup, record_path
from .store import CacheStore, cache_from_dict, cache_to_dict, load_cache, save_cache
from .validation import CacheValidation, validate_cache

__all__ = [
    # Cache
    "PathsCache",
    "BuildStats",
    "build_all",
    "lookup",
    "record_path",
    # Store
    "CacheStore",
    "cache_from_dict",
    "cache_to_dict",
    "load_cache",
    "save_cache",
    # Validation
    "CacheValidation",
    "validate_cache",
]
