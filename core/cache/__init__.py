"""Cache Module - Caching services."""
from core.cache.lookup_cache import (
    LookupCache,
    InMemoryLookupCache,
    RedisLookupCache,
    build_lookup_cache,
    DEFAULT_TTL_SECONDS
)

__all__ = [
    'LookupCache',
    'InMemoryLookupCache',
    'RedisLookupCache',
    'build_lookup_cache',
    'DEFAULT_TTL_SECONDS'
]
