"""Lookup Cache - owned caches for external lookups (market demand, synonyms)."""
import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Any, Callable, Optional, Tuple
from urllib.parse import urlparse

from redis import Redis

from core.config_loader import CacheConfig

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60


def _sanitize_url(url: str) -> str:
    """Remove credentials from URL for safe logging."""
    try:
        parsed = urlparse(url)
        if parsed.password:
            sanitized = parsed._replace(
                netloc=f"{parsed.username or ''}:*@{parsed.hostname}:{parsed.port or 6379}"
            )
            return sanitized.geturl()
        return url
    except ValueError:
        return url


class LookupCache(ABC):
    """Key/value cache with a defined eviction policy."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass

    def get_or_load(self, key: str, loader: Callable[[], Any]) -> Any:
        value = self.get(key)
        if value is None:
            value = loader()
            if value is not None:
                self.set(key, value)
        return value


class InMemoryLookupCache(LookupCache):
    """
    Thread-safe in-process cache.

    Entries expire after ttl_seconds; when max_entries is reached the least
    recently used entry is evicted.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_entries: int = 10000,
        clock: Callable[[], float] = time.monotonic
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, Any]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + self.ttl_seconds, value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted {evicted} from lookup cache")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisLookupCache(LookupCache):
    """
    Redis-backed cache shared across recompute workers.

    Values are stored as JSON with a TTL; Redis eviction policy applies on
    top. Read/write errors degrade to cache misses.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        prefix: str = "lookup:",
        redis_client: Optional[Redis] = None
    ):
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix
        self._redis = redis_client or Redis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5
        )
        logger.info(f"Lookup cache using Redis at {_sanitize_url(redis_url)}")

    def _make_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Optional[Any]:
        try:
            data = self._redis.get(self._make_key(key))
        except Exception as e:
            logger.warning(f"Error reading from lookup cache: {e}")
            return None
        if data is None:
            return None
        return json.loads(data)

    def set(self, key: str, value: Any) -> None:
        try:
            self._redis.setex(self._make_key(key), self.ttl_seconds, json.dumps(value))
        except Exception as e:
            logger.warning(f"Error writing to lookup cache: {e}")

    def clear(self) -> None:
        cursor = 0
        deleted = 0
        try:
            while True:
                cursor, keys = self._redis.scan(cursor=cursor, match=f"{self.prefix}*", count=100)
                if keys:
                    self._redis.delete(*keys)
                    deleted += len(keys)
                if cursor == 0:
                    break
        except Exception as e:
            logger.warning(f"Error clearing lookup cache after {deleted} keys: {e}")
            return
        logger.info(f"Cleared {deleted} keys from lookup cache")


def build_lookup_cache(config: CacheConfig) -> LookupCache:
    """Create the cache backend named in config."""
    if config.backend == 'redis':
        return RedisLookupCache(
            redis_url=config.redis_url or "redis://localhost:6379/0",
            ttl_seconds=config.ttl_seconds
        )
    if config.backend != 'memory':
        raise ValueError(f"Unknown cache backend: {config.backend}")
    return InMemoryLookupCache(ttl_seconds=config.ttl_seconds, max_entries=config.max_entries)
