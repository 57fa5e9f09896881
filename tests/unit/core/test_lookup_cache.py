#!/usr/bin/env python3
"""
Unit tests for the lookup caches (in-memory TTL/LRU and Redis-backed).
"""

import json
import unittest
from unittest.mock import Mock

from redis.exceptions import ConnectionError as RedisConnectionError

from core.cache import InMemoryLookupCache, RedisLookupCache, build_lookup_cache
from core.config_loader import CacheConfig


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestInMemoryLookupCache(unittest.TestCase):

    def setUp(self):
        self.clock = FakeClock()
        self.cache = InMemoryLookupCache(ttl_seconds=60, max_entries=2, clock=self.clock)

    def test_set_and_get(self):
        self.cache.set("demand:aws", 1.3)
        self.assertEqual(self.cache.get("demand:aws"), 1.3)
        self.assertIsNone(self.cache.get("demand:cobol"))

    def test_entries_expire(self):
        self.cache.set("demand:aws", 1.3)
        self.clock.now += 59
        self.assertEqual(self.cache.get("demand:aws"), 1.3)
        self.clock.now += 1
        self.assertIsNone(self.cache.get("demand:aws"))
        self.assertEqual(len(self.cache), 0)

    def test_least_recently_used_is_evicted(self):
        self.cache.set("a", 1)
        self.cache.set("b", 2)
        self.cache.get("a")
        self.cache.set("c", 3)

        self.assertEqual(self.cache.get("a"), 1)
        self.assertIsNone(self.cache.get("b"))
        self.assertEqual(self.cache.get("c"), 3)

    def test_get_or_load(self):
        loader = Mock(return_value=0.9)
        self.assertEqual(self.cache.get_or_load("k", loader), 0.9)
        self.assertEqual(self.cache.get_or_load("k", loader), 0.9)
        loader.assert_called_once()

    def test_clear(self):
        self.cache.set("a", 1)
        self.cache.clear()
        self.assertIsNone(self.cache.get("a"))


class TestRedisLookupCache(unittest.TestCase):

    def setUp(self):
        self.redis = Mock()
        self.cache = RedisLookupCache(ttl_seconds=120, redis_client=self.redis)

    def test_set_uses_ttl_and_prefix(self):
        self.cache.set("demand:aws", 1.3)
        self.redis.setex.assert_called_once_with("lookup:demand:aws", 120, json.dumps(1.3))

    def test_get_decodes_json(self):
        self.redis.get.return_value = "1.25"
        self.assertEqual(self.cache.get("demand:k8s"), 1.25)
        self.redis.get.assert_called_once_with("lookup:demand:k8s")

    def test_redis_errors_are_misses(self):
        self.redis.get.side_effect = RedisConnectionError("down")
        self.redis.setex.side_effect = RedisConnectionError("down")
        loader = Mock(return_value=1.0)

        self.assertEqual(self.cache.get_or_load("demand:sql", loader), 1.0)
        loader.assert_called_once()

    def test_clear_scans_prefix(self):
        self.redis.scan.side_effect = [(5, ["lookup:a"]), (0, ["lookup:b"])]
        self.cache.clear()
        self.assertEqual(self.redis.delete.call_count, 2)

    def test_clear_survives_redis_outage(self):
        self.redis.scan.side_effect = [(5, ["lookup:a"]), RedisConnectionError("down")]
        with self.assertLogs('core.cache.lookup_cache', level='WARNING') as logs:
            self.cache.clear()
        self.assertEqual(self.redis.delete.call_count, 1)
        self.assertIn('after 1 keys', logs.output[0])


class TestBuildLookupCache(unittest.TestCase):

    def test_memory_backend(self):
        cache = build_lookup_cache(CacheConfig(backend="memory", ttl_seconds=5, max_entries=3))
        self.assertIsInstance(cache, InMemoryLookupCache)
        self.assertEqual(cache.max_entries, 3)

    def test_unknown_backend(self):
        with self.assertRaises(ValueError):
            build_lookup_cache(CacheConfig(backend="memcached"))


if __name__ == "__main__":
    unittest.main()
