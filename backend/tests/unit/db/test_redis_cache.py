#!/usr/bin/env python
"""
Unit tests for the Redis cache module

Tests cover:
- RedisCache JSON string operations
- Error handling (Redis failures become falsy results)
- Key prefix helpers
"""

import pytest
import redis

from clinote.db.redis_cache import RedisCache
from clinote.db.redis_db import RedisKeyPrefix


class BrokenRedis:
    """Client whose every call fails like a lost connection."""

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise redis.ConnectionError("Connection refused")

        return fail


class TestRedisKeyPrefix:
    """Test suite for RedisKeyPrefix"""

    def test_entity_keys(self):
        """Entity keys are namespaced under clinote:workspace"""
        assert RedisKeyPrefix.folder_key("f1") == "clinote:workspace:folder:f1"
        assert RedisKeyPrefix.note_key("n1") == "clinote:workspace:note:n1"

    def test_index_keys(self):
        """Index keys share the index prefix"""
        assert RedisKeyPrefix.folder_index_key() == "clinote:workspace:index:folders"
        assert RedisKeyPrefix.note_index_key() == "clinote:workspace:index:notes"

    def test_list_all(self):
        """Every prefix has a description"""
        listing = RedisKeyPrefix.list_all()
        assert set(listing) == {"WORKSPACE_FOLDER", "WORKSPACE_NOTE", "WORKSPACE_INDEX"}
        assert all(entry["description"] != "Undefined" for entry in listing.values())


class TestRedisCacheOperations:
    """Test cache operations against fakeredis"""

    @pytest.fixture
    def test_cache(self, fake_redis_client) -> RedisCache:
        """Create a cache instance backed by fakeredis"""
        return RedisCache(client=fake_redis_client)

    def test_ping(self, test_cache: RedisCache):
        """Test Redis connection via ping"""
        assert test_cache.ping() is True

    def test_string_operations(self, test_cache: RedisCache):
        """Test string set/get/delete operations"""
        key = "test:string_key"
        value = {"name": "test", "children": [{"text": "nested"}]}

        assert test_cache.set(key, value) is True
        assert test_cache.get(key) == value
        assert test_cache.delete(key) is True
        assert test_cache.get(key) is None
        assert test_cache.delete(key) is False

    def test_string_with_ttl(self, test_cache: RedisCache, fake_redis_client):
        """Test string set with TTL"""
        key = "test:ttl_key"

        test_cache.set(key, "test_value", expire_seconds=60)

        assert test_cache.get(key) == "test_value"
        assert 0 < fake_redis_client.ttl(key) <= 60

    def test_exists(self, test_cache: RedisCache):
        """Test key exists check"""
        key = "test:exists_key"

        assert test_cache.exists(key) is False
        test_cache.set(key, "value")
        assert test_cache.exists(key) is True

    def test_invalid_json_returns_none(self, test_cache: RedisCache, fake_redis_client):
        """Values that are not JSON read as None"""
        fake_redis_client.set("test:raw", "{not json")

        assert test_cache.get("test:raw") is None

    def test_unserializable_value(self, test_cache: RedisCache):
        """Values json cannot encode are rejected"""
        assert test_cache.set("test:circular", _circular()) is False


class TestRedisCacheFailures:
    """Redis errors are logged and turned into falsy results"""

    @pytest.fixture
    def broken_cache(self) -> RedisCache:
        return RedisCache(client=BrokenRedis())

    def test_failures_are_falsy(self, broken_cache: RedisCache):
        """No operation raises when Redis is unreachable"""
        assert broken_cache.get("k") is None
        assert broken_cache.set("k", 1) is False
        assert broken_cache.delete("k") is False
        assert broken_cache.exists("k") is False
        assert broken_cache.ping() is False


def _circular() -> dict:
    value: dict = {}
    value["self"] = value
    return value
