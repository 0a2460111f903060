"""
Redis-backed JSON cache.

Thin wrapper over a redis.Redis client that stores JSON-serialized values
and turns connection/serialization failures into logged False/None results.

Usage:
    from clinote.db.redis_cache import get_redis_cache
    from clinote.db.redis_db import RedisKeyPrefix

    cache = get_redis_cache()
    key = RedisKeyPrefix.folder_key("folder-abc")
    cache.set(key, {"name": "Sessions"})
    data = cache.get(key)
    cache.delete(key)
"""

import json
from typing import Any

import redis

from clinote.settings import settings
from clinote.utils.logging import get_logger

logger = get_logger(__name__)


class RedisCache:
    """
    Redis JSON cache (Single DB + Key Prefix Pattern)

    Features:
    - JSON serialization: Handles nested document content
    - TTL support: Optional expiry with SETEX
    - Lazy connection: The client is created on first use
    """

    def __init__(self, db: int | None = None, client: redis.Redis | None = None):
        """
        Initialize Redis cache

        Args:
            db: Database index (default: settings.redis_index)
            client: Optional pre-configured Redis client (for testing with fakeredis)
        """
        self.db = settings.redis_index if db is None else db
        self._client: redis.Redis | None = client

    @property
    def client(self) -> redis.Redis:
        """Lazy initialization of the Redis client"""
        if self._client is None:
            redis_config = {
                "host": settings.redis_host,
                "port": settings.redis_port,
                "db": self.db,
                "socket_connect_timeout": settings.redis_socket_connect_timeout,
                "socket_timeout": settings.redis_socket_timeout,
                "decode_responses": True,  # Auto-decode bytes to str
            }
            if settings.redis_password:
                redis_config["password"] = settings.redis_password

            self._client = redis.Redis(**redis_config)
            logger.info(f"RedisCache initialized: {settings.redis_host}:{settings.redis_port}/{self.db}")

        return self._client

    def get(self, key: str) -> Any | None:
        """
        Get cached value

        Returns:
            Deserialized value, or None if missing or unreadable
        """
        try:
            data = self.client.get(key)
            if data:
                return json.loads(data)
            logger.debug(f"Cache miss: {key}")
            return None
        except redis.RedisError as e:
            logger.error(f"Redis get error for key {key}: {e}")
            return None
        except json.JSONDecodeError as e:
            logger.error(f"JSON decode error for key {key}: {e}")
            return None

    def set(self, key: str, value: Any, expire_seconds: int | None = None) -> bool:
        """
        Set cached value with optional TTL

        Returns:
            True if successful, False otherwise
        """
        try:
            serialized = json.dumps(value, default=str)

            if expire_seconds:
                result = self.client.setex(key, expire_seconds, serialized)
            else:
                result = self.client.set(key, serialized)

            logger.debug(f"Cache set: {key}" + (f", expires in {expire_seconds}s" if expire_seconds else ""))
            return bool(result)
        except redis.RedisError as e:
            logger.error(f"Redis set error for key {key}: {e}")
            return False
        except (TypeError, ValueError) as e:
            logger.error(f"Serialization error for key {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        """
        Delete cached value

        Returns:
            True if key was deleted, False if it didn't exist or an error occurred
        """
        try:
            result = self.client.delete(key)
            if result:
                logger.debug(f"Cache deleted: {key}")
            return bool(result)
        except redis.RedisError as e:
            logger.error(f"Redis delete error for key {key}: {e}")
            return False

    def exists(self, key: str) -> bool:
        """Check if key exists in cache"""
        try:
            return bool(self.client.exists(key))
        except redis.RedisError as e:
            logger.error(f"Redis exists error for key {key}: {e}")
            return False

    def ping(self) -> bool:
        """Check Redis connection"""
        try:
            return self.client.ping()
        except redis.RedisError as e:
            logger.error(f"Redis ping failed: {e}")
            return False

    def close(self) -> None:
        """Close Redis connection"""
        if self._client:
            self._client.close()
            self._client = None
            logger.info(f"RedisCache closed: db={self.db}")


# ==================== Singleton Instance ====================

_redis_cache: RedisCache | None = None


def get_redis_cache() -> RedisCache:
    """Get singleton Redis cache instance."""
    global _redis_cache
    if _redis_cache is None:
        _redis_cache = RedisCache()
    return _redis_cache
