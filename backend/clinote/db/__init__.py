"""Redis access layer for the workspace persistence adapter."""

from clinote.db.redis_cache import RedisCache, get_redis_cache
from clinote.db.redis_db import RedisKeyPrefix

__all__ = ["RedisCache", "RedisKeyPrefix", "get_redis_cache"]
