"""
Redis caching utilities for frequently read, rarely changed data
(service catalog, geocoding results). Every operation fails open.
"""
import json
import logging
from typing import Any, Callable, Optional

from .rate_limiter import get_redis_client

logger = logging.getLogger(__name__)

CATALOG_CACHE_TTL = 300  # 5 minutes
CATALOG_KEY_PREFIX = "catalog"
GEOCODE_KEY_PREFIX = "geo:google"


class Cache:
    """JSON values in Redis; a missing or failing Redis behaves like an empty cache"""

    def __init__(self):
        self.redis_client = None

    def _get_client(self):
        """Lazy load Redis client"""
        if self.redis_client is None:
            try:
                self.redis_client = get_redis_client()
            except Exception as e:
                logger.debug(f"⚠️ Redis cache unavailable: {e}")
                return None
        return self.redis_client

    def _run(self, operation: str, key: str, call: Callable, fallback):
        client = self._get_client()
        if not client:
            return fallback
        try:
            return call(client)
        except Exception as e:
            logger.error(f"❌ Cache {operation} error for {key}: {e}")
            return fallback

    def get(self, key: str) -> Optional[Any]:
        def read(client):
            value = client.get(key)
            if not value:
                logger.debug(f"❌ Cache MISS: {key}")
                return None
            logger.debug(f"✅ Cache HIT: {key}")
            return json.loads(value)

        return self._run("get", key, read, None)

    def set(self, key: str, value: Any, ttl: int = 3600) -> bool:
        def write(client):
            client.setex(key, ttl, json.dumps(value, default=str))
            logger.debug(f"✅ Cache SET: {key} (TTL: {ttl}s)")
            return True

        return self._run("set", key, write, False)

    def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching pattern (e.g., 'catalog:*')"""

        def purge(client):
            keys = client.keys(pattern)
            if not keys:
                return 0
            deleted = client.delete(*keys)
            logger.debug(f"✅ Cache DELETE pattern: {pattern} ({deleted} keys)")
            return deleted

        return self._run("delete pattern", pattern, purge, 0)


cache = Cache()


def get_categories_cached() -> Optional[list]:
    """Get the formatted category list from cache"""
    return cache.get(f"{CATALOG_KEY_PREFIX}:categories")


def set_categories_cached(categories: list, ttl: int = CATALOG_CACHE_TTL) -> bool:
    """Cache the formatted category list"""
    return cache.set(f"{CATALOG_KEY_PREFIX}:categories", categories, ttl)


def invalidate_catalog_cache() -> int:
    """Invalidate every catalog entry (after a reseed)"""
    return cache.delete_pattern(f"{CATALOG_KEY_PREFIX}:*")


def build_geocode_key(address: str) -> str:
    return f"{GEOCODE_KEY_PREFIX}:{address.strip().lower()}"
