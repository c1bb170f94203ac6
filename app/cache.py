"""
Redis caching for pricing configurations fetched from the backend
Every operation fails open: a missing or broken Redis means a cache miss
"""
import json
import logging
from typing import Optional

import redis

from . import config

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None


def get_redis_client() -> Optional[redis.Redis]:
    """
    Get or create the Redis client from REDIS_URL.
    Returns None when no URL is configured.
    """
    global _redis_client

    if _redis_client is None:
        if not config.REDIS_URL:
            return None

        logger.info("🔄 Initializing Redis connection for config cache...")
        client = redis.from_url(
            config.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        # Test connection
        client.ping()
        _redis_client = client
        logger.info("Redis connected successfully via URL")
    return _redis_client


class PricingConfigCache:
    """
    Merged pricing configs in Redis, one JSON value per service id.

    Only configs the backend supplied are stored; defaults are never cached
    so a recovering backend is picked up on the next read.
    """

    prefix = "pricing_config"

    def __init__(self, ttl: Optional[int] = None):
        self.redis_client = None
        self.ttl = ttl

    def key(self, service_id: str) -> str:
        return f"{self.prefix}:{service_id}"

    def _client(self):
        if self.redis_client is None:
            try:
                self.redis_client = get_redis_client()
            except (redis.RedisError, OSError) as e:
                logger.warning(f"⚠️ Redis cache unavailable: {e}")
                return None
        return self.redis_client

    def load(self, service_id: str) -> Optional[dict]:
        client = self._client()
        if not client:
            return None
        try:
            raw = client.get(self.key(service_id))
        except redis.RedisError as e:
            logger.error(f"❌ Config cache read failed for {service_id}: {e}")
            return None
        if not raw:
            logger.debug(f"❌ Config cache MISS: {service_id}")
            return None
        try:
            value = json.loads(raw)
        except ValueError:
            logger.warning(f"⚠️ Discarding unreadable cached config for {service_id}")
            return None
        logger.debug(f"✅ Config cache HIT: {service_id}")
        return value if isinstance(value, dict) else None

    def store(self, service_id: str, pricing_config: dict) -> bool:
        client = self._client()
        if not client:
            return False
        ttl = self.ttl or config.PRICING_CONFIG_CACHE_TTL
        try:
            client.setex(self.key(service_id), ttl, json.dumps(pricing_config))
        except redis.RedisError as e:
            logger.error(f"❌ Config cache write failed for {service_id}: {e}")
            return False
        logger.debug(f"✅ Cached config for {service_id} (TTL: {ttl}s)")
        return True

    def invalidate(self, service_id: str) -> bool:
        client = self._client()
        if not client:
            return False
        try:
            client.delete(self.key(service_id))
        except redis.RedisError as e:
            logger.error(f"❌ Config cache invalidate failed for {service_id}: {e}")
            return False
        return True

    def stats(self) -> dict:
        """Redis memory and hit counters for the health endpoint"""
        client = self._client()
        if not client:
            return {"available": False}
        try:
            info = client.info()
        except redis.RedisError as e:
            logger.error(f"❌ Failed to get cache stats: {e}")
            return {"available": False, "error": str(e)}
        return {
            "available": True,
            "used_memory": info.get("used_memory_human"),
            "keyspace_hits": info.get("keyspace_hits", 0),
            "keyspace_misses": info.get("keyspace_misses", 0),
        }


cache = PricingConfigCache()


def pricing_config_key(service_id: str) -> str:
    return cache.key(service_id)


def get_pricing_config_cached(service_id: str) -> Optional[dict]:
    return cache.load(service_id)


def set_pricing_config_cached(service_id: str, pricing_config: dict) -> bool:
    return cache.store(service_id, pricing_config)


def invalidate_pricing_config_cache(service_id: str) -> bool:
    """Drop a cached config before a forced refresh"""
    return cache.invalidate(service_id)


def get_cache_stats() -> dict:
    return cache.stats()
