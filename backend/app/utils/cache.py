"""Redis caching utilities.

Holds the shared async Redis client and small JSON get/set/delete helpers.
The cache is never authoritative: every helper logs and swallows Redis
errors so callers fall back to the database.

Main user: the onboarding gate, which caches a merchant's terminal
onboarding status (completed / skipped) with a TTL instead of relying on
browser session storage.
"""

import json
import logging
from typing import Any, Optional

import redis.asyncio as redis
from app.config import settings

logger = logging.getLogger(__name__)

# Global Redis connection pool
_redis_client: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    """Get or create Redis client connection."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=50,
        )
    return _redis_client


async def close_redis():
    """Close Redis connection (call on app shutdown)."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def onboarding_status_key(user_id: str) -> str:
    return f"onboarding:status:{user_id}"


async def cache_get_json(key: str) -> Any | None:
    """Return the decoded value at `key`, or None on miss / Redis error."""
    try:
        client = await get_redis()
        raw = await client.get(key)
    except redis.RedisError as e:
        logger.warning(f"Redis error reading {key} (falling back to database): {e}")
        return None

    if raw is None:
        logger.debug(f"Cache MISS: {key}")
        return None

    logger.debug(f"Cache HIT: {key}")
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning(f"Discarding undecodable cache entry at {key}")
        return None


async def cache_set_json(key: str, value: Any, ttl: int) -> bool:
    """Store `value` as JSON with a TTL in seconds. Returns False on Redis error."""
    try:
        client = await get_redis()
        await client.setex(key, ttl, json.dumps(value))
        return True
    except redis.RedisError as e:
        logger.warning(f"Failed to cache {key}: {e}")
        return False


async def cache_delete(key: str) -> None:
    try:
        client = await get_redis()
        await client.delete(key)
    except redis.RedisError as e:
        logger.warning(f"Failed to invalidate cache key {key}: {e}")
