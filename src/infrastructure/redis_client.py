"""Redis async connection pool and the profile cache built on it."""

import redis.asyncio as aioredis

from src.config import settings
from src.infrastructure.profile_cache import ProfileCache

_pool = aioredis.ConnectionPool.from_url(
    settings.redis_url, decode_responses=True
)


async def get_redis() -> aioredis.Redis:
    """Return a Redis client backed by the shared connection pool."""
    return aioredis.Redis(connection_pool=_pool)


async def get_profile_cache() -> ProfileCache | None:
    """FastAPI dependency; ``None`` when caching is switched off."""
    if settings.profile_cache_ttl_seconds <= 0:
        return None
    return ProfileCache(await get_redis(), settings.profile_cache_ttl_seconds)
