"""
Redis cache for resolved pricing configurations.

Profiles change rarely and every estimate needs one, so the decoded
``rules_config`` is kept under ``pricing:{city}:{mode}`` with a TTL.
Redis being unavailable is never fatal: errors are logged and treated as
a cache miss.

A hit is served without touching the database, so a profile that is
deactivated or edited keeps pricing until its entry expires.  Profiles are
only written by migrations and the seed; set
``PROFILE_CACHE_TTL_SECONDS=0`` to disable the cache where edits must take
effect immediately.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from src.domain.pricing_config import PricingRuleConfig

logger = logging.getLogger(__name__)


class ProfileCache:
    def __init__(self, client: aioredis.Redis, ttl_seconds: int = 300):
        self.redis = client
        self.ttl = ttl_seconds

    @staticmethod
    def key(city_slug: str, mode_slug: str) -> str:
        return f"pricing:{city_slug}:{mode_slug}"

    async def get(
        self, city_slug: str, mode_slug: str
    ) -> Optional[PricingRuleConfig]:
        key = self.key(city_slug, mode_slug)
        try:
            raw = await self.redis.get(key)
        except RedisError:
            logger.warning("Profile cache read failed for %s", key, exc_info=True)
            return None
        if raw is None:
            logger.debug("Profile cache miss: %s", key)
            return None
        try:
            return PricingRuleConfig.from_rules_config(json.loads(raw))
        except ValueError:  # bad JSON or a stale schema
            logger.warning("Discarding unreadable cache entry %s", key)
            return None

    async def set(
        self, city_slug: str, mode_slug: str, config: PricingRuleConfig
    ) -> None:
        key = self.key(city_slug, mode_slug)
        try:
            await self.redis.set(
                key, json.dumps(config.to_rules_config()), ex=self.ttl
            )
        except RedisError:
            logger.warning("Profile cache write failed for %s", key, exc_info=True)
