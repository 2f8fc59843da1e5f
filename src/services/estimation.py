"""
Fare estimation service
=======================

``estimate`` is the pure core: coordinates + resolved config in, priced
``EstimateResult`` out.  ``FareEstimationService`` is the thin async layer
around it that turns slugs into a config (DB + Redis cache) and puts the
travel time into the city's timezone.

Flow per request
----------------
1. Resolve city by slug (currency, timezone).
2. Resolve the active pricing profile for (city, mode), cache first.
3. Estimate road distance and duration.
4. Run the pricing pipeline.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.domain.distance import estimate_route
from src.domain.entities import EstimateResult, GeoPoint
from src.domain.errors import ConfigurationNotFound
from src.domain.pricing import PricingEngine, round_half_up
from src.domain.pricing_config import PricingRuleConfig
from src.infrastructure.models import CityModel
from src.infrastructure.profile_cache import ProfileCache
from src.infrastructure.repositories import (
    CityRepository,
    PricingProfileRepository,
    TransportModeRepository,
)

logger = logging.getLogger(__name__)

_engine = PricingEngine()


def estimate(
    origin: GeoPoint,
    destination: GeoPoint,
    config: PricingRuleConfig,
    currency_code: str,
    travel_time: Optional[datetime] = None,
    night_override: Optional[bool] = None,
    engine: PricingEngine = _engine,
) -> EstimateResult:
    """Price a trip.  Deterministic for a given ``travel_time``."""
    route = estimate_route(origin, destination)
    quote = engine.price(
        route.distance_meters,
        config,
        travel_time=travel_time,
        night_override=night_override,
    )
    return EstimateResult(
        total_price=quote.total,
        currency_code=currency_code,
        distance_km=round_half_up(route.distance_meters / 1000),
        duration_minutes=math.ceil(route.duration_seconds / 60),
        is_night_fare=quote.is_night_fare,
        breakdown=quote.breakdown,
    )


def city_zone(city: CityModel) -> ZoneInfo:
    try:
        return ZoneInfo(city.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(
            "Unknown timezone %r for city %s; using %s",
            city.timezone, city.slug, settings.default_timezone,
        )
        return ZoneInfo(settings.default_timezone)


def local_travel_time(
    travel_time: Optional[datetime], zone: ZoneInfo
) -> datetime:
    """Wall-clock time in *zone*.  Naive input is already local."""
    if travel_time is None:
        return datetime.now(zone)
    if travel_time.tzinfo is None:
        return travel_time
    return travel_time.astimezone(zone)


class FareEstimationService:
    def __init__(
        self, session: AsyncSession, cache: Optional[ProfileCache] = None
    ):
        self.session = session
        self.cache = cache

    async def resolve_city(self, city_slug: str) -> CityModel:
        city = await CityRepository(self.session).get_by_slug(city_slug)
        if city is None:
            logger.info("Unknown city slug %r", city_slug)
            raise ConfigurationNotFound("City or Transport Mode not found")
        return city

    async def resolve_config(
        self, city: CityModel, mode_slug: str
    ) -> PricingRuleConfig:
        if self.cache is not None:
            cached = await self.cache.get(city.slug, mode_slug)
            if cached is not None:
                return cached

        mode = await TransportModeRepository(self.session).get_by_slug(mode_slug)
        if mode is None:
            logger.info("Unknown transport mode slug %r", mode_slug)
            raise ConfigurationNotFound("City or Transport Mode not found")

        profile = await PricingProfileRepository(self.session).get_active(
            city.id, mode.id
        )
        if profile is None:
            logger.info("No active profile for %s/%s", city.slug, mode_slug)
            raise ConfigurationNotFound(
                "Pricing profile not found for this combination"
            )

        # Raises InvalidPricingConfig for a malformed stored document
        config = PricingRuleConfig.from_rules_config(profile.rules_config)
        if self.cache is not None:
            await self.cache.set(city.slug, mode_slug, config)
        return config

    async def estimate(
        self,
        *,
        origin: GeoPoint,
        destination: GeoPoint,
        city_slug: str,
        mode_slug: str,
        travel_time: Optional[datetime] = None,
        night_override: Optional[bool] = None,
    ) -> EstimateResult:
        city = await self.resolve_city(city_slug)
        config = await self.resolve_config(city, mode_slug)

        result = estimate(
            origin,
            destination,
            config,
            city.currency_code,
            travel_time=local_travel_time(travel_time, city_zone(city)),
            night_override=night_override,
        )
        logger.info(
            "Estimated %s/%s: %.2f %s (%.2f km, night=%s)",
            city_slug, mode_slug, result.total_price, result.currency_code,
            result.distance_km, result.is_night_fare,
        )
        return result
