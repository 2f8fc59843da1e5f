"""
Reference-data endpoints
========================

GET /api/v1/cities                -- priced cities
GET /api/v1/cities/{slug}/places  -- named landmarks for a city
GET /api/v1/transport-modes       -- vehicle categories
GET /api/v1/pricing-profiles      -- active rule sets (optionally per city)
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db
from src.api.middleware import limiter
from src.api.schemas import (
    CityResponse,
    ErrorResponse,
    PlaceResponse,
    PricingProfileResponse,
    TransportModeResponse,
)
from src.config import settings
from src.domain.errors import ConfigurationNotFound, InvalidPricingConfig
from src.domain.pricing_config import PricingRuleConfig
from src.infrastructure.repositories import (
    CityRepository,
    PlaceRepository,
    PricingProfileRepository,
    TransportModeRepository,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reference"])


@router.get("/cities", response_model=list[CityResponse], summary="List cities")
@limiter.limit(settings.rate_limit)
async def list_cities(request: Request, db: AsyncSession = Depends(get_db)):
    return await CityRepository(db).list_all()


@router.get(
    "/cities/{slug}/places",
    response_model=list[PlaceResponse],
    summary="List named places in a city",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def list_places(
    request: Request, slug: str, db: AsyncSession = Depends(get_db)
):
    city = await CityRepository(db).get_by_slug(slug)
    if city is None:
        raise ConfigurationNotFound("City not found")
    return await PlaceRepository(db).list_for_city(city.id)


@router.get(
    "/transport-modes",
    response_model=list[TransportModeResponse],
    summary="List transport modes",
)
@limiter.limit(settings.rate_limit)
async def list_transport_modes(
    request: Request, db: AsyncSession = Depends(get_db)
):
    return await TransportModeRepository(db).list_all()


@router.get(
    "/pricing-profiles",
    response_model=list[PricingProfileResponse],
    summary="List active pricing profiles with their rules",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def list_pricing_profiles(
    request: Request,
    city_slug: Optional[str] = Query(None, alias="citySlug"),
    db: AsyncSession = Depends(get_db),
):
    city_id = None
    if city_slug is not None:
        city = await CityRepository(db).get_by_slug(city_slug)
        if city is None:
            raise ConfigurationNotFound("City not found")
        city_id = city.id

    rows = await PricingProfileRepository(db).list_active(city_id)
    profiles = []
    for profile, city, mode in rows:
        try:
            rules = PricingRuleConfig.from_rules_config(profile.rules_config)
        except InvalidPricingConfig:
            logger.error(
                "Skipping malformed pricing profile %s (%s/%s)",
                profile.id, city.slug, mode.slug, exc_info=True,
            )
            continue
        profiles.append(
            PricingProfileResponse(
                id=profile.id,
                city_slug=city.slug,
                transport_mode_slug=mode.slug,
                pricing_strategy=getattr(
                    profile.pricing_strategy, "value", profile.pricing_strategy
                ),
                rules=rules.to_rules_config(),
            )
        )
    return profiles
