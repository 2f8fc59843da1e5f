"""
Estimate endpoint
=================

POST /api/v1/estimate -- price a trip for a city / transport mode
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db
from src.api.middleware import limiter
from src.api.schemas import ErrorResponse, EstimateRequest, EstimateResponse
from src.config import settings
from src.domain.entities import GeoPoint
from src.infrastructure.profile_cache import ProfileCache
from src.infrastructure.redis_client import get_profile_cache
from src.services.estimation import FareEstimationService

router = APIRouter(prefix="/estimate", tags=["estimate"])


@router.post(
    "",
    response_model=EstimateResponse,
    response_model_exclude_none=True,
    summary="Estimate a taxi fare",
    responses={
        400: {"model": ErrorResponse, "description": "Malformed request"},
        404: {"model": ErrorResponse, "description": "No pricing profile"},
    },
)
@limiter.limit(settings.rate_limit)
async def calculate_estimate(
    request: Request,
    body: EstimateRequest,
    db: AsyncSession = Depends(get_db),
    cache: ProfileCache | None = Depends(get_profile_cache),
):
    result = await FareEstimationService(db, cache).estimate(
        origin=GeoPoint(body.origin_lat, body.origin_lng),
        destination=GeoPoint(body.dest_lat, body.dest_lng),
        city_slug=body.city_slug,
        mode_slug=body.transport_mode_slug,
        travel_time=body.travel_time,
        night_override=body.is_night_override,
    )
    return EstimateResponse.from_result(result)
