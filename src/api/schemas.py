"""Pydantic request / response schemas for the REST API (camelCase on the wire)."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.domain.entities import EstimateResult

SLUG_PATTERN = r"^[a-z0-9][a-z0-9_-]*$"


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# ── Requests ──────────────────────────────────────────────────────────


class EstimateRequest(CamelModel):
    origin_lat: float = Field(..., ge=-90, le=90)
    origin_lng: float = Field(..., ge=-180, le=180)
    dest_lat: float = Field(..., ge=-90, le=90)
    dest_lng: float = Field(..., ge=-180, le=180)
    city_slug: str = Field(..., max_length=255, pattern=SLUG_PATTERN)
    transport_mode_slug: str = Field(..., max_length=255, pattern=SLUG_PATTERN)
    travel_time: Optional[datetime] = Field(
        None,
        description="ISO-8601 departure time; defaults to now in the city's timezone.",
    )
    is_night_override: Optional[bool] = Field(
        None,
        description="Force (true) or suppress (false) the night surcharge.",
    )


# ── Responses ─────────────────────────────────────────────────────────


class BreakdownResponse(CamelModel):
    base_fare: float
    distance_fare: float
    night_surcharge: float
    minimum_fare_adjustment: Optional[float] = None


class EstimateResponse(CamelModel):
    estimated_price: float
    currency: str
    distance_km: float
    duration_min: int
    is_night_fare: bool
    breakdown: BreakdownResponse

    @classmethod
    def from_result(cls, result: EstimateResult) -> "EstimateResponse":
        return cls(
            estimated_price=result.total_price,
            currency=result.currency_code,
            distance_km=result.distance_km,
            duration_min=result.duration_minutes,
            is_night_fare=result.is_night_fare,
            breakdown=BreakdownResponse.model_validate(result.breakdown),
        )


class CityResponse(CamelModel):
    id: int
    name: str
    slug: str
    currency_code: str
    timezone: str


class TransportModeResponse(CamelModel):
    id: int
    name: str
    slug: str
    icon_url: Optional[str] = None


class PlaceResponse(CamelModel):
    name: str
    name_ar: Optional[str] = None
    lat: float
    lng: float


class PricingProfileResponse(CamelModel):
    id: int
    city_slug: str
    transport_mode_slug: str
    pricing_strategy: str
    rules: dict[str, Any]


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    message: str
    field: Optional[str] = None
