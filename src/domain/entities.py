"""
Domain value objects.

All of them are immutable: a request builds fresh instances and nothing
is shared or mutated across estimates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import InvalidCoordinates


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise InvalidCoordinates(
                f"latitude {self.latitude} outside [-90, 90]"
            )
        if not -180.0 <= self.longitude <= 180.0:
            raise InvalidCoordinates(
                f"longitude {self.longitude} outside [-180, 180]"
            )


@dataclass(frozen=True)
class RouteEstimate:
    distance_meters: int
    duration_seconds: int


@dataclass(frozen=True)
class FareBreakdown:
    """Itemised fare.  Rules that did not fire contribute 0.

    ``minimum_fare_adjustment`` stays ``None`` unless the floor actually
    raised the total, so consumers can tell "no adjustment" from "0".
    """

    base_fare: float = 0.0
    distance_fare: float = 0.0
    night_surcharge: float = 0.0
    minimum_fare_adjustment: Optional[float] = None


@dataclass(frozen=True)
class FareQuote:
    total: float
    breakdown: FareBreakdown
    is_night_fare: bool


@dataclass(frozen=True)
class EstimateResult:
    total_price: float
    currency_code: str
    distance_km: float
    duration_minutes: int
    is_night_fare: bool
    breakdown: FareBreakdown
