"""
Reference data for the Casablanca pilot.

Seeding is idempotent: nothing is written once any city exists.  The app
runs it at startup (see :func:`seed_on_startup`) and ``seed.py`` runs it
from the command line.
"""

from __future__ import annotations

import logging

from geoalchemy2.functions import ST_MakePoint, ST_SetSRID
from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.enums import PricingStrategy
from src.domain.pricing_config import PricingRuleConfig
from src.infrastructure.database import async_session_factory
from src.infrastructure.locks import DistributedLock, LockNotAcquired
from src.infrastructure.models import (
    CityModel,
    PlaceModel,
    PricingProfileModel,
    TransportModeModel,
)
from src.infrastructure.redis_client import get_redis
from src.infrastructure.repositories import CityRepository

logger = logging.getLogger(__name__)

CASABLANCA = {
    "name": "Casablanca",
    "slug": "casablanca",
    "currency_code": "MAD",
    "timezone": "Africa/Casablanca",
}

PETIT_TAXI = {
    "name": "Small Red Taxi",
    "slug": "petit_taxi_red",
    "icon_url": "taxi-icon.png",
}

# Official petit-taxi meter: 2.00 MAD pick-up, 0.20 MAD per 80 m,
# 7.50 MAD minimum, +50 % between 20:00 and 06:00.
PETIT_TAXI_RULES = PricingRuleConfig.from_rules_config(
    {
        "base_fare": 2.00,
        "minimum_fare": 7.50,
        "distance_step_meters": 80,
        "price_per_step": 0.20,
        "night_surcharge_percent": 50,
        "night_start_hour": 20,
        "night_end_hour": 6,
        "enabled_rules": [
            "BASE_FARE",
            "DISTANCE_STEP_CALC",
            "MINIMUM_CHECK",
            "NIGHT_MULTIPLIER",
        ],
    }
)

CASABLANCA_PLACES = [
    {"name": "Casa Port", "name_ar": "الدار البيضاء الميناء", "lat": 33.5992, "lng": -7.6192},
    {"name": "Casa Voyageurs", "name_ar": "الدار البيضاء المسافرين", "lat": 33.5895, "lng": -7.5910},
    {"name": "Hassan II Mosque", "name_ar": "مسجد الحسن الثاني", "lat": 33.6082, "lng": -7.6328},
    {"name": "Twin Center", "name_ar": "توين سنتر", "lat": 33.5872, "lng": -7.6328},
    {"name": "Morocco Mall", "name_ar": "موروكو مول", "lat": 33.5753, "lng": -7.7061},
    {"name": "Mohammed V Airport", "name_ar": "مطار محمد الخامس", "lat": 33.3675, "lng": -7.5898},
]


async def seed_pricing_data(session: AsyncSession) -> CityModel | None:
    """Insert city, mode and profile.  Returns the new city, or None."""
    if await CityRepository(session).exists_any():
        logger.info("Reference data already present; skipping seed")
        return None

    city = CityModel(**CASABLANCA)
    mode = TransportModeModel(**PETIT_TAXI)
    session.add_all([city, mode])
    await session.flush()

    session.add(
        PricingProfileModel(
            city_id=city.id,
            mode_id=mode.id,
            pricing_strategy=PricingStrategy.METERED,
            active=True,
            rules_config=PETIT_TAXI_RULES.to_rules_config(),
        )
    )
    await session.flush()
    return city


def place_point(lat: float, lng: float):
    """WGS84 point matching the SRID of ``places.location``."""
    return ST_SetSRID(ST_MakePoint(lng, lat), 4326)


async def seed_places(session: AsyncSession, city: CityModel) -> None:
    for p in CASABLANCA_PLACES:
        session.add(
            PlaceModel(
                city_id=city.id,
                name=p["name"],
                name_ar=p["name_ar"],
                lat=p["lat"],
                lng=p["lng"],
                location=place_point(p["lat"], p["lng"]),
            )
        )
    await session.flush()


async def seed_reference_data(session: AsyncSession) -> bool:
    city = await seed_pricing_data(session)
    if city is None:
        return False
    await seed_places(session, city)
    await session.commit()
    logger.info("Seeded Casablanca pilot data")
    return True


async def seed_on_startup(wait_seconds: float = 30) -> None:
    """Seed once across all API processes (guarded by a Redis lock)."""
    lock = DistributedLock(
        await get_redis(), "seed-reference-data", ttl_seconds=60,
        wait_seconds=wait_seconds,
    )
    try:
        acquired = await lock.acquire()
    except RedisError:
        # Unique slugs still stop a duplicate seed from committing
        logger.warning("Redis unavailable; seeding without a lock", exc_info=True)
        acquired = False
    else:
        if not acquired:
            raise LockNotAcquired("Timed out waiting for the seed lock")

    try:
        async with async_session_factory() as session:
            await seed_reference_data(session)
    finally:
        if acquired:
            await lock.release()
