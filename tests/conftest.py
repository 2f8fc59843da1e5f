"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  The pricing tables are created straight from
the production models; ``places`` carries a PostGIS Geometry column, so it
is mirrored here with a plain String column instead.
"""

from datetime import datetime
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy import Column, Float, Integer, String
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from src.domain.enums import PricingStrategy
from src.domain.pricing_config import PricingRuleConfig
from src.infrastructure.database import Base
from src.infrastructure.models import (
    CityModel,
    PricingProfileModel,
    TransportModeModel,
)


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
TestSessionFactory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)

PRICING_TABLES = [
    CityModel.__table__,
    TransportModeModel.__table__,
    PricingProfileModel.__table__,
]


class TestBase(DeclarativeBase):
    pass


# Mirrors PlaceModel without the PostGIS Geometry column
# (SQLite doesn't support it).
class TestPlaceModel(TestBase):
    __tablename__ = "places"
    id = Column(Integer, primary_key=True, autoincrement=True)
    city_id = Column(Integer, nullable=False)
    name = Column(String(255), nullable=False)
    name_ar = Column(String(255), nullable=True)
    location = Column(String, nullable=True)  # stub for Geometry
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)


CASABLANCA_RULES = {
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

# Casa Port -> Morocco Mall
CASA_PORT = (33.5992, -7.6192)
MOROCCO_MALL = (33.5753, -7.7061)

NOON = datetime(2026, 5, 4, 12, 0)
LATE_NIGHT = datetime(2026, 5, 4, 23, 0)


async def create_tables() -> None:
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, tables=PRICING_TABLES)
        await conn.run_sync(TestBase.metadata.create_all)


async def drop_tables() -> None:
    async with test_engine.begin() as conn:
        await conn.run_sync(TestBase.metadata.drop_all)
        await conn.run_sync(Base.metadata.drop_all, tables=PRICING_TABLES)


async def seed_casablanca(session: AsyncSession, rules_config=None) -> CityModel:
    city = CityModel(
        name="Casablanca",
        slug="casablanca",
        currency_code="MAD",
        timezone="Africa/Casablanca",
    )
    mode = TransportModeModel(name="Small Red Taxi", slug="petit_taxi_red")
    grand = TransportModeModel(name="Grand Taxi", slug="grand_taxi")
    session.add_all([city, mode, grand])
    await session.flush()
    session.add(
        PricingProfileModel(
            city_id=city.id,
            mode_id=mode.id,
            pricing_strategy=PricingStrategy.METERED,
            active=True,
            rules_config=rules_config or CASABLANCA_RULES,
        )
    )
    # Inactive profile for the grand taxi: must never be picked up
    session.add(
        PricingProfileModel(
            city_id=city.id,
            mode_id=grand.id,
            pricing_strategy=PricingStrategy.METERED,
            active=False,
            rules_config=CASABLANCA_RULES,
        )
    )
    session.add(
        TestPlaceModel(
            city_id=city.id,
            name="Casa Port",
            name_ar="الدار البيضاء الميناء",
            location=f"POINT({CASA_PORT[1]} {CASA_PORT[0]})",
            lat=CASA_PORT[0],
            lng=CASA_PORT[1],
        )
    )
    await session.commit()
    return city


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def casablanca_rules() -> PricingRuleConfig:
    return PricingRuleConfig.from_rules_config(CASABLANCA_RULES)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield a session, then drop everything."""
    await create_tables()
    async with TestSessionFactory() as session:
        yield session
    await drop_tables()
