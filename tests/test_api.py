"""
Integration tests for the REST API endpoints.

Uses an in-memory SQLite database.  ``places`` is backed by the
SQLite-friendly test model, so the place repository is overridden; the
profile cache is switched off.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tests.conftest import (
    CASA_PORT,
    CASABLANCA_RULES,
    MOROCCO_MALL,
    TestPlaceModel,
    TestSessionFactory,
    create_tables,
    drop_tables,
    seed_casablanca,
)


class _TestPlaceRepository:
    """Mirrors ``PlaceRepository`` but uses the SQLite-friendly test model."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_for_city(self, city_id: int):
        result = await self.session.execute(
            select(TestPlaceModel).where(TestPlaceModel.city_id == city_id)
        )
        return list(result.scalars().all())


@asynccontextmanager
async def make_client(rules_config=None):
    """AsyncClient backed by SQLite with the Casablanca pilot seeded."""
    await create_tables()
    async with TestSessionFactory() as session:
        await seed_casablanca(session, rules_config=rules_config)

    with (
        patch(
            "src.infrastructure.seed_data.seed_on_startup",
            new_callable=AsyncMock,
        ),
        patch(
            "src.api.routes.reference.PlaceRepository",
            _TestPlaceRepository,
        ),
    ):

        async def _test_db():
            async with TestSessionFactory() as session:
                yield session

        async def _no_cache():
            return None

        from src.api.app import create_app
        from src.api.dependencies import get_db
        from src.api.middleware import limiter
        from src.infrastructure.redis_client import get_profile_cache

        limiter.reset()
        app = create_app()
        app.dependency_overrides[get_db] = _test_db
        app.dependency_overrides[get_profile_cache] = _no_cache

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac

    await drop_tables()


@pytest_asyncio.fixture
async def client():
    async with make_client() as ac:
        yield ac


def trip(**overrides) -> dict:
    body = {
        "originLat": CASA_PORT[0],
        "originLng": CASA_PORT[1],
        "destLat": MOROCCO_MALL[0],
        "destLng": MOROCCO_MALL[1],
        "citySlug": "casablanca",
        "transportModeSlug": "petit_taxi_red",
        "travelTime": "2026-07-01T12:00:00",
    }
    body.update(overrides)
    return body


# ── Estimate ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_day_estimate(client: AsyncClient):
    resp = await client.post("/api/v1/estimate", json=trip())
    assert resp.status_code == 200
    data = resp.json()
    assert data["estimatedPrice"] == 31.8
    assert data["currency"] == "MAD"
    assert data["isNightFare"] is False
    assert data["durationMin"] == 24
    assert data["distanceKm"] == pytest.approx(11.87, abs=0.01)
    assert data["breakdown"] == {
        "baseFare": 2.0,
        "distanceFare": 29.8,
        "nightSurcharge": 0,
    }


@pytest.mark.asyncio
async def test_night_estimate_from_utc_time(client: AsyncClient):
    resp = await client.post(
        "/api/v1/estimate", json=trip(travelTime="2026-07-01T21:30:00Z")
    )
    data = resp.json()
    assert data["isNightFare"] is True
    assert data["breakdown"]["nightSurcharge"] == 15.9
    assert data["estimatedPrice"] == 47.7


@pytest.mark.asyncio
async def test_short_trip_floor_then_night_override(client: AsyncClient):
    body = trip(
        destLat=CASA_PORT[0], destLng=CASA_PORT[1], isNightOverride=True
    )
    resp = await client.post("/api/v1/estimate", json=body)
    assert resp.status_code == 200
    data = resp.json()
    assert data["isNightFare"] is True
    assert data["estimatedPrice"] == 11.25
    assert data["breakdown"]["minimumFareAdjustment"] == 5.5
    assert data["breakdown"]["nightSurcharge"] == 3.75


@pytest.mark.asyncio
async def test_night_override_false(client: AsyncClient):
    resp = await client.post(
        "/api/v1/estimate",
        json=trip(travelTime="2026-07-01T23:00:00", isNightOverride=False),
    )
    data = resp.json()
    assert data["isNightFare"] is False
    assert data["estimatedPrice"] == 31.8


@pytest.mark.asyncio
async def test_coordinates_out_of_range(client: AsyncClient):
    resp = await client.post("/api/v1/estimate", json=trip(originLat=91))
    assert resp.status_code == 400
    assert resp.json()["field"] == "originLat"


@pytest.mark.asyncio
async def test_missing_slug(client: AsyncClient):
    body = trip()
    del body["citySlug"]
    resp = await client.post("/api/v1/estimate", json=body)
    assert resp.status_code == 400
    assert resp.json()["field"] == "citySlug"


@pytest.mark.asyncio
async def test_malformed_slug(client: AsyncClient):
    resp = await client.post("/api/v1/estimate", json=trip(citySlug="Casa Blanca!"))
    assert resp.status_code == 400
    assert resp.json()["field"] == "citySlug"


@pytest.mark.asyncio
async def test_numeric_strings_are_coerced(client: AsyncClient):
    resp = await client.post(
        "/api/v1/estimate",
        json=trip(originLat=str(CASA_PORT[0]), originLng=str(CASA_PORT[1])),
    )
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_unknown_city(client: AsyncClient):
    resp = await client.post("/api/v1/estimate", json=trip(citySlug="rabat"))
    assert resp.status_code == 404
    assert resp.json() == {"message": "City or Transport Mode not found"}


@pytest.mark.asyncio
async def test_inactive_profile(client: AsyncClient):
    resp = await client.post(
        "/api/v1/estimate", json=trip(transportModeSlug="grand_taxi")
    )
    assert resp.status_code == 404
    assert resp.json() == {
        "message": "Pricing profile not found for this combination"
    }


@pytest.mark.asyncio
async def test_malformed_stored_profile_is_500():
    broken = {**CASABLANCA_RULES, "surge": 2}
    async with make_client(rules_config=broken) as ac:
        resp = await ac.post("/api/v1/estimate", json=trip())
    assert resp.status_code == 500
    assert resp.json() == {"message": "Internal server error"}


# ── Reference data ────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/v1/admin/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_cities(client: AsyncClient):
    resp = await client.get("/api/v1/cities")
    assert resp.status_code == 200
    [city] = resp.json()
    assert city["slug"] == "casablanca"
    assert city["currencyCode"] == "MAD"
    assert city["timezone"] == "Africa/Casablanca"


@pytest.mark.asyncio
async def test_transport_modes(client: AsyncClient):
    resp = await client.get("/api/v1/transport-modes")
    assert resp.status_code == 200
    assert {m["slug"] for m in resp.json()} == {"petit_taxi_red", "grand_taxi"}


@pytest.mark.asyncio
async def test_places(client: AsyncClient):
    resp = await client.get("/api/v1/cities/casablanca/places")
    assert resp.status_code == 200
    [place] = resp.json()
    assert place["name"] == "Casa Port"
    assert place["nameAr"] == "الدار البيضاء الميناء"
    assert (place["lat"], place["lng"]) == CASA_PORT


@pytest.mark.asyncio
async def test_places_unknown_city(client: AsyncClient):
    resp = await client.get("/api/v1/cities/rabat/places")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_pricing_profiles(client: AsyncClient):
    resp = await client.get(
        "/api/v1/pricing-profiles", params={"citySlug": "casablanca"}
    )
    assert resp.status_code == 200
    [profile] = resp.json()  # the inactive grand-taxi profile is hidden
    assert profile["transportModeSlug"] == "petit_taxi_red"
    assert profile["pricingStrategy"] == "METERED"
    assert profile["rules"]["enabled_rules"] == CASABLANCA_RULES["enabled_rules"]


@pytest.mark.asyncio
async def test_pricing_profiles_unknown_city(client: AsyncClient):
    resp = await client.get(
        "/api/v1/pricing-profiles", params={"citySlug": "rabat"}
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_pricing_profiles_skip_malformed_rules():
    broken = {**CASABLANCA_RULES, "surge": 2}
    async with make_client(rules_config=broken) as ac:
        resp = await ac.get("/api/v1/pricing-profiles")
    assert resp.status_code == 200
    assert resp.json() == []
