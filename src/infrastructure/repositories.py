"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
the look-ups the estimation flow needs: slug resolution and the single
active pricing profile for a (city, mode) pair.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import CityModel, PlaceModel, PricingProfileModel, TransportModeModel


class CityRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_all(self) -> list[CityModel]:
        result = await self.session.execute(
            select(CityModel).order_by(CityModel.name)
        )
        return list(result.scalars().all())

    async def get_by_slug(self, slug: str) -> Optional[CityModel]:
        result = await self.session.execute(
            select(CityModel).where(CityModel.slug == slug)
        )
        return result.scalar_one_or_none()

    async def exists_any(self) -> bool:
        result = await self.session.execute(select(CityModel.id).limit(1))
        return result.first() is not None


class TransportModeRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_all(self) -> list[TransportModeModel]:
        result = await self.session.execute(
            select(TransportModeModel).order_by(TransportModeModel.name)
        )
        return list(result.scalars().all())

    async def get_by_slug(self, slug: str) -> Optional[TransportModeModel]:
        result = await self.session.execute(
            select(TransportModeModel).where(TransportModeModel.slug == slug)
        )
        return result.scalar_one_or_none()


class PricingProfileRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_active(
        self, city_id: int, mode_id: int
    ) -> Optional[PricingProfileModel]:
        """The single active profile for a (city, mode) pair, if any."""
        result = await self.session.execute(
            select(PricingProfileModel)
            .where(
                PricingProfileModel.city_id == city_id,
                PricingProfileModel.mode_id == mode_id,
                PricingProfileModel.active.is_(True),
            )
            .order_by(PricingProfileModel.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_active(
        self, city_id: int | None = None
    ) -> list[tuple[PricingProfileModel, CityModel, TransportModeModel]]:
        query = (
            select(PricingProfileModel, CityModel, TransportModeModel)
            .join(CityModel, PricingProfileModel.city_id == CityModel.id)
            .join(
                TransportModeModel,
                PricingProfileModel.mode_id == TransportModeModel.id,
            )
            .where(PricingProfileModel.active.is_(True))
            .order_by(CityModel.slug, TransportModeModel.slug)
        )
        if city_id is not None:
            query = query.where(PricingProfileModel.city_id == city_id)
        result = await self.session.execute(query)
        return [tuple(row) for row in result.all()]


class PlaceRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_for_city(self, city_id: int) -> list[PlaceModel]:
        result = await self.session.execute(
            select(PlaceModel)
            .where(PlaceModel.city_id == city_id)
            .order_by(PlaceModel.name)
        )
        return list(result.scalars().all())
