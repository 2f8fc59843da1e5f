"""
SQLAlchemy ORM models  (maps to PostgreSQL + PostGIS).

Tables
------
* ``cities``            -- priced cities with currency and timezone
* ``transport_modes``   -- vehicle categories (petit taxi, grand taxi ...)
* ``pricing_profiles``  -- rule set binding a city to a transport mode
* ``places``            -- named pick-up / drop-off landmarks per city

Indexes
-------
* **GIST** on ``places.location`` for spatial look-ups.
* **B-Tree** on slugs and on ``(city_id, mode_id, active)`` for the
  active-profile look-up done on every estimate.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from geoalchemy2 import Geometry

from .database import Base
from src.domain.enums import PricingStrategy


class CityModel(Base):
    __tablename__ = "cities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False)
    currency_code = Column(String(3), nullable=False)  # e.g. MAD
    timezone = Column(String(255), nullable=False)  # e.g. Africa/Casablanca


class TransportModeModel(Base):
    __tablename__ = "transport_modes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False)
    icon_url = Column(String(500), nullable=True)


class PricingProfileModel(Base):
    __tablename__ = "pricing_profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    city_id = Column(Integer, ForeignKey("cities.id"), nullable=False)
    mode_id = Column(Integer, ForeignKey("transport_modes.id"), nullable=False)
    pricing_strategy = Column(
        Enum(PricingStrategy), default=PricingStrategy.METERED, nullable=False
    )
    active = Column(Boolean, default=True, nullable=False)
    # Loaded into a PricingRuleConfig on read
    rules_config = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_profiles_lookup", "city_id", "mode_id", "active"),
        # At most one active profile per (city, mode)
        Index(
            "uq_profiles_active_pair",
            "city_id",
            "mode_id",
            unique=True,
            postgresql_where=text("active"),
            sqlite_where=text("active"),
        ),
    )


class PlaceModel(Base):
    __tablename__ = "places"

    id = Column(Integer, primary_key=True, autoincrement=True)
    city_id = Column(Integer, ForeignKey("cities.id"), nullable=False)
    name = Column(String(255), nullable=False)
    name_ar = Column(String(255), nullable=True)

    # Stored as PostGIS geometry for spatial indexing
    location = Column(Geometry("POINT", srid=4326), nullable=False)

    # Also stored as plain floats for fast reads (avoids ST_X / ST_Y)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)

    __table_args__ = (
        Index("idx_places_location", "location", postgresql_using="gist"),
        Index("idx_places_city", "city_id"),
    )
