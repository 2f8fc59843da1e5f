"""Initial schema: PostGIS extension, reference data and pricing profiles.

Revision ID: 001
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from geoalchemy2 import Geometry


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Enable PostGIS extension
    op.execute("CREATE EXTENSION IF NOT EXISTS postgis")

    # ── cities ────────────────────────────────────────────────────────
    op.create_table(
        "cities",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), unique=True, nullable=False),
        sa.Column("currency_code", sa.String(3), nullable=False),
        sa.Column("timezone", sa.String(255), nullable=False),
    )

    # ── transport_modes ───────────────────────────────────────────────
    op.create_table(
        "transport_modes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), unique=True, nullable=False),
        sa.Column("icon_url", sa.String(500), nullable=True),
    )

    # ── pricing_profiles ──────────────────────────────────────────────
    op.create_table(
        "pricing_profiles",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "city_id", sa.Integer, sa.ForeignKey("cities.id"), nullable=False
        ),
        sa.Column(
            "mode_id",
            sa.Integer,
            sa.ForeignKey("transport_modes.id"),
            nullable=False,
        ),
        sa.Column(
            "pricing_strategy",
            sa.Enum("METERED", "FIXED_ZONE", "HYBRID", name="pricingstrategy"),
            default="METERED",
            nullable=False,
        ),
        sa.Column("active", sa.Boolean, default=True, nullable=False),
        sa.Column("rules_config", postgresql.JSONB, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "idx_profiles_lookup",
        "pricing_profiles",
        ["city_id", "mode_id", "active"],
    )
    # At most one active profile per (city, mode)
    op.create_index(
        "uq_profiles_active_pair",
        "pricing_profiles",
        ["city_id", "mode_id"],
        unique=True,
        postgresql_where=sa.text("active"),
    )

    # ── places ────────────────────────────────────────────────────────
    op.create_table(
        "places",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "city_id", sa.Integer, sa.ForeignKey("cities.id"), nullable=False
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("name_ar", sa.String(255), nullable=True),
        sa.Column("location", Geometry("POINT", srid=4326), nullable=False),
        sa.Column("lat", sa.Float, nullable=False),
        sa.Column("lng", sa.Float, nullable=False),
    )
    op.create_index(
        "idx_places_location", "places", ["location"], postgresql_using="gist"
    )
    op.create_index("idx_places_city", "places", ["city_id"])


def downgrade() -> None:
    op.drop_table("places")
    op.drop_table("pricing_profiles")
    op.drop_table("transport_modes")
    op.drop_table("cities")
    op.execute("DROP TYPE IF EXISTS pricingstrategy")
