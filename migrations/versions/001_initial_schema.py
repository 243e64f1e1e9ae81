"""Initial schema: vehicles, trips, recent places and driver settings.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ── vehicles ──────────────────────────────────────────────────────
    op.create_table(
        "vehicles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("car_size", sa.String(20), nullable=False),
        sa.Column("fuel_type", sa.String(20), nullable=False),
        sa.Column("ac_option", sa.String(10), nullable=False),
        sa.Column("min_km_per_day", sa.Float, nullable=False),
        sa.Column("rate_per_km", sa.Float, nullable=False),
        sa.Column("created_at", sa.String(40), nullable=False),
        sa.Column("updated_at", sa.String(40), nullable=False),
    )

    # ── trips ─────────────────────────────────────────────────────────
    op.create_table(
        "trips",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("vehicle_id", sa.String(36), nullable=False),
        sa.Column("customer_name", sa.String(120), nullable=False),
        sa.Column("proposed_start_date", sa.String(40), nullable=False),
        sa.Column("actual_end_time", sa.String(40), nullable=True),
        sa.Column("payload", sa.JSON, nullable=False),
        sa.Column("created_at", sa.String(40), nullable=False),
        sa.Column("updated_at", sa.String(40), nullable=False),
    )
    op.create_index("idx_trips_status", "trips", ["status"])
    op.create_index("idx_trips_vehicle", "trips", ["vehicle_id"])
    op.create_index("idx_trips_actual_end", "trips", ["actual_end_time"])

    # ── recent_places ─────────────────────────────────────────────────
    op.create_table(
        "recent_places",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("short_name", sa.String(120), nullable=False),
        sa.Column("latitude", sa.Float, nullable=False),
        sa.Column("longitude", sa.Float, nullable=False),
        sa.Column("type", sa.String(40), nullable=False),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
    )

    # ── driver_settings ───────────────────────────────────────────────
    op.create_table(
        "driver_settings",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String(120), nullable=False, server_default=""),
        sa.Column("phone", sa.String(40), nullable=False, server_default=""),
        sa.Column(
            "default_bata_per_day", sa.Float, nullable=False, server_default="500"
        ),
    )


def downgrade() -> None:
    op.drop_table("driver_settings")
    op.drop_table("recent_places")
    op.drop_index("idx_trips_actual_end", table_name="trips")
    op.drop_index("idx_trips_vehicle", table_name="trips")
    op.drop_index("idx_trips_status", table_name="trips")
    op.drop_table("trips")
    op.drop_table("vehicles")
