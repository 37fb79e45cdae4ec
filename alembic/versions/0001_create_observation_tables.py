"""create photo, weather and radar observation tables"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0001_create_observation_tables"
down_revision = None
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None


def upgrade() -> None:
    op.create_table(
        "photo",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("captured_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_photo_captured_at"), "photo", ["captured_at"], unique=False)

    op.create_table(
        "radarobservation",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("photo_id", sa.Integer(), nullable=False),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.Column("center_latitude", sa.Float(), nullable=False),
        sa.Column("center_longitude", sa.Float(), nullable=False),
        sa.Column("tile_x", sa.Integer(), nullable=False),
        sa.Column("tile_y", sa.Integer(), nullable=False),
        sa.Column("tile_z", sa.Integer(), nullable=False),
        sa.Column("tile_url", sa.String(length=512), nullable=True),
        sa.Column("radius_m", sa.Float(), nullable=False),
        sa.Column("precipitation_intensity", sa.String(length=16), nullable=True),
        sa.Column("movement_direction", sa.Float(), nullable=True),
        sa.Column("movement_speed", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["photo_id"], ["photo.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("photo_id", name="uq_radarobs_photo"),
    )
    op.create_index(op.f("ix_radarobservation_photo_id"), "radarobservation", ["photo_id"], unique=False)
    op.create_index(op.f("ix_radarobservation_timestamp"), "radarobservation", ["timestamp"], unique=False)

    op.create_table(
        "weatherobservation",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("photo_id", sa.Integer(), nullable=False),
        sa.Column("radar_observation_id", sa.Integer(), nullable=True),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.Column("temperature", sa.Float(), nullable=True),
        sa.Column("humidity", sa.Float(), nullable=True),
        sa.Column("pressure", sa.Float(), nullable=True),
        sa.Column("wind_speed", sa.Float(), nullable=True),
        sa.Column("wind_direction", sa.Float(), nullable=True),
        sa.Column("wind_gust", sa.Float(), nullable=True),
        sa.Column("cloud_cover", sa.Float(), nullable=True),
        sa.Column("visibility", sa.Float(), nullable=True),
        sa.Column("weather_code", sa.Integer(), nullable=True),
        sa.Column("weather_description", sa.String(length=128), nullable=True),
        sa.Column("precipitation", sa.Float(), nullable=True),
        sa.Column("precipitation_type", sa.String(length=16), nullable=True),
        sa.Column("sun_azimuth", sa.Float(), nullable=True),
        sa.Column("sun_altitude", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["photo_id"], ["photo.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["radar_observation_id"], ["radarobservation.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("photo_id", "timestamp", name="uq_weatherobs_photo_timestamp"),
    )
    op.create_index(op.f("ix_weatherobservation_photo_id"), "weatherobservation", ["photo_id"], unique=False)
    op.create_index(op.f("ix_weatherobservation_timestamp"), "weatherobservation", ["timestamp"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_weatherobservation_timestamp"), table_name="weatherobservation")
    op.drop_index(op.f("ix_weatherobservation_photo_id"), table_name="weatherobservation")
    op.drop_table("weatherobservation")
    op.drop_index(op.f("ix_radarobservation_timestamp"), table_name="radarobservation")
    op.drop_index(op.f("ix_radarobservation_photo_id"), table_name="radarobservation")
    op.drop_table("radarobservation")
    op.drop_index(op.f("ix_photo_captured_at"), table_name="photo")
    op.drop_table("photo")
