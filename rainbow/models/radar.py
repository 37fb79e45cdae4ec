"""Radar snapshot nearest to a photo's capture time."""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from rainbow.utils.timestamp import utcnow

if TYPE_CHECKING:
    from .photo import Photo
    from .weather import WeatherObservation


class RadarObservation(SQLModel, table=True):
    """Single precipitation-radar frame per photo."""

    __table_args__ = (UniqueConstraint("photo_id", name="uq_radarobs_photo"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    photo_id: int = Field(foreign_key="photo.id", ondelete="CASCADE", nullable=False, index=True)
    timestamp: datetime = Field(sa_type=DateTime, index=True, description="Radar frame time (UTC)")
    center_latitude: float
    center_longitude: float
    tile_x: int
    tile_y: int
    tile_z: int
    tile_url: Optional[str] = Field(default=None, max_length=512)
    radius_m: float = Field(default=50_000.0, description="Observation radius (m)")
    precipitation_intensity: Optional[str] = Field(
        default=None, max_length=16, description="Intensity level from radar reflectivity"
    )
    movement_direction: Optional[float] = Field(default=None, ge=0, lt=360)
    movement_speed: Optional[float] = Field(default=None, ge=0)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, nullable=False)

    photo: Optional["Photo"] = Relationship(back_populates="radar_observation")
    weather_observations: List["WeatherObservation"] = Relationship(back_populates="radar_observation")

    @property
    def active_precipitation(self) -> bool:
        return self.precipitation_intensity not in (None, "none")


__all__ = ["RadarObservation"]
