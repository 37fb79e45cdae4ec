"""Weather observations sampled around a photo's capture time."""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from rainbow.utils.timestamp import utcnow

if TYPE_CHECKING:
    from .photo import Photo
    from .radar import RadarObservation


class WeatherObservation(SQLModel, table=True):
    """One normalized weather sample per (photo, sampled instant)."""

    __table_args__ = (
        UniqueConstraint("photo_id", "timestamp", name="uq_weatherobs_photo_timestamp"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    photo_id: int = Field(foreign_key="photo.id", ondelete="CASCADE", nullable=False, index=True)
    radar_observation_id: Optional[int] = Field(
        default=None, foreign_key="radarobservation.id", ondelete="SET NULL"
    )
    timestamp: datetime = Field(sa_type=DateTime, index=True, description="Sampled instant (UTC)")
    temperature: Optional[float] = Field(default=None, description="Air temperature (°C)")
    humidity: Optional[float] = Field(default=None, ge=0, le=100, description="Relative humidity (%)")
    pressure: Optional[float] = Field(default=None, description="Sea-level pressure (hPa)")
    wind_speed: Optional[float] = Field(default=None, ge=0, description="Wind speed (m/s)")
    wind_direction: Optional[float] = Field(default=None, ge=0, lt=360, description="Wind direction (deg)")
    wind_gust: Optional[float] = Field(default=None, description="Wind gust (m/s)")
    cloud_cover: Optional[float] = Field(default=None, ge=0, le=100, description="Cloud cover (%)")
    visibility: Optional[float] = Field(default=None, description="Visibility (m)")
    weather_code: Optional[int] = Field(default=None, description="Provider condition code")
    weather_description: Optional[str] = Field(default=None, max_length=128)
    precipitation: Optional[float] = Field(default=None, description="Rain or snow over the last hour (mm)")
    precipitation_type: Optional[str] = Field(default=None, max_length=16)
    sun_azimuth: Optional[float] = Field(default=None, ge=0, lt=360, description="Sun azimuth (0=N, 90=E)")
    sun_altitude: Optional[float] = Field(default=None, ge=-90, le=90, description="Sun altitude (deg)")
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, nullable=False)

    photo: Optional["Photo"] = Relationship(back_populates="weather_observations")
    radar_observation: Optional["RadarObservation"] = Relationship(back_populates="weather_observations")


__all__ = ["WeatherObservation"]
