"""Photo model (read-only input of the correlator)."""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime
from sqlmodel import Field, Relationship, SQLModel

from rainbow.utils.timestamp import utcnow

if TYPE_CHECKING:
    from .radar import RadarObservation
    from .weather import WeatherObservation


class Photo(SQLModel, table=True):
    """A rainbow sighting. Only location and capture time matter here."""

    id: Optional[int] = Field(default=None, primary_key=True)
    latitude: Optional[float] = Field(default=None, description="WGS84 latitude (degrees)")
    longitude: Optional[float] = Field(default=None, description="WGS84 longitude (degrees)")
    captured_at: Optional[datetime] = Field(
        default=None, sa_type=DateTime, index=True, description="Capture time (UTC)"
    )
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, nullable=False)

    weather_observations: List["WeatherObservation"] = Relationship(
        back_populates="photo",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "WeatherObservation.timestamp"},
    )
    radar_observation: Optional["RadarObservation"] = Relationship(
        back_populates="photo",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "uselist": False},
    )

    @property
    def has_correlation_inputs(self) -> bool:
        return self.latitude is not None and self.longitude is not None and self.captured_at is not None


__all__ = ["Photo"]
